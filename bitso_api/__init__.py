"""Python client for the Bitso exchange REST API."""

__version__ = "0.1.0"

from .api import (
    APIError,
    BitsoAPIClient,
    BitsoError,
    HttpTransport,
    InputContractError,
    MissingPayloadError,
    ParseError,
    SigningError,
    TransportError,
)
from .config import ClientConfig, ConfigValidationError, load_config
from .data import CurrencyWithdrawal, LedgerOperation, OrderSide, OrderType

__all__ = [
    'APIError',
    'BitsoAPIClient',
    'BitsoError',
    'ClientConfig',
    'ConfigValidationError',
    'CurrencyWithdrawal',
    'HttpTransport',
    'InputContractError',
    'LedgerOperation',
    'MissingPayloadError',
    'OrderSide',
    'OrderType',
    'ParseError',
    'SigningError',
    'TransportError',
    'load_config',
    '__version__'
]
