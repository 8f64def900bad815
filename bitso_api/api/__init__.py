"""API client module for Bitso integration."""

from .auth import Credentials, NonceGenerator, Signer, build_auth_header, compute_signature, nonce_generator_for
from .client import BitsoAPIClient
from .envelope import parse_envelope, payload_array, payload_object
from .errors import (
    APIError,
    BitsoError,
    InputContractError,
    MissingPayloadError,
    ParseError,
    SigningError,
    TransportError,
)
from .query import join_parameters
from .transport import HttpTransport, RequestThrottle

__all__ = [
    'APIError',
    'BitsoAPIClient',
    'BitsoError',
    'Credentials',
    'HttpTransport',
    'InputContractError',
    'MissingPayloadError',
    'NonceGenerator',
    'ParseError',
    'RequestThrottle',
    'Signer',
    'SigningError',
    'TransportError',
    'build_auth_header',
    'compute_signature',
    'join_parameters',
    'nonce_generator_for',
    'parse_envelope',
    'payload_array',
    'payload_object'
]
