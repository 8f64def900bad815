"""
Logging for the Bitso API client.

Provides structured JSON logging scoped to the ``bitso_api`` logger and a
decorator that records the timing and outcome of API calls.
"""

from .logger import LoggerManager, StructuredFormatter, get_logger, initialize_logging
from .utils import log_api_call

__all__ = [
    'LoggerManager',
    'StructuredFormatter',
    'get_logger',
    'initialize_logging',
    'log_api_call'
]
