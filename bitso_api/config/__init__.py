"""Client configuration loading and validation."""

from .manager import (
    ClientConfig,
    ConfigValidationError,
    DEFAULT_USER_AGENT,
    DEVELOPMENT_BASE_URL,
    PRODUCTION_BASE_URL,
    load_config,
    validate_config
)

__all__ = [
    'ClientConfig',
    'ConfigValidationError',
    'DEFAULT_USER_AGENT',
    'DEVELOPMENT_BASE_URL',
    'PRODUCTION_BASE_URL',
    'load_config',
    'validate_config'
]
