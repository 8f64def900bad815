"""Client configuration: keyword arguments, environment variables or a YAML file."""

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)


PRODUCTION_BASE_URL = "https://api.bitso.com"
DEVELOPMENT_BASE_URL = "https://dev.bitso.com"
DEFAULT_USER_AGENT = "bitso-python-api/0.1.0"


@dataclass
class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""
    message: str
    config_path: Optional[str] = None
    field_path: Optional[str] = None
    expected_type: Optional[str] = None
    actual_value: Optional[Any] = None

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class ClientConfig:
    """Settings for a BitsoAPIClient."""

    api_key: Optional[str] = None
    api_secret: Optional[str] = field(default=None, repr=False)
    production: bool = True
    timeout: float = 30.0
    min_request_interval: float = 0.0
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self):
        validate_config(self.to_dict(include_secret=True))

    @property
    def base_url(self) -> str:
        return PRODUCTION_BASE_URL if self.production else DEVELOPMENT_BASE_URL

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key) and bool(self.api_secret)

    def to_dict(self, include_secret: bool = False) -> Dict[str, Any]:
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        if not include_secret:
            data.pop('api_secret')
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any], config_path: Optional[str] = None) -> 'ClientConfig':
        """Build a config from a mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigValidationError(
                f"Unknown API config field '{unknown[0]}'",
                config_path=config_path,
                field_path=f"api.{unknown[0]}"
            )
        try:
            return cls(**data)
        except ConfigValidationError as e:
            e.config_path = config_path
            raise

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> 'ClientConfig':
        """
        Build a config from BITSO_* environment variables.

        Recognized: BITSO_API_KEY, BITSO_API_SECRET, BITSO_PRODUCTION,
        BITSO_TIMEOUT, BITSO_MIN_REQUEST_INTERVAL, BITSO_USER_AGENT.
        """
        env = os.environ if environ is None else environ
        data: Dict[str, Any] = {}

        if env.get('BITSO_API_KEY'):
            data['api_key'] = env['BITSO_API_KEY']
        if env.get('BITSO_API_SECRET'):
            data['api_secret'] = env['BITSO_API_SECRET']
        if env.get('BITSO_PRODUCTION'):
            data['production'] = _parse_bool(env['BITSO_PRODUCTION'], 'BITSO_PRODUCTION')
        if env.get('BITSO_TIMEOUT'):
            data['timeout'] = _parse_float(env['BITSO_TIMEOUT'], 'BITSO_TIMEOUT')
        if env.get('BITSO_MIN_REQUEST_INTERVAL'):
            data['min_request_interval'] = _parse_float(
                env['BITSO_MIN_REQUEST_INTERVAL'], 'BITSO_MIN_REQUEST_INTERVAL'
            )
        if env.get('BITSO_USER_AGENT'):
            data['user_agent'] = env['BITSO_USER_AGENT']

        return cls(**data)


def _parse_bool(value: str, name: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ('1', 'true', 'yes', 'on'):
        return True
    if lowered in ('0', 'false', 'no', 'off'):
        return False
    raise ConfigValidationError(
        f"Environment variable {name} must be a boolean",
        field_path=name,
        expected_type="bool",
        actual_value=value
    )


def _parse_float(value: str, name: str) -> float:
    try:
        return float(value)
    except ValueError:
        raise ConfigValidationError(
            f"Environment variable {name} must be a number",
            field_path=name,
            expected_type="float",
            actual_value=value
        )


def validate_config(api_config: Dict[str, Any], path: Optional[str] = None) -> None:
    """Validate the fields of an API configuration mapping."""
    expected_types = {
        'api_key': (str, type(None)),
        'api_secret': (str, type(None)),
        'production': bool,
        'timeout': (int, float),
        'min_request_interval': (int, float),
        'user_agent': str
    }

    for name, expected_type in expected_types.items():
        if name not in api_config:
            continue
        value = api_config[name]
        # bool is an int subclass; don't let True pass as a timeout
        wrong_bool = isinstance(value, bool) and expected_type is not bool
        if wrong_bool or not isinstance(value, expected_type):
            type_name = (expected_type.__name__ if not isinstance(expected_type, tuple)
                         else ' or '.join(t.__name__ for t in expected_type))
            raise ConfigValidationError(
                f"API config field '{name}' must be of type {type_name}",
                config_path=path,
                field_path=f"api.{name}",
                expected_type=type_name,
                actual_value=type(value).__name__
            )

    if api_config.get('timeout', 1) <= 0:
        raise ConfigValidationError(
            "API config 'timeout' must be positive",
            config_path=path,
            field_path="api.timeout",
            expected_type="positive number",
            actual_value=api_config['timeout']
        )

    if api_config.get('min_request_interval', 0) < 0:
        raise ConfigValidationError(
            "API config 'min_request_interval' must not be negative",
            config_path=path,
            field_path="api.min_request_interval",
            expected_type="non-negative number",
            actual_value=api_config['min_request_interval']
        )


def load_config(config_path: str) -> ClientConfig:
    """
    Load a ClientConfig from a YAML file with an ``api`` section.

    Args:
        config_path: Path to the YAML file

    Returns:
        ClientConfig built from the file

    Raises:
        ConfigValidationError: If the file is missing, malformed or invalid
    """
    config_file = Path(config_path)
    if not config_file.exists():
        raise ConfigValidationError(
            f"Configuration file not found: {config_path}",
            config_path=config_path
        )

    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigValidationError(
            f"Invalid YAML syntax in {config_path}: {str(e)}",
            config_path=config_path
        )

    if config_data is None:
        raise ConfigValidationError(
            f"Configuration file is empty: {config_path}",
            config_path=config_path
        )

    if not isinstance(config_data, dict):
        raise ConfigValidationError(
            f"Configuration must be a dictionary, got {type(config_data).__name__}",
            config_path=config_path,
            expected_type="dict",
            actual_value=type(config_data).__name__
        )

    api_config = config_data.get('api')
    if not isinstance(api_config, dict):
        raise ConfigValidationError(
            f"Missing required configuration section 'api' in {config_path}",
            config_path=config_path,
            field_path="api"
        )

    validate_config(api_config, config_path)
    config = ClientConfig.from_dict(api_config, config_path)
    logger.info(f"Loaded client configuration from {config_path}")
    return config
