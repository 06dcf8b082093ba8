"""
Client configuration for the SigV4 Python SDK

Provides the region, credentials and transport settings shared by the request
builders, the HTTP client and the command-line interface, loadable from a
dict, a JSON string, a JSON file or environment variables.
"""

import os
import json
import logging
from typing import Dict, Optional, Any, Union, Mapping
from dataclasses import dataclass, field, asdict
from pathlib import Path

from ..exceptions import ConfigurationError

_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')

_TRUE_VALUES = ('1', 'true', 'yes', 'on')
_FALSE_VALUES = ('0', 'false', 'no', 'off')


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = 'WARNING'

    def __post_init__(self):
        self.level = str(self.level).upper()
        if self.level not in _LOG_LEVELS:
            raise ConfigurationError(
                f"Invalid log level: {self.level}",
                "INVALID_LOG_LEVEL",
                {"allowed": list(_LOG_LEVELS)}
            )


@dataclass
class ClientConfig:
    """
    Configuration for talking to the provider's APIs.

    Attributes:
        region: Default region for request builders
        access_key_id: Access key id
        secret_access_key: Secret access key
        timeout: Request timeout in seconds
        verify_ssl: Verify TLS certificates
        use_virtual_host: Use bucket-in-host URLs for object storage
        logging: Logging settings
    """
    region: str
    access_key_id: str
    secret_access_key: str = field(repr=False)
    timeout: float = 30.0
    verify_ssl: bool = True
    use_virtual_host: bool = False
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self):
        """Validate client configuration."""
        for name in ('region', 'access_key_id', 'secret_access_key'):
            if not getattr(self, name):
                raise ConfigurationError(f"Configuration value '{name}' cannot be empty", "MISSING_VALUE")

        if self.timeout <= 0:
            raise ConfigurationError("Timeout must be positive", "INVALID_TIMEOUT")

        if isinstance(self.logging, dict):
            self.logging = LoggingConfig(**self.logging)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'ClientConfig':
        """Build configuration from a plain mapping"""
        try:
            data = dict(data)
            logging_data = data.pop('logging', None) or {}
            return cls(logging=LoggingConfig(**logging_data), **data)
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration format: {e}", "INVALID_FORMAT")

    @classmethod
    def from_json(cls, json_string: str) -> 'ClientConfig':
        """Load configuration from JSON string"""
        try:
            data = json.loads(json_string)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Failed to parse configuration JSON: {e}", "PARSE_ERROR")

        if not isinstance(data, dict):
            raise ConfigurationError("Configuration JSON must be an object", "INVALID_FORMAT")
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, file_path: Union[str, Path]) -> 'ClientConfig':
        """Load configuration from file"""
        try:
            with open(Path(file_path), 'r', encoding='utf-8') as f:
                json_string = f.read()
        except OSError as e:
            raise ConfigurationError(f"Failed to read configuration file: {e}", "FILE_ERROR")
        return cls.from_json(json_string)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'ClientConfig':
        """
        Load configuration from environment variables.

        Reads AWS_REGION (or AWS_DEFAULT_REGION), AWS_ACCESS_KEY_ID,
        AWS_SECRET_ACCESS_KEY, SIGV4_TIMEOUT, SIGV4_VERIFY_SSL,
        SIGV4_USE_VIRTUAL_HOST and SIGV4_LOG_LEVEL.
        """
        env = os.environ if environ is None else environ

        data: Dict[str, Any] = {
            'region': env.get('AWS_REGION') or env.get('AWS_DEFAULT_REGION', ''),
            'access_key_id': env.get('AWS_ACCESS_KEY_ID', ''),
            'secret_access_key': env.get('AWS_SECRET_ACCESS_KEY', ''),
        }

        if 'SIGV4_TIMEOUT' in env:
            try:
                data['timeout'] = float(env['SIGV4_TIMEOUT'])
            except ValueError:
                raise ConfigurationError(f"Invalid SIGV4_TIMEOUT: {env['SIGV4_TIMEOUT']}", "INVALID_TIMEOUT")

        for var, key in (('SIGV4_VERIFY_SSL', 'verify_ssl'), ('SIGV4_USE_VIRTUAL_HOST', 'use_virtual_host')):
            if var in env:
                data[key] = _parse_bool(var, env[var])

        if 'SIGV4_LOG_LEVEL' in env:
            data['logging'] = {'level': env['SIGV4_LOG_LEVEL']}

        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, leaving the secret out"""
        data = asdict(self)
        data.pop('secret_access_key')
        return data


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"Invalid boolean for {name}: {value}", "INVALID_FORMAT")


def configure_logging(config: LoggingConfig) -> logging.Logger:
    """
    Apply a logging configuration to the SDK's logger hierarchy.

    Returns:
        logging.Logger: The package logger
    """
    logger = logging.getLogger('sigv4_sdk')
    logger.setLevel(config.level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('%(asctime)s %(levelname)s %(name)s: %(message)s'))
        logger.addHandler(handler)
    return logger
