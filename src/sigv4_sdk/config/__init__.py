"""
Configuration management for SigV4 Python SDK

This module provides client configuration (region, credentials, transport and
logging settings) loadable from dicts, JSON, files or the environment.
"""

from .client_config import (
    ClientConfig,
    LoggingConfig,
    configure_logging,
)

__all__ = [
    'ClientConfig',
    'LoggingConfig',
    'configure_logging',
]
