"""
Exception classes for SigV4 Python SDK
"""

from typing import Optional, Dict, Any


class SigV4SDKError(Exception):
    """Base exception for all SigV4 SDK errors"""

    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.error_code = error_code
        self.details = details or {}


class ConfigurationError(SigV4SDKError):
    """Exception raised for client configuration loading or validation errors"""
    pass


class ServerCommunicationError(SigV4SDKError):
    """Exception raised for server communication errors"""

    def __init__(self, message: str, error_code: str = "SERVER_ERROR",
                 http_status: int = 0, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)
        self.http_status = http_status
