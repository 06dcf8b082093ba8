"""
SigV4 Python SDK
AWS Signature Version 4 request signing with request builders and an HTTP client
"""

from .version import __version__
from .exceptions import (
    SigV4SDKError,
    ConfigurationError,
    ServerCommunicationError,
)
from .config import (
    ClientConfig,
    LoggingConfig,
    configure_logging,
)
from .signing import (
    # Core signing functionality
    SigV4Signer,
    create_signer,
    sign_request,
    presign_request,
    # Types
    SignableRequest,
    SigningContext,
    CanonicalRequest,
    SigningError,
    SigningErrorCodes,
    MissingArgumentError,
    UnsupportedArgumentCombinationError,
    InvalidOperationError,
    EncodingError,
    InvalidArgumentError,
    UNSIGNED_PAYLOAD,
    # Utilities
    percent_encode,
    generate_timestamp,
    validate_timestamp,
    # HTTP Integration
    SigV4Auth,
    sign_prepared_request,
    create_signing_session,
)
from .services import (
    ses,
    waf,
    ec2,
    s3,
    ServiceRequest,
    MultipartUpload,
    MultipartUploadState,
    StorageClass,
)
from .http_client import (
    SigV4HttpClient,
    create_client,
)

# Public API exports
__all__ = [
    '__version__',
    # Exceptions
    'SigV4SDKError',
    'ConfigurationError',
    'ServerCommunicationError',
    # Configuration
    'ClientConfig',
    'LoggingConfig',
    'configure_logging',
    # Request Signing - Core
    'SigV4Signer',
    'create_signer',
    'sign_request',
    'presign_request',
    # Request Signing - Types
    'SignableRequest',
    'SigningContext',
    'CanonicalRequest',
    'SigningError',
    'SigningErrorCodes',
    'MissingArgumentError',
    'UnsupportedArgumentCombinationError',
    'InvalidOperationError',
    'EncodingError',
    'InvalidArgumentError',
    'UNSIGNED_PAYLOAD',
    # Request Signing - Utilities
    'percent_encode',
    'generate_timestamp',
    'validate_timestamp',
    # Request Signing - HTTP Integration
    'SigV4Auth',
    'sign_prepared_request',
    'create_signing_session',
    # Service request builders
    'ses',
    'waf',
    'ec2',
    's3',
    'ServiceRequest',
    'MultipartUpload',
    'MultipartUploadState',
    'StorageClass',
    # HTTP Client
    'SigV4HttpClient',
    'create_client',
]
