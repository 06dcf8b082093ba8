"""
SigV4 Python SDK - Request Signing Module

AWS Signature Version 4 implementation. This module turns a request
description plus long-term credentials into either an Authorization header
value or the query arguments of a time-limited presigned URL.
"""

from .types import (
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
    SIGNING_ALGORITHM,
    SCOPE_TERMINATOR,
    UNSIGNED_PAYLOAD,
    RESERVED_QUERY_ARGS,
)

from .sigv4_signer import (
    SigV4Signer,
    create_signer,
    sign_request,
    presign_request,
)

from .canonical_request import (
    CanonicalRequestBuilder,
    build_canonical_request,
)

from .key_derivation import (
    build_credential_scope,
    derive_signing_key,
)

from .utils import (
    percent_encode,
    serialize_query,
    sha256_hex,
    hmac_sha256,
    base64_md5,
    to_hex,
    generate_timestamp,
    validate_timestamp,
    format_http_date,
)

from .integration import (
    SigV4Auth,
    sign_prepared_request,
    create_signing_session,
)

# Public API exports
__all__ = [
    # Core signing functionality
    'SigV4Signer',
    'create_signer',
    'sign_request',
    'presign_request',
    # Types
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
    # Constants
    'SIGNING_ALGORITHM',
    'SCOPE_TERMINATOR',
    'UNSIGNED_PAYLOAD',
    'RESERVED_QUERY_ARGS',
    # Canonicalization and key derivation
    'CanonicalRequestBuilder',
    'build_canonical_request',
    'build_credential_scope',
    'derive_signing_key',
    # Utilities
    'percent_encode',
    'serialize_query',
    'sha256_hex',
    'hmac_sha256',
    'base64_md5',
    'to_hex',
    'generate_timestamp',
    'validate_timestamp',
    'format_http_date',
    # HTTP Integration
    'SigV4Auth',
    'sign_prepared_request',
    'create_signing_session',
]
