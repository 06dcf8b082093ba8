"""
Type definitions for request signing functionality

This module provides type definitions, protocol constants and data classes for
the AWS Signature Version 4 request signing implementation.
"""

from typing import Dict, Optional, Union, Any
from dataclasses import dataclass, field

from ..exceptions import SigV4SDKError


# Protocol constants
SIGNING_ALGORITHM = "AWS4-HMAC-SHA256"
SIGNING_KEY_PREFIX = "AWS4"
SCOPE_TERMINATOR = "aws4_request"
UNSIGNED_PAYLOAD = "UNSIGNED-PAYLOAD"
CONTENT_SHA256_HEADER = "x-amz-content-sha256"

# Query argument names reserved for presigned URLs
QUERY_ALGORITHM = "X-Amz-Algorithm"
QUERY_CREDENTIAL = "X-Amz-Credential"
QUERY_DATE = "X-Amz-Date"
QUERY_EXPIRES = "X-Amz-Expires"
QUERY_SIGNED_HEADERS = "X-Amz-SignedHeaders"
QUERY_SIGNATURE = "X-Amz-Signature"

RESERVED_QUERY_ARGS = frozenset({
    QUERY_ALGORITHM,
    QUERY_CREDENTIAL,
    QUERY_DATE,
    QUERY_EXPIRES,
    QUERY_SIGNED_HEADERS,
    QUERY_SIGNATURE,
})


# Type aliases for convenience
QueryValue = Union[str, int, float, bool]
QueryArgs = Dict[str, QueryValue]
HeaderDict = Dict[str, str]
RequestBody = Union[str, bytes, None]


@dataclass
class SignableRequest:
    """
    Request to be signed with Signature Version 4

    Attributes:
        method: HTTP method, used verbatim
        host: Host the request is sent to
        path: Unescaped request path, must start with '/'
        args: Optional query arguments
        headers: Optional request headers (names are case-insensitive)
        body: Optional request body (string or bytes)
        payload_hash: Optional explicit payload hash, e.g. UNSIGNED_PAYLOAD
    """
    method: str
    host: str
    path: str
    args: Optional[QueryArgs] = None
    headers: Optional[HeaderDict] = None
    body: RequestBody = None
    payload_hash: Optional[str] = None

    def __post_init__(self):
        # Copy the mappings so later caller mutation cannot change the signature
        if self.args is not None:
            self.args = dict(self.args)
        if self.headers is not None:
            self.headers = dict(self.headers)


@dataclass
class SigningContext:
    """
    Credentials and scope for a single signing operation

    Attributes:
        service: Service identifier (e.g. "s3")
        region: Region identifier (e.g. "us-east-1")
        access_key_id: Access key id embedded in the credential
        secret_access_key: Secret used to derive the signing key
        timestamp: Compact ISO-8601 timestamp (YYYYMMDDThhmmssZ); defaults to now
        expires: Validity in seconds, only used for presigned URLs
    """
    service: str
    region: str
    access_key_id: str
    secret_access_key: str = field(repr=False)
    timestamp: Optional[str] = None
    expires: Optional[int] = None

    def __post_init__(self):
        if self.timestamp is None:
            from .utils import generate_timestamp
            self.timestamp = generate_timestamp()

    @property
    def date(self) -> str:
        """Calendar date part of the timestamp (YYYYMMDD)."""
        return self.timestamp[:8]


@dataclass(frozen=True)
class CanonicalRequest:
    """
    Result of canonical request construction

    Attributes:
        digest: Hex SHA-256 digest of the canonical request
        signed_headers: Semicolon-joined, sorted, lower-cased header names
        canonical_string: The canonical request that was hashed
    """
    digest: str
    signed_headers: str
    canonical_string: str = field(repr=False)


class SigningError(SigV4SDKError):
    """
    Error class for signing operations

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Optional additional error details
    """

    def __init__(
        self,
        message: str,
        code: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, code, details)
        self.message = message
        self.code = code

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (code: {self.code}, details: {self.details})"
        return f"{self.message} (code: {self.code})"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message='{self.message}', code='{self.code}', details={self.details})"


class MissingArgumentError(SigningError):
    """A required argument was not supplied"""
    pass


class UnsupportedArgumentCombinationError(SigningError):
    """An argument was supplied that the operation does not allow"""
    pass


class InvalidOperationError(SigningError):
    """The requested operation cannot be performed for this request"""
    pass


class EncodingError(SigningError):
    """A value could not be canonically encoded"""
    pass


class InvalidArgumentError(SigningError):
    """An argument was supplied in an invalid format"""
    pass


# Common signing error codes
class SigningErrorCodes:
    """Standard error codes for signing operations"""

    # Construction errors
    MISSING_ARGUMENT = "MISSING_ARGUMENT"
    UNSUPPORTED_ARGUMENT_COMBINATION = "UNSUPPORTED_ARGUMENT_COMBINATION"
    RESERVED_QUERY_ARG = "RESERVED_QUERY_ARG"
    DUPLICATE_HEADER = "DUPLICATE_HEADER"
    DUPLICATE_QUERY_ARG = "DUPLICATE_QUERY_ARG"

    # Validation errors
    INVALID_PATH = "INVALID_PATH"
    INVALID_TIMESTAMP = "INVALID_TIMESTAMP"

    # Operation errors
    PRESIGN_METHOD_NOT_GET = "PRESIGN_METHOD_NOT_GET"
    PRESIGN_HEADERS_OR_BODY = "PRESIGN_HEADERS_OR_BODY"
    UPLOAD_NOT_STARTED = "UPLOAD_NOT_STARTED"
    UPLOAD_ALREADY_ENDED = "UPLOAD_ALREADY_ENDED"

    # Encoding errors
    UNSUPPORTED_QUERY_VALUE_TYPE = "UNSUPPORTED_QUERY_VALUE_TYPE"
