"""
Utility functions for request signing

This module provides the encoding and hashing primitives used throughout
Signature Version 4 canonicalization: AWS-specific percent-encoding, hex and
base64 encoding, SHA-256 and HMAC-SHA256, and compact ISO-8601 timestamps.
"""

import re
import time
import hmac
import base64
import hashlib
from typing import Union, Optional
from urllib.parse import quote

from .types import (
    EncodingError,
    SigningErrorCodes,
    QueryArgs,
    QueryValue,
    RequestBody,
)


# Characters left untouched by percent_encode in addition to A-Z a-z 0-9 -_.
# (urllib.parse.quote never escapes those).
_UNRESERVED_EXTRA = '~'

_TIMESTAMP_PATTERN = re.compile(r'^\d{8}T\d{6}Z$')

EMPTY_SHA256 = hashlib.sha256(b'').hexdigest()


def to_bytes(data: Union[str, bytes, None]) -> bytes:
    """
    Convert text to UTF-8 bytes; bytes pass through and None becomes b''.
    """
    if data is None:
        return b''
    if isinstance(data, str):
        return data.encode('utf-8')
    return data


def percent_encode(value: Union[str, bytes, int, float], encode_slash: bool = True) -> str:
    """
    Percent-encode a value using AWS rules.

    Only A-Z, a-z, 0-9, '-', '_', '.' and '~' are left as-is; every other
    UTF-8 byte becomes %XX with uppercase hex digits.

    Args:
        value: Value to encode (numbers are stringified first)
        encode_slash: Encode '/' as %2F; pass False for request paths

    Returns:
        str: Encoded value
    """
    if isinstance(value, bool):
        raise EncodingError(
            "Booleans have no percent-encoded form",
            SigningErrorCodes.UNSUPPORTED_QUERY_VALUE_TYPE,
            {"value_type": "bool"}
        )

    if isinstance(value, (int, float)):
        value = str(value)

    safe = _UNRESERVED_EXTRA if encode_slash else _UNRESERVED_EXTRA + '/'
    return quote(value, safe=safe)


def to_hex(data: bytes) -> str:
    """
    Convert bytes to lowercase hex string.

    Args:
        data: Bytes to convert

    Returns:
        str: Lowercase hex string
    """
    return data.hex()


def sha256_hex(data: RequestBody) -> str:
    """Hex-encoded SHA-256 digest of the given body."""
    return to_hex(hashlib.sha256(to_bytes(data)).digest())


def hmac_sha256(key: Union[str, bytes], message: Union[str, bytes]) -> bytes:
    """
    Keyed hash of message with HMAC-SHA256.

    Args:
        key: Key bytes (text keys are UTF-8 encoded)
        message: Message to authenticate

    Returns:
        bytes: Raw 32-byte digest
    """
    return hmac.new(to_bytes(key), to_bytes(message), hashlib.sha256).digest()


def base64_md5(data: RequestBody) -> str:
    """Base64 MD5 checksum of a body, as sent in Content-MD5."""
    return base64.b64encode(hashlib.md5(to_bytes(data)).digest()).decode('ascii')


def generate_timestamp(epoch_seconds: Optional[float] = None) -> str:
    """
    Generate a compact ISO-8601 UTC timestamp (YYYYMMDDThhmmssZ).

    Args:
        epoch_seconds: Unix time to format (uses current time if None)

    Returns:
        str: Timestamp string
    """
    if epoch_seconds is None:
        epoch_seconds = time.time()
    return time.strftime('%Y%m%dT%H%M%SZ', time.gmtime(epoch_seconds))


def validate_timestamp(timestamp: str) -> bool:
    """
    Validate compact ISO-8601 timestamp format.

    Returns:
        bool: True if the timestamp is YYYYMMDDThhmmssZ and a real date
    """
    if not isinstance(timestamp, str) or not _TIMESTAMP_PATTERN.match(timestamp):
        return False

    try:
        time.strptime(timestamp, '%Y%m%dT%H%M%SZ')
    except ValueError:
        return False
    return True


def format_http_date(epoch_seconds: float) -> str:
    """Format Unix time as an RFC 7231 HTTP date."""
    return time.strftime('%a, %d %b %Y %H:%M:%S GMT', time.gmtime(epoch_seconds))


def encode_query_pair(name: str, value: QueryValue) -> Optional[str]:
    """
    Encode a single query argument.

    True encodes as 'name=', False is dropped (None returned), strings and
    numbers encode as 'name=value'.

    Raises:
        EncodingError: If the value has an unsupported type
    """
    encoded_name = percent_encode(name)

    if value is True:
        return f"{encoded_name}="
    if value is False:
        return None
    if not isinstance(value, (str, int, float)):
        raise EncodingError(
            f"Unrecognised query arg value type: {type(value).__name__}",
            SigningErrorCodes.UNSUPPORTED_QUERY_VALUE_TYPE,
            {"name": name, "value_type": type(value).__name__}
        )
    return f"{encoded_name}={percent_encode(value)}"


def serialize_query(args: Optional[QueryArgs]) -> str:
    """
    Serialize query arguments in canonical order.

    Arguments are sorted by their percent-encoded names, which makes the
    result usable both as a canonical query string and in a request URL.

    Args:
        args: Query arguments (may be None)

    Returns:
        str: Query string without the leading '?'
    """
    if not args:
        return ""

    encoded = sorted(
        (percent_encode(name), name) for name in args
    )

    pairs = []
    for _, name in encoded:
        pair = encode_query_pair(name, args[name])
        if pair is not None:
            pairs.append(pair)

    return '&'.join(pairs)
