"""
Canonical request construction for Signature Version 4

This module serializes a request description into the fixed-format canonical
request (method, path, query string, headers, signed headers, payload hash)
and hashes it. A single byte of difference in this output produces a
signature the server rejects, so every rule here is exact.
"""

from typing import Dict, List, Tuple

from .types import (
    SignableRequest,
    CanonicalRequest,
    CONTENT_SHA256_HEADER,
    InvalidArgumentError,
    MissingArgumentError,
    UnsupportedArgumentCombinationError,
    SigningErrorCodes,
)
from .utils import (
    percent_encode,
    serialize_query,
    sha256_hex,
)


class CanonicalRequestBuilder:
    """
    Canonical request builder for Signature Version 4
    """

    def __init__(self, request: SignableRequest):
        """
        Initialize canonical request builder.

        Args:
            request: Request description to canonicalize

        Raises:
            MissingArgumentError: If method, host or path is missing
            InvalidArgumentError: If the path does not start with '/'
        """
        for name in ('method', 'host', 'path'):
            if not getattr(request, name):
                raise MissingArgumentError(
                    f"Missing argument: {name}",
                    SigningErrorCodes.MISSING_ARGUMENT,
                    {"argument": name}
                )

        if not request.path.startswith('/'):
            raise InvalidArgumentError(
                "The path needs to start with a slash",
                SigningErrorCodes.INVALID_PATH,
                {"path": request.path}
            )

        self.request = request

    def build(self) -> CanonicalRequest:
        """
        Build and hash the canonical request.

        Returns:
            CanonicalRequest: Digest, signed headers and canonical string

        Raises:
            EncodingError: If a query argument has an unsupported value type
            UnsupportedArgumentCombinationError: If two headers share a name
        """
        header_names, header_values = self._collect_headers()
        signed_headers = ';'.join(header_names)

        lines = [
            self.request.method,
            percent_encode(self.request.path, encode_slash=False),
            serialize_query(self.request.args),
        ]
        lines.extend(f"{name}:{header_values[name]}" for name in header_names)
        lines.append('')
        lines.append(signed_headers)
        lines.append(self._resolve_payload_hash())

        canonical_string = '\n'.join(lines)

        return CanonicalRequest(
            digest=sha256_hex(canonical_string),
            signed_headers=signed_headers,
            canonical_string=canonical_string
        )

    def _collect_headers(self) -> Tuple[List[str], Dict[str, str]]:
        """
        Lower-case, de-duplicate and sort the headers, always adding host.

        Returns:
            tuple: Sorted header names and a name -> value mapping
        """
        values = {'host': self.request.host}
        seen = set()

        for name, value in (self.request.headers or {}).items():
            lower = name.lower()
            if lower == 'host':
                continue
            if lower in seen:
                raise UnsupportedArgumentCombinationError(
                    f"Header supplied more than once: {lower}",
                    SigningErrorCodes.DUPLICATE_HEADER,
                    {"header": lower}
                )
            seen.add(lower)
            values[lower] = value

        return sorted(values), values

    def _resolve_payload_hash(self) -> str:
        """
        Resolve the payload hash line.

        Priority: explicit override, then an x-amz-content-sha256 header,
        then the SHA-256 of the body (empty body if none).
        """
        if self.request.payload_hash is not None:
            return self.request.payload_hash

        for name, value in (self.request.headers or {}).items():
            if name.lower() == CONTENT_SHA256_HEADER:
                return value

        return sha256_hex(self.request.body)


def build_canonical_request(request: SignableRequest) -> CanonicalRequest:
    """
    Build the canonical request for signing.

    Args:
        request: Request description

    Returns:
        CanonicalRequest: Digest and signed headers

    Raises:
        SigningError: If the request cannot be canonicalized
    """
    builder = CanonicalRequestBuilder(request)
    return builder.build()
