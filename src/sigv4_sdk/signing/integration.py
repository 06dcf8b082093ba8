"""
HTTP client integration for request signing

This module plugs the Signature Version 4 signer into the requests library,
so requests built with a plain requests.Session are signed just before they
are sent.
"""

import logging
from typing import Dict, Optional, Tuple
from urllib.parse import urlsplit, unquote

import requests
from requests.auth import AuthBase
from requests.models import PreparedRequest

from .types import (
    SignableRequest,
    SigningContext,
    UNSIGNED_PAYLOAD,
    CONTENT_SHA256_HEADER,
    InvalidArgumentError,
    UnsupportedArgumentCombinationError,
    SigningErrorCodes,
)
from .sigv4_signer import SigV4Signer

logger = logging.getLogger(__name__)

# Headers covered by the signature when signing a prepared request. Other
# headers (User-Agent, Connection, ...) may be rewritten in transit.
SIGNED_HEADER_NAMES = frozenset({'content-type', 'content-md5'})


def _split_query(query: str) -> Dict[str, str]:
    """
    Decode a raw query string into arguments.

    Each name and value is percent-decoded with unquote, so '+' stays a
    literal plus as it is sent on the wire.

    Raises:
        UnsupportedArgumentCombinationError: If a name appears more than once
    """
    args: Dict[str, str] = {}
    for pair in query.split('&'):
        if not pair:
            continue
        raw_name, _, raw_value = pair.partition('=')
        name = unquote(raw_name)
        if name in args:
            raise UnsupportedArgumentCombinationError(
                f"Query argument supplied more than once: {name}",
                SigningErrorCodes.DUPLICATE_QUERY_ARG,
                {"argument": name}
            )
        args[name] = unquote(raw_value)
    return args


def _split_url(url: str) -> Tuple[str, str, Dict[str, str]]:
    """
    Split a request URL into host, unescaped path and query arguments.

    Raises:
        InvalidArgumentError: If the path contains an encoded slash
        UnsupportedArgumentCombinationError: If a query argument is repeated
    """
    parts = urlsplit(url)
    # An encoded slash cannot survive unescaping and re-encoding of the path
    if '%2f' in parts.path.lower():
        raise InvalidArgumentError(
            "Encoded slashes in the request path cannot be signed",
            SigningErrorCodes.INVALID_PATH,
            {"path": parts.path}
        )
    path = unquote(parts.path) or '/'
    return parts.netloc, path, _split_query(parts.query)


def _signable_headers(headers) -> Dict[str, str]:
    """Pick the headers of a prepared request that should be signed."""
    return {
        name: value for name, value in headers.items()
        if name.lower() in SIGNED_HEADER_NAMES or name.lower().startswith('x-amz-')
    }


def sign_prepared_request(
    prepared_request: PreparedRequest,
    context: SigningContext
) -> PreparedRequest:
    """
    Sign a prepared request in place.

    Adds x-amz-date (if missing) and Authorization headers. Streaming bodies
    that cannot be hashed are signed with the unsigned-payload sentinel.

    Args:
        prepared_request: Prepared request to sign
        context: Signing context

    Returns:
        PreparedRequest: The same request with signature headers added

    Raises:
        InvalidArgumentError: If the path contains an encoded slash
        UnsupportedArgumentCombinationError: If a query argument is repeated
    """
    host, path, args = _split_url(prepared_request.url)

    if 'x-amz-date' not in {name.lower() for name in prepared_request.headers}:
        prepared_request.headers['x-amz-date'] = context.timestamp

    body = prepared_request.body
    payload_hash = None
    if body is not None and not isinstance(body, (str, bytes)):
        payload_hash = UNSIGNED_PAYLOAD
        prepared_request.headers[CONTENT_SHA256_HEADER] = UNSIGNED_PAYLOAD
        body = None

    request = SignableRequest(
        method=prepared_request.method.upper(),
        host=host,
        path=path,
        args=args or None,
        headers=_signable_headers(prepared_request.headers),
        body=body,
        payload_hash=payload_hash,
    )

    prepared_request.headers['Authorization'] = SigV4Signer(request, context).to_auth_header()
    logger.debug(f"Signed {request.method} request to {prepared_request.url}")
    return prepared_request


class SigV4Auth(AuthBase):
    """
    requests authentication handler that signs each request with SigV4.

    Usage:
        session.auth = SigV4Auth('s3', 'eu-west-1', key_id, secret)
    """

    def __init__(
        self,
        service: str,
        region: str,
        access_key_id: str,
        secret_access_key: str,
        timestamp: Optional[str] = None
    ):
        self.service = service
        self.region = region
        self.access_key_id = access_key_id
        self.secret_access_key = secret_access_key
        self.timestamp = timestamp

    def __call__(self, prepared_request: PreparedRequest) -> PreparedRequest:
        # A fresh context per request so each one gets its own timestamp
        context = SigningContext(
            service=self.service,
            region=self.region,
            access_key_id=self.access_key_id,
            secret_access_key=self.secret_access_key,
            timestamp=self.timestamp,
        )
        return sign_prepared_request(prepared_request, context)


def create_signing_session(
    service: str,
    region: str,
    access_key_id: str,
    secret_access_key: str
) -> requests.Session:
    """
    Create a requests session that signs every outgoing request.

    Args:
        service: Service identifier
        region: Region identifier
        access_key_id: Access key id
        secret_access_key: Secret access key

    Returns:
        requests.Session: Session with SigV4Auth installed
    """
    session = requests.Session()
    session.auth = SigV4Auth(service, region, access_key_id, secret_access_key)
    logger.info(f"Configured request signing for service {service} in {region}")
    return session
