"""
AWS Signature Version 4 signer

This module provides the main signer implementation. A signer is built from a
request description and a signing context and can then produce either an
Authorization header value (any method) or the query arguments of a presigned
GET URL.
"""

import logging
from typing import Optional, Dict

from .types import (
    SignableRequest,
    SigningContext,
    CanonicalRequest,
    QueryArgs,
    QueryValue,
    SIGNING_ALGORITHM,
    QUERY_ALGORITHM,
    QUERY_CREDENTIAL,
    QUERY_DATE,
    QUERY_EXPIRES,
    QUERY_SIGNED_HEADERS,
    QUERY_SIGNATURE,
    RESERVED_QUERY_ARGS,
    MissingArgumentError,
    InvalidArgumentError,
    InvalidOperationError,
    UnsupportedArgumentCombinationError,
    SigningErrorCodes,
)
from .utils import validate_timestamp
from .canonical_request import build_canonical_request
from .key_derivation import (
    build_credential_scope,
    derive_signing_key,
    compute_signature,
)

logger = logging.getLogger(__name__)


class SigV4Signer:
    """
    Signature Version 4 signer

    The signer is stateless after construction: both signing operations are
    pure functions of the constructed request and context, so calling them
    repeatedly, or from several threads, yields the same output.
    """

    def __init__(self, request: SignableRequest, context: SigningContext):
        """
        Initialize the signer.

        Args:
            request: Request description to sign
            context: Credentials, scope and timestamp

        Raises:
            MissingArgumentError: If a required field is absent
            InvalidArgumentError: If the timestamp or path is malformed
        """
        required = {
            "timestamp": context.timestamp,
            "method": request.method,
            "host": request.host,
            "path": request.path,
            "service": context.service,
            "region": context.region,
            "access_key_id": context.access_key_id,
            "secret_access_key": context.secret_access_key,
        }
        missing = [name for name, value in required.items() if not value]
        if missing:
            raise MissingArgumentError(
                f"Missing arguments: {', '.join(missing)}",
                SigningErrorCodes.MISSING_ARGUMENT,
                {"missing": missing}
            )

        if not validate_timestamp(context.timestamp):
            raise InvalidArgumentError(
                f"Invalid timestamp: {context.timestamp}",
                SigningErrorCodes.INVALID_TIMESTAMP,
                {"timestamp": context.timestamp, "expected_format": "YYYYMMDDThhmmssZ"}
            )

        if not request.path.startswith('/'):
            raise InvalidArgumentError(
                "The path needs to start with a slash",
                SigningErrorCodes.INVALID_PATH,
                {"path": request.path}
            )

        self.request = request
        self.context = context

    @property
    def credential_scope(self) -> str:
        """date/region/service/aws4_request for this signer."""
        return build_credential_scope(self.context.date, self.context.region, self.context.service)

    def canonical_request(self) -> CanonicalRequest:
        """
        Canonical request over the full request description.

        Returns:
            CanonicalRequest: Digest and signed headers used by to_auth_header()
        """
        return build_canonical_request(self.request)

    def string_to_sign(self, canonical: CanonicalRequest) -> str:
        """
        Build the string to sign for a canonical request.

        Args:
            canonical: Canonical request to cover

        Returns:
            str: Algorithm, timestamp, credential scope and digest, newline-joined
        """
        return '\n'.join((
            SIGNING_ALGORITHM,
            self.context.timestamp,
            self.credential_scope,
            canonical.digest,
        ))

    def to_auth_header(self) -> str:
        """
        Sign the request and format the Authorization header value.

        Returns:
            str: Authorization header value

        Raises:
            SigningError: If the request cannot be canonicalized
        """
        canonical = self.canonical_request()
        signature = self._sign(canonical)

        return (
            f"{SIGNING_ALGORITHM} "
            f"Credential={self.context.access_key_id}/{self.credential_scope}, "
            f"SignedHeaders={canonical.signed_headers}, "
            f"Signature={signature}"
        )

    def to_presigned_query_args(self) -> Dict[str, QueryValue]:
        """
        Sign the request as a presigned GET URL.

        URL-based requests cannot carry a body and cannot add headers, so
        only GET requests without headers or body can be presigned, and only
        the host header is signed.

        Returns:
            dict: Caller query arguments plus the reserved X-Amz-* arguments,
                including X-Amz-Signature

        Raises:
            InvalidOperationError: If the method is not GET, or headers/body are present
            MissingArgumentError: If no validity duration was given
            UnsupportedArgumentCombinationError: If a caller argument uses a reserved name
        """
        if self.request.method != "GET":
            raise InvalidOperationError(
                "Cannot generate query string signature for non-GET request",
                SigningErrorCodes.PRESIGN_METHOD_NOT_GET,
                {"method": self.request.method}
            )

        if self.request.headers or self.request.body is not None:
            raise InvalidOperationError(
                "Headers and bodies are not allowed for query string signatures",
                SigningErrorCodes.PRESIGN_HEADERS_OR_BODY
            )

        if self.context.expires is None:
            raise MissingArgumentError(
                "Missing argument: expires",
                SigningErrorCodes.MISSING_ARGUMENT,
                {"argument": "expires"}
            )

        caller_args = self.request.args or {}
        collisions = sorted(RESERVED_QUERY_ARGS.intersection(caller_args))
        if collisions:
            raise UnsupportedArgumentCombinationError(
                f"Query arguments use reserved names: {', '.join(collisions)}",
                SigningErrorCodes.RESERVED_QUERY_ARG,
                {"reserved": collisions}
            )

        query_args: QueryArgs = dict(caller_args)
        query_args.update({
            QUERY_ALGORITHM: SIGNING_ALGORITHM,
            QUERY_CREDENTIAL: f"{self.context.access_key_id}/{self.credential_scope}",
            QUERY_DATE: self.context.timestamp,
            QUERY_EXPIRES: self.context.expires,
            QUERY_SIGNED_HEADERS: "host",
        })

        canonical = build_canonical_request(SignableRequest(
            method=self.request.method,
            host=self.request.host,
            path=self.request.path,
            args=query_args,
            payload_hash=self.request.payload_hash,
        ))

        query_args[QUERY_SIGNATURE] = self._sign(canonical)
        return query_args

    def _sign(self, canonical: CanonicalRequest) -> str:
        """
        Compute the hex signature for a canonical request.
        """
        logger.debug(
            f"Signing {self.request.method} {self.request.host}{self.request.path} "
            f"scope={self.credential_scope} signed_headers={canonical.signed_headers} "
            f"canonical_digest={canonical.digest}"
        )

        signing_key = derive_signing_key(
            self.context.secret_access_key,
            self.context.date,
            self.context.region,
            self.context.service,
        )
        return compute_signature(signing_key, self.string_to_sign(canonical))


def create_signer(request: SignableRequest, context: SigningContext) -> SigV4Signer:
    """
    Create a new Signature Version 4 signer.

    Args:
        request: Request description
        context: Signing context

    Returns:
        SigV4Signer: Configured signer instance
    """
    return SigV4Signer(request, context)


def sign_request(request: SignableRequest, context: SigningContext) -> str:
    """
    Sign a request and return its Authorization header value.

    Args:
        request: Request description
        context: Signing context

    Returns:
        str: Authorization header value
    """
    return create_signer(request, context).to_auth_header()


def presign_request(
    request: SignableRequest,
    context: SigningContext,
    expires: Optional[int] = None
) -> Dict[str, QueryValue]:
    """
    Presign a GET request and return its query arguments.

    Args:
        request: Request description (GET, no headers or body)
        context: Signing context
        expires: Validity in seconds, overriding context.expires

    Returns:
        dict: Query arguments including X-Amz-Signature
    """
    if expires is not None:
        context = SigningContext(
            service=context.service,
            region=context.region,
            access_key_id=context.access_key_id,
            secret_access_key=context.secret_access_key,
            timestamp=context.timestamp,
            expires=expires,
        )
    return create_signer(request, context).to_presigned_query_args()
