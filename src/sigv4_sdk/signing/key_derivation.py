"""
Signing key derivation for Signature Version 4

The long-term secret is never used to sign directly. Instead a scoped key is
derived through an HMAC-SHA256 chain over date, region and service, so a
leaked signing key is only valid for one day, one region and one service.
"""

from .types import (
    SIGNING_KEY_PREFIX,
    SCOPE_TERMINATOR,
    MissingArgumentError,
    SigningErrorCodes,
)
from .utils import hmac_sha256, to_hex


def build_credential_scope(date: str, region: str, service: str) -> str:
    """
    Build the credential scope string.

    Args:
        date: Calendar date (YYYYMMDD)
        region: Region identifier
        service: Service identifier

    Returns:
        str: date/region/service/aws4_request
    """
    return '/'.join((date, region, service, SCOPE_TERMINATOR))


def derive_signing_key(secret_access_key: str, date: str, region: str, service: str) -> bytes:
    """
    Derive the scoped signing key.

    Each stage's raw digest keys the next stage; nothing is hex-encoded.

    Args:
        secret_access_key: Long-term secret
        date: Calendar date (YYYYMMDD)
        region: Region identifier
        service: Service identifier

    Returns:
        bytes: 32-byte signing key bound to (date, region, service)

    Raises:
        MissingArgumentError: If any input is empty
    """
    inputs = {
        "secret_access_key": secret_access_key,
        "date": date,
        "region": region,
        "service": service,
    }
    missing = [name for name, value in inputs.items() if not value]
    if missing:
        raise MissingArgumentError(
            f"Missing arguments for key derivation: {', '.join(missing)}",
            SigningErrorCodes.MISSING_ARGUMENT,
            {"missing": missing}
        )

    date_key = hmac_sha256(SIGNING_KEY_PREFIX + secret_access_key, date)
    date_region_key = hmac_sha256(date_key, region)
    date_region_service_key = hmac_sha256(date_region_key, service)
    return hmac_sha256(date_region_service_key, SCOPE_TERMINATOR)


def compute_signature(signing_key: bytes, string_to_sign: str) -> str:
    """Hex HMAC-SHA256 of the string to sign under the derived key."""
    return to_hex(hmac_sha256(signing_key, string_to_sign))
