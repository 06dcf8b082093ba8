"""
Shared pieces for the service request builders
"""

from typing import Dict, Optional, Iterable, Any
from dataclasses import dataclass, field

from ..signing.types import (
    RequestBody,
    MissingArgumentError,
    UnsupportedArgumentCombinationError,
    SigningErrorCodes,
)


@dataclass
class ServiceRequest:
    """
    A signed request ready for the HTTP transport

    Attributes:
        method: HTTP method
        url: Complete request URL
        headers: Headers including Authorization
        body: Optional request body
    """
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: RequestBody = None


def build_https_url(host: str, path: str, query: Optional[str] = None) -> str:
    """Join host, escaped path and optional query string into an https URL."""
    url = f"https://{host}{path}"
    if query:
        url += f"?{query}"
    return url


def require_arguments(**arguments: Any) -> None:
    """
    Raise MissingArgumentError naming every argument that is None or empty.
    """
    missing = [name for name, value in arguments.items() if value is None or value == '']
    if missing:
        raise MissingArgumentError(
            f"Missing arguments: {', '.join(missing)}",
            SigningErrorCodes.MISSING_ARGUMENT,
            {"missing": missing}
        )


def forbid_arguments(reason: str, **arguments: Any) -> None:
    """
    Raise UnsupportedArgumentCombinationError if any argument was supplied.
    """
    supplied = [name for name, value in arguments.items() if value is not None]
    if supplied:
        raise UnsupportedArgumentCombinationError(
            reason,
            SigningErrorCodes.UNSUPPORTED_ARGUMENT_COMBINATION,
            {"arguments": supplied}
        )


def member_parameters(prefix: str, values: Optional[Iterable[str]]) -> Dict[str, str]:
    """
    Expand one value or a list of values into prefix.member.N parameters.
    """
    if values is None:
        return {}
    if isinstance(values, str):
        values = [values]
    return {f"{prefix}.member.{i}": value for i, value in enumerate(values, start=1)}
