"""
Request builder for the firewall rule service (WAF JSON API)
"""

import json
from typing import Any, Dict, Optional

from ..signing.types import SignableRequest, SigningContext
from ..signing.sigv4_signer import SigV4Signer
from ..signing.utils import generate_timestamp
from .common import ServiceRequest, build_https_url, require_arguments, forbid_arguments

SERVICE = "waf"
HOST = "waf.amazonaws.com"
# WAF Classic is a global service signed for us-east-1
SIGNING_REGION = "us-east-1"
API_VERSION = "20150824"
CONTENT_TYPE = "application/x-amz-json-1.1"


def new_http_request(
    operation: str,
    access_key_id: str,
    secret_access_key: str,
    body: Optional[Dict[str, Any]] = None,
    timestamp: Optional[str] = None,
    method: Optional[str] = None,
    region: Optional[str] = None
) -> ServiceRequest:
    """
    Build a signed WAF API request.

    Args:
        operation: API operation (e.g. "ListRules")
        access_key_id: Access key id
        secret_access_key: Secret access key
        body: JSON-serializable request payload (defaults to {})
        timestamp: Optional pinned timestamp
        method: Not supported; must be None
        region: Not supported; must be None

    Returns:
        ServiceRequest: Signed request

    Raises:
        MissingArgumentError: If a required argument is missing
        UnsupportedArgumentCombinationError: If method or region is supplied
    """
    require_arguments(operation=operation, access_key_id=access_key_id, secret_access_key=secret_access_key)
    forbid_arguments(
        "WAF API requests do not have variant methods or regions",
        method=method,
        region=region,
    )

    timestamp = timestamp or generate_timestamp()
    path = "/"

    headers = {
        "x-amz-date": timestamp,
        "x-amz-target": f"AWSWAF_{API_VERSION}.{operation}",
        "Content-Type": CONTENT_TYPE,
    }
    payload = json.dumps(body if body is not None else {})

    signer = SigV4Signer(
        SignableRequest(method="POST", host=HOST, path=path, headers=headers, body=payload),
        SigningContext(
            service=SERVICE,
            region=SIGNING_REGION,
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            timestamp=timestamp,
        ),
    )
    headers["Authorization"] = signer.to_auth_header()

    return ServiceRequest(method="POST", url=build_https_url(HOST, path), headers=headers, body=payload)
