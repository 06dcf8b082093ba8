"""
Request builder for the compute instance service (EC2 query API)
"""

import json
from typing import Any, Dict, Optional

from ..signing.types import SignableRequest, SigningContext, QueryArgs
from ..signing.sigv4_signer import SigV4Signer
from ..signing.utils import serialize_query, generate_timestamp
from .common import ServiceRequest, build_https_url, require_arguments

SERVICE = "ec2"
API_VERSION = "2016-11-15"


def endpoint_host(region: str) -> str:
    """us-east-1 uses the unqualified endpoint."""
    return "ec2.amazonaws.com" if region == "us-east-1" else f"ec2.{region}.amazonaws.com"


def new_http_request(
    method: str,
    action: str,
    region: str,
    access_key_id: str,
    secret_access_key: str,
    parameters: Optional[QueryArgs] = None,
    body: Optional[Dict[str, Any]] = None,
    timestamp: Optional[str] = None
) -> ServiceRequest:
    """
    Build a signed EC2 query API request.

    Action, Version and any parameters travel in the query string; an optional
    body is sent as JSON.

    Raises:
        MissingArgumentError: If a required argument is missing
    """
    require_arguments(
        method=method,
        action=action,
        region=region,
        access_key_id=access_key_id,
        secret_access_key=secret_access_key,
    )

    timestamp = timestamp or generate_timestamp()
    host = endpoint_host(region)
    path = "/"

    query_args = dict(parameters or {})
    query_args["Action"] = action
    query_args["Version"] = API_VERSION

    headers = {"x-amz-date": timestamp}
    payload = None
    if body is not None:
        headers["Content-Type"] = "application/json"
        payload = json.dumps(body)

    signer = SigV4Signer(
        SignableRequest(
            method=method,
            host=host,
            path=path,
            args=query_args,
            headers=headers,
            body=payload,
        ),
        SigningContext(
            service=SERVICE,
            region=region,
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            timestamp=timestamp,
        ),
    )
    headers["Authorization"] = signer.to_auth_header()

    url = build_https_url(host, path, serialize_query(query_args))
    return ServiceRequest(method=method, url=url, headers=headers, body=payload)
