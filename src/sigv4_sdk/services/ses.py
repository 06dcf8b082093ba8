"""
Request builder for the mail sending service (SES query API)
"""

import logging
from typing import Dict, Optional, Union, List, TYPE_CHECKING

from ..signing.types import SignableRequest, SigningContext, QueryArgs
from ..signing.sigv4_signer import SigV4Signer
from ..signing.utils import serialize_query, generate_timestamp
from .common import (
    ServiceRequest,
    build_https_url,
    require_arguments,
    forbid_arguments,
    member_parameters,
)

if TYPE_CHECKING:
    from ..http_client import SigV4HttpClient

logger = logging.getLogger(__name__)

SERVICE = "ses"

Recipients = Union[str, List[str], None]


def endpoint_host(region: str) -> str:
    return f"email.{region}.amazonaws.com"


def new_http_request(
    action: str,
    parameters: QueryArgs,
    region: str,
    access_key_id: str,
    secret_access_key: str,
    timestamp: Optional[str] = None,
    method: Optional[str] = None
) -> ServiceRequest:
    """
    Build a signed SES query API request.

    SES actions are always POSTed as a form-encoded body to the regional
    endpoint, so a method cannot be chosen.

    Args:
        action: API action name (e.g. "SendEmail")
        parameters: Action parameters; pass {} when there are none
        region: Region identifier
        access_key_id: Access key id
        secret_access_key: Secret access key
        timestamp: Optional pinned timestamp (YYYYMMDDThhmmssZ)
        method: Not supported; must be None

    Returns:
        ServiceRequest: Signed request

    Raises:
        MissingArgumentError: If a required argument is missing
        UnsupportedArgumentCombinationError: If a method is supplied
    """
    require_arguments(
        action=action,
        region=region,
        access_key_id=access_key_id,
        secret_access_key=secret_access_key,
    )
    if parameters is None:
        require_arguments(parameters=parameters)
    forbid_arguments("SES requests are always POST", method=method)

    timestamp = timestamp or generate_timestamp()
    host = endpoint_host(region)
    path = "/"

    form = dict(parameters)
    form["Action"] = action

    headers = {
        "x-amz-date": timestamp,
        "Content-Type": "application/x-www-form-urlencoded",
    }
    body = serialize_query(form)

    signer = SigV4Signer(
        SignableRequest(method="POST", host=host, path=path, headers=headers, body=body),
        SigningContext(
            service=SERVICE,
            region=region,
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            timestamp=timestamp,
        ),
    )
    headers["Authorization"] = signer.to_auth_header()

    return ServiceRequest(method="POST", url=build_https_url(host, path), headers=headers, body=body)


def build_send_email_parameters(
    sender: str,
    to: Recipients,
    subject: str,
    html_body: str,
    cc: Recipients = None,
    bcc: Recipients = None,
    reply_to: Recipients = None
) -> Dict[str, str]:
    """
    Map a message onto SendEmail parameters.

    Recipient arguments accept a single address or a list of addresses.
    """
    require_arguments(sender=sender, to=to, subject=subject, html_body=html_body)

    parameters = {"Source": sender}
    parameters.update(member_parameters("Destination.ToAddresses", to))
    parameters.update(member_parameters("Destination.CcAddresses", cc))
    parameters.update(member_parameters("Destination.BccAddresses", bcc))
    parameters["Message.Subject.Data"] = subject
    parameters["Message.Body.Html.Data"] = html_body
    parameters.update(member_parameters("ReplyToAddresses", reply_to))
    return parameters


def send_email(
    client: 'SigV4HttpClient',
    sender: str,
    to: Recipients,
    subject: str,
    html_body: str,
    cc: Recipients = None,
    bcc: Recipients = None,
    reply_to: Recipients = None,
    region: Optional[str] = None,
    timestamp: Optional[str] = None
):
    """
    Send an HTML email through SES.

    Credentials come from the client's configuration; region defaults to it.

    Returns:
        requests.Response: Response from the service
    """
    config = client.config
    parameters = build_send_email_parameters(sender, to, subject, html_body, cc, bcc, reply_to)

    request = new_http_request(
        action="SendEmail",
        parameters=parameters,
        region=region or config.region,
        access_key_id=config.access_key_id,
        secret_access_key=config.secret_access_key,
        timestamp=timestamp,
    )
    logger.info(f"Sending email from {sender} via SES")
    return client.send(request)
