"""
Request builders for the object storage service (S3 REST API)

Covers signed requests, presigned GET URLs and the object operations built on
them: put, copy, and multipart upload.
"""

import re
import html
import time
import logging
from typing import Dict, Optional, TYPE_CHECKING
from dataclasses import dataclass, field

from ..exceptions import ServerCommunicationError
from ..signing.types import (
    SignableRequest,
    SigningContext,
    QueryArgs,
    RequestBody,
    UNSIGNED_PAYLOAD,
    InvalidArgumentError,
    InvalidOperationError,
    MissingArgumentError,
    SigningErrorCodes,
)
from ..signing.sigv4_signer import SigV4Signer
from ..signing.utils import (
    percent_encode,
    serialize_query,
    base64_md5,
    generate_timestamp,
    format_http_date,
)
from .common import ServiceRequest, build_https_url, require_arguments, forbid_arguments

if TYPE_CHECKING:
    from ..http_client import SigV4HttpClient

logger = logging.getLogger(__name__)

SERVICE = "s3"


class StorageClass:
    """Storage class header values"""
    STANDARD = "STANDARD"
    STANDARD_IA = "STANDARD_IA"
    REDUCED_REDUNDANCY = "REDUCED_REDUNDANCY"


_UPLOAD_ID_RE = re.compile(r"<UploadId>(.*?)</UploadId>", re.DOTALL)


def construct_host(bucket: Optional[str], region: str, use_virtual_host: bool = False) -> str:
    """
    Endpoint host for a bucket.

    Virtual-host URLs put the bucket in the host name; path-style URLs share
    one host per region.
    """
    if use_virtual_host and bucket:
        return f"{bucket}.s3-{region}.amazonaws.com"
    if region == "us-east-1":
        return "s3.amazonaws.com"
    return f"s3-{region}.amazonaws.com"


def construct_path(path: str, bucket: Optional[str], use_virtual_host: bool = False) -> str:
    """Unescaped request path, prefixed with the bucket for path-style URLs."""
    if use_virtual_host or not bucket:
        return path
    return f"/{bucket}{path}"


def _check_path(path: str) -> None:
    if not path.startswith('/'):
        raise InvalidArgumentError(
            "The path needs to start with a slash",
            SigningErrorCodes.INVALID_PATH,
            {"path": path}
        )


def new_signed_url(
    path: str,
    expires: int,
    region: str,
    access_key_id: str,
    secret_access_key: str,
    method: str = "GET",
    args: Optional[QueryArgs] = None,
    bucket: Optional[str] = None,
    use_virtual_host: bool = False,
    timestamp: Optional[str] = None,
    body: RequestBody = None,
    md5: Optional[bool] = None,
    content_type: Optional[str] = None,
    storage_class: Optional[str] = None
) -> str:
    """
    Build a presigned GET URL.

    Args:
        path: Object key path, starting with '/'
        expires: Seconds the URL stays valid after timestamp
        region: Region identifier
        access_key_id: Access key id
        secret_access_key: Secret access key
        method: Must be "GET"
        args: Extra query arguments (e.g. response-* overrides)
        bucket: Bucket name (None for service-level operations)
        use_virtual_host: Put the bucket in the host name
        timestamp: Optional pinned timestamp
        body, md5, content_type, storage_class: Not supported for URLs

    Returns:
        str: Presigned https URL

    Raises:
        MissingArgumentError: If a required argument is missing
        UnsupportedArgumentCombinationError: If an argument a URL cannot carry is supplied
        InvalidArgumentError: If the path does not start with '/'
    """
    require_arguments(
        path=path,
        expires=expires,
        region=region,
        access_key_id=access_key_id,
        secret_access_key=secret_access_key,
    )
    forbid_arguments(
        "Details were provided for a new signed URL that are not possible to use",
        method=None if method == "GET" else method,
        body=body,
        md5=md5,
        content_type=content_type,
        storage_class=storage_class,
    )
    _check_path(path)

    host = construct_host(bucket, region, use_virtual_host)
    unescaped_path = construct_path(path, bucket, use_virtual_host)

    query_args = SigV4Signer(
        SignableRequest(
            method="GET",
            host=host,
            path=unescaped_path,
            args=args,
            payload_hash=UNSIGNED_PAYLOAD,
        ),
        SigningContext(
            service=SERVICE,
            region=region,
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            timestamp=timestamp or generate_timestamp(),
            expires=expires,
        ),
    ).to_presigned_query_args()

    return build_https_url(
        host,
        percent_encode(unescaped_path, encode_slash=False),
        serialize_query(query_args),
    )


def new_http_request(
    method: str,
    path: str,
    region: str,
    access_key_id: str,
    secret_access_key: str,
    args: Optional[QueryArgs] = None,
    body: RequestBody = None,
    md5: bool = False,
    content_type: Optional[str] = None,
    copy_source: Optional[str] = None,
    storage_class: Optional[str] = None,
    bucket: Optional[str] = None,
    use_virtual_host: bool = False,
    timestamp: Optional[str] = None
) -> ServiceRequest:
    """
    Build a signed S3 REST request.

    The payload is not hashed (x-amz-content-sha256 is UNSIGNED-PAYLOAD); set
    md5=True to have the body protected by a Content-MD5 header instead.

    Raises:
        MissingArgumentError: If a required argument is missing, or md5 is
            requested without a body
        InvalidArgumentError: If the path does not start with '/'
    """
    require_arguments(
        method=method,
        path=path,
        region=region,
        access_key_id=access_key_id,
        secret_access_key=secret_access_key,
    )
    _check_path(path)

    if md5 and body is None:
        raise MissingArgumentError(
            "MD5 required but no body provided",
            SigningErrorCodes.MISSING_ARGUMENT,
            {"argument": "body"}
        )

    timestamp = timestamp or generate_timestamp()
    host = construct_host(bucket, region, use_virtual_host)
    unescaped_path = construct_path(path, bucket, use_virtual_host)

    optional_headers = {
        "Content-Type": content_type,
        "Content-MD5": base64_md5(body) if md5 else None,
        "x-amz-storage-class": storage_class,
        "x-amz-copy-source": copy_source,
    }
    headers = {name: value for name, value in optional_headers.items() if value is not None}
    headers["x-amz-date"] = timestamp
    headers["x-amz-content-sha256"] = UNSIGNED_PAYLOAD

    signer = SigV4Signer(
        SignableRequest(
            method=method,
            host=host,
            path=unescaped_path,
            args=args,
            headers=headers,
            body=body,
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

    url = build_https_url(
        host,
        percent_encode(unescaped_path, encode_slash=False),
        serialize_query(args),
    )
    return ServiceRequest(method=method, url=url, headers=headers, body=body)


def get_object_signed_url(
    file_key: str,
    bucket: str,
    region: str,
    access_key_id: str,
    secret_access_key: str,
    expires: int,
    response_file_name: Optional[str] = None,
    response_content_type: Optional[str] = None,
    response_cache_time: int = 0,
    timestamp: Optional[str] = None,
    now: Optional[float] = None
) -> str:
    """
    Presigned download URL with response header overrides.

    Args:
        file_key: Object key, starting with '/'
        bucket: Bucket name
        response_file_name: Offer the download under this file name
        response_content_type: Content-Type the response should carry
        response_cache_time: Seconds the response may be cached; 0 disables caching
        now: Unix time used for the response Expires date (defaults to now)

    Returns:
        str: Presigned https URL
    """
    query_args: QueryArgs = {}
    if response_cache_time < 1:
        query_args["response-expires"] = 0
        query_args["response-cache-control"] = "no-cache, no-store, must-revalidate"
    else:
        now = time.time() if now is None else now
        query_args["response-expires"] = format_http_date(now + response_cache_time)
        query_args["response-cache-control"] = f"max-age={response_cache_time}"

    if response_content_type:
        query_args["response-content-type"] = response_content_type

    if response_file_name:
        query_args["response-content-disposition"] = (
            f'attachment; filename="{percent_encode(response_file_name)}"'
        )

    return new_signed_url(
        path=file_key,
        expires=expires,
        region=region,
        access_key_id=access_key_id,
        secret_access_key=secret_access_key,
        args=query_args,
        bucket=bucket,
        timestamp=timestamp,
    )


def put_object(
    client: 'SigV4HttpClient',
    file_key: str,
    data: RequestBody,
    bucket: str,
    content_type: Optional[str] = None,
    storage_class: Optional[str] = None,
    region: Optional[str] = None
):
    """
    Upload an object with a Content-MD5 checksum.

    Returns:
        requests.Response: Response from the service
    """
    require_arguments(file_key=file_key, data=data, bucket=bucket)
    config = client.config

    request = new_http_request(
        method="PUT",
        path=file_key,
        body=data,
        md5=True,
        content_type=content_type,
        storage_class=storage_class,
        bucket=bucket,
        region=region or config.region,
        access_key_id=config.access_key_id,
        secret_access_key=config.secret_access_key,
        use_virtual_host=config.use_virtual_host,
    )
    return client.send(request)


def copy_object(
    client: 'SigV4HttpClient',
    from_bucket: str,
    from_file_key: str,
    to_bucket: str,
    to_file_key: str,
    region: Optional[str] = None
):
    """
    Copy an object server-side.

    Raises:
        InvalidArgumentError: If the source key does not start with '/'
        ServerCommunicationError: If the response does not confirm the copy
    """
    require_arguments(
        from_bucket=from_bucket,
        from_file_key=from_file_key,
        to_bucket=to_bucket,
        to_file_key=to_file_key,
    )
    _check_path(from_file_key)
    config = client.config

    request = new_http_request(
        method="PUT",
        path=to_file_key,
        bucket=to_bucket,
        copy_source=percent_encode(f"/{from_bucket}{from_file_key}", encode_slash=False),
        region=region or config.region,
        access_key_id=config.access_key_id,
        secret_access_key=config.secret_access_key,
        use_virtual_host=config.use_virtual_host,
    )

    response = client.send(request)
    # S3 can answer 200 and still report a failure in the body
    if "<CopyObjectResult>" not in response.text:
        raise ServerCommunicationError(
            f"Copy operation failed with response: {response.text}",
            "COPY_FAILED",
            http_status=response.status_code
        )
    return response


@dataclass
class MultipartUploadState:
    """
    Progress of a multipart upload

    Attributes:
        upload_id: Upload id assigned by the service
        next_part_number: Number the next uploaded part receives
        etags: ETag per uploaded part number
        ended: True once complete() was called
    """
    upload_id: str
    next_part_number: int = 1
    etags: Dict[int, str] = field(default_factory=dict)
    ended: bool = False


class MultipartUpload:
    """
    Multipart upload of one object.

    Call start(), then upload_next_part() for each chunk in order, then
    complete().
    """

    def __init__(
        self,
        client: 'SigV4HttpClient',
        file_key: str,
        bucket: str,
        content_type: Optional[str] = None,
        storage_class: Optional[str] = None,
        region: Optional[str] = None
    ):
        require_arguments(file_key=file_key, bucket=bucket)
        self.client = client
        self.file_key = file_key
        self.bucket = bucket
        self.content_type = content_type
        self.storage_class = storage_class
        self.region = region or client.config.region
        self.state: Optional[MultipartUploadState] = None

    def _request(self, method: str, **kwargs) -> ServiceRequest:
        config = self.client.config
        return new_http_request(
            method=method,
            path=self.file_key,
            bucket=self.bucket,
            region=self.region,
            access_key_id=config.access_key_id,
            secret_access_key=config.secret_access_key,
            use_virtual_host=config.use_virtual_host,
            **kwargs
        )

    def start(self) -> MultipartUploadState:
        """
        Initiate the upload and record its upload id.

        Raises:
            ServerCommunicationError: If the response carries no upload id
        """
        request = self._request(
            "POST",
            args={"uploads": True},
            content_type=self.content_type,
            storage_class=self.storage_class,
        )
        response = self.client.send(request)

        match = _UPLOAD_ID_RE.search(response.text)
        if not match:
            raise ServerCommunicationError(
                f"Invalid upload ID in response: {response.text}",
                "INVALID_UPLOAD_ID",
                http_status=response.status_code
            )

        self.state = MultipartUploadState(upload_id=match.group(1))
        logger.info(f"Started multipart upload {self.state.upload_id} for {self.file_key}")
        return self.state

    def _active_state(self) -> MultipartUploadState:
        if self.state is None:
            raise InvalidOperationError(
                "Multipart upload has not been started",
                SigningErrorCodes.UPLOAD_NOT_STARTED
            )
        if self.state.ended:
            raise InvalidOperationError(
                "Upload already ended",
                SigningErrorCodes.UPLOAD_ALREADY_ENDED,
                {"upload_id": self.state.upload_id}
            )
        return self.state

    def upload_next_part(self, data: RequestBody) -> int:
        """
        Upload the next part.

        Returns:
            int: Part number assigned to the data

        Raises:
            InvalidOperationError: If the upload was not started or already ended
            ServerCommunicationError: If the response has no ETag header
        """
        state = self._active_state()
        part_number = state.next_part_number

        request = self._request(
            "PUT",
            args={"partNumber": part_number, "uploadId": state.upload_id},
            body=data,
            md5=True,
        )
        response = self.client.send(request)

        etag = response.headers.get("ETag")
        if not etag:
            raise ServerCommunicationError(
                "Missing ETag header",
                "MISSING_ETAG",
                http_status=response.status_code
            )

        state.etags[part_number] = etag
        state.next_part_number = part_number + 1
        logger.debug(f"Uploaded part {part_number} of {state.upload_id}")
        return part_number

    def complete_request_body(self) -> str:
        """XML body listing every uploaded part in part-number order."""
        parts = ''.join(
            f'<Part><PartNumber>{number}</PartNumber>'
            f'<ETag>"{html.escape(etag.strip(chr(34)))}"</ETag></Part>'
            for number, etag in sorted(self.state.etags.items())
        )
        return f"<CompleteMultipartUpload>{parts}</CompleteMultipartUpload>"

    def complete(self):
        """
        Complete the upload.

        Returns:
            requests.Response: Response from the service

        Raises:
            InvalidOperationError: If the upload was not started or already ended
            ServerCommunicationError: If the service did not confirm completion
        """
        state = self._active_state()
        state.ended = True

        request = self._request(
            "POST",
            args={"uploadId": state.upload_id},
            body=self.complete_request_body(),
        )
        response = self.client.send(request)

        # A 200 status can still carry a failure
        if "<CompleteMultipartUploadResult" not in response.text:
            raise ServerCommunicationError(
                "Failed to complete multipart upload",
                "MULTIPART_COMPLETE_FAILED",
                http_status=response.status_code
            )

        logger.info(f"Completed multipart upload {state.upload_id} with {len(state.etags)} parts")
        return response
