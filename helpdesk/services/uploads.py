"""
Three-step binary upload shared by ticket attachments and contract documents:
request a signed target, PUT the bytes, then register the metadata.
"""
from typing import Any, Callable

import structlog

from ..errors import UploadFailed
from ..schemas.files import UploadUrlRequest, UploadUrlResponse
from .api_client import ApiClient


log = structlog.get_logger(__name__)


def upload_then_register(
    client: ApiClient,
    target_path: str,
    target: UploadUrlRequest,
    data: bytes,
    register: Callable[[UploadUrlResponse], Any],
) -> Any:
    issued = UploadUrlResponse.model_validate(client.post(target_path, target.to_wire()))
    if not client.upload_binary(issued.upload_url, data, target.file_type):
        # metadata must never point at bytes that are not there
        log.warning("upload_aborted", file_name=target.file_name, file_id=issued.file_id)
        raise UploadFailed(f"File upload failed: {target.file_name}")
    return register(issued)
