from typing import Optional

from pydantic import Field

from .common import CamelModel


class UploadUrlRequest(CamelModel):
    file_name: str = Field(min_length=1)
    file_type: str = "application/octet-stream"
    file_size: int = Field(ge=0)
    ticket_id: Optional[str] = None
    contract_id: Optional[str] = None


class UploadUrlResponse(CamelModel):
    upload_url: str
    file_id: str


class DownloadUrlResponse(CamelModel):
    download_url: str
