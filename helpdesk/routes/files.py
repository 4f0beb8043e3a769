import os
import uuid
from datetime import datetime, timezone
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import Response
from slugify import slugify
from sqlalchemy.orm import Session

from ..auth.security import get_current_user, verify_file_token
from ..config import settings
from ..db import get_db
from ..models.models import FileObject
from ..schemas.files import DownloadUrlResponse, UploadUrlRequest, UploadUrlResponse
from ..storage.local_provider import LocalStorageProvider
from ..storage.provider import StorageProvider


router = APIRouter(prefix="/files", tags=["files"])
log = structlog.get_logger(__name__)


def get_storage() -> StorageProvider:
    return LocalStorageProvider()


def canonical_key(parent_kind: str, parent_id: Optional[str], original_name: str) -> str:
    today = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    safe_name = slugify(os.path.splitext(original_name)[0]) or "file"
    ext = os.path.splitext(original_name)[1].lower()
    parent = slugify(parent_id or "unassigned")
    return f"{parent_kind}/{parent}/{today}_{uuid.uuid4().hex[:8]}_{safe_name}{ext}"


def issue_upload_target(
    db: Session, storage: StorageProvider, parent_kind: str, parent_id: Optional[str], req: UploadUrlRequest
) -> UploadUrlResponse:
    """First step of an upload: reserve a key and hand out a signed PUT URL."""
    key = canonical_key(parent_kind, parent_id, req.file_name)
    fo = FileObject(
        key=key,
        original_name=req.file_name,
        content_type=req.file_type,
        size_bytes=req.file_size,
        parent_kind=parent_kind,
        parent_id=parent_id or "",
    )
    db.add(fo)
    db.commit()
    db.refresh(fo)
    url = storage.generate_upload_url(key, req.file_type, expires_s=settings.upload_ttl_seconds)
    log.info("upload_target_issued", file_id=fo.id, parent_kind=parent_kind, parent_id=parent_id)
    return UploadUrlResponse(upload_url=url, file_id=fo.id)


def claim_upload(db: Session, file_id: Optional[str], parent_kind: str, parent_id: str) -> FileObject:
    """Metadata may only be registered for bytes that actually arrived."""
    fo = db.get(FileObject, file_id) if file_id else None
    if fo is None or fo.parent_kind != parent_kind:
        raise HTTPException(status_code=404, detail="File not found")
    if fo.parent_id and fo.parent_id != parent_id:
        raise HTTPException(status_code=400, detail="File belongs to another record")
    if not fo.uploaded:
        raise HTTPException(status_code=409, detail="File has not been uploaded yet")
    return fo


def download_path(file_id: str) -> str:
    return f"{settings.public_base_url}/api/files/{file_id}/download"


@router.put("/local/{file_path:path}")
async def receive_local_upload(
    file_path: str,
    request: Request,
    token: Optional[str] = None,
    db: Session = Depends(get_db),
    storage: StorageProvider = Depends(get_storage),
):
    verify_file_token(token, file_path, "upload")
    fo = db.query(FileObject).filter(FileObject.key == file_path).first()
    if fo is None:
        raise HTTPException(status_code=404, detail="Unknown upload target")
    data = await request.body()
    storage.write(file_path, data)
    fo.uploaded = True
    fo.size_bytes = len(data)
    content_type = request.headers.get("content-type")
    if content_type:
        fo.content_type = content_type
    db.commit()
    return {"status": "ok", "fileId": fo.id}


@router.get("/local/{file_path:path}")
def serve_local_file(
    file_path: str,
    token: Optional[str] = None,
    db: Session = Depends(get_db),
    storage: StorageProvider = Depends(get_storage),
):
    verify_file_token(token, file_path, "download")
    if not storage.exists(file_path):
        raise HTTPException(status_code=404, detail="File not found")
    fo = db.query(FileObject).filter(FileObject.key == file_path).first()
    media_type = (fo.content_type if fo else None) or "application/octet-stream"
    return Response(content=storage.read(file_path), media_type=media_type)


def signed_download_url(db: Session, storage: StorageProvider, file_id: str) -> str:
    fo = db.get(FileObject, file_id)
    url = storage.get_download_url(fo.key, expires_s=settings.upload_ttl_seconds) if fo and fo.uploaded else None
    if url is None:
        raise HTTPException(status_code=404, detail="File not found")
    return url


@router.get("/{file_id}/download")
def download(
    file_id: str,
    db: Session = Depends(get_db),
    storage: StorageProvider = Depends(get_storage),
    _=Depends(get_current_user),
):
    return DownloadUrlResponse(download_url=signed_download_url(db, storage, file_id)).to_wire()
