from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..auth.security import get_current_user, get_store, require_roles
from ..db import get_db
from ..schemas.contracts import ContractCreate, DocumentCreate
from ..schemas.files import DownloadUrlResponse, UploadUrlRequest
from ..schemas.users import User
from ..storage.provider import StorageProvider
from ..store.app_store import AppStore
from .files import claim_upload, download_path, get_storage, issue_upload_target, signed_download_url
from .results import found, unwrap


router = APIRouter(prefix="/contracts", tags=["contracts"])

CONTRACT_ADMINS = ("admin", "hr", "supervisor")


@router.get("")
def list_contracts(
    status: Optional[str] = None,
    staff_id: Optional[str] = Query(None, alias="staffId"),
    store: AppStore = Depends(get_store),
    _=Depends(get_current_user),
):
    rows = store.contracts
    if status:
        rows = [c for c in rows if c.status == status]
    if staff_id:
        rows = [c for c in rows if c.staff_id == staff_id]
    return [c.to_wire() for c in rows]


@router.post("/upload")
def document_upload_url(
    req: UploadUrlRequest,
    db: Session = Depends(get_db),
    storage: StorageProvider = Depends(get_storage),
    store: AppStore = Depends(get_store),
    _=Depends(require_roles(*CONTRACT_ADMINS)),
):
    if req.contract_id:
        found(store.find("contracts", req.contract_id), "Contract")
    return issue_upload_target(db, storage, "contracts", req.contract_id, req).to_wire()


@router.get("/{contract_id}")
def get_contract(contract_id: str, store: AppStore = Depends(get_store), _=Depends(get_current_user)):
    return found(store.find("contracts", contract_id), "Contract")


@router.post("")
def create_contract(
    payload: ContractCreate,
    store: AppStore = Depends(get_store),
    user: User = Depends(require_roles(*CONTRACT_ADMINS)),
):
    with store.acting_as(user):
        return unwrap(store.create_contract(payload), "Contract")


@router.put("/{contract_id}")
def update_contract(
    contract_id: str,
    updates: dict = Body(...),
    store: AppStore = Depends(get_store),
    user: User = Depends(require_roles(*CONTRACT_ADMINS)),
):
    with store.acting_as(user):
        return unwrap(store.update_contract(contract_id, updates), "Contract")


@router.delete("/{contract_id}")
def delete_contract(
    contract_id: str,
    store: AppStore = Depends(get_store),
    user: User = Depends(require_roles(*CONTRACT_ADMINS)),
):
    with store.acting_as(user):
        unwrap(store.delete_contract(contract_id), "Contract")
    return {"status": "ok"}


@router.post("/{contract_id}/documents")
def register_document(
    contract_id: str,
    payload: DocumentCreate,
    db: Session = Depends(get_db),
    store: AppStore = Depends(get_store),
    user: User = Depends(require_roles(*CONTRACT_ADMINS)),
):
    found(store.find("contracts", contract_id), "Contract")
    fo = claim_upload(db, payload.file_id, "contracts", contract_id)
    meta = payload.model_copy(update={"url": download_path(fo.id), "size": fo.size_bytes or payload.size})
    with store.acting_as(user):
        return unwrap(store.add_contract_document(contract_id, meta), "Contract")


@router.get("/{contract_id}/documents/{document_id}/download")
def document_download_url(
    contract_id: str,
    document_id: str,
    db: Session = Depends(get_db),
    storage: StorageProvider = Depends(get_storage),
    store: AppStore = Depends(get_store),
    _=Depends(get_current_user),
):
    contract = store.find("contracts", contract_id)
    document = next((d for d in contract.documents if d.id == document_id), None) if contract else None
    if document is None:
        raise HTTPException(status_code=404, detail="Document not found")
    if document.file_id:
        url = signed_download_url(db, storage, document.file_id)
    elif document.url:
        # seeded documents carry a static URL and no stored bytes
        url = document.url
    else:
        raise HTTPException(status_code=404, detail="Document has no file")
    return DownloadUrlResponse(download_url=url).to_wire()
