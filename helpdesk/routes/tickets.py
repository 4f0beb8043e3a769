from typing import Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from ..auth.security import get_current_user, get_store
from ..db import get_db
from ..schemas.files import UploadUrlRequest
from ..schemas.tickets import AttachmentCreate, CommentCreate, TicketCreate
from ..schemas.users import User
from ..storage.provider import StorageProvider
from ..store.app_store import AppStore
from .files import claim_upload, download_path, get_storage, issue_upload_target
from .results import found, unwrap


router = APIRouter(prefix="/tickets", tags=["tickets"])


@router.get("")
def list_tickets(
    status: Optional[str] = None,
    assignee_id: Optional[str] = Query(None, alias="assigneeId"),
    store: AppStore = Depends(get_store),
    _=Depends(get_current_user),
):
    rows = store.tickets
    if status:
        rows = [t for t in rows if t.status == status]
    if assignee_id:
        rows = [t for t in rows if t.assigned_to is not None and t.assigned_to.id == assignee_id]
    return [t.to_wire() for t in rows]


@router.post("/attachments/upload-url")
def attachment_upload_url(
    req: UploadUrlRequest,
    db: Session = Depends(get_db),
    storage: StorageProvider = Depends(get_storage),
    store: AppStore = Depends(get_store),
    _=Depends(get_current_user),
):
    if req.ticket_id:
        found(store.find("tickets", req.ticket_id), "Ticket")
    return issue_upload_target(db, storage, "tickets", req.ticket_id, req).to_wire()


@router.get("/{ticket_id}")
def get_ticket(ticket_id: str, store: AppStore = Depends(get_store), _=Depends(get_current_user)):
    return found(store.find("tickets", ticket_id), "Ticket")


@router.post("")
def create_ticket(payload: TicketCreate, store: AppStore = Depends(get_store), user: User = Depends(get_current_user)):
    with store.acting_as(user):
        return unwrap(store.create_ticket(payload), "Ticket")


@router.put("/{ticket_id}")
def update_ticket(
    ticket_id: str,
    updates: dict = Body(...),
    store: AppStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    with store.acting_as(user):
        return unwrap(store.update_ticket(ticket_id, updates), "Ticket")


@router.delete("/{ticket_id}")
def delete_ticket(ticket_id: str, store: AppStore = Depends(get_store), user: User = Depends(get_current_user)):
    with store.acting_as(user):
        unwrap(store.delete_ticket(ticket_id), "Ticket")
    return {"status": "ok"}


@router.post("/{ticket_id}/comments")
def add_comment(
    ticket_id: str,
    payload: CommentCreate,
    store: AppStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    with store.acting_as(user):
        return unwrap(store.add_comment(ticket_id, payload.content), "Ticket")


@router.post("/{ticket_id}/attachments")
def register_attachment(
    ticket_id: str,
    payload: AttachmentCreate,
    db: Session = Depends(get_db),
    store: AppStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    found(store.find("tickets", ticket_id), "Ticket")
    fo = claim_upload(db, payload.file_id, "tickets", ticket_id)
    meta = payload.model_copy(update={"url": download_path(fo.id), "file_size": fo.size_bytes or payload.file_size})
    with store.acting_as(user):
        return unwrap(store.add_attachment(ticket_id, meta), "Ticket")
