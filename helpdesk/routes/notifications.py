from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..auth.security import get_current_user, get_store
from ..schemas.users import User
from ..store.app_store import AppStore


router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("")
def list_notifications(
    limit: Optional[int] = 50,
    unread_only: Optional[bool] = Query(False, alias="unreadOnly"),
    store: AppStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    with store.acting_as(user):
        rows = store.principal_notifications
    if unread_only:
        rows = tuple(n for n in rows if not n.is_read)
    return [n.to_wire() for n in rows[:limit]]


@router.get("/unread-count")
def unread_count(store: AppStore = Depends(get_store), user: User = Depends(get_current_user)):
    with store.acting_as(user):
        return {"count": store.unread_notifications_count}


@router.post("/mark-all-read")
def mark_all_read(store: AppStore = Depends(get_store), user: User = Depends(get_current_user)):
    with store.acting_as(user):
        result = store.mark_all_notifications_as_read()
    return {"updated": len(result.record or ())}


@router.post("/{notification_id}/read")
def mark_read(notification_id: str, store: AppStore = Depends(get_store), user: User = Depends(get_current_user)):
    with store.acting_as(user):
        result = store.mark_notification_as_read(notification_id)
    if result.record is None:
        raise HTTPException(status_code=404, detail="Notification not found")
    return result.record.to_wire()
