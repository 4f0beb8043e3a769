from typing import Optional

import structlog
from fastapi import APIRouter, Body, Depends, HTTPException

from ..auth.security import PasswordBook, get_current_user, get_passwords, get_store, require_roles
from ..schemas.users import User
from ..store.app_store import AppStore
from .results import found, unwrap


router = APIRouter(prefix="/users", tags=["users"])
log = structlog.get_logger(__name__)

USER_ADMINS = ("admin", "hr")
PRIVILEGED_FIELDS = frozenset({"role", "isActive", "is_active", "permissions"})


@router.get("")
def list_users(
    role: Optional[str] = None,
    department: Optional[str] = None,
    store: AppStore = Depends(get_store),
    _=Depends(get_current_user),
):
    rows = store.users
    if role:
        rows = [u for u in rows if u.role == role]
    if department:
        rows = [u for u in rows if (u.department or "").lower() == department.lower()]
    return [u.to_wire() for u in rows]


@router.get("/{user_id}")
def get_user(user_id: str, store: AppStore = Depends(get_store), _=Depends(get_current_user)):
    return found(store.find("users", user_id), "User")


@router.post("")
def create_user(
    payload: dict = Body(...),
    store: AppStore = Depends(get_store),
    passwords: PasswordBook = Depends(get_passwords),
    admin: User = Depends(require_roles(*USER_ADMINS)),
):
    password = payload.pop("password", None)
    if password is not None and len(str(password)) < 6:
        raise HTTPException(status_code=422, detail="password: must be at least 6 characters")
    with store.acting_as(admin):
        created = unwrap(store.create_user(payload), "User")
    if password is not None:
        passwords.set(created["id"], str(password))
    log.info("user_created", user_id=created["id"], by=admin.id)
    return created


@router.put("/{user_id}")
def update_user(
    user_id: str,
    updates: dict = Body(...),
    store: AppStore = Depends(get_store),
    user: User = Depends(get_current_user),
):
    # everyone may edit their own profile; only admins may touch others or change roles
    is_admin = user.role in USER_ADMINS
    if not is_admin and (user_id != user.id or PRIVILEGED_FIELDS & updates.keys()):
        raise HTTPException(status_code=403, detail="Forbidden")
    with store.acting_as(user):
        return unwrap(store.update_user(user_id, updates), "User")


@router.delete("/{user_id}")
def delete_user(
    user_id: str,
    store: AppStore = Depends(get_store),
    passwords: PasswordBook = Depends(get_passwords),
    admin: User = Depends(require_roles(*USER_ADMINS)),
):
    with store.acting_as(admin):
        unwrap(store.delete_user(user_id), "User")
    passwords.discard(user_id)
    return {"status": "ok"}
