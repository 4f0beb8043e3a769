from datetime import datetime, timezone
from typing import Set

import structlog
from fastapi import APIRouter, Depends, HTTPException

from ..schemas.auth import LoginRequest
from ..schemas.users import User
from ..store.app_store import AppStore
from .security import (
    PasswordBook,
    create_access_token,
    get_current_user,
    get_passwords,
    get_revoked,
    get_store,
    get_token_payload,
)


router = APIRouter(tags=["auth"])
log = structlog.get_logger(__name__)


@router.post("/login")
def login(
    req: LoginRequest,
    store: AppStore = Depends(get_store),
    passwords: PasswordBook = Depends(get_passwords),
):
    email = req.email.strip().lower()
    user = next((u for u in store.users if str(u.email).lower() == email), None)
    if not user or not user.is_active or not passwords.verify(user.id, req.password):
        log.info("login_failed", email=email)
        raise HTTPException(status_code=401, detail="Invalid email or password")
    token = create_access_token(user.id, roles=[user.role])
    with store.acting_as(user):
        store.update_user(user.id, {"lastLogin": datetime.now(timezone.utc)})
    user = store.find("users", user.id) or user
    log.info("login_succeeded", user_id=user.id)
    return {"token": token, "user": user.to_wire()}


@router.get("/me")
def me(user: User = Depends(get_current_user)):
    return user.to_wire()


@router.post("/logout")
def logout(
    user: User = Depends(get_current_user),
    payload: dict = Depends(get_token_payload),
    revoked: Set[str] = Depends(get_revoked),
):
    revoked.add(payload["jti"])
    log.info("logout", user_id=user.id)
    return {"status": "ok"}
