import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Set

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.context import CryptContext

from ..config import settings
from ..schemas.users import User
from ..store.app_store import AppStore


pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
http_bearer = HTTPBearer(auto_error=False)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        return False


class PasswordBook:
    """Password hashes per user id; accounts without an entry use the seed password."""

    def __init__(self, seed_password: str):
        self._seed_hash = get_password_hash(seed_password)
        self._hashes: Dict[str, str] = {}

    def set(self, user_id: str, password: str) -> None:
        self._hashes[user_id] = get_password_hash(password)

    def discard(self, user_id: str) -> None:
        self._hashes.pop(user_id, None)

    def verify(self, user_id: str, password: str) -> bool:
        return verify_password(password, self._hashes.get(user_id, self._seed_hash))


def _create_token(sub: str, ttl_seconds: int, extra: Optional[dict] = None) -> str:
    now = datetime.now(tz=timezone.utc)
    payload = {
        "sub": sub,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(seconds=ttl_seconds)).timestamp()),
        "jti": str(uuid.uuid4()),
    }
    if extra:
        payload.update(extra)
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def create_access_token(user_id: str, roles: Optional[List[str]] = None) -> str:
    return _create_token(user_id, settings.jwt_ttl_seconds, extra={"roles": roles or [], "type": "access"})


def create_file_token(key: str, purpose: str, ttl_seconds: Optional[int] = None) -> str:
    """Signature for a pre-authorized storage URL; ``purpose`` is 'upload' or 'download'."""
    return _create_token(key, ttl_seconds or settings.upload_ttl_seconds, extra={"type": purpose})


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")


def verify_file_token(token: Optional[str], key: str, purpose: str) -> None:
    # 403 rather than 401: a bad storage signature says nothing about the session
    if not token:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Missing signature")
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid or expired signature")
    if payload.get("type") != purpose or payload.get("sub") != key:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Signature does not match this file")


def get_store(request: Request) -> AppStore:
    return request.app.state.store


def get_revoked(request: Request) -> Set[str]:
    return request.app.state.revoked_tokens


def get_passwords(request: Request) -> PasswordBook:
    return request.app.state.passwords


def get_token_payload(creds: Optional[HTTPAuthorizationCredentials] = Depends(http_bearer)) -> dict:
    if creds is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    payload = decode_token(creds.credentials)
    if payload.get("type") != "access":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return payload


def get_current_user(
    payload: dict = Depends(get_token_payload),
    store: AppStore = Depends(get_store),
    revoked: Set[str] = Depends(get_revoked),
) -> User:
    if payload.get("jti") in revoked:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Session ended")
    user = store.find("users", str(payload.get("sub")))
    if user is None or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not active")
    return user


def require_roles(*allowed_roles: str):
    """Require any one of the given roles."""
    def _dep(user: User = Depends(get_current_user)):
        if user.role not in allowed_roles:
            raise HTTPException(status_code=403, detail="Forbidden")
        return user

    return _dep
