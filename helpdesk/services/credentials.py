"""
Durable credential slot.
A single bearer token is the whole authentication state of a client process.
"""
from typing import Optional

from sqlalchemy.orm import sessionmaker

from ..config import settings
from ..db import engine as default_engine, init_db
from ..models.models import LocalStorageEntry


class LocalStorage:
    """Named string slots persisted in the local_storage table."""

    def __init__(self, engine=None):
        bind = engine or default_engine
        init_db(bind)
        self._sessions = sessionmaker(bind=bind, autoflush=False, autocommit=False, future=True)

    def get_item(self, key: str) -> Optional[str]:
        with self._sessions() as db:
            row = db.get(LocalStorageEntry, key)
            return row.value if row else None

    def set_item(self, key: str, value: str) -> None:
        with self._sessions() as db:
            row = db.get(LocalStorageEntry, key)
            if row is None:
                db.add(LocalStorageEntry(key=key, value=value))
            else:
                row.value = value
            db.commit()

    def remove_item(self, key: str) -> None:
        with self._sessions() as db:
            row = db.get(LocalStorageEntry, key)
            if row is not None:
                db.delete(row)
                db.commit()


class CredentialStore:
    def __init__(self, storage: Optional[LocalStorage] = None, key: Optional[str] = None):
        self._storage = storage or LocalStorage()
        self.key = key or settings.auth_token_key

    def get_token(self) -> Optional[str]:
        return self._storage.get_item(self.key)

    def set_token(self, token: str) -> None:
        self._storage.set_item(self.key, token)

    def clear_token(self) -> None:
        self._storage.remove_item(self.key)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.get_token())
