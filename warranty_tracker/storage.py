from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, Optional
from uuid import uuid4

from sqlalchemy import delete, select

from .db import SessionLocal
from .db_models import SessionValueDB


def generate_id(prefix: str) -> str:
    return f"{prefix}_{uuid4().hex}"


class SessionStore(ABC):
    """Key-value storage scoped to one browser session."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def clear(self) -> None:
        ...


class MemorySessionStore(SessionStore):
    def __init__(self) -> None:
        self.values: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value

    def clear(self) -> None:
        self.values.clear()


class SqlSessionStore(SessionStore):
    def __init__(self, session_id: str, session_factory=SessionLocal) -> None:
        self.session_id = session_id
        self._session_factory = session_factory

    def get(self, key: str) -> Optional[str]:
        with self._session_factory() as db:
            stmt = select(SessionValueDB.value).where(
                SessionValueDB.session_id == self.session_id, SessionValueDB.key == key
            )
            return db.execute(stmt).scalars().first()

    def set(self, key: str, value: str) -> None:
        with self._session_factory() as db:
            row = (
                db.query(SessionValueDB)
                .filter_by(session_id=self.session_id, key=key)
                .first()
            )
            if row is None:
                row = SessionValueDB(session_id=self.session_id, key=key)
            row.value = value
            row.updated_at = datetime.utcnow()
            db.add(row)
            db.commit()

    def clear(self) -> None:
        with self._session_factory() as db:
            db.execute(delete(SessionValueDB).where(SessionValueDB.session_id == self.session_id))
            db.commit()
