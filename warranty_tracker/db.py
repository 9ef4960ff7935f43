import os
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

DATA_DIR = Path(__file__).resolve().parents[1] / "data"


def _database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    # the bundled SQLite file lives under data/, which a fresh checkout lacks
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{DATA_DIR / 'tracker.db'}"


DB_URL = _database_url()
connect_args = {"check_same_thread": False} if DB_URL.startswith("sqlite") else {}


class Base(DeclarativeBase):
    pass


engine = create_engine(DB_URL, echo=False, future=True, connect_args=connect_args)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)
