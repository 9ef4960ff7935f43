import logging
import os
from typing import Optional

from fastapi import Cookie, Depends, Header, HTTPException, Response
from pydantic import ValidationError

from .db import engine
from .db_models import Base
from .models import User
from .services.backend import BackendClient
from .services.notifications import ExpiryAlertGate
from .storage import SessionStore, SqlSessionStore, generate_id

logger = logging.getLogger(__name__)

SESSION_COOKIE = "session_id"
TOKEN_COOKIE = "access_token"
AUTH_TOKEN_KEY = "authToken"
USER_DATA_KEY = "userData"
SESSION_COOKIE_SECURE = os.getenv("SESSION_COOKIE_SECURE", "false").lower() == "true"


def get_session_id(
    response: Response,
    session_cookie: Optional[str] = Cookie(default=None, alias=SESSION_COOKIE),
) -> str:
    if session_cookie:
        return session_cookie
    session_id = generate_id("sess")
    response.set_cookie(
        key=SESSION_COOKIE,
        value=session_id,
        httponly=True,
        samesite="lax",
        secure=SESSION_COOKIE_SECURE,
    )
    return session_id


def get_session_store(session_id: str = Depends(get_session_id)) -> SessionStore:
    return SqlSessionStore(session_id)


def get_backend():
    client = BackendClient()
    try:
        yield client
    finally:
        client.session.close()


def get_token(
    authorization: Optional[str] = Header(default=None),
    token_cookie: Optional[str] = Cookie(default=None, alias=TOKEN_COOKIE),
    store: SessionStore = Depends(get_session_store),
) -> Optional[str]:
    if authorization and authorization.lower().startswith("bearer "):
        return authorization.split(" ", 1)[1]
    if token_cookie:
        return token_cookie
    return store.get(AUTH_TOKEN_KEY)


def require_token(token: Optional[str] = Depends(get_token)) -> str:
    if not token:
        raise HTTPException(status_code=401, detail="Missing token")
    return token


def get_authed_backend(
    token: str = Depends(require_token),
    backend: BackendClient = Depends(get_backend),
) -> BackendClient:
    return backend.with_token(token)


def get_session_user(store: SessionStore = Depends(get_session_store)) -> Optional[User]:
    raw = store.get(USER_DATA_KEY)
    if not raw:
        return None
    try:
        return User.model_validate_json(raw)
    except ValidationError:
        logger.warning("discarding unreadable user data in session")
        return None


def require_session_user(user: Optional[User] = Depends(get_session_user)) -> User:
    if user is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


def get_alert_gate(store: SessionStore = Depends(get_session_store)) -> ExpiryAlertGate:
    return ExpiryAlertGate(store)


def init_db():
    Base.metadata.create_all(bind=engine)
