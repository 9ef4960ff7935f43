import logging
from contextlib import asynccontextmanager
from datetime import date
from typing import List, Optional

from fastapi import Depends, FastAPI, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .deps import (
    AUTH_TOKEN_KEY,
    SESSION_COOKIE,
    SESSION_COOKIE_SECURE,
    TOKEN_COOKIE,
    USER_DATA_KEY,
    get_alert_gate,
    get_authed_backend,
    get_backend,
    get_session_store,
    get_session_user,
    init_db,
    require_session_user,
)
from .models import AuthResponse, DashboardView, User, Warranty
from .routes import products, warranties
from .services.audit import log_action
from .services.backend import ApiError, BackendClient
from .services.expiry import partition_warranties
from .services.lifecycle import classify_warranty
from .services.notifications import ExpiryAlertGate
from .storage import SessionStore

logger = logging.getLogger(__name__)


class LoginRequest(BaseModel):
    email: str
    password: str


class RegisterRequest(BaseModel):
    username: str
    email: str
    password: str


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(
    title="Warranty Tracker",
    description="Warranty dashboard, expiry classification and reminders over the warranty REST API.",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(warranties.router, prefix="/warranties", tags=["Warranties"])
app.include_router(products.router, prefix="/products", tags=["Products"])


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    if exc.status >= 500:
        logger.warning("backend error on %s: %s %s", request.url.path, exc.status, exc.message)
    status_code = exc.status if 400 <= exc.status < 600 else 502
    return JSONResponse(status_code=status_code, content={"detail": exc.message})


@app.get("/health")
def health():
    return {"status": "ok"}


def _start_session(store: SessionStore, response: Response, auth: AuthResponse) -> dict:
    store.set(AUTH_TOKEN_KEY, auth.token)
    store.set(USER_DATA_KEY, auth.user.model_dump_json(by_alias=True))
    response.set_cookie(
        key=TOKEN_COOKIE,
        value=auth.token,
        httponly=True,
        samesite="lax",
        secure=SESSION_COOKIE_SECURE,
    )
    return {
        "access_token": auth.token,
        "token_type": "bearer",
        "user": auth.user.model_dump(by_alias=True),
    }


@app.post("/auth/login")
def login(
    payload: LoginRequest,
    response: Response,
    backend: BackendClient = Depends(get_backend),
    store: SessionStore = Depends(get_session_store),
):
    auth = backend.login(payload.email, payload.password)
    log_action("login", f"email={payload.email}", user_id=auth.user.id)
    return _start_session(store, response, auth)


@app.post("/auth/register")
def register(
    payload: RegisterRequest,
    response: Response,
    backend: BackendClient = Depends(get_backend),
    store: SessionStore = Depends(get_session_store),
):
    auth = backend.register(payload.username, payload.email, payload.password)
    log_action("register", f"username={payload.username}", user_id=auth.user.id)
    return _start_session(store, response, auth)


@app.post("/auth/logout")
def logout(
    response: Response,
    store: SessionStore = Depends(get_session_store),
    user: Optional[User] = Depends(get_session_user),
):
    store.clear()
    response.delete_cookie(TOKEN_COOKIE)
    response.delete_cookie(SESSION_COOKIE)
    log_action("logout", "session cleared", user_id=user.id if user else None)
    return {"ok": True}


@app.get("/dashboard", response_model=DashboardView)
def dashboard(
    user: User = Depends(require_session_user),
    backend: BackendClient = Depends(get_authed_backend),
    gate: ExpiryAlertGate = Depends(get_alert_gate),
):
    all_warranties = backend.list_warranties()
    expiring_error = None
    try:
        backend_expiring: List[Warranty] = backend.expiring_warranties()
    except ApiError as exc:
        # the full list still renders; the expiring section shows its own error
        logger.warning("expiring warranties unavailable for user %s: %s %s", user.id, exc.status, exc.message)
        backend_expiring = []
        expiring_error = exc.message
    expiring, active = partition_warranties(all_warranties, backend_expiring)
    alert = gate.check(user.id, expiring)
    if alert:
        try:
            log_action("expiry_alert_shown", f"expiring={len(expiring)}", user_id=user.id)
        except Exception as exc:
            logger.warning("audit of expiry alert failed (ignored)", exc_info=exc)
    today = date.today()
    return DashboardView(
        expiring=[classify_warranty(w, today) for w in expiring],
        active=[classify_warranty(w, today) for w in active],
        alert=alert,
        expiring_error=expiring_error,
    )
