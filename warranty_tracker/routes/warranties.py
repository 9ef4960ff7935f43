from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends

from ..deps import get_authed_backend, get_session_user
from ..models import ClassifiedWarranty, User, WarrantyCreate
from ..services.audit import log_action
from ..services.backend import BackendClient
from ..services.lifecycle import classify_warranty

router = APIRouter()


@router.get("", response_model=List[ClassifiedWarranty])
def list_warranties(
    page: int | None = None,
    limit: int | None = None,
    search: str | None = None,
    category: str | None = None,
    status: str | None = None,
    backend: BackendClient = Depends(get_authed_backend),
):
    today = date.today()
    items = backend.list_warranties(page=page, limit=limit, search=search, category=category, status=status)
    return [classify_warranty(w, today) for w in items]


@router.get("/expiring", response_model=List[ClassifiedWarranty])
def list_expiring(backend: BackendClient = Depends(get_authed_backend)):
    today = date.today()
    return [classify_warranty(w, today) for w in backend.expiring_warranties()]


@router.post("", response_model=ClassifiedWarranty, status_code=201)
def create_warranty(
    payload: WarrantyCreate,
    backend: BackendClient = Depends(get_authed_backend),
    user: Optional[User] = Depends(get_session_user),
):
    created = backend.create_warranty(payload)
    log_action("warranty_create", f"warranty={created.id}", user_id=user.id if user else None)
    return classify_warranty(created)


@router.get("/{warranty_id}", response_model=ClassifiedWarranty)
def get_warranty(warranty_id: str, backend: BackendClient = Depends(get_authed_backend)):
    return classify_warranty(backend.get_warranty(warranty_id))


@router.put("/{warranty_id}", response_model=ClassifiedWarranty)
def update_warranty(
    warranty_id: str,
    payload: WarrantyCreate,
    backend: BackendClient = Depends(get_authed_backend),
    user: Optional[User] = Depends(get_session_user),
):
    updated = backend.update_warranty(warranty_id, payload)
    log_action("warranty_update", f"warranty={warranty_id}", user_id=user.id if user else None)
    return classify_warranty(updated)


@router.delete("/{warranty_id}")
def delete_warranty(
    warranty_id: str,
    backend: BackendClient = Depends(get_authed_backend),
    user: Optional[User] = Depends(get_session_user),
):
    backend.delete_warranty(warranty_id)
    log_action("warranty_delete", f"warranty={warranty_id}", user_id=user.id if user else None)
    return {"ok": True}
