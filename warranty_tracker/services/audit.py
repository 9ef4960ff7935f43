import logging
from datetime import datetime
from typing import List, Optional

from ..db import SessionLocal
from ..db_models import AuditLogDB

logger = logging.getLogger(__name__)

MAX_DETAIL_LEN = 2000


def _trim(detail: str) -> str:
    if len(detail) > MAX_DETAIL_LEN:
        return detail[:MAX_DETAIL_LEN] + "...(truncated)"
    return detail


def log_action(action: str, detail: str = "", user_id: Optional[str] = None) -> None:
    """Record an action in the audit trail, attributed to the backend user id when known."""
    logger.info("audit %s user=%s %s", action, user_id or "-", detail)
    with SessionLocal() as db:
        db.add(AuditLogDB(action=action, user_id=user_id, detail=_trim(detail), created_at=datetime.utcnow()))
        db.commit()


def recent_actions(
    action: Optional[str] = None,
    user_id: Optional[str] = None,
    limit: int = 50,
) -> List[AuditLogDB]:
    with SessionLocal() as db:
        q = db.query(AuditLogDB)
        if action:
            q = q.filter(AuditLogDB.action == action)
        if user_id:
            q = q.filter(AuditLogDB.user_id == user_id)
        return q.order_by(AuditLogDB.id.desc()).limit(limit).all()
