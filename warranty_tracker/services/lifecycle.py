from datetime import date
from typing import Optional

from ..models import ClassifiedWarranty, LifecycleState, Warranty
from .dates import DateLike, as_date, days_between, parse_date

EXPIRING_SOON_DAYS = 30


def _today(now: Optional[DateLike]) -> date:
    return as_date(now) if now is not None else date.today()


def days_remaining(warranty_end_date: Optional[str], now: Optional[DateLike] = None) -> Optional[int]:
    end = parse_date(warranty_end_date)
    if end is None:
        return None
    return days_between(_today(now), end)


def classify(warranty_end_date: Optional[str], now: Optional[DateLike] = None) -> LifecycleState:
    """
    Lifecycle state for a warranty end date. A missing or unparseable date is
    `unknown`, never `expired`.
    """
    remaining = days_remaining(warranty_end_date, now)
    if remaining is None:
        return LifecycleState.unknown
    if remaining < 0:
        return LifecycleState.expired
    if remaining <= EXPIRING_SOON_DAYS:
        return LifecycleState.expiring_soon
    return LifecycleState.active


def badge_label(state: LifecycleState, remaining: Optional[int], warranty_end_date: Optional[str]) -> str:
    if state == LifecycleState.expired:
        return "Expired"
    if state in (LifecycleState.expiring_soon, LifecycleState.active) and remaining is not None:
        return f"Expires in {remaining}d"
    end = parse_date(warranty_end_date)
    return "Ends " + (end.strftime("%b %d, %Y") if end else "N/A")


def classify_warranty(warranty: Warranty, now: Optional[DateLike] = None) -> ClassifiedWarranty:
    today = _today(now)
    remaining = days_remaining(warranty.warranty_end_date, today)
    state = classify(warranty.warranty_end_date, today)
    return ClassifiedWarranty(
        **warranty.model_dump(),
        status=state,
        days_remaining=remaining,
        badge=badge_label(state, remaining, warranty.warranty_end_date),
    )
