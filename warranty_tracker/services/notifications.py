import logging
import time
from typing import Callable, List, Optional, Sequence

from ..models import ExpiryAlert, Warranty
from ..storage import SessionStore

logger = logging.getLogger(__name__)

ALERT_WINDOW_MS = 60 * 60 * 1000
ALERT_DURATION_MS = 10000
ALERT_TITLE = "Expiring Warranties Alert!"
ALERT_FOOTER = 'Check the "Expiring Soon" section for details.'
MAX_NAMED_ITEMS = 2


def now_ms() -> int:
    return int(time.time() * 1000)


def last_shown_key(user_id: str) -> str:
    return f"expiringToastLastShown_{user_id}"


def build_expiry_message(product_names: Sequence[str]) -> str:
    """
    "Your warranty for A is expiring soon." for one item, "A, B are expiring
    soon." for two, "A, B and N other item(s) are expiring soon." beyond that.
    """
    names = list(product_names)
    message = f"Your warranty for {', '.join(names[:MAX_NAMED_ITEMS])}"
    remaining = len(names) - MAX_NAMED_ITEMS
    if remaining > 0:
        return message + f" and {remaining} other item(s) are expiring soon."
    if len(names) > 1:
        return message + " are expiring soon."
    return message + " is expiring soon."


class ExpiryAlertGate:
    """
    Shows the expiring-warranties alert at most once per hour per user within
    a session. The last-shown time lives in the injected session store.
    """

    def __init__(self, store: SessionStore, clock: Optional[Callable[[], int]] = None) -> None:
        self.store = store
        self.clock = clock or now_ms

    def _last_shown(self, user_id: str) -> Optional[int]:
        try:
            raw = self.store.get(last_shown_key(user_id))
        except Exception as exc:
            logger.warning("session store read failed; treating alert as never shown", exc_info=exc)
            return None
        if raw is None:
            return None
        try:
            return int(raw)
        except (TypeError, ValueError):
            logger.warning("ignoring malformed alert timestamp %r for user %s", raw, user_id)
            return None

    def should_show(self, user_id: str, now: Optional[int] = None) -> bool:
        now = self.clock() if now is None else now
        last = self._last_shown(user_id)
        return last is None or now - last > ALERT_WINDOW_MS

    def check(self, user_id: str, expiring: List[Warranty]) -> Optional[ExpiryAlert]:
        if not expiring:
            return None
        now = self.clock()
        if not self.should_show(user_id, now):
            return None
        try:
            self.store.set(last_shown_key(user_id), str(now))
        except Exception as exc:
            logger.warning("session store write failed; alert may repeat", exc_info=exc)
        message = build_expiry_message([w.product_name for w in expiring])
        return ExpiryAlert(
            title=ALERT_TITLE,
            description=f"{message} {ALERT_FOOTER}",
            duration_ms=ALERT_DURATION_MS,
        )
