import enum
import re
import unicodedata
from typing import Optional


class OrderStatus(str, enum.Enum):
    UNPAID = "Unpaid"
    PAID = "Paid"
    EXPIRED = "Expired"
    RENEWAL_DUE = "RenewalDue"
    REFUNDED = "Refunded"
    PENDING_REFUND = "PendingRefund"


class CycleStatus(str, enum.Enum):
    UNPAID = "Unpaid"
    PAID = "Paid"


class CheckFlag(enum.Enum):
    """Named view of the tri-state ``check_flag`` column (None / True / False)."""

    UNSET = None
    CONFIRMED = True
    PENDING_REFUND = False

    @classmethod
    def of(cls, value: Optional[bool]) -> "CheckFlag":
        return cls(value)


_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_TRUE_WORDS = {"true", "t", "1", "yes"}
_FALSE_WORDS = {"false", "f", "0", "no"}


def normalize_status_key(value) -> str:
    """Accent-free, lowercase, alphanumeric-only key for status comparisons."""
    if value is None:
        return ""
    if isinstance(value, enum.Enum):
        value = value.value
    decomposed = unicodedata.normalize("NFD", str(value))
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _NON_ALNUM.sub("", stripped.lower())


def normalize_check_flag(value) -> Optional[bool]:
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        if value == 1:
            return True
        if value == 0:
            return False
        return None
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_WORDS:
            return True
        if lowered in _FALSE_WORDS:
            return False
    return None


def coerce_order_status(value) -> OrderStatus:
    """Map a stored status string onto ``OrderStatus``; unknown values read as Unpaid."""
    key = normalize_status_key(value)
    for status in OrderStatus:
        if normalize_status_key(status) == key:
            return status
    return OrderStatus.UNPAID


def coerce_cycle_status(value) -> CycleStatus:
    key = normalize_status_key(value)
    for status in CycleStatus:
        if normalize_status_key(status) == key:
            return status
    raise ValueError(f"unknown cycle status: {value!r}")
