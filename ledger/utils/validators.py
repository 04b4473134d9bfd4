import math
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Optional

from ..models.status import normalize_check_flag
from ..services.errors import InvalidArgument


def parse_money(value, field: str, *, required: bool = False) -> Optional[Decimal]:
    """Parse a non-negative amount; ``None``/blank yields ``None`` unless required."""
    if value is None or (isinstance(value, str) and not value.strip()):
        if required:
            raise InvalidArgument(f"{field} required")
        return None
    if isinstance(value, bool):
        raise InvalidArgument(f"{field} must be a number")
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise InvalidArgument(f"{field} must be a number") from exc
    if not amount.is_finite():
        raise InvalidArgument(f"{field} must be a number")
    if amount < 0:
        raise InvalidArgument(f"{field} must be >= 0")
    return amount


def parse_paid_amount(value) -> Optional[Decimal]:
    """Paid-amount override from a request: anything unusable reads as absent."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
        return None
    try:
        return parse_money(value, "paidAmount")
    except InvalidArgument:
        return None


def parse_positive_id(value, field: str) -> int:
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError) as exc:
        raise InvalidArgument(f"{field} is not a valid id") from exc
    if parsed <= 0:
        raise InvalidArgument(f"{field} is not a valid id")
    return parsed


def parse_date(value, field: str) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    for fmt in ("%Y-%m-%d", "%d/%m/%Y", "%d-%m-%Y", "%Y%m%d"):
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise InvalidArgument(f"{field} is not a valid date")


def ensure_non_negative_int(value, field: str) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        parsed = int(value)
    except (TypeError, ValueError) as exc:
        raise InvalidArgument(f"{field} must be an integer") from exc
    if parsed < 0:
        raise InvalidArgument(f"{field} must be >= 0")
    return parsed


def parse_bool(value, field: str, *, default: bool) -> bool:
    """Accept JSON booleans and the usual spellings ("true", "0", "no", ...)."""
    if value is None:
        return default
    parsed = normalize_check_flag(value)
    if parsed is None:
        raise InvalidArgument(f"{field} must be a boolean")
    return parsed
