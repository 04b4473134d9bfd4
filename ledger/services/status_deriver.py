"""Effective order status computed from the stored pair and the calendar."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..models.status import OrderStatus, coerce_order_status, normalize_check_flag


EXPIRED_THRESHOLD_DAYS = 0
RENEWAL_THRESHOLD_DAYS = 4


@dataclass(frozen=True)
class StatusPair:
    status: OrderStatus
    check_flag: Optional[bool]

    @classmethod
    def of(cls, status, check_flag) -> "StatusPair":
        return cls(coerce_order_status(status), normalize_check_flag(check_flag))


def days_remaining(expiry_date: Optional[date], today: date) -> Optional[int]:
    if expiry_date is None:
        return None
    return (expiry_date - today).days


def derive_status(stored: StatusPair, remaining: Optional[int]) -> StatusPair:
    """Return the effective status/check-flag pair.

    ``Paid`` is sticky: calendar-derived transitions never override it. An
    order with no known expiry keeps whatever was stored.
    """
    if remaining is None or stored.status is OrderStatus.PAID:
        return stored
    if remaining <= EXPIRED_THRESHOLD_DAYS:
        return StatusPair(OrderStatus.EXPIRED, None)
    if remaining <= RENEWAL_THRESHOLD_DAYS:
        return StatusPair(OrderStatus.RENEWAL_DUE, None)
    return stored


def derive_for_order(order, today: date):
    """Convenience wrapper returning ``(effective pair, days remaining)`` for a row."""
    remaining = days_remaining(order.expiry_date, today)
    return derive_status(StatusPair.of(order.status, order.check_flag), remaining), remaining
