"""Order removal: hard delete, or move into the expired / canceled archive."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..db.session import get_session
from ..models.status import OrderStatus
from ..utils.dto import to_order_dto
from ..utils.validators import parse_money
from .clock import BusinessClock
from .errors import NotFound, TransactionFailure
from .logging import log_event
from .order_repository import OrderRepository, Partition
from .status_deriver import derive_for_order


# orders closer than this to expiry are archived as expired rather than canceled
EXPIRED_ARCHIVE_THRESHOLD_DAYS = 4


class RemovalOutcome(str, enum.Enum):
    HARD_DELETED = "deleted"
    ARCHIVED_EXPIRED = "expired"
    ARCHIVED_CANCELED = "canceled"


@dataclass(frozen=True)
class RemovalResult:
    outcome: RemovalOutcome
    snapshot: Dict


class ArchivalService:
    def __init__(self, session_factory=get_session, clock=None):
        self._session_factory = session_factory
        self._clock = clock or BusinessClock()

    def remove(self, order_code: str, *, refund_amount: Optional[Decimal] = None) -> RemovalResult:
        """Remove an active order, archiving it unless it never saw a payment signal.

        The decision uses the derived status, so an unpaid order past its
        expiry is archived as expired instead of being hard-deleted. The
        archive insert is flushed before the active row is deleted and both
        commit together.
        """
        code = (order_code or "").strip()
        refund = parse_money(refund_amount, "refundAmount")
        try:
            with self._session_factory() as session:
                orders = OrderRepository(session)
                order = orders.find_active_by_code(code, for_update=True)
                if order is None:
                    raise NotFound(f"order {code} not found", order_code=code)

                effective, remaining = derive_for_order(order, self._clock.today())
                snapshot = to_order_dto(
                    order,
                    status=effective.status,
                    check_flag=effective.check_flag,
                    days_remaining=remaining,
                    derived=True,
                )

                if effective.status is OrderStatus.UNPAID and effective.check_flag is None:
                    orders.delete_active(code)
                    outcome = RemovalOutcome.HARD_DELETED
                elif remaining is not None and remaining < EXPIRED_ARCHIVE_THRESHOLD_DAYS:
                    orders.insert_archive(Partition.EXPIRED, order, archived_at=self._now())
                    orders.delete_active(code)
                    outcome = RemovalOutcome.ARCHIVED_EXPIRED
                else:
                    orders.insert_archive(
                        Partition.CANCELED,
                        order,
                        refund_amount=refund if refund is not None else order.price,
                        status=OrderStatus.PENDING_REFUND.value,
                        check_flag=False,
                        created_at=self._now(),
                    )
                    orders.delete_active(code)
                    outcome = RemovalOutcome.ARCHIVED_CANCELED
        except SQLAlchemyError as exc:
            log_event("error", "storage.transaction_failed", operation="order.remove", order_code=code, error=str(exc))
            raise TransactionFailure("could not remove order", order_code=code) from exc

        log_event("info", "order.removed", order_code=code, outcome=outcome.value, days_remaining=remaining)
        return RemovalResult(outcome=outcome, snapshot=snapshot)

    def mark_refunded(self, canceled_id: int) -> Dict:
        try:
            with self._session_factory() as session:
                record = OrderRepository(session).find_canceled_by_id(canceled_id, for_update=True)
                if record is None:
                    raise NotFound(f"canceled order {canceled_id} not found", canceled_id=canceled_id)
                record.status = OrderStatus.REFUNDED.value
                record.check_flag = False
                session.flush()
                dto = to_order_dto(record)
        except SQLAlchemyError as exc:
            log_event("error", "storage.transaction_failed", operation="order.refund", canceled_id=canceled_id, error=str(exc))
            raise TransactionFailure("could not mark order refunded", canceled_id=canceled_id) from exc
        log_event("info", "order.refunded", canceled_id=canceled_id, order_code=dto["orderCode"])
        return dto

    def _now(self):
        # DateTime columns are naive; store UTC
        return self._clock.now().replace(tzinfo=None)
