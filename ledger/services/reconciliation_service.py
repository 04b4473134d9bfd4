"""Supplier payment confirmation: FIFO settlement of outstanding orders with debt rollover."""

from __future__ import annotations

from contextlib import ExitStack
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from ..db.session import get_session
from ..models.status import CycleStatus, normalize_status_key
from ..utils.dto import to_cycle_dto
from .clock import BusinessClock, format_round_date
from .errors import CycleAlreadySettled, NotFound, TransactionFailure
from .locks import KeyedLockRegistry
from .logging import log_event
from .order_repository import OrderRepository
from .supplier_repository import SupplierLedgerRepository


ZERO = Decimal("0")
PAID_KEY = normalize_status_key(CycleStatus.PAID)


@dataclass(frozen=True)
class Allocation:
    marked_ids: List[int]
    marked_total: Decimal
    total_outstanding: Decimal
    remaining: Decimal


def allocate(outstanding: Sequence, amount: Decimal) -> Allocation:
    """Greedy oldest-first allocation over an already ordered outstanding list.

    Orders are taken whole until the running sum reaches ``amount``; the order
    that crosses the threshold is included, so the marked total may overshoot.
    """
    running = ZERO
    marked = []
    for order in outstanding:
        if running >= amount:
            break
        running += Decimal(order.cost or 0)
        marked.append(order.id)
    total = sum((Decimal(o.cost or 0) for o in outstanding), ZERO)
    return Allocation(
        marked_ids=marked,
        marked_total=running,
        total_outstanding=total,
        remaining=max(ZERO, total - amount),
    )


class PaymentReconciler:
    def __init__(self, session_factory=get_session, clock=None, locks: Optional[KeyedLockRegistry] = None):
        self._session_factory = session_factory
        self._clock = clock or BusinessClock()
        self._locks = locks or KeyedLockRegistry()

    def confirm(self, cycle_id: int, paid_amount: Optional[Decimal] = None) -> Dict:
        """Settle a payment cycle and return it as a DTO.

        ``paid_amount`` must already be validated (see ``parse_paid_amount``);
        ``None`` settles the cycle's full import amount.
        """
        today = format_round_date(self._clock.today())
        try:
            # locks are released by the ExitStack only after the session commits
            with ExitStack() as held:
                held.enter_context(self._locks.hold(("cycle", cycle_id)))
                with self._session_factory() as session:
                    ledger = SupplierLedgerRepository(session)
                    orders = OrderRepository(session)

                    cycle = ledger.find_cycle(cycle_id, for_update=True)
                    if cycle is None:
                        raise NotFound(f"payment cycle {cycle_id} not found", cycle_id=cycle_id)
                    if normalize_status_key(cycle.status) == PAID_KEY:
                        raise CycleAlreadySettled(f"payment cycle {cycle_id} is already paid", cycle_id=cycle_id)

                    effective_paid = paid_amount if paid_amount is not None and paid_amount >= 0 else Decimal(cycle.import_amount or 0)

                    held.enter_context(self._locks.hold(("supplier", cycle.supplier_id)))
                    supplier = ledger.find_supplier(cycle.supplier_id, for_update=True)
                    supplier_name = (supplier.name if supplier is not None else "").strip()

                    outstanding = orders.find_active_outstanding(supplier_name)
                    allocation = allocate(outstanding, effective_paid)
                    orders.bulk_mark_paid(allocation.marked_ids)

                    rollover_id = None
                    if allocation.remaining > 0:
                        if ledger.has_unpaid_cycle(cycle.supplier_id, exclude_id=cycle.id):
                            log_event(
                                "info",
                                "payment.rollover_skipped",
                                cycle_id=cycle.id,
                                supplier_id=cycle.supplier_id,
                                remaining=allocation.remaining,
                            )
                        else:
                            rollover = ledger.insert_cycle(
                                supplier_id=cycle.supplier_id,
                                import_amount=allocation.remaining,
                                paid_amount=ZERO,
                                round_label=today,
                                status=CycleStatus.UNPAID.value,
                            )
                            rollover_id = rollover.id

                    ledger.update_cycle(
                        cycle,
                        status=CycleStatus.PAID.value,
                        paid_amount=effective_paid,
                        round_label=f"{cycle.round_label or ''} - {today}".strip(),
                    )
                    result = to_cycle_dto(cycle)
        except SQLAlchemyError as exc:
            log_event("error", "storage.transaction_failed", operation="payment.confirm", cycle_id=cycle_id, error=str(exc))
            raise TransactionFailure("could not confirm payment", cycle_id=cycle_id) from exc

        if rollover_id is not None:
            log_event(
                "info",
                "payment.rollover_created",
                cycle_id=cycle_id,
                rollover_cycle_id=rollover_id,
                import_amount=allocation.remaining,
            )
        log_event(
            "info",
            "payment.confirmed",
            cycle_id=cycle_id,
            supplier=supplier_name,
            paid=effective_paid,
            orders_marked=len(allocation.marked_ids),
            total_outstanding=allocation.total_outstanding,
            remaining=allocation.remaining,
        )
        return result
