from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..db.session import get_session
from ..models.status import CycleStatus, coerce_cycle_status
from ..utils.dto import to_cycle_dto, to_supplier_dto
from .errors import InvalidArgument, NotFound, TransactionFailure
from .logging import log_event
from .supplier_repository import SupplierLedgerRepository


class SupplierLedgerService:
    """Supplier master records and manually entered payment cycles."""

    def __init__(self, session_factory=get_session):
        self._session_factory = session_factory

    def create_supplier(self, *, name: str, bank_account: Optional[str] = None,
                        bank_bin: Optional[str] = None, active: bool = True) -> Dict:
        clean = (name or "").strip()
        if not clean:
            raise InvalidArgument("supplier name required")
        try:
            with self._session_factory() as session:
                repo = SupplierLedgerRepository(session)
                if repo.find_supplier_by_name(clean) is not None:
                    raise InvalidArgument(f"supplier {clean} already exists")
                supplier = repo.add_supplier(name=clean, bank_account=bank_account, bank_bin=bank_bin, active=active)
                return to_supplier_dto(supplier)
        except SQLAlchemyError as exc:
            raise TransactionFailure("could not create supplier", name=clean) from exc

    def create_cycle(self, supplier_id: int, *, import_amount: Decimal, round_label: str,
                     paid_amount: Decimal = Decimal("0"), status: str = CycleStatus.UNPAID.value) -> Dict:
        label = (round_label or "").strip()
        if not label:
            raise InvalidArgument("round label required")
        try:
            cycle_status = coerce_cycle_status(status)
        except ValueError as exc:
            raise InvalidArgument(f"unknown cycle status: {status}") from exc
        try:
            with self._session_factory() as session:
                repo = SupplierLedgerRepository(session)
                if repo.find_supplier(supplier_id) is None:
                    raise NotFound(f"supplier {supplier_id} not found", supplier_id=supplier_id)
                cycle = repo.insert_cycle(
                    supplier_id=supplier_id,
                    import_amount=import_amount,
                    paid_amount=paid_amount,
                    round_label=label,
                    status=cycle_status.value,
                )
                dto = to_cycle_dto(cycle)
        except SQLAlchemyError as exc:
            log_event("error", "storage.transaction_failed", operation="cycle.create", supplier_id=supplier_id, error=str(exc))
            raise TransactionFailure("could not create payment cycle", supplier_id=supplier_id) from exc
        log_event("info", "payment.cycle_created", supplier_id=supplier_id, cycle_id=dto["id"], import_amount=dto["importAmount"])
        return dto

    def list_cycles(self, supplier_id: int) -> List[Dict]:
        with self._session_factory() as session:
            repo = SupplierLedgerRepository(session)
            if repo.find_supplier(supplier_id) is None:
                raise NotFound(f"supplier {supplier_id} not found", supplier_id=supplier_id)
            return [to_cycle_dto(c) for c in repo.list_cycles(supplier_id)]
