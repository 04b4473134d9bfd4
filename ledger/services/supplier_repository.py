from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models.status import CycleStatus, normalize_status_key
from ..models.supplier import Supplier, SupplierPaymentCycle, supplier_name_key, supplier_name_key_sql


UNPAID_CYCLE_KEY = normalize_status_key(CycleStatus.UNPAID)


class SupplierLedgerRepository:
    """Supplier master rows and their payment cycles. Callers own the transaction."""

    def __init__(self, session: Session):
        self._session = session

    def add_supplier(self, **fields) -> Supplier:
        supplier = Supplier(**fields)
        self._session.add(supplier)
        self._session.flush()
        return supplier

    def find_supplier(self, supplier_id: int, *, for_update: bool = False) -> Optional[Supplier]:
        stmt = select(Supplier).where(Supplier.id == supplier_id)
        if for_update:
            stmt = stmt.with_for_update()
        return self._session.execute(stmt).scalars().first()

    def find_supplier_by_name(self, name: str) -> Optional[Supplier]:
        key = supplier_name_key(name)
        if not key:
            return None
        stmt = select(Supplier).where(supplier_name_key_sql(Supplier.name) == key)
        return self._session.execute(stmt).scalars().first()

    def find_cycle(self, cycle_id: int, *, for_update: bool = False) -> Optional[SupplierPaymentCycle]:
        stmt = select(SupplierPaymentCycle).where(SupplierPaymentCycle.id == cycle_id)
        if for_update:
            stmt = stmt.with_for_update()
        return self._session.execute(stmt).scalars().first()

    def has_unpaid_cycle(self, supplier_id: int, *, exclude_id: Optional[int] = None) -> bool:
        # statuses compare by normalized key so legacy spellings ("unpaid ", "UNPAID") count
        stmt = select(SupplierPaymentCycle.status).where(SupplierPaymentCycle.supplier_id == supplier_id)
        if exclude_id is not None:
            stmt = stmt.where(SupplierPaymentCycle.id != exclude_id)
        return any(normalize_status_key(s) == UNPAID_CYCLE_KEY for s in self._session.execute(stmt).scalars())

    def insert_cycle(self, **fields) -> SupplierPaymentCycle:
        cycle = SupplierPaymentCycle(**fields)
        self._session.add(cycle)
        self._session.flush()
        return cycle

    def update_cycle(self, cycle: SupplierPaymentCycle, **fields) -> SupplierPaymentCycle:
        for name, value in fields.items():
            setattr(cycle, name, value)
        self._session.flush()
        return cycle

    def list_cycles(self, supplier_id: int) -> List[SupplierPaymentCycle]:
        stmt = (
            select(SupplierPaymentCycle)
            .where(SupplierPaymentCycle.supplier_id == supplier_id)
            .order_by(SupplierPaymentCycle.id.desc())
        )
        return list(self._session.execute(stmt).scalars())
