import enum
from datetime import date
from typing import Iterable, List, Optional

from sqlalchemy import or_, func, select, update
from sqlalchemy.orm import Session

from ..models.order import CanceledOrder, ExpiredOrder, Order, ORDER_FIELDS
from ..models.status import OrderStatus, normalize_status_key


class Partition(str, enum.Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELED = "canceled"


PARTITION_MODELS = {
    Partition.ACTIVE: Order,
    Partition.EXPIRED: ExpiredOrder,
    Partition.CANCELED: CanceledOrder,
}

UNPAID_KEY = normalize_status_key(OrderStatus.UNPAID)


class OrderRepository:
    """Reads and writes over the three order partitions. Callers own the transaction."""

    def __init__(self, session: Session):
        self._session = session

    def add_active(self, **fields) -> Order:
        order = Order(**fields)
        self._session.add(order)
        self._session.flush()
        return order

    def find_active_by_code(self, order_code: str, *, for_update: bool = False) -> Optional[Order]:
        stmt = select(Order).where(Order.order_code == order_code)
        if for_update:
            stmt = stmt.with_for_update()
        return self._session.execute(stmt).scalars().first()

    def find_active_by_id(self, order_id: int) -> Optional[Order]:
        return self._session.get(Order, order_id)

    def find_active_outstanding(self, supplier_name: str) -> List[Order]:
        """Unpaid, not-yet-confirmed orders for a supplier, oldest debt first.

        Ordering is registration date ascending with unknown dates first, then id.
        """
        stmt = (
            select(Order)
            .where(func.trim(Order.supplier_name) == (supplier_name or "").strip())
            .where(or_(Order.check_flag.is_(None), Order.check_flag.is_(False)))
            .order_by(Order.registration_date.asc().nulls_first(), Order.id.asc())
        )
        rows = self._session.execute(stmt).scalars().all()
        return [o for o in rows if normalize_status_key(o.status) == UNPAID_KEY]

    def bulk_mark_paid(self, ids: Iterable[int]) -> int:
        ids = list(ids)
        if not ids:
            return 0
        result = self._session.execute(
            update(Order)
            .where(Order.id.in_(ids))
            .values(status=OrderStatus.PAID.value, check_flag=True)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    def insert_archive(self, partition: Partition, order: Order, **extra):
        model = PARTITION_MODELS[Partition(partition)]
        if model is Order:
            raise ValueError("archive partition required")
        values = {name: getattr(order, name) for name in ORDER_FIELDS}
        values.update(extra)
        record = model(**values)
        self._session.add(record)
        self._session.flush()
        return record

    def delete_active(self, order_code: str) -> int:
        order = self.find_active_by_code(order_code)
        if order is None:
            return 0
        self._session.delete(order)
        self._session.flush()
        return 1

    def list_active(self, *, limit: int, offset: int = 0) -> List[Order]:
        stmt = select(Order).order_by(Order.id.desc()).offset(offset).limit(limit)
        return list(self._session.execute(stmt).scalars())

    def count_active(self) -> int:
        return self._session.execute(select(func.count(Order.id))).scalar_one()

    def count_archive(self, partition: Partition) -> int:
        model = PARTITION_MODELS[Partition(partition)]
        return self._session.execute(select(func.count(model.id))).scalar_one()

    def list_expiring_between(self, start: date, end: date) -> List[Order]:
        stmt = (
            select(Order)
            .where(Order.expiry_date.is_not(None))
            .where(Order.expiry_date >= start, Order.expiry_date <= end)
            .order_by(Order.expiry_date.asc(), Order.id.asc())
        )
        return list(self._session.execute(stmt).scalars())

    def list_archive(self, partition: Partition, *, limit: int, offset: int = 0) -> list:
        model = PARTITION_MODELS[Partition(partition)]
        stmt = select(model).order_by(model.id.desc()).offset(offset).limit(limit)
        return list(self._session.execute(stmt).scalars())

    def find_canceled_by_id(self, canceled_id: int, *, for_update: bool = False) -> Optional[CanceledOrder]:
        stmt = select(CanceledOrder).where(CanceledOrder.id == canceled_id)
        if for_update:
            stmt = stmt.with_for_update()
        return self._session.execute(stmt).scalars().first()

    def find_partitions(self, order_code: str) -> List[Partition]:
        found = []
        for partition, model in PARTITION_MODELS.items():
            hit = self._session.execute(
                select(model.id).where(model.order_code == order_code).limit(1)
            ).first()
            if hit is not None:
                found.append(partition)
        return found
