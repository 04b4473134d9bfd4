from datetime import timedelta
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..db.session import get_session
from ..models.status import OrderStatus
from ..utils.dto import to_order_dto
from ..utils.validators import ensure_non_negative_int, parse_date, parse_money
from .clock import BusinessClock
from .errors import InvalidArgument, TransactionFailure
from .logging import log_event
from .order_repository import OrderRepository, Partition
from .status_deriver import derive_for_order


TEXT_FIELDS = ("product_id", "customer_name", "contact_info", "slot", "note", "supplier_name")


class OrderService:
    """Order creation and derived-status reads backed by DB."""

    def __init__(self, session_factory=get_session, clock=None):
        self._session_factory = session_factory
        self._clock = clock or BusinessClock()

    def create_order(self, *, order_code: str, registration_date=None, duration_days=None, expiry_date=None,
                     cost=None, price=None, **text) -> Dict:
        code = (order_code or "").strip()
        if not code:
            raise InvalidArgument("order_code required")
        unknown = set(text) - set(TEXT_FIELDS)
        if unknown:
            raise InvalidArgument(f"unknown order fields: {', '.join(sorted(unknown))}")
        registered = parse_date(registration_date, "registration_date")
        days = ensure_non_negative_int(duration_days, "duration_days")
        expires = parse_date(expiry_date, "expiry_date")
        if expires is None and registered is not None and days is not None:
            expires = registered + timedelta(days=days)
        fields = {name: str(text.get(name) or "").strip() for name in TEXT_FIELDS}
        try:
            with self._session_factory() as session:
                orders = OrderRepository(session)
                if orders.find_partitions(code):
                    raise InvalidArgument(f"order {code} already exists", order_code=code)
                order = orders.add_active(
                    order_code=code,
                    registration_date=registered,
                    duration_days=days,
                    expiry_date=expires,
                    cost=parse_money(cost, "cost") or 0,
                    price=parse_money(price, "price") or 0,
                    status=OrderStatus.UNPAID.value,
                    check_flag=None,
                    **fields,
                )
                dto = self._derived_dto(order)
        except SQLAlchemyError as exc:
            log_event("error", "storage.transaction_failed", operation="order.create", order_code=code, error=str(exc))
            raise TransactionFailure("could not create order", order_code=code) from exc
        log_event("info", "order.created", order_code=code, supplier=fields["supplier_name"], cost=dto["cost"])
        return dto

    def list_orders(self, *, limit: int = 200, offset: int = 0) -> Dict:
        with self._session_factory() as session:
            repo = OrderRepository(session)
            rows = repo.list_active(limit=limit, offset=offset)
            return {
                "orders": [self._derived_dto(o) for o in rows],
                "total": repo.count_active(),
                "limit": limit,
                "offset": offset,
            }

    def list_archive(self, partition: Partition, *, limit: int = 200, offset: int = 0) -> Dict:
        """Browse an archive partition; canceled rows are shown exactly as stored."""
        partition = Partition(partition)
        if partition is Partition.ACTIVE:
            raise InvalidArgument("archive partition required")
        with self._session_factory() as session:
            repo = OrderRepository(session)
            rows = repo.list_archive(partition, limit=limit, offset=offset)
            if partition is Partition.CANCELED:
                orders = [to_order_dto(o) for o in rows]
            else:
                orders = [self._derived_dto(o) for o in rows]
            return {
                "orders": orders,
                "scope": partition.value,
                "total": repo.count_archive(partition),
                "limit": limit,
                "offset": offset,
            }

    def list_expiring(self, within_days: int) -> List[Dict]:
        today = self._clock.today()
        with self._session_factory() as session:
            rows = OrderRepository(session).list_expiring_between(today, today + timedelta(days=within_days))
            return [self._derived_dto(o) for o in rows]

    def _derived_dto(self, order) -> Dict:
        effective, remaining = derive_for_order(order, self._clock.today())
        return to_order_dto(
            order,
            status=effective.status,
            check_flag=effective.check_flag,
            days_remaining=remaining,
            derived=True,
        )
