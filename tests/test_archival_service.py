from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from ledger.models import CanceledOrder, ExpiredOrder, OrderStatus
from ledger.services.archival_service import ArchivalService, RemovalOutcome
from ledger.services.errors import InvalidArgument, NotFound, TransactionFailure
from ledger.services.order_repository import OrderRepository, Partition


@pytest.fixture
def service(session_factory, clock):
    return ArchivalService(session_factory, clock)


def partitions(session_factory, code):
    with session_factory() as session:
        return OrderRepository(session).find_partitions(code)


def test_unpaid_order_without_expiry_is_hard_deleted(service, add_order, session_factory):
    add_order("A001")

    result = service.remove("A001")

    assert result.outcome is RemovalOutcome.HARD_DELETED
    assert result.snapshot["orderCode"] == "A001"
    assert partitions(session_factory, "A001") == []


def test_unpaid_order_far_from_expiry_is_hard_deleted(service, add_order, session_factory):
    add_order("A010", expires_in=30)

    assert service.remove("A010").outcome is RemovalOutcome.HARD_DELETED
    assert partitions(session_factory, "A010") == []


def test_expired_unpaid_order_is_archived_using_derived_status(service, add_order, session_factory):
    add_order("A002", expires_in=-2)

    result = service.remove("A002")

    assert result.outcome is RemovalOutcome.ARCHIVED_EXPIRED
    assert result.snapshot["status"] == OrderStatus.EXPIRED.value
    assert result.snapshot["daysRemaining"] == -2
    assert partitions(session_factory, "A002") == [Partition.EXPIRED]
    with session_factory() as session:
        archived = session.execute(select(ExpiredOrder)).scalars().one()
        assert archived.archived_at is not None
        assert archived.status == OrderStatus.UNPAID.value


def test_paid_order_near_expiry_goes_to_expired_archive(service, add_order, session_factory):
    add_order("A003", expires_in=2, status=OrderStatus.PAID.value, check_flag=True)

    result = service.remove("A003")

    assert result.outcome is RemovalOutcome.ARCHIVED_EXPIRED
    assert result.snapshot["status"] == OrderStatus.PAID.value
    assert partitions(session_factory, "A003") == [Partition.EXPIRED]


def test_paid_order_is_canceled_with_price_as_refund(service, add_order, session_factory):
    add_order("A004", expires_in=20, status=OrderStatus.PAID.value, check_flag=True, price=Decimal("300"))

    result = service.remove("A004")

    assert result.outcome is RemovalOutcome.ARCHIVED_CANCELED
    assert partitions(session_factory, "A004") == [Partition.CANCELED]
    with session_factory() as session:
        archived = session.execute(select(CanceledOrder)).scalars().one()
        assert archived.refund_amount == Decimal("300")
        assert archived.status == OrderStatus.PENDING_REFUND.value
        assert archived.check_flag is False
        assert archived.created_at is not None


def test_explicit_refund_amount_overrides_price(service, add_order, session_factory):
    add_order("A005", status=OrderStatus.PAID.value, check_flag=True, price=Decimal("300"))

    service.remove("A005", refund_amount=Decimal("120.50"))

    with session_factory() as session:
        archived = session.execute(select(CanceledOrder)).scalars().one()
        assert archived.refund_amount == Decimal("120.50")


def test_unpaid_order_with_check_flag_is_archived(service, add_order, session_factory):
    add_order("A006", check_flag=False)

    assert service.remove("A006").outcome is RemovalOutcome.ARCHIVED_CANCELED


def test_missing_order_raises_not_found(service):
    with pytest.raises(NotFound):
        service.remove("nope")


def test_negative_refund_rejected_before_any_change(service, add_order, session_factory):
    add_order("A007", status=OrderStatus.PAID.value, check_flag=True)

    with pytest.raises(InvalidArgument):
        service.remove("A007", refund_amount=Decimal("-1"))
    assert partitions(session_factory, "A007") == [Partition.ACTIVE]


def test_storage_failure_leaves_order_active(service, add_order, session_factory, monkeypatch):
    add_order("A008", status=OrderStatus.PAID.value, check_flag=True)

    def boom(self, order_code):
        raise OperationalError("DELETE", {}, Exception("database is locked"))

    monkeypatch.setattr(OrderRepository, "delete_active", boom)

    with pytest.raises(TransactionFailure):
        service.remove("A008")
    assert partitions(session_factory, "A008") == [Partition.ACTIVE]


def test_repeated_removals_never_duplicate_an_order(service, add_order, session_factory):
    add_order("A009", status=OrderStatus.PAID.value, check_flag=True)

    service.remove("A009")
    with pytest.raises(NotFound):
        service.remove("A009")
    assert partitions(session_factory, "A009") == [Partition.CANCELED]


def test_mark_refunded(service, add_order, session_factory):
    add_order("A011", status=OrderStatus.PAID.value, check_flag=True)
    service.remove("A011")
    with session_factory() as session:
        canceled_id = session.execute(select(CanceledOrder.id)).scalar_one()

    record = service.mark_refunded(canceled_id)

    assert record["status"] == OrderStatus.REFUNDED.value
    assert record["checkFlag"] is False
    with pytest.raises(NotFound):
        service.mark_refunded(canceled_id + 100)
