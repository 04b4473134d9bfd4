from datetime import date, timedelta
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from app import create_app
from ledger.config import AppConfig
from ledger.db.session import init_db, make_session_factory
from ledger.models import CycleStatus, Order, OrderStatus, Supplier, SupplierPaymentCycle
from ledger.services.clock import FixedClock
from ledger.services.renewal_gateway import RenewalResult


TODAY = date(2026, 10, 18)


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def clock():
    return FixedClock(TODAY)


@pytest.fixture
def add_order(session_factory):
    def _add(order_code, *, expires_in=None, registered=None, **fields):
        fields.setdefault("status", OrderStatus.UNPAID.value)
        fields.setdefault("cost", Decimal("0"))
        fields.setdefault("price", Decimal("0"))
        if expires_in is not None:
            fields["expiry_date"] = TODAY + timedelta(days=expires_in)
        with session_factory() as session:
            order = Order(order_code=order_code, registration_date=registered, **fields)
            session.add(order)
            session.flush()
            return order.id

    return _add


@pytest.fixture
def add_supplier(session_factory):
    def _add(name, **fields):
        with session_factory() as session:
            supplier = Supplier(name=name, **fields)
            session.add(supplier)
            session.flush()
            return supplier.id

    return _add


@pytest.fixture
def add_cycle(session_factory):
    def _add(supplier_id, import_amount, *, status=CycleStatus.UNPAID.value, round_label="01/10/2026", paid=0):
        with session_factory() as session:
            cycle = SupplierPaymentCycle(
                supplier_id=supplier_id,
                import_amount=Decimal(str(import_amount)),
                paid_amount=Decimal(str(paid)),
                round_label=round_label,
                status=status,
            )
            session.add(cycle)
            session.flush()
            return cycle.id

    return _add


class FakeRenewalGateway:
    def __init__(self, result=None, error=None):
        self.result = result or RenewalResult(success=True, process_type="renewal", details="ok")
        self.error = error
        self.renewed = []
        self.notified = []

    def renew(self, order_code, *, force_renewal=True):
        if self.error is not None:
            raise self.error
        self.renewed.append((order_code, force_renewal))
        return self.result

    def notify(self, order_code, result):
        self.notified.append((order_code, result))


@pytest.fixture
def renewal_gateway():
    return FakeRenewalGateway()


@pytest.fixture
def app_config():
    return AppConfig(
        database_url="sqlite://",
        secret_key="test",
        log_level="ERROR",
        business_timezone="Asia/Ho_Chi_Minh",
        renewal_webhook_url="",
        renewal_timeout_seconds=5.0,
    )


@pytest.fixture
def app(app_config, session_factory, clock, renewal_gateway):
    application = create_app(app_config, session_factory=session_factory, clock=clock, renewal_gateway=renewal_gateway)
    application.config["TESTING"] = True
    return application


@pytest.fixture
def client(app):
    return app.test_client()
