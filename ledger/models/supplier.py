from sqlalchemy import Boolean, Column, ForeignKey, Integer, Numeric, String, func
from .base import Base
from .status import CycleStatus


class Supplier(Base):
    __tablename__ = "supplier"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)
    bank_account = Column(String(64), nullable=True)
    bank_bin = Column(String(16), nullable=True)
    active = Column(Boolean, nullable=False, default=True)


class SupplierPaymentCycle(Base):
    __tablename__ = "supplier_payment_cycle"

    id = Column(Integer, primary_key=True, autoincrement=True)
    supplier_id = Column(Integer, ForeignKey("supplier.id"), nullable=False, index=True)
    import_amount = Column(Numeric(14, 2), nullable=False, default=0)
    paid_amount = Column(Numeric(14, 2), nullable=False, default=0)
    round_label = Column(String(512), nullable=False, default="")
    status = Column(String(32), nullable=False, default=CycleStatus.UNPAID.value, server_default=CycleStatus.UNPAID.value)


def supplier_name_key(name) -> str:
    """Case- and whitespace-insensitive lookup key for supplier names."""
    return str(name or "").strip().lower()


def supplier_name_key_sql(column):
    return func.lower(func.trim(column))
