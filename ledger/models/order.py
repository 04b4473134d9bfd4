from sqlalchemy import Boolean, Column, Date, DateTime, Integer, Numeric, String, Text, func
from sqlalchemy.orm import declared_attr

from .base import Base
from .status import OrderStatus


class OrderColumns:
    """Columns shared by the active table and both archive tables."""

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(String(128), nullable=False, default="")
    customer_name = Column(String(255), nullable=False, default="")
    contact_info = Column(String(255), nullable=False, default="")
    slot = Column(String(255), nullable=False, default="")
    note = Column(Text, nullable=False, default="")
    registration_date = Column(Date, nullable=True)
    duration_days = Column(Integer, nullable=True)
    expiry_date = Column(Date, nullable=True)
    # matched against Supplier.name by value; not a foreign key
    supplier_name = Column(String(255), nullable=False, default="")
    cost = Column(Numeric(14, 2), nullable=False, default=0)
    price = Column(Numeric(14, 2), nullable=False, default=0)
    status = Column(String(32), nullable=False, default=OrderStatus.UNPAID.value)
    check_flag = Column(Boolean, nullable=True)

    @declared_attr
    def order_code(cls):
        return Column(String(64), nullable=False, index=True, unique=cls.__tablename__ == "order_list")


class Order(OrderColumns, Base):
    __tablename__ = "order_list"


class ExpiredOrder(OrderColumns, Base):
    __tablename__ = "order_expired"

    archived_at = Column(DateTime, nullable=False, server_default=func.now())


class CanceledOrder(OrderColumns, Base):
    __tablename__ = "order_canceled"

    refund_amount = Column(Numeric(14, 2), nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, server_default=func.now())


# order columns copied verbatim when an active row moves into an archive table
ORDER_FIELDS = (
    "order_code",
    "product_id",
    "customer_name",
    "contact_info",
    "slot",
    "note",
    "registration_date",
    "duration_days",
    "expiry_date",
    "supplier_name",
    "cost",
    "price",
    "status",
    "check_flag",
)
