from .base import Base
from .order import CanceledOrder, ExpiredOrder, Order, ORDER_FIELDS
from .status import CheckFlag, CycleStatus, OrderStatus
from .supplier import Supplier, SupplierPaymentCycle

__all__ = [
    "Base",
    "Order",
    "ExpiredOrder",
    "CanceledOrder",
    "ORDER_FIELDS",
    "OrderStatus",
    "CycleStatus",
    "CheckFlag",
    "Supplier",
    "SupplierPaymentCycle",
]
