from .archival_service import ArchivalService, RemovalOutcome, RemovalResult
from .clock import BusinessClock, FixedClock
from .order_service import OrderService
from .reconciliation_service import PaymentReconciler
from .renewal_gateway import RenewalResult, RenewalService, WebhookRenewalGateway
from .supplier_service import SupplierLedgerService

__all__ = [
    "ArchivalService",
    "RemovalOutcome",
    "RemovalResult",
    "BusinessClock",
    "FixedClock",
    "OrderService",
    "PaymentReconciler",
    "RenewalResult",
    "RenewalService",
    "WebhookRenewalGateway",
    "SupplierLedgerService",
]
