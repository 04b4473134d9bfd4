from typing import Any, Dict, Optional


def _money(value) -> float:
    return float(value or 0)


def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


def to_order_dto(row: Any, *, status=None, check_flag=None, days_remaining=None, derived: bool = False) -> Dict:
    dto = {
        "id": getattr(row, "id", None),
        "orderCode": getattr(row, "order_code", None),
        "productId": getattr(row, "product_id", None),
        "customerName": getattr(row, "customer_name", None),
        "contactInfo": getattr(row, "contact_info", None),
        "slot": getattr(row, "slot", None),
        "note": getattr(row, "note", None),
        "registrationDate": _iso(getattr(row, "registration_date", None)),
        "durationDays": getattr(row, "duration_days", None),
        "expiryDate": _iso(getattr(row, "expiry_date", None)),
        "supplierName": getattr(row, "supplier_name", None),
        "cost": _money(getattr(row, "cost", 0)),
        "price": _money(getattr(row, "price", 0)),
        "status": getattr(row, "status", None),
        "checkFlag": getattr(row, "check_flag", None),
    }
    if derived:
        dto["status"] = getattr(status, "value", status)
        dto["checkFlag"] = check_flag
        dto["daysRemaining"] = days_remaining
    if hasattr(row, "archived_at"):
        dto["archivedAt"] = _iso(row.archived_at)
    if hasattr(row, "refund_amount"):
        dto["refundAmount"] = _money(row.refund_amount)
        dto["createdAt"] = _iso(row.created_at)
    return dto


def to_cycle_dto(row: Any) -> Dict:
    return {
        "id": row.id,
        "supplierId": row.supplier_id,
        "importAmount": _money(row.import_amount),
        "paidAmount": _money(row.paid_amount),
        "round": row.round_label or "",
        "status": row.status or "",
    }


def to_supplier_dto(row: Any) -> Dict:
    return {
        "id": row.id,
        "name": row.name,
        "bankAccount": row.bank_account,
        "bankBin": row.bank_bin,
        "active": bool(row.active),
    }
