"""Order endpoints: list, create, remove (archive), renew, refund."""

from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, current_app, jsonify, redirect, request, url_for

from ledger.services.errors import InvalidArgument
from ledger.services.order_repository import Partition
from ledger.utils.pagination import normalize_paging
from ledger.utils.validators import ensure_non_negative_int, parse_bool, parse_positive_id


orders_bp = Blueprint("ledger_orders", __name__, url_prefix="/api/orders")

MAX_EXPIRING_DAYS = 3650


def _components() -> Dict[str, Any]:
    return current_app.extensions["ledger_components"]


def _passthrough_args() -> Dict[str, str]:
    return {k: v for k, v in request.args.items() if k != "scope"}


@orders_bp.get("")
def list_orders():
    limit, offset = normalize_paging(request.args.get("limit"), request.args.get("offset"))
    scope = (request.args.get("scope") or Partition.ACTIVE.value).strip().lower()
    try:
        partition = Partition(scope)
    except ValueError as exc:
        raise InvalidArgument(f"unknown scope: {scope}") from exc
    service = _components()["order_service"]
    if partition is Partition.ACTIVE:
        return jsonify(service.list_orders(limit=limit, offset=offset))
    return jsonify(service.list_archive(partition, limit=limit, offset=offset))


@orders_bp.get("/expired")
def list_expired():
    return redirect(url_for("ledger_orders.list_orders", scope=Partition.EXPIRED.value, **_passthrough_args()))


@orders_bp.get("/canceled")
def list_canceled():
    return redirect(url_for("ledger_orders.list_orders", scope=Partition.CANCELED.value, **_passthrough_args()))


@orders_bp.get("/expiring")
def list_expiring():
    days = min(ensure_non_negative_int(request.args.get("days", 4), "days"), MAX_EXPIRING_DAYS)
    orders = _components()["order_service"].list_expiring(days)
    return jsonify({"orders": orders, "days": days})


@orders_bp.post("")
def create_order():
    payload = request.get_json(silent=True) or {}
    order = _components()["order_service"].create_order(
        order_code=payload.get("orderCode", ""),
        registration_date=payload.get("registrationDate"),
        duration_days=payload.get("durationDays"),
        expiry_date=payload.get("expiryDate"),
        cost=payload.get("cost"),
        price=payload.get("price"),
        product_id=payload.get("productId"),
        customer_name=payload.get("customerName"),
        contact_info=payload.get("contactInfo"),
        slot=payload.get("slot"),
        note=payload.get("note"),
        supplier_name=payload.get("supplierName"),
    )
    return jsonify(order), 201


@orders_bp.delete("/<order_code>")
def delete_order(order_code: str):
    payload = request.get_json(silent=True) or {}
    result = _components()["archival_service"].remove(order_code, refund_amount=payload.get("refundAmount"))
    return jsonify({"success": True, "movedTo": result.outcome.value, "deletedOrder": result.snapshot})


@orders_bp.post("/<order_code>/renew")
def renew_order(order_code: str):
    payload = request.get_json(silent=True) or {}
    force = parse_bool(payload.get("forceRenewal", payload.get("force")), "forceRenewal", default=True)
    result = _components()["renewal_service"].renew(order_code, force_renewal=force)
    return jsonify(result.to_dict())


@orders_bp.patch("/canceled/<canceled_id>/refund")
def mark_refunded(canceled_id: str):
    record = _components()["archival_service"].mark_refunded(parse_positive_id(canceled_id, "id"))
    return jsonify({"success": True, **record})
