"""Supplier payment-cycle endpoints."""

from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, current_app, jsonify, request

from ledger.utils.validators import parse_money, parse_paid_amount, parse_positive_id


payments_bp = Blueprint("ledger_payments", __name__, url_prefix="/api")


def _components() -> Dict[str, Any]:
    return current_app.extensions["ledger_components"]


@payments_bp.post("/payment-supply/<cycle_id>/confirm")
def confirm_payment(cycle_id: str):
    payload = request.get_json(silent=True) or {}
    cycle = _components()["reconciler"].confirm(
        parse_positive_id(cycle_id, "payment id"),
        parse_paid_amount(payload.get("paidAmount")),
    )
    return jsonify(cycle)


@payments_bp.get("/supplies/<supplier_id>/payments")
def list_payments(supplier_id: str):
    cycles = _components()["supplier_service"].list_cycles(parse_positive_id(supplier_id, "supplier id"))
    return jsonify({"payments": cycles})


@payments_bp.post("/supplies/<supplier_id>/payments")
def create_payment(supplier_id: str):
    payload = request.get_json(silent=True) or {}
    cycle = _components()["supplier_service"].create_cycle(
        parse_positive_id(supplier_id, "supplier id"),
        import_amount=parse_money(payload.get("totalImport"), "totalImport", required=True),
        paid_amount=parse_money(payload.get("paid", 0), "paid", required=True),
        round_label=str(payload.get("round") or ""),
        status=str(payload.get("status") or "Unpaid"),
    )
    return jsonify(cycle), 201


@payments_bp.post("/supplies")
def create_supplier():
    payload = request.get_json(silent=True) or {}
    supplier = _components()["supplier_service"].create_supplier(
        name=str(payload.get("name") or ""),
        bank_account=payload.get("bankAccount"),
        bank_bin=payload.get("bankBin"),
        active=bool(payload.get("active", True)),
    )
    return jsonify(supplier), 201
