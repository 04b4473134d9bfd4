from datetime import date
from decimal import Decimal

from app import create_app
from ledger.models import CanceledOrder, OrderStatus
from ledger.services.renewal_gateway import DisabledRenewalGateway, RenewalResult


def test_delete_unknown_order_returns_404(client):
    resp = client.delete("/api/orders/missing")
    assert resp.status_code == 404
    assert "error" in resp.get_json()


def test_delete_reports_target_partition(client, add_order):
    add_order("R1")
    add_order("R2", expires_in=-1)
    add_order("R3", status=OrderStatus.PAID.value, check_flag=True, price=Decimal("90"))

    assert client.delete("/api/orders/R1").get_json()["movedTo"] == "deleted"
    assert client.delete("/api/orders/R2").get_json()["movedTo"] == "expired"
    body = client.delete("/api/orders/R3", json={"refundAmount": 40}).get_json()
    assert body["success"] is True
    assert body["movedTo"] == "canceled"
    assert body["deletedOrder"]["orderCode"] == "R3"


def test_delete_with_negative_refund_is_bad_request(client, add_order):
    add_order("R4", status=OrderStatus.PAID.value, check_flag=True)
    assert client.delete("/api/orders/R4", json={"refundAmount": -5}).status_code == 400


def test_create_and_list_orders_with_derived_status(client):
    resp = client.post(
        "/api/orders",
        json={
            "orderCode": "N1",
            "registrationDate": "2026-09-20",
            "durationDays": 30,
            "supplierName": "S1",
            "cost": "100",
            "price": "150",
        },
    )
    assert resp.status_code == 201
    created = resp.get_json()
    assert created["expiryDate"] == "2026-10-20"
    assert created["status"] == OrderStatus.RENEWAL_DUE.value
    assert created["daysRemaining"] == 2

    listing = client.get("/api/orders?limit=10").get_json()
    assert listing["total"] == 1
    assert listing["orders"][0]["orderCode"] == "N1"

    expiring = client.get("/api/orders/expiring?days=3").get_json()
    assert [o["orderCode"] for o in expiring["orders"]] == ["N1"]


def test_create_duplicate_order_is_rejected(client, add_order):
    add_order("N2")
    resp = client.post("/api/orders", json={"orderCode": "N2"})
    assert resp.status_code == 400


def test_confirm_payment_flow(client, add_supplier, add_cycle, add_order):
    supplier_id = add_supplier("S1")
    add_order("P1", supplier_name="S1", cost=Decimal("100"), registered=date(2026, 9, 1))
    add_order("P2", supplier_name="S1", cost=Decimal("150"), registered=date(2026, 9, 2))
    cycle_id = add_cycle(supplier_id, 250)

    resp = client.post(f"/api/payment-supply/{cycle_id}/confirm", json={"paidAmount": 100})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["status"] == "Paid"
    assert body["paidAmount"] == 100.0

    payments = client.get(f"/api/supplies/{supplier_id}/payments").get_json()["payments"]
    assert [p["importAmount"] for p in payments] == [150.0, 250.0]

    again = client.post(f"/api/payment-supply/{cycle_id}/confirm", json={})
    assert again.status_code == 409


def test_confirm_negative_amount_falls_back_to_import_amount(client, add_supplier, add_cycle):
    cycle_id = add_cycle(add_supplier("S1"), 75)
    body = client.post(f"/api/payment-supply/{cycle_id}/confirm", json={"paidAmount": -10}).get_json()
    assert body["paidAmount"] == 75.0


def test_confirm_rejects_bad_ids(client):
    assert client.post("/api/payment-supply/abc/confirm").status_code == 400
    assert client.post("/api/payment-supply/0/confirm").status_code == 400
    assert client.post("/api/payment-supply/42/confirm").status_code == 404


def test_create_supplier_and_manual_cycle(client):
    supplier = client.post("/api/supplies", json={"name": "  Acme "}).get_json()
    assert supplier["name"] == "Acme"
    assert client.post("/api/supplies", json={"name": "ACME"}).status_code == 400

    resp = client.post(
        f"/api/supplies/{supplier['id']}/payments",
        json={"round": "Oct 2026", "totalImport": 500, "paid": 0, "status": "Unpaid"},
    )
    assert resp.status_code == 201
    assert resp.get_json()["round"] == "Oct 2026"
    assert client.post("/api/supplies/999/payments", json={"round": "x", "totalImport": 1}).status_code == 404


def test_renew_success(client, renewal_gateway):
    resp = client.post("/api/orders/R9/renew", json={"forceRenewal": False})
    assert resp.status_code == 200
    assert resp.get_json()["success"] is True
    assert renewal_gateway.renewed == [("R9", False)]


def test_renew_skipped_is_conflict(client, renewal_gateway):
    renewal_gateway.result = RenewalResult(success=False, process_type="skipped", details="already renewed")
    resp = client.post("/api/orders/R9/renew")
    assert resp.status_code == 409
    assert resp.get_json()["result"]["processType"] == "skipped"


def test_mark_refunded_endpoint(client, add_order):
    add_order("F1", status=OrderStatus.PAID.value, check_flag=True)
    client.delete("/api/orders/F1")

    resp = client.patch("/api/orders/canceled/1/refund")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == OrderStatus.REFUNDED.value
    assert client.patch("/api/orders/canceled/7/refund").status_code == 404


def test_archive_scopes_are_browsable(client, add_order, session_factory):
    add_order("L1", expires_in=-3)
    client.delete("/api/orders/L1")
    with session_factory() as session:
        session.add(
            CanceledOrder(
                order_code="L2",
                expiry_date=date(2026, 10, 1),
                status=OrderStatus.PENDING_REFUND.value,
                check_flag=False,
                refund_amount=Decimal("30"),
            )
        )

    expired = client.get("/api/orders?scope=expired").get_json()
    assert expired["scope"] == "expired"
    assert expired["total"] == 1
    assert expired["orders"][0]["orderCode"] == "L1"
    assert expired["orders"][0]["status"] == OrderStatus.EXPIRED.value
    assert "archivedAt" in expired["orders"][0]

    canceled = client.get("/api/orders?scope=canceled").get_json()
    row = canceled["orders"][0]
    assert row["orderCode"] == "L2"
    assert row["status"] == OrderStatus.PENDING_REFUND.value
    assert row["checkFlag"] is False
    assert row["refundAmount"] == 30.0
    assert "daysRemaining" not in row

    assert client.get("/api/orders").get_json()["total"] == 0
    assert client.get("/api/orders?scope=deleted").status_code == 400


def test_archive_shortcuts_redirect_to_scoped_listing(client):
    resp = client.get("/api/orders/expired?limit=5")
    assert resp.status_code == 302
    assert "scope=expired" in resp.headers["Location"]
    assert "limit=5" in resp.headers["Location"]
    assert "scope=canceled" in client.get("/api/orders/canceled").headers["Location"]


def test_expiring_window_is_clamped(client):
    resp = client.get(f"/api/orders/expiring?days={10 ** 9}")
    assert resp.status_code == 200
    assert resp.get_json()["days"] == 3650


def test_renew_parses_force_flag_strings(client, renewal_gateway):
    client.post("/api/orders/R9/renew", json={"forceRenewal": "false"})
    client.post("/api/orders/R9/renew", json={"force": "1"})
    client.post("/api/orders/R9/renew")
    assert renewal_gateway.renewed == [("R9", False), ("R9", True), ("R9", True)]
    assert client.post("/api/orders/R9/renew", json={"forceRenewal": "maybe"}).status_code == 400


def test_renew_without_webhook_is_service_unavailable(app_config, session_factory, clock):
    app = create_app(app_config, session_factory=session_factory, clock=clock, renewal_gateway=DisabledRenewalGateway())
    resp = app.test_client().post("/api/orders/R9/renew")
    assert resp.status_code == 503
    assert resp.get_json()["error"] == "renewal webhook not configured"
