"""Subscription ledger Flask application."""

from __future__ import annotations

from flask import Flask

from ledger.config import AppConfig, load_env
from ledger.db.session import build_engine, init_db, make_session_factory
from ledger.services import (
    ArchivalService,
    BusinessClock,
    OrderService,
    PaymentReconciler,
    RenewalService,
    SupplierLedgerService,
    WebhookRenewalGateway,
)
from ledger.services.logging import set_log_level
from ledger.services.renewal_gateway import DisabledRenewalGateway
from routes.errors import register_error_handlers
from routes.orders import orders_bp
from routes.payments import payments_bp


def create_app(config: AppConfig | None = None, *, session_factory=None, clock=None, renewal_gateway=None) -> Flask:
    config = config or load_env()
    set_log_level(config.log_level)

    if session_factory is None:
        engine = build_engine(config.database_url)
        init_db(engine)
        session_factory = make_session_factory(engine)
    clock = clock or BusinessClock(config.business_timezone)
    if renewal_gateway is None:
        if config.renewal_webhook_url:
            renewal_gateway = WebhookRenewalGateway(config.renewal_webhook_url, config.renewal_timeout_seconds)
        else:
            renewal_gateway = DisabledRenewalGateway()

    app = Flask(__name__)
    app.config["SECRET_KEY"] = config.secret_key
    app.config["LEDGER_CONFIG"] = config

    app.extensions["ledger_components"] = {
        "order_service": OrderService(session_factory, clock),
        "archival_service": ArchivalService(session_factory, clock),
        "reconciler": PaymentReconciler(session_factory, clock),
        "supplier_service": SupplierLedgerService(session_factory),
        "renewal_service": RenewalService(renewal_gateway),
    }

    app.register_blueprint(orders_bp)
    app.register_blueprint(payments_bp)
    register_error_handlers(app)

    return app


def main() -> None:
    app = create_app()
    app.run(host="0.0.0.0", port=5000, debug=False)


if __name__ == "__main__":
    main()
