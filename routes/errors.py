from flask import Flask, jsonify

from ledger.services.errors import LedgerError, TransactionFailure


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(LedgerError)
    def handle_ledger_error(exc: LedgerError):
        # storage details stay in the log, not the response
        message = "internal error" if isinstance(exc, TransactionFailure) else exc.message
        body = {"error": message}
        result = getattr(exc, "result", None)
        if result is not None:
            body["result"] = result.to_dict()
        return jsonify(body), exc.http_status
