class LedgerError(Exception):
    """Base class for failures scoped to a single ledger operation."""

    http_status = 500

    def __init__(self, message: str, **context) -> None:
        super().__init__(message)
        self.message = message
        self.context = context


class NotFound(LedgerError):
    http_status = 404


class InvalidArgument(LedgerError):
    http_status = 400


class CycleAlreadySettled(LedgerError):
    http_status = 409


class TransactionFailure(LedgerError):
    """Storage abort, deadlock or timeout; nothing was applied and the call may be retried."""

    http_status = 500


class RenewalRejected(LedgerError):
    def __init__(self, message: str, result=None) -> None:
        super().__init__(message)
        self.result = result
        self.http_status = 409 if result is not None and result.process_type == "skipped" else 400


class RenewalGatewayError(LedgerError):
    http_status = 502


class RenewalUnavailable(RenewalGatewayError):
    http_status = 503
