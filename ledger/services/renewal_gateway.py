"""Renewal webhook collaborator and the order-renewal flow that calls it."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol

import requests

from .errors import InvalidArgument, RenewalGatewayError, RenewalRejected, RenewalUnavailable
from .logging import log_event


@dataclass
class RenewalResult:
    success: bool
    process_type: str = ""
    details: str = ""
    payload: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "RenewalResult":
        return cls(
            success=bool(data.get("success")),
            process_type=str(data.get("processType") or ""),
            details=str(data.get("details") or ""),
            payload=data,
        )

    def to_dict(self) -> Dict[str, Any]:
        body = dict(self.payload)
        body.update({"success": self.success, "processType": self.process_type, "details": self.details})
        return body


class RenewalGateway(Protocol):
    def renew(self, order_code: str, *, force_renewal: bool = True) -> RenewalResult: ...

    def notify(self, order_code: str, result: RenewalResult) -> None: ...


class WebhookRenewalGateway:
    """HTTP client for the renewal webhook service."""

    def __init__(self, base_url: str, timeout: float = 10.0, session: Optional[requests.Session] = None):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._http = session or requests.Session()

    def renew(self, order_code: str, *, force_renewal: bool = True) -> RenewalResult:
        resp = self._http.post(
            f"{self._base_url}/renewals/{order_code}",
            json={"forceRenewal": force_renewal},
            timeout=self._timeout,
        )
        resp.raise_for_status()
        return RenewalResult.from_payload(resp.json() or {})

    def notify(self, order_code: str, result: RenewalResult) -> None:
        resp = self._http.post(
            f"{self._base_url}/renewals/{order_code}/notify",
            json=result.to_dict(),
            timeout=self._timeout,
        )
        resp.raise_for_status()


class RenewalService:
    def __init__(self, gateway: RenewalGateway, *, notify_in_background: bool = True):
        self._gateway = gateway
        self._background = notify_in_background

    def renew(self, order_code: str, *, force_renewal: bool = True) -> RenewalResult:
        code = (order_code or "").strip()
        if not code:
            raise InvalidArgument("order code required")
        try:
            result = self._gateway.renew(code, force_renewal=force_renewal)
        except requests.RequestException as exc:
            log_event("error", "renewal.failed", order_code=code, error=str(exc))
            raise RenewalGatewayError("renewal service unavailable", order_code=code) from exc
        if not result.success:
            log_event("warning", "renewal.rejected", order_code=code, process_type=result.process_type, details=result.details)
            raise RenewalRejected(result.details or "renewal failed", result)
        log_event("info", "renewal.succeeded", order_code=code, process_type=result.process_type)
        if self._background:
            threading.Thread(target=self._notify, args=(code, result), daemon=True).start()
        else:
            self._notify(code, result)
        return result

    def _notify(self, order_code: str, result: RenewalResult) -> None:
        try:
            self._gateway.notify(order_code, result)
        except Exception as exc:  # fire-and-forget: a failed notification never fails the renewal
            log_event("warning", "renewal.notify_failed", order_code=order_code, error=str(exc))


class DisabledRenewalGateway:
    """Used when no renewal webhook is configured."""

    def renew(self, order_code: str, *, force_renewal: bool = True) -> RenewalResult:
        raise RenewalUnavailable("renewal webhook not configured", order_code=order_code)

    def notify(self, order_code: str, result: RenewalResult) -> None:
        return None
