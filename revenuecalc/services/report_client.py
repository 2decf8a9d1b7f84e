from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

import requests

from ..config import get_settings
from ..models.report_models import ReportRequest

logger = logging.getLogger(__name__)


class ReportServiceError(RuntimeError):
    """Base class for anything that stops a request from producing data."""


class NetworkError(ReportServiceError):
    pass


class ServiceError(ReportServiceError):
    def __init__(self, status: int, message: Optional[str] = None) -> None:
        super().__init__(message or f"HTTP {status}")
        self.status = status


class ParseError(ReportServiceError):
    pass


class ReportingServiceClient:
    """Blocking client for the reporting backend.

    There is intentionally no request timeout: a hung backend keeps the caller
    waiting.
    """

    def __init__(self, base_url: Optional[str] = None, session: Optional[requests.Session] = None) -> None:
        self.base_url = (base_url or get_settings().api_base).rstrip("/")
        self.session = session or requests.Session()

    def fetch_customers(self) -> List[Dict[str, Any]]:
        response = self._send("GET", "/api/customers")
        if not response.ok:
            raise ServiceError(response.status_code)
        payload = self._decode(response)
        customers = payload.get("customers") if isinstance(payload, dict) else None
        return list(customers or [])

    def fetch_report(self, request: ReportRequest) -> Dict[str, Any]:
        response = self._send("POST", "/api/report", json=request.to_payload())
        if not response.ok:
            raise ServiceError(response.status_code, _error_message(response))
        payload = self._decode(response)
        if not isinstance(payload, dict):
            raise ParseError("Report response was not a JSON object")
        return payload

    def _send(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        url = f"{self.base_url}{path}"
        headers = {"Accept": "application/json"}
        logger.debug("%s %s", method, url)
        try:
            return self.session.request(method, url, headers=headers, **kwargs)
        except requests.RequestException as exc:
            raise NetworkError(f"Network error: {exc}") from exc

    @staticmethod
    def _decode(response: requests.Response) -> Any:
        try:
            return response.json(parse_float=Decimal)
        except ValueError as exc:
            raise ParseError(f"Invalid JSON from {response.url}: {exc}") from exc


def _error_message(response: requests.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return None
