from __future__ import annotations

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

from revenuecalc.models.report_models import CustomerInfo, DetailRow, ReportRequest
from revenuecalc.services.customer_directory import CustomerDirectory
from revenuecalc.services.report_client import ReportServiceError


class DeferredDispatcher:
    """Holds jobs until the test decides when (and how) they finish."""

    def __init__(self) -> None:
        self.calls: List[Tuple[Callable[[], Any], Callable[[Any], None], Callable[[str], None]]] = []

    def __call__(self, job, on_success, on_failure) -> None:
        self.calls.append((job, on_success, on_failure))

    @property
    def pending(self) -> int:
        return len(self.calls)

    def complete(self, index: int = -1) -> None:
        job, on_success, on_failure = self.calls[index]
        try:
            result = job()
        except ReportServiceError as exc:
            on_failure(str(exc))
        else:
            on_success(result)

    def fail(self, message: str, index: int = -1) -> None:
        _, _, on_failure = self.calls[index]
        on_failure(message)


class FakeClient:
    def __init__(
        self,
        report: Optional[Dict[str, Any]] = None,
        customers: Optional[List[Dict[str, Any]]] = None,
        error: Optional[ReportServiceError] = None,
    ) -> None:
        self.report = report if report is not None else {}
        self.customers = customers if customers is not None else []
        self.error = error
        self.requests: List[ReportRequest] = []

    def fetch_report(self, request: ReportRequest) -> Dict[str, Any]:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.report

    def fetch_customers(self) -> List[Dict[str, Any]]:
        if self.error is not None:
            raise self.error
        return self.customers


@pytest.fixture()
def directory() -> CustomerDirectory:
    return CustomerDirectory(
        {
            "8688425369879": CustomerInfo(name="Auxia Team", email="auxia@veeryoffices.com"),
            "9138324275479": CustomerInfo(name="@3120 Team"),
        }
    )


@pytest.fixture()
def dispatcher() -> DeferredDispatcher:
    return DeferredDispatcher()


@pytest.fixture()
def report_payload() -> Dict[str, Any]:
    return {
        "summary": [
            {
                "customer": "8688425369879",
                "month": "2024-01",
                "orders": 2,
                "amount": Decimal("1234.5"),
                "order_numbers": "#1001, #1002",
            },
            {
                "customer": "5550001",
                "month": "2024-01",
                "orders": 1,
                "amount": 99,
                "order_numbers": "#1003",
            },
        ],
        "detail": [
            {
                "order_id": 1001,
                "order_number": "#1001",
                "order_date": "2024-01-05T10:00:00Z",
                "customer_id": "8688425369879",
                "customer_name": "Jane Doe",
                "customer_email": "jane@example.com",
                "line_sum": Decimal("100.00"),
                "additional_charges": Decimal("5.50"),
                "billing_amount": Decimal("105.50"),
                "actual_spend": Decimal("90.25"),
                "profit_margin": Decimal("14.45"),
            },
            {
                "order_id": 1003,
                "order_date": "2024-01-20T08:30:00Z",
                "customer_id": "5550001",
                "line_sum": 10,
                "additional_charges": 2,
                "billing_amount": 12,
                "actual_spend": 11,
                "profit_margin": Decimal("8.3"),
            },
        ],
        "analytics": {
            "totalRevenue": Decimal("1333.5"),
            "totalOrders": 3,
            "uniqueCustomers": 2,
            "avgProfitMargin": Decimal("12.1"),
        },
    }


def make_detail_row(**overrides: Any) -> DetailRow:
    values: Dict[str, Any] = {
        "order_id": 1,
        "order_date": "2024-01-05T10:00:00Z",
        "customer_id": "8688425369879",
        "line_sum": Decimal("10"),
        "additional_charges": Decimal("2"),
        "billing_amount": Decimal("12"),
        "actual_spend": Decimal("11"),
        "profit_margin": Decimal("8.3"),
    }
    values.update(overrides)
    return DetailRow(**values)
