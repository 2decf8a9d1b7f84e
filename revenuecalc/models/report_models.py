from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional


class Metric(str, Enum):
    BILLING = "billing"
    ACTUAL = "actual"

    @property
    def label(self) -> str:
        return "Billing amount" if self is Metric.BILLING else "Actual spend"


@dataclass
class FilterState:
    start: date
    end: date
    metric: Metric = Metric.BILLING
    customer_id: Optional[str] = None


@dataclass(frozen=True)
class ReportRequest:
    start: str
    end: str
    metric: Metric
    customer_id: Optional[int] = None

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "start": self.start,
            "end": self.end,
            "metric": self.metric.value,
        }
        # "All customers" is signalled by the key being absent, not by a sentinel.
        if self.customer_id is not None:
            payload["customerId"] = self.customer_id
        return payload


@dataclass
class SummaryRow:
    customer: str
    month: str
    orders: int
    amount: Decimal
    order_numbers: str = ""


@dataclass
class DetailRow:
    order_id: Any
    order_date: str
    customer_id: Optional[str]
    line_sum: Decimal
    additional_charges: Decimal
    billing_amount: Decimal
    actual_spend: Decimal
    profit_margin: Decimal
    order_number: Optional[str] = None
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None

    @property
    def display_order_number(self) -> str:
        return self.order_number or f"#{self.order_id}"


@dataclass
class Analytics:
    total_revenue: Decimal
    total_orders: int
    unique_customers: int
    avg_profit_margin: Decimal


@dataclass
class CustomerInfo:
    name: Optional[str] = None
    email: Optional[str] = None


@dataclass
class CustomerOption:
    label: str
    value: str


@dataclass
class ReportResult:
    summary: List[SummaryRow] = field(default_factory=list)
    detail: List[DetailRow] = field(default_factory=list)
    analytics: Optional[Analytics] = None


@dataclass
class TotalsView:
    order_count: int
    total_line_sum: Decimal
    total_additional_charges: Decimal
    total_billing_amount: Decimal
    total_actual_spend: Decimal
    avg_profit_margin: Decimal
