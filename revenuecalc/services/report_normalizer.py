from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, List, Mapping, Optional

from ..models.report_models import Analytics, DetailRow, ReportResult, SummaryRow
from .customer_directory import CustomerDirectory
from .report_client import ParseError

UNKNOWN_CUSTOMER = "Unknown"


class ReportDataNormalizer:
    """Maps the raw ``/api/report`` body into typed rows.

    Money stays as ``Decimal`` in the model; rounding happens only when a value
    is rendered or exported.
    """

    def __init__(self, directory: CustomerDirectory) -> None:
        self.directory = directory

    def normalize(self, payload: Mapping[str, Any]) -> ReportResult:
        return ReportResult(
            summary=[_summary_row(raw) for raw in _records(payload.get("summary"))],
            detail=[_detail_row(raw) for raw in _records(payload.get("detail"))],
            analytics=_analytics(payload.get("analytics")),
        )

    def summary_customer_label(self, row: SummaryRow) -> str:
        return self.directory.resolve(row.customer)

    def detail_customer_label(self, row: DetailRow) -> str:
        if row.customer_name:
            return row.customer_name
        if row.customer_id:
            return self.directory.resolve(row.customer_id)
        return UNKNOWN_CUSTOMER


def _records(value: Any) -> List[Mapping[str, Any]]:
    if not value:
        return []
    return [item for item in value if isinstance(item, Mapping)]


def _summary_row(raw: Mapping[str, Any]) -> SummaryRow:
    return SummaryRow(
        customer=_text(raw.get("customer")) or "",
        month=_text(raw.get("month")) or "",
        orders=_integer(raw.get("orders"), "orders"),
        amount=_decimal(raw.get("amount"), "amount"),
        order_numbers=_text(raw.get("order_numbers")) or "",
    )


def _detail_row(raw: Mapping[str, Any]) -> DetailRow:
    return DetailRow(
        order_id=raw.get("order_id"),
        order_number=_text(raw.get("order_number")),
        order_date=_text(raw.get("order_date")) or "",
        customer_id=_text(raw.get("customer_id")),
        customer_name=_text(raw.get("customer_name")),
        customer_email=_text(raw.get("customer_email")),
        line_sum=_decimal(raw.get("line_sum"), "line_sum"),
        additional_charges=_decimal(raw.get("additional_charges"), "additional_charges"),
        billing_amount=_decimal(raw.get("billing_amount"), "billing_amount"),
        actual_spend=_decimal(raw.get("actual_spend"), "actual_spend"),
        profit_margin=_decimal(raw.get("profit_margin"), "profit_margin"),
    )


def _analytics(raw: Any) -> Optional[Analytics]:
    if not isinstance(raw, Mapping):
        return None
    return Analytics(
        total_revenue=_decimal(raw.get("totalRevenue"), "totalRevenue"),
        total_orders=_integer(raw.get("totalOrders"), "totalOrders"),
        unique_customers=_integer(raw.get("uniqueCustomers"), "uniqueCustomers"),
        avg_profit_margin=_decimal(raw.get("avgProfitMargin"), "avgProfitMargin"),
    )


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value)
    return text if text else None


def _decimal(value: Any, field_name: str) -> Decimal:
    if value is None or value == "":
        return Decimal(0)
    if isinstance(value, bool):
        raise ParseError(f"Field {field_name!r} is not numeric: {value!r}")
    if isinstance(value, Decimal):
        number = value
    else:
        try:
            number = Decimal(str(value))
        except InvalidOperation as exc:
            raise ParseError(f"Field {field_name!r} is not numeric: {value!r}") from exc
    # NaN and Infinity cannot be rounded for display or export.
    if not number.is_finite():
        raise ParseError(f"Field {field_name!r} is not a finite number: {value!r}")
    return number


def _integer(value: Any, field_name: str) -> int:
    return int(_decimal(value, field_name))
