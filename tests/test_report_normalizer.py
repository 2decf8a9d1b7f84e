from __future__ import annotations

import json
from decimal import Decimal

import pytest
from conftest import make_detail_row

from revenuecalc.services.customer_directory import CustomerDirectory
from revenuecalc.services.report_client import ParseError
from revenuecalc.services.report_normalizer import UNKNOWN_CUSTOMER, ReportDataNormalizer


def test_normalize_maps_all_sections(directory: CustomerDirectory, report_payload: dict) -> None:
    result = ReportDataNormalizer(directory).normalize(report_payload)

    assert len(result.summary) == 2
    first = result.summary[0]
    assert first.customer == "8688425369879"
    assert first.month == "2024-01"
    assert first.orders == 2
    assert first.amount == Decimal("1234.5")
    assert first.order_numbers == "#1001, #1002"

    assert len(result.detail) == 2
    second = result.detail[1]
    assert second.order_id == 1003
    assert second.order_number is None
    assert second.customer_name is None
    assert second.line_sum == Decimal("10")
    assert second.profit_margin == Decimal("8.3")
    assert second.display_order_number == "#1003"

    assert result.analytics is not None
    assert result.analytics.total_revenue == Decimal("1333.5")
    assert result.analytics.total_orders == 3
    assert result.analytics.unique_customers == 2


@pytest.mark.parametrize("payload", [{}, {"summary": None, "detail": None, "analytics": None}])
def test_missing_sections_default_to_empty(directory: CustomerDirectory, payload: dict) -> None:
    result = ReportDataNormalizer(directory).normalize(payload)

    assert result.summary == []
    assert result.detail == []
    assert result.analytics is None


def test_numbers_keep_full_precision(directory: CustomerDirectory) -> None:
    result = ReportDataNormalizer(directory).normalize(
        {"detail": [{"order_id": 1, "line_sum": 0.1, "billing_amount": "12.345"}]}
    )

    row = result.detail[0]
    assert row.line_sum == Decimal("0.1")
    assert row.billing_amount == Decimal("12.345")
    assert row.additional_charges == Decimal(0)


def test_non_numeric_amount_is_a_parse_error(directory: CustomerDirectory) -> None:
    with pytest.raises(ParseError):
        ReportDataNormalizer(directory).normalize({"detail": [{"order_id": 1, "line_sum": "lots"}]})


@pytest.mark.parametrize("raw", ["NaN", "Infinity", float("inf"), Decimal("-Infinity")])
def test_non_finite_amount_is_a_parse_error(directory: CustomerDirectory, raw: object) -> None:
    with pytest.raises(ParseError):
        ReportDataNormalizer(directory).normalize({"detail": [{"order_id": 1, "profit_margin": raw}]})


def test_non_finite_json_constant_is_rejected(directory: CustomerDirectory) -> None:
    payload = json.loads('{"analytics": {"avgProfitMargin": Infinity}}', parse_float=Decimal)

    with pytest.raises(ParseError):
        ReportDataNormalizer(directory).normalize(payload)


def test_detail_label_prefers_explicit_name(directory: CustomerDirectory) -> None:
    normalizer = ReportDataNormalizer(directory)

    assert normalizer.detail_customer_label(make_detail_row(customer_name="Jane Doe")) == "Jane Doe"
    assert normalizer.detail_customer_label(make_detail_row(customer_name=None)) == "Auxia Team"
    assert normalizer.detail_customer_label(make_detail_row(customer_name=None, customer_id="31337")) == "31337"
    assert normalizer.detail_customer_label(make_detail_row(customer_name=None, customer_id=None)) == UNKNOWN_CUSTOMER


def test_summary_label_uses_directory(directory: CustomerDirectory, report_payload: dict) -> None:
    normalizer = ReportDataNormalizer(directory)
    result = normalizer.normalize(report_payload)

    assert [normalizer.summary_customer_label(row) for row in result.summary] == ["Auxia Team", "5550001"]
