from __future__ import annotations

import csv
import io
from datetime import date
from decimal import Decimal
from pathlib import Path

from conftest import make_detail_row

from revenuecalc.models.report_models import Metric, SummaryRow
from revenuecalc.services import csv_export
from revenuecalc.services.customer_directory import CustomerDirectory


def _parse(text: str) -> list[list[str]]:
    return list(csv.reader(io.StringIO(text)))


def _summary_rows() -> list[SummaryRow]:
    return [
        SummaryRow(
            customer="8688425369879",
            month="2024-01",
            orders=2,
            amount=Decimal("1234.5"),
            order_numbers="#1001, #1002",
        ),
        SummaryRow(customer="5550001", month="2024-02", orders=1, amount=Decimal("99")),
    ]


def test_summary_csv_uses_resolved_customer_names(directory: CustomerDirectory) -> None:
    text = csv_export.summary_csv(_summary_rows(), directory)

    assert text.splitlines() == [
        '"customer","month","orders","amount","order_numbers"',
        '"Auxia Team","2024-01",2,1234.50,"#1001, #1002"',
        '"5550001","2024-02",1,99.00,""',
    ]


def test_detail_csv_renders_missing_fields_as_empty(directory: CustomerDirectory) -> None:
    row = make_detail_row(order_id=1003, customer_name=None, customer_email=None, order_number=None)

    parsed = _parse(csv_export.detail_csv([row]))

    assert parsed[0] == [
        "order_id",
        "order_number",
        "order_date",
        "customer_name",
        "customer_email",
        "line_sum",
        "additional_charges",
        "billing_amount",
        "actual_spend",
        "profit_margin",
    ]
    assert parsed[1] == [
        "1003",
        "",
        "2024-01-05T10:00:00Z",
        "",
        "",
        "10.00",
        "2.00",
        "12.00",
        "11.00",
        "8.30",
    ]
    assert "None" not in csv_export.detail_csv([row])


def test_export_is_byte_identical_for_identical_input(directory: CustomerDirectory) -> None:
    rows = [make_detail_row(order_id=index, customer_name=f"Customer {index}") for index in range(5)]

    assert csv_export.detail_csv(rows) == csv_export.detail_csv(rows)
    assert csv_export.summary_csv(_summary_rows(), directory) == csv_export.summary_csv(_summary_rows(), directory)


def test_round_trip_preserves_commas_and_quotes(directory: CustomerDirectory) -> None:
    tricky = make_detail_row(
        order_id=7,
        order_number='#7, "rush"',
        customer_name='O\'Brien, "Bob"',
        customer_email="bob@example.com",
        line_sum=Decimal("1000.005"),
        profit_margin=Decimal("-3.25"),
    )
    plain = make_detail_row(order_id=8, customer_name="Plain")

    parsed = _parse(csv_export.detail_csv([tricky, plain]))

    assert len(parsed) == 3
    assert parsed[1][1] == '#7, "rush"'
    assert parsed[1][3] == 'O\'Brien, "Bob"'
    assert Decimal(parsed[1][5]) == Decimal("1000.01")
    assert Decimal(parsed[1][9]) == Decimal("-3.25")
    assert parsed[2][3] == "Plain"


def test_summary_round_trip_with_comma_in_customer_name() -> None:
    directory = CustomerDirectory.from_mapping({"1": {"name": 'Acme, Inc. "West"'}})
    rows = [SummaryRow(customer="1", month="2024-03", orders=3, amount=Decimal("10.1"), order_numbers="A,B")]

    parsed = _parse(csv_export.summary_csv(rows, directory))

    assert parsed[1] == ['Acme, Inc. "West"', "2024-03", "3", "10.10", "A,B"]


def test_filenames_encode_metric_and_date_range() -> None:
    start, end = date(2024, 1, 1), date(2024, 1, 31)

    assert csv_export.summary_filename(Metric.BILLING, start, end) == "revenue_billing_2024-01-01_2024-01-31.csv"
    assert csv_export.detail_filename(Metric.ACTUAL, start, end) == "orders_actual_2024-01-01_2024-01-31.csv"


def test_write_csv_creates_parent_directories(tmp_path: Path) -> None:
    destination = tmp_path / "exports" / "orders.csv"

    written = csv_export.write_csv("a,b\n1,2\n", destination)

    assert written == destination
    assert destination.read_bytes() == b"a,b\n1,2\n"
