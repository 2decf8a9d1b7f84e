from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Callable, Iterable, List, Sequence

from ..models.report_models import DetailRow, Metric, SummaryRow
from .customer_directory import CustomerDirectory
from .formatting import fixed_money

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CsvColumn:
    header: str
    accessor: Callable[[Any], Any]


def summary_columns(directory: CustomerDirectory) -> List[CsvColumn]:
    return [
        CsvColumn("customer", lambda row: directory.resolve(row.customer)),
        CsvColumn("month", lambda row: row.month),
        CsvColumn("orders", lambda row: row.orders),
        CsvColumn("amount", lambda row: fixed_money(row.amount)),
        CsvColumn("order_numbers", lambda row: row.order_numbers or ""),
    ]


DETAIL_COLUMNS: List[CsvColumn] = [
    CsvColumn("order_id", lambda row: _blank_if_none(row.order_id)),
    CsvColumn("order_number", lambda row: row.order_number or ""),
    CsvColumn("order_date", lambda row: row.order_date or ""),
    CsvColumn("customer_name", lambda row: row.customer_name or ""),
    CsvColumn("customer_email", lambda row: row.customer_email or ""),
    CsvColumn("line_sum", lambda row: fixed_money(row.line_sum)),
    CsvColumn("additional_charges", lambda row: fixed_money(row.additional_charges)),
    CsvColumn("billing_amount", lambda row: fixed_money(row.billing_amount)),
    CsvColumn("actual_spend", lambda row: fixed_money(row.actual_spend)),
    CsvColumn("profit_margin", lambda row: fixed_money(row.profit_margin)),
]


def to_csv(rows: Iterable[Any], columns: Sequence[CsvColumn]) -> str:
    """Serialize rows with a header line.

    Text fields are always quoted and numbers never are, so embedded commas
    and quotes survive a round trip through ``csv.reader``.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    writer.writerow([column.header for column in columns])
    for row in rows:
        writer.writerow([column.accessor(row) for column in columns])
    return buffer.getvalue()


def summary_csv(rows: Iterable[SummaryRow], directory: CustomerDirectory) -> str:
    return to_csv(rows, summary_columns(directory))


def detail_csv(rows: Iterable[DetailRow]) -> str:
    return to_csv(rows, DETAIL_COLUMNS)


def summary_filename(metric: Metric, start: date, end: date) -> str:
    return f"revenue_{Metric(metric).value}_{start.isoformat()}_{end.isoformat()}.csv"


def detail_filename(metric: Metric, start: date, end: date) -> str:
    return f"orders_{Metric(metric).value}_{start.isoformat()}_{end.isoformat()}.csv"


def write_csv(text: str, destination: str | Path) -> Path:
    path = Path(destination).expanduser()
    if not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)

    with path.open("w", newline="", encoding="utf-8") as handle:
        handle.write(text)

    logger.info("Exported %d bytes of CSV to %s", len(text.encode("utf-8")), path)
    return path


def _blank_if_none(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, (int, str)) and not isinstance(value, bool):
        return value
    return str(value)
