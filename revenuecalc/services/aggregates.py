from __future__ import annotations

from decimal import Decimal
from typing import Sequence

from ..models.report_models import DetailRow, TotalsView


def aggregate(rows: Sequence[DetailRow]) -> TotalsView:
    """Client-side totals for the order detail rows.

    These are recomputed from the rows on screen and may differ from the
    service's own analytics block.
    """
    order_count = len(rows)
    margin_total = sum((row.profit_margin for row in rows), Decimal(0))
    avg_margin = margin_total / order_count if order_count else Decimal(0)
    return TotalsView(
        order_count=order_count,
        total_line_sum=sum((row.line_sum for row in rows), Decimal(0)),
        total_additional_charges=sum((row.additional_charges for row in rows), Decimal(0)),
        total_billing_amount=sum((row.billing_amount for row in rows), Decimal(0)),
        total_actual_spend=sum((row.actual_spend for row in rows), Decimal(0)),
        avg_profit_margin=avg_margin,
    )
