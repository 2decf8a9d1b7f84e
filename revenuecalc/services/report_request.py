from __future__ import annotations

from datetime import date, datetime, time, timezone, tzinfo
from typing import Optional

from ..models.report_models import FilterState, Metric, ReportRequest

_END_OF_DAY = time(23, 59, 59)


class ReportRequestBuilder:
    """Turns the user's filter selection into the ``POST /api/report`` body.

    ``start`` is local midnight of the start date, ``end`` is 23:59:59 local
    time on the end date so the range includes the whole end day. Both are sent
    as UTC instants. ``start`` is deliberately local midnight, not UTC
    midnight, so both ends of the range use the same zone.
    ``start <= end`` is the caller's responsibility.
    """

    def __init__(self, local_tz: Optional[tzinfo] = None) -> None:
        self._local_tz = local_tz

    def build(self, state: FilterState) -> ReportRequest:
        customer_id = int(state.customer_id) if state.customer_id else None
        return ReportRequest(
            start=format_instant(self._localize(datetime.combine(state.start, time.min))),
            end=format_instant(self._localize(datetime.combine(state.end, _END_OF_DAY))),
            metric=Metric(state.metric),
            customer_id=customer_id,
        )

    def _localize(self, value: datetime) -> datetime:
        if self._local_tz is None:
            # Naive datetimes are interpreted in the machine's local zone.
            return value.astimezone()
        return value.replace(tzinfo=self._local_tz)


def format_instant(value: datetime) -> str:
    utc_value = value.astimezone(timezone.utc)
    return utc_value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc_value.microsecond // 1000:03d}Z"


def default_filter_state(today: Optional[date] = None) -> FilterState:
    current = today or date.today()
    return FilterState(start=current.replace(day=1), end=current, metric=Metric.BILLING)
