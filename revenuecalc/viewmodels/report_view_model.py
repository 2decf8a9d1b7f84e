from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import List, Optional

from PySide6.QtCore import QObject, Signal, Slot

from ..models.report_models import (
    Analytics,
    CustomerOption,
    DetailRow,
    FilterState,
    Metric,
    ReportResult,
    SummaryRow,
    TotalsView,
)
from ..services import csv_export
from ..services.aggregates import aggregate
from ..services.customer_directory import CustomerDirectory
from ..services.dispatch import Dispatcher
from ..services.report_client import ReportingServiceClient
from ..services.report_fetcher import CustomerListLoader, ReportFetcher
from ..services.report_normalizer import ReportDataNormalizer
from ..services.report_request import ReportRequestBuilder, default_filter_state

logger = logging.getLogger(__name__)

ALL_CUSTOMERS = CustomerOption(label="All customers", value="")


class ReportViewModel(QObject):
    """State behind the revenue report window.

    Results are replaced as a whole on every successful report and left in
    place when a later report fails. Customer-list and report errors are kept
    apart; the banner shows the report error when both are present.
    """

    filterChanged = Signal()
    customersChanged = Signal()
    customersLoadingChanged = Signal(bool)
    resultsChanged = Signal()
    busyChanged = Signal(bool)
    progressChanged = Signal(int)
    bannerChanged = Signal(str)

    def __init__(
        self,
        client: ReportingServiceClient,
        directory: CustomerDirectory,
        *,
        request_builder: Optional[ReportRequestBuilder] = None,
        dispatcher: Optional[Dispatcher] = None,
        fetcher: Optional[ReportFetcher] = None,
        customer_loader: Optional[CustomerListLoader] = None,
        today: Optional[date] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self.directory = directory
        self.normalizer = ReportDataNormalizer(directory)
        self._request_builder = request_builder or ReportRequestBuilder()
        self._fetcher = fetcher or ReportFetcher(client, self.normalizer, dispatcher=dispatcher, parent=self)
        self._customer_loader = customer_loader or CustomerListLoader(
            client, directory, dispatcher=dispatcher, parent=self
        )

        self.filter_state: FilterState = default_filter_state(today)
        self.customers: List[CustomerOption] = []
        self.summary: List[SummaryRow] = []
        self.detail: List[DetailRow] = []
        self.analytics: Optional[Analytics] = None
        self._report_error = ""
        self._customers_error = ""

        self._fetcher.resultReady.connect(self._apply_result)
        self._fetcher.errorChanged.connect(self._on_report_error)
        self._fetcher.stateChanged.connect(self._on_fetch_state)
        self._fetcher.progressChanged.connect(self.progressChanged)
        self._customer_loader.customersLoaded.connect(self._on_customers_loaded)
        self._customer_loader.errorChanged.connect(self._on_customers_error)
        self._customer_loader.loadingChanged.connect(self.customersLoadingChanged)

    # Filter state
    def set_start(self, value: date) -> None:
        self.filter_state.start = value
        self.filterChanged.emit()

    def set_end(self, value: date) -> None:
        self.filter_state.end = value
        self.filterChanged.emit()

    def set_metric(self, metric: Metric) -> None:
        self.filter_state.metric = Metric(metric)
        self.filterChanged.emit()

    def set_customer_id(self, customer_id: Optional[str]) -> None:
        self.filter_state.customer_id = customer_id or None
        self.filterChanged.emit()

    def customer_options(self) -> List[CustomerOption]:
        return [ALL_CUSTOMERS, *self.customers]

    # Lifecycle
    def load_customers(self) -> None:
        self._customer_loader.load()

    def generate_report(self) -> bool:
        if self.filter_state.start > self.filter_state.end:
            self._on_report_error("Start date must be on or before the end date.")
            return False
        request = self._request_builder.build(self.filter_state)
        self._on_report_error("")
        self._fetcher.fetch(request)
        return True

    def close(self) -> None:
        self._fetcher.close()
        self._customer_loader.close()

    @property
    def is_busy(self) -> bool:
        return self._fetcher.is_busy

    @property
    def progress(self) -> int:
        return self._fetcher.progress

    @property
    def customers_loading(self) -> bool:
        return self._customer_loader.is_loading

    @property
    def report_error(self) -> str:
        return self._report_error

    @property
    def customers_error(self) -> str:
        return self._customers_error

    @property
    def banner_message(self) -> str:
        return self._report_error or self._customers_error

    # Derived views
    @property
    def totals(self) -> TotalsView:
        return aggregate(self.detail)

    @property
    def has_detail(self) -> bool:
        return bool(self.detail)

    def summary_customer_label(self, row: SummaryRow) -> str:
        return self.normalizer.summary_customer_label(row)

    def detail_customer_label(self, row: DetailRow) -> str:
        return self.normalizer.detail_customer_label(row)

    # Export
    def summary_export_name(self) -> str:
        state = self.filter_state
        return csv_export.summary_filename(state.metric, state.start, state.end)

    def detail_export_name(self) -> str:
        state = self.filter_state
        return csv_export.detail_filename(state.metric, state.start, state.end)

    def export_summary(self, destination: str | Path) -> Path:
        return csv_export.write_csv(csv_export.summary_csv(self.summary, self.directory), destination)

    def export_detail(self, destination: str | Path) -> Path:
        return csv_export.write_csv(csv_export.detail_csv(self.detail), destination)

    @Slot(object)
    def _apply_result(self, result: ReportResult) -> None:
        self.summary = list(result.summary)
        self.detail = list(result.detail)
        self.analytics = result.analytics
        self.resultsChanged.emit()

    @Slot(str)
    def _on_report_error(self, message: str) -> None:
        if message == self._report_error:
            return
        self._report_error = message
        self.bannerChanged.emit(self.banner_message)

    @Slot(str)
    def _on_fetch_state(self, _state: str) -> None:
        self.busyChanged.emit(self._fetcher.is_busy)

    @Slot(list)
    def _on_customers_loaded(self, options: list) -> None:
        self.customers = list(options)
        self.customersChanged.emit()

    @Slot(str)
    def _on_customers_error(self, message: str) -> None:
        self._customers_error = message
        self.bannerChanged.emit(self.banner_message)
