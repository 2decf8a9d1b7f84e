from __future__ import annotations

import logging
from enum import Enum
from typing import Any, List, Optional

from PySide6.QtCore import QObject, QTimer, Signal, Slot

from ..config import get_settings
from ..models.report_models import CustomerOption, ReportRequest, ReportResult
from .customer_directory import CustomerDirectory, build_customer_options
from .dispatch import Dispatcher, ThreadDispatcher
from .report_client import ReportingServiceClient
from .report_normalizer import ReportDataNormalizer

logger = logging.getLogger(__name__)


class FetchState(str, Enum):
    IDLE = "idle"
    REQUESTING = "requesting"


class ReportFetcher(QObject):
    """Runs ``POST /api/report`` off the GUI thread and tracks its progress.

    Every call to :meth:`fetch` takes a new generation number; only the
    response belonging to the most recent call is applied, older ones are
    dropped. After :meth:`close` no signal is emitted again, even if a
    response is still on its way.
    """

    stateChanged = Signal(str)
    progressChanged = Signal(int)
    errorChanged = Signal(str)
    resultReady = Signal(object)

    _jobSucceeded = Signal(int, object)
    _jobFailed = Signal(int, str)

    def __init__(
        self,
        client: ReportingServiceClient,
        normalizer: ReportDataNormalizer,
        *,
        dispatcher: Optional[Dispatcher] = None,
        progress_interval_ms: Optional[int] = None,
        progress_step: Optional[int] = None,
        progress_cap: Optional[int] = None,
        progress_hold_ms: Optional[int] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        settings = get_settings()
        self._client = client
        self._normalizer = normalizer
        self._dispatcher: Dispatcher = dispatcher or ThreadDispatcher(self)
        self._progress_step = progress_step if progress_step is not None else settings.progress_step
        self._progress_cap = progress_cap if progress_cap is not None else settings.progress_cap

        self._state = FetchState.IDLE
        self._progress = 0
        self._error = ""
        self._generation = 0
        self._closed = False

        self._progress_timer = QTimer(self)
        self._progress_timer.setInterval(
            progress_interval_ms if progress_interval_ms is not None else settings.progress_interval_ms
        )
        self._progress_timer.timeout.connect(self._advance_progress)

        self._hold_timer = QTimer(self)
        self._hold_timer.setSingleShot(True)
        self._hold_timer.setInterval(progress_hold_ms if progress_hold_ms is not None else settings.progress_hold_ms)
        self._hold_timer.timeout.connect(self._reset_progress)

        self._jobSucceeded.connect(self._on_job_succeeded)
        self._jobFailed.connect(self._on_job_failed)

    @property
    def state(self) -> FetchState:
        return self._state

    @property
    def progress(self) -> int:
        return self._progress

    @property
    def error(self) -> str:
        return self._error

    @property
    def is_busy(self) -> bool:
        return self._state is FetchState.REQUESTING

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def is_ticking(self) -> bool:
        return self._progress_timer.isActive()

    def fetch(self, request: ReportRequest) -> int:
        if self._closed:
            raise RuntimeError("Report fetcher has been closed.")

        self._generation += 1
        token = self._generation
        logger.info("Requesting report %s (generation %d)", request.to_payload(), token)

        self._hold_timer.stop()
        self._set_error("")
        self._set_progress(0)
        self._set_state(FetchState.REQUESTING)
        self._progress_timer.start()

        client = self._client
        normalizer = self._normalizer

        def job() -> ReportResult:
            return normalizer.normalize(client.fetch_report(request))

        self._dispatcher(
            job,
            lambda result: self._jobSucceeded.emit(token, result),
            lambda message: self._jobFailed.emit(token, message),
        )
        return token

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._progress_timer.stop()
        self._hold_timer.stop()
        logger.debug("Report fetcher closed at generation %d", self._generation)

    @Slot(int, object)
    def _on_job_succeeded(self, token: int, result: Any) -> None:
        if not self._accepts(token):
            return
        self._progress_timer.stop()
        self._set_progress(100)
        self._set_state(FetchState.IDLE)
        logger.info(
            "Report generation %d returned %d summary rows and %d orders",
            token,
            len(result.summary),
            len(result.detail),
        )
        self.resultReady.emit(result)
        self._hold_timer.start()

    @Slot(int, str)
    def _on_job_failed(self, token: int, message: str) -> None:
        if not self._accepts(token):
            return
        self._progress_timer.stop()
        self._set_progress(0)
        self._set_error(message)
        self._set_state(FetchState.IDLE)
        logger.warning("Report generation %d failed: %s", token, message)

    def _accepts(self, token: int) -> bool:
        if self._closed:
            logger.debug("Ignoring report generation %d after close", token)
            return False
        if token != self._generation:
            logger.info("Discarding stale report generation %d (latest is %d)", token, self._generation)
            return False
        return True

    @Slot()
    def _advance_progress(self) -> None:
        self._set_progress(min(self._progress + self._progress_step, self._progress_cap))

    @Slot()
    def _reset_progress(self) -> None:
        if not self._closed:
            self._set_progress(0)

    def _set_state(self, state: FetchState) -> None:
        if state is self._state:
            return
        self._state = state
        self.stateChanged.emit(state.value)

    def _set_progress(self, value: int) -> None:
        if value == self._progress:
            return
        self._progress = value
        self.progressChanged.emit(value)

    def _set_error(self, message: str) -> None:
        if message == self._error:
            return
        self._error = message
        self.errorChanged.emit(message)


class CustomerListLoader(QObject):
    """Loads ``GET /api/customers`` once and turns it into dropdown options."""

    loadingChanged = Signal(bool)
    customersLoaded = Signal(list)
    errorChanged = Signal(str)

    _jobSucceeded = Signal(object)
    _jobFailed = Signal(str)

    def __init__(
        self,
        client: ReportingServiceClient,
        directory: CustomerDirectory,
        *,
        dispatcher: Optional[Dispatcher] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._client = client
        self._directory = directory
        self._dispatcher: Dispatcher = dispatcher or ThreadDispatcher(self)
        self._loading = False
        self._error = ""
        self._closed = False

        self._jobSucceeded.connect(self._on_job_succeeded)
        self._jobFailed.connect(self._on_job_failed)

    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def error(self) -> str:
        return self._error

    def load(self) -> None:
        if self._closed or self._loading:
            return
        self._set_loading(True)
        client = self._client
        directory = self._directory

        def job() -> List[CustomerOption]:
            return build_customer_options(client.fetch_customers(), directory)

        self._dispatcher(job, self._jobSucceeded.emit, self._jobFailed.emit)

    def close(self) -> None:
        self._closed = True

    @Slot(object)
    def _on_job_succeeded(self, options: Any) -> None:
        if self._closed:
            return
        logger.info("Loaded %d customers", len(options))
        self.customersLoaded.emit(list(options))
        self._set_loading(False)

    @Slot(str)
    def _on_job_failed(self, message: str) -> None:
        if self._closed:
            return
        logger.warning("Customer list failed to load: %s", message)
        self._error = message
        self.errorChanged.emit(message)
        self._set_loading(False)

    def _set_loading(self, loading: bool) -> None:
        if loading == self._loading:
            return
        self._loading = loading
        self.loadingChanged.emit(loading)
