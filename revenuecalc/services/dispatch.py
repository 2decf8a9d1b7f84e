from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, Tuple

from PySide6.QtCore import QObject, QThread, Signal, Slot

from .report_client import ReportServiceError

logger = logging.getLogger(__name__)

Job = Callable[[], Any]
SuccessCallback = Callable[[Any], None]
FailureCallback = Callable[[str], None]
Dispatcher = Callable[[Job, SuccessCallback, FailureCallback], None]


class _JobWorker(QObject):
    done = Signal()

    def __init__(self, job: Job, on_success: SuccessCallback, on_failure: FailureCallback) -> None:
        super().__init__()
        self._job = job
        self._on_success = on_success
        self._on_failure = on_failure

    @Slot()
    def process(self) -> None:
        try:
            result = self._job()
        except ReportServiceError as exc:
            self._on_failure(str(exc))
        except Exception as exc:  # noqa: BLE001
            logger.exception("Background job failed unexpectedly")
            self._on_failure(str(exc))
        else:
            self._on_success(result)
        finally:
            self.done.emit()


class ThreadDispatcher(QObject):
    """Runs blocking jobs on short-lived worker threads.

    Callbacks run on the worker thread; callers route them back to the GUI
    thread by emitting a signal from inside the callback.
    """

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._running: List[Tuple[QThread, _JobWorker]] = []

    def __call__(self, job: Job, on_success: SuccessCallback, on_failure: FailureCallback) -> None:
        thread = QThread(self)
        worker = _JobWorker(job, on_success, on_failure)
        worker.moveToThread(thread)
        thread.started.connect(worker.process)
        worker.done.connect(thread.quit)
        worker.done.connect(worker.deleteLater)
        thread.finished.connect(thread.deleteLater)
        thread.finished.connect(self._on_thread_finished)
        self._running.append((thread, worker))
        thread.start()

    @property
    def active_count(self) -> int:
        return len(self._running)

    def shutdown(self) -> None:
        # Requests have no timeout, so this blocks until each one returns.
        for thread, _ in list(self._running):
            thread.quit()
            thread.wait()
        self._running.clear()

    @Slot()
    def _on_thread_finished(self) -> None:
        finished = self.sender()
        self._running = [entry for entry in self._running if entry[0] is not finished]
