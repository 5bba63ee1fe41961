"""Background content requests.

Provider calls block on the network, so they run on the global ``QThreadPool``.
Results come back through a queued signal and are applied on the GUI thread.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal

logger = logging.getLogger(__name__)


class _WorkerSignals(QObject):
    # (key, result, failed)
    finished = Signal(object, object, bool)


class ContentWorker(QRunnable):
    """Runs ``fn()`` off the GUI thread and reports ``(key, result, failed)``."""

    def __init__(self, key: Any, fn: Callable[[], Any]) -> None:
        super().__init__()
        self._key = key
        self._fn = fn
        self.signals = _WorkerSignals()

    def run(self) -> None:
        try:
            result = self._fn()
        except Exception:
            logger.exception("Content request %r failed", self._key)
            self.signals.finished.emit(self._key, None, True)
            return
        self.signals.finished.emit(self._key, result, False)


def submit(key: Any, fn: Callable[[], Any], on_done: Callable[[Any, Any, bool], None]) -> ContentWorker:
    worker = ContentWorker(key, fn)
    worker.signals.finished.connect(on_done)
    QThreadPool.globalInstance().start(worker)
    return worker
