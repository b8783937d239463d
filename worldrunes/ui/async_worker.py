from __future__ import annotations

import logging
from typing import Any, Callable

from PySide6.QtCore import QObject, QRunnable, Signal

logger = logging.getLogger(__name__)


class _SearchWorkerSignals(QObject):
    finished = Signal(object)  # SearchOutcome
    failed = Signal(int, str)  # generation, message


class _SearchWorker(QRunnable):
    """One search run for one generation; ``fn`` receives ``generation=``."""

    def __init__(self, generation: int, fn: Callable[..., Any], *args: Any, **kwargs: Any):
        super().__init__()
        self.generation = int(generation)
        self.signals = _SearchWorkerSignals()
        self._fn = fn
        self._args = args
        self._kwargs = kwargs

    def run(self) -> None:
        try:
            outcome = self._fn(*self._args, generation=self.generation, **self._kwargs)
        except Exception as exc:
            logger.exception("search generation %d failed", self.generation)
            self.signals.failed.emit(self.generation, str(exc))
            return
        self.signals.finished.emit(outcome)
