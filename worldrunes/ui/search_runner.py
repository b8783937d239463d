from __future__ import annotations

from PySide6.QtCore import QObject, QThreadPool, Signal, Slot

from worldrunes.domain.catalog import Catalog
from worldrunes.domain.models import SolverConfig
from worldrunes.domain.search_policy import DEFAULT_POLICY, SearchPolicy
from worldrunes.engine.generations import SearchGenerations
from worldrunes.engine.solver import SearchOutcome, search_with_trace
from worldrunes.ui.async_worker import _SearchWorker


class SearchRunner(QObject):
    """Runs searches on a thread pool; only the newest submission is delivered.

    Every emblem or config change calls ``submit``. Older runs see themselves
    as cancelled and stop at the next candidate; if one still finishes, its
    outcome is dropped.
    """

    results_ready = Signal(object)  # SearchOutcome
    failed = Signal(str)

    def __init__(
        self,
        catalog: Catalog,
        policy: SearchPolicy = DEFAULT_POLICY,
        pool: QThreadPool | None = None,
        parent: QObject | None = None,
    ):
        super().__init__(parent)
        self._catalog = catalog
        self._policy = policy
        self._pool = pool or QThreadPool.globalInstance()
        self._generations = SearchGenerations()

    @property
    def generations(self) -> SearchGenerations:
        return self._generations

    def submit(self, emblem_1: str, emblem_2: str, config: SolverConfig) -> int:
        generation = self._generations.next()
        worker = _SearchWorker(
            generation,
            search_with_trace,
            emblem_1,
            emblem_2,
            config,
            self._catalog,
            policy=self._policy,
            is_cancelled=lambda: not self._generations.is_current(generation),
        )
        worker.signals.finished.connect(self._on_finished)
        worker.signals.failed.connect(self._on_failed)
        self._pool.start(worker)
        return generation

    @Slot(object)
    def _on_finished(self, outcome: SearchOutcome) -> None:
        if not self._generations.is_current(outcome.generation):
            return
        self.results_ready.emit(outcome)

    @Slot(int, str)
    def _on_failed(self, generation: int, message: str) -> None:
        if not self._generations.is_current(generation):
            return
        self.failed.emit(str(message))
