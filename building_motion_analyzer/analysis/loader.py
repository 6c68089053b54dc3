"""Background ingestion with last-call-wins semantics.

A host UI submits a new ingestion whenever its inputs change. Only the most recent
submission may publish its result: queued older runs are cancelled, a running older
run aborts at its next progress report, and an older run that still finishes has its
result discarded (its future raises :class:`IngestionCancelled`).
"""

from __future__ import annotations

import concurrent.futures as cf
import logging
import threading
from typing import Callable, Mapping, Optional

from building_motion_analyzer.errors import IngestionCancelled
from building_motion_analyzer.models.animation import AnimationData

from .builder import AnimationBuilder
from .progress import ProgressCallback

logger = logging.getLogger(__name__)


class AnimationLoader:
    """
    Run :class:`AnimationBuilder` on a worker thread, keeping only the latest result.

    Callbacks run on the worker thread. on_result is called with the published data,
    on_error with the exception of a current (not superseded) run that failed.
    """

    def __init__(
        self,
        builder: Optional[AnimationBuilder] = None,
        *,
        executor: Optional[cf.Executor] = None,
        on_result: Optional[Callable[[AnimationData], None]] = None,
        on_error: Optional[Callable[[BaseException], None]] = None,
        on_progress: Optional[ProgressCallback] = None,
    ):
        self._builder = builder or AnimationBuilder()
        self._owns_executor = executor is None
        self._executor = executor or cf.ThreadPoolExecutor(max_workers=1, thread_name_prefix="animation-loader")
        self._on_result = on_result
        self._on_error = on_error
        self._on_progress = on_progress
        self._lock = threading.RLock()
        self._generation = 0
        self._pending: Optional[cf.Future] = None
        self._data: Optional[AnimationData] = None

    @property
    def data(self) -> Optional[AnimationData]:
        """Latest published result (None until a run completes)."""
        with self._lock:
            return self._data

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def submit(self, mapping_csv: str, direction_files: Mapping[str, str]) -> cf.Future:
        """Start a new ingestion, superseding every earlier one."""
        files = dict(direction_files)
        with self._lock:
            self._generation += 1
            gen = self._generation
            previous, self._pending = self._pending, None
        if previous is not None:
            previous.cancel()
        future = self._executor.submit(self._run, gen, mapping_csv, files)
        with self._lock:
            if gen == self._generation:
                self._pending = future
        logger.debug("animation loader: submitted generation %d", gen)
        return future

    def cancel(self) -> None:
        """Supersede the current run without starting a new one."""
        with self._lock:
            self._generation += 1
            previous, self._pending = self._pending, None
        if previous is not None:
            previous.cancel()

    def shutdown(self, wait: bool = True) -> None:
        self.cancel()
        if self._owns_executor:
            self._executor.shutdown(wait=wait)

    def __enter__(self) -> "AnimationLoader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown(wait=True)

    def _is_current(self, gen: int) -> bool:
        with self._lock:
            return gen == self._generation

    def _run(self, gen: int, mapping_csv: str, files: Mapping[str, str]) -> AnimationData:
        def progress(percent: float) -> None:
            if not self._is_current(gen):
                raise IngestionCancelled(f"generation {gen} superseded")
            if self._on_progress is not None:
                self._on_progress(percent)

        try:
            data = self._builder.build(mapping_csv, files, progress)
        except IngestionCancelled:
            logger.debug("animation loader: generation %d cancelled", gen)
            raise
        except Exception as exc:
            if self._is_current(gen) and self._on_error is not None:
                self._on_error(exc)
            raise

        with self._lock:
            if gen != self._generation:
                logger.debug("animation loader: discarding result of superseded generation %d", gen)
                raise IngestionCancelled(f"generation {gen} superseded")
            self._data = data
        if self._on_result is not None:
            self._on_result(data)
        return data
