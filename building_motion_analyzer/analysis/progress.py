from __future__ import annotations

from typing import Callable, Optional

ProgressCallback = Callable[[float], None]


def null_progress(percent: float) -> None:
    """Progress sink that ignores every report."""


def scaled_progress(callback: Optional[ProgressCallback], start: float, stop: float) -> ProgressCallback:
    """
    Map a sub-task's 0..100 progress onto the [start, stop] window of *callback*.

    A missing callback yields :func:`null_progress`.
    """
    if callback is None:
        return null_progress
    span = float(stop) - float(start)

    def report(percent: float) -> None:
        callback(float(start) + span * min(max(float(percent), 0.0), 100.0) / 100.0)

    return report
