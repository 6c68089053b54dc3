from __future__ import annotations

import threading

import pytest

from building_motion_analyzer.analysis.builder import AnimationBuilder
from building_motion_analyzer.analysis.loader import AnimationLoader
from building_motion_analyzer.errors import IngestionCancelled, UnknownDirectionError

MAPPING = "id,story,corner\n1,S1,NW\n"
TIMEOUT = 10.0


def _export(value: float) -> str:
    return f"Column, 2, Disp, 1, Node, 0, 0, 0\n0.0, 0\n0.01, {value}\n"


class _GatedBuilder(AnimationBuilder):
    """Blocks its first build until released, so a newer submission can overtake it."""

    def __init__(self):
        super().__init__()
        self.started = threading.Event()
        self.gate = threading.Event()
        self._first = True

    def build(self, mapping_csv, direction_files, on_progress=None):
        if self._first:
            self._first = False
            self.started.set()
            assert self.gate.wait(TIMEOUT)
        return super().build(mapping_csv, direction_files, on_progress)


def test_latest_submission_wins() -> None:
    builder = _GatedBuilder()
    results = []
    with AnimationLoader(builder, on_result=results.append) as loader:
        old = loader.submit(MAPPING, {"D_H1_A": _export(1.0)})
        assert builder.started.wait(TIMEOUT)
        queued = loader.submit(MAPPING, {"D_H1_A": _export(2.0)})
        new = loader.submit(MAPPING, {"D_H1_A": _export(3.0)})
        builder.gate.set()

        data = new.result(TIMEOUT)
        with pytest.raises(IngestionCancelled):
            old.result(TIMEOUT)
        assert queued.cancelled()

        assert results == [data]
        assert loader.data is data
        assert loader.generation == 3
        assert data.nodes["1"].disp_h1[1] == pytest.approx(3.0 * 0.0254)


def test_cancel_discards_running_result() -> None:
    builder = _GatedBuilder()
    results = []
    with AnimationLoader(builder, on_result=results.append) as loader:
        future = loader.submit(MAPPING, {"D_H1_A": _export(1.0)})
        assert builder.started.wait(TIMEOUT)
        loader.cancel()
        builder.gate.set()

        with pytest.raises(IngestionCancelled):
            future.result(TIMEOUT)
        assert results == []
        assert loader.data is None


def test_progress_forwarded_for_current_run() -> None:
    seen = []
    with AnimationLoader(on_progress=seen.append) as loader:
        loader.submit(MAPPING, {"D_H1_A": _export(1.0)}).result(TIMEOUT)
    assert seen[0] == 0.0
    assert seen[-1] == 100.0


def test_errors_of_current_run_are_reported() -> None:
    errors = []
    with AnimationLoader(on_error=errors.append) as loader:
        future = loader.submit(MAPPING, {"D_Q_A": _export(1.0)})
        with pytest.raises(UnknownDirectionError):
            future.result(TIMEOUT)
    assert len(errors) == 1
    assert isinstance(errors[0], UnknownDirectionError)


def test_result_callback_does_not_hold_the_lock() -> None:
    entered = threading.Event()
    release = threading.Event()

    def slow_result(data):
        entered.set()
        assert release.wait(TIMEOUT)

    with AnimationLoader(on_result=slow_result) as loader:
        future = loader.submit(MAPPING, {"D_H1_A": _export(1.0)})
        assert entered.wait(TIMEOUT)

        seen = []
        reader = threading.Thread(target=lambda: seen.append((loader.data, loader.generation)))
        reader.start()
        reader.join(TIMEOUT)
        alive = reader.is_alive()
        release.set()

        assert not alive
        assert seen[0][0] is not None
        assert seen[0][1] == 1
        future.result(TIMEOUT)
