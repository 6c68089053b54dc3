from __future__ import annotations

import math

import numpy as np
import pytest

from building_motion_analyzer.analysis.frames import compute_frames
from building_motion_analyzer.errors import EmptyDatasetError
from building_motion_analyzer.models.nodes import NodeRecord


def _node(node_id, story, position, h1=(), h2=(), v=(), located=True) -> NodeRecord:
    n = NodeRecord(node_id=node_id, story=story, corner="NW")
    n = n.with_displacement("H1", h1).with_displacement("H2", h2).with_displacement("V", v)
    if located:
        n = n.with_initial_position(position)
    return n


def test_positions_are_initial_plus_displacement_in_y_up() -> None:
    nodes = {"a": _node("a", "S1", (1.0, 2.0, 3.0), h1=[0.0, 0.5], h2=[0.0, 0.25], v=[0.0, -0.1])}
    series = compute_frames(nodes, [0.0, 0.01])

    assert len(series.frames) == 2
    f0, f1 = series.frames
    assert f0.frame == 1 and f0.index == 0 and f0.time == 0.0
    assert f1.frame == 2 and f1.time == pytest.approx(0.01)
    # Source (x, y, z) + (h1, h2, v), emitted as (x, z, y).
    assert f0.node_positions["a"] == pytest.approx((1.0, 3.0, 2.0))
    assert f1.node_positions["a"] == pytest.approx((1.5, 2.9, 2.25))
    # Displacement vectors keep instrument order.
    assert f1.average_displacement == pytest.approx((0.5, 0.25, -0.1))


def test_building_and_story_averages() -> None:
    nodes = {
        "a": _node("a", "S1", (0, 0, 0), h1=[2.0]),
        "b": _node("b", "S1", (1, 0, 0), h1=[4.0]),
        "c": _node("c", "S2", (0, 0, 3), h1=[0.0], v=[3.0]),
    }
    frame = compute_frames(nodes, [0.0]).frames[0]

    assert frame.average_displacement == pytest.approx((2.0, 0.0, 1.0))
    assert list(frame.stories) == ["S1", "S2"]
    s1 = frame.stories["S1"]
    assert s1.node_ids == ("a", "b")
    assert s1.n_nodes == 2
    assert s1.average_displacement == pytest.approx((3.0, 0.0, 0.0))
    assert frame.stories["S2"].average_displacement == pytest.approx((0.0, 0.0, 3.0))
    assert frame.stories["S2"].average_displacement_magnitude == pytest.approx(3.0)


def test_unlocated_nodes_are_excluded_everywhere() -> None:
    nodes = {
        "a": _node("a", "S1", (0, 0, 0), h1=[1.0]),
        "ghost": _node("ghost", "S1", (0, 0, 0), h1=[100.0], located=False),
        "ghost2": _node("ghost2", "S9", (0, 0, 0), located=False),
    }
    series = compute_frames(nodes, [0.0])
    frame = series.frames[0]

    assert set(frame.node_positions) == {"a"}
    assert frame.average_displacement == pytest.approx((1.0, 0.0, 0.0))
    assert list(frame.stories) == ["S1"]
    assert frame.stories["S1"].n_nodes == 1
    assert series.max_displacement == pytest.approx(1.0)


def test_short_series_are_padded_with_zero() -> None:
    nodes = {"a": _node("a", "S1", (0, 0, 0), h1=[1.0], v=[1.0, float("nan"), 2.0])}
    frames = compute_frames(nodes, [0.0, 0.1, 0.2]).frames
    assert frames[1].average_displacement == pytest.approx((0.0, 0.0, 0.0))
    assert frames[2].average_displacement == pytest.approx((0.0, 0.0, 2.0))


def test_running_extrema() -> None:
    nodes = {
        "a": _node("a", "S1", (0.0, 0.0, 0.0), h1=[0.0, 3.0, -1.0], h2=[0.0, 4.0, 0.0]),
        "b": _node("b", "S2", (10.0, 0.0, 5.0), h1=[1.0, -3.0, 0.0], h2=[0.0, -4.0, 0.0]),
    }
    series = compute_frames(nodes, [0.0, 0.1, 0.2])

    assert series.max_displacement == pytest.approx(5.0)
    assert series.min_displacement == pytest.approx(0.0)
    # Step 1: the two nodes cancel out building-wide but not per story.
    assert series.max_average_displacement == pytest.approx(0.5)
    assert series.max_average_story_displacement == pytest.approx(5.0)
    # Positions stay in the source Z-up frame here.
    assert series.min_position == pytest.approx((-1.0, -4.0, 0.0))
    assert series.max_position == pytest.approx((11.0, 4.0, 5.0))


def test_frame_mappings_are_read_only() -> None:
    frame = compute_frames({"a": _node("a", "S1", (0, 0, 0), h1=[1.0])}, [0.0]).frames[0]
    with pytest.raises(TypeError):
        frame.node_positions["b"] = (0.0, 0.0, 0.0)  # type: ignore[index]
    with pytest.raises(TypeError):
        frame.stories["S2"] = frame.stories["S1"]  # type: ignore[index]


def test_progress_is_monotone_and_ends_at_100() -> None:
    nodes = {"a": _node("a", "S1", (0, 0, 0), h1=np.zeros(25))}
    seen = []
    compute_frames(nodes, np.arange(25) * 0.01, seen.append, progress_every=10)

    assert seen == sorted(seen)
    assert seen[0] == 0.0
    assert seen[-1] == 100.0
    assert len(seen) == 4


def test_empty_inputs_raise() -> None:
    nodes = {"a": _node("a", "S1", (0, 0, 0), h1=[1.0])}
    with pytest.raises(EmptyDatasetError):
        compute_frames(nodes, [])
    with pytest.raises(EmptyDatasetError):
        compute_frames({"a": _node("a", "S1", (0, 0, 0), located=False)}, [0.0])
    with pytest.raises(EmptyDatasetError):
        compute_frames({}, [0.0])


def test_repeated_calls_do_not_share_extrema() -> None:
    big = {"a": _node("a", "S1", (0, 0, 0), h1=[100.0])}
    small = {"a": _node("a", "S1", (0, 0, 0), h1=[1.0])}
    compute_frames(big, [0.0])
    series = compute_frames(small, [0.0])
    assert series.max_displacement == pytest.approx(1.0)
    assert not math.isinf(series.min_displacement)


def test_fitted_to_pads_and_truncates_present_axes() -> None:
    node = _node("a", "S1", (0, 0, 0), h1=[1.0, 2.0, 3.0], v=[4.0])
    fitted = node.fitted_to(2)

    assert fitted.disp_h1.tolist() == [1.0, 2.0]
    assert fitted.disp_v.tolist() == [4.0, 0.0]
    assert fitted.disp_h2.size == 0
    assert not fitted.disp_v.flags.writeable
    assert fitted.located and fitted.initial_position == node.initial_position
    assert node.fitted_to(0).disp_h1.size == 0
    same = _node("b", "S1", (0, 0, 0), h1=[1.0, 2.0])
    assert same.fitted_to(2) is same
