"""Per-time-step frame computation.

One forward pass over the time axis. At each step every located node contributes its
displacement vector (H1, H2, V) to:

- its world position (initial + displacement, emitted Y-up);
- the building-wide average (divided by the number of located nodes);
- its story average (divided by that story's member count);
- the running extrema.

The running extrema live in an accumulator created per call and returned with the
frames, so nothing survives between calls.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from building_motion_analyzer.errors import EmptyDatasetError
from building_motion_analyzer.models.frames import Frame, StoryAggregate
from building_motion_analyzer.models.nodes import DIRECTIONS, NodeRecord, Vec3

from .progress import ProgressCallback, null_progress
from .units import z_up_to_y_up_rows

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrameSeries:
    """
    Output of :func:`compute_frames`.

    Scalars are displacement magnitudes in meters. min_position / max_position are world
    positions in the source Z-up frame; the builder remaps them with the initial positions.
    """
    frames: Tuple[Frame, ...]
    max_average_displacement: float
    max_average_story_displacement: float
    max_displacement: float
    min_displacement: float
    min_position: Vec3
    max_position: Vec3


@dataclass
class _RunningExtrema:
    max_average_displacement: float = 0.0
    max_average_story_displacement: float = 0.0
    max_displacement: float = float("-inf")
    min_displacement: float = float("inf")
    min_position: np.ndarray = field(default_factory=lambda: np.full(3, np.inf))
    max_position: np.ndarray = field(default_factory=lambda: np.full(3, -np.inf))

    def fold(
        self,
        magnitudes: np.ndarray,
        world: np.ndarray,
        average_magnitude: float,
        story_magnitudes: np.ndarray,
    ) -> None:
        self.max_displacement = max(self.max_displacement, float(magnitudes.max()))
        self.min_displacement = min(self.min_displacement, float(magnitudes.min()))
        self.min_position = np.minimum(self.min_position, world.min(axis=0))
        self.max_position = np.maximum(self.max_position, world.max(axis=0))
        self.max_average_displacement = max(self.max_average_displacement, average_magnitude)
        self.max_average_story_displacement = max(
            self.max_average_story_displacement, float(story_magnitudes.max())
        )


def _padded_displacements(nodes: Sequence[NodeRecord], n_steps: int) -> np.ndarray:
    """Stack node displacements into ``(n_steps, n_nodes, 3)``; missing or NaN samples are 0."""
    disp = np.zeros((n_steps, len(nodes), 3), dtype=np.float64)
    for j, node in enumerate(nodes):
        for k, direction in enumerate(DIRECTIONS):
            series = node.displacement(direction)
            m = min(series.size, n_steps)
            if m:
                disp[:m, j, k] = np.nan_to_num(series[:m], nan=0.0)
    return disp


def _vec3(row: np.ndarray) -> Vec3:
    return (float(row[0]), float(row[1]), float(row[2]))


def compute_frames(
    nodes: Mapping[str, NodeRecord],
    time_steps: Sequence[float] | np.ndarray,
    on_progress: Optional[ProgressCallback] = None,
    *,
    progress_every: int = 100,
) -> FrameSeries:
    """
    Compute one Frame per time step.

    Parameters
    ----------
    nodes:
        Merged node records: initial positions in meters (Z-up), displacements in meters.
        Nodes that are not located are skipped entirely.
    time_steps:
        Time values in seconds; one frame is emitted per entry.
    on_progress:
        Called with 0..100 every *progress_every* steps and once at the end.

    Raises
    ------
    EmptyDatasetError
        If there are no time steps or no located nodes.
    """
    report = on_progress or null_progress
    t = np.asarray(time_steps, dtype=np.float64).reshape(-1)
    n_steps = int(t.size)
    located = [node for node in nodes.values() if node.located]
    if n_steps == 0:
        raise EmptyDatasetError("No time steps to compute frames for.")
    if not located:
        raise EmptyDatasetError("No node has an initial position; check that the mapping ids match the exports.")

    node_ids = [node.node_id for node in located]
    n_nodes = len(node_ids)
    initial = np.array([node.initial_position for node in located], dtype=np.float64)
    disp = _padded_displacements(located, n_steps)

    # Story membership follows node order; the key is the raw story string.
    story_members: Dict[str, List[int]] = {}
    for j, node in enumerate(located):
        story_members.setdefault(node.story, []).append(j)
    story_ids = list(story_members.keys())
    story_node_ids = [tuple(node_ids[j] for j in story_members[s]) for s in story_ids]
    story_index = [np.asarray(story_members[s], dtype=np.intp) for s in story_ids]
    story_counts = np.array([idx.size for idx in story_index], dtype=np.float64)

    acc = _RunningExtrema()
    frames: List[Frame] = []
    every = max(1, int(progress_every))

    for step in range(n_steps):
        d = disp[step]
        world = initial + d

        magnitudes = np.linalg.norm(d, axis=1)
        average = d.sum(axis=0) / n_nodes
        story_avg = np.array([d[idx].sum(axis=0) for idx in story_index]) / story_counts[:, None]
        story_mags = np.linalg.norm(story_avg, axis=1)

        acc.fold(magnitudes, world, float(np.linalg.norm(average)), story_mags)

        positions = z_up_to_y_up_rows(world).tolist()
        stories = {
            s: StoryAggregate(node_ids=story_node_ids[i], average_displacement=_vec3(story_avg[i]))
            for i, s in enumerate(story_ids)
        }
        frames.append(
            Frame(
                frame=step + 1,
                time=float(t[step]),
                node_positions=MappingProxyType(dict(zip(node_ids, map(tuple, positions)))),
                average_displacement=_vec3(average),
                stories=MappingProxyType(stories),
            )
        )

        if step % every == 0:
            report(100.0 * step / n_steps)

    report(100.0)
    logger.debug("computed %d frames for %d nodes in %d stories", n_steps, n_nodes, len(story_ids))

    return FrameSeries(
        frames=tuple(frames),
        max_average_displacement=acc.max_average_displacement,
        max_average_story_displacement=acc.max_average_story_displacement,
        max_displacement=acc.max_displacement,
        min_displacement=acc.min_displacement,
        min_position=_vec3(acc.min_position),
        max_position=_vec3(acc.max_position),
    )
