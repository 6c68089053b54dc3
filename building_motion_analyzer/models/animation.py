from __future__ import annotations

from dataclasses import dataclass
from typing import List, Mapping, Tuple

import numpy as np

from .frames import Frame
from .nodes import NodeRecord, Vec3


@dataclass(frozen=True)
class AnimationExtrema:
    """
    Global extrema gathered in the single forward pass over all frames.

    Positions are meters, Y-up (same convention as Frame.node_positions).
    Scalar values are displacement magnitudes in meters.
    """
    min_position: Vec3
    max_position: Vec3
    min_initial_position: Vec3
    max_initial_position: Vec3
    max_average_displacement: float
    max_average_story_displacement: float
    max_displacement: float
    min_displacement: float


@dataclass(frozen=True)
class AnimationData:
    """
    Immutable result of one ingestion call.

    Notes
    - nodes is a read-only mapping in mapping-file order; initial positions are Y-up meters.
    - time_steps is a read-only float64 array aligned 1:1 with frames.
    - sampling_rate is in Hz (estimated from time_steps unless disabled in the builder config).
    - warnings collects non-fatal diagnostics; skipped_rows counts malformed export rows.
    """
    nodes: Mapping[str, NodeRecord]
    time_steps: np.ndarray
    frames: Tuple[Frame, ...]
    sampling_rate: float
    extrema: AnimationExtrema
    warnings: Tuple[str, ...] = ()
    skipped_rows: int = 0

    @property
    def n_frames(self) -> int:
        return len(self.frames)

    @property
    def story_ids(self) -> List[str]:
        """Story ids in first-seen order (no numeric sort; display order is up to the caller)."""
        if not self.frames:
            return []
        return list(self.frames[0].stories.keys())

    def frame_at(self, index: int) -> Frame:
        if not (0 <= index < len(self.frames)):
            raise IndexError(f"frame index {index} out of range [0, {len(self.frames)})")
        return self.frames[index]

    @property
    def min_position(self) -> Vec3:
        return self.extrema.min_position

    @property
    def max_position(self) -> Vec3:
        return self.extrema.max_position

    @property
    def min_initial_position(self) -> Vec3:
        return self.extrema.min_initial_position

    @property
    def max_initial_position(self) -> Vec3:
        return self.extrema.max_initial_position

    @property
    def max_average_displacement(self) -> float:
        return self.extrema.max_average_displacement

    @property
    def max_average_story_displacement(self) -> float:
        return self.extrema.max_average_story_displacement

    @property
    def max_displacement(self) -> float:
        return self.extrema.max_displacement

    @property
    def min_displacement(self) -> float:
        return self.extrema.min_displacement
