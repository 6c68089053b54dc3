from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Mapping, Tuple

from .nodes import Vec3


@dataclass(frozen=True)
class StoryAggregate:
    """Members of one story at one instant and their mean displacement (H1, H2, V)."""
    node_ids: Tuple[str, ...]
    average_displacement: Vec3

    @property
    def n_nodes(self) -> int:
        return len(self.node_ids)

    @property
    def average_displacement_magnitude(self) -> float:
        return math.hypot(*self.average_displacement)


@dataclass(frozen=True)
class Frame:
    """
    Derived animation state at one time step.

    Notes
    - frame is the 1-based frame number; index is the matching 0-based time index.
    - node_positions are world positions in meters, Y-up (X, Z, Y of the source).
    - displacement vectors stay in instrument order (H1, H2, V).
    - node_positions and stories are read-only mappings.
    """
    frame: int
    time: float
    node_positions: Mapping[str, Vec3]
    average_displacement: Vec3
    stories: Mapping[str, StoryAggregate]

    @property
    def index(self) -> int:
        return self.frame - 1

    @property
    def average_displacement_magnitude(self) -> float:
        return math.hypot(*self.average_displacement)
