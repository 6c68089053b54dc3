from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Literal, Sequence, Tuple

import numpy as np


Direction = Literal["H1", "H2", "V"]
DIRECTIONS: Tuple[Direction, ...] = ("H1", "H2", "V")

Vec3 = Tuple[float, float, float]
ZERO3: Vec3 = (0.0, 0.0, 0.0)

_AXIS_FIELD: Dict[str, str] = {"H1": "disp_h1", "H2": "disp_h2", "V": "disp_v"}


def readonly_series(values: Sequence[float] | np.ndarray) -> np.ndarray:
    """Return a float64 copy of *values* with the write flag cleared."""
    arr = np.array(values, dtype=np.float64).reshape(-1)
    arr.setflags(write=False)
    return arr


def _empty_series() -> np.ndarray:
    return readonly_series(())


@dataclass(frozen=True)
class NodeRecord:
    """
    One structural node (a building corner at one story).

    Notes
    - corner is kept as the raw string from the mapping file (normally NW/NE/SW/SE).
    - disp_* arrays are per-step displacements for one instrument direction. They are raw
      inches straight out of the parser and meters once merged by the builder.
    - located is False until a direction file supplies coordinates for the node; only
      located nodes take part in frame computation.
    """
    node_id: str
    story: str
    corner: str
    initial_position: Vec3 = ZERO3
    disp_h1: np.ndarray = field(default_factory=_empty_series)
    disp_h2: np.ndarray = field(default_factory=_empty_series)
    disp_v: np.ndarray = field(default_factory=_empty_series)
    located: bool = False

    def displacement(self, direction: Direction) -> np.ndarray:
        return getattr(self, _AXIS_FIELD[direction])

    def with_displacement(self, direction: Direction, values: Sequence[float] | np.ndarray) -> "NodeRecord":
        return replace(self, **{_AXIS_FIELD[direction]: readonly_series(values)})

    def with_initial_position(self, position: Sequence[float]) -> "NodeRecord":
        x, y, z = (float(v) for v in position)
        return replace(self, initial_position=(x, y, z), located=True)

    def fitted_to(self, n_steps: int) -> "NodeRecord":
        """
        Copy with every non-empty axis series zero-padded or truncated to *n_steps*.

        Empty axes (no direction file supplied them) stay empty.
        """
        changes = {}
        for direction, name in _AXIS_FIELD.items():
            series = self.displacement(direction)  # type: ignore[arg-type]
            if series.size == 0 or series.size == n_steps:
                continue
            fitted = np.zeros(n_steps, dtype=np.float64)
            m = min(series.size, n_steps)
            fitted[:m] = series[:m]
            changes[name] = readonly_series(fitted)
        return replace(self, **changes) if changes else self
