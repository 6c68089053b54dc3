"""Unit and axis conversion.

The exports carry inches in a Z-up frame; consumers expect meters in a Y-up frame.
Every inch->meter conversion and every axis remap in the package goes through this
module, and each quantity passes through it exactly once:

- displacements and raw coordinates are converted to meters when the builder merges
  a direction file;
- per-frame world positions are remapped to Y-up as each frame is emitted;
- initial positions and the vector extrema are remapped by the builder after the
  frame pass.
"""

from __future__ import annotations

from typing import Sequence, Union

import numpy as np

from building_motion_analyzer.models.nodes import Vec3

INCH_TO_METER = 0.0254

ArrayLike = Union[float, Sequence[float], np.ndarray]


def inches_to_meters(value: ArrayLike, factor: float = INCH_TO_METER):
    """Scalar in, float out; sequence/array in, float64 array out."""
    if np.isscalar(value):
        return float(value) * factor
    return np.asarray(value, dtype=np.float64) * factor


def meters_to_inches(value: ArrayLike, factor: float = INCH_TO_METER):
    if np.isscalar(value):
        return float(value) / factor
    return np.asarray(value, dtype=np.float64) / factor


_Y_UP_ORDER = [0, 2, 1]


def z_up_to_y_up(vec: Sequence[float]) -> Vec3:
    """(x, y, z) with Z up -> (x, z, y) with Y up."""
    return (float(vec[0]), float(vec[2]), float(vec[1]))


def z_up_to_y_up_rows(points: np.ndarray) -> np.ndarray:
    """Row-wise :func:`z_up_to_y_up` for an ``(n, 3)`` array (returns a new array)."""
    points = np.asarray(points, dtype=np.float64)
    if points.ndim != 2 or points.shape[1] != 3:
        raise ValueError(f"Expected shape (n, 3), got {points.shape}")
    return points[:, _Y_UP_ORDER]
