from __future__ import annotations

from typing import Sequence

import numpy as np


def estimate_sampling_rate(time_steps: Sequence[float] | np.ndarray, default: float = 100.0) -> float:
    """
    Sampling rate in Hz as ``1 / median(dt)`` over finite, strictly positive increments.

    Falls back to *default* with fewer than two steps or when no usable increment exists
    (e.g. a constant time column).
    """
    t = np.asarray(time_steps, dtype=np.float64).reshape(-1)
    if t.size < 2:
        return float(default)
    dt = np.diff(t)
    dt = dt[np.isfinite(dt) & (dt > 0)]
    if dt.size == 0:
        return float(default)
    return float(1.0 / np.median(dt))
