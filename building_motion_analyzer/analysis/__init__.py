"""Analysis package - merge, frame computation and derived views.

Design principle:
  - Ingest produces raw per-file results (inches, Z-up) and never converts units.
  - The builder converts inches to meters exactly once and remaps Z-up to Y-up exactly
    once per quantity (see :mod:`building_motion_analyzer.analysis.units`).
  - The frame pass is a single forward pass; its running extrema are returned, not stored.
"""

from .builder import AnimationBuilder, AnimationBuilderConfig, build_animation_data, load_animation_data
from .frames import FrameSeries, compute_frames
from .loader import AnimationLoader
from .timebase import estimate_sampling_rate

__all__ = [
    "AnimationBuilder",
    "AnimationBuilderConfig",
    "build_animation_data",
    "load_animation_data",
    "FrameSeries",
    "compute_frames",
    "AnimationLoader",
    "estimate_sampling_rate",
]
