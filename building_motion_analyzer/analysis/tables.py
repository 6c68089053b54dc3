"""Tabular (pandas) views of :class:`AnimationData` for exploration and export.

These are read-only projections; nothing here feeds back into the frame computation.
"""

from __future__ import annotations

import numpy as np
import pandas as pd

from building_motion_analyzer.models.animation import AnimationData


def node_table(data: AnimationData) -> pd.DataFrame:
    """One row per node: id, story, corner, located flag and initial position (Y-up, m)."""
    rows = [
        {
            "node_id": node.node_id,
            "story": node.story,
            "corner": node.corner,
            "located": bool(node.located),
            "x": node.initial_position[0],
            "y": node.initial_position[1],
            "z": node.initial_position[2],
        }
        for node in data.nodes.values()
    ]
    return pd.DataFrame(rows, columns=["node_id", "story", "corner", "located", "x", "y", "z"])


def frame_table(data: AnimationData) -> pd.DataFrame:
    """One row per frame with the building-wide average displacement (H1, H2, V) in meters."""
    avg = np.array([f.average_displacement for f in data.frames], dtype=np.float64).reshape(-1, 3)
    return pd.DataFrame(
        {
            "frame": np.array([f.frame for f in data.frames], dtype=np.int64),
            "time": np.array([f.time for f in data.frames], dtype=np.float64),
            "avg_h1": avg[:, 0],
            "avg_h2": avg[:, 1],
            "avg_v": avg[:, 2],
            "avg_magnitude": np.linalg.norm(avg, axis=1),
        }
    )


def story_table(data: AnimationData) -> pd.DataFrame:
    """Long form: one row per (frame, story) with the story's average displacement."""
    records = []
    for f in data.frames:
        for story_id, story in f.stories.items():
            dx, dy, dz = story.average_displacement
            records.append((f.frame, f.time, story_id, story.n_nodes, dx, dy, dz))
    df = pd.DataFrame(records, columns=["frame", "time", "story", "n_nodes", "avg_h1", "avg_h2", "avg_v"])
    df["avg_magnitude"] = np.sqrt(df["avg_h1"] ** 2 + df["avg_h2"] ** 2 + df["avg_v"] ** 2)
    return df
