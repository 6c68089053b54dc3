from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Set, Tuple

import numpy as np

from building_motion_analyzer.errors import EmptyDatasetError
from building_motion_analyzer.ingest.discovery import ExportDiscovery, direction_from_filename
from building_motion_analyzer.ingest.node_mapping import parse_node_mapping
from building_motion_analyzer.ingest.readers_displacement import DisplacementReader, DisplacementReaderConfig
from building_motion_analyzer.models.animation import AnimationData, AnimationExtrema
from building_motion_analyzer.models.nodes import Direction, NodeRecord

from .frames import compute_frames
from .progress import ProgressCallback, null_progress, scaled_progress
from .timebase import estimate_sampling_rate
from .units import INCH_TO_METER, inches_to_meters, z_up_to_y_up

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnimationBuilderConfig:
    """
    Builder configuration.

    inch_to_meter:
      Conversion factor applied once to every raw coordinate and displacement.
    estimate_sampling_rate:
      - True: sampling rate = 1 / median(dt) of the time column (default_sampling_rate
              when that cannot be computed).
      - False: always report default_sampling_rate.
    progress_every:
      Frame-pass progress granularity, in time steps.
    """
    inch_to_meter: float = INCH_TO_METER
    default_sampling_rate: float = 100.0
    estimate_sampling_rate: bool = True
    progress_every: int = 100
    reader: DisplacementReaderConfig = field(default_factory=DisplacementReaderConfig)


class AnimationBuilder:
    """
    Merge a node mapping and a set of direction exports into :class:`AnimationData`.

    Progress milestones (percent): 0 start, 5 mapping parsed, 5..50 across the direction
    files, 50..95 during the frame pass, 95 frames done, 100 complete.

    The builder holds configuration only; each :meth:`build` call starts from scratch.
    """

    def __init__(self, config: Optional[AnimationBuilderConfig] = None):
        self.config = config or AnimationBuilderConfig()

    def build(
        self,
        mapping_csv: str,
        direction_files: Mapping[str, str],
        on_progress: Optional[ProgressCallback] = None,
    ) -> AnimationData:
        cfg = self.config
        report = on_progress or null_progress
        report(0.0)

        # Resolve every direction before parsing anything (UnknownDirectionError is fatal).
        entries: List[Tuple[str, Direction, str]] = [
            (name, direction_from_filename(name), text) for name, text in direction_files.items()
        ]

        nodes: Dict[str, NodeRecord] = parse_node_mapping(mapping_csv)
        report(5.0)

        reader = DisplacementReader(cfg.reader)
        warnings: List[str] = []
        skipped_rows = 0
        time_steps: Optional[np.ndarray] = None
        time_source = ""
        merged: Set[Tuple[str, Direction]] = set()
        min_initial = np.full(3, np.inf)
        max_initial = np.full(3, -np.inf)

        for i, (name, direction, text) in enumerate(entries):
            parsed = reader.parse(text)
            skipped_rows += parsed.n_skipped
            warnings.extend(f"{name}: {w}" for w in parsed.warnings)

            if time_steps is None:
                if parsed.n_steps > 0:
                    time_steps = parsed.time_steps
                    time_source = name
            elif parsed.n_steps and parsed.n_steps != time_steps.size:
                warnings.append(
                    f"{name}: {parsed.n_steps} time steps, {time_source} has {time_steps.size}; "
                    f"using the time column of {time_source}"
                )

            unmapped: List[str] = []
            for node_id in parsed.node_ids:
                node = nodes.get(node_id)
                if node is None:
                    unmapped.append(node_id)
                    continue
                if (node_id, direction) in merged:
                    warnings.append(f"{name}: node '{node_id}' already has {direction} data; replaced")
                merged.add((node_id, direction))

                position = inches_to_meters(parsed.coords[node_id], cfg.inch_to_meter)
                values = np.nan_to_num(parsed.series[node_id], nan=0.0)
                node = node.with_displacement(direction, inches_to_meters(values, cfg.inch_to_meter))
                nodes[node_id] = node.with_initial_position(position)
                min_initial = np.minimum(min_initial, position)
                max_initial = np.maximum(max_initial, position)

            if unmapped:
                warnings.append(f"{name}: {len(unmapped)} nodes not in the node mapping were ignored")
            report(5.0 + 45.0 * (i + 1) / len(entries))

        if time_steps is None:
            raise EmptyDatasetError("No direction export contains data rows.")

        # One sample per time step for every merged axis.
        nodes = {node_id: node.fitted_to(time_steps.size) for node_id, node in nodes.items()}

        report(50.0)
        series = compute_frames(
            nodes,
            time_steps,
            scaled_progress(report, 50.0, 95.0),
            progress_every=cfg.progress_every,
        )
        report(95.0)

        # The one axis remap for initial positions and vector extrema (Z-up -> Y-up).
        frozen_nodes = {
            node_id: replace(node, initial_position=z_up_to_y_up(node.initial_position))
            for node_id, node in nodes.items()
        }
        extrema = AnimationExtrema(
            min_position=z_up_to_y_up(series.min_position),
            max_position=z_up_to_y_up(series.max_position),
            min_initial_position=z_up_to_y_up(min_initial),
            max_initial_position=z_up_to_y_up(max_initial),
            max_average_displacement=series.max_average_displacement,
            max_average_story_displacement=series.max_average_story_displacement,
            max_displacement=series.max_displacement,
            min_displacement=series.min_displacement,
        )

        if cfg.estimate_sampling_rate:
            sampling_rate = estimate_sampling_rate(time_steps, default=cfg.default_sampling_rate)
        else:
            sampling_rate = float(cfg.default_sampling_rate)

        n_located = sum(1 for node in nodes.values() if node.located)
        if n_located < len(nodes):
            warnings.append(f"{len(nodes) - n_located} mapped nodes have no coordinates in any export")
        logger.info(
            "animation data: %d frames, %d/%d nodes located, %d rows skipped, %.6g Hz",
            len(series.frames), n_located, len(nodes), skipped_rows, sampling_rate,
        )
        report(100.0)

        return AnimationData(
            nodes=MappingProxyType(frozen_nodes),
            time_steps=time_steps,
            frames=series.frames,
            sampling_rate=sampling_rate,
            extrema=extrema,
            warnings=tuple(warnings),
            skipped_rows=skipped_rows,
        )


def build_animation_data(
    mapping_csv: str,
    direction_files: Mapping[str, str],
    on_progress: Optional[ProgressCallback] = None,
    *,
    config: Optional[AnimationBuilderConfig] = None,
) -> AnimationData:
    """Build animation data from in-memory texts (see :class:`AnimationBuilder`)."""
    return AnimationBuilder(config).build(mapping_csv, direction_files, on_progress)


def load_animation_data(
    folder: str | Path,
    on_progress: Optional[ProgressCallback] = None,
    *,
    strict: bool = True,
    config: Optional[AnimationBuilderConfig] = None,
) -> AnimationData:
    """Discover an export folder, read it, and build animation data."""
    catalog = ExportDiscovery(strict=strict).build_catalog(folder)
    mapping_csv, texts = catalog.read_texts()
    data = build_animation_data(mapping_csv, texts, on_progress, config=config)
    if catalog.warnings:
        data = replace(data, warnings=tuple(catalog.warnings) + data.warnings)
    return data
