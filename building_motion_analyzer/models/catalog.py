from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Tuple

from .nodes import DIRECTIONS, Direction


@dataclass(frozen=True)
class DirectionFileSpec:
    """
    One direction export found on disk.

    name: file stem, used as the key handed to the builder (e.g. 'D_H1_Grid_11').
    direction: axis encoded as the second '_' token of the name.
    """
    name: str
    direction: Direction
    path: Path


@dataclass(frozen=True)
class ExportCatalog:
    """
    Filesystem-independent listing of one building export folder.

    Notes
    - direction_files is sorted by file name so repeated scans hand the builder the same order.
    - Several files may share a direction (one per instrument grid); each contributes its nodes.
    """
    root_dir: Path
    mapping_path: Path
    direction_files: Tuple[DirectionFileSpec, ...]
    warnings: Tuple[str, ...] = ()

    def directions(self) -> Dict[Direction, List[str]]:
        """File names grouped by direction (every direction present as a key)."""
        out: Dict[Direction, List[str]] = {d: [] for d in DIRECTIONS}
        for spec in self.direction_files:
            out[spec.direction].append(spec.name)
        return out

    def missing_directions(self) -> List[Direction]:
        return [d for d, names in self.directions().items() if not names]

    def read_texts(self) -> Tuple[str, Dict[str, str]]:
        """Load (mapping_text, {file name: export text}) from disk."""
        mapping_text = self.mapping_path.read_text(errors="ignore")
        texts = {spec.name: spec.path.read_text(errors="ignore") for spec in self.direction_files}
        return mapping_text, texts
