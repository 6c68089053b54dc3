from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple

from building_motion_analyzer.errors import EmptyDatasetError, UnknownDirectionError
from building_motion_analyzer.models.catalog import DirectionFileSpec, ExportCatalog
from building_motion_analyzer.models.nodes import DIRECTIONS, Direction

logger = logging.getLogger(__name__)

_MAPPING_NAMES = ("node_mapping.txt", "node_mapping.csv")

# <prefix>_<H1|H2|V>_<suffix>.txt, e.g. D_H1_Grid_11.txt
_DIRECTION_FILE = re.compile(r"^(?P<prefix>[^_]+)_(?P<direction>H1|H2|V)_(?P<suffix>[^.]+)\.txt$", re.IGNORECASE)


def direction_from_filename(filename: str | Path) -> Direction:
    """
    Direction encoded in an export name: the second '_' token (H1, H2 or V, any case).

    Directory parts and a trailing extension on that token are ignored.
    Raises UnknownDirectionError for anything else.
    """
    name = Path(str(filename)).name
    parts = name.split("_")
    if len(parts) < 2:
        raise UnknownDirectionError(name)
    token = parts[1]
    direction = token.split(".", 1)[0].strip().upper()
    if direction not in DIRECTIONS:
        raise UnknownDirectionError(name, token)
    return direction  # type: ignore[return-value]


def find_node_mapping(selected_dir: Path, max_up: int = 1) -> Path:
    """
    Search node_mapping.txt / .csv in selected_dir or up to max_up parent levels.
    Returns the first match (nearest to selected_dir).
    """
    p = Path(selected_dir).expanduser().resolve()
    for _ in range(max_up + 1):
        by_lower = {c.name.lower(): c for c in p.iterdir() if c.is_file()}
        for name in _MAPPING_NAMES:
            if name in by_lower:
                return by_lower[name]
        if p.parent == p:
            break
        p = p.parent
    raise FileNotFoundError(f"node_mapping.txt not found in '{selected_dir}' or up to {max_up} parent levels.")


@dataclass
class ExportDiscovery:
    """
    Build a catalog for a building export folder.

    strict:
      - True: every direction (H1, H2, V) must have at least one export file.
      - False: missing directions are reported in the catalog warnings only; the nodes
        simply carry zero displacement on that axis.
    """
    strict: bool = True

    def build_catalog(self, selected_dir: str | Path) -> ExportCatalog:
        selected = Path(selected_dir).expanduser().resolve()
        if not selected.exists() or not selected.is_dir():
            raise FileNotFoundError(f"Not a directory: {selected}")

        mapping_path = find_node_mapping(selected)
        warnings: List[str] = []

        specs: List[DirectionFileSpec] = []
        ignored: List[str] = []
        for p in sorted(selected.iterdir(), key=lambda c: c.name):
            if not p.is_file() or p == mapping_path:
                continue
            m = _DIRECTION_FILE.match(p.name)
            if not m:
                if p.suffix.lower() == ".txt":
                    ignored.append(p.name)
                continue
            specs.append(DirectionFileSpec(name=p.stem, direction=direction_from_filename(p.name), path=p))

        if ignored:
            warnings.append(f"ignored {len(ignored)} .txt files without a <prefix>_<H1|H2|V>_<suffix> name: "
                            + ", ".join(ignored[:10]))
        if not specs:
            raise EmptyDatasetError(f"No direction export files found in {selected}")

        catalog = ExportCatalog(
            root_dir=selected,
            mapping_path=mapping_path,
            direction_files=tuple(specs),
            warnings=tuple(warnings),
        )
        missing = catalog.missing_directions()
        if missing:
            msg = f"no export files for direction(s): {', '.join(missing)}"
            if self.strict:
                raise EmptyDatasetError(msg)
            logger.warning("export discovery: %s", msg)
            catalog = ExportCatalog(
                root_dir=selected,
                mapping_path=mapping_path,
                direction_files=tuple(specs),
                warnings=tuple(warnings + [msg]),
            )
        logger.info("export discovery: %d direction files in %s", len(specs), selected)
        return catalog


def discover_exports(selected_dir: str | Path, strict: bool = True) -> Tuple[str, dict]:
    """Convenience: discover a folder and return (mapping_text, direction texts)."""
    return ExportDiscovery(strict=strict).build_catalog(selected_dir).read_texts()
