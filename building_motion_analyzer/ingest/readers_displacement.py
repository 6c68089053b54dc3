from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple

import numpy as np

from building_motion_analyzer.models.nodes import Vec3, readonly_series

logger = logging.getLogger(__name__)

_NUMERIC_TOKEN = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")
_DATA_SPLIT = re.compile(r"[,\s]+")


class ParseState(Enum):
    """Reader position in a direction export. HEADER -> DATA only, never back."""
    HEADER = "header"
    DATA = "data"


@dataclass(frozen=True)
class DisplacementReaderConfig:
    """
    Reader configuration for one-direction displacement exports.

    header_prefix:
      Case-insensitive prefix of column header lines (``Column, idx, -, node, -, x, y, z``).
    summary_prefixes:
      Case-insensitive prefixes of summary rows that follow the data block; ignored.
    max_skipped_report:
      How many skipped rows are kept verbatim for diagnostics. Counting is never capped.
    """
    header_prefix: str = "column,"
    summary_prefixes: Tuple[str, ...] = ("maximum", "minimum")
    max_skipped_report: int = 50


@dataclass(frozen=True)
class SkippedRow:
    line_no: int
    reason: str
    text: str


@dataclass(frozen=True)
class ParsedDisplacementFile:
    """
    One direction export after parsing.

    Notes
    - columns is ordered by 1-based column index, never by header order.
    - coords are raw inches in the source Z-up frame.
    - series values are raw inches for this file's axis, one per time step; NaN marks a step
      whose row was too short to reach the node's column.
    - n_skipped counts every malformed row; skipped_rows keeps the first few for reporting.
    """
    time_steps: np.ndarray
    columns: Tuple[Tuple[int, str], ...]
    coords: Mapping[str, Vec3]
    series: Mapping[str, np.ndarray]
    n_skipped: int = 0
    skipped_rows: Tuple[SkippedRow, ...] = ()
    warnings: Tuple[str, ...] = ()

    @property
    def n_steps(self) -> int:
        return int(self.time_steps.size)

    @property
    def node_ids(self) -> List[str]:
        return [node_id for _, node_id in self.columns]


def _to_float(token: str) -> float:
    value = float(token)
    if not math.isfinite(value):
        raise ValueError(f"non-finite value {token!r}")
    return value


class DisplacementReader:
    """
    Reader for one-direction displacement exports (H1, H2 or V).

    File layout:
      - free metadata lines, ignored;
      - ``Column, <idx>, <ignored>, <nodeId>, <ignored>, <x>, <y>, <z>`` header lines, one per
        recorded node;
      - data rows: time first, then one displacement per column (inches), separated by commas
        and/or whitespace;
      - trailing ``Maximum ...`` / ``Minimum ...`` summary rows.

    The first line whose leading token is numeric switches the reader to DATA for the rest of
    the file. Rows that fail numeric parsing are skipped and counted, never fatal.
    """

    def __init__(self, config: Optional[DisplacementReaderConfig] = None):
        self.config = config or DisplacementReaderConfig()

    def read(self, path: str | Path) -> ParsedDisplacementFile:
        p = Path(path).expanduser().resolve()
        if not p.exists():
            raise FileNotFoundError(str(p))
        return self.parse(p.read_text(errors="ignore"))

    def parse(self, text: str) -> ParsedDisplacementFile:
        cfg = self.config
        header_prefix = cfg.header_prefix.lower()
        summary_prefixes = tuple(s.lower() for s in cfg.summary_prefixes)

        state = ParseState.HEADER
        col_to_node: Dict[int, str] = {}
        coords: Dict[str, Vec3] = {}
        time_steps: List[float] = []
        samples: Dict[str, List[float]] = {}
        warnings: List[str] = []
        skipped: List[SkippedRow] = []
        n_skipped = 0
        ordered: List[Tuple[int, str]] = []

        def skip(line_no: int, reason: str, line: str) -> None:
            nonlocal n_skipped
            n_skipped += 1
            if len(skipped) < cfg.max_skipped_report:
                skipped.append(SkippedRow(line_no=line_no, reason=reason, text=line))

        for line_no, raw_line in enumerate(text.splitlines(), start=1):
            line = raw_line.strip()
            if not line:
                continue
            lower = line.lower()

            if lower.startswith(header_prefix):
                if state is ParseState.DATA:
                    skip(line_no, "column header after data start", line)
                    continue
                try:
                    col, node_id, xyz = self._parse_header(line)
                except (ValueError, IndexError) as exc:
                    skip(line_no, f"bad column header: {exc}", line)
                    continue
                self._register(col, node_id, xyz, col_to_node, coords, samples, warnings)
                continue

            if state is ParseState.HEADER:
                lead = _DATA_SPLIT.split(line, maxsplit=1)[0]
                if not _NUMERIC_TOKEN.match(lead):
                    continue
                state = ParseState.DATA
                ordered = sorted(col_to_node.items())
                if not ordered:
                    warnings.append(f"data starts at line {line_no} with no column headers registered")

            if lower.startswith(summary_prefixes):
                continue

            tokens = [tok for tok in _DATA_SPLIT.split(line) if tok]
            try:
                t = _to_float(tokens[0])
                row: List[Tuple[str, float]] = []
                for col, node_id in ordered:
                    idx = col - 1
                    if idx < len(tokens):
                        row.append((node_id, _to_float(tokens[idx])))
                    else:
                        row.append((node_id, math.nan))
            except (ValueError, IndexError) as exc:
                skip(line_no, f"bad data row: {exc}", line)
                continue

            time_steps.append(t)
            for node_id, value in row:
                samples[node_id].append(value)

        if state is ParseState.HEADER:
            warnings.append("no data rows found")
        if n_skipped:
            warnings.append(f"skipped {n_skipped} malformed rows")
            logger.warning("displacement export: skipped %d malformed rows", n_skipped)

        columns = tuple(sorted(col_to_node.items()))
        series = {node_id: readonly_series(samples[node_id]) for _, node_id in columns}
        n_missing = int(sum(np.count_nonzero(np.isnan(arr)) for arr in series.values()))
        if n_missing:
            warnings.append(f"{n_missing} missing samples (rows shorter than their column)")

        logger.debug(
            "displacement export: %d columns, %d steps, %d skipped",
            len(columns), len(time_steps), n_skipped,
        )
        return ParsedDisplacementFile(
            time_steps=readonly_series(time_steps),
            columns=columns,
            coords={node_id: coords[node_id] for _, node_id in columns},
            series=series,
            n_skipped=n_skipped,
            skipped_rows=tuple(skipped),
            warnings=tuple(warnings),
        )

    @staticmethod
    def _parse_header(line: str) -> Tuple[int, str, Vec3]:
        parts = [p.strip() for p in line.split(",")]
        col = int(_to_float(parts[1]))
        if col < 1:
            raise ValueError(f"column index must be >= 1, got {col}")
        node_id = parts[3]
        if not node_id:
            raise ValueError("empty node id")
        xyz = (_to_float(parts[5]), _to_float(parts[6]), _to_float(parts[7]))
        return col, node_id, xyz

    @staticmethod
    def _register(
        col: int,
        node_id: str,
        xyz: Vec3,
        col_to_node: Dict[int, str],
        coords: Dict[str, Vec3],
        samples: Dict[str, List[float]],
        warnings: List[str],
    ) -> None:
        previous = col_to_node.get(col)
        if previous is not None and previous != node_id:
            warnings.append(f"column {col} re-registered: '{previous}' replaced by '{node_id}'")
            coords.pop(previous, None)
            samples.pop(previous, None)
        for other_col, other_node in list(col_to_node.items()):
            if other_node == node_id and other_col != col:
                warnings.append(f"node '{node_id}' moved from column {other_col} to {col}")
                del col_to_node[other_col]
        col_to_node[col] = node_id
        coords[node_id] = xyz
        samples[node_id] = []


def parse_displacement_file(text: str, config: Optional[DisplacementReaderConfig] = None) -> ParsedDisplacementFile:
    """Parse one direction export held in memory."""
    return DisplacementReader(config).parse(text)
