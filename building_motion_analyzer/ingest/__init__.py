"""Ingest package - export readers and folder discovery.

This package handles:
- Parsing the static node mapping CSV (node id -> story, corner)
- Parsing one-direction displacement exports (H1, H2, V)
- Discovering the mapping file and direction exports in a folder

Design principle:
- Readers never abort on a corrupt row: it is skipped and counted
- Raw units (inches, Z-up) are preserved; conversion happens once, in the builder
"""

from .discovery import ExportDiscovery, direction_from_filename
from .node_mapping import parse_node_mapping
from .readers_displacement import (
    DisplacementReader,
    DisplacementReaderConfig,
    ParsedDisplacementFile,
    ParseState,
    SkippedRow,
    parse_displacement_file,
)

__all__ = [
    "ExportDiscovery",
    "direction_from_filename",
    "parse_node_mapping",
    "DisplacementReader",
    "DisplacementReaderConfig",
    "ParsedDisplacementFile",
    "ParseState",
    "SkippedRow",
    "parse_displacement_file",
]
