"""Building Motion Analyzer -- ingestion of structural-sensor displacement exports.

This package turns one node mapping file plus per-axis displacement exports
(H1, H2, V) into a per-time-step animation model for 3D viewers and charts.

This package provides tools for:
- Parsing the node mapping CSV (node -> story, corner)
- Parsing direction exports (column headers, data rows, summary rows)
- Merging the exports into node records (inches -> meters, once)
- Computing one frame per time step: Y-up world positions, building-wide and
  per-story average displacement, and global extrema for normalization
- Running ingestion in the background with last-call-wins semantics

Key principles:
- Corrupt rows are skipped and counted, never fatal
- Unusable input raises a typed error instead of producing placeholder values
- Results are immutable once built

Main subpackages:
- ingest: Readers and export-folder discovery
- analysis: Builder, frame computation, background loader, tabular views
- models: Data models (NodeRecord, Frame, AnimationData, ExportCatalog)
- gui: Notebook progress bar
"""

from .analysis.builder import build_animation_data, load_animation_data
from .errors import EmptyDatasetError, IngestError, IngestionCancelled, UnknownDirectionError
from .ingest.node_mapping import parse_node_mapping
from .ingest.readers_displacement import parse_displacement_file

__all__ = [
    "build_animation_data",
    "load_animation_data",
    "parse_node_mapping",
    "parse_displacement_file",
    "EmptyDatasetError",
    "IngestError",
    "IngestionCancelled",
    "UnknownDirectionError",
]
