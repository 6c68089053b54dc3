from __future__ import annotations

import logging
from typing import Dict

from building_motion_analyzer.models.nodes import NodeRecord

logger = logging.getLogger(__name__)


def parse_node_mapping(csv_text: str) -> Dict[str, NodeRecord]:
    """
    Parse the static node mapping CSV (``nodeId,storyId,corner``).

    The first non-blank line is a header and is skipped. Blank lines and rows with an
    empty id are ignored. Story and corner are kept as opaque trimmed strings; a short
    row leaves the missing fields empty. A repeated id replaces the earlier row.

    Returns node skeletons keyed by id, in file order: zero initial position, empty
    displacement series, not yet located.
    """
    nodes: Dict[str, NodeRecord] = {}
    lines = [ln for ln in csv_text.splitlines() if ln.strip()]

    for line in lines[1:]:
        row = [cell.strip() for cell in line.split(",")]
        node_id = row[0]
        if not node_id:
            continue
        story = row[1] if len(row) > 1 else ""
        corner = row[2] if len(row) > 2 else ""
        if node_id in nodes:
            logger.warning("node mapping: duplicate node id '%s'; later row wins", node_id)
        nodes[node_id] = NodeRecord(node_id=node_id, story=story, corner=corner)

    logger.debug("node mapping: %d nodes", len(nodes))
    return nodes
