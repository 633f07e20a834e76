"""Save and load opening graphs through the database layer."""

import dataclasses
import logging

from opening_graph.codec import decode, encode
from opening_graph.db import get_graph_blob, put_graph_blob
from opening_graph.graph import OpeningGraph
from opening_graph.lookup import OpeningLookup

logger = logging.getLogger(__name__)


def save_opening_graph(conn, graph: OpeningGraph) -> int:
    """Store a graph under its owner. Returns the payload size in bytes."""
    payload = encode(graph)
    put_graph_blob(conn, graph.owner, payload, dataclasses.asdict(graph.overall_stats()))
    logger.info("Saved opening graph for %s (%d bytes)", graph.owner, len(payload))
    return len(payload)


def load_opening_graph(conn, owner: str, lookup: OpeningLookup | None = None) -> OpeningGraph | None:
    """The stored graph for an owner, or None if there is none."""
    payload = get_graph_blob(conn, owner)
    if payload is None:
        return None
    return decode(payload, lookup)
