"""Byte serialization for opening graphs."""

import json
from datetime import datetime, timezone

from opening_graph.color_graph import ColorGraph
from opening_graph.errors import CorruptGraphPayload, UnsupportedFormatVersion
from opening_graph.graph import OpeningGraph
from opening_graph.lookup import OpeningLookup
from opening_graph.models import GameRecord, MoveEdge, OpeningIdentity, PositionNode

FORMAT_VERSION = "1.0"
SUPPORTED_VERSIONS = (FORMAT_VERSION,)


def _opening(identity: OpeningIdentity | None) -> dict | None:
    return identity.to_dict() if identity else None


def node_to_record(node: PositionNode) -> dict:
    return {
        "key": node.key,
        "game_indices": list(node.game_indices),
        "stats": {
            "total_games": node.total_games,
            "wins": node.wins,
            "losses": node.losses,
            "draws": node.draws,
            "win_rate": node.win_rate,
            "average_opponent_rating": node.average_opponent_rating,
            "rated_games": node.rated_games,
        },
        "opening": _opening(node.opening),
    }


def edge_to_record(edge: MoveEdge) -> dict:
    return {
        "from_key": edge.from_key,
        "to_key": edge.to_key,
        "san": edge.san,
        "game_indices": list(edge.game_indices),
    }


def game_to_record(game: GameRecord) -> dict:
    return {
        "index": game.index,
        "outcome": game.outcome,
        "opponent_rating": game.opponent_rating,
        "opening": _opening(game.opening),
        "move_count": game.move_count,
        "metadata": game.metadata,
    }


def color_graph_to_dict(graph: ColorGraph) -> dict:
    return {
        "player_color": graph.player_color,
        "nodes": [node_to_record(n) for n in graph.nodes.values()],
        "edges": [edge_to_record(e) for e in graph.edges.values()],
        "games": [game_to_record(g) for g in graph.games],
    }


def encode(graph: OpeningGraph) -> bytes:
    """Serialize both color graphs to UTF-8 JSON."""
    data = {
        "format_version": FORMAT_VERSION,
        "created": datetime.now(timezone.utc).isoformat(),
        "owner": graph.owner,
        "white": color_graph_to_dict(graph.white),
        "black": color_graph_to_dict(graph.black),
    }
    return json.dumps(data, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def _restore_color_graph(graph: ColorGraph, data: dict) -> None:
    for r in data["nodes"]:
        stats = r["stats"]
        graph.nodes[r["key"]] = PositionNode(
            key=r["key"],
            game_indices=list(r["game_indices"]),
            total_games=stats["total_games"],
            wins=stats["wins"],
            losses=stats["losses"],
            draws=stats["draws"],
            win_rate=stats["win_rate"],
            average_opponent_rating=stats.get("average_opponent_rating", 0.0),
            rated_games=stats.get("rated_games", 0),
            opening=OpeningIdentity.from_dict(r.get("opening")),
        )
    for r in data["edges"]:
        graph.insert_edge(
            MoveEdge(
                from_key=r["from_key"],
                to_key=r["to_key"],
                san=r["san"],
                game_indices=list(r["game_indices"]),
            )
        )
    for r in data["games"]:
        graph.games.append(
            GameRecord(
                index=r["index"],
                outcome=r["outcome"],
                opponent_rating=r.get("opponent_rating", 0),
                opening=OpeningIdentity.from_dict(r.get("opening")),
                move_count=r.get("move_count", 0),
                metadata=r.get("metadata") or {},
            )
        )


def decode(payload: bytes, lookup: OpeningLookup | None = None) -> OpeningGraph:
    """
    Build a new OpeningGraph from encode() output.

    Raises UnsupportedFormatVersion for an unknown format_version and
    CorruptGraphPayload when the payload cannot be parsed.
    """
    try:
        data = json.loads(payload)
    except (UnicodeDecodeError, ValueError) as e:
        raise CorruptGraphPayload(f"Graph payload is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise CorruptGraphPayload("Graph payload is not an object")

    version = data.get("format_version")
    if version not in SUPPORTED_VERSIONS:
        raise UnsupportedFormatVersion(version, SUPPORTED_VERSIONS)

    try:
        graph = OpeningGraph(data["owner"], lookup)
        _restore_color_graph(graph.white, data["white"])
        _restore_color_graph(graph.black, data["black"])
    except (KeyError, TypeError) as e:
        raise CorruptGraphPayload(f"Graph payload is missing fields: {e}") from e
    return graph
