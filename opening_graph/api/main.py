"""
FastAPI Query API for stored opening graphs

Endpoints:
  GET  /graph/{owner}/stats  - Per-color totals
  GET  /graph/{owner}/root-moves/{color}  - First moves for one color
  GET  /graph/{owner}/children?moves=...  - Continuations for both colors
  GET  /graph/{owner}/moves/{color}?moves=...  - Continuations for one color
  GET  /graph/{owner}/games/{color}?moves=...  - Games that reached a position
  GET  /graph/{owner}/node/{fen}  - Merged node by FEN or canonical key
  POST /graph/{owner}/position  - Canonical key after a move sequence
"""

from dataclasses import asdict

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel

from opening_graph.db import get_connection
from opening_graph.errors import CorruptGraphPayload, UnsupportedFormatVersion
from opening_graph.graph import OpeningGraph
from opening_graph.models import COLORS, MoveOption
from opening_graph.storage import load_opening_graph

app = FastAPI(title="Opening Graph API", version="1.0.0")


class MoveSequenceRequest(BaseModel):
    moves: str  # e.g. "1.e4 e5 2.Nf3 Nc6"


def get_graph(owner: str) -> OpeningGraph:
    """Load an owner's graph or raise the matching HTTP error."""
    with get_connection() as conn:
        try:
            graph = load_opening_graph(conn, owner)
        except UnsupportedFormatVersion as e:
            raise HTTPException(status_code=409, detail=str(e))
        except CorruptGraphPayload as e:
            raise HTTPException(status_code=500, detail=str(e))
    if graph is None:
        raise HTTPException(status_code=404, detail=f"No graph for {owner}")
    return graph


def check_color(color: str) -> str:
    if color not in COLORS:
        raise HTTPException(status_code=400, detail=f"Unknown color: {color}")
    return color


def move_to_response(option: MoveOption) -> dict:
    node = option.node
    return {
        "san": option.san,
        "to_key": option.to_key,
        "game_count": option.game_count,
        "total_games": node.total_games,
        "wins": node.wins,
        "losses": node.losses,
        "draws": node.draws,
        "win_rate": node.win_rate,
        "average_opponent_rating": node.average_opponent_rating,
        "opening": option.opening.to_dict() if option.opening else None,
    }


@app.get("/graph/{owner}/stats")
def overall_stats(owner: str):
    return asdict(get_graph(owner).overall_stats())


@app.get("/graph/{owner}/root-moves/{color}")
def root_moves(owner: str, color: str):
    check_color(color)
    return [move_to_response(m) for m in get_graph(owner).root_moves(color)]


@app.get("/graph/{owner}/children")
def child_positions(owner: str, moves: str = Query("")):
    return [asdict(c) for c in get_graph(owner).child_positions(moves)]


@app.get("/graph/{owner}/moves/{color}")
def moves_from_position(owner: str, color: str, moves: str = Query("")):
    check_color(color)
    return [move_to_response(m) for m in get_graph(owner).moves_from_position(moves, color)]


@app.get("/graph/{owner}/games/{color}")
def games_for_position(owner: str, color: str, moves: str = Query("")):
    check_color(color)
    games = get_graph(owner).games_for_position(moves, color)
    return [
        {
            "index": g.index,
            "outcome": g.outcome,
            "opponent_rating": g.opponent_rating,
            "opening": g.opening.to_dict() if g.opening else None,
            "move_count": g.move_count,
            "metadata": g.metadata,
        }
        for g in games
    ]


@app.get("/graph/{owner}/node/{fen:path}")
def get_node(owner: str, fen: str):
    """Lookup merged node by FEN; underscores stand in for spaces."""
    node = get_graph(owner).node(fen.replace("_", " "))
    if node is None:
        raise HTTPException(status_code=404, detail="Position not in graph")
    data = asdict(node)
    data["opening_name"] = node.opening_name
    return data


@app.post("/graph/{owner}/position")
def position_after_moves(owner: str, body: MoveSequenceRequest):
    graph = get_graph(owner)
    key = graph.position_after_moves(body.moves)
    if key is None:
        raise HTTPException(status_code=400, detail=f"Invalid move sequence: {body.moves}")
    node = graph.node(key)
    return {"key": key, "node": asdict(node) if node else None}


@app.get("/health")
def health():
    return {"status": "ok"}
