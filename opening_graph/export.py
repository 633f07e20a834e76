#!/usr/bin/env python3
"""
Export CLI: Output a stored opening graph as PGN or CSV

Usage:
  python -m opening_graph.export --owner magnus --color white --format pgn --output magnus-white.pgn
  python -m opening_graph.export --owner magnus --color black --format csv --output nodes.csv
"""

import argparse
import csv
import sys
from pathlib import Path

import chess
import chess.pgn

from opening_graph.canonical import MOVE_ERRORS, parse_legal_san
from opening_graph.color_graph import ColorGraph
from opening_graph.db import get_connection
from opening_graph.models import PositionNode
from opening_graph.storage import load_opening_graph

CSV_FIELDS = [
    "key", "eco", "opening_name", "total_games", "wins", "losses", "draws",
    "win_rate", "average_opponent_rating",
]


def node_comment(node: PositionNode) -> str:
    comment = f"{node.total_games} games, +{node.wins} ={node.draws} -{node.losses} ({node.win_rate:.1f}%)"
    if node.opening and node.opening.eco:
        comment += f" {node.opening.eco} {node.opening.name}"
    elif node.opening:
        comment += f" {node.opening.name}"
    return comment


def _add_pgn_node(
    graph: ColorGraph,
    pgn_node: chess.pgn.GameNode,
    board: chess.Board,
    key: str,
    path: set,
    current_depth: int,
    max_depth: int,
    min_games: int,
) -> int:
    """Recursively add moves and variations to a chess.pgn game node. Returns moves added."""
    if current_depth >= max_depth:
        return 0

    added = 0
    options = [o for o in graph.moves_from_key(key) if o.game_count >= min_games]
    for i, option in enumerate(options):
        if option.to_key in path:
            continue
        try:
            move = parse_legal_san(board, option.san)
        except MOVE_ERRORS:
            continue

        if i == 0:
            next_node = pgn_node.add_main_variation(move)
        else:
            next_node = pgn_node.add_variation(move)
        next_node.comment = node_comment(option.node)
        added += 1

        board.push(move)
        path.add(option.to_key)
        added += _add_pgn_node(
            graph, next_node, board, option.to_key, path, current_depth + 1, max_depth, min_games
        )
        path.discard(option.to_key)
        board.pop()
    return added


def export_pgn(
    graph: ColorGraph,
    output_path: Path,
    owner: str = "?",
    max_depth: int = 15,
    min_games: int = 1,
) -> int:
    """Write the color graph as one PGN game with variations. Returns moves written."""
    game = chess.pgn.Game()
    game.headers["Event"] = f"Opening graph ({graph.player_color})"
    game.headers["White" if graph.player_color == "white" else "Black"] = owner
    game.headers["Result"] = "*"

    root = graph.nodes.get(graph.root_key)
    if root is not None:
        game.comment = node_comment(root)

    board = chess.Board()
    count = _add_pgn_node(graph, game, board, graph.root_key, {graph.root_key}, 0, max_depth, min_games)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        print(game, file=f, end="\n\n")
    return count


def export_csv(graph: ColorGraph, output_path: Path) -> int:
    """Export all nodes of a color graph to CSV."""
    rows = [
        [
            node.key,
            node.opening.eco if node.opening else "",
            node.opening.name if node.opening else "",
            node.total_games,
            node.wins,
            node.losses,
            node.draws,
            round(node.win_rate, 2),
            round(node.average_opponent_rating),
        ]
        for node in graph.nodes.values()
    ]
    with open(output_path, "w", encoding="utf-8", newline="") as f:
        w = csv.writer(f)
        w.writerow(CSV_FIELDS)
        w.writerows(rows)
    return len(rows)


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--owner", required=True)
    parser.add_argument("--color", choices=["white", "black"], default="white")
    parser.add_argument("--format", choices=["pgn", "csv"], default="pgn")
    parser.add_argument("--output", "-o", required=True)
    parser.add_argument("--max-depth", type=int, default=15)
    parser.add_argument("--min-games", type=int, default=1)
    args = parser.parse_args()

    with get_connection() as conn:
        graph = load_opening_graph(conn, args.owner)
    if graph is None:
        print(f"No stored graph for {args.owner}.", file=sys.stderr)
        sys.exit(1)

    color_graph = graph.color_graph(args.color)
    out = Path(args.output)
    if args.format == "pgn":
        n = export_pgn(color_graph, out, args.owner, args.max_depth, args.min_games)
        print(f"Exported {n} moves to {out}")
    else:
        n = export_csv(color_graph, out)
        print(f"Exported {n} rows to {out}")


if __name__ == "__main__":
    main()
