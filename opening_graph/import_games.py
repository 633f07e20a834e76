#!/usr/bin/env python3
"""
Game Import: Build a player's opening graph from PGN files

Rebuilds the owner's graph from scratch and stores it in the database.

Usage:
  python -m opening_graph.import_games --owner magnus --pgn games/*.pgn
  OPENINGS_SOURCE=data/lichess-openings.json python -m opening_graph.import_games --owner magnus --pgn games.pgn
"""

import argparse
import asyncio
from pathlib import Path

from opening_graph.config import configure_logging
from opening_graph.db import ensure_schema, get_connection
from opening_graph.game_source import read_pgn_games
from opening_graph.graph import OpeningGraph
from opening_graph.lookup import OpeningLookup
from opening_graph.storage import save_opening_graph


async def build_graph(owner: str, pgn_paths: list[Path], lookup: OpeningLookup | None = None) -> OpeningGraph:
    """A fresh graph holding every finished game the owner played in the PGN files."""
    graph = OpeningGraph(owner, lookup)
    await graph.import_games(read_pgn_games(pgn_paths, owner))
    return graph


async def main_async():
    parser = argparse.ArgumentParser(description="Build an opening graph from PGN files")
    parser.add_argument("--owner", required=True, help="Tracked player's username")
    parser.add_argument("--pgn", nargs="+", required=True, help="PGN file paths")
    parser.add_argument("--dry-run", action="store_true", help="Build without storing")
    args = parser.parse_args()

    graph = await build_graph(args.owner, [Path(p) for p in args.pgn])
    stats = graph.overall_stats()
    for color, summary in (("white", stats.white), ("black", stats.black)):
        print(
            f"{color:5s}: {summary.total_games} games, {summary.win_rate:.1f}% wins, "
            f"{summary.total_positions} positions, {summary.total_moves} moves"
        )

    if args.dry_run:
        return
    with get_connection() as conn:
        ensure_schema(conn)
        size = save_opening_graph(conn, graph)
    print(f"Stored graph for {args.owner} ({size} bytes).")


def main():
    configure_logging()
    asyncio.run(main_async())


if __name__ == "__main__":
    main()
