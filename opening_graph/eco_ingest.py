#!/usr/bin/env python3
"""
ECO Opening Database Ingestion

Builds the opening name/ECO table used for position lookups from the
lichess-org/chess-openings TSV files, keyed by canonical position key.

Usage:
  python -m opening_graph.eco_ingest --source data/eco --output data/lichess-openings.json
  python -m opening_graph.eco_ingest --source https://raw.githubusercontent.com/lichess-org/chess-openings/master
"""

import argparse
import asyncio
import csv
import io
import json
import logging
import sys
from collections import Counter
from pathlib import Path

import chess
import httpx

from opening_graph.canonical import MOVE_ERRORS, canonicalize, parse_legal_san, parse_move_text
from opening_graph.config import DEFAULT_OPENINGS_SOURCE, LICHESS_OPENINGS_REPO
from opening_graph.models import OpeningIdentity

logger = logging.getLogger(__name__)

TSV_FILES = ("a.tsv", "b.tsv", "c.tsv", "d.tsv", "e.tsv")


def parse_eco_row(eco: str, name: str, pgn: str) -> tuple[str, str, list[str]]:
    """Parse one ECO TSV row. Returns (eco_code, opening_name, moves)."""
    moves = parse_move_text(pgn)
    return eco.strip(), name.strip(), moves


def key_for_moves(moves: list[str]) -> str | None:
    """Canonical key after playing moves, or None if a move is invalid."""
    board = chess.Board()
    for san in moves:
        try:
            board.push(parse_legal_san(board, san))
        except MOVE_ERRORS as e:
            logger.warning("Invalid move %s in %s: %s", san, " ".join(moves), e)
            return None
    return canonicalize(board)


def parse_tsv(content: str) -> list[dict]:
    """Read TSV text with an eco/name/pgn[/epd] header into row dicts."""
    reader = csv.DictReader(io.StringIO(content), delimiter="\t")
    return [row for row in reader if row]


def build_entries(rows) -> list[dict]:
    """
    Turn TSV rows into opening entries {eco, name, pgn, epd}.

    A supplied epd column wins over replaying the pgn. Duplicate keys keep the
    first row seen. Output is sorted by ECO code, then name.
    """
    entries = []
    seen = set()
    for row in rows:
        eco = row.get("eco") or ""
        name = row.get("name") or ""
        pgn = row.get("pgn") or ""
        if not eco or not name or not pgn:
            continue

        eco_code, opening_name, moves = parse_eco_row(eco, name, pgn)
        epd = (row.get("epd") or "").strip()
        key = canonicalize(epd) if epd else key_for_moves(moves)
        if key is None or key in seen:
            continue
        seen.add(key)
        entries.append({"eco": eco_code, "name": opening_name, "pgn": pgn.strip(), "epd": key})

    entries.sort(key=lambda e: (e["eco"], e["name"]))
    return entries


def entries_to_table(entries) -> dict[str, OpeningIdentity]:
    """Index opening entries by canonical key."""
    table = {}
    for entry in entries:
        key = canonicalize(entry["epd"])
        table.setdefault(
            key,
            OpeningIdentity(name=entry["name"], eco=entry.get("eco", ""), moves=entry.get("pgn", "")),
        )
    return table


def read_entries(source: str | Path) -> list[dict]:
    """
    Read opening entries from a compiled JSON file, a single TSV file, or a
    directory of TSV files.
    """
    source = Path(source)
    if source.is_dir():
        tsv_files = sorted(source.glob("*.tsv"))
        if not tsv_files:
            raise FileNotFoundError(f"No TSV files found in {source}")
        rows = []
        for tsv_path in tsv_files:
            rows.extend(parse_tsv(tsv_path.read_text(encoding="utf-8")))
        return build_entries(rows)

    text = source.read_text(encoding="utf-8")
    if source.suffix == ".json":
        entries = json.loads(text)
        if not isinstance(entries, list):
            raise ValueError(f"{source} does not hold a list of openings")
        return entries
    return build_entries(parse_tsv(text))


async def fetch_entries(session: httpx.AsyncClient, source: str) -> list[dict]:
    """Download opening entries: a compiled JSON URL or a repository base URL."""
    if source.endswith(".json"):
        resp = await session.get(source)
        resp.raise_for_status()
        return resp.json()

    rows = []
    for filename in TSV_FILES:
        url = f"{source.rstrip('/')}/{filename}"
        logger.info("Downloading %s", url)
        resp = await session.get(url)
        resp.raise_for_status()
        rows.extend(parse_tsv(resp.text))
    return build_entries(rows)


async def load_opening_table(source: str | Path) -> dict[str, OpeningIdentity]:
    """Load the lookup table from a path or URL."""
    source = str(source)
    if source.startswith(("http://", "https://")):
        async with httpx.AsyncClient(timeout=30.0) as session:
            entries = await fetch_entries(session, source)
    else:
        entries = await asyncio.to_thread(read_entries, source)
    table = entries_to_table(entries)
    logger.info("Loaded %d openings from %s", len(table), source)
    return table


async def main_async(args) -> None:
    if args.source.startswith(("http://", "https://")):
        async with httpx.AsyncClient(timeout=30.0) as session:
            entries = await fetch_entries(session, args.source)
    else:
        source = Path(args.source)
        if not source.exists():
            print(f"Error: source {source} does not exist.", file=sys.stderr)
            print("Download ECO data from https://github.com/lichess-org/chess-openings", file=sys.stderr)
            sys.exit(1)
        entries = read_entries(source)

    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "w", encoding="utf-8") as f:
        json.dump(entries, f, indent=2)

    print(f"Wrote {len(entries)} unique openings to {output}")
    groups = Counter(e["eco"][:1] for e in entries)
    for group, count in sorted(groups.items()):
        print(f"  {group}: {count} openings")


def main():
    parser = argparse.ArgumentParser(description="ECO Opening Database Ingestion")
    parser.add_argument(
        "--source",
        default=LICHESS_OPENINGS_REPO,
        help="Directory of TSV files (a.tsv, b.tsv, ...), a TSV file, or a repository URL",
    )
    parser.add_argument("--output", "-o", default=DEFAULT_OPENINGS_SOURCE)
    args = parser.parse_args()
    asyncio.run(main_async(args))


if __name__ == "__main__":
    main()
