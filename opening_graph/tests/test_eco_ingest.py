"""Tests for eco_ingest.py"""

import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from opening_graph.canonical import canonicalize, replay
from opening_graph.eco_ingest import (
    build_entries,
    entries_to_table,
    fetch_entries,
    key_for_moves,
    load_opening_table,
    parse_eco_row,
    parse_tsv,
    read_entries,
)

TSV = (
    "eco\tname\tpgn\n"
    "C50\tItalian Game\t1. e4 e5 2. Nf3 Nc6 3. Bc4\n"
    "B20\tSicilian Defense\t1. e4 c5\n"
    "C20\tKing's Pawn Game\t1. e4 e5\n"
)


def test_parse_eco_row():
    eco, name, moves = parse_eco_row("C50", "Italian Game", "1. e4 e5 2. Nf3 Nc6 3. Bc4")
    assert eco == "C50"
    assert name == "Italian Game"
    assert moves == ["e4", "e5", "Nf3", "Nc6", "Bc4"]


def test_parse_eco_row_strips_whitespace():
    eco, name, moves = parse_eco_row(" A00 ", " Polish Opening ", "1. b4")
    assert (eco, name, moves) == ("A00", "Polish Opening", ["b4"])


def test_key_for_moves_matches_replay():
    assert key_for_moves(["e4", "c5"]) == canonicalize(replay(["e4", "c5"]))
    assert key_for_moves(["e4", "XYZ"]) is None
    assert key_for_moves(["e4", "--"]) is None


def test_build_entries_sorted_by_eco():
    entries = build_entries(parse_tsv(TSV))
    assert [e["eco"] for e in entries] == ["B20", "C20", "C50"]
    assert entries[0]["epd"] == "rnbqkbnr/pp1ppppp/8/2p5/4P3/8/PPPP1PPP/RNBQKBNR w KQkq -"


def test_build_entries_keeps_first_duplicate():
    rows = parse_tsv(TSV + "C20\tKing's Pawn Game: Duplicate\t1. e4 e5\n")
    entries = build_entries(rows)
    names = [e["name"] for e in entries]
    assert "King's Pawn Game" in names
    assert "King's Pawn Game: Duplicate" not in names


def test_build_entries_prefers_epd_column():
    epd = "rnbqkbnr/pppppppp/8/8/1P6/8/P1PPPPPP/RNBQKBNR b KQkq -"
    rows = parse_tsv(f"eco\tname\tpgn\tuci\tepd\nA00\tPolish Opening\t1. b4\tb2b4\t{epd}\n")
    assert build_entries(rows)[0]["epd"] == epd


def test_build_entries_skips_incomplete_and_invalid_rows():
    rows = [
        {"eco": "A00", "name": "", "pgn": "1. a3"},
        {"eco": "A00", "name": "Broken", "pgn": "1. e5"},
    ]
    assert build_entries(rows) == []


def test_entries_to_table_indexes_by_key():
    table = entries_to_table(build_entries(parse_tsv(TSV)))
    identity = table[key_for_moves(["e4", "e5", "Nf3", "Nc6", "Bc4"])]
    assert identity.name == "Italian Game"
    assert identity.eco == "C50"
    assert identity.moves == "1. e4 e5 2. Nf3 Nc6 3. Bc4"


def test_read_entries_from_tsv_directory(tmp_path):
    (tmp_path / "b.tsv").write_text("eco\tname\tpgn\nB20\tSicilian Defense\t1. e4 c5\n")
    (tmp_path / "c.tsv").write_text("eco\tname\tpgn\nC50\tItalian Game\t1. e4 e5 2. Nf3 Nc6 3. Bc4\n")
    entries = read_entries(tmp_path)
    assert [e["name"] for e in entries] == ["Sicilian Defense", "Italian Game"]


def test_read_entries_empty_directory_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_entries(tmp_path)


def test_read_entries_from_json(tmp_path):
    path = tmp_path / "openings.json"
    path.write_text(json.dumps(build_entries(parse_tsv(TSV))))
    assert len(read_entries(path)) == 3


@pytest.mark.asyncio
async def test_load_opening_table_from_file(tmp_path):
    path = tmp_path / "openings.json"
    path.write_text(json.dumps(build_entries(parse_tsv(TSV))))
    table = await load_opening_table(path)
    assert table[key_for_moves(["e4", "c5"])].eco == "B20"


@pytest.mark.asyncio
async def test_fetch_entries_downloads_every_tsv():
    mock_session = AsyncMock(spec=httpx.AsyncClient)
    mock_response = MagicMock()
    mock_response.text = TSV
    mock_session.get = AsyncMock(return_value=mock_response)

    entries = await fetch_entries(mock_session, "https://example.com/chess-openings/")

    assert mock_session.get.await_count == 5
    assert mock_session.get.await_args_list[0].args[0] == "https://example.com/chess-openings/a.tsv"
    assert len(entries) == 3


@pytest.mark.asyncio
async def test_fetch_entries_propagates_http_errors():
    mock_session = AsyncMock(spec=httpx.AsyncClient)
    mock_response = MagicMock()
    mock_response.raise_for_status.side_effect = httpx.HTTPStatusError(
        "404", request=MagicMock(), response=MagicMock()
    )
    mock_session.get = AsyncMock(return_value=mock_response)

    with pytest.raises(httpx.HTTPError):
        await fetch_entries(mock_session, "https://example.com/openings.json")
