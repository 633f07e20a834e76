"""Tests for graph.py: traversal API"""

import pytest

from opening_graph.canonical import ROOT_KEY, canonicalize, replay
from opening_graph.graph import OpeningGraph
from opening_graph.lookup import OpeningLookup
from opening_graph.models import GameInput, OpeningIdentity


def key_after(*moves):
    return canonicalize(replay(list(moves)))


@pytest.fixture
def populated(graph):
    graph.white.add_game(["e4", "e5", "Nf3"], "win", 1500)
    graph.white.add_game(["e4", "c5"], "loss", 1700)
    graph.white.add_game(["d4", "d5"], "draw")
    graph.black.add_game(["e4", "e5"], "draw", 1600)
    graph.black.add_game(["d4", "Nf6"], "win")
    return graph


def test_root_moves_per_color(populated):
    white = populated.root_moves("white")
    assert [(m.san, m.game_count) for m in white] == [("e4", 2), ("d4", 1)]
    assert white[0].node.total_games == 2
    assert white[0].opening.name == "King's Pawn Game"

    black = populated.root_moves("black")
    assert [m.san for m in black] == ["e4", "d4"]


def test_moves_from_position(populated):
    moves = populated.moves_from_position(["e4"], "white")
    assert [m.san for m in moves] == ["e5", "c5"]
    assert moves[1].node.losses == 1
    assert populated.moves_from_position("1. e4 e5", "white")[0].san == "Nf3"


def test_moves_from_unvisited_or_illegal_position_is_empty(populated):
    assert populated.moves_from_position(["h4"], "white") == []
    assert populated.moves_from_position(["e4", "XYZ"], "white") == []


def test_position_after_moves(populated):
    assert populated.position_after_moves([]) == ROOT_KEY
    assert populated.position_after_moves(["e4", "e5"]) == key_after("e4", "e5")


def test_position_after_illegal_final_move_is_none(populated):
    assert populated.position_after_moves(["e4", "e5", "XYZ"]) is None


def test_child_positions_for_empty_sequence(populated):
    children = populated.child_positions([])
    assert [(c.player_color, c.moves) for c in children] == [
        ("white", "e4"),
        ("white", "d4"),
        ("black", "e4"),
        ("black", "d4"),
    ]


def test_child_positions_extend_the_sequence(populated):
    children = populated.child_positions("e4")
    assert [(c.player_color, c.moves) for c in children] == [
        ("white", "e4 e5"),
        ("white", "e4 c5"),
        ("black", "e4 e5"),
    ]
    assert children[0].key == key_after("e4", "e5")


def test_node_merges_both_colors(populated):
    node = populated.node(key_after("e4", "e5"))
    assert node.white.wins == 1
    assert node.white.total_games == 1
    assert node.black.draws == 1
    assert node.opening_name == "King's Pawn Game"


def test_node_accepts_full_fen(populated):
    board = replay(["d4", "d5"])
    node = populated.node(board.fen())
    assert node.white.draws == 1
    assert node.black.total_games == 0


def test_node_prefers_white_identity():
    lookup = OpeningLookup.from_table({})
    graph = OpeningGraph("bob", lookup)
    graph.black.add_game(["c4"], "win")
    graph.black.nodes[key_after("c4")].opening = OpeningIdentity(name="English", eco="A10")
    assert graph.node(key_after("c4")).opening.eco == "A10"

    graph.white.add_game(["c4"], "win")
    assert graph.node(key_after("c4")).opening.name == "English Opening"


def test_node_unknown_position_is_none(populated):
    assert populated.node("8/8/8/8/8/8/8/K6k w - -") is None


def test_games_for_position(populated):
    games = populated.games_for_position(["e4"], "white")
    assert [g.index for g in games] == [0, 1]
    assert [g.outcome for g in games] == ["win", "loss"]
    assert populated.games_for_position(["a4"], "white") == []


def test_position_details(populated):
    node = populated.position_details(["e4", "c5"], "white")
    assert node.losses == 1
    assert node.average_opponent_rating == 1700
    assert populated.position_details(["e4", "c5"], "black") is None


def test_overall_stats(populated):
    stats = populated.overall_stats()
    assert stats.owner == "alice"
    assert stats.white.total_games == 3
    assert stats.white.wins == 1
    assert stats.white.losses == 1
    assert stats.white.draws == 1
    assert stats.white.total_positions == 7
    assert stats.white.total_moves == 6
    assert stats.black.total_games == 2


def test_invalid_color_raises(populated):
    with pytest.raises(ValueError):
        populated.root_moves("red")


@pytest.mark.asyncio
async def test_add_game_routes_by_player_color(graph):
    await graph.add_game(GameInput(moves=["e4"], outcome="win", player_color="black", opponent_rating=1900))
    assert graph.overall_stats().black.total_games == 1
    assert graph.overall_stats().white.total_games == 0


@pytest.mark.asyncio
async def test_import_games_loads_lookup_once():
    calls = 0

    async def loader():
        nonlocal calls
        calls += 1
        return {}

    graph = OpeningGraph("carol", OpeningLookup(loader))
    games = [
        GameInput(moves=["e4", "e5"], outcome="win", player_color="white"),
        GameInput(moves=[], outcome="win", player_color="white"),
        GameInput(moves=["d4"], outcome="lose", player_color="black"),
    ]
    added = await graph.import_games(games)

    assert added == 2
    assert calls == 1
    assert graph.overall_stats().black.losses == 1


def test_injected_lookup_is_shared_before_loading():
    lookup = OpeningLookup(loader=None)
    assert not lookup.loaded
    graph = OpeningGraph("dave", lookup)
    assert graph.lookup is lookup
    assert graph.white.lookup is lookup
    assert graph.black.lookup is lookup


def test_injected_empty_lookup_is_kept(empty_lookup):
    assert len(empty_lookup) == 0
    assert OpeningGraph("erin", empty_lookup).lookup is empty_lookup


def test_position_after_null_or_illegal_moves_is_none(populated):
    assert populated.position_after_moves(["e4", "--"]) is None
    assert populated.position_after_moves("1. e4 0000") is None
    assert populated.position_after_moves(["e4", "e4"]) is None
    assert populated.moves_from_position(["--"], "white") == []
