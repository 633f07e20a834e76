"""Tests for models.py: position node aggregation"""

import pytest

from opening_graph.models import (
    OpeningIdentity,
    PositionNode,
    normalize_color,
    normalize_outcome,
)


def test_counts_add_up_and_win_rate_follows():
    node = PositionNode(key="k")
    for i, outcome in enumerate(["win", "loss", "draw", "win"]):
        node.record_result(i, outcome)
    assert node.total_games == 4
    assert node.total_games == node.wins + node.losses + node.draws
    assert node.win_rate == 50.0
    assert node.game_indices == [0, 1, 2, 3]


def test_win_rate_zero_without_games():
    assert PositionNode(key="k").win_rate == 0


def test_lose_is_accepted_as_loss():
    node = PositionNode(key="k")
    node.record_result(0, "lose")
    assert node.losses == 1


def test_unknown_outcome_raises():
    with pytest.raises(ValueError):
        normalize_outcome("abandoned")


def test_unknown_color_raises():
    assert normalize_color("White") == "white"
    with pytest.raises(ValueError):
        normalize_color("green")


def test_average_rating_skips_unrated_games():
    node = PositionNode(key="k")
    node.record_result(0, "win", 1500)
    node.record_result(1, "win", 0)
    node.record_result(2, "loss", 1700)
    node.record_result(3, "draw", None)
    assert node.average_opponent_rating == 1600
    assert node.rated_games == 2
    assert node.total_games == 4


def test_opening_identity_is_set_once():
    first = OpeningIdentity(name="Italian Game", eco="C50")
    node = PositionNode(key="k")
    node.record_result(0, "win", opening=None)
    assert node.opening is None
    node.record_result(1, "win", opening=first)
    node.record_result(2, "win", opening=OpeningIdentity(name="Unknown Opening", eco=""))
    assert node.opening == first


def test_opening_identity_dict_round_trip():
    identity = OpeningIdentity(name="Sicilian Defense", eco="B20", moves="1. e4 c5")
    assert OpeningIdentity.from_dict(identity.to_dict()) == identity
    assert OpeningIdentity.from_dict(None) is None
