"""
Game sources: turn PGN files or archive records into GameInput values for a
tracked player.
"""

import logging
from pathlib import Path
from typing import Iterator

import chess.pgn

from opening_graph.canonical import as_move_list
from opening_graph.models import GameInput, OpeningIdentity, normalize_color, normalize_outcome

logger = logging.getLogger(__name__)

# Archive fields kept verbatim as game metadata
PASSTHROUGH_FIELDS = (
    "url",
    "end_time",
    "time_control",
    "time_class",
    "rated",
    "white_username",
    "black_username",
    "white_rating",
    "black_rating",
    "player_color",
    "game_id",
)

_WINNER = {"1-0": "white", "0-1": "black"}


def _rating(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def outcome_for(result: str, player_color: str) -> str | None:
    """Outcome of a PGN result for the player, None for unfinished games."""
    if result == "1/2-1/2":
        return "draw"
    winner = _WINNER.get(result)
    if winner is None:
        return None
    return "win" if winner == player_color else "loss"


def opening_hint_from_headers(headers) -> OpeningIdentity | None:
    name = headers.get("Opening", "")
    if not name or name == "?":
        return None
    eco = headers.get("ECO", "")
    return OpeningIdentity(name=name, eco="" if eco == "?" else eco)


def game_input_from_pgn(game: chess.pgn.Game, username: str) -> GameInput | None:
    """GameInput for the tracked player, or None if they did not play or the game is unfinished."""
    headers = game.headers
    player = username.lower()
    if headers.get("White", "").lower() == player:
        color, opponent_elo = "white", headers.get("BlackElo")
    elif headers.get("Black", "").lower() == player:
        color, opponent_elo = "black", headers.get("WhiteElo")
    else:
        return None

    outcome = outcome_for(headers.get("Result", "*"), color)
    if outcome is None:
        return None

    return GameInput(
        moves=[node.san() for node in game.mainline()],
        outcome=outcome,
        player_color=color,
        opponent_rating=_rating(opponent_elo),
        opening_hint=opening_hint_from_headers(headers),
        metadata=dict(headers),
    )


def read_pgn_games(pgn_paths: list[Path], username: str) -> Iterator[GameInput]:
    """Yield the tracked player's finished games from PGN files."""
    for pgn_path in pgn_paths:
        pgn_path = Path(pgn_path)
        if not pgn_path.exists():
            logger.warning("%s not found", pgn_path)
            continue
        with open(pgn_path, encoding="utf-8", errors="replace") as f:
            while True:
                game = chess.pgn.read_game(f)
                if game is None:
                    break
                if game.errors:
                    logger.warning("PGN errors in %s: %s", pgn_path, game.errors[0])
                game_input = game_input_from_pgn(game, username)
                if game_input is not None:
                    yield game_input


def game_input_from_dict(data: dict) -> GameInput:
    """
    GameInput from an archive record with moves, player_color, result,
    opening and white_rating/black_rating fields.
    """
    color = normalize_color(data["player_color"])
    rating_field = "black_rating" if color == "white" else "white_rating"
    opening = data.get("opening")
    hint = OpeningIdentity.from_dict(opening) if isinstance(opening, dict) and opening.get("name") else None
    return GameInput(
        moves=as_move_list(data.get("moves")),
        outcome=normalize_outcome(data["result"]),
        player_color=color,
        opponent_rating=_rating(data.get(rating_field)),
        opening_hint=hint,
        metadata={k: data[k] for k in PASSTHROUGH_FIELDS if k in data},
    )
