"""Data models for the opening graph."""

from dataclasses import dataclass, field
from typing import Any, Literal

Outcome = Literal["win", "loss", "draw"]
PlayerColor = Literal["white", "black"]

OUTCOMES = ("win", "loss", "draw")
COLORS = ("white", "black")
_OUTCOME_ALIASES = {"lose": "loss", "lost": "loss", "won": "win"}


def normalize_outcome(outcome: str) -> Outcome:
    """Map an outcome string onto win/loss/draw. Raises ValueError otherwise."""
    value = (outcome or "").strip().lower()
    value = _OUTCOME_ALIASES.get(value, value)
    if value not in OUTCOMES:
        raise ValueError(f"Unknown game outcome: {outcome!r}")
    return value


def normalize_color(color: str) -> PlayerColor:
    value = (color or "").strip().lower()
    if value not in COLORS:
        raise ValueError(f"Unknown player color: {color!r}")
    return value


@dataclass(frozen=True)
class OpeningIdentity:
    """ECO code and name attached to a position."""

    name: str
    eco: str | None = None
    moves: str | None = None

    def to_dict(self) -> dict:
        return {"eco": self.eco, "name": self.name, "moves": self.moves}

    @classmethod
    def from_dict(cls, data: dict | None) -> "OpeningIdentity | None":
        if not data:
            return None
        return cls(name=data["name"], eco=data.get("eco"), moves=data.get("moves"))


UNKNOWN_OPENING = OpeningIdentity(name="Unknown Opening", eco="")
STARTING_POSITION = OpeningIdentity(name="Starting Position", eco="")


@dataclass
class PositionNode:
    """Aggregate results for every game that reached one canonical position."""

    key: str
    game_indices: list[int] = field(default_factory=list)
    total_games: int = 0
    wins: int = 0
    losses: int = 0
    draws: int = 0
    win_rate: float = 0.0
    average_opponent_rating: float = 0.0
    rated_games: int = 0
    opening: OpeningIdentity | None = None

    def record_result(
        self,
        game_index: int,
        outcome: str,
        opponent_rating: int | None = 0,
        opening: OpeningIdentity | None = None,
    ) -> None:
        outcome = normalize_outcome(outcome)
        self.game_indices.append(game_index)
        self.total_games += 1
        if outcome == "win":
            self.wins += 1
        elif outcome == "loss":
            self.losses += 1
        else:
            self.draws += 1
        self.win_rate = self.wins / self.total_games * 100

        if opponent_rating:
            self.rated_games += 1
            self.average_opponent_rating += (
                opponent_rating - self.average_opponent_rating
            ) / self.rated_games

        # First identity wins
        if opening is not None and self.opening is None:
            self.opening = opening


@dataclass
class MoveEdge:
    """A transition between two canonical positions, shared across games."""

    from_key: str
    to_key: str
    san: str
    game_indices: list[int] = field(default_factory=list)

    @property
    def game_count(self) -> int:
        return len(self.game_indices)


@dataclass
class GameRecord:
    """Game-level reference data. `metadata` is stored and returned untouched."""

    index: int
    outcome: Outcome
    opponent_rating: int = 0
    opening: OpeningIdentity | None = None
    move_count: int = 0
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class GameInput:
    """One game as delivered by a game source."""

    moves: list[str]
    outcome: Outcome
    player_color: PlayerColor
    opponent_rating: int = 0
    opening_hint: OpeningIdentity | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class MoveOption:
    """An outgoing edge annotated with its destination position."""

    san: str
    to_key: str
    game_count: int
    node: PositionNode
    opening: OpeningIdentity | None


@dataclass
class ChildPosition:
    key: str
    moves: str
    player_color: PlayerColor
    san: str
    game_count: int


@dataclass
class ColorResults:
    total_games: int = 0
    wins: int = 0
    losses: int = 0
    draws: int = 0
    win_rate: float = 0.0


@dataclass
class MergedNode:
    """One position viewed across both colors."""

    key: str
    white: ColorResults
    black: ColorResults
    opening: OpeningIdentity | None

    @property
    def opening_name(self) -> str:
        return self.opening.name if self.opening else UNKNOWN_OPENING.name


@dataclass
class ColorSummary:
    total_games: int = 0
    wins: int = 0
    losses: int = 0
    draws: int = 0
    win_rate: float = 0.0
    total_positions: int = 0
    total_moves: int = 0


@dataclass
class GraphSummary:
    owner: str
    white: ColorSummary
    black: ColorSummary
