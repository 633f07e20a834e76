"""Opening graph: white and black color graphs for one player."""

import asyncio
import logging
from typing import Iterable

from opening_graph.canonical import as_move_list, canonicalize
from opening_graph.color_graph import ColorGraph
from opening_graph.lookup import OpeningLookup
from opening_graph.models import (
    ChildPosition,
    ColorResults,
    GameInput,
    GameRecord,
    GraphSummary,
    MergedNode,
    MoveOption,
    PositionNode,
    normalize_color,
)

logger = logging.getLogger(__name__)


def _results(node: PositionNode | None) -> ColorResults:
    if node is None:
        return ColorResults()
    return ColorResults(
        total_games=node.total_games,
        wins=node.wins,
        losses=node.losses,
        draws=node.draws,
        win_rate=node.win_rate,
    )


class OpeningGraph:
    """Both color graphs for one owner plus the cross-color queries."""

    def __init__(self, owner: str, lookup: OpeningLookup | None = None):
        self.owner = owner
        self.lookup = lookup if lookup is not None else OpeningLookup()
        self.white = ColorGraph("white", self.lookup)
        self.black = ColorGraph("black", self.lookup)

    def color_graph(self, color: str) -> ColorGraph:
        return self.white if normalize_color(color) == "white" else self.black

    # Ingestion

    async def add_game(self, game: GameInput) -> int | None:
        """Add one game to the graph for the color the player had."""
        await self.lookup.ensure_loaded()
        return self.color_graph(game.player_color).add_game(
            game.moves,
            game.outcome,
            game.opponent_rating,
            game.opening_hint,
            game.metadata,
        )

    async def import_games(self, games: Iterable[GameInput]) -> int:
        """Add games one after another, yielding to the event loop between games."""
        await self.lookup.ensure_loaded()
        added = 0
        for game in games:
            if await self.add_game(game) is not None:
                added += 1
            await asyncio.sleep(0)
        logger.info("Imported %d games for %s", added, self.owner)
        return added

    # Queries

    def position_after_moves(self, moves) -> str | None:
        """Canonical key after the moves, or None if any move is illegal."""
        return self.white.position_after_moves(moves)

    def moves_from_position(self, moves, color: str) -> list[MoveOption]:
        graph = self.color_graph(color)
        key = graph.position_after_moves(moves)
        if key is None:
            return []
        return graph.moves_from_key(key)

    def root_moves(self, color: str) -> list[MoveOption]:
        graph = self.color_graph(color)
        return graph.moves_from_key(graph.root_key)

    def child_positions(self, moves) -> list[ChildPosition]:
        move_list = as_move_list(moves)
        positions = []
        for color in ("white", "black"):
            for option in self.moves_from_position(move_list, color):
                positions.append(
                    ChildPosition(
                        key=option.to_key,
                        moves=" ".join(move_list + [option.san]),
                        player_color=color,
                        san=option.san,
                        game_count=option.game_count,
                    )
                )
        return positions

    def node(self, key: str) -> MergedNode | None:
        key = canonicalize(key)
        white_node = self.white.nodes.get(key)
        black_node = self.black.nodes.get(key)
        if white_node is None and black_node is None:
            return None
        opening = (white_node.opening if white_node else None) or (
            black_node.opening if black_node else None
        )
        return MergedNode(
            key=key,
            white=_results(white_node),
            black=_results(black_node),
            opening=opening,
        )

    def position_details(self, moves, color: str) -> PositionNode | None:
        graph = self.color_graph(color)
        key = graph.position_after_moves(moves)
        if key is None:
            return None
        return graph.nodes.get(key)

    def games_for_position(self, moves, color: str) -> list[GameRecord]:
        graph = self.color_graph(color)
        key = graph.position_after_moves(moves)
        if key is None:
            return []
        return graph.games_for_key(key)

    def transpositions(self, color: str) -> dict[str, list[str]]:
        return self.color_graph(color).transpositions()

    def overall_stats(self) -> GraphSummary:
        return GraphSummary(
            owner=self.owner,
            white=self.white.summary(),
            black=self.black.summary(),
        )
