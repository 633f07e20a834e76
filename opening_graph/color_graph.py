"""Position/move graph for the games a player played with one color."""

import logging
from collections import defaultdict

import chess

from opening_graph.canonical import MOVE_ERRORS, ROOT_KEY, canonicalize, parse_legal_san, replay
from opening_graph.errors import LookupNotLoaded
from opening_graph.lookup import OpeningLookup, first_move_opening
from opening_graph.models import (
    STARTING_POSITION,
    UNKNOWN_OPENING,
    ColorSummary,
    GameRecord,
    MoveEdge,
    MoveOption,
    OpeningIdentity,
    PositionNode,
    normalize_color,
    normalize_outcome,
)

logger = logging.getLogger(__name__)

EdgeKey = tuple[str, str]


class ColorGraph:
    """
    Nodes, edges and game records for one tracked color.

    Nodes and edges are created on first visit and only grow. A graph is
    rebuilt from scratch when its inputs change; nothing is ever removed.
    Callers serialize add_game calls; reads must not overlap an add_game.
    """

    def __init__(self, player_color: str, lookup: OpeningLookup | None = None):
        self.player_color = normalize_color(player_color)
        self.lookup = lookup
        self.nodes: dict[str, PositionNode] = {}
        self.edges: dict[EdgeKey, MoveEdge] = {}
        self.games: list[GameRecord] = []
        self._outgoing: dict[str, list[EdgeKey]] = defaultdict(list)

    @property
    def root_key(self) -> str:
        return ROOT_KEY

    def get_or_create_node(self, key: str) -> PositionNode:
        node = self.nodes.get(key)
        if node is None:
            node = self.nodes[key] = PositionNode(key=key)
        return node

    def insert_edge(self, edge: MoveEdge) -> MoveEdge:
        edge_key = (edge.from_key, edge.to_key)
        self.edges[edge_key] = edge
        self._outgoing[edge.from_key].append(edge_key)
        return edge

    def add_edge(self, from_key: str, to_key: str, san: str, game_index: int) -> MoveEdge:
        edge = self.edges.get((from_key, to_key))
        if edge is None:
            edge = self.insert_edge(MoveEdge(from_key=from_key, to_key=to_key, san=san))
        edge.game_indices.append(game_index)
        return edge

    def _resolve_opening(self, key: str, prev_key: str, ply: int, san: str) -> OpeningIdentity:
        identity = self.lookup.resolve(key)
        if identity is not None:
            return identity
        previous = self.nodes.get(prev_key)
        if ply > 0 and previous is not None and previous.opening is not None:
            return previous.opening
        if ply == 0:
            return first_move_opening(san)
        return UNKNOWN_OPENING

    def add_game(
        self,
        moves: list[str],
        outcome: str,
        opponent_rating: int = 0,
        opening_hint: OpeningIdentity | None = None,
        metadata: dict | None = None,
    ) -> int | None:
        """
        Replay one game into the graph. Returns the game index, or None for an
        empty move list.

        A move that does not apply stops the replay for this game; plies
        before it stay recorded.
        """
        if not moves:
            return None
        if self.lookup is None or not self.lookup.loaded:
            raise LookupNotLoaded("load the opening lookup before adding games")
        outcome = normalize_outcome(outcome)
        opponent_rating = opponent_rating or 0

        game_index = len(self.games)
        self.games.append(
            GameRecord(
                index=game_index,
                outcome=outcome,
                opponent_rating=opponent_rating,
                opening=opening_hint,
                move_count=len(moves),
                metadata=dict(metadata or {}),
            )
        )

        board = chess.Board()
        current_key = ROOT_KEY
        self.get_or_create_node(current_key).record_result(
            game_index, outcome, opponent_rating, STARTING_POSITION
        )
        # a game that returns to a position counts there once
        visited_nodes = {current_key}
        visited_edges = set()

        for ply, san in enumerate(moves):
            try:
                move = parse_legal_san(board, san)
            except MOVE_ERRORS as e:
                logger.warning(
                    "Invalid move %r at ply %d in %s game %d: %s",
                    san, ply + 1, self.player_color, game_index, e,
                )
                break
            move_san = board.san(move)
            board.push(move)
            new_key = canonicalize(board)

            edge_key = (current_key, new_key)
            if edge_key not in visited_edges:
                visited_edges.add(edge_key)
                self.add_edge(current_key, new_key, move_san, game_index)
            if new_key not in visited_nodes:
                visited_nodes.add(new_key)
                opening = self._resolve_opening(new_key, current_key, ply, move_san)
                self.get_or_create_node(new_key).record_result(
                    game_index, outcome, opponent_rating, opening
                )
            current_key = new_key

        return game_index

    def moves_from_key(self, key: str) -> list[MoveOption]:
        """Outgoing moves, most played first; ties keep creation order."""
        options = []
        for edge_key in self._outgoing.get(key, ()):
            edge = self.edges[edge_key]
            target = self.nodes[edge.to_key]
            options.append(
                MoveOption(
                    san=edge.san,
                    to_key=edge.to_key,
                    game_count=edge.game_count,
                    node=target,
                    opening=target.opening,
                )
            )
        options.sort(key=lambda o: -o.game_count)
        return options

    def position_after_moves(self, moves) -> str | None:
        board = replay(moves)
        if board is None:
            return None
        return canonicalize(board)

    def games_for_key(self, key: str) -> list[GameRecord]:
        node = self.nodes.get(key)
        if node is None:
            return []
        return [self.games[i] for i in node.game_indices]

    def transpositions(self) -> dict[str, list[str]]:
        """Positions entered from more than one predecessor, with those predecessors."""
        parents: dict[str, list[str]] = defaultdict(list)
        for from_key, to_key in self.edges:
            parents[to_key].append(from_key)
        return {key: froms for key, froms in parents.items() if len(froms) > 1}

    def summary(self) -> ColorSummary:
        total = len(self.games)
        wins = sum(1 for g in self.games if g.outcome == "win")
        losses = sum(1 for g in self.games if g.outcome == "loss")
        draws = sum(1 for g in self.games if g.outcome == "draw")
        return ColorSummary(
            total_games=total,
            wins=wins,
            losses=losses,
            draws=draws,
            win_rate=wins / total * 100 if total else 0.0,
            total_positions=len(self.nodes),
            total_moves=len(self.edges),
        )
