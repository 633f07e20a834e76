"""Canonical position keys and move-sequence replay."""

import re

import chess

# Exceptions python-chess raises for a SAN that does not apply to the board
MOVE_ERRORS = (chess.InvalidMoveError, chess.IllegalMoveError, chess.AmbiguousMoveError)

_RESULT_TOKENS = ("1-0", "0-1", "1/2-1/2", "*")


def canonicalize(position: chess.Board | str) -> str:
    """
    Strip the halfmove and fullmove counters from a position.

    Accepts a board or a FEN/EPD string. The key keeps piece placement, side
    to move, castling rights and en-passant square, so transpositions reached
    at different move numbers share one key.
    """
    if isinstance(position, chess.Board):
        fen = position.fen()
    else:
        fen = position.strip()
    return " ".join(fen.split()[:4])


ROOT_KEY = canonicalize(chess.Board())


def parse_move_text(text: str) -> list[str]:
    """
    Parse PGN-style move text (e.g. "1. e4 e5 2. Nf3 Nc6") into SAN moves.
    """
    moves = []
    for token in text.split():
        if token.startswith("{") or token.startswith("("):
            continue
        if re.match(r"^\d+\.+$", token):
            continue
        token = re.sub(r"^\d+\.+", "", token)
        if token and token not in _RESULT_TOKENS:
            moves.append(token)
    return moves


def as_move_list(moves) -> list[str]:
    """Accept a list of SAN moves or a space-separated move string."""
    if not moves:
        return []
    if isinstance(moves, str):
        return parse_move_text(moves)
    return list(moves)


def parse_legal_san(board: chess.Board, san: str) -> chess.Move:
    """
    Parse SAN against the board. Null moves ("--", "0000", "Z0") parse in
    python-chess but never occur in a game, so they raise IllegalMoveError.
    """
    move = board.parse_san(san)
    if move == chess.Move.null():
        raise chess.IllegalMoveError(f"null move in {board.fen()}: {san!r}")
    return move


def replay(moves) -> chess.Board | None:
    """Play moves from the initial position. None if any move fails to apply."""
    board = chess.Board()
    for san in as_move_list(moves):
        try:
            board.push(parse_legal_san(board, san))
        except MOVE_ERRORS:
            return None
    return board
