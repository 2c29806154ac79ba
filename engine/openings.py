"""
Opening book: a few named lines played from the initial position.

The book serves two purposes:

- ``book_move`` supplies the engine's reply while the game still follows one
  of the lines, so the first few moves are instant and sound.
- ``current_opening`` labels the opening being played for the move list.

Matching compares exact origin and destination squares, not piece types, and
scans the table in declaration order. The first matching line wins, so the
order of OPENING_BOOK matters.
"""

from dataclasses import dataclass
from typing import Sequence

import chess

from engine.board import Board, Move, Position
from engine.constants import BOOK_PLY_LIMIT


@dataclass(frozen=True)
class Opening:
    """A named line: alternating White and Black moves from the start."""

    name: str
    moves: tuple[tuple[Position, Position], ...]

    def extends(self, history: Sequence[Move]) -> bool:
        """True if ``history`` is a prefix of this line (or the whole line)."""
        if len(history) > len(self.moves):
            return False
        return all(
            played.same_squares(src, dst)
            for played, (src, dst) in zip(history, self.moves)
        )


def _line(*squares: str) -> tuple[tuple[Position, Position], ...]:
    """Build a line from UCI-style square pairs, e.g. ``_line("e2e4", "e7e5")``."""
    return tuple((Position.parse(s[:2]), Position.parse(s[2:])) for s in squares)


OPENING_BOOK: tuple[Opening, ...] = (
    Opening("Queen's Gambit", _line("d2d4", "d7d5", "c2c4")),
    Opening("Sicilian Defense", _line("e2e4", "c7c5")),
    Opening("Ruy Lopez", _line("e2e4", "e7e5", "g1f3", "b8c6", "f1b5")),
    # Black's first reply is the e7-e5 push, the same as in the Ruy Lopez,
    # so the two lines share their first two plies.
    Opening("French Defense", _line("e2e4", "e7e5", "d2d4", "d7d5")),
    Opening("King's Indian Defense", _line("d2d4", "g8f6", "c2c4", "g7g6")),
)


def book_move(
    board: Board,
    color: chess.Color,
    history: Sequence[Move],
    book: Sequence[Opening] = OPENING_BOOK,
) -> Move | None:
    """
    The next book move for ``color``, or None when out of book.

    Only consulted while fewer than BOOK_PLY_LIMIT plies have been played.
    The side to move is implied by the history length (even: White, odd:
    Black) and must equal ``color``; the piece on the book move's origin must
    belong to ``color`` as well.
    """
    ply = len(history)
    if ply >= BOOK_PLY_LIMIT:
        return None
    if (chess.WHITE if ply % 2 == 0 else chess.BLACK) != color:
        return None

    for opening in book:
        if ply >= len(opening.moves) or not opening.extends(history):
            continue
        src, dst = opening.moves[ply]
        piece = board.piece_at(src)
        if piece is not None and piece.color == color:
            return Move(src, dst, piece, captured=board.piece_at(dst))
    return None


def current_opening(
    history: Sequence[Move],
    book: Sequence[Opening] = OPENING_BOOK,
) -> str | None:
    """
    Name of the opening the game is following.

    The history must be a prefix of exactly one book line. While several lines
    share the moves played so far (1.e4 is the start of three of them) no name
    is reported.
    """
    if not history:
        return None
    candidates = [opening for opening in book if opening.extends(history)]
    if len(candidates) != 1:
        return None
    return candidates[0].name
