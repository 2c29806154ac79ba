"""
Engine constants: piece values, piece-square tables, scores and difficulty levels.

All numeric constants used throughout the engine are defined here so that
the rules, evaluation and search modules never introduce their own magic
numbers. Tuning a difficulty level or a table entry happens in one place.

Coordinates follow the board model: row 0 is Black's back rank, row 7 is
White's back rank. Tables are written from White's point of view (row 6 is
White's pawn start rank) and mirrored with ``7 - row`` for Black.
"""

from dataclasses import dataclass
from enum import Enum

import chess

# ---------------------------------------------------------------------------
# Piece values (centipawns)
# ---------------------------------------------------------------------------

PAWN_VALUE: int = 100
KNIGHT_VALUE: int = 320
BISHOP_VALUE: int = 330
ROOK_VALUE: int = 500
QUEEN_VALUE: int = 900
KING_VALUE: int = 20_000  # Both kings are always present, so they cancel out

PIECE_VALUES: dict[int, int] = {
    chess.PAWN:   PAWN_VALUE,
    chess.KNIGHT: KNIGHT_VALUE,
    chess.BISHOP: BISHOP_VALUE,
    chess.ROOK:   ROOK_VALUE,
    chess.QUEEN:  QUEEN_VALUE,
    chess.KING:   KING_VALUE,
}

# ---------------------------------------------------------------------------
# Piece-square tables
# ---------------------------------------------------------------------------
# Only pawns and knights get a positional bonus. Bishops, rooks, queens and
# kings are scored on material alone.

PAWN_TABLE: tuple[tuple[int, ...], ...] = (
    (0, 0, 0, 0, 0, 0, 0, 0),
    (50, 50, 50, 50, 50, 50, 50, 50),
    (10, 10, 20, 30, 30, 20, 10, 10),
    (5, 5, 10, 25, 25, 10, 5, 5),
    (0, 0, 0, 20, 20, 0, 0, 0),
    (5, -5, -10, 0, 0, -10, -5, 5),
    (5, 10, 10, -20, -20, 10, 10, 5),
    (0, 0, 0, 0, 0, 0, 0, 0),
)

KNIGHT_TABLE: tuple[tuple[int, ...], ...] = (
    (-50, -40, -30, -30, -30, -30, -40, -50),
    (-40, -20, 0, 0, 0, 0, -20, -40),
    (-30, 0, 10, 15, 15, 10, 0, -30),
    (-30, 5, 15, 20, 20, 15, 5, -30),
    (-30, 0, 15, 20, 20, 15, 0, -30),
    (-30, 5, 10, 15, 15, 10, 5, -30),
    (-40, -20, 0, 5, 5, 0, -20, -40),
    (-50, -40, -30, -30, -30, -30, -40, -50),
)

PST: dict[int, tuple[tuple[int, ...], ...]] = {
    chess.PAWN:   PAWN_TABLE,
    chess.KNIGHT: KNIGHT_TABLE,
}

# ---------------------------------------------------------------------------
# Special scores
# ---------------------------------------------------------------------------
# Scores are signed from Black's point of view: positive favours Black.

MATE_SCORE: int = 10_000   # Forced mate found for the side with the sign
DRAW_SCORE: int = 0        # Stalemate
CHECK_BONUS: int = 50      # Awarded to the side giving check

# Window bound for the root alpha-beta call. Larger than any reachable
# evaluation (material can never exceed a few tens of thousands).
SEARCH_INFINITY: int = 1_000_000

# ---------------------------------------------------------------------------
# Opening book
# ---------------------------------------------------------------------------

# The book is consulted only while fewer plies than this have been played.
BOOK_PLY_LIMIT: int = 10

# ---------------------------------------------------------------------------
# Difficulty levels
# ---------------------------------------------------------------------------


class Difficulty(str, Enum):
    """Strength levels offered to the player."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    GRANDMASTER = "grandmaster"

    @classmethod
    def parse(cls, value: "str | Difficulty") -> "Difficulty":
        """Case-insensitive lookup; raises ValueError for unknown names."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            names = ", ".join(d.value for d in cls)
            raise ValueError(f"unknown difficulty {value!r} (expected one of: {names})") from None


@dataclass(frozen=True)
class SearchSettings:
    """
    Search parameters for one difficulty level.

    Attributes:
        depth:         Plies searched below each candidate move.
        random_factor: Probability of playing a uniformly random legal move
                       instead of searching.
    """

    depth: int
    random_factor: float


DIFFICULTY_SETTINGS: dict[Difficulty, SearchSettings] = {
    Difficulty.EASY:        SearchSettings(depth=2, random_factor=0.30),
    Difficulty.MEDIUM:      SearchSettings(depth=3, random_factor=0.15),
    Difficulty.HARD:        SearchSettings(depth=4, random_factor=0.05),
    Difficulty.GRANDMASTER: SearchSettings(depth=5, random_factor=0.0),
}

DEFAULT_DIFFICULTY: Difficulty = Difficulty.MEDIUM
