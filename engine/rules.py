"""
Move legality and check / terminal detection.

Two layers:

1. ``is_valid_move`` answers "may this piece travel from A to B?" using only
   the movement pattern of the piece and path clearance. It does not care
   whether the move exposes the mover's own king (pseudo-legal).

2. ``legal_moves`` enumerates every pseudo-legal move of one side and keeps
   only those that do not leave that side's king in check (self-check filter).
   Checkmate and stalemate are defined on top of it.

The rule set is deliberately partial: no castling, no en passant, no
promotion, no repetition or fifty-move draws. These are listed in ``RuleSet``
so a caller can see what is missing, but only the pawn double-step path check
can actually be switched on.

Generation order is row-major over the origin square, then row-major over the
destination square. The search has no move ordering of its own, so this order
is observable in which of several equal moves gets chosen.
"""

from enum import Enum, Flag, auto
from typing import Iterator

import chess

from engine.board import BOARD_SIZE, Board, Move, Position

# ---------------------------------------------------------------------------
# Rule set
# ---------------------------------------------------------------------------


class RuleSet(Flag):
    """Optional chess rules. The empty set is the engine's standard behaviour."""

    PAWN_DOUBLE_STEP_PATH_CHECK = auto()  # Pawn double step needs an empty middle square
    CASTLING = auto()
    EN_PASSANT = auto()
    PROMOTION = auto()
    REPETITION_DRAW = auto()
    FIFTY_MOVE_DRAW = auto()


DEFAULT_RULES: RuleSet = RuleSet(0)
SUPPORTED_RULES: RuleSet = RuleSet.PAWN_DOUBLE_STEP_PATH_CHECK


def check_rules(rules: RuleSet) -> RuleSet:
    """Raise ValueError if ``rules`` asks for anything this engine cannot play."""
    unsupported = rules & ~SUPPORTED_RULES
    if unsupported:
        raise ValueError(f"unsupported rules: {unsupported}")
    return rules


class GameStatus(str, Enum):
    """Game state relative to the side about to move."""

    PLAYING = "playing"
    CHECK = "check"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"


# All 64 positions in row-major order.
ALL_POSITIONS: tuple[Position, ...] = tuple(
    Position(row, col) for row in range(BOARD_SIZE) for col in range(BOARD_SIZE)
)

# ---------------------------------------------------------------------------
# Pseudo-legal movement
# ---------------------------------------------------------------------------


def is_path_clear(from_pos: Position, to_pos: Position, board: Board) -> bool:
    """
    True if every square strictly between the two positions is empty.

    The positions must share a row, a column or a diagonal.
    """
    cells = board.cells
    row_step = (to_pos.row > from_pos.row) - (to_pos.row < from_pos.row)
    col_step = (to_pos.col > from_pos.col) - (to_pos.col < from_pos.col)

    row = from_pos.row + row_step
    col = from_pos.col + col_step
    while row != to_pos.row or col != to_pos.col:
        if cells[row * BOARD_SIZE + col] is not None:
            return False
        row += row_step
        col += col_step
    return True


def is_valid_move(
    from_pos: Position,
    to_pos: Position,
    piece: chess.Piece,
    board: Board,
    rules: RuleSet = DEFAULT_RULES,
) -> bool:
    """
    Pseudo-legal movement test for ``piece`` travelling from ``from_pos``.

    Checks the piece's movement pattern, path clearance for sliders, and that
    the destination does not hold a piece of the same colour. Does NOT check
    whether the mover's own king ends up in check.

    Pawn double steps only require the destination to be empty. The square
    passed over is checked only when ``rules`` includes
    ``RuleSet.PAWN_DOUBLE_STEP_PATH_CHECK``.
    """
    if not to_pos.on_board() or from_pos == to_pos:
        return False

    cells = board.cells
    target = cells[to_pos.row * BOARD_SIZE + to_pos.col]
    if target is not None and target.color == piece.color:
        return False

    row_diff = to_pos.row - from_pos.row
    col_diff = to_pos.col - from_pos.col
    abs_row = abs(row_diff)
    abs_col = abs(col_diff)
    piece_type = piece.piece_type

    if piece_type == chess.PAWN:
        direction = -1 if piece.color == chess.WHITE else 1
        start_row = 6 if piece.color == chess.WHITE else 1
        if col_diff == 0:
            if target is not None:
                return False
            if row_diff == direction:
                return True
            if from_pos.row == start_row and row_diff == 2 * direction:
                if rules & RuleSet.PAWN_DOUBLE_STEP_PATH_CHECK:
                    middle = (from_pos.row + direction) * BOARD_SIZE + from_pos.col
                    return cells[middle] is None
                return True
            return False
        return abs_col == 1 and row_diff == direction and target is not None

    if piece_type == chess.KNIGHT:
        return (abs_row == 2 and abs_col == 1) or (abs_row == 1 and abs_col == 2)

    if piece_type == chess.KING:
        return abs_row <= 1 and abs_col <= 1

    if piece_type == chess.ROOK:
        straight, diagonal = row_diff == 0 or col_diff == 0, False
    elif piece_type == chess.BISHOP:
        straight, diagonal = False, abs_row == abs_col
    elif piece_type == chess.QUEEN:
        straight, diagonal = row_diff == 0 or col_diff == 0, abs_row == abs_col
    else:
        return False

    return (straight or diagonal) and is_path_clear(from_pos, to_pos, board)


# ---------------------------------------------------------------------------
# Check and terminal detection
# ---------------------------------------------------------------------------


def find_king(color: chess.Color, board: Board) -> Position | None:
    """Linear scan for the king of ``color``; None if it is missing."""
    for index, piece in enumerate(board.cells):
        if piece is not None and piece.piece_type == chess.KING and piece.color == color:
            return ALL_POSITIONS[index]
    return None


def is_in_check(color: chess.Color, board: Board, rules: RuleSet = DEFAULT_RULES) -> bool:
    """
    True if any enemy piece could move onto the king of ``color``.

    A board without that king is never in check.
    """
    king_pos = find_king(color, board)
    if king_pos is None:
        return False
    for pos, piece in board.pieces(not color):
        if is_valid_move(pos, king_pos, piece, board, rules):
            return True
    return False


def iter_legal_moves(
    board: Board,
    color: chess.Color,
    rules: RuleSet = DEFAULT_RULES,
) -> Iterator[Move]:
    """Lazily generate the legal moves of ``color`` in row-major order."""
    cells = board.cells
    for from_pos, piece in board.pieces(color):
        for to_pos in ALL_POSITIONS:
            if not is_valid_move(from_pos, to_pos, piece, board, rules):
                continue
            scratch = board.move_piece(from_pos, to_pos)
            if is_in_check(color, scratch, rules):
                continue
            yield Move(
                from_pos=from_pos,
                to_pos=to_pos,
                piece=piece,
                captured=cells[to_pos.row * BOARD_SIZE + to_pos.col],
            )


def legal_moves(board: Board, color: chess.Color, rules: RuleSet = DEFAULT_RULES) -> list[Move]:
    """Every move of ``color`` that does not leave its own king in check."""
    return list(iter_legal_moves(board, color, rules))


def has_legal_move(board: Board, color: chess.Color, rules: RuleSet = DEFAULT_RULES) -> bool:
    """Same as ``bool(legal_moves(...))`` but stops at the first move found."""
    return next(iter_legal_moves(board, color, rules), None) is not None


def is_checkmate(color: chess.Color, board: Board, rules: RuleSet = DEFAULT_RULES) -> bool:
    return is_in_check(color, board, rules) and not has_legal_move(board, color, rules)


def is_stalemate(color: chess.Color, board: Board, rules: RuleSet = DEFAULT_RULES) -> bool:
    return not is_in_check(color, board, rules) and not has_legal_move(board, color, rules)


def status(board: Board, color_to_move: chess.Color, rules: RuleSet = DEFAULT_RULES) -> GameStatus:
    """Status of the game from the point of view of ``color_to_move``."""
    in_check = is_in_check(color_to_move, board, rules)
    if not has_legal_move(board, color_to_move, rules):
        return GameStatus.CHECKMATE if in_check else GameStatus.STALEMATE
    return GameStatus.CHECK if in_check else GameStatus.PLAYING
