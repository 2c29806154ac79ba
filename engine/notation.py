"""
Standard algebraic notation for played moves.

The notation is built from the board as it stood BEFORE the move, plus the
check and checkmate flags the caller computed on the board after it.

A king travelling two files is written as castling ("O-O" towards the h-file,
"O-O-O" towards the a-file). This is presentation only: the rules module
never generates such a move, so it only appears for moves supplied from
outside the engine.
"""

import chess

from engine.board import Board, Move, Position
from engine.rules import DEFAULT_RULES, RuleSet, is_in_check, is_valid_move


def _rivals(move: Move, board: Board, rules: RuleSet) -> list[Position]:
    """
    Other pieces of the same type and colour that could legally reach the
    destination, each confirmed not to expose their own king.
    """
    piece = move.piece
    rivals: list[Position] = []
    for pos, other in board.pieces(piece.color):
        if pos == move.from_pos or other.piece_type != piece.piece_type:
            continue
        if not is_valid_move(pos, move.to_pos, other, board, rules):
            continue
        if not is_in_check(piece.color, board.move_piece(pos, move.to_pos), rules):
            rivals.append(pos)
    return rivals


def notate(
    move: Move,
    board_before: Board,
    is_check: bool,
    is_checkmate: bool,
    rules: RuleSet = DEFAULT_RULES,
) -> str:
    """
    Algebraic notation for ``move`` played on ``board_before``.

    Examples: ``e4``, ``Nf3``, ``exd5``, ``Rad1``, ``R1a3``, ``Qh4e1``,
    ``Bb5+``, ``Qxf7#``, ``O-O``.

    Disambiguation is added for non-pawn pieces only: the origin file if that
    alone is unique, else the origin rank, else both. Pawn captures always
    start with the origin file.
    """
    from_pos, to_pos, piece = move.from_pos, move.to_pos, move.piece

    if piece.piece_type == chess.KING and abs(to_pos.col - from_pos.col) == 2:
        return "O-O" if to_pos.col > from_pos.col else "O-O-O"

    parts: list[str] = []

    if piece.piece_type != chess.PAWN:
        parts.append(chess.piece_symbol(piece.piece_type).upper())

        rivals = _rivals(move, board_before, rules)
        if rivals:
            same_file = any(pos.col == from_pos.col for pos in rivals)
            same_rank = any(pos.row == from_pos.row for pos in rivals)
            if not same_file:
                parts.append(from_pos.name[0])
            elif not same_rank:
                parts.append(from_pos.name[1])
            else:
                parts.append(from_pos.name)

    if move.captured is not None:
        if piece.piece_type == chess.PAWN:
            parts.append(from_pos.name[0])
        parts.append("x")

    parts.append(to_pos.name)

    if is_checkmate:
        parts.append("#")
    elif is_check:
        parts.append("+")

    return "".join(parts)
