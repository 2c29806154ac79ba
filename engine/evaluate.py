"""
Static evaluation: material plus pawn and knight placement.

A chess engine needs to assign a numeric score to any board position so the
search function can compare moves and choose the best one. This evaluator is
intentionally simple:

- Material: every piece is worth its centipawn value from
  ``engine.constants.PIECE_VALUES``. Kings are included; both are always on
  the board in a legal game, so their values cancel.
- Placement: pawns and knights add the entry of their piece-square table.
  The tables are written from White's side of the board; Black pieces look up
  the mirrored row (``7 - row``). Other pieces get no placement bonus.
- Terminal positions override everything: a checkmated White scores
  +MATE_SCORE, a checkmated Black scores -MATE_SCORE.
- A side in check hands its opponent a small CHECK_BONUS.

Sign convention: the score is always from Black's point of view. Positive
means Black is better, negative means White is better. The search maximizes
for Black and minimizes for White accordingly.

The display helpers at the bottom turn a score into the strings and bar
percentages shown next to the board.
"""

import math

import chess

from engine.board import BOARD_SIZE, Board
from engine.constants import CHECK_BONUS, MATE_SCORE, PIECE_VALUES, PST
from engine.rules import DEFAULT_RULES, RuleSet, is_checkmate, is_in_check


def material_and_position(board: Board) -> int:
    """Material plus piece-square bonuses, Black-positive. No terminal checks."""
    score = 0
    for index, piece in enumerate(board.cells):
        if piece is None:
            continue

        value = PIECE_VALUES[piece.piece_type]
        table = PST.get(piece.piece_type)
        if table is not None:
            row, col = divmod(index, BOARD_SIZE)
            # Mirror the row for Black so both sides read the table from
            # their own back rank.
            value += table[row][col] if piece.color == chess.WHITE else table[7 - row][col]

        score += value if piece.color == chess.BLACK else -value
    return score


def evaluate(board: Board, rules: RuleSet = DEFAULT_RULES) -> int:
    """
    Centipawn evaluation from Black's perspective.

    Args:
        board: The position to score. Not modified.
        rules: Rule set used for the check and checkmate tests.

    Returns:
        +MATE_SCORE if White is checkmated, -MATE_SCORE if Black is
        checkmated, otherwise material and placement with the check bonus
        applied (+CHECK_BONUS when White is in check, -CHECK_BONUS when Black
        is).

    Example:
        >>> from engine.board import new_game
        >>> evaluate(new_game())
        0
    """
    score = material_and_position(board)

    if is_checkmate(chess.WHITE, board, rules):
        return MATE_SCORE
    if is_checkmate(chess.BLACK, board, rules):
        return -MATE_SCORE

    if is_in_check(chess.WHITE, board, rules):
        score += CHECK_BONUS
    elif is_in_check(chess.BLACK, board, rules):
        score -= CHECK_BONUS

    return score


# ---------------------------------------------------------------------------
# Display helpers
# ---------------------------------------------------------------------------


def format_evaluation(score: int) -> str:
    """Pawn units with one decimal and a sign, or "Mate" at the mate bound."""
    if abs(score) >= MATE_SCORE:
        return "Mate"
    sign = "+" if score > 0 else "-" if score < 0 else ""
    return f"{sign}{abs(score) / 100:.1f}"


def evaluation_bar(score: int) -> float:
    """
    Fill of the evaluation bar, 0-100.

    0 means White is completely winning, 100 means Black is. Scores between
    the mate bounds are squashed with a logistic curve (500 cp scale).
    """
    if score >= MATE_SCORE:
        return 100.0
    if score <= -MATE_SCORE:
        return 0.0
    return 100.0 / (1.0 + math.exp(-score / 500))
