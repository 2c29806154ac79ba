"""
Search entry point: depth-limited minimax with alpha-beta pruning.

This module defines the interface the game session and both front-ends
(interface/uci.py, web/app.py) depend on: ``choose_move`` for the full
decision with its diagnostics, and ``get_best_move`` when only the move is
needed.

Decision policy for the computer side, in order:

1. Opening book. While the game follows a book line, play its next move.

2. Deliberate mistakes. With probability ``random_factor`` of the chosen
   difficulty, play a uniformly random legal move without searching. This is
   decided before any search runs, so weak levels sometimes answer instantly.

3. Search. Every legal move is tried and the reply tree below it is searched
   ``depth`` plies deep with minimax. The move with the best value for the
   mover is played. Ties go to the move generated first.

Scores are from Black's perspective (see engine/evaluate.py), so Black
maximizes and White minimizes. There is no move ordering: moves are searched
in the row-major order produced by engine/rules.py, which is what makes the
tie-breaking reproducible.

Threading model:
    The search is synchronous and cannot be interrupted. Callers that need a
    responsive loop (the UCI handler) run it on a worker thread and wait for
    it to finish.
"""

import logging
import random
from dataclasses import dataclass
from typing import Sequence

import chess

from engine.board import Board, Move
from engine.constants import (
    DIFFICULTY_SETTINGS,
    DRAW_SCORE,
    MATE_SCORE,
    SEARCH_INFINITY,
    Difficulty,
)
from engine.evaluate import evaluate
from engine.openings import book_move
from engine.rules import DEFAULT_RULES, RuleSet, check_rules, is_in_check, iter_legal_moves, legal_moves

_log = logging.getLogger(__name__)


@dataclass
class SearchStats:
    """
    Counters collected while searching.

    Attributes:
        nodes: Number of positions visited by ``minimax`` (every call counts,
               leaves included). Used for the UCI ``info`` line and the
               benchmark; it never influences the result.
    """

    nodes: int = 0


@dataclass(frozen=True)
class SearchResult:
    """
    Outcome of ``choose_move``.

    Attributes:
        move:   The chosen move, or None if the side has no legal move.
        score:  Value of the chosen move from Black's perspective. For book
                and random moves this is the static evaluation after the move.
        depth:  Plies searched below the root move (0 for book/random).
        nodes:  Positions visited.
        source: "book", "random" or "search"; None when there is no move.
    """

    move: Move | None
    score: int = 0
    depth: int = 0
    nodes: int = 0
    source: str | None = None


def minimax(
    board: Board,
    depth: int,
    maximizing: bool,
    alpha: int,
    beta: int,
    stats: SearchStats | None = None,
    rules: RuleSet = DEFAULT_RULES,
) -> int:
    """
    Minimax value of ``board`` with alpha-beta pruning.

    Args:
        board:      Position to search. Never modified; each child is a new
                    board.
        depth:      Remaining plies. At 0 the static evaluation is returned.
        maximizing: True when Black is to move (Black maximizes).
        alpha:      Best value Black is already guaranteed elsewhere.
        beta:       Best value White is already guaranteed elsewhere.
        stats:      Optional node counter.
        rules:      Rule set for move generation and evaluation.

    Returns:
        The fail-soft minimax value from Black's perspective. With an open
        window (-SEARCH_INFINITY, SEARCH_INFINITY) it equals the value of a
        full-width minimax search; pruning only skips work.

    A side with no legal move is a leaf: -MATE_SCORE if Black is mated,
    +MATE_SCORE if White is mated, DRAW_SCORE for stalemate.
    """
    if stats is not None:
        stats.nodes += 1

    if depth == 0:
        return evaluate(board, rules)

    color = chess.BLACK if maximizing else chess.WHITE
    best = -SEARCH_INFINITY if maximizing else SEARCH_INFINITY
    searched = False

    for move in iter_legal_moves(board, color, rules):
        searched = True
        child = board.move_piece(move.from_pos, move.to_pos)
        value = minimax(child, depth - 1, not maximizing, alpha, beta, stats, rules)

        if maximizing:
            best = max(best, value)
            alpha = max(alpha, value)
        else:
            best = min(best, value)
            beta = min(beta, value)

        # Cutoff: the other side already has a better alternative higher up.
        if beta <= alpha:
            break

    if not searched:
        if is_in_check(color, board, rules):
            return -MATE_SCORE if maximizing else MATE_SCORE
        return DRAW_SCORE

    return best


def _search_root(
    board: Board,
    color: chess.Color,
    moves: Sequence[Move],
    depth: int,
    stats: SearchStats,
    rules: RuleSet,
) -> tuple[Move, int]:
    """Search the reply tree under every root move and keep the best one."""
    black = color == chess.BLACK
    best_move = moves[0]
    best_value = -SEARCH_INFINITY - 1 if black else SEARCH_INFINITY + 1

    for move in moves:
        child = board.move_piece(move.from_pos, move.to_pos)
        # After our move it is the opponent's turn: White minimizes after a
        # Black move, Black maximizes after a White move.
        value = minimax(child, depth, not black, -SEARCH_INFINITY, SEARCH_INFINITY, stats, rules)
        if (value > best_value) if black else (value < best_value):
            best_value = value
            best_move = move

    return best_move, best_value


def choose_move(
    board: Board,
    color: chess.Color,
    difficulty: Difficulty | str,
    history: Sequence[Move] = (),
    rng: random.Random | None = None,
    use_book: bool = True,
    stats: SearchStats | None = None,
    rules: RuleSet = DEFAULT_RULES,
) -> SearchResult:
    """
    Pick the computer's move for ``color``.

    Args:
        board:      Current position. Not modified.
        color:      Side to move.
        difficulty: Difficulty level (or its name); selects depth and
                    random_factor from DIFFICULTY_SETTINGS.
        history:    Moves played so far from the initial position. Drives the
                    opening book.
        rng:        Random source for deliberate mistakes. Pass a seeded
                    ``random.Random`` for reproducible play.
        use_book:   False disables the opening book (e.g. positions set up
                    from a FEN, whose history does not start at move one).
        stats:      Optional counter; a fresh one is used if omitted.
        rules:      Rule set.

    Returns:
        A SearchResult; its move is None when ``color`` has no legal move.

    Raises:
        ValueError: Unknown difficulty or unsupported rule set.
    """
    settings = DIFFICULTY_SETTINGS[Difficulty.parse(difficulty)]
    check_rules(rules)
    stats = stats if stats is not None else SearchStats()
    rng = rng if rng is not None else random.Random()

    if use_book:
        move = book_move(board, color, history)
        if move is not None:
            _log.debug("book move %s after %d plies", move.uci(), len(history))
            score = evaluate(board.move_piece(move.from_pos, move.to_pos), rules)
            return SearchResult(move, score, 0, stats.nodes, "book")

    moves = legal_moves(board, color, rules)
    if not moves:
        return SearchResult(None)

    if rng.random() < settings.random_factor:
        move = rng.choice(moves)
        _log.debug("random move %s (random_factor=%.2f)", move.uci(), settings.random_factor)
        score = evaluate(board.move_piece(move.from_pos, move.to_pos), rules)
        return SearchResult(move, score, 0, stats.nodes, "random")

    move, score = _search_root(board, color, moves, settings.depth, stats, rules)
    _log.debug(
        "search move %s score=%d depth=%d nodes=%d", move.uci(), score, settings.depth, stats.nodes
    )
    return SearchResult(move, score, settings.depth, stats.nodes, "search")


def get_best_move(
    board: Board,
    color: chess.Color,
    difficulty: Difficulty | str,
    history: Sequence[Move] = (),
    rng: random.Random | None = None,
    use_book: bool = True,
    stats: SearchStats | None = None,
    rules: RuleSet = DEFAULT_RULES,
) -> Move | None:
    """The move ``choose_move`` would play, or None if there is none."""
    return choose_move(board, color, difficulty, history, rng, use_book, stats, rules).move
