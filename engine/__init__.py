"""
Chess rules engine and search core.

This package implements a headless chess core: an immutable board model,
legal-move generation with check, checkmate and stalemate detection,
algebraic notation, a static evaluator, and a depth-limited alpha-beta
search with an opening book and difficulty-tuned randomization.

Modules:
    constants: Piece values, piece-square tables, scores, difficulty levels
    board    : Position, Move and the immutable Board; FEN / UCI interop
    rules    : RuleSet, move legality, check and terminal detection
    notation : Standard algebraic notation
    evaluate : Static evaluation (material + pawn/knight placement)
    search   : Minimax with alpha-beta pruning, move choice policy
    openings : Opening book lookup and opening labels
    game     : Move validation/application and the Game session
"""

from engine.board import Board, Move, Position, new_game
from engine.constants import Difficulty
from engine.evaluate import evaluate
from engine.game import AppliedMove, Game, Rejected, SoundCue, apply_move
from engine.notation import notate
from engine.rules import GameStatus, RuleSet, legal_moves, status
from engine.search import get_best_move

__all__ = [
    "AppliedMove",
    "Board",
    "Difficulty",
    "Game",
    "GameStatus",
    "Move",
    "Position",
    "Rejected",
    "RuleSet",
    "SoundCue",
    "apply_move",
    "evaluate",
    "get_best_move",
    "legal_moves",
    "new_game",
    "notate",
    "status",
]
