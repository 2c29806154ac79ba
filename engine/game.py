"""
Move orchestration: validating and applying moves, and the game session.

``apply_move`` is the single path through which any move, human or computer,
enters a game. It never raises for an illegal move; it returns a ``Rejected``
value instead and the caller keeps its previous state. An accepted move comes
back as an ``AppliedMove`` carrying everything a front-end needs: the new
board, the finalized move with its notation, the status of the side now to
move, and the sound cue to play.

``Game`` strings those calls together for one game: it owns the current
board, the side to move and the history, and asks engine/search.py for the
computer's moves. Nothing is global; two Game objects never share state.
Moves must be applied one at a time (each call finishes its status update
before the next starts).
"""

import logging
import random
from dataclasses import dataclass, field
from enum import Enum

import chess

from engine.board import Board, Move, Position, new_game, parse_fen, parse_uci
from engine.constants import DEFAULT_DIFFICULTY, Difficulty
from engine.evaluate import evaluate
from engine.notation import notate
from engine.openings import current_opening
from engine.rules import (
    DEFAULT_RULES,
    GameStatus,
    RuleSet,
    check_rules,
    is_in_check,
    is_valid_move,
    legal_moves,
    status,
)
from engine.search import choose_move

_log = logging.getLogger(__name__)


class SoundCue(str, Enum):
    """Sound the presentation layer should play."""

    MOVE = "move"
    CAPTURE = "capture"
    CHECK = "check"
    CHECKMATE = "checkmate"
    GAME_START = "gameStart"


class RejectReason(str, Enum):
    NO_PIECE = "no piece on the origin square"
    WRONG_COLOR = "piece belongs to the other side"
    ILLEGAL_MOVE = "piece cannot move there"
    SELF_CHECK = "move leaves own king in check"
    GAME_OVER = "game is over"


def _square_label(pos: Position) -> str:
    return pos.name if pos.on_board() else str(tuple(pos))


@dataclass(frozen=True)
class Rejected:
    """A move that was not played. Nothing changed."""

    reason: RejectReason
    from_pos: Position
    to_pos: Position

    def __bool__(self) -> bool:
        return False

    def __str__(self) -> str:
        return f"{_square_label(self.from_pos)}{_square_label(self.to_pos)}: {self.reason.value}"


@dataclass(frozen=True)
class AppliedMove:
    """
    A move that was played.

    Attributes:
        board:     Board after the move.
        move:      The finalized move, notation included.
        status:    Status of ``next_turn`` on the new board.
        sound:     Cue for the presentation layer.
        next_turn: The side now to move.
    """

    board: Board
    move: Move
    status: GameStatus
    sound: SoundCue
    next_turn: chess.Color


def sound_for(status_after: GameStatus, captured: bool) -> SoundCue:
    """Checkmate beats check, check beats capture."""
    if status_after == GameStatus.CHECKMATE:
        return SoundCue.CHECKMATE
    if status_after == GameStatus.CHECK:
        return SoundCue.CHECK
    return SoundCue.CAPTURE if captured else SoundCue.MOVE


def apply_move(
    board: Board,
    from_pos: Position,
    to_pos: Position,
    turn: chess.Color,
    rules: RuleSet = DEFAULT_RULES,
) -> AppliedMove | Rejected:
    """
    Validate and play the move ``from_pos`` -> ``to_pos`` for ``turn``.

    Rejected when the origin is empty, holds the other side's piece, the piece
    cannot move there, or the move would leave the mover's king in check.
    ``board`` itself is never modified.
    """
    piece = board.piece_at(from_pos)
    if piece is None:
        return Rejected(RejectReason.NO_PIECE, from_pos, to_pos)
    if piece.color != turn:
        return Rejected(RejectReason.WRONG_COLOR, from_pos, to_pos)
    if not is_valid_move(from_pos, to_pos, piece, board, rules):
        return Rejected(RejectReason.ILLEGAL_MOVE, from_pos, to_pos)

    after = board.move_piece(from_pos, to_pos)
    if is_in_check(turn, after, rules):
        return Rejected(RejectReason.SELF_CHECK, from_pos, to_pos)

    opponent = not turn
    new_status = status(after, opponent, rules)
    move = Move(from_pos, to_pos, piece, captured=board.piece_at(to_pos))
    notation = notate(
        move,
        board,
        is_check=new_status in (GameStatus.CHECK, GameStatus.CHECKMATE),
        is_checkmate=new_status == GameStatus.CHECKMATE,
        rules=rules,
    )

    return AppliedMove(
        board=after,
        move=move.with_notation(notation),
        status=new_status,
        sound=sound_for(new_status, move.is_capture),
        next_turn=opponent,
    )


@dataclass
class Game:
    """
    One game between a human (White by default) and the engine.

    Attributes:
        board:      Current position.
        turn:       Side to move.
        history:    Finalized moves, oldest first.
        status:     Status of ``turn``.
        difficulty: Engine strength.
        computer:   The colour the engine plays.
        rules:      Rule set in force.
        from_start: True when the game began at the initial position, which
                    is what the opening book requires.
        winner:     Winning colour once decided, None for a draw or while
                    playing.
        result_reason: Why the game ended ("checkmate", "stalemate", or the
                    reason given to ``force_result``).
        sound:      Cue for the most recent event.
    """

    board: Board = field(default_factory=new_game)
    turn: chess.Color = chess.WHITE
    history: list[Move] = field(default_factory=list)
    status: GameStatus = GameStatus.PLAYING
    difficulty: Difficulty = DEFAULT_DIFFICULTY
    computer: chess.Color = chess.BLACK
    rules: RuleSet = DEFAULT_RULES
    from_start: bool = True
    winner: chess.Color | None = None
    result_reason: str | None = None
    sound: SoundCue = SoundCue.GAME_START

    def __post_init__(self) -> None:
        self.difficulty = Difficulty.parse(self.difficulty)
        check_rules(self.rules)

    @classmethod
    def new(
        cls,
        difficulty: Difficulty | str = DEFAULT_DIFFICULTY,
        computer: chess.Color = chess.BLACK,
        rules: RuleSet = DEFAULT_RULES,
    ) -> "Game":
        """A fresh game from the initial position."""
        return cls(difficulty=Difficulty.parse(difficulty), computer=computer, rules=rules)

    @classmethod
    def from_fen(
        cls,
        fen: str,
        difficulty: Difficulty | str = DEFAULT_DIFFICULTY,
        computer: chess.Color = chess.BLACK,
        rules: RuleSet = DEFAULT_RULES,
    ) -> "Game":
        """A game set up from a FEN. The opening book is not used."""
        board, turn = parse_fen(fen)
        game = cls(
            board=board,
            turn=turn,
            difficulty=Difficulty.parse(difficulty),
            computer=computer,
            rules=rules,
            from_start=False,
        )
        game._settle(status(board, turn, rules))
        return game

    # -----------------------------------------------------------------------
    # Queries
    # -----------------------------------------------------------------------

    @property
    def is_over(self) -> bool:
        return self.status in (GameStatus.CHECKMATE, GameStatus.STALEMATE)

    @property
    def evaluation(self) -> int:
        return evaluate(self.board, self.rules)

    @property
    def opening(self) -> str | None:
        return current_opening(self.history) if self.from_start else None

    @property
    def last_move(self) -> Move | None:
        return self.history[-1] if self.history else None

    def legal_moves(self) -> list[Move]:
        if self.is_over:
            return []
        return legal_moves(self.board, self.turn, self.rules)

    def fen(self) -> str:
        return self.board.fen(self.turn)

    def status_message(self) -> str:
        side = "White" if self.turn == chess.WHITE else "Black"
        if self.status == GameStatus.CHECK:
            return f"{side} is in check!"
        if self.status == GameStatus.CHECKMATE:
            winner = "White" if self.winner == chess.WHITE else "Black"
            if self.result_reason not in (None, "checkmate"):
                return f"{self.result_reason.capitalize()}! {winner} wins!"
            return f"Checkmate! {winner} wins!"
        if self.status == GameStatus.STALEMATE:
            return "Stalemate! The game is a draw."
        return "Computer's turn" if self.turn == self.computer else "Your turn"

    # -----------------------------------------------------------------------
    # Playing moves
    # -----------------------------------------------------------------------

    def play(self, from_pos: Position, to_pos: Position) -> AppliedMove | Rejected:
        """Play a move for the side to move. The game is unchanged if rejected."""
        if self.is_over:
            return Rejected(RejectReason.GAME_OVER, from_pos, to_pos)

        outcome = apply_move(self.board, from_pos, to_pos, self.turn, self.rules)
        if isinstance(outcome, Rejected):
            _log.debug("rejected %s", outcome)
            return outcome

        self.board = outcome.board
        self.history.append(outcome.move)
        self.turn = outcome.next_turn
        self.sound = outcome.sound
        self._settle(outcome.status)
        _log.debug("played %s, status=%s", outcome.move.notation, outcome.status.value)
        return outcome

    def play_uci(self, text: str) -> AppliedMove | Rejected:
        """Play a move given in UCI form (``e2e4``). Raises ValueError if malformed."""
        return self.play(*parse_uci(text))

    def computer_move(self, rng: random.Random | None = None) -> AppliedMove | Rejected | None:
        """
        Let the engine choose and play a move for the side to move.

        Returns None if the game is over or the side has no move.
        """
        if self.is_over:
            return None
        result = choose_move(
            self.board,
            self.turn,
            self.difficulty,
            self.history,
            rng=rng,
            use_book=self.from_start,
            rules=self.rules,
        )
        if result.move is None:
            return None
        return self.play(result.move.from_pos, result.move.to_pos)

    def force_result(self, loser: chess.Color, reason: str = "time's up") -> None:
        """
        End the game from outside the rules, e.g. when a clock runs out.

        The status becomes CHECKMATE with the other side as winner, and any
        further move is rejected.
        """
        self.status = GameStatus.CHECKMATE
        self.winner = not loser
        self.result_reason = reason
        self.sound = SoundCue.CHECKMATE
        _log.info("game forced over: %s, winner=%s", reason, chess.COLOR_NAMES[self.winner])

    def _settle(self, new_status: GameStatus) -> None:
        self.status = new_status
        if new_status == GameStatus.CHECKMATE:
            self.winner = not self.turn
            self.result_reason = "checkmate"
        elif new_status == GameStatus.STALEMATE:
            self.winner = None
            self.result_reason = "stalemate"
