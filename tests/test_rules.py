import random

import chess
import pytest

from engine.board import Board, Position, new_game
from engine.rules import (
    GameStatus,
    RuleSet,
    check_rules,
    find_king,
    is_checkmate,
    is_in_check,
    is_path_clear,
    is_stalemate,
    is_valid_move,
    legal_moves,
    status,
)
from tests.conftest import play

WHITE_PAWN = chess.Piece(chess.PAWN, chess.WHITE)


def sq(name: str) -> Position:
    return Position.parse(name)


def ucis(moves) -> list[str]:
    return [m.uci() for m in moves]


def test_initial_position_has_twenty_moves_in_row_major_order() -> None:
    white = legal_moves(new_game(), chess.WHITE)
    black = legal_moves(new_game(), chess.BLACK)
    assert len(white) == 20
    assert len(black) == 20
    # a2 is the first White piece scanned; a4 (row 4) comes before a3 (row 5).
    assert ucis(white)[:2] == ["a2a4", "a2a3"]
    assert ucis(black)[0] == "b8a6"


def test_pawn_moves() -> None:
    board = Board.from_fen("4k3/8/8/3p4/4P3/8/8/4K3")
    assert is_valid_move(sq("e4"), sq("e5"), WHITE_PAWN, board)
    assert is_valid_move(sq("e4"), sq("d5"), WHITE_PAWN, board)
    assert not is_valid_move(sq("e4"), sq("f5"), WHITE_PAWN, board)  # nothing to capture
    assert not is_valid_move(sq("e4"), sq("e3"), WHITE_PAWN, board)  # backwards
    assert not is_valid_move(sq("e4"), sq("e6"), WHITE_PAWN, board)  # double step off start rank


def test_pawn_cannot_push_into_a_piece() -> None:
    board = Board.from_fen("4k3/8/8/8/4p3/4P3/8/4K3")
    assert not is_valid_move(sq("e3"), sq("e4"), WHITE_PAWN, board)


def test_pawn_double_step_skips_intermediate_square_by_default() -> None:
    # Known permissiveness: the square passed over is not checked.
    board = Board.from_fen("4k3/8/8/8/8/4n3/4P3/4K3")
    assert is_valid_move(sq("e2"), sq("e4"), WHITE_PAWN, board)
    assert "e2e4" in ucis(legal_moves(board, chess.WHITE))


def test_pawn_double_step_path_check_rule() -> None:
    board = Board.from_fen("4k3/8/8/8/8/4n3/4P3/4K3")
    rules = RuleSet.PAWN_DOUBLE_STEP_PATH_CHECK
    assert not is_valid_move(sq("e2"), sq("e4"), WHITE_PAWN, board, rules)
    assert "e2e4" not in ucis(legal_moves(board, chess.WHITE, rules))


def test_sliders_need_a_clear_path() -> None:
    board = Board.from_fen("4k3/8/8/8/8/8/8/R1N1K3")
    rook = chess.Piece(chess.ROOK, chess.WHITE)
    assert is_valid_move(sq("a1"), sq("b1"), rook, board)
    assert not is_valid_move(sq("a1"), sq("d1"), rook, board)
    assert not is_valid_move(sq("a1"), sq("c1"), rook, board)  # own knight
    assert is_valid_move(sq("a1"), sq("a8"), rook, board)
    assert not is_valid_move(sq("a1"), sq("b2"), rook, board)
    assert is_path_clear(sq("a1"), sq("a8"), board)
    assert not is_path_clear(sq("a1"), sq("e1"), board)


def test_bishop_and_queen_lines() -> None:
    board = Board.from_fen("4k3/8/8/8/8/2p5/8/B2QK3")
    bishop = chess.Piece(chess.BISHOP, chess.WHITE)
    queen = chess.Piece(chess.QUEEN, chess.WHITE)
    assert is_valid_move(sq("a1"), sq("c3"), bishop, board)  # capture
    assert not is_valid_move(sq("a1"), sq("d4"), bishop, board)  # blocked by c3
    assert not is_valid_move(sq("a1"), sq("a2"), bishop, board)
    assert is_valid_move(sq("d1"), sq("d7"), queen, board)
    assert is_valid_move(sq("d1"), sq("h5"), queen, board)
    assert not is_valid_move(sq("d1"), sq("e3"), queen, board)


def test_knight_jumps() -> None:
    board = new_game()
    knight = chess.Piece(chess.KNIGHT, chess.WHITE)
    assert is_valid_move(sq("g1"), sq("f3"), knight, board)
    assert is_valid_move(sq("g1"), sq("h3"), knight, board)
    assert not is_valid_move(sq("g1"), sq("e2"), knight, board)  # own pawn
    assert not is_valid_move(sq("g1"), sq("g3"), knight, board)


def test_king_steps_one_square_and_never_castles() -> None:
    board = Board.from_fen("4k3/8/8/8/8/8/8/R3K2R")
    king = chess.Piece(chess.KING, chess.WHITE)
    assert is_valid_move(sq("e1"), sq("f2"), king, board)
    assert not is_valid_move(sq("e1"), sq("g1"), king, board)
    assert not is_valid_move(sq("e1"), sq("c1"), king, board)
    assert not is_valid_move(sq("e1"), sq("e1"), king, board)


def test_in_check_and_blocked_check() -> None:
    assert is_in_check(chess.BLACK, Board.from_fen("4k3/8/4R3/8/8/8/8/4K3"))
    assert not is_in_check(chess.BLACK, Board.from_fen("4k3/4n3/4R3/8/8/8/8/4K3"))
    assert not is_in_check(chess.WHITE, Board.from_fen("4k3/8/4R3/8/8/8/8/4K3"))


def test_pawn_gives_check_diagonally_only() -> None:
    assert is_in_check(chess.BLACK, Board.from_fen("8/4k3/3P4/8/8/8/8/4K3"))
    assert not is_in_check(chess.BLACK, Board.from_fen("8/4k3/4P3/8/8/8/8/4K3"))


def test_missing_king_is_never_in_check() -> None:
    board = Board.from_fen("8/8/8/8/8/8/8/R3K3")
    assert find_king(chess.BLACK, board) is None
    assert not is_in_check(chess.BLACK, board)


def test_pinned_piece_has_no_moves() -> None:
    board = Board.from_fen("k3r3/8/8/8/8/8/4B3/4K3")
    moves = legal_moves(board, chess.WHITE)
    assert all(m.from_pos != sq("e2") for m in moves)
    assert moves  # the king can still move


def test_fools_mate_is_checkmate() -> None:
    game = play("f2f3", "e7e5", "g2g4", "d8h4")
    assert is_in_check(chess.WHITE, game.board)
    assert is_checkmate(chess.WHITE, game.board)
    assert not is_stalemate(chess.WHITE, game.board)
    assert legal_moves(game.board, chess.WHITE) == []
    assert status(game.board, chess.WHITE) == GameStatus.CHECKMATE


def test_stalemate() -> None:
    board = Board.from_fen("7k/5Q2/6K1/8/8/8/8/8")
    assert not is_in_check(chess.BLACK, board)
    assert is_stalemate(chess.BLACK, board)
    assert not is_checkmate(chess.BLACK, board)
    assert status(board, chess.BLACK) == GameStatus.STALEMATE


def test_status_check_and_playing() -> None:
    assert status(Board.from_fen("4k3/8/4R3/8/8/8/8/4K3"), chess.BLACK) == GameStatus.CHECK
    assert status(new_game(), chess.WHITE) == GameStatus.PLAYING
    assert status(Board.from_fen("8/8/8/4k3/8/8/8/4K3"), chess.WHITE) == GameStatus.PLAYING


def test_unsupported_rules_are_refused() -> None:
    assert check_rules(RuleSet.PAWN_DOUBLE_STEP_PATH_CHECK)
    with pytest.raises(ValueError):
        check_rules(RuleSet.CASTLING)
    with pytest.raises(ValueError):
        check_rules(RuleSet.PAWN_DOUBLE_STEP_PATH_CHECK | RuleSet.EN_PASSANT)


def _has_back_rank_pawn(board: Board) -> bool:
    return any(
        piece.piece_type == chess.PAWN and pos.row in (0, 7)
        for pos, piece in board.pieces()
    )


@pytest.mark.parametrize("seed", [1, 2, 3, 4])
def test_legal_moves_match_python_chess(seed: int) -> None:
    """
    With the pawn path check enabled and no castling or en passant rights,
    the move set is exactly python-chess's. Every move also keeps the
    mover's king safe.
    """
    rules = RuleSet.PAWN_DOUBLE_STEP_PATH_CHECK
    rng = random.Random(seed)
    board, turn = new_game(), chess.WHITE

    for _ in range(40):
        ours = legal_moves(board, turn, rules)
        reference = board.to_chess(turn)
        expected = {(m.from_square, m.to_square) for m in reference.legal_moves}
        assert {(m.from_pos.square, m.to_pos.square) for m in ours} == expected, board.ascii()

        if not ours:
            break
        move = rng.choice(ours)
        board = board.move_piece(move.from_pos, move.to_pos)
        assert not is_in_check(turn, board, rules)
        if _has_back_rank_pawn(board):
            break
        turn = not turn
