import chess
import pytest

from engine.board import Board, Move, Position, new_game, parse_fen, parse_uci


def test_new_game_has_standard_setup() -> None:
    board = new_game()
    assert len(list(board.pieces())) == 32
    assert len(list(board.pieces(chess.WHITE))) == 16
    assert board.piece_at(Position(7, 4)) == chess.Piece(chess.KING, chess.WHITE)
    assert board.piece_at(Position(0, 3)) == chess.Piece(chess.QUEEN, chess.BLACK)
    assert board.piece_at(Position(6, 0)) == chess.Piece(chess.PAWN, chess.WHITE)
    assert board.fen() == chess.STARTING_BOARD_FEN


def test_position_maps_to_python_chess_squares() -> None:
    e2 = Position(6, 4)
    assert e2.square == chess.E2
    assert e2.name == "e2"
    assert Position.from_square(chess.A8) == Position(0, 0)
    assert Position.parse("h1") == Position(7, 7)
    assert not Position(8, 0).on_board()


def test_piece_at_off_board_is_empty() -> None:
    assert new_game().piece_at(Position(-1, 3)) is None
    assert new_game().piece_at(Position(3, 8)) is None


def test_move_piece_returns_new_board() -> None:
    board = new_game()
    after = board.move_piece(Position(6, 4), Position(4, 4))

    assert board == new_game()
    assert after != board
    assert after.piece_at(Position(6, 4)) is None
    assert after.piece_at(Position(4, 4)) == chess.Piece(chess.PAWN, chess.WHITE)


def test_fen_round_trip() -> None:
    fen = "r1bqkb1r/pppp1ppp/2n2n2/4p3/2B1P3/5N2/PPPP1PPP/RNBQK2R"
    board = Board.from_fen(fen)
    assert board.fen() == fen
    assert Board.from_fen(board.fen()) == board


def test_parse_fen_reads_side_to_move() -> None:
    board, turn = parse_fen("4k3/8/8/8/8/8/8/4K3 b - - 0 1")
    assert turn == chess.BLACK
    assert len(list(board.pieces())) == 2
    assert board.fen(chess.BLACK) == "4k3/8/8/8/8/8/8/4K3 b - - 0 1"


def test_parse_fen_rejects_garbage() -> None:
    with pytest.raises(ValueError):
        parse_fen("not a fen at all")


def test_board_needs_64_cells() -> None:
    with pytest.raises(ValueError):
        Board([None] * 10)


def test_move_uci_and_parse() -> None:
    move = Move(Position(7, 6), Position(5, 5), chess.Piece(chess.KNIGHT, chess.WHITE))
    assert move.uci() == "g1f3"
    assert str(move) == "g1f3"
    assert str(move.with_notation("Nf3")) == "Nf3"
    assert parse_uci("g1f3") == (Position(7, 6), Position(5, 5))
    with pytest.raises(ValueError):
        parse_uci("g1")


def test_off_board_position_has_no_name() -> None:
    with pytest.raises(ValueError):
        Position(8, 0).name
    with pytest.raises(ValueError):
        Position(0, 8).name


def test_move_from_uci_reads_pieces_off_the_board() -> None:
    board, _ = parse_fen("rnbqkbnr/ppp1pppp/8/3p4/4P3/8/PPPP1PPP/RNBQKBNR w KQkq d6 0 2")

    quiet = Move.from_uci("g1f3", board)
    assert quiet.piece == chess.Piece(chess.KNIGHT, chess.WHITE)
    assert not quiet.is_capture
    assert quiet.notation is None

    capture = Move.from_uci("e4d5", board)
    assert capture.piece == chess.Piece(chess.PAWN, chess.WHITE)
    assert capture.captured == chess.Piece(chess.PAWN, chess.BLACK)
    assert capture.uci() == "e4d5"

    with pytest.raises(ValueError):
        Move.from_uci("e3e4", board)
