import threading

import chess

from engine.constants import Difficulty
from engine.rules import GameStatus
from interface.uci import UciHandler


def run(handler: UciHandler, *lines: str) -> None:
    dispatch = {
        "uci": lambda args: handler.handle_uci(),
        "isready": lambda args: handler.handle_isready(),
        "ucinewgame": lambda args: handler.handle_ucinewgame(),
        "setoption": handler.handle_setoption,
        "position": handler.handle_position,
        "go": handler.handle_go,
        "stop": lambda args: handler.handle_stop(),
    }
    for line in lines:
        command, *args = line.split()
        dispatch[command](args)
    handler.handle_stop()


def test_uci_handshake(capsys) -> None:
    run(UciHandler(), "uci", "isready")
    out = capsys.readouterr().out.splitlines()
    assert out[0] == "id name ChessCore"
    assert "option name Difficulty type combo default medium var easy var medium var hard var grandmaster" in out
    assert out[-2:] == ["uciok", "readyok"]


def test_go_plays_book_reply(capsys, steady_rng) -> None:
    run(UciHandler(rng=steady_rng), "position startpos moves e2e4", "go")
    out = capsys.readouterr().out.splitlines()
    assert out[0].startswith("info depth 0 ")
    assert out[-1] == "bestmove c7c5"


def test_go_from_fen_finds_mate(capsys, steady_rng) -> None:
    handler = UciHandler(rng=steady_rng)
    run(
        handler,
        "setoption name Difficulty value easy",
        "position fen 6k1/8/8/8/8/8/r4PPP/6K1 b - - 0 1",
        "go wtime 1000 btime 1000",
    )
    captured = capsys.readouterr()
    lines = captured.out.splitlines()
    assert lines[0].startswith("info depth 2 score cp 10000 ")
    assert lines[-1] == "bestmove a2a1"
    assert "ignored" in captured.err


def test_position_stops_at_illegal_move(capsys) -> None:
    handler = UciHandler()
    run(handler, "position startpos moves e2e4 e7e4 g1f3")
    assert [m.uci() for m in handler.game.history] == ["e2e4"]
    assert "illegal move" in capsys.readouterr().err


def test_bad_fen_keeps_previous_game(capsys) -> None:
    handler = UciHandler()
    run(handler, "position startpos moves d2d4", "position fen nonsense")
    assert len(handler.game.history) == 1
    assert "error in position command" in capsys.readouterr().err


def test_setoption(capsys) -> None:
    handler = UciHandler()
    run(handler, "setoption name Difficulty value Grandmaster")
    assert handler.difficulty == Difficulty.GRANDMASTER
    assert handler.game.difficulty == Difficulty.GRANDMASTER

    run(handler, "setoption name Difficulty value superhuman", "setoption name Hash value 16")
    assert handler.difficulty == Difficulty.GRANDMASTER
    err = capsys.readouterr().err
    assert "unknown difficulty" in err
    assert "unknown option" in err


def test_ucinewgame_resets(capsys) -> None:
    handler = UciHandler()
    run(handler, "position startpos moves e2e4 e7e5", "ucinewgame")
    assert handler.game.history == []
    assert handler.game.turn == chess.WHITE


def test_go_without_moves_reports_none(capsys) -> None:
    handler = UciHandler()
    run(handler, "position fen R5k1/5ppp/8/8/8/8/8/6K1 b - - 0 1")
    assert handler.game.status == GameStatus.CHECKMATE
    run(handler, "go")
    assert capsys.readouterr().out.splitlines()[-1] == "bestmove (none)"


def test_setoption_waits_for_running_search() -> None:
    handler = UciHandler()
    finished = threading.Event()
    handler.search_thread = threading.Thread(target=finished.wait, args=(5,), daemon=True)
    handler.search_thread.start()
    threading.Timer(0.05, finished.set).start()

    handler.handle_setoption("name Difficulty value easy".split())

    assert finished.is_set()
    assert handler.search_thread is None
    assert handler.game.difficulty == Difficulty.EASY
