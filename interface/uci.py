"""
UCI (Universal Chess Interface) protocol handler.

UCI is the standard text-based protocol that allows chess GUIs and testing
tools (like cutechess-cli) to communicate with chess engines. The engine
reads commands from stdin and writes responses to stdout. All output lines
must be flushed immediately; GUI programs won't block waiting for a newline.

Protocol overview:
    GUI → Engine: uci, isready, ucinewgame, setoption, position, go, stop, quit
    Engine → GUI: id name, id author, option, uciok, readyok, info, bestmove

Differences from a full UCI engine:
    - The search is depth-limited by the Difficulty option. Time parameters
      on "go" are accepted and ignored.
    - The search cannot be interrupted. "stop" waits for it to finish.
    - The rule set has no castling, en passant or promotion, so position
      commands using such moves stop replaying at that move.

Threading model:
    The UCI loop runs on the main thread. "go" runs the search on a daemon
    thread so the loop keeps reading stdin; "stop", "position", "ucinewgame"
    and "quit" wait for a running search to finish first.

Critical rule: NEVER print to stdout except for valid UCI responses.
Debug output must go to stderr or be suppressed entirely.
"""

import os
import random
import sys
import threading
import time

# ---------------------------------------------------------------------------
# Path setup: make 'engine' importable when this script is run directly.
# ---------------------------------------------------------------------------
_REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _REPO_ROOT not in sys.path:
    sys.path.insert(0, _REPO_ROOT)

import chess

from engine.constants import DEFAULT_DIFFICULTY, Difficulty
from engine.game import Game, Rejected
from engine.search import SearchStats, choose_move


def _send(line: str) -> None:
    """Write a protocol line to stdout and flush immediately."""
    print(line, flush=True)


def _log(message: str) -> None:
    """
    Write a debug/error message to stderr.

    In UCI mode, stdout is reserved for valid protocol messages. All
    diagnostic output goes to stderr instead.
    """
    print(message, file=sys.stderr, flush=True)


class UciHandler:
    """
    Stateful handler for the UCI protocol.

    Attributes:
        game:          The current game, rebuilt by every "position" command.
        difficulty:    Strength used for "go", set with the Difficulty option.
        rng:           Random source for the engine's deliberate mistakes.
        search_thread: The active search thread, or None.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self.difficulty: Difficulty = DEFAULT_DIFFICULTY
        self.game: Game = Game.new(self.difficulty)
        self.rng: random.Random = rng if rng is not None else random.Random()
        self.search_thread: threading.Thread | None = None

    # -----------------------------------------------------------------------
    # Command handlers
    # -----------------------------------------------------------------------

    def handle_uci(self) -> None:
        """Identify the engine and advertise its options."""
        _send("id name ChessCore")
        _send("id author Chess Core Project")
        levels = " ".join(f"var {d.value}" for d in Difficulty)
        _send(f"option name Difficulty type combo default {DEFAULT_DIFFICULTY.value} {levels}")
        _send("uciok")

    def handle_isready(self) -> None:
        _send("readyok")

    def handle_ucinewgame(self) -> None:
        """Wait for any search, then start over from the initial position."""
        self._wait_for_search()
        self.game = Game.new(self.difficulty)

    def handle_setoption(self, tokens: list[str]) -> None:
        """
        Apply "setoption name <name> value <value>".

        Only Difficulty is recognised; unknown names and bad values are
        reported on stderr and otherwise ignored. A running search keeps the
        level it started with.
        """
        self._wait_for_search()
        if "name" not in tokens:
            _log("uci: setoption without name")
            return
        name_idx = tokens.index("name")
        value_idx = tokens.index("value") if "value" in tokens else len(tokens)
        name = " ".join(tokens[name_idx + 1:value_idx]).lower()
        value = " ".join(tokens[value_idx + 1:])

        if name != "difficulty":
            _log(f"uci: unknown option: {name!r}")
            return
        try:
            self.difficulty = Difficulty.parse(value)
        except ValueError as e:
            _log(f"uci: {e}")
            return
        self.game.difficulty = self.difficulty

    def handle_position(self, tokens: list[str]) -> None:
        """
        Parse and apply a "position" command.

        Command formats:
            position startpos
            position startpos moves e2e4 e7e5 ...
            position fen <FEN>
            position fen <FEN> moves e2e4 e7e5 ...

        Moves are replayed through the game's own validation. Replay stops at
        the first move the engine rejects.
        """
        self._wait_for_search()
        try:
            if not tokens:
                return

            if "moves" in tokens:
                moves_idx = tokens.index("moves")
                move_tokens = tokens[moves_idx + 1:]
            else:
                moves_idx = len(tokens)
                move_tokens = []

            if tokens[0] == "startpos":
                game = Game.new(self.difficulty)
            elif tokens[0] == "fen":
                game = Game.from_fen(" ".join(tokens[1:moves_idx]), self.difficulty)
            else:
                _log(f"uci: unknown position type: {tokens[0]}")
                return

            for uci_move in move_tokens:
                outcome = game.play_uci(uci_move)
                if isinstance(outcome, Rejected):
                    _log(f"uci: illegal move in position command: {outcome}")
                    break

            self.game = game

        except ValueError as e:
            _log(f"uci: error in position command: {e}")

    def handle_go(self, tokens: list[str]) -> None:
        """
        Start the search for the side to move on a background thread.

        Emits one "info" line and the "bestmove" line when the search
        completes. The reported score is from the side-to-move's perspective.
        """
        self._wait_for_search()
        if tokens:
            _log(f"uci: go parameters ignored (depth-limited search): {' '.join(tokens)}")

        # Snapshot what the search needs; a later "position" replaces
        # self.game instead of mutating it.
        game = self.game
        rng = self.rng

        def search_and_reply() -> None:
            try:
                stats = SearchStats()
                start = time.monotonic()
                result = choose_move(
                    game.board,
                    game.turn,
                    game.difficulty,
                    game.history,
                    rng=rng,
                    use_book=game.from_start,
                    stats=stats,
                    rules=game.rules,
                )
                elapsed_ms = max(1, int((time.monotonic() - start) * 1000))

                if result.move is not None:
                    score = result.score if game.turn == chess.BLACK else -result.score
                    nps = stats.nodes * 1000 // elapsed_ms
                    _send(
                        f"info depth {result.depth} score cp {score} "
                        f"nodes {stats.nodes} nps {nps} time {elapsed_ms}"
                    )
                    _send(f"bestmove {result.move.uci()}")
                else:
                    _send("bestmove (none)")

            except Exception as e:
                _log(f"search error: {e}")
                _send("bestmove (none)")

        self.search_thread = threading.Thread(target=search_and_reply, daemon=True)
        self.search_thread.start()

    def handle_stop(self) -> None:
        """The search cannot be cut short; wait for its bestmove."""
        self._wait_for_search()

    def handle_quit(self) -> None:
        self._wait_for_search()
        sys.exit(0)

    # -----------------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------------

    def _wait_for_search(self) -> None:
        if self.search_thread is not None and self.search_thread.is_alive():
            self.search_thread.join()
        self.search_thread = None


def run_uci_loop() -> None:
    """
    Main UCI protocol loop.

    Reads lines from stdin and dispatches each command to the UciHandler.
    Runs until the "quit" command is received or stdin is closed. Each
    command is wrapped in a try/except so a bug in one handler does not
    crash the engine; errors go to stderr and the loop continues.
    """
    handler = UciHandler()

    for raw_line in sys.stdin:
        line = raw_line.strip()
        if not line:
            continue

        tokens = line.split()
        command = tokens[0]
        args = tokens[1:]

        try:
            if command == "uci":
                handler.handle_uci()
            elif command == "isready":
                handler.handle_isready()
            elif command == "ucinewgame":
                handler.handle_ucinewgame()
            elif command == "setoption":
                handler.handle_setoption(args)
            elif command == "position":
                handler.handle_position(args)
            elif command == "go":
                handler.handle_go(args)
            elif command == "stop":
                handler.handle_stop()
            elif command == "quit":
                handler.handle_quit()
            else:
                # Unknown commands are ignored per the UCI protocol.
                _log(f"uci: ignoring unknown command: {command!r}")

        except Exception as e:
            _log(f"uci: unhandled error for command {command!r}: {e}")

    handler.handle_stop()


if __name__ == "__main__":
    run_uci_loop()
