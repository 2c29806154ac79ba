"""
FastAPI web application for the chess engine.

Exposes two REST endpoints:

- POST /api/status: replay a game and describe the resulting position
  (status, legal moves, evaluation, opening).
- POST /api/move: replay a game and let the engine play the next move.

Architecture notes:
- Sync endpoints (not async): FastAPI runs sync handlers in a thread pool,
  which is the correct pattern for CPU-bound blocking calls like the search.
- Stateless per request: the client sends the full move list from the initial
  position each time and the server replays it through the engine's own
  validation. No board state is kept between requests.

Usage:
    pip install -e ".[web]"
    uvicorn web.app:app --port 8000
"""

import logging
import random

import chess
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, field_validator

from engine.constants import DEFAULT_DIFFICULTY, Difficulty
from engine.evaluate import evaluation_bar, format_evaluation
from engine.game import Game, Rejected
from engine.search import SearchStats, choose_move

# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

logging.basicConfig(level=logging.INFO)
_log = logging.getLogger(__name__)

app = FastAPI(title="Chess Core", version="1.0.0")


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------


class StatusRequest(BaseModel):
    """
    A game given as its move list.

    Fields:
        moves: Moves in UCI notation from the initial position, e.g.
               ["e2e4", "c7c5"].
    """

    moves: list[str] = []


class MoveRequest(StatusRequest):
    """
    Client request for an engine move.

    Fields:
        difficulty: easy, medium, hard or grandmaster (case-insensitive).
        seed:       Optional seed for the engine's deliberate mistakes, for
                    reproducible replies.
    """

    difficulty: Difficulty = DEFAULT_DIFFICULTY
    seed: int | None = None

    @field_validator("difficulty", mode="before")
    @classmethod
    def parse_difficulty(cls, v: object) -> Difficulty:
        """Accept any capitalisation of the level names."""
        return Difficulty.parse(v)


class StatusResponse(BaseModel):
    """
    Description of a position.

    Fields:
        fen:             Full FEN of the position.
        turn:            "white" or "black".
        status:          playing, check, checkmate or stalemate.
        message:         Human-readable status line.
        legal_moves:     Legal moves in UCI notation, generation order.
        history:         Algebraic notation of the moves played.
        evaluation:      Centipawns, positive favours Black.
        evaluation_text: Formatted evaluation ("+0.3", "Mate").
        evaluation_bar:  0-100, 100 = Black completely winning.
        opening:         Name of the opening, if identified.
    """

    fen: str
    turn: str
    status: str
    message: str
    legal_moves: list[str]
    history: list[str]
    evaluation: int
    evaluation_text: str
    evaluation_bar: float
    opening: str | None


class MoveResponse(BaseModel):
    """
    Engine response after choosing its move.

    Fields:
        move:       Engine move in UCI notation.
        notation:   The same move in algebraic notation.
        source:     "book", "random" or "search".
        depth:      Search depth (0 for book and random moves).
        nodes:      Positions visited.
        position:   The position after the engine's move.
    """

    move: str
    notation: str
    source: str
    depth: int
    nodes: int
    position: StatusResponse


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _replay(moves: list[str]) -> Game:
    """Replay ``moves`` from the initial position; HTTP 400 on a bad move."""
    game = Game.new()
    for index, text in enumerate(moves):
        try:
            outcome = game.play_uci(text)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=f"Invalid move #{index + 1}: {exc}") from exc
        if isinstance(outcome, Rejected):
            raise HTTPException(status_code=400, detail=f"Illegal move #{index + 1}: {outcome}")
    return game


def _describe(game: Game) -> StatusResponse:
    score = game.evaluation
    return StatusResponse(
        fen=game.fen(),
        turn=chess.COLOR_NAMES[game.turn],
        status=game.status.value,
        message=game.status_message(),
        legal_moves=[m.uci() for m in game.legal_moves()],
        history=[m.notation or m.uci() for m in game.history],
        evaluation=score,
        evaluation_text=format_evaluation(score),
        evaluation_bar=round(evaluation_bar(score), 2),
        opening=game.opening,
    )


# ---------------------------------------------------------------------------
# API routes
# ---------------------------------------------------------------------------


@app.post("/api/status", response_model=StatusResponse)
def api_status(request: StatusRequest) -> StatusResponse:
    """Describe the position reached by the given moves."""
    return _describe(_replay(request.moves))


@app.post("/api/move", response_model=MoveResponse)
def api_move(request: MoveRequest) -> MoveResponse:
    """
    Compute and play the engine's move for the side to move.

    Raises:
        HTTPException 400: Illegal move in the list or game already over.
        HTTPException 500: Engine returned no move (should not happen in
                           non-terminal positions).
    """
    game = _replay(request.moves)
    game.difficulty = request.difficulty

    if game.is_over:
        raise HTTPException(status_code=400, detail=f"Game is already over: {game.status_message()}")

    stats = SearchStats()
    rng = random.Random(request.seed)
    try:
        result = choose_move(
            game.board, game.turn, game.difficulty, game.history, rng=rng, stats=stats
        )
    except Exception as exc:
        _log.exception("Engine search failed after moves=%s", " ".join(request.moves))
        raise HTTPException(status_code=500, detail=f"Engine error: {exc}") from exc

    if result.move is None:
        raise HTTPException(status_code=500, detail="Engine returned no move")

    outcome = game.play(result.move.from_pos, result.move.to_pos)
    if isinstance(outcome, Rejected):
        raise HTTPException(status_code=500, detail=f"Engine chose a rejected move: {outcome}")

    _log.info(
        "Move=%s source=%s score=%d depth=%d nodes=%d difficulty=%s",
        result.move.uci(),
        result.source,
        result.score,
        result.depth,
        stats.nodes,
        game.difficulty.value,
    )

    return MoveResponse(
        move=outcome.move.uci(),
        notation=outcome.move.notation or outcome.move.uci(),
        source=result.source or "search",
        depth=result.depth,
        nodes=stats.nodes,
        position=_describe(game),
    )
