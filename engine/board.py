"""
Board model: positions, moves and an immutable 8x8 grid of pieces.

The board is a value. Every accepted move produces a new Board and leaves the
previous one untouched, so positions can be shared freely between the game
session, the search tree and the notation generator without copying.

Coordinates use (row, col) with row 0 at the top of the diagram (Black's back
rank) and row 7 at the bottom (White's back rank). The displayed rank is
``8 - row`` and the file letter is ``'a' + col``. Conversion helpers map
positions to python-chess squares so FEN strings and UCI move text can be
produced and parsed with the library's own routines.

Pieces and colours are python-chess value types: ``chess.Piece`` for a piece,
``chess.WHITE`` / ``chess.BLACK`` for colours.
"""

from dataclasses import dataclass, replace
from typing import Iterable, Iterator, NamedTuple

import chess

BOARD_SIZE: int = 8


class Position(NamedTuple):
    """A board coordinate. Row 0 is Black's back rank."""

    row: int
    col: int

    def on_board(self) -> bool:
        return 0 <= self.row < BOARD_SIZE and 0 <= self.col < BOARD_SIZE

    @property
    def square(self) -> chess.Square:
        """The python-chess square index (a1 = 0, h8 = 63)."""
        return chess.square(self.col, BOARD_SIZE - 1 - self.row)

    @property
    def name(self) -> str:
        """Algebraic square name, e.g. ``e4``. Raises ValueError off the board."""
        if not self.on_board():
            raise ValueError(f"no square name for off-board position {tuple(self)}")
        return chess.FILE_NAMES[self.col] + chess.RANK_NAMES[BOARD_SIZE - 1 - self.row]

    @classmethod
    def from_square(cls, square: chess.Square) -> "Position":
        return cls(BOARD_SIZE - 1 - chess.square_rank(square), chess.square_file(square))

    @classmethod
    def parse(cls, name: str) -> "Position":
        """Parse an algebraic square name. Raises ValueError if malformed."""
        return cls.from_square(chess.parse_square(name))


@dataclass(frozen=True)
class Move:
    """
    A move from one square to another.

    A Move without notation is a candidate (generated or requested but not yet
    played). Once the orchestrator accepts it, the finalized history entry
    carries its algebraic notation.

    Attributes:
        from_pos: Origin square.
        to_pos:   Destination square.
        piece:    The moving piece.
        captured: The piece standing on ``to_pos`` before the move, if any.
        notation: Standard algebraic notation, set once the move is played.
    """

    from_pos: Position
    to_pos: Position
    piece: chess.Piece
    captured: chess.Piece | None = None
    notation: str | None = None

    @property
    def is_capture(self) -> bool:
        return self.captured is not None

    def with_notation(self, notation: str) -> "Move":
        return replace(self, notation=notation)

    def uci(self) -> str:
        """Long algebraic (UCI) form, e.g. ``e2e4``."""
        return chess.Move(self.from_pos.square, self.to_pos.square).uci()

    def same_squares(self, from_pos: Position, to_pos: Position) -> bool:
        return self.from_pos == from_pos and self.to_pos == to_pos

    @classmethod
    def from_uci(cls, text: str, board: "Board") -> "Move":
        """
        Build a candidate move from UCI text, reading the moving and captured
        pieces off ``board``. Raises ValueError for malformed text or an empty
        origin square. Legality is not checked.
        """
        from_pos, to_pos = parse_uci(text)
        piece = board.piece_at(from_pos)
        if piece is None:
            raise ValueError(f"no piece on {from_pos.name} for move {text!r}")
        return cls(from_pos, to_pos, piece, board.piece_at(to_pos))

    def __str__(self) -> str:
        return self.notation or self.uci()


def parse_uci(text: str) -> tuple[Position, Position]:
    """
    Split a UCI move string into origin and destination positions.

    Promotion suffixes are parsed by python-chess but ignored here, since the
    rule set has no promotion. Raises ValueError for malformed text.
    """
    move = chess.Move.from_uci(text.strip())
    if not move:
        raise ValueError(f"null move is not playable: {text!r}")
    return Position.from_square(move.from_square), Position.from_square(move.to_square)


class Board:
    """
    Immutable 8x8 grid of optional pieces, stored row-major.

    The cell tuple is exposed as ``cells`` for the hot loops in the rules and
    search modules; everything else should go through ``piece_at``.
    """

    __slots__ = ("_cells",)

    def __init__(self, cells: Iterable[chess.Piece | None] | None = None) -> None:
        if cells is None:
            self._cells: tuple[chess.Piece | None, ...] = (None,) * (BOARD_SIZE * BOARD_SIZE)
        else:
            self._cells = tuple(cells)
            if len(self._cells) != BOARD_SIZE * BOARD_SIZE:
                raise ValueError(f"a board has 64 cells, got {len(self._cells)}")

    @property
    def cells(self) -> tuple[chess.Piece | None, ...]:
        return self._cells

    def piece_at(self, pos: Position) -> chess.Piece | None:
        """Piece on ``pos``, or None for an empty or off-board square."""
        row, col = pos
        if 0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE:
            return self._cells[row * BOARD_SIZE + col]
        return None

    def move_piece(self, from_pos: Position, to_pos: Position) -> "Board":
        """
        Return a new board with the piece on ``from_pos`` moved to ``to_pos``.

        Whatever stood on the destination is removed. No legality checks are
        made; that is the job of ``engine.rules``.
        """
        cells = list(self._cells)
        src = from_pos.row * BOARD_SIZE + from_pos.col
        cells[to_pos.row * BOARD_SIZE + to_pos.col] = cells[src]
        cells[src] = None
        return Board(cells)

    def set_piece(self, pos: Position, piece: chess.Piece | None) -> "Board":
        """Return a new board with ``pos`` holding ``piece`` (used for setup)."""
        cells = list(self._cells)
        cells[pos.row * BOARD_SIZE + pos.col] = piece
        return Board(cells)

    def pieces(self, color: chess.Color | None = None) -> Iterator[tuple[Position, chess.Piece]]:
        """Yield (position, piece) pairs in row-major order."""
        for index, piece in enumerate(self._cells):
            if piece is not None and (color is None or piece.color == color):
                yield Position(index // BOARD_SIZE, index % BOARD_SIZE), piece

    # -----------------------------------------------------------------------
    # python-chess interop
    # -----------------------------------------------------------------------

    def to_chess(self, turn: chess.Color = chess.WHITE) -> chess.Board:
        """
        Build a python-chess board with the same pieces.

        Castling rights and the en passant square are always cleared because
        the rule set here supports neither.
        """
        board = chess.Board(None)
        for pos, piece in self.pieces():
            board.set_piece_at(pos.square, piece)
        board.turn = turn
        return board

    def fen(self, turn: chess.Color | None = None) -> str:
        """
        FEN of this board.

        With no ``turn`` only the piece placement field is returned, otherwise
        a full six-field FEN with the given side to move.
        """
        if turn is None:
            return self.to_chess().board_fen()
        return self.to_chess(turn).fen()

    @classmethod
    def from_fen(cls, fen: str) -> "Board":
        """Build a board from a full FEN or a bare piece placement field."""
        return parse_fen(fen)[0]

    def ascii(self) -> str:
        """Text diagram, rank 8 first. Used in logs and test failures."""
        return str(chess.BaseBoard(self.fen()))

    # -----------------------------------------------------------------------
    # Value semantics
    # -----------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._cells == other._cells

    def __hash__(self) -> int:
        return hash(self._cells)

    def __repr__(self) -> str:
        return f"Board({self.fen()!r})"


def parse_fen(fen: str) -> tuple[Board, chess.Color]:
    """
    Parse a FEN into a board and the side to move.

    A bare placement field (no spaces) is accepted and means White to move.
    Castling, en passant and clock fields are parsed by python-chess for
    validation and then ignored. Raises ValueError for malformed input.
    """
    fen = fen.strip()
    if " " in fen:
        source: chess.BaseBoard = chess.Board(fen)
        turn = source.turn
    else:
        source = chess.BaseBoard(fen)
        turn = chess.WHITE

    cells: list[chess.Piece | None] = [None] * (BOARD_SIZE * BOARD_SIZE)
    for square, piece in source.piece_map().items():
        pos = Position.from_square(square)
        cells[pos.row * BOARD_SIZE + pos.col] = piece
    return Board(cells), turn


_BACK_RANK = (
    chess.ROOK, chess.KNIGHT, chess.BISHOP, chess.QUEEN,
    chess.KING, chess.BISHOP, chess.KNIGHT, chess.ROOK,
)


def new_game() -> Board:
    """The standard initial position, 32 pieces."""
    cells: list[chess.Piece | None] = [None] * (BOARD_SIZE * BOARD_SIZE)
    for col, piece_type in enumerate(_BACK_RANK):
        cells[0 * BOARD_SIZE + col] = chess.Piece(piece_type, chess.BLACK)
        cells[1 * BOARD_SIZE + col] = chess.Piece(chess.PAWN, chess.BLACK)
        cells[6 * BOARD_SIZE + col] = chess.Piece(chess.PAWN, chess.WHITE)
        cells[7 * BOARD_SIZE + col] = chess.Piece(piece_type, chess.WHITE)
    return Board(cells)
