from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from .move import Square
from .pieces import Piece, PieceKind, Side


# Rank-major, a1 first; index matches Square.index.
ALL_SQUARES: Tuple[Square, ...] = tuple(Square(f, r) for r in range(8) for f in range(8))

BACK_RANK = (
    PieceKind.ROOK,
    PieceKind.KNIGHT,
    PieceKind.BISHOP,
    PieceKind.QUEEN,
    PieceKind.KING,
    PieceKind.BISHOP,
    PieceKind.KNIGHT,
    PieceKind.ROOK,
)


def _empty_cells() -> List[Optional[Piece]]:
    return [None] * 64


@dataclass
class Board:
    """Fixed 64-cell grid of optional pieces.

    Notes:
    - Cells are indexed by :attr:`Square.index` (a1=0 .. h8=63).
    - No rule validation happens here; the board is a plain container.
    """

    cells: List[Optional[Piece]] = field(default_factory=_empty_cells)

    def __post_init__(self) -> None:
        if len(self.cells) != 64:
            raise ValueError("board must have exactly 64 cells")

    @classmethod
    def startpos(cls) -> "Board":
        """Create a board holding the standard starting position."""
        board = cls()
        for f, kind in enumerate(BACK_RANK):
            board[Square(f, 0)] = Piece(kind, Side.WHITE)
            board[Square(f, 1)] = Piece(PieceKind.PAWN, Side.WHITE)
            board[Square(f, 6)] = Piece(PieceKind.PAWN, Side.BLACK)
            board[Square(f, 7)] = Piece(kind, Side.BLACK)
        return board

    # --- Element access ---
    def get(self, square: Square) -> Optional[Piece]:
        return self.cells[square.index]

    def set(self, square: Square, piece: Optional[Piece]) -> None:
        self.cells[square.index] = piece

    __getitem__ = get
    __setitem__ = set

    def copy(self) -> "Board":
        """Return an independent board; pieces are values so a flat copy suffices."""
        return Board(cells=list(self.cells))

    # --- Queries ---
    def occupied(self, side: Optional[Side] = None) -> Iterator[Tuple[Square, Piece]]:
        """Yield ``(square, piece)`` for every occupied cell, optionally for one side."""
        for square, piece in zip(ALL_SQUARES, self.cells):
            if piece is not None and (side is None or piece.owner is side):
                yield square, piece

    def piece_count(self) -> int:
        return sum(1 for piece in self.cells if piece is not None)

    def king_square(self, side: Side) -> Optional[Square]:
        """Return the square of ``side``'s king, or ``None`` if it has none."""
        king = Piece(PieceKind.KING, side)
        for square, piece in zip(ALL_SQUARES, self.cells):
            if piece == king:
                return square
        return None

    def is_piece_between(self, a: Square, b: Square) -> bool:
        """Return True if any piece stands strictly between two aligned squares.

        Raises:
            ValueError: If ``a`` and ``b`` share no rank, file, or diagonal.
        """
        df = b.file - a.file
        dr = b.rank - a.rank
        if df != 0 and dr != 0 and abs(df) != abs(dr):
            raise ValueError(f"squares {a} and {b} are not aligned")
        step_f = (df > 0) - (df < 0)
        step_r = (dr > 0) - (dr < 0)
        f, r = a.file + step_f, a.rank + step_r
        while (f, r) != (b.file, b.rank):
            if self.cells[r * 8 + f] is not None:
                return True
            f += step_f
            r += step_r
        return False

    def __str__(self) -> str:
        rows: List[str] = []
        for rank in range(7, -1, -1):
            row = [str(self.cells[rank * 8 + f] or ".") for f in range(8)]
            rows.append(f"{rank + 1} {' '.join(row)}")
        rows.append("  a b c d e f g h")
        return "\n".join(rows)
