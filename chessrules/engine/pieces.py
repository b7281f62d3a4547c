from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Dict

if TYPE_CHECKING:
    from .board import Board
    from .move import Move


class Side(Enum):
    WHITE = "w"
    BLACK = "b"

    @property
    def opponent(self) -> "Side":
        return _OPPONENT[self]

    @property
    def forward(self) -> int:
        """Rank direction this side's pawns advance in (+1 or -1)."""
        return 1 if self is Side.WHITE else -1

    @property
    def home_rank(self) -> int:
        return 0 if self is Side.WHITE else 7

    @property
    def pawn_rank(self) -> int:
        """Rank index pawns start on and may double-step from."""
        return 1 if self is Side.WHITE else 6

    @property
    def promotion_rank(self) -> int:
        return 7 if self is Side.WHITE else 0


_OPPONENT = {Side.WHITE: Side.BLACK, Side.BLACK: Side.WHITE}


class PieceKind(Enum):
    PAWN = "p"
    KNIGHT = "n"
    BISHOP = "b"
    ROOK = "r"
    QUEEN = "q"
    KING = "k"


PROMOTION_KINDS = (PieceKind.QUEEN, PieceKind.ROOK, PieceKind.BISHOP, PieceKind.KNIGHT)
SLIDING_KINDS = frozenset({PieceKind.BISHOP, PieceKind.ROOK, PieceKind.QUEEN})


def _pawn_shape(move: "Move", owner: Side) -> bool:
    step = move.delta_rank * owner.forward
    if move.delta_file == 0:
        return step == 1 or (step == 2 and move.source.rank == owner.pawn_rank)
    return move.abs_delta_file == 1 and step == 1


def _knight_shape(move: "Move", owner: Side) -> bool:
    return {move.abs_delta_file, move.abs_delta_rank} == {1, 2}


def _bishop_shape(move: "Move", owner: Side) -> bool:
    return move.abs_delta_file == move.abs_delta_rank != 0


def _rook_shape(move: "Move", owner: Side) -> bool:
    return (move.abs_delta_file == 0) != (move.abs_delta_rank == 0)


def _queen_shape(move: "Move", owner: Side) -> bool:
    return _rook_shape(move, owner) or _bishop_shape(move, owner)


def _king_shape(move: "Move", owner: Side) -> bool:
    # Castling's two-file step is resolved by the rules engine, not here.
    return max(move.abs_delta_file, move.abs_delta_rank) == 1


_SHAPES: Dict[PieceKind, Callable[["Move", Side], bool]] = {
    PieceKind.PAWN: _pawn_shape,
    PieceKind.KNIGHT: _knight_shape,
    PieceKind.BISHOP: _bishop_shape,
    PieceKind.ROOK: _rook_shape,
    PieceKind.QUEEN: _queen_shape,
    PieceKind.KING: _king_shape,
}


@dataclass(frozen=True)
class Piece:
    """Immutable piece value: a kind and the side owning it.

    Two contracts are exposed:

    - :meth:`is_geometrically_valid` looks at the move's shape only.
    - :meth:`attacks` adds board occupancy (own-piece capture and blockers).

    Neither consults check detection, so attack scanning can never recurse into
    move simulation. The full game-move contract lives in
    :func:`chessrules.engine.rules.is_valid_game_move`.
    """

    kind: PieceKind
    owner: Side

    def __str__(self) -> str:
        """FEN letter (uppercase = white, lowercase = black)."""
        letter = self.kind.value
        return letter.upper() if self.owner is Side.WHITE else letter

    @classmethod
    def from_char(cls, char: str) -> "Piece":
        """Create a piece from its FEN letter, e.g. ``"N"`` -> white knight.

        Raises:
            ValueError: If ``char`` is not one of ``PNBRQKpnbrqk``.
        """
        try:
            kind = PieceKind(char.lower())
        except ValueError:
            raise ValueError(f"invalid piece character: {char!r}") from None
        return cls(kind, Side.WHITE if char.isupper() else Side.BLACK)

    def is_geometrically_valid(self, move: "Move") -> bool:
        return _SHAPES[self.kind](move, self.owner)

    def attacks(self, move: "Move", board: "Board") -> bool:
        """Return True if this piece, standing on ``move.source``, attacks ``move.destination``.

        Pawns attack along their forward diagonals only, whether or not the
        target square is occupied.
        """
        if move.source == move.destination or not self.is_geometrically_valid(move):
            return False
        target = board[move.destination]
        if target is not None and target.owner is self.owner:
            return False
        if self.kind is PieceKind.PAWN:
            return move.delta_file != 0
        if self.kind in SLIDING_KINDS:
            return not board.is_piece_between(move.source, move.destination)
        return True
