from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from .move import Move, Square
from .pieces import Piece, PieceKind, Side


# Rook corner files and the file each rook lands on after castling.
KINGSIDE_ROOK_FILE = 7
QUEENSIDE_ROOK_FILE = 0
KINGSIDE_ROOK_TARGET_FILE = 5
QUEENSIDE_ROOK_TARGET_FILE = 3
KING_HOME_FILE = 4

_FIELDS = {
    (Side.WHITE, True): "white_kingside",
    (Side.WHITE, False): "white_queenside",
    (Side.BLACK, True): "black_kingside",
    (Side.BLACK, False): "black_queenside",
}
_FEN_LETTERS = (
    ("K", "white_kingside"),
    ("Q", "white_queenside"),
    ("k", "black_kingside"),
    ("q", "black_queenside"),
)


@dataclass(frozen=True)
class CastlingRights:
    """Four castling flags; a revoked flag is never restored."""

    white_kingside: bool = True
    white_queenside: bool = True
    black_kingside: bool = True
    black_queenside: bool = True

    @classmethod
    def none(cls) -> "CastlingRights":
        return cls(False, False, False, False)

    @classmethod
    def from_fen(cls, text: str) -> "CastlingRights":
        """Parse a FEN castling field (subset of ``KQkq`` or ``-``).

        Raises:
            ValueError: On unknown or repeated letters.
        """
        if text == "-":
            return cls.none()
        if not text or any(ch not in "KQkq" for ch in text) or len(set(text)) != len(text):
            raise ValueError(f"invalid castling rights: {text!r}")
        return cls(*(letter in text for letter, _ in _FEN_LETTERS))

    def to_fen(self) -> str:
        s = "".join(letter for letter, name in _FEN_LETTERS if getattr(self, name))
        return s or "-"

    def allows(self, side: Side, kingside: bool) -> bool:
        return getattr(self, _FIELDS[(side, kingside)])

    def revoke(self, side: Side, kingside: bool) -> "CastlingRights":
        return replace(self, **{_FIELDS[(side, kingside)]: False})

    def after_move(self, piece: Piece, move: Move, captured: Optional[Piece]) -> "CastlingRights":
        """Return the rights left once ``piece`` has played ``move``.

        A king move drops both of its side's rights, a rook leaving its home
        corner drops that corner's right, and a rook captured on its home
        corner drops the opponent's right for that corner.
        """
        rights = self
        if piece.kind is PieceKind.KING:
            rights = rights.revoke(piece.owner, True).revoke(piece.owner, False)
        elif piece.kind is PieceKind.ROOK:
            kingside = _corner_side(move.source, piece.owner)
            if kingside is not None:
                rights = rights.revoke(piece.owner, kingside)
        if captured is not None and captured.kind is PieceKind.ROOK:
            kingside = _corner_side(move.destination, captured.owner)
            if kingside is not None:
                rights = rights.revoke(captured.owner, kingside)
        return rights


def _corner_side(square: Square, owner: Side) -> Optional[bool]:
    """True/False for ``owner``'s kingside/queenside rook corner, else None."""
    if square.rank != owner.home_rank:
        return None
    if square.file == KINGSIDE_ROOK_FILE:
        return True
    if square.file == QUEENSIDE_ROOK_FILE:
        return False
    return None
