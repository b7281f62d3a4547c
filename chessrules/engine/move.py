from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .errors import InvalidArgumentError
from .pieces import PROMOTION_KINDS, PieceKind, Side


FILES = "abcdefgh"
PROMOTION_CHARS = {kind.value: kind for kind in PROMOTION_KINDS}


@dataclass(frozen=True)
class Square:
    """A board coordinate.

    Attributes:
        file (int): File index, 0 for the a-file through 7 for the h-file.
        rank (int): Rank index, 0 for rank 1 through 7 for rank 8.
    """

    file: int
    rank: int

    def __post_init__(self) -> None:
        if not (0 <= self.file < 8 and 0 <= self.rank < 8):
            raise ValueError(f"square out of range: file={self.file} rank={self.rank}")

    @property
    def index(self) -> int:
        """Zero-based index, a1=0 .. h8=63, rank-major."""
        return self.rank * 8 + self.file

    @property
    def color(self) -> int:
        """Square color parity: 0 for dark squares (a1), 1 for light squares."""
        return (self.file + self.rank) % 2

    def __str__(self) -> str:
        return FILES[self.file] + str(self.rank + 1)


def parse_square(s: str) -> Square:
    """Convert algebraic notation into a :class:`Square`.

    Args:
        s (str): Square name such as ``"e4"``.

    Returns:
        Square: Parsed square.

    Raises:
        ValueError: If ``s`` is not a valid square.
    """
    if len(s) != 2 or s[0] not in FILES or s[1] < "1" or s[1] > "8":
        raise ValueError(f"invalid square: {s!r}")
    return Square(FILES.index(s[0]), int(s[1]) - 1)


@dataclass(frozen=True)
class Move:
    """Immutable description of a proposed transition.

    Attributes:
        source (Square): Square the piece moves from.
        destination (Square): Square the piece moves to.
        mover (Side): Side making the move.
        promotion (Optional[PieceKind]): Replacement kind for a promoting pawn.
    """

    source: Square
    destination: Square
    mover: Side
    promotion: Optional[PieceKind] = None

    def __post_init__(self) -> None:
        if self.source is None or self.destination is None or self.mover is None:
            raise InvalidArgumentError("move requires source, destination and mover")
        if self.promotion is not None and self.promotion not in PROMOTION_KINDS:
            raise InvalidArgumentError(f"cannot promote to {self.promotion!r}")

    @property
    def delta_file(self) -> int:
        return self.destination.file - self.source.file

    @property
    def delta_rank(self) -> int:
        return self.destination.rank - self.source.rank

    @property
    def abs_delta_file(self) -> int:
        return abs(self.delta_file)

    @property
    def abs_delta_rank(self) -> int:
        return abs(self.delta_rank)

    def to_uci(self) -> str:
        """Serialize the move into long algebraic form, e.g. ``"e7e8q"``."""
        promo = self.promotion.value if self.promotion is not None else ""
        return f"{self.source}{self.destination}{promo}"


def parse_uci(uci: str, mover: Side) -> Move:
    """Parse a long algebraic move string for ``mover``.

    Args:
        uci (str): Move such as ``"e2e4"`` or ``"e7e8q"``.
        mover (Side): Side making the move.

    Returns:
        Move: Parsed move.

    Raises:
        ValueError: If the string has an invalid length, squares, or promotion
            piece.
    """
    if len(uci) not in (4, 5):
        raise ValueError(f"invalid UCI move length: {uci!r}")
    source = parse_square(uci[0:2])
    destination = parse_square(uci[2:4])
    promotion: Optional[PieceKind] = None
    if len(uci) == 5:
        promotion = parse_promotion(uci[4])
    return Move(source, destination, mover, promotion)


def parse_promotion(char: str) -> PieceKind:
    """Map a promotion letter (``q``, ``r``, ``b``, ``n``; any case) to a kind."""
    try:
        return PROMOTION_CHARS[char.lower()]
    except KeyError:
        raise InvalidArgumentError(f"invalid promotion piece: {char!r}") from None
