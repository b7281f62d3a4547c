from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .pieces import Side


class StatusKind(Enum):
    ONGOING = "ongoing"
    CHECK = "check"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    INSUFFICIENT_MATERIAL = "insufficient_material"


@dataclass(frozen=True)
class GameStatus:
    """Result of classifying a position for its side to move.

    ``side`` is the side in check for :attr:`StatusKind.CHECK`, the winner for
    :attr:`StatusKind.CHECKMATE`, and ``None`` otherwise.
    """

    kind: StatusKind
    side: Optional[Side] = None

    @classmethod
    def ongoing(cls) -> "GameStatus":
        return cls(StatusKind.ONGOING)

    @classmethod
    def in_check(cls, side: Side) -> "GameStatus":
        return cls(StatusKind.CHECK, side)

    @classmethod
    def checkmate(cls, winner: Side) -> "GameStatus":
        return cls(StatusKind.CHECKMATE, winner)

    @classmethod
    def stalemate(cls) -> "GameStatus":
        return cls(StatusKind.STALEMATE)

    @classmethod
    def insufficient_material(cls) -> "GameStatus":
        return cls(StatusKind.INSUFFICIENT_MATERIAL)

    @property
    def is_over(self) -> bool:
        return self.kind in (
            StatusKind.CHECKMATE,
            StatusKind.STALEMATE,
            StatusKind.INSUFFICIENT_MATERIAL,
        )

    @property
    def winner(self) -> Optional[Side]:
        return self.side if self.kind is StatusKind.CHECKMATE else None

    def __str__(self) -> str:
        if self.side is None:
            return self.kind.value
        return f"{self.kind.value}:{self.side.value}"
