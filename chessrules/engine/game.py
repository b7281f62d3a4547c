from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from . import rules
from .board import Board
from .castling import CastlingRights
from .fen import STARTPOS_FEN, format_fen, parse_fen, placement_to_fen
from .move import Move, Square, parse_square, parse_uci
from .pieces import Piece, Side
from .status import GameStatus


@dataclass
class Game:
    """Game session: the authoritative board, history, rights and turn.

    Responsibility: hold state, route queries and moves through the rules
    engine. State changes only through :meth:`make_move`; a rejected move
    leaves every field untouched.

    Build sessions with :meth:`new`, :meth:`from_fen` or :meth:`from_board`,
    which classify the initial position.
    """

    board: Board
    side_to_move: Side = Side.WHITE
    castling_rights: CastlingRights = field(default_factory=CastlingRights)
    move_stack: List[Move] = field(default_factory=list)
    status: GameStatus = field(default_factory=GameStatus.ongoing)

    @classmethod
    def new(cls) -> "Game":
        return cls.from_fen(STARTPOS_FEN)

    @classmethod
    def from_fen(cls, fen: str) -> "Game":
        board, side, rights = parse_fen(fen)
        return cls.from_board(board, side, rights)

    @classmethod
    def from_board(
        cls,
        board: Board,
        side_to_move: Side = Side.WHITE,
        castling_rights: Optional[CastlingRights] = None,
    ) -> "Game":
        game = cls(
            board=board,
            side_to_move=side_to_move,
            castling_rights=castling_rights if castling_rights is not None else CastlingRights(),
        )
        game.status = rules.classify_status(game)
        return game

    def to_fen(self) -> str:
        return format_fen(self.board, self.side_to_move, self.castling_rights)

    def short_fen(self) -> str:
        """Piece placement field only."""
        return placement_to_fen(self.board)

    def copy(self) -> "Game":
        return Game(
            board=self.board.copy(),
            side_to_move=self.side_to_move,
            castling_rights=self.castling_rights,
            move_stack=list(self.move_stack),
            status=self.status,
        )

    # --- Queries ---
    @property
    def history(self) -> Tuple[Move, ...]:
        return tuple(self.move_stack)

    def piece_at(self, square: Union[Square, str]) -> Optional[Piece]:
        if isinstance(square, str):
            square = parse_square(square)
        return self.board[square]

    def is_valid_move(self, move: Move) -> bool:
        return rules.is_legal(move, self)

    def legal_moves(self) -> List[Move]:
        return rules.legal_moves(self)

    def in_check(self) -> bool:
        return rules.is_king_attacked(self.board, self.side_to_move)

    def is_promotion_move(self, source: Optional[Square], destination: Square) -> bool:
        """Whether a piece moved from ``source`` to ``destination`` would promote."""
        if source is None:
            return False
        piece = self.board[source]
        return piece is not None and rules.is_promotion_move(piece, Move(source, destination, piece.owner))

    def move(self, uci: str) -> Move:
        """Build a move for the side to move from text such as ``"e7e8q"``."""
        return parse_uci(uci, self.side_to_move)

    # --- Mutation ---
    def make_move(self, move: Move, validated: bool = False) -> bool:
        """Play ``move``; see :func:`chessrules.engine.rules.apply_move`."""
        return rules.apply_move(move, self, validated)

    def move_history_uci(self) -> List[str]:
        return [m.to_uci() for m in self.move_stack]

