from __future__ import annotations

from typing import List, NamedTuple

from .board import Board
from .castling import CastlingRights
from .errors import FenError
from .move import Square
from .pieces import Piece, Side


STARTPOS_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

# Emitted in place of the en-passant, halfmove and fullmove fields, which the
# session does not track.
UNTRACKED_FIELDS = "- 1 1"

# ASCII run lengths only; str.isdigit() also accepts superscript digits.
_RUN_LENGTHS = "12345678"


class FenPosition(NamedTuple):
    board: Board
    side_to_move: Side
    castling_rights: CastlingRights


def parse_fen(fen: str) -> FenPosition:
    """Parse the placement, side-to-move and castling fields of a FEN string.

    Args:
        fen (str): Position such as ``"8/8/8/8/8/8/8/K6k w -"``.

    Returns:
        FenPosition: Board, side to move and castling rights.

    Raises:
        FenError: If the string is empty, the placement is malformed, the side
            to move is not ``w``/``b``, or the castling field is invalid.

    Notes:
        A missing castling field means all four rights are available. Any
        fields after the castling field are accepted and ignored.
    """
    if not fen or not isinstance(fen, str):
        raise FenError("FEN must be a non-empty string")
    parts = fen.strip().split()
    if len(parts) < 2:
        raise FenError("FEN must contain placement and side to move")
    placement, stm = parts[0], parts[1]

    board = _parse_placement(placement)

    if stm not in ("w", "b"):
        raise FenError("side to move must be 'w' or 'b'")
    side = Side(stm)

    if len(parts) > 2:
        try:
            rights = CastlingRights.from_fen(parts[2])
        except ValueError as e:
            raise FenError(str(e)) from e
    else:
        rights = CastlingRights()

    return FenPosition(board, side, rights)


def _parse_placement(placement: str) -> Board:
    ranks = placement.split("/")
    if len(ranks) != 8:
        raise FenError("FEN board must have 8 ranks")
    board = Board()
    for rank_idx, row in enumerate(reversed(ranks)):  # rank 1 first
        file_idx = 0
        for ch in row:
            if ch.isdigit():
                if ch not in _RUN_LENGTHS:
                    raise FenError(f"invalid empty count in FEN rank: {ch!r}")
                file_idx += int(ch)
            else:
                if file_idx >= 8:
                    raise FenError("too many squares in FEN rank")
                try:
                    piece = Piece.from_char(ch)
                except ValueError as e:
                    raise FenError(str(e)) from e
                board[Square(file_idx, rank_idx)] = piece
                file_idx += 1
        if file_idx != 8:
            raise FenError("rank does not sum to 8 squares in FEN")
    return board


def placement_to_fen(board: Board) -> str:
    """Serialize piece placement only, e.g. ``"8/8/8/8/8/8/8/K6k"``."""
    rows: List[str] = []
    for rank_idx in range(7, -1, -1):
        run = 0
        row: List[str] = []
        for file_idx in range(8):
            piece = board[Square(file_idx, rank_idx)]
            if piece is None:
                run += 1
                continue
            if run > 0:
                row.append(str(run))
                run = 0
            row.append(str(piece))
        if run > 0:
            row.append(str(run))
        rows.append("".join(row))
    return "/".join(rows)


def format_fen(board: Board, side_to_move: Side, rights: CastlingRights) -> str:
    """Serialize a position into a six-field FEN string.

    The en-passant, halfmove and fullmove fields are fixed placeholders.
    """
    return f"{placement_to_fen(board)} {side_to_move.value} {rights.to_fen()} {UNTRACKED_FIELDS}"
