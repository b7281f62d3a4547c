"""Rules engine: legality, check detection, move application, game status.

All functions operate on a :class:`~chessrules.engine.game.Game` session.
Legality checks never mutate the session: any simulation runs on a scratch
copy of the board. :func:`apply_move` builds the whole transition on a scratch
board and commits it to the session only once every step has succeeded.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterator, List

from .board import ALL_SQUARES, Board
from .castling import (
    KING_HOME_FILE,
    KINGSIDE_ROOK_FILE,
    KINGSIDE_ROOK_TARGET_FILE,
    QUEENSIDE_ROOK_FILE,
    QUEENSIDE_ROOK_TARGET_FILE,
)
from .errors import IllegalStateError, InvalidArgumentError
from .move import Move, Square
from .pieces import PROMOTION_KINDS, Piece, PieceKind, Side
from .status import GameStatus

if TYPE_CHECKING:
    from .game import Game


logger = logging.getLogger(__name__)


# --- Attack detection (never consults check simulation) ---
def is_square_attacked(board: Board, square: Square, by: Side) -> bool:
    """Return True if any piece of ``by`` attacks ``square`` on ``board``."""
    for origin, piece in board.occupied(by):
        if piece.attacks(Move(origin, square, by), board):
            return True
    return False


def is_king_attacked(board: Board, side: Side) -> bool:
    """Return True if ``side``'s king is attacked; a board without that king is never in check."""
    king_sq = board.king_square(side)
    if king_sq is None:
        return False
    return is_square_attacked(board, king_sq, side.opponent)


# --- Move shape helpers ---
def is_castling_move(piece: Piece, move: Move) -> bool:
    return piece.kind is PieceKind.KING and move.abs_delta_file == 2 and move.delta_rank == 0


def is_promotion_move(piece: Piece, move: Move) -> bool:
    return piece.kind is PieceKind.PAWN and move.destination.rank == piece.owner.promotion_rank


def is_en_passant_shape(piece: Piece, move: Move, board: Board) -> bool:
    """A pawn stepping diagonally onto an empty square."""
    return (
        piece.kind is PieceKind.PAWN
        and move.delta_file != 0
        and board[move.destination] is None
    )


def en_passant_victim_square(move: Move, game: "Game") -> Square:
    """Square of the pawn taken by an en-passant ``move``.

    With no history the victim is assumed beside the capturing pawn, on the
    destination file; otherwise it is where the last applied move landed.
    """
    if not game.move_stack:
        return Square(move.destination.file, move.source.rank)
    return game.move_stack[-1].destination


def _en_passant_available(move: Move, game: "Game") -> bool:
    """Whether the last move was an opponent pawn double-step that ``move`` can take."""
    if not game.move_stack:
        return False
    last = game.move_stack[-1]
    taken = game.board[last.destination]
    return (
        taken is not None
        and taken.kind is PieceKind.PAWN
        and taken.owner is not move.mover
        and last.delta_file == 0
        and last.abs_delta_rank == 2
        and last.destination.rank == move.source.rank
        and last.destination.file == move.destination.file
    )


# --- Piece game-move contract ---
def _is_valid_pawn_move(pawn: Piece, move: Move, game: "Game") -> bool:
    if not pawn.is_geometrically_valid(move):
        return False
    board = game.board
    target = board[move.destination]
    if move.delta_file == 0:
        if target is not None:
            return False
        if move.abs_delta_rank == 2:
            passed = Square(move.source.file, move.source.rank + pawn.owner.forward)
            return board[passed] is None
        return True
    if target is not None:
        return target.owner is not pawn.owner
    return _en_passant_available(move, game)


def _is_valid_castle(king: Piece, move: Move, game: "Game") -> bool:
    side = king.owner
    board = game.board
    home = Square(KING_HOME_FILE, side.home_rank)
    if move.source != home:
        return False
    kingside = move.delta_file > 0
    if not game.castling_rights.allows(side, kingside):
        return False
    rook_sq = Square(KINGSIDE_ROOK_FILE if kingside else QUEENSIDE_ROOK_FILE, home.rank)
    if board[rook_sq] != Piece(PieceKind.ROOK, side):
        return False
    if board.is_piece_between(home, rook_sq):
        return False
    if is_square_attacked(board, home, side.opponent):
        return False
    passed = Square(home.file + (1 if kingside else -1), home.rank)
    return not is_square_attacked(board, passed, side.opponent)


def _is_valid_piece_move(piece: Piece, move: Move, game: "Game") -> bool:
    """Game-move contract minus the own-king check clause."""
    if piece.kind is PieceKind.PAWN:
        return _is_valid_pawn_move(piece, move, game)
    if is_castling_move(piece, move):
        return _is_valid_castle(piece, move, game)
    return piece.attacks(move, game.board)


def is_valid_game_move(piece: Piece, move: Move, game: "Game") -> bool:
    """Full per-piece contract for ``piece`` standing on ``move.source``.

    Geometry, own-piece capture, blockers, pawn push/capture/en-passant rules,
    castling conditions, and finally that the mover's king is not left
    attacked.
    """
    if not _is_valid_piece_move(piece, move, game):
        return False
    return not would_leave_mover_in_check(move, game)


def would_leave_mover_in_check(move: Move, game: "Game") -> bool:
    """Simulate ``move`` on a scratch board and test the mover's king."""
    scratch = game.board.copy()
    piece = scratch[move.source]
    scratch[move.source] = None
    if piece is not None and is_en_passant_shape(piece, move, scratch):
        scratch[en_passant_victim_square(move, game)] = None
    scratch[move.destination] = piece
    return is_king_attacked(scratch, move.mover)


# --- Legality ---
def is_legal(move: Move, game: "Game") -> bool:
    """Return True if ``move`` may be played in ``game`` right now.

    Raises:
        InvalidArgumentError: If ``move`` is None.
    """
    if move is None:
        raise InvalidArgumentError("move is required")
    if move.mover is not game.side_to_move:
        return False
    piece = game.board[move.source]
    if piece is None or piece.owner is not move.mover:
        return False
    if move.source == move.destination:
        return False
    target = game.board[move.destination]
    if target is not None and target.owner is move.mover:
        return False
    if move.promotion is not None and not is_promotion_move(piece, move):
        return False
    return is_valid_game_move(piece, move, game)


def _candidate_moves(game: "Game", side: Side) -> Iterator[Move]:
    """Moves whose shape fits the piece; legality is not checked yet."""
    for origin, piece in game.board.occupied(side):
        for target in ALL_SQUARES:
            move = Move(origin, target, side)
            if not (piece.is_geometrically_valid(move) or is_castling_move(piece, move)):
                continue
            if is_promotion_move(piece, move):
                for kind in PROMOTION_KINDS:
                    yield Move(origin, target, side, kind)
            else:
                yield move


def iter_legal_moves(game: "Game") -> Iterator[Move]:
    """Lazily yield every legal move for the side to move."""
    for move in _candidate_moves(game, game.side_to_move):
        if is_legal(move, game):
            yield move


def legal_moves(game: "Game") -> List[Move]:
    return list(iter_legal_moves(game))


# --- Terminal state classification ---
def is_insufficient_material(board: Board) -> bool:
    """K vs K, K+minor vs K, K vs K+minor, K+B vs K+B on same-colored squares."""
    white = [(sq, p) for sq, p in board.occupied(Side.WHITE)]
    black = [(sq, p) for sq, p in board.occupied(Side.BLACK)]
    minors = (PieceKind.BISHOP, PieceKind.KNIGHT)

    if len(white) == 1 and len(black) == 1:
        return True
    if len(white) == 1 and len(black) == 2:
        return any(p.kind in minors for _, p in black)
    if len(white) == 2 and len(black) == 1:
        return any(p.kind in minors for _, p in white)
    if len(white) == 2 and len(black) == 2:
        wb = next((sq for sq, p in white if p.kind is PieceKind.BISHOP), None)
        bb = next((sq for sq, p in black if p.kind is PieceKind.BISHOP), None)
        return wb is not None and bb is not None and wb.color == bb.color
    return False


def classify_status(game: "Game") -> GameStatus:
    """Classify the position for the side to move."""
    side = game.side_to_move
    in_check = is_king_attacked(game.board, side)
    has_moves = next(iter_legal_moves(game), None) is not None

    if in_check and not has_moves:
        return GameStatus.checkmate(side.opponent)
    if not has_moves:
        return GameStatus.stalemate()
    if in_check:
        return GameStatus.in_check(side)
    if is_insufficient_material(game.board):
        return GameStatus.insufficient_material()
    return GameStatus.ongoing()


# --- Move application ---
def apply_move(move: Move, game: "Game", validated: bool = False) -> bool:
    """Apply ``move`` to ``game`` atomically.

    Args:
        move (Move): Move to play.
        game (Game): Session to mutate.
        validated (bool): Skip the legality check; only pass True for moves
            already known to be legal.

    Returns:
        bool: True if the move was applied, False if it was rejected as
            illegal (the session is left untouched).

    Raises:
        InvalidArgumentError: If ``move`` is None, or a pawn reaches the last
            rank without a promotion choice.
        IllegalStateError: If the source square holds no piece.
    """
    if move is None:
        raise InvalidArgumentError("move is required")
    board = game.board
    piece = board[move.source]
    if piece is None:
        raise IllegalStateError(f"no piece to move on {move.source}")

    if not validated and not is_legal(move, game):
        logger.debug("rejected illegal move %s", move.to_uci())
        return False

    placed = piece
    if is_promotion_move(piece, move):
        if move.promotion is None:
            raise InvalidArgumentError(f"move {move.to_uci()} requires a promotion piece")
        placed = Piece(move.promotion, piece.owner)

    rights = game.castling_rights.after_move(piece, move, board[move.destination])
    scratch = board.copy()

    if is_castling_move(piece, move):
        rank = move.source.rank
        if move.delta_file > 0:
            rook_from, rook_to = KINGSIDE_ROOK_FILE, KINGSIDE_ROOK_TARGET_FILE
        else:
            rook_from, rook_to = QUEENSIDE_ROOK_FILE, QUEENSIDE_ROOK_TARGET_FILE
        scratch[Square(rook_to, rank)] = scratch[Square(rook_from, rank)]
        scratch[Square(rook_from, rank)] = None

    if is_en_passant_shape(piece, move, scratch):
        scratch[en_passant_victim_square(move, game)] = None

    scratch[move.source] = None
    scratch[move.destination] = placed

    # Commit
    if rights != game.castling_rights:
        logger.debug("castling rights %s -> %s", game.castling_rights.to_fen(), rights.to_fen())
    game.board = scratch
    game.castling_rights = rights
    game.move_stack.append(move)
    game.side_to_move = move.mover.opponent
    game.status = classify_status(game)
    logger.debug("applied %s, status %s", move.to_uci(), game.status)
    return True
