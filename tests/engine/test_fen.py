from __future__ import annotations

import pytest

from chessrules.engine.castling import CastlingRights
from chessrules.engine.errors import FenError
from chessrules.engine.fen import STARTPOS_FEN, parse_fen
from chessrules.engine.game import Game
from chessrules.engine.move import parse_square
from chessrules.engine.pieces import Piece, PieceKind, Side


def _tracked(fen: str) -> str:
    # Placement, side to move and castling; the rest is not tracked
    return " ".join(fen.split()[:3])


def test_startpos_round_trip() -> None:
    game = Game.from_fen(STARTPOS_FEN)
    assert _tracked(game.to_fen()) == _tracked(STARTPOS_FEN)
    assert game.to_fen().endswith(" - 1 1")


@pytest.mark.parametrize(
    "fen",
    [
        "r1bqkbnr/pppp1ppp/2n5/4p3/3P4/5N2/PPP1PPPP/RNBQKB1R b KQ",
        "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b -",
        "r3k2r/8/8/8/8/8/8/R3K2R w KQkq",
        "4k3/8/8/8/8/8/8/4K3 w Kq",
    ],
)
def test_round_trip_various_positions(fen: str) -> None:
    assert _tracked(Game.from_fen(fen).to_fen()) == fen


def test_missing_castling_field_means_all_rights() -> None:
    position = parse_fen("r3k2r/8/8/8/8/8/8/R3K2R w")
    assert position.castling_rights == CastlingRights()
    assert position.side_to_move is Side.WHITE


def test_trailing_fields_are_ignored() -> None:
    game = Game.from_fen("4k3/8/8/8/8/8/8/4K3 b - e3 17 42")
    assert game.side_to_move is Side.BLACK
    assert game.to_fen() == "4k3/8/8/8/8/8/8/4K3 b - - 1 1"


def test_placement_maps_to_squares() -> None:
    board = parse_fen(STARTPOS_FEN).board
    assert board[parse_square("e1")] == Piece(PieceKind.KING, Side.WHITE)
    assert board[parse_square("d8")] == Piece(PieceKind.QUEEN, Side.BLACK)
    assert board[parse_square("e4")] is None
    assert board.piece_count() == 32


def test_short_fen_is_placement_only() -> None:
    assert Game.new().short_fen() == "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"


@pytest.mark.parametrize(
    "fen",
    [
        "",  # empty
        "8/8/8/8/8/8/8/8",  # no side to move
        "8/8/8/8/8/8/8 w",  # not enough ranks
        "8/8/8/8/8/8/8/8 x",  # bad side to move
        "8/8/8/8/8/8/8/8 w A",  # bad castling
        "8/8/8/8/8/8/8/8 w KK",  # repeated castling letter
        "9/8/8/8/8/8/8/8 w",  # too many squares
        "0/8/8/8/8/8/8/8 w",  # zero run length
        "7/8/8/8/8/8/8/8 w",  # rank short by one
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNX w KQkq",  # bad piece
        "8/8/8/8/8/8/8/K5k\u00b9 w -",  # superscript digit as run length
        "\u0663/8/8/8/8/8/8/8 w",  # non-ASCII decimal digit
    ],
)
def test_invalid_fen_raises(fen: str) -> None:
    with pytest.raises(FenError):
        Game.from_fen(fen)


def test_fen_error_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        parse_fen("not a fen")
