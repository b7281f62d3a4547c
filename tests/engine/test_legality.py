from __future__ import annotations

import pytest

from chessrules.engine.errors import InvalidArgumentError
from chessrules.engine.game import Game
from chessrules.engine.move import Move, parse_square, parse_uci
from chessrules.engine.pieces import PieceKind, Side
from chessrules.engine.rules import is_king_attacked, would_leave_mover_in_check


def moves_set(game: Game) -> set[str]:
    return {m.to_uci() for m in game.legal_moves()}


def test_startpos_has_twenty_legal_moves() -> None:
    game = Game.new()
    ms = moves_set(game)
    assert len(ms) == 20
    assert {"e2e4", "e2e3", "g1f3", "b1c3"}.issubset(ms)


@pytest.mark.parametrize(
    "uci,expected",
    [
        ("e2e4", True),
        ("g1f3", True),  # knight jumps the pawn rank
        ("e2e5", False),  # pawn cannot step three
        ("c1e3", False),  # bishop blocked by d2
        ("a1a2", False),  # own piece on destination
        ("e3e4", False),  # empty source
        ("e1e1", False),  # source equals destination
        ("d1d3", False),  # queen blocked
    ],
)
def test_startpos_move_legality(uci: str, expected: bool) -> None:
    game = Game.new()
    assert game.is_valid_move(game.move(uci)) is expected


def test_wrong_side_to_move_is_illegal() -> None:
    game = Game.new()
    assert not game.is_valid_move(parse_uci("e7e5", Side.BLACK))
    # A white move labelled as Black's is illegal too
    assert not game.is_valid_move(parse_uci("e2e4", Side.BLACK))


def test_pawn_push_blocked_and_capture_requires_target() -> None:
    game = Game.from_fen("4k3/8/8/8/4p3/4P3/8/4K3 w - -")
    ms = moves_set(game)
    assert "e3e4" not in ms
    assert "e3d4" not in ms
    game = Game.from_fen("4k3/8/8/8/8/4p3/4P3/4K3 w - -")
    assert "e2e4" not in moves_set(game)  # double step through a piece


def test_pinned_piece_cannot_leave_line() -> None:
    game = Game.from_fen("4k3/4r3/8/8/8/8/4B3/4K3 w - -")
    ms = moves_set(game)
    assert "e2d3" not in ms
    assert "e2f1" not in ms
    assert "e1d1" in ms


def test_king_cannot_step_into_attack() -> None:
    game = Game.from_fen("3rk3/8/8/8/8/8/8/4K3 w - -")
    ms = moves_set(game)
    assert "e1d1" not in ms
    assert "e1d2" not in ms
    assert {"e1e2", "e1f1", "e1f2"}.issubset(ms)


def test_check_must_be_answered() -> None:
    # Black rook e8 checks e1 and the knight on b1 cannot reach the e-file
    game = Game.from_fen("k3r3/8/8/8/8/8/8/1N2K3 w - -")
    ms = moves_set(game)
    assert all(m.startswith("e1") for m in ms)
    assert "e1e2" not in ms


def test_would_leave_mover_in_check_uses_scratch_board() -> None:
    game = Game.from_fen("4k3/4r3/8/8/8/8/4B3/4K3 w - -")
    before = game.copy()
    move = game.move("e2d3")
    assert would_leave_mover_in_check(move, game)
    assert game == before


def test_promotion_choice_on_ordinary_move_is_illegal() -> None:
    game = Game.new()
    move = Move(parse_square("e2"), parse_square("e4"), Side.WHITE, PieceKind.QUEEN)
    assert not game.is_valid_move(move)


def test_invalid_promotion_kind_rejected_at_construction() -> None:
    with pytest.raises(InvalidArgumentError):
        Move(parse_square("e7"), parse_square("e8"), Side.WHITE, PieceKind.KING)


@pytest.mark.parametrize("promotion", ["q", 5, PieceKind.PAWN])
def test_non_kind_promotion_raises_invalid_argument(promotion: object) -> None:
    with pytest.raises(InvalidArgumentError, match="cannot promote"):
        Move(parse_square("e7"), parse_square("e8"), Side.WHITE, promotion)  # type: ignore[arg-type]


def test_none_move_raises() -> None:
    with pytest.raises(InvalidArgumentError):
        Game.new().is_valid_move(None)  # type: ignore[arg-type]


def test_validity_query_does_not_mutate_or_reclassify() -> None:
    game = Game.from_fen("6k1/5ppp/8/8/8/8/8/K5Q1 w - -")
    before = game.copy()
    for m in game.legal_moves():
        game.is_valid_move(m)
    assert game == before
    assert game.status == before.status


@pytest.mark.parametrize(
    "fen",
    [
        "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq",
        "8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - -",
        "r1bqkbnr/pppp1ppp/2n5/4p3/2B1P3/5Q2/PPPP1PPP/RNB1K1NR w KQkq",
    ],
)
def test_no_legal_move_leaves_own_king_attacked(fen: str) -> None:
    game = Game.from_fen(fen)
    mover = game.side_to_move
    for m in game.legal_moves():
        child = game.copy()
        assert child.make_move(m)
        assert not is_king_attacked(child.board, mover), m.to_uci()
