from __future__ import annotations

from typing import Optional

from fastapi.testclient import TestClient

from chessrules.protocol.http.app import create_app


def _new_game(client: TestClient, fen: Optional[str] = None) -> str:
    r = client.post("/api/games", json={"fen": fen} if fen else None)
    assert r.status_code == 200
    return r.json()["game_id"]


def test_move_updates_state() -> None:
    client = TestClient(create_app())
    gid = _new_game(client)

    r = client.post(f"/api/games/{gid}/move", json={"from": "e2", "to": "e4"})
    assert r.status_code == 200
    state = r.json()
    assert state["fen"] == "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 1 1"
    assert state["side_to_move"] == "b"
    assert state["last_move"] == "e2e4"
    assert state["move_history"] == ["e2e4"]


def test_illegal_move_is_rejected_without_change() -> None:
    client = TestClient(create_app())
    gid = _new_game(client)
    before = client.get(f"/api/games/{gid}/state").json()

    r = client.post(f"/api/games/{gid}/move", json={"from": "e2", "to": "e5"})
    assert r.status_code == 400
    err = r.json()["error"]
    assert err["code"] == "bad_request"
    assert err["message"] == "illegal move"

    assert client.get(f"/api/games/{gid}/state").json() == before


def test_move_from_empty_square_is_conflict() -> None:
    client = TestClient(create_app())
    gid = _new_game(client)

    r = client.post(f"/api/games/{gid}/move", json={"from": "e4", "to": "e5"})
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "conflict"


def test_promotion_requires_choice() -> None:
    client = TestClient(create_app())
    gid = _new_game(client, "k7/4P3/8/8/8/8/8/4K3 w - -")

    r = client.post(f"/api/games/{gid}/move", json={"from": "e7", "to": "e8"})
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "bad_request"

    r_bad = client.post(f"/api/games/{gid}/move", json={"from": "e7", "to": "e8", "promotion": "k"})
    assert r_bad.status_code == 400

    r_ok = client.post(f"/api/games/{gid}/move", json={"from": "e7", "to": "e8", "promotion": "q"})
    assert r_ok.status_code == 200
    state = r_ok.json()
    assert state["fen"].startswith("k3Q3/")
    assert state["status"] == {"kind": "check", "side": "b"}
    assert state["in_check"] is True


def test_bad_square_is_bad_request() -> None:
    client = TestClient(create_app())
    gid = _new_game(client)
    r = client.post(f"/api/games/{gid}/move", json={"from": "z9", "to": "e4"})
    assert r.status_code == 400


def test_validate_endpoint_does_not_play() -> None:
    client = TestClient(create_app())
    gid = _new_game(client)

    ok = client.post(f"/api/games/{gid}/validate", json={"from": "g1", "to": "f3"})
    assert ok.status_code == 200
    assert ok.json() == {"valid": True}

    bad = client.post(f"/api/games/{gid}/validate", json={"from": "g1", "to": "g3"})
    assert bad.json() == {"valid": False}

    assert client.get(f"/api/games/{gid}/history").json() == {"moves": []}


def test_piece_endpoint() -> None:
    client = TestClient(create_app())
    gid = _new_game(client)

    assert client.get(f"/api/games/{gid}/pieces/e1").json() == {"square": "e1", "piece": "K"}
    assert client.get(f"/api/games/{gid}/pieces/d8").json() == {"square": "d8", "piece": "q"}
    assert client.get(f"/api/games/{gid}/pieces/e4").json() == {"square": "e4", "piece": None}
    assert client.get(f"/api/games/{gid}/pieces/i9").status_code == 400


def test_fools_mate_over_http() -> None:
    client = TestClient(create_app())
    gid = _new_game(client)

    for src, dst in (("f2", "f3"), ("e7", "e5"), ("g2", "g4"), ("d8", "h4")):
        r = client.post(f"/api/games/{gid}/move", json={"from": src, "to": dst})
        assert r.status_code == 200, r.json()

    state = r.json()
    assert state["status"] == {"kind": "checkmate", "side": "b"}
    assert state["legal_moves"] == []
    assert client.get(f"/api/games/{gid}/history").json() == {
        "moves": ["f2f3", "e7e5", "g2g4", "d8h4"]
    }


def test_perft_endpoint() -> None:
    client = TestClient(create_app())

    r = client.post("/api/perft", json={"depth": 2})
    assert r.status_code == 200
    assert r.json() == {"nodes": 400}

    r_deep = client.post("/api/perft", json={"depth": 9})
    assert r_deep.status_code == 422

    r_fen = client.post("/api/perft", json={"fen": "8/8/8/8/8/8/8/K6k w -", "depth": 1})
    assert r_fen.json() == {"nodes": 3}
