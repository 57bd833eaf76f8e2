from __future__ import annotations

from fastapi.testclient import TestClient

from chessrules.protocol.http.app import create_app


START_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"


def _client() -> TestClient:
    return TestClient(create_app())


def test_create_game_and_get_state() -> None:
    client = _client()
    r = client.post("/api/games")
    assert r.status_code == 200
    body = r.json()
    assert isinstance(body["game_id"], str) and body["game_id"]
    assert body["fen"] == START_FEN
    game_id = body["game_id"]

    r2 = client.get(f"/api/games/{game_id}/state")
    assert r2.status_code == 200
    state = r2.json()
    assert state["game_id"] == game_id
    assert state["status"] == "normal"
    assert state["side_to_move"] == "w"
    assert len(state["legal_moves"]) == 20
    assert state["pending_promotion"] is None
    assert (state["halfmove_clock"], state["fullmove_number"]) == (0, 1)


def test_create_game_from_fen() -> None:
    client = _client()
    fen = "7k/5Q2/6K1/8/8/8/8/8 b - - 0 1"
    r = client.post("/api/games", json={"fen": fen})
    assert r.status_code == 200
    game_id = r.json()["game_id"]
    state = client.get(f"/api/games/{game_id}/state").json()
    assert state["fen"] == fen
    assert state["stalemate"] is True
    assert state["legal_moves"] == []


def test_create_game_with_bad_fen_is_400() -> None:
    r = _client().post("/api/games", json={"fen": "not a fen"})
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "bad_request"


def test_get_state_unknown_id_404() -> None:
    client = _client()
    r = client.get("/api/games/does-not-exist/state")
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "not_found"


def test_set_position_validation_and_success() -> None:
    client = _client()
    game_id = client.post("/api/games").json()["game_id"]

    r_bad = client.post(f"/api/games/{game_id}/position", json={"fen": ""})
    assert r_bad.status_code == 400
    assert r_bad.json()["error"]["code"] == "bad_request"

    seed = "r3k2r/8/8/8/8/8/8/R3K2R_w_KQkq_-_0_1"
    r_ok = client.post(f"/api/games/{game_id}/position", json={"fen": seed})
    assert r_ok.status_code == 200
    assert r_ok.json()["fen"] == "r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1"
    assert "e1g1" in r_ok.json()["legal_moves"]


def test_delete_game() -> None:
    client = _client()
    game_id = client.post("/api/games").json()["game_id"]
    assert client.delete(f"/api/games/{game_id}").status_code == 200
    assert client.get(f"/api/games/{game_id}/state").status_code == 404
    assert client.delete(f"/api/games/{game_id}").status_code == 404


def test_perft_endpoint() -> None:
    client = _client()
    r = client.post("/api/perft", json={"fen": START_FEN, "depth": 2})
    assert r.status_code == 200
    assert r.json() == {"nodes": 400}

    too_deep = client.post("/api/perft", json={"fen": START_FEN, "depth": 9})
    assert too_deep.status_code == 422
