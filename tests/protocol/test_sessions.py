from __future__ import annotations

from fastapi.testclient import TestClient

from minimax_chess.engine.board import INITIAL_DIAGRAM
from minimax_chess.protocol.http.app import create_app


def _client() -> TestClient:
    return TestClient(create_app())


def test_create_game_and_get_state() -> None:
    client = _client()
    r = client.post("/api/games")
    assert r.status_code == 200
    body = r.json()
    assert "game_id" in body and isinstance(body["game_id"], str) and body["game_id"]
    game_id = body["game_id"]
    assert body["board"] == list(INITIAL_DIAGRAM)
    assert body["current_player"] == "white"
    assert body["status"] == "playing"
    assert body["computer_color"] == "black"
    assert body["difficulty"] == "medium"
    assert body["castling_rights"] == {
        "white_kingside": True,
        "white_queenside": True,
        "black_kingside": True,
        "black_queenside": True,
    }

    # Fetch state
    r2 = client.get(f"/api/games/{game_id}/state")
    assert r2.status_code == 200
    state = r2.json()
    assert state["game_id"] == game_id
    assert len(state["legal_moves"]) == 20
    assert "e2e4" in state["legal_moves"]
    assert state["move_history"] == []
    assert state["last_move"] is None


def test_create_game_with_options() -> None:
    client = _client()
    r = client.post("/api/games", json={"computer_color": None, "difficulty": "hard"})
    assert r.status_code == 200
    body = r.json()
    assert body["computer_color"] is None
    assert body["difficulty"] == "hard"

    r_bad = client.post("/api/games", json={"difficulty": "grandmaster"})
    assert r_bad.status_code == 422
    assert r_bad.json()["error"]["code"] == "unprocessable_entity"


def test_get_state_unknown_id_404() -> None:
    client = _client()
    r = client.get("/api/games/does-not-exist/state")
    assert r.status_code == 404
    body = r.json()
    assert "error" in body
    assert body["error"]["code"] == "not_found"


def test_legal_moves_for_square() -> None:
    client = _client()
    game_id = client.post("/api/games").json()["game_id"]

    r = client.get(f"/api/games/{game_id}/legal-moves", params={"square": "e2"})
    assert r.status_code == 200
    assert r.json() == {"square": "e2", "destinations": ["e3", "e4"]}

    r_black = client.get(f"/api/games/{game_id}/legal-moves", params={"square": "e7"})
    assert r_black.json()["destinations"] == []

    r_bad = client.get(f"/api/games/{game_id}/legal-moves", params={"square": "z9"})
    assert r_bad.status_code == 400
    assert r_bad.json()["error"]["code"] == "bad_request"

    r_missing = client.get(f"/api/games/{game_id}/legal-moves")
    assert r_missing.status_code == 422


def test_delete_game() -> None:
    client = _client()
    game_id = client.post("/api/games").json()["game_id"]

    r = client.delete(f"/api/games/{game_id}")
    assert r.status_code == 200
    assert client.get(f"/api/games/{game_id}/state").status_code == 404
    assert client.delete(f"/api/games/{game_id}").status_code == 404


def test_search_endpoint_does_not_change_game() -> None:
    client = _client()
    game_id = client.post("/api/games").json()["game_id"]

    r_search = client.post(f"/api/games/{game_id}/search", json={"depth": 2})
    assert r_search.status_code == 200
    data = r_search.json()
    assert set(["best_move", "notation", "score", "nodes", "depth", "time_ms"]).issubset(data.keys())
    assert data["depth"] == 2
    assert data["best_move"] in client.get(f"/api/games/{game_id}/state").json()["legal_moves"]
    assert client.get(f"/api/games/{game_id}/state").json()["move_history"] == []

    r_deep = client.post(f"/api/games/{game_id}/search", json={"depth": 7})
    assert r_deep.status_code == 422
