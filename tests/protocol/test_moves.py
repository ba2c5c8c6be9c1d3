from __future__ import annotations

from fastapi.testclient import TestClient

from minimax_chess.engine.board import Board, Color
from minimax_chess.engine.game import Game
from minimax_chess.engine.state import GameState
from minimax_chess.protocol.http.app import create_app


def _client() -> TestClient:
    return TestClient(create_app())


def test_move_updates_state() -> None:
    client = _client()
    game_id = client.post("/api/games").json()["game_id"]

    r = client.post(f"/api/games/{game_id}/move", json={"from": "e2", "to": "e4"})
    assert r.status_code == 200
    state = r.json()
    assert state["current_player"] == "black"
    assert state["last_move"] == "e4"
    assert state["move_history"] == ["e4"]
    assert state["en_passant_target"] == "e3"
    assert state["board"][4] == "....P..."


def test_illegal_and_malformed_moves() -> None:
    client = _client()
    game_id = client.post("/api/games").json()["game_id"]

    r_illegal = client.post(f"/api/games/{game_id}/move", json={"from": "e2", "to": "e5"})
    assert r_illegal.status_code == 400
    err = r_illegal.json()["error"]
    assert err["code"] == "bad_request"
    assert err["message"] == "illegal move"

    r_square = client.post(f"/api/games/{game_id}/move", json={"from": "e2", "to": "e9"})
    assert r_square.status_code == 400

    r_missing = client.post(f"/api/games/{game_id}/move", json={"from": "e2"})
    assert r_missing.status_code == 422
    body = r_missing.json()["error"]
    assert body["code"] == "unprocessable_entity"
    assert body["field_errors"]


def test_promotion_over_http() -> None:
    app = create_app()
    client = TestClient(app)
    board = Board.from_diagram(
        [
            "....k...",
            "P.......",
            "........",
            "........",
            "........",
            "........",
            "........",
            "....K...",
        ]
    )
    game_id = app.state.sessions.create(Game.from_state(GameState.from_board(board, Color.WHITE)))

    r_none = client.post(f"/api/games/{game_id}/promote", json={"piece": "queen"})
    assert r_none.status_code == 409

    r = client.post(f"/api/games/{game_id}/move", json={"from": "a7", "to": "a8"})
    assert r.status_code == 200
    state = r.json()
    assert state["pending_promotion"] == "a8"
    assert state["legal_moves"] == []

    r_blocked = client.post(f"/api/games/{game_id}/move", json={"from": "e8", "to": "d8"})
    assert r_blocked.status_code == 409
    assert r_blocked.json()["error"]["code"] == "conflict"

    r_king = client.post(f"/api/games/{game_id}/promote", json={"piece": "king"})
    assert r_king.status_code == 400
    r_bogus = client.post(f"/api/games/{game_id}/promote", json={"piece": "dragon"})
    assert r_bogus.status_code == 422

    r_promote = client.post(f"/api/games/{game_id}/promote", json={"piece": "queen"})
    assert r_promote.status_code == 200
    promoted = r_promote.json()
    assert promoted["board"][0] == "Q...k..."
    assert promoted["pending_promotion"] is None
    assert promoted["status"] == "check"
    assert promoted["in_check"] is True


def test_computer_move_flow() -> None:
    client = _client()
    game_id = client.post("/api/games", json={"difficulty": "easy"}).json()["game_id"]

    # White (the human) is to move
    r_early = client.post(f"/api/games/{game_id}/computer-move", json={"depth": 1})
    assert r_early.status_code == 409

    client.post(f"/api/games/{game_id}/move", json={"from": "e2", "to": "e4"})
    r = client.post(f"/api/games/{game_id}/computer-move", json={"depth": 1})
    assert r.status_code == 200
    data = r.json()
    assert data["depth"] == 1
    assert data["aborted"] is False
    assert isinstance(data["best_move"], str) and len(data["best_move"]) == 4
    assert data["state"]["current_player"] == "white"
    assert len(data["state"]["move_history"]) == 2
    assert data["state"]["move_history"][1] == data["notation"]

    r_bad = client.post(f"/api/games/{game_id}/computer-move", json={"depth": 0})
    assert r_bad.status_code == 422


def test_computer_move_uses_game_difficulty_by_default() -> None:
    client = _client()
    game_id = client.post("/api/games", json={"difficulty": "easy"}).json()["game_id"]
    client.post(f"/api/games/{game_id}/move", json={"from": "d2", "to": "d4"})

    r = client.post(f"/api/games/{game_id}/computer-move")
    assert r.status_code == 200
    assert r.json()["depth"] == 2


def test_human_cannot_move_for_the_computer() -> None:
    client = _client()
    game_id = client.post("/api/games").json()["game_id"]
    state = client.post(f"/api/games/{game_id}/move", json={"from": "e2", "to": "e4"}).json()
    # Black belongs to the engine now
    assert state["legal_moves"] == []

    r = client.post(f"/api/games/{game_id}/move", json={"from": "e7", "to": "e5"})
    assert r.status_code == 409
    err = r.json()["error"]
    assert err["code"] == "conflict"
    assert err["message"] == "not your turn"

    r_dests = client.get(f"/api/games/{game_id}/legal-moves", params={"square": "e7"})
    assert r_dests.json()["destinations"] == []
    assert client.get(f"/api/games/{game_id}/state").json()["move_history"] == ["e4"]
