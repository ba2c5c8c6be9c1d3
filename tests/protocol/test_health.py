from __future__ import annotations

import logging

import pytest
from fastapi.testclient import TestClient

from minimax_chess.protocol.http.app import create_app
from minimax_chess.protocol.http.logging_middleware import game_id_from_path


def test_healthz_ok() -> None:
    client = TestClient(create_app())
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}
    assert "x-request-id" in r.headers
    assert int(r.headers["x-response-time-ms"]) >= 0


def test_request_id_is_propagated() -> None:
    client = TestClient(create_app())
    r = client.get("/healthz", headers={"x-request-id": "abc-123"})
    assert r.headers["x-request-id"] == "abc-123"


def test_game_id_from_path() -> None:
    assert game_id_from_path("/api/games/abc/state") == "abc"
    assert game_id_from_path("/api/games/abc") == "abc"
    assert game_id_from_path("/api/games") is None
    assert game_id_from_path("/healthz") is None


def test_client_errors_log_at_warning(caplog: pytest.LogCaptureFixture) -> None:
    client = TestClient(create_app())
    caplog.set_level(logging.INFO, logger="minimax_chess.protocol.http.logging_middleware")
    client.get("/api/games/missing/state", headers={"x-request-id": "rid-7"})

    records = [
        r for r in caplog.records
        if r.name == "minimax_chess.protocol.http.logging_middleware"
    ]
    assert records
    last = records[-1]
    assert last.levelno == logging.WARNING
    assert "404" in last.getMessage()
    assert "rid=rid-7" in last.getMessage()
    assert "game=missing" in last.getMessage()
