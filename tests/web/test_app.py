"""Tests for the FastAPI web application."""

from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient

from dobutsu_shogi.web import app as web_app
from dobutsu_shogi.web.app import app


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def _new_game(client: TestClient, **payload: Any) -> dict[str, Any]:
    payload.setdefault("ai_type", "random")
    res = client.post("/api/new-game", json=payload)
    assert res.status_code == 200
    return res.json()


def _empty_squares(n: int) -> list[dict[str, Any] | None]:
    return [None] * n


class TestNewGame:
    def test_create_standard_game(self, client: TestClient) -> None:
        data = _new_game(client)
        assert "game_id" in data
        assert data["state"]["rows"] == 4
        assert data["state"]["cols"] == 3
        assert data["state"]["winner"] is None
        assert data["state"]["turn"] == 0
        assert len(data["state"]["legal_moves"]) == 4

    def test_create_goro_game(self, client: TestClient) -> None:
        data = _new_game(client, variant="goro")
        assert data["state"]["rows"] == 6
        assert data["state"]["cols"] == 5

    def test_invalid_variant(self, client: TestClient) -> None:
        res = client.post("/api/new-game", json={"variant": "chess"})
        assert res.status_code == 400

    def test_invalid_ai_type(self, client: TestClient) -> None:
        res = client.post("/api/new-game", json={"ai_type": "oracle"})
        assert res.status_code == 400

    def test_oldest_game_evicted(self, client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(web_app, "_MAX_GAMES", 2)
        ids = [_new_game(client)["game_id"] for _ in range(3)]
        assert client.get(f"/api/state/{ids[0]}").status_code == 404
        assert client.get(f"/api/state/{ids[2]}").status_code == 200

    def test_coin_flip_game_is_human_turn(self, client: TestClient) -> None:
        """コイントスで AI が先手でも、レスポンス時点では人間の手番。"""
        for _ in range(4):
            data = _new_game(client, coin_flip=True, ai_type="minimax", depth=1)
            assert data["state"]["turn"] == 0
            if data["first_player"] == 1:
                assert data["ai_move"] is not None


class TestMakeMove:
    def test_valid_move(self, client: TestClient) -> None:
        data = _new_game(client)
        move = data["state"]["legal_moves"][0]
        res = client.post("/api/move", json={"game_id": data["game_id"], "move": move})
        assert res.status_code == 200
        body = res.json()
        assert body["player_move"] == move
        assert body["ai_move"] is not None
        assert body["state"]["turn"] == 0

    def test_minimax_reply(self, client: TestClient) -> None:
        data = _new_game(client, ai_type="minimax", depth=2)
        move = data["state"]["legal_moves"][0]
        res = client.post("/api/move", json={"game_id": data["game_id"], "move": move})
        assert res.status_code == 200
        assert res.json()["ai_move"]["move"]["piece"]["owner"] == 1

    def test_illegal_move(self, client: TestClient) -> None:
        data = _new_game(client)
        lion_jump = {
            "from": {"row": 3, "col": 1},
            "to": {"row": 1, "col": 1},
            "piece": {"type": "LION", "owner": 0},
        }
        res = client.post("/api/move", json={"game_id": data["game_id"], "move": lion_jump})
        assert res.status_code == 400

    def test_unknown_piece(self, client: TestClient) -> None:
        data = _new_game(client)
        move = {"from": None, "to": {"row": 1, "col": 0}, "piece": {"type": "DRAGON", "owner": 0}}
        res = client.post("/api/move", json={"game_id": data["game_id"], "move": move})
        assert res.status_code == 400

    def test_game_not_found(self, client: TestClient) -> None:
        move = {"from": None, "to": {"row": 1, "col": 0}, "piece": {"type": "CHICK", "owner": 0}}
        res = client.post("/api/move", json={"game_id": "nonexistent", "move": move})
        assert res.status_code == 404


class TestQueries:
    def test_get_state(self, client: TestClient) -> None:
        data = _new_game(client)
        res = client.get(f"/api/state/{data['game_id']}")
        assert res.status_code == 200
        assert res.json()["rows"] == 4

    def test_get_nonexistent_game(self, client: TestClient) -> None:
        res = client.get("/api/state/nonexistent")
        assert res.status_code == 404

    def test_piece_destinations(self, client: TestClient) -> None:
        data = _new_game(client)
        res = client.get(f"/api/moves/{data['game_id']}", params={"row": 3, "col": 1})
        assert res.status_code == 200
        assert res.json()["targets"] == [{"row": 2, "col": 0}, {"row": 2, "col": 2}]
        assert res.json()["promotions"] == ["none", "none"]

    def test_drop_squares(self, client: TestClient) -> None:
        data = _new_game(client)
        res = client.get(f"/api/moves/{data['game_id']}")
        assert len(res.json()["targets"]) == 4

    def test_out_of_bounds(self, client: TestClient) -> None:
        data = _new_game(client)
        res = client.get(f"/api/moves/{data['game_id']}", params={"row": 9, "col": 0})
        assert res.status_code == 400


class TestBestMove:
    def test_initial_state(self, client: TestClient) -> None:
        state = _new_game(client)["state"]
        res = client.post("/api/best-move", json={"state": state, "depth": 2})
        assert res.status_code == 200
        assert res.json()["move"] in state["legal_moves"]

    def test_lion_capture(self, client: TestClient) -> None:
        squares = _empty_squares(12)
        squares[1] = {"type": "LION", "owner": 1}
        squares[4] = {"type": "GIRAFFE", "owner": 0}
        squares[10] = {"type": "LION", "owner": 0}
        res = client.post("/api/best-move", json={"state": {"squares": squares}, "depth": 1})
        assert res.json()["move"]["to"] == {"row": 0, "col": 1}

    def test_no_move_returns_null(self, client: TestClient) -> None:
        squares = _empty_squares(12)
        squares[1] = {"type": "LION", "owner": 1}
        res = client.post("/api/best-move", json={"state": {"squares": squares}, "depth": 1})
        assert res.status_code == 200
        assert res.json()["move"] is None

    def test_finished_game_rejected(self, client: TestClient) -> None:
        state = _new_game(client)["state"]
        state["winner"] = 0
        res = client.post("/api/best-move", json={"state": state})
        assert res.status_code == 400

    def test_malformed_state(self, client: TestClient) -> None:
        res = client.post("/api/best-move", json={"state": {"squares": _empty_squares(5)}})
        assert res.status_code == 400

    def test_reports_nodes(self, client: TestClient) -> None:
        state = _new_game(client)["state"]
        res = client.post("/api/best-move", json={"state": state, "depth": 1})
        assert res.json()["nodes"] == len(state["legal_moves"])

    def test_two_lions_rejected(self, client: TestClient) -> None:
        squares = _empty_squares(12)
        squares[1] = {"type": "LION", "owner": 1}
        squares[9] = {"type": "LION", "owner": 0}
        squares[11] = {"type": "LION", "owner": 0}
        res = client.post("/api/best-move", json={"state": {"squares": squares}})
        assert res.status_code == 400

    def test_try_pending_for_side_to_move_rejected(self, client: TestClient) -> None:
        state = _new_game(client)["state"]
        state["try_pending"] = state["turn"]
        res = client.post("/api/best-move", json={"state": state, "depth": 1})
        assert res.status_code == 400

    def test_try_pending_for_opponent_accepted(self, client: TestClient) -> None:
        state = _new_game(client)["state"]
        state["try_pending"] = 1
        res = client.post("/api/best-move", json={"state": state, "depth": 1})
        assert res.status_code == 200
