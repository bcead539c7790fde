"""
Tests for the HTTP API.

Tests:
- Game creation and state queries
- Actions and rejections over HTTP
- Export / import
- Error responses
"""

import pytest
from fastapi.testclient import TestClient

from ..api.app import create_app
from ..engine_core.rules import RuleVariant
from ..session import SessionManager


@pytest.fixture
def client():
    return TestClient(create_app(SessionManager(rules=RuleVariant())))


@pytest.fixture
def game(client):
    response = client.post("/api/v1/games", json={"num_players": 3, "seed": 1234})
    assert response.status_code == 200
    return response.json()


class TestGames:
    """Tests for game/session endpoints."""

    def test_health(self, client):
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_create_game(self, game):
        assert game["phase"] == "attack"
        assert len(game["players"]) == 3
        assert all(p["count"] == 8 for p in game["players"])
        assert game["deck_count"] == 12
        assert game["defender"] == (game["attacker"] + 1) % 3

    def test_invalid_player_count(self, client):
        response = client.post("/api/v1/games", json={"num_players": 5})
        assert response.status_code == 422

    def test_get_and_list(self, client, game):
        session_id = game["session_id"]
        assert client.get(f"/api/v1/games/{session_id}").json() == game

        listing = client.get("/api/v1/games").json()
        assert session_id in listing["sessions"]

    def test_unknown_session(self, client):
        response = client.get("/api/v1/games/nope")
        assert response.status_code == 404
        assert response.json()["error_code"] == "SESSION_NOT_FOUND"

    def test_end_game(self, client, game):
        session_id = game["session_id"]
        response = client.delete(f"/api/v1/games/{session_id}")
        assert response.json()["success"] is True
        assert client.get(f"/api/v1/games/{session_id}").status_code == 404

    def test_redeal(self, client, game):
        session_id = game["session_id"]
        response = client.post(f"/api/v1/games/{session_id}/new", json={"num_players": 2})
        assert response.status_code == 200
        assert len(response.json()["players"]) == 2

    def test_redeal_with_side_attacks(self, client, game):
        session_id = game["session_id"]
        state = client.post(
            f"/api/v1/games/{session_id}/new",
            json={"num_players": 3, "seed": 1234, "allow_side_attacks": True},
        ).json()
        attacker = state["attacker"]
        card = state["players"][attacker]["hand"][0]
        client.post(
            f"/api/v1/games/{session_id}/attack",
            json={"player": attacker, "card": card},
        )

        bystander = 3 - attacker - state["defender"]
        response = client.post(
            f"/api/v1/games/{session_id}/add-attack",
            json={"player": bystander, "card": state["players"][bystander]["hand"][0]},
        )
        # Any rejection is about the card, not the player
        assert response.json().get("error_code") != "WrongActor"


class TestActions:
    """Tests for action endpoints."""

    def test_attack(self, client, game):
        attacker = game["attacker"]
        card = game["players"][attacker]["hand"][0]
        response = client.post(
            f"/api/v1/games/{game['session_id']}/attack",
            json={"player": attacker, "card": card},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["events"] == [f"Player {attacker + 1} attacks {card}"]
        assert body["state"]["phase"] == "defend"
        assert body["state"]["table"][0]["attack"] == card

    def test_wrong_actor_is_conflict(self, client, game):
        defender = game["defender"]
        card = game["players"][defender]["hand"][0]
        response = client.post(
            f"/api/v1/games/{game['session_id']}/attack",
            json={"player": defender, "card": card},
        )
        assert response.status_code == 409
        assert response.json()["error_code"] == "WrongActor"

    def test_bad_card_key(self, client, game):
        response = client.post(
            f"/api/v1/games/{game['session_id']}/attack",
            json={"player": game["attacker"], "card": "5♣"},
        )
        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_attack_then_take(self, client, game):
        session_id = game["session_id"]
        attacker = game["attacker"]
        card = game["players"][attacker]["hand"][0]
        client.post(f"/api/v1/games/{session_id}/click", json={"player": attacker, "card": card})

        response = client.post(
            f"/api/v1/games/{session_id}/take", json={"player": game["defender"]}
        )
        assert response.status_code == 200
        state = response.json()["state"]
        assert state["phase"] == "attack"
        assert card in state["players"][game["defender"]]["hand"]

    def test_take_in_attack_phase(self, client, game):
        response = client.post(
            f"/api/v1/games/{game['session_id']}/take", json={"player": game["defender"]}
        )
        assert response.status_code == 409
        assert response.json()["error_code"] == "WrongPhase"


class TestSnapshots:
    """Tests for export/import endpoints."""

    def test_export_then_import(self, client, game):
        session_id = game["session_id"]
        snapshot = client.get(f"/api/v1/games/{session_id}/export").json()["snapshot"]

        other = client.post("/api/v1/games", json={"num_players": 2, "seed": 9}).json()
        response = client.post(
            f"/api/v1/games/{other['session_id']}/import", json={"snapshot": snapshot}
        )
        assert response.status_code == 200
        state = response.json()["state"]
        assert len(state["players"]) == 3
        assert state["players"] == game["players"]

    def test_malformed_import(self, client, game):
        response = client.post(
            f"/api/v1/games/{game['session_id']}/import", json={"snapshot": "{}"}
        )
        assert response.status_code == 400
        assert response.json()["error_code"] == "MalformedImport"
