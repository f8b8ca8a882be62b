"""
Tests for API layer.

Tests:
- Room lifecycle via HTTP
- Playing and queueing actions
- Answering prompts
- Error handling and status codes
"""

import pytest
from fastapi.testclient import TestClient

from ..api.app import create_app
from ..api.schemas import CreateRoomRequest, JoinRoomRequest, StartGameRequest
from ..api.service import APIService

API = "/api/v1"


@pytest.fixture
def service():
    """Create a fresh API service."""
    return APIService()


@pytest.fixture
def client(service):
    return TestClient(create_app(service))


@pytest.fixture
def started(client):
    """Room r1 with players a and b, game started, a to play."""
    client.post(f"{API}/rooms", json={"name": "test", "room_id": "r1"})
    client.post(f"{API}/rooms/r1/players", json={"name": "Ada", "player_id": "a"})
    client.post(f"{API}/rooms/r1/players", json={"name": "Grace", "player_id": "b"})
    response = client.post(f"{API}/rooms/r1/start", json={"random_seed": 3})
    assert response.status_code == 200
    return "r1"


class TestAPIService:
    """Tests for APIService without HTTP."""

    def test_lifecycle(self, service):
        room = service.create_room(CreateRoomRequest(name="Friday"))
        service.join_room(room.room_id, JoinRoomRequest(name="Ada", player_id="a"))
        service.join_room(room.room_id, JoinRoomRequest(name="Grace", player_id="b"))

        outcome = service.start_game(room.room_id, StartGameRequest(random_seed=1))

        assert outcome.success
        assert outcome.data["first_player_id"] == "a"
        assert service.get_room(room.room_id).status.value == "playing"

    def test_start_failure_keeps_room_waiting(self, service):
        room = service.create_room(CreateRoomRequest())
        service.join_room(room.room_id, JoinRoomRequest(name="Ada"))
        outcome = service.start_game(room.room_id, StartGameRequest())
        assert not outcome.success
        assert service.get_room(room.room_id).status.value == "waiting"

    def test_hand_only_visible_to_viewer(self, service):
        room = service.create_room(CreateRoomRequest())
        service.join_room(room.room_id, JoinRoomRequest(name="Ada", player_id="a"))
        service.join_room(room.room_id, JoinRoomRequest(name="Grace", player_id="b"))
        service.start_game(room.room_id, StartGameRequest(random_seed=1))

        state = service.get_state(room.room_id, viewer_id="b")
        by_id = {p.player_id: p for p in state.players}
        assert by_id["a"].hand is None
        assert by_id["a"].hand_count == 5
        assert len(by_id["b"].hand) == 5


class TestRooms:

    def test_create_and_get(self, client):
        response = client.post(f"{API}/rooms", json={"name": "test", "room_id": "r1"})
        assert response.status_code == 200
        assert response.json()["status"] == "waiting"

        response = client.get(f"{API}/rooms/r1")
        assert response.json()["room_id"] == "r1"

    def test_get_unknown_room(self, client):
        response = client.get(f"{API}/rooms/nope")
        assert response.status_code == 404
        body = response.json()
        assert body["error_code"] == "ROOM_NOT_FOUND"
        assert body["error"] == "Room nope not found"

    def test_duplicate_room(self, client):
        client.post(f"{API}/rooms", json={"room_id": "r1"})
        response = client.post(f"{API}/rooms", json={"room_id": "r1"})
        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_join(self, client):
        client.post(f"{API}/rooms", json={"room_id": "r1"})
        response = client.post(f"{API}/rooms/r1/players", json={"name": "Ada"})
        assert response.status_code == 200
        assert response.json()["name"] == "Ada"

    def test_list_and_end(self, client):
        client.post(f"{API}/rooms", json={"room_id": "r1"})
        client.post(f"{API}/rooms", json={"room_id": "r2"})
        assert client.get(f"{API}/rooms").json()["count"] == 2

        response = client.delete(f"{API}/rooms/r1")
        assert response.json() == {"success": True, "room_id": "r1"}
        assert client.get(f"{API}/rooms").json()["rooms"] == ["r2"]

    def test_start_with_one_player(self, client):
        client.post(f"{API}/rooms", json={"room_id": "r1"})
        client.post(f"{API}/rooms/r1/players", json={"name": "Ada"})
        response = client.post(f"{API}/rooms/r1/start")
        assert response.status_code == 400
        assert response.json()["error_code"] == "ACTION_FAILED"
        assert response.json()["error"] == "At least 2 players are required"


class TestGame:

    def test_state_after_start(self, client, started):
        response = client.get(f"{API}/rooms/{started}/state", params={"viewer_id": "a"})
        body = response.json()
        assert body["phase"] == "playing"
        assert body["current_turn"]["player_id"] == "a"
        assert body["current_turn"]["action_points"] == 3
        assert body["current_turn"]["modifiers"] == []
        assert len(body["monsters"]) == 3
        players = {p["player_id"]: p for p in body["players"]}
        assert len(players["a"]["hand"]) == 5
        assert players["b"]["hand"] is None

    def test_play_before_start(self, client):
        client.post(f"{API}/rooms", json={"room_id": "r1"})
        response = client.post(f"{API}/rooms/r1/play-card", json={"player_id": "a", "card_id": "x"})
        assert response.status_code == 400
        assert response.json()["error"] == "Game in room r1 has not started"

    def test_play_unknown_card(self, client, started):
        response = client.post(
            f"{API}/rooms/{started}/play-card", json={"player_id": "a", "card_id": "nope"}
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Card nope not found in own-hand"

    def test_play_out_of_turn(self, client, started):
        response = client.post(
            f"{API}/rooms/{started}/play-card", json={"player_id": "b", "card_id": "nope"}
        )
        assert response.json()["error"] == "Not your turn"

    def test_end_turn(self, client, started):
        response = client.post(
            f"{API}/rooms/{started}/actions",
            json={"player_id": "a", "actions": [{"action": "endTurn"}]},
        )
        assert response.status_code == 200
        assert response.json()["next_player_id"] == "b"

        state = client.get(f"{API}/rooms/{started}/state").json()
        assert state["current_turn"]["player_id"] == "b"

    def test_bad_parameter(self, client, started):
        response = client.post(
            f"{API}/rooms/{started}/actions",
            json={
                "player_id": "a",
                "actions": [{
                    "action": "drawCard",
                    "parameters": [{"name": "target", "type": "LOCATION", "value": "the-moon"}],
                }],
            },
        )
        assert response.status_code == 400
        body = response.json()
        assert body["error_code"] == "VALIDATION_ERROR"
        assert body["details"]["parameter"] == "target"

    def test_unknown_action(self, client, started):
        response = client.post(
            f"{API}/rooms/{started}/actions",
            json={"player_id": "a", "actions": [{"action": "teleport"}]},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Unknown action: teleport"


class TestPrompts:

    def _ask_for_dice(self, client, room_id):
        response = client.post(
            f"{API}/rooms/{room_id}/actions",
            json={"player_id": "a", "actions": [{"action": "captureDice"}]},
        )
        assert response.status_code == 200
        return response.json()["waiting_action_id"]

    def test_waiting_visible_in_state_and_status(self, client, started):
        action_id = self._ask_for_dice(client, started)

        state = client.get(f"{API}/rooms/{started}/state").json()
        assert state["waiting_for_action"]["action_id"] == action_id
        assert state["waiting_for_action"]["type"] == "choice"

        status = client.get(f"{API}/rooms/{started}/status").json()
        assert status["status"]["key"] == "captureDice"
        assert status["time_remaining"] > 0
        assert not status["timed_out"]

    def test_answer(self, client, started):
        action_id = self._ask_for_dice(client, started)
        response = client.post(
            f"{API}/rooms/{started}/actions/{action_id}/input",
            json={"player_id": "a", "user_input": 7},
        )
        assert response.status_code == 200
        assert response.json()["success"]

        state = client.get(f"{API}/rooms/{started}/state").json()
        assert state["current_turn"]["current_roll"] == 7
        assert state["waiting_for_action"] is None
        assert state["status"] is None

    def test_answer_from_wrong_player(self, client, started):
        action_id = self._ask_for_dice(client, started)
        response = client.post(
            f"{API}/rooms/{started}/actions/{action_id}/input",
            json={"player_id": "b", "user_input": 7},
        )
        assert response.status_code == 400
        assert response.json()["error"] == f"Player b is not allowed to answer action {action_id}"

    def test_clear_queue(self, client, started):
        self._ask_for_dice(client, started)
        response = client.delete(f"{API}/rooms/{started}/actions", params={"player_id": "a"})
        assert response.status_code == 200

        state = client.get(f"{API}/rooms/{started}/state").json()
        assert state["current_turn"]["action_queue"] == []
        assert state["waiting_for_action"] is None


class TestSystem:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_root(self, client):
        body = client.get("/").json()
        assert body["service"] == "slayroom"
        assert body["env"] == "development"

    def test_list_actions(self, client):
        actions = client.get(f"{API}/actions").json()["actions"]
        assert "drawCard" in actions
        assert "captureDice" in actions
