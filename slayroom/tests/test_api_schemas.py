"""
Tests for API Pydantic schemas.

Validates that:
- Request/response models serialize correctly
- Error codes are properly structured
- The OpenAPI schema lists every endpoint
"""

import pytest
from pydantic import ValidationError

from ..api.schemas import (
    ActionInputRequest,
    CardInfo,
    ErrorCode,
    ErrorResponse,
    GameStateResponse,
    OutcomeResponse,
    PlayerInfo,
    QueueActionsRequest,
    TurnInfo,
    WaitingInfo,
)


class TestPydanticSchemas:
    """Tests for Pydantic schema validation."""

    def test_error_response_schema(self):
        response = ErrorResponse(
            error="Room r1 not found",
            error_code=ErrorCode.ROOM_NOT_FOUND,
            details={"room_id": "r1"},
        )
        data = response.model_dump(mode="json")
        assert data["error_code"] == "ROOM_NOT_FOUND"
        assert data["api_version"] == "v1"

    def test_all_error_codes_defined(self):
        codes = {code.value for code in ErrorCode}
        assert codes == {"ROOM_NOT_FOUND", "VALIDATION_ERROR", "ACTION_FAILED", "INTERNAL_ERROR"}

    def test_game_state_response_schema(self):
        response = GameStateResponse(
            room_id="r1",
            phase="playing",
            players=[
                PlayerInfo(player_id="a", name="Ada", join_time=1.0, hand_count=2,
                           hand=[CardInfo(id="c1", name="Card", type="Item")]),
            ],
            current_turn=TurnInfo(player_id="a", action_points=3),
            waiting_for_action=WaitingInfo(
                action_id="action-1", player_id="a", type="choice",
                prompt="Roll the dice", timeout_at=123,
            ),
        )
        data = response.model_dump()
        assert data["players"][0]["hand"][0]["id"] == "c1"
        assert data["current_turn"]["action_queue"] == []
        assert data["waiting_for_action"]["options"] == []

    def test_outcome_defaults(self):
        outcome = OutcomeResponse(success=True, message="ok")
        assert outcome.actions_processed == 0
        assert outcome.waiting_action_id is None

    def test_queue_request_validation(self):
        request = QueueActionsRequest(
            player_id="a",
            actions=[{"action": "drawCard", "parameters": [{"name": "target", "value": "cache"}]}],
        )
        assert request.actions[0].parameters[0].type == "ANY"

        with pytest.raises(ValidationError):
            QueueActionsRequest(player_id="a")

    def test_input_required(self):
        with pytest.raises(ValidationError):
            ActionInputRequest(player_id="a")


class TestOpenAPISchema:
    """Tests for OpenAPI schema generation."""

    @pytest.fixture
    def schema(self):
        from fastapi.openapi.utils import get_openapi
        from ..api.app import app

        return get_openapi(title=app.title, version=app.version, routes=app.routes)

    def test_openapi_schema_generates(self, schema):
        assert "paths" in schema
        assert "schemas" in schema["components"]

    def test_response_models_in_schema(self, schema):
        schemas = schema["components"]["schemas"]
        for name in ["RoomResponse", "GameStateResponse", "OutcomeResponse", "StatusResponse", "ErrorResponse"]:
            assert name in schemas, f"Missing schema: {name}"

    def test_endpoints_present(self, schema):
        paths = schema["paths"]
        assert "post" in paths["/api/v1/rooms"]
        assert "get" in paths["/api/v1/rooms/{room_id}/state"]
        assert "post" in paths["/api/v1/rooms/{room_id}/play-card"]
        assert "post" in paths["/api/v1/rooms/{room_id}/actions/{action_id}/input"]
        assert "delete" in paths["/api/v1/rooms/{room_id}/actions"]
        assert "400" in paths["/api/v1/rooms/{room_id}/play-card"]["post"]["responses"]
