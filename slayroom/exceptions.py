"""
Engine exceptions.

Failures that a player can see are returned as ``ActionResult`` values, never
raised. The exceptions here are internal: parameter decoding raises them and
the queue processor converts them into failed results, and the room layer
raises ``RoomNotFoundError`` for the API to map onto HTTP 404.
"""

from __future__ import annotations


class SlayroomError(Exception):
    """Base class for all engine exceptions."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# ==================== Parameters ====================


class ParameterError(SlayroomError):
    """An action parameter could not be read."""

    def __init__(self, message: str, name: str | None = None, details: dict | None = None):
        details = dict(details or {})
        if name:
            details["parameter"] = name
        super().__init__(message, details)
        self.name = name


class MissingParameterError(ParameterError):
    """A required parameter is absent from the action."""

    def __init__(self, name: str):
        super().__init__(f"Missing required parameter: {name}", name=name)


class InvalidParameterError(ParameterError):
    """A parameter value does not decode to its declared type."""

    def __init__(self, name: str, value, expected: str):
        super().__init__(
            f"Invalid value for parameter '{name}': expected {expected}, got {value!r}",
            name=name,
            details={"value": value, "expected": expected},
        )
        self.value = value
        self.expected = expected


# ==================== Rooms ====================


class RoomNotFoundError(SlayroomError):
    """No room is registered under the given id."""

    def __init__(self, room_id: str):
        super().__init__(f"Room {room_id} not found", {"room_id": room_id})
        self.room_id = room_id
