"""Event names and the dispatch envelope."""

from datetime import date, datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

# outbound
CHAT_MESSAGE = "chat-message"
NOTE_SHARED = "note-shared"
NOTE_DELETED = "note-deleted"
NEW_NOTIFICATION = "new_notification"

# inbound
REGISTER = "register"
SEND_MESSAGE = "send-message"


class DispatchEvent(BaseModel):
    """One event aimed at every connection of one user.

    Never persisted; this is also the JSON body published on the backplane.
    """

    target: str = Field(min_length=1, description="UserIdentity of the recipient")
    event: str = Field(min_length=1, description="Event name emitted to the client")
    payload: Any = Field(default=None, description="JSON-safe event body")
    origin: str | None = Field(default=None, description="Node that produced the event")


def to_wire(value: Any) -> Any:
    """Convert a payload into plain JSON types for the transport."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, dict):
        return {str(k): to_wire(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_wire(v) for v in value]
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return to_wire(value.value)
    return value
