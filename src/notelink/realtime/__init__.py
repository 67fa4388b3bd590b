"""
Presence and real-time delivery.

The Socket.IO namespace lives in ``notelink.realtime.namespace`` and is
imported by the app module only, since it depends on the service layer.
"""

from .dispatcher import EventDispatcher
from .events import CHAT_MESSAGE, NEW_NOTIFICATION, NOTE_DELETED, NOTE_SHARED, DispatchEvent
from .exceptions import (
    BackplaneError,
    ConnectionClosedError,
    DeliveryError,
    InvalidIdentityClaim,
    MessagePersistenceError,
    RealtimeError,
)
from .hub import RealtimeHub, get_event_dispatcher, get_realtime_hub
from .protocol import ConnectionHandle, ConnectionState, PresenceProtocol
from .registry import ConnectionRegistry

__all__ = [
    "ConnectionRegistry",
    "ConnectionHandle",
    "ConnectionState",
    "PresenceProtocol",
    "EventDispatcher",
    "DispatchEvent",
    "RealtimeHub",
    "get_realtime_hub",
    "get_event_dispatcher",
    "CHAT_MESSAGE",
    "NOTE_SHARED",
    "NOTE_DELETED",
    "NEW_NOTIFICATION",
    "RealtimeError",
    "InvalidIdentityClaim",
    "ConnectionClosedError",
    "DeliveryError",
    "BackplaneError",
    "MessagePersistenceError",
]
