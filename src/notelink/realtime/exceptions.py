"""Errors raised by the realtime layer."""


class RealtimeError(Exception):
    """Base class for presence, delivery and backplane failures."""


class InvalidIdentityClaim(RealtimeError, ValueError):
    """Identity claim was missing, empty or not a usable user id."""


class ConnectionClosedError(RealtimeError):
    """Operation on a connection that is closed or was never opened."""

    def __init__(self, connection_id: str):
        super().__init__(f"connection {connection_id!r} is closed")
        self.connection_id = connection_id


class DeliveryError(RealtimeError):
    """A single connection could not be sent an event."""

    def __init__(self, connection_id: str, event: str, reason: str = ""):
        message = f"delivery of {event!r} to {connection_id!r} failed"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.connection_id = connection_id
        self.event = event


class BackplaneError(RealtimeError):
    """Publishing to or listening on the cross-node backplane failed."""


class MessagePersistenceError(RealtimeError):
    """A chat message could not be stored; it was not delivered either."""
