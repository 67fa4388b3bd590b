"""Per-connection presence state machine.

Every transport connection walks ``UNREGISTERED -> REGISTERED -> CLOSED``:

- connect: a handle is created, no identity yet, receives no targeted events
- identify: the client claims a user id; the handle is filed in the registry.
  Claiming again with the same id is a no-op, with a different id the old
  registration is cleared before the new one is made.
- disconnect (close, error, heartbeat timeout): the handle is removed from the
  registry whatever state it was in. Closed handles never come back; a
  reconnect is a new connection id.

The identity claim is trusted here; authentication happens before the
transport is opened.
"""

import enum
import logging
import threading
from typing import Any, Dict, Optional
from uuid import UUID

from .exceptions import ConnectionClosedError, InvalidIdentityClaim
from .registry import ConnectionRegistry

logger = logging.getLogger(__name__)


class ConnectionState(str, enum.Enum):
    UNREGISTERED = "unregistered"
    REGISTERED = "registered"
    CLOSED = "closed"


def normalize_identity(claim: Any) -> str:
    """Turn a client identity claim into a registry key.

    Accepts a string or UUID, or a mapping carrying ``userId``/``user_id``.
    """
    if isinstance(claim, dict):
        claim = claim.get("userId", claim.get("user_id"))
    if isinstance(claim, UUID):
        return str(claim)
    if not isinstance(claim, str):
        raise InvalidIdentityClaim("identity claim must be a user id string")
    user = claim.strip()
    if not user:
        raise InvalidIdentityClaim("identity claim is empty")
    return user


class ConnectionHandle:
    """One live transport session."""

    def __init__(self, connection_id: str):
        self.id = connection_id
        self._user: Optional[str] = None
        self._state = ConnectionState.UNREGISTERED
        self._lock = threading.Lock()

    @property
    def user(self) -> Optional[str]:
        return self._user

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_registered(self) -> bool:
        return self._state is ConnectionState.REGISTERED

    def _bind(self, registry: ConnectionRegistry, user: str) -> bool:
        """Register under ``user``. Returns True if the binding changed."""
        with self._lock:
            if self._state is ConnectionState.CLOSED:
                raise ConnectionClosedError(self.id)
            if self._user == user:
                # resend of the same claim; make sure the registry agrees
                registry.register(user, self.id)
                return False
            if self._user is not None:
                registry.deregister(self.id)
            registry.register(user, self.id)
            self._user = user
            self._state = ConnectionState.REGISTERED
            return True

    def _close(self, registry: ConnectionRegistry) -> bool:
        """Move to CLOSED. Returns False if it already was."""
        with self._lock:
            if self._state is ConnectionState.CLOSED:
                return False
            registry.deregister(self.id)
            self._state = ConnectionState.CLOSED
            return True

    def __repr__(self) -> str:
        return f"<ConnectionHandle(id={self.id!r}, user={self._user!r}, state={self._state.value})>"


class PresenceProtocol:
    """Drives connection handles and keeps the registry in step with them.

    This is the only writer of the registry.
    """

    def __init__(self, registry: ConnectionRegistry):
        self.registry = registry
        self._handles: Dict[str, ConnectionHandle] = {}
        self._lock = threading.Lock()

    def connect(self, connection_id: str) -> ConnectionHandle:
        """Open a handle for a new transport connection."""
        with self._lock:
            handle = self._handles.get(connection_id)
            if handle is None:
                handle = ConnectionHandle(connection_id)
                self._handles[connection_id] = handle
        logger.debug("Connection opened", extra={"connection_id": connection_id})
        return handle

    def identify(self, connection_id: str, claim: Any) -> ConnectionHandle:
        """Apply an identity claim sent on ``connection_id``.

        Raises InvalidIdentityClaim for malformed claims (state unchanged)
        and ConnectionClosedError for unknown or closed connections.
        """
        user = normalize_identity(claim)
        handle = self.get(connection_id)
        if handle is None:
            raise ConnectionClosedError(connection_id)

        previous = handle.user
        if handle._bind(self.registry, user):
            if previous is None:
                logger.info(
                    "Connection registered",
                    extra={"connection_id": connection_id, "user_id": user},
                )
            else:
                logger.info(
                    "Connection re-registered under a new identity",
                    extra={"connection_id": connection_id, "user_id": user, "previous_user_id": previous},
                )
        return handle

    def disconnect(self, connection_id: str) -> Optional[ConnectionHandle]:
        """Close a connection. Safe to call repeatedly or for unknown ids."""
        with self._lock:
            handle = self._handles.pop(connection_id, None)
        if handle is None:
            return None
        if handle._close(self.registry):
            logger.info(
                "Connection closed",
                extra={"connection_id": connection_id, "user_id": handle.user},
            )
        return handle

    def get(self, connection_id: str) -> Optional[ConnectionHandle]:
        with self._lock:
            return self._handles.get(connection_id)

    def close_all(self) -> int:
        """Close every open handle (shutdown). Returns how many were open."""
        with self._lock:
            handles = list(self._handles.values())
            self._handles.clear()
        for handle in handles:
            handle._close(self.registry)
        return len(handles)

    def __len__(self) -> int:
        with self._lock:
            return len(self._handles)
