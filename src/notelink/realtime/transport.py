"""Delivery to a single connection id."""

from abc import ABC, abstractmethod
from typing import Any

import socketio

from .exceptions import DeliveryError


class Transport(ABC):
    """Sends one event to one live connection."""

    @abstractmethod
    async def send(self, connection_id: str, event: str, payload: Any) -> None:
        """Emit ``event`` to ``connection_id``; raise if it cannot be sent."""


class SocketIOTransport(Transport):
    """Transport backed by a python-socketio server."""

    def __init__(self, server: socketio.AsyncServer, namespace: str = "/"):
        self.server = server
        self.namespace = namespace

    async def send(self, connection_id: str, event: str, payload: Any) -> None:
        if not self.server.manager.is_connected(connection_id, self.namespace):
            raise DeliveryError(connection_id, event, "session is gone")
        # to=<sid> targets exactly that session, never a user-wide room
        await self.server.emit(event, payload, to=connection_id, namespace=self.namespace)
