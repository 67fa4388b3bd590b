"""Event dispatch to every live connection of a user."""

import asyncio
import logging
from typing import Any, Optional

from .backplane import Backplane
from .events import DispatchEvent, to_wire
from .exceptions import BackplaneError
from .registry import ConnectionRegistry
from .transport import Transport

logger = logging.getLogger(__name__)


class EventDispatcher:
    """Fire-and-forget delivery of named events to a user's connections.

    The registry is consulted once per dispatch and each connection found gets
    exactly one delivery attempt. A failing connection does not stop the
    others. Offline users get nothing: the event is dropped, not queued.
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        transport: Optional[Transport] = None,
        backplane: Optional[Backplane] = None,
        node_id: Optional[str] = None,
    ):
        self.registry = registry
        self.transport = transport
        self.backplane = backplane
        self.node_id = node_id

    def bind_transport(self, transport: Transport) -> None:
        self.transport = transport

    def is_online(self, user: Any) -> bool:
        """Local presence only; other nodes are not consulted."""
        return self.registry.is_online(str(user))

    async def dispatch(self, target: Any, event: str, payload: Any = None) -> int:
        """Deliver ``event`` to every connection of ``target``.

        Returns the number of local connections that accepted the event.
        With a backplane attached the event is also published for other
        nodes; publish failures are logged and ignored.
        """
        envelope = DispatchEvent(
            target=str(target), event=event, payload=to_wire(payload), origin=self.node_id
        )
        delivered = await self.deliver_local(envelope)

        if self.backplane is not None:
            try:
                await self.backplane.publish(envelope)
            except (BackplaneError, OSError) as e:
                logger.warning(
                    f"Backplane publish failed, delivered locally only: {e}",
                    extra={"event_name": event, "target": envelope.target},
                )
        return delivered

    async def deliver_local(self, envelope: DispatchEvent) -> int:
        """Deliver to connections in this node's registry only."""
        connections = self.registry.connections_for(envelope.target)
        if not connections:
            logger.debug(
                "Dispatch target offline, dropping event",
                extra={"event_name": envelope.event, "target": envelope.target},
            )
            return 0

        if self.transport is None:
            logger.warning(
                "No transport bound, dropping event",
                extra={"event_name": envelope.event, "target": envelope.target},
            )
            return 0

        connection_ids = sorted(connections)
        results = await asyncio.gather(
            *(self.transport.send(cid, envelope.event, envelope.payload) for cid in connection_ids),
            return_exceptions=True,
        )

        delivered = 0
        for connection_id, result in zip(connection_ids, results):
            if isinstance(result, BaseException):
                if isinstance(result, asyncio.CancelledError):
                    raise result
                logger.warning(
                    f"Delivery failed: {result}",
                    extra={
                        "event_name": envelope.event,
                        "target": envelope.target,
                        "connection_id": connection_id,
                    },
                )
            else:
                delivered += 1
        return delivered

    async def handle_remote(self, envelope: DispatchEvent) -> None:
        """Backplane callback: deliver events published by other nodes."""
        if envelope.origin is not None and envelope.origin == self.node_id:
            return
        await self.deliver_local(envelope)
