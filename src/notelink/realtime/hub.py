"""Process-wide wiring of the realtime layer."""

import logging
from typing import Optional

from ..config import Settings, get_settings
from ..core.redis_client import get_redis_client
from .backplane import Backplane, RedisBackplane
from .dispatcher import EventDispatcher
from .protocol import PresenceProtocol
from .registry import ConnectionRegistry
from .transport import Transport

logger = logging.getLogger(__name__)


class RealtimeHub:
    """Owns the registry, the presence protocol and the dispatcher.

    Registry state lives as long as the process; after a restart every user
    is offline until their clients reconnect and identify again.
    """

    def __init__(self, settings: Settings, backplane: Optional[Backplane] = None):
        self.settings = settings
        self.registry = ConnectionRegistry(stripes=settings.realtime_registry_stripes)
        self.protocol = PresenceProtocol(self.registry)
        self.dispatcher = EventDispatcher(self.registry, node_id=settings.node_id)
        self._backplane = backplane

    @property
    def backplane(self) -> Optional[Backplane]:
        return self.dispatcher.backplane

    def bind_transport(self, transport: Transport) -> None:
        self.dispatcher.bind_transport(transport)

    async def start(self) -> None:
        backplane = self._backplane
        if backplane is None and self.settings.backplane_enabled:
            backplane = RedisBackplane(
                get_redis_client(),
                channel=self.settings.backplane_channel,
                retry_seconds=self.settings.backplane_retry_seconds,
                publish_timeout=self.settings.backplane_publish_timeout,
            )
        if backplane is None:
            logger.info("Realtime hub started (single node)", extra={"node_id": self.settings.node_id})
            return

        try:
            await backplane.start(self.dispatcher.handle_remote)
        except Exception as e:
            logger.warning(f"Backplane unavailable, running local-only: {e}")
            return
        self.dispatcher.backplane = backplane
        logger.info("Realtime hub started with backplane", extra={"node_id": self.settings.node_id})

    async def stop(self) -> None:
        backplane = self.dispatcher.backplane
        self.dispatcher.backplane = None
        if backplane is not None:
            await backplane.stop()
        closed = self.protocol.close_all()
        self.registry.clear()
        logger.info("Realtime hub stopped", extra={"closed_connections": closed})

    def stats(self) -> dict:
        backplane = self.dispatcher.backplane
        return {
            "node_id": self.settings.node_id,
            "connections": self.registry.connection_count(),
            "online_users": len(self.registry),
            "backplane": None if backplane is None else ("up" if backplane.healthy else "degraded"),
        }


_hub: Optional[RealtimeHub] = None


def get_realtime_hub() -> RealtimeHub:
    """Get the realtime hub singleton."""
    global _hub
    if _hub is None:
        _hub = RealtimeHub(get_settings())
    return _hub


def get_event_dispatcher() -> EventDispatcher:
    """FastAPI dependency for services that emit events."""
    return get_realtime_hub().dispatcher
