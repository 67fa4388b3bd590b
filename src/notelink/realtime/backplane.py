"""Cross-node fan-out of dispatch calls.

When more than one process serves sockets, a user's connections may be split
across them. Every node publishes what it dispatches on a shared channel and
listens to the others; each node then delivers only to its own registry.

A backplane failure never fails the request that triggered a dispatch: local
delivery already happened, cross-node delivery is lost and logged.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, List, Optional

from pydantic import ValidationError

from ..core.redis_client import RedisClient
from .events import DispatchEvent
from .exceptions import BackplaneError

logger = logging.getLogger(__name__)

BackplaneHandler = Callable[[DispatchEvent], Awaitable[None]]


class Backplane(ABC):
    """Publish/subscribe relay between nodes."""

    def __init__(self) -> None:
        self._handler: Optional[BackplaneHandler] = None

    @property
    def healthy(self) -> bool:
        return self._handler is not None

    @abstractmethod
    async def start(self, handler: BackplaneHandler) -> None:
        """Begin forwarding events from other nodes to ``handler``."""

    @abstractmethod
    async def publish(self, event: DispatchEvent) -> None:
        """Send ``event`` to every node. Raises BackplaneError on failure."""

    @abstractmethod
    async def stop(self) -> None:
        """Stop listening and release resources."""

    async def _deliver(self, event: DispatchEvent) -> None:
        if self._handler is None:
            return
        try:
            await self._handler(event)
        except Exception:
            logger.exception(
                "Backplane handler failed",
                extra={"event_name": event.event, "target": event.target},
            )


class InMemoryBus:
    """Shared medium for InMemoryBackplane nodes in one process."""

    def __init__(self) -> None:
        self.nodes: List["InMemoryBackplane"] = []

    async def broadcast(self, event: DispatchEvent) -> None:
        for node in list(self.nodes):
            await node._deliver(event)


class InMemoryBackplane(Backplane):
    """Backplane for single-process setups and tests."""

    def __init__(self, bus: Optional[InMemoryBus] = None):
        super().__init__()
        self.bus = bus or InMemoryBus()

    async def start(self, handler: BackplaneHandler) -> None:
        self._handler = handler
        if self not in self.bus.nodes:
            self.bus.nodes.append(self)

    async def publish(self, event: DispatchEvent) -> None:
        if self._handler is None:
            raise BackplaneError("backplane is not started")
        await self.bus.broadcast(event)

    async def stop(self) -> None:
        if self in self.bus.nodes:
            self.bus.nodes.remove(self)
        self._handler = None


class RedisBackplane(Backplane):
    """Backplane over Redis pub/sub."""

    def __init__(
        self,
        client: RedisClient,
        channel: str,
        retry_seconds: float = 2.0,
        publish_timeout: float = 2.0,
    ):
        super().__init__()
        self.client = client
        self.channel = channel
        self.retry_seconds = retry_seconds
        self.publish_timeout = publish_timeout
        self._listener: Optional[asyncio.Task] = None
        self._subscribed = asyncio.Event()
        self._stopping = False

    @property
    def healthy(self) -> bool:
        return (
            self._handler is not None
            and self._subscribed.is_set()
            and self._listener is not None
            and not self._listener.done()
        )

    async def start(self, handler: BackplaneHandler) -> None:
        self._handler = handler
        self._stopping = False
        if self._listener is None or self._listener.done():
            self._listener = asyncio.create_task(self._listen(), name="notelink-backplane")
        logger.info("Backplane listener started", extra={"channel": self.channel})

    async def publish(self, event: DispatchEvent) -> None:
        redis = self.client.redis
        if redis is None:
            raise BackplaneError("redis is not connected")
        try:
            await asyncio.wait_for(
                redis.publish(self.channel, event.model_dump_json()), timeout=self.publish_timeout
            )
        except asyncio.TimeoutError as e:
            raise BackplaneError(
                f"publish to {self.channel} timed out after {self.publish_timeout}s"
            ) from e
        except Exception as e:
            raise BackplaneError(f"publish to {self.channel} failed: {e}") from e

    async def stop(self) -> None:
        self._stopping = True
        if self._listener is not None:
            self._listener.cancel()
            try:
                await self._listener
            except asyncio.CancelledError:
                pass
            self._listener = None
        self._subscribed.clear()
        self._handler = None
        logger.info("Backplane listener stopped", extra={"channel": self.channel})

    async def _listen(self) -> None:
        while not self._stopping:
            try:
                await self._listen_once()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.warning(
                    f"Backplane subscription lost: {e}. Retrying in {self.retry_seconds}s",
                    extra={"channel": self.channel},
                )
            if not self._stopping:
                await asyncio.sleep(self.retry_seconds)

    async def _listen_once(self) -> None:
        redis = self.client.redis
        if redis is None:
            await self.client.connect()
            redis = self.client.redis

        pubsub = redis.pubsub(ignore_subscribe_messages=True)
        try:
            await pubsub.subscribe(self.channel)
            self._subscribed.set()
            async for message in pubsub.listen():
                if message.get("type") != "message":
                    continue
                try:
                    event = DispatchEvent.model_validate_json(message["data"])
                except ValidationError:
                    logger.warning("Dropping malformed backplane message", extra={"channel": self.channel})
                    continue
                await self._deliver(event)
        finally:
            self._subscribed.clear()
            try:
                await pubsub.unsubscribe(self.channel)
                await pubsub.aclose()
            except Exception:
                logger.debug("Backplane pubsub cleanup failed", exc_info=True)
