"""Socket.IO namespace driving the presence protocol."""

import logging
from typing import Any, Callable, Optional
from uuid import UUID

import socketio
from fastapi import HTTPException
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.schemas.chat import ChatSendRequest
from ..core.services.chat_service import ChatService
from .exceptions import ConnectionClosedError, InvalidIdentityClaim, MessagePersistenceError
from .hub import RealtimeHub

logger = logging.getLogger(__name__)


def _error(code: str, detail: Optional[str] = None) -> dict:
    ack = {"ok": False, "error": code}
    if detail:
        ack["detail"] = detail
    return ack


class PresenceNamespace(socketio.AsyncNamespace):
    """Connection lifecycle and inbound events.

    ``register`` and ``send-message`` reply through the Socket.IO ack.
    """

    def __init__(
        self,
        hub: RealtimeHub,
        session_factory: Callable[[], AsyncSession],
        namespace: str = "/",
    ):
        super().__init__(namespace)
        self.hub = hub
        self.session_factory = session_factory

    async def trigger_event(self, event: str, *args):
        # client event names use dashes
        return await super().trigger_event(event.replace("-", "_"), *args)

    async def on_connect(self, sid: str, environ: dict, auth: Any = None):
        self.hub.protocol.connect(sid)
        if isinstance(auth, dict) and auth.get("userId") is not None:
            try:
                self.hub.protocol.identify(sid, auth)
            except InvalidIdentityClaim as e:
                logger.info(f"Ignoring identity in connect auth: {e}", extra={"connection_id": sid})

    async def on_disconnect(self, sid: str, reason: Any = None):
        self.hub.protocol.disconnect(sid)

    async def on_register(self, sid: str, data: Any = None) -> dict:
        try:
            handle = self.hub.protocol.identify(sid, data)
        except InvalidIdentityClaim as e:
            return _error("invalid_identity", str(e))
        except ConnectionClosedError:
            return _error("connection_closed")
        return {"ok": True, "userId": handle.user}

    async def on_send_message(self, sid: str, data: Any = None) -> dict:
        handle = self.hub.protocol.get(sid)
        if handle is None or not handle.is_registered:
            return _error("unregistered")
        try:
            sender_id = UUID(handle.user)
        except ValueError:
            return _error("invalid_identity", "registered identity is not a user id")

        try:
            request = ChatSendRequest.model_validate(data)
        except ValidationError as e:
            return _error("invalid_payload", str(e.errors()[0].get("msg", "invalid")))

        async with self.session_factory() as session:
            chat_service = ChatService(session, self.hub.dispatcher)
            try:
                message = await chat_service.send_message(sender_id, request)
            except HTTPException as e:
                return _error("rejected", str(e.detail))
            except MessagePersistenceError:
                return _error("persistence_failed")
        return {"ok": True, "message": message.model_dump(mode="json")}
