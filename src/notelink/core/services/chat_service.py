"""Direct messaging.

A message is stored before anyone sees it. Live delivery happens only after
the commit succeeded, so a message that reached a client always has an id
and a server timestamp and shows up in history afterwards.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import AsyncIterator, Dict, Hashable, List, Optional
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ...config import get_settings
from ...realtime import CHAT_MESSAGE, EventDispatcher, MessagePersistenceError
from ..models.base import utcnow
from ..models.notification import NotificationType, ReferenceType
from ..repositories.message_repository import MessageRepository
from ..repositories.user_repository import UserRepository
from ..schemas.chat import ChatHistoryResponse, ChatMessageResponse, ChatSendRequest, ChatUser
from .interfaces import IChatService
from .notification_service import NotificationService

logger = logging.getLogger(__name__)

TIMESTAMP_STEP = timedelta(microseconds=1)
NOTIFICATION_PREVIEW_LENGTH = 100


class ConversationSequencer:
    """One asyncio lock per key, held while a message is stored and sent.

    Entries exist only while someone holds or waits for the lock.
    """

    def __init__(self):
        self._locks: Dict[Hashable, List] = {}

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        entry = self._locks.get(key)
        if entry is None:
            entry = self._locks[key] = [asyncio.Lock(), 0]
        entry[1] += 1
        try:
            async with entry[0]:
                yield
        finally:
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


_sequencer = ConversationSequencer()


class ChatService(IChatService):
    """Chat service implementation."""

    def __init__(
        self,
        session: AsyncSession,
        dispatcher: Optional[EventDispatcher] = None,
        sequencer: Optional[ConversationSequencer] = None,
    ):
        self.session = session
        self.settings = get_settings()
        self.message_repo = MessageRepository(session)
        self.user_repo = UserRepository(session)
        self.dispatcher = dispatcher
        self.sequencer = sequencer or _sequencer
        self.notifications = NotificationService(session, dispatcher)

    async def send_message(self, sender_id: UUID, request: ChatSendRequest) -> ChatMessageResponse:
        """Persist a message, then push ``chat-message`` to both participants.

        Raises ``MessagePersistenceError`` when the message could not be
        stored; nothing is delivered in that case.
        """
        if request.recipient_id == sender_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot send a message to yourself"
            )
        if len(request.text) > self.settings.chat_message_max_length:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Message exceeds {self.settings.chat_message_max_length} characters",
            )
        recipient = await self._find_recipient(request.recipient_id)
        if not recipient or not recipient.is_active:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Recipient not found")

        async with self.sequencer.hold((sender_id, request.recipient_id)):
            message = await self._persist(sender_id, request.recipient_id, request.text)
            response = ChatMessageResponse.from_model(message)

            delivered = 0
            if self.dispatcher is not None:
                delivered = await self.dispatcher.dispatch(request.recipient_id, CHAT_MESSAGE, response)
                await self.dispatcher.dispatch(sender_id, CHAT_MESSAGE, response)

        logger.info(
            "Chat message sent",
            extra={
                "message_id": str(response.id),
                "sender_id": str(sender_id),
                "recipient_id": str(request.recipient_id),
                "delivered": delivered,
            },
        )

        if delivered == 0:
            await self._notify_offline(sender_id, request, response)
        return response

    async def _find_recipient(self, recipient_id: UUID):
        try:
            return await self.user_repo.get_by_id(recipient_id)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Recipient lookup failed: {e}", extra={"recipient_id": str(recipient_id)})
            raise MessagePersistenceError("message could not be stored") from e

    async def _notify_offline(
        self, sender_id: UUID, request: ChatSendRequest, response: ChatMessageResponse
    ) -> None:
        # the message is committed and delivered by now
        try:
            await self.notifications.notify(
                recipient_id=request.recipient_id,
                sender_id=sender_id,
                type=NotificationType.NEW_MESSAGE.value,
                reference_id=response.id,
                reference_type=ReferenceType.MESSAGE.value,
                content=request.text[:NOTIFICATION_PREVIEW_LENGTH],
            )
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.warning(
                f"Could not create offline notification: {e}",
                extra={"message_id": str(response.id), "recipient_id": str(request.recipient_id)},
            )

    async def _persist(self, sender_id: UUID, recipient_id: UUID, text: str):
        try:
            created_at = utcnow()
            latest = await self.message_repo.latest_timestamp(sender_id, recipient_id)
            if latest is not None and latest >= created_at:
                created_at = latest + TIMESTAMP_STEP
            return await self.message_repo.save(sender_id, recipient_id, text, created_at)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(
                f"Failed to store chat message: {e}",
                extra={"sender_id": str(sender_id), "recipient_id": str(recipient_id)},
            )
            raise MessagePersistenceError("message could not be stored") from e

    async def get_history(
        self,
        user_id: UUID,
        other_id: UUID,
        limit: Optional[int] = None,
        before: Optional[datetime] = None,
    ) -> ChatHistoryResponse:
        max_limit = self.settings.chat_history_limit
        limit = max_limit if limit is None else max(1, min(limit, max_limit))
        messages, has_more = await self.message_repo.get_conversation(
            user_id, other_id, limit=limit, before=before
        )
        return ChatHistoryResponse(
            items=[ChatMessageResponse.from_model(m) for m in messages],
            with_user_id=other_id,
            has_more=has_more,
        )

    async def mark_read(self, user_id: UUID, other_id: UUID) -> int:
        return await self.message_repo.mark_conversation_read(user_id, other_id)

    async def list_chat_users(self, user_id: UUID, search: Optional[str] = None) -> List[ChatUser]:
        users = await self.user_repo.list_chat_users(user_id, search)
        return [ChatUser.model_validate(u) for u in users]

    def is_online(self, user_id: UUID) -> bool:
        """Presence as seen by this node."""
        return self.dispatcher is not None and self.dispatcher.is_online(user_id)
