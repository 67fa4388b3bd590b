"""
Service interfaces for NoteLink.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from ..schemas.auth import LoginRequest, RegisterRequest, TokenResponse, UserResponse
from ..schemas.chat import ChatHistoryResponse, ChatMessageResponse, ChatSendRequest, ChatUser
from ..schemas.common import HealthCheckResponse
from ..schemas.notes import NoteCreate, NoteListResponse, NoteResponse
from ..schemas.notifications import NotificationResponse
from ..schemas.sharing import ShareListResponse, ShareRequest, ShareResponse


class IAuthService(ABC):
    """Auth service for user management."""

    @abstractmethod
    async def register_user(self, request: RegisterRequest) -> UserResponse:
        """Register new user."""

    @abstractmethod
    async def authenticate_user(self, request: LoginRequest) -> TokenResponse:
        """Login user and return a JWT."""

    @abstractmethod
    async def get_current_user(self, user_id: UUID) -> UserResponse:
        """Get user by ID."""

    @abstractmethod
    async def logout_user(self, access_token: str) -> bool:
        """Invalidate the given access token."""


class INoteService(ABC):
    """Note service for create/read/delete."""

    @abstractmethod
    async def create_note(self, user_id: UUID, request: NoteCreate) -> NoteResponse:
        """Create new note."""

    @abstractmethod
    async def get_note(self, note_id: UUID, user_id: UUID) -> NoteResponse:
        """Get note the user owns or has been shared."""

    @abstractmethod
    async def list_notes(self, user_id: UUID, page: int = 1, per_page: int = 20) -> NoteListResponse:
        """List owned and shared notes."""

    @abstractmethod
    async def delete_note(self, note_id: UUID, user_id: UUID) -> bool:
        """Delete note and tell everyone it was shared with."""


class ISharingService(ABC):
    """Sharing service."""

    @abstractmethod
    async def share_note(self, user_id: UUID, request: ShareRequest) -> List[ShareResponse]:
        """Share note with other users."""

    @abstractmethod
    async def revoke_share(self, user_id: UUID, share_id: UUID) -> bool:
        """Remove a share the user gave or received."""

    @abstractmethod
    async def list_shares(
        self, user_id: UUID, share_type: str, page: int = 1, per_page: int = 20
    ) -> ShareListResponse:
        """List shares given or received."""


class IChatService(ABC):
    """Direct messaging: persist, then deliver live."""

    @abstractmethod
    async def send_message(self, sender_id: UUID, request: ChatSendRequest) -> ChatMessageResponse:
        """Persist a message and dispatch it to the recipient."""

    @abstractmethod
    async def get_history(
        self, user_id: UUID, other_id: UUID, limit: Optional[int] = None, before: Optional[datetime] = None
    ) -> ChatHistoryResponse:
        """Conversation between two users, oldest first."""

    @abstractmethod
    async def mark_read(self, user_id: UUID, other_id: UUID) -> int:
        """Mark messages from ``other_id`` as read."""

    @abstractmethod
    async def list_chat_users(self, user_id: UUID, search: Optional[str] = None) -> List[ChatUser]:
        """Users the caller can chat with."""


class INotificationService(ABC):
    """Persisted notifications with live push."""

    @abstractmethod
    async def notify(
        self,
        recipient_id: UUID,
        sender_id: UUID,
        type: str,
        reference_id: UUID,
        reference_type: str,
        content: Optional[str] = None,
    ) -> NotificationResponse:
        """Store a notification and push ``new_notification``."""

    @abstractmethod
    async def list_notifications(self, user_id: UUID) -> List[NotificationResponse]:
        """Latest notifications."""

    @abstractmethod
    async def unread_count(self, user_id: UUID) -> int:
        """Unread notifications."""

    @abstractmethod
    async def mark_read(self, user_id: UUID, notification_id: UUID) -> NotificationResponse:
        """Mark one notification read."""

    @abstractmethod
    async def mark_all_read(self, user_id: UUID) -> int:
        """Mark everything read."""


class IHealthService(ABC):
    """Health checks."""

    @abstractmethod
    async def get_health_status(self) -> HealthCheckResponse:
        """Overall health."""

    @abstractmethod
    async def check_database_health(self) -> Dict[str, Any]:
        """DB connectivity."""

    @abstractmethod
    async def check_redis_health(self) -> Dict[str, Any]:
        """Redis connectivity."""
