"""Repository layer for data access."""

from .message_repository import MessageRepository
from .note_repository import NoteRepository
from .notification_repository import NotificationRepository
from .share_repository import ShareRepository
from .user_repository import UserRepository

__all__ = [
    "UserRepository",
    "NoteRepository",
    "ShareRepository",
    "MessageRepository",
    "NotificationRepository",
]
