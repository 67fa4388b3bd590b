"""
Database models for NoteLink.

SQLAlchemy ORM models for the note sharing and messaging backend, all
designed for async sessions.

Models included:
    - User: account with username/password authentication
    - Note: course note owned by a user
    - Share: note shared with another user
    - ChatMessage: direct message between two users
    - Notification: persisted in-app notification
"""

from .base import BaseModel
from .message import ChatMessage
from .note import Note
from .notification import Notification, NotificationType, ReferenceType
from .share import Share
from .user import User

__all__ = [
    "BaseModel",
    "User",
    "Note",
    "Share",
    "ChatMessage",
    "Notification",
    "NotificationType",
    "ReferenceType",
]
