"""
Service layer interfaces and implementations.

Routers build a service per request from the DB session and, where events
are emitted, the realtime dispatcher.
"""

from .interfaces import (
    IAuthService,
    IChatService,
    IHealthService,
    INoteService,
    INotificationService,
    ISharingService,
)

from .auth_service import AuthService
from .chat_service import ChatService, ConversationSequencer
from .health_service import HealthService
from .note_service import NoteService
from .notification_service import NotificationService
from .sharing_service import SharingService

__all__ = [
    # Interfaces
    "IAuthService",
    "INoteService",
    "ISharingService",
    "IChatService",
    "INotificationService",
    "IHealthService",

    # Implementations
    "AuthService",
    "NoteService",
    "SharingService",
    "ChatService",
    "ConversationSequencer",
    "NotificationService",
    "HealthService",
]
