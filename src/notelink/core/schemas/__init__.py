"""
Pydantic schemas for validating and documenting API requests and responses.

Covers authentication, notes, sharing, chat, notifications and the common
pagination/error/health formats.
"""

from .auth import LoginRequest, RegisterRequest, TokenResponse, UserResponse
from .chat import (
    ChatHistoryResponse,
    ChatMessageResponse,
    ChatSendRequest,
    ChatUser,
    MarkReadResponse,
    PresenceResponse,
)
from .common import HealthCheckResponse, MessageResponse, PaginationResponse
from .notes import NoteCreate, NoteListItem, NoteListResponse, NoteResponse
from .notifications import NotificationResponse, UnreadCountResponse
from .sharing import ShareListResponse, ShareRequest, ShareResponse

__all__ = [
    # Auth schemas
    "LoginRequest",
    "TokenResponse",
    "RegisterRequest",
    "UserResponse",
    # Note schemas
    "NoteCreate",
    "NoteResponse",
    "NoteListItem",
    "NoteListResponse",
    # Sharing schemas
    "ShareRequest",
    "ShareResponse",
    "ShareListResponse",
    # Chat schemas
    "ChatSendRequest",
    "ChatMessageResponse",
    "ChatHistoryResponse",
    "ChatUser",
    "MarkReadResponse",
    "PresenceResponse",
    # Notification schemas
    "NotificationResponse",
    "UnreadCountResponse",
    # Common schemas
    "PaginationResponse",
    "MessageResponse",
    "HealthCheckResponse",
]
