"""API routers for NoteLink."""

from .auth import router as auth_router
from .chat import router as chat_router
from .health import router as health_router
from .notes import router as notes_router
from .notifications import router as notifications_router
from .sharing import router as sharing_router

__all__ = [
    "auth_router",
    "notes_router",
    "sharing_router",
    "notifications_router",
    "chat_router",
    "health_router",
]
