# Main application entry point
import os
from contextlib import asynccontextmanager

import socketio
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import (
    auth_router,
    chat_router,
    health_router,
    notes_router,
    notifications_router,
    sharing_router,
)
from .config import get_settings
from .core.logging import LoggingMiddleware, get_logger, setup_logging
from .core.redis_client import get_redis_client
from .database import AsyncSessionLocal, create_tables
from .realtime import get_realtime_hub
from .realtime.namespace import PresenceNamespace
from .realtime.transport import SocketIOTransport

# Setup logging first
setup_logging()
logger = get_logger("main")

settings = get_settings()
hub = get_realtime_hub()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info(
        "Starting NoteLink application",
        extra={
            "version": settings.app_version,
            "environment": settings.environment,
            "node_id": settings.node_id,
        },
    )

    redis_client = get_redis_client()
    try:
        await redis_client.connect()
    except Exception as e:
        logger.warning(f"Redis connection failed: {e}. Continuing without Redis...")

    # Tests run against their own SQLite engine
    if os.getenv("NOTELINK_SKIP_LIFESPAN_DB") == "1":
        logger.info("Skipping DB table creation due to NOTELINK_SKIP_LIFESPAN_DB=1")
    else:
        try:
            await create_tables()
            logger.info("Database tables created/verified")
        except Exception as e:
            logger.error("Failed to create database tables", exc_info=e)
            raise

    await hub.start()

    yield

    logger.info("Shutting down NoteLink application")
    await hub.stop()
    await redis_client.disconnect()


app = FastAPI(
    title=settings.app_name,
    description="Note sharing, notifications and direct messaging API",
    version=settings.app_version,
    lifespan=lifespan,
)

app.add_middleware(LoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router, prefix="/api")
app.include_router(notes_router, prefix="/api")
app.include_router(sharing_router, prefix="/api")
app.include_router(notifications_router, prefix="/api")
app.include_router(chat_router, prefix="/api")
app.include_router(health_router, prefix="/api")


@app.get("/")
async def root():
    return {"message": "NoteLink API"}


@app.get("/api/")
async def api_root():
    return {
        "message": "NoteLink API",
        "version": settings.app_version,
        "documentation": {
            "swagger_ui": "/docs",
            "redoc": "/redoc",
            "openapi_json": "/openapi.json"
        },
        "endpoints": {
            "authentication": "/api/auth/",
            "notes": "/api/notes/",
            "sharing": "/api/sharing/",
            "notifications": "/api/notifications/",
            "chat": "/api/chat/",
            "health": "/api/health/"
        },
        "realtime": {"socketio_path": "/socket.io", "namespace": settings.realtime_namespace},
    }


# Liveness probe without DB access
@app.get("/health")
async def basic_health():
    return {"status": "ok"}


# Socket.IO server; ping interval/timeout is the heartbeat that detects dead peers
sio = socketio.AsyncServer(
    async_mode="asgi",
    cors_allowed_origins=settings.cors_origins,
    ping_interval=settings.realtime_ping_interval,
    ping_timeout=settings.realtime_ping_timeout,
)
sio.register_namespace(
    PresenceNamespace(hub, AsyncSessionLocal, namespace=settings.realtime_namespace)
)
hub.bind_transport(SocketIOTransport(sio, namespace=settings.realtime_namespace))

# ASGI entry point: Socket.IO on /socket.io, everything else goes to FastAPI
socket_app = socketio.ASGIApp(sio, other_asgi_app=app)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "notelink.main:socket_app", host=settings.host, port=settings.port, reload=settings.reload
    )
