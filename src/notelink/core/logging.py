"""
Logging configuration for the NoteLink backend.

Console output is colored in debug mode and JSON otherwise; every JSON record
carries the node id so logs from several API nodes can be merged.
"""
import json
import logging
import logging.config
import sys
import time
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from ..config import Settings, get_settings

# Attributes every LogRecord carries; anything else came in through ``extra=``
_RESERVED_ATTRS = frozenset(
    (
        'name', 'msg', 'args', 'levelname', 'levelno', 'pathname', 'filename',
        'module', 'exc_info', 'exc_text', 'stack_info', 'lineno', 'funcName',
        'created', 'msecs', 'relativeCreated', 'thread', 'threadName',
        'processName', 'process', 'taskName', 'message', 'asctime',
    )
)

_QUIET_LIBRARIES = ('socketio', 'engineio', 'sqlalchemy', 'aiosqlite')


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with ``extra=`` fields nested."""

    def __init__(self, node_id: Optional[str] = None):
        super().__init__()
        self.node_id = node_id

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            'timestamp': datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'location': f"{record.module}.{record.funcName}:{record.lineno}",
        }
        if self.node_id:
            entry['node_id'] = self.node_id

        if record.exc_info and record.exc_info[0] is not None:
            entry['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
                'traceback': self.formatException(record.exc_info),
            }

        extra = {k: v for k, v in record.__dict__.items() if k not in _RESERVED_ATTRS}
        if extra:
            entry['extra'] = extra

        return json.dumps(entry, ensure_ascii=False, default=str)


class ColoredFormatter(logging.Formatter):
    """Colored formatter for console output."""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        # copy, so the file handler never sees escape codes
        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelname, '')
        record.levelname = f"{color}{record.levelname:<8}{self.RESET}"
        return super().format(record)


def get_log_level(level_str: Optional[str] = None) -> int:
    """Numeric level for a name such as ``"info"``; unknown names mean INFO."""
    name = (level_str or get_settings().log_level).upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def build_logging_config(settings: Settings, log_dir: Path) -> Dict[str, Any]:
    """dictConfig for the app, the Socket.IO server and uvicorn."""
    console_level = get_log_level(settings.log_level)
    rotating = {
        'class': 'logging.handlers.RotatingFileHandler',
        'maxBytes': 10_000_000,
        'backupCount': 5,
        'encoding': 'utf-8',
    }

    loggers: Dict[str, Any] = {
        'notelink': {
            'handlers': ['console', 'file', 'error_file'],
            'level': 'DEBUG',
            'propagate': False,
        },
        'uvicorn': {'handlers': ['console'], 'level': 'INFO', 'propagate': False},
        'uvicorn.access': {'handlers': ['console'], 'level': 'INFO', 'propagate': False},
        'alembic': {'handlers': ['console', 'file'], 'level': 'INFO', 'propagate': False},
    }
    # socket.io logs every packet at INFO
    for name in _QUIET_LIBRARIES:
        loggers[name] = {'handlers': ['file'], 'level': 'WARNING', 'propagate': False}

    return {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'json': {'()': JSONFormatter, 'node_id': settings.node_id},
            'colored': {
                '()': ColoredFormatter,
                'format': '%(asctime)s | %(levelname)s | %(name)s | %(message)s',
                'datefmt': '%H:%M:%S',
            },
            'file': {
                'format': '%(asctime)s | %(levelname)-8s | %(name)-30s | %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S',
            },
        },
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'formatter': 'colored' if settings.debug else 'json',
                'stream': sys.stdout,
                'level': console_level,
            },
            'file': {
                **rotating,
                'filename': str(log_dir / 'notelink.log'),
                'formatter': 'file',
                'level': 'DEBUG',
            },
            'error_file': {
                **rotating,
                'filename': str(log_dir / 'error.log'),
                'formatter': 'json',
                'level': 'ERROR',
            },
        },
        'root': {'handlers': ['console', 'file'], 'level': 'INFO'},
        'loggers': loggers,
    }


def setup_logging(settings: Optional[Settings] = None) -> None:
    """Install the logging configuration."""
    settings = settings or get_settings()
    log_dir = Path(settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(build_logging_config(settings, log_dir))

    get_logger('logging').info(
        "Logging configured",
        extra={'log_level': settings.log_level, 'environment': settings.environment},
    )


def get_logger(name: str) -> logging.Logger:
    """Logger under the ``notelink`` hierarchy."""
    return logging.getLogger(f"notelink.{name}")


class LoggingMiddleware:
    """ASGI middleware that logs one line per HTTP request.

    WebSocket and lifespan scopes pass straight through; Socket.IO traffic is
    logged by the realtime layer instead.
    """

    def __init__(self, app, logger_name: str = "http"):
        self.app = app
        self.logger = get_logger(logger_name)

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = uuid.uuid4().hex[:12]
        started = time.perf_counter()
        status_code = 0

        async def send_wrapper(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 0)
                message["headers"] = list(message.get("headers", [])) + [
                    (b"x-request-id", request_id.encode())
                ]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            self.logger.error("HTTP request failed", extra={
                'request_id': request_id,
                'method': scope['method'],
                'path': scope['path'],
                'duration_ms': round((time.perf_counter() - started) * 1000, 2),
                'exception_type': type(exc).__name__,
            })
            raise

        self.logger.info("HTTP request", extra={
            'request_id': request_id,
            'method': scope['method'],
            'path': scope['path'],
            'status_code': status_code,
            'duration_ms': round((time.perf_counter() - started) * 1000, 2),
            'client_ip': scope['client'][0] if scope.get('client') else 'unknown',
        })
