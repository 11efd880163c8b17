"""
Logging for the planner engine.

Every record carries the id of the engine session that produced it, so the
output of two engines living in one process can be told apart.
"""

import functools
import logging
import os
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime
from typing import Optional

# Id of the engine session handling the current call
_session: ContextVar[Optional[str]] = ContextVar("engine_session", default=None)

_configured = False


class SessionFilter(logging.Filter):
    """Stamp each record with the current engine session id"""
    def filter(self, record):
        record.session_id = _session.get() or "-"
        return True


class StructuredFormatter(logging.Formatter):
    """[time] [LEVEL] [session] [logger] message, then the traceback if any"""
    def format(self, record):
        stamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        session = getattr(record, "session_id", "-")
        line = f"[{stamp}] [{record.levelname}] [{session}] [{record.name}] {record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def _attach(root: logging.Logger, handler: logging.Handler, level: int) -> None:
    handler.setLevel(level)
    handler.setFormatter(StructuredFormatter())
    handler.addFilter(SessionFilter())
    root.addHandler(handler)


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Route all engine logging through the structured format.

    Only the first call has an effect, so building a second engine in the
    same process does not duplicate handlers.

    Args:
        level: Name of the root log level; unknown names fall back to INFO
        log_file: Also write to this file, creating its directory if needed
    """
    global _configured
    if _configured:
        return

    log_level = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(log_level)
    root.handlers.clear()

    _attach(root, logging.StreamHandler(sys.stdout), log_level)
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        _attach(root, logging.FileHandler(log_file, encoding="utf-8"), log_level)

    _configured = True


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def set_session_id(sid: Optional[str] = None) -> str:
    """
    Tag the current context with an engine session id.

    Returns:
        The id that was set (a fresh 8-character one when sid is None)
    """
    sid = sid or uuid.uuid4().hex[:8]
    _session.set(sid)
    return sid


def get_session_id() -> Optional[str]:
    return _session.get()


def log_function_call(func):
    """Trace entry and exit of a state mutator at debug level; log and re-raise failures"""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = get_logger(func.__module__)
        logger.debug(f"-> {func.__qualname__}")
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            logger.error(f"{func.__qualname__} failed: {e}", exc_info=True)
            raise
        logger.debug(f"<- {func.__qualname__}")
        return result
    return wrapper
