"""
Toolbridge Centralized Logging
------------------------------
Structured logging with call_id propagation for per-dispatch traceability.

Design:
- Every tool call handled by the call bridge gets a unique call_id
- call_id propagates through: Bridge -> Registry -> Executor
- Console output via Rich, file output as JSON lines
- Severity discipline: INFO=state, WARNING=recoverable, ERROR=integration bug

Usage:
    from infra.logging import get_logger, CallContext

    logger = get_logger("tools.http")

    with CallContext() as call_id:
        logger.info("Fetching URL")  # record carries call_id
"""

from datetime import datetime, timezone
from functools import wraps
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Callable, Optional
import contextvars
import json
import logging
import uuid

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "toolbridge"

# Context variable for call_id - thread-safe and async-safe
_call_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "call_id", default=None
)


def generate_call_id() -> str:
    """Generate a unique call ID."""
    return f"call_{uuid.uuid4().hex[:12]}"


def get_call_id() -> Optional[str]:
    """Get the current call ID from context."""
    return _call_id_var.get()


def set_call_id(call_id: str) -> contextvars.Token:
    """Set the current call ID in context."""
    return _call_id_var.set(call_id)


def reset_call_id(token: contextvars.Token) -> None:
    """Reset the call ID to its previous value."""
    _call_id_var.reset(token)


class CallContext:
    """
    Context manager for call scoping.

    Usage:
        with CallContext() as call_id:
            # All logs within this block will have call_id
            logger.info("Dispatching...")
    """

    def __init__(self, call_id: Optional[str] = None):
        self._call_id = call_id or generate_call_id()
        self._token: Optional[contextvars.Token] = None

    def __enter__(self) -> str:
        self._token = set_call_id(self._call_id)
        return self._call_id

    def __exit__(self, *args) -> None:
        if self._token is not None:
            reset_call_id(self._token)


class CallIdFilter(logging.Filter):
    """Logging filter that adds call_id to every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "call_id", None) is None:
            record.call_id = get_call_id() or "-"
        return True


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured file logging."""

    EXTRA_FIELDS = ("tool_name", "success", "elapsed_ms", "error_category", "stubbed")

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "call_id": getattr(record, "call_id", "-"),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key in self.EXTRA_FIELDS:
            if hasattr(record, key):
                log_entry[key] = getattr(record, key)

        return json.dumps(log_entry, default=str)


# Global configuration state
_logging_initialized = False
_log_file_path: Optional[Path] = None


def configure_logging(
    level: int = logging.INFO,
    log_dir: Optional[str] = None,
    console: bool = True,
    file: bool = False,
) -> None:
    """
    Configure the toolbridge logging system.

    Nothing is configured at import time; the CLI or host application
    calls this once during bootstrap.

    Args:
        level: Logging level (default INFO)
        log_dir: Directory for log files (default: ./logs)
        console: Enable Rich console output
        file: Enable JSON file output
    """
    global _logging_initialized, _log_file_path

    if _logging_initialized:
        return

    root_logger = logging.getLogger(ROOT_LOGGER)
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    call_filter = CallIdFilter()

    if console:
        console_handler = RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            show_path=False,
        )
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter("[%(call_id)s] %(name)s: %(message)s"))
        console_handler.addFilter(call_filter)
        root_logger.addHandler(console_handler)

    if file:
        log_path = Path(log_dir) if log_dir else Path("logs")
        log_path.mkdir(parents=True, exist_ok=True)

        _log_file_path = log_path / "toolbridge.log"

        file_handler = RotatingFileHandler(
            str(_log_file_path),
            maxBytes=10 * 1024 * 1024,
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)  # File gets everything
        file_handler.setFormatter(JSONFormatter())
        file_handler.addFilter(call_filter)
        root_logger.addHandler(file_handler)

    _logging_initialized = True


def reset_logging() -> None:
    """Drop configured handlers so configure_logging() can run again."""
    global _logging_initialized, _log_file_path
    root_logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()
    _logging_initialized = False
    _log_file_path = None


def get_log_file_path() -> Optional[Path]:
    return _log_file_path


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger within the toolbridge namespace.

    Args:
        name: Logger name (prefixed with 'toolbridge.' if not already)
    """
    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"

    return logging.getLogger(name)


def log_tool_call(
    tool_name: str,
    success: bool,
    elapsed_ms: float,
    error: Optional[str] = None,
    stubbed: bool = False,
    level: Optional[int] = None,
) -> None:
    """
    Log the end of one dispatch with summary information.

    Args:
        tool_name: Name of the dispatched tool
        success: Result.success
        elapsed_ms: Wall time spent in the executor
        error: Result.error when unsuccessful
        stubbed: Whether a stub answered the call
        level: Override the default level (INFO on success, WARNING otherwise)
    """
    logger = get_logger("tools.dispatch")

    extra = {
        "tool_name": tool_name,
        "success": success,
        "elapsed_ms": round(elapsed_ms, 3),
        "stubbed": stubbed,
    }

    if success:
        logger.log(
            level or logging.INFO,
            f"TOOL_CALL {tool_name}: success stubbed={stubbed} ({elapsed_ms:.1f}ms)",
            extra=extra,
        )
    else:
        logger.log(
            level or logging.WARNING,
            f"TOOL_CALL {tool_name}: failed error={error or 'unknown'} ({elapsed_ms:.1f}ms)",
            extra=extra,
        )


def with_call_context(func: Callable) -> Callable:
    """
    Decorator to wrap a function in a call context.

    Reuses an enclosing call_id when one is already set.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        with CallContext(get_call_id()):
            return func(*args, **kwargs)
    return wrapper
