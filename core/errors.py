"""
Error Handling Module
---------------------
Typed errors with classification.

Two channels, never mixed:
- Call-shape errors (unknown tool, no executor) are raised as exceptions.
  They indicate a broken integration and are never shown to the LLM.
- Domain errors (bad arguments, failing dependencies) become a failed
  Result so the caller can self-correct and retry.
"""

from enum import Enum, auto
from typing import Optional
import logging


class ErrorCategory(Enum):
    """Categories of errors for handling decisions."""
    TOOL_FAILURE = auto()        # Executor raised or reported failure
    VALIDATION_ERROR = auto()    # Arguments do not match the schema
    PERMISSION_ERROR = auto()    # Filesystem/OS permission denied
    NETWORK_ERROR = auto()       # HTTP/connection error
    TIMEOUT_ERROR = auto()       # Operation timed out
    NOT_FOUND = auto()           # Missing file, key, row...
    CALL_SHAPE = auto()          # Unknown tool, no executor
    REGISTRATION_ERROR = auto()  # Empty or duplicate tool name
    SYSTEM_ERROR = auto()        # Internal error


# Categories an LLM can recover from by re-issuing a different call
RECOVERABLE_CATEGORIES = {
    ErrorCategory.TOOL_FAILURE,
    ErrorCategory.VALIDATION_ERROR,
    ErrorCategory.PERMISSION_ERROR,
    ErrorCategory.NETWORK_ERROR,
    ErrorCategory.TIMEOUT_ERROR,
    ErrorCategory.NOT_FOUND,
}


class ToolbridgeError(Exception):
    """Base class for all framework errors."""

    category: ErrorCategory = ErrorCategory.SYSTEM_ERROR

    @property
    def recoverable(self) -> bool:
        return self.category in RECOVERABLE_CATEGORIES


class RegistrationError(ToolbridgeError):
    """Raised when a tool cannot be registered."""
    category = ErrorCategory.REGISTRATION_ERROR


class InvalidToolError(RegistrationError):
    """Tool descriptor is malformed (e.g. empty name)."""


class DuplicateToolError(RegistrationError):
    """A tool with the same name is already registered."""

    def __init__(self, name: str):
        self.tool_name = name
        super().__init__(f"tool {name!r} already registered")


class CallShapeError(ToolbridgeError):
    """
    The call itself is malformed from the framework's point of view.

    Not a recoverable business condition.
    """
    category = ErrorCategory.CALL_SHAPE


class ToolNotFoundError(CallShapeError):
    """No tool registered under the requested name."""

    def __init__(self, name: str):
        self.tool_name = name
        super().__init__(f"tool {name!r} not found")


class NoExecutorError(CallShapeError):
    """Tool is registered without an executor."""

    def __init__(self, name: str):
        self.tool_name = name
        super().__init__(f"tool {name!r} has no execute function")


class ResultSerializationError(CallShapeError):
    """A Result could not be serialized for the caller."""


class ArgumentError(ToolbridgeError, ValueError):
    """
    An argument is missing or has the wrong type.

    Raised by typed accessors inside executors; the registry turns it
    into a failed Result.
    """
    category = ErrorCategory.VALIDATION_ERROR

    def __init__(self, message: str, parameter: Optional[str] = None):
        self.parameter = parameter
        super().__init__(message)


def classify_exception(exception: BaseException) -> ErrorCategory:
    """Map an exception raised by an executor to an error category."""
    if isinstance(exception, ToolbridgeError):
        return exception.category
    if isinstance(exception, TimeoutError):
        return ErrorCategory.TIMEOUT_ERROR
    if isinstance(exception, PermissionError):
        return ErrorCategory.PERMISSION_ERROR
    if isinstance(exception, (FileNotFoundError, KeyError, LookupError)):
        return ErrorCategory.NOT_FOUND
    if isinstance(exception, ConnectionError):
        return ErrorCategory.NETWORK_ERROR
    if isinstance(exception, (ValueError, TypeError, ArithmeticError)):
        return ErrorCategory.VALIDATION_ERROR
    return ErrorCategory.TOOL_FAILURE


_LOG_LEVELS = {
    ErrorCategory.VALIDATION_ERROR: logging.INFO,
    ErrorCategory.NOT_FOUND: logging.INFO,
    ErrorCategory.PERMISSION_ERROR: logging.WARNING,
    ErrorCategory.REGISTRATION_ERROR: logging.WARNING,
    ErrorCategory.TOOL_FAILURE: logging.WARNING,
    ErrorCategory.NETWORK_ERROR: logging.WARNING,
    ErrorCategory.TIMEOUT_ERROR: logging.WARNING,
    ErrorCategory.CALL_SHAPE: logging.ERROR,
    ErrorCategory.SYSTEM_ERROR: logging.CRITICAL,
}


def log_level_for(category: ErrorCategory) -> int:
    """Severity discipline: INFO=caller mistake, WARNING=recoverable, ERROR=integration bug."""
    return _LOG_LEVELS.get(category, logging.ERROR)
