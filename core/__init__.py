# Core module - error taxonomy and synchronization primitives
# Shared by the registry, the builtin tools and the CLI

from .errors import (
    ErrorCategory,
    ToolbridgeError,
    RegistrationError,
    InvalidToolError,
    DuplicateToolError,
    CallShapeError,
    ToolNotFoundError,
    NoExecutorError,
    ResultSerializationError,
    ArgumentError,
    classify_exception,
)
from .rwlock import ReadWriteLock

__all__ = [
    "ErrorCategory",
    "ToolbridgeError",
    "RegistrationError",
    "InvalidToolError",
    "DuplicateToolError",
    "CallShapeError",
    "ToolNotFoundError",
    "NoExecutorError",
    "ResultSerializationError",
    "ArgumentError",
    "classify_exception",
    "ReadWriteLock",
]
