"""
Execution Context
-----------------
Carries caller identity, an optional deadline and a cancellation flag from
the caller to the executor. The registry passes it through untouched and
applies no deadline of its own; executors that block derive their timeout
from it.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional
import threading
import time


class ContextCancelledError(TimeoutError):
    """Raised by ExecutionContext.check() once cancelled or past deadline."""


@dataclass
class ExecutionContext:
    """Context for tool execution."""
    user_id: str = "default"
    session_id: str = ""
    deadline: Optional[float] = None  # time.monotonic() value
    values: Dict[str, Any] = field(default_factory=dict)
    _cancel_event: threading.Event = field(default_factory=threading.Event, repr=False)

    @classmethod
    def background(cls) -> "ExecutionContext":
        """Empty context: no deadline, never cancelled unless asked."""
        return cls()

    def with_timeout(self, seconds: float) -> "ExecutionContext":
        """
        Derive a child context whose deadline is at most `seconds` away.

        The child shares the parent's cancellation flag.
        """
        deadline = time.monotonic() + seconds
        if self.deadline is not None:
            deadline = min(deadline, self.deadline)
        return replace(self, deadline=deadline, values=dict(self.values))

    def with_value(self, key: str, value: Any) -> "ExecutionContext":
        values = dict(self.values)
        values[key] = value
        return replace(self, values=values)

    def cancel(self) -> None:
        self._cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    @property
    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    @property
    def done(self) -> bool:
        return self.cancelled or self.expired

    def remaining(self) -> Optional[float]:
        """Seconds until the deadline, or None when there is none."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def timeout_or(self, default: float) -> float:
        """Timeout an executor should use: the smaller of default and remaining."""
        remaining = self.remaining()
        if remaining is None:
            return default
        return min(default, remaining)

    def check(self) -> None:
        """Raise ContextCancelledError if the caller gave up."""
        if self.cancelled:
            raise ContextCancelledError("context cancelled")
        if self.expired:
            raise ContextCancelledError("context deadline exceeded")

    def wait(self, seconds: float) -> bool:
        """Sleep up to `seconds`; returns True if cancelled meanwhile."""
        return self._cancel_event.wait(self.timeout_or(seconds))
