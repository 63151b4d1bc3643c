"""
Result Envelope
---------------
Uniform success/failure/metadata wrapper returned by every tool call.

By convention exactly one of "success with data" or "failure with error"
holds. Serialized form omits empty fields:

    {"success": true, "data": 30.0, "metadata": {"expression": "15% of 200"}}
    {"success": false, "error": "division by zero"}
"""

from dataclasses import dataclass, field, is_dataclass, asdict
from datetime import date, datetime, time, timedelta
from enum import Enum
from pathlib import PurePath
from typing import Any, Dict, Optional
import base64
import json

from core.errors import ResultSerializationError, classify_exception


@dataclass
class Result:
    """Output of one tool execution."""
    success: bool
    data: Any = None
    error: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    # Constructors

    @classmethod
    def ok(cls, data: Any = None) -> "Result":
        """Plain success."""
        return cls(success=True, data=data)

    @classmethod
    def ok_with_meta(cls, data: Any, meta: Optional[Dict[str, Any]]) -> "Result":
        """Success with side-channel metadata."""
        return cls(success=True, data=data, metadata=dict(meta or {}))

    @classmethod
    def from_error(cls, error: Any) -> "Result":
        """Failure from an exception or a message."""
        if isinstance(error, BaseException):
            return cls(
                success=False,
                error=str(error) or type(error).__name__,
                metadata={"error_category": classify_exception(error).name},
            )
        return cls(success=False, error=str(error))

    @classmethod
    def stub(cls, message: str) -> "Result":
        """Placeholder success for capabilities that are not implemented."""
        return cls(success=True, data=message, metadata={"stubbed": True})

    @property
    def stubbed(self) -> bool:
        return bool(self.metadata.get("stubbed"))

    # Serialization

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"success": self.success}
        if self.data is not None:
            out["data"] = self.data
        if self.error:
            out["error"] = self.error
        if self.metadata:
            out["metadata"] = self.metadata
        return out

    def to_json(self, indent: Optional[int] = None) -> str:
        try:
            return json.dumps(self.to_dict(), default=json_default, indent=indent)
        except (TypeError, ValueError) as e:
            raise ResultSerializationError(f"failed to marshal result: {e}") from e

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Result":
        return cls(
            success=bool(data.get("success", False)),
            data=data.get("data"),
            error=data.get("error", "") or "",
            metadata=dict(data.get("metadata") or {}),
        )

    @classmethod
    def from_json(cls, text: str) -> "Result":
        return cls.from_dict(json.loads(text))

    def __repr__(self) -> str:
        status = "✓" if self.success else "✗"
        return f"Result({status} {self.data if self.success else self.error!r})"


def json_default(value: Any) -> Any:
    """Fallback encoder for payload types json does not know."""
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, timedelta):
        return value.total_seconds()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, PurePath):
        return str(value)
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if hasattr(value, "model_dump"):
        return value.model_dump(mode="json")
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
