"""
Typed accessors over the untyped argument bag.

Executors read their inputs through Arguments instead of indexing the raw
dict, so a missing or mistyped value raises ArgumentError (turned into a
failed Result by the registry) rather than silently becoming a zero value.
"""

from typing import Any, Dict, List, Mapping, Optional, Tuple

from core.errors import ArgumentError

_MISSING = object()


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


class Arguments:
    """Read-only view over a tool's argument bag."""

    def __init__(self, raw: Optional[Mapping[str, Any]]):
        self._raw: Dict[str, Any] = dict(raw or {})

    def __contains__(self, name: str) -> bool:
        return name in self._raw and self._raw[name] is not None

    def raw(self) -> Dict[str, Any]:
        return dict(self._raw)

    def _fetch(self, name: str, default: Any) -> Tuple[bool, Any]:
        """Return (present, value); absent values fall back to default."""
        value = self._raw.get(name)
        if value is None:
            if default is _MISSING:
                raise ArgumentError(f"{name} is required", parameter=name)
            return False, default
        return True, value

    def _mismatch(self, name: str, expected: str, value: Any) -> ArgumentError:
        return ArgumentError(
            f"{name} must be a {expected}, got {_type_name(value)}", parameter=name
        )

    def get_str(self, name: str, default: Any = _MISSING, allow_empty: bool = False) -> str:
        present, value = self._fetch(name, default)
        if not present:
            return value
        if not isinstance(value, str):
            raise self._mismatch(name, "string", value)
        if not value and not allow_empty:
            if default is not _MISSING:
                return default
            raise ArgumentError(f"{name} is required", parameter=name)
        return value

    def get_float(self, name: str, default: Any = _MISSING) -> float:
        present, value = self._fetch(name, default)
        if not present:
            return value
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise self._mismatch(name, "number", value)
        return float(value)

    def get_int(self, name: str, default: Any = _MISSING) -> int:
        present, value = self._fetch(name, default)
        if not present:
            return value
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise self._mismatch(name, "integer", value)
        if isinstance(value, float) and not value.is_integer():
            raise self._mismatch(name, "integer", value)
        return int(value)

    def get_bool(self, name: str, default: Any = _MISSING) -> bool:
        present, value = self._fetch(name, default)
        if not present:
            return value
        if not isinstance(value, bool):
            raise self._mismatch(name, "boolean", value)
        return value

    def get_list(self, name: str, default: Any = _MISSING) -> List[Any]:
        present, value = self._fetch(name, default)
        if not present:
            return value
        if not isinstance(value, list):
            raise self._mismatch(name, "array", value)
        return value

    def get_dict(self, name: str, default: Any = _MISSING) -> Dict[str, Any]:
        present, value = self._fetch(name, default)
        if not present:
            return value
        if not isinstance(value, dict):
            raise self._mismatch(name, "object", value)
        return value

    def get_any(self, name: str, default: Any = _MISSING) -> Any:
        return self._fetch(name, default)[1]

    def get_choice(self, name: str, choices: List[str], default: Any = _MISSING) -> str:
        value = self.get_str(name, default)
        if value not in choices and not (value is default and default is not _MISSING):
            raise ArgumentError(
                f"{name} must be one of {choices}, got {value!r}", parameter=name
            )
        return value
