"""
Tool Registry
-------------
Concurrency-safe store mapping tool name -> Tool, with dispatch.

Rules:
- Append-only: tools are never removed or mutated once registered
- Many readers, one writer; no lock is held while an executor runs
- Call-shape errors raise, domain errors come back as a failed Result
- Arguments are checked against the declared schema before dispatch
  (stubs are exempt so they answer any input)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Protocol, Union
import logging
import time

from core.errors import (
    ArgumentError,
    ErrorCategory,
    InvalidToolError,
    DuplicateToolError,
    NoExecutorError,
    ToolNotFoundError,
    classify_exception,
    log_level_for,
)
from core.rwlock import ReadWriteLock
from infra.logging import log_tool_call

from .context import ExecutionContext
from .result import Result
from .schema import EMPTY_SCHEMA, ParameterSchema, ParameterType


class Category(str, Enum):
    """Closed set of tool categories."""
    COMPUTATION = "computation"
    HTTP = "http"
    FILE = "file"
    DATABASE = "database"
    CACHE = "cache"
    SECURITY = "security"
    TIME = "time"
    DATA = "data"
    FINANCE = "finance"
    MESSAGING = "messaging"
    IMAGE = "image"
    AUDIO = "audio"
    TEMPLATE = "template"
    ARCHIVE = "archive"
    EXECUTION = "execution"
    AI = "ai"

    @classmethod
    def lookup(cls, value: Union["Category", str, None]) -> Optional["Category"]:
        """Resolve a category or alias; None when unknown."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        key = value.strip().lower()
        key = _CATEGORY_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            return None

    @classmethod
    def parse(cls, value: Union["Category", str]) -> "Category":
        """Resolve a category or alias; raises ValueError when unknown."""
        category = cls.lookup(value)
        if category is None:
            raise ValueError(f"unknown tool category: {value!r}")
        return category


_CATEGORY_ALIASES = {
    "business": "messaging",
    "vision": "image",
}


class ToolExecutor(Protocol):
    """Anything callable as executor(context, args) -> Result."""

    def __call__(self, context: ExecutionContext, args: Dict[str, Any]) -> Result:
        ...


@dataclass(frozen=True)
class Tool:
    """
    Tool definition with schema and executor.

    Each tool defines:
    - Name and description (shown to the LLM)
    - Category from the closed Category set
    - Parameter schema (type object)
    - Executor function
    - Advisory flags: requires_auth, is_stub
    """
    name: str
    description: str
    category: Category
    parameters: ParameterSchema = EMPTY_SCHEMA
    executor: Optional[ToolExecutor] = field(default=None, repr=False, compare=False)
    requires_auth: bool = False
    is_stub: bool = False

    def __post_init__(self):
        object.__setattr__(self, "category", Category.parse(self.category))
        if self.parameters.type != ParameterType.OBJECT:
            raise ValueError(f"tool {self.name!r}: parameters must be an object schema")

    def execute(self, context: Optional[ExecutionContext], args: Dict[str, Any]) -> Result:
        """Call the executor directly, without registry validation or logging."""
        if self.executor is None:
            raise NoExecutorError(self.name)
        return self.executor(context or ExecutionContext(), args)

    def validate_args(self, args: Dict[str, Any]):
        """Validate arguments against the schema. Returns (is_valid, error_message)."""
        return self.parameters.validate_args(args)

    def json_schema(self) -> Dict[str, Any]:
        return self.parameters.to_json_schema()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "category": self.category.value,
            "parameters": self.json_schema(),
            "requires_auth": self.requires_auth,
            "is_stub": self.is_stub,
        }


def stub_tool(
    name: str,
    description: str,
    category: Union[Category, str],
    parameters: ParameterSchema,
    message: str,
    requires_auth: bool = False,
) -> Tool:
    """
    Tool whose executor always succeeds with an explanatory message.

    Lets capabilities that need credentials or sandboxes take part in an
    orchestration loop without ever failing hard.
    """
    def executor(context: ExecutionContext, args: Dict[str, Any]) -> Result:
        result = Result.stub(message)
        result.metadata["tool"] = name
        return result

    return Tool(
        name=name,
        description=description,
        category=category,
        parameters=parameters,
        executor=executor,
        requires_auth=requires_auth,
        is_stub=True,
    )


class ToolRegistry:
    """
    Registry for all available tools.

    Created once at startup, populated during bootstrap, then read-mostly.
    """

    def __init__(self, validate_arguments: bool = True, name: str = "default"):
        self.name = name
        self.validate_arguments = validate_arguments
        self._tools: Dict[str, Tool] = {}
        self._lock = ReadWriteLock()
        self._logger = logging.getLogger("toolbridge.tools.registry")

    # Registration

    def register(self, tool: Tool) -> None:
        """Register a tool. Raises InvalidToolError or DuplicateToolError."""
        if not isinstance(tool, Tool):
            raise InvalidToolError(f"expected a Tool, got {type(tool).__name__}")
        if not tool.name:
            raise InvalidToolError("tool name cannot be empty")

        with self._lock.write():
            if tool.name in self._tools:
                raise DuplicateToolError(tool.name)
            self._tools[tool.name] = tool

        self._logger.debug(f"Registered tool: {tool.name} ({tool.category.value}) in {self.name}")

    def register_all(self, tools: Iterable[Tool]) -> int:
        """Register several tools; stops at the first failure. Returns count."""
        count = 0
        for tool in tools:
            self.register(tool)
            count += 1
        return count

    # Lookup

    def get(self, name: str) -> Optional[Tool]:
        """Get a tool by name."""
        with self._lock.read():
            return self._tools.get(name)

    def list_tools(self) -> List[Tool]:
        """Snapshot of all tools in registration order."""
        with self._lock.read():
            return list(self._tools.values())

    def list_by_category(self, category: Union[Category, str]) -> List[Tool]:
        """Snapshot of tools in one category; unknown categories yield []."""
        resolved = Category.lookup(category)
        if resolved is None:
            self._logger.debug(f"Unknown category requested: {category!r}")
            return []

        with self._lock.read():
            return [t for t in self._tools.values() if t.category is resolved]

    def names(self) -> List[str]:
        with self._lock.read():
            return list(self._tools)

    def categories(self) -> Dict[str, List[str]]:
        """Category value -> names of the tools registered in it."""
        grouped: Dict[str, List[str]] = {}
        for tool in self.list_tools():
            grouped.setdefault(tool.category.value, []).append(tool.name)
        return grouped

    # Dispatch

    def execute(
        self,
        context: Optional[ExecutionContext],
        name: str,
        args: Optional[Dict[str, Any]] = None,
    ) -> Result:
        """
        Run a tool by name.

        The lookup happens under the read lock; validation and the executor
        run after it is released, so a slow tool never stalls other callers.

        Raises ToolNotFoundError / NoExecutorError for call-shape errors.
        """
        tool = self.get(name)
        if tool is None:
            self._logger.error(f"Dispatch to unknown tool: {name}")
            raise ToolNotFoundError(name)
        if tool.executor is None:
            self._logger.error(f"Dispatch to tool without executor: {name}")
            raise NoExecutorError(name)

        context = context or ExecutionContext()
        if args is None:
            args = {}

        if not tool.is_stub:
            rejection = self._check_args(tool, args)
            if rejection is not None:
                log_tool_call(tool.name, False, 0.0, error=rejection.error,
                              level=log_level_for(ErrorCategory.VALIDATION_ERROR))
                return rejection

        start = time.perf_counter()
        try:
            result = tool.executor(context, args)
        except Exception as e:
            category = classify_exception(e)
            if not isinstance(e, ArgumentError):
                self._logger.debug(f"Executor {tool.name} raised", exc_info=True)
            result = Result.from_error(e)
            result.metadata["error_category"] = category.name

        if not isinstance(result, Result):
            self._logger.warning(
                f"Executor {tool.name} returned {type(result).__name__}, wrapping as success"
            )
            result = Result.ok(result)

        elapsed_ms = (time.perf_counter() - start) * 1000
        log_tool_call(tool.name, result.success, elapsed_ms, error=result.error,
                      stubbed=result.stubbed)
        return result

    def _check_args(self, tool: Tool, args: Any) -> Optional[Result]:
        """Failed Result when args cannot be dispatched to tool, else None."""
        if not isinstance(args, dict):
            error = f"arguments must be an object, got {type(args).__name__}"
        elif self.validate_arguments:
            valid, error = tool.validate_args(args)
            if valid:
                return None
        else:
            return None

        return Result(
            success=False,
            error=error,
            metadata={"error_category": ErrorCategory.VALIDATION_ERROR.name},
        )

    # Composition

    def subset(self, *names: str) -> "ToolRegistry":
        """Registry exposing only the named tools (shared references)."""
        from .composition import create_subset
        return create_subset(names, parent=self)

    def by_categories(self, *categories: Union[Category, str]) -> "ToolRegistry":
        """Registry exposing only whole categories (shared references)."""
        from .composition import create_by_categories
        return create_by_categories(categories, parent=self)

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._tools)

    def __contains__(self, name: object) -> bool:
        with self._lock.read():
            return name in self._tools

    def __iter__(self) -> Iterator[Tool]:
        return iter(self.list_tools())

    def __repr__(self) -> str:
        return f"ToolRegistry(name={self.name!r}, tools={len(self)})"
