"""
Toolbridge Test Configuration
-----------------------------
Shared fixtures and configuration for all tests.

Outbound HTTP is blocked: HTTP tools are exercised through
httpx.MockTransport only.
"""

import sys
from pathlib import Path
from typing import Any, Dict

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from infra.config import ToolSettings
from infra.logging import reset_logging
from tools.context import ExecutionContext
from tools.registry import Category, Tool, ToolRegistry
from tools.result import Result
from tools.schema import object_schema, string_param


# =============================================================================
# Test Isolation: Block Side Effects
# =============================================================================

@pytest.fixture(autouse=True)
def block_network(monkeypatch):
    """
    Block real outbound HTTP during tests.

    Clients built with an explicit transport (MockTransport) are unaffected.
    """
    import httpx

    def _blocked(self, request):
        raise RuntimeError(
            f"Network access is forbidden during tests: {request.method} {request.url}. "
            "Use httpx.MockTransport."
        )

    monkeypatch.setattr(httpx.HTTPTransport, "handle_request", _blocked)


@pytest.fixture(autouse=True)
def isolated_logging():
    """Each test starts with unconfigured toolbridge logging."""
    reset_logging()
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Strip TOOLBRIDGE_* overrides from the host environment."""
    import os

    for key in list(os.environ):
        if key.startswith("TOOLBRIDGE_"):
            monkeypatch.delenv(key, raising=False)


# =============================================================================
# Registry Fixtures
# =============================================================================

def _echo(context: ExecutionContext, args: Dict[str, Any]) -> Result:
    return Result.ok(args["message"])


@pytest.fixture(scope="session")
def project_root():
    """Return the project root path."""
    return PROJECT_ROOT


@pytest.fixture
def context():
    return ExecutionContext()


@pytest.fixture
def echo_tool():
    """Tool that returns its 'message' argument."""
    return Tool(
        name="echo",
        description="Echo the message back",
        category=Category.DATA,
        parameters=object_schema({
            "message": string_param("Message to echo"),
        }, required=["message"]),
        executor=_echo,
    )


@pytest.fixture
def registry(echo_tool):
    """Fresh registry holding only the echo tool."""
    reg = ToolRegistry()
    reg.register(echo_tool)
    return reg


@pytest.fixture
def settings():
    return ToolSettings()


@pytest.fixture(scope="session")
def default_registry():
    """Registry with every builtin tool (shared; registries are append-only)."""
    from tools.defaults import create_default_registry
    return create_default_registry(ToolSettings())


@pytest.fixture
def run(context):
    """Execute a tool from a list of Tools through a throwaway registry."""
    def _run(tools, name, args=None, ctx=None):
        reg = ToolRegistry()
        reg.register_all(tools)
        return reg.execute(ctx or context, name, args or {})
    return _run
