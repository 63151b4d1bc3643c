"""
Execution Tools
---------------
shell runs a single command without a shell: the command line is split
with shlex and executed directly, so pipes, redirects and globbing are
not interpreted. run_code is a stub (it needs a sandbox).
"""

from pathlib import Path
from typing import Any, Dict, List
import logging
import shlex
import subprocess
import time

from infra.config import ToolSettings

from ..arguments import Arguments
from ..context import ExecutionContext
from ..registry import Category, Tool, stub_tool
from ..result import Result
from ..schema import enum_param, number_param, object_schema, string_param

logger = logging.getLogger("toolbridge.tools.execution")

MAX_OUTPUT_CHARS = 50_000


def _truncate(text: str) -> str:
    if len(text) <= MAX_OUTPUT_CHARS:
        return text
    return text[:MAX_OUTPUT_CHARS] + f"\n... (truncated, {len(text)} chars total)"


class ShellTool:
    """Executor for the shell tool, bound to the default timeout."""

    def __init__(self, settings: ToolSettings):
        self.default_timeout = settings.shell_timeout

    def __call__(self, context: ExecutionContext, raw: Dict[str, Any]) -> Result:
        args = Arguments(raw)
        command = args.get_str("command")
        cwd = args.get_str("dir", None)
        timeout = context.timeout_or(args.get_float("timeout", self.default_timeout))

        try:
            argv = shlex.split(command)
        except ValueError as e:
            return Result.from_error(f"cannot parse command: {e}")
        if not argv:
            return Result.from_error("command is empty")
        if cwd is not None and not Path(cwd).is_dir():
            return Result.from_error(FileNotFoundError(f"working directory not found: {cwd}"))

        context.check()
        logger.info(f"Running command: {argv[0]} ({len(argv) - 1} args, timeout={timeout:.1f}s)")

        start = time.perf_counter()
        try:
            completed = subprocess.run(
                argv,
                cwd=cwd,
                capture_output=True,
                text=True,
                timeout=timeout,
                shell=False,
            )
        except subprocess.TimeoutExpired:
            return Result(
                success=False,
                error=f"command timed out after {timeout:.1f}s",
                metadata={"timed_out": True, "error_category": "TIMEOUT_ERROR"},
            )
        except FileNotFoundError:
            return Result.from_error(FileNotFoundError(f"command not found: {argv[0]}"))

        return Result.ok_with_meta(
            {
                "stdout": _truncate(completed.stdout),
                "stderr": _truncate(completed.stderr),
                "exit_code": completed.returncode,
                "duration": round(time.perf_counter() - start, 3),
            },
            {"command": argv[0]},
        )


def build_tools(settings: ToolSettings) -> List[Tool]:
    return [
        Tool(
            name="shell",
            description="Run a single command (no shell features such as pipes or redirects)",
            category=Category.EXECUTION,
            parameters=object_schema({
                "command": string_param("Command line to execute"),
                "dir": string_param("Working directory"),
                "timeout": number_param("Timeout in seconds", minimum=0),
            }, required=["command"]),
            executor=ShellTool(settings),
        ),
        stub_tool(
            name="run_code",
            description="Execute a code snippet in a sandbox",
            category=Category.EXECUTION,
            parameters=object_schema({
                "language": enum_param("Programming language", ["python", "javascript", "go", "ruby", "php"]),
                "code": string_param("Code to execute"),
                "timeout": number_param("Timeout in seconds", minimum=0),
            }, required=["language", "code"]),
            message="Code execution requires a sandboxed runtime to be configured",
        ),
    ]
