#!/usr/bin/env python3
"""
Toolbridge - Tool Registry and Dispatch for LLM Function Calling
================================================================

Command-line entry point.

Usage:
    python main.py --list                       # Table of every tool
    python main.py --list --category data       # Tools of one category
    python main.py --export openai              # Declarations for a protocol
    python main.py --call calculate --args '{"expression": "15% of 200"}'
    python main.py --help                       # Show help

Exit status: 0 on success, 1 when the tool reported a failure,
2 on call-shape or usage errors.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Ensure project root is in path
sys.path.insert(0, str(Path(__file__).parent))

from rich.console import Console
from rich.table import Table

from core.errors import CallShapeError
from infra.config import load_settings
from infra.logging import configure_logging
from tools import (
    ExecutionContext,
    ToolCallHandler,
    create_default_registry,
    export_json,
)
from tools.registry import Category, ToolRegistry


# Setup rich console
console = Console()
err_console = Console(stderr=True)

EXIT_OK = 0
EXIT_TOOL_FAILURE = 1
EXIT_USAGE = 2


def print_tools(registry: ToolRegistry, category: Optional[str] = None) -> int:
    """Print a table of registered tools."""
    if category:
        try:
            tools = registry.list_by_category(Category.parse(category))
        except ValueError as e:
            err_console.print(f"[bold red]Error:[/bold red] {e}")
            return EXIT_USAGE
    else:
        tools = registry.list_tools()

    if not tools:
        err_console.print(f"[yellow]No tools found[/yellow] (category: {category})")
        return EXIT_OK

    table = Table(title=f"Tools ({len(tools)})")
    table.add_column("Name", style="bold cyan")
    table.add_column("Category", style="magenta")
    table.add_column("Description")
    table.add_column("Flags", style="dim")

    for tool in tools:
        flags = []
        if tool.is_stub:
            flags.append("stub")
        if tool.requires_auth:
            flags.append("auth")
        table.add_row(tool.name, tool.category.value, tool.description, ",".join(flags))

    console.print(table)
    return EXIT_OK


def call_tool(registry: ToolRegistry, name: str, raw_args: str) -> int:
    """Dispatch one call and print the serialized Result."""
    try:
        args = json.loads(raw_args) if raw_args else {}
    except json.JSONDecodeError as e:
        err_console.print(f"[bold red]Invalid --args JSON:[/bold red] {e}")
        return EXIT_USAGE

    handler = ToolCallHandler(registry)
    try:
        output = handler(ExecutionContext(), name, args)
    except CallShapeError as e:
        err_console.print(f"[bold red]Error:[/bold red] {e}")
        return EXIT_USAGE

    print(output)
    return EXIT_OK if json.loads(output).get("success") else EXIT_TOOL_FAILURE


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Toolbridge - tool registry and dispatch for LLM function calling"
    )

    action = parser.add_mutually_exclusive_group(required=True)
    action.add_argument(
        "--list",
        action="store_true",
        help="List registered tools"
    )
    action.add_argument(
        "--export",
        choices=["openai", "anthropic"],
        help="Print tool declarations for a function-calling protocol"
    )
    action.add_argument(
        "--call",
        metavar="NAME",
        help="Execute a tool by name"
    )

    parser.add_argument(
        "--category",
        help="Restrict --list to one category"
    )
    parser.add_argument(
        "--args",
        default="{}",
        help="JSON object of arguments for --call"
    )
    parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to configuration file (default: toolbridge.yaml)"
    )
    parser.add_argument(
        "--log-level", "-l",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    settings = load_settings(args.config)
    level = args.log_level or settings.log_level
    configure_logging(
        level=getattr(logging, level.upper(), logging.WARNING),
        log_dir=settings.log_dir,
        file=settings.log_dir is not None,
    )
    logger = logging.getLogger("toolbridge.main")

    try:
        registry = create_default_registry(settings)

        if args.list:
            return print_tools(registry, args.category)
        if args.export:
            print(export_json(registry, args.export))
            return EXIT_OK
        return call_tool(registry, args.call, args.args)

    except KeyboardInterrupt:
        err_console.print("\n[yellow]Interrupted by user[/yellow]")
        return 130
    except Exception as e:
        logger.exception("Fatal error")
        err_console.print(f"[bold red]Error:[/bold red] {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
