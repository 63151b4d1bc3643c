"""
File Tools
----------
read_file, write_file, list_dir, copy_file, move_file, delete_file,
file_exists, file_info, watch_file (stub), search_files.

Missing paths and permission problems surface as failed Results with
the matching error category.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List
import shutil

from infra.config import ToolSettings

from ..arguments import Arguments
from ..context import ExecutionContext
from ..registry import Category, Tool, stub_tool
from ..result import Result
from ..schema import bool_param, integer_param, object_schema, string_param

MAX_LIST_ENTRIES = 1000


def _entry(path: Path, root: Path) -> Dict[str, Any]:
    stat = path.stat()
    return {
        "name": path.name,
        "path": str(path.relative_to(root)),
        "is_dir": path.is_dir(),
        "size": stat.st_size if path.is_file() else 0,
    }


class FileTools:
    """File executors bound to the read limit from settings."""

    def __init__(self, settings: ToolSettings):
        self.max_read_bytes = settings.max_read_bytes

    def read_file(self, context: ExecutionContext, raw: Dict[str, Any]) -> Result:
        args = Arguments(raw)
        path = Path(args.get_str("path")).expanduser()
        offset = args.get_int("offset", 0)
        limit = args.get_int("limit", self.max_read_bytes)

        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        if not path.is_file():
            return Result.from_error(f"Not a file: {path}")

        limit = min(limit, self.max_read_bytes)
        size = path.stat().st_size

        with open(path, "rb") as f:
            f.seek(offset)
            content = f.read(limit)

        return Result.ok_with_meta(
            content.decode("utf-8", errors="replace"),
            {
                "path": str(path),
                "size": size,
                "offset": offset,
                "bytes_read": len(content),
                "truncated": offset + len(content) < size,
            },
        )

    def write_file(self, context: ExecutionContext, raw: Dict[str, Any]) -> Result:
        args = Arguments(raw)
        path = Path(args.get_str("path")).expanduser()
        content = args.get_str("content", allow_empty=True)
        append = args.get_bool("append", False)

        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "a" if append else "w", encoding="utf-8") as f:
            written = f.write(content)

        return Result.ok_with_meta(
            f"Wrote {written} characters to {path}",
            {"path": str(path), "bytes": len(content.encode("utf-8")), "append": append},
        )

    def list_dir(self, context: ExecutionContext, raw: Dict[str, Any]) -> Result:
        args = Arguments(raw)
        root = Path(args.get_str("path", ".")).expanduser()
        recursive = args.get_bool("recursive", False)
        pattern = args.get_str("pattern", "*")
        show_hidden = args.get_bool("show_hidden", False)

        if not root.exists():
            raise FileNotFoundError(f"Directory not found: {root}")
        if not root.is_dir():
            return Result.from_error(f"Not a directory: {root}")

        matches = root.rglob(pattern) if recursive else root.glob(pattern)

        entries = []
        truncated = False
        for item in sorted(matches):
            context.check()
            relative = item.relative_to(root)
            if not show_hidden and any(part.startswith(".") for part in relative.parts):
                continue
            if len(entries) >= MAX_LIST_ENTRIES:
                truncated = True
                break
            entries.append(_entry(item, root))

        return Result.ok_with_meta(
            entries,
            {"path": str(root), "count": len(entries), "truncated": truncated},
        )

    def file_exists(self, context: ExecutionContext, raw: Dict[str, Any]) -> Result:
        args = Arguments(raw)
        path = Path(args.get_str("path")).expanduser()
        exists = path.exists()
        return Result.ok_with_meta(
            exists,
            {"path": str(path), "is_dir": exists and path.is_dir()},
        )

    def file_info(self, context: ExecutionContext, raw: Dict[str, Any]) -> Result:
        args = Arguments(raw)
        path = Path(args.get_str("path")).expanduser()

        if not path.exists():
            raise FileNotFoundError(f"Path not found: {path}")

        stat = path.stat()
        return Result.ok({
            "name": path.name,
            "path": str(path.resolve()),
            "size": stat.st_size,
            "is_dir": path.is_dir(),
            "is_file": path.is_file(),
            "extension": path.suffix,
            "mode": oct(stat.st_mode & 0o777),
            "modified": datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc).isoformat(),
        })

    def copy_file(self, context: ExecutionContext, raw: Dict[str, Any]) -> Result:
        args = Arguments(raw)
        source = Path(args.get_str("source")).expanduser()
        dest = Path(args.get_str("dest")).expanduser()

        if not source.exists():
            raise FileNotFoundError(f"Source not found: {source}")

        if source.is_dir():
            shutil.copytree(source, dest, dirs_exist_ok=True)
        else:
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, dest)

        return Result.ok_with_meta(
            "copied successfully",
            {"source": str(source), "dest": str(dest)},
        )

    def move_file(self, context: ExecutionContext, raw: Dict[str, Any]) -> Result:
        args = Arguments(raw)
        source = Path(args.get_str("source")).expanduser()
        dest = Path(args.get_str("dest")).expanduser()

        if not source.exists():
            raise FileNotFoundError(f"Source not found: {source}")

        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(source), str(dest))

        return Result.ok_with_meta(
            "moved successfully",
            {"source": str(source), "dest": str(dest)},
        )

    def delete_file(self, context: ExecutionContext, raw: Dict[str, Any]) -> Result:
        args = Arguments(raw)
        path = Path(args.get_str("path")).expanduser()
        recursive = args.get_bool("recursive", False)

        if not path.exists() and not path.is_symlink():
            raise FileNotFoundError(f"Path not found: {path}")

        if path.is_dir() and not path.is_symlink():
            if recursive:
                shutil.rmtree(path)
            elif any(path.iterdir()):
                return Result.from_error(f"Directory not empty (set recursive to delete): {path}")
            else:
                path.rmdir()
        else:
            path.unlink()

        return Result.ok_with_meta(
            "deleted successfully",
            {"path": str(path), "recursive": recursive},
        )

    def search_files(self, context: ExecutionContext, raw: Dict[str, Any]) -> Result:
        args = Arguments(raw)
        root = Path(args.get_str("path", ".")).expanduser()
        pattern = args.get_str("pattern")
        needle = args.get_str("content", None)

        if not root.is_dir():
            raise FileNotFoundError(f"Directory not found: {root}")

        matches = []
        truncated = False
        for item in sorted(root.rglob(pattern)):
            context.check()
            if not item.is_file():
                continue
            if needle is not None:
                if item.stat().st_size > self.max_read_bytes:
                    continue
                try:
                    text = item.read_text(encoding="utf-8", errors="replace")
                except OSError:
                    continue
                if needle not in text:
                    continue
            if len(matches) >= MAX_LIST_ENTRIES:
                truncated = True
                break
            matches.append(_entry(item, root))

        return Result.ok_with_meta(
            matches,
            {"root": str(root), "pattern": pattern, "count": len(matches), "truncated": truncated},
        )


def build_tools(settings: ToolSettings) -> List[Tool]:
    files = FileTools(settings)

    return [
        Tool(
            name="read_file",
            description="Read contents of a file",
            category=Category.FILE,
            parameters=object_schema({
                "path": string_param("File path to read"),
                "offset": integer_param("Start reading from this byte offset", minimum=0),
                "limit": integer_param("Maximum bytes to read", minimum=0),
            }, required=["path"]),
            executor=files.read_file,
        ),
        Tool(
            name="write_file",
            description="Write content to a file, creating parent directories as needed",
            category=Category.FILE,
            parameters=object_schema({
                "path": string_param("File path to write"),
                "content": string_param("Content to write"),
                "append": bool_param("Append to file instead of overwriting", default=False),
            }, required=["path", "content"]),
            executor=files.write_file,
        ),
        Tool(
            name="list_dir",
            description="List contents of a directory",
            category=Category.FILE,
            parameters=object_schema({
                "path": string_param("Directory path to list", default="."),
                "recursive": bool_param("List recursively", default=False),
                "pattern": string_param("Glob pattern to filter (e.g., '*.txt')"),
                "show_hidden": bool_param("Include hidden files", default=False),
            }),
            executor=files.list_dir,
        ),
        Tool(
            name="copy_file",
            description="Copy a file or directory",
            category=Category.FILE,
            parameters=object_schema({
                "source": string_param("Source path"),
                "dest": string_param("Destination path"),
            }, required=["source", "dest"]),
            executor=files.copy_file,
        ),
        Tool(
            name="move_file",
            description="Move or rename a file or directory",
            category=Category.FILE,
            parameters=object_schema({
                "source": string_param("Source path"),
                "dest": string_param("Destination path"),
            }, required=["source", "dest"]),
            executor=files.move_file,
        ),
        Tool(
            name="delete_file",
            description="Delete a file or directory",
            category=Category.FILE,
            parameters=object_schema({
                "path": string_param("Path to delete"),
                "recursive": bool_param("Delete directories recursively", default=False),
            }, required=["path"]),
            executor=files.delete_file,
        ),
        Tool(
            name="file_exists",
            description="Check if a file or directory exists",
            category=Category.FILE,
            parameters=object_schema({
                "path": string_param("Path to check"),
            }, required=["path"]),
            executor=files.file_exists,
        ),
        Tool(
            name="file_info",
            description="Get size, type and modification time of a path",
            category=Category.FILE,
            parameters=object_schema({
                "path": string_param("Path to get info for"),
            }, required=["path"]),
            executor=files.file_info,
        ),
        stub_tool(
            name="watch_file",
            description="Watch for file changes (requires a filesystem event backend)",
            category=Category.FILE,
            parameters=object_schema({
                "path": string_param("Path to watch"),
                "recursive": bool_param("Watch recursively"),
            }, required=["path"]),
            message="Watching files requires a filesystem event backend for real-time notifications.",
        ),
        Tool(
            name="search_files",
            description="Search for files by name pattern, optionally containing some text",
            category=Category.FILE,
            parameters=object_schema({
                "path": string_param("Root path to search", default="."),
                "pattern": string_param("Glob pattern matched against file names (e.g., '*.py')"),
                "content": string_param("Only files containing this text"),
            }, required=["pattern"]),
            executor=files.search_files,
        ),
    ]
