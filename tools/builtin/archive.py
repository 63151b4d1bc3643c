"""
Archive Tools
-------------
zip (create / extract / list) and pdf (stub).

Extraction refuses members that would land outside the destination
directory.
"""

from pathlib import Path
from typing import Any, Dict, List
import zipfile

from infra.config import ToolSettings

from ..arguments import Arguments
from ..context import ExecutionContext
from ..registry import Category, Tool, stub_tool
from ..result import Result
from ..schema import array_param, enum_param, object_schema, string_param

ZIP_ACTIONS = ["create", "extract", "list"]


def create_zip(archive: Path, sources: List[Path], context: ExecutionContext) -> List[str]:
    """Write sources (files or directories) into archive. Returns member names."""
    members = []
    archive.parent.mkdir(parents=True, exist_ok=True)

    with zipfile.ZipFile(archive, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for source in sources:
            if not source.exists():
                raise FileNotFoundError(f"File not found: {source}")

            if source.is_dir():
                for item in sorted(source.rglob("*")):
                    context.check()
                    if item.is_file():
                        name = item.relative_to(source.parent).as_posix()
                        zf.write(item, name)
                        members.append(name)
            else:
                zf.write(source, source.name)
                members.append(source.name)

    return members


def extract_zip(archive: Path, dest: Path, context: ExecutionContext) -> List[str]:
    """Extract archive into dest, rejecting path traversal."""
    root = dest.resolve()
    extracted = []

    with zipfile.ZipFile(archive) as zf:
        for member in zf.infolist():
            context.check()
            target = (root / member.filename).resolve()
            if target != root and root not in target.parents:
                raise PermissionError(f"illegal path in archive: {member.filename}")
            zf.extract(member, root)
            if not member.is_dir():
                extracted.append(member.filename)

    return extracted


def list_zip(archive: Path) -> List[Dict[str, Any]]:
    with zipfile.ZipFile(archive) as zf:
        return [
            {"name": info.filename, "size": info.file_size, "compressed": info.compress_size}
            for info in zf.infolist()
            if not info.is_dir()
        ]


def _exec_zip(context: ExecutionContext, raw: Dict[str, Any]) -> Result:
    args = Arguments(raw)
    action = args.get_choice("action", ZIP_ACTIONS)
    archive = Path(args.get_str("path")).expanduser()

    try:
        if action == "create":
            files = args.get_list("files")
            if not files:
                return Result.from_error("files array is required")
            members = create_zip(archive, [Path(str(f)).expanduser() for f in files], context)
            return Result.ok({"path": str(archive), "files": members, "file_count": len(members)})

        if not archive.exists():
            raise FileNotFoundError(f"Archive not found: {archive}")

        if action == "extract":
            dest = Path(args.get_str("dest", ".")).expanduser()
            extracted = extract_zip(archive, dest, context)
            return Result.ok({
                "destination": str(dest),
                "files": extracted,
                "file_count": len(extracted),
            })

        entries = list_zip(archive)
        return Result.ok({"files": entries, "file_count": len(entries)})

    except zipfile.BadZipFile as e:
        return Result.from_error(f"invalid zip archive: {e}")


def build_tools(settings: ToolSettings) -> List[Tool]:
    return [
        Tool(
            name="zip",
            description="Create, extract or list ZIP archives",
            category=Category.ARCHIVE,
            parameters=object_schema({
                "action": enum_param("Action to perform", ZIP_ACTIONS),
                "path": string_param("Path to ZIP file"),
                "files": array_param("Files or directories to add (for create)", string_param("Path")),
                "dest": string_param("Destination directory (for extract)", default="."),
            }, required=["action", "path"]),
            executor=_exec_zip,
        ),
        stub_tool(
            name="pdf",
            description="Create, merge, split or extract text from PDF files",
            category=Category.ARCHIVE,
            parameters=object_schema({
                "action": enum_param("Action to perform", ["create", "merge", "split", "extract_text"]),
                "input": string_param("Input PDF path"),
                "output": string_param("Output PDF path"),
                "text": string_param("Text content for PDF creation"),
            }, required=["action"]),
            message="PDF operations require a PDF library to be installed and configured",
        ),
    ]
