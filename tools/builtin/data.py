"""
Data Tools
----------
json, csv, xml, table, diff.

Structural diff walks two JSON-like values and reports one entry per
difference:

    {"path": "user.age", "type": "changed", "left": 30, "right": 31}

Paths join object keys with "." and array indices as "[i]". Entry types
are added, removed, changed and type_mismatch.
"""

from typing import Any, Dict, List
from xml.sax.saxutils import escape as xml_escape
import csv
import html
import io
import json
import re
import xml.etree.ElementTree as ET

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from infra.config import ToolSettings

from ..arguments import Arguments
from ..context import ExecutionContext
from ..registry import Category, Tool
from ..result import Result
from ..schema import (
    array_param,
    bool_param,
    enum_param,
    object_param,
    object_schema,
    string_param,
)

# =============================================================================
# diff
# =============================================================================


def _kind(value: Any) -> str:
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


def _child(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def diff_values(left: Any, right: Any, path: str = "") -> List[Dict[str, Any]]:
    """Structural differences between left and right, in a stable order."""
    if left is None and right is None:
        return []
    if left is None or right is None:
        return [{"path": path, "type": "changed", "left": left, "right": right}]

    if _kind(left) != _kind(right):
        return [{"path": path, "type": "type_mismatch", "left": left, "right": right}]

    differences: List[Dict[str, Any]] = []

    if isinstance(left, dict):
        keys = list(left) + [k for k in right if k not in left]
        for key in keys:
            child = _child(path, str(key))
            if key not in left:
                differences.append({"path": child, "type": "added", "right": right[key]})
            elif key not in right:
                differences.append({"path": child, "type": "removed", "left": left[key]})
            else:
                differences.extend(diff_values(left[key], right[key], child))

    elif isinstance(left, list):
        for i in range(max(len(left), len(right))):
            child = f"{path}[{i}]"
            if i >= len(left):
                differences.append({"path": child, "type": "added", "right": right[i]})
            elif i >= len(right):
                differences.append({"path": child, "type": "removed", "left": left[i]})
            else:
                differences.extend(diff_values(left[i], right[i], child))

    elif left != right:
        differences.append({"path": path, "type": "changed", "left": left, "right": right})

    return differences


def _exec_diff(context: ExecutionContext, raw: Dict[str, Any]) -> Result:
    args = Arguments(raw)
    left = args.get_any("left")
    right = args.get_any("right")

    differences = diff_values(left, right)
    return Result.ok_with_meta(
        {"equal": not differences, "differences": differences},
        {"diff_count": len(differences)},
    )


# =============================================================================
# json
# =============================================================================

JSON_ACTIONS = ["parse", "format", "extract", "validate"]


def extract_path(value: Any, path: str) -> Any:
    """Follow a dotted path ('users.0.name') through objects and arrays."""
    current = value
    for part in path.split("."):
        if not part:
            continue
        if isinstance(current, dict):
            if part not in current:
                raise KeyError(f"key '{part}' not found")
            current = current[part]
        elif isinstance(current, list):
            try:
                index = int(part)
            except ValueError:
                raise ValueError(f"array index expected, got '{part}'") from None
            if not 0 <= index < len(current):
                raise IndexError(f"index {index} out of bounds")
            current = current[index]
        else:
            raise ValueError(f"cannot navigate into {_kind(current)} at '{part}'")
    return current


def _exec_json(context: ExecutionContext, raw: Dict[str, Any]) -> Result:
    args = Arguments(raw)
    action = args.get_choice("action", JSON_ACTIONS)

    if action == "format":
        value = args.get_any("object")
        pretty = args.get_bool("pretty", True)
        text = json.dumps(value, indent=2 if pretty else None, ensure_ascii=False)
        return Result.ok_with_meta(text, {"pretty": pretty})

    data = args.get_str("data", allow_empty=action == "validate")

    if action == "validate":
        try:
            json.loads(data)
        except ValueError as e:
            return Result.ok({"valid": False, "error": str(e)})
        return Result.ok({"valid": True})

    try:
        parsed = json.loads(data)
    except ValueError as e:
        return Result.from_error(f"JSON parse error: {e}")

    if action == "parse":
        return Result.ok_with_meta(parsed, {"type": _kind(parsed)})

    path = args.get_str("path")
    try:
        return Result.ok_with_meta(extract_path(parsed, path), {"path": path})
    except (LookupError, ValueError) as e:
        return Result.from_error(e)


# =============================================================================
# csv
# =============================================================================

def _exec_csv(context: ExecutionContext, raw: Dict[str, Any]) -> Result:
    args = Arguments(raw)
    action = args.get_choice("action", ["parse", "format"])
    delimiter = args.get_str("delimiter", ",")[:1] or ","

    if action == "parse":
        data = args.get_str("data")
        try:
            records = list(csv.reader(io.StringIO(data), delimiter=delimiter))
        except csv.Error as e:
            return Result.from_error(f"CSV parse error: {e}")

        if not records:
            return Result.ok_with_meta([], {"row_count": 0, "headers": []})

        headers = records[0]
        rows = [
            {headers[j]: value for j, value in enumerate(record) if j < len(headers)}
            for record in records[1:]
        ]
        return Result.ok_with_meta(rows, {"row_count": len(rows), "headers": headers})

    rows = args.get_list("rows")
    if not rows:
        return Result.from_error("rows must not be empty")

    headers = [str(h) for h in args.get_list("headers", [])]
    if not headers and isinstance(rows[0], dict):
        headers = sorted(rows[0])

    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=delimiter, lineterminator="\n")
    if headers:
        writer.writerow(headers)
    for row in rows:
        if isinstance(row, dict):
            writer.writerow(["" if row.get(h) is None else row.get(h) for h in headers])
        elif isinstance(row, list):
            writer.writerow(row)
        else:
            writer.writerow([row])

    return Result.ok_with_meta(buffer.getvalue(), {"row_count": len(rows)})


# =============================================================================
# xml
# =============================================================================

_XML_NAME = re.compile(r"^[A-Za-z_][\w.-]*$")


def xml_to_value(element: ET.Element) -> Any:
    """
    Convert an element to JSON-like data.

    Children become keys (repeated tags collect into a list), attributes
    become "@name" keys, and a leaf element becomes its stripped text.
    """
    children = list(element)
    text = (element.text or "").strip()

    if not children and not element.attrib:
        return text

    value: Dict[str, Any] = {f"@{k}": v for k, v in element.attrib.items()}
    for child in children:
        converted = xml_to_value(child)
        if child.tag not in value:
            value[child.tag] = converted
        elif isinstance(value[child.tag], list):
            value[child.tag].append(converted)
        else:
            value[child.tag] = [value[child.tag], converted]

    if text:
        value["#text"] = text
    return value


def parse_xml(data: str) -> Dict[str, Any]:
    root = ET.fromstring(data)
    return {root.tag: xml_to_value(root)}


def _xml_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return xml_escape(str(value))


def format_xml(value: Any, name: str, depth: int = 0) -> str:
    if not _XML_NAME.match(name):
        raise ValueError(f"invalid XML element name: {name!r}")

    indent = "  " * depth
    if isinstance(value, list):
        return "".join(format_xml(item, name, depth) for item in value)
    if isinstance(value, dict):
        inner = "".join(format_xml(v, str(k), depth + 1) for k, v in value.items())
        return f"{indent}<{name}>\n{inner}{indent}</{name}>\n"
    return f"{indent}<{name}>{_xml_text(value)}</{name}>\n"


def _exec_xml(context: ExecutionContext, raw: Dict[str, Any]) -> Result:
    args = Arguments(raw)
    action = args.get_choice("action", ["parse", "format"])

    if action == "parse":
        data = args.get_str("data")
        try:
            return Result.ok(parse_xml(data))
        except ET.ParseError as e:
            return Result.from_error(f"XML parse error: {e}")

    value = args.get_any("object")
    root = args.get_str("root", "root")
    return Result.ok_with_meta(format_xml(value, root), {"root": root})


# =============================================================================
# table
# =============================================================================

TABLE_FORMATS = ["text", "markdown", "html"]
MAX_TEXT_TABLE_WIDTH = 500


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def table_rows(data: List[Any], headers: List[str]):
    """Normalize objects or arrays into (headers, rows of strings)."""
    if not headers and isinstance(data[0], dict):
        headers = sorted(data[0])

    rows = []
    for row in data:
        if isinstance(row, dict):
            rows.append([_cell(row.get(h)) for h in headers])
        elif isinstance(row, list):
            rows.append([_cell(v) for v in row])
        else:
            rows.append([_cell(row)])
    return headers, rows


def format_markdown_table(headers: List[str], rows: List[List[str]]) -> str:
    def line(cells):
        return "| " + " | ".join(c.replace("|", "\\|") for c in cells) + " |\n"

    out = ""
    if headers:
        out += line(headers) + line(["---"] * len(headers))
    return out + "".join(line(row) for row in rows)


def format_html_table(headers: List[str], rows: List[List[str]]) -> str:
    out = ["<table>"]
    if headers:
        out.append("  <thead><tr>" + "".join(f"<th>{html.escape(h)}</th>" for h in headers) + "</tr></thead>")
    out.append("  <tbody>")
    for row in rows:
        out.append("    <tr>" + "".join(f"<td>{html.escape(c)}</td>" for c in row) + "</tr>")
    out.append("  </tbody>")
    out.append("</table>")
    return "\n".join(out)


def format_text_table(headers: List[str], rows: List[List[str]]) -> str:
    width = max([len(headers)] + [len(row) for row in rows])
    table = Table(box=box.SIMPLE_HEAD, show_header=bool(headers), show_edge=False, pad_edge=False)
    for i in range(width):
        table.add_column(Text(headers[i]) if i < len(headers) else "", no_wrap=True)
    for row in rows:
        cells = (row + [""] * width)[:width]
        table.add_row(*(Text(c) for c in cells))

    console = Console(file=io.StringIO(), width=MAX_TEXT_TABLE_WIDTH, color_system=None, highlight=False)
    console.print(table)
    lines = [line.rstrip() for line in console.file.getvalue().splitlines()]
    return "\n".join(lines).strip("\n") + "\n"


def _exec_table(context: ExecutionContext, raw: Dict[str, Any]) -> Result:
    args = Arguments(raw)
    data = args.get_list("data")
    if not data:
        return Result.from_error("data must not be empty")
    fmt = args.get_choice("format", TABLE_FORMATS, "text")

    headers, rows = table_rows(data, [_cell(h) for h in args.get_list("headers", [])])

    if fmt == "markdown":
        output = format_markdown_table(headers, rows)
    elif fmt == "html":
        output = format_html_table(headers, rows)
    else:
        output = format_text_table(headers, rows)

    return Result.ok_with_meta(output, {"format": fmt, "row_count": len(rows)})


def build_tools(settings: ToolSettings) -> List[Tool]:
    return [
        Tool(
            name="json",
            description="Parse and generate JSON data with path extraction and validation",
            category=Category.DATA,
            parameters=object_schema({
                "action": enum_param("Action to perform", JSON_ACTIONS),
                "data": string_param("JSON string to parse or validate"),
                "object": object_param("Object to format as JSON"),
                "path": string_param("Dotted path (e.g., 'users.0.name')"),
                "pretty": bool_param("Pretty print output", default=True),
            }, required=["action"]),
            executor=_exec_json,
        ),
        Tool(
            name="csv",
            description="Parse CSV text into rows or format rows as CSV",
            category=Category.DATA,
            parameters=object_schema({
                "action": enum_param("Action to perform", ["parse", "format"]),
                "data": string_param("CSV string to parse (for parse action)"),
                "rows": array_param("Array of arrays or objects to format as CSV"),
                "headers": array_param("Column headers (optional)", string_param("Header")),
                "delimiter": string_param("Field delimiter", default=","),
            }, required=["action"]),
            executor=_exec_csv,
        ),
        Tool(
            name="xml",
            description="Parse XML into objects or format an object as XML",
            category=Category.DATA,
            parameters=object_schema({
                "action": enum_param("Action to perform", ["parse", "format"]),
                "data": string_param("XML string to parse"),
                "object": object_param("Object to format as XML"),
                "root": string_param("Root element name", default="root"),
            }, required=["action"]),
            executor=_exec_xml,
        ),
        Tool(
            name="table",
            description="Format rows as a text, markdown or HTML table",
            category=Category.DATA,
            parameters=object_schema({
                "data": array_param("Array of objects or arrays"),
                "headers": array_param("Column headers", string_param("Header")),
                "format": enum_param("Output format", TABLE_FORMATS, default="text"),
            }, required=["data"]),
            executor=_exec_table,
        ),
        Tool(
            name="diff",
            description="Compare two data structures and show differences",
            category=Category.DATA,
            parameters=object_schema({
                "left": object_param("First value to compare"),
                "right": object_param("Second value to compare"),
            }, required=["left", "right"]),
            executor=_exec_diff,
        ),
    ]
