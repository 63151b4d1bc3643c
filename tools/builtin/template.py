"""
Template Tools
--------------
template ($placeholders over nested data), string_template ({{key}}
interpolation) and markdown (a small subset of Markdown rendered to HTML
or stripped to plain text).
"""

from typing import Any, Dict, List
from urllib.parse import urlsplit
import html
import re
import string

from infra.config import ToolSettings

from ..arguments import Arguments
from ..context import ExecutionContext
from ..registry import Category, Tool
from ..result import Result
from ..schema import bool_param, enum_param, object_param, object_schema, string_param

_PLACEHOLDER = re.compile(r"\{\{\s*(\w+)\s*\}\}")

_CODE_SPAN = re.compile(r"`([^`]+)`")
_BOLD = re.compile(r"\*\*(.+?)\*\*|__(.+?)__")
_ITALIC = re.compile(r"\*(.+?)\*|(?<!\w)_(.+?)_(?!\w)")
_LINK = re.compile(r"\[([^\]]+)\]\(([^)\s]+)\)")
_HEADING = re.compile(r"^(#{1,6})\s+(.*)$")
_LIST_ITEM = re.compile(r"^[-*]\s+(.*)$")

SAFE_LINK_SCHEMES = ("", "http", "https", "mailto")


class DataTemplate(string.Template):
    """$name / ${name} placeholders; braced names may be dotted paths (${user.emails.0})."""

    braceidpattern = r"(?a:[_a-z][_a-z0-9]*(?:\.[_a-z0-9]+)*)"


class _PathLookup:
    """Mapping view that resolves dotted placeholder names against nested data."""

    def __init__(self, data: Dict[str, Any], escape: bool):
        self.data = data
        self.escape = escape

    def __getitem__(self, name: str) -> str:
        value: Any = self.data
        for part in name.split("."):
            if isinstance(value, dict) and part in value:
                value = value[part]
            elif isinstance(value, list) and part.isdigit() and int(part) < len(value):
                value = value[int(part)]
            else:
                raise KeyError(name)

        if value is None:
            text = ""
        elif isinstance(value, bool):
            text = "true" if value else "false"
        else:
            text = str(value)
        return html.escape(text) if self.escape else text


def render_template(template: str, data: Dict[str, Any], escape: bool = False) -> str:
    """Render $-placeholders against data; raises KeyError or ValueError."""
    return DataTemplate(template).substitute(_PathLookup(data, escape))


def render_string_template(template: str, values: Dict[str, Any]):
    """Replace {{key}} placeholders; unknown keys are left as-is. Returns (text, count)."""
    replaced = 0

    def substitute(match: re.Match) -> str:
        nonlocal replaced
        key = match.group(1)
        if key not in values:
            return match.group(0)
        replaced += 1
        value = values[key]
        return "" if value is None else str(value)

    return _PLACEHOLDER.sub(substitute, template), replaced


def _render_link(match: re.Match) -> str:
    label = match.group(1)
    href = html.unescape(match.group(2))
    try:
        scheme = urlsplit(href).scheme.lower()
    except ValueError:
        return label
    if scheme not in SAFE_LINK_SCHEMES:
        return label
    return f'<a href="{html.escape(href, quote=True)}">{label}</a>'


def render_inline(text: str) -> str:
    text = html.escape(text, quote=False)
    text = _CODE_SPAN.sub(r"<code>\1</code>", text)
    text = _BOLD.sub(lambda m: f"<strong>{m.group(1) or m.group(2)}</strong>", text)
    text = _ITALIC.sub(lambda m: f"<em>{m.group(1) or m.group(2)}</em>", text)
    text = _LINK.sub(_render_link, text)
    return text


def markdown_to_html(markdown: str) -> str:
    out: List[str] = []
    in_list = False
    in_code = False

    def close_list():
        nonlocal in_list
        if in_list:
            out.append("</ul>")
            in_list = False

    for line in markdown.splitlines():
        stripped = line.strip()

        if stripped.startswith("```"):
            if in_code:
                out.append("</code></pre>")
            else:
                close_list()
                out.append("<pre><code>")
            in_code = not in_code
            continue
        if in_code:
            out.append(html.escape(line, quote=False))
            continue

        if not stripped:
            close_list()
            continue

        heading = _HEADING.match(stripped)
        if heading:
            close_list()
            level = len(heading.group(1))
            out.append(f"<h{level}>{render_inline(heading.group(2))}</h{level}>")
            continue

        item = _LIST_ITEM.match(stripped)
        if item:
            if not in_list:
                out.append("<ul>")
                in_list = True
            out.append(f"  <li>{render_inline(item.group(1))}</li>")
            continue

        close_list()
        out.append(f"<p>{render_inline(stripped)}</p>")

    close_list()
    if in_code:
        out.append("</code></pre>")

    return "\n".join(out)


def markdown_to_text(markdown: str) -> str:
    text = re.sub(r"(?s)```.*?```", "", markdown)
    text = re.sub(r"(?m)^#{1,6}\s+", "", text)
    text = re.sub(r"\*\*(.+?)\*\*|__(.+?)__", lambda m: m.group(1) or m.group(2), text)
    text = re.sub(r"\*(.+?)\*|(?<!\w)_(.+?)_(?!\w)", lambda m: m.group(1) or m.group(2), text)
    text = _CODE_SPAN.sub(r"\1", text)
    text = _LINK.sub(r"\1", text)
    text = re.sub(r"(?m)^[-*]\s+", "", text)
    return text.strip()


def _exec_template(context: ExecutionContext, raw: Dict[str, Any]) -> Result:
    args = Arguments(raw)
    template = args.get_str("template")
    data = args.get_dict("data")
    use_html = args.get_bool("html", False)

    try:
        rendered = render_template(template, data, escape=use_html)
    except KeyError as e:
        return Result.from_error(f"template execution error: no value for {e.args[0]!r}")
    except ValueError as e:
        return Result.from_error(f"template parse error: {e}")

    return Result.ok_with_meta(rendered, {"html": use_html})


def _exec_string_template(context: ExecutionContext, raw: Dict[str, Any]) -> Result:
    args = Arguments(raw)
    template = args.get_str("template")
    values = args.get_dict("values", {})

    text, replaced = render_string_template(template, values)
    return Result.ok_with_meta(text, {"replacements": replaced})


def _exec_markdown(context: ExecutionContext, raw: Dict[str, Any]) -> Result:
    args = Arguments(raw)
    markdown = args.get_str("markdown")
    fmt = args.get_choice("format", ["html", "text"], "html")

    rendered = markdown_to_text(markdown) if fmt == "text" else markdown_to_html(markdown)
    return Result.ok_with_meta(rendered, {"format": fmt})


def build_tools(settings: ToolSettings) -> List[Tool]:
    return [
        Tool(
            name="template",
            description="Render a $placeholder template against nested data (dotted paths in ${...})",
            category=Category.TEMPLATE,
            parameters=object_schema({
                "template": string_param("Template with $name or ${path.to.value} placeholders"),
                "data": object_param("Data to render into the template"),
                "html": bool_param("HTML-escape substituted values", default=False),
            }, required=["template", "data"]),
            executor=_exec_template,
        ),
        Tool(
            name="string_template",
            description="Simple string interpolation using {{key}} syntax",
            category=Category.TEMPLATE,
            parameters=object_schema({
                "template": string_param("Template string with {{key}} placeholders"),
                "values": object_param("Key-value pairs for interpolation"),
            }, required=["template"]),
            executor=_exec_string_template,
        ),
        Tool(
            name="markdown",
            description="Convert basic Markdown to HTML or plain text",
            category=Category.TEMPLATE,
            parameters=object_schema({
                "markdown": string_param("Markdown text to convert"),
                "format": enum_param("Output format", ["html", "text"], default="html"),
            }, required=["markdown"]),
            executor=_exec_markdown,
        ),
    ]
