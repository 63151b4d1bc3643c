"""
HTTP Tools
----------
fetch, post, webhook, encode_url, build_url, web_search (stub).

Requests go through httpx with a timeout derived from the execution
context. Transport failures are domain errors, not exceptions.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import quote, unquote, urlencode, urlsplit, urlunsplit, parse_qsl
import json
import logging

import httpx

from infra.config import ToolSettings

from ..arguments import Arguments
from ..context import ExecutionContext
from ..registry import Category, Tool, stub_tool
from ..result import Result
from ..schema import (
    enum_param,
    integer_param,
    number_param,
    object_param,
    object_schema,
    string_param,
)

logger = logging.getLogger("toolbridge.tools.http")

MAX_BODY_CHARS = 100_000
WEBHOOK_METHODS = ["POST", "PUT", "PATCH"]


@dataclass
class HTTPResponse:
    """Response summary returned to the caller."""
    status_code: int
    status: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: str = ""
    body_json: Any = None
    truncated: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        if self.body_json is None:
            del data["body_json"]
        return data


class HttpTools:
    """HTTP executors sharing settings and an optional injected transport."""

    def __init__(self, settings: ToolSettings, transport: Optional[httpx.BaseTransport] = None):
        self.settings = settings
        self.transport = transport

    def _client(self, timeout: float) -> httpx.Client:
        return httpx.Client(timeout=timeout, transport=self.transport, follow_redirects=True)

    def _timeout(self, context: ExecutionContext, args: Arguments) -> float:
        requested = args.get_float("timeout", self.settings.http_timeout)
        return context.timeout_or(requested)

    def request(
        self,
        context: ExecutionContext,
        method: str,
        url: str,
        timeout: float,
        headers: Optional[Dict[str, str]] = None,
        body: Optional[str] = None,
    ) -> Result:
        parts = urlsplit(url)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            return Result.from_error(f"invalid URL: {url}")

        context.check()

        kwargs: Dict[str, Any] = {"headers": headers or {}}
        if body is not None:
            kwargs["content"] = body

        try:
            with self._client(timeout) as client:
                response = client.request(method, url, **kwargs)
        except httpx.TimeoutException:
            return Result.from_error(TimeoutError(f"request timed out after {timeout:.1f}s"))
        except httpx.HTTPError as e:
            logger.warning(f"{method} {url} failed: {e}")
            return Result.from_error(ConnectionError(f"request failed: {e}"))

        return Result.ok_with_meta(
            _summarize(response).to_dict(),
            {"method": method, "url": str(response.url)},
        )

    # Executors

    def fetch(self, context: ExecutionContext, raw: Dict[str, Any]) -> Result:
        args = Arguments(raw)
        return self.request(
            context,
            "GET",
            args.get_str("url"),
            self._timeout(context, args),
            headers=_string_headers(args.get_dict("headers", {})),
        )

    def post(self, context: ExecutionContext, raw: Dict[str, Any]) -> Result:
        args = Arguments(raw)
        headers = {"Content-Type": args.get_str("content_type", "application/json")}
        headers.update(_string_headers(args.get_dict("headers", {})))
        return self.request(
            context,
            "POST",
            args.get_str("url"),
            self._timeout(context, args),
            headers=headers,
            body=args.get_str("body", None, allow_empty=True),
        )

    def webhook(self, context: ExecutionContext, raw: Dict[str, Any]) -> Result:
        args = Arguments(raw)
        url = args.get_str("url")
        method = args.get_choice("method", WEBHOOK_METHODS, "POST")
        payload = args.get_str("payload")

        try:
            json.loads(payload)
        except ValueError as e:
            return Result.from_error(ValueError(f"invalid JSON payload: {e}"))

        result = self.request(
            context,
            method,
            url,
            self._timeout(context, args),
            headers={"Content-Type": "application/json"},
            body=payload,
        )
        if result.success:
            result.metadata["webhook"] = url
        return result


def _string_headers(headers: Dict[str, Any]) -> Dict[str, str]:
    return {str(k): str(v) for k, v in headers.items()}


def _summarize(response: httpx.Response) -> HTTPResponse:
    text = response.text
    truncated = len(text) > MAX_BODY_CHARS

    body_json = None
    try:
        body_json = json.loads(text) if text else None
    except ValueError:
        pass

    return HTTPResponse(
        status_code=response.status_code,
        status=f"{response.status_code} {response.reason_phrase}".strip(),
        headers=dict(response.headers),
        body=text[:MAX_BODY_CHARS],
        body_json=body_json,
        truncated=truncated,
    )


# URL helpers

def _exec_encode_url(context: ExecutionContext, raw: Dict[str, Any]) -> Result:
    args = Arguments(raw)
    action = args.get_choice("action", ["encode", "decode"], "encode")
    text = args.get_str("text", allow_empty=True)

    if action == "encode":
        return Result.ok(quote(text, safe=""))
    return Result.ok(unquote(text))


def _exec_build_url(context: ExecutionContext, raw: Dict[str, Any]) -> Result:
    args = Arguments(raw)
    base = args.get_str("base")
    params = args.get_dict("params", {})

    parts = urlsplit(base)
    if not parts.scheme or not parts.netloc:
        return Result.from_error(f"invalid base URL: {base}")

    query = parse_qsl(parts.query, keep_blank_values=True)
    for key, value in params.items():
        if isinstance(value, list):
            query.extend((key, str(v)) for v in value)
        else:
            query.append((key, str(value)))

    return Result.ok(urlunsplit(parts._replace(query=urlencode(query))))


def build_tools(
    settings: ToolSettings,
    transport: Optional[httpx.BaseTransport] = None,
) -> List[Tool]:
    http = HttpTools(settings, transport)

    return [
        Tool(
            name="fetch",
            description="Fetch content from a URL via HTTP GET",
            category=Category.HTTP,
            parameters=object_schema({
                "url": string_param("URL to fetch"),
                "headers": object_param("Optional request headers"),
                "timeout": number_param("Timeout in seconds", minimum=0),
            }, required=["url"]),
            executor=http.fetch,
        ),
        Tool(
            name="post",
            description="Send an HTTP POST request",
            category=Category.HTTP,
            parameters=object_schema({
                "url": string_param("URL to post to"),
                "body": string_param("Request body"),
                "content_type": string_param("Content-Type header", default="application/json"),
                "headers": object_param("Optional additional headers"),
                "timeout": number_param("Timeout in seconds", minimum=0),
            }, required=["url"]),
            executor=http.post,
        ),
        Tool(
            name="webhook",
            description="Trigger a webhook with a JSON payload",
            category=Category.HTTP,
            parameters=object_schema({
                "url": string_param("Webhook URL"),
                "payload": string_param("JSON payload to send"),
                "method": enum_param("HTTP method", WEBHOOK_METHODS, default="POST"),
                "timeout": number_param("Timeout in seconds", minimum=0),
            }, required=["url", "payload"]),
            executor=http.webhook,
        ),
        Tool(
            name="encode_url",
            description="URL-encode or decode a string",
            category=Category.HTTP,
            parameters=object_schema({
                "action": enum_param("Action to perform", ["encode", "decode"], default="encode"),
                "text": string_param("Text to encode/decode"),
            }, required=["text"]),
            executor=_exec_encode_url,
        ),
        Tool(
            name="build_url",
            description="Build a URL from a base and query parameters",
            category=Category.HTTP,
            parameters=object_schema({
                "base": string_param("Base URL"),
                "params": object_param("Query parameters"),
            }, required=["base"]),
            executor=_exec_build_url,
        ),
        stub_tool(
            name="web_search",
            description="Search the web (requires a search API key)",
            category=Category.HTTP,
            parameters=object_schema({
                "query": string_param("Search query"),
                "num": integer_param("Number of results", minimum=1, maximum=50),
                "site": string_param("Limit to specific site"),
            }, required=["query"]),
            message="Web search requires a search API to be configured",
            requires_auth=True,
        ),
    ]
