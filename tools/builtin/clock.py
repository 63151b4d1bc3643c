"""
Time Tools
----------
now, parse_time, duration, schedule, holiday.
"""

from datetime import datetime, timedelta, timezone, tzinfo
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
import calendar
import re

from infra.config import ToolSettings

from ..arguments import Arguments
from ..context import ExecutionContext
from ..registry import Category, Tool
from ..result import Result
from ..schema import enum_param, object_schema, string_param

NOW_FORMATS = ["iso", "unix", "unixmilli", "date", "time", "datetime", "custom"]

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)\s*(ms|s|m|h|d|w)")
_DURATION_UNITS = {
    "ms": timedelta(milliseconds=1),
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
    "w": timedelta(weeks=1),
}


def resolve_timezone(name: Optional[str]) -> tzinfo:
    """'UTC', an IANA name, or ''/'local' for the host zone."""
    if not name or name.lower() == "local":
        return datetime.now().astimezone().tzinfo
    if name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"invalid timezone: {name}") from None


def parse_timestamp(text: str, tz: Optional[tzinfo] = None) -> datetime:
    """ISO-8601 (trailing Z allowed) or unix seconds. Naive values get tz or UTC."""
    text = text.strip()
    try:
        return datetime.fromtimestamp(float(text), tz=timezone.utc)
    except ValueError:
        pass

    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise ValueError(f"cannot parse time: {text}") from None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz or timezone.utc)
    return parsed


def parse_duration(text: str) -> timedelta:
    """'1h30m', '7d', '250ms', '1.5h'."""
    compact = text.replace(" ", "").lower()
    matches = list(_DURATION_PART.finditer(compact))
    if not matches or "".join(m.group(0) for m in matches) != compact:
        raise ValueError(f"invalid duration: {text}")
    return sum(
        (_DURATION_UNITS[m.group(2)] * float(m.group(1)) for m in matches),
        timedelta(),
    )


def format_duration(delta: timedelta) -> str:
    if delta < timedelta():
        return "-" + format_duration(-delta)

    total = int(delta.total_seconds())
    days, rest = divmod(total, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, seconds = divmod(rest, 60)

    parts = []
    if days:
        parts.append(f"{days}d")
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if seconds or not parts:
        parts.append(f"{seconds}s")
    return " ".join(parts)


def _describe(moment: datetime) -> Dict[str, Any]:
    return {
        "iso": moment.isoformat(),
        "unix": int(moment.timestamp()),
        "date": moment.strftime("%Y-%m-%d"),
        "time": moment.strftime("%H:%M:%S"),
        "weekday": moment.strftime("%A"),
        "timezone": str(moment.tzinfo),
    }


def _exec_now(context: ExecutionContext, raw: Dict[str, Any]) -> Result:
    args = Arguments(raw)
    fmt = args.get_choice("format", NOW_FORMATS, "iso")

    try:
        tz = resolve_timezone(args.get_str("timezone", ""))
    except ValueError as e:
        return Result.from_error(e)

    now = datetime.now(tz)

    if fmt == "unix":
        formatted = str(int(now.timestamp()))
    elif fmt == "unixmilli":
        formatted = str(int(now.timestamp() * 1000))
    elif fmt == "date":
        formatted = now.strftime("%Y-%m-%d")
    elif fmt == "time":
        formatted = now.strftime("%H:%M:%S")
    elif fmt == "datetime":
        formatted = now.strftime("%Y-%m-%d %H:%M:%S")
    elif fmt == "custom":
        formatted = now.strftime(args.get_str("custom", "%Y-%m-%dT%H:%M:%S%z"))
    else:
        formatted = now.isoformat()

    meta = _describe(now)
    meta["is_dst"] = bool(now.dst())
    return Result.ok_with_meta(formatted, meta)


def _exec_parse_time(context: ExecutionContext, raw: Dict[str, Any]) -> Result:
    args = Arguments(raw)
    text = args.get_str("time")
    custom = args.get_str("format", "")

    try:
        tz = resolve_timezone(args.get_str("timezone", "UTC"))
        if custom:
            parsed = datetime.strptime(text, custom)
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=tz)
        else:
            parsed = parse_timestamp(text, tz)
    except ValueError as e:
        return Result.from_error(e)

    return Result.ok(_describe(parsed.astimezone(tz)))


def _exec_duration(context: ExecutionContext, raw: Dict[str, Any]) -> Result:
    args = Arguments(raw)
    action = args.get_choice("action", ["between", "add", "subtract"])

    try:
        start = parse_timestamp(args.get_str("from"))

        if action == "between":
            delta = parse_timestamp(args.get_str("to")) - start
            seconds = delta.total_seconds()
            return Result.ok({
                "seconds": seconds,
                "minutes": seconds / 60,
                "hours": seconds / 3600,
                "days": seconds / 86400,
                "milliseconds": int(seconds * 1000),
                "human": format_duration(delta),
            })

        amount = parse_duration(args.get_str("amount"))
    except ValueError as e:
        return Result.from_error(e)

    moment = start + amount if action == "add" else start - amount
    return Result.ok(_describe(moment))


# Schedules

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

_RELATIVE = re.compile(r"in\s+(\d+)\s+([a-z]+)")

US_HOLIDAYS = {
    (1, 1): "New Year's Day",
    (7, 4): "Independence Day",
    (12, 25): "Christmas Day",
    (12, 31): "New Year's Eve",
}


def _weekday(name: str) -> int:
    """0 for Monday; 'mon' and 'monday' both work. -1 when unknown."""
    for index, day in enumerate(WEEKDAYS):
        if name in (day, day[:3]):
            return index
    return -1


def _add_months(moment: datetime, months: int) -> datetime:
    index = moment.month - 1 + months
    year, month = moment.year + index // 12, index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def next_occurrence(query: str, start: datetime) -> datetime:
    """
    Resolve a plain-English schedule against start:
    'in 3 hours', 'in 2 weeks', 'tomorrow', 'next friday', 'mon'.
    A weekday always means the next one, never today.
    """
    query = " ".join(query.lower().split())

    match = _RELATIVE.fullmatch(query)
    if match:
        amount, unit = int(match.group(1)), match.group(2).rstrip("s")
        if unit in ("second", "minute", "hour", "day", "week"):
            return start + timedelta(**{unit + "s": amount})
        if unit == "month":
            return _add_months(start, amount)
        if unit == "year":
            return _add_months(start, amount * 12)

    if query == "tomorrow":
        return start + timedelta(days=1)

    target = _weekday(query[len("next "):] if query.startswith("next ") else query)
    if target >= 0:
        ahead = (target - start.weekday()) % 7 or 7
        return start + timedelta(days=ahead)

    raise ValueError(f"could not parse schedule: {query}")


def _exec_schedule(context: ExecutionContext, raw: Dict[str, Any]) -> Result:
    args = Arguments(raw)

    try:
        tz = resolve_timezone(args.get_str("timezone", "UTC"))
        reference = args.get_str("from", "")
        start = parse_timestamp(reference, tz).astimezone(tz) if reference else datetime.now(tz)
        moment = next_occurrence(args.get_str("query"), start)
    except ValueError as e:
        return Result.from_error(e)

    described = _describe(moment)
    described["human"] = format_duration(moment - start) + " from now"
    return Result.ok(described)


def _exec_holiday(context: ExecutionContext, raw: Dict[str, Any]) -> Result:
    args = Arguments(raw)
    text = args.get_str("date")
    country = args.get_str("country", "US").upper()

    try:
        day = datetime.strptime(text, "%Y-%m-%d")
    except ValueError:
        return Result.from_error(ValueError(f"invalid date format: {text}"))

    # only the US calendar is known; other countries report weekends only
    holiday = US_HOLIDAYS.get((day.month, day.day), "") if country == "US" else ""
    weekend = day.weekday() >= 5

    return Result.ok({
        "date": text,
        "weekday": day.strftime("%A"),
        "is_weekend": weekend,
        "is_holiday": bool(holiday),
        "holiday": holiday,
        "is_business": not weekend and not holiday,
        "country": country,
    })


def build_tools(settings: ToolSettings) -> List[Tool]:
    return [
        Tool(
            name="now",
            description="Get the current date and time in a timezone and format",
            category=Category.TIME,
            parameters=object_schema({
                "timezone": string_param("Timezone (e.g., 'America/New_York', 'UTC', 'local')"),
                "format": enum_param("Output format", NOW_FORMATS, default="iso"),
                "custom": string_param("strftime format string (for custom format)"),
            }),
            executor=_exec_now,
        ),
        Tool(
            name="parse_time",
            description="Parse a time string (ISO-8601, unix seconds or a strftime format)",
            category=Category.TIME,
            parameters=object_schema({
                "time": string_param("Time string to parse"),
                "format": string_param("Expected strftime format (optional)"),
                "timezone": string_param("Timezone for the result", default="UTC"),
            }, required=["time"]),
            executor=_exec_parse_time,
        ),
        Tool(
            name="duration",
            description="Compute the duration between two times or shift a time by a duration",
            category=Category.TIME,
            parameters=object_schema({
                "action": enum_param("Action", ["between", "add", "subtract"]),
                "from": string_param("Start time (ISO-8601 or unix)"),
                "to": string_param("End time (for between)"),
                "amount": string_param("Duration to add/subtract (e.g., '1h30m', '24h', '7d')"),
            }, required=["action", "from"]),
            executor=_exec_duration,
        ),
        Tool(
            name="schedule",
            description="Resolve a natural-language schedule to its next occurrence",
            category=Category.TIME,
            parameters=object_schema({
                "query": string_param("Schedule (e.g., 'next Monday', 'in 2 hours', 'tomorrow')"),
                "from": string_param("Reference time (default: now)"),
                "timezone": string_param("Timezone", default="UTC"),
            }, required=["query"]),
            executor=_exec_schedule,
        ),
        Tool(
            name="holiday",
            description="Check whether a date is a holiday or a business day",
            category=Category.TIME,
            parameters=object_schema({
                "date": string_param("Date to check (YYYY-MM-DD)"),
                "country": string_param("Country code", default="US"),
            }, required=["date"]),
            executor=_exec_holiday,
        ),
    ]
