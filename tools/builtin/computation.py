"""
Computation Tools
-----------------
calculate, regex, convert, stats.

Expressions are parsed with the ast module and evaluated over a whitelist
of node types; nothing reaches eval().
"""

from typing import Any, Callable, Dict, List
import ast
import math
import operator
import re
import statistics

from core.errors import ArgumentError
from infra.config import ToolSettings

from ..arguments import Arguments
from ..context import ExecutionContext
from ..registry import Category, Tool
from ..result import Result
from ..schema import (
    array_param,
    enum_param,
    number_param,
    object_schema,
    string_param,
)

# =============================================================================
# calculate
# =============================================================================

_PERCENT_OF = re.compile(r"(\d+(?:\.\d+)?)\s*%\s*of\s*(\d+(?:\.\d+)?)")
_PERCENT = re.compile(r"^(\d+(?:\.\d+)?)\s*%$")

_FUNCTIONS: Dict[str, Callable[..., float]] = {
    "sqrt": math.sqrt,
    "abs": abs,
    "floor": math.floor,
    "ceil": math.ceil,
    "round": round,
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
    "log": math.log,
    "log10": math.log10,
    "exp": math.exp,
    "pow": math.pow,
    "min": min,
    "max": max,
}

_CONSTANTS = {
    "pi": math.pi,
    "e": math.e,
}

_BINARY_OPS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
}

_UNARY_OPS = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}

MAX_EXPONENT = 1000


class CalculationError(ValueError):
    """Expression is malformed or cannot be evaluated."""


def calculate(expression: str) -> float:
    """
    Evaluate an arithmetic expression.

    Supports + - * / // % **, parentheses, the functions in _FUNCTIONS,
    the constants pi and e, "15% of 200" and a bare "15%".
    """
    expr = expression.strip().lower()
    if not expr:
        raise CalculationError("expression is empty")

    match = _PERCENT_OF.search(expr)
    if match:
        percent, value = float(match.group(1)), float(match.group(2))
        return value * (percent / 100)

    match = _PERCENT.match(expr)
    if match:
        return float(match.group(1)) / 100

    try:
        tree = ast.parse(expr.replace("^", "**"), mode="eval")
    except (SyntaxError, ValueError):
        raise CalculationError(f"invalid expression: {expression}") from None

    value = _evaluate(tree.body)
    if isinstance(value, complex):
        raise CalculationError("result is not a real number")
    if not math.isfinite(value):
        raise CalculationError("result is out of range")
    return float(value)


def _evaluate(node: ast.AST) -> float:
    if isinstance(node, ast.Constant):
        if isinstance(node.value, bool) or not isinstance(node.value, (int, float)):
            raise CalculationError(f"unsupported literal: {node.value!r}")
        # float arithmetic overflows cheaply instead of growing bignums
        return float(node.value)

    if isinstance(node, ast.Name):
        if node.id in _CONSTANTS:
            return _CONSTANTS[node.id]
        raise CalculationError(f"unknown name: {node.id}")

    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPS:
        return _UNARY_OPS[type(node.op)](_evaluate(node.operand))

    if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPS:
        left = _evaluate(node.left)
        right = _evaluate(node.right)
        if isinstance(node.op, (ast.Div, ast.FloorDiv, ast.Mod)) and right == 0:
            raise CalculationError("division by zero")
        if isinstance(node.op, ast.Pow) and abs(right) > MAX_EXPONENT:
            raise CalculationError(f"exponent too large (max {MAX_EXPONENT})")
        return _BINARY_OPS[type(node.op)](left, right)

    if isinstance(node, ast.Call) and isinstance(node.func, ast.Name):
        func = _FUNCTIONS.get(node.func.id)
        if func is None or node.keywords:
            raise CalculationError(f"unsupported function: {node.func.id}")
        args = [_evaluate(arg) for arg in node.args]
        try:
            return func(*args)
        except (TypeError, ValueError) as e:
            raise CalculationError(f"{node.func.id}: {e}") from None

    raise CalculationError(f"unsupported expression: {type(node).__name__}")


def _exec_calculate(context: ExecutionContext, raw: Dict[str, Any]) -> Result:
    args = Arguments(raw)
    expression = args.get_str("expression")

    try:
        value = calculate(expression)
    except (CalculationError, OverflowError) as e:
        return Result.from_error(e)

    return Result.ok_with_meta(value, {"expression": expression})


# =============================================================================
# regex
# =============================================================================

REGEX_ACTIONS = ["match", "find", "findall", "replace", "split", "extract"]


def _exec_regex(context: ExecutionContext, raw: Dict[str, Any]) -> Result:
    args = Arguments(raw)
    action = args.get_choice("action", REGEX_ACTIONS)
    pattern = args.get_str("pattern")
    text = args.get_str("text", allow_empty=True)

    try:
        compiled = re.compile(pattern)
    except re.error as e:
        return Result.from_error(f"invalid pattern: {e}")

    if action == "match":
        data: Any = compiled.search(text) is not None
    elif action == "find":
        found = compiled.search(text)
        data = found.group(0) if found else ""
    elif action == "findall":
        data = [m.group(0) for m in compiled.finditer(text)]
    elif action == "replace":
        data = compiled.sub(args.get_str("replace", "", allow_empty=True), text)
    elif action == "split":
        data = compiled.split(text)
    else:
        found = compiled.search(text)
        if found is None:
            data = {}
        else:
            data = {str(i): g for i, g in enumerate(found.groups(), start=1) if g is not None}
            data.update({k: v for k, v in found.groupdict().items() if v is not None})

    return Result.ok_with_meta(data, {"pattern": pattern, "action": action})


# =============================================================================
# convert
# =============================================================================

_UNITS: Dict[str, Dict[str, float]] = {
    "length": {
        "mm": 0.001, "cm": 0.01, "m": 1, "km": 1000,
        "in": 0.0254, "ft": 0.3048, "yd": 0.9144, "mi": 1609.344,
        "inch": 0.0254, "foot": 0.3048, "feet": 0.3048, "yard": 0.9144, "mile": 1609.344,
    },
    "weight": {
        "mg": 0.001, "g": 1, "kg": 1000, "t": 1_000_000,
        "oz": 28.3495, "lb": 453.592, "st": 6350.29,
        "ounce": 28.3495, "pound": 453.592, "stone": 6350.29,
    },
    "time": {
        "ms": 0.001, "s": 1, "sec": 1, "min": 60, "h": 3600, "hr": 3600, "hour": 3600,
        "d": 86400, "day": 86400, "w": 604800, "week": 604800,
        "mo": 2_592_000, "month": 2_592_000, "y": 31_536_000, "yr": 31_536_000, "year": 31_536_000,
    },
    "data": {
        "b": 1, "byte": 1, "kb": 1024, "mb": 1024 ** 2, "gb": 1024 ** 3,
        "tb": 1024 ** 4, "pb": 1024 ** 5,
        "bit": 0.125, "kbit": 128, "mbit": 131072, "gbit": 134217728,
    },
}

_TEMPERATURE_ALIASES = {
    "c": "c", "celsius": "c",
    "f": "f", "fahrenheit": "f",
    "k": "k", "kelvin": "k",
}


def convert_temperature(value: float, source: str, target: str) -> float:
    source = _TEMPERATURE_ALIASES[source]
    target = _TEMPERATURE_ALIASES[target]

    if source == "c":
        celsius = value
    elif source == "f":
        celsius = (value - 32) * 5 / 9
    else:
        celsius = value - 273.15

    if target == "c":
        return celsius
    if target == "f":
        return celsius * 9 / 5 + 32
    return celsius + 273.15


def convert(value: float, source: str, target: str) -> float:
    """Convert value between two units of the same dimension."""
    source, target = source.strip().lower(), target.strip().lower()

    if source in _TEMPERATURE_ALIASES and target in _TEMPERATURE_ALIASES:
        return convert_temperature(value, source, target)

    for table in _UNITS.values():
        if source in table and target in table:
            return value * table[source] / table[target]

    raise ValueError(f"cannot convert from {source} to {target}")


def _exec_convert(context: ExecutionContext, raw: Dict[str, Any]) -> Result:
    args = Arguments(raw)
    value = args.get_float("value")
    source = args.get_str("from")
    target = args.get_str("to")

    try:
        converted = convert(value, source, target)
    except ValueError as e:
        return Result.from_error(e)

    return Result.ok_with_meta(converted, {"from": source, "to": target, "value": value})


# =============================================================================
# stats
# =============================================================================

def describe(numbers: List[float]) -> Dict[str, float]:
    """Summary statistics (population standard deviation)."""
    if not numbers:
        raise ValueError("numbers must not be empty")
    return {
        "count": len(numbers),
        "sum": math.fsum(numbers),
        "mean": statistics.fmean(numbers),
        "median": statistics.median(numbers),
        "min": min(numbers),
        "max": max(numbers),
        "std_dev": statistics.pstdev(numbers),
    }


def _exec_stats(context: ExecutionContext, raw: Dict[str, Any]) -> Result:
    args = Arguments(raw)
    values = args.get_list("numbers")

    numbers = []
    for i, value in enumerate(values):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ArgumentError(f"numbers[{i}] must be a number", parameter="numbers")
        numbers.append(float(value))

    try:
        return Result.ok(describe(numbers))
    except ValueError as e:
        return Result.from_error(e)


# =============================================================================
# Factory
# =============================================================================

def build_tools(settings: ToolSettings) -> List[Tool]:
    return [
        Tool(
            name="calculate",
            description=(
                "Evaluate mathematical expressions including basic arithmetic, percentages, "
                "and common functions (sqrt, pow, abs, round, floor, ceil, sin, cos, log)"
            ),
            category=Category.COMPUTATION,
            parameters=object_schema({
                "expression": string_param(
                    "Mathematical expression to evaluate (e.g., '2 + 2', '15% of 200', 'sqrt(16)')"
                ),
            }, required=["expression"]),
            executor=_exec_calculate,
        ),
        Tool(
            name="regex",
            description="Match, extract, or replace text using regular expressions",
            category=Category.COMPUTATION,
            parameters=object_schema({
                "action": enum_param("Action to perform", REGEX_ACTIONS),
                "pattern": string_param("Regular expression pattern"),
                "text": string_param("Text to process"),
                "replace": string_param("Replacement string (for replace action)"),
            }, required=["action", "pattern", "text"]),
            executor=_exec_regex,
        ),
        Tool(
            name="convert",
            description="Convert between units (length, weight, temperature, time, data size)",
            category=Category.COMPUTATION,
            parameters=object_schema({
                "value": number_param("Value to convert"),
                "from": string_param("Source unit"),
                "to": string_param("Target unit"),
            }, required=["value", "from", "to"]),
            executor=_exec_convert,
        ),
        Tool(
            name="stats",
            description="Compute count, sum, mean, median, min, max and standard deviation",
            category=Category.COMPUTATION,
            parameters=object_schema({
                "numbers": array_param("Numbers to summarize", number_param("A number")),
            }, required=["numbers"]),
            executor=_exec_stats,
        ),
    ]
