"""
Computation Tool Tests
----------------------
calculate, regex, convert, stats.
"""

import math
import time

import pytest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from tools.builtin import computation
from tools.builtin.computation import CalculationError, calculate, convert, describe


@pytest.fixture
def tools(settings):
    return computation.build_tools(settings)


class TestCalculate:
    """Expression evaluation."""

    @pytest.mark.parametrize("expression,expected", [
        ("2 + 2", 4),
        ("15% of 200", 30),
        ("15%", 0.15),
        ("sqrt(16) + pow(2,3)", 12),
        ("2 ^ 10", 1024),
        ("2 ** 3 ** 2", 512),
        ("-(3 - 5) * 4", 8),
        ("7 // 2 + 7 % 2", 4),
        ("max(1, 9, 3) - min(4, 2)", 7),
        ("floor(2.7) + ceil(2.1)", 5),
        ("round(2.5)", 2),
        ("abs(-3.5)", 3.5),
        ("log10(1000)", 3),
        ("PI", math.pi),
    ])
    def test_values(self, expression, expected):
        assert calculate(expression) == pytest.approx(expected)

    @pytest.mark.parametrize("expression,message", [
        ("10 / 0", "division by zero"),
        ("10 % 0", "division by zero"),
        ("", "empty"),
        ("2 +", "invalid expression"),
        ("__import__('os')", "unsupported function"),
        ("x + 1", "unknown name"),
        ("'a' * 3", "unsupported literal"),
        ("2 ** 5000", "exponent too large"),
        ("[1, 2]", "unsupported expression"),
        ("sqrt(-1)", "sqrt"),
    ])
    def test_errors(self, expression, message):
        with pytest.raises(CalculationError, match=message):
            calculate(expression)

    def test_tool_success(self, run, tools):
        result = run(tools, "calculate", {"expression": "15% of 200"})

        assert result.success is True
        assert result.data == pytest.approx(30)
        assert result.metadata == {"expression": "15% of 200"}

    def test_tool_division_by_zero(self, run, tools):
        result = run(tools, "calculate", {"expression": "10 / 0"})

        assert result.success is False
        assert "division by zero" in result.error
        assert result.metadata["error_category"] == "VALIDATION_ERROR"

    def test_tool_overflow(self, run, tools):
        result = run(tools, "calculate", {"expression": "exp(1000)"})
        assert result.success is False

    @pytest.mark.parametrize("expression", [
        "((9**999)**999)**9",
        "((9**999)**999)**99",
        "(10**300) * (10**300)",
    ])
    def test_tool_huge_result_fails_fast(self, run, tools, expression):
        start = time.perf_counter()
        result = run(tools, "calculate", {"expression": expression})

        assert result.success is False
        assert time.perf_counter() - start < 1.0

    def test_complex_result_rejected(self):
        with pytest.raises(CalculationError, match="real number"):
            calculate("(-8) ** 0.5")

    def test_tool_missing_expression(self, run, tools):
        result = run(tools, "calculate", {})
        assert result.success is False
        assert "expression" in result.error


class TestRegex:

    @pytest.mark.parametrize("action,extra,expected", [
        ("match", {}, True),
        ("find", {}, "2024"),
        ("findall", {}, ["2024", "10", "18"]),
        ("replace", {"replace": "#"}, "date: #-#-#"),
        ("split", {}, ["date: ", "-", "-", ""]),
    ])
    def test_actions(self, run, tools, action, extra, expected):
        args = {"action": action, "pattern": r"\d+", "text": "date: 2024-10-18"}
        args.update(extra)

        result = run(tools, "regex", args)
        assert result.success is True
        assert result.data == expected
        assert result.metadata["action"] == action

    def test_extract_groups(self, run, tools):
        result = run(tools, "regex", {
            "action": "extract",
            "pattern": r"(?P<user>\w+)@(\w+)\.com",
            "text": "mail ada@example.com now",
        })

        assert result.data == {"1": "ada", "2": "example", "user": "ada"}

    def test_no_match(self, run, tools):
        result = run(tools, "regex", {"action": "find", "pattern": "z", "text": "abc"})
        assert result.data == ""

    def test_invalid_pattern(self, run, tools):
        result = run(tools, "regex", {"action": "match", "pattern": "(", "text": "abc"})
        assert result.success is False
        assert "invalid pattern" in result.error

    def test_unknown_action(self, run, tools):
        result = run(tools, "regex", {"action": "explode", "pattern": "a", "text": "a"})
        assert result.success is False


class TestConvert:

    @pytest.mark.parametrize("value,source,target,expected", [
        (1, "km", "m", 1000),
        (1, "mile", "km", 1.609344),
        (1, "lb", "kg", 0.453592),
        (2, "h", "min", 120),
        (1, "GB", "mb", 1024),
        (100, "c", "f", 212),
        (32, "fahrenheit", "celsius", 0),
        (0, "k", "c", -273.15),
    ])
    def test_units(self, value, source, target, expected):
        assert convert(value, source, target) == pytest.approx(expected)

    def test_mixed_dimensions_rejected(self):
        with pytest.raises(ValueError, match="cannot convert"):
            convert(1, "kg", "m")

    def test_tool(self, run, tools):
        result = run(tools, "convert", {"value": 5, "from": "km", "to": "m"})

        assert result.data == pytest.approx(5000)
        assert result.metadata["from"] == "km"

    def test_tool_error(self, run, tools):
        result = run(tools, "convert", {"value": 5, "from": "km", "to": "celsius"})
        assert result.success is False


class TestStats:

    def test_describe(self):
        summary = describe([2, 4, 4, 4, 5, 5, 7, 9])

        assert summary["count"] == 8
        assert summary["sum"] == 40
        assert summary["mean"] == 5
        assert summary["median"] == 4.5
        assert summary["min"] == 2
        assert summary["max"] == 9
        assert summary["std_dev"] == pytest.approx(2.0)

    def test_tool(self, run, tools):
        result = run(tools, "stats", {"numbers": [1, 2, 3]})
        assert result.success is True
        assert result.data["mean"] == 2

    def test_empty(self, run, tools):
        result = run(tools, "stats", {"numbers": []})
        assert result.success is False
        assert "empty" in result.error

    def test_non_numeric(self, run, tools):
        result = run(tools, "stats", {"numbers": [1, "two"]})
        assert result.success is False
