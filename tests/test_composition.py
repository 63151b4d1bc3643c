"""
Composition Tests
-----------------
Subset and category views share the parent's Tool objects.
"""

import pytest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from tools.composition import create_by_categories, create_subset
from tools.registry import Category, Tool, ToolRegistry
from tools.result import Result


def _tool(name, category):
    return Tool(
        name=name,
        description=name,
        category=category,
        executor=lambda ctx, args: Result.ok(name),
    )


@pytest.fixture
def parent():
    reg = ToolRegistry(name="parent")
    reg.register_all([
        _tool("add", Category.COMPUTATION),
        _tool("fetch", Category.HTTP),
        _tool("mul", Category.COMPUTATION),
        _tool("email", Category.MESSAGING),
    ])
    return reg


class TestSubset:
    """create_subset."""

    def test_shares_tool_objects(self, parent):
        child = create_subset(["add", "fetch"], parent)

        assert child.names() == ["add", "fetch"]
        assert child.get("add") is parent.get("add")

    def test_unknown_names_skipped(self, parent):
        child = create_subset(["add", "nope"], parent)
        assert child.names() == ["add"]

    def test_duplicates_collapsed(self, parent):
        child = create_subset(["add", "add"], parent)
        assert len(child) == 1

    def test_argument_order(self, parent):
        assert create_subset(["mul", "add"], parent).names() == ["mul", "add"]

    def test_child_is_independent(self, parent):
        child = create_subset(["add"], parent)
        child.register(_tool("extra", Category.DATA))

        assert "extra" not in parent
        assert len(parent) == 4

    def test_inherits_validation_flag(self):
        parent = ToolRegistry(validate_arguments=False)
        assert create_subset([], parent).validate_arguments is False

    def test_method_form(self, parent):
        assert parent.subset("fetch").names() == ["fetch"]

    def test_dispatch_through_child(self, parent, context):
        child = create_subset(["mul"], parent)
        assert child.execute(context, "mul", {}).data == "mul"


class TestByCategories:
    """create_by_categories."""

    def test_single_category(self, parent):
        child = create_by_categories([Category.COMPUTATION], parent)
        assert child.names() == ["add", "mul"]

    def test_parent_order_kept(self, parent):
        child = create_by_categories(["messaging", "computation"], parent)
        assert child.names() == ["add", "mul", "email"]

    def test_alias_and_unknown(self, parent):
        child = create_by_categories(["business", "weather"], parent)
        assert child.names() == ["email"]

    def test_empty(self, parent):
        assert len(create_by_categories([], parent)) == 0

    def test_method_form(self, parent):
        assert parent.by_categories("http").names() == ["fetch"]


class TestDefaultRegistryViews:
    """Views over the builtin tools."""

    def test_computation_view(self, default_registry):
        child = create_by_categories([Category.COMPUTATION], default_registry)

        assert "calculate" in child
        assert "fetch" not in child
        assert all(t.category is Category.COMPUTATION for t in child)

    def test_subset_of_builtins(self, default_registry, context):
        child = create_subset(["calculate", "hash"], default_registry)

        result = child.execute(context, "calculate", {"expression": "2 + 3"})
        assert result.success is True
        assert result.data == 5
