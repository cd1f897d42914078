"""Tests for argument sources and path extraction."""

from types import SimpleNamespace

import pytest

from saga_reactor.errors import TransformError
from saga_reactor.orchestration.workflow_engine.context import Context
from saga_reactor.orchestration.workflow_engine.sources import (
    Argument,
    FromInput,
    FromResult,
    Literal,
    extract_path,
    from_input,
    from_result,
    literal,
    resolve_arguments,
)


class TestExtractPath:
    """Tests for extract_path."""

    def test_no_path_returns_value(self):
        """Test no path returns value."""
        assert extract_path({"a": 1}, None) == {"a": 1}

    def test_single_key(self):
        """Test single key."""
        assert extract_path({"a": 1}, "a") == 1

    def test_dotted_string(self):
        """Test dotted string."""
        assert extract_path({"user": {"address": {"city": "Oslo"}}}, "user.address.city") == "Oslo"

    def test_list_of_keys(self):
        """Test list of keys."""
        value = {"items": [{"sku": "x"}, {"sku": "y"}]}
        assert extract_path(value, ["items", 1, "sku"]) == "y"

    def test_dotted_string_indexes_sequences(self):
        """Test dotted string indexes sequences."""
        assert extract_path({"items": ["a", "b"]}, "items.0") == "a"

    def test_integer_key(self):
        """Test integer key."""
        assert extract_path(["a", "b", "c"], 2) == "c"

    def test_out_of_range_index_is_none(self):
        """Test out of range index is none."""
        assert extract_path(["a"], 5) is None

    def test_attribute_access(self):
        """Test attribute access."""
        assert extract_path(SimpleNamespace(id=7), "id") == 7

    def test_callable_accessor(self):
        """Test callable accessor."""
        assert extract_path({"a": 2}, lambda value: value["a"] * 10) == 20

    def test_missing_key_is_none(self):
        """Test missing key is none."""
        assert extract_path({"a": 1}, "b") is None

    def test_none_short_circuits(self):
        """Test none short circuits."""
        assert extract_path(None, "a.b.c") is None
        assert extract_path({"a": None}, "a.b") is None

    def test_non_string_mapping_key(self):
        """Test non string mapping key."""
        assert extract_path({1: "one"}, 1) == "one"

    def test_string_value_has_no_named_members(self):
        """Test string value has no named members."""
        assert extract_path("hello", "upper") is None
        assert extract_path({"user": {"name": "ada"}}, "user.name.title") is None

    def test_object_methods_are_not_returned(self):
        """Test object methods are not returned."""
        assert extract_path(SimpleNamespace(id=7, save=lambda: None), "save") is None

    def test_string_value_still_indexes_by_position(self):
        """Test string value still indexes by position."""
        assert extract_path("hello", 0) == "h"


class TestSources:
    """Tests for FromInput, FromResult and Literal."""

    def test_from_input(self):
        """Test from input."""
        context = Context({"email": "a@b.com"})
        assert FromInput("email").resolve(context) == "a@b.com"

    def test_from_input_with_path(self):
        """Test from input with path."""
        context = Context({"user": {"email": "a@b.com"}})
        assert from_input("user", "email").resolve(context) == "a@b.com"

    def test_from_input_missing_is_none(self):
        """Test from input missing is none."""
        assert from_input("missing").resolve(Context()) is None

    def test_from_result(self):
        """Test from result."""
        context = Context()
        context.set_result("create_user", {"id": 42})
        assert from_result("create_user").resolve(context) == {"id": 42}
        assert from_result("create_user", "id").resolve(context) == 42

    def test_from_result_of_none_result_is_none(self):
        """Test from result of none result is none."""
        context = Context()
        context.set_result("step", None)
        assert from_result("step", "id").resolve(context) is None
        assert from_result("step").resolve(context) is None

    def test_from_result_missing_step_is_none(self):
        """Test from result missing step is none."""
        assert from_result("nowhere").resolve(Context()) is None

    def test_literal(self):
        """Test literal sources resolve to their value."""
        assert literal(99).resolve(Context()) == 99
        assert Literal(None).resolve(Context()) is None

    def test_step_dependency(self):
        """Test step dependency."""
        assert FromResult("a").step_dependency == "a"
        assert FromInput("a").step_dependency is None
        assert Literal("a").step_dependency is None

    def test_repr(self):
        """Test repr of each source kind."""
        assert repr(from_input("email")) == "input('email')"
        assert repr(from_result("a", "id")) == "result('a', 'id')"
        assert repr(literal(3)) == "value(3)"

    def test_sources_are_hashable_values(self):
        """Test sources are hashable values."""
        assert from_input("a", "b") == FromInput("a", "b")
        assert len({from_result("a"), from_result("a")}) == 1


class TestResolveArguments:
    """Tests for resolve_arguments."""

    def test_resolves_each_argument(self):
        """Test resolves each argument."""
        context = Context({"amount": "12"})
        context.set_result("quote", {"currency": "EUR"})
        arguments = {
            "amount": Argument(from_input("amount"), transform=int),
            "currency": Argument(from_result("quote", "currency")),
            "note": Argument(literal("n/a")),
        }
        assert resolve_arguments(arguments, context) == {
            "amount": 12,
            "currency": "EUR",
            "note": "n/a",
        }

    def test_transform_failure_raises_transform_error(self):
        """Test transform failure raises transform error."""
        context = Context({"first": "ok", "amount": "twelve"})
        arguments = {
            "first": Argument(from_input("first")),
            "amount": Argument(from_input("amount"), transform=int),
        }
        with pytest.raises(TransformError) as exc_info:
            resolve_arguments(arguments, context)

        error = exc_info.value
        assert error.argument == "amount"
        assert error.resolved == {"first": "ok"}
        assert isinstance(error.original_error, ValueError)

    def test_argument_resolve_applies_transform(self):
        """Test argument resolve applies transform."""
        argument = Argument(literal("abc"), transform=str.upper)
        assert argument.resolve(Context()) == "ABC"
