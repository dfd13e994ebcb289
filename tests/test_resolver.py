"""Tests for placeholder interpolation and context helpers."""

from enum import Enum

import pytest

from monogen.templates.core.errors import DiagnosticCode
from monogen.templates.core.resolver import (
    ContextError,
    Interpolator,
    create_context_from_name,
    extract_variables,
    has_interpolation,
    interpolate,
    interpolate_deep,
    is_flag_set,
    make_context,
    overlay_context,
)


class Color(Enum):
    RED = "red"


class TestInterpolate:
    """interpolate() on single strings."""

    def test_simple_substitution(self):
        result = interpolate("export class {className} {}", {"className": "User"})
        assert result.success
        assert result.value == "export class User {}"

    def test_nested_path(self):
        result = interpolate("retries={options.retries}", {"options": {"retries": 3}})
        assert result.value == "retries=3"

    def test_template_literal_is_untouched(self):
        result = interpolate("`${value}`", {"value": "X"})
        assert result.success
        assert result.value == "`${value}`"

    def test_placeholder_inside_template_literal_braces(self):
        """``${{id}}`` keeps the ``${`` and resolves the inner placeholder."""
        result = interpolate("`not found: ${{idField}}`", {"idField": "userId"})
        assert result.value == "`not found: ${userId}`"

    def test_reports_every_unresolved_placeholder(self):
        result = interpolate("{a} and {b}", {})
        assert not result.success
        assert result.error.variables == ["a", "b"]
        assert result.error.variable == "a"
        assert result.error.message == "Unknown variable(s): a, b"

    def test_duplicate_placeholder_reported_once_in_variables(self):
        result = interpolate("{a}{a}", {})
        assert result.error.variables == ["a"]
        assert len(result.error.placeholders) == 2

    def test_positions_are_one_based(self):
        result = interpolate("line1\n  {missing}", {})
        placeholder = result.error.placeholders[0]
        assert (placeholder.line, placeholder.column) == (2, 3)

    def test_booleans_render_lowercase(self):
        assert interpolate("{flag}", {"flag": True}).value == "true"
        assert interpolate("{flag}", {"flag": False}).value == "false"

    def test_enum_renders_its_value(self):
        assert interpolate("{color}", {"color": Color.RED}).value == "red"

    def test_non_scalar_value_is_unresolved(self):
        result = interpolate("{options}", {"options": {"retries": 3}})
        assert not result.success
        assert result.error.variables == ["options"]

    def test_path_through_missing_segment_is_unresolved(self):
        assert not interpolate("{a.b.c}", {"a": {"b": None}}).success

    def test_braces_that_are_not_placeholders_stay(self):
        text = "const x = { a: 1 }; const y = {}"
        assert interpolate(text, {}).value == text

    def test_deterministic(self):
        context = {"a": "1", "b": "2"}
        assert interpolate("{a}-{b}", context) == interpolate("{a}-{b}", context)


class TestInterpolateDeep:
    """interpolate_deep() over nested structures."""

    def test_preserves_shape(self):
        value = {"a": ["{x}", 1], "b": ("{x}",), "c": None}
        result = interpolate_deep(value, {"x": "X"})
        assert result.value == {"a": ["X", 1], "b": ("X",), "c": None}

    def test_does_not_modify_input(self):
        value = {"a": ["{x}"]}
        interpolate_deep(value, {"x": "X"})
        assert value == {"a": ["{x}"]}

    def test_failure_propagates(self):
        result = interpolate_deep({"a": {"b": "{missing}"}}, {})
        assert not result.success
        assert result.error.variables == ["missing"]


class TestTooling:
    def test_has_interpolation(self):
        assert has_interpolation("{className}Service")
        assert not has_interpolation("${className}")
        assert not has_interpolation("{ className }")

    def test_extract_variables_ordered_unique(self):
        text = "{b} {a} {b} {options.retries} ${skip}"
        assert extract_variables(text) == ["b", "a", "options.retries"]


class TestInterpolator:
    """The collecting helper used by emitters."""

    def test_collects_across_calls(self):
        interpolator = Interpolator({"a": "A"})
        assert interpolator.text("{a}{b}", "first") == "A{b}"
        interpolator.text("{c}", "second")
        assert [d.location for d in interpolator.diagnostics] == ["first", "second"]
        assert all(d.code == DiagnosticCode.UNRESOLVED_VARIABLE for d in interpolator.diagnostics)
        assert interpolator.failed

    def test_optional_none(self):
        interpolator = Interpolator({})
        assert interpolator.optional(None) is None
        assert not interpolator.failed

    def test_deep_locations(self):
        interpolator = Interpolator({})
        interpolator.deep({"name": "{missing}"}, "params")
        assert interpolator.diagnostics[0].location == "params.name"


class TestFlags:
    def test_empty_flag_is_set(self):
        assert is_flag_set({}, None)
        assert is_flag_set({}, "")

    def test_missing_or_false_flag(self):
        assert not is_flag_set({}, "includeCQRS")
        assert not is_flag_set({"includeCQRS": False}, "includeCQRS")

    def test_truthy_and_nested_flags(self):
        assert is_flag_set({"includeCQRS": True}, "includeCQRS")
        assert is_flag_set({"options": {"cqrs": 1}}, "options.cqrs")


class TestContexts:
    def test_make_context_requires_naming_keys(self):
        with pytest.raises(ContextError) as exc_info:
            make_context(className="User")
        assert "fileName" in str(exc_info.value)

    def test_make_context_is_read_only(self, context):
        with pytest.raises(TypeError):
            context["className"] = "Other"

    def test_create_context_from_name(self, context):
        assert context["className"] == "UserProfile"
        assert context["fileName"] == "user-profile"
        assert context["propertyName"] == "userProfile"
        assert context["constantName"] == "USER_PROFILE"
        assert context["scope"] == "@acme"
        assert context["packageName"] == "@acme/user-profile"
        assert context["projectName"] == "user-profile"
        assert context["libraryType"] == "library"

    def test_create_context_extra_values(self):
        context = create_context_from_name("order", includeCQRS=True, options={"retries": 2})
        assert context["includeCQRS"] is True
        assert context["options"]["retries"] == 2

    def test_overlay_context_params_win(self, context):
        overlaid = overlay_context(context, {"className": "Other", "extra": 1})
        assert overlaid["className"] == "Other"
        assert overlaid["extra"] == 1
        assert context["className"] == "UserProfile"
