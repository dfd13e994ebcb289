"""
Interpolation resolver.

Resolves ``{variable}`` and ``{nested.path}`` placeholders against a
template context. ``${...}`` is left alone: it is template-literal syntax
of the generated language and routinely appears verbatim in emitted code.

Unresolved placeholders fail closed. A single call reports every
unresolved placeholder it found, not just the first one.
"""

import re
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .errors import Diagnostic, InterpolationError, Result, UnresolvedPlaceholder
from .naming import naming_variants
from .types import REQUIRED_CONTEXT_KEYS, TemplateContext

_IDENT = r"[a-zA-Z_][a-zA-Z0-9_]*"

# Compiled patterns carry no cursor state; every call iterates afresh.
PLACEHOLDER_PATTERN = re.compile(r"(?<!\$)\{(" + _IDENT + r"(?:\." + _IDENT + r")*)\}")

_MISSING = object()


class ContextError(ValueError):
    """Raised when a context is built without its required naming keys."""

    pass


def resolve_path(context: Mapping[str, Any], path: str) -> Any:
    """
    Walk a dotted path through nested mappings.

    Returns the sentinel ``_MISSING`` when a segment is absent or the walk
    passes through ``None`` or a non-mapping value.
    """
    current: Any = context
    for segment in path.split("."):
        if current is None or not isinstance(current, Mapping):
            return _MISSING
        if segment not in current:
            return _MISSING
        current = current[segment]
    return current


def stringify(value: Any) -> Optional[str]:
    """Render a leaf context value, or None if it cannot be substituted."""
    if value is None or value is _MISSING:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (str, int, float)):
        return str(value)
    return None


def _position(text: str, offset: int) -> Tuple[int, int]:
    line = text.count("\n", 0, offset) + 1
    column = offset - (text.rfind("\n", 0, offset) + 1) + 1
    return line, column


def _substitute(text: str, context: TemplateContext) -> Tuple[str, List[UnresolvedPlaceholder]]:
    unresolved: List[UnresolvedPlaceholder] = []

    def replace(match):
        value = stringify(resolve_path(context, match.group(1)))
        if value is None:
            line, column = _position(text, match.start())
            unresolved.append(UnresolvedPlaceholder(match.group(1), line, column))
            return match.group(0)
        return value

    return PLACEHOLDER_PATTERN.sub(replace, text), unresolved


def interpolate(text: str, context: TemplateContext) -> Result[str, InterpolationError]:
    """
    Replace every placeholder in text with its context value.

    Args:
        text: String possibly containing placeholders
        context: Variable bindings

    Returns:
        Result holding the interpolated string, or an InterpolationError
        naming every unresolved placeholder
    """
    output, unresolved = _substitute(text, context)
    if unresolved:
        return Result.fail(InterpolationError(tuple(unresolved)))
    return Result.ok(output)


def interpolate_deep(value: Any, context: TemplateContext) -> Result[Any, InterpolationError]:
    """
    Interpolate every string inside nested mappings, lists and tuples.

    The shape of the input is preserved. The first failing string stops the
    walk and its error is returned.
    """
    if isinstance(value, str):
        return interpolate(value, context)
    if isinstance(value, Mapping):
        resolved: Dict[Any, Any] = {}
        for key, item in value.items():
            result = interpolate_deep(item, context)
            if not result.success:
                return result
            resolved[key] = result.value
        return Result.ok(resolved)
    if isinstance(value, (list, tuple)):
        items = []
        for item in value:
            result = interpolate_deep(item, context)
            if not result.success:
                return result
            items.append(result.value)
        return Result.ok(items if isinstance(value, list) else tuple(items))
    return Result.ok(value)


def has_interpolation(text: str) -> bool:
    """Check whether text contains at least one placeholder."""
    return PLACEHOLDER_PATTERN.search(text) is not None


def extract_variables(text: str) -> List[str]:
    """Placeholder names in order of first appearance, without duplicates."""
    seen: Dict[str, None] = {}
    for match in PLACEHOLDER_PATTERN.finditer(text):
        seen.setdefault(match.group(1), None)
    return list(seen)


class Interpolator:
    """
    Collecting interpolation helper used by the emitters.

    Instead of stopping at the first failure it records diagnostics for
    every unresolved placeholder and keeps going, so one emission reports
    all missing variables at once. Placeholders that fail stay verbatim in
    the returned text.
    """

    def __init__(self, context: TemplateContext):
        self.context = context
        self.diagnostics: List[Diagnostic] = []

    def text(self, value: Optional[str], location: Optional[str] = None) -> str:
        if value is None:
            return ""
        output, unresolved = _substitute(value, self.context)
        if unresolved:
            error = InterpolationError(tuple(unresolved))
            self.diagnostics.extend(error.to_diagnostics(location))
        return output

    def optional(self, value: Optional[str], location: Optional[str] = None) -> Optional[str]:
        return None if value is None else self.text(value, location)

    def deep(self, value: Any, location: Optional[str] = None) -> Any:
        """Collecting counterpart of ``interpolate_deep``."""
        if isinstance(value, str):
            return self.text(value, location)
        if isinstance(value, Mapping):
            return {
                key: self.deep(item, f"{location}.{key}" if location else str(key))
                for key, item in value.items()
            }
        if isinstance(value, (list, tuple)):
            items = [
                self.deep(item, f"{location}[{index}]" if location else f"[{index}]")
                for index, item in enumerate(value)
            ]
            return items if isinstance(value, list) else tuple(items)
        return value

    @property
    def failed(self) -> bool:
        return any(d.is_error for d in self.diagnostics)


def is_flag_set(context: TemplateContext, flag: Optional[str]) -> bool:
    """Evaluate a condition: a truthy lookup, dotted paths allowed."""
    if not flag:
        return True
    value = resolve_path(context, flag)
    if value is _MISSING:
        return False
    return bool(value)


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(item) for item in value)
    return value


def make_context(values: Optional[Mapping[str, Any]] = None, **kwargs) -> TemplateContext:
    """
    Build a read-only template context.

    Args:
        values: Base bindings
        **kwargs: Additional bindings, overriding values

    Returns:
        Immutable mapping (nested mappings are frozen too)

    Raises:
        ContextError: If a required naming key is missing
    """
    merged = dict(values or {})
    merged.update(kwargs)
    missing = [key for key in REQUIRED_CONTEXT_KEYS if key not in merged]
    if missing:
        raise ContextError(f"Missing required context keys: {', '.join(missing)}")
    return _freeze(merged)


def overlay_context(base: TemplateContext, overrides: Mapping[str, Any]) -> TemplateContext:
    """Context view where overrides shadow base keys. Neither input changes."""
    if not overrides:
        return base
    merged = dict(base)
    merged.update(overrides)
    return MappingProxyType(merged)


def create_context_from_name(name: str, scope: str = "@app", library_type: str = "library",
                             **extra) -> TemplateContext:
    """
    Build a full context from a domain name.

    ``create_context_from_name("user-profile", scope="@acme")`` fills the
    naming variants and derives packageName ``@acme/user-profile`` and
    projectName ``user-profile``.
    """
    variants = naming_variants(name)
    values: Dict[str, Any] = dict(variants)
    values["scope"] = scope
    values["libraryType"] = library_type
    values["packageName"] = f"{scope}/{variants['fileName']}"
    values["projectName"] = variants["fileName"]
    values.update(extra)
    return make_context(values)
