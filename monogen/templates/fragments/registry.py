"""
Fragment registry.

Maps fragment ids to reusable, parameterizable sub-templates. The registry
is populated up front; a batch compiles against a frozen snapshot shared
read-only by every compilation in it.
"""

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from ...logging_config import get_logger
from ..core.errors import Diagnostic, FragmentNotFoundError, Result
from ..core.loader import parse_content, parse_import
from ..core.resolver import Interpolator, overlay_context
from ..core.types import ContentDefinition, ImportDefinition, RawContent, TemplateContext

logger = get_logger(__name__)

RendererOutput = Union[str, ContentDefinition, Sequence[Union[str, ContentDefinition, Mapping[str, Any]]]]
Renderer = Callable[[Mapping[str, Any], TemplateContext], RendererOutput]


class RegistryError(Exception):
    """Exception raised for registry-related errors."""

    pass


def as_content_nodes(value: Any) -> Tuple[ContentDefinition, ...]:
    """Normalize fragment output (text, node, dict or a list of them) to nodes."""
    if isinstance(value, str):
        return (RawContent(value),)
    if isinstance(value, (list, tuple)):
        nodes: List[ContentDefinition] = []
        for item in value:
            nodes.extend(as_content_nodes(item))
        return tuple(nodes)
    return (parse_content(value, "fragment"),)


@dataclass(frozen=True)
class FragmentDefinition:
    """
    A reusable sub-template.

    Exactly one of ``content`` (static nodes, interpolated against the
    context overlaid with the params) or ``renderer`` (a callable receiving
    params and context) must be given.
    """

    id: str
    content: Tuple[ContentDefinition, ...] = ()
    renderer: Optional[Renderer] = None
    defaults: Mapping[str, Any] = field(default_factory=dict)
    required_params: Tuple[str, ...] = ()
    imports: Tuple[ImportDefinition, ...] = ()
    description: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FragmentDefinition":
        """Build a static fragment from authored data (``id``, ``content``, ...)."""
        fragment_id = data.get("id")
        if not isinstance(fragment_id, str):
            raise RegistryError("Fragment definition requires an 'id' string")
        return cls(
            id=fragment_id,
            content=as_content_nodes(data.get("content") or ()),
            defaults=dict(data.get("defaults") or {}),
            required_params=tuple(data.get("requiredParams") or ()),
            imports=tuple(
                parse_import(item, f"{fragment_id}.imports[{i}]")
                for i, item in enumerate(data.get("imports") or ())
            ),
            description=data.get("description", ""),
        )


@dataclass(frozen=True)
class FragmentExpansion:
    """A resolved fragment: its nodes and the context they are emitted in."""

    fragment_id: str
    nodes: Tuple[ContentDefinition, ...]
    context: TemplateContext
    imports: Tuple[ImportDefinition, ...] = ()
    missing_params: Tuple[str, ...] = ()
    diagnostics: Tuple[Diagnostic, ...] = ()


class FragmentRegistry:
    """Registry for managing available fragments."""

    def __init__(self):
        """Initialize empty registry."""
        self._fragments: Dict[str, FragmentDefinition] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> "FragmentRegistry":
        """Disallow further changes; safe to share across threads afterwards."""
        self._frozen = True
        return self

    def snapshot(self) -> "FragmentRegistry":
        """Frozen copy of the current fragments; this registry stays as it is."""
        copy = FragmentRegistry()
        copy._fragments = dict(self._fragments)
        return copy.freeze()

    def _check_mutable(self):
        if self._frozen:
            raise RegistryError("Fragment registry is frozen")

    def register(self, fragment: FragmentDefinition, replace: bool = False):
        """
        Register a fragment.

        Args:
            fragment: Fragment definition
            replace: Replace an existing fragment with the same id

        Raises:
            RegistryError: If the registry is frozen, the id is taken, or the
                fragment has neither (or both) content and renderer
        """
        self._check_mutable()
        if bool(fragment.content) == (fragment.renderer is not None):
            raise RegistryError(
                f"Fragment '{fragment.id}' needs exactly one of content or renderer"
            )
        if fragment.id in self._fragments and not replace:
            raise RegistryError(f"Fragment already registered: {fragment.id}")

        self._fragments[fragment.id] = fragment
        logger.debug("Registered fragment %s", fragment.id)

    def unregister(self, fragment_id: str):
        """Remove a fragment if present."""
        self._check_mutable()
        if self._fragments.pop(fragment_id, None) is not None:
            logger.debug("Unregistered fragment %s", fragment_id)

    def get(self, fragment_id: str) -> Optional[FragmentDefinition]:
        return self._fragments.get(fragment_id)

    def has(self, fragment_id: str) -> bool:
        return fragment_id in self._fragments

    def list_fragments(self) -> List[str]:
        """Get sorted list of registered fragment ids."""
        return sorted(self._fragments)

    def resolve(self, fragment_id: str, params: Optional[Mapping[str, Any]] = None,
                context: Optional[TemplateContext] = None,
                chain: Tuple[str, ...] = ()) -> Result[FragmentExpansion, FragmentNotFoundError]:
        """
        Resolve a fragment reference into content nodes.

        Args:
            fragment_id: Fragment to resolve
            params: Already-interpolated reference params
            context: Context of the referencing content
            chain: Fragment ids currently being expanded, outermost first

        Returns:
            Result with the expansion, or FragmentNotFoundError (a cycle when
            the id is already in the chain)
        """
        if fragment_id in chain:
            logger.debug("Fragment cycle detected: %s", " -> ".join(chain + (fragment_id,)))
            return Result.fail(FragmentNotFoundError(fragment_id, tuple(chain)))

        fragment = self._fragments.get(fragment_id)
        if fragment is None:
            return Result.fail(FragmentNotFoundError(fragment_id, tuple(chain)))

        # Defaults may reference the outer context ("{className}Id")
        interpolator = Interpolator(context or {})
        merged = {
            name: interpolator.deep(value, f"defaults.{name}")
            for name, value in fragment.defaults.items()
            if name not in (params or {})
        }
        merged.update(params or {})
        missing = tuple(name for name in fragment.required_params if name not in merged)
        scope = overlay_context(context or {}, merged)

        if missing:
            nodes: Tuple[ContentDefinition, ...] = ()
        elif fragment.renderer is not None:
            nodes = as_content_nodes(fragment.renderer(merged, scope))
        else:
            nodes = fragment.content

        return Result.ok(FragmentExpansion(
            fragment_id=fragment_id,
            nodes=nodes,
            context=scope,
            imports=fragment.imports,
            missing_params=missing,
            diagnostics=tuple(interpolator.diagnostics),
        ))


# Global registry instance - created once
_global_registry: Optional[FragmentRegistry] = None
_global_lock = threading.Lock()


def get_fragment_registry() -> FragmentRegistry:
    """Get the global fragment registry with the built-in fragments."""
    global _global_registry
    with _global_lock:
        if _global_registry is None:
            registry = FragmentRegistry()
            _auto_register_fragments(registry)
            _global_registry = registry
    return _global_registry


def _auto_register_fragments(registry: FragmentRegistry):
    """Register the built-in fragments."""
    from .builtin import BUILTIN_FRAGMENTS

    for fragment in BUILTIN_FRAGMENTS:
        registry.register(fragment)


def create_fragment_registry(include_builtins: bool = True) -> FragmentRegistry:
    """Create a fresh, unfrozen registry, optionally with the built-ins."""
    registry = FragmentRegistry()
    if include_builtins:
        _auto_register_fragments(registry)
    return registry
