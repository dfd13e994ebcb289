"""
Template registry for managing the available file definitions.

Definitions are keyed ``<libraryType>/<fileType>`` and compiled one at a
time or a whole library type at once.
"""

import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from ..logging_config import get_logger
from .core.compiler import TemplateCompiler, list_template_flags, list_template_variables
from .core.config import CompilerConfig
from .core.errors import CompilationError, Result
from .core.loader import parse_definition
from .core.resolver import is_flag_set, resolve_path, stringify
from .core.types import TemplateContext, TemplateDefinition

logger = get_logger(__name__)


class TemplateRegistryError(Exception):
    """Exception raised for template registry errors."""

    pass


@dataclass(frozen=True)
class TemplateEntry:
    """A registered definition and what it expects from the context."""

    definition: TemplateDefinition
    description: str = ""
    required_context: Tuple[str, ...] = ()
    optional_context: Tuple[str, ...] = ()

    @property
    def id(self) -> str:
        return self.definition.id


class TemplateRegistry:
    """Registry for managing template definitions."""

    def __init__(self):
        self._entries: Dict[str, TemplateEntry] = {}

    def register(self, definition: Union[TemplateDefinition, Mapping[str, Any]],
                 description: str = "", replace: bool = False) -> TemplateEntry:
        """
        Register a definition.

        Required context keys are the placeholders the definition uses;
        optional keys are its condition flags.

        Args:
            definition: TemplateDefinition or its dict form
            description: One-line summary for listings
            replace: Replace an existing registration with the same id

        Returns:
            The stored entry

        Raises:
            TemplateRegistryError: If the id is taken or not ``type/file``
        """
        if not isinstance(definition, TemplateDefinition):
            definition = parse_definition(definition)
        if "/" not in definition.id:
            raise TemplateRegistryError(
                f"Template id must be '<libraryType>/<fileType>': {definition.id}"
            )
        if definition.id in self._entries and not replace:
            raise TemplateRegistryError(f"Template already registered: {definition.id}")

        flags = list_template_flags(definition)
        entry = TemplateEntry(
            definition=definition,
            description=description or definition.meta.description.split("\n")[0],
            required_context=tuple(
                name for name in list_template_variables(definition) if name not in flags
            ),
            optional_context=tuple(flags),
        )
        self._entries[definition.id] = entry
        logger.debug("Registered template %s", definition.id)
        return entry

    def unregister(self, template_id: str):
        if self._entries.pop(template_id, None) is not None:
            logger.debug("Unregistered template %s", template_id)

    def get(self, template_id: str) -> TemplateEntry:
        """
        Get a registered entry.

        Raises:
            TemplateRegistryError: If the id is unknown
        """
        try:
            return self._entries[template_id]
        except KeyError:
            available = ", ".join(self.list_templates()) or "none"
            raise TemplateRegistryError(
                f"No template registered as: {template_id}. Available: {available}"
            ) from None

    def has(self, template_id: str) -> bool:
        return template_id in self._entries

    def list_templates(self, library_type: Optional[str] = None) -> List[str]:
        """Registered ids, optionally limited to one library type, sorted."""
        return sorted(
            template_id
            for template_id, entry in self._entries.items()
            if library_type is None or entry.definition.library_type == library_type
        )

    def list_library_types(self) -> List[str]:
        return sorted({entry.definition.library_type for entry in self._entries.values()})

    def validate_context(self, template_id: str, context: TemplateContext) -> List[str]:
        """
        Check a context against a template's expectations.

        Returns:
            List of problems; empty when every required key is bound
        """
        entry = self.get(template_id)
        problems = []
        for name in entry.required_context:
            if stringify(resolve_path(context, name)) is None:
                problems.append(f"Missing context value: {name}")
        return problems

    def active_flags(self, template_id: str, context: TemplateContext) -> List[str]:
        """Optional flags of a template that are set in the context."""
        return [
            flag for flag in self.get(template_id).optional_context
            if is_flag_set(context, flag)
        ]

    def compile(self, template_id: str, context: TemplateContext, fragments=None,
                config: Optional[CompilerConfig] = None) -> Result[str, CompilationError]:
        """Compile one registered template."""
        compiler = TemplateCompiler(fragments, config)
        return compiler.compile(self.get(template_id).definition, context)

    def compile_library(self, library_type: str, context: TemplateContext, fragments=None,
                        config: Optional[CompilerConfig] = None,
                        max_workers: Optional[int] = None,
                        file_types: Optional[Sequence[str]] = None) -> Dict[str, Result[str, CompilationError]]:
        """
        Compile the templates of a library type as one batch.

        Args:
            library_type: Prefix of the template ids (``contract``, ``infra``)
            context: Variable bindings shared by the batch
            fragments: Fragment registry (defaults to the global one)
            config: Formatting options
            max_workers: Thread pool size
            file_types: Only these file types (``errors``, ``layers``); all when None

        Returns:
            Mapping of template id to its Result, in id order

        Raises:
            TemplateRegistryError: If no template has that library type, or a
                requested file type is not registered for it
        """
        template_ids = self.list_templates(library_type)
        if not template_ids:
            raise TemplateRegistryError(f"No templates for library type: {library_type}")
        if file_types is not None:
            missing = [f"{library_type}/{name}" for name in file_types
                       if f"{library_type}/{name}" not in template_ids]
            if missing:
                raise TemplateRegistryError(f"No template registered as: {', '.join(missing)}")
            template_ids = [t for t in template_ids if t.split("/", 1)[1] in file_types]

        compiler = TemplateCompiler(fragments, config)
        results = compiler.compile_batch(
            [self._entries[template_id].definition for template_id in template_ids],
            context,
            max_workers=max_workers,
        )
        failed = sum(1 for result in results if not result.success)
        logger.info(
            "Compiled library %s: %d templates, %d failed",
            library_type,
            len(results),
            failed,
        )
        return dict(zip(template_ids, results))


# Global registry instance - created once
_global_registry: Optional[TemplateRegistry] = None
_global_lock = threading.Lock()


def get_template_registry() -> TemplateRegistry:
    """Get the global template registry with the built-in definitions."""
    global _global_registry
    with _global_lock:
        if _global_registry is None:
            registry = TemplateRegistry()
            _auto_register_templates(registry)
            _global_registry = registry
    return _global_registry


def _auto_register_templates(registry: TemplateRegistry):
    """Register the built-in definitions."""
    from .definitions import BUILTIN_DEFINITIONS

    for definition, description in BUILTIN_DEFINITIONS:
        registry.register(definition, description)


def create_template_registry(include_builtins: bool = True) -> TemplateRegistry:
    """Create a fresh registry, optionally with the built-in definitions."""
    registry = TemplateRegistry()
    if include_builtins:
        _auto_register_templates(registry)
    return registry
