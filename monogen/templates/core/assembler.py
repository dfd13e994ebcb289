"""
Section assembler and import resolution.

Decides which sections and imports of a definition survive for a given
context and in what order, and merges the surviving imports per source.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

from ...logging_config import get_logger
from .errors import Diagnostic
from .resolver import Interpolator, is_flag_set
from .types import ConditionalContent, ImportDefinition, SectionDefinition, TemplateContext

logger = get_logger(__name__)


@dataclass(frozen=True)
class AssembledSection:
    """A surviving section and its IR location (``sections[2]``)."""

    section: SectionDefinition
    location: str


@dataclass(frozen=True)
class LocatedImport:
    definition: ImportDefinition
    location: str


@dataclass(frozen=True)
class MergedImport:
    """One emitted import line."""

    source: str
    items: Tuple[str, ...]
    type_only: bool = False


def assemble(sections: Sequence[SectionDefinition],
             conditionals: Mapping[str, ConditionalContent],
             context: TemplateContext) -> List[AssembledSection]:
    """
    Select and order the sections to emit.

    Sections keep their declaration order. Active conditional blocks follow,
    in the declaration order of the conditionals mapping. A section or block
    whose condition is absent or falsy in the context is dropped entirely.

    Args:
        sections: Top-level sections
        conditionals: Flag name to conditional block
        context: Variable bindings

    Returns:
        Surviving sections with their IR locations
    """
    assembled = [
        AssembledSection(section, f"sections[{index}]")
        for index, section in enumerate(sections)
        if is_flag_set(context, section.condition)
    ]

    for flag, block in conditionals.items():
        if not is_flag_set(context, flag):
            logger.debug("Dropping conditional block '%s'", flag)
            continue
        assembled.extend(
            AssembledSection(section, f"conditionals.{flag}.sections[{index}]")
            for index, section in enumerate(block.sections)
            if is_flag_set(context, section.condition)
        )
    return assembled


def collect_imports(imports: Sequence[ImportDefinition],
                    conditionals: Mapping[str, ConditionalContent],
                    assembled: Sequence[AssembledSection],
                    context: TemplateContext) -> List[LocatedImport]:
    """
    Gather the active imports in a stable order.

    Definition imports come first, then imports of active conditional blocks,
    then imports of the surviving sections.
    """
    located = [
        LocatedImport(imp, f"imports[{index}]")
        for index, imp in enumerate(imports)
        if is_flag_set(context, imp.condition)
    ]
    for flag, block in conditionals.items():
        if is_flag_set(context, flag):
            located.extend(
                LocatedImport(imp, f"conditionals.{flag}.imports[{index}]")
                for index, imp in enumerate(block.imports)
                if is_flag_set(context, imp.condition)
            )
    for item in assembled:
        located.extend(
            LocatedImport(imp, f"{item.location}.imports[{index}]")
            for index, imp in enumerate(item.section.imports)
            if is_flag_set(context, imp.condition)
        )
    return located


def interpolate_imports(located: Iterable[LocatedImport],
                        context: TemplateContext) -> Tuple[List[ImportDefinition], List[Diagnostic]]:
    """Resolve placeholders in import sources and items."""
    interpolator = Interpolator(context)
    resolved = []
    for entry in located:
        imp = entry.definition
        resolved.append(ImportDefinition(
            source=interpolator.text(imp.source, f"{entry.location}.from"),
            items=tuple(
                interpolator.text(item, f"{entry.location}.items[{index}]")
                for index, item in enumerate(imp.items)
            ),
            type_only=imp.type_only,
        ))
    return resolved, interpolator.diagnostics


def merge_imports(imports: Iterable[ImportDefinition]) -> List[MergedImport]:
    """
    Deduplicate imports by (source, item) and merge per source.

    Sources keep their first-appearance order and so do items within a
    source. An item imported as a value anywhere is a value import; the
    remaining type-only items of a source go on a separate ``import type``
    line after the value line.
    """
    order: List[str] = []
    values: Dict[str, Dict[str, None]] = {}
    types: Dict[str, Dict[str, None]] = {}

    for imp in imports:
        if imp.source not in values:
            order.append(imp.source)
            values[imp.source] = {}
            types[imp.source] = {}
        target = types[imp.source] if imp.type_only else values[imp.source]
        for item in imp.items:
            target.setdefault(item, None)

    merged: List[MergedImport] = []
    for source in order:
        value_items = tuple(values[source])
        type_items = tuple(item for item in types[source] if item not in values[source])
        if value_items:
            merged.append(MergedImport(source, value_items))
        if type_items:
            merged.append(MergedImport(source, type_items, type_only=True))
        if not value_items and not type_items:
            merged.append(MergedImport(source, ()))
    return merged
