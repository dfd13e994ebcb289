"""
Template compiler.

Orchestrates one compilation: resolves imports, assembles sections,
dispatches every content node to its emitter, renders the file header and
joins everything with deterministic whitespace. Diagnostics from every
stage are collected into a single CompilationError; nothing fails fast.
"""

import dataclasses
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from ...logging_config import get_logger
from .assembler import assemble, collect_imports, interpolate_imports, merge_imports
from .config import DEFAULT_CONFIG, CompilerConfig
from .errors import CompilationError, Diagnostic, DiagnosticCode, Result, Severity
from .loader import DefinitionError, parse_definition
from .resolver import Interpolator, extract_variables
from .templates import TemplateEngine, TemplateError, get_default_template_engine
from .types import (
    FragmentReference,
    ImportDefinition,
    SectionDefinition,
    TemplateContext,
    TemplateDefinition,
    section_count,
)

logger = get_logger(__name__)

DefinitionInput = Union[TemplateDefinition, Mapping[str, Any]]


def format_code(code: str, config: CompilerConfig = DEFAULT_CONFIG) -> str:
    """
    Normalize whitespace of emitted code.

    Strips trailing whitespace, collapses runs of blank lines to
    ``max_blank_lines``, drops leading and trailing blank lines and applies
    the configured line ending.

    Args:
        code: Raw emitted code
        config: Formatting options

    Returns:
        Formatted code
    """
    formatted_lines = []
    blank_count = 0

    for line in code.split("\n"):
        stripped = line.rstrip()
        if not stripped:
            blank_count += 1
            if blank_count <= config.max_blank_lines:
                formatted_lines.append("")
        else:
            blank_count = 0
            formatted_lines.append(stripped)

    while formatted_lines and not formatted_lines[0]:
        formatted_lines.pop(0)
    while formatted_lines and not formatted_lines[-1]:
        formatted_lines.pop()

    text = config.line_ending.join(formatted_lines)
    if config.trailing_newline and text:
        text += config.line_ending
    return text


class TemplateCompiler:
    """Compiles template definitions against contexts."""

    def __init__(self, fragments=None, config: Optional[CompilerConfig] = None,
                 engine: Optional[TemplateEngine] = None):
        """
        Initialize compiler.

        Args:
            fragments: Fragment registry (defaults to the global one)
            config: Formatting options
            engine: Template engine holding the declaration templates
        """
        if fragments is None:
            from ..fragments import get_fragment_registry

            fragments = get_fragment_registry()
        self.fragments = fragments
        self.config = config or DEFAULT_CONFIG
        self.engine = engine or get_default_template_engine()

    def compile(self, definition: DefinitionInput,
                context: TemplateContext) -> Result[str, CompilationError]:
        """
        Compile one definition.

        Args:
            definition: TemplateDefinition or its dict form
            context: Variable bindings (never modified)

        Returns:
            Result with the emitted file text, or a CompilationError holding
            every diagnostic of the attempt
        """
        if not isinstance(definition, TemplateDefinition):
            try:
                definition = parse_definition(definition)
            except DefinitionError as e:
                return Result.fail(_definition_failure(definition, e))

        logger.debug(
            "Compiling %s (%d sections)", definition.id, section_count(definition)
        )
        try:
            return self._compile(definition, context)
        except TemplateError as e:
            logger.debug("Rendering %s raised", definition.id, exc_info=True)
            diagnostic = Diagnostic(message=str(e), code=DiagnosticCode.INTERNAL_ERROR)
            return Result.fail(CompilationError(definition.id, (diagnostic,)))

    def _compile(self, definition: TemplateDefinition,
                 context: TemplateContext) -> Result[str, CompilationError]:
        from ..emitters import EmitEnvironment, emit_node

        diagnostics: List[Diagnostic] = []
        env = EmitEnvironment(
            template_id=definition.id,
            config=self.config,
            engine=self.engine,
            fragments=self.fragments,
        )

        # (1) imports and (2) sections
        assembled = assemble(definition.sections, definition.conditionals, context)
        located = collect_imports(definition.imports, definition.conditionals, assembled, context)
        imports, import_diagnostics = interpolate_imports(located, context)
        diagnostics.extend(import_diagnostics)

        # (3) content
        blocks = []
        for item in assembled:
            block = self._emit_section(item.section, item.location, context, env, emit_node,
                                       diagnostics)
            if block:
                blocks.append(block)

        # (4) header
        header = self._render_header(definition, context, diagnostics)

        if any(d.is_error for d in diagnostics):
            error = CompilationError(definition.id, tuple(diagnostics))
            logger.warning(
                "Compilation of %s failed with %d diagnostics",
                definition.id,
                len(error.errors),
            )
            return Result.fail(error)

        # (5) concatenate
        merged = merge_imports(list(imports) + env.imports)
        parts = []
        if header:
            parts.append(header)
        if merged:
            parts.append(self._render_imports(merged, env))
        parts.extend(blocks)
        text = format_code("\n\n".join(parts), self.config)

        logger.info(
            "Compiled %s (%d bytes, %d warnings)",
            definition.id,
            len(text.encode("utf-8")),
            len(diagnostics),
        )
        return Result.ok(text, warnings=diagnostics)

    def _emit_section(self, section: SectionDefinition, location: str, context: TemplateContext,
                      env, emit_node, diagnostics: List[Diagnostic]) -> str:
        parts = []
        failed = False
        for index, node in enumerate(section.content):
            where = f"{location}.content[{index}]"
            result = emit_node(node, context, env)
            if result.success:
                if result.value.strip():
                    parts.append(result.value)
                diagnostics.extend(w.at(where) for w in result.warnings)
            else:
                failed = True
                diagnostics.extend(d.at(where) for d in result.error.diagnostics)

        title = None
        if section.title is not None:
            interpolator = Interpolator(context)
            title = interpolator.text(section.title, f"{location}.title")
            diagnostics.extend(interpolator.diagnostics)

        if failed:
            return ""
        if not parts:
            diagnostics.append(Diagnostic(
                message="Section produced no output",
                severity=Severity.WARNING,
                code=DiagnosticCode.EMPTY_SECTION,
                location=location,
            ))
            return ""

        body = "\n\n".join(parts)
        if title and self.config.emit_section_titles:
            banner = env.engine.render_template("section_banner", {
                "title": title,
                "width": self.config.section_banner_width,
            })
            return f"{banner}\n\n{body}"
        return body

    def _render_header(self, definition: TemplateDefinition, context: TemplateContext,
                       diagnostics: List[Diagnostic]) -> Optional[str]:
        interpolator = Interpolator(context)
        meta = definition.meta
        title = interpolator.text(meta.title, "meta.title")
        description = interpolator.text(meta.description, "meta.description")
        module = interpolator.optional(meta.module, "meta.module")
        diagnostics.extend(interpolator.diagnostics)

        if not self.config.emit_header:
            return None
        return self.engine.render_template("file_header", {
            "title": title,
            "description": description.strip("\n").split("\n") if description.strip() else [],
            "module": module,
        }).rstrip()

    def _render_imports(self, merged, env) -> str:
        return self.engine.render_template("imports", {
            "imports": [
                {"source": env.quote(m.source), "names": m.items, "type_only": m.type_only}
                for m in merged
            ],
        }).rstrip()

    def compile_batch(self, definitions: Sequence[DefinitionInput], context: TemplateContext,
                      max_workers: Optional[int] = None) -> List[Result[str, CompilationError]]:
        """
        Compile several definitions against one context concurrently.

        The batch runs against a frozen snapshot of the fragment registry;
        the registry itself stays mutable. Results come back in input order
        and a failing definition, malformed or crashing, never affects its
        siblings.

        Raises:
            DefinitionError: If two definitions share an id
        """
        seen = set()
        for definition in definitions:
            template_id = _definition_id(definition)
            if template_id is None:
                continue
            if template_id in seen:
                raise DefinitionError(f"Duplicate template id in batch: {template_id}")
            seen.add(template_id)

        if not definitions:
            return []

        fragments = self.fragments
        if hasattr(fragments, "snapshot"):
            fragments = fragments.snapshot()
        compiler = TemplateCompiler(fragments, self.config, self.engine)

        def compile_one(definition: DefinitionInput) -> Result[str, CompilationError]:
            try:
                return compiler.compile(definition, context)
            except Exception as e:
                template_id = _definition_id(definition) or "<unknown>"
                logger.error("Compilation of %s crashed: %s", template_id, e, exc_info=True)
                diagnostic = Diagnostic(
                    message=f"Compilation crashed: {e}",
                    code=DiagnosticCode.INTERNAL_ERROR,
                )
                return Result.fail(CompilationError(template_id, (diagnostic,)))

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            return list(executor.map(compile_one, definitions))


def _definition_id(definition: DefinitionInput) -> Optional[str]:
    if isinstance(definition, TemplateDefinition):
        return definition.id
    if isinstance(definition, Mapping) and isinstance(definition.get("id"), str):
        return definition["id"]
    return None


def _definition_failure(data: Any, error: DefinitionError) -> CompilationError:
    """Turn a malformed authored definition into an invalid-config failure."""
    template_id = _definition_id(data) or "<unknown>"
    location = error.path or None
    if location == template_id:
        location = None
    elif location and location.startswith(f"{template_id}."):
        location = location[len(template_id) + 1:]
    diagnostic = Diagnostic(
        message=error.message,
        code=DiagnosticCode.INVALID_CONFIG,
        location=location,
    )
    logger.warning("Definition %s is malformed: %s", template_id, error)
    return CompilationError(template_id, (diagnostic,))


def compile_template(definition: DefinitionInput, context: TemplateContext, registry=None,
                     config: Optional[CompilerConfig] = None) -> Result[str, CompilationError]:
    """
    Compile one definition with a throwaway compiler.

    Args:
        definition: TemplateDefinition or its dict form
        context: Variable bindings
        registry: Fragment registry (defaults to the global one)
        config: Formatting options

    Returns:
        Result with the emitted text or a CompilationError
    """
    return TemplateCompiler(registry, config).compile(definition, context)


def compile_batch(definitions: Sequence[DefinitionInput], context: TemplateContext,
                  registry=None, config: Optional[CompilerConfig] = None,
                  max_workers: Optional[int] = None) -> List[Result[str, CompilationError]]:
    """Compile many definitions concurrently; results in input order."""
    return TemplateCompiler(registry, config).compile_batch(definitions, context, max_workers)


# Tooling


def _strings(value: Any) -> Iterable[str]:
    """Every string inside a node, config, mapping or sequence, in field order."""
    if isinstance(value, str):
        yield value
    elif isinstance(value, Enum) or value is None:
        return
    elif dataclasses.is_dataclass(value):
        for f in dataclasses.fields(value):
            yield from _strings(getattr(value, f.name))
    elif isinstance(value, Mapping):
        for item in value.values():
            yield from _strings(item)
    elif isinstance(value, (list, tuple)):
        for item in value:
            yield from _strings(item)


def _definition_strings(definition: TemplateDefinition) -> Iterable[str]:
    meta = definition.meta
    yield meta.title
    yield meta.description
    if meta.module:
        yield meta.module

    def import_strings(imports: Sequence[ImportDefinition]):
        for imp in imports:
            yield imp.source
            yield from imp.items

    def section_strings(sections: Sequence[SectionDefinition]):
        for section in sections:
            yield from import_strings(section.imports)
            if section.title:
                yield section.title
            for node in section.content:
                if isinstance(node, FragmentReference):
                    # Fragment bodies are resolved later; only params count
                    yield from _strings(node.params)
                else:
                    yield from _strings(node)

    yield from import_strings(definition.imports)
    yield from section_strings(definition.sections)
    for block in definition.conditionals.values():
        yield from import_strings(block.imports)
        yield from section_strings(block.sections)


def list_template_variables(definition: DefinitionInput) -> List[str]:
    """
    All placeholders a definition needs, ordered and without duplicates.

    Covers meta, imports, sections and conditionals. Fragment reference
    params are included; fragment bodies are not.
    """
    if not isinstance(definition, TemplateDefinition):
        definition = parse_definition(definition)
    seen: Dict[str, None] = {}
    for text in _definition_strings(definition):
        for name in extract_variables(text):
            seen.setdefault(name, None)
    return list(seen)


def list_template_flags(definition: DefinitionInput) -> List[str]:
    """Condition flags referenced by a definition, in order of appearance."""
    if not isinstance(definition, TemplateDefinition):
        definition = parse_definition(definition)
    seen: Dict[str, None] = {}

    def add(flag: Optional[str]):
        if flag:
            seen.setdefault(flag, None)

    for imp in definition.imports:
        add(imp.condition)
    for section in definition.sections:
        add(section.condition)
        for imp in section.imports:
            add(imp.condition)
    for flag, block in definition.conditionals.items():
        add(flag)
        for imp in block.imports:
            add(imp.condition)
        for section in block.sections:
            add(section.condition)
            for imp in section.imports:
                add(imp.condition)
    return list(seen)
