"""
CLI integration for template compilation.

Provides the ``compile``, ``variables``, ``templates`` and ``fragments``
sub-commands of the ``monogen`` command line.
"""

import argparse
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from ..logging_config import get_logger
from ..utils import JSONLoaderError, load_json
from .core import (
    CompilationError,
    CompilerConfig,
    ConfigError,
    ContextError,
    DefinitionError,
    Diagnostic,
    create_context_from_name,
    list_template_flags,
    list_template_variables,
    load_config,
    load_definitions,
    make_context,
)
from .core.compiler import TemplateCompiler
from .core.types import TemplateContext, TemplateDefinition, describe_node
from .fragments import get_fragment_registry
from .registry import get_template_registry

logger = get_logger(__name__)


class CLIError(Exception):
    """Exception raised for CLI-related errors."""

    pass


# Initialize rich console
console = Console()


def create_template_subparsers(subparsers):
    """
    Add the template sub-commands to a subparser group.

    Every sub-command stores its handler in ``func``.
    """
    compile_parser = subparsers.add_parser(
        "compile",
        help="Compile template definitions into TypeScript",
        description="Compile a registered template or a definition file/URL",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  monogen compile infra/service --name user-profile --scope @acme
  monogen compile contract --name order --flag includeCQRS
  monogen compile defs.json --context context.json -o out/
  monogen compile contract/errors --name user --set options.retries=3
        """.strip(),
    )
    compile_parser.add_argument(
        "source",
        help="Registered template id, library type, or definition file/URL",
    )
    compile_parser.add_argument("--name", "-n", help="Domain name used to derive the naming context")
    compile_parser.add_argument("--scope", default="@app", help="Package scope (default: @app)")
    compile_parser.add_argument("--context", "-c", metavar="FILE", help="JSON context file or URL")
    compile_parser.add_argument(
        "--set",
        dest="assignments",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Context value (dotted keys allowed, repeatable)",
    )
    compile_parser.add_argument(
        "--flag",
        dest="flags",
        action="append",
        default=[],
        metavar="NAME",
        help="Enable a condition flag (repeatable)",
    )
    compile_parser.add_argument("--config", metavar="FILE", help="Compiler configuration file (JSON)")
    compile_parser.add_argument("--profile", default="default", help="Configuration profile (default: default)")
    compile_parser.add_argument("--output", "-o", help="Output file, or directory for several templates")
    compile_parser.set_defaults(func=_handle_compile)

    variables_parser = subparsers.add_parser(
        "variables",
        help="List the placeholders and flags a definition uses",
    )
    variables_parser.add_argument("source", help="Registered template id or definition file/URL")
    variables_parser.add_argument(
        "--sections", action="store_true", help="Also show the content of every section"
    )
    variables_parser.set_defaults(func=_handle_variables)

    templates_parser = subparsers.add_parser("templates", help="List registered templates")
    templates_parser.add_argument("--library-type", "-t", help="Only show one library type")
    templates_parser.set_defaults(func=_handle_templates)

    fragments_parser = subparsers.add_parser("fragments", help="List registered fragments")
    fragments_parser.set_defaults(func=_handle_fragments)


# Input resolution


def _resolve_definitions(source: str) -> List[TemplateDefinition]:
    """Registered id, library type, or a file/URL holding definitions."""
    registry = get_template_registry()
    if registry.has(source):
        return [registry.get(source).definition]
    if source in registry.list_library_types():
        return [registry.get(template_id).definition for template_id in registry.list_templates(source)]
    logger.debug("Loading definitions from %s", source)
    try:
        return load_definitions(source)
    except FileNotFoundError:
        raise CLIError(f"'{source}' is neither a registered template nor a readable file")
    except (JSONLoaderError, DefinitionError) as e:
        raise CLIError(str(e))


def parse_assignment(text: str) -> Tuple[str, Any]:
    """Split ``key=value`` and convert booleans and integers."""
    key, sep, raw = text.partition("=")
    if not sep or not key:
        raise CLIError(f"Expected KEY=VALUE, got: {text}")
    lowered = raw.lower()
    if lowered in ("true", "false"):
        return key, lowered == "true"
    try:
        return key, int(raw)
    except ValueError:
        return key, raw


def set_path(values: Dict[str, Any], path: str, value: Any):
    """Assign into nested dicts along a dotted path."""
    segments = path.split(".")
    current = values
    for segment in segments[:-1]:
        child = current.get(segment)
        if not isinstance(child, dict):
            child = {} if child is None else dict(child)
            current[segment] = child
        current = child
    current[segments[-1]] = value


def _thaw(value: Any) -> Any:
    if hasattr(value, "items"):
        return {key: _thaw(item) for key, item in value.items()}
    return value


def build_context(args: argparse.Namespace) -> TemplateContext:
    """
    Build the compilation context from CLI arguments.

    Later sources win: derived naming context, context file, ``--set``
    assignments, ``--flag`` switches.
    """
    values: Dict[str, Any] = {}
    if args.name:
        values.update(_thaw(create_context_from_name(args.name, scope=args.scope)))
    if args.context:
        try:
            _, data = load_json(args.context, expect=(dict,))
        except (FileNotFoundError, JSONLoaderError) as e:
            raise CLIError(f"Failed to load context: {e}")
        values.update(data)
    for assignment in args.assignments:
        key, value = parse_assignment(assignment)
        set_path(values, key, value)
    for flag in args.flags:
        set_path(values, flag, True)

    try:
        return make_context(values)
    except ContextError as e:
        raise CLIError(f"{e} (pass --name or a --context file)")


def _build_config(args: argparse.Namespace) -> CompilerConfig:
    try:
        return load_config(profile=args.profile, config_file=args.config)
    except ConfigError as e:
        raise CLIError(f"Configuration error: {e}")


# Handlers


def _handle_compile(args: argparse.Namespace) -> int:
    """Handle the compile subcommand."""
    try:
        definitions = _resolve_definitions(args.source)
        context = build_context(args)
        compiler = TemplateCompiler(config=_build_config(args))

        if len(definitions) == 1:
            results = [compiler.compile(definitions[0], context)]
        else:
            results = compiler.compile_batch(definitions, context)

        failed = 0
        outputs = []
        for definition, result in zip(definitions, results):
            _print_warnings(definition.id, list(result.warnings))
            if result.success:
                outputs.append((definition, result.value))
            else:
                failed += 1
                _print_compilation_error(result.error)

        if outputs:
            _write_outputs(outputs, args.output)

        if failed:
            console.print(f"[red]✗ {failed} of {len(definitions)} templates failed[/red]")
            return 1
        return 0

    except CLIError as e:
        console.print(f"[red]✗ Error:[/red] {escape(str(e))}")
        return 1


def _write_outputs(outputs: List[Tuple[TemplateDefinition, str]], output: Optional[str]):
    if output is None:
        for definition, code in outputs:
            console.print()
            console.print(Panel(
                Syntax(code, "typescript", theme="monokai", line_numbers=False),
                title=f"📄 {definition.id}",
                border_style="green",
            ))
        return

    target = Path(output)
    if len(outputs) == 1 and target.suffix:
        paths = [(target, outputs[0][1])]
    else:
        paths = [(target / f"{definition.file_type}.ts", code) for definition, code in outputs]

    for path, code in paths:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(code, encoding="utf-8")
        except OSError as e:
            raise CLIError(f"Failed to write to {path}: {e}")
        console.print(f"[green]✓[/green] Wrote [cyan]{path}[/cyan]")


def _diagnostic_table(title: str, diagnostics: List[Diagnostic]) -> Table:
    table = Table(title=title, box=box.SIMPLE, show_header=True, header_style="bold cyan")
    table.add_column("Severity", style="bold")
    table.add_column("Code", style="magenta")
    table.add_column("Location", style="dim")
    table.add_column("Message")
    for d in diagnostics:
        style = "red" if d.is_error else "yellow"
        position = f":{d.line}:{d.column}" if d.line is not None else ""
        table.add_row(
            f"[{style}]{d.severity.value}[/{style}]",
            d.code.value,
            escape(f"{d.location or ''}{position}"),
            escape(d.message),
        )
    return table


def _print_compilation_error(error: CompilationError):
    console.print()
    console.print(f"[red]✗ {escape(error.message)}[/red]")
    console.print(_diagnostic_table(f"Diagnostics for {error.template_id}", list(error.diagnostics)))


def _print_warnings(template_id: str, warnings: List[Diagnostic]):
    if warnings:
        console.print(_diagnostic_table(f"⚠️  Warnings for {template_id}", warnings))


def _handle_variables(args: argparse.Namespace) -> int:
    """Show the placeholders and condition flags of each definition."""
    try:
        definitions = _resolve_definitions(args.source)
    except CLIError as e:
        console.print(f"[red]✗ Error:[/red] {escape(str(e))}")
        return 1

    for definition in definitions:
        flags = list_template_flags(definition)
        variables = [v for v in list_template_variables(definition) if v not in flags]

        table = Table(title=f"📋 {definition.id}", box=box.ROUNDED, title_style="bold cyan")
        table.add_column("Name", style="bold green", no_wrap=True)
        table.add_column("Kind", style="cyan")
        for name in variables:
            table.add_row(name, "variable")
        for flag in flags:
            table.add_row(flag, "flag")
        console.print()
        console.print(table)

        if args.sections:
            console.print(_sections_table(definition))
    return 0


def _sections_table(definition: TemplateDefinition) -> Table:
    table = Table(box=box.SIMPLE, show_header=True, header_style="bold cyan")
    table.add_column("Section", style="dim")
    table.add_column("Title", style="bold")
    table.add_column("Type", style="magenta")
    table.add_column("Summary")

    def add(sections, prefix):
        for index, section in enumerate(sections):
            for node in section.content:
                info = describe_node(node)
                table.add_row(
                    escape(f"{prefix}[{index}]"),
                    escape(section.title or ""),
                    info["type"],
                    escape(info["summary"]),
                )

    add(definition.sections, "sections")
    for flag, block in definition.conditionals.items():
        add(block.sections, f"conditionals.{flag}.sections")
    return table


def _handle_templates(args: argparse.Namespace) -> int:
    """List registered templates with their expected context."""
    registry = get_template_registry()
    template_ids = registry.list_templates(args.library_type)
    if not template_ids:
        console.print("[yellow]⚠️ No templates registered[/yellow]")
        return 0

    table = Table(title="📋 Registered Templates", box=box.ROUNDED, title_style="bold cyan")
    table.add_column("Template", style="bold green", no_wrap=True)
    table.add_column("Description")
    table.add_column("Required Context", style="cyan")
    table.add_column("Flags", style="blue")
    for template_id in template_ids:
        entry = registry.get(template_id)
        table.add_row(
            template_id,
            escape(entry.description),
            ", ".join(entry.required_context),
            ", ".join(entry.optional_context) or "[dim]none[/dim]",
        )
    console.print()
    console.print(table)
    console.print()
    console.print(Panel(
        "[bold]Usage:[/bold] monogen compile [cyan]TEMPLATE[/cyan] --name [dim]my-domain[/dim]",
        title="💡 Quick Start",
        border_style="blue",
    ))
    return 0


def _handle_fragments(args: argparse.Namespace) -> int:
    """List registered fragments."""
    registry = get_fragment_registry()
    table = Table(title="🧩 Registered Fragments", box=box.ROUNDED, title_style="bold cyan")
    table.add_column("Fragment", style="bold green", no_wrap=True)
    table.add_column("Description")
    table.add_column("Required Params", style="cyan")
    table.add_column("Defaults", style="dim")
    for fragment_id in registry.list_fragments():
        fragment = registry.get(fragment_id)
        defaults = escape(", ".join(f"{k}={v}" for k, v in fragment.defaults.items()))
        table.add_row(
            fragment_id,
            escape(fragment.description),
            ", ".join(fragment.required_params) or "[dim]none[/dim]",
            defaults,
        )
    console.print()
    console.print(table)
    return 0
