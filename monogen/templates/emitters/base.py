"""
Base emitter interface for all content kinds.

Defines the contract every content emitter implements and the per-compilation
environment they share.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from ..core.config import DEFAULT_CONFIG, CompilerConfig
from ..core.errors import CompilationError, Diagnostic, DiagnosticCode, Result, Severity
from ..core.naming import is_valid_identifier
from ..core.resolver import Interpolator
from ..core.templates import TemplateEngine, get_default_template_engine
from ..core.types import ContentKind, ImportDefinition, ParameterDefinition, TemplateContext

if TYPE_CHECKING:
    from ..fragments.registry import FragmentRegistry


@dataclass
class EmitEnvironment:
    """
    Everything an emitter needs besides the node and the context.

    One environment belongs to one compilation. ``imports`` collects imports
    contributed by fragments; ``fragment_stack`` holds the fragment ids being
    expanded, outermost first.
    """

    template_id: str
    config: CompilerConfig = DEFAULT_CONFIG
    engine: TemplateEngine = field(default_factory=get_default_template_engine)
    fragments: Optional["FragmentRegistry"] = None
    fragment_stack: Tuple[str, ...] = ()
    imports: List[ImportDefinition] = field(default_factory=list)

    @property
    def indent(self) -> str:
        return self.config.indent

    def quote(self, value: str) -> str:
        q = self.config.quote
        escaped = value.replace("\\", "\\\\").replace(q, "\\" + q)
        return q + escaped + q

    def export(self, exported: bool) -> str:
        return "export " if exported else ""


class Emission:
    """Scratch state for a single emit call: interpolation plus diagnostics."""

    def __init__(self, context: TemplateContext):
        self.interpolator = Interpolator(context)

    @property
    def diagnostics(self) -> List[Diagnostic]:
        return self.interpolator.diagnostics

    def text(self, value: Optional[str], location: str) -> str:
        return self.interpolator.text(value, location)

    def optional(self, value: Optional[str], location: str) -> Optional[str]:
        return self.interpolator.optional(value, location)

    def report(self, message: str, code: DiagnosticCode, location: str,
               severity: Severity = Severity.ERROR):
        self.diagnostics.append(
            Diagnostic(message=message, severity=severity, code=code, location=location)
        )

    def identifier(self, value: str, location: str, allow_reserved: bool = False) -> str:
        """Interpolate a name and check that the result is a valid identifier."""
        before = len(self.diagnostics)
        name = self.text(value, location)
        # Unresolved placeholders are already reported; do not double up
        if len(self.diagnostics) == before and not is_valid_identifier(name, allow_reserved):
            self.report(
                f"Invalid identifier '{name}'",
                DiagnosticCode.INVALID_IDENTIFIER,
                location,
            )
        return name

    def unique(self, names: List[Tuple[str, str]], what: str):
        """Report duplicates among (name, location) pairs."""
        seen: Dict[str, str] = {}
        for name, location in names:
            if name in seen:
                self.report(
                    f"Duplicate {what} '{name}' (first declared at {seen[name]})",
                    DiagnosticCode.DUPLICATE_MEMBER,
                    location,
                )
            else:
                seen[name] = location

    def params(self, params: Tuple[ParameterDefinition, ...], location: str) -> str:
        """Render a parameter list ``a: A, b?: B``."""
        rendered = []
        for index, param in enumerate(params):
            where = f"{location}[{index}]"
            name = self.identifier(param.name, f"{where}.name")
            marker = "?" if param.optional else ""
            rendered.append(f"{name}{marker}: {self.text(param.type, f'{where}.type')}")
        return ", ".join(rendered)


class ContentEmitter(ABC):
    """Abstract base class for content emitters."""

    @property
    @abstractmethod
    def kind(self) -> ContentKind:
        """Return the content kind this emitter handles."""
        pass

    @abstractmethod
    def render(self, node: Any, emission: Emission, env: EmitEnvironment) -> str:
        """
        Produce the source text for one node.

        Problems are reported on ``emission``; the returned text is
        discarded when any of them is an error.

        Args:
            node: Content node of this emitter's kind
            emission: Interpolation and diagnostics state
            env: Compilation environment

        Returns:
            Emitted source text
        """
        pass

    def emit(self, node: Any, context: TemplateContext,
             env: EmitEnvironment) -> Result[str, CompilationError]:
        """
        Emit a node and wrap the outcome in a Result.

        Args:
            node: Content node
            context: Variable bindings
            env: Compilation environment

        Returns:
            Result with the text (plus warnings) or a CompilationError
        """
        emission = Emission(context)
        text = self.render(node, emission, env)
        return finish(text, emission.diagnostics, env.template_id)

    def render_template(self, env: EmitEnvironment, template_name: str,
                        values: Dict[str, Any]) -> str:
        """Render one of the declaration templates with the indent unit bound."""
        values = {"i": env.indent, **values}
        return env.engine.render_template(template_name, values).rstrip()


def finish(text: str, diagnostics: List[Diagnostic],
           template_id: str) -> Result[str, CompilationError]:
    """Turn emitted text and collected diagnostics into a Result."""
    if any(d.is_error for d in diagnostics):
        return Result.fail(CompilationError(template_id, tuple(diagnostics)))
    return Result.ok(text, warnings=diagnostics)
