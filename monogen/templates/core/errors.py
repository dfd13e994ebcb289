"""
Diagnostics and result values for template compilation.

Compilation failures are values, not exceptions: every operation of the
engine returns a ``Result`` carrying either the produced value or an error
value. ``CompilationFailed`` exists only so callers that prefer exceptions
can opt in through ``Result.unwrap()``.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Generic, Iterable, List, Optional, Tuple, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


class Severity(str, Enum):
    """Severity of a single diagnostic."""

    ERROR = "error"
    WARNING = "warning"


class DiagnosticCode(str, Enum):
    """Stable machine-readable diagnostic codes."""

    UNRESOLVED_VARIABLE = "unresolved-variable"
    FRAGMENT_NOT_FOUND = "fragment-not-found"
    FRAGMENT_CYCLE = "fragment-cycle"
    INVALID_IDENTIFIER = "invalid-identifier"
    DUPLICATE_MEMBER = "duplicate-member"
    INVALID_CONFIG = "invalid-config"
    EMPTY_SECTION = "empty-section"
    INTERNAL_ERROR = "internal-error"


@dataclass(frozen=True)
class Diagnostic:
    """A single reported problem inside a compilation."""

    message: str
    severity: Severity = Severity.ERROR
    code: DiagnosticCode = DiagnosticCode.INTERNAL_ERROR
    location: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    def at(self, location: str) -> "Diagnostic":
        """Return a copy anchored at an IR location, keeping a nested suffix."""
        if self.location and self.location != location:
            if self.location.startswith("["):
                location = f"{location}{self.location}"
            else:
                location = f"{location}.{self.location}"
        return replace(self, location=location)

    def __str__(self) -> str:
        parts = [self.severity.value]
        if self.location:
            parts.append(self.location)
        if self.line is not None:
            position = f"{self.line}:{self.column}" if self.column else str(self.line)
            parts.append(position)
        prefix = " ".join(parts)
        return f"{prefix}: {self.message} [{self.code.value}]"


@dataclass(frozen=True)
class UnresolvedPlaceholder:
    """One placeholder that could not be resolved, with its 1-based position."""

    variable: str
    line: int
    column: int


@dataclass(frozen=True)
class InterpolationError:
    """One or more placeholders in a string could not be resolved."""

    placeholders: Tuple[UnresolvedPlaceholder, ...]

    @property
    def variables(self) -> List[str]:
        """Unresolved variable names, de-duplicated in order of appearance."""
        seen: List[str] = []
        for placeholder in self.placeholders:
            if placeholder.variable not in seen:
                seen.append(placeholder.variable)
        return seen

    @property
    def variable(self) -> str:
        return self.placeholders[0].variable if self.placeholders else ""

    @property
    def message(self) -> str:
        return f"Unknown variable(s): {', '.join(self.variables)}"

    def to_diagnostics(self, location: Optional[str] = None) -> List[Diagnostic]:
        return [
            Diagnostic(
                message=f"Unknown variable: {p.variable}",
                code=DiagnosticCode.UNRESOLVED_VARIABLE,
                location=location,
                line=p.line,
                column=p.column,
            )
            for p in self.placeholders
        ]


@dataclass(frozen=True)
class FragmentNotFoundError:
    """
    A fragment reference could not be resolved.

    ``chain`` holds the fragment ids being expanded when the lookup failed.
    When the failing id already appears in that chain the reference is
    cyclic rather than missing.
    """

    fragment_id: str
    chain: Tuple[str, ...] = ()

    @property
    def is_cycle(self) -> bool:
        return self.fragment_id in self.chain

    @property
    def message(self) -> str:
        if self.is_cycle:
            path = " -> ".join(self.chain + (self.fragment_id,))
            return f"Cyclic fragment reference: {path}"
        return f"Fragment type not found: {self.fragment_id}"

    def to_diagnostic(self, location: Optional[str] = None) -> Diagnostic:
        code = (
            DiagnosticCode.FRAGMENT_CYCLE
            if self.is_cycle
            else DiagnosticCode.FRAGMENT_NOT_FOUND
        )
        return Diagnostic(message=self.message, code=code, location=location)


@dataclass(frozen=True)
class CompilationError:
    """Aggregate failure of one compilation, tagged with its template id."""

    template_id: str
    diagnostics: Tuple[Diagnostic, ...] = ()

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.is_error]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if not d.is_error]

    @property
    def message(self) -> str:
        count = len(self.errors)
        noun = "error" if count == 1 else "errors"
        return f"Compilation of '{self.template_id}' failed with {count} {noun}"

    def with_template_id(self, template_id: str) -> "CompilationError":
        return replace(self, template_id=template_id)

    def format(self) -> str:
        lines = [self.message]
        lines.extend(f"  - {d}" for d in self.diagnostics)
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.format()


ErrorValue = Union[InterpolationError, FragmentNotFoundError, CompilationError]


class CompilationFailed(Exception):
    """Raised by ``Result.unwrap()`` when the result holds an error."""

    def __init__(self, error):
        self.error = error
        super().__init__(getattr(error, "message", str(error)))


@dataclass(frozen=True)
class Result(Generic[T, E]):
    """Success-or-failure value returned by every engine operation."""

    value: Optional[T] = None
    error: Optional[E] = None
    warnings: Tuple[Diagnostic, ...] = field(default_factory=tuple)

    @property
    def success(self) -> bool:
        return self.error is None

    @classmethod
    def ok(cls, value: T, warnings: Iterable[Diagnostic] = ()) -> "Result[T, E]":
        return cls(value=value, warnings=tuple(warnings))

    @classmethod
    def fail(cls, error: E) -> "Result[T, E]":
        return cls(error=error)

    def unwrap(self) -> T:
        """Return the value or raise ``CompilationFailed``."""
        if self.error is not None:
            raise CompilationFailed(self.error)
        return self.value
