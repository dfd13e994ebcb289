"""
Core template compilation components.

Definition model, interpolation, configuration and the compiler.
"""

from .compiler import (
    TemplateCompiler,
    compile_batch,
    compile_template,
    format_code,
    list_template_flags,
    list_template_variables,
)
from .config import CompilerConfig, ConfigError, ConfigManager, load_config
from .errors import (
    CompilationError,
    CompilationFailed,
    Diagnostic,
    DiagnosticCode,
    FragmentNotFoundError,
    InterpolationError,
    Result,
    Severity,
)
from .loader import DefinitionError, load_definitions, parse_content, parse_definition
from .resolver import (
    ContextError,
    create_context_from_name,
    extract_variables,
    has_interpolation,
    interpolate,
    interpolate_deep,
    make_context,
)
from .templates import TemplateEngine, TemplateError, create_template_engine

__all__ = [
    # Compiler
    "TemplateCompiler",
    "compile_template",
    "compile_batch",
    "format_code",
    "list_template_variables",
    "list_template_flags",
    # Errors and results
    "CompilationError",
    "CompilationFailed",
    "Diagnostic",
    "DiagnosticCode",
    "FragmentNotFoundError",
    "InterpolationError",
    "Result",
    "Severity",
    # Definitions
    "DefinitionError",
    "load_definitions",
    "parse_content",
    "parse_definition",
    # Interpolation
    "ContextError",
    "create_context_from_name",
    "extract_variables",
    "has_interpolation",
    "interpolate",
    "interpolate_deep",
    "make_context",
    # Configuration
    "CompilerConfig",
    "ConfigManager",
    "ConfigError",
    "load_config",
    # Template system
    "TemplateEngine",
    "TemplateError",
    "create_template_engine",
]
