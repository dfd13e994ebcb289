"""
Monogen template engine.

Compiles declarative template definitions into TypeScript source text.
"""

from .core import (
    CompilationError,
    CompilationFailed,
    CompilerConfig,
    ConfigError,
    ConfigManager,
    ContextError,
    DefinitionError,
    Diagnostic,
    DiagnosticCode,
    FragmentNotFoundError,
    InterpolationError,
    Result,
    Severity,
    TemplateCompiler,
    compile_batch,
    compile_template,
    create_context_from_name,
    extract_variables,
    has_interpolation,
    interpolate,
    interpolate_deep,
    list_template_flags,
    list_template_variables,
    load_config,
    load_definitions,
    make_context,
    parse_definition,
)
from .fragments import (
    FragmentDefinition,
    FragmentRegistry,
    RegistryError,
    create_fragment_registry,
    get_fragment_registry,
)
from .registry import (
    TemplateEntry,
    TemplateRegistry,
    TemplateRegistryError,
    create_template_registry,
    get_template_registry,
)


FULL_DOMAIN = ("contract", "data-access", "feature")


def generate_library(name, library_type, scope="@app", config=None, file_types=None, **options):
    """
    Compile the built-in templates of a library type for a domain name.

    Args:
        name: Domain name in any case (``user-profile``, ``UserProfile``)
        library_type: Library type such as ``contract`` or ``infra``
        scope: npm scope of the generated packages
        config: CompilerConfig (defaults to the ``default`` profile)
        file_types: Only these file types (``errors``, ``service``); all when None
        **options: Extra context values, e.g. ``includeCQRS=True``

    Returns:
        Mapping of template id to Result
    """
    context = create_context_from_name(name, scope=scope, library_type=library_type, **options)
    return get_template_registry().compile_library(
        library_type, context, config=config, file_types=file_types
    )


def generate_domain(name, library_types=FULL_DOMAIN, scope="@app", config=None, **options):
    """
    Compile several library types of one domain.

    The default covers a full domain: contract, data-access and feature.

    Returns:
        Mapping of library type to its ``generate_library`` mapping
    """
    return {
        library_type: generate_library(name, library_type, scope=scope, config=config, **options)
        for library_type in library_types
    }


__all__ = [
    "CompilationError",
    "CompilationFailed",
    "CompilerConfig",
    "ConfigError",
    "ConfigManager",
    "ContextError",
    "DefinitionError",
    "Diagnostic",
    "DiagnosticCode",
    "FULL_DOMAIN",
    "FragmentDefinition",
    "FragmentNotFoundError",
    "FragmentRegistry",
    "InterpolationError",
    "RegistryError",
    "Result",
    "Severity",
    "TemplateCompiler",
    "TemplateEntry",
    "TemplateRegistry",
    "TemplateRegistryError",
    "compile_batch",
    "compile_template",
    "create_context_from_name",
    "create_fragment_registry",
    "create_template_registry",
    "extract_variables",
    "generate_domain",
    "generate_library",
    "get_fragment_registry",
    "get_template_registry",
    "has_interpolation",
    "interpolate",
    "interpolate_deep",
    "list_template_flags",
    "list_template_variables",
    "load_config",
    "load_definitions",
    "make_context",
    "parse_definition",
]
