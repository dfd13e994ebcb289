"""
Template engine wrapper for declaration rendering.

Provides a Jinja2 environment preloaded with the TypeScript declaration
templates used by the content emitters, plus filters for comment blocks
and indentation.
"""

import threading
from pathlib import Path
from typing import Any, Dict, Optional

from jinja2 import DictLoader, Environment, FileSystemLoader, StrictUndefined, TemplateNotFound


class TemplateError(Exception):
    """Exception raised for template-related errors."""

    pass


def jsdoc_filter(value: str, prefix: str = "") -> str:
    """Wrap text into a ``/** ... */`` block, every line prefixed."""
    lines = str(value).strip("\n").split("\n")
    body = [f"{prefix} * {line}".rstrip() if line.strip() else f"{prefix} *" for line in lines]
    return "\n".join([f"{prefix}/**", *body, f"{prefix} */"])


def indent_tail_filter(value: str, prefix: str) -> str:
    """Indent every line but the first (continuation lines of an expression)."""
    lines = str(value).split("\n")
    return "\n".join(
        [lines[0]] + [prefix + line if line.strip() else "" for line in lines[1:]]
    )


def indent_block_filter(value: str, prefix: str) -> str:
    """Indent all non-blank lines."""
    return "\n".join(prefix + line if line.strip() else "" for line in str(value).split("\n"))


def comment_filter(value: str, style: str = "//") -> str:
    """Add comment markers to each line."""
    lines = str(value).split("\n")
    return "\n".join(f"{style} {line}" if line.strip() else style for line in lines)


class TemplateEngine:
    """Wrapper for a Jinja2 environment with code generation utilities."""

    def __init__(self, template_dir: Optional[Path] = None):
        """
        Initialize template engine.

        Args:
            template_dir: Directory containing extra template files
        """
        self.template_dir = template_dir
        self._env = None
        self._setup_environment()

    def _setup_environment(self):
        """Setup Jinja2 environment; generated code is never HTML-escaped."""
        if self.template_dir and self.template_dir.exists():
            loader = FileSystemLoader(str(self.template_dir))
        else:
            loader = DictLoader({})

        self._env = Environment(
            loader=loader,
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )

        self._env.filters["jsdoc"] = jsdoc_filter
        self._env.filters["indent_tail"] = indent_tail_filter
        self._env.filters["indent_block"] = indent_block_filter
        self._env.filters["comment"] = comment_filter

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """
        Render a template with the given context.

        Args:
            template_name: Name of template
            context: Variables to pass to template

        Returns:
            Rendered template content

        Raises:
            TemplateError: If the template is missing or rendering fails
        """
        try:
            template = self._env.get_template(template_name)
            return template.render(**context)
        except TemplateNotFound as e:
            raise TemplateError(f"Template not found: {template_name}") from e
        except Exception as e:
            raise TemplateError(f"Failed to render template {template_name}: {e}") from e

    def add_template(self, name: str, content: str):
        """
        Add an in-memory template.

        Args:
            name: Template name
            content: Template content
        """
        if not isinstance(self._env.loader, DictLoader):
            self._env.loader = DictLoader({})

        self._env.loader.mapping[name] = content


# Built-in declaration templates. Every block tag sits on its own line so
# trim_blocks/lstrip_blocks leave the literal lines untouched. ``i`` is the
# configured indentation unit.

FILE_HEADER_TEMPLATE = """\
/**
 * {{ title }}
{% if description %}
 *
{% for line in description %}
{% if line %}
 * {{ line }}
{% else %}
 *
{% endif %}
{% endfor %}
{% endif %}
{% if module %}
 *
 * @module {{ module }}
{% endif %}
 */"""

IMPORTS_TEMPLATE = """\
{% for imp in imports %}
{% if imp.names %}
import {% if imp.type_only %}type {% endif %}{ {{ imp.names | join(", ") }} } from {{ imp.source }}
{% else %}
import {{ imp.source }}
{% endif %}
{% endfor %}"""

SECTION_BANNER_TEMPLATE = """\
// {{ "=" * width }}
{{ title | comment }}
// {{ "=" * width }}"""

CONTEXT_TAG_TEMPLATE = """\
{% if jsdoc %}
{{ jsdoc | jsdoc }}
{% endif %}
{{ export }}class {{ name }} extends Context.Tag({{ tag_id }})<
{{ i }}{{ name }},
{% if methods %}
{{ i }}{
{% for m in methods %}
{% if not loop.first %}

{% endif %}
{% if m.jsdoc %}
{{ m.jsdoc | jsdoc(i ~ i) }}
{% endif %}
{{ i }}{{ i }}readonly {{ m.name }}: ({{ m.params }}) => {{ m.return_type }}
{% endfor %}
{{ i }}}
{% else %}
{{ i }}{}
{% endif %}
{% if layers %}
>() {
{% for layer in layers %}
{% if not loop.first %}

{% endif %}
{% if layer.jsdoc %}
{{ layer.jsdoc | jsdoc(i) }}
{% endif %}
{{ i }}static {{ layer.name }} = {{ layer.implementation | indent_tail(i) }}
{% endfor %}
}
{% else %}
>() {}
{% endif %}"""

TAGGED_ERROR_TEMPLATE = """\
{% if jsdoc %}
{{ jsdoc | jsdoc }}
{% endif %}
{% if fields %}
{{ export }}class {{ name }} extends Data.TaggedError({{ tag }})<{
{% for f in fields %}
{% if f.jsdoc %}
{{ i }}/** {{ f.jsdoc }} */
{% endif %}
{{ i }}readonly {{ f.name }}{% if f.optional %}?{% endif %}: {{ f.type }}
{% endfor %}
}>{{ tail }}
{% else %}
{{ export }}class {{ name }} extends Data.TaggedError({{ tag }})<{}>{{ tail }}
{% endif %}
{% if methods %}
{% for m in methods %}
{% if not loop.first %}

{% endif %}
{{ i }}static {{ m.name }}({{ m.params }}){% if m.return_type %}: {{ m.return_type }}{% endif %} {
{{ m.body | indent_block(i ~ i) }}
{{ i }}}
{% endfor %}
}
{% endif %}"""

SCHEMA_TEMPLATE = """\
{% if jsdoc %}
{{ jsdoc | jsdoc }}
{% endif %}
{% if is_class %}
{{ export }}class {{ name }} extends Schema.Class<{{ name }}>({{ quoted_name }})({{ expr }}) {}
{% else %}
{{ export }}const {{ name }} = {{ expr }}
{% endif %}
{% if type_alias %}

{{ export }}type {{ type_alias }} = Schema.Schema.Type<typeof {{ name }}>
{% endif %}"""

RPC_DEFINITION_TEMPLATE = """\
{{ jsdoc | jsdoc }}
export class {{ name }} extends Rpc.make({{ quoted_name }}, {
{% if payload %}
{{ i }}payload: {{ payload | indent_tail(i) }},
{% endif %}
{{ i }}success: {{ success }},
{{ i }}error: {{ error }}
}) {
{{ i }}static readonly [RouteTag]: RouteType = {{ route }}
}"""

INTERFACE_TEMPLATE = """\
{% if jsdoc %}
{{ jsdoc | jsdoc }}
{% endif %}
{% if members %}
{{ export }}interface {{ name }}{% if extends %} extends {{ extends | join(", ") }}{% endif %} {
{% for member in members %}
{% if member.jsdoc %}
{{ i }}/** {{ member.jsdoc }} */
{% endif %}
{{ i }}{{ member.text }}
{% endfor %}
}
{% else %}
{{ export }}interface {{ name }}{% if extends %} extends {{ extends | join(", ") }}{% endif %} {}
{% endif %}"""

CLASS_TEMPLATE = """\
{% if jsdoc %}
{{ jsdoc | jsdoc }}
{% endif %}
{% if statics or properties or methods %}
{{ export }}class {{ name }}{% if extends %} extends {{ extends }}{% endif %}{% if implements %} implements {{ implements | join(", ") }}{% endif %} {
{% for s in statics %}
{{ i }}{{ s }}
{% endfor %}
{% for p in properties %}
{% if p.jsdoc %}
{{ i }}/** {{ p.jsdoc }} */
{% endif %}
{{ i }}{{ p.text }}
{% endfor %}
{% for m in methods %}
{% if statics or properties or not loop.first %}

{% endif %}
{% if m.jsdoc %}
{{ m.jsdoc | jsdoc(i) }}
{% endif %}
{{ i }}{{ m.signature }} {
{% if m.body %}
{{ m.body | indent_block(i ~ i) }}
{% endif %}
{{ i }}}
{% endfor %}
}
{% else %}
{{ export }}class {{ name }}{% if extends %} extends {{ extends }}{% endif %}{% if implements %} implements {{ implements | join(", ") }}{% endif %} {}
{% endif %}"""

CONSTANT_TEMPLATE = """\
{% if jsdoc %}
{{ jsdoc | jsdoc }}
{% endif %}
{{ export }}const {{ name }}{% if type %}: {{ type }}{% endif %} = {{ value }}"""

BUILTIN_TEMPLATES = {
    "file_header": FILE_HEADER_TEMPLATE,
    "imports": IMPORTS_TEMPLATE,
    "section_banner": SECTION_BANNER_TEMPLATE,
    "context_tag": CONTEXT_TAG_TEMPLATE,
    "tagged_error": TAGGED_ERROR_TEMPLATE,
    "schema": SCHEMA_TEMPLATE,
    "rpc_definition": RPC_DEFINITION_TEMPLATE,
    "interface": INTERFACE_TEMPLATE,
    "class": CLASS_TEMPLATE,
    "constant": CONSTANT_TEMPLATE,
}


def create_template_engine(template_dir: Optional[Path] = None) -> TemplateEngine:
    """Create an engine with the built-in templates loaded."""
    engine = TemplateEngine(template_dir)
    for name, content in BUILTIN_TEMPLATES.items():
        engine.add_template(name, content)
    return engine


# Default template engine instance
_default_engine = None
_default_engine_lock = threading.Lock()


def get_default_template_engine() -> TemplateEngine:
    """Get the default template engine instance."""
    global _default_engine
    with _default_engine_lock:
        if _default_engine is None:
            _default_engine = create_template_engine()
    return _default_engine
