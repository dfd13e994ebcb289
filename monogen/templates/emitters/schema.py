"""
Schema emitter.

Builds ``effect/Schema`` expressions from schema configs. Field values are
either verbatim schema expressions or primitive kinds; structs and arrays
nest. Brand and annotations are applied with ``.pipe(...)``.
"""

from typing import List, Sequence

from ..core.errors import DiagnosticCode, Severity
from ..core.templates import indent_tail_filter
from ..core.types import ContentKind, SchemaContent, SchemaFieldDefinition, SchemaFieldKind, SchemaType
from .base import ContentEmitter, Emission, EmitEnvironment

PRIMITIVE_SCHEMAS = {
    SchemaFieldKind.STRING: "Schema.String",
    SchemaFieldKind.NUMBER: "Schema.Number",
    SchemaFieldKind.BOOLEAN: "Schema.Boolean",
}

SCALAR_SCHEMA_TYPES = {
    SchemaType.STRING: "Schema.String",
    SchemaType.NUMBER: "Schema.Number",
    SchemaType.BOOLEAN: "Schema.Boolean",
}


class SchemaExpressionBuilder:
    """Turns schema field definitions into expression text."""

    def __init__(self, emission: Emission, env: EmitEnvironment):
        self.emission = emission
        self.env = env

    def field_value(self, field: SchemaFieldDefinition, where: str) -> str:
        if field.schema is not None:
            return self.emission.text(field.schema, f"{where}.schema")
        if field.kind in PRIMITIVE_SCHEMAS:
            return PRIMITIVE_SCHEMAS[field.kind]
        if field.kind == SchemaFieldKind.STRUCT:
            return f"Schema.Struct({self.struct_body(field.fields, f'{where}.fields')})"
        if field.kind == SchemaFieldKind.ARRAY:
            if field.items is None:
                self.emission.report(
                    "Array field requires 'items'", DiagnosticCode.INVALID_CONFIG, where
                )
                return "Schema.Array(Schema.Unknown)"
            return f"Schema.Array({self.field_value(field.items, f'{where}.items')})"
        self.emission.report(
            "Schema field requires either 'schema' or 'kind'",
            DiagnosticCode.INVALID_CONFIG,
            where,
        )
        return "Schema.Unknown"

    def struct_body(self, fields: Sequence[SchemaFieldDefinition], where: str) -> str:
        """``{ name: expr, ... }`` spread over lines, one field per line."""
        if not fields:
            return "{}"
        indent = self.env.indent
        entries: List[str] = []
        names = []
        for index, field in enumerate(fields):
            at = f"{where}[{index}]"
            name = self.emission.identifier(field.name, f"{at}.name", allow_reserved=True)
            names.append((name, f"{at}.name"))
            value = self.field_value(field, at)
            if field.optional:
                value = f"Schema.optional({value})"
            entry = f"{indent}{name}: {indent_tail_filter(value, indent)}"
            if field.jsdoc:
                doc = self.emission.text(field.jsdoc, f"{at}.jsdoc")
                entry = f"{indent}/** {doc} */\n{entry}"
            entries.append(entry)
        self.emission.unique(names, "schema field")
        return "{\n" + ",\n".join(entries) + "\n}"

    def union(self, variants: List[str]) -> str:
        joined = ", ".join(variants)
        if "\n" not in joined and len(joined) <= 60:
            return f"Schema.Union({joined})"
        indent = self.env.indent
        body = ",\n".join(f"{indent}{indent_tail_filter(v, indent)}" for v in variants)
        return f"Schema.Union(\n{body}\n)"


class SchemaEmitter(ContentEmitter):

    @property
    def kind(self) -> ContentKind:
        return ContentKind.SCHEMA

    def render(self, node: SchemaContent, emission: Emission, env: EmitEnvironment) -> str:
        config = node.config
        builder = SchemaExpressionBuilder(emission, env)
        name = emission.identifier(config.name, "config.name")
        schema_type = config.schema_type
        is_class = schema_type == SchemaType.CLASS

        if schema_type == SchemaType.STRUCT:
            expr = f"Schema.Struct({builder.struct_body(config.fields, 'config.fields')})"
        elif is_class:
            expr = builder.struct_body(config.fields, "config.fields")
        elif schema_type in SCALAR_SCHEMA_TYPES:
            expr = SCALAR_SCHEMA_TYPES[schema_type]
        elif schema_type == SchemaType.ARRAY:
            expr = self._array(config.fields, builder, emission)
        elif schema_type == SchemaType.UNION:
            expr = self._union(config.fields, builder, emission)
        else:
            expr = self._tagged_union(config.fields, builder, emission, env)

        type_alias = None
        if is_class:
            for key, present in (("brand", config.brand), ("annotations", config.annotations),
                                 ("typeAlias", config.type_alias)):
                if present:
                    emission.report(
                        f"'{key}' is ignored for Class schemas",
                        DiagnosticCode.INVALID_CONFIG,
                        f"config.{key}",
                        severity=Severity.WARNING,
                    )
        else:
            if config.brand:
                brand = emission.text(config.brand, "config.brand")
                expr = f"{expr}.pipe(Schema.brand({env.quote(brand)}))"
            if config.annotations:
                parts = [
                    f"{key}: {env.quote(emission.text(value, f'config.annotations.{key}'))}"
                    for key, value in config.annotations.items()
                ]
                expr = f"{expr}.pipe(Schema.annotations({{ {', '.join(parts)} }}))"
            if config.type_alias:
                type_alias = emission.identifier(config.type_alias, "config.typeAlias")

        return self.render_template(env, "schema", {
            "export": env.export(config.exported),
            "name": name,
            "quoted_name": env.quote(name),
            "is_class": is_class,
            "expr": expr,
            "type_alias": type_alias,
            "jsdoc": emission.optional(config.jsdoc, "config.jsdoc"),
        })

    def _array(self, fields, builder: SchemaExpressionBuilder, emission: Emission) -> str:
        if not fields:
            emission.report(
                "Array schema has no item field; using Schema.Unknown",
                DiagnosticCode.INVALID_CONFIG,
                "config.fields",
                severity=Severity.WARNING,
            )
            return "Schema.Array(Schema.Unknown)"
        return f"Schema.Array({builder.field_value(fields[0], 'config.fields[0]')})"

    def _union(self, fields, builder: SchemaExpressionBuilder, emission: Emission) -> str:
        if not fields:
            emission.report(
                "Union schema requires at least one variant",
                DiagnosticCode.INVALID_CONFIG,
                "config.fields",
            )
            return "Schema.Never"
        return builder.union(
            [builder.field_value(f, f"config.fields[{i}]") for i, f in enumerate(fields)]
        )

    def _tagged_union(self, fields, builder: SchemaExpressionBuilder, emission: Emission,
                      env: EmitEnvironment) -> str:
        # Each field is a variant: its name is the tag, its nested fields the payload
        if not fields:
            emission.report(
                "TaggedUnion schema requires at least one variant",
                DiagnosticCode.INVALID_CONFIG,
                "config.fields",
            )
            return "Schema.Never"
        variants = []
        for index, variant in enumerate(fields):
            where = f"config.fields[{index}]"
            if variant.schema is not None:
                variants.append(emission.text(variant.schema, f"{where}.schema"))
                continue
            tag = emission.identifier(variant.name, f"{where}.name")
            body = builder.struct_body(variant.fields, f"{where}.fields")
            variants.append(f"Schema.TaggedStruct({env.quote(tag)}, {body})")
        return builder.union(variants)
