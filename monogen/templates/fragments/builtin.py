"""
Built-in fragments for Effect-based libraries.

Static fragments use placeholders resolved against the referencing context
overlaid with the reference params; bundles such as ``effect/domain-errors``
are static fragments made of further references. Layer and schema fragments
are rendered in Python because their output depends on list params (layer
lists, schema fields) rather than on single placeholders.
"""

from typing import Any, List, Mapping, Sequence

from ..core.types import (
    ConstantConfig,
    ConstantContent,
    ContextTagConfig,
    ContextTagContent,
    FieldDefinition,
    FragmentReference,
    ImportDefinition,
    MethodSignature,
    ParameterDefinition,
    RawContent,
    SchemaConfig,
    SchemaContent,
    SchemaType,
    StaticMethodDefinition,
    TaggedErrorConfig,
    TaggedErrorContent,
    TemplateContext,
)
from .registry import FragmentDefinition

NOT_FOUND_ERROR = FragmentDefinition(
    id="effect/not-found-error",
    description="Data.TaggedError raised when an entity lookup finds nothing",
    content=(
        TaggedErrorContent(TaggedErrorConfig(
            class_name="{entity}NotFound{suffix}Error",
            jsdoc="Error thrown when {entity} is not found",
            fields=(
                FieldDefinition("message", "string", jsdoc="Human-readable error message"),
                FieldDefinition("{idField}", "string", jsdoc="Identifier that was not found"),
            ),
            static_methods=(
                StaticMethodDefinition(
                    name="create",
                    params=(ParameterDefinition("{idField}", "string"),),
                    body=(
                        "return new {entity}NotFound{suffix}Error({\n"
                        "  message: `{entity} not found: ${{idField}}`,\n"
                        "  {idField}\n"
                        "})"
                    ),
                ),
            ),
        )),
    ),
    defaults={"entity": "{className}", "idField": "{propertyName}Id", "suffix": ""},
    imports=(ImportDefinition("effect", ("Data",)),),
)

VALIDATION_ERROR = FragmentDefinition(
    id="effect/validation-error",
    description="Data.TaggedError for field validation failures",
    content=(
        TaggedErrorContent(TaggedErrorConfig(
            class_name="{entity}Validation{suffix}Error",
            jsdoc="Error thrown when {entity} validation fails",
            fields=(
                FieldDefinition("message", "string", jsdoc="Human-readable error message"),
                FieldDefinition("field", "string", optional=True, jsdoc="Field that failed validation"),
                FieldDefinition("constraint", "string", optional=True, jsdoc="Constraint that was violated"),
                FieldDefinition("value", "unknown", optional=True, jsdoc="Invalid value"),
            ),
            static_methods=(
                StaticMethodDefinition(
                    name="fieldRequired",
                    params=(ParameterDefinition("field", "string"),),
                    body=(
                        "return new {entity}Validation{suffix}Error({\n"
                        "  message: `${field} is required`,\n"
                        "  field,\n"
                        '  constraint: "required"\n'
                        "})"
                    ),
                ),
                StaticMethodDefinition(
                    name="fieldInvalid",
                    params=(
                        ParameterDefinition("field", "string"),
                        ParameterDefinition("constraint", "string"),
                        ParameterDefinition("value", "unknown", optional=True),
                    ),
                    body=(
                        "return new {entity}Validation{suffix}Error({\n"
                        "  message: `${field} is invalid: ${constraint}`,\n"
                        "  field,\n"
                        "  constraint,\n"
                        "  ...(value !== undefined && { value })\n"
                        "})"
                    ),
                ),
            ),
        )),
    ),
    defaults={"entity": "{className}", "suffix": ""},
    imports=(ImportDefinition("effect", ("Data",)),),
)

REPOSITORY_TAG = FragmentDefinition(
    id="effect/repository-tag",
    description="Context.Tag for a CRUD repository of an entity",
    content=(
        ContextTagContent(ContextTagConfig(
            service_name="{entity}Repository",
            jsdoc="{entity} repository\n\nPersistence port for {entity} entities.",
            methods=(
                MethodSignature(
                    "findById",
                    (ParameterDefinition("id", "string"),),
                    "Effect.Effect<Option.Option<{entity}>, {entity}RepositoryError>",
                ),
                MethodSignature(
                    "findAll",
                    (),
                    "Effect.Effect<ReadonlyArray<{entity}>, {entity}RepositoryError>",
                ),
                MethodSignature(
                    "create",
                    (ParameterDefinition("input", "Create{entity}Input"),),
                    "Effect.Effect<{entity}, {entity}RepositoryError>",
                ),
                MethodSignature(
                    "update",
                    (ParameterDefinition("id", "string"), ParameterDefinition("input", "Update{entity}Input")),
                    "Effect.Effect<{entity}, {entity}RepositoryError>",
                ),
                MethodSignature(
                    "delete",
                    (ParameterDefinition("id", "string"),),
                    "Effect.Effect<void, {entity}RepositoryError>",
                ),
                MethodSignature(
                    "exists",
                    (ParameterDefinition("id", "string"),),
                    "Effect.Effect<boolean, {entity}RepositoryError>",
                ),
            ),
        )),
    ),
    defaults={"entity": "{className}"},
    imports=(
        ImportDefinition("effect", ("Context", "Effect", "Option")),
    ),
)

BRANDED_ID = FragmentDefinition(
    id="effect/branded-id",
    description="Branded string ID schema with annotations and inferred type",
    content=(
        SchemaContent(SchemaConfig(
            name="{name}",
            schema_type=SchemaType.STRING,
            brand="{name}",
            annotations={
                "identifier": "{name}",
                "title": "{entity} ID",
                "description": "Unique identifier for {entity} entity",
            },
            type_alias="{name}",
            jsdoc="{entity} ID Schema\n\nBranded ID type for type-safe entity identification.",
        )),
    ),
    defaults={"entity": "{className}", "name": "{className}Id"},
    imports=(ImportDefinition("effect", ("Schema",)),),
)

ALREADY_EXISTS_ERROR = FragmentDefinition(
    id="effect/already-exists-error",
    description="Data.TaggedError raised when creating an entity that exists",
    content=(
        TaggedErrorContent(TaggedErrorConfig(
            class_name="{entity}AlreadyExistsError",
            jsdoc="Error thrown when {entity} already exists",
            fields=(
                FieldDefinition("message", "string", jsdoc="Human-readable error message"),
                FieldDefinition("identifier", "string", optional=True,
                                jsdoc="Identifier of existing resource"),
            ),
            static_methods=(
                StaticMethodDefinition(
                    name="create",
                    params=(ParameterDefinition("identifier", "string", optional=True),),
                    body=(
                        "return new {entity}AlreadyExistsError({\n"
                        "  message: identifier\n"
                        "    ? `{entity} already exists: ${identifier}`\n"
                        '    : "{entity} already exists",\n'
                        "  ...(identifier !== undefined && { identifier })\n"
                        "})"
                    ),
                ),
            ),
        )),
    ),
    defaults={"entity": "{className}"},
    imports=(ImportDefinition("effect", ("Data",)),),
)

PERMISSION_ERROR = FragmentDefinition(
    id="effect/permission-error",
    description="Data.TaggedError raised when an operation on an entity is denied",
    content=(
        TaggedErrorContent(TaggedErrorConfig(
            class_name="{entity}PermissionError",
            jsdoc="Error thrown when {entity} operation is not permitted",
            fields=(
                FieldDefinition("message", "string", jsdoc="Human-readable error message"),
                FieldDefinition("operation", "string", jsdoc="Operation that was denied"),
                FieldDefinition("{idField}", "string", jsdoc="Resource identifier"),
            ),
            static_methods=(
                StaticMethodDefinition(
                    name="create",
                    params=(
                        ParameterDefinition("operation", "string"),
                        ParameterDefinition("{idField}", "string"),
                    ),
                    body=(
                        "return new {entity}PermissionError({\n"
                        "  message: `Operation '${operation}' not permitted on {entity} ${{idField}}`,\n"
                        "  operation,\n"
                        "  {idField}\n"
                        "})"
                    ),
                ),
            ),
        )),
    ),
    defaults={"entity": "{className}", "idField": "{propertyName}Id"},
    imports=(ImportDefinition("effect", ("Data",)),),
)

DATABASE_ERROR = FragmentDefinition(
    id="effect/database-error",
    description="Data.TaggedError for failed database operations",
    content=(
        TaggedErrorContent(TaggedErrorConfig(
            class_name="{entity}DatabaseError",
            jsdoc="Error thrown when {entity} database operation fails",
            fields=(
                FieldDefinition("message", "string", jsdoc="Human-readable error message"),
                FieldDefinition("operation", "string", jsdoc="Database operation that failed"),
                FieldDefinition("cause", "string", optional=True, jsdoc="Underlying error cause"),
            ),
            static_methods=(
                StaticMethodDefinition(
                    name="create",
                    params=(
                        ParameterDefinition("operation", "string"),
                        ParameterDefinition("message", "string"),
                        ParameterDefinition("cause", "string", optional=True),
                    ),
                    body=(
                        "return new {entity}DatabaseError({\n"
                        "  message,\n"
                        "  operation,\n"
                        "  ...(cause !== undefined && { cause })\n"
                        "})"
                    ),
                ),
            ),
        )),
    ),
    defaults={"entity": "{className}"},
    imports=(ImportDefinition("effect", ("Data",)),),
)

_ENTITY = {"entity": "{entity}"}
_ENTITY_AND_ID = {"entity": "{entity}", "idField": "{idField}"}

DOMAIN_ERRORS = FragmentDefinition(
    id="effect/domain-errors",
    description="NotFound, Validation, AlreadyExists and Permission errors of an entity",
    content=(
        FragmentReference("effect/not-found-error", _ENTITY_AND_ID),
        FragmentReference("effect/validation-error", _ENTITY),
        FragmentReference("effect/already-exists-error", _ENTITY),
        FragmentReference("effect/permission-error", _ENTITY_AND_ID),
    ),
    defaults={"entity": "{className}", "idField": "{propertyName}Id"},
)

REPOSITORY_ERRORS = FragmentDefinition(
    id="effect/repository-errors",
    description="Repository-level NotFound, Validation, Conflict and Database errors",
    content=(
        FragmentReference("effect/not-found-error", dict(_ENTITY_AND_ID, suffix="Repository")),
        FragmentReference("effect/validation-error", dict(_ENTITY, suffix="Repository")),
        TaggedErrorContent(TaggedErrorConfig(
            class_name="{entity}ConflictRepositoryError",
            jsdoc="Repository error for {entity} conflicts",
            fields=(
                FieldDefinition("message", "string", jsdoc="Human-readable error message"),
                FieldDefinition("identifier", "string", optional=True,
                                jsdoc="Identifier of conflicting resource"),
            ),
            static_methods=(
                StaticMethodDefinition(
                    name="create",
                    params=(ParameterDefinition("identifier", "string", optional=True),),
                    body=(
                        "return new {entity}ConflictRepositoryError({\n"
                        "  message: identifier\n"
                        "    ? `{entity} conflict: ${identifier}`\n"
                        '    : "{entity} conflict",\n'
                        "  ...(identifier !== undefined && { identifier })\n"
                        "})"
                    ),
                ),
            ),
        )),
        FragmentReference("effect/database-error", _ENTITY),
    ),
    defaults={"entity": "{className}", "idField": "{propertyName}Id"},
    imports=(ImportDefinition("effect", ("Data",)),),
)


def _crud_method(name, params, result, jsdoc):
    return MethodSignature(name, params, f"Effect.Effect<{result}, {{entity}}RepositoryError>", jsdoc)


_ID = ParameterDefinition("id", "string")
_LIST_PARAMS = (
    ParameterDefinition("filters", "{entity}Filters", optional=True),
    ParameterDefinition("pagination", "OffsetPaginationParams", optional=True),
    ParameterDefinition("sort", "SortOptions", optional=True),
)

SERVICE_TAG = FragmentDefinition(
    id="effect/service-tag",
    description="Context.Tag for the business service of an entity",
    content=(
        ContextTagContent(ContextTagConfig(
            service_name="{entity}Service",
            tag_identifier="{scope}/{library}-{fileName}/{entity}Service",
            jsdoc="{entity}Service Context Tag for dependency injection",
            methods=(
                _crud_method("get", (_ID,), "{entity}", "Get {entity} by ID"),
                _crud_method("list", _LIST_PARAMS, "PaginatedResult<{entity}>",
                             "List {entity} entities with filters and pagination"),
                _crud_method("create", (ParameterDefinition("input", "Partial<{entity}>"),),
                             "{entity}", "Create a new {entity}"),
                _crud_method("update",
                             (_ID, ParameterDefinition("input", "Partial<{entity}>")),
                             "{entity}", "Update an existing {entity}"),
                _crud_method("delete", (_ID,), "void", "Delete a {entity}"),
            ),
        )),
    ),
    defaults={"entity": "{className}", "library": "contract"},
    imports=(ImportDefinition("effect", ("Context", "Effect")),),
)

PROJECTION_REPOSITORY_TAG = FragmentDefinition(
    id="effect/projection-repository-tag",
    description="Context.Tag for the CQRS read-model repository of an entity",
    content=(
        ContextTagContent(ContextTagConfig(
            service_name="{entity}ProjectionRepository",
            tag_identifier="{scope}/{library}-{fileName}/{entity}ProjectionRepository",
            jsdoc="{entity}ProjectionRepository Context Tag for CQRS read models",
            methods=(
                _crud_method("findProjection", (_ID,), "Option.Option<unknown>",
                             "Find projection by ID"),
                _crud_method(
                    "listProjections",
                    (
                        ParameterDefinition("filters", "Record<string, unknown>", optional=True),
                        ParameterDefinition("pagination", "PaginationParams", optional=True),
                    ),
                    "PaginatedResult<unknown>",
                    "List projections with filters",
                ),
                _crud_method("updateProjection",
                             (_ID, ParameterDefinition("data", "unknown")),
                             "void", "Update projection (called by event handlers)"),
                _crud_method("rebuildProjection", (_ID,), "void",
                             "Rebuild projection from event stream"),
            ),
        )),
    ),
    defaults={"entity": "{className}", "library": "contract"},
    imports=(ImportDefinition("effect", ("Context", "Effect", "Option")),),
)


def render_struct_schema(name: str, type_alias: str, jsdoc: str, fields: Any,
                         optional: bool = False):
    """A ``Schema.Struct`` node over authored field dicts."""
    field_list = [dict(f) for f in (fields or ())]
    if optional:
        field_list = [dict(f, optional=True) for f in field_list]
    return {
        "type": "schema",
        "config": {
            "name": name,
            "schemaType": "Struct",
            "fields": field_list,
            "typeAlias": type_alias,
            "jsdoc": jsdoc,
        },
    }


def render_entity_schema(params: Mapping[str, Any], context: TemplateContext):
    entity = str(params["entity"])
    return render_struct_schema(
        str(params.get("name") or f"{entity}Schema"),
        str(params.get("typeAlias") or entity),
        f"{entity} entity schema",
        params["fields"],
    )


def render_create_input_schema(params: Mapping[str, Any], context: TemplateContext):
    entity = str(params["entity"])
    name = f"Create{entity}Input"
    return render_struct_schema(
        name, name, f"Input schema for creating a {entity}", params["fields"]
    )


def render_update_input_schema(params: Mapping[str, Any], context: TemplateContext):
    entity = str(params["entity"])
    name = f"Update{entity}Input"
    return render_struct_schema(
        name, name, f"Input schema for updating a {entity}", params["fields"], optional=True
    )


ENTITY_SCHEMA = FragmentDefinition(
    id="effect/entity-schema",
    description="Schema.Struct of an entity with its inferred type",
    renderer=render_entity_schema,
    defaults={"entity": "{className}"},
    required_params=("fields",),
    imports=(ImportDefinition("effect", ("Schema",)),),
)

CREATE_INPUT_SCHEMA = FragmentDefinition(
    id="effect/create-input-schema",
    description="Schema.Struct of the input for creating an entity",
    renderer=render_create_input_schema,
    defaults={"entity": "{className}"},
    required_params=("fields",),
    imports=(ImportDefinition("effect", ("Schema",)),),
)

UPDATE_INPUT_SCHEMA = FragmentDefinition(
    id="effect/update-input-schema",
    description="Schema.Struct of the input for updating an entity, every field optional",
    renderer=render_update_input_schema,
    defaults={"entity": "{className}"},
    required_params=("fields",),
    imports=(ImportDefinition("effect", ("Schema",)),),
)

LAYER_TYPES = ("effect", "sync", "scoped", "succeed", "suspend")


def _layer_list(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [str(item) for item in value]


def build_layer_expression(layer_type: str, service_tag: str, implementation: str) -> str:
    """``Layer.<type>(Tag, impl)`` for one of the supported layer types."""
    if layer_type == "effect":
        return f"Layer.effect({service_tag}, {implementation})"
    if layer_type == "sync":
        return f"Layer.sync({service_tag}, () => {implementation})"
    if layer_type == "scoped":
        return f"Layer.scoped({service_tag}, {implementation})"
    if layer_type == "suspend":
        return f"Layer.suspend(() => Layer.succeed({service_tag}, {implementation}))"
    # succeed, and the fallback for unknown types
    return f"Layer.succeed({service_tag}, {implementation})"


def apply_composition(expr: str, merge: Sequence[str], provide: Sequence[str],
                      provide_merge: Sequence[str]) -> str:
    """Apply merge, then provide, then provideMerge."""
    if merge:
        expr = f"Layer.merge({expr}, {', '.join(merge)})"
    if provide:
        expr = f"{expr}.pipe(Layer.provide({', '.join(provide)}))"
    if provide_merge:
        expr = f"{expr}.pipe(Layer.provideMerge({', '.join(provide_merge)}))"
    return expr


def render_layer(params: Mapping[str, Any], context: TemplateContext):
    layer_type = str(params.get("layerType", "succeed"))
    if layer_type not in LAYER_TYPES:
        layer_type = "succeed"
    expr = build_layer_expression(
        layer_type, str(params["serviceTag"]), str(params["implementation"])
    )
    expr = apply_composition(
        expr,
        _layer_list(params.get("merge")),
        _layer_list(params.get("provide")),
        _layer_list(params.get("provideMerge")),
    )
    return ConstantContent(ConstantConfig(
        name=str(params["name"]),
        value=expr,
        jsdoc=params.get("jsdoc"),
        exported=bool(params.get("exported", True)),
    ))


LAYER = FragmentDefinition(
    id="effect/layer",
    description="Layer constant with optional merge/provide composition",
    renderer=render_layer,
    defaults={"layerType": "succeed"},
    required_params=("name", "serviceTag", "implementation"),
    imports=(ImportDefinition("effect", ("Layer",)),),
)


def merge_all(layers: Sequence[str]) -> str:
    """``Layer.mergeAll`` over several layers; a single layer stays as is."""
    if not layers:
        return "Layer.empty"
    if len(layers) == 1:
        return layers[0]
    return f"Layer.mergeAll({', '.join(layers)})"


def render_composed_layer(params: Mapping[str, Any], context: TemplateContext):
    expr = apply_composition(
        merge_all(_layer_list(params.get("layers"))),
        (),
        _layer_list(params.get("provide")),
        _layer_list(params.get("provideMerge")),
    )
    return ConstantContent(ConstantConfig(
        name=str(params["name"]),
        value=expr,
        jsdoc=params.get("jsdoc") or f"Composed {params['name']} layer",
        exported=bool(params.get("exported", True)),
    ))


def render_infrastructure_layer(params: Mapping[str, Any], context: TemplateContext):
    variant = str(params["variant"])
    services = _layer_list(params.get("services"))
    return ConstantContent(ConstantConfig(
        name=f"{params['name']}{variant}",
        value=merge_all([f"{service}.{variant}" for service in services]),
        jsdoc=params.get("jsdoc") or f"{variant} infrastructure layer",
        exported=bool(params.get("exported", True)),
    ))


COMPOSED_LAYER = FragmentDefinition(
    id="effect/composed-layer",
    description="Layer.mergeAll of service layers, optionally provided with infrastructure",
    renderer=render_composed_layer,
    required_params=("name", "layers"),
    imports=(ImportDefinition("effect", ("Layer",)),),
)

INFRASTRUCTURE_LAYER = FragmentDefinition(
    id="effect/infrastructure-layer",
    description="Layer.mergeAll of one static layer variant of several services",
    renderer=render_infrastructure_layer,
    defaults={"name": "Infrastructure", "variant": "Live"},
    required_params=("services",),
    imports=(ImportDefinition("effect", ("Layer",)),),
)

SECTION_COMMENT = FragmentDefinition(
    id="common/section-comment",
    description="Banner comment separating parts of a file",
    content=(RawContent("// " + "=" * 76 + "\n// {title}\n// " + "=" * 76),),
    required_params=("title",),
)

BUILTIN_FRAGMENTS = (
    NOT_FOUND_ERROR,
    VALIDATION_ERROR,
    ALREADY_EXISTS_ERROR,
    PERMISSION_ERROR,
    DATABASE_ERROR,
    DOMAIN_ERRORS,
    REPOSITORY_ERRORS,
    REPOSITORY_TAG,
    SERVICE_TAG,
    PROJECTION_REPOSITORY_TAG,
    BRANDED_ID,
    ENTITY_SCHEMA,
    CREATE_INPUT_SCHEMA,
    UPDATE_INPUT_SCHEMA,
    LAYER,
    COMPOSED_LAYER,
    INFRASTRUCTURE_LAYER,
    SECTION_COMMENT,
)
