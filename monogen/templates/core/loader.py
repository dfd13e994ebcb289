"""
Conversion of authored dict/JSON data into the template definition model.

Serialized definitions use camelCase keys (``isTypeOnly``, ``staticLayers``,
``schemaType``). Problems in the authored data raise ``DefinitionError``
with the path of the offending value; they are authoring bugs and surface
before any compilation starts.
"""

from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from ...logging_config import get_logger
from ...utils import load_json
from .types import (
    ClassConfig,
    ClassContent,
    ConditionalContent,
    ConstantConfig,
    ConstantContent,
    ContentDefinition,
    ContentKind,
    ContextTagConfig,
    ContextTagContent,
    FieldDefinition,
    FragmentReference,
    ImportDefinition,
    InterfaceConfig,
    InterfaceContent,
    LayerConfig,
    MethodConfig,
    MethodSignature,
    ParameterDefinition,
    PropertyDefinition,
    RawContent,
    RouteType,
    RpcConfig,
    RpcDefinitionContent,
    RpcPayloadConfig,
    RpcPayloadKind,
    SchemaConfig,
    SchemaContent,
    SchemaFieldDefinition,
    SchemaFieldKind,
    SchemaType,
    SectionDefinition,
    StaticMemberConfig,
    StaticMethodDefinition,
    TaggedErrorConfig,
    TaggedErrorContent,
    TemplateDefinition,
    TemplateMeta,
)

logger = get_logger(__name__)


class DefinitionError(ValueError):
    """Raised when authored definition data is malformed."""

    def __init__(self, message: str, path: str = ""):
        self.message = message
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)


def _require(data: Mapping[str, Any], key: str, path: str) -> Any:
    if not isinstance(data, Mapping):
        raise DefinitionError(f"expected an object, got {type(data).__name__}", path)
    if key not in data or data[key] is None:
        raise DefinitionError(f"missing required key '{key}'", path)
    return data[key]


def _string(data: Mapping[str, Any], key: str, path: str, required: bool = True) -> Optional[str]:
    value = _require(data, key, path) if required else data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise DefinitionError(f"'{key}' must be a string", path)
    return value


def _strings(data: Mapping[str, Any], key: str, path: str) -> Tuple[str, ...]:
    value = data.get(key) or ()
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        raise DefinitionError(f"'{key}' must be a list of strings", path)
    return tuple(value)


def _list(data: Mapping[str, Any], key: str, path: str, parse: Callable[[Any, str], Any]) -> tuple:
    value = data.get(key) or ()
    if not isinstance(value, (list, tuple)):
        raise DefinitionError(f"'{key}' must be a list", path)
    return tuple(parse(item, f"{path}.{key}[{i}]") for i, item in enumerate(value))


def _enum(enum_cls, value: Any, key: str, path: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise DefinitionError(f"invalid {key} '{value}' (expected one of: {allowed})", path)


# Member records


def parse_parameter(data: Mapping[str, Any], path: str) -> ParameterDefinition:
    return ParameterDefinition(
        name=_string(data, "name", path),
        type=_string(data, "type", path),
        optional=bool(data.get("optional", False)),
    )


def parse_method_signature(data: Mapping[str, Any], path: str) -> MethodSignature:
    return MethodSignature(
        name=_string(data, "name", path),
        params=_list(data, "params", path, parse_parameter),
        return_type=_string(data, "returnType", path, required=False) or "void",
        jsdoc=_string(data, "jsdoc", path, required=False),
    )


def parse_layer(data: Mapping[str, Any], path: str) -> LayerConfig:
    return LayerConfig(
        name=_string(data, "name", path),
        implementation=_string(data, "implementation", path),
        dependencies=_strings(data, "dependencies", path),
        jsdoc=_string(data, "jsdoc", path, required=False),
    )


def parse_field(data: Mapping[str, Any], path: str) -> FieldDefinition:
    return FieldDefinition(
        name=_string(data, "name", path),
        type=_string(data, "type", path, required=False) or "string",
        optional=bool(data.get("optional", False)),
        readonly=bool(data.get("readonly", True)),
        default=_string(data, "default", path, required=False),
        jsdoc=_string(data, "jsdoc", path, required=False),
    )


def parse_static_method(data: Mapping[str, Any], path: str) -> StaticMethodDefinition:
    return StaticMethodDefinition(
        name=_string(data, "name", path),
        body=_string(data, "body", path),
        params=_list(data, "params", path, parse_parameter),
        return_type=_string(data, "returnType", path, required=False),
    )


def parse_property(data: Mapping[str, Any], path: str) -> PropertyDefinition:
    return PropertyDefinition(
        name=_string(data, "name", path),
        type=_string(data, "type", path),
        readonly=bool(data.get("readonly", True)),
        optional=bool(data.get("optional", False)),
        jsdoc=_string(data, "jsdoc", path, required=False),
    )


def parse_method(data: Mapping[str, Any], path: str) -> MethodConfig:
    return MethodConfig(
        name=_string(data, "name", path),
        body=_string(data, "body", path, required=False) or "",
        params=_list(data, "params", path, parse_parameter),
        return_type=_string(data, "returnType", path, required=False),
        is_static=bool(data.get("isStatic", False)),
        is_async=bool(data.get("isAsync", False)),
        jsdoc=_string(data, "jsdoc", path, required=False),
    )


def parse_static_member(data: Mapping[str, Any], path: str) -> StaticMemberConfig:
    return StaticMemberConfig(
        name=_string(data, "name", path),
        value=_string(data, "value", path),
        type=_string(data, "type", path, required=False),
        readonly=bool(data.get("readonly", True)),
    )


def parse_schema_field(data: Mapping[str, Any], path: str) -> SchemaFieldDefinition:
    kind = data.get("kind")
    items = data.get("items")
    return SchemaFieldDefinition(
        name=_string(data, "name", path, required=False) or "",
        schema=_string(data, "schema", path, required=False),
        kind=_enum(SchemaFieldKind, kind, "kind", path) if kind is not None else None,
        optional=bool(data.get("optional", False)),
        fields=_list(data, "fields", path, parse_schema_field),
        items=parse_schema_field(items, f"{path}.items") if items is not None else None,
        jsdoc=_string(data, "jsdoc", path, required=False),
    )


# Content configs


def parse_context_tag(data: Mapping[str, Any], path: str) -> ContextTagConfig:
    return ContextTagConfig(
        service_name=_string(data, "serviceName", path),
        methods=_list(data, "methods", path, parse_method_signature),
        tag_identifier=_string(data, "tagIdentifier", path, required=False),
        static_layers=_list(data, "staticLayers", path, parse_layer),
        jsdoc=_string(data, "jsdoc", path, required=False),
        exported=bool(data.get("exported", True)),
    )


def parse_tagged_error(data: Mapping[str, Any], path: str) -> TaggedErrorConfig:
    return TaggedErrorConfig(
        class_name=_string(data, "className", path),
        fields=_list(data, "fields", path, parse_field),
        tag_name=_string(data, "tagName", path, required=False),
        static_methods=_list(data, "staticMethods", path, parse_static_method),
        jsdoc=_string(data, "jsdoc", path, required=False),
        exported=bool(data.get("exported", True)),
    )


def parse_schema(data: Mapping[str, Any], path: str) -> SchemaConfig:
    annotations = data.get("annotations") or {}
    if not isinstance(annotations, Mapping):
        raise DefinitionError("'annotations' must be an object", path)
    return SchemaConfig(
        name=_string(data, "name", path),
        schema_type=_enum(SchemaType, data.get("schemaType", "Struct"), "schemaType", path),
        fields=_list(data, "fields", path, parse_schema_field),
        brand=_string(data, "brand", path, required=False),
        annotations={str(k): str(v) for k, v in annotations.items()},
        type_alias=_string(data, "typeAlias", path, required=False),
        jsdoc=_string(data, "jsdoc", path, required=False),
        exported=bool(data.get("exported", True)),
    )


def parse_rpc_payload(data: Any, path: str) -> RpcPayloadConfig:
    if data is None:
        return RpcPayloadConfig()
    kind = _enum(RpcPayloadKind, _require(data, "type", path), "payload type", path)
    return RpcPayloadConfig(
        kind=kind,
        fields=_list(data, "fields", path, parse_schema_field),
        name=_string(data, "name", path, required=kind == RpcPayloadKind.SCHEMA),
    )


def parse_rpc(data: Mapping[str, Any], path: str) -> RpcConfig:
    return RpcConfig(
        name=_string(data, "name", path),
        route_type=_enum(RouteType, data.get("routeType", "public"), "routeType", path),
        success=_string(data, "success", path),
        error=_string(data, "error", path),
        payload=parse_rpc_payload(data.get("payload"), f"{path}.payload"),
        jsdoc=_string(data, "jsdoc", path, required=False),
    )


def parse_interface(data: Mapping[str, Any], path: str) -> InterfaceConfig:
    return InterfaceConfig(
        name=_string(data, "name", path),
        properties=_list(data, "properties", path, parse_property),
        methods=_list(data, "methods", path, parse_method_signature),
        extends=_strings(data, "extends", path),
        jsdoc=_string(data, "jsdoc", path, required=False),
        exported=bool(data.get("isExported", data.get("exported", True))),
    )


def parse_class(data: Mapping[str, Any], path: str) -> ClassConfig:
    return ClassConfig(
        name=_string(data, "name", path),
        extends=_string(data, "extends", path, required=False),
        implements=_strings(data, "implements", path),
        properties=_list(data, "properties", path, parse_property),
        methods=_list(data, "methods", path, parse_method),
        statics=_list(data, "statics", path, parse_static_member),
        jsdoc=_string(data, "jsdoc", path, required=False),
        exported=bool(data.get("isExported", data.get("exported", True))),
    )


def parse_constant(data: Mapping[str, Any], path: str) -> ConstantConfig:
    return ConstantConfig(
        name=_string(data, "name", path),
        value=_string(data, "value", path),
        type=_string(data, "type", path, required=False),
        jsdoc=_string(data, "jsdoc", path, required=False),
        exported=bool(data.get("isExported", data.get("exported", True))),
    )


_CONFIG_NODES = {
    ContentKind.CONTEXT_TAG: (parse_context_tag, ContextTagContent),
    ContentKind.TAGGED_ERROR: (parse_tagged_error, TaggedErrorContent),
    ContentKind.SCHEMA: (parse_schema, SchemaContent),
    ContentKind.RPC_DEFINITION: (parse_rpc, RpcDefinitionContent),
    ContentKind.INTERFACE: (parse_interface, InterfaceContent),
    ContentKind.CLASS: (parse_class, ClassContent),
    ContentKind.CONSTANT: (parse_constant, ConstantContent),
}


def parse_content(data: Any, path: str = "content") -> ContentDefinition:
    """
    Convert one content node dict into its typed variant.

    Args:
        data: Dict with a ``type`` tag
        path: Location used in error messages

    Returns:
        Typed content node

    Raises:
        DefinitionError: If the tag is unknown or required keys are missing
    """
    if isinstance(data, (RawContent, FragmentReference)) or hasattr(data, "config"):
        return data
    kind = _enum(ContentKind, _require(data, "type", path), "content type", path)

    if kind == ContentKind.RAW:
        return RawContent(value=_string(data, "value", path))
    if kind == ContentKind.FRAGMENT:
        params = data.get("params") or {}
        if not isinstance(params, Mapping):
            raise DefinitionError("'params' must be an object", path)
        return FragmentReference(ref=_string(data, "ref", path), params=dict(params))

    parse, node_cls = _CONFIG_NODES[kind]
    return node_cls(config=parse(_require(data, "config", path), f"{path}.config"))


def parse_contents(data: Any, path: str) -> Tuple[ContentDefinition, ...]:
    """Accept one node or a list of nodes."""
    if isinstance(data, (list, tuple)):
        return tuple(parse_content(item, f"{path}[{i}]") for i, item in enumerate(data))
    return (parse_content(data, f"{path}[0]"),)


def parse_import(data: Any, path: str) -> ImportDefinition:
    if isinstance(data, ImportDefinition):
        return data
    source = data.get("from", data.get("source")) if isinstance(data, Mapping) else None
    if not isinstance(source, str):
        raise DefinitionError("import requires a 'from' string", path)
    return ImportDefinition(
        source=source,
        items=_strings(data, "items", path),
        type_only=bool(data.get("isTypeOnly", data.get("typeOnly", False))),
        condition=_string(data, "condition", path, required=False),
    )


def parse_section(data: Any, path: str) -> SectionDefinition:
    if isinstance(data, SectionDefinition):
        return data
    return SectionDefinition(
        content=parse_contents(_require(data, "content", path), f"{path}.content"),
        title=_string(data, "title", path, required=False),
        condition=_string(data, "condition", path, required=False),
        imports=_list(data, "imports", path, parse_import),
    )


def parse_conditional(data: Any, path: str) -> ConditionalContent:
    if isinstance(data, ConditionalContent):
        return data
    if not isinstance(data, Mapping):
        raise DefinitionError("conditional block must be an object", path)
    return ConditionalContent(
        sections=_list(data, "sections", path, parse_section),
        imports=_list(data, "imports", path, parse_import),
    )


def parse_definition(data: Mapping[str, Any]) -> TemplateDefinition:
    """
    Convert an authored definition dict into a TemplateDefinition.

    Args:
        data: Definition with ``id``, ``meta``, ``imports``, ``sections`` and
            optional ``conditionals``

    Returns:
        Immutable TemplateDefinition

    Raises:
        DefinitionError: If the data is malformed
    """
    template_id = _string(data, "id", "definition")
    path = template_id
    meta_data = _require(data, "meta", path)
    meta = TemplateMeta(
        title=_string(meta_data, "title", f"{path}.meta"),
        description=_string(meta_data, "description", f"{path}.meta", required=False) or "",
        module=_string(meta_data, "module", f"{path}.meta", required=False),
    )

    conditionals_data = data.get("conditionals") or {}
    if not isinstance(conditionals_data, Mapping):
        raise DefinitionError("'conditionals' must be an object", path)
    conditionals: Dict[str, ConditionalContent] = {
        flag: parse_conditional(block, f"{path}.conditionals.{flag}")
        for flag, block in conditionals_data.items()
    }

    definition = TemplateDefinition(
        id=template_id,
        meta=meta,
        imports=_list(data, "imports", path, parse_import),
        sections=_list(data, "sections", path, parse_section),
        conditionals=conditionals,
    )
    logger.debug(
        "Parsed definition %s (%d sections, %d conditionals)",
        template_id,
        len(definition.sections),
        len(conditionals),
    )
    return definition


def load_definitions(source: Union[str, Path]) -> List[TemplateDefinition]:
    """
    Load one definition or a list of definitions from a JSON file or URL.

    Raises:
        JSONLoaderError: If the document is neither an object nor an array
        DefinitionError: If a definition in it is malformed
    """
    _, data = load_json(source, expect=(dict, list))
    if isinstance(data, Mapping):
        return [parse_definition(data)]
    return [parse_definition(item) for item in data]
