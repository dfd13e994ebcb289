"""
Template definition model.

Immutable, data-only description of one generated file: metadata, imports,
ordered sections of content nodes and optional conditional blocks. Nothing
in this module has behavior beyond trivial accessors; the loader builds
these values from dicts and the compiler consumes them.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, Mapping, Optional, Tuple, Union


class ContentKind(str, Enum):
    """Tag of every content node variant."""

    RAW = "raw"
    CONTEXT_TAG = "contextTag"
    TAGGED_ERROR = "taggedError"
    SCHEMA = "schema"
    RPC_DEFINITION = "rpcDefinition"
    FRAGMENT = "fragment"
    INTERFACE = "interface"
    CLASS = "class"
    CONSTANT = "constant"


# Naming variants every compilation context must carry.
REQUIRED_CONTEXT_KEYS: Tuple[str, ...] = (
    "className",
    "fileName",
    "propertyName",
    "constantName",
    "scope",
    "packageName",
    "projectName",
    "libraryType",
)

TemplateContext = Mapping[str, Any]


# Shared member records


@dataclass(frozen=True)
class ParameterDefinition:
    name: str
    type: str
    optional: bool = False


@dataclass(frozen=True)
class MethodSignature:
    """Method declared on a service interface or TypeScript interface."""

    name: str
    params: Tuple[ParameterDefinition, ...] = ()
    return_type: str = "void"
    jsdoc: Optional[str] = None


@dataclass(frozen=True)
class LayerConfig:
    """Static layer member on a service tag (``static Live = ...``)."""

    name: str
    implementation: str
    dependencies: Tuple[str, ...] = ()
    jsdoc: Optional[str] = None


@dataclass(frozen=True)
class FieldDefinition:
    """
    Field of a tagged error.

    ``readonly`` is accepted for symmetry with properties but tagged error
    fields are always emitted immutable.
    """

    name: str
    type: str
    optional: bool = False
    readonly: bool = True
    default: Optional[str] = None
    jsdoc: Optional[str] = None


@dataclass(frozen=True)
class StaticMethodDefinition:
    name: str
    body: str
    params: Tuple[ParameterDefinition, ...] = ()
    return_type: Optional[str] = None


@dataclass(frozen=True)
class PropertyDefinition:
    name: str
    type: str
    readonly: bool = True
    optional: bool = False
    jsdoc: Optional[str] = None


@dataclass(frozen=True)
class MethodConfig:
    """Class method with a body."""

    name: str
    body: str
    params: Tuple[ParameterDefinition, ...] = ()
    return_type: Optional[str] = None
    is_static: bool = False
    is_async: bool = False
    jsdoc: Optional[str] = None


@dataclass(frozen=True)
class StaticMemberConfig:
    name: str
    value: str
    type: Optional[str] = None
    readonly: bool = True


# Content configs


@dataclass(frozen=True)
class ContextTagConfig:
    service_name: str
    methods: Tuple[MethodSignature, ...] = ()
    tag_identifier: Optional[str] = None
    static_layers: Tuple[LayerConfig, ...] = ()
    jsdoc: Optional[str] = None
    exported: bool = True


@dataclass(frozen=True)
class TaggedErrorConfig:
    class_name: str
    fields: Tuple[FieldDefinition, ...] = ()
    tag_name: Optional[str] = None
    static_methods: Tuple[StaticMethodDefinition, ...] = ()
    jsdoc: Optional[str] = None
    exported: bool = True


class SchemaType(str, Enum):
    STRUCT = "Struct"
    CLASS = "Class"
    STRING = "String"
    NUMBER = "Number"
    BOOLEAN = "Boolean"
    ARRAY = "Array"
    UNION = "Union"
    TAGGED_UNION = "TaggedUnion"


class SchemaFieldKind(str, Enum):
    """Primitive field kinds usable instead of a raw schema expression."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    STRUCT = "struct"
    ARRAY = "array"


@dataclass(frozen=True)
class SchemaFieldDefinition:
    """
    Field of a schema.

    Either ``schema`` holds a schema expression verbatim (``Schema.String``,
    ``UserId``) or ``kind`` selects a primitive; ``struct`` kinds use the
    nested ``fields`` and ``array`` kinds use ``items`` as element type.
    """

    name: str
    schema: Optional[str] = None
    kind: Optional[SchemaFieldKind] = None
    optional: bool = False
    fields: Tuple["SchemaFieldDefinition", ...] = ()
    items: Optional["SchemaFieldDefinition"] = None
    jsdoc: Optional[str] = None


@dataclass(frozen=True)
class SchemaConfig:
    name: str
    schema_type: SchemaType = SchemaType.STRUCT
    fields: Tuple[SchemaFieldDefinition, ...] = ()
    brand: Optional[str] = None
    annotations: Mapping[str, str] = field(default_factory=dict)
    type_alias: Optional[str] = None
    jsdoc: Optional[str] = None
    exported: bool = True


class RouteType(str, Enum):
    PUBLIC = "public"
    PROTECTED = "protected"
    ADMIN = "admin"


class RpcPayloadKind(str, Enum):
    STRUCT = "struct"
    SCHEMA = "schema"
    VOID = "void"


@dataclass(frozen=True)
class RpcPayloadConfig:
    kind: RpcPayloadKind = RpcPayloadKind.VOID
    fields: Tuple[SchemaFieldDefinition, ...] = ()
    name: Optional[str] = None


@dataclass(frozen=True)
class RpcConfig:
    name: str
    route_type: RouteType
    success: str
    error: str
    payload: RpcPayloadConfig = field(default_factory=RpcPayloadConfig)
    jsdoc: Optional[str] = None


@dataclass(frozen=True)
class InterfaceConfig:
    name: str
    properties: Tuple[PropertyDefinition, ...] = ()
    methods: Tuple[MethodSignature, ...] = ()
    extends: Tuple[str, ...] = ()
    jsdoc: Optional[str] = None
    exported: bool = True


@dataclass(frozen=True)
class ClassConfig:
    name: str
    extends: Optional[str] = None
    implements: Tuple[str, ...] = ()
    properties: Tuple[PropertyDefinition, ...] = ()
    methods: Tuple[MethodConfig, ...] = ()
    statics: Tuple[StaticMemberConfig, ...] = ()
    jsdoc: Optional[str] = None
    exported: bool = True


@dataclass(frozen=True)
class ConstantConfig:
    name: str
    value: str
    type: Optional[str] = None
    jsdoc: Optional[str] = None
    exported: bool = True


# Content nodes


@dataclass(frozen=True)
class RawContent:
    value: str
    kind: ClassVar[ContentKind] = ContentKind.RAW


@dataclass(frozen=True)
class ContextTagContent:
    config: ContextTagConfig
    kind: ClassVar[ContentKind] = ContentKind.CONTEXT_TAG


@dataclass(frozen=True)
class TaggedErrorContent:
    config: TaggedErrorConfig
    kind: ClassVar[ContentKind] = ContentKind.TAGGED_ERROR


@dataclass(frozen=True)
class SchemaContent:
    config: SchemaConfig
    kind: ClassVar[ContentKind] = ContentKind.SCHEMA


@dataclass(frozen=True)
class RpcDefinitionContent:
    config: RpcConfig
    kind: ClassVar[ContentKind] = ContentKind.RPC_DEFINITION


@dataclass(frozen=True)
class FragmentReference:
    ref: str
    params: Mapping[str, Any] = field(default_factory=dict)
    kind: ClassVar[ContentKind] = ContentKind.FRAGMENT


@dataclass(frozen=True)
class InterfaceContent:
    config: InterfaceConfig
    kind: ClassVar[ContentKind] = ContentKind.INTERFACE


@dataclass(frozen=True)
class ClassContent:
    config: ClassConfig
    kind: ClassVar[ContentKind] = ContentKind.CLASS


@dataclass(frozen=True)
class ConstantContent:
    config: ConstantConfig
    kind: ClassVar[ContentKind] = ContentKind.CONSTANT


ContentDefinition = Union[
    RawContent,
    ContextTagContent,
    TaggedErrorContent,
    SchemaContent,
    RpcDefinitionContent,
    FragmentReference,
    InterfaceContent,
    ClassContent,
    ConstantContent,
]


# File structure


@dataclass(frozen=True)
class ImportDefinition:
    source: str
    items: Tuple[str, ...] = ()
    type_only: bool = False
    condition: Optional[str] = None


@dataclass(frozen=True)
class SectionDefinition:
    content: Tuple[ContentDefinition, ...]
    title: Optional[str] = None
    condition: Optional[str] = None
    imports: Tuple[ImportDefinition, ...] = ()


@dataclass(frozen=True)
class ConditionalContent:
    """Extra imports and sections included when a context flag is truthy."""

    sections: Tuple[SectionDefinition, ...] = ()
    imports: Tuple[ImportDefinition, ...] = ()


@dataclass(frozen=True)
class TemplateMeta:
    title: str
    description: str = ""
    module: Optional[str] = None


@dataclass(frozen=True)
class TemplateDefinition:
    """One generated file: metadata, imports, sections and conditionals."""

    id: str
    meta: TemplateMeta
    imports: Tuple[ImportDefinition, ...] = ()
    sections: Tuple[SectionDefinition, ...] = ()
    conditionals: Mapping[str, ConditionalContent] = field(default_factory=dict)

    @property
    def library_type(self) -> str:
        return self.id.split("/", 1)[0]

    @property
    def file_type(self) -> str:
        return self.id.split("/", 1)[-1]


def section_count(definition: TemplateDefinition) -> int:
    """Total sections including those inside conditional blocks."""
    return len(definition.sections) + sum(
        len(block.sections) for block in definition.conditionals.values()
    )


def describe_node(node: ContentDefinition) -> Dict[str, Any]:
    """Short identifying summary of a content node, for tooling output."""
    if isinstance(node, RawContent):
        first_line = node.value.strip().splitlines()[0] if node.value.strip() else ""
        return {"type": node.kind.value, "summary": first_line[:60]}
    if isinstance(node, FragmentReference):
        return {"type": node.kind.value, "summary": node.ref}
    config = node.config
    name = (
        getattr(config, "service_name", None)
        or getattr(config, "class_name", None)
        or getattr(config, "name", "")
    )
    return {"type": node.kind.value, "summary": name}
