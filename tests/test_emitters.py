"""Tests for the per-kind content emitters."""

import pytest

from monogen.templates.core.errors import DiagnosticCode, Severity
from monogen.templates.core.loader import parse_content
from monogen.templates.core.types import ContentKind
from monogen.templates.emitters import CANONICAL_LAYER_ORDER, EMITTERS, emit_node, order_layers


def emit(data, context, env):
    return emit_node(parse_content(data), context, env)


def codes(result):
    return [d.code for d in result.error.diagnostics]


class TestDispatch:
    def test_every_kind_has_an_emitter(self):
        assert set(EMITTERS) == set(ContentKind)

    def test_unsupported_node(self, context, env):
        result = emit_node(object(), context, env)
        assert not result.success
        assert codes(result) == [DiagnosticCode.INVALID_CONFIG]


class TestRawEmitter:
    def test_interpolates(self, env):
        result = emit(
            {"type": "raw", "value": 'export const {constantName} = "{fileName}"'},
            {"constantName": "USER_ID", "fileName": "user-id"},
            env,
        )
        assert result.value == 'export const USER_ID = "user-id"'

    def test_unresolved_variables_all_reported(self, env):
        result = emit({"type": "raw", "value": "{a}\n{b}"}, {}, env)
        assert not result.success
        diagnostics = result.error.diagnostics
        assert [d.message for d in diagnostics] == ["Unknown variable: a", "Unknown variable: b"]
        assert [(d.line, d.column) for d in diagnostics] == [(1, 1), (2, 1)]
        assert all(d.location == "value" for d in diagnostics)


class TestContextTagEmitter:
    def test_minimal_tag(self, context, env):
        result = emit({
            "type": "contextTag",
            "config": {
                "serviceName": "UserService",
                "methods": [
                    {"name": "get", "params": [{"name": "id", "type": "string"}],
                     "returnType": "Effect.Effect<User>"},
                ],
            },
        }, context, env)
        assert result.value == (
            'export class UserService extends Context.Tag("UserService")<\n'
            "  UserService,\n"
            "  {\n"
            "    readonly get: (id: string) => Effect.Effect<User>\n"
            "  }\n"
            ">() {}"
        )

    def test_layers_emitted_in_canonical_order(self, context, env):
        result = emit({
            "type": "contextTag",
            "config": {
                "serviceName": "{className}Service",
                "staticLayers": [
                    {"name": "Dev", "implementation": "devImpl"},
                    {"name": "Live", "implementation": "liveImpl"},
                    {"name": "Test", "implementation": "testImpl"},
                ],
            },
        }, context, env)
        text = result.value
        live = text.index("static Live = liveImpl")
        test = text.index("static Test = testImpl")
        dev = text.index("static Dev = devImpl")
        assert live < test < dev

    def test_tag_identifier_and_layer_dependencies(self, context, env):
        result = emit({
            "type": "contextTag",
            "config": {
                "serviceName": "{className}Service",
                "tagIdentifier": "{scope}/infra-{fileName}/{className}Service",
                "staticLayers": [
                    {"name": "Live", "implementation": "impl", "dependencies": ["Database"]},
                ],
            },
        }, context, env)
        assert 'Context.Tag("@acme/infra-user-profile/UserProfileService")' in result.value
        assert "   * Requires: Database\n" in result.value

    def test_invalid_service_name(self, context, env):
        result = emit({
            "type": "contextTag",
            "config": {"serviceName": "{fileName}Service"},
        }, context, env)
        assert not result.success
        diagnostic = result.error.diagnostics[0]
        assert diagnostic.code == DiagnosticCode.INVALID_IDENTIFIER
        assert diagnostic.location == "config.serviceName"

    def test_duplicate_methods(self, context, env):
        result = emit({
            "type": "contextTag",
            "config": {
                "serviceName": "S",
                "methods": [{"name": "get"}, {"name": "get"}],
            },
        }, context, env)
        assert codes(result) == [DiagnosticCode.DUPLICATE_MEMBER]
        assert result.error.diagnostics[0].location == "config.methods[1].name"


class TestOrderLayers:
    def test_unknown_layers_follow_in_declaration_order(self):
        pairs = [("Custom", 1), ("Auto", 2), ("Other", 3), ("Live", 4)]
        assert [name for name, _ in order_layers(pairs)] == ["Live", "Auto", "Custom", "Other"]

    def test_canonical_order(self):
        assert CANONICAL_LAYER_ORDER == ("Live", "Test", "Dev", "Auto")


class TestTaggedErrorEmitter:
    def test_every_field_is_readonly(self, context, env):
        result = emit({
            "type": "taggedError",
            "config": {
                "className": "UserError",
                "fields": [{"name": "id"}, {"name": "message", "readonly": False}],
            },
        }, context, env)
        assert result.value == (
            'export class UserError extends Data.TaggedError("UserError")<{\n'
            "  readonly id: string\n"
            "  readonly message: string\n"
            "}> {}"
        )

    def test_optional_field_default_and_static_method(self, context, env):
        result = emit({
            "type": "taggedError",
            "config": {
                "className": "{className}TimeoutError",
                "tagName": "Timeout",
                "jsdoc": "Raised on timeout",
                "fields": [
                    {"name": "retries", "type": "number", "default": "3", "jsdoc": "Retry count"},
                    {"name": "cause", "type": "unknown", "optional": True},
                ],
                "staticMethods": [
                    {"name": "create", "params": [{"name": "retries", "type": "number"}],
                     "body": "return new {className}TimeoutError({ retries })"},
                ],
            },
        }, context, env)
        assert result.value == (
            "/**\n"
            " * Raised on timeout\n"
            " */\n"
            'export class UserProfileTimeoutError extends Data.TaggedError("Timeout")<{\n'
            "  /** Retry count (default: 3) */\n"
            "  readonly retries: number\n"
            "  readonly cause?: unknown\n"
            "}> {\n"
            "  static create(retries: number) {\n"
            "    return new UserProfileTimeoutError({ retries })\n"
            "  }\n"
            "}"
        )

    def test_no_fields(self, context, env):
        result = emit({"type": "taggedError", "config": {"className": "Empty", "exported": False}},
                      context, env)
        assert result.value == 'class Empty extends Data.TaggedError("Empty")<{}> {}'


class TestSchemaEmitter:
    def test_branded_string_with_type_alias(self, context, env):
        result = emit({
            "type": "schema",
            "config": {"name": "{className}Id", "schemaType": "String",
                       "brand": "{className}Id", "typeAlias": "{className}Id"},
        }, context, env)
        assert result.value == (
            'export const UserProfileId = Schema.String.pipe(Schema.brand("UserProfileId"))\n'
            "\n"
            "export type UserProfileId = Schema.Schema.Type<typeof UserProfileId>"
        )

    def test_struct_with_nested_fields(self, context, env):
        result = emit({
            "type": "schema",
            "config": {
                "name": "Address",
                "fields": [
                    {"name": "street", "kind": "string"},
                    {"name": "zip", "kind": "number", "optional": True},
                    {"name": "tags", "kind": "array", "items": {"kind": "string"}},
                ],
            },
        }, context, env)
        assert result.value == (
            "export const Address = Schema.Struct({\n"
            "  street: Schema.String,\n"
            "  zip: Schema.optional(Schema.Number),\n"
            "  tags: Schema.Array(Schema.String)\n"
            "})"
        )

    def test_annotations(self, context, env):
        result = emit({
            "type": "schema",
            "config": {"name": "Email", "schemaType": "String",
                       "annotations": {"title": "Email of {className}"}},
        }, context, env)
        assert result.value == (
            'export const Email = Schema.String.pipe(Schema.annotations({ title: "Email of UserProfile" }))'
        )

    def test_short_union_single_line(self, context, env):
        result = emit({
            "type": "schema",
            "config": {"name": "Id", "schemaType": "Union",
                       "fields": [{"kind": "string"}, {"kind": "number"}]},
        }, context, env)
        assert result.value == "export const Id = Schema.Union(Schema.String, Schema.Number)"

    def test_tagged_union(self, context, env):
        result = emit({
            "type": "schema",
            "config": {
                "name": "Shape",
                "schemaType": "TaggedUnion",
                "fields": [
                    {"name": "Circle", "fields": [{"name": "radius", "kind": "number"}]},
                    {"name": "Square", "fields": [{"name": "side", "kind": "number"}]},
                ],
            },
        }, context, env)
        assert 'Schema.TaggedStruct("Circle", {' in result.value
        assert 'Schema.TaggedStruct("Square", {' in result.value
        assert result.value.startswith("export const Shape = Schema.Union(\n")

    def test_empty_union_is_an_error(self, context, env):
        result = emit({"type": "schema", "config": {"name": "U", "schemaType": "Union"}},
                      context, env)
        assert codes(result) == [DiagnosticCode.INVALID_CONFIG]

    def test_empty_array_warns(self, context, env):
        result = emit({"type": "schema", "config": {"name": "A", "schemaType": "Array"}},
                      context, env)
        assert result.success
        assert result.value == "export const A = Schema.Array(Schema.Unknown)"
        assert [w.severity for w in result.warnings] == [Severity.WARNING]

    def test_class_schema_ignores_brand(self, context, env):
        result = emit({
            "type": "schema",
            "config": {"name": "User", "schemaType": "Class", "brand": "User",
                       "fields": [{"name": "id", "kind": "string"}]},
        }, context, env)
        assert result.success
        assert result.value == (
            'export class User extends Schema.Class<User>("User")({\n'
            "  id: Schema.String\n"
            "}) {}"
        )
        assert result.warnings[0].location == "config.brand"

    def test_field_without_schema_or_kind(self, context, env):
        result = emit({"type": "schema", "config": {"name": "S", "fields": [{"name": "x"}]}},
                      context, env)
        assert codes(result) == [DiagnosticCode.INVALID_CONFIG]


class TestRpcDefinitionEmitter:
    def test_struct_payload(self, context, env):
        result = emit({
            "type": "rpcDefinition",
            "config": {
                "name": "GetUser",
                "routeType": "public",
                "payload": {"type": "struct", "fields": [{"name": "id", "schema": "UserId"}]},
                "success": "User",
                "error": "UserError",
            },
        }, context, env)
        assert result.value == (
            "/**\n"
            " * @route public - No authentication required\n"
            " */\n"
            'export class GetUser extends Rpc.make("GetUser", {\n'
            "  payload: Schema.Struct({\n"
            "    id: UserId\n"
            "  }),\n"
            "  success: User,\n"
            "  error: UserError\n"
            "}) {\n"
            '  static readonly [RouteTag]: RouteType = "public"\n'
            "}"
        )

    def test_void_payload_and_jsdoc(self, context, env):
        result = emit({
            "type": "rpcDefinition",
            "config": {
                "name": "Purge{className}s",
                "jsdoc": "Remove all {className}s",
                "routeType": "admin",
                "success": "Schema.Void",
                "error": "E",
            },
        }, context, env)
        text = result.value
        assert "payload" not in text
        assert " * Remove all UserProfiles\n *\n * @route admin - Requires admin privileges\n" in text
        assert 'RouteType = "admin"' in text


class TestDeclarationEmitters:
    def test_interface(self, context, env):
        result = emit({
            "type": "interface",
            "config": {
                "name": "User",
                "properties": [
                    {"name": "id", "type": "string"},
                    {"name": "tags", "type": "string[]", "readonly": False, "optional": True},
                ],
            },
        }, context, env)
        assert result.value == (
            "export interface User {\n"
            "  readonly id: string\n"
            "  tags?: string[]\n"
            "}"
        )

    def test_class(self, context, env):
        result = emit({
            "type": "class",
            "config": {
                "name": "Cache",
                "statics": [
                    {"name": "kind", "value": "\"memory\""},
                    {"name": "instances", "value": "0", "type": "number", "readonly": False},
                ],
                "methods": [{"name": "clear", "body": "this.items = []", "returnType": "void"}],
            },
        }, context, env)
        assert result.value == (
            "export class Cache {\n"
            "  static readonly kind = \"memory\"\n"
            "  static instances: number = 0\n"
            "\n"
            "  clear(): void {\n"
            "    this.items = []\n"
            "  }\n"
            "}"
        )

    def test_constant(self, context, env):
        result = emit({
            "type": "constant",
            "config": {"name": "{constantName}_MAX", "type": "number", "value": "3"},
        }, context, env)
        assert result.value == "export const USER_PROFILE_MAX: number = 3"

    @pytest.mark.parametrize("name", ["class", "2fast", "has-dash"])
    def test_constant_invalid_names(self, context, env, name):
        result = emit({"type": "constant", "config": {"name": name, "value": "1"}}, context, env)
        assert codes(result) == [DiagnosticCode.INVALID_IDENTIFIER]
