"""End-to-end tests for the template compiler."""

import pytest

from monogen.templates.core.compiler import (
    TemplateCompiler,
    compile_template,
    format_code,
    list_template_flags,
    list_template_variables,
)
from monogen.templates.core.config import load_config
from monogen.templates.core.errors import CompilationFailed, DiagnosticCode, Severity
from monogen.templates.core.loader import DefinitionError
from monogen.templates.core.resolver import create_context_from_name
from monogen.templates.core.templates import create_template_engine
from monogen.templates.core.types import RawContent
from monogen.templates.fragments import FragmentDefinition

BANNER = "// " + "=" * 76


class TestCompile:
    def test_constant_from_domain_name(self, compact_compiler, raw_definition):
        definition = raw_definition('export const {constantName} = "{fileName}"')
        result = compact_compiler.compile(definition, create_context_from_name("user-id"))
        assert result.success
        assert result.value == 'export const USER_ID = "user-id"\n'

    def test_header_imports_banner_layout(self, compiler, context, raw_definition):
        definition = raw_definition(
            "x",
            imports=[{"from": "effect", "items": ["Effect"]}],
        )
        definition["sections"][0]["title"] = "{className} Main"
        result = compiler.compile(definition, context)
        assert result.value == (
            "/**\n"
            " * Test\n"
            " */\n"
            "\n"
            'import { Effect } from "effect"\n'
            "\n"
            f"{BANNER}\n"
            "// UserProfile Main\n"
            f"{BANNER}\n"
            "\n"
            "x\n"
        )

    def test_header_description_and_module(self, compiler, context):
        result = compiler.compile({
            "id": "test/header",
            "meta": {
                "title": "{className} Service",
                "description": "Line one\n\nLine two",
                "module": "{scope}/x",
            },
            "sections": [{"content": {"type": "raw", "value": "x"}}],
        }, context)
        assert result.value.startswith(
            "/**\n"
            " * UserProfile Service\n"
            " *\n"
            " * Line one\n"
            " *\n"
            " * Line two\n"
            " *\n"
            " * @module @acme/x\n"
            " */\n"
        )

    def test_compact_profile_has_no_header_or_banner(self, compact_compiler, context, raw_definition):
        definition = raw_definition("a", "b")
        definition["sections"][0]["title"] = "First"
        assert compact_compiler.compile(definition, context).value == "a\n\nb\n"

    def test_deterministic(self, compiler, context, raw_definition):
        definition = raw_definition("{className}", "{fileName}")
        assert compiler.compile(definition, context) == compiler.compile(definition, context)

    def test_context_is_not_modified(self, compiler, context, raw_definition):
        before = dict(context)
        compiler.compile(raw_definition("{className}"), context)
        assert dict(context) == before

    def test_collects_every_error(self, compiler, context, raw_definition):
        definition = raw_definition("{missingOne}", "ok", "{missingTwo}")
        definition["meta"]["title"] = "{missingTitle}"
        result = compiler.compile(definition, context)
        assert not result.success
        error = result.error
        assert error.template_id == "test/raw"
        assert [d.location for d in error.errors] == [
            "sections[0].content[0].value",
            "sections[2].content[0].value",
            "meta.title",
        ]
        assert error.message == "Compilation of 'test/raw' failed with 3 errors"

    def test_unwrap_raises(self, compiler, context, raw_definition):
        result = compiler.compile(raw_definition("{missing}"), context)
        with pytest.raises(CompilationFailed) as exc_info:
            result.unwrap()
        assert exc_info.value.error is result.error

    def test_empty_section_warns(self, compact_compiler, context, raw_definition):
        result = compact_compiler.compile(raw_definition("", "x"), context)
        assert result.success
        assert result.value == "x\n"
        warning = result.warnings[0]
        assert warning.severity == Severity.WARNING
        assert warning.code == DiagnosticCode.EMPTY_SECTION
        assert warning.location == "sections[0]"

    def test_section_condition(self, compact_compiler, context, raw_definition):
        definition = raw_definition("always", "sometimes")
        definition["sections"][1]["condition"] = "includeExtra"
        assert compact_compiler.compile(definition, context).value == "always\n"
        extra = create_context_from_name("user-profile", includeExtra=True)
        assert compact_compiler.compile(definition, extra).value == "always\n\nsometimes\n"

    def test_compile_template_helper(self, fragments, context, raw_definition):
        result = compile_template(raw_definition("{propertyName}"), context, fragments,
                                  load_config("compact"))
        assert result.value == "userProfile\n"


class TestFailureValues:
    def test_unknown_content_type(self, compiler, context, raw_definition):
        definition = raw_definition("x", template_id="t/b")
        definition["sections"][0]["content"] = [{"type": "bogus"}]
        result = compiler.compile(definition, context)
        assert not result.success
        assert result.error.template_id == "t/b"
        [diagnostic] = result.error.diagnostics
        assert diagnostic.code == DiagnosticCode.INVALID_CONFIG
        assert diagnostic.location == "sections[0].content[0]"
        assert "invalid content type 'bogus'" in diagnostic.message

    def test_definition_without_id(self, compiler, context):
        result = compiler.compile({"meta": {"title": "T"}, "sections": []}, context)
        assert result.error.template_id == "<unknown>"
        assert result.error.diagnostics[0].code == DiagnosticCode.INVALID_CONFIG

    def test_header_render_failure(self, fragments, context, raw_definition):
        engine = create_template_engine()
        engine.add_template("file_header", "{{ undefined_value }}")
        compiler = TemplateCompiler(fragments, engine=engine)
        result = compiler.compile(raw_definition("x"), context)
        assert not result.success
        [diagnostic] = result.error.diagnostics
        assert diagnostic.code == DiagnosticCode.INTERNAL_ERROR
        assert "file_header" in diagnostic.message

    def test_imports_render_through_template(self, compiler, context):
        result = compiler.compile({
            "id": "t/a",
            "meta": {"title": "T"},
            "imports": [{"from": "effect", "items": ["Effect"]}],
            "sections": [{"content": {"type": "raw", "value": "x"}}],
        }, context)
        assert result.success
        assert 'import { Effect } from "effect"\n' in result.value


class TestConditionals:
    @pytest.fixture
    def definition(self, raw_definition):
        return raw_definition(
            "base",
            imports=[{"from": "effect", "items": ["Effect"]}],
            conditionals={
                "includeCQRS": {
                    "imports": [{"from": "effect", "items": ["Data", "Effect"]}],
                    "sections": [{"content": {"type": "raw", "value": "cqrs"}}],
                },
            },
        )

    def test_inactive_block_is_omitted(self, compact_compiler, context, definition):
        assert compact_compiler.compile(definition, context).value == (
            'import { Effect } from "effect"\n\nbase\n'
        )

    def test_active_block_adds_sections_and_merges_imports(self, compact_compiler, definition):
        context = create_context_from_name("user-profile", includeCQRS=True)
        assert compact_compiler.compile(definition, context).value == (
            'import { Effect, Data } from "effect"\n\nbase\n\ncqrs\n'
        )


class TestImports:
    def test_type_only_items_are_split_out(self, compact_compiler, context, raw_definition):
        definition = raw_definition("x", imports=[
            {"from": "./errors", "items": ["A"], "isTypeOnly": True},
            {"from": "./errors", "items": ["A", "B"]},
            {"from": "./errors", "items": ["C"], "isTypeOnly": True},
            {"from": "node:crypto", "items": ["randomUUID"]},
        ])
        assert compact_compiler.compile(definition, context).value == (
            'import { A, B } from "./errors"\n'
            'import type { C } from "./errors"\n'
            'import { randomUUID } from "node:crypto"\n'
            "\n"
            "x\n"
        )

    def test_fragment_imports_follow_definition_imports(self, compact_compiler, context, raw_definition):
        definition = raw_definition(imports=[{"from": "effect", "items": ["Effect"]}])
        definition["sections"] = [{"content": {"type": "fragment", "ref": "effect/branded-id"}}]
        text = compact_compiler.compile(definition, context).value
        assert text.startswith('import { Effect, Schema } from "effect"\n')

    def test_interpolated_source(self, compact_compiler, context, raw_definition):
        definition = raw_definition("x", imports=[{"from": "{packageName}/types", "items": ["T"]}])
        assert compact_compiler.compile(definition, context).value.startswith(
            'import { T } from "@acme/user-profile/types"\n'
        )


class TestBatch:
    def test_results_in_input_order(self, compact_compiler, context, raw_definition):
        definitions = [
            raw_definition("{className}", template_id="a/one"),
            raw_definition("{missing}", template_id="a/two"),
            raw_definition("{fileName}", template_id="a/three"),
        ]
        results = compact_compiler.compile_batch(definitions, context, max_workers=2)
        assert [r.success for r in results] == [True, False, True]
        assert results[0].value == "UserProfile\n"
        assert results[1].error.template_id == "a/two"
        assert results[2].value == "user-profile\n"

    def test_batch_leaves_fragment_registry_mutable(self, compiler, fragments, context,
                                                   raw_definition):
        compiler.compile_batch([raw_definition("x")], context)
        assert not fragments.frozen
        fragments.register(FragmentDefinition(id="test/after", content=(RawContent("y"),)))
        assert fragments.has("test/after")

    def test_malformed_member_keeps_siblings(self, compact_compiler, context, raw_definition):
        broken = {
            "id": "a/broken",
            "meta": {"title": "T"},
            "sections": [{"content": {"type": "taggedError", "config": {"fields": []}}}],
        }
        results = compact_compiler.compile_batch(
            [raw_definition("{className}", template_id="a/good"), broken], context
        )
        assert results[0].value == "UserProfile\n"
        assert not results[1].success
        [diagnostic] = results[1].error.diagnostics
        assert diagnostic.code == DiagnosticCode.INVALID_CONFIG
        assert diagnostic.location == "sections[0].content[0].config"
        assert "className" in diagnostic.message

    def test_crashing_member_keeps_siblings(self, compact_compiler, context, raw_definition,
                                            monkeypatch):
        real_compile = TemplateCompiler._compile

        def crash_on_two(self, definition, ctx):
            if definition.id == "a/two":
                raise RuntimeError("boom")
            return real_compile(self, definition, ctx)

        monkeypatch.setattr(TemplateCompiler, "_compile", crash_on_two)
        results = compact_compiler.compile_batch(
            [
                raw_definition("{className}", template_id="a/one"),
                raw_definition("x", template_id="a/two"),
                raw_definition("{fileName}", template_id="a/three"),
            ],
            context,
            max_workers=3,
        )
        assert [r.success for r in results] == [True, False, True]
        [diagnostic] = results[1].error.diagnostics
        assert diagnostic.code == DiagnosticCode.INTERNAL_ERROR
        assert "boom" in diagnostic.message
        assert results[2].value == "user-profile\n"

    def test_members_with_imports(self, compact_compiler, context, raw_definition):
        definitions = [
            raw_definition("a", template_id="a/one",
                           imports=[{"from": "effect", "items": ["Effect"]}]),
            raw_definition("b", template_id="a/two",
                           imports=[{"from": "effect", "items": ["Layer"]}]),
        ]
        results = compact_compiler.compile_batch(definitions, context)
        assert [r.value for r in results] == [
            'import { Effect } from "effect"\n\na\n',
            'import { Layer } from "effect"\n\nb\n',
        ]

    def test_duplicate_ids(self, compiler, context, raw_definition):
        with pytest.raises(DefinitionError, match="Duplicate template id"):
            compiler.compile_batch([raw_definition("x"), raw_definition("y")], context)

    def test_empty_batch(self, compiler, context):
        assert compiler.compile_batch([], context) == []


class TestTooling:
    def test_list_template_variables(self, raw_definition):
        definition = raw_definition(
            "{b} {a}",
            imports=[{"from": "{packageName}", "items": ["X"]}],
            conditionals={"flag": {"sections": [{"content": {"type": "raw", "value": "{c} {a}"}}]}},
        )
        definition["meta"]["title"] = "{className}"
        definition["sections"].append(
            {"content": {"type": "fragment", "ref": "effect/layer", "params": {"name": "{d}"}}}
        )
        assert list_template_variables(definition) == ["className", "packageName", "b", "a", "d", "c"]

    def test_list_template_flags(self, raw_definition):
        definition = raw_definition(
            "x",
            imports=[{"from": "x", "items": ["X"], "condition": "useX"}],
            conditionals={"includeCQRS": {"sections": []}},
        )
        definition["sections"][0]["condition"] = "useX"
        assert list_template_flags(definition) == ["useX", "includeCQRS"]

    def test_format_code(self):
        assert format_code("\n\na  \n\n\n\nb\n\n") == "a\n\nb\n"
