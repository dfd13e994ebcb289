"""Tests for the monogen command line."""

import io
import json

import pytest
from rich.console import Console

from monogen.cli import main
from monogen.templates import cli_integration
from monogen.templates.cli_integration import CLIError, parse_assignment, set_path


@pytest.fixture
def output(monkeypatch):
    """Route CLI output to a wide in-memory console and return its buffer."""
    buffer = io.StringIO()
    monkeypatch.setattr(cli_integration, "console", Console(file=buffer, width=200))
    return buffer


class TestListings:
    def test_templates(self, output):
        assert main(["templates"]) == 0
        text = output.getvalue()
        assert "infra/service" in text
        assert "contract/rpc-definitions" in text
        assert "includeCQRS" in text

    def test_templates_by_library_type(self, output):
        assert main(["templates", "--library-type", "infra"]) == 0
        assert "contract/errors" not in output.getvalue()

    def test_fragments(self, output):
        assert main(["fragments"]) == 0
        text = output.getvalue()
        assert "effect/layer" in text
        assert "serviceTag" in text

    def test_variables(self, output):
        assert main(["variables", "contract/errors", "--sections"]) == 0
        text = output.getvalue()
        assert "className" in text
        assert "includeCQRS" in text
        assert "taggedError" in text

    def test_no_command(self, capsys):
        assert main([]) == 1
        assert "usage: monogen" in capsys.readouterr().out


class TestCompile:
    def test_single_template_to_file(self, output, tmp_path):
        target = tmp_path / "service.ts"
        code = main([
            "compile", "infra/service", "--name", "user-profile", "--scope", "@acme",
            "-o", str(target),
        ])
        assert code == 0
        text = target.read_text(encoding="utf-8")
        assert text.startswith("/**\n * UserProfile")
        assert 'Context.Tag("@acme/infra-user-profile/UserProfileService")' in text

    def test_library_to_directory(self, output, tmp_path):
        code = main(["compile", "contract", "--name", "order", "-o", str(tmp_path / "out")])
        assert code == 0
        assert sorted(p.name for p in (tmp_path / "out").iterdir()) == [
            "errors.ts",
            "rpc-definitions.ts",
        ]

    def test_data_access_library(self, output, tmp_path):
        code = main(["compile", "data-access", "--name", "order", "-o", str(tmp_path / "out")])
        assert code == 0
        assert sorted(p.name for p in (tmp_path / "out").iterdir()) == ["errors.ts", "layers.ts"]
        layers = (tmp_path / "out" / "layers.ts").read_text(encoding="utf-8")
        assert "export const OrderDataAccessAuto" in layers

    def test_flag_and_profile(self, output, tmp_path):
        target = tmp_path / "errors.ts"
        code = main([
            "compile", "contract/errors", "--name", "order", "--flag", "includeCQRS",
            "--profile", "compact", "-o", str(target),
        ])
        assert code == 0
        text = target.read_text(encoding="utf-8")
        assert "export class OrderCommandError" in text
        assert not text.startswith("/**\n * Order Domain Errors")

    def test_definition_file_with_context_file(self, output, tmp_path, raw_definition):
        definition = tmp_path / "definition.json"
        definition.write_text(
            json.dumps(raw_definition('export const {constantName}_RETRIES = {options.retries}')),
            encoding="utf-8",
        )
        context = tmp_path / "context.json"
        context.write_text(json.dumps({"options": {"retries": 1}}), encoding="utf-8")
        target = tmp_path / "constants.ts"
        code = main([
            "compile", str(definition), "--name", "user", "--context", str(context),
            "--set", "options.retries=5", "--profile", "compact", "-o", str(target),
        ])
        assert code == 0
        assert target.read_text(encoding="utf-8") == "export const USER_RETRIES = 5\n"

    def test_context_file_must_be_an_object(self, output, tmp_path):
        context = tmp_path / "context.json"
        context.write_text("[1]", encoding="utf-8")
        assert main(["compile", "infra/errors", "--name", "x", "--context", str(context)]) == 1
        assert "Failed to load context" in output.getvalue()

    def test_prints_to_console_without_output(self, output):
        assert main(["compile", "infra/errors", "--name", "cache"]) == 0
        assert "CacheNotFoundError" in output.getvalue()

    def test_compilation_failure(self, output, tmp_path, raw_definition):
        definition = tmp_path / "definition.json"
        definition.write_text(json.dumps(raw_definition("{missing}")), encoding="utf-8")
        assert main(["compile", str(definition), "--name", "user"]) == 1
        text = output.getvalue()
        assert "Unknown variable: missing" in text
        assert "unresolved-variable" in text

    def test_missing_context(self, output):
        assert main(["compile", "infra/service"]) == 1
        assert "pass --name" in output.getvalue()

    def test_unknown_source(self, output, tmp_path):
        assert main(["compile", str(tmp_path / "nope.json"), "--name", "x"]) == 1
        assert "neither a registered template" in output.getvalue()

    def test_unknown_profile(self, output):
        assert main(["compile", "infra/errors", "--name", "x", "--profile", "nope"]) == 1
        assert "Configuration error" in output.getvalue()


class TestContextHelpers:
    @pytest.mark.parametrize("text,expected", [
        ("a=1", ("a", 1)),
        ("a=true", ("a", True)),
        ("a=False", ("a", False)),
        ("a=x=y", ("a", "x=y")),
        ("a=", ("a", "")),
    ])
    def test_parse_assignment(self, text, expected):
        assert parse_assignment(text) == expected

    @pytest.mark.parametrize("text", ["novalue", "=1"])
    def test_parse_assignment_rejects(self, text):
        with pytest.raises(CLIError):
            parse_assignment(text)

    def test_set_path(self):
        values = {"options": {"retries": 1}}
        set_path(values, "options.retries", 3)
        set_path(values, "deep.nested.key", "v")
        assert values == {"options": {"retries": 3}, "deep": {"nested": {"key": "v"}}}
