"""Tests for compiler configuration profiles and files."""

import json

import pytest

from monogen.templates.core.config import CompilerConfig, ConfigError, ConfigManager, load_config


class TestProfiles:
    def test_default_profile(self):
        config = load_config()
        assert config == CompilerConfig()
        assert config.indent == "  "
        assert config.emit_header and config.emit_section_titles

    def test_compact_profile(self, compact_config):
        assert not compact_config.emit_header
        assert not compact_config.emit_section_titles

    def test_unknown_profile(self):
        with pytest.raises(ConfigError, match="Available: compact, default"):
            ConfigManager().get_config("nope")

    def test_registered_profile(self):
        manager = ConfigManager()
        manager.register_profile("wide", {"indent_size": 4})
        assert manager.get_config("wide").indent == "    "
        assert "wide" in manager.list_profiles()


class TestOverrides:
    def test_unknown_keys_go_to_custom(self):
        config = load_config(custom_config={"quote": "'", "team": "core"})
        assert config.quote == "'"
        assert config.custom == {"team": "core"}

    def test_file_then_overrides(self, tmp_path):
        path = tmp_path / "monogen.json"
        path.write_text(json.dumps({"indent_size": 4, "emit_header": False}), encoding="utf-8")
        config = load_config(config_file=path, custom_config={"indent_size": 3})
        assert config.indent_size == 3
        assert config.emit_header is False

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(config_file=tmp_path / "missing.json")

    def test_non_json_suffix(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("indent_size: 2", encoding="utf-8")
        with pytest.raises(ConfigError, match="must be JSON"):
            load_config(config_file=path)

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid JSON"):
            load_config(config_file=path)

    def test_save_round_trip(self, tmp_path):
        manager = ConfigManager()
        config = manager.get_config(custom_config={"indent_size": 4, "team": "core"})
        path = tmp_path / "saved.json"
        manager.save_config(config, path)
        assert manager.get_config(config_file=path) == config


class TestValidation:
    def test_default_is_valid(self):
        assert ConfigManager().validate_config(CompilerConfig()) == []

    def test_reports_each_bad_value(self):
        config = CompilerConfig(indent_size=12, line_ending="\r", quote="`", section_banner_width=2)
        warnings = ConfigManager().validate_config(config)
        assert len(warnings) == 4
        assert warnings[0] == "Invalid indent_size: 12"
