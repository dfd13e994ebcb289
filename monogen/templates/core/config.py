"""
Configuration management for template compilation.

Handles loading and merging compiler configuration from built-in profiles,
JSON files and keyword overrides. Configuration only affects formatting;
it never changes which content is emitted or the order of static layers.
"""

import json
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ...logging_config import get_logger

logger = get_logger(__name__)


class ConfigError(Exception):
    """Exception raised for configuration-related errors."""
    pass


@dataclass(frozen=True)
class CompilerConfig:
    """Formatting options for emitted source text."""

    # Code style settings
    indent_size: int = 2
    line_ending: str = "\n"
    max_blank_lines: int = 1
    quote: str = '"'

    # File layout
    emit_header: bool = True
    emit_section_titles: bool = True
    section_banner_width: int = 76
    trailing_newline: bool = True

    # Settings consumed by custom fragments or tooling
    custom: Dict[str, Any] = field(default_factory=dict)

    @property
    def indent(self) -> str:
        return " " * self.indent_size


class ConfigManager:
    """Manages configuration profiles, loading and merging."""

    def __init__(self):
        """Initialize configuration manager."""
        self._profiles: Dict[str, Dict[str, Any]] = {}
        self._load_defaults()

    def _load_defaults(self):
        """Load the built-in profiles."""
        self._profiles["default"] = {}

        # No file header and no section banners, e.g. for snippets
        self._profiles["compact"] = {
            "emit_header": False,
            "emit_section_titles": False,
        }

    def register_profile(self, name: str, values: Dict[str, Any]):
        """Add or replace a named profile."""
        self._profiles[name] = dict(values)

    def get_config(self, profile: str = "default", custom_config: Optional[Dict[str, Any]] = None,
                   config_file: Optional[Union[str, Path]] = None) -> CompilerConfig:
        """
        Get complete configuration for a profile.

        Args:
            profile: Built-in or registered profile name
            custom_config: Custom configuration overrides
            config_file: Path to JSON configuration file

        Returns:
            Merged configuration

        Raises:
            ConfigError: If the profile is unknown or the file is invalid
        """
        if profile not in self._profiles:
            raise ConfigError(
                f"Unknown config profile: {profile}. "
                f"Available: {', '.join(self.list_profiles())}"
            )
        base_config = dict(self._profiles[profile])

        # Load from file if provided
        if config_file:
            base_config.update(self._load_config_file(config_file))

        # Apply custom overrides
        if custom_config:
            base_config.update(custom_config)

        return self._dict_to_config(base_config)

    def _load_config_file(self, config_path: Union[str, Path]) -> Dict[str, Any]:
        """Load configuration from JSON file."""
        path = Path(config_path)

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        if not path.suffix.lower() == ".json":
            raise ConfigError(f"Configuration file must be JSON: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in configuration file {path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to load configuration file {path}: {e}") from e

        if not isinstance(config, dict):
            raise ConfigError(f"Configuration file must contain a JSON object: {path}")

        logger.debug("Loaded compiler config from %s", path)
        return config

    def _dict_to_config(self, config_dict: Dict[str, Any]) -> CompilerConfig:
        """Convert dictionary to CompilerConfig, moving unknown keys to custom."""
        known_fields = {f.name for f in fields(CompilerConfig)}

        config_args = {}
        custom_args = {}

        for key, value in config_dict.items():
            if key in known_fields:
                config_args[key] = value
            else:
                custom_args[key] = value

        if custom_args:
            existing_custom = dict(config_args.get("custom", {}))
            existing_custom.update(custom_args)
            config_args["custom"] = existing_custom

        try:
            return CompilerConfig(**config_args)
        except TypeError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

    def save_config(self, config: CompilerConfig, output_path: Union[str, Path]):
        """Save configuration to JSON file."""
        path = Path(output_path)

        config_dict = asdict(config)
        custom = config_dict.pop("custom")
        config_dict.update(custom)

        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(config_dict, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise ConfigError(f"Failed to save configuration to {path}: {e}") from e

    def list_profiles(self) -> List[str]:
        """Get list of known profile names."""
        return sorted(self._profiles.keys())

    def validate_config(self, config: CompilerConfig) -> List[str]:
        """
        Validate configuration values.

        Returns:
            List of validation warnings
        """
        warnings = []

        if not isinstance(config.indent_size, int) or not 0 <= config.indent_size <= 8:
            warnings.append(f"Invalid indent_size: {config.indent_size}")

        if config.line_ending not in {"\n", "\r\n"}:
            warnings.append(f"Invalid line_ending: {config.line_ending!r}")

        if not isinstance(config.max_blank_lines, int) or config.max_blank_lines < 0:
            warnings.append(f"Invalid max_blank_lines: {config.max_blank_lines}")

        if config.quote not in {'"', "'"}:
            warnings.append(f"Invalid quote: {config.quote!r}")

        if not isinstance(config.section_banner_width, int) or config.section_banner_width < 8:
            warnings.append(f"Invalid section_banner_width: {config.section_banner_width}")

        return warnings


# Global configuration manager instance
_config_manager = None


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def load_config(profile: str = "default", custom_config: Optional[Dict[str, Any]] = None,
                config_file: Optional[Union[str, Path]] = None) -> CompilerConfig:
    """
    Convenience function to load configuration.

    Args:
        profile: Profile name ("default" or "compact")
        custom_config: Custom configuration overrides
        config_file: Path to JSON configuration file

    Returns:
        Merged configuration
    """
    manager = get_config_manager()
    return manager.get_config(profile, custom_config, config_file)


DEFAULT_CONFIG = CompilerConfig()
