"""Configuration management for schemacaps.

Loads configuration from schemacaps.toml in the current working directory.
"""

import tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel
from rich.console import Console

from schemacaps.analysis.config import (
    DEFAULT_SPECIAL_FIELD_MATCHERS,
    SPECIAL_FIELD_KEYS,
    AnalyzerConfig,
    SpecialFieldMatcher,
)
from schemacaps.analysis.errors import ConfigurationError

console = Console(stderr=True)

CONFIG_FILE_NAME = "schemacaps.toml"


class SpecialFieldMatcherConfig(BaseModel):
    """Override of one capability matcher.

    Unset fields keep the default matcher's value.
    """

    pattern: Optional[str] = None
    types: Optional[List[str]] = None


class ConfigSettings(BaseModel):
    """Configuration settings for schemacaps.

    All fields are optional. None values indicate the setting was not
    specified in the config file.
    """

    dialect: Optional[str] = None
    output_format: Optional[str] = None
    graph_format: Optional[str] = None
    sensitive_field_patterns: Optional[List[str]] = None
    display_field_names: Optional[List[str]] = None
    max_display_fields: Optional[int] = None
    auto_include_required_only: Optional[bool] = None
    parent_field_pattern: Optional[str] = None
    child_field_pattern: Optional[str] = None
    special_field_matchers: Optional[Dict[str, SpecialFieldMatcherConfig]] = None


def find_config_file(start_path: Optional[Path] = None) -> Optional[Path]:
    """Find schemacaps.toml in the current working directory.

    Args:
        start_path: Starting directory to search for config file.
                   Defaults to current working directory.

    Returns:
        Path to config file if found, None otherwise.
    """
    if start_path is None:
        start_path = Path.cwd()

    config_path = start_path / CONFIG_FILE_NAME

    if config_path.exists() and config_path.is_file():
        return config_path

    return None


def _use_defaults() -> ConfigSettings:
    console.print("[yellow]Using default settings[/yellow]")
    return ConfigSettings()


def load_config(config_path: Optional[Path] = None) -> ConfigSettings:
    """Load configuration from schemacaps.toml.

    Priority order:
    1. Explicit config_path parameter
    2. schemacaps.toml in current working directory
    3. Empty ConfigSettings (all None)

    Args:
        config_path: Optional explicit path to config file.
                    If not provided, searches current working directory.

    Returns:
        ConfigSettings with values from TOML file or None for unset fields.
        Always returns a valid ConfigSettings object, even on errors.

    Error Handling:
        - Missing file: Returns empty ConfigSettings (silent)
        - Malformed TOML: Warns user and returns empty ConfigSettings
        - Invalid values: Warns user and returns empty ConfigSettings
        - Unknown keys: Ignored (forward compatibility)
    """
    if config_path is None:
        config_path = find_config_file()

    if config_path is None:
        return ConfigSettings()

    try:
        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        console.print(f"[yellow]Warning:[/yellow] Failed to parse {config_path}: {e}")
        return _use_defaults()
    except OSError as e:
        console.print(f"[yellow]Warning:[/yellow] Could not read {config_path}: {e}")
        return _use_defaults()

    section: Dict[str, Any] = toml_data.get("schemacaps", {})

    # Pydantic validates types and ignores unknown fields
    try:
        return ConfigSettings(**section)
    except (TypeError, ValueError) as e:
        console.print(
            f"[yellow]Warning:[/yellow] Invalid configuration in {config_path}: {e}"
        )
        return _use_defaults()


def build_analyzer_config(settings: ConfigSettings) -> AnalyzerConfig:
    """Convert file settings into a validated AnalyzerConfig.

    Unset settings keep the AnalyzerConfig defaults. Matcher overrides are
    merged field by field into the default matcher of the same key.

    Args:
        settings: Settings loaded from schemacaps.toml

    Returns:
        AnalyzerConfig

    Raises:
        ConfigurationError: If a matcher key is unknown or a value is invalid
    """
    values: Dict[str, Any] = {}

    if settings.sensitive_field_patterns is not None:
        values["sensitive_field_patterns"] = tuple(settings.sensitive_field_patterns)
    if settings.display_field_names is not None:
        values["display_field_names"] = tuple(settings.display_field_names)
    for name in (
        "max_display_fields",
        "auto_include_required_only",
        "parent_field_pattern",
        "child_field_pattern",
    ):
        value = getattr(settings, name)
        if value is not None:
            values[name] = value

    if settings.special_field_matchers:
        matchers: Dict[str, SpecialFieldMatcher] = {}
        for key, override in settings.special_field_matchers.items():
            default = DEFAULT_SPECIAL_FIELD_MATCHERS.get(key)
            if default is None:
                raise ConfigurationError(
                    f"Invalid special field matcher key '{key}'. "
                    f"Valid keys: {', '.join(SPECIAL_FIELD_KEYS)}"
                )
            matchers[key] = SpecialFieldMatcher(
                pattern=override.pattern if override.pattern is not None else default.pattern,
                types=tuple(override.types) if override.types is not None else default.types,
            )
        values["special_field_matchers"] = matchers

    return AnalyzerConfig(**values)
