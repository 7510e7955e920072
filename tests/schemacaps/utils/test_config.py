"""Unit tests for configuration management."""

import os
from pathlib import Path
from tempfile import TemporaryDirectory

import pytest

from schemacaps.analysis.config import DEFAULT_SPECIAL_FIELD_MATCHERS
from schemacaps.analysis.errors import ConfigurationError
from schemacaps.utils.config import (
    ConfigSettings,
    SpecialFieldMatcherConfig,
    build_analyzer_config,
    find_config_file,
    load_config,
)


class TestConfigSettings:
    """Tests for ConfigSettings Pydantic model."""

    def test_empty_config_settings(self):
        """Test creating empty ConfigSettings with all None values."""
        config = ConfigSettings()
        assert config.dialect is None
        assert config.output_format is None
        assert config.special_field_matchers is None

    def test_unknown_fields_ignored(self):
        """Test that unknown fields are ignored (forward compatibility)."""
        config = ConfigSettings(dialect="postgres", unknown_field="value")
        assert config.dialect == "postgres"
        assert not hasattr(config, "unknown_field")


class TestFindConfigFile:
    """Tests for finding config files."""

    def test_find_config_in_directory(self, tmp_path: Path):
        """Test finding schemacaps.toml in the given directory."""
        config_file = tmp_path / "schemacaps.toml"
        config_file.write_text("[schemacaps]\n")

        assert find_config_file(tmp_path) == config_file

    def test_config_not_found(self, tmp_path: Path):
        """Test when config file doesn't exist."""
        assert find_config_file(tmp_path) is None

    def test_config_is_directory(self, tmp_path: Path):
        """Test when schemacaps.toml is a directory (not a file)."""
        (tmp_path / "schemacaps.toml").mkdir()
        assert find_config_file(tmp_path) is None


class TestLoadConfig:
    """Tests for loading configuration from TOML files."""

    def test_load_valid_config(self, tmp_path: Path):
        """Test loading a config with analysis and output settings."""
        config_file = tmp_path / "schemacaps.toml"
        config_file.write_text(
            """
[schemacaps]
dialect = "mysql"
output_format = "json"
graph_format = "dot"
sensitive_field_patterns = ["^password", "^ssn$"]
display_field_names = ["title", "name"]
max_display_fields = 2
auto_include_required_only = false

[schemacaps.special_field_matchers.slug]
pattern = "^(slug|permalink)$"
"""
        )

        config = load_config(config_file)
        assert config.dialect == "mysql"
        assert config.output_format == "json"
        assert config.graph_format == "dot"
        assert config.sensitive_field_patterns == ["^password", "^ssn$"]
        assert config.max_display_fields == 2
        assert config.auto_include_required_only is False
        assert config.special_field_matchers["slug"].pattern == "^(slug|permalink)$"
        assert config.special_field_matchers["slug"].types is None

    def test_load_empty_config_file(self, tmp_path: Path):
        """Test loading an empty config file."""
        config_file = tmp_path / "schemacaps.toml"
        config_file.write_text("")

        config = load_config(config_file)
        assert config.dialect is None
        assert config.output_format is None

    def test_load_config_with_extra_sections(self, tmp_path: Path):
        """Test that other sections and unknown keys are ignored."""
        config_file = tmp_path / "schemacaps.toml"
        config_file.write_text(
            """
[schemacaps]
dialect = "sqlite"
future_option = true

[other_tool]
setting = "value"
"""
        )

        assert load_config(config_file).dialect == "sqlite"

    def test_load_malformed_toml(self, tmp_path: Path):
        """Test that a malformed TOML file returns empty config."""
        config_file = tmp_path / "schemacaps.toml"
        config_file.write_text('[schemacaps\ndialect = "postgres"\n')

        config = load_config(config_file)
        assert config.dialect is None

    def test_load_config_invalid_value_types(self, tmp_path: Path):
        """Test that invalid value types fall back to defaults."""
        config_file = tmp_path / "schemacaps.toml"
        config_file.write_text(
            """
[schemacaps]
dialect = "postgres"
max_display_fields = "many"
"""
        )

        config = load_config(config_file)
        assert config.dialect is None
        assert config.max_display_fields is None

    def test_load_config_file_not_found(self, tmp_path: Path):
        """Test that a missing explicit config file returns empty config."""
        config = load_config(tmp_path / "nonexistent.toml")
        assert config.dialect is None

    def test_load_config_from_cwd(self):
        """Test loading config from the current working directory."""
        with TemporaryDirectory() as tmpdir:
            tmppath = Path(tmpdir)
            (tmppath / "schemacaps.toml").write_text('[schemacaps]\ndialect = "duckdb"\n')

            original_cwd = os.getcwd()
            try:
                os.chdir(tmppath)
                config = load_config()
                assert config.dialect == "duckdb"
            finally:
                os.chdir(original_cwd)

    @pytest.mark.parametrize(
        "dialect,output_format",
        [
            ("postgres", None),
            (None, "csv"),
            ("mysql", "text"),
        ],
    )
    def test_load_config_various_combinations(self, tmp_path: Path, dialect, output_format):
        """Test loading various combinations of config values."""
        toml_content = "[schemacaps]\n"
        if dialect:
            toml_content += f'dialect = "{dialect}"\n'
        if output_format:
            toml_content += f'output_format = "{output_format}"\n'
        config_file = tmp_path / "schemacaps.toml"
        config_file.write_text(toml_content)

        config = load_config(config_file)
        assert config.dialect == dialect
        assert config.output_format == output_format


class TestBuildAnalyzerConfig:
    """Tests for converting settings into an AnalyzerConfig."""

    def test_empty_settings_give_defaults(self):
        """Test that unset settings keep the analyzer defaults."""
        config = build_analyzer_config(ConfigSettings())
        assert config.fingerprint() == type(config)().fingerprint()

    def test_values_passed_through(self):
        """Test that set values reach the analyzer config."""
        settings = ConfigSettings(
            sensitive_field_patterns=["^ssn$"],
            display_field_names=["title"],
            max_display_fields=1,
            auto_include_required_only=False,
        )
        config = build_analyzer_config(settings)

        assert config.sensitive_field_patterns == ("^ssn$",)
        assert config.display_field_names == ("title",)
        assert config.max_display_fields == 1
        assert config.auto_include_required_only is False

    def test_matcher_override_merges_with_default(self):
        """Test that an override only replaces the fields it sets."""
        settings = ConfigSettings(
            special_field_matchers={"views": SpecialFieldMatcherConfig(pattern="^hits$")}
        )
        matcher = build_analyzer_config(settings).matchers["views"]

        assert matcher.pattern == "^hits$"
        assert matcher.types == DEFAULT_SPECIAL_FIELD_MATCHERS["views"].types

    def test_unknown_matcher_key(self):
        """Test that an unknown matcher key is a configuration error."""
        settings = ConfigSettings(
            special_field_matchers={"rating": SpecialFieldMatcherConfig(pattern="^stars$")}
        )
        with pytest.raises(ConfigurationError, match="rating"):
            build_analyzer_config(settings)

    def test_empty_sensitive_list(self):
        """Test that an explicitly empty sensitive list is rejected."""
        with pytest.raises(ConfigurationError):
            build_analyzer_config(ConfigSettings(sensitive_field_patterns=[]))
