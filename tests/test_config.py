"""Tests for the config module."""

import pytest
from pydantic import ValidationError

from js_to_ts.config import Settings, get_settings
from js_to_ts.config.settings import FileSettings, LoggingSettings, OutputSettings


class TestFileSettings:
    """Tests for FileSettings class."""

    def test_default_values(self):
        """Test default file configuration values."""
        files = FileSettings()

        assert ".js" in files.supported_extensions
        assert ".ts" in files.supported_extensions
        assert "node_modules" in files.ignore_patterns
        assert "*.d.ts" in files.ignore_patterns
        assert files.exclude_patterns == []

    def test_extension_validation(self):
        """Test extensions must start with a dot."""
        with pytest.raises(ValidationError) as exc_info:
            FileSettings(supported_extensions=["js"])
        assert "must start with '.'" in str(exc_info.value)

    def test_exclude_patterns(self):
        """Test custom exclude globs are kept as given."""
        files = FileSettings(exclude_patterns=["test/**", "*.spec.js"])

        assert files.exclude_patterns == ["test/**", "*.spec.js"]


class TestOutputSettings:
    """Tests for OutputSettings class."""

    def test_default_values(self):
        """Test default output configuration values."""
        output = OutputSettings()

        assert output.indentation_text == "tab"
        assert output.indent_unit == "\t"
        assert output.fallback_type == "any"
        assert output.property_scope == "public"
        assert output.rename_to_typescript
        assert output.add_optional_params
        assert output.apply_jsdoc_signatures

    @pytest.mark.parametrize(
        ("name", "unit"),
        [("tab", "\t"), ("twospaces", "  "), ("fourspaces", "    "), ("eightspaces", "        ")],
    )
    def test_indent_unit(self, name, unit):
        """Test every indentation choice maps to its text."""
        assert OutputSettings(indentation_text=name).indent_unit == unit

    def test_unknown_indentation_rejected(self):
        """Test indentation names outside the known set fail validation."""
        with pytest.raises(ValidationError) as exc_info:
            OutputSettings(indentation_text="threespaces")
        assert "indentation_text must be one of" in str(exc_info.value)

    def test_property_scope_validation(self):
        """Test only TypeScript access modifiers are accepted."""
        assert OutputSettings(property_scope="").property_scope == ""

        with pytest.raises(ValidationError):
            OutputSettings(property_scope="internal")


class TestLoggingSettings:
    """Tests for LoggingSettings class."""

    def test_log_level_normalized(self):
        """Test log level is upper-cased."""
        assert LoggingSettings(log_level="debug").log_level == "DEBUG"

    def test_unknown_log_level_rejected(self):
        """Test an unknown level fails validation."""
        with pytest.raises(ValidationError):
            LoggingSettings(log_level="verbose")


class TestSettings:
    """Tests for the composed Settings class."""

    def test_nested_settings(self):
        """Test that Settings composes the sub-settings."""
        settings = Settings()

        assert isinstance(settings.files, FileSettings)
        assert isinstance(settings.output, OutputSettings)
        assert isinstance(settings.logging, LoggingSettings)

    def test_shortcut_properties(self):
        """Test the shortcut accessors read through to the sub-settings."""
        settings = Settings(output=OutputSettings(indentation_text="twospaces", fallback_type="unknown"))

        assert settings.indent_unit == "  "
        assert settings.fallback_type == "unknown"
        assert settings.supported_extensions == settings.files.supported_extensions
        assert settings.log_level == settings.logging.log_level

    def test_get_settings_is_cached(self):
        """Test get_settings returns the same instance."""
        get_settings.cache_clear()

        assert get_settings() is get_settings()
