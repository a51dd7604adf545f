from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

INDENTATION_TEXTS: dict[str, str] = {
    "tab": "\t",
    "twospaces": "  ",
    "fourspaces": "    ",
    "eightspaces": "        ",
}

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class FileSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    supported_extensions: list[str] = Field(
        default=[".js", ".jsx", ".mjs", ".cjs", ".ts", ".tsx"]
    )
    ignore_patterns: list[str] = Field(
        default=[
            "node_modules",
            ".git",
            "dist",
            "build",
            "coverage",
            "*.min.js",
            "*.d.ts",
        ]
    )
    exclude_patterns: list[str] = Field(default_factory=list)

    @field_validator("supported_extensions")
    @classmethod
    def validate_extensions(cls, v: list[str]) -> list[str]:
        for ext in v:
            if not ext.startswith("."):
                raise ValueError(f"File extension must start with '.': {ext}")
        return v


class OutputSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    indentation_text: str = Field(default="tab")
    fallback_type: str = Field(default="any")
    property_scope: str = Field(default="public")
    rename_to_typescript: bool = Field(default=True)
    add_optional_params: bool = Field(default=True)
    apply_jsdoc_signatures: bool = Field(default=True)

    @field_validator("indentation_text")
    @classmethod
    def validate_indentation_text(cls, v: str) -> str:
        if v not in INDENTATION_TEXTS:
            choices = ", ".join(INDENTATION_TEXTS)
            raise ValueError(f"indentation_text must be one of: {choices}")
        return v

    @field_validator("property_scope")
    @classmethod
    def validate_property_scope(cls, v: str) -> str:
        if v not in ("public", "protected", "private", ""):
            raise ValueError(f"Unsupported property scope: {v}")
        return v

    @property
    def indent_unit(self) -> str:
        return INDENTATION_TEXTS[self.indentation_text]


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """Composed settings with shortcut property access."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    files: FileSettings = Field(default_factory=FileSettings)
    output: OutputSettings = Field(default_factory=OutputSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @property
    def supported_extensions(self) -> list[str]:
        return self.files.supported_extensions

    @property
    def ignore_patterns(self) -> list[str]:
        return self.files.ignore_patterns

    @property
    def exclude_patterns(self) -> list[str]:
        return self.files.exclude_patterns

    @property
    def indent_unit(self) -> str:
        return self.output.indent_unit

    @property
    def fallback_type(self) -> str:
        return self.output.fallback_type

    @property
    def log_level(self) -> str:
        return self.logging.log_level


@lru_cache
def get_settings() -> Settings:
    return Settings()
