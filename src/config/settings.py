"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use DOCSPLICE_ prefix (e.g., DOCSPLICE_ATTRIBUTE_MISSING=error).

Settings can also be loaded from a .env file in the project root.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


AttributeMissingPolicy = Literal["passthrough", "drop", "error"]


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use DOCSPLICE_ prefix.

    Examples:
        DOCSPLICE_ATTRIBUTE_MISSING=error
        DOCSPLICE_INCLUDE_DEPTH_MAX=16
        DOCSPLICE_STRICT_MODE=true
    """

    model_config = SettingsConfigDict(
        env_prefix="DOCSPLICE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Loader configuration
    source_encoding: str = Field(
        default="utf-8",
        description="Encoding used to read every source document",
    )

    include_depth_max: int = Field(
        default=64,
        ge=1,
        description="Maximum include nesting depth before loading is aborted",
    )

    # Renderer configuration
    attribute_missing: AttributeMissingPolicy = Field(
        default="passthrough",
        description="What to do with an unresolved {name} reference: passthrough, drop or error",
    )

    placeholder_prefix: str = Field(
        default="\x00SPAN_",
        description="Prefix for protected inline-span placeholders (uses null byte to avoid collisions)",
    )

    placeholder_suffix: str = Field(
        default="\x00",
        description="Suffix for protected inline-span placeholders (uses null byte to avoid collisions)",
    )

    strict_mode: bool = Field(
        default=False,
        description="Strict mode: treat warnings as errors",
    )

    # Output configuration
    default_backend: Literal["text", "html"] = Field(
        default="text",
        description="Output backend used when none is given on the command line",
    )

    default_theme: str = Field(
        default="default",
        description="Theme applied by the html backend",
    )

    def placeHolder_make(self, index: int) -> str:
        """
        Generate a placeholder string for a protected inline span at given index.

        Example:
            >>> settings = AppSettings()
            >>> settings.placeHolder_make(0)
            '\\x00SPAN_0\\x00'
        """
        return f"{self.placeholder_prefix}{index}{self.placeholder_suffix}"

    def spanIndex_extract(self, placeholder: str) -> int | None:
        """
        Extract the span index from a placeholder string.

        Returns:
            Span index if valid placeholder, None otherwise

        Example:
            >>> settings = AppSettings()
            >>> settings.spanIndex_extract('\\x00SPAN_3\\x00')
            3
        """
        if not placeholder.startswith(self.placeholder_prefix):
            return None
        if not placeholder.endswith(self.placeholder_suffix):
            return None

        content = placeholder[len(self.placeholder_prefix) : -len(self.placeholder_suffix)]

        try:
            return int(content)
        except ValueError:
            return None


# Singleton instance - import this in your code
appsettings = AppSettings()
