"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use ORGBLOCKS_ prefix (e.g., ORGBLOCKS_HIDE_EDITOR_COMMENTS=true).

Settings can also be loaded from a .env file in the project root.
"""

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Export configuration via environment variables.

    Environment variables use ORGBLOCKS_ prefix.

    Examples:
        ORGBLOCKS_ENABLED=false
        ORGBLOCKS_HIDE_EDITOR_COMMENTS=true
        ORGBLOCKS_DEFAULT_BACKEND=latex
    """

    model_config = SettingsConfigDict(
        env_prefix="ORGBLOCKS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Dispatch configuration
    enabled: bool = Field(
        default=True,
        description="Intercept custom block and link exports (false: every type passes through)",
    )

    hide_editor_comments: bool = Field(
        default=False,
        description="Render editor comments (edcomm blocks) as the empty string",
    )

    strict_mode: bool = Field(
        default=False,
        description="Strict mode: re-raise handler failures instead of leaving text unchanged",
    )

    handler_prefix: str = Field(
        default="orgblocks--",
        description="Prefix of the qualified name under which each type's handler is addressable",
    )

    # Exporter configuration
    default_backend: str = Field(
        default="html",
        description="Backend used when none is given on the command line",
    )

    verbatim_blocks: List[str] = Field(
        default_factory=lambda: ["src", "example", "verbatim", "export", "comment"],
        description="Block types whose contents are never scanned for custom blocks or links",
    )

    def qualifiedName_make(self, type_name: str) -> str:
        """
        Derive the qualified handler name for a block or link type.

        Args:
            type_name: Block/link type as written in the document

        Returns:
            Qualified name (e.g., "orgblocks--details")

        Example:
            >>> settings = AppSettings()
            >>> settings.qualifiedName_make('details')
            'orgblocks--details'
        """
        return f"{self.handler_prefix}{type_name}"

    def typeName_extract(self, qualified: str) -> str | None:
        """
        Extract the type name from a qualified handler name.

        Args:
            qualified: Qualified name to parse

        Returns:
            Type name if the prefix matches and something follows it, None otherwise

        Example:
            >>> settings = AppSettings()
            >>> settings.typeName_extract('orgblocks--parallel2NB')
            'parallel2NB'
        """
        if not qualified.startswith(self.handler_prefix):
            return None

        type_name = qualified[len(self.handler_prefix):]
        return type_name or None

    def verbatim_is(self, block_type: str) -> bool:
        """Check if a block type is verbatim (contents left untouched)"""
        return block_type.lower() in {name.lower() for name in self.verbatim_blocks}


# Singleton instance - import this in your code
appsettings = AppSettings()
