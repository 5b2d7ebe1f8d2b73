"""Configuration management for craft-translations."""

from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Extraction settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CRAFT_TRANSLATIONS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging level",
    )

    # Extraction configuration
    default_category: str = Field(
        default="site",
        min_length=1,
        description="Translation category used when a call-site names none",
    )
    default_output: str = Field(
        default="translations.pot",
        description="Output file for `extract` when none is given",
    )

    # Directory walk configuration
    ignore_filename: str = Field(
        default=".translateignore",
        description="Per-directory ignore file (gitignore syntax)",
    )
    ignore_dot_files: bool = Field(
        default=True,
        description="Skip files and directories whose name starts with a dot",
    )
    ignore_vcs: bool = Field(
        default=True,
        description="Skip version control directories (.git, .svn, .hg, ...)",
    )

    # Project config detection
    project_config_marker: str = Field(
        default="project.yaml",
        description="File marking the root of the project config tree",
    )
    project_config_dirname: str = Field(
        default="project",
        description="Name of the directory holding the marker file",
    )
    project_config_max_depth: int = Field(
        default=4,
        ge=1,
        le=16,
        description="How many directory levels below the scan root to search for the marker",
    )

    @model_validator(mode="after")
    def validate_ignore_filename(self) -> "Settings":
        """Reject ignore filenames that would escape their directory."""
        if not self.ignore_filename or "/" in self.ignore_filename or "\\" in self.ignore_filename:
            raise ValueError(
                f"ignore_filename must be a bare file name, got {self.ignore_filename!r}"
            )
        return self


# Global settings instance
settings = Settings()
