"""
Pydantic model for application configuration.
Provides robust validation for all settings.
"""

from pathlib import Path
from typing import Any

from pydantic import (
    BaseModel,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from songdl_cli.exceptions import ConfigurationError

DEFAULT_COMPLETION_MARKER = "[ExtractAudio] Destination: "
DEFAULT_COMMAND_TEMPLATE = (
    "{downloader} -x --audio-format {audio_format} -o {output} {search}"
)
DEFAULT_LIBRARY_ROOT = "~/Music"

# Audio formats accepted by yt-dlp's --audio-format option
AUDIO_FORMATS = ("best", "aac", "alac", "flac", "m4a", "mp3", "opus", "vorbis", "wav")

TEMPLATE_PLACEHOLDERS = ("{downloader}", "{audio_format}", "{output}", "{search}")


class ClientConfig(BaseModel):
    """A validated configuration model for the interactive client."""

    # Library
    library_root: Path = Field(
        default_factory=lambda: Path(DEFAULT_LIBRARY_ROOT), validate_default=True
    )

    # External downloader
    downloader: str = "yt-dlp"
    audio_format: str = "mp3"
    command_template: str = DEFAULT_COMMAND_TEMPLATE
    completion_marker: str = DEFAULT_COMPLETION_MARKER

    # UI and diagnostics
    poll_interval: float = 0.1
    log_dir: Path | None = None

    class Config:
        """Pydantic model configuration."""

        validate_assignment = True

    @field_validator("library_root")
    @classmethod
    def validate_library_root(cls, v: Path) -> Path:
        """Expands and resolves the library root, which must already exist."""
        resolved = v.expanduser().resolve()
        if not resolved.is_dir():
            raise ValueError(f"Library root '{resolved}' is not an existing directory.")
        return resolved

    @field_validator("downloader")
    @classmethod
    def validate_downloader(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Downloader command cannot be empty.")
        return v.strip()

    @field_validator("audio_format")
    @classmethod
    def validate_audio_format(cls, v: str) -> str:
        """Ensures the format is one the downloader can extract to."""
        v = v.strip().lower()
        if v not in AUDIO_FORMATS:
            raise ValueError(f"Audio format must be one of: {', '.join(AUDIO_FORMATS)}.")
        return v

    @field_validator("completion_marker")
    @classmethod
    def validate_marker(cls, v: str) -> str:
        # Trailing whitespace is significant for prefix matching, so no stripping.
        if not v.strip():
            raise ValueError("Completion marker cannot be empty.")
        return v

    @field_validator("poll_interval")
    @classmethod
    def validate_poll_interval(cls, v: float) -> float:
        if v <= 0 or v > 5:
            raise ValueError("Poll interval must be greater than 0 and at most 5 seconds.")
        return v

    @model_validator(mode="after")
    def validate_command_template(self) -> "ClientConfig":
        """Checks that the command template can carry the search query."""
        if "{search}" not in self.command_template:
            raise ValueError("Command template must contain the {search} placeholder.")
        try:
            self.command_template.format(
                downloader="", audio_format="", output="", search=""
            )
        except (KeyError, IndexError, ValueError) as e:
            raise ValueError(
                f"Command template has an unknown or malformed placeholder: {e}. "
                f"Allowed placeholders: {', '.join(TEMPLATE_PLACEHOLDERS)}."
            ) from e
        return self

    @property
    def output_pattern(self) -> str:
        """The downloader's output path pattern, rooted at the library root."""
        return str(self.library_root / "%(title)s.%(ext)s")

    def as_display_dict(self) -> dict[str, str]:
        """Returns the settings as strings for display."""
        return {
            "library_root": str(self.library_root),
            "downloader": self.downloader,
            "audio_format": self.audio_format,
            "command_template": self.command_template,
            "completion_marker": repr(self.completion_marker),
            "poll_interval": f"{self.poll_interval}s",
            "log_dir": str(self.log_dir) if self.log_dir else "(disabled)",
        }


def load_config(options: dict[str, Any] | None = None) -> ClientConfig:
    """
    Builds a validated configuration from command-line options.

    Options that are None are left to the model defaults.

    Raises:
        ConfigurationError: If validation fails.
    """
    values = {k: v for k, v in (options or {}).items() if v is not None}
    try:
        return ClientConfig(**values)
    except ValidationError as e:
        raise ConfigurationError(f"Configuration validation failed:\n{e}") from e
