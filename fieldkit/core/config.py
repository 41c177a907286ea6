"""Configuration loading and validation using Pydantic."""

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

CONFIG_ENV_VAR = "FIELDKIT_CONFIG"


class DrawingConfig(BaseModel):
    """Defaults for text overlays and image re-rendering."""

    font_path: str | None = Field(
        None,
        description="Path to a TrueType font file (supports ~ expansion). If not set, uses system font.",
    )
    font_size: int = Field(16, ge=1, description="Font size in pixels")
    text_color: str = Field("white", min_length=1, description="Default overlay text color")
    resample: Literal["nearest", "bilinear", "bicubic", "lanczos"] = Field(
        "lanczos", description="Resampling filter used by resize()"
    )

    @field_validator("resample", mode="before")
    @classmethod
    def lowercase_resample(cls, v: object) -> object:
        """Accept filter names in any case."""
        return v.lower() if isinstance(v, str) else v


class PixelBufferConfig(BaseModel):
    """Raw pixel buffer layout."""

    row_alignment: int = Field(
        1, ge=1, le=4096, description="Rows are padded to a multiple of this many bytes"
    )


class MetadataConfig(BaseModel):
    """PNG metadata writing options."""

    png_compress_level: int = Field(6, ge=0, le=9, description="zlib level for written PNGs")


class Config(BaseModel):
    """Root configuration model."""

    drawing: DrawingConfig = Field(default_factory=DrawingConfig)
    pixel_buffer: PixelBufferConfig = Field(default_factory=PixelBufferConfig)
    metadata: MetadataConfig = Field(default_factory=MetadataConfig)


def format_validation_errors(error: ValidationError) -> str:
    """Format Pydantic validation errors into user-friendly messages.

    Args:
        error: Pydantic ValidationError instance

    Returns:
        Formatted error message string
    """
    lines = ["Configuration validation failed:"]
    for err in error.errors():
        field_path = " -> ".join(str(loc) for loc in err["loc"])
        error_msg = err.get("msg", "")

        if field_path:
            lines.append(f"  • {field_path}: {error_msg}")
        else:
            lines.append(f"  • {error_msg}")

        if "ctx" in err:
            ctx = err["ctx"]
            if "expected" in ctx:
                lines.append(f"    Expected: {ctx['expected']}")
            if "ge" in ctx:
                lines.append(f"    Minimum: {ctx['ge']}")
            if "le" in ctx:
                lines.append(f"    Maximum: {ctx['le']}")

    return "\n".join(lines)


def load_config(config_path: str | None = None) -> Config:
    """Load and validate configuration from YAML file.

    Args:
        config_path: Path to configuration file. If None, uses the FIELDKIT_CONFIG env var.

    Returns:
        Validated Config instance

    Raises:
        FileNotFoundError: If no path is given or the config file does not exist
        ValidationError: If config validation fails (formatted error message is printed)
    """
    if config_path is None:
        config_path = os.getenv(CONFIG_ENV_VAR)
    if not config_path:
        raise FileNotFoundError(f"No config path given and {CONFIG_ENV_VAR} is not set")

    path = Path(config_path).expanduser()
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)

        # An empty YAML file means "all defaults"
        return validate_config(data or {})
    except ValidationError as e:
        print(format_validation_errors(e))
        raise


def validate_config(config: dict) -> Config:
    """Validate configuration dictionary."""
    return Config.model_validate(config)


@lru_cache(maxsize=1)
def _default_config() -> Config:
    if os.getenv(CONFIG_ENV_VAR):
        return load_config()
    return Config()


_override: Config | None = None


def get_config() -> Config:
    """Return the process-wide configuration.

    Uses the config set with set_config() if any, else the file named by
    FIELDKIT_CONFIG, else built-in defaults.
    """
    if _override is not None:
        return _override
    return _default_config()


def set_config(config: Config | None) -> None:
    """Override the process-wide configuration (None restores the default)."""
    global _override
    _override = config
    _default_config.cache_clear()
