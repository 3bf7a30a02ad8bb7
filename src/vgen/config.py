"""Configuration management for vgen using Pydantic models."""

import json
import logging
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".vgen.json"


class LogLevel(str, Enum):
    """Logging levels."""
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"

    def to_logging(self) -> int:
        """Map to the standard library logging level."""
        return {
            LogLevel.ERROR: logging.ERROR,
            LogLevel.WARN: logging.WARNING,
            LogLevel.INFO: logging.INFO,
            LogLevel.DEBUG: logging.DEBUG,
        }[self]


class TagConfig(BaseModel):
    """Annotation tag configuration section."""
    key: str = "vgen"

    @field_validator("key")
    @classmethod
    def validate_key(cls, v):
        if not v.isidentifier():
            raise ValueError(f"tag key must be a valid identifier, got: {v!r}")
        return v


class OutputConfig(BaseModel):
    """Output configuration section."""
    dir: str | None = None
    suffix: str = "_validate"
    function_prefix: str = Field(alias="functionPrefix", default="validate_")

    @field_validator("suffix")
    @classmethod
    def validate_suffix(cls, v):
        if not v:
            raise ValueError("output suffix must not be empty, it would overwrite the source")
        return v

    @field_validator("function_prefix")
    @classmethod
    def validate_function_prefix(cls, v):
        if not v.isidentifier():
            raise ValueError(f"function prefix must be a valid identifier, got: {v}")
        return v

    model_config = ConfigDict(populate_by_name=True)


class LoggingConfig(BaseModel):
    """Logging configuration section."""
    level: LogLevel = LogLevel.INFO


class VgenConfig(BaseModel):
    """Complete vgen configuration model."""
    tag: TagConfig = Field(default_factory=TagConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(extra="forbid")


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Return the nearest .vgen.json in start_dir or one of its parents."""
    start = Path(start_dir or Path.cwd()).resolve()
    for directory in (start, *start.parents):
        candidate = directory / CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
    return None


def load_config(config_path: str | Path | None = None, start_dir: Path | None = None) -> VgenConfig:
    """Load configuration, falling back to defaults when no file applies.

    Args:
        config_path: Explicit configuration file. When None, the nearest
                    .vgen.json above start_dir is used
        start_dir: Directory the search starts from (default: current directory)

    Raises:
        ValueError: If the file is not valid JSON or not a valid configuration
    """
    path = Path(config_path) if config_path is not None else find_config_file(start_dir)
    if path is None or not path.exists():
        logger.debug("No configuration file, using defaults")
        return VgenConfig()

    logger.debug(f"Loading configuration from {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in config file {path}: {e}") from e
    except OSError as e:
        raise ValueError(f"Cannot read config file {path}: {e}") from e

    try:
        return VgenConfig.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration in {path}: {e}") from e
