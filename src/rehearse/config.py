"""
Harness configuration for Rehearse.

Configuration is a small YAML file, validated by Pydantic:

    scenario_dir: tests/scenarios
    default_tolerance: 0.001
    fixed_step_seconds: 0.016666
    log_level: INFO
    capture_paths:
      - Scene.EntityCount
      - Entity[Player].Position.X

Every field has a default, so an empty file (or no file) is valid.
"""

from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from rehearse.errors import ConfigError
from rehearse.schema import DEFAULT_TOLERANCE

DEFAULT_CONFIG_FILE = "rehearse.yaml"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class HarnessConfig(BaseModel):
    """
    Settings shared by the recorder, runner and CLI.

    Attributes:
        scenario_dir: Directory holding one JSON file per scenario
        default_tolerance: Tolerance attached to captured properties
        capture_paths: Paths captured when none are given (None = built-in set)
        fixed_step_seconds: Step size used by the headless host
        log_level: Minimum level for harness logging
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    scenario_dir: Path = Field(
        default=Path("tests"),
        description="Directory holding recorded scenarios",
    )
    default_tolerance: float = Field(
        default=DEFAULT_TOLERANCE,
        description="Tolerance attached to captured properties",
        ge=0,
    )
    capture_paths: list[str] | None = Field(
        default=None,
        description="Default capture paths (None = entity count and named entities)",
    )
    fixed_step_seconds: float = Field(
        default=1.0 / 60.0,
        description="Step size for headless replay",
        gt=0,
        le=1.0,
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum log level",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in _LOG_LEVELS:
            msg = f"Invalid log level: {v}"
            raise ValueError(msg)
        return level


def load_config(path: Path | str) -> HarnessConfig:
    """
    Load configuration from a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        Validated HarnessConfig

    Raises:
        ConfigError: If the file is missing, not YAML, or fails validation
    """
    path = Path(path)
    try:
        content = path.read_text()
    except OSError as e:
        raise ConfigError(config_path=str(path), underlying_error=str(e)) from e

    return _parse_config(content, str(path))


def load_config_from_string(content: str) -> HarnessConfig:
    """Load configuration from a YAML string."""
    return _parse_config(content, "<string>")


def _parse_config(content: str, source: str) -> HarnessConfig:
    try:
        data = yaml.safe_load(content) or {}
    except yaml.YAMLError as e:
        raise ConfigError(config_path=source, underlying_error=str(e)) from e

    if not isinstance(data, dict):
        raise ConfigError(
            config_path=source,
            underlying_error="top level must be a mapping",
        )

    try:
        return HarnessConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(config_path=source, underlying_error=str(e)) from e
