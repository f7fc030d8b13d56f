"""Loading of the .scm-engine.yml rule configuration."""
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)


class ConfigParseError(Exception):
    """Raised when a config file is not valid YAML or not a valid config."""


class ConfigLoadError(Exception):
    """Raised when the global config file cannot be read at startup."""


class ActionStep(BaseModel):
    model_config = ConfigDict(extra="allow")

    action: str


class Action(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    if_: str = Field(alias="if")
    then: list[ActionStep] = Field(default_factory=list)


class Label(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    strategy: str = "conditional"
    description: str | None = None
    color: str | None = None
    priority: int | None = None
    script: str | None = None
    skip_if: str | None = None


class IgnoreActivityFrom(BaseModel):
    model_config = ConfigDict(extra="forbid")

    bots: bool = False
    usernames: list[str] = Field(default_factory=list)
    emails: list[str] = Field(default_factory=list)


class Config(BaseModel):
    """Rule configuration of a project, or the global fallback."""

    model_config = ConfigDict(extra="forbid")

    dry_run: bool = False
    ignore_activity_from: IgnoreActivityFrom = Field(default_factory=IgnoreActivityFrom)
    actions: list[Action] = Field(default_factory=list)
    label: list[Label] = Field(default_factory=list)


def parse_file(data: bytes) -> Config:
    """Parse raw config file contents.

    Args:
        data: YAML document

    Returns:
        Parsed Config

    Raises:
        ConfigParseError: If the YAML is malformed or does not describe a Config
    """
    try:
        document: Any = yaml.safe_load(data)
    except yaml.YAMLError as e:
        raise ConfigParseError(f"could not parse config file: {e}") from e

    if document is None:
        document = {}
    if not isinstance(document, dict):
        raise ConfigParseError(
            f"could not parse config file: expected a mapping, got {type(document).__name__}"
        )

    try:
        return Config.model_validate(document)
    except ValidationError as e:
        raise ConfigParseError(f"invalid config file: {e}") from e


def load_global_config(path: str) -> Config:
    """Read and parse the global fallback config from a local file.

    Raises:
        ConfigLoadError: If the file cannot be read or parsed
    """
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise ConfigLoadError(f"could not read global config file {path}: {e}") from e

    try:
        config = parse_file(data)
    except ConfigParseError as e:
        raise ConfigLoadError(f"global config file {path}: {e}") from e

    logger.info(
        f"Loaded global config from {path}: "
        f"{len(config.actions)} actions, {len(config.label)} labels"
    )
    return config
