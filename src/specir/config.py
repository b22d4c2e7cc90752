"""Parser configuration with project-file and environment precedence.

specir has very little to configure: which request-body media types count
as JSON, whether declarations are topologically sorted, and the log level
used by the CLI. Settings come from, highest precedence first:

1. CLI flags (``--log-level``, ``--verbose``/``--quiet`` in :mod:`specir.app`)
2. Environment variables (``SPECIR_LOG_LEVEL``, ``SPECIR_JSON_MEDIA_TYPES``)
3. Project config (``./specir.json``)
4. Defaults declared on :class:`ParserConfig`

:func:`resolve_config` merges all of them into one :class:`ParserConfig`.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from specir.exceptions import ConfigError

_PROJECT_CONFIG_FILENAME = "specir.json"
_ENV_LOG_LEVEL = "SPECIR_LOG_LEVEL"
_ENV_JSON_MEDIA_TYPES = "SPECIR_JSON_MEDIA_TYPES"


class ParserConfig(BaseModel):
    """Settings consumed by :func:`~specir.parser.parse_document` and the CLI."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    json_media_types: tuple[str, ...] = Field(
        default=("application/json",),
        description="Request body media types treated as JSON",
    )
    accept_json_suffix: bool = Field(
        default=True,
        description="Also treat 'application/*+json' and '*/json' media types as JSON",
    )
    sort_declarations: bool = Field(
        default=True, description="Topologically sort named declarations"
    )
    log_level: str = Field(default="WARNING", description="Logging level name")

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {value!r}")
        return level

    def is_json_media_type(self, media_type: str) -> bool:
        """Whether a body declared as *media_type* is modelled as JSON."""
        essence = media_type.split(";", 1)[0].strip().lower()
        if essence in (m.lower() for m in self.json_media_types):
            return True
        if self.accept_json_suffix:
            return essence.endswith("+json") or essence.endswith("/json")
        return False


def load_project_config(start: Optional[Path] = None) -> Optional[dict[str, Any]]:
    """Read ``specir.json`` from *start* (default: the current directory).

    Returns:
        The parsed JSON object, or ``None`` when no project file exists.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = (start or Path.cwd()) / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Failed to read project config {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Project config {path} must be a JSON object")
    return data


def resolve_config(
    cli_log_level: Optional[str] = None,
    start: Optional[Path] = None,
) -> ParserConfig:
    """Resolve the effective :class:`ParserConfig`.

    Precedence (high to low):
        1. CLI flags (``cli_log_level``)
        2. Environment variables (``SPECIR_LOG_LEVEL``,
           ``SPECIR_JSON_MEDIA_TYPES`` as a comma-separated list)
        3. Project config (``./specir.json``)
        4. Defaults

    Raises:
        ConfigError: If any layer supplies an invalid value.
    """
    # 4 + 3. Defaults, then the project file
    values: dict[str, Any] = dict(load_project_config(start) or {})

    # 2. Environment variables
    env_level = os.environ.get(_ENV_LOG_LEVEL)
    if env_level:
        values["log_level"] = env_level
    env_media_types = os.environ.get(_ENV_JSON_MEDIA_TYPES)
    if env_media_types:
        values["json_media_types"] = [
            item.strip() for item in env_media_types.split(",") if item.strip()
        ]

    # 1. CLI flag (highest precedence)
    if cli_log_level is not None:
        values["log_level"] = cli_log_level

    try:
        return ParserConfig.model_validate(values)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
