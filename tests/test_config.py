"""Tests for specir.config -- project file, environment and CLI precedence."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pydantic
import pytest

from specir.config import ParserConfig, load_project_config, resolve_config
from specir.exceptions import ConfigError


def _write_project_config(directory: Path, data: Any) -> None:
    (directory / "specir.json").write_text(json.dumps(data), encoding="utf-8")


# ---------------------------------------------------------------------------
# ParserConfig
# ---------------------------------------------------------------------------


class TestParserConfig:
    def test_defaults(self) -> None:
        config = ParserConfig()
        assert config.json_media_types == ("application/json",)
        assert config.accept_json_suffix is True
        assert config.sort_declarations is True
        assert config.log_level == "WARNING"

    def test_log_level_normalised(self) -> None:
        assert ParserConfig(log_level="debug").log_level == "DEBUG"

    def test_unknown_log_level_rejected(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            ParserConfig(log_level="LOUD")

    def test_unknown_key_rejected(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            ParserConfig.model_validate({"sort": False})

    @pytest.mark.parametrize(
        ("media_type", "expected"),
        [
            ("application/json", True),
            ("application/json; charset=utf-8", True),
            ("Application/JSON", True),
            ("application/vnd.api+json", True),
            ("text/json", True),
            ("application/xml", False),
            ("multipart/form-data", False),
        ],
    )
    def test_is_json_media_type(self, media_type: str, expected: bool) -> None:
        assert ParserConfig().is_json_media_type(media_type) is expected

    def test_suffix_matching_can_be_disabled(self) -> None:
        config = ParserConfig(accept_json_suffix=False)
        assert config.is_json_media_type("application/json")
        assert not config.is_json_media_type("application/problem+json")


# ---------------------------------------------------------------------------
# Project config
# ---------------------------------------------------------------------------


class TestProjectConfig:
    def test_missing_file(self, tmp_path: Path) -> None:
        assert load_project_config(tmp_path) is None

    def test_load_valid_project_config(self, tmp_path: Path) -> None:
        _write_project_config(tmp_path, {"sort_declarations": False})
        assert load_project_config(tmp_path) == {"sort_declarations": False}

    def test_defaults_to_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_project_config(tmp_path, {"log_level": "INFO"})
        monkeypatch.chdir(tmp_path)
        assert load_project_config() == {"log_level": "INFO"}

    def test_invalid_json_raises(self, tmp_path: Path) -> None:
        (tmp_path / "specir.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError, match="Failed to read"):
            load_project_config(tmp_path)

    def test_non_object_raises(self, tmp_path: Path) -> None:
        _write_project_config(tmp_path, ["a", "b"])
        with pytest.raises(ConfigError, match="must be a JSON object"):
            load_project_config(tmp_path)


# ---------------------------------------------------------------------------
# resolve_config precedence
# ---------------------------------------------------------------------------


class TestResolveConfig:
    def test_defaults_without_sources(self, tmp_path: Path) -> None:
        assert resolve_config(start=tmp_path) == ParserConfig()

    def test_project_overrides_defaults(self, tmp_path: Path) -> None:
        _write_project_config(
            tmp_path,
            {"json_media_types": ["application/hal+json"], "log_level": "info"},
        )
        config = resolve_config(start=tmp_path)
        assert config.json_media_types == ("application/hal+json",)
        assert config.log_level == "INFO"

    def test_env_overrides_project(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_project_config(tmp_path, {"log_level": "INFO"})
        monkeypatch.setenv("SPECIR_LOG_LEVEL", "error")
        monkeypatch.setenv("SPECIR_JSON_MEDIA_TYPES", "application/json, text/json ,")
        config = resolve_config(start=tmp_path)
        assert config.log_level == "ERROR"
        assert config.json_media_types == ("application/json", "text/json")

    def test_cli_overrides_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SPECIR_LOG_LEVEL", "ERROR")
        config = resolve_config(cli_log_level="DEBUG", start=tmp_path)
        assert config.log_level == "DEBUG"

    def test_invalid_value_raises_config_error(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Invalid configuration"):
            resolve_config(cli_log_level="chatty", start=tmp_path)

    def test_invalid_project_key_raises_config_error(self, tmp_path: Path) -> None:
        _write_project_config(tmp_path, {"output": "json"})
        with pytest.raises(ConfigError):
            resolve_config(start=tmp_path)
