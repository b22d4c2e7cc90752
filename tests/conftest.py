"""Shared test fixtures for specir.

Provides the fixture documents (an OpenAPI 3.0 petstore in JSON and a
Swagger 2.0 petstore in YAML), ready-made lowering engines for both
versions, and isolation of the global output and environment state.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
import yaml

from specir.models import SpecVersion
from specir.output import reset_output
from specir.parser.lowering import SchemaLowerer
from specir.parser.references import ReferenceResolver


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Drop the OutputManager installed by the CLI callback after every test."""
    yield
    reset_output()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep SPECIR_* variables from the developer's shell out of tests."""
    monkeypatch.delenv("SPECIR_LOG_LEVEL", raising=False)
    monkeypatch.delenv("SPECIR_JSON_MEDIA_TYPES", raising=False)


# ---------------------------------------------------------------------------
# Raw documents
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_30_raw() -> dict[str, Any]:
    """Load the raw OpenAPI 3.0 petstore document."""
    with open(FIXTURES_DIR / "petstore_3.0.json") as f:
        return json.load(f)


@pytest.fixture
def petstore_20_raw() -> dict[str, Any]:
    """Load the raw Swagger 2.0 petstore document."""
    with open(FIXTURES_DIR / "petstore_2.0.yaml") as f:
        return yaml.safe_load(f)


# ---------------------------------------------------------------------------
# Lowering engines
# ---------------------------------------------------------------------------


@pytest.fixture
def v3_lowerer() -> SchemaLowerer:
    return SchemaLowerer(ReferenceResolver.for_version(SpecVersion.OPENAPI_3))


@pytest.fixture
def v2_lowerer() -> SchemaLowerer:
    return SchemaLowerer(ReferenceResolver.for_version(SpecVersion.SWAGGER_2))


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner capturing stdout and stderr."""
    from typer.testing import CliRunner

    return CliRunner()
