"""Load OpenAPI/Swagger documents from a URL, local file, or stdin.

The lowering core only ever sees an in-memory dictionary; this module is
the collaborator that produces one. It reads JSON or YAML (format detected
from the extension, the response content type, or the content itself) and
identifies which major document version it is looking at.

The two public functions are:

* :func:`load_spec` -- Load and parse a document from any supported source.
* :func:`detect_spec_version` -- Tell Swagger 2.0 from OpenAPI 3.x, rejecting
  anything else.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from specir.exceptions import SpecParseError
from specir.models import SpecVersion

logger = logging.getLogger(__name__)


def load_spec(source: str) -> dict[str, Any]:
    """Load a document from URL, file path, or stdin ('-').

    Args:
        source: A URL (http/https), file path, or '-' for stdin.

    Returns:
        The parsed document as a dictionary.

    Raises:
        SpecParseError: If the source cannot be loaded or parsed.
    """
    logger.debug("Loading document from %s", source)
    if source == "-":
        return _load_from_stdin()
    elif source.startswith(("http://", "https://")):
        return _load_from_url(source)
    else:
        return _load_from_file(source)


def _load_from_stdin() -> dict[str, Any]:
    """Read a whole document from stdin."""
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise SpecParseError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise SpecParseError("No input received from stdin")

    return _parse_content(content, hint="stdin")


def _load_from_url(url: str) -> dict[str, Any]:
    """Fetch a document over HTTP(S), using the content type as a format hint."""
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(
            f"HTTP {exc.response.status_code} fetching spec from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecParseError(f"Failed to fetch spec from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"

    return _parse_content(response.text, hint=hint)


def _load_from_file(path: str) -> dict[str, Any]:
    """Read a local ``.json``, ``.yaml`` or ``.yml`` file.

    Unknown extensions fall back to content-based detection.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecParseError(f"Spec file not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecParseError(f"Failed to read spec file {path}: {exc}") from exc

    if not content.strip():
        raise SpecParseError(f"Spec file is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    return _parse_content(content, hint=hint)


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse *content* as JSON, falling back to YAML.

    JSON is tried first unless the hint says YAML; a ``"json"`` hint
    disables the YAML fallback.

    Raises:
        SpecParseError: If the content is neither, or is not a mapping.
    """
    json_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc
            json_error = exc
        else:
            return _require_mapping(result)

    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        msg = "Failed to parse spec as JSON or YAML"
        if json_error:
            msg += f"\n  JSON error: {json_error}"
        msg += f"\n  YAML error: {exc}"
        raise SpecParseError(msg) from exc

    return _require_mapping(result)


def _require_mapping(result: Any) -> dict[str, Any]:
    if not isinstance(result, dict):
        kind = type(result).__name__ if result is not None else "empty document"
        raise SpecParseError(f"Spec must be a JSON/YAML object (got {kind})")
    return result


def detect_spec_version(spec: dict[str, Any]) -> SpecVersion:
    """Identify the document's major version.

    Args:
        spec: The parsed document.

    Returns:
        :attr:`SpecVersion.SWAGGER_2` for ``swagger: "2.x"`` documents,
        :attr:`SpecVersion.OPENAPI_3` for ``openapi: "3.x"`` documents.

    Raises:
        SpecParseError: If neither version field is present or the version
            is not supported.
    """
    if "swagger" in spec:
        swagger_ver = str(spec["swagger"])
        if swagger_ver.startswith("2."):
            return SpecVersion.SWAGGER_2
        raise SpecParseError(
            f"Unsupported Swagger version: {swagger_ver}. Only Swagger 2.0 is supported."
        )

    openapi_version = spec.get("openapi")
    if openapi_version is None:
        raise SpecParseError(
            "Missing 'openapi' or 'swagger' field. Is this an OpenAPI document?"
        )

    version_str = str(openapi_version)
    if version_str.startswith("3."):
        return SpecVersion.OPENAPI_3

    raise SpecParseError(
        f"Unsupported OpenAPI version: {version_str}. "
        "Only Swagger 2.0 and OpenAPI 3.x are supported."
    )
