"""Turn ``$ref`` JSON Reference pointers into logical names.

Schemas in an OpenAPI document point at each other with
``{"$ref": "#/components/schemas/Pet"}`` (v3) or
``{"$ref": "#/definitions/Pet"}`` (v2). The parser never inlines these:
every reference becomes a :class:`~specir.ir.NamedType` carrying the
trailing ``<name>`` segment, and the declaration itself is lowered once at
its own site. This module owns that pointer-to-name mapping.

Only **internal** references (those starting with ``#/``) are supported.
Bundling external files or URLs into one document is the caller's job;
:func:`ensure_internal_refs` rejects documents that still contain them.

Public API:

* :func:`ref_to_name` -- extract ``<name>`` from ``#/<container>/<name>``.
* :class:`ReferenceResolver` -- the per-version container configuration
  passed down through the lowering engine.
* :func:`resolve_pointer` -- follow an internal pointer to the object it
  names (used for shared request bodies, responses and headers).
* :func:`ensure_internal_refs` -- fail fast on external references.
"""

from __future__ import annotations

import re
from typing import Any

from specir.exceptions import MalformedReferenceError, SpecParseError
from specir.models import SpecVersion

_CONTAINERS: dict[SpecVersion, tuple[str, str]] = {
    SpecVersion.OPENAPI_3: ("components/schemas", "components/parameters"),
    SpecVersion.SWAGGER_2: ("definitions", "parameters"),
}

# Keys whose values are example payloads, never schemas
_EXAMPLE_KEYS = frozenset({"example", "examples"})


def _unescape(segment: str) -> str:
    """Undo RFC 6901 JSON Pointer escaping (``~1`` -> ``/``, ``~0`` -> ``~``)."""
    return segment.replace("~1", "/").replace("~0", "~")


def ref_to_name(ref: Any, container: str) -> str:
    """Extract the declaration name from a ``#/<container>/<name>`` pointer.

    Args:
        ref: The ``$ref`` string, e.g. ``"#/components/schemas/Pet"``.
        container: The container path the reference must live in, e.g.
            ``"components/schemas"`` or ``"definitions"``.

    Returns:
        The ``<name>`` segment, JSON Pointer escapes decoded.

    Raises:
        MalformedReferenceError: If *ref* is not a string of exactly that
            shape (wrong container, nested pointer, empty name, external).
    """
    if not isinstance(ref, str):
        raise MalformedReferenceError(ref, container)

    match = re.fullmatch(rf"#/{re.escape(container)}/([^/]+)", ref)
    if match is None:
        raise MalformedReferenceError(ref, container)
    return _unescape(match.group(1))


class ReferenceResolver:
    """Maps schema and parameter references to names for one document version.

    Args:
        schemas_container: Pointer path of the named schema table.
        parameters_container: Pointer path of the shared parameter table.
    """

    def __init__(self, schemas_container: str, parameters_container: str) -> None:
        self.schemas_container = schemas_container
        self.parameters_container = parameters_container

    @classmethod
    def for_version(cls, version: SpecVersion) -> ReferenceResolver:
        """Build the resolver matching *version*'s container layout."""
        schemas, parameters = _CONTAINERS[version]
        return cls(schemas, parameters)

    def schema_name(self, ref: Any) -> str:
        """Name of the schema declaration *ref* points at."""
        return ref_to_name(ref, self.schemas_container)

    def parameter_name(self, ref: Any) -> str:
        """Name of the shared parameter *ref* points at."""
        return ref_to_name(ref, self.parameters_container)

    def schema_ref(self, name: str) -> str:
        """Build the canonical pointer for the schema declaration *name*."""
        return f"#/{self.schemas_container}/{_escape(name)}"

    def parameter_ref(self, name: str) -> str:
        """Build the canonical pointer for the shared parameter *name*."""
        return f"#/{self.parameters_container}/{_escape(name)}"


def _escape(name: str) -> str:
    return name.replace("~", "~0").replace("/", "~1")


def resolve_pointer(document: dict[str, Any], ref: str) -> Any:
    """Resolve a single internal ``$ref`` string against *document*.

    Navigates dicts by key and lists by index, handling RFC 6901 escaping.

    Args:
        document: The root document dictionary.
        ref: The ``$ref`` string (e.g., ``"#/components/requestBodies/Pet"``).

    Returns:
        The value found at the referenced path.

    Raises:
        SpecParseError: If the reference is external (does not start with
            ``#/``), or if any segment in the pointer path does not exist
            in the document.
    """
    if not ref.startswith("#/"):
        raise SpecParseError(
            f"External $ref not supported: {ref}. "
            "Bundle the document into a single file first."
        )

    current: Any = document
    for raw_segment in ref[2:].split("/"):
        segment = _unescape(raw_segment)

        if isinstance(current, dict):
            if segment not in current:
                raise SpecParseError(
                    f"Cannot resolve $ref '{ref}': "
                    f"key '{segment}' not found at path"
                )
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError) as exc:
                raise SpecParseError(
                    f"Cannot resolve $ref '{ref}': "
                    f"invalid array index '{segment}'"
                ) from exc
        else:
            raise SpecParseError(
                f"Cannot resolve $ref '{ref}': "
                f"cannot navigate into {type(current).__name__}"
            )

    return current


def resolve_object(document: dict[str, Any], node: Any) -> Any:
    """Return *node*, or the object it points at when it is a ``$ref`` dict.

    Reference chains (a ``$ref`` pointing at another ``$ref``) are followed
    until a concrete object is reached; a chain that loops raises
    :class:`~specir.exceptions.SpecParseError`.
    """
    seen: set[str] = set()
    while isinstance(node, dict) and "$ref" in node:
        ref = node["$ref"]
        if ref in seen:
            raise SpecParseError(f"Circular $ref chain through '{ref}'")
        seen.add(ref)
        node = resolve_pointer(document, ref)
    return node


def ensure_internal_refs(document: Any) -> None:
    """Raise if *document* still contains an external ``$ref``.

    Walks the whole document depth-first. Values under ``example`` and
    ``examples`` are payload data and are not searched, and the keys of a
    ``properties`` map are property names, so a property called ``$ref``
    is not a reference (its schema is still searched).

    Raises:
        MalformedReferenceError: A ``$ref`` value is not a string.
        SpecParseError: On the first ``$ref`` that does not start with
            ``#/``.
    """
    # (node, node is a properties map)
    stack: list[tuple[Any, bool]] = [(document, False)]
    while stack:
        obj, names_only = stack.pop()
        if isinstance(obj, dict):
            if not names_only and "$ref" in obj:
                ref = obj["$ref"]
                if not isinstance(ref, str):
                    raise MalformedReferenceError(ref)
                if not ref.startswith("#/"):
                    raise SpecParseError(
                        f"External $ref not supported: {ref}. "
                        "Bundle the document into a single file first."
                    )
            for key, value in obj.items():
                if names_only:
                    stack.append((value, False))
                elif key not in _EXAMPLE_KEYS:
                    stack.append((value, key == "properties"))
        elif isinstance(obj, list):
            stack.extend((item, False) for item in obj)
