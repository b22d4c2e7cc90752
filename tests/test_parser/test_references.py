"""Tests for specir.parser.references."""

from __future__ import annotations

import pytest

from specir.exceptions import MalformedReferenceError, SpecParseError
from specir.models import SpecVersion
from specir.parser.references import (
    ReferenceResolver,
    ensure_internal_refs,
    ref_to_name,
    resolve_object,
    resolve_pointer,
)


# ---------------------------------------------------------------------------
# ref_to_name
# ---------------------------------------------------------------------------


class TestRefToName:
    def test_components_schema(self) -> None:
        assert ref_to_name("#/components/schemas/Pet", "components/schemas") == "Pet"

    def test_definitions(self) -> None:
        assert ref_to_name("#/definitions/Pet", "definitions") == "Pet"

    def test_unescapes_pointer_segment(self) -> None:
        assert ref_to_name("#/definitions/a~1b~0c", "definitions") == "a/b~c"

    @pytest.mark.parametrize(
        "ref",
        [
            "#/components/parameters/Pet",
            "#/components/schemas/Pet/properties/name",
            "#/components/schemas/",
            "components/schemas/Pet",
            "other.yaml#/components/schemas/Pet",
        ],
    )
    def test_malformed(self, ref: str) -> None:
        with pytest.raises(MalformedReferenceError, match="Malformed reference"):
            ref_to_name(ref, "components/schemas")

    def test_non_string(self) -> None:
        with pytest.raises(MalformedReferenceError):
            ref_to_name(42, "definitions")

    def test_error_carries_ref(self) -> None:
        with pytest.raises(MalformedReferenceError) as exc_info:
            ref_to_name("#/nope/Pet", "definitions")
        assert exc_info.value.ref == "#/nope/Pet"
        assert exc_info.value.container == "definitions"


# ---------------------------------------------------------------------------
# ReferenceResolver
# ---------------------------------------------------------------------------


class TestReferenceResolver:
    def test_v3_containers(self) -> None:
        resolver = ReferenceResolver.for_version(SpecVersion.OPENAPI_3)
        assert resolver.schema_name("#/components/schemas/Pet") == "Pet"
        assert resolver.parameter_name("#/components/parameters/Limit") == "Limit"
        assert resolver.schema_ref("Pet") == "#/components/schemas/Pet"
        assert resolver.parameter_ref("Limit") == "#/components/parameters/Limit"

    def test_v2_containers(self) -> None:
        resolver = ReferenceResolver.for_version(SpecVersion.SWAGGER_2)
        assert resolver.schema_name("#/definitions/Pet") == "Pet"
        assert resolver.parameter_ref("limitParam") == "#/parameters/limitParam"

    def test_v2_rejects_v3_pointer(self) -> None:
        resolver = ReferenceResolver.for_version(SpecVersion.SWAGGER_2)
        with pytest.raises(MalformedReferenceError):
            resolver.schema_name("#/components/schemas/Pet")

    def test_schema_ref_escapes(self) -> None:
        resolver = ReferenceResolver.for_version(SpecVersion.SWAGGER_2)
        assert resolver.schema_ref("a/b") == "#/definitions/a~1b"


# ---------------------------------------------------------------------------
# resolve_pointer / resolve_object
# ---------------------------------------------------------------------------


_DOC = {
    "components": {
        "requestBodies": {"Pet": {"required": True}},
        "responses": {
            "Alias": {"$ref": "#/components/responses/Error"},
            "Error": {"description": "boom"},
            "Loop": {"$ref": "#/components/responses/Loop"},
        },
    },
    "list": [{"name": "first"}],
}


class TestResolvePointer:
    def test_dict_path(self) -> None:
        assert resolve_pointer(_DOC, "#/components/requestBodies/Pet") == {"required": True}

    def test_list_index(self) -> None:
        assert resolve_pointer(_DOC, "#/list/0/name") == "first"

    def test_missing_key(self) -> None:
        with pytest.raises(SpecParseError, match="not found"):
            resolve_pointer(_DOC, "#/components/requestBodies/Dog")

    def test_bad_index(self) -> None:
        with pytest.raises(SpecParseError, match="invalid array index"):
            resolve_pointer(_DOC, "#/list/7")

    def test_external(self) -> None:
        with pytest.raises(SpecParseError, match="External"):
            resolve_pointer(_DOC, "other.json#/Pet")


class TestResolveObject:
    def test_plain_object_passes_through(self) -> None:
        node = {"description": "inline"}
        assert resolve_object(_DOC, node) is node

    def test_follows_chain(self) -> None:
        resolved = resolve_object(_DOC, {"$ref": "#/components/responses/Alias"})
        assert resolved == {"description": "boom"}

    def test_loop_raises(self) -> None:
        with pytest.raises(SpecParseError, match="Circular"):
            resolve_object(_DOC, {"$ref": "#/components/responses/Loop"})


# ---------------------------------------------------------------------------
# ensure_internal_refs
# ---------------------------------------------------------------------------


class TestEnsureInternalRefs:
    def test_internal_refs_pass(self) -> None:
        ensure_internal_refs(_DOC)

    def test_external_ref_in_list(self) -> None:
        doc = {"paths": {"/a": {"get": {"parameters": [{"$ref": "params.yaml#/Limit"}]}}}}
        with pytest.raises(SpecParseError, match="params.yaml"):
            ensure_internal_refs(doc)

    def test_non_string_ref_is_malformed(self) -> None:
        with pytest.raises(MalformedReferenceError) as exc_info:
            ensure_internal_refs({"components": {"schemas": {"Pet": {"$ref": 5}}}})
        assert exc_info.value.ref == 5
        assert exc_info.value.container is None

    def test_property_named_ref(self) -> None:
        schema = {
            "type": "object",
            "properties": {"$ref": {"type": "string"}, "id": {"type": "integer"}},
        }
        ensure_internal_refs({"components": {"schemas": {"Link": schema}}})

    def test_ref_inside_property_schema_rejected(self) -> None:
        schema = {"type": "object", "properties": {"owner": {"$ref": "people.yaml#/Person"}}}
        with pytest.raises(SpecParseError, match="people.yaml"):
            ensure_internal_refs({"components": {"schemas": {"Pet": schema}}})

    def test_example_payloads_skipped(self) -> None:
        media = {
            "schema": {"type": "object", "example": {"$ref": "https://example.com/x"}},
            "examples": {"linked": {"value": {"$ref": 42}}},
        }
        response = {"description": "ok", "content": {"application/json": media}}
        ensure_internal_refs({"paths": {"/a": {"get": {"responses": {"200": response}}}}})
