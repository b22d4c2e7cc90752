"""Tests for specir.ir."""

from __future__ import annotations

import pydantic
import pytest

from specir.ir import (
    NUMBER,
    STRING,
    UNKNOWN,
    ArrayType,
    DictionaryType,
    IntersectType,
    LiteralType,
    NamedType,
    RecordField,
    RecordType,
    UnionType,
    get_named_types,
    is_record,
    merge_fields,
)


def _field(name: str, t, nullable: bool = False) -> RecordField:
    return RecordField(name=name, type=t, nullable=nullable)


# ---------------------------------------------------------------------------
# get_named_types
# ---------------------------------------------------------------------------


class TestGetNamedTypes:
    """Test collection of named references inside an IR tree."""

    def test_nested_record_smoke(self) -> None:
        t = RecordType(
            fields=(
                _field("field1", NamedType(name="Person")),
                _field("field2", NamedType(name="Animal")),
                _field("field3", NamedType(name="Person")),
                _field(
                    "field4",
                    RecordType(
                        fields=(
                            _field("nestedField1", NamedType(name="Person")),
                            _field("nestedField2", NamedType(name="Animal")),
                            _field("nestedField3", NamedType(name="Robot")),
                        )
                    ),
                ),
            )
        )
        assert get_named_types(t) == [
            NamedType(name="Person"),
            NamedType(name="Animal"),
            NamedType(name="Robot"),
        ]

    def test_primitives_have_none(self) -> None:
        assert get_named_types(STRING) == []
        assert get_named_types(LiteralType(value="x")) == []

    def test_named_returns_itself(self) -> None:
        assert get_named_types(NamedType(name="Pet")) == [NamedType(name="Pet")]

    def test_walks_containers(self) -> None:
        t = UnionType(
            members=(
                ArrayType(element_type=NamedType(name="A")),
                DictionaryType(value_type=NamedType(name="B")),
                IntersectType(members=(NamedType(name="C"), NamedType(name="A"))),
            )
        )
        assert [n.name for n in get_named_types(t)] == ["A", "B", "C"]


# ---------------------------------------------------------------------------
# merge_fields / is_record
# ---------------------------------------------------------------------------


class TestMergeFields:
    def test_last_definition_wins_at_first_position(self) -> None:
        a1 = _field("a", STRING)
        b = _field("b", NUMBER)
        a2 = _field("a", NUMBER, nullable=True)
        assert merge_fields([a1, b, a2]) == (a2, b)

    def test_unique_names_untouched(self) -> None:
        fields = [_field("a", STRING), _field("b", STRING)]
        assert merge_fields(fields) == tuple(fields)


class TestModel:
    def test_is_record(self) -> None:
        assert is_record(RecordType(fields=()))
        assert not is_record(DictionaryType(value_type=UNKNOWN))

    def test_nodes_are_frozen(self) -> None:
        named = NamedType(name="Pet")
        with pytest.raises(pydantic.ValidationError):
            named.name = "Other"  # type: ignore[misc]

    def test_discriminated_validation(self) -> None:
        field = RecordField.model_validate(
            {"name": "tags", "nullable": True, "type": {"kind": "array", "element_type": {"kind": "string"}}}
        )
        assert field.type == ArrayType(element_type=STRING)

    def test_literal_keeps_bool(self) -> None:
        assert LiteralType(value=True).value is True
        assert LiteralType(value=3).value == 3
