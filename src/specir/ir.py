"""Intermediate type representation (IR) produced by the schema lowering engine.

Every schema node in an OpenAPI document is lowered into exactly one of the
variants below. The set is closed and discriminated on the ``kind`` field,
so an ``AnyType`` value can always be dispatched on ``t.kind`` without
``isinstance`` probing:

* :class:`PrimitiveType` -- payload-free leaves (``boolean``, ``number``,
  ``string``, ``null``, ``undefined``, ``unknown``, ``never``, ``symbol``).
* :class:`LiteralType` -- a single literal value.
* :class:`ArrayType` -- a homogeneous sequence.
* :class:`DictionaryType` -- a string-keyed map with a uniform value type.
* :class:`UnionType` / :class:`IntersectType` -- sums and structural merges.
* :class:`NamedType` -- a by-name link to a declaration stored elsewhere.
* :class:`RecordType` -- a structural object made of :class:`RecordField`.
* :class:`FunctionType` -- an opaque callable placeholder.

Named types are links, never ownership. A self-referential schema lowers
to a record holding ``NamedType(name="Self")``, which is what keeps both the
lowering pass and the IR itself finite.

All models are frozen and use tuples for their sequences; a lowered model is
an immutable snapshot.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


PrimitiveKind = Literal[
    "boolean",
    "number",
    "string",
    "null",
    "undefined",
    "unknown",
    "never",
    "symbol",
]


class _IRNode(BaseModel):
    model_config = ConfigDict(frozen=True)


class PrimitiveType(_IRNode):
    """A leaf type marker with no payload."""

    kind: PrimitiveKind


class LiteralType(_IRNode):
    """A type inhabited by exactly one value, e.g. the enum member ``"sold"``."""

    kind: Literal["literal"] = "literal"
    value: Union[bool, int, float, str]


class ArrayType(_IRNode):
    """A homogeneous sequence of ``element_type``."""

    kind: Literal["array"] = "array"
    element_type: AnyType
    readonly: bool = False


class DictionaryType(_IRNode):
    """A string-keyed mapping with an unbounded key set."""

    kind: Literal["dictionary"] = "dictionary"
    value_type: AnyType


class UnionType(_IRNode):
    """One of ``members``. Used for string enums."""

    kind: Literal["union"] = "union"
    members: tuple[AnyType, ...]


class IntersectType(_IRNode):
    """All of ``members`` at once."""

    kind: Literal["intersect"] = "intersect"
    members: tuple[AnyType, ...]


class NamedType(_IRNode):
    """A reference to the declaration called ``name``.

    Resolution happens at emission time by looking the name up in the
    declaration table; the node itself carries no type information.
    """

    kind: Literal["named"] = "named"
    name: str


class RecordField(_IRNode):
    """One field of a :class:`RecordType`.

    ``nullable`` is ``True`` when the field may be absent, i.e. when the
    property is not listed in the schema's ``required`` array.
    """

    name: str
    type: AnyType
    nullable: bool
    readonly: bool = False


class RecordType(_IRNode):
    """A structural object type."""

    kind: Literal["record"] = "record"
    fields: tuple[RecordField, ...] = ()


class FunctionType(_IRNode):
    """Opaque placeholder for callable-shaped schemas."""

    kind: Literal["function"] = "function"


AnyType = Annotated[
    Union[
        PrimitiveType,
        LiteralType,
        ArrayType,
        DictionaryType,
        UnionType,
        IntersectType,
        NamedType,
        RecordType,
        FunctionType,
    ],
    Field(discriminator="kind"),
]

for _model in (ArrayType, DictionaryType, UnionType, IntersectType, RecordField, RecordType):
    _model.model_rebuild()


BOOLEAN = PrimitiveType(kind="boolean")
NUMBER = PrimitiveType(kind="number")
STRING = PrimitiveType(kind="string")
NULL = PrimitiveType(kind="null")
UNDEFINED = PrimitiveType(kind="undefined")
UNKNOWN = PrimitiveType(kind="unknown")
NEVER = PrimitiveType(kind="never")
SYMBOL = PrimitiveType(kind="symbol")


def is_record(t: AnyType) -> bool:
    """Return ``True`` when *t* is a :class:`RecordType`."""
    return t.kind == "record"


def merge_fields(fields: list[RecordField]) -> tuple[RecordField, ...]:
    """Collapse duplicate field names, last definition wins.

    The surviving definition keeps the position of the first field with
    that name, so ``[a, b, a']`` becomes ``[a', b]``.

    Args:
        fields: Record fields in source order, possibly with repeated names.

    Returns:
        A tuple of fields with unique names.
    """
    merged: dict[str, RecordField] = {}
    for field in fields:
        merged[field.name] = field
    return tuple(merged.values())


def get_named_types(t: AnyType) -> list[NamedType]:
    """List every :class:`NamedType` reachable inside *t*.

    Walks arrays, dictionaries, unions, intersections and record fields,
    but never follows a named type to its declaration. The result is
    de-duplicated by name and keeps first-occurrence order.

    Example::

        >>> record = RecordType(fields=(
        ...     RecordField(name="owner", type=NamedType(name="Person"), nullable=False),
        ...     RecordField(name="pets", type=ArrayType(element_type=NamedType(name="Pet")),
        ...                 nullable=True),
        ... ))
        >>> [n.name for n in get_named_types(record)]
        ['Person', 'Pet']
    """
    found: dict[str, NamedType] = {}
    _collect_named(t, found)
    return list(found.values())


def _collect_named(t: AnyType, found: dict[str, NamedType]) -> None:
    if t.kind == "named":
        found.setdefault(t.name, t)
    elif t.kind == "array":
        _collect_named(t.element_type, found)
    elif t.kind == "dictionary":
        _collect_named(t.value_type, found)
    elif t.kind in ("union", "intersect"):
        for member in t.members:
            _collect_named(member, found)
    elif t.kind == "record":
        for field in t.fields:
            _collect_named(field.type, found)
