"""Lower OpenAPI schema objects into IR nodes.

:class:`SchemaLowerer` walks one schema object (or ``$ref`` node) and
returns the :mod:`specir.ir` node describing it. Dispatch is an explicit,
closed classification: :func:`classify_schema` maps a node onto one
:class:`SchemaShape` or raises
:class:`~specir.exceptions.UnsupportedSchemaShapeError`, so a shape the
engine does not know about fails loudly instead of degrading to
``unknown``.

References are never followed. A ``$ref`` node lowers to a
:class:`~specir.ir.NamedType` on the spot, and the referenced declaration
is lowered once, at its own site in the declarations table. Recursive and
mutually recursive schemas therefore terminate without any cycle
bookkeeping here.

Known limitation: in an ``allOf`` composition only branches that lower to
a record contribute fields. Branches lowering to anything else (including
``$ref`` branches, which lower to named types) are dropped.

Example::

    resolver = ReferenceResolver.for_version(SpecVersion.OPENAPI_3)
    lower_schema({"type": "array", "items": {"$ref": "#/components/schemas/Pet"}}, resolver)
    # ArrayType(element_type=NamedType(name="Pet"))
"""

from __future__ import annotations

import datetime
import enum
import logging
from typing import Any

from specir.exceptions import MissingItemsError, UnsupportedSchemaShapeError
from specir.ir import (
    BOOLEAN,
    NULL,
    NUMBER,
    STRING,
    UNKNOWN,
    AnyType,
    ArrayType,
    DictionaryType,
    LiteralType,
    NamedType,
    RecordField,
    RecordType,
    UnionType,
    is_record,
    merge_fields,
)
from specir.parser.references import ReferenceResolver

logger = logging.getLogger(__name__)

# Formats that imply a number when a schema omits ``type``
NUMERIC_FORMATS = frozenset({"float", "int32", "int64"})


class SchemaShape(enum.Enum):
    """Every schema shape the lowering engine recognises."""

    REFERENCE = "reference"
    NUMBER = "number"
    BOOLEAN = "boolean"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"
    ALL_OF = "allOf"
    NUMERIC_FORMAT = "numeric-format"


def classify_schema(node: Any) -> SchemaShape:
    """Decide which :class:`SchemaShape` *node* has.

    Args:
        node: A schema object or reference object.

    Returns:
        The recognised shape.

    Raises:
        UnsupportedSchemaShapeError: If *node* is not a mapping or matches
            none of the recognised shapes. The error carries the raw
            ``type`` value, or ``"undefined"`` when there is none.
    """
    if not isinstance(node, dict):
        raise UnsupportedSchemaShapeError("undefined")

    if "$ref" in node:
        return SchemaShape.REFERENCE

    schema_type = node.get("type")
    if schema_type in ("integer", "number"):
        return SchemaShape.NUMBER
    if schema_type == "boolean":
        return SchemaShape.BOOLEAN
    if schema_type == "string":
        return SchemaShape.STRING
    if schema_type == "array":
        return SchemaShape.ARRAY
    if schema_type == "object":
        return SchemaShape.ALL_OF if node.get("allOf") is not None else SchemaShape.OBJECT

    if schema_type is None:
        if node.get("allOf") is not None:
            return SchemaShape.ALL_OF
        if node.get("format") in NUMERIC_FORMATS:
            return SchemaShape.NUMERIC_FORMAT
        raise UnsupportedSchemaShapeError("undefined")

    raise UnsupportedSchemaShapeError(schema_type)


class SchemaLowerer:
    """Recursive schema-to-IR lowering for one document.

    Args:
        resolver: Maps ``$ref`` pointers to declaration names.
    """

    def __init__(self, resolver: ReferenceResolver) -> None:
        self.resolver = resolver

    def lower(self, node: Any) -> AnyType:
        """Lower a schema object or reference object into an IR node.

        Raises:
            MalformedReferenceError: A ``$ref`` does not point into the
                schema container.
            MissingItemsError: An array schema has no ``items``.
            UnsupportedSchemaShapeError: The node has no recognised shape.
        """
        shape = classify_schema(node)

        if shape is SchemaShape.REFERENCE:
            return NamedType(name=self.resolver.schema_name(node["$ref"]))
        if shape is SchemaShape.NUMBER:
            return NUMBER
        if shape is SchemaShape.BOOLEAN:
            return BOOLEAN
        if shape is SchemaShape.STRING:
            return self._lower_string(node)
        if shape is SchemaShape.ARRAY:
            return self._lower_array(node)
        if shape is SchemaShape.OBJECT:
            return self._lower_object(node)
        if shape is SchemaShape.ALL_OF:
            return self._lower_all_of(node)
        if shape is SchemaShape.NUMERIC_FORMAT:
            logger.warning(
                "Schema has format %r but no type; treating it as a number",
                node["format"],
            )
            return NUMBER

        raise UnsupportedSchemaShapeError(node.get("type", "undefined"))

    def _lower_string(self, node: dict[str, Any]) -> AnyType:
        """Strings are plain strings, or a union of literals when enumerated."""
        values = node.get("enum")
        if values is None:
            return STRING

        # Declared order, duplicates kept; a null member becomes the null type
        return UnionType(members=tuple(_enum_member(value) for value in values))

    def _lower_array(self, node: dict[str, Any]) -> AnyType:
        items = node.get("items")
        if items is None:
            raise MissingItemsError()
        return ArrayType(element_type=self.lower(items))

    def _lower_object(self, node: dict[str, Any]) -> AnyType:
        """Objects with properties become records; bare objects open maps."""
        properties = node.get("properties") or {}
        if not properties:
            return DictionaryType(value_type=UNKNOWN)

        required = set(node.get("required") or [])
        fields = [
            RecordField(
                name=name,
                type=self.lower(prop),
                nullable=name not in required,
                readonly=bool(isinstance(prop, dict) and prop.get("readOnly", False)),
            )
            for name, prop in properties.items()
        ]
        return RecordType(fields=merge_fields(fields))

    def _lower_all_of(self, node: dict[str, Any]) -> RecordType:
        """Concatenate the fields of every branch that lowers to a record."""
        fields: list[RecordField] = []
        for index, branch in enumerate(node["allOf"]):
            lowered = self.lower(branch)
            if is_record(lowered):
                fields.extend(lowered.fields)
            else:
                logger.debug(
                    "Dropping allOf branch %d: lowered to %s, not a record",
                    index,
                    lowered.kind,
                )
        return RecordType(fields=merge_fields(fields))


def _enum_member(value: Any) -> AnyType:
    """Lower one enum value.

    YAML loads unquoted dates and timestamps as ``date``/``datetime``; they
    are turned back into their ISO text.
    """
    if value is None:
        return NULL
    if isinstance(value, (str, int, float, bool)):
        return LiteralType(value=value)
    if isinstance(value, (datetime.date, datetime.datetime)):
        return LiteralType(value=value.isoformat())
    # Mappings and lists have no literal form
    raise UnsupportedSchemaShapeError(type(value).__name__)


def lower_schema(node: Any, resolver: ReferenceResolver) -> AnyType:
    """Lower *node* with a throwaway :class:`SchemaLowerer`."""
    return SchemaLowerer(resolver).lower(node)
