"""OpenAPI document parser -- load, lower schemas to IR, sort, extract operations.

Typical usage::

    from specir.parser import load_spec, parse_document

    raw = load_spec("https://petstore3.swagger.io/api/v3/openapi.json")
    data = parse_document(raw)

Sub-modules:

* :mod:`~specir.parser.loader` -- I/O layer (URL, file, stdin), format
  detection and document version detection.
* :mod:`~specir.parser.references` -- ``$ref`` pointer to name mapping.
* :mod:`~specir.parser.lowering` -- the recursive schema-to-IR engine.
* :mod:`~specir.parser.toposort` -- dependency ordering of declarations.
* :mod:`~specir.parser.extractor` -- declarations, shared parameters and
  operations, plus the :func:`parse_document` entry point.
"""

from specir.parser.extractor import parse_document
from specir.parser.loader import detect_spec_version, load_spec
from specir.parser.lowering import SchemaLowerer, lower_schema
from specir.parser.references import ReferenceResolver, ref_to_name
from specir.parser.toposort import topo_sort

__all__ = [
    "load_spec",
    "detect_spec_version",
    "parse_document",
    "SchemaLowerer",
    "lower_schema",
    "ReferenceResolver",
    "ref_to_name",
    "topo_sort",
]
