"""Extract declarations, shared parameters and operations from a document.

This module walks a loaded OpenAPI v2/v3 document and builds an
:class:`~specir.models.ApiData` whose every type is an IR node produced by
:class:`~specir.parser.lowering.SchemaLowerer`.

The single public entry point is :func:`parse_document`. Internally it
delegates to helpers that each handle one section of the document:

* :func:`extract_reference_types` -- ``components/schemas`` (v3) or
  ``definitions`` (v2), one :class:`~specir.models.ReferenceType` each.
* :func:`build_parameter_table` -- ``components/parameters`` (v3) or
  ``parameters`` (v2), keyed by ``$ref`` string so operations can look
  shared parameters up instead of re-scanning.
* :func:`extract_operations` -- the ``paths`` object, every path + HTTP
  method combination in document order.

Parameter ordering follows a fixed rule: path-item shared parameters first,
then the operation's own parameters, then one synthesized ``requestBody``
parameter when the operation accepts a JSON body. An operation-level
parameter with the same ``name`` and ``in`` as a shared one replaces it.

Non-JSON request bodies are not modelled: such an operation is accepted
with no body parameter.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from specir.config import ParserConfig
from specir.exceptions import (
    MissingOperationIdError,
    SchemaError,
    UnresolvedParameterReferenceError,
)
from specir.ir import UNKNOWN, AnyType
from specir.models import (
    ApiData,
    ApiResponse,
    BodyAlternative,
    HTTPMethod,
    Operation,
    Param,
    ParamKind,
    ReferenceParam,
    ReferenceType,
    ResponseHeader,
    SpecVersion,
)
from specir.parser.loader import detect_spec_version
from specir.parser.lowering import SchemaLowerer
from specir.parser.references import (
    ReferenceResolver,
    ensure_internal_refs,
    resolve_object,
)
from specir.parser.toposort import topo_sort

logger = logging.getLogger(__name__)

_HTTP_METHODS = frozenset(m.value for m in HTTPMethod)

# Swagger 2 keeps the schema of non-body parameters and headers inline
_INLINE_SCHEMA_KEYS = ("type", "format", "items", "enum")

REQUEST_BODY_PARAM = "requestBody"


def parse_document(
    document: dict[str, Any],
    config: Optional[ParserConfig] = None,
) -> ApiData:
    """Lower a whole OpenAPI v2/v3 document.

    Args:
        document: The loaded document. External references must already be
            bundled in; only ``#/...`` pointers are accepted.
        config: Parser settings; defaults to :class:`ParserConfig()`.

    Returns:
        The declarations (topologically sorted unless disabled), the shared
        parameter table and all operations.

    Raises:
        SpecParseError: If the version is unsupported or a ``$ref`` is
            external.
        SchemaError: If any schema, reference or operation cannot be
            lowered. No partial result is returned.

    Example::

        raw = load_spec("petstore.yaml")
        data = parse_document(raw)
        for decl in data.reference_types:
            print(decl.name, decl.type.kind)
    """
    config = config or ParserConfig()
    version = detect_spec_version(document)
    ensure_internal_refs(document)

    lowerer = SchemaLowerer(ReferenceResolver.for_version(version))

    declarations = extract_reference_types(document, lowerer, version)
    if config.sort_declarations:
        declarations = topo_sort(declarations)

    parameter_table = build_parameter_table(document, lowerer, version)
    operations = extract_operations(document, lowerer, parameter_table, version, config)

    logger.debug(
        "Parsed %d declarations, %d shared parameters, %d operations",
        len(declarations),
        len(parameter_table),
        len(operations),
    )
    return ApiData(
        spec_version=version,
        reference_types=tuple(declarations),
        parameters=tuple(parameter_table.values()),
        operations=tuple(operations),
    )


def _container(document: dict[str, Any], path: str) -> dict[str, Any]:
    """Return the mapping at slash-separated *path*, or ``{}`` when absent."""
    current: Any = document
    for segment in path.split("/"):
        if not isinstance(current, dict):
            return {}
        current = current.get(segment)
    return current if isinstance(current, dict) else {}


def extract_reference_types(
    document: dict[str, Any],
    lowerer: SchemaLowerer,
    version: SpecVersion,
) -> list[ReferenceType]:
    """Lower every entry of the named schema container, in document order."""
    resolver = lowerer.resolver
    declarations: list[ReferenceType] = []

    for name, schema in _container(document, resolver.schemas_container).items():
        description = schema.get("description") if isinstance(schema, dict) else None
        declarations.append(
            ReferenceType(
                name=name,
                ref=resolver.schema_ref(name),
                type=lowerer.lower(schema),
                description=description,
            )
        )

    logger.debug("Lowered %d %s declarations", len(declarations), version.name)
    return declarations


def build_parameter_table(
    document: dict[str, Any],
    lowerer: SchemaLowerer,
    version: SpecVersion,
) -> dict[str, ReferenceParam]:
    """Lower the shared parameter container into a ``ref -> param`` table."""
    resolver = lowerer.resolver
    table: dict[str, ReferenceParam] = {}

    for name, raw in _container(document, resolver.parameters_container).items():
        ref = resolver.parameter_ref(name)
        fields = _parameter_fields(resolve_object(document, raw), lowerer, version)
        table[ref] = ReferenceParam(ref=ref, **fields)

    return table


def _parameter_fields(
    raw: dict[str, Any],
    lowerer: SchemaLowerer,
    version: SpecVersion,
) -> dict[str, Any]:
    """Build the :class:`~specir.models.Param` fields for a parameter object."""
    if not isinstance(raw, dict) or not isinstance(raw.get("name"), str):
        raise SchemaError(f"Parameter object without a name: {raw!r}")

    name = raw["name"]
    location = raw.get("in")
    try:
        kind = ParamKind(location)
    except ValueError:
        raise SchemaError(
            f"Invalid parameter location {location!r} for parameter {name!r}"
        ) from None

    if version is SpecVersion.OPENAPI_3:
        param_type = _lower_v3_parameter_schema(raw, lowerer)
    elif kind is ParamKind.BODY:
        param_type = lowerer.lower(raw.get("schema"))
    else:
        param_type = _lower_inline_schema(raw, lowerer)

    # Path parameters are always required
    required = bool(raw.get("required", False)) or kind is ParamKind.PATH

    return {
        "name": name,
        "kind": kind,
        "required": required,
        "type": param_type,
        "description": raw.get("description"),
    }


def _lower_v3_parameter_schema(raw: dict[str, Any], lowerer: SchemaLowerer) -> AnyType:
    """v3 parameters carry ``schema``, or a single-entry ``content`` map."""
    if "schema" in raw:
        return lowerer.lower(raw["schema"])
    for media in (raw.get("content") or {}).values():
        if isinstance(media, dict) and "schema" in media:
            return lowerer.lower(media["schema"])
    return UNKNOWN


def _lower_inline_schema(raw: dict[str, Any], lowerer: SchemaLowerer) -> AnyType:
    """Lower a Swagger 2 parameter or header whose schema keys sit inline."""
    schema_type = raw.get("type")
    if schema_type is None or schema_type == "file":
        return UNKNOWN
    return lowerer.lower({key: raw[key] for key in _INLINE_SCHEMA_KEYS if key in raw})


class OperationExtractor:
    """Walks ``paths`` and builds one :class:`~specir.models.Operation` per method.

    Args:
        document: The loaded document.
        lowerer: Schema lowering engine for this document.
        parameter_table: Shared parameters keyed by ``$ref``.
        version: Document major version.
        config: Parser settings (JSON media type rules).
    """

    def __init__(
        self,
        document: dict[str, Any],
        lowerer: SchemaLowerer,
        parameter_table: dict[str, ReferenceParam],
        version: SpecVersion,
        config: ParserConfig,
    ) -> None:
        self.document = document
        self.lowerer = lowerer
        self.parameter_table = parameter_table
        self.version = version
        self.config = config

    def extract(self) -> list[Operation]:
        """Extract every operation, paths and methods in document order."""
        operations: list[Operation] = []
        for path, raw_item in (self.document.get("paths") or {}).items():
            path_item = resolve_object(self.document, raw_item)
            if not isinstance(path_item, dict):
                continue

            shared = [self._param(raw) for raw in path_item.get("parameters") or []]
            for key, operation in path_item.items():
                if key not in _HTTP_METHODS or not isinstance(operation, dict):
                    continue
                operations.append(
                    self._operation(path, HTTPMethod(key), operation, shared)
                )
        return operations

    def _param(self, raw: Any) -> Param:
        """Lower a parameter object, or look a ``$ref`` up in the shared table."""
        if isinstance(raw, dict) and "$ref" in raw:
            ref = raw["$ref"]
            try:
                return self.parameter_table[ref]
            except KeyError:
                raise UnresolvedParameterReferenceError(ref) from None
        return Param(**_parameter_fields(raw, self.lowerer, self.version))

    def _operation(
        self,
        path: str,
        method: HTTPMethod,
        operation: dict[str, Any],
        shared: list[Param],
    ) -> Operation:
        operation_id = operation.get("operationId")
        if not operation_id:
            raise MissingOperationIdError(path, method.value)

        own = [self._param(raw) for raw in operation.get("parameters") or []]
        overridden = {(p.name, p.kind) for p in own}
        params = [p for p in shared if (p.name, p.kind) not in overridden] + own

        if self.version is SpecVersion.SWAGGER_2:
            body_params = [p for p in params if p.kind is ParamKind.BODY]
            params = [p for p in params if p.kind is not ParamKind.BODY]
            body = self._v2_body_param(operation, body_params)
        else:
            body = self._v3_body_param(operation)
        if body is not None:
            params.append(body)

        return Operation(
            operation_id=operation_id,
            method=method,
            path=path,
            deprecated=bool(operation.get("deprecated", False)),
            params=tuple(params),
            responses=tuple(self._responses(operation)),
            description=operation.get("description"),
            summary=operation.get("summary"),
            tags=tuple(operation.get("tags") or ()),
        )

    # ------------------------------------------------------------------ #
    # Request bodies
    # ------------------------------------------------------------------ #

    def _pick_json_media_type(self, media_types: list[str]) -> Optional[str]:
        """Prefer configured media types in order, then any JSON-like one."""
        for preferred in self.config.json_media_types:
            if preferred in media_types:
                return preferred
        for media_type in media_types:
            if self.config.is_json_media_type(media_type):
                return media_type
        return None

    def _v3_body_param(self, operation: dict[str, Any]) -> Optional[Param]:
        raw_body = operation.get("requestBody")
        if raw_body is None:
            return None

        body = resolve_object(self.document, raw_body)
        content = body.get("content") or {}
        media_type = self._pick_json_media_type(list(content))
        if media_type is None:
            logger.debug(
                "Operation %s has no JSON request body (%s); body not modelled",
                operation.get("operationId"),
                ", ".join(content) or "no content",
            )
            return None

        media = content[media_type] or {}
        body_type = self.lowerer.lower(media["schema"]) if "schema" in media else UNKNOWN
        return Param(
            name=REQUEST_BODY_PARAM,
            kind=ParamKind.BODY,
            required=bool(body.get("required", False)),
            type=body_type,
            description=body.get("description"),
        )

    def _v2_body_param(
        self, operation: dict[str, Any], body_params: list[Param]
    ) -> Optional[Param]:
        if not body_params:
            return None

        consumes = operation.get("consumes", self.document.get("consumes"))
        if consumes and self._pick_json_media_type(list(consumes)) is None:
            logger.debug(
                "Operation %s consumes %s; body not modelled",
                operation.get("operationId"),
                ", ".join(consumes),
            )
            return None

        body = body_params[-1]
        return Param(
            name=REQUEST_BODY_PARAM,
            kind=ParamKind.BODY,
            required=body.required,
            type=body.type,
            description=body.description,
        )

    # ------------------------------------------------------------------ #
    # Responses
    # ------------------------------------------------------------------ #

    def _responses(self, operation: dict[str, Any]) -> list[ApiResponse]:
        responses: list[ApiResponse] = []
        for status, raw_response in (operation.get("responses") or {}).items():
            response = resolve_object(self.document, raw_response)
            if not isinstance(response, dict):
                continue
            responses.append(
                ApiResponse(
                    status=_parse_status(status),
                    description=response.get("description"),
                    headers=tuple(self._headers(response)),
                    body_alternatives=tuple(self._bodies(operation, response)),
                )
            )
        return responses

    def _headers(self, response: dict[str, Any]) -> list[ResponseHeader]:
        headers: list[ResponseHeader] = []
        for name, raw_header in (response.get("headers") or {}).items():
            header = resolve_object(self.document, raw_header)
            if self.version is SpecVersion.SWAGGER_2:
                header_type = _lower_inline_schema(header, self.lowerer)
            elif "schema" in header:
                header_type = self.lowerer.lower(header["schema"])
            else:
                header_type = UNKNOWN
            headers.append(ResponseHeader(name=name, type=header_type))
        return headers

    def _bodies(
        self, operation: dict[str, Any], response: dict[str, Any]
    ) -> list[BodyAlternative]:
        if self.version is SpecVersion.SWAGGER_2:
            if "schema" not in response:
                return []
            body_type = self.lowerer.lower(response["schema"])
            produces = (
                operation.get("produces")
                or self.document.get("produces")
                or ["application/json"]
            )
            return [BodyAlternative(mime_type=mime, type=body_type) for mime in produces]

        bodies: list[BodyAlternative] = []
        for mime_type, media in (response.get("content") or {}).items():
            if isinstance(media, dict) and "schema" in media:
                body_type = self.lowerer.lower(media["schema"])
            else:
                body_type = UNKNOWN
            bodies.append(BodyAlternative(mime_type=mime_type, type=body_type))
        return bodies


def _parse_status(status: Any) -> int | str:
    """``"200"`` -> ``200``; ``"default"`` and ``"2XX"`` stay strings."""
    text = str(status)
    return int(text) if text.isascii() and text.isdigit() else text


def extract_operations(
    document: dict[str, Any],
    lowerer: SchemaLowerer,
    parameter_table: dict[str, ReferenceParam],
    version: SpecVersion,
    config: Optional[ParserConfig] = None,
) -> list[Operation]:
    """Extract all operations of *document* in path-then-method order.

    Raises:
        MissingOperationIdError: An operation has no ``operationId``.
        UnresolvedParameterReferenceError: A parameter ``$ref`` is not in
            *parameter_table*.
    """
    extractor = OperationExtractor(
        document, lowerer, parameter_table, version, config or ParserConfig()
    )
    return extractor.extract()
