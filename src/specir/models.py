"""Parser output models shared across specir.

These are the records the parser hands to code generators: named
declarations (:class:`ReferenceType`), shared and per-operation parameters
(:class:`Param`, :class:`ReferenceParam`), responses (:class:`ApiResponse`)
and operations (:class:`Operation`), bundled together in :class:`ApiData`.
Every type they carry is an IR node from :mod:`specir.ir`.

All models are frozen Pydantic v2 models; nothing is mutated after the
parser builds it.
"""

from __future__ import annotations

import enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, SerializeAsAny

from specir.ir import AnyType


class SpecVersion(str, enum.Enum):
    """Major document versions understood by the parser."""

    SWAGGER_2 = "2"
    OPENAPI_3 = "3"


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised on OpenAPI path-item objects."""

    GET = "get"
    PUT = "put"
    POST = "post"
    DELETE = "delete"
    OPTIONS = "options"
    HEAD = "head"
    PATCH = "patch"
    TRACE = "trace"


class ParamKind(str, enum.Enum):
    """Where a parameter travels, per the OpenAPI ``in`` field.

    ``FORM_DATA`` only occurs in Swagger 2 documents. ``BODY`` is used for
    the synthesized ``requestBody`` parameter.
    """

    QUERY = "query"
    HEADER = "header"
    PATH = "path"
    COOKIE = "cookie"
    BODY = "body"
    FORM_DATA = "formData"


class ReferenceType(BaseModel):
    """A named, independently referenceable type declaration.

    One is created per entry of ``components/schemas`` (v3) or
    ``definitions`` (v2). ``ref`` is the pointer other schemas use to reach
    it (e.g. ``#/components/schemas/Pet``) and ``name`` the logical name any
    :class:`~specir.ir.NamedType` pointing at it carries.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    ref: str
    type: AnyType
    description: Optional[str] = None


class Param(BaseModel):
    """A single operation parameter with its lowered type."""

    model_config = ConfigDict(frozen=True)

    name: str
    kind: ParamKind
    required: bool = False
    type: AnyType
    description: Optional[str] = None


class ReferenceParam(Param):
    """A parameter declared once in the shared parameter table.

    Operations that point at it with ``$ref`` receive this very object, so
    ``ref`` can be used to de-duplicate shared parameters downstream.
    """

    ref: str


class ResponseHeader(BaseModel):
    """A header returned with an :class:`ApiResponse`."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: AnyType


class BodyAlternative(BaseModel):
    """One media type a response body may be delivered as."""

    model_config = ConfigDict(frozen=True)

    mime_type: str
    type: AnyType


class ApiResponse(BaseModel):
    """A response an operation can produce.

    ``status`` is an ``int`` for numeric keys (``"200"`` -> ``200``) and the
    key itself otherwise (``"default"``, ``"2XX"``).
    """

    model_config = ConfigDict(frozen=True)

    status: Union[int, str]
    description: Optional[str] = None
    headers: tuple[ResponseHeader, ...] = ()
    body_alternatives: tuple[BodyAlternative, ...] = ()

    @property
    def is_default(self) -> bool:
        """Whether this is the catch-all ``default`` response."""
        return self.status == "default"


class Operation(BaseModel):
    """A single operation (one path + HTTP method pair).

    ``params`` lists path-item shared parameters first, then the
    operation's own parameters, then the synthesized ``requestBody``
    parameter when the operation accepts a JSON body.
    """

    model_config = ConfigDict(frozen=True)

    operation_id: str
    method: HTTPMethod
    path: str
    deprecated: bool = False
    params: tuple[SerializeAsAny[Param], ...] = ()
    responses: tuple[ApiResponse, ...] = ()
    description: Optional[str] = None
    summary: Optional[str] = None
    tags: tuple[str, ...] = ()


class ApiData(BaseModel):
    """Everything the parser extracts from one document.

    ``reference_types`` is in declaration order safe for top-to-bottom
    emission (forward references only occur inside cycles). ``parameters``
    is the shared parameter table in document order.
    """

    model_config = ConfigDict(frozen=True)

    spec_version: SpecVersion
    reference_types: tuple[ReferenceType, ...] = ()
    parameters: tuple[ReferenceParam, ...] = ()
    operations: tuple[Operation, ...] = ()
