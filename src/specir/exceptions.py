"""Exception hierarchy for specir.

All exceptions inherit from :class:`SpecirError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`specir.exit_codes`.
The top-level error handler in :func:`specir.app.main` catches
``SpecirError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Every schema error is fatal: the parser never returns a partially lowered
model, so callers only ever see a complete :class:`~specir.models.ApiData`
or one of these exceptions.

Subclass hierarchy::

    SpecirError (exit 1)
    +-- InvalidUsageError                       (exit 2)
    +-- ConfigError                             (exit 1)
    +-- SpecParseError                          (exit 7)
        +-- SchemaError                         (exit 8)
            +-- MalformedReferenceError
            +-- MissingItemsError
            +-- UnsupportedSchemaShapeError
            +-- MissingOperationIdError
            +-- UnresolvedParameterReferenceError
"""

from __future__ import annotations

from typing import Any, Optional

from specir.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_SCHEMA_ERROR,
    EXIT_SPEC_PARSE_ERROR,
)


class SpecirError(Exception):
    """Base exception for all specir errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`specir.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SpecirError):
    """Raised for invalid CLI arguments."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(SpecirError):
    """Raised for configuration problems (unreadable ``specir.json``, invalid values)."""

    exit_code = EXIT_GENERIC_FAILURE


class SpecParseError(SpecirError):
    """Raised when a document cannot be loaded or is not OpenAPI v2/v3."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class SchemaError(SpecParseError):
    """Base class for errors raised while lowering a loaded document."""

    exit_code = EXIT_SCHEMA_ERROR


class MalformedReferenceError(SchemaError):
    """A ``$ref`` is not a string of the ``#/<container>/<name>`` shape.

    Args:
        ref: The offending reference value.
        container: The container segment that was expected, or ``None``
            when any internal pointer would do.
    """

    def __init__(self, ref: Any, container: Optional[str] = None):
        self.ref = ref
        self.container = container
        expected = f"'#/{container}/<name>'" if container else "a '#/...' pointer string"
        super().__init__(f"Malformed reference {ref!r}: expected {expected}")


class MissingItemsError(SchemaError):
    """An ``array`` schema has no ``items`` sub-schema."""

    def __init__(self, message: str = "Array schema is missing 'items'"):
        super().__init__(message)


class UnsupportedSchemaShapeError(SchemaError):
    """A schema node matches none of the recognised shapes.

    Args:
        type_value: The raw ``type`` value of the node, or ``"undefined"``
            when the node has none.
    """

    def __init__(self, type_value: Any):
        self.type_value = type_value
        super().__init__(f"Unable to lower schema of type {type_value!r}")


class MissingOperationIdError(SchemaError):
    """An operation object lacks a non-empty ``operationId``.

    Args:
        path: The path template the operation is declared under.
        method: The HTTP method of the operation.
    """

    def __init__(self, path: str, method: str):
        self.path = path
        self.method = method
        super().__init__(f"Operation {method.upper()} {path} has no operationId")


class UnresolvedParameterReferenceError(SchemaError):
    """A parameter ``$ref`` does not match any shared parameter.

    Args:
        ref: The reference string that could not be found in the table.
    """

    def __init__(self, ref: str):
        self.ref = ref
        super().__init__(f"Parameter reference {ref!r} does not match any shared parameter")
