"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~specir.exceptions.SpecirError` subclass.
External tooling (CI scripts, code generators wrapping ``specir``) can
inspect the exit code to tell a broken document from a broken invocation
without parsing stderr.

Example::

    $ specir dump broken.yaml
    $ echo $?
    8   # EXIT_SCHEMA_ERROR -- a schema node could not be lowered
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_SPEC_PARSE_ERROR = 7
"""The document could not be loaded, or is not an OpenAPI v2/v3 document."""

EXIT_SCHEMA_ERROR = 8
"""A schema, reference or operation in the document could not be lowered."""
