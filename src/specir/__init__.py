"""specir -- Lower OpenAPI/Swagger schemas into an intermediate type model.

This package reads an OpenAPI v2 ("Swagger") or v3 document and produces
the input a client code generator needs: a closed intermediate type
representation (IR) for every schema, the named declarations in an order
safe for top-to-bottom emission, and a flat list of operations whose
parameter, body and response types point into the same IR.

Typical workflow::

    specir dump openapi.yaml          # full model as JSON
    specir types openapi.yaml         # declarations in emission order

Modules:
    ir: The closed IR type model.
    models: Declarations, parameters, responses and operations.
    parser: Loading, reference resolution, lowering, sorting, extraction.
    config: Parser settings with project-file and environment precedence.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
    app: Typer CLI entry point.
"""

__version__ = "0.1.0"
