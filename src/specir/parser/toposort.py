"""Order named declarations so dependencies come first.

A declaration depends on every declared name reachable in its IR through
:func:`~specir.ir.get_named_types`. :func:`topo_sort` is a depth-first
post-order traversal that starts from the declarations in document order:
unvisited dependencies are emitted before the declaration that needs them,
and an "in progress" marker short-circuits cycle edges instead of failing.

Inside a cycle the member reached first is emitted after the others it
depends on, and the traversal goes on. The order never depends on hashing,
only on document order and field order, so the same input always sorts the
same way.
"""

from __future__ import annotations

from typing import Iterator

from specir.ir import get_named_types
from specir.models import ReferenceType


def dependency_graph(declarations: list[ReferenceType]) -> dict[str, list[str]]:
    """Map each declaration name to the declared names it references.

    Names that are referenced but not declared are left out. Dependencies
    keep first-occurrence order.
    """
    declared = {decl.name for decl in declarations}
    return {
        decl.name: [
            named.name for named in get_named_types(decl.type) if named.name in declared
        ]
        for decl in declarations
    }


def topo_sort(declarations: list[ReferenceType]) -> list[ReferenceType]:
    """Return *declarations* reordered so references point backwards.

    For every declaration D referencing a declared name N outside a cycle,
    N appears before D in the result. Cycles are allowed and never raise.

    Args:
        declarations: Declarations in document order. Names are expected to
            be unique; a repeated name keeps its first entry.

    Returns:
        A permutation of *declarations* (without duplicate names).
    """
    by_name: dict[str, ReferenceType] = {}
    for decl in declarations:
        by_name.setdefault(decl.name, decl)

    graph = dependency_graph(list(by_name.values()))
    visited: set[str] = set()
    in_progress: set[str] = set()
    ordered: list[ReferenceType] = []

    for root in by_name:
        if root in visited:
            continue

        # Frames of (name, dependencies not yet visited)
        in_progress.add(root)
        stack: list[tuple[str, Iterator[str]]] = [(root, iter(graph[root]))]
        while stack:
            name, dependencies = stack[-1]
            for dependency in dependencies:
                if dependency not in visited and dependency not in in_progress:
                    in_progress.add(dependency)
                    stack.append((dependency, iter(graph[dependency])))
                    break
            else:
                stack.pop()
                in_progress.discard(name)
                visited.add(name)
                ordered.append(by_name[name])

    return ordered
