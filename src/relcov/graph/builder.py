"""Builder - Relation catalog and dependency graph construction.

Both structures are built independently from the same model:
- build_catalog: one fresh RelationCoverage per declared relation
- build_dependency_graph: for each relation, the relations its rewrite
  expression delegates to

Tuple-to-userset references are resolved against the declaring type
(``viewer from parent`` on ``document`` depends on ``document#viewer``),
not against the types the tupleset relation points at.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from relcov.graph.metrics import RelationCoverage
from relcov.graph.relations import RelationKey
from relcov.model.rewrite import (
    ComputedUserset,
    Difference,
    Intersection,
    Rewrite,
    This,
    TupleToUserset,
    Union,
)
from relcov.model.schema import AuthorizationModel

DEFAULT_MAX_DEPTH = 64


class RewriteDepthError(ValueError):
    """Raised when a rewrite expression nests deeper than the allowed ceiling."""


def build_catalog(model: AuthorizationModel) -> dict[RelationKey, RelationCoverage]:
    """Create a coverage record for every declared relation.

    Args:
        model: The parsed authorization model.

    Returns:
        Mapping of relation key to a RelationCoverage with all flags False.
    """
    catalog: dict[RelationKey, RelationCoverage] = {}
    for type_name, relation_name, _rewrite in model.iter_relations():
        catalog[RelationKey(type_name, relation_name)] = RelationCoverage(
            type_name=type_name,
            relation_name=relation_name,
        )
    return catalog


def extract_dependencies(
    type_name: str,
    rewrite: Rewrite | None,
    max_depth: int = DEFAULT_MAX_DEPTH,
    _depth: int = 0,
) -> list[RelationKey]:
    """List the relations a rewrite expression delegates to.

    Order follows the expression; duplicates are kept.

    Args:
        type_name: Type declaring the relation.
        rewrite: The relation's rewrite expression (None means no rewrite).
        max_depth: Maximum expression nesting depth.

    Returns:
        Dependency keys in expression order.

    Raises:
        RewriteDepthError: If nesting exceeds max_depth.
        TypeError: If the expression contains an unknown node type.
    """
    if rewrite is None:
        return []
    if _depth > max_depth:
        raise RewriteDepthError(f"Rewrite nesting exceeds maximum depth of {max_depth}")

    if isinstance(rewrite, This):
        return []
    if isinstance(rewrite, ComputedUserset):
        return [RelationKey(type_name, rewrite.relation)]
    if isinstance(rewrite, TupleToUserset):
        return [RelationKey(type_name, rewrite.computed_relation)]
    if isinstance(rewrite, (Union, Intersection)):
        deps: list[RelationKey] = []
        for child in rewrite.children:
            deps.extend(extract_dependencies(type_name, child, max_depth, _depth + 1))
        return deps
    if isinstance(rewrite, Difference):
        return extract_dependencies(
            type_name, rewrite.base, max_depth, _depth + 1
        ) + extract_dependencies(type_name, rewrite.subtract, max_depth, _depth + 1)

    raise TypeError(f"Unknown rewrite type: {type(rewrite).__name__}")


@dataclass
class DependencyGraph:
    """Relation dependency graph.

    Maps each declared relation to the relations it may delegate
    authorization decisions to. May contain self-references and cycles.
    """

    _edges: dict[RelationKey, list[RelationKey]] = field(default_factory=dict)

    def add(self, key: RelationKey, dependencies: list[RelationKey]) -> None:
        self._edges[key] = list(dependencies)

    def dependencies_of(self, key: RelationKey) -> list[RelationKey]:
        """Direct dependencies of a relation (empty for unknown keys)."""
        return list(self._edges.get(key, ()))

    def dependents_of(self, key: RelationKey) -> list[RelationKey]:
        """Relations that list ``key`` as a direct dependency."""
        return sorted(source for source, deps in self._edges.items() if key in deps)

    def __contains__(self, key: object) -> bool:
        return key in self._edges

    def __len__(self) -> int:
        return len(self._edges)

    def iter_keys(self) -> Iterator[RelationKey]:
        """Iterate relation keys in sorted order."""
        yield from sorted(self._edges)

    def iter_edges(self) -> Iterator[tuple[RelationKey, RelationKey]]:
        """Iterate (source, target) pairs, deduplicated per source."""
        for source in self.iter_keys():
            seen: set[RelationKey] = set()
            for target in self._edges[source]:
                if target not in seen:
                    seen.add(target)
                    yield source, target

    def to_dict(self) -> dict[str, list[str]]:
        return {str(k): [str(d) for d in self._edges[k]] for k in self.iter_keys()}


def build_dependency_graph(
    model: AuthorizationModel, max_depth: int = DEFAULT_MAX_DEPTH
) -> DependencyGraph:
    """Build the dependency graph for every declared relation.

    Args:
        model: The parsed authorization model.
        max_depth: Maximum rewrite nesting depth before failing.

    Raises:
        RewriteDepthError: If any relation's rewrite nests too deeply.
    """
    graph = DependencyGraph()
    for type_name, relation_name, rewrite in model.iter_relations():
        key = RelationKey(type_name, relation_name)
        try:
            deps = extract_dependencies(type_name, rewrite, max_depth)
        except RewriteDepthError as e:
            raise RewriteDepthError(f"{key}: {e}") from e
        graph.add(key, deps)
    return graph


__all__ = [
    "DEFAULT_MAX_DEPTH",
    "RewriteDepthError",
    "DependencyGraph",
    "build_catalog",
    "build_dependency_graph",
    "extract_dependencies",
]
