"""Coverage annotation functions.

These functions mutate the coverage map produced by build_catalog:
- record_assertions: direct coverage from check assertions
- annotate_indirect_coverage: indirect coverage by dependency reachability,
  in both directions from each directly tested relation

Usage:
    from relcov.graph.builder import build_catalog, build_dependency_graph
    from relcov.graph.annotators import record_assertions, annotate_indirect_coverage

    coverage = build_catalog(model)
    record_assertions(coverage, test_file.iter_check_assertions())
    annotate_indirect_coverage(coverage, build_dependency_graph(model))
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from relcov.graph.metrics import AssertionStats
from relcov.graph.relations import RelationKey

if TYPE_CHECKING:
    from relcov.assertions import CheckAssertion
    from relcov.graph.builder import DependencyGraph
    from relcov.graph.metrics import RelationCoverage

logger = logging.getLogger(__name__)


def get_object_type(obj: str) -> str:
    """Return the type prefix of an object reference (``document:1`` -> ``document``).

    Raises:
        ValueError: If the reference has no ``:`` delimiter.
    """
    type_name, sep, _ = obj.partition(":")
    if not sep:
        raise ValueError(f"invalid object format: {obj}")
    return type_name


def record_assertions(
    coverage: dict[RelationKey, RelationCoverage],
    assertions: Iterable[CheckAssertion],
    stats: AssertionStats | None = None,
) -> AssertionStats:
    """Mark relations named by check assertions as directly tested.

    Assertions without a tuple, with an object reference lacking a type,
    or naming an undeclared type/relation are skipped and counted.

    Args:
        coverage: Coverage map from build_catalog (mutated in place).
        assertions: Check assertions to record.
        stats: Existing stats to accumulate into.

    Returns:
        The assertion accounting for this call.
    """
    if stats is None:
        stats = AssertionStats()

    for assertion in assertions:
        stats.checked += 1

        if assertion.tuple is None:
            stats.missing_tuple += 1
            logger.debug("Skipping check assertion without a tuple")
            continue

        try:
            object_type = get_object_type(assertion.tuple.object)
        except ValueError as e:
            stats.malformed += 1
            logger.debug("Skipping check assertion: %s", e)
            continue

        key = RelationKey(object_type, assertion.tuple.relation)
        record = coverage.get(key)
        if record is None:
            stats.unknown += 1
            logger.debug("Skipping check assertion for undeclared relation %s", key)
            continue

        record.mark_direct(assertion.expectation)
        stats.recorded += 1

    return stats


def mark_indirectly_tested(
    root: RelationKey,
    coverage: dict[RelationKey, RelationCoverage],
    graph: DependencyGraph,
) -> set[RelationKey]:
    """Mark every relation reachable from ``root`` as indirectly tested.

    Depth-first over dependency edges with a visited set, so cycles and
    self-references terminate. Relations that are themselves directly
    tested keep tested_indirectly unchanged. Targets missing from the
    catalog are traversed but never marked.

    Returns:
        The set of relations visited, including ``root``.
    """
    visited: set[RelationKey] = set()
    stack = [root]

    while stack:
        current = stack.pop()
        if current in visited:
            continue
        visited.add(current)

        # Reverse so the first dependency is explored first
        for dep in reversed(graph.dependencies_of(current)):
            record = coverage.get(dep)
            if record is not None and not record.tested_directly:
                record.mark_indirect()
            if dep not in visited:
                stack.append(dep)

    return visited


def mark_dependents_indirectly_tested(
    root: RelationKey,
    coverage: dict[RelationKey, RelationCoverage],
    graph: DependencyGraph,
) -> set[RelationKey]:
    """Mark every relation that delegates to ``root`` as indirectly tested.

    The reverse of mark_indirectly_tested: follows dependency edges
    backwards, so ``editor: [user] or viewer`` is reached from a tested
    ``viewer``. Same visited set, directly-tested guard and catalog check.

    Returns:
        The set of relations visited, including ``root``.
    """
    visited: set[RelationKey] = set()
    stack = [root]

    while stack:
        current = stack.pop()
        if current in visited:
            continue
        visited.add(current)

        for dependent in reversed(graph.dependents_of(current)):
            record = coverage.get(dependent)
            if record is not None and not record.tested_directly:
                record.mark_indirect()
            if dependent not in visited:
                stack.append(dependent)

    return visited


def annotate_indirect_coverage(
    coverage: dict[RelationKey, RelationCoverage],
    graph: DependencyGraph,
) -> None:
    """Propagate indirect coverage from every directly tested relation.

    Each root marks both the relations it delegates to and the relations
    that delegate to it.

    Args:
        coverage: Coverage map after record_assertions (mutated in place).
        graph: Dependency graph from build_dependency_graph.
    """
    roots = sorted(key for key, record in coverage.items() if record.tested_directly)
    for root in roots:
        reached = mark_indirectly_tested(root, coverage, graph)
        delegating = mark_dependents_indirectly_tested(root, coverage, graph)
        logger.debug(
            "%s reaches %d relation(s), reached from %d",
            root,
            len(reached) - 1,
            len(delegating) - 1,
        )


__all__ = [
    "annotate_indirect_coverage",
    "get_object_type",
    "mark_dependents_indirectly_tested",
    "mark_indirectly_tested",
    "record_assertions",
]
