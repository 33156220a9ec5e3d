"""
relcov.graph - Relation catalog, dependency graph, and coverage annotation
"""

from relcov.graph.annotators import (
    annotate_indirect_coverage,
    get_object_type,
    mark_dependents_indirectly_tested,
    mark_indirectly_tested,
    record_assertions,
)
from relcov.graph.builder import (
    DependencyGraph,
    RewriteDepthError,
    build_catalog,
    build_dependency_graph,
    extract_dependencies,
)
from relcov.graph.metrics import AssertionStats, CoverageSource, RelationCoverage
from relcov.graph.relations import RelationKey

__all__ = [
    "AssertionStats",
    "CoverageSource",
    "DependencyGraph",
    "RelationCoverage",
    "RelationKey",
    "RewriteDepthError",
    "annotate_indirect_coverage",
    "build_catalog",
    "build_dependency_graph",
    "extract_dependencies",
    "get_object_type",
    "mark_dependents_indirectly_tested",
    "mark_indirectly_tested",
    "record_assertions",
]
