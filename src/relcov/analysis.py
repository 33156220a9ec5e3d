"""
relcov.analysis - Coverage analysis pipeline.

Runs catalog -> dependency graph -> assertion recording -> indirect
propagation -> classification over one model and one test file. The
coverage map is created and owned by each call.
"""

from __future__ import annotations

from relcov.assertions import TestFile
from relcov.graph.annotators import annotate_indirect_coverage, record_assertions
from relcov.graph.builder import DEFAULT_MAX_DEPTH, build_catalog, build_dependency_graph
from relcov.graph.metrics import AssertionStats
from relcov.model.schema import AuthorizationModel
from relcov.report.classifier import CoverageReport, classify


def analyze_coverage(
    model: AuthorizationModel,
    test_file: TestFile,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> CoverageReport:
    """Analyze how thoroughly a test file covers a model's relations.

    Args:
        model: The parsed authorization model.
        test_file: The deserialized test file.
        max_depth: Maximum rewrite nesting depth.

    Returns:
        CoverageReport partitioning every declared relation.

    Raises:
        RewriteDepthError: If a rewrite expression nests too deeply.
    """
    coverage = build_catalog(model)
    graph = build_dependency_graph(model, max_depth=max_depth)

    stats = AssertionStats()
    for stage in test_file.iter_stages():
        record_assertions(coverage, stage.check_assertions, stats)
        stats.list_objects += len(stage.list_objects_assertions)
        stats.list_users += len(stage.list_users_assertions)

    annotate_indirect_coverage(coverage, graph)

    return classify(coverage, stats)


__all__ = ["analyze_coverage"]
