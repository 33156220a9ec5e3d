"""
relcov.report.classifier - Partition relations into coverage buckets.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator

from relcov.graph.metrics import AssertionStats, RelationCoverage
from relcov.graph.relations import RelationKey


@dataclass
class CoverageReport:
    """Coverage analysis result.

    The three buckets partition the relation catalog: every declared
    relation appears in exactly one of them.
    """

    untested: list[RelationCoverage] = field(default_factory=list)
    partially_tested: list[RelationCoverage] = field(default_factory=list)
    fully_tested: list[RelationCoverage] = field(default_factory=list)
    stats: AssertionStats = field(default_factory=AssertionStats)

    @property
    def total(self) -> int:
        return len(self.untested) + len(self.partially_tested) + len(self.fully_tested)

    @property
    def coverage_pct(self) -> float:
        """Percentage of relations that are at least partially tested."""
        if self.total == 0:
            return 0.0
        return (len(self.partially_tested) + len(self.fully_tested)) / self.total * 100

    def iter_all(self) -> Iterator[tuple[str, RelationCoverage]]:
        """Iterate (bucket name, record) over every relation."""
        for record in self.untested:
            yield "untested", record
        for record in self.partially_tested:
            yield "partial", record
        for record in self.fully_tested:
            yield "full", record

    def to_dict(self) -> dict[str, Any]:
        return {
            "untested_relations": [r.to_dict() for r in self.untested],
            "partially_tested": [r.to_dict() for r in self.partially_tested],
            "fully_tested": [r.to_dict() for r in self.fully_tested],
        }


def classify(
    coverage: dict[RelationKey, RelationCoverage],
    stats: AssertionStats | None = None,
) -> CoverageReport:
    """Classify every coverage record into a report bucket.

    - Neither directly nor indirectly tested: untested
    - Both a positive and a negative test: fully tested
    - Otherwise (including indirect-only coverage): partially tested

    Buckets are sorted by type then relation.
    """
    report = CoverageReport(stats=stats or AssertionStats())

    for key in sorted(coverage):
        record = coverage[key]
        if not record.tested_directly and not record.tested_indirectly:
            report.untested.append(record)
        elif record.has_positive_test and record.has_negative_test:
            report.fully_tested.append(record)
        else:
            report.partially_tested.append(record)

    return report


__all__ = [
    "CoverageReport",
    "classify",
]
