"""
relcov.report.generators - Report rendering.

Provides functions to render a CoverageReport as JSON, plain text,
markdown, or CSV.
"""

from __future__ import annotations

import csv
import json
from io import StringIO
from typing import Callable

from relcov.graph.metrics import CoverageSource, RelationCoverage
from relcov.report.classifier import CoverageReport


def describe_gap(record: RelationCoverage) -> str:
    """Short description of what a relation's tests are missing."""
    if record.source is CoverageSource.NONE:
        return "no tests"
    if record.source is CoverageSource.INDIRECT:
        return "indirect only"
    if record.has_positive_test and record.has_negative_test:
        return "complete"
    if record.has_positive_test:
        return "missing negative test"
    return "missing positive test"


def generate_json(report: CoverageReport) -> str:
    return json.dumps(report.to_dict(), indent=2)


def generate_text(report: CoverageReport) -> str:
    """Generate a human-readable report."""
    lines = []
    sections = [
        ("UNTESTED", "✗", report.untested),
        ("PARTIALLY TESTED", "◐", report.partially_tested),
        ("FULLY TESTED", "✓", report.fully_tested),
    ]
    for title, icon, records in sections:
        lines.append(f"{title} ({len(records)})")
        lines.append("-" * 40)
        if not records:
            lines.append("  (none)")
        for record in records:
            lines.append(f"  {icon} {record.key}: {describe_gap(record)}")
        lines.append("")

    stats = report.stats
    lines.append("=" * 40)
    lines.append(
        f"Relations: {report.total} | Covered: {report.coverage_pct:.1f}% | "
        f"Fully tested: {len(report.fully_tested)}"
    )
    lines.append(
        f"Check assertions: {stats.checked} ({stats.recorded} recorded, {stats.skipped} skipped)"
    )
    if stats.list_objects or stats.list_users:
        lines.append(
            f"List assertions (not scored): {stats.list_objects} list-objects, "
            f"{stats.list_users} list-users"
        )
    lines.append("=" * 40)
    return "\n".join(lines)


def generate_markdown(report: CoverageReport) -> str:
    """Generate a markdown table report."""
    lines = ["# Relation Test Coverage", ""]
    lines.append(f"**Relations**: {report.total}  ")
    lines.append(f"**Covered**: {report.coverage_pct:.1f}%  ")
    lines.append(f"**Fully tested**: {len(report.fully_tested)}")
    lines.append("")

    for title, records in (
        ("Untested", report.untested),
        ("Partially Tested", report.partially_tested),
        ("Fully Tested", report.fully_tested),
    ):
        lines.append(f"## {title} ({len(records)})")
        lines.append("")
        if not records:
            lines.append("_None_")
            lines.append("")
            continue
        lines.append("| Relation | Direct | Indirect | Allow | Deny | Notes |")
        lines.append("|---|---|---|---|---|---|")
        for r in records:
            lines.append(
                f"| `{r.key}` | {_yes(r.tested_directly)} | {_yes(r.tested_indirectly)} "
                f"| {_yes(r.has_positive_test)} | {_yes(r.has_negative_test)} "
                f"| {describe_gap(r)} |"
            )
        lines.append("")

    return "\n".join(lines)


def _yes(flag: bool) -> str:
    return "yes" if flag else "-"


def generate_csv(report: CoverageReport) -> str:
    """Generate CSV with one row per relation."""
    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(
        [
            "Type",
            "Relation",
            "Status",
            "Tested Directly",
            "Tested Indirectly",
            "Has Positive Test",
            "Has Negative Test",
        ]
    )
    for bucket, r in report.iter_all():
        writer.writerow(
            [
                r.type_name,
                r.relation_name,
                bucket,
                r.tested_directly,
                r.tested_indirectly,
                r.has_positive_test,
                r.has_negative_test,
            ]
        )
    return output.getvalue()


FORMATS: dict[str, Callable[[CoverageReport], str]] = {
    "json": generate_json,
    "text": generate_text,
    "markdown": generate_markdown,
    "csv": generate_csv,
}


def render(report: CoverageReport, fmt: str) -> str:
    """Render a report in the named format.

    Raises:
        ValueError: If the format is unknown.
    """
    try:
        generator = FORMATS[fmt]
    except KeyError:
        raise ValueError(
            f"Unknown report format: {fmt} (expected one of {', '.join(FORMATS)})"
        ) from None
    return generator(report)


__all__ = [
    "FORMATS",
    "describe_gap",
    "generate_csv",
    "generate_json",
    "generate_markdown",
    "generate_text",
    "render",
]
