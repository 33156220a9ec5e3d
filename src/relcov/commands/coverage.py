"""
relcov.commands.coverage - Analyze relation test coverage.

Compares an authorization model with the check assertions of a test file
and reports untested, partially tested, and fully tested relations.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from relcov.analysis import analyze_coverage
from relcov.assertions import TestFile, TestFileError, load_test_file
from relcov.config import get_config
from relcov.graph.builder import RewriteDepthError
from relcov.model import AuthorizationModel, ModelParseError, load_model, parse_model_text
from relcov.report import CoverageReport, render

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_GATE_FAILED = 2


def run(args: argparse.Namespace) -> int:
    """Run the coverage command."""
    try:
        config = get_config(getattr(args, "config", None))
    except (OSError, ValueError) as e:
        print(f"Error: failed to load config: {e}", file=sys.stderr)
        return EXIT_ERROR

    try:
        test_file = load_test_file(args.test_file)
    except OSError as e:
        print(f"Error: failed to read test file: {e}", file=sys.stderr)
        return EXIT_ERROR
    except TestFileError as e:
        print(f"Error: failed to parse test file: {e}", file=sys.stderr)
        return EXIT_ERROR

    try:
        model = resolve_model(args.model_file, test_file)
    except OSError as e:
        print(f"Error: failed to read model file: {e}", file=sys.stderr)
        return EXIT_ERROR
    except ModelParseError as e:
        print(f"Error: failed to parse model: {e}", file=sys.stderr)
        return EXIT_ERROR

    logger.info(
        "Loaded model with %d type(s), %d relation(s)",
        len(model.type_definitions),
        model.relation_count(),
    )

    try:
        report = analyze_coverage(
            model, test_file, max_depth=config["analysis"]["max_rewrite_depth"]
        )
    except RewriteDepthError as e:
        print(f"Error: failed to analyze coverage: {e}", file=sys.stderr)
        return EXIT_ERROR

    fmt = getattr(args, "format", None) or config["report"]["format"]
    output = render(report, fmt)

    output_path: Path | None = getattr(args, "output", None)
    if output_path:
        output_path.write_text(output + "\n", encoding="utf-8")
        if not getattr(args, "quiet", False):
            print(f"Wrote {fmt} report to {output_path}", file=sys.stderr)
    else:
        print(output)

    fail_on_untested = getattr(args, "fail_on_untested", False) or config["coverage"][
        "fail_on_untested"
    ]
    require_full = getattr(args, "require_full", False) or config["coverage"]["require_full"]
    return check_gates(report, fail_on_untested, require_full)


def resolve_model(model_file: Path | None, test_file: TestFile) -> AuthorizationModel:
    """Load the model from a file, or from the first stage that embeds one.

    Raises:
        ModelParseError: If no model is available or it fails to parse.
    """
    if model_file is not None:
        return load_model(model_file)

    embedded = test_file.first_model()
    if embedded is None:
        raise ModelParseError("no --model-file given and no stage in the test file has a model")
    logger.info("Using model embedded in the test file")
    return parse_model_text(embedded)


def check_gates(report: CoverageReport, fail_on_untested: bool, require_full: bool) -> int:
    """Apply CI gates to a report and return the exit code."""
    if fail_on_untested and report.untested:
        print(
            f"Coverage gate failed: {len(report.untested)} untested relation(s)",
            file=sys.stderr,
        )
        return EXIT_GATE_FAILED
    if require_full and (report.untested or report.partially_tested):
        incomplete = len(report.untested) + len(report.partially_tested)
        print(
            f"Coverage gate failed: {incomplete} relation(s) not fully tested",
            file=sys.stderr,
        )
        return EXIT_GATE_FAILED
    return EXIT_OK
