"""
relcov - Relation coverage analysis for authorization model tests

relcov compares an authorization model with the check assertions in a
test file and reports which relations are untested, partially tested
(only allow or only deny cases), or fully tested, including relations
exercised only through other relations that delegate to them.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("relcov")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"  # Not installed
__license__ = "MIT"

from relcov.analysis import analyze_coverage
from relcov.graph.metrics import RelationCoverage
from relcov.graph.relations import RelationKey
from relcov.report import CoverageReport

__all__ = [
    "__version__",
    "analyze_coverage",
    "CoverageReport",
    "RelationCoverage",
    "RelationKey",
]
