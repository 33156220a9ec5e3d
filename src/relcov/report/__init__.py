"""
relcov.report - Coverage report classification and rendering
"""

from relcov.report.classifier import CoverageReport, classify
from relcov.report.generators import FORMATS, render

__all__ = [
    "CoverageReport",
    "FORMATS",
    "classify",
    "render",
]
