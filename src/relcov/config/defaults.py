"""
relcov.config.defaults - Default configuration values.
"""

DEFAULT_CONFIG = {
    "report": {
        "format": "json",
    },
    "analysis": {
        "max_rewrite_depth": 64,
    },
    "coverage": {
        "fail_on_untested": False,
        "require_full": False,
    },
}
