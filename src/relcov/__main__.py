"""Allow running relcov as ``python -m relcov``."""

import sys

from relcov.cli import main

sys.exit(main())
