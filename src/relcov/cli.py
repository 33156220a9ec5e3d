"""
relcov.cli - Command-line interface.

Main entry point for the relcov CLI tool.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from relcov import __version__
from relcov.commands import config_cmd, coverage, graph_cmd
from relcov.report import FORMATS


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="relcov",
        description="Relation test coverage for authorization models",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  relcov coverage --model-file model.fga --test-file tests.yaml
  relcov coverage --test-file tests.yaml --format text
  relcov coverage -m model.json -t tests.yaml --require-full
  relcov graph --model-file model.fga --format dot

Configuration:
  relcov config path            # Show config file location
  relcov config show            # View effective settings

For detailed command help: relcov <command> --help
        """,
    )

    # Global options
    parser.add_argument(
        "--version",
        action="version",
        version=f"relcov {__version__}",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration file",
        metavar="PATH",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose output",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress non-error output",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # coverage command
    coverage_parser = subparsers.add_parser(
        "coverage",
        help="Analyze test coverage for authorization model relations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Compare an authorization model with the check assertions of a test file
to identify:
  - Relations that are not tested at all
  - Relations with only positive (allowed) or only negative cases
  - Relations covered only through relations that delegate to them
""",
        epilog="""
Exit codes:
  0  Report generated
  1  Model, test file, or config could not be loaded
  2  A coverage gate (--fail-on-untested, --require-full) failed
""",
    )
    coverage_parser.add_argument(
        "-m",
        "--model-file",
        type=Path,
        help="Path to the model file (DSL, or OpenFGA JSON with .json suffix). "
        "Defaults to the first model embedded in the test file",
        metavar="PATH",
    )
    coverage_parser.add_argument(
        "-t",
        "--test-file",
        type=Path,
        required=True,
        help="Path to the test file (YAML format)",
        metavar="PATH",
    )
    coverage_parser.add_argument(
        "--format",
        choices=list(FORMATS),
        help="Report format (default: from config, json)",
    )
    coverage_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Write the report to a file instead of stdout",
        metavar="PATH",
    )
    coverage_parser.add_argument(
        "--fail-on-untested",
        action="store_true",
        help="Exit with code 2 if any relation is untested",
    )
    coverage_parser.add_argument(
        "--require-full",
        action="store_true",
        help="Exit with code 2 unless every relation is fully tested",
    )

    # graph command
    graph_parser = subparsers.add_parser(
        "graph",
        help="Show the relation dependency graph",
    )
    graph_parser.add_argument(
        "-m",
        "--model-file",
        type=Path,
        required=True,
        help="Path to the model file",
        metavar="PATH",
    )
    graph_parser.add_argument(
        "--format",
        choices=["text", "json", "dot"],
        default="text",
        help="Output format (default: text)",
    )

    # config command
    config_parser = subparsers.add_parser(
        "config",
        help="Inspect configuration",
    )
    config_subparsers = config_parser.add_subparsers(dest="config_action")
    config_subparsers.add_parser(
        "show",
        help="Show the effective configuration",
    )
    config_subparsers.add_parser(
        "path",
        help="Show the configuration file location",
    )

    # version command
    subparsers.add_parser(
        "version",
        help="Show version",
    )

    return parser


LOG_HANDLER_NAME = "relcov-cli"


def configure_logging(verbose: bool = False, quiet: bool = False) -> logging.Handler:
    """Send relcov diagnostics to stderr at a level chosen by -v / -q.

    Replaces the handler installed by a previous call, so repeated
    in-process invocations do not stack handlers.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    package_logger = logging.getLogger("relcov")
    for existing in list(package_logger.handlers):
        if existing.get_name() == LOG_HANDLER_NAME:
            package_logger.removeHandler(existing)

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(LOG_HANDLER_NAME)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    return handler


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = create_parser()

    # Enable shell tab-completion if argcomplete is installed
    # Install with: pip install relcov[completion]
    try:
        import argcomplete

        argcomplete.autocomplete(parser)
    except ImportError:
        pass

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    configure_logging(args.verbose, args.quiet)

    try:
        if args.command == "coverage":
            return coverage.run(args)
        elif args.command == "graph":
            return graph_cmd.run(args)
        elif args.command == "config":
            return config_cmd.run(args)
        elif args.command == "version":
            print(f"relcov {__version__}")
            return 0
        else:
            parser.print_help()
            return 1
    except KeyboardInterrupt:
        print("\nOperation cancelled.", file=sys.stderr)
        return 130
    except Exception as e:
        if args.verbose:
            raise
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
