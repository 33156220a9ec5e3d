"""
relcov.commands.config_cmd - Inspect configuration.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import tomlkit

from relcov.config import find_config_file, get_config


def run(args: argparse.Namespace) -> int:
    """Run the config command."""
    action = getattr(args, "config_action", None)
    if action == "path":
        return run_path(args)
    if action == "show":
        return run_show(args)

    print("Usage: relcov config {show|path}")
    return 1


def run_path(args: argparse.Namespace) -> int:
    config_path = getattr(args, "config", None) or find_config_file(Path.cwd())
    if config_path is None:
        print("No .relcov.toml found (using defaults)")
    else:
        print(config_path)
    return 0


def run_show(args: argparse.Namespace) -> int:
    try:
        config = get_config(getattr(args, "config", None))
    except (OSError, ValueError) as e:
        print(f"Error: failed to load config: {e}", file=sys.stderr)
        return 1

    print(tomlkit.dumps(config), end="")
    return 0
