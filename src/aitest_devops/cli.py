"""Command-line interface for aitest_devops.

Parses the command token, loads settings, and dispatches to exactly one
handler. Unknown or missing commands print usage. The exit status is 0
whatever the handler reports, unless strict mode is switched on.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from aitest_devops.domain.models import Command
from aitest_devops.report.printer import Reporter

logger = logging.getLogger(__name__)

PROG = "aitest-devops"


class UsageError(Exception):
    """Raised when the command line cannot be parsed."""


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of exiting with status 2."""

    def error(self, message: str) -> None:
        raise UsageError(message)


def parse_args(argv: list[str] | None = None) -> tuple[argparse.Namespace, list[str]]:
    """Parse command-line arguments.

    The command token is taken verbatim so that unrecognized values reach
    the dispatcher instead of being rejected by argparse.

    Raises:
        UsageError: If an option is malformed, e.g. missing its value.
    """
    parser = _ArgumentParser(
        prog=PROG,
        description="DevOps tools for the AI test application",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: config/aitest-devops.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--base-url",
        type=str,
        default=None,
        help="Backend API base URL (default: http://localhost:3001)",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 1 when a command reports a failure",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default=None,
        help="One of: " + ", ".join(c.value for c in Command),
    )
    return parser.parse_known_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the aitest-devops CLI."""
    reporter = Reporter(prog=PROG)
    reporter.banner()

    try:
        args, extra = parse_args(argv)
    except UsageError as e:
        reporter.line(f"Invalid arguments: {e}")
        reporter.usage()
        return 0

    if args.command is None:
        # An unrecognized option in command position is an unknown command
        if extra:
            reporter.unknown_command(extra[0])
        else:
            reporter.usage()
        return 0

    command = Command.parse(args.command)
    if command is None:
        reporter.unknown_command(args.command)
        return 0

    from aitest_devops.commands.handlers import HANDLERS
    from aitest_devops.config.settings import load_settings
    from aitest_devops.utils.logging import setup_logging

    settings = load_settings(args.config)

    if args.verbose:
        settings.logging.level = "DEBUG"
    if args.base_url:
        settings.api.base_url = args.base_url
    if args.strict:
        settings.exit_on_failure = True

    setup_logging(settings.logging)

    if extra:
        logger.debug("Ignoring extra arguments: %s", extra)

    logger.info("Running command: %s", command.value)
    ok = HANDLERS[command](settings, reporter)

    if not ok and settings.exit_on_failure:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
