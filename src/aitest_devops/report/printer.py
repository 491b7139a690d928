"""Human-readable report output.

Every command reports through a Reporter, which prefixes lines with a
status glyph. There is no machine-readable mode.
"""

from __future__ import annotations

import sys
from typing import TextIO

BANNER = "AI Test Application DevOps Tools"

# Status glyphs
SUCCESS = "✅"
FAILURE = "❌"
WARNING = "⚠️ "
HINT = "💡"
DONE = "🎉"

# Step glyphs
HEALTH = "🏥"
BUILD = "🔨"
PACKAGE = "📦"
FRONTEND = "🎨"
START = "🚀"
STOP = "🛑"
TEST = "🧪"

COMMAND_HELP = [
    ("health", "Check health of backend API"),
    ("build", "Build both frontend and backend"),
    ("start", "Start all services"),
    ("stop", "Stop all services"),
    ("test", "Run API tests"),
]


class Reporter:
    """Prints report lines to stdout, or to ``stream`` when given."""

    def __init__(self, stream: TextIO | None = None, prog: str = "aitest-devops") -> None:
        self._stream = stream
        self._prog = prog

    @property
    def prog(self) -> str:
        return self._prog

    def line(self, text: str = "") -> None:
        print(text, file=self._stream or sys.stdout)

    def banner(self) -> None:
        self.line(BANNER)
        self.line("=" * (len(BANNER) + 2))

    def usage(self) -> None:
        self.line(f"\nUsage: {self._prog} <command>")
        self.line("Commands:")
        for name, description in COMMAND_HELP:
            self.line(f"  {name:<7} - {description}")

    def unknown_command(self, token: str) -> None:
        self.line(f"Unknown command: {token}")
        self.usage()

    def step(self, glyph: str, text: str) -> None:
        self.line(f"{glyph} {text}")

    def success(self, text: str) -> None:
        self.step(SUCCESS, text)

    def failure(self, text: str) -> None:
        self.step(FAILURE, text)

    def warning(self, text: str) -> None:
        self.step(WARNING, text)

    def hint(self, text: str) -> None:
        self.step(HINT, text)

    def done(self, text: str) -> None:
        self.step(DONE, text)

    def begin_check(self, label: str) -> None:
        """Print a check label and leave the line open for its verdict."""
        stream = self._stream or sys.stdout
        print(f"{label}... ", end="", file=stream, flush=True)

    def check_passed(self, detail: str = "") -> None:
        self.line(f"{SUCCESS} {detail}".rstrip())

    def check_failed(self, detail: str) -> None:
        self.line(f"{FAILURE} {detail}")
