"""Core domain models for aitest_devops.

These models represent the transient values flowing through a single
invocation: the command token, subprocess invocations and their results,
and HTTP probe requests with their interpreted outcomes. Nothing here
outlives one command.
"""

from __future__ import annotations

import enum
from http import HTTPStatus
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class Command(str, enum.Enum):
    """Top-level CLI commands."""

    HEALTH = "health"
    BUILD = "build"
    START = "start"
    STOP = "stop"
    TEST = "test"

    @classmethod
    def parse(cls, token: str) -> Command | None:
        """Return the command for an exact, case-sensitive token match."""
        for command in cls:
            if command.value == token:
                return command
        return None


class RunStatus(str, enum.Enum):
    """Outcome of a subprocess invocation."""

    SUCCEEDED = "succeeded"  # Exit code zero
    FAILED = "failed"  # Non-zero exit code
    SPAWN_ERROR = "spawn_error"  # OS refused to start the process


class ProbeOutcome(str, enum.Enum):
    """Interpreted outcome of a single HTTP probe."""

    OK = "ok"
    CONNECTION_ERROR = "connection_error"
    BAD_STATUS = "bad_status"
    INVALID_JSON = "invalid_json"
    MISSING_FIELD = "missing_field"
    MISMATCH = "mismatch"


# ---------------------------------------------------------------------------
# Process Models
# ---------------------------------------------------------------------------


class ProcessInvocation(BaseModel):
    """A program to run, its arguments and working directory."""

    model_config = ConfigDict(frozen=True)

    program: str = Field(description="Executable name or path")
    args: list[str] = Field(default_factory=list, description="Arguments after the program")
    cwd: str | None = Field(default=None, description="Working directory, None for the current one")

    @property
    def command_line(self) -> str:
        return " ".join([self.program, *self.args])


class ProcessResult(BaseModel):
    """Result of running a ProcessInvocation to completion."""

    model_config = ConfigDict(frozen=True)

    invocation: ProcessInvocation
    status: RunStatus
    returncode: int | None = Field(default=None, description="Exit code, None on spawn error")
    error: str | None = Field(default=None, description="OS error message on spawn error")

    @property
    def succeeded(self) -> bool:
        return self.status is RunStatus.SUCCEEDED


# ---------------------------------------------------------------------------
# Probe Models
# ---------------------------------------------------------------------------


class ProbeRequest(BaseModel):
    """A single outbound request against the backend API."""

    model_config = ConfigDict(frozen=True)

    method: Literal["GET", "POST"] = Field(default="GET")
    path: str = Field(description="Path relative to the API base URL")
    payload: Any = Field(default=None, description="JSON body for POST requests")
    expectation: str = Field(default="", description="Expected response shape, for humans")


class ProbeResult(BaseModel):
    """What came back from a probe and how it was judged."""

    model_config = ConfigDict(frozen=True)

    request: ProbeRequest
    outcome: ProbeOutcome
    status_code: int | None = Field(default=None, description="HTTP status, None if no response")
    reason: str = Field(default="", description="HTTP reason phrase")
    payload: Any = Field(default=None, description="Parsed JSON body, if any")
    value: Any = Field(default=None, description="Field extracted from the body for comparison")
    expected: float | None = Field(default=None, description="Value the extracted field must equal")
    error: str | None = Field(default=None, description="Transport error message")

    @property
    def passed(self) -> bool:
        return self.outcome is ProbeOutcome.OK

    @property
    def status_ok(self) -> bool:
        """Whether a 2xx response was received."""
        return self.status_code is not None and 200 <= self.status_code < 300

    @property
    def status_text(self) -> str:
        """Status code with reason phrase, e.g. ``404 Not Found``."""
        if self.status_code is None:
            return "no response"
        reason = self.reason
        if not reason:
            try:
                reason = HTTPStatus(self.status_code).phrase
            except ValueError:
                reason = ""
        return f"{self.status_code} {reason}".strip()
