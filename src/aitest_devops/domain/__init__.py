"""Domain models for aitest_devops.

Enumerations and value objects shared by the dispatcher, the process
runner, the probe client and the report printer. All models use
Pydantic v2.
"""

from aitest_devops.domain.models import (
    Command,
    ProbeOutcome,
    ProbeRequest,
    ProbeResult,
    ProcessInvocation,
    ProcessResult,
    RunStatus,
)

__all__ = [
    "Command",
    "ProbeOutcome",
    "ProbeRequest",
    "ProbeResult",
    "ProcessInvocation",
    "ProcessResult",
    "RunStatus",
]
