"""Synchronous subprocess runner.

Spawns external programs with the invoking process's standard streams,
waits for them to exit, and folds the outcome into a ProcessResult.
"""

from __future__ import annotations

import logging
import subprocess

from aitest_devops.domain.models import ProcessInvocation, ProcessResult, RunStatus

logger = logging.getLogger(__name__)


class ProcessRunner:
    """Runs external commands to completion.

    Output is not captured; the child writes straight to the terminal.
    """

    def __init__(self, kill_command: str = "pkill", kill_args: list[str] | None = None) -> None:
        self._kill_command = kill_command
        self._kill_args = list(kill_args) if kill_args is not None else ["-f"]

    def run(self, program: str, args: list[str], cwd: str | None = None) -> ProcessResult:
        """Run ``program`` with ``args`` in ``cwd`` and wait for it to exit."""
        invocation = ProcessInvocation(program=program, args=list(args), cwd=cwd)
        logger.info("Running %s (cwd=%s)", invocation.command_line, cwd or ".")
        try:
            completed = subprocess.run([program, *args], cwd=cwd, check=False)
        except OSError as e:
            logger.warning("Could not start %s: %s", invocation.command_line, e)
            return ProcessResult(
                invocation=invocation,
                status=RunStatus.SPAWN_ERROR,
                error=str(e),
            )

        status = RunStatus.SUCCEEDED if completed.returncode == 0 else RunStatus.FAILED
        logger.info("%s exited with %d", invocation.command_line, completed.returncode)
        return ProcessResult(
            invocation=invocation,
            status=status,
            returncode=completed.returncode,
        )

    def terminate_matching(self, pattern: str) -> ProcessResult:
        """Kill every process whose command line matches ``pattern``.

        Best-effort: a non-zero result usually just means nothing matched.
        """
        return self.run(self._kill_command, [*self._kill_args, pattern])
