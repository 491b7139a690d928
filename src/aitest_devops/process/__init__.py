"""Subprocess execution for aitest_devops.

Public API:
    ProcessRunner -- Runs build steps and best-effort kill commands
"""

from aitest_devops.process.runner import ProcessRunner

__all__ = ["ProcessRunner"]
