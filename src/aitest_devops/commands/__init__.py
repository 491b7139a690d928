"""Command handlers for aitest_devops.

Public API:
    HANDLERS -- Maps each Command to the function that runs it
"""

from aitest_devops.commands.handlers import HANDLERS

__all__ = ["HANDLERS"]
