"""Report printing for aitest_devops.

Public API:
    Reporter -- Writes glyph-prefixed report lines to stdout
"""

from aitest_devops.report.printer import Reporter

__all__ = ["Reporter"]
