"""aitest_devops -- Developer-operations CLI for the AI test application.

Builds the backend and frontend through the package manager, smoke-tests
the backend HTTP API, and stops running services by process-name pattern.
Every command is a thin pass-through to an external process or a single
HTTP round trip.
"""

__version__ = "0.1.0"
