"""HTTP probe module for aitest_devops.

Public API:
    ProbeClient -- Async client probing the backend health and addition endpoints
    ProbeError -- Raised when the client is used before it is opened
"""

from aitest_devops.probe.client import ProbeClient, ProbeError

__all__ = ["ProbeClient", "ProbeError"]
