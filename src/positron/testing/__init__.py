"""Test utilities for positron hosts.

Drive the content provider without a socket and the call bridge without
a window::

    from positron.testing import RecordingView, TestClient
"""

from positron.testing.client import TestClient, TestResponse
from positron.testing.view import RecordingView

__all__ = ["RecordingView", "TestClient", "TestResponse"]
