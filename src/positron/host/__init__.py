"""Host surface — the native window, its UI loop and the dispatch queue.

The window itself is an external collaborator behind the ``Backend``
protocol: ``HeadlessBackend`` runs without a window (tests, scripted
hosts), ``WebviewBackend`` opens a real one through pywebview.
"""

from positron.host.backend import Backend, HeadlessBackend
from positron.host.dispatch import HostDispatcher
from positron.host.view import View

__all__ = ["Backend", "HeadlessBackend", "HostDispatcher", "View"]
