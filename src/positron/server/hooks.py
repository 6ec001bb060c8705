"""Provider hook protocol.

Hooks let an application observe or take over every exchange without
registering routes. Both methods are optional; the provider checks the
shape, not the lineage::

    class Auth:
        def dispatch(self, request: Request, response: Response) -> bool:
            if request.headers.get("x-token") != TOKEN:
                response.status = 403
                return False  # answered, skip routing
            return True

        def additional_action(self, request: Request, response: Response) -> None:
            response.set_header("cache-control", "no-store")
"""

from typing import Protocol

from positron.http.request import Request
from positron.http.response import Response


class ProviderHooks(Protocol):
    """Protocol for objects passed as ``Provider(hooks=...)``."""

    def dispatch(self, request: Request, response: Response) -> bool:
        """Return ``False`` to send *response* as-is and skip routing."""
        ...

    def additional_action(self, request: Request, response: Response) -> None:
        """Runs right before the resolved handler, including the 404 responder."""
        ...
