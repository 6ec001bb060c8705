"""Positron exception hierarchy.

Shared across the content provider, the call bridge and the host
surface so every module raises and catches the same types.
"""

from dataclasses import dataclass


class PositronError(Exception):
    """Base for all positron-specific errors."""


class ConfigurationError(PositronError):
    """Raised when a route, binding or config value is invalid.

    Surfaces at registration time, never while serving or calling.
    """


class StartupError(PositronError):
    """The loopback listener or the native UI surface could not be created."""


# -- HTTP --


@dataclass(frozen=True, slots=True)
class HTTPError(PositronError):
    """An error that maps directly to an HTTP status code."""

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404 — no route or embedded directory matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405 — built-in content handlers only answer GET and HEAD."""

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )


class ResourceError(HTTPError):
    """A file behind a route could not be opened (404) or read (500)."""

    def __init__(self, status: int, detail: str) -> None:
        super().__init__(status=status, detail=detail)


# -- Call bridge --


class ProtocolError(PositronError):
    """The argument text of a call does not fit the bound signature.

    ``code`` is the symbolic name sent back to the front-end inside the
    failure envelope.
    """

    code = "ProtocolError"

    def __init__(self, detail: str = "", *, index: int | None = None) -> None:
        self.detail = detail
        self.index = index
        super().__init__(detail or self.code)


class InvalidJson(ProtocolError):
    """Missing ``[`` / ``]`` around the argument list, or trailing elements."""

    code = "InvalidJson"


class JsonSyntaxError(ProtocolError):
    """The argument text is not valid JSON."""

    code = "SyntaxError"


class UnexpectedEndOfInput(ProtocolError):
    code = "UnexpectedEndOfInput"


class UnexpectedToken(ProtocolError):
    """A JSON value of the wrong type, or a missing argument."""

    code = "UnexpectedToken"


class UnknownField(ProtocolError):
    code = "UnknownField"


class MissingField(ProtocolError):
    code = "MissingField"


class Overflow(ProtocolError):
    """A number does not fit the width of its target type."""

    code = "Overflow"


class InvalidNumber(ProtocolError):
    """A fractional number where an integer was declared."""

    code = "InvalidNumber"


class InvalidEnumTag(ProtocolError):
    code = "InvalidEnumTag"


class LengthMismatch(ProtocolError):
    """A fixed-length tuple received the wrong number of elements."""

    code = "LengthMismatch"


class InvalidValue(ProtocolError):
    """A record's constructor rejected the decoded field values."""

    code = "InvalidValue"


class BridgeError(PositronError):
    """Raised by a bound function to fail its call with a chosen identifier.

    Usage::

        def login(app, user: str, password: str) -> bool:
            if app.locked:
                raise BridgeError("AccountLocked")
            ...
    """

    def __init__(self, code: str, detail: str = "") -> None:
        if not code:
            msg = "BridgeError code must be a non-empty identifier."
            raise ValueError(msg)
        self.code = code
        self.detail = detail
        super().__init__(detail or code)
