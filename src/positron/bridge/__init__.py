"""Call bridge — named Python functions callable from front-end script.

Raw bindings receive the sequence token and the JSON argument-array
text verbatim. Typed bindings declare their parameters with
annotations; the bridge decodes the array strictly against them, calls
the function and answers with a success or failure envelope::

    from positron.bridge import Bridge, BridgeError

    def login(app: App, user: str, password: str) -> bool:
        if app.locked:
            raise BridgeError("AccountLocked")
        return app.check(user, password)

    bridge.bind("performLogin", login, app)
"""

from positron.bridge.envelope import Failure, ReturnValue, Success
from positron.bridge.registry import BoundFunction, Bridge
from positron.bridge.scope import CallInfo, current_call
from positron.bridge.types import (
    Int8,
    Int16,
    Int32,
    Int64,
    IntRange,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
)
from positron.errors import BridgeError, ProtocolError

__all__ = [
    "BoundFunction",
    "Bridge",
    "BridgeError",
    "CallInfo",
    "Failure",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "IntRange",
    "ProtocolError",
    "ReturnValue",
    "Success",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
    "current_call",
]
