"""Per-call scope via ContextVar.

Every bridge call runs inside ``call_scope``. The scope exposes the call
being served (``current_call()``) and owns the call's scratch state,
which is cleared on every exit path: success, decode failure or handler
failure.

Thread safety:
    ``ContextVar`` is thread-local for plain threads and task-local
    under asyncio. Concurrent calls never see each other's scope.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class CallInfo:
    """The call currently being served."""

    name: str
    seq: str
    answered: bool = False
    scratch: dict[str, Any] = field(default_factory=dict, repr=False)


call_var: ContextVar[CallInfo] = ContextVar("positron_call")
"""The current call. Set by the bridge for the duration of one call."""


def current_call() -> CallInfo:
    """Return the call being served.

    Raises ``LookupError`` if called outside a bridge call.
    """
    return call_var.get()


@contextmanager
def call_scope(name: str, seq: str) -> Iterator[CallInfo]:
    """Bind a fresh ``CallInfo`` and release its scratch state on exit."""
    info = CallInfo(name=name, seq=seq)
    token = call_var.set(info)
    try:
        yield info
    finally:
        info.scratch.clear()
        call_var.reset(token)


def note_answered(seq: str) -> None:
    """Record that the call being served on this thread posted its envelope.

    A no-op outside a bridge call or when *seq* names a different call.
    """
    info = call_var.get(None)
    if info is not None and info.seq == seq:
        info.answered = True
