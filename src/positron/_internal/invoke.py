"""Invoke helper — call sync or async callables from plain threads.

Bound functions can be ``def`` or ``async def``. The bridge runs them on
whatever thread delivered the call, which never has a running event
loop, so coroutines are driven to completion with ``anyio.run``.

Usage::

    from positron._internal.invoke import invoke_sync

    result = invoke_sync(func, context, *args)
"""

import inspect
from typing import Any

import anyio


def invoke_sync(func: Any, *args: Any) -> Any:
    """Call *func* and, if it returned an awaitable, run it to completion."""
    result = func(*args)
    if inspect.isawaitable(result):

        async def _await() -> Any:
            return await result

        result = anyio.run(_await)
    return result
