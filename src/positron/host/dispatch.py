"""Host dispatch — a task queue drained by the thread owning the UI loop.

Any thread may ``dispatch()`` a continuation; the owning thread runs
them in FIFO order from ``run()`` (or one batch at a time from
``drain()``). Once the dispatcher is closed further dispatches are
rejected with a log line instead of an error: dispatch after shutdown
is a caller mistake, not a crash.

Thread safety:
    - The queue is guarded by a Condition; ``dispatch`` never blocks
      beyond the lock hand-off
    - Tasks run outside the lock, so a task may dispatch more tasks
"""

import functools
import logging
import threading
from collections import deque
from collections.abc import Callable
from typing import Any

logger = logging.getLogger("positron.host")


class HostDispatcher:
    """FIFO continuation queue owned by one thread.

    The owner is the first thread to call ``run()`` or ``drain()``. It
    need not be the GUI toolkit's thread: a backend whose toolkit
    marshals window calls itself may run the queue on any thread.

    Usage::

        dispatcher = HostDispatcher()
        threading.Thread(target=worker, args=(dispatcher,)).start()
        dispatcher.run()            # blocks, runs tasks until close()

        # in worker:
        dispatcher.dispatch(view_backend.eval, "appendMessage(...)")
    """

    __slots__ = ("_closed", "_cond", "_owner", "_tasks")

    def __init__(self) -> None:
        self._tasks: deque[Callable[[], Any]] = deque()
        self._cond = threading.Condition()
        self._closed = False
        self._owner: threading.Thread | None = None

    @property
    def owner(self) -> threading.Thread | None:
        """The thread running ``run()``, once it has started."""
        return self._owner

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        with self._cond:
            return len(self._tasks)

    def on_owner_thread(self) -> bool:
        return self._owner is threading.current_thread()

    def dispatch(self, fn: Callable[..., Any], *args: Any) -> bool:
        """Queue ``fn(*args)`` for the owning thread.

        Returns ``False`` (and logs) if the dispatcher is closed.
        """
        task = functools.partial(fn, *args) if args else fn
        with self._cond:
            if self._closed:
                logger.warning("dispatch after shutdown ignored: %r", fn)
                return False
            self._tasks.append(task)
            self._cond.notify()
        return True

    def run(self) -> None:
        """Run queued tasks on the calling thread until ``close()``."""
        self._owner = threading.current_thread()
        logger.debug("host loop started on %s", self._owner.name)
        dropped = 0
        while True:
            with self._cond:
                while not self._tasks and not self._closed:
                    self._cond.wait()
                if self._closed:
                    dropped = len(self._tasks)
                    self._tasks.clear()
                    break
                task = self._tasks.popleft()
            self._run_task(task)
        if dropped:
            logger.info("host loop stopped; %d queued task(s) dropped", dropped)
        else:
            logger.debug("host loop stopped")

    def drain(self) -> int:
        """Run every task queued right now on the calling thread.

        One iteration of a host loop that is driven from elsewhere.
        Tasks queued while draining wait for the next call. Returns the
        number of tasks run.
        """
        if self._owner is None:
            self._owner = threading.current_thread()
        with self._cond:
            batch = list(self._tasks)
            self._tasks.clear()
        for task in batch:
            self._run_task(task)
        return len(batch)

    def close(self) -> None:
        """Stop ``run()`` and reject further dispatches. Safe from any thread."""
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def _run_task(self, task: Callable[[], Any]) -> None:
        try:
            task()
        except Exception:
            logger.exception("host task %r raised", task)
