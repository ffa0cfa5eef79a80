# Copyright (c) 2025 Trae AI. All rights reserved.

import logging
import queue
import threading
from typing import Any, Callable, Optional

_STOP = object()


class _Invocation:
    def __init__(self, fn: Callable, args: tuple):
        self.fn = fn
        self.args = args
        self.done = threading.Event()
        self.result = None
        self.error: Optional[BaseException] = None
        self.waited = False


class Dispatcher:
    """
    Single-threaded execution context for the host.
    Work posted here runs one item at a time, in FIFO order, on the dispatcher thread.
    """

    def __init__(self, name: str = "host-dispatcher"):
        self.name = name
        self.logger = logging.getLogger(__name__)
        self._queue: "queue.Queue" = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self._stop_requested = False

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        with self._lock:
            if self.is_running:
                self.logger.warning(f"Dispatcher '{self.name}' is already running.")
                return
            self._stop_requested = False
            self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
            self._thread.start()

    def stop(self, timeout: Optional[float] = 5.0):
        """
        Lets queued work finish, then stops the worker thread.
        The worker stays registered until it has exited; start() will not add
        a second worker while a timed-out stop is still draining.
        """
        with self._lock:
            thread = self._thread
            if thread is None:
                return
            if not thread.is_alive():
                self._thread = None
                return
            if not self._stop_requested:
                self._stop_requested = True
                self._queue.put(_STOP)
        if thread is threading.current_thread():
            return
        thread.join(timeout)
        with self._lock:
            if self._thread is thread and not thread.is_alive():
                self._thread = None
            elif thread.is_alive():
                self.logger.warning(f"Dispatcher '{self.name}' did not stop within {timeout}s")

    def check_access(self) -> bool:
        return self._thread is not None and threading.current_thread() is self._thread

    def begin_invoke(self, fn: Callable, *args: Any):
        """Queues fn(*args) and returns without waiting."""
        self._queue.put(_Invocation(fn, args))

    def invoke(self, fn: Callable, *args: Any, timeout: Optional[float] = None):
        """Runs fn(*args) on the dispatcher thread and waits for its result."""
        if self.check_access():
            return fn(*args)

        invocation = _Invocation(fn, args)
        invocation.waited = True
        self._queue.put(invocation)
        if not invocation.done.wait(timeout):
            raise TimeoutError(f"Dispatcher '{self.name}' did not run {fn!r} within {timeout}s")
        if invocation.error is not None:
            raise invocation.error
        return invocation.result

    def _run(self):
        while True:
            item = self._queue.get()
            if item is _STOP:
                break
            try:
                item.result = item.fn(*item.args)
            except Exception as e:
                item.error = e
                if not item.waited:
                    self.logger.error(f"Unhandled error in dispatched call {item.fn!r}: {e}")
            finally:
                item.done.set()
