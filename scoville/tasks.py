"""
Units of work and the coordination loop they run on.
"""

import asyncio
import concurrent.futures
import logging
import threading
from typing import Optional, Union

logger = logging.getLogger(__name__)

AnyFuture = Union[asyncio.Future, concurrent.futures.Future]


class WorkHandle:
    """
    Handle to one unit of work.

    A unit may be cancelled until it starts. Once started it always runs to
    completion, so its completion callback is reached exactly once.
    """

    def __init__(self, future: Optional[AnyFuture] = None):
        self._future = future
        self._lock = threading.Lock()
        self._started = False
        self._cancelled = False

    @classmethod
    def noop(cls) -> "WorkHandle":
        """Handle for work that was never started."""
        return cls(None)

    def bind(self, future: AnyFuture) -> None:
        self._future = future

    def start(self) -> bool:
        """Called by the unit before its body runs. False when it was cancelled first."""
        with self._lock:
            if self._cancelled:
                return False
            self._started = True
            return True

    def cancel(self) -> bool:
        """Cancel the unit if it has not started. Returns False once it is running or done."""
        with self._lock:
            if self._future is None or self._started or self._cancelled or self._future.done():
                return False
            self._cancelled = True
            return True

    def cancelled(self) -> bool:
        return self._cancelled

    def done(self) -> bool:
        return self._future is None or self._future.done()

    async def wait(self) -> None:
        """Wait until the unit finishes or is cancelled. Never raises its outcome."""
        if self._future is None:
            return
        future = self._future
        if isinstance(future, concurrent.futures.Future):
            future = asyncio.wrap_future(future)
        await asyncio.wait([future])


class BackgroundLoop:
    """Event loop running forever in a daemon thread."""

    def __init__(self, name: str = "scoville-loop"):
        self.loop = asyncio.new_event_loop()
        self._started = threading.Event()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)

    def _run(self) -> None:
        asyncio.set_event_loop(self.loop)
        self.loop.call_soon(self._started.set)
        self.loop.run_forever()

    def start(self) -> None:
        self._thread.start()
        self._started.wait()
        logger.debug(f"Background loop started in thread {self._thread.name}")

    @property
    def running(self) -> bool:
        return self._thread.is_alive()

    def stop(self, timeout: float = 5.0) -> None:
        """Stop the loop and join its thread."""
        if not self.running:
            return
        self.loop.call_soon_threadsafe(self.loop.stop)
        if threading.current_thread() is not self._thread:
            self._thread.join(timeout)
            if not self._thread.is_alive():
                self.loop.close()
        logger.debug("Background loop stopped")
