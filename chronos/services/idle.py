"""Idle-time scheduling primitive.

Chronos never flushes on the caller's stack. Flush work is handed to an idle
scheduler which later invokes the callback with an IdleDeadline describing how
much time the slice may use. Hosts can inject their own scheduler; the default
runs slices on the asyncio event loop.
"""

import asyncio
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from chronos.core.config import settings
from chronos.core.logging import get_logger

logger = get_logger(__name__)


class IIdleDeadline(Protocol):
    """Budget handed to an idle callback."""

    did_timeout: bool

    def time_remaining(self) -> float:
        """Milliseconds left in the current slice (0 when exhausted)."""
        ...


IdleCallback = Callable[[IIdleDeadline], None]


class IIdleScheduler(Protocol):
    """Protocol for the host's idle-time scheduling capability."""

    def request_idle_callback(self, callback: IdleCallback, timeout_ms: float) -> None:
        """Run ``callback`` during the next idle slice.

        Args:
            callback: Invoked once with an IIdleDeadline
            timeout_ms: Maximum deferral; past it the callback runs regardless
        """
        ...


@dataclass
class TimeBudgetDeadline:
    """Deadline with a fixed budget measured from the slice start."""
    budget_ms: float
    started_at: float
    did_timeout: bool = False

    def time_remaining(self) -> float:
        elapsed_ms = (time.monotonic() - self.started_at) * 1000.0
        return max(0.0, self.budget_ms - elapsed_ms)


class AsyncioIdleScheduler:
    """Idle scheduler running slices on an asyncio event loop.

    Each request is scheduled with ``loop.call_later`` after a short delay and
    gets a fixed budget. The delay is always far below ``timeout_ms``, so no
    slice is deferred past its timeout. Called outside a running loop, slices
    run immediately like ImmediateIdleScheduler.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None,
                 budget_ms: Optional[float] = None, delay_ms: Optional[float] = None):
        self._loop = loop
        self.budget_ms = budget_ms if budget_ms is not None else settings.IDLE_BUDGET_MS
        self.delay_ms = delay_ms if delay_ms is not None else settings.IDLE_DELAY_MS
        self.last_timeout_ms: Optional[float] = None
        self._fallback = ImmediateIdleScheduler(self.budget_ms)

    def _get_loop(self) -> Optional[asyncio.AbstractEventLoop]:
        if self._loop is not None:
            return self._loop
        try:
            return asyncio.get_running_loop()
        except RuntimeError:
            return None

    def request_idle_callback(self, callback: IdleCallback, timeout_ms: float) -> None:
        self.last_timeout_ms = timeout_ms
        loop = self._get_loop()
        if loop is None:
            # Synchronous host: no loop to defer to
            logger.debug("No running event loop, running idle slice immediately")
            self._fallback.request_idle_callback(callback, timeout_ms)
            return
        delay = min(self.delay_ms, timeout_ms) / 1000.0
        loop.call_later(delay, self._run, callback)

    def _run(self, callback: IdleCallback) -> None:
        deadline = TimeBudgetDeadline(budget_ms=self.budget_ms, started_at=time.monotonic())
        try:
            callback(deadline)
        except Exception as e:
            logger.error(f"Error in idle callback: {e}")


class ImmediateIdleScheduler:
    """Idle scheduler for hosts without an event loop.

    Slices run right away on the caller's thread, each with a fixed budget.
    Requests issued from inside a slice are queued and run after it returns,
    so a long drain never recurses.
    """

    def __init__(self, budget_ms: Optional[float] = None):
        self.budget_ms = budget_ms if budget_ms is not None else settings.IDLE_BUDGET_MS
        self._pending = deque()
        self._running = False

    def request_idle_callback(self, callback: IdleCallback, timeout_ms: float) -> None:
        self._pending.append(callback)
        if self._running:
            return

        self._running = True
        try:
            while self._pending:
                pending = self._pending.popleft()
                try:
                    pending(TimeBudgetDeadline(budget_ms=self.budget_ms, started_at=time.monotonic()))
                except Exception as e:
                    logger.error(f"Error in idle callback: {e}")
        finally:
            self._running = False
            self._pending.clear()
