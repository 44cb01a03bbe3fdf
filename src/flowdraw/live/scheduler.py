# Copyright 2026 Flowdraw Contributors
# SPDX-License-Identifier: Apache-2.0

"""Debounced, cancellable scheduling of work on an asyncio event loop.

Scheduling a new run cancels the pending one. Every run also carries a
generation number that is compared when its timer fires, so a run that was
superseded never executes, even if its timer could not be cancelled in time.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


class ScheduledRun:
    """Handle to one scheduled run."""

    def __init__(self, generation: int, handle: asyncio.TimerHandle) -> None:
        self._generation = generation
        self._handle = handle
        self._cancelled = False

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Cancel the run if it has not fired yet."""
        self._handle.cancel()
        self._cancelled = True


class DebouncedScheduler:
    """Runs only the most recently scheduled callable, after a quiet period.

    Args:
        delay: Quiescence delay in seconds between the last :meth:`schedule`
            call and the run.
        loop: Event loop to use; defaults to the running loop at schedule time.
    """

    def __init__(self, delay: float, loop: asyncio.AbstractEventLoop | None = None) -> None:
        if delay < 0:
            raise ValueError("delay must not be negative")
        self._delay = delay
        self._loop = loop
        self._generation = 0
        self._pending: ScheduledRun | None = None

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def generation(self) -> int:
        """Generation of the most recently scheduled run."""
        return self._generation

    @property
    def pending(self) -> ScheduledRun | None:
        return self._pending

    def schedule(self, fn: Callable[..., Any], *args: Any) -> ScheduledRun:
        """Cancel any pending run and schedule ``fn(*args)`` after the delay.

        Must be called from a thread running the event loop when no explicit
        loop was given.
        """
        self.cancel_pending()
        self._generation += 1
        generation = self._generation
        loop = self._loop or asyncio.get_running_loop()
        handle = loop.call_later(self._delay, self._fire, generation, fn, args)
        self._pending = ScheduledRun(generation, handle)
        return self._pending

    def cancel_pending(self) -> None:
        """Cancel the pending run, if any."""
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _fire(self, generation: int, fn: Callable[..., Any], args: tuple[Any, ...]) -> None:
        if generation != self._generation:
            logger.debug("Dropping stale run %d (current is %d)", generation, self._generation)
            return
        self._pending = None
        fn(*args)
