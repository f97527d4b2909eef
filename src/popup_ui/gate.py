"""Resolution gate: single-fire latch shared by every session trigger.

Several independent event sources may try to finish a session:

  1. the disconnect channel closing (→ synthesized skip)
  2. a valid submission (→ the submitted payload)
  3. the browser launcher giving up (→ synthesized skip)
  4. the server dying before anything else happened (→ failure)

They all go through ``ResolutionGate._claim``, the one place where the
``resolved`` flag moves from False to True.  Everything runs on a single
event loop, so the check-and-set needs no lock.  The first claim wins;
every later attempt is logged and ignored.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ResolutionGate(Generic[T]):
    """Completes one pending result exactly once.

    ``on_fire`` callbacks run synchronously at the moment of the claim, before
    the result is delivered; the session uses them to stop its streams.
    A delayed resolve claims immediately but delivers the value later, so a
    competing trigger arriving during the delay is still discarded.
    """

    def __init__(self) -> None:
        self._future: asyncio.Future[T] = asyncio.get_running_loop().create_future()
        self._resolved = False
        self._timers: list[asyncio.TimerHandle] = []
        self._on_fire: list[Callable[[], None]] = []

    @property
    def resolved(self) -> bool:
        """True once any trigger has claimed the gate."""
        return self._resolved

    def on_fire(self, callback: Callable[[], None]) -> None:
        """Register a callback to run when the gate is claimed."""
        self._on_fire.append(callback)

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    def resolve(self, value: T, delay: float = 0.0) -> bool:
        """Complete the result with ``value``; returns False if already claimed."""
        if not self._claim("resolve"):
            return False
        if delay > 0:
            loop = self._future.get_loop()
            self._timers.append(loop.call_later(delay, self._deliver, value, None))
        else:
            self._deliver(value, None)
        return True

    def reject(self, exc: BaseException) -> bool:
        """Fail the result with ``exc``; returns False if already claimed."""
        if not self._claim("reject"):
            return False
        self._deliver(None, exc)
        return True

    def cancel(self) -> bool:
        """Claim the gate without producing a result (force-close path)."""
        claimed = self._claim("cancel")
        for timer in self._timers:
            timer.cancel()
        self._timers.clear()
        if not self._future.done():
            self._future.cancel()
        return claimed

    async def wait(self) -> T:
        """Wait for the outcome; raises the rejection or CancelledError."""
        return await self._future

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _claim(self, trigger: str) -> bool:
        if self._resolved:
            logger.debug("Gate already resolved, ignoring %s", trigger)
            return False
        self._resolved = True
        logger.debug("Gate claimed by %s", trigger)
        for callback in self._on_fire:
            try:
                callback()
            except Exception:
                logger.exception("Gate on_fire callback failed")
        return True

    def _deliver(self, value: Any, exc: BaseException | None) -> None:
        self._timers.clear()
        if self._future.done():
            return
        if exc is not None:
            self._future.set_exception(exc)
        else:
            self._future.set_result(value)
