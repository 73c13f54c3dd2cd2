"""
Rate-gating primitives for the booking screen.

Everything runs on one event loop. "Concurrency" here means overlapping
awaits that share the draft: persistence writes are debounced, date-driven
recomputation is collapsed per frame, and each submission kind is gated so
only one of it is in flight at a time.
"""

import asyncio
import logging
import time
from contextlib import contextmanager
from enum import Enum
from typing import Any, Callable

from core.exceptions import GuardRejectedError

logger = logging.getLogger(__name__)


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class Debouncer:
    """
    Collapse rapid updates to the last value after `delay` seconds of quiet.

    Outside a running event loop nothing is scheduled; the latest value waits
    for flush(). Callback errors are logged, never raised into the caller.

    Usage:
        persist = Debouncer(session_store.save_snapshot, delay=0.4)
        persist.trigger(snapshot)   # many times while typing
        persist.flush()             # on navigation / shutdown
    """

    def __init__(self, callback: Callable[[Any], None], delay: float):
        if delay < 0:
            raise ValueError("delay must not be negative")
        self._callback = callback
        self.delay = delay
        self._handle: asyncio.TimerHandle | None = None
        self._pending: Any = None
        self._has_pending = False

    @property
    def pending(self) -> bool:
        """Whether a value is waiting to be delivered."""
        return self._has_pending

    def trigger(self, value: Any) -> None:
        """Replace the pending value and restart the quiet window."""
        self._pending = value
        self._has_pending = True
        self._cancel_timer()

        loop = _running_loop()
        if loop is not None:
            self._handle = loop.call_later(self.delay, self._fire)

    def flush(self) -> None:
        """Deliver the pending value now (no-op if nothing is pending)."""
        self._cancel_timer()
        self._fire()

    def cancel(self) -> None:
        """Drop the pending value without delivering it."""
        self._cancel_timer()
        self._pending = None
        self._has_pending = False

    def _cancel_timer(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        if not self._has_pending:
            return
        value = self._pending
        self._pending = None
        self._has_pending = False
        try:
            self._callback(value)
        except Exception:
            logger.exception("Debounced callback %s failed", getattr(self._callback, "__name__", self._callback))


class FrameThrottle:
    """
    Collapse calls within one frame into a single call with the latest arguments.

    The first call in a frame schedules the run `interval` seconds later;
    further calls only replace the arguments. Outside a running event loop the
    function runs immediately.
    """

    def __init__(self, fn: Callable[..., Any], interval: float = 1 / 60):
        self._fn = fn
        self.interval = interval
        self._scheduled: asyncio.TimerHandle | None = None
        self._last_args: tuple = ()
        self._last_kwargs: dict = {}

    @property
    def scheduled(self) -> bool:
        return self._scheduled is not None

    def __call__(self, *args, **kwargs) -> None:
        self._last_args = args
        self._last_kwargs = kwargs
        if self._scheduled is not None:
            return

        loop = _running_loop()
        if loop is None:
            self._run()
            return
        self._scheduled = loop.call_later(self.interval, self._run)

    def flush(self) -> None:
        """Run a scheduled call now."""
        if self._scheduled is None:
            return
        self._scheduled.cancel()
        self._run()

    def _run(self) -> None:
        self._scheduled = None
        try:
            self._fn(*self._last_args, **self._last_kwargs)
        except Exception:
            logger.exception("Frame-throttled call %s failed", getattr(self._fn, "__name__", self._fn))


class OneShotFlag:
    """
    A busy marker that clears itself after `timeout` seconds.

    Set at the start of a short workflow (e.g. adding an item) and cleared on
    completion. If completion never comes, the flag expires instead of
    leaving the screen stuck.
    """

    def __init__(self, name: str, timeout: float, clock: Callable[[], float] = time.monotonic):
        self.name = name
        self.timeout = timeout
        self._clock = clock
        self._set_at: float | None = None

    @property
    def is_set(self) -> bool:
        if self._set_at is None:
            return False
        if self._clock() - self._set_at >= self.timeout:
            logger.warning(f"Flag '{self.name}' expired after {self.timeout}s without completion")
            self._set_at = None
            return False
        return True

    def set(self) -> bool:
        """Raise the flag. Returns False if it was already up."""
        if self.is_set:
            return False
        self._set_at = self._clock()
        return True

    def clear(self) -> None:
        self._set_at = None


class GateState(str, Enum):
    """Per-action submission state."""

    IDLE = "idle"
    IN_FLIGHT = "in_flight"
    COOLDOWN = "cooldown"


class ActionGate:
    """
    Single-flight gate for one kind of submission (save, invoice, receipt...).

    Idle -> InFlight on begin(); InFlight -> Cooldown (or Idle when the
    cooldown is zero) when the submission completes or fails. The safety
    timeout only matters if a completion is lost: an InFlight gate older than
    it reads as Idle again. Completions carry the token handed out by begin(),
    so a late completion from an expired flight cannot release a newer one.
    """

    def __init__(
        self,
        action: str,
        safety_timeout: float = 30.0,
        cooldown: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.action = action
        self.safety_timeout = safety_timeout
        self.cooldown = cooldown
        self._clock = clock
        self._state = GateState.IDLE
        self._since = clock()
        self._token = 0

    @property
    def state(self) -> GateState:
        now = self._clock()
        if self._state == GateState.IN_FLIGHT and now - self._since >= self.safety_timeout:
            logger.warning(
                f"{self.action} submission still in flight after {self.safety_timeout}s; releasing gate"
            )
            self._enter(GateState.IDLE)
        elif self._state == GateState.COOLDOWN and now - self._since >= self.cooldown:
            self._enter(GateState.IDLE)
        return self._state

    @property
    def busy(self) -> bool:
        return self.state != GateState.IDLE

    def begin(self) -> int | None:
        """Claim the gate. Returns a completion token, or None if not idle."""
        if self.state != GateState.IDLE:
            return None
        self._token += 1
        self._enter(GateState.IN_FLIGHT)
        return self._token

    def finish(self, token: int) -> None:
        """Mark the flight identified by `token` complete (success or failure)."""
        if token != self._token or self._state != GateState.IN_FLIGHT:
            logger.debug(f"Ignoring stale completion for {self.action} (token {token})")
            return
        self._enter(GateState.COOLDOWN if self.cooldown > 0 else GateState.IDLE)

    @contextmanager
    def claim(self, busy_message: str | None = None):
        """
        Hold the gate for the duration of the block.

        Raises:
            GuardRejectedError: If a submission of this kind is already outstanding
        """
        token = self.begin()
        if token is None:
            raise GuardRejectedError(
                self.action,
                busy_message or f"A {self.action} request is already in progress",
            )
        try:
            yield token
        finally:
            self.finish(token)

    def _enter(self, state: GateState) -> None:
        self._state = state
        self._since = self._clock()
