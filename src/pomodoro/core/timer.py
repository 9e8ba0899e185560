"""Timer engine: the focus/break phase state machine."""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Protocol

from pomodoro.core.settings import SettingsProvider

logger = logging.getLogger(__name__)


class Phase(Enum):
    """The interval types of a Pomodoro cycle."""

    FOCUS = "focus"
    SHORT_BREAK = "short_break"
    LONG_BREAK = "long_break"


class InvalidStateError(Exception):
    """Raised when an invalid state transition is attempted."""


class SessionRecorder(Protocol):
    """Receives completed focus sessions."""

    def record_session(self, duration_minutes: int) -> None: ...


@dataclass(frozen=True)
class TimerState:
    """Immutable snapshot of the engine.

    ``running`` and ``paused`` are never both true; both false means the
    timer is stopped.  ``start_timestamp`` is set exactly while running and
    may lie in the past by the time already consumed in this phase.
    """

    phase: Phase
    remaining_seconds: int
    total_seconds: int
    running: bool = False
    paused: bool = False
    current_session: int = 1
    completed_focus_count: int = 0
    start_timestamp: float | None = None

    @property
    def stopped(self) -> bool:
        return not self.running and not self.paused

    @property
    def status(self) -> str:
        """``"running"``, ``"paused"`` or ``"stopped"``."""
        if self.running:
            return "running"
        if self.paused:
            return "paused"
        return "stopped"


# -- pure transition helpers -------------------------------------------------


def phase_seconds(phase: Phase, settings: SettingsProvider) -> int:
    """Return the configured duration of *phase* in seconds."""
    if phase is Phase.FOCUS:
        minutes = settings.focus_minutes
    elif phase is Phase.SHORT_BREAK:
        minutes = settings.short_break_minutes
    else:
        minutes = settings.long_break_minutes
    return minutes * 60


def next_phase(
    phase: Phase, current_session: int, sessions_before_long_break: int
) -> tuple[Phase, int]:
    """Return ``(phase, session)`` that follows *phase*.

    A long break always starts the cycle over at session 1.
    """
    if phase is Phase.FOCUS:
        if current_session >= sessions_before_long_break:
            return Phase.LONG_BREAK, current_session
        return Phase.SHORT_BREAK, current_session
    if phase is Phase.LONG_BREAK:
        return Phase.FOCUS, 1
    return Phase.FOCUS, current_session + 1


def advance_phase(state: TimerState, settings: SettingsProvider, now: float) -> TimerState:
    """Return the state that follows completing (or skipping) ``state.phase``."""
    phase, session = next_phase(
        state.phase, state.current_session, settings.sessions_before_long_break
    )
    total = phase_seconds(phase, settings)
    if phase is Phase.FOCUS:
        auto_start = settings.auto_start_work
    else:
        auto_start = settings.auto_start_break
    completed = state.completed_focus_count
    if state.phase is Phase.FOCUS:
        completed += 1
    return TimerState(
        phase=phase,
        remaining_seconds=total,
        total_seconds=total,
        running=auto_start,
        paused=False,
        current_session=session,
        completed_focus_count=completed,
        start_timestamp=now if auto_start else None,
    )


# -- engine ------------------------------------------------------------------


class TimerEngine:
    """Drives a :class:`TimerState` through the Pomodoro cycle.

    Settings are read at the moment a duration or policy is needed, so a
    change made while a phase is running applies from the next transition.
    Completed focus phases are reported to *ledger*.

    Every transition is a no-op when called from a state it does not apply
    to.  Wall-clock time comes from ``time.time()``.
    """

    def __init__(self, settings: SettingsProvider, ledger: SessionRecorder) -> None:
        self._settings = settings
        self._ledger = ledger
        total = phase_seconds(Phase.FOCUS, settings)
        self._state = TimerState(phase=Phase.FOCUS, remaining_seconds=total, total_seconds=total)

    @property
    def state(self) -> TimerState:
        return self._state

    # -- user transitions ----------------------------------------------------

    def start(self) -> None:
        """Start the current phase from its full duration."""
        if not self._state.stopped:
            self._ignore("start")
            return
        total = phase_seconds(self._state.phase, self._settings)
        self._state = replace(
            self._state,
            remaining_seconds=total,
            total_seconds=total,
            running=True,
            paused=False,
            start_timestamp=time.time(),
        )
        logger.info("%s started (%ds)", self._state.phase.value, total)

    def pause(self) -> None:
        """Freeze the countdown at the last computed remaining time."""
        if not self._state.running:
            self._ignore("pause")
            return
        self._state = replace(self._state, running=False, paused=True, start_timestamp=None)
        logger.info("paused with %ds remaining", self._state.remaining_seconds)

    def resume(self) -> None:
        """Continue a paused phase.

        The start timestamp is moved back by the time already consumed so that
        :meth:`reconcile` keeps computing elapsed time from a single origin.
        """
        if not self._state.paused:
            self._ignore("resume")
            return
        elapsed = self._state.total_seconds - self._state.remaining_seconds
        self._state = replace(
            self._state, running=True, paused=False, start_timestamp=time.time() - elapsed
        )
        logger.info("resumed with %ds remaining", self._state.remaining_seconds)

    def reset(self) -> None:
        """Stop and rewind the current phase; phase and session are kept."""
        total = phase_seconds(self._state.phase, self._settings)
        self._state = replace(
            self._state,
            remaining_seconds=total,
            total_seconds=total,
            running=False,
            paused=False,
            start_timestamp=None,
        )
        logger.info("%s reset", self._state.phase.value)

    def skip(self) -> None:
        """Move to the next phase without recording a session."""
        self._complete_phase(record=False)

    # -- driver entry points -------------------------------------------------

    def tick(self) -> None:
        """Advance the countdown by one second."""
        if not self._state.running:
            return
        if self._state.remaining_seconds > 1:
            self._state = replace(self._state, remaining_seconds=self._state.remaining_seconds - 1)
            return
        self._complete_phase(record=True)

    def reconcile(self) -> None:
        """Recompute the remaining time from the wall clock.

        Used after the process was suspended and ticks were missed.  However
        long the gap, an expired phase completes exactly once.
        """
        state = self._state
        if not state.running or state.start_timestamp is None:
            return
        elapsed = max(0, math.floor(time.time() - state.start_timestamp))
        remaining = max(0, state.total_seconds - elapsed)
        if remaining <= 0:
            logger.info("%s expired while suspended", state.phase.value)
            self._complete_phase(record=True)
            return
        if remaining != state.remaining_seconds:
            logger.debug("reconciled %ds -> %ds", state.remaining_seconds, remaining)
            self._state = replace(state, remaining_seconds=remaining)

    # -- private helpers -----------------------------------------------------

    def _complete_phase(self, record: bool) -> None:
        finished = self._state
        if record and finished.phase is Phase.FOCUS:
            self._ledger.record_session(self._settings.focus_minutes)
        self._state = advance_phase(finished, self._settings, time.time())
        logger.info(
            "%s %s -> %s (session %d, %s)",
            finished.phase.value,
            "completed" if record else "skipped",
            self._state.phase.value,
            self._state.current_session,
            self._state.status,
        )

    def _ignore(self, method: str) -> None:
        logger.debug("%s() ignored in %s state", method, self._state.status)
