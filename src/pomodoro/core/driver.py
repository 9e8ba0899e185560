"""Foreground driver: delivers one tick per second to a running session."""

from __future__ import annotations

import logging
import time
from typing import Callable

from pomodoro.core.session import PomodoroSession
from pomodoro.core.timer import TimerState

logger = logging.getLogger(__name__)

TICK_INTERVAL = 1.0


class Driver:
    """Ticks *session* once per *interval* while its timer is running.

    When the process comes back to the foreground (for example after
    ``SIGCONT``), :meth:`notify_foreground` asks the loop to reconcile with
    the wall clock instead of ticking, so missed time is caught up in one
    step.  It only sets a flag and is therefore safe to call from a signal
    handler.
    """

    def __init__(
        self,
        session: PomodoroSession,
        on_update: Callable[[TimerState], None] | None = None,
        interval: float = TICK_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._session = session
        self._on_update = on_update
        self._interval = interval
        self._sleep = sleep
        self._foreground_pending = False

    def notify_foreground(self) -> None:
        self._foreground_pending = True

    def run(self, max_steps: int | None = None) -> int:
        """Drive the timer until it stops running; return the number of steps.

        The loop ends when a phase finishes without auto-start, when the
        timer is paused or reset, or after *max_steps* steps.
        """
        steps = 0
        while self._session.state.running:
            if max_steps is not None and steps >= max_steps:
                break
            self._sleep(self._interval)
            if self._foreground_pending:
                self._foreground_pending = False
                logger.debug("back in foreground, reconciling")
                self._session.reconcile()
            else:
                self._session.tick()
            steps += 1
            if self._on_update is not None:
                self._on_update(self._session.state)
        return steps
