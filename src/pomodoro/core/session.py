"""Pomodoro session: wires settings, statistics and the timer engine."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from pomodoro.core.formatting import format_clock, phase_label
from pomodoro.core.ledger import StatsLedger
from pomodoro.core.settings import Settings
from pomodoro.core.storage import Storage
from pomodoro.core.timer import InvalidStateError, TimerEngine, TimerState

logger = logging.getLogger(__name__)


class PomodoroSession:
    """User-facing facade over a :class:`TimerEngine`.

    Settings and statistics are loaded from ``<config_dir>`` on construction
    and written back whenever they change.  The timer itself always starts
    stopped at the first focus phase.

    Unlike the engine, the user actions here reject transitions that do not
    apply to the current state by raising :class:`InvalidStateError`.
    """

    def __init__(self, config_dir: Path | None = None) -> None:
        self._storage = Storage(config_dir)
        self.settings: Settings = self._storage.load_settings()
        self.ledger: StatsLedger = self._storage.load_ledger()
        self.engine = TimerEngine(self.settings, self.ledger)

    @property
    def state(self) -> TimerState:
        return self.engine.state

    # -- user actions --------------------------------------------------------

    def start(self) -> str:
        """Start the current phase.  Raises if it is already running or paused."""
        self._require("start", self.state.stopped)
        self.engine.start()
        return f"{phase_label(self.state.phase)} started: {format_clock(self.state.remaining_seconds)}"

    def pause(self) -> str:
        self._require("pause", self.state.running)
        self.engine.pause()
        return f"Paused at {format_clock(self.state.remaining_seconds)} remaining"

    def resume(self) -> str:
        self._require("resume", self.state.paused)
        self.engine.resume()
        return f"Resumed: {format_clock(self.state.remaining_seconds)} remaining"

    def reset(self) -> str:
        self.engine.reset()
        return f"{phase_label(self.state.phase)} reset to {format_clock(self.state.total_seconds)}"

    def skip(self) -> str:
        skipped = self.state.phase
        self.engine.skip()
        return f"{phase_label(skipped)} skipped, next: {self._describe()}"

    def status(self) -> tuple[str, int]:
        """Return ``(message, exit_code)``; the code is 1 when the timer is stopped."""
        state = self.state
        message = f"{phase_label(state.phase)} {self._describe()}"
        return message, 1 if state.stopped else 0

    # -- driver entry points -------------------------------------------------

    def tick(self) -> None:
        revision = self.ledger.revision
        self.engine.tick()
        self._save_ledger_if_changed(revision)

    def reconcile(self) -> None:
        revision = self.ledger.revision
        self.engine.reconcile()
        self._save_ledger_if_changed(revision)

    # -- settings ------------------------------------------------------------

    def update_setting(self, name: str, value: Any) -> Any:
        """Change one setting, persist it, and return the stored value."""
        stored = self.settings.update(name, value)
        self._storage.save_settings(self.settings)
        return stored

    def reset_settings(self) -> None:
        self.settings.reset_to_defaults()
        self._storage.save_settings(self.settings)

    # -- private helpers -----------------------------------------------------

    def _describe(self) -> str:
        state = self.state
        clock = format_clock(state.remaining_seconds)
        detail = f"session {state.current_session}/{self.settings.sessions_before_long_break}"
        return f"{clock} {state.status} ({detail})"

    def _require(self, method: str, valid: bool) -> None:
        if not valid:
            raise InvalidStateError(f"{method}() is not valid from {self.state.status} state")

    def _save_ledger_if_changed(self, revision: int) -> None:
        if self.ledger.revision != revision:
            self._storage.save_ledger(self.ledger)
