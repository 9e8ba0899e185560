"""Stats ledger: completed focus sessions accumulated per calendar day."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Callable, Mapping

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"


def date_key(day: date) -> str:
    """Return the ledger key (``YYYY-MM-DD``) for *day*."""
    return day.strftime(DATE_FORMAT)


@dataclass(frozen=True)
class DailyStats:
    """Totals for one local calendar day."""

    date: str
    completed_focus_sessions: int = 0
    total_focus_minutes: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "completed_focus_sessions": self.completed_focus_sessions,
            "total_focus_minutes": self.total_focus_minutes,
        }


class StatsLedger:
    """Date-keyed accumulator of completed focus sessions.

    Entries are only ever added or incremented.  Every write builds a new
    mapping and swaps it in whole, so a reader holding the previous mapping
    never sees a partially applied update.

    *today* returns the local calendar date and defaults to
    :meth:`datetime.date.today`.
    """

    def __init__(
        self,
        entries: Mapping[str, DailyStats] | None = None,
        today: Callable[[], date] | None = None,
    ) -> None:
        self._entries: Mapping[str, DailyStats] = dict(entries or {})
        self._today: Callable[[], date] = today if today is not None else date.today
        self._write_lock = threading.Lock()
        self._revision = 0

    # -- writes --------------------------------------------------------------

    def record_session(self, duration_minutes: int) -> None:
        """Add one completed focus session of *duration_minutes* to today."""
        key = date_key(self._today())
        with self._write_lock:
            current = self._entries.get(key, DailyStats(key))
            updated = DailyStats(
                date=key,
                completed_focus_sessions=current.completed_focus_sessions + 1,
                total_focus_minutes=current.total_focus_minutes + duration_minutes,
            )
            self._entries = {**self._entries, key: updated}
            self._revision += 1
        logger.info(
            "recorded %d-minute session for %s (%d today)",
            duration_minutes,
            key,
            updated.completed_focus_sessions,
        )

    # -- derived views -------------------------------------------------------

    @property
    def revision(self) -> int:
        """Number of writes applied since this ledger was constructed."""
        return self._revision

    def get(self, day: date) -> DailyStats:
        """Return the entry for *day*, or a zero-valued entry if absent."""
        return _lookup(self._entries, day)

    def get_today(self) -> DailyStats:
        return self.get(self._today())

    def get_last_n_days(self, n: int = 7) -> list[DailyStats]:
        """Return *n* entries for the days ending today, oldest first.

        All days are read from the same mapping, even if a write lands
        while the view is being built.
        """
        entries = self._entries
        today = self._today()
        return [_lookup(entries, today - timedelta(days=offset)) for offset in range(n - 1, -1, -1)]

    def get_streak(self) -> int:
        """Count consecutive days with at least one completed session.

        The walk starts at today.  A today without sessions is not counted
        but does not end the streak, since the day is not over yet; the first
        empty day before today does.
        """
        entries = self._entries
        today = self._today()
        streak = 0
        # A streak can never be longer than the number of recorded days.
        for offset in range(len(entries) + 1):
            key = date_key(today - timedelta(days=offset))
            day = entries.get(key)
            if day is not None and day.completed_focus_sessions > 0:
                streak += 1
            elif offset > 0:
                break
        return streak

    # -- serialization -------------------------------------------------------

    def to_dict(self) -> dict[str, dict[str, int]]:
        return {key: stats.to_dict() for key, stats in self._entries.items()}

    @classmethod
    def from_dict(
        cls, data: Mapping[str, Any], today: Callable[[], date] | None = None
    ) -> StatsLedger:
        """Build a ledger from a persisted mapping.

        Days whose value is not a mapping of integer counters are skipped.
        """
        entries = {}
        for key, value in data.items():
            try:
                entries[key] = DailyStats(
                    date=key,
                    completed_focus_sessions=int(value.get("completed_focus_sessions", 0)),
                    total_focus_minutes=int(value.get("total_focus_minutes", 0)),
                )
            except (AttributeError, TypeError, ValueError):
                logger.warning("ignoring invalid persisted stats for %s: %r", key, value)
        return cls(entries, today=today)


def _lookup(entries: Mapping[str, DailyStats], day: date) -> DailyStats:
    key = date_key(day)
    return entries.get(key) or DailyStats(key)
