"""Settings provider: phase durations, auto-start policy and goals."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields
from typing import Any, Mapping, Protocol

logger = logging.getLogger(__name__)

# (minimum, maximum) for every numeric setting.
LIMITS: dict[str, tuple[int, int]] = {
    "focus_minutes": (1, 90),
    "short_break_minutes": (1, 30),
    "long_break_minutes": (1, 60),
    "sessions_before_long_break": (2, 8),
    "daily_goal": (1, 20),
}


class SettingsProvider(Protocol):
    """Read-only view of the settings the timer engine consumes."""

    focus_minutes: int
    short_break_minutes: int
    long_break_minutes: int
    sessions_before_long_break: int
    auto_start_break: bool
    auto_start_work: bool


@dataclass
class Settings:
    """User-editable timer configuration.

    Values are clamped into :data:`LIMITS` on :meth:`update`, so readers
    never have to re-validate them.
    """

    focus_minutes: int = 25
    short_break_minutes: int = 5
    long_break_minutes: int = 15
    sessions_before_long_break: int = 4
    auto_start_break: bool = True
    auto_start_work: bool = False
    daily_goal: int = 8

    def update(self, name: str, value: Any) -> Any:
        """Set *name* to *value* and return the value actually stored.

        Raises ``KeyError`` for an unknown setting and ``TypeError`` when
        *value* has the wrong type.  Numeric values are clamped.
        """
        if name not in SETTING_TYPES:
            raise KeyError(f"unknown setting: {name}")
        expected = SETTING_TYPES[name]
        # bool is a subclass of int, so it has to be rejected explicitly.
        if (expected is int and isinstance(value, bool)) or not isinstance(value, expected):
            raise TypeError(
                f"{name} must be {expected.__name__}, got {type(value).__name__}"
            )
        if name in LIMITS:
            low, high = LIMITS[name]
            clamped = min(max(value, low), high)
            if clamped != value:
                logger.warning("%s=%d out of range, clamped to %d", name, value, clamped)
            value = clamped
        setattr(self, name, value)
        logger.debug("setting %s = %r", name, value)
        return value

    def reset_to_defaults(self) -> None:
        """Restore every setting to its default value."""
        for name, default in asdict(Settings()).items():
            setattr(self, name, default)
        logger.info("settings reset to defaults")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Settings:
        """Build settings from a persisted mapping.

        Unknown keys are ignored; invalid values fall back to the default.
        """
        settings = cls()
        for name in SETTING_TYPES:
            if name not in data:
                continue
            try:
                settings.update(name, data[name])
            except TypeError:
                logger.warning("ignoring invalid persisted value for %s: %r", name, data[name])
        return settings


SETTING_TYPES: dict[str, type] = {
    f.name: bool if isinstance(f.default, bool) else int for f in fields(Settings)
}
