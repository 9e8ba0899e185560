"""Tests for clock and label formatting."""

import pytest

from pomodoro.core.formatting import format_clock, phase_label
from pomodoro.core.timer import Phase


class TestFormatClock:
    @pytest.mark.parametrize(
        "seconds, expected",
        [
            (0, "00:00"),
            (5, "00:05"),
            (754, "12:34"),
            (1500, "25:00"),
            (3600, "60:00"),
            (5400, "90:00"),
        ],
    )
    def test_format(self, seconds: int, expected: str) -> None:
        assert format_clock(seconds) == expected

    def test_negative_renders_as_zero(self) -> None:
        assert format_clock(-3) == "00:00"


class TestPhaseLabel:
    def test_every_phase_has_a_label(self) -> None:
        assert [phase_label(p) for p in Phase] == ["Focus", "Short break", "Long break"]
