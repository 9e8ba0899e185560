"""Tests for the Settings provider."""

from __future__ import annotations

import pytest

from pomodoro.core.settings import LIMITS, Settings


class TestSettingsDefaults:
    def test_defaults(self) -> None:
        settings = Settings()
        assert settings.focus_minutes == 25
        assert settings.short_break_minutes == 5
        assert settings.long_break_minutes == 15
        assert settings.sessions_before_long_break == 4
        assert settings.auto_start_break is True
        assert settings.auto_start_work is False
        assert settings.daily_goal == 8


class TestSettingsUpdate:
    def test_update_numeric(self) -> None:
        settings = Settings()
        assert settings.update("focus_minutes", 30) == 30
        assert settings.focus_minutes == 30

    def test_update_boolean(self) -> None:
        settings = Settings()
        settings.update("auto_start_work", True)
        assert settings.auto_start_work is True

    def test_update_leaves_other_settings(self) -> None:
        settings = Settings()
        settings.update("focus_minutes", 45)
        settings.update("daily_goal", 12)
        assert settings.focus_minutes == 45
        assert settings.daily_goal == 12
        assert settings.short_break_minutes == 5

    @pytest.mark.parametrize(
        "name, value, expected",
        [
            ("focus_minutes", 0, 1),
            ("focus_minutes", 500, 90),
            ("short_break_minutes", 31, 30),
            ("long_break_minutes", -5, 1),
            ("sessions_before_long_break", 1, 2),
            ("sessions_before_long_break", 9, 8),
            ("daily_goal", 21, 20),
        ],
    )
    def test_update_clamps_to_limits(self, name: str, value: int, expected: int) -> None:
        settings = Settings()
        assert settings.update(name, value) == expected
        assert getattr(settings, name) == expected

    def test_unknown_setting_raises_key_error(self) -> None:
        with pytest.raises(KeyError):
            Settings().update("theme", "dark")

    def test_bool_for_numeric_raises_type_error(self) -> None:
        with pytest.raises(TypeError):
            Settings().update("focus_minutes", True)

    def test_int_for_flag_raises_type_error(self) -> None:
        with pytest.raises(TypeError):
            Settings().update("auto_start_break", 1)

    def test_float_raises_type_error(self) -> None:
        with pytest.raises(TypeError):
            Settings().update("focus_minutes", 25.5)

    def test_every_numeric_setting_has_limits(self) -> None:
        numeric = {k for k, v in Settings().to_dict().items() if not isinstance(v, bool)}
        assert numeric == set(LIMITS)


class TestSettingsReset:
    def test_reset_to_defaults(self) -> None:
        settings = Settings()
        settings.update("focus_minutes", 50)
        settings.update("auto_start_work", True)
        settings.reset_to_defaults()
        assert settings == Settings()


class TestSettingsSerialization:
    def test_to_dict_is_flat(self) -> None:
        assert Settings().to_dict() == {
            "focus_minutes": 25,
            "short_break_minutes": 5,
            "long_break_minutes": 15,
            "sessions_before_long_break": 4,
            "auto_start_break": True,
            "auto_start_work": False,
            "daily_goal": 8,
        }

    def test_from_dict_ignores_unknown_keys(self) -> None:
        settings = Settings.from_dict({"focus_minutes": 40, "theme": "dark"})
        assert settings.focus_minutes == 40

    def test_from_dict_falls_back_on_bad_values(self) -> None:
        settings = Settings.from_dict({"focus_minutes": "forty", "auto_start_work": True})
        assert settings.focus_minutes == 25
        assert settings.auto_start_work is True

    def test_from_dict_clamps(self) -> None:
        assert Settings.from_dict({"long_break_minutes": 999}).long_break_minutes == 60
