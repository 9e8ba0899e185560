"""pomodoro: a focus/break interval timer with daily statistics."""

__version__ = "0.1.0"
