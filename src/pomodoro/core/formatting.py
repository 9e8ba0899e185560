"""Human-readable rendering of timer values."""

from pomodoro.core.timer import Phase

_PHASE_LABELS = {
    Phase.FOCUS: "Focus",
    Phase.SHORT_BREAK: "Short break",
    Phase.LONG_BREAK: "Long break",
}


def format_clock(seconds: int) -> str:
    """Format *seconds* as ``MM:SS``; minutes are not wrapped into hours."""
    total = max(int(seconds), 0)
    return f"{total // 60:02d}:{total % 60:02d}"


def phase_label(phase: Phase) -> str:
    return _PHASE_LABELS[phase]
