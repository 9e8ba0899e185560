"""CLI entry point for pomodoro.

Uses Click to expose the ``pomodoro`` command group: ``run`` drives a timer
in the foreground, ``stats`` and ``settings`` read and edit the data that
outlives the process.
"""

from __future__ import annotations

import logging
import signal
import sys
from pathlib import Path
from typing import Callable, TypeVar

import click

import pomodoro
from pomodoro.core.driver import Driver
from pomodoro.core.formatting import format_clock, phase_label
from pomodoro.core.session import PomodoroSession
from pomodoro.core.settings import SETTING_TYPES
from pomodoro.core.timer import InvalidStateError, TimerState

T = TypeVar("T")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_BAR_CHAR = "#"
_PAUSE_CHOICES = ["resume", "skip", "reset", "quit"]


def _run(action: Callable[[], T]) -> T:
    """Execute *action*, converting ``InvalidStateError`` to a CLI error.

    On ``InvalidStateError`` the message is printed to stderr and the
    process exits with code 1.
    """
    try:
        return action()
    except InvalidStateError as exc:
        click.echo(str(exc), err=True)
        sys.exit(1)


def _setup_logging(verbose: bool) -> None:
    # Without a handler, warnings still reach stderr through logging's last resort.
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format=LOG_FORMAT)


@click.group()
@click.version_option(version=pomodoro.__version__, prog_name="pomodoro")
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="POMODORO_CONFIG_DIR",
    default=None,
    help="Directory holding settings.json and stats.json.",
)
@click.option("-v", "--verbose", is_flag=True, help="Log timer transitions to stderr.")
@click.pass_context
def cli(ctx: click.Context, config_dir: Path | None, verbose: bool) -> None:
    """pomodoro: focus and break intervals with daily statistics."""
    _setup_logging(verbose)
    ctx.obj = config_dir


# ---------------------------------------------------------------------------
# pomodoro run
# ---------------------------------------------------------------------------


def _renderer() -> Callable[[TimerState], None]:
    """Return a callback that redraws the clock and announces phase changes."""
    last: list[TimerState | None] = [None]

    def render(state: TimerState) -> None:
        previous = last[0]
        if previous is not None and previous.phase is not state.phase:
            # Terminal bell as the phase-change notification.
            click.echo("\a")
            if state.running:
                click.echo(f"{phase_label(state.phase)} started")
        last[0] = state
        click.echo(f"\r{phase_label(state.phase)} {format_clock(state.remaining_seconds)}  ", nl=False)

    return render


def _pause_menu(session: PomodoroSession) -> bool:
    """Pause the timer and apply the user's choice; return ``False`` to quit."""
    click.echo()
    if session.state.running:
        click.echo(_run(session.pause))
    click.echo(session.status()[0])
    choice = click.prompt(
        "Paused", type=click.Choice(_PAUSE_CHOICES), default="resume", show_choices=True
    )
    if choice == "quit":
        return False
    if choice == "resume":
        click.echo(_run(session.resume if session.state.paused else session.start))
    elif choice == "skip":
        click.echo(session.skip())
    else:
        click.echo(session.reset())
    return True


@cli.command()
@click.pass_obj
def run(config_dir: Path | None) -> None:
    """Run the timer in the foreground.

    Ctrl-C pauses and offers to resume, skip, reset or quit.
    """
    session = PomodoroSession(config_dir)
    render = _renderer()
    driver = Driver(session, on_update=render)
    # Resumed after Ctrl-Z / kill -STOP: catch up with the wall clock.
    signal.signal(signal.SIGCONT, lambda signum, frame: driver.notify_foreground())

    try:
        click.echo(_run(session.start))
        render(session.state)
        while True:
            try:
                driver.run()
            except KeyboardInterrupt:
                if not _pause_menu(session):
                    break
                render(session.state)
                continue
            click.echo()
            next_up = phase_label(session.state.phase).lower()
            if not click.confirm(f"Start {next_up}?", default=True):
                break
            click.echo(_run(session.start))
            render(session.state)
    except (KeyboardInterrupt, click.Abort):
        click.echo()
    finally:
        signal.signal(signal.SIGCONT, signal.SIG_DFL)

    today = session.ledger.get_today()
    click.echo(
        f"Completed {session.state.completed_focus_count} focus session(s) this run, "
        f"{today.completed_focus_sessions} today"
    )


# ---------------------------------------------------------------------------
# pomodoro stats
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--days", type=click.IntRange(1, 366), default=7, show_default=True)
@click.pass_obj
def stats(config_dir: Path | None, days: int) -> None:
    """Show today's totals, the current streak and recent days."""
    session = PomodoroSession(config_dir)
    ledger = session.ledger
    today = ledger.get_today()
    goal = session.settings.daily_goal
    click.echo(
        f"Today: {today.completed_focus_sessions} session(s), "
        f"{today.total_focus_minutes} min (goal {today.completed_focus_sessions}/{goal})"
    )
    streak = ledger.get_streak()
    click.echo(f"Streak: {streak} day{'' if streak == 1 else 's'}")
    click.echo(f"Last {days} days:")
    for day in ledger.get_last_n_days(days):
        bar = _BAR_CHAR * day.completed_focus_sessions
        click.echo(
            f"  {day.date}  {day.completed_focus_sessions:>3}  "
            f"{day.total_focus_minutes:>4} min  {bar}"
        )


# ---------------------------------------------------------------------------
# pomodoro settings
# ---------------------------------------------------------------------------


@cli.group(name="settings")
def settings_group() -> None:
    """Show or change timer settings."""


@settings_group.command(name="show")
@click.pass_obj
def settings_show(config_dir: Path | None) -> None:
    """Print every setting."""
    session = PomodoroSession(config_dir)
    for name, value in session.settings.to_dict().items():
        click.echo(f"{name} = {_format_value(value)}")


@settings_group.command(name="set")
@click.argument("name", type=click.Choice(sorted(SETTING_TYPES)))
@click.argument("value")
@click.pass_context
def settings_set(ctx: click.Context, name: str, value: str) -> None:
    """Set setting NAME to VALUE (numbers are clamped to their limits)."""
    param_type = click.BOOL if SETTING_TYPES[name] is bool else click.INT
    converted = param_type.convert(value, None, ctx)
    session = PomodoroSession(ctx.obj)
    stored = session.update_setting(name, converted)
    click.echo(f"{name} = {_format_value(stored)}")


@settings_group.command(name="reset")
@click.pass_obj
def settings_reset(config_dir: Path | None) -> None:
    """Restore the default settings."""
    session = PomodoroSession(config_dir)
    session.reset_settings()
    click.echo("Settings restored to defaults")


def _format_value(value: object) -> str:
    if isinstance(value, bool):
        return "on" if value else "off"
    return str(value)
