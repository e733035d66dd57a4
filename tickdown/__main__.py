"""Command-line entry point: python -m tickdown."""

from __future__ import annotations

import logging
import signal
import sys

import click
from PyQt6.QtCore import QCoreApplication, QTimer

import tickdown
from .commands import Command, CommandKind, InvalidCommandError, parse_minutes
from .database.db import init_db
from .notify.notifier import format_clock_time, format_remaining
from .settings import load_settings, settings_path
from .timer.clock import SystemClock
from .timer.store import SnapshotStore

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        force=True,
    )


@click.group()
@click.version_option(version=tickdown.__version__, prog_name="tickdown")
def cli() -> None:
    """tickdown: a countdown timer that survives restarts."""


@cli.command()
@click.option("--minutes", "-m", default=None, help="Start a countdown of MINUTES (1-99).")
def run(minutes: str | None) -> None:
    """Run the timer service in the foreground.

    Any countdown left behind by a previous process is recovered first.
    Commands are then read from stdin, one per line.
    """
    settings = load_settings()
    configure_logging(settings.log_level)

    start_command = None
    if minutes is not None:
        try:
            start_command = Command(CommandKind.START, parse_minutes(minutes))
        except InvalidCommandError as exc:
            raise click.BadParameter(str(exc), param_hint="--minutes") from exc

    init_db()
    app = QCoreApplication(sys.argv)
    app.setApplicationName("Tickdown")

    from .console import ConsoleSession, PROMPT_HELP, echo_notification
    from .service import TimerService

    service = TimerService(settings, app, sink=echo_notification)
    app.aboutToQuit.connect(service.shutdown)

    # SIGINT / SIGTERM: save a running countdown, then leave the loop.
    signal.signal(signal.SIGINT, lambda *_: app.quit())
    signal.signal(signal.SIGTERM, lambda *_: app.quit())
    # Let the interpreter run signal handlers while Qt owns the loop.
    wakeup = QTimer(app)
    wakeup.setInterval(200)
    wakeup.timeout.connect(lambda: None)
    wakeup.start()

    service.boot()
    if start_command is not None and not service.controller.is_running:
        service.dispatch(start_command)

    ConsoleSession(service, app)
    click.echo(PROMPT_HELP)
    sys.exit(app.exec())


@cli.command()
def status() -> None:
    """Show the snapshot stored for recovery."""
    init_db()
    snapshot = SnapshotStore(SystemClock()).load()
    if snapshot.last_remaining_millis <= 0 and not snapshot.stopped_flag:
        click.echo("No stored countdown")
        return
    saved_at = (
        format_clock_time(snapshot.last_system_time)
        if snapshot.last_system_time else "--:--"
    )
    state = "stopped" if snapshot.stopped_flag else "running"
    click.echo(
        f"{format_remaining(snapshot.last_remaining_millis)} left "
        f"({state}, saved at {saved_at})"
    )


@cli.command()
def clear() -> None:
    """Forget any stored countdown."""
    init_db()
    SnapshotStore(SystemClock()).clear()
    click.echo("Stored countdown cleared")


@cli.command()
def config() -> None:
    """Print the settings file location and current values."""
    settings = load_settings()
    click.echo(f"# {settings_path()}")
    for key, value in vars(settings).items():
        click.echo(f"{key} = {value!r}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
