"""User-facing notifications for the countdown.

Channels are plain configuration objects built once, when the
``Notifier`` is created.  Delivery goes through a *sink* callable so the
host decides how a notification is actually shown (console, tray, ...).

Notification ids
----------------
1  ``SERVICE_NOTIFICATION_ID``  "running in the background"
2  ``PUSH_NOTIFICATION_ID``     minute reminders and resume notices
3  ``ALARM_NOTIFICATION_ID``    the terminal "timer finished" alarm
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from enum import Enum
from typing import Callable

from PyQt6.QtCore import QObject, pyqtSignal

from ..timer.controller import LifecycleController, TimerState

logger = logging.getLogger(__name__)

TITLE = "Timer"

SERVICE_NOTIFICATION_ID = 1
PUSH_NOTIFICATION_ID = 2
ALARM_NOTIFICATION_ID = 3


class Importance(Enum):
    LOW = "low"
    HIGH = "high"


@dataclass(frozen=True)
class NotificationChannel:
    id: str
    name: str
    importance: Importance


SERVICE_CHANNEL = NotificationChannel("timer_service", "Timer Service", Importance.LOW)
PUSH_CHANNEL = NotificationChannel("push_channel", "Timer Push Notifications", Importance.HIGH)
ALARM_CHANNEL = NotificationChannel("alarm_channel", "Timer alarm", Importance.HIGH)


@dataclass(frozen=True)
class Notification:
    channel: NotificationChannel
    notification_id: int
    title: str
    body: str
    ongoing: bool = False


# ── formatting ────────────────────────────────────────────────────────────


def _plural(count: int, singular: str) -> str:
    return f"{count} {singular if count == 1 else singular + 's'}"


def format_overdue(millis: int) -> str:
    """Human readable duration, e.g. ``"1 hour 4 minutes 2 seconds"``.

    Seconds are always shown when no larger unit is.
    """
    total_seconds = max(0, millis) // 1000
    seconds = total_seconds % 60
    minutes = (total_seconds // 60) % 60
    hours = (total_seconds // 3600) % 24
    total_days = total_seconds // 86400
    days = total_days % 365
    years = total_days // 365

    parts: list[str] = []
    if years > 0:
        parts.append(_plural(years, "year"))
    if days > 0:
        parts.append(_plural(days, "day"))
    if hours > 0:
        parts.append(_plural(hours, "hour"))
    if minutes > 0:
        parts.append(_plural(minutes, "minute"))
    if seconds > 0 or not parts:
        parts.append(_plural(seconds, "second"))
    return " ".join(parts)


def format_clock_time(epoch_millis: int, tz: tzinfo | None = None) -> str:
    """``HH:MM`` of *epoch_millis* in *tz* (local time by default)."""
    moment = datetime.fromtimestamp(epoch_millis / 1000, tz=timezone.utc)
    return moment.astimezone(tz).strftime("%H:%M")


def format_remaining(millis: int) -> str:
    """``MM:SS`` countdown display."""
    minutes, seconds = divmod(max(0, millis) // 1000, 60)
    return f"{minutes:02d}:{seconds:02d}"


# ── notifier ──────────────────────────────────────────────────────────────


class Notifier(QObject):
    """Builds notifications from controller events and hands them to a sink.

    Signals
    -------
    delivered(notification: Notification)
        Emitted for every notification that passed the enabled checks.
    """

    delivered = pyqtSignal(object)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        sink: Callable[[Notification], None] | None = None,
        enabled: bool = True,
        minute_notifications: bool = True,
        tz: tzinfo | None = None,
    ) -> None:
        super().__init__(parent)
        self._sink = sink
        self._enabled = enabled
        self._minute_notifications = minute_notifications
        self._tz = tz

        self._channels: dict[str, NotificationChannel] = {}
        for channel in (SERVICE_CHANNEL, PUSH_CHANNEL, ALARM_CHANNEL):
            self._channels[channel.id] = channel
            logger.debug("Registered notification channel %s", channel.id)

    @property
    def channels(self) -> dict[str, NotificationChannel]:
        return dict(self._channels)

    @property
    def enabled(self) -> bool:
        return self._enabled

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    def attach(self, controller: LifecycleController) -> None:
        """Subscribe to every outbound signal of *controller*."""
        controller.minute_boundary.connect(self.show_minute_remaining)
        controller.resumed_after_gap.connect(self.show_resumed)
        controller.timer_finished.connect(self.show_finished)
        controller.state_changed.connect(self._on_state_changed)

    # ── notifications ─────────────────────────────────────────────────

    def show_service_running(self) -> None:
        self._post(Notification(
            SERVICE_CHANNEL, SERVICE_NOTIFICATION_ID, TITLE,
            "Timer is running in the background",
        ))

    def show_minute_remaining(self, remaining_minutes: int) -> None:
        if not self._minute_notifications:
            return
        self._post(Notification(
            PUSH_CHANNEL, PUSH_NOTIFICATION_ID, TITLE,
            f"{_plural(remaining_minutes, 'minute')} left until the timer finishes",
            ongoing=True,
        ))

    def show_resumed(self, stopped_at_ms: int, resumed_at_ms: int) -> None:
        stopped = format_clock_time(stopped_at_ms, self._tz)
        resumed = format_clock_time(resumed_at_ms, self._tz)
        self._post(Notification(
            PUSH_CHANNEL, PUSH_NOTIFICATION_ID, TITLE,
            f"Stopped at: {stopped}\nResumed at: {resumed}",
            ongoing=True,
        ))

    def show_finished(self, time_ago_finished: int) -> None:
        if time_ago_finished:
            body = f"Timer finished {format_overdue(time_ago_finished)} ago!"
        else:
            body = "Timer finished!"
        self._post(Notification(
            ALARM_CHANNEL, ALARM_NOTIFICATION_ID, TITLE, body, ongoing=True,
        ))

    # ── internal ──────────────────────────────────────────────────────

    def _on_state_changed(self, state: TimerState) -> None:
        if state == TimerState.RUNNING:
            self.show_service_running()

    def _post(self, notification: Notification) -> None:
        if not self._enabled:
            return
        logger.info("[%s] %s", notification.channel.id, notification.body.replace("\n", " | "))
        self.delivered.emit(notification)
        if self._sink is not None:
            self._sink(notification)
