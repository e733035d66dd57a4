"""Notification package."""

from .notifier import (
    Importance,
    Notification,
    NotificationChannel,
    Notifier,
    format_clock_time,
    format_overdue,
    format_remaining,
)

__all__ = [
    "Importance",
    "Notification",
    "NotificationChannel",
    "Notifier",
    "format_clock_time",
    "format_overdue",
    "format_remaining",
]
