"""
Notification channel - transient messages shown to the user as toasts.

Each browser session owns one channel; services push typed records into it
and the app drains it once per script run.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List

import streamlit as st

SESSION_STATE_KEY = "notifications"


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


TOAST_ICONS = {
    NotificationLevel.SUCCESS: "✅",
    NotificationLevel.ERROR: "⚠️",
    NotificationLevel.INFO: "ℹ️",
}


@dataclass(frozen=True)
class Notification:
    message: str
    level: NotificationLevel = NotificationLevel.INFO
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def icon(self) -> str:
        return TOAST_ICONS[self.level]


class NotificationChannel:
    """FIFO queue of pending notifications"""

    def __init__(self):
        self._pending: List[Notification] = []

    def push(self, message: str, level: NotificationLevel = NotificationLevel.INFO) -> Notification:
        notification = Notification(message=message, level=level)
        self._pending.append(notification)
        return notification

    def success(self, message: str) -> Notification:
        return self.push(message, NotificationLevel.SUCCESS)

    def error(self, message: str) -> Notification:
        return self.push(message, NotificationLevel.ERROR)

    def info(self, message: str) -> Notification:
        return self.push(message, NotificationLevel.INFO)

    def drain(self) -> List[Notification]:
        """Return and forget every pending notification, oldest first"""
        pending, self._pending = self._pending, []
        return pending

    def __len__(self) -> int:
        return len(self._pending)


def get_notification_channel() -> NotificationChannel:
    """Get the notification channel of the current browser session"""
    if SESSION_STATE_KEY not in st.session_state:
        st.session_state[SESSION_STATE_KEY] = NotificationChannel()
    return st.session_state[SESSION_STATE_KEY]


def render_notifications(channel: NotificationChannel):
    """Show every pending notification as a toast"""
    for notification in channel.drain():
        st.toast(notification.message, icon=notification.icon)
