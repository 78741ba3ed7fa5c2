"""Notification sink: fire-and-forget success/error/info messages.

The core never awaits or inspects the sink; presentation (toasts, banners)
belongs to the caller's implementation.
"""

import logging
from typing import Protocol

from src.dl_common.enums import NotificationKind
from src.dl_common.errors import AppError

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    def show(self, kind: NotificationKind, title: str, message: str) -> None: ...


class LoggingNotificationSink:
    """Default sink: writes notifications to the log."""

    def show(self, kind: NotificationKind, title: str, message: str) -> None:
        level = logging.WARNING if kind == NotificationKind.ERROR else logging.INFO
        logger.log(level, "notify[%s] %s: %s", kind.value, title, message)


def notify_error(sink: NotificationSink, err: AppError) -> None:
    sink.show(NotificationKind.ERROR, err.title, err.message)


def notify_success(sink: NotificationSink, title: str, message: str) -> None:
    sink.show(NotificationKind.SUCCESS, title, message)
