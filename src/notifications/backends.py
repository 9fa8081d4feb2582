"""Delivery backends for banners produced by the notification scheduler."""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

from contracts.ui_protocol import EVENT_NOTIFICATION

from .scheduler import PendingNotification


class BannerBackend(Protocol):
    """Presents a due banner to the user."""

    def deliver(self, notification: PendingNotification) -> None: ...


class UIPublisherLike(Protocol):
    def publish(self, event_type: str, **payload: Any) -> None:
        ...


class LoggingBannerBackend:
    """Backend that writes banners to the application log."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger("notifications")

    def deliver(self, notification: PendingNotification) -> None:
        self._logger.info("%s: %s", notification.title, notification.body)


class UIBannerBackend:
    """Backend that forwards banners to connected web UI clients."""

    def __init__(self, ui: UIPublisherLike):
        self._ui = ui

    def deliver(self, notification: PendingNotification) -> None:
        self._ui.publish(
            EVENT_NOTIFICATION,
            identifier=notification.identifier,
            kind=notification.kind,
            phase=notification.phase.value,
            title=notification.title,
            body=notification.body,
        )
