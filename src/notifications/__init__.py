"""Banner notification scheduling and delivery."""

from .backends import BannerBackend, LoggingBannerBackend, UIBannerBackend
from .scheduler import (
    KIND_END,
    KIND_WARNING,
    NotificationScheduler,
    PendingNotification,
    format_warning_time,
)

__all__ = [
    "BannerBackend",
    "KIND_END",
    "KIND_WARNING",
    "LoggingBannerBackend",
    "NotificationScheduler",
    "PendingNotification",
    "UIBannerBackend",
    "format_warning_time",
]
