"""Break overlay state published to UI clients."""

from __future__ import annotations

import logging
from typing import Optional

from contracts.ui_protocol import OVERLAY_EXTRA_TIME, OVERLAY_HIDE, OVERLAY_HOLD, OVERLAY_SHOW
from profiles import ProfileProvider
from scheduler import Phase

from .ui import RuntimeUIPublisher


class OverlayPresenter:
    """Translates break lifecycle events into `overlay` UI events.

    Strict mode and delayed skip are presentation policies read from the
    active profile whenever the overlay is shown.
    """

    def __init__(
        self,
        ui: RuntimeUIPublisher,
        profiles: ProfileProvider,
        logger: Optional[logging.Logger] = None,
    ):
        self._ui = ui
        self._profiles = profiles
        self._logger = logger or logging.getLogger("overlay")
        self._mode = OVERLAY_HIDE

    @property
    def mode(self) -> str:
        return self._mode

    def show_break(self, phase: Phase, remaining_seconds: Optional[float] = None) -> None:
        profile = self._profiles.current_profile()
        strict = bool(profile and profile.overlay.strict_default)
        delayed_skip_seconds = 0
        extra_time_available = False
        if profile is not None:
            if profile.overlay.delayed_skip_enabled and not strict:
                delayed_skip_seconds = profile.overlay.delayed_skip_seconds
            extra_time_available = profile.overlay.extra_time_enabled

        payload = {
            "phase": phase.value,
            "phase_name": phase.display_name,
            "strict": strict,
            "skip_allowed": not strict,
            "delayed_skip_seconds": delayed_skip_seconds,
            "extra_time_available": extra_time_available,
        }
        if remaining_seconds is not None:
            payload["remaining_seconds"] = round(remaining_seconds, 1)
        self._set_mode(OVERLAY_SHOW, **payload)

    def show_extra_time(self, extra_seconds: int) -> None:
        self._set_mode(OVERLAY_EXTRA_TIME, extra_seconds=extra_seconds)

    def show_hold(self) -> None:
        self._set_mode(OVERLAY_HOLD, message="Break finished. Start the next work session?")

    def hide(self) -> None:
        self._set_mode(OVERLAY_HIDE)

    def _set_mode(self, mode: str, **payload) -> None:
        self._mode = mode
        self._logger.debug("Overlay mode: %s", mode)
        self._ui.publish_overlay(mode, **payload)
