"""Active-profile lookup consumed by the phase scheduler."""

from __future__ import annotations

import logging
from typing import Mapping, Optional, Protocol

from app_config_schema import ProfileSettings


class ProfileProvider(Protocol):
    """Read-only source of the currently active ruleset."""

    def current_profile(self) -> Optional[ProfileSettings]: ...


class ProfileStore:
    """In-memory set of configured profiles with one active selection."""

    def __init__(
        self,
        profiles: Mapping[str, ProfileSettings],
        *,
        active_profile: str,
        logger: Optional[logging.Logger] = None,
    ):
        self._profiles = dict(profiles)
        self._active_profile = active_profile
        self._logger = logger or logging.getLogger("profiles")

    @classmethod
    def from_app_config(cls, app_config, logger: Optional[logging.Logger] = None) -> "ProfileStore":
        return cls(
            app_config.profiles,
            active_profile=app_config.active_profile,
            logger=logger,
        )

    @property
    def profile_ids(self) -> tuple[str, ...]:
        return tuple(self._profiles)

    @property
    def active_profile_id(self) -> str:
        return self._active_profile

    def current_profile(self) -> Optional[ProfileSettings]:
        return self._profiles.get(self._active_profile)

    def select(self, profile_id: str) -> bool:
        if profile_id not in self._profiles:
            self._logger.warning("Unknown profile requested: %s", profile_id)
            return False
        self._active_profile = profile_id
        self._logger.info("Active profile: %s", profile_id)
        return True


class StaticProfileProvider:
    """Provider returning a single fixed profile (or none)."""

    def __init__(self, profile: Optional[ProfileSettings]):
        self._profile = profile

    def current_profile(self) -> Optional[ProfileSettings]:
        return self._profile
