"""Dataclass schema objects used by runtime configuration loading."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional

from scheduler.constants import (
    DEFAULT_DELAYED_SKIP_SECONDS,
    DEFAULT_EXTRA_TIME_SECONDS,
    DEFAULT_LONG_BREAK_EVERY,
    DEFAULT_LONG_BREAK_SECONDS,
    DEFAULT_PROFILE_ID,
    DEFAULT_SHORT_BREAK_SECONDS,
    DEFAULT_WARNING_SECONDS,
    DEFAULT_WORK_SECONDS,
    LOOP_MODE_SECONDS,
)
from scheduler.models import Phase

DEFAULT_CONFIG_FILE = "config.toml"
DEFAULT_STATS_FILE = "stats.jsonl"
DEFAULT_SOUND_ID = "builtin.chime"


class AppConfigurationError(Exception):
    """Raised when application configuration fails."""


@dataclass(frozen=True)
class RulesetSettings:
    """Interval durations and long-break cadence from `ruleset`."""
    work_seconds: int = DEFAULT_WORK_SECONDS
    short_break_seconds: int = DEFAULT_SHORT_BREAK_SECONDS
    long_break_seconds: int = DEFAULT_LONG_BREAK_SECONDS
    long_break_every: int = DEFAULT_LONG_BREAK_EVERY


@dataclass(frozen=True)
class NotificationSettings:
    """Warning lead times and banner toggle from `notifications`."""
    work_warning_seconds_before_end: int = DEFAULT_WARNING_SECONDS
    break_warning_seconds_before_end: int = DEFAULT_WARNING_SECONDS
    banner_enabled: bool = True


@dataclass(frozen=True)
class SoundSettings:
    """Normalised sound ids for warning and end-of-phase alarms."""
    work_end_sound_id: str = DEFAULT_SOUND_ID
    break_end_sound_id: str = DEFAULT_SOUND_ID
    work_warning_sound_id: str = DEFAULT_SOUND_ID
    break_warning_sound_id: str = DEFAULT_SOUND_ID


@dataclass(frozen=True)
class AlarmSettings:
    """Alarm playback lengths, loop counts, and volumes from `alarm`."""
    work_warning_play_seconds: int = 5
    break_warning_play_seconds: int = 5
    break_start_play_seconds: int = 10
    break_end_play_seconds: int = 10
    loop_mode: str = LOOP_MODE_SECONDS
    work_warning_loop_count: int = 2
    break_warning_loop_count: int = 2
    break_start_loop_count: int = 3
    break_end_loop_count: int = 3
    work_end_volume: float = 1.0
    break_end_volume: float = 1.0
    work_warning_volume: float = 1.0
    break_warning_volume: float = 1.0


@dataclass(frozen=True)
class OverlaySettings:
    """Break overlay policies from `overlay`."""
    strict_default: bool = False
    delayed_skip_enabled: bool = False
    delayed_skip_seconds: int = DEFAULT_DELAYED_SKIP_SECONDS
    extra_time_enabled: bool = True
    extra_time_seconds: int = DEFAULT_EXTRA_TIME_SECONDS
    hold_after_break: bool = False


@dataclass(frozen=True)
class FeatureSettings:
    """Optional behaviour switches from `features`."""
    auto_start_work: bool = False


@dataclass(frozen=True)
class ProfileSettings:
    """One named ruleset from `[profiles.<id>]`."""
    id: str = DEFAULT_PROFILE_ID
    name: str = "Default"
    ruleset: RulesetSettings = field(default_factory=RulesetSettings)
    notifications: NotificationSettings = field(default_factory=NotificationSettings)
    sounds: SoundSettings = field(default_factory=SoundSettings)
    alarm: AlarmSettings = field(default_factory=AlarmSettings)
    overlay: OverlaySettings = field(default_factory=OverlaySettings)
    features: FeatureSettings = field(default_factory=FeatureSettings)

    def planned_seconds(self, phase: Phase) -> int:
        if phase is Phase.WORK:
            return self.ruleset.work_seconds
        if phase is Phase.SHORT_BREAK:
            return self.ruleset.short_break_seconds
        return self.ruleset.long_break_seconds

    def warning_seconds(self, phase: Phase) -> int:
        if phase.is_break:
            return self.notifications.break_warning_seconds_before_end
        return self.notifications.work_warning_seconds_before_end


@dataclass(frozen=True)
class RuntimeSettings:
    """Host loop settings from `[runtime]`."""
    tick_interval_seconds: float = 0.25
    suspend_threshold_seconds: float = 5.0


@dataclass(frozen=True)
class StatsSettings:
    """Statistics log settings from `[stats]`."""
    enabled: bool = True
    file: str = ""


@dataclass(frozen=True)
class AudioSettings:
    """Alarm audio output settings from `[audio]`."""
    enabled: bool = False
    output_device: Optional[int] = None
    sample_rate_hz: int = 44100


@dataclass(frozen=True)
class NotificationDeliverySettings:
    """Banner delivery backend from `[notifications]`."""
    backend: str = "log"


@dataclass(frozen=True)
class UIServerSettings:
    """Built-in UI server settings from `[ui_server]`."""
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8765
    index_file: str = ""


@dataclass(frozen=True)
class AppConfig:
    """Complete typed runtime configuration loaded from `config.toml`."""
    active_profile: str
    profiles: Mapping[str, ProfileSettings]
    runtime: RuntimeSettings
    stats: StatsSettings
    audio: AudioSettings
    notifications: NotificationDeliverySettings
    ui_server: UIServerSettings
    source_file: str
