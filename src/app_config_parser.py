"""Typed parser for config.toml sections into immutable app settings."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from app_config_schema import (
    DEFAULT_STATS_FILE,
    AlarmSettings,
    AppConfig,
    AppConfigurationError,
    AudioSettings,
    FeatureSettings,
    NotificationDeliverySettings,
    NotificationSettings,
    OverlaySettings,
    ProfileSettings,
    RulesetSettings,
    RuntimeSettings,
    SoundSettings,
    StatsSettings,
    UIServerSettings,
)
from audio.sounds import normalize_sound_id
from scheduler.constants import DEFAULT_PROFILE_ID, LOOP_MODES, LOOP_MODE_SECONDS

_ALLOWED_NOTIFICATION_BACKENDS = {"log", "ui"}
_MIN_VOLUME = 0.0
_MAX_VOLUME = 2.0
_MIN_TICK_INTERVAL = 0.1
_MAX_TICK_INTERVAL = 1.0


def parse_app_config(
    raw: Mapping[str, Any],
    *,
    base_dir: Path,
    source_file: str,
) -> AppConfig:
    """Parse raw TOML mappings into strongly typed application settings."""
    profiles = _parse_profiles(_section(raw, "profiles"))
    active_profile = (
        _as_str(raw.get("active_profile", DEFAULT_PROFILE_ID), "active_profile")
        or DEFAULT_PROFILE_ID
    )
    if active_profile not in profiles:
        raise AppConfigurationError(
            f"active_profile '{active_profile}' does not match any [profiles] table."
        )

    return AppConfig(
        active_profile=active_profile,
        profiles=profiles,
        runtime=_parse_runtime_settings(_section(raw, "runtime")),
        stats=_parse_stats_settings(_section(raw, "stats"), base_dir=base_dir),
        audio=_parse_audio_settings(_section(raw, "audio")),
        notifications=_parse_notification_delivery(_section(raw, "notifications")),
        ui_server=_parse_ui_server_settings(_section(raw, "ui_server"), base_dir=base_dir),
        source_file=source_file,
    )


def _parse_profiles(section: Mapping[str, Any]) -> dict[str, ProfileSettings]:
    if not section:
        return {DEFAULT_PROFILE_ID: ProfileSettings()}

    profiles: dict[str, ProfileSettings] = {}
    for profile_id, raw_profile in section.items():
        if not isinstance(raw_profile, Mapping):
            raise AppConfigurationError(f"[profiles.{profile_id}] must be a table.")
        profiles[profile_id] = parse_profile(profile_id, raw_profile)
    return profiles


def parse_profile(profile_id: str, section: Mapping[str, Any]) -> ProfileSettings:
    """Parse one `[profiles.<id>]` table, applying legacy key migrations."""
    prefix = f"profiles.{profile_id}"
    name = _as_str(section.get("name", profile_id), f"{prefix}.name") or profile_id
    return ProfileSettings(
        id=profile_id,
        name=name,
        ruleset=_parse_ruleset(_section(section, "ruleset", prefix), prefix),
        notifications=_parse_notifications(
            _section(section, "notifications", prefix),
            prefix,
        ),
        sounds=_parse_sounds(_section(section, "sounds", prefix)),
        alarm=_parse_alarm(_section(section, "alarm", prefix), prefix),
        overlay=_parse_overlay(_section(section, "overlay", prefix), prefix),
        features=FeatureSettings(
            auto_start_work=_as_bool(
                _section(section, "features", prefix).get("auto_start_work", False),
                f"{prefix}.features.auto_start_work",
            ),
        ),
    )


def _parse_ruleset(section: Mapping[str, Any], prefix: str) -> RulesetSettings:
    defaults = RulesetSettings()
    ruleset = RulesetSettings(
        work_seconds=_as_positive_int(
            section.get("work_seconds", defaults.work_seconds),
            f"{prefix}.ruleset.work_seconds",
        ),
        short_break_seconds=_as_positive_int(
            section.get("short_break_seconds", defaults.short_break_seconds),
            f"{prefix}.ruleset.short_break_seconds",
        ),
        long_break_seconds=_as_positive_int(
            section.get("long_break_seconds", defaults.long_break_seconds),
            f"{prefix}.ruleset.long_break_seconds",
        ),
        long_break_every=_as_int(
            section.get("long_break_every", defaults.long_break_every),
            f"{prefix}.ruleset.long_break_every",
        ),
    )
    if ruleset.long_break_every < 2:
        raise AppConfigurationError(f"{prefix}.ruleset.long_break_every must be >= 2.")
    return ruleset


def _parse_notifications(section: Mapping[str, Any], prefix: str) -> NotificationSettings:
    field = f"{prefix}.notifications"
    if "warning_seconds_before_end" in section:
        # Legacy single lead time applies to work and breaks alike.
        legacy = _as_non_negative_int(
            section["warning_seconds_before_end"],
            f"{field}.warning_seconds_before_end",
        )
        work_warning = legacy
        break_warning = legacy
    else:
        work_warning = _as_non_negative_int(
            section.get("work_warning_seconds_before_end", 60),
            f"{field}.work_warning_seconds_before_end",
        )
        break_warning = _as_non_negative_int(
            section.get("break_warning_seconds_before_end", 60),
            f"{field}.break_warning_seconds_before_end",
        )
    return NotificationSettings(
        work_warning_seconds_before_end=work_warning,
        break_warning_seconds_before_end=break_warning,
        banner_enabled=_as_bool(section.get("banner_enabled", True), f"{field}.banner_enabled"),
    )


def _parse_sounds(section: Mapping[str, Any]) -> SoundSettings:
    defaults = SoundSettings()
    work_warning = section.get("work_warning_sound_id")
    break_warning = section.get("break_warning_sound_id")
    if work_warning is None or break_warning is None:
        legacy = section.get("warning_sound_id", defaults.work_warning_sound_id)
        work_warning = legacy
        break_warning = legacy
    return SoundSettings(
        work_end_sound_id=normalize_sound_id(
            section.get("work_end_sound_id", defaults.work_end_sound_id)
        ),
        break_end_sound_id=normalize_sound_id(
            section.get("break_end_sound_id", defaults.break_end_sound_id)
        ),
        work_warning_sound_id=normalize_sound_id(work_warning),
        break_warning_sound_id=normalize_sound_id(break_warning),
    )


def _parse_alarm(section: Mapping[str, Any], prefix: str) -> AlarmSettings:
    field = f"{prefix}.alarm"
    defaults = AlarmSettings()
    loop_mode = _as_str(section.get("loop_mode", LOOP_MODE_SECONDS), f"{field}.loop_mode")
    if loop_mode not in LOOP_MODES:
        allowed = ", ".join(sorted(LOOP_MODES))
        raise AppConfigurationError(f"{field}.loop_mode must be one of: {allowed}.")

    legacy_volume = section.get("volume", 1.0)

    def volume(key: str) -> float:
        return _clamp_volume(_as_float(section.get(key, legacy_volume), f"{field}.{key}"))

    def count(key: str, default: int) -> int:
        return _as_positive_int(section.get(key, default), f"{field}.{key}")

    return AlarmSettings(
        work_warning_play_seconds=count(
            "work_warning_play_seconds", defaults.work_warning_play_seconds
        ),
        break_warning_play_seconds=count(
            "break_warning_play_seconds", defaults.break_warning_play_seconds
        ),
        break_start_play_seconds=count(
            "break_start_play_seconds", defaults.break_start_play_seconds
        ),
        break_end_play_seconds=count(
            "break_end_play_seconds", defaults.break_end_play_seconds
        ),
        loop_mode=loop_mode,
        work_warning_loop_count=count(
            "work_warning_loop_count", defaults.work_warning_loop_count
        ),
        break_warning_loop_count=count(
            "break_warning_loop_count", defaults.break_warning_loop_count
        ),
        break_start_loop_count=count("break_start_loop_count", defaults.break_start_loop_count),
        break_end_loop_count=count("break_end_loop_count", defaults.break_end_loop_count),
        work_end_volume=volume("work_end_volume"),
        break_end_volume=volume("break_end_volume"),
        work_warning_volume=volume("work_warning_volume"),
        break_warning_volume=volume("break_warning_volume"),
    )


def _parse_overlay(section: Mapping[str, Any], prefix: str) -> OverlaySettings:
    field = f"{prefix}.overlay"
    defaults = OverlaySettings()
    return OverlaySettings(
        strict_default=_as_bool(
            section.get("strict_default", defaults.strict_default),
            f"{field}.strict_default",
        ),
        delayed_skip_enabled=_as_bool(
            section.get("delayed_skip_enabled", defaults.delayed_skip_enabled),
            f"{field}.delayed_skip_enabled",
        ),
        delayed_skip_seconds=_as_non_negative_int(
            section.get("delayed_skip_seconds", defaults.delayed_skip_seconds),
            f"{field}.delayed_skip_seconds",
        ),
        extra_time_enabled=_as_bool(
            section.get("extra_time_enabled", defaults.extra_time_enabled),
            f"{field}.extra_time_enabled",
        ),
        extra_time_seconds=_as_positive_int(
            section.get("extra_time_seconds", defaults.extra_time_seconds),
            f"{field}.extra_time_seconds",
        ),
        hold_after_break=_as_bool(
            section.get("hold_after_break", defaults.hold_after_break),
            f"{field}.hold_after_break",
        ),
    )


def _parse_runtime_settings(section: Mapping[str, Any]) -> RuntimeSettings:
    tick_interval = _as_float(
        section.get("tick_interval_seconds", 0.25),
        "runtime.tick_interval_seconds",
    )
    if not _MIN_TICK_INTERVAL <= tick_interval <= _MAX_TICK_INTERVAL:
        raise AppConfigurationError(
            "runtime.tick_interval_seconds must be in "
            f"[{_MIN_TICK_INTERVAL}, {_MAX_TICK_INTERVAL}]."
        )
    suspend_threshold = _as_float(
        section.get("suspend_threshold_seconds", 5.0),
        "runtime.suspend_threshold_seconds",
    )
    if suspend_threshold <= tick_interval:
        raise AppConfigurationError(
            "runtime.suspend_threshold_seconds must exceed runtime.tick_interval_seconds."
        )
    return RuntimeSettings(
        tick_interval_seconds=tick_interval,
        suspend_threshold_seconds=suspend_threshold,
    )


def _parse_stats_settings(
    section: Mapping[str, Any],
    *,
    base_dir: Path,
) -> StatsSettings:
    file = _as_str(section.get("file", DEFAULT_STATS_FILE), "stats.file") or DEFAULT_STATS_FILE
    return StatsSettings(
        enabled=_as_bool(section.get("enabled", True), "stats.enabled"),
        file=_resolve_path(base_dir, file),
    )


def _parse_audio_settings(section: Mapping[str, Any]) -> AudioSettings:
    return AudioSettings(
        enabled=_as_bool(section.get("enabled", False), "audio.enabled"),
        output_device=(
            _as_int(section.get("output_device"), "audio.output_device")
            if "output_device" in section
            else None
        ),
        sample_rate_hz=_as_positive_int(
            section.get("sample_rate_hz", 44100),
            "audio.sample_rate_hz",
        ),
    )


def _parse_notification_delivery(section: Mapping[str, Any]) -> NotificationDeliverySettings:
    backend = _as_str(section.get("backend", "log"), "notifications.backend").lower()
    if backend not in _ALLOWED_NOTIFICATION_BACKENDS:
        allowed = ", ".join(sorted(_ALLOWED_NOTIFICATION_BACKENDS))
        raise AppConfigurationError(f"notifications.backend must be one of: {allowed}.")
    return NotificationDeliverySettings(backend=backend)


def _parse_ui_server_settings(
    section: Mapping[str, Any],
    *,
    base_dir: Path,
) -> UIServerSettings:
    index_file = _as_str(section.get("index_file", ""), "ui_server.index_file")
    return UIServerSettings(
        enabled=_as_bool(section.get("enabled", True), "ui_server.enabled"),
        host=_as_str(section.get("host", "127.0.0.1"), "ui_server.host"),
        port=_as_int(section.get("port", 8765), "ui_server.port"),
        index_file=_resolve_path(base_dir, index_file) if index_file else "",
    )


def _section(
    root: Mapping[str, Any],
    name: str,
    prefix: str = "",
) -> Mapping[str, Any]:
    raw = root.get(name, {})
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        qualified = f"{prefix}.{name}" if prefix else name
        raise AppConfigurationError(f"[{qualified}] must be a table.")
    return raw


def _as_str(value: Any, field: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    raise AppConfigurationError(f"{field} must be a string.")


def _as_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes", "on"):
            return True
        if lowered in ("false", "0", "no", "off"):
            return False
    raise AppConfigurationError(f"{field} must be a boolean.")


def _as_int(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be an integer.")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be an integer.") from error
    raise AppConfigurationError(f"{field} must be an integer.")


def _as_positive_int(value: Any, field: str) -> int:
    number = _as_int(value, field)
    if number <= 0:
        raise AppConfigurationError(f"{field} must be greater than zero.")
    return number


def _as_non_negative_int(value: Any, field: str) -> int:
    number = _as_int(value, field)
    if number < 0:
        raise AppConfigurationError(f"{field} must not be negative.")
    return number


def _as_float(value: Any, field: str) -> float:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be a float.")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be a float.") from error
    raise AppConfigurationError(f"{field} must be a float.")


def _clamp_volume(value: float) -> float:
    return max(_MIN_VOLUME, min(_MAX_VOLUME, value))


def _resolve_path(base_dir: Path, raw: str) -> str:
    if not raw:
        return ""
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = (base_dir / path).resolve()
    return str(path)
