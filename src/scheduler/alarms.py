"""Alarm selection for warnings and end-of-phase signals."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from .constants import (
    END_ALARM_MAX_SECONDS,
    LOOP_MODE_SECONDS,
    SOUND_NONE,
    WARNING_ALARM_MAX_SECONDS,
)
from .models import AlarmRequest, Phase

if TYPE_CHECKING:
    from app_config_schema import ProfileSettings


def warning_alarm(profile: ProfileSettings, phase: Phase) -> Optional[AlarmRequest]:
    sounds = profile.sounds
    alarm = profile.alarm
    if phase.is_break:
        sound_id = sounds.break_warning_sound_id
        volume = alarm.break_warning_volume
        play_seconds = alarm.break_warning_play_seconds
        loop_count = alarm.break_warning_loop_count
    else:
        sound_id = sounds.work_warning_sound_id
        volume = alarm.work_warning_volume
        play_seconds = alarm.work_warning_play_seconds
        loop_count = alarm.work_warning_loop_count
    return _build_request(
        profile,
        sound_id=sound_id,
        volume=volume,
        play_seconds=play_seconds,
        loop_count=loop_count,
        max_seconds=WARNING_ALARM_MAX_SECONDS,
    )


def phase_end_alarm(profile: ProfileSettings, phase: Phase) -> Optional[AlarmRequest]:
    """Pick the end-of-phase alarm: work ending starts a break, and vice versa."""
    sounds = profile.sounds
    alarm = profile.alarm
    if phase is Phase.WORK:
        sound_id = sounds.work_end_sound_id
        volume = alarm.work_end_volume
        play_seconds = alarm.break_start_play_seconds
        loop_count = alarm.break_start_loop_count
    else:
        sound_id = sounds.break_end_sound_id
        volume = alarm.break_end_volume
        play_seconds = alarm.break_end_play_seconds
        loop_count = alarm.break_end_loop_count
    return _build_request(
        profile,
        sound_id=sound_id,
        volume=volume,
        play_seconds=play_seconds,
        loop_count=loop_count,
        max_seconds=END_ALARM_MAX_SECONDS,
    )


def _build_request(
    profile: ProfileSettings,
    *,
    sound_id: str,
    volume: float,
    play_seconds: int,
    loop_count: int,
    max_seconds: float,
) -> Optional[AlarmRequest]:
    if not sound_id or sound_id == SOUND_NONE:
        return None
    if profile.alarm.loop_mode == LOOP_MODE_SECONDS:
        return AlarmRequest(
            sound_id=sound_id,
            volume=volume,
            loop_mode=LOOP_MODE_SECONDS,
            max_duration_seconds=float(play_seconds),
            loop_count=1,
        )
    return AlarmRequest(
        sound_id=sound_id,
        volume=volume,
        loop_mode=profile.alarm.loop_mode,
        max_duration_seconds=max_seconds,
        loop_count=loop_count,
    )
