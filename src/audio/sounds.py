"""Sound id normalisation shared by configuration loading and playback."""

from __future__ import annotations

from scheduler.constants import SOUND_NONE

SYSTEM_DEFAULT_SOUND_ID = "system.default"

_LEGACY_IDS = {
    "0": "builtin.chime",
    "1": "builtin.bell",
    "2": "builtin.gentle",
    "3": "builtin.alert",
    "4": SYSTEM_DEFAULT_SOUND_ID,
    "chime": "builtin.chime",
    "bell": "builtin.bell",
    "gentle": "builtin.gentle",
    "alert": "builtin.alert",
    "default": SYSTEM_DEFAULT_SOUND_ID,
    "system": SYSTEM_DEFAULT_SOUND_ID,
    "system_default": SYSTEM_DEFAULT_SOUND_ID,
    "builtin.default": SYSTEM_DEFAULT_SOUND_ID,
}

BUILTIN_SOUND_IDS: frozenset[str] = frozenset(
    {
        "builtin.chime",
        "builtin.bell",
        "builtin.gentle",
        "builtin.alert",
        SYSTEM_DEFAULT_SOUND_ID,
    }
)

_SILENT_IDS = frozenset({SOUND_NONE, "off", "-1"})


def normalize_sound_id(raw: object) -> str:
    """Map legacy, numeric, and free-form sound ids onto canonical ids."""
    if raw is None or isinstance(raw, bool):
        return SOUND_NONE
    trimmed = str(raw).strip()
    if not trimmed:
        return SOUND_NONE

    lowered = trimmed.lower()
    if lowered in _SILENT_IDS:
        return SOUND_NONE
    mapped = _LEGACY_IDS.get(lowered)
    if mapped is not None:
        return mapped
    if lowered.startswith("builtin.") or lowered == SYSTEM_DEFAULT_SOUND_ID:
        return lowered
    return trimmed


def is_builtin_sound(sound_id: str) -> bool:
    return normalize_sound_id(sound_id) in BUILTIN_SOUND_IDS


def is_silent(sound_id: str) -> bool:
    return normalize_sound_id(sound_id) == SOUND_NONE
