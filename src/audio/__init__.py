"""Alarm sound ids and tone synthesis.

Playback lives in ``audio.output`` and is imported on demand so that the
PortAudio binding is only loaded when audio output is enabled.
"""

from .sounds import BUILTIN_SOUND_IDS, SYSTEM_DEFAULT_SOUND_ID, normalize_sound_id
from .tones import TONE_SPECS, render_alarm, synthesize_tone

__all__ = [
    "BUILTIN_SOUND_IDS",
    "SYSTEM_DEFAULT_SOUND_ID",
    "TONE_SPECS",
    "normalize_sound_id",
    "render_alarm",
    "synthesize_tone",
]
