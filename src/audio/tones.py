"""Numpy synthesis of the builtin alarm sounds."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from scheduler.constants import LOOP_MODE_SECONDS
from scheduler.models import AlarmRequest

from .sounds import SYSTEM_DEFAULT_SOUND_ID, is_silent, normalize_sound_id


@dataclass(frozen=True)
class ToneSpec:
    """Additive partials played as one or more decaying pulses."""
    partials: tuple[float, ...]
    pulse_seconds: float
    gap_seconds: float = 0.0
    pulses: int = 1
    decay: float = 4.0
    attack_seconds: float = 0.005


TONE_SPECS: dict[str, ToneSpec] = {
    "builtin.chime": ToneSpec(partials=(880.0, 1320.0), pulse_seconds=0.6),
    "builtin.bell": ToneSpec(partials=(660.0, 990.0, 1320.0, 1980.0), pulse_seconds=1.2, decay=3.0),
    "builtin.gentle": ToneSpec(partials=(523.25,), pulse_seconds=0.8, decay=2.0, attack_seconds=0.12),
    "builtin.alert": ToneSpec(partials=(1000.0,), pulse_seconds=0.15, gap_seconds=0.1, pulses=3, decay=0.5),
    SYSTEM_DEFAULT_SOUND_ID: ToneSpec(partials=(740.0,), pulse_seconds=0.4),
}


def synthesize_tone(sound_id: str, sample_rate_hz: int) -> np.ndarray:
    """Render one pass of *sound_id* as mono float32 in [-1, 1].

    Unknown ids fall back to the system default tone; silent ids render empty.
    """
    if is_silent(sound_id):
        return np.zeros(0, dtype=np.float32)
    shape = TONE_SPECS.get(normalize_sound_id(sound_id), TONE_SPECS[SYSTEM_DEFAULT_SOUND_ID])

    pulse_samples = max(1, int(round(shape.pulse_seconds * sample_rate_hz)))
    t = np.arange(pulse_samples, dtype=np.float64) / sample_rate_hz
    wave = np.zeros(pulse_samples, dtype=np.float64)
    for index, frequency in enumerate(shape.partials):
        wave += np.sin(2.0 * math.pi * frequency * t) / (index + 1)
    wave /= np.max(np.abs(wave)) or 1.0

    envelope = np.exp(-shape.decay * t / shape.pulse_seconds)
    attack_samples = min(pulse_samples, max(1, int(shape.attack_seconds * sample_rate_hz)))
    envelope[:attack_samples] *= np.linspace(0.0, 1.0, attack_samples)
    pulse = wave * envelope

    gap = np.zeros(int(round(shape.gap_seconds * sample_rate_hz)), dtype=np.float64)
    parts: list[np.ndarray] = []
    for index in range(shape.pulses):
        if index:
            parts.append(gap)
        parts.append(pulse)
    return np.concatenate(parts).astype(np.float32)


def render_alarm(request: AlarmRequest, sample_rate_hz: int) -> np.ndarray:
    """Loop a tone per the request's mode, then apply volume with clipping.

    ``seconds`` mode repeats the tone until ``max_duration_seconds``;
    ``times`` mode plays it ``loop_count`` times, capped by the same maximum.
    Volumes above 1.0 are gain boosts and clip at full scale.
    """
    tone = synthesize_tone(request.sound_id, sample_rate_hz)
    if tone.size == 0 or request.max_duration_seconds <= 0:
        return np.zeros(0, dtype=np.float32)

    max_samples = int(round(request.max_duration_seconds * sample_rate_hz))
    if request.loop_mode == LOOP_MODE_SECONDS:
        repeats = max(1, math.ceil(max_samples / tone.size))
    else:
        repeats = max(1, request.loop_count)

    wav = np.tile(tone, repeats)[:max_samples]
    volume = max(0.0, float(request.volume))
    return np.clip(wav * volume, -1.0, 1.0).astype(np.float32)
