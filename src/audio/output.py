"""Sounddevice-backed, non-blocking alarm playback."""

from __future__ import annotations

import logging
import threading
from typing import Optional

import numpy as np
import sounddevice as sd

from scheduler.models import AlarmRequest

from .tones import render_alarm


class AudioError(Exception):
    """Raised when alarm playback cannot be started."""


class AlarmPlayer:
    """Plays rendered alarm buffers through a selected sounddevice output.

    Only one alarm plays at a time; a new request replaces the current one.
    """

    def __init__(
        self,
        output_device_index: Optional[int] = None,
        sample_rate_hz: int = 44100,
        blocksize: int = 2048,
        logger: Optional[logging.Logger] = None,
    ):
        self._output_device_index = output_device_index
        self._sample_rate_hz = sample_rate_hz
        self._blocksize = blocksize
        self._logger = logger or logging.getLogger("alarm")
        self._stream: Optional[sd.OutputStream] = None
        self._lock = threading.Lock()

    @property
    def is_playing(self) -> bool:
        with self._lock:
            return self._stream is not None and self._stream.active

    def play(self, request: AlarmRequest) -> None:
        wav = render_alarm(request, self._sample_rate_hz)
        self.stop()
        if wav.size == 0:
            self._logger.debug("Alarm skipped: sound=%s is silent", request.sound_id)
            return
        self._play_buffer(wav)
        self._logger.info(
            "Alarm playing: sound=%s mode=%s duration=%.1fs volume=%.2f",
            request.sound_id,
            request.loop_mode,
            len(wav) / self._sample_rate_hz,
            request.volume,
        )

    def stop(self) -> None:
        with self._lock:
            stream = self._stream
            self._stream = None
        if stream is None:
            return
        try:
            stream.stop()
            stream.close()
        except Exception as error:
            self._logger.warning("Failed to stop alarm stream: %s", error)

    def _play_buffer(self, wav: np.ndarray) -> None:
        pos = 0

        def callback(outdata, frames, time_info, status):
            nonlocal pos
            if status:
                self._logger.warning("Sounddevice status: %s", status)

            end = pos + frames
            chunk = wav[pos:end]

            if len(chunk) < frames:
                outdata[: len(chunk), 0] = chunk
                outdata[len(chunk) :, 0] = 0
                raise sd.CallbackStop()

            outdata[:, 0] = chunk
            pos = end

        try:
            stream = sd.OutputStream(
                channels=1,
                samplerate=self._sample_rate_hz,
                blocksize=self._blocksize,
                callback=callback,
                device=self._output_device_index,
                dtype="float32",
            )
            stream.start()
        except Exception as error:
            raise AudioError(f"Alarm playback failed: {error}") from error

        with self._lock:
            self._stream = stream
