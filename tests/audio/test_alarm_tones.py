import unittest

import numpy as np

from audio import normalize_sound_id, render_alarm, synthesize_tone
from audio.sounds import is_builtin_sound, is_silent
from scheduler import AlarmRequest

SAMPLE_RATE = 8000


def _request(**overrides) -> AlarmRequest:
    values = dict(
        sound_id="builtin.chime",
        volume=1.0,
        loop_mode="seconds",
        max_duration_seconds=2.0,
        loop_count=1,
    )
    values.update(overrides)
    return AlarmRequest(**values)


class SoundIdTests(unittest.TestCase):
    def test_legacy_and_numeric_ids_are_normalized(self) -> None:
        self.assertEqual("builtin.chime", normalize_sound_id("0"))
        self.assertEqual("builtin.alert", normalize_sound_id(" Alert "))
        self.assertEqual("system.default", normalize_sound_id("default"))
        self.assertEqual("none", normalize_sound_id(""))
        self.assertEqual("none", normalize_sound_id(None))
        self.assertEqual("custom/ring.wav", normalize_sound_id("custom/ring.wav"))

    def test_silent_and_builtin_checks(self) -> None:
        self.assertTrue(is_silent("off"))
        self.assertFalse(is_silent("builtin.bell"))
        self.assertTrue(is_builtin_sound("BUILTIN.BELL"))
        self.assertFalse(is_builtin_sound("custom/ring.wav"))


class ToneSynthesisTests(unittest.TestCase):
    def test_single_pulse_length_and_range(self) -> None:
        tone = synthesize_tone("builtin.chime", SAMPLE_RATE)

        self.assertEqual(np.float32, tone.dtype)
        self.assertEqual(round(0.6 * SAMPLE_RATE), tone.size)
        self.assertLessEqual(float(np.max(np.abs(tone))), 1.0)

    def test_multi_pulse_tone_includes_gaps(self) -> None:
        tone = synthesize_tone("builtin.alert", SAMPLE_RATE)

        expected = 3 * round(0.15 * SAMPLE_RATE) + 2 * round(0.1 * SAMPLE_RATE)
        self.assertEqual(expected, tone.size)

    def test_unknown_sound_falls_back_to_system_default(self) -> None:
        fallback = synthesize_tone("custom/missing.wav", SAMPLE_RATE)
        default = synthesize_tone("system.default", SAMPLE_RATE)

        np.testing.assert_array_equal(default, fallback)

    def test_silent_sound_renders_empty(self) -> None:
        self.assertEqual(0, synthesize_tone("none", SAMPLE_RATE).size)


class RenderAlarmTests(unittest.TestCase):
    def test_seconds_mode_fills_requested_duration(self) -> None:
        wav = render_alarm(_request(max_duration_seconds=2.0), SAMPLE_RATE)

        self.assertEqual(2 * SAMPLE_RATE, wav.size)

    def test_times_mode_repeats_tone_loop_count_times(self) -> None:
        single = synthesize_tone("builtin.chime", SAMPLE_RATE)
        wav = render_alarm(
            _request(loop_mode="times", loop_count=2, max_duration_seconds=120.0),
            SAMPLE_RATE,
        )

        self.assertEqual(2 * single.size, wav.size)

    def test_times_mode_is_capped_by_max_duration(self) -> None:
        wav = render_alarm(
            _request(loop_mode="times", loop_count=100, max_duration_seconds=1.0),
            SAMPLE_RATE,
        )

        self.assertEqual(SAMPLE_RATE, wav.size)

    def test_volume_boost_clips_to_full_scale(self) -> None:
        wav = render_alarm(_request(volume=5.0), SAMPLE_RATE)

        self.assertLessEqual(float(np.max(wav)), 1.0)
        self.assertGreaterEqual(float(np.min(wav)), -1.0)
        self.assertAlmostEqual(1.0, float(np.max(np.abs(wav))), places=5)

    def test_zero_volume_is_silent(self) -> None:
        wav = render_alarm(_request(volume=0.0), SAMPLE_RATE)

        self.assertFalse(np.any(wav))

    def test_silent_sound_or_zero_duration_renders_nothing(self) -> None:
        self.assertEqual(0, render_alarm(_request(sound_id="none"), SAMPLE_RATE).size)
        self.assertEqual(0, render_alarm(_request(max_duration_seconds=0.0), SAMPLE_RATE).size)


if __name__ == "__main__":
    unittest.main()
