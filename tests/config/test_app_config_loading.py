import os
import sys
import tempfile
import textwrap
import unittest
from pathlib import Path
from unittest.mock import patch

from app_config import (
    AppConfigurationError,
    load_app_config,
    load_app_config_from_text,
    resolve_config_path,
)
from scheduler import Phase


def _write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _load(text: str, base_dir: Path = Path("/srv/focus")):
    return load_app_config_from_text(textwrap.dedent(text).strip(), base_dir=base_dir)


class AppConfigLoadingTests(unittest.TestCase):
    def test_load_app_config_resolves_relative_paths(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            root = Path(temp_dir)
            config_path = root / "config.toml"
            _write_text(root / "web" / "index.html", "<html></html>")
            _write_text(
                config_path,
                textwrap.dedent(
                    """
                    [stats]
                    file = "data/stats.jsonl"

                    [ui_server]
                    index_file = "web/index.html"
                    """
                ).strip(),
            )

            app_config = load_app_config(str(config_path))

            self.assertEqual(str(config_path), app_config.source_file)
            self.assertEqual(
                str((root / "data/stats.jsonl").resolve()),
                app_config.stats.file,
            )
            self.assertEqual(
                str((root / "web/index.html").resolve()),
                app_config.ui_server.index_file,
            )

    def test_missing_profiles_table_yields_default_profile(self) -> None:
        app_config = _load("")

        self.assertEqual("default", app_config.active_profile)
        profile = app_config.profiles["default"]
        self.assertEqual(1500, profile.planned_seconds(Phase.WORK))
        self.assertEqual(300, profile.planned_seconds(Phase.SHORT_BREAK))
        self.assertEqual(900, profile.planned_seconds(Phase.LONG_BREAK))
        self.assertEqual(4, profile.ruleset.long_break_every)
        self.assertEqual(60, profile.warning_seconds(Phase.WORK))
        self.assertEqual(0.25, app_config.runtime.tick_interval_seconds)
        self.assertEqual("log", app_config.notifications.backend)
        self.assertEqual("/srv/focus/stats.jsonl", app_config.stats.file)

    def test_profiles_are_parsed_with_sub_tables(self) -> None:
        app_config = _load(
            """
            active_profile = "deep"

            [profiles.deep]
            name = "Deep work"

            [profiles.deep.ruleset]
            work_seconds = 3000
            long_break_every = 3

            [profiles.deep.notifications]
            work_warning_seconds_before_end = 120
            break_warning_seconds_before_end = 15

            [profiles.deep.overlay]
            strict_default = true
            hold_after_break = true
            extra_time_seconds = 90

            [profiles.deep.features]
            auto_start_work = true
            """
        )

        profile = app_config.profiles["deep"]
        self.assertEqual("deep", app_config.active_profile)
        self.assertEqual("Deep work", profile.name)
        self.assertEqual(3000, profile.ruleset.work_seconds)
        self.assertEqual(3, profile.ruleset.long_break_every)
        self.assertEqual(120, profile.warning_seconds(Phase.WORK))
        self.assertEqual(15, profile.warning_seconds(Phase.LONG_BREAK))
        self.assertTrue(profile.overlay.strict_default)
        self.assertTrue(profile.overlay.hold_after_break)
        self.assertEqual(90, profile.overlay.extra_time_seconds)
        self.assertTrue(profile.features.auto_start_work)

    def test_legacy_keys_fill_split_settings(self) -> None:
        app_config = _load(
            """
            [profiles.default.notifications]
            warning_seconds_before_end = 30

            [profiles.default.sounds]
            warning_sound_id = "bell"
            work_end_sound_id = 0
            break_end_sound_id = "off"

            [profiles.default.alarm]
            volume = 3.5
            """
        )

        profile = app_config.profiles["default"]
        self.assertEqual(30, profile.notifications.work_warning_seconds_before_end)
        self.assertEqual(30, profile.notifications.break_warning_seconds_before_end)
        self.assertEqual("builtin.bell", profile.sounds.work_warning_sound_id)
        self.assertEqual("builtin.bell", profile.sounds.break_warning_sound_id)
        self.assertEqual("builtin.chime", profile.sounds.work_end_sound_id)
        self.assertEqual("none", profile.sounds.break_end_sound_id)
        self.assertEqual(2.0, profile.alarm.work_end_volume)
        self.assertEqual(2.0, profile.alarm.break_warning_volume)

    def test_rejects_invalid_values(self) -> None:
        invalid = [
            'active_profile = "missing"',
            "[profiles.default.ruleset]\nlong_break_every = 1",
            "[profiles.default.ruleset]\nwork_seconds = 0",
            '[profiles.default.alarm]\nloop_mode = "forever"',
            "[runtime]\ntick_interval_seconds = 2.0",
            "[runtime]\nsuspend_threshold_seconds = 0.2",
            '[notifications]\nbackend = "dbus"',
            "[ui_server]\nport = true",
            "profiles = 3",
        ]
        for text in invalid:
            with self.subTest(text=text):
                with self.assertRaises(AppConfigurationError):
                    _load(text)

    def test_rejects_malformed_toml(self) -> None:
        with self.assertRaises(AppConfigurationError):
            _load("[runtime\n")

    def test_load_app_config_reports_missing_file(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            with self.assertRaises(AppConfigurationError):
                load_app_config(str(Path(temp_dir) / "absent.toml"))

    def test_resolve_config_path_prefers_environment_variable(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "custom.toml"
            _write_text(config_path, "")
            with patch.dict(os.environ, {"APP_CONFIG_FILE": str(config_path)}, clear=True):
                self.assertEqual(config_path, resolve_config_path())

    def test_resolve_config_path_uses_executable_dir_fallback_in_frozen_mode(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            root = Path(temp_dir)
            cwd = root / "cwd"
            cwd.mkdir()
            executable = root / "dist" / "focus-timer"
            _write_text(executable.parent / "config.toml", "")

            with patch.dict(os.environ, {}, clear=True):
                with patch("app_config.Path.cwd", return_value=cwd):
                    with patch.object(sys, "frozen", True, create=True):
                        with patch.object(sys, "executable", str(executable), create=True):
                            resolved = resolve_config_path()

            self.assertEqual((executable.parent / "config.toml").resolve(), resolved)


if __name__ == "__main__":
    unittest.main()
