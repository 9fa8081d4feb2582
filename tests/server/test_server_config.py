import tempfile
import unittest
from pathlib import Path

from app_config_schema import UIServerSettings
from server import ServerConfigurationError, UIServer, UIServerConfig


class UIServerConfigTests(unittest.TestCase):
    def test_from_settings_allows_missing_index_file(self) -> None:
        config = UIServerConfig.from_settings(UIServerSettings(index_file=""))

        self.assertTrue(config.enabled)
        self.assertEqual("", config.index_file)
        self.assertEqual("/ws", config.websocket_path)

    def test_from_settings_prefers_explicit_index_file(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            custom = Path(temp_dir) / "index.html"
            custom.write_text("<html></html>", encoding="utf-8")

            config = UIServerConfig.from_settings(UIServerSettings(index_file=str(custom)))

            self.assertEqual(str(custom), config.index_file)

    def test_rejects_missing_index_file_when_enabled(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            missing = Path(temp_dir) / "absent.html"
            with self.assertRaises(ServerConfigurationError):
                UIServerConfig(index_file=str(missing))

    def test_disabled_server_skips_index_validation(self) -> None:
        config = UIServerConfig(enabled=False, index_file="/does/not/exist.html")
        self.assertFalse(config.enabled)

    def test_rejects_invalid_host_and_port(self) -> None:
        with self.assertRaises(ServerConfigurationError):
            UIServerConfig(host="  ")
        with self.assertRaises(ServerConfigurationError):
            UIServerConfig(port=0)
        with self.assertRaises(ServerConfigurationError):
            UIServerConfig(port=70000)


class UIServerStateTests(unittest.TestCase):
    def test_publish_before_start_keeps_latest_state_for_replay(self) -> None:
        server = UIServer(UIServerConfig())

        server.publish("scheduler", state="idle", phase="work")
        server.publish("scheduler", state="running", phase="work")
        server.publish("phase_event", name="warning")

        self.assertFalse(server.is_running)
        self.assertIn('"running"', server.latest_state())


if __name__ == "__main__":
    unittest.main()
