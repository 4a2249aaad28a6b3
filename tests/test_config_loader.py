import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from vc_history_reader.config.loader import DEFAULTS, ConfigError, load_config, runner_config_from


class TestConfigLoader(unittest.TestCase):
    """Tests for the configuration loader."""

    def load_from_dir(self, content=None):
        with tempfile.TemporaryDirectory() as tmp:
            config_dir = Path(tmp)
            if content is not None:
                (config_dir / "config.json").write_text(content)
            with patch('vc_history_reader.config.loader._get_config_directory', return_value=config_dir):
                return load_config()

    def test_missing_file_gives_defaults(self) -> None:
        self.assertEqual(self.load_from_dir(), DEFAULTS)

    def test_load_config_success(self) -> None:
        result = self.load_from_dir(json.dumps({"git_path": "/usr/local/bin/git", "rename_workers": 4}))

        self.assertEqual(result["git_path"], "/usr/local/bin/git")
        self.assertEqual(result["rename_workers"], 4)
        self.assertEqual(result["hg_path"], "hg")

    def test_load_config_invalid_json(self) -> None:
        with self.assertRaises(ConfigError):
            self.load_from_dir("{invalid}")

    def test_load_config_not_an_object(self) -> None:
        with self.assertRaises(ConfigError):
            self.load_from_dir("[1, 2]")

    def test_unknown_key(self) -> None:
        with self.assertRaises(ConfigError):
            self.load_from_dir(json.dumps({"base_url": "http://localhost"}))

    def test_wrong_types(self) -> None:
        for bad in (
            {"git_path": 1},
            {"charset_auto_detect": "yes"},
            {"stdout_buffer_size": 0},
            {"rename_workers": True},
            {"kill_timeout": -1},
            {"output_charset": "no-such-charset"},
        ):
            with self.subTest(config=bad):
                with self.assertRaises(ConfigError):
                    self.load_from_dir(json.dumps(bad))

    def test_explicit_path(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "custom.json"
            path.write_text(json.dumps({"charset_auto_detect": False}))

            self.assertFalse(load_config(path)["charset_auto_detect"])
            with self.assertRaises(ConfigError):
                load_config(Path(tmp) / "missing.json")

    def test_runner_config_from(self) -> None:
        settings = dict(
            DEFAULTS,
            charset_auto_detect=False,
            output_charset="cp1252",
            stdout_buffer_size=1024,
            stderr_buffer_size=512,
            kill_timeout=1.5,
        )

        config = runner_config_from(settings)

        self.assertFalse(config.charset_auto_detect)
        self.assertEqual(config.output_charset, "cp1252")
        self.assertEqual((config.stdout_buffer_size, config.stderr_buffer_size), (1024, 512))
        self.assertEqual(config.kill_timeout, 1.5)
        self.assertIsNone(config.working_dir)


if __name__ == "__main__":
    unittest.main()
