#!/usr/bin/env python3
"""
Tests for configuration loading and validation.
"""

import os
import shutil
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

sys.path.insert(0, str(Path(__file__).parent))

from aursync.config import DEFAULT_AUR_URL, Config, load_configuration, validate_configuration


class TestConfig(unittest.TestCase):

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_defaults(self):
        config = Config()

        self.assertEqual(config.cache_dir, (Path.home() / ".cache" / "aursync").resolve())
        self.assertEqual(config.aur_url, DEFAULT_AUR_URL)
        self.assertEqual(config.branch, "master")
        self.assertEqual(config.log_level, "INFO")

    def test_normalization(self):
        config = Config(cache_dir=str(self.temp_dir / "cache"), aur_url="https://aur.example.org/", log_level="debug")

        self.assertEqual(config.cache_dir, (self.temp_dir / "cache").resolve())
        self.assertEqual(config.aur_url, "https://aur.example.org")
        self.assertEqual(config.log_level, "DEBUG")
        self.assertEqual(config.package_url("foo"), "https://aur.example.org/foo")

    def test_invalid_values(self):
        with self.assertRaises(ValueError):
            Config(log_level="LOUD")
        with self.assertRaises(ValueError):
            Config(branch="")
        with self.assertRaises(ValueError):
            Config(request_timeout=0)
        with self.assertRaises(ValueError):
            Config(fetch_timeout=-1)

    def test_load_from_environment(self):
        env = {
            "AUR_CACHE_DIR": str(self.temp_dir / "aur"),
            "AURSYNC_AUR_URL": "https://mirror.example.org",
            "AURSYNC_BRANCH": "main",
            "AURSYNC_LOG_LEVEL": "warning",
            "AURSYNC_REQUEST_TIMEOUT": "5",
            "AURSYNC_FETCH_TIMEOUT": "60",
        }
        with patch.dict(os.environ, env):
            config = load_configuration()

        self.assertEqual(config.cache_dir, (self.temp_dir / "aur").resolve())
        self.assertEqual(config.aur_url, "https://mirror.example.org")
        self.assertEqual(config.branch, "main")
        self.assertEqual(config.log_level, "WARNING")
        self.assertEqual(config.request_timeout, 5.0)
        self.assertEqual(config.fetch_timeout, 60.0)

    def test_load_rejects_bad_numbers(self):
        with patch.dict(os.environ, {"AURSYNC_FETCH_TIMEOUT": "soon"}):
            with self.assertRaises(ValueError) as ctx:
                load_configuration()
        self.assertIn("Configuration error", str(ctx.exception))

    def test_validate_creates_cache_dir(self):
        config = Config(cache_dir=self.temp_dir / "new" / "cache")

        self.assertEqual(validate_configuration(config), [])
        self.assertTrue(config.cache_dir.is_dir())

    def test_validate_warns_about_odd_url(self):
        config = Config(cache_dir=self.temp_dir, aur_url="aur.example.org")

        issues = validate_configuration(config)

        self.assertEqual(len(issues), 1)
        self.assertTrue(issues[0].startswith("WARNING"))

    def test_validate_reports_unusable_cache_dir(self):
        blocker = self.temp_dir / "file"
        blocker.write_text("x")
        config = Config(cache_dir=blocker / "cache")

        issues = validate_configuration(config)

        self.assertTrue(issues[0].startswith("ERROR"))


if __name__ == "__main__":
    unittest.main()
