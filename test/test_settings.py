import json
import os
import tempfile
import unittest
from unittest import mock

from clipnotes.settings import AppSettings, data_dir


class AppSettingsTests(unittest.TestCase):
    def test_defaults(self):
        with tempfile.TemporaryDirectory() as tmp:
            settings = AppSettings(os.path.join(tmp, "settings.json"))
            data = settings.get_settings()
            self.assertEqual(data["poll_interval_ms"], 1000)
            self.assertEqual(data["debounce_ms"], 1000)
            self.assertEqual(data["history_limit"], 200)
            self.assertFalse(data["start_hidden"])

    def test_stored_values_are_clamped(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "settings.json")
            with open(path, "w", encoding="utf-8") as f:
                json.dump({"settings": {"poll_interval_ms": 5, "history_limit": "50", "unknown": 1}}, f)
            data = AppSettings(path).get_settings()
            self.assertEqual(data["poll_interval_ms"], 100)
            self.assertEqual(data["history_limit"], 50)
            self.assertNotIn("unknown", data)

    def test_history_limit_never_exceeds_200(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "settings.json")
            with open(path, "w", encoding="utf-8") as f:
                json.dump({"settings": {"history_limit": 1000}}, f)
            self.assertEqual(AppSettings(path).get_settings()["history_limit"], 200)

    def test_invalid_stored_value_falls_back(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "settings.json")
            with open(path, "w", encoding="utf-8") as f:
                json.dump({"settings": {"debounce_ms": "soon"}}, f)
            self.assertEqual(AppSettings(path).get_settings()["debounce_ms"], 1000)

    def test_data_dir_override(self):
        with tempfile.TemporaryDirectory() as tmp:
            with mock.patch.dict(os.environ, {"CLIPNOTES_HOME": tmp}):
                self.assertEqual(data_dir(), os.path.abspath(tmp))
            with mock.patch.dict(os.environ, {"CLIPNOTES_HOME": ""}):
                self.assertTrue(data_dir().endswith("ClipNotes"))


if __name__ == "__main__":
    unittest.main()
