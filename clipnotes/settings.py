from __future__ import annotations

import json
import logging
import os
from typing import Dict, Any


def data_dir() -> str:
    override = os.environ.get("CLIPNOTES_HOME", "").strip()
    if override:
        return os.path.abspath(os.path.expanduser(override))
    return os.path.join(os.path.expanduser("~"), "ClipNotes")


class AppSettings:
    def __init__(self, path: str | None = None) -> None:
        self._path = path or os.path.join(data_dir(), "settings.json")
        self._data: Dict[str, Any] = {}
        self._load()

    def _load(self) -> None:
        try:
            if os.path.exists(self._path):
                with open(self._path, "r", encoding="utf-8") as f:
                    self._data = json.load(f)
            if not isinstance(self._data, dict):
                self._data = {}
            logging.info("settings loaded: %s", self._path)
        except Exception as exc:
            logging.exception("settings read failed: %s", exc)
            self._data = {}

    def get_settings(self) -> Dict[str, Any]:
        default = {
            "poll_interval_ms": 1000,
            "debounce_ms": 1000,
            "history_limit": 200,
            "preview_chars": 300,
            "start_hidden": False,
        }
        stored = self._data.get("settings", {})
        if not isinstance(stored, dict):
            return default
        merged = default.copy()
        for key, value in stored.items():
            if key in merged:
                merged[key] = value
        return self._normalize(merged, default)

    @staticmethod
    def _normalize(values: Dict[str, Any], fallback: Dict[str, Any]) -> Dict[str, Any]:
        limits = {
            "poll_interval_ms": (100, 60000),
            "debounce_ms": (0, 60000),
            "history_limit": (1, 200),
            "preview_chars": (20, 5000),
        }
        for key, (low, high) in limits.items():
            try:
                values[key] = max(low, min(high, int(values[key])))
            except (TypeError, ValueError):
                values[key] = fallback[key]
        values["start_hidden"] = bool(values.get("start_hidden", False))
        return values
