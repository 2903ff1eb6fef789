from __future__ import annotations

import copy
import json
import logging
import os
from typing import Any, Dict

from clipnotes.errors import StoreError


DEFAULTS: Dict[str, Any] = {
    "notes": [],
    "clipboardHistory": [],
    "windowBounds": {"width": 900, "height": 700},
}


class JsonStore:
    """Key-value store backed by a single JSON file.

    Values are only committed in memory once the file write succeeded, so a
    failed ``set`` leaves the store exactly as it was.
    """

    def __init__(self, path: str, defaults: Dict[str, Any] | None = None) -> None:
        self._path = path
        self._defaults = copy.deepcopy(DEFAULTS if defaults is None else defaults)
        self._data: Dict[str, Any] = {}
        self._load()

    @property
    def path(self) -> str:
        return self._path

    def _load(self) -> None:
        try:
            if os.path.exists(self._path):
                with open(self._path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                if isinstance(data, dict):
                    self._data = data
                else:
                    logging.warning("store ignored non-object content: %s", self._path)
            logging.info("store loaded: %s", self._path)
        except Exception as exc:
            logging.exception("store read failed: %s", exc)
            self._data = {}

    def _write(self, data: Dict[str, Any]) -> None:
        tmp_path = self._path + ".tmp"
        try:
            os.makedirs(os.path.dirname(self._path) or ".", exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self._path)
        except (OSError, TypeError, ValueError) as exc:
            logging.exception("store write failed: %s", exc)
            raise StoreError(f"could not write {self._path}: {exc}") from exc

    def get(self, key: str) -> Any:
        if key in self._data:
            return copy.deepcopy(self._data[key])
        return copy.deepcopy(self._defaults.get(key))

    def set(self, key: str, value: Any) -> None:
        data = dict(self._data)
        data[key] = copy.deepcopy(value)
        self._write(data)
        self._data = data
