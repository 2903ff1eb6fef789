from __future__ import annotations

import logging


class QtClipboardSampler:
    """Plain-text access to the system clipboard through Qt.

    Needs a live ``QGuiApplication``; an unavailable clipboard reads as "".
    """

    def __init__(self, clipboard=None) -> None:
        self._clipboard = clipboard

    def _get(self):
        if self._clipboard is None:
            from PySide6.QtGui import QGuiApplication

            self._clipboard = QGuiApplication.clipboard()
        return self._clipboard

    def read(self) -> str:
        clipboard = self._get()
        if clipboard is None:
            return ""
        return clipboard.text() or ""

    def write(self, text: str) -> None:
        clipboard = self._get()
        if clipboard is None:
            logging.warning("clipboard unavailable, write skipped")
            return
        clipboard.setText(text)


class MemorySampler:
    """In-process clipboard used when no GUI clipboard is available."""

    def __init__(self, text: str = "") -> None:
        self.text = text

    def read(self) -> str:
        return self.text

    def write(self, text: str) -> None:
        self.text = text
