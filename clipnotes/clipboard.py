from __future__ import annotations

import logging
import time
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List

from clipnotes.errors import StoreError
from clipnotes.ids import IdFactory
from clipnotes.store import JsonStore


HISTORY_KEY = "clipboardHistory"
DEFAULT_HISTORY_LIMIT = 200
DEFAULT_DEBOUNCE_SEC = 1.0


@dataclass(frozen=True)
class ClipboardEntry:
    id: str
    text: str
    timestamp: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClipboardEntry":
        return cls(
            id=str(data.get("id", "")),
            text=str(data.get("text", "")),
            timestamp=str(data.get("timestamp", "")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class HistoryManager:
    """Turns clipboard samples into a bounded, newest-first history.

    A change is evaluated exactly once: the observed text is updated before
    the debounce and duplicate checks run, so a rejected change is not
    reconsidered on later ticks. Debounce is checked before the head
    duplicate check.
    """

    def __init__(
        self,
        store: JsonStore,
        sampler,
        max_items: int = DEFAULT_HISTORY_LIMIT,
        debounce_sec: float = DEFAULT_DEBOUNCE_SEC,
    ) -> None:
        self._store = store
        self._sampler = sampler
        self._max_items = min(DEFAULT_HISTORY_LIMIT, max(1, int(max_items)))
        self._debounce_sec = max(0.0, float(debounce_sec))
        self._entries: List[ClipboardEntry] = []
        self._listeners: List[Callable[[ClipboardEntry], None]] = []
        self._dirty = False
        self._load()
        self._ids = IdFactory(self._entries[0].id if self._entries else None)
        self.last_observed_text = self._read_clipboard()
        self.last_accepted_at: float | None = None

    def _load(self) -> None:
        raw = self._store.get(HISTORY_KEY)
        if not isinstance(raw, list):
            raw = []
        entries = []
        for item in raw:
            if not isinstance(item, dict):
                continue
            entry = ClipboardEntry.from_dict(item)
            if entry.text:
                entries.append(entry)
        self._entries = entries[: self._max_items]

    def _read_clipboard(self) -> str:
        try:
            return self._sampler.read() or ""
        except Exception as exc:
            logging.exception("clipboard read failed: %s", exc)
            return ""

    def _persist(self) -> bool:
        try:
            self._store.set(HISTORY_KEY, [e.to_dict() for e in self._entries])
        except StoreError as exc:
            self._dirty = True
            logging.warning("history not persisted, will retry on next change: %s", exc)
            return False
        self._dirty = False
        return True

    def add_listener(self, callback: Callable[[ClipboardEntry], None]) -> None:
        self._listeners.append(callback)

    def on_tick(self, now: float | None = None) -> ClipboardEntry | None:
        text = self._read_clipboard()
        if not text or text == self.last_observed_text:
            return None
        self.last_observed_text = text
        if now is None:
            now = time.monotonic()
        if self.last_accepted_at is not None and now - self.last_accepted_at < self._debounce_sec:
            logging.debug("clipboard change debounced")
            return None
        if self._entries and self._entries[0].text == text:
            return None

        entry = ClipboardEntry(
            id=self._ids.next_id(),
            text=text,
            timestamp=datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
        )
        self._entries.insert(0, entry)
        del self._entries[self._max_items:]
        self._persist()
        self.last_accepted_at = now
        logging.info("history entry recorded: id=%s len=%d", entry.id, len(text))
        for callback in list(self._listeners):
            try:
                callback(entry)
            except Exception as exc:
                logging.exception("history listener failed: %s", exc)
        return entry

    def record_external_copy(self, text: str) -> None:
        self.last_observed_text = text

    def list(self) -> List[ClipboardEntry]:
        return list(self._entries)

    def remove(self, entry_id: str) -> List[ClipboardEntry]:
        remaining = [e for e in self._entries if e.id != entry_id]
        if len(remaining) != len(self._entries):
            self._commit(remaining)
        elif self._dirty:
            self._persist()
        return self.list()

    def clear(self) -> List[ClipboardEntry]:
        self._commit([])
        return []

    def copy_out(self, text: str) -> None:
        self._sampler.write(text)
        self.record_external_copy(text)

    def flush(self) -> bool:
        if not self._dirty:
            return True
        return self._persist()

    def _commit(self, entries: List[ClipboardEntry]) -> None:
        self._store.set(HISTORY_KEY, [e.to_dict() for e in entries])
        self._entries = entries
        self._dirty = False
