from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List

from clipnotes.ids import IdFactory
from clipnotes.store import JsonStore


NOTES_KEY = "notes"
DEFAULT_TITLE = "Untitled note"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds")


@dataclass
class Note:
    id: str
    title: str = ""
    content: str = ""
    createdAt: str = ""
    updatedAt: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Note":
        return cls(
            id=str(data.get("id", "")),
            title=str(data.get("title") or ""),
            content=str(data.get("content") or ""),
            createdAt=str(data.get("createdAt") or ""),
            updatedAt=str(data.get("updatedAt") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "createdAt": self.createdAt,
            "updatedAt": self.updatedAt,
        }

    @property
    def display_title(self) -> str:
        return self.title.strip() or DEFAULT_TITLE


class NoteStore:
    def __init__(self, store: JsonStore) -> None:
        self._store = store
        self._ids = IdFactory()
        for note in self.list():
            self._ids.observe(note.id)

    def _raw(self) -> List[Dict[str, Any]]:
        notes = self._store.get(NOTES_KEY)
        if not isinstance(notes, list):
            return []
        return [n for n in notes if isinstance(n, dict)]

    def list(self) -> List[Note]:
        return [Note.from_dict(n) for n in self._raw()]

    def new_note(self) -> Note:
        stamp = utc_now_iso()
        return Note(id=self._ids.next_id(), createdAt=stamp, updatedAt=stamp)

    def upsert(self, note: Note | Dict[str, Any]) -> List[Note]:
        if isinstance(note, dict):
            note = Note.from_dict(note)
        if not note.id:
            raise ValueError("note id must not be empty")
        note.title = note.title.strip() or DEFAULT_TITLE
        stamp = utc_now_iso()
        note.createdAt = note.createdAt or stamp
        note.updatedAt = note.updatedAt or stamp
        self._ids.observe(note.id)

        notes = self._raw()
        for idx, existing in enumerate(notes):
            if str(existing.get("id")) == note.id:
                notes[idx] = note.to_dict()
                break
        else:
            notes.insert(0, note.to_dict())
        self._store.set(NOTES_KEY, notes)
        logging.info("note saved: %s", note.id)
        return self.list()

    def remove(self, note_id: str) -> List[Note]:
        notes = self._raw()
        remaining = [n for n in notes if str(n.get("id")) != note_id]
        if len(remaining) != len(notes):
            self._store.set(NOTES_KEY, remaining)
            logging.info("note deleted: %s", note_id)
        return self.list()
