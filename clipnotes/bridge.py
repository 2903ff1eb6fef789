from __future__ import annotations

import logging

from PySide6.QtCore import QObject, Signal, Slot

from clipnotes.clipboard import ClipboardEntry, HistoryManager
from clipnotes.errors import StoreError
from clipnotes.notes import NoteStore
from clipnotes.store import JsonStore


class BackendBridge(QObject):
    clipboardEntryAdded = Signal(dict)
    clipboardUpdated = Signal(list)
    notesUpdated = Signal(list)
    operationFailed = Signal(str)

    def __init__(self, store: JsonStore, history: HistoryManager, notes: NoteStore | None = None) -> None:
        super().__init__()
        self._store = store
        self._history = history
        self._notes = notes or NoteStore(store)
        self._window = None
        self._history.add_listener(self._on_entry_recorded)

    def set_window(self, window) -> None:
        self._window = window

    def _on_entry_recorded(self, entry: ClipboardEntry) -> None:
        if self._window is None:
            return
        self.clipboardEntryAdded.emit(entry.to_dict())

    def _fail(self, action: str, exc: Exception) -> None:
        logging.exception("%s failed: %s", action, exc)
        self.operationFailed.emit(f"{action} failed, please try again.")

    def poll_clipboard(self) -> None:
        self._history.on_tick()

    def shutdown(self) -> None:
        if not self._history.flush():
            logging.warning("history still not persisted at shutdown")

    @Slot(result=list)
    def getNotes(self) -> list:
        return [n.to_dict() for n in self._notes.list()]

    @Slot(result=dict)
    def newNote(self) -> dict:
        return self._notes.new_note().to_dict()

    @Slot(dict, result=list)
    def saveNote(self, note: dict) -> list:
        try:
            notes = self._notes.upsert(note)
        except (StoreError, ValueError) as exc:
            self._fail("Saving the note", exc)
            return self.getNotes()
        payload = [n.to_dict() for n in notes]
        self.notesUpdated.emit(payload)
        return payload

    @Slot(str, result=list)
    def deleteNote(self, note_id: str) -> list:
        try:
            notes = self._notes.remove(note_id)
        except StoreError as exc:
            self._fail("Deleting the note", exc)
            return self.getNotes()
        payload = [n.to_dict() for n in notes]
        self.notesUpdated.emit(payload)
        return payload

    @Slot(result=list)
    def getClipboard(self) -> list:
        return [e.to_dict() for e in self._history.list()]

    @Slot(str)
    def copyToClipboard(self, text: str) -> None:
        self._history.copy_out(text)

    @Slot(str, result=list)
    def deleteClipboardEntry(self, entry_id: str) -> list:
        try:
            entries = self._history.remove(entry_id)
        except StoreError as exc:
            self._fail("Deleting the entry", exc)
            return self.getClipboard()
        payload = [e.to_dict() for e in entries]
        self.clipboardUpdated.emit(payload)
        return payload

    @Slot(result=list)
    def clearClipboard(self) -> list:
        try:
            self._history.clear()
        except StoreError as exc:
            self._fail("Clearing the clipboard history", exc)
            return self.getClipboard()
        self.clipboardUpdated.emit([])
        return []

    @Slot(result=dict)
    def getWindowBounds(self) -> dict:
        bounds = self._store.get("windowBounds")
        if not isinstance(bounds, dict):
            bounds = {}
        try:
            width = int(bounds.get("width", 900))
            height = int(bounds.get("height", 700))
        except (TypeError, ValueError):
            width, height = 900, 700
        return {"width": width, "height": height}

    @Slot(int, int)
    def setWindowBounds(self, width: int, height: int) -> None:
        try:
            self._store.set("windowBounds", {"width": int(width), "height": int(height)})
        except StoreError as exc:
            logging.warning("window bounds not saved: %s", exc)
