from __future__ import annotations

import logging

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QKeySequence, QShortcut
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QMessageBox,
    QPlainTextEdit,
    QPushButton,
    QStackedWidget,
    QTabWidget,
    QToolButton,
    QVBoxLayout,
    QWidget,
)

from clipnotes.bridge import BackendBridge
from clipnotes.clipboard import ClipboardEntry
from clipnotes.formatting import (
    filter_entries,
    filter_notes,
    format_entry_time,
    format_relative,
    preview,
)
from clipnotes.notes import Note, utc_now_iso


NOTES_TAB = 0
CLIPBOARD_TAB = 1
NOTE_PREVIEW_CHARS = 120


class NoteCard(QWidget):
    deleteRequested = Signal(str)

    def __init__(self, note: Note, parent=None) -> None:
        super().__init__(parent)
        self.note_id = note.id

        title = QLabel(note.display_title)
        title.setStyleSheet("font-weight: bold;")
        body = QLabel(preview(note.content, NOTE_PREVIEW_CHARS) or "Empty...")
        body.setWordWrap(True)
        body.setStyleSheet("color: #8a8f98;")
        date = QLabel(format_relative(note.updatedAt))

        delete_button = QToolButton()
        delete_button.setText("✕")
        delete_button.setToolTip("Delete")
        delete_button.clicked.connect(lambda: self.deleteRequested.emit(self.note_id))

        meta = QHBoxLayout()
        meta.addWidget(date)
        meta.addStretch()
        meta.addWidget(delete_button)

        layout = QVBoxLayout()
        layout.setContentsMargins(8, 6, 8, 6)
        layout.addWidget(title)
        layout.addWidget(body)
        layout.addLayout(meta)
        self.setLayout(layout)


class EntryRow(QWidget):
    copyRequested = Signal(str)
    deleteRequested = Signal(str)

    def __init__(self, entry: ClipboardEntry, preview_chars: int, parent=None) -> None:
        super().__init__(parent)
        self.entry_id = entry.id
        self.text = entry.text

        label = QLabel(preview(entry.text, preview_chars))
        label.setWordWrap(True)
        label.setToolTip("Click to copy")
        label.setTextInteractionFlags(Qt.NoTextInteraction)

        copy_button = QToolButton()
        copy_button.setText("Copy")
        copy_button.clicked.connect(lambda: self.copyRequested.emit(self.text))
        delete_button = QToolButton()
        delete_button.setText("✕")
        delete_button.setToolTip("Delete")
        delete_button.clicked.connect(lambda: self.deleteRequested.emit(self.entry_id))

        meta = QHBoxLayout()
        meta.addWidget(QLabel(format_entry_time(entry.timestamp)))
        meta.addStretch()
        meta.addWidget(copy_button)
        meta.addWidget(delete_button)

        layout = QVBoxLayout()
        layout.setContentsMargins(8, 6, 8, 6)
        layout.addWidget(label)
        layout.addLayout(meta)
        self.setLayout(layout)

    def mousePressEvent(self, event) -> None:
        if event.button() == Qt.LeftButton:
            self.copyRequested.emit(self.text)
            event.accept()
            return
        super().mousePressEvent(event)


class MainWindow(QWidget):
    messageRequested = Signal(str)

    def __init__(self, bridge: BackendBridge, preview_chars: int = 300) -> None:
        super().__init__()
        self._bridge = bridge
        self._preview_chars = preview_chars
        self._editing: Note | None = None
        self._unread = 0
        self._allow_exit = False

        self.setWindowTitle("ClipNotes")
        self.setMinimumSize(600, 500)
        bounds = bridge.getWindowBounds()
        self.resize(max(600, bounds["width"]), max(500, bounds["height"]))

        self.search = QLineEdit()
        self.search.setPlaceholderText("Search...")
        self.search.setClearButtonEnabled(True)
        self.search.textChanged.connect(lambda _: self.refresh())

        self.tabs = QTabWidget()
        self.tabs.addTab(self._build_notes_tab(), "Notes")
        self.tabs.addTab(self._build_clipboard_tab(), "Clipboard")
        self.tabs.currentChanged.connect(self._on_tab_changed)

        layout = QVBoxLayout()
        layout.addWidget(self.search)
        layout.addWidget(self.tabs)
        self.setLayout(layout)

        QShortcut(QKeySequence("Ctrl+N"), self, activated=self.new_note)
        QShortcut(QKeySequence("Ctrl+F"), self, activated=self._focus_search)
        QShortcut(QKeySequence(Qt.Key_Escape), self, activated=self._on_escape)

        bridge.clipboardEntryAdded.connect(self._on_entry_added)
        bridge.operationFailed.connect(self.messageRequested.emit)
        bridge.set_window(self)

        self.load_notes()
        self.load_clipboard()

    def _build_notes_tab(self) -> QWidget:
        new_button = QPushButton("New note")
        new_button.clicked.connect(self.new_note)
        header = QHBoxLayout()
        header.addWidget(QLabel("Notes"))
        header.addStretch()
        header.addWidget(new_button)

        self.notes_list = QListWidget()
        self.notes_list.itemClicked.connect(self._on_note_clicked)
        self.notes_empty = QLabel()
        self.notes_empty.setAlignment(Qt.AlignCenter)

        list_page = QWidget()
        list_layout = QVBoxLayout()
        list_layout.setContentsMargins(0, 0, 0, 0)
        list_layout.addLayout(header)
        list_layout.addWidget(self.notes_empty)
        list_layout.addWidget(self.notes_list)
        list_page.setLayout(list_layout)

        self.note_title = QLineEdit()
        self.note_title.setPlaceholderText("Title")
        self.note_content = QPlainTextEdit()
        back_button = QPushButton("Back")
        back_button.clicked.connect(self.hide_editor)
        save_button = QPushButton("Save")
        save_button.clicked.connect(self.save_note)
        buttons = QHBoxLayout()
        buttons.addWidget(back_button)
        buttons.addStretch()
        buttons.addWidget(save_button)

        editor_page = QWidget()
        editor_layout = QVBoxLayout()
        editor_layout.setContentsMargins(0, 0, 0, 0)
        editor_layout.addLayout(buttons)
        editor_layout.addWidget(self.note_title)
        editor_layout.addWidget(self.note_content)
        editor_page.setLayout(editor_layout)

        self.notes_stack = QStackedWidget()
        self.notes_stack.addWidget(list_page)
        self.notes_stack.addWidget(editor_page)
        return self.notes_stack

    def _build_clipboard_tab(self) -> QWidget:
        self.clip_count = QLabel("0 entries")
        clear_button = QPushButton("Clear all")
        clear_button.clicked.connect(self.clear_clipboard)
        header = QHBoxLayout()
        header.addWidget(self.clip_count)
        header.addStretch()
        header.addWidget(clear_button)

        self.clip_list = QListWidget()
        self.clip_empty = QLabel()
        self.clip_empty.setAlignment(Qt.AlignCenter)

        page = QWidget()
        layout = QVBoxLayout()
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addLayout(header)
        layout.addWidget(self.clip_empty)
        layout.addWidget(self.clip_list)
        page.setLayout(layout)
        return page

    def refresh(self) -> None:
        if self.tabs.currentIndex() == NOTES_TAB:
            self.load_notes()
        else:
            self.load_clipboard()

    def load_notes(self) -> None:
        query = self.search.text()
        notes = filter_notes(self._bridge_notes(), query)
        self.notes_list.clear()
        self.notes_empty.setText("No results" if query else "No notes yet.\nCreate your first note!")
        self.notes_empty.setVisible(not notes)
        for note in notes:
            card = NoteCard(note)
            card.deleteRequested.connect(self.delete_note)
            item = QListWidgetItem()
            item.setData(Qt.UserRole, note.id)
            item.setSizeHint(card.sizeHint())
            self.notes_list.addItem(item)
            self.notes_list.setItemWidget(item, card)

    def load_clipboard(self) -> None:
        query = self.search.text()
        entries = filter_entries(self._bridge_entries(), query)
        self.clip_count.setText(f"{len(entries)} entries")
        self.clip_list.clear()
        self.clip_empty.setText("No results" if query else "Clipboard history is empty.\nCopy something with Ctrl+C!")
        self.clip_empty.setVisible(not entries)
        for entry in entries:
            row = EntryRow(entry, self._preview_chars)
            row.copyRequested.connect(self.copy_text)
            row.deleteRequested.connect(self.delete_entry)
            item = QListWidgetItem()
            item.setSizeHint(row.sizeHint())
            self.clip_list.addItem(item)
            self.clip_list.setItemWidget(item, row)

    def _bridge_notes(self) -> list[Note]:
        return [Note.from_dict(n) for n in self._bridge.getNotes()]

    def _bridge_entries(self) -> list[ClipboardEntry]:
        return [ClipboardEntry.from_dict(e) for e in self._bridge.getClipboard()]

    def new_note(self) -> None:
        self.tabs.setCurrentIndex(NOTES_TAB)
        self._editing = Note.from_dict(self._bridge.newNote())
        self.show_editor()

    def show_editor(self) -> None:
        if self._editing is None:
            return
        self.note_title.setText(self._editing.title)
        self.note_content.setPlainText(self._editing.content)
        self.notes_stack.setCurrentIndex(1)
        self.note_title.setFocus()

    def hide_editor(self) -> None:
        self._editing = None
        self.notes_stack.setCurrentIndex(0)

    def save_note(self) -> None:
        if self._editing is None:
            return
        note = self._editing
        note.title = self.note_title.text().strip()
        note.content = self.note_content.toPlainText()
        note.updatedAt = utc_now_iso()
        saved = self._bridge.saveNote(note.to_dict())
        # a failed save returns the old list and keeps the editor open
        if any(n.get("id") == note.id and n.get("updatedAt") == note.updatedAt for n in saved):
            self.hide_editor()
            self.messageRequested.emit("Note saved")
        self.load_notes()

    def delete_note(self, note_id: str) -> None:
        remaining = self._bridge.deleteNote(note_id)
        if not any(n.get("id") == note_id for n in remaining):
            self.messageRequested.emit("Note deleted")
        self.load_notes()

    def _on_note_clicked(self, item: QListWidgetItem) -> None:
        note_id = item.data(Qt.UserRole)
        for note in self._bridge_notes():
            if note.id == note_id:
                self._editing = note
                self.show_editor()
                return

    def copy_text(self, text: str) -> None:
        self._bridge.copyToClipboard(text)
        self.messageRequested.emit("Copied to clipboard")

    def delete_entry(self, entry_id: str) -> None:
        self._bridge.deleteClipboardEntry(entry_id)
        self.load_clipboard()

    def clear_clipboard(self) -> None:
        answer = QMessageBox.question(self, "ClipNotes", "Delete all clipboard entries?")
        if answer != QMessageBox.Yes:
            return
        if not self._bridge.clearClipboard():
            self.messageRequested.emit("Clipboard history cleared")
        self.load_clipboard()

    def _on_entry_added(self, entry: dict) -> None:
        if self.tabs.currentIndex() != CLIPBOARD_TAB:
            self._unread += 1
            self.tabs.setTabText(CLIPBOARD_TAB, f"Clipboard ({self._unread})")
        logging.debug("entry shown: %s", entry.get("id"))
        self.load_clipboard()

    def _on_tab_changed(self, index: int) -> None:
        if index == CLIPBOARD_TAB:
            self._unread = 0
            self.tabs.setTabText(CLIPBOARD_TAB, "Clipboard")
        self.search.blockSignals(True)
        self.search.clear()
        self.search.blockSignals(False)
        self.refresh()

    def _focus_search(self) -> None:
        self.search.setFocus()
        self.search.selectAll()

    def _on_escape(self) -> None:
        if self.notes_stack.currentIndex() == 1:
            self.hide_editor()
        else:
            self.search.clear()

    def show_window(self) -> None:
        self.show()
        self.raise_()
        self.activateWindow()

    def allow_exit(self) -> None:
        self._allow_exit = True

    def resizeEvent(self, event) -> None:
        size = event.size()
        self._bridge.setWindowBounds(size.width(), size.height())
        super().resizeEvent(event)

    def closeEvent(self, event) -> None:
        if self._allow_exit:
            super().closeEvent(event)
            return
        event.ignore()
        self.hide()
