from __future__ import annotations

import logging
import os
import sys

from PySide6.QtCore import QTimer
from PySide6.QtGui import QIcon
from PySide6.QtWidgets import QApplication, QMenu, QStyle, QSystemTrayIcon

from clipnotes.bridge import BackendBridge
from clipnotes.clipboard import HistoryManager
from clipnotes.main_window import MainWindow
from clipnotes.notes import NoteStore
from clipnotes.sampler import QtClipboardSampler
from clipnotes.settings import AppSettings, data_dir
from clipnotes.store import JsonStore


ASSETS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "assets")


def main() -> None:
    base_dir = data_dir()
    os.makedirs(base_dir, exist_ok=True)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.FileHandler(os.path.join(base_dir, "app.log"), encoding="utf-8"),
            logging.StreamHandler(sys.stdout),
        ],
    )
    logging.info("app start: data=%s", base_dir)

    app = QApplication(sys.argv)
    app.setApplicationName("ClipNotes")
    app.setQuitOnLastWindowClosed(False)

    settings = AppSettings(os.path.join(base_dir, "settings.json"))
    config = settings.get_settings()
    store = JsonStore(os.path.join(base_dir, "clipnotes.json"))
    history = HistoryManager(
        store,
        QtClipboardSampler(app.clipboard()),
        max_items=config["history_limit"],
        debounce_sec=config["debounce_ms"] / 1000.0,
    )
    notes = NoteStore(store)
    bridge = BackendBridge(store, history, notes)
    window = MainWindow(bridge, preview_chars=config["preview_chars"])

    tray_icon_path = os.path.join(ASSETS_DIR, "tray_icon.png")
    if os.path.exists(tray_icon_path):
        tray_icon = QIcon(tray_icon_path)
    else:
        tray_icon = app.style().standardIcon(QStyle.StandardPixmap.SP_FileDialogContentsView)
    app.setWindowIcon(tray_icon)

    tray = QSystemTrayIcon(tray_icon)
    tray.setToolTip("ClipNotes")

    def quit_app() -> None:
        logging.info("exit requested")
        window.allow_exit()
        tray.hide()
        app.quit()

    menu = QMenu()
    menu.addAction("Open").triggered.connect(window.show_window)
    menu.addSeparator()
    menu.addAction("Quit").triggered.connect(quit_app)
    tray.setContextMenu(menu)

    def on_tray_activated(reason) -> None:
        if reason == QSystemTrayIcon.DoubleClick:
            window.show_window()

    tray.activated.connect(on_tray_activated)
    tray.show()

    def show_message(text: str) -> None:
        tray.showMessage("ClipNotes", text, QSystemTrayIcon.Information, 2000)

    window.messageRequested.connect(show_message)

    if not config["start_hidden"]:
        window.show_window()
        logging.info("window shown")

    clipboard_timer = QTimer()
    clipboard_timer.timeout.connect(bridge.poll_clipboard)
    clipboard_timer.start(config["poll_interval_ms"])

    app.aboutToQuit.connect(bridge.shutdown)
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
