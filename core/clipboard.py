import os
import logging
import threading

from PyQt6.QtCore import QObject, QMimeData, QFileSystemWatcher, pyqtSignal
from PyQt6.QtGui import QClipboard
from PyQt6.QtWidgets import QApplication

from core import config, feed
from core.feed import ClipboardItem

# Formats captured and replayed; anything else is left on the clipboard owner
TEXT_FORMATS = ("text/plain", "text/html", "text/uri-list")


def item_from_mime(mime_data):
    if mime_data is None:
        return None
    formats = {}
    for mime in TEXT_FORMATS:
        if mime_data.hasFormat(mime):
            data = bytes(mime_data.data(mime)).decode("utf-8", errors="replace")
            if data:
                formats[mime] = data
    if not formats and mime_data.hasText() and mime_data.text():
        formats[feed.TEXT_FORMAT] = mime_data.text()
    return ClipboardItem(formats) if formats else None


def mime_from_item(item):
    mime_data = QMimeData()
    for mime, data in item.formats.items():
        if mime == feed.TEXT_FORMAT:
            mime_data.setText(data)
        elif mime == "text/html":
            mime_data.setHtml(data)
        else:
            mime_data.setData(mime, data.encode("utf-8"))
    return mime_data


class QtClipboardAPI(QObject):
    """Clipboard and clipboard-history service backed by QClipboard and the daemon's feed.

    Must be created on the GUI thread. ``get_content``, ``set_content`` and
    ``set_text`` may be called from any thread: reads come from a snapshot
    refreshed on every clipboard change and writes are queued onto the GUI
    thread.
    """

    _content_requested = pyqtSignal(object)

    def __init__(self, history_file=None, config_file=None, parent=None):
        super().__init__(parent)
        self.history_file = history_file or feed.HISTORY_FILE
        self.config_file = config_file
        self.logger = logging.getLogger("clipdeck.clipboard")
        self.clipboard = QApplication.clipboard()
        self._lock = threading.Lock()
        self._content = None
        self._subscribers = []
        self._newest = None

        self._content_requested.connect(self._apply_content)
        self.clipboard.dataChanged.connect(self._refresh_content)
        self._refresh_content()

        history_dir = os.path.dirname(self.history_file)
        os.makedirs(history_dir, exist_ok=True)
        self.watcher = QFileSystemWatcher(self)
        self.watcher.addPath(history_dir)
        if os.path.exists(self.history_file):
            self.watcher.addPath(self.history_file)
        self.watcher.fileChanged.connect(self._on_feed_changed)
        self.watcher.directoryChanged.connect(self._on_feed_changed)
        records = feed.load_history(self.history_file)
        self._newest = records[0] if records else None

    def is_history_enabled(self):
        return config.is_history_enabled(self.config_file)

    def enable_history(self):
        config.set_history_enabled(True, self.config_file)

    def get_history_items(self):
        return [ClipboardItem.from_record(r) for r in feed.load_history(self.history_file)]

    def get_content(self):
        with self._lock:
            return self._content

    def set_content(self, item):
        self._content_requested.emit(item)

    def set_text(self, text):
        self.set_content(ClipboardItem.from_text(text))

    def clear_history(self):
        feed.clear_history(self.history_file)
        self._newest = None

    def subscribe(self, callback):
        self._subscribers.append(callback)

    def _apply_content(self, item):
        mime_data = mime_from_item(item)
        self.clipboard.setMimeData(mime_data, QClipboard.Mode.Clipboard)
        if self.clipboard.supportsSelection():
            self.clipboard.setMimeData(mime_from_item(item), QClipboard.Mode.Selection)
        self.logger.debug(f"Clipboard set: {(item.text or '')[:20]}...")

    def _refresh_content(self):
        try:
            item = item_from_mime(self.clipboard.mimeData(QClipboard.Mode.Clipboard))
        except Exception as e:
            self.logger.warning(f"Could not read clipboard: {e}")
            return
        with self._lock:
            self._content = item

    def _on_feed_changed(self, path):
        # Rewriting the file can drop it from the watch list
        if os.path.exists(self.history_file) and self.history_file not in self.watcher.files():
            self.watcher.addPath(self.history_file)

        records = feed.load_history(self.history_file)
        newest = records[0] if records else None
        if newest is None or newest == self._newest:
            return
        self._newest = newest
        # Pick up the latest content before consumers read it
        self._refresh_content()
        for callback in list(self._subscribers):
            callback(newest)
