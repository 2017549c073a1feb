#!/usr/bin/env python3
import sys

from PyQt6.QtWidgets import QApplication
from PyQt6.QtGui import QClipboard

from core import feed
from core.clipboard import item_from_mime
from core.config import is_history_enabled


class ClipboardDaemon:
    def __init__(self, history_file=None, config_file=None):
        self.app = QApplication.instance() or QApplication(sys.argv)
        self.clipboard = self.app.clipboard()
        self.clipboard.dataChanged.connect(self.on_clipboard_change)
        self.history_file = history_file or feed.HISTORY_FILE
        self.config_file = config_file
        self.history = feed.load_history(self.history_file)

        print("clipdeck-daemon started. Monitoring clipboard...")

    def on_clipboard_change(self):
        if not is_history_enabled(self.config_file):
            return

        item = item_from_mime(self.clipboard.mimeData(QClipboard.Mode.Clipboard))
        if item is None:
            return

        # The launcher may have cleared the file since the last capture
        self.history = feed.load_history(self.history_file)
        record = item.to_record()
        # Ignore a duplicate of the newest stored item
        if self.history and self.history[0] == record:
            return

        text = item.text or ""
        print(f"Captured: {text[:20]}...")

        self.history = feed.push_record(self.history, record)

        try:
            feed.save_history(self.history, self.history_file)
        except OSError as e:
            print(f"Failed to save clipboard history: {e}", file=sys.stderr)

    def run(self):
        sys.exit(self.app.exec())


def main():
    daemon = ClipboardDaemon()
    daemon.run()


if __name__ == "__main__":
    main()
