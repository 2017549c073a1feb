import queue
import logging
import threading

_STOP = object()


class HistoryEntry:
    """A clipboard text snapshot plus the item it came from."""

    def __init__(self, text, handle=None):
        self.text = text
        # Original clipboard item, replayed as-is when the entry is pasted
        self.handle = handle

    def __eq__(self, other):
        return isinstance(other, HistoryEntry) and other.text == self.text

    def __hash__(self):
        return hash(self.text)

    def __repr__(self):
        preview = self.text if len(self.text) <= 20 else self.text[:17] + "..."
        return f"HistoryEntry({preview!r})"


class HistoryStore:
    """Deduplicated clipboard history, most recent first.

    The store is seeded from the clipboard API's current history when it is
    created. After ``start()`` every change notification is queued and applied
    by a single consumer thread, which is the only writer besides ``clear()``.
    Readers get list snapshots taken under the lock.
    """

    def __init__(self, api):
        self.api = api
        self.logger = logging.getLogger("clipdeck.history")
        self._entries = {}
        self._lock = threading.Lock()
        self._changes = queue.Queue()
        self._worker = None
        self._load_snapshot()

    def _load_snapshot(self):
        try:
            items = self.api.get_history_items()
        except Exception as e:
            self.logger.error(f"Failed to load clipboard history: {e}")
            return

        # The API lists newest first; insert oldest first so order is preserved
        for item in reversed(items):
            if not item.has_text():
                continue
            self.add(item.text, item)

    def start(self):
        if self._worker is not None:
            return
        self._worker = threading.Thread(target=self._run, name="clipdeck-history", daemon=True)
        self._worker.start()
        self.api.subscribe(self.on_external_change)

    def stop(self):
        if self._worker is None:
            return
        self._changes.put(_STOP)
        self._worker.join()
        self._worker = None

    def on_external_change(self, notification=None):
        """Queues a change; the payload itself is ignored."""
        self._changes.put(notification)

    def flush(self):
        """Blocks until every queued change has been applied."""
        self._changes.join()

    def _run(self):
        while True:
            notification = self._changes.get()
            try:
                if notification is _STOP:
                    return
                self._apply_change()
            finally:
                self._changes.task_done()

    def _apply_change(self):
        # The notification only says something changed, so read whatever is
        # active now. A copy made before this read completes may be skipped.
        try:
            item = self.api.get_content()
        except Exception as e:
            self.logger.warning(f"Dropping clipboard update: {e}")
            return

        if item is None or not item.has_text():
            return
        self.add(item.text, item)

    def add(self, text, handle=None):
        with self._lock:
            if text in self._entries:
                return False
            self._entries[text] = HistoryEntry(text, handle)
        self.logger.debug(f"Captured: {text[:20]}...")
        return True

    def items(self):
        with self._lock:
            entries = list(self._entries.values())
        entries.reverse()
        return entries

    def clear(self):
        with self._lock:
            self._entries.clear()
        try:
            self.api.clear_history()
        except Exception as e:
            self.logger.error(f"Failed to clear clipboard history: {e}")

    def __len__(self):
        with self._lock:
            return len(self._entries)
