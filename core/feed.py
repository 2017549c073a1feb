"""Persisted clipboard history written by the daemon and read by the launcher.

Records are stored newest first. Each record keeps every textual format the
clipboard offered when it was captured, so that setting it back later replays
the original item rather than a reconstructed string.
"""
import os
import json
import logging
import tempfile

from core.config import CONFIG_DIR

HISTORY_FILE = os.path.join(CONFIG_DIR, "clipboard_history.json")
MAX_HISTORY = 25
TEXT_FORMAT = "text/plain"

logger = logging.getLogger("clipdeck.feed")


def record_from_formats(formats):
    return {"formats": {mime: data for mime, data in formats.items() if data}}


def record_text(record):
    """Returns the plain text payload of a record, or None if it has none."""
    formats = record.get("formats") if isinstance(record, dict) else None
    if not isinstance(formats, dict):
        return None
    text = formats.get(TEXT_FORMAT)
    return text if isinstance(text, str) else None


def push_record(records, record, limit=MAX_HISTORY):
    records = [r for r in records if r != record]
    records.insert(0, record)
    return records[:limit]


def load_history(path=None):
    path = path or HISTORY_FILE
    if not os.path.exists(path):
        return []
    try:
        with open(path, "r") as f:
            records = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Failed to read clipboard history: {e}")
        return []
    if not isinstance(records, list):
        return []
    # Histories written by older daemons were plain lists of strings
    return [r if isinstance(r, dict) else record_from_formats({TEXT_FORMAT: r})
            for r in records if isinstance(r, (dict, str))]


def save_history(records, path=None):
    path = path or HISTORY_FILE
    folder = os.path.dirname(path)
    if folder and not os.path.isdir(folder):
        os.makedirs(folder, exist_ok=True)
    # Write beside the target and swap it in, so readers never see a partial file
    fd, tmp_path = tempfile.mkstemp(prefix=".clipboard_history-", suffix=".tmp", dir=folder or ".")
    try:
        with os.fdopen(fd, "w") as f:
            json.dump(records, f)
        os.replace(tmp_path, path)
    except Exception:
        os.remove(tmp_path)
        raise


def clear_history(path=None):
    save_history([], path)


class ClipboardItem:
    """One clipboard item as the history service knows it."""

    def __init__(self, formats):
        self.formats = dict(formats)

    @classmethod
    def from_text(cls, text):
        return cls({TEXT_FORMAT: text})

    @classmethod
    def from_record(cls, record):
        return cls(record.get("formats", {}))

    @property
    def text(self):
        return record_text(self.to_record())

    def has_text(self):
        return self.text is not None

    def to_record(self):
        return {"formats": dict(self.formats)}

    def __eq__(self, other):
        return isinstance(other, ClipboardItem) and other.formats == self.formats

    def __repr__(self):
        return f"ClipboardItem({sorted(self.formats)})"
