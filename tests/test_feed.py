import os
import json
import tempfile
import unittest
from unittest import mock

from core import feed
from core.feed import ClipboardItem


class FeedFileTests(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.path = os.path.join(self.tmp.name, "history", "clipboard_history.json")

    def test_missing_file_is_empty(self):
        self.assertEqual(feed.load_history(self.path), [])

    def test_saved_records_are_loaded_in_order(self):
        records = [feed.record_from_formats({"text/plain": t}) for t in ("new", "old")]
        feed.save_history(records, self.path)
        self.assertEqual([feed.record_text(r) for r in feed.load_history(self.path)], ["new", "old"])

    def test_plain_string_history_is_upgraded(self):
        os.makedirs(os.path.dirname(self.path))
        with open(self.path, "w") as f:
            json.dump(["a", "b"], f)
        self.assertEqual(feed.load_history(self.path), [
            {"formats": {"text/plain": "a"}},
            {"formats": {"text/plain": "b"}},
        ])

    def test_corrupt_file_is_logged_and_empty(self):
        os.makedirs(os.path.dirname(self.path))
        with open(self.path, "w") as f:
            f.write("[{")
        with self.assertLogs("clipdeck.feed", level="ERROR"):
            self.assertEqual(feed.load_history(self.path), [])

    def test_failed_save_keeps_previous_file(self):
        feed.save_history([feed.record_from_formats({"text/plain": "old"})], self.path)
        with mock.patch.object(feed.json, "dump", side_effect=OSError("disk full")):
            with self.assertRaises(OSError):
                feed.save_history([feed.record_from_formats({"text/plain": "new"})], self.path)
        self.assertEqual([feed.record_text(r) for r in feed.load_history(self.path)], ["old"])
        self.assertEqual(os.listdir(os.path.dirname(self.path)), ["clipboard_history.json"])

    def test_save_leaves_no_temporary_files(self):
        feed.save_history([feed.record_from_formats({"text/plain": "a"})], self.path)
        feed.save_history([], self.path)
        self.assertEqual(os.listdir(os.path.dirname(self.path)), ["clipboard_history.json"])

    def test_clear_history(self):
        feed.save_history([feed.record_from_formats({"text/plain": "a"})], self.path)
        feed.clear_history(self.path)
        self.assertEqual(feed.load_history(self.path), [])


class RecordTests(unittest.TestCase):
    def test_push_moves_duplicate_to_top_and_trims(self):
        a, b, c = (feed.record_from_formats({"text/plain": t}) for t in "abc")
        records = feed.push_record([a, b], b)
        self.assertEqual(records, [b, a])
        self.assertEqual(feed.push_record([a, b], c, limit=2), [c, a])

    def test_record_text_requires_plain_text(self):
        self.assertIsNone(feed.record_text({"formats": {"text/html": "<p>x</p>"}}))
        self.assertIsNone(feed.record_text({}))
        self.assertEqual(feed.record_text({"formats": {"text/plain": "x"}}), "x")

    def test_empty_formats_are_dropped(self):
        self.assertEqual(feed.record_from_formats({"text/plain": "x", "text/html": ""}),
                         {"formats": {"text/plain": "x"}})

    def test_clipboard_item(self):
        item = ClipboardItem.from_text("hi")
        self.assertTrue(item.has_text())
        self.assertEqual(item.text, "hi")
        self.assertEqual(ClipboardItem.from_record(item.to_record()), item)
        self.assertFalse(ClipboardItem({"text/uri-list": "file:///x"}).has_text())


if __name__ == "__main__":
    unittest.main()
