import os
import sys
import time
import threading
import unittest
from unittest import mock

from core.config import PasteMode
from core.feed import ClipboardItem
from core.history import HistoryEntry
from core.paste import PASTER_PATH, PasteDispatcher, helper_command
from fakes import FakeClipboardAPI


class FakeWindows:
    def __init__(self, events, active="4242"):
        self.events = events
        self.active = active

    def get_active(self):
        self.events.append(('get_active',))
        return self.active

    def activate(self, window_id):
        self.events.append(('activate', window_id))
        return True


class PasteDispatcherTests(unittest.TestCase):
    def setUp(self):
        self.api = FakeClipboardAPI()
        self.events = []
        self.sleeps = []
        self.dispatcher = PasteDispatcher(
            self.api,
            keystroke=lambda: self.events.append(('keystroke',)),
            sleep=self.sleeps.append,
            windows=FakeWindows(self.events),
            launch_helper=lambda command: self.events.append(('launch', command)),
        )

    def test_copy_mode_only_sets_clipboard(self):
        thread = self.dispatcher.dispatch(HistoryEntry("hello"), PasteMode.COPY_TO_CLIPBOARD, 200)
        self.assertIsNone(thread)
        self.assertEqual(self.api.calls, [('set_text', "hello")])
        self.assertEqual(self.events, [])

    def test_original_item_is_replayed(self):
        item = ClipboardItem({"text/plain": "rich", "text/html": "<b>rich</b>"})
        self.dispatcher.dispatch(HistoryEntry("rich", item), PasteMode.COPY_TO_CLIPBOARD, 0)
        self.assertEqual(self.api.calls, [('set_content', item)])

    def test_raw_text_is_wrapped(self):
        self.dispatcher.dispatch("raw", PasteMode.COPY_TO_CLIPBOARD, 0)
        self.assertEqual(self.api.calls, [('set_text', "raw")])

    def test_direct_paste_sleeps_then_presses_keys(self):
        thread = self.dispatcher.dispatch(HistoryEntry("hello"), PasteMode.DIRECT_PASTE, 200)
        thread.join(2)
        self.assertEqual(self.api.calls, [('set_text', "hello")])
        self.assertEqual(self.sleeps, [0.2])
        self.assertEqual(self.events, [('keystroke',)])

    def test_every_paste_gets_its_own_thread(self):
        first = self.dispatcher.dispatch(HistoryEntry("a"), PasteMode.DIRECT_PASTE, 0)
        second = self.dispatcher.dispatch(HistoryEntry("b"), PasteMode.DIRECT_PASTE, 0)
        first.join(2)
        second.join(2)
        self.assertIsNot(first, second)
        self.assertIsNot(first, threading.current_thread())
        self.assertEqual(self.events, [('keystroke',), ('keystroke',)])

    def test_keystroke_failure_is_logged_not_raised(self):
        def broken():
            raise RuntimeError("no display")

        self.dispatcher.keystroke = broken
        with self.assertLogs("clipdeck.paste", level="ERROR"):
            thread = self.dispatcher.dispatch(HistoryEntry("a"), PasteMode.DIRECT_PASTE, 0)
            thread.join(2)

    def test_clipboard_failure_skips_paste(self):
        def broken(text):
            raise RuntimeError("clipboard owner vanished")

        self.api.set_text = broken
        with self.assertLogs("clipdeck.paste", level="ERROR"):
            thread = self.dispatcher.dispatch(HistoryEntry("a"), PasteMode.DIRECT_PASTE, 0)
        self.assertIsNone(thread)
        self.assertEqual(self.events, [])

    def test_elevated_paste_restores_focus_after_launch(self):
        thread = self.dispatcher.dispatch(HistoryEntry("a"), PasteMode.ELEVATED_PASTE, 50)
        thread.join(2)
        self.assertEqual(self.sleeps, [0.05])
        self.assertEqual([e[0] for e in self.events], ['get_active', 'launch', 'activate'])
        self.assertEqual(self.events[2], ('activate', "4242"))
        self.assertEqual(self.events[1][1][-1], PASTER_PATH)

    def test_elevated_paste_without_focused_window(self):
        self.dispatcher.windows.active = None
        thread = self.dispatcher.dispatch(HistoryEntry("a"), PasteMode.ELEVATED_PASTE, 0)
        thread.join(2)
        self.assertEqual([e[0] for e in self.events], ['get_active', 'launch'])

    def test_helper_launch_failure_is_logged(self):
        def broken(command):
            raise FileNotFoundError("pkexec")

        self.dispatcher.launch_helper = broken
        with self.assertLogs("clipdeck.paste", level="ERROR"):
            thread = self.dispatcher.dispatch(HistoryEntry("a"), PasteMode.ELEVATED_PASTE, 0)
            thread.join(2)


class PasteTimingTests(unittest.TestCase):
    def test_dispatch_returns_before_delayed_keystroke(self):
        fired = threading.Event()
        fired_at = []

        def keystroke():
            fired_at.append(time.monotonic())
            fired.set()

        dispatcher = PasteDispatcher(FakeClipboardAPI(), keystroke=keystroke)
        started = time.monotonic()
        thread = dispatcher.dispatch(HistoryEntry("hello"), PasteMode.DIRECT_PASTE, 200)
        self.assertFalse(fired.is_set())

        thread.join(5)
        self.assertTrue(fired.is_set())
        self.assertGreaterEqual(fired_at[0] - started, 0.2)


class EditBeforePasteTests(unittest.TestCase):
    def setUp(self):
        self.api = FakeClipboardAPI()
        self.dispatcher = PasteDispatcher(self.api, editor="my-editor --wait")

    def test_edited_text_becomes_clipboard_content(self):
        seen = {}

        def fake_editor(command):
            seen['command'] = command
            path = command[-1]
            with open(path, encoding="utf-8") as f:
                seen['original'] = f.read()
            with open(path, "w", encoding="utf-8") as f:
                f.write("edited text")

        with mock.patch("core.paste.subprocess.run", side_effect=fake_editor):
            result = self.dispatcher.edit_before_paste("original text")

        self.assertEqual(result, "edited text")
        self.assertEqual(seen['original'], "original text")
        self.assertEqual(seen['command'][:2], ["my-editor", "--wait"])
        self.assertEqual(self.api.calls, [('set_text', "edited text")])
        self.assertFalse(os.path.exists(seen['command'][-1]))

    def test_unchanged_text_is_still_copied_and_file_removed(self):
        paths = []

        with mock.patch("core.paste.subprocess.run", side_effect=lambda c: paths.append(c[-1])):
            self.dispatcher.edit_before_paste("same")

        self.assertEqual(self.api.calls, [('set_text', "same")])
        self.assertFalse(os.path.exists(paths[0]))

    def test_temp_file_removed_when_editor_fails(self):
        paths = []

        def missing_editor(command):
            paths.append(command[-1])
            raise FileNotFoundError(command[0])

        with mock.patch("core.paste.subprocess.run", side_effect=missing_editor):
            with self.assertRaises(FileNotFoundError):
                self.dispatcher.edit_before_paste("text")

        self.assertFalse(os.path.exists(paths[0]))
        self.assertEqual(self.api.calls, [])

    def test_background_edit_logs_failures(self):
        with mock.patch("core.paste.subprocess.run", side_effect=FileNotFoundError("my-editor")):
            with self.assertLogs("clipdeck.paste", level="ERROR"):
                thread = self.dispatcher.edit_in_background("text")
                thread.join(2)

    def test_editor_that_returns_at_once_is_reported(self):
        with mock.patch("core.paste.subprocess.run"), \
                mock.patch("core.paste.time.monotonic", side_effect=[100.0, 100.2]):
            with self.assertLogs("clipdeck.paste", level="WARNING") as logs:
                self.dispatcher.edit_before_paste("text")
        self.assertIn("my-editor", logs.output[0])
        self.assertIn("'editor'", logs.output[0])

    def test_blocking_editor_is_not_reported(self):
        with mock.patch("core.paste.subprocess.run"), \
                mock.patch("core.paste.time.monotonic", side_effect=[100.0, 130.0]), \
                mock.patch.object(self.dispatcher.logger, "warning") as warning:
            self.dispatcher.edit_before_paste("text")
        warning.assert_not_called()
        self.assertEqual(self.api.calls, [('set_text', "text")])

    def test_default_editor_is_xdg_open(self):
        dispatcher = PasteDispatcher(self.api)
        commands = []
        with mock.patch("core.paste.subprocess.run", side_effect=lambda c: commands.append(c)):
            dispatcher.edit_before_paste("text")
        self.assertEqual(commands[0][0], "xdg-open")


class HelperCommandTests(unittest.TestCase):
    def test_default_uses_pkexec_and_current_interpreter(self):
        with mock.patch.dict(os.environ, {"DISPLAY": ":1"}, clear=False):
            command = helper_command()
        self.assertEqual(command[0], "pkexec")
        self.assertIn("DISPLAY=:1", command)
        self.assertEqual(command[-2:], [sys.executable, PASTER_PATH])

    def test_helper_gets_no_delay_of_its_own(self):
        launched = []
        sleeps = []
        dispatcher = PasteDispatcher(FakeClipboardAPI(), sleep=sleeps.append, windows=FakeWindows([]),
                                     launch_helper=launched.append)
        thread = dispatcher.dispatch(HistoryEntry("a"), PasteMode.ELEVATED_PASTE, 300)
        thread.join(2)
        self.assertEqual(sleeps, [0.3])
        self.assertEqual(launched[0][-1], PASTER_PATH)
        self.assertNotIn("--delay", launched[0])

    def test_custom_elevation_command_is_split(self):
        command = helper_command("sudo -n")
        self.assertEqual(command[:3], ["sudo", "-n", "env"])


if __name__ == "__main__":
    unittest.main()
