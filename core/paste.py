import os
import sys
import time
import shlex
import logging
import tempfile
import threading
import subprocess

from core import paster
from core.config import DEFAULT_PASTE_DELAY_MS, PasteMode
from core.paster import send_paste_keystroke
from core.windows import ForegroundWindow

PASTER_PATH = os.path.abspath(paster.__file__)
DEFAULT_EDITOR = ['xdg-open']
# Editors that hand the file to another process return faster than anyone can type
EDITOR_MIN_SECONDS = 1.0


def _command(value, default):
    if not value:
        return list(default)
    if isinstance(value, str):
        return shlex.split(value)
    return list(value)


def helper_command(elevation_command="pkexec"):
    """Command line that runs the paste helper with elevated privileges."""
    # pkexec starts from a clean environment, so pass the X session through
    env = [f"{name}={os.environ[name]}" for name in ("DISPLAY", "XAUTHORITY") if os.environ.get(name)]
    return _command(elevation_command, ['pkexec']) + ['env', *env, sys.executable, PASTER_PATH]


def launch_helper(command):
    subprocess.Popen(
        command,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        start_new_session=True
    )


class PasteDispatcher:
    """Puts a history entry on the clipboard and optionally pastes it."""

    def __init__(self, api, keystroke=send_paste_keystroke, sleep=time.sleep, windows=None,
                 launch_helper=launch_helper, elevation_command="pkexec", editor=None):
        self.api = api
        self.keystroke = keystroke
        self.sleep = sleep
        self.windows = windows or ForegroundWindow()
        self.launch_helper = launch_helper
        self.elevation_command = elevation_command
        self.editor = editor
        self.logger = logging.getLogger("clipdeck.paste")

    def dispatch(self, entry, mode=PasteMode.DIRECT_PASTE, delay_ms=DEFAULT_PASTE_DELAY_MS):
        """Sets the entry as clipboard content, then pastes in the background.

        Returns the thread performing the paste, or None when nothing is
        pasted. The caller never waits for the keystroke.
        """
        mode = PasteMode.parse(mode)
        try:
            self.set_active(entry)
        except Exception as e:
            self.logger.error(f"Failed to set clipboard content: {e}")
            return None

        if mode is PasteMode.COPY_TO_CLIPBOARD:
            return None

        task = self._paste_elevated if mode is PasteMode.ELEVATED_PASTE else self._paste_direct
        # A fresh thread per paste; the input backend must not run on the GUI thread
        thread = threading.Thread(
            target=self._run_delayed,
            args=(task, delay_ms),
            name=f"clipdeck-{mode.name.lower()}",
            daemon=True
        )
        thread.start()
        return thread

    def set_active(self, entry):
        handle = getattr(entry, 'handle', None)
        if handle is not None:
            self.api.set_content(handle)
        else:
            self.api.set_text(getattr(entry, 'text', entry))

    def _run_delayed(self, task, delay_ms):
        try:
            if delay_ms > 0:
                self.sleep(delay_ms / 1000.0)
            task()
        except Exception as e:
            self.logger.error(f"Paste failed: {e}")

    def _paste_direct(self):
        self.keystroke()
        self.logger.debug("Sent paste keystroke")

    def _paste_elevated(self):
        window_id = self.windows.get_active()
        command = helper_command(self.elevation_command)
        self.logger.info(f"Launching paste helper: {command[0]}")
        self.launch_helper(command)
        # Only the launch is awaited; the helper may still be starting up here
        if window_id:
            self.windows.activate(window_id)

    def edit_before_paste(self, text):
        """Opens the text in an editor, waits for it, then copies the result."""
        fd, path = tempfile.mkstemp(prefix="clipdeck-", suffix=".txt")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)

            command = _command(self.editor, DEFAULT_EDITOR)
            started = time.monotonic()
            subprocess.run(command + [path])
            if time.monotonic() - started < EDITOR_MIN_SECONDS:
                self.logger.warning(
                    f"Editor '{command[0]}' returned immediately, edits made after this are lost. "
                    f"Set 'editor' in the config to a command that waits, e.g. 'kate --block'"
                )

            with open(path, "r", encoding="utf-8") as f:
                edited = f.read()
            self.api.set_text(edited)
            return edited
        finally:
            os.remove(path)

    def edit_in_background(self, text):
        def run():
            try:
                self.edit_before_paste(text)
            except Exception as e:
                self.logger.error(f"Edit before paste failed: {e}")

        thread = threading.Thread(target=run, name="clipdeck-edit", daemon=True)
        thread.start()
        return thread
