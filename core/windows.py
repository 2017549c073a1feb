import logging
import subprocess


class ForegroundWindow:
    """Query and restore the focused X11 window using xdotool."""

    def __init__(self, timeout=2):
        self.timeout = timeout
        self.logger = logging.getLogger("clipdeck.windows")

    def get_active(self):
        """Returns the id of the focused window, or None."""
        result = self._xdotool('getactivewindow')
        if result is None:
            return None

        window_id = result.stdout.strip()
        return window_id or None

    def activate(self, window_id):
        if not window_id:
            return False
        return self._xdotool('windowactivate', str(window_id)) is not None

    def _xdotool(self, *args):
        try:
            result = subprocess.run(
                ['xdotool', *args],
                capture_output=True,
                text=True,
                timeout=self.timeout
            )

            if result.returncode != 0:
                self.logger.warning(f"xdotool {args[0]} error: {result.stderr.strip()}")
                return None

            return result

        except subprocess.TimeoutExpired:
            self.logger.warning(f"xdotool {args[0]} timeout")
            return None
        except FileNotFoundError:
            self.logger.warning("xdotool not found - is it installed?")
            return None
