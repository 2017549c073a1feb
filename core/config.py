import os
import json
import logging
from enum import Enum

from xdg.BaseDirectory import xdg_config_home

CONFIG_DIR = os.path.join(xdg_config_home, "clipdeck")
CONFIG_FILE = os.path.join(CONFIG_DIR, "config.json")

DEFAULT_PASTE_DELAY_MS = 200
UNLIMITED_RESULTS = -1

logger = logging.getLogger("clipdeck.config")


class PasteMode(Enum):
    """What selecting a history entry does."""

    DIRECT_PASTE = (1, "Direct Paste")
    COPY_TO_CLIPBOARD = (2, "Copy To Clipboard")
    ELEVATED_PASTE = (3, "Elevated Paste")

    def __init__(self, mode_id, label):
        self.id = mode_id
        self.label = label

    @classmethod
    def selectable(cls):
        """Modes offered in the settings combobox."""
        return [cls.DIRECT_PASTE, cls.COPY_TO_CLIPBOARD]

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        for mode in cls:
            if value == mode.id or value == str(mode.id):
                return mode
            if isinstance(value, str) and value.lower().replace(" ", "_") == mode.name.lower():
                return mode
        return cls.DIRECT_PASTE


class Settings:
    def __init__(self, paste_delay_ms=DEFAULT_PASTE_DELAY_MS, paste_mode=PasteMode.DIRECT_PASTE,
                 max_results=UNLIMITED_RESULTS, editor=None, elevation_command="pkexec"):
        self.paste_delay_ms = max(0, int(paste_delay_ms))
        self.paste_mode = PasteMode.parse(paste_mode)
        self.max_results = max(UNLIMITED_RESULTS, int(max_results))
        self.editor = editor
        self.elevation_command = elevation_command or "pkexec"

    @property
    def direct_paste(self):
        return self.paste_mode is not PasteMode.COPY_TO_CLIPBOARD

    @classmethod
    def from_config(cls, config):
        return cls(
            paste_delay_ms=_int_option(config, "paste_delay_ms", DEFAULT_PASTE_DELAY_MS),
            paste_mode=config.get("paste_mode", PasteMode.DIRECT_PASTE.id),
            max_results=_int_option(config, "max_results", UNLIMITED_RESULTS),
            editor=config.get("editor"),
            elevation_command=config.get("elevation_command", "pkexec"),
        )

    def __repr__(self):
        return (f"Settings(paste_delay_ms={self.paste_delay_ms}, paste_mode={self.paste_mode.name}, "
                f"max_results={self.max_results})")


def _int_option(config, key, default):
    value = config.get(key, default)
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring invalid value for {key}: {value!r}")
        return default


def load_config(path=None):
    path = path or CONFIG_FILE
    if not os.path.exists(path):
        return {}
    try:
        with open(path, 'r') as f:
            config = json.load(f)
    except json.JSONDecodeError:
        return {}
    return config if isinstance(config, dict) else {}


def save_config(config, path=None):
    path = path or CONFIG_FILE
    config_dir = os.path.dirname(path)
    if config_dir and not os.path.exists(config_dir):
        os.makedirs(config_dir)
    with open(path, 'w') as f:
        json.dump(config, f, indent=4)


def get_settings(path=None):
    return Settings.from_config(load_config(path))


def is_history_enabled(path=None):
    return bool(load_config(path).get("clipboard_history_enabled", True))


def set_history_enabled(enabled, path=None):
    """Flips the history toggle; OSError propagates to the caller."""
    config = load_config(path)
    config["clipboard_history_enabled"] = bool(enabled)
    save_config(config, path)
