import logging

from core.config import PasteMode, Settings
from core.history import HistoryStore
from core.paste import PasteDispatcher
from core.query import QueryEngine

PASTE_ELEVATED = 'PasteElevated'
EDIT = 'Edit'

CONTEXT_ACTIONS = [
    {
        'name': "Run as administrator (Ctrl+Shift+Enter)",
        'icon': 'security-high',
        'shortcut': 'Ctrl+Shift+Return',
        'type': PASTE_ELEVATED,
    },
    {
        'name': "Edit (Ctrl+E)",
        'icon': 'document-edit',
        'shortcut': 'Ctrl+E',
        'type': EDIT,
    },
]


class ClipboardPlugin:
    """Searches the clipboard history and pastes the selected item.

    The host calls ``query`` on every keystroke and ``activate`` or
    ``run_context_action`` when the user picks a result. Both return True when
    the host should hide its window. ``change_query`` is set by the host and
    re-runs the current search.
    """

    name = "ClipboardManager"
    description = "Searches the clipboard history and pastes the selected item"

    def __init__(self, api, settings=None, store=None, dispatcher=None):
        self.api = api
        self.logger = logging.getLogger("clipdeck.plugin")
        self.store = store if store is not None else HistoryStore(api)
        self.engine = QueryEngine(self.store, api)
        self.dispatcher = dispatcher or PasteDispatcher(api)
        self.change_query = None
        self._pending = []
        self.update_settings(settings or Settings())

    def start(self):
        self.store.start()

    def stop(self):
        self.store.stop()

    def update_settings(self, settings):
        self.settings = settings
        self.dispatcher.elevation_command = settings.elevation_command
        self.dispatcher.editor = settings.editor

    def query(self, text):
        return self.engine.query(text, self.settings.max_results)

    def activate(self, result):
        item_type = result.get('type')

        if item_type == 'Clipboard':
            self._track(self.dispatcher.dispatch(result['entry'], self.settings.paste_mode, self.settings.paste_delay_ms))
            return True

        if item_type == 'HistoryDisabled':
            try:
                self.api.enable_history()
            except OSError as e:
                self.logger.error(f"Error occurred enabling the clipboard history: {e}")
                return False
            self._requery()
            return False

        if item_type == 'ClipboardClear':
            self.store.clear()
            self._requery()
            return False

        return False

    def context_menu(self, result):
        if result.get('entry') is None:
            return []

        return [dict(action) for action in CONTEXT_ACTIONS]

    def run_context_action(self, result, action):
        entry = result.get('entry')
        if entry is None:
            return False

        if action == PASTE_ELEVATED:
            mode = PasteMode.ELEVATED_PASTE if self.settings.direct_paste else PasteMode.COPY_TO_CLIPBOARD
            self._track(self.dispatcher.dispatch(entry, mode, self.settings.paste_delay_ms))
            return True

        if action == EDIT:
            self._track(self.dispatcher.edit_in_background(entry.text))
            return True

        return False

    def busy(self):
        """True while a paste or edit started by this plugin is still running."""
        self._pending = [t for t in self._pending if t.is_alive()]
        return bool(self._pending)

    def _track(self, thread):
        if thread is not None:
            self._pending.append(thread)

    def _requery(self):
        if self.change_query is not None:
            self.change_query()
