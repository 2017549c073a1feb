from core.config import UNLIMITED_RESULTS

CLEAR_COMMAND = "-"
ICON = 'edit-paste'


def display_label(text):
    """First non-blank line of the text, used as the result title."""
    for line in text.splitlines():
        if line.strip():
            return line.strip()
    return text


class QueryEngine:
    """Turns a search string into launcher items for the clipboard history."""

    def __init__(self, store, api):
        self.store = store
        self.api = api

    def query(self, search, max_results=UNLIMITED_RESULTS):
        if not self.api.is_history_enabled():
            return [history_disabled_item()]

        entries = self.store.items()
        if not entries:
            return [no_items_item()]

        limit = len(entries) if max_results == UNLIMITED_RESULTS else max(0, max_results)

        if not search or not search.strip():
            return [entry_item(e) for e in entries[:limit]]

        results = []
        if search == CLEAR_COMMAND:
            results.append(clear_history_item())

        # casefold so "ς" and "σ" both match "Σ"
        needle = search.casefold()
        matches = [e for e in entries if needle in e.text.casefold()]
        results.extend(entry_item(e) for e in matches[:limit])
        return results


def entry_item(entry):
    return {
        'name': display_label(entry.text),
        'exec': entry.text,
        'icon': ICON,
        'description': 'Paste this value',
        'type': 'Clipboard',
        'entry': entry,
    }


def clear_history_item():
    return {
        'name': "Clear clipboard history",
        'exec': "",
        'icon': 'edit-clear-history',
        'description': 'This will remove all entries from the clipboard history',
        'type': 'ClipboardClear',
    }


def history_disabled_item():
    return {
        'name': "Clipboard History is not enabled",
        'exec': "",
        'icon': 'dialog-warning',
        'description': 'Select this option to enable clipboard history',
        'type': 'HistoryDisabled',
    }


def no_items_item():
    return {
        'name': "There's nothing here...",
        'exec': "",
        'icon': ICON,
        'description': 'There are no items in your clipboard history. Copy some text to see it here.',
        'type': 'Info',
    }
