import logging

from PyQt6.QtWidgets import (QMainWindow, QWidget, QVBoxLayout, QLineEdit, QMenu,
                             QListWidget, QListWidgetItem, QLabel, QHBoxLayout, QTextBrowser)
from PyQt6.QtCore import Qt, QSize, QTimer
from PyQt6.QtGui import QIcon, QAction

from core.clipboard import QtClipboardAPI
from core.config import get_settings
from core.plugin import CONTEXT_ACTIONS, ClipboardPlugin

# Poll interval while waiting for a paste or edit to finish before exiting
CLOSE_GRACE_MS = 500


class MainWindow(QMainWindow):
    def __init__(self, plugin=None):
        super().__init__()
        self.logger = logging.getLogger("clipdeck.window")
        # Dialog hint helps tiling WMs (like i3) treat it as a floating window
        self.setWindowFlags(Qt.WindowType.FramelessWindowHint | Qt.WindowType.WindowStaysOnTopHint | Qt.WindowType.Dialog)
        self.setAttribute(Qt.WidgetAttribute.WA_TranslucentBackground)

        self.resize(850, 450)
        self.center()

        # Central Widget
        self.central_widget = QWidget()
        self.central_widget.setObjectName("CentralWidget")
        self.setCentralWidget(self.central_widget)

        # Main Layout
        self.main_layout = QVBoxLayout(self.central_widget)
        self.main_layout.setContentsMargins(0, 0, 0, 0)
        self.main_layout.setSpacing(0)

        # Search Bar (Top)
        self.search_bar = QLineEdit()
        self.search_bar.setPlaceholderText("Search clipboard history, '-' to clear it...")
        self.search_bar.textChanged.connect(self.filter_items)
        self.search_bar.returnPressed.connect(self.execute_selected)
        self.main_layout.addWidget(self.search_bar)

        # Content Layout (Split View)
        self.content_layout = QHBoxLayout()
        self.content_layout.setContentsMargins(0, 0, 0, 0)
        self.content_layout.setSpacing(0)
        self.main_layout.addLayout(self.content_layout)

        # Results List (Left)
        self.results_list = QListWidget()
        self.results_list.setIconSize(QSize(32, 32))
        self.results_list.itemActivated.connect(self.execute_selected)
        self.results_list.currentItemChanged.connect(self.update_details)
        self.results_list.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
        self.results_list.customContextMenuRequested.connect(self.show_context_menu)
        self.content_layout.addWidget(self.results_list, stretch=6)

        # Details Panel (Right)
        self.details_panel = QWidget()
        self.details_panel.setObjectName("DetailsPanel")
        self.setup_details_panel()
        self.content_layout.addWidget(self.details_panel, stretch=4)

        # Data
        if plugin is None:
            plugin = ClipboardPlugin(QtClipboardAPI(parent=self), get_settings())
        self.plugin = plugin
        self.plugin.change_query = self.refresh
        self.plugin.start()

        # Shortcuts
        self.escape_action = QAction(self)
        self.escape_action.setShortcut("Esc")
        self.escape_action.triggered.connect(self.close)
        self.addAction(self.escape_action)

        for action in CONTEXT_ACTIONS:
            shortcut = QAction(self)
            shortcut.setShortcut(action['shortcut'])
            shortcut.triggered.connect(lambda checked=False, a=action['type']: self.run_context_action(a))
            self.addAction(shortcut)

        # Event Filter for Search Bar Navigation
        self.search_bar.installEventFilter(self)

        self.filter_items("")

    def setup_details_panel(self):
        layout = QVBoxLayout(self.details_panel)
        layout.setContentsMargins(20, 20, 20, 20)
        layout.setAlignment(Qt.AlignmentFlag.AlignTop)

        # Title
        self.details_title = QLabel("")
        self.details_title.setObjectName("DetailsTitle")
        self.details_title.setWordWrap(True)
        layout.addWidget(self.details_title)

        # Full text of the entry
        self.details_desc = QTextBrowser()
        self.details_desc.setObjectName("DetailsDesc")
        self.details_desc.setReadOnly(True)
        layout.addWidget(self.details_desc)

        # Meta
        self.details_meta = QLabel("")
        self.details_meta.setObjectName("DetailsMeta")
        self.details_meta.setWordWrap(True)
        layout.addWidget(self.details_meta)

    def update_details(self, current, previous):
        if not current:
            self.details_title.setText("")
            self.details_desc.setText("")
            self.details_meta.setText("")
            return

        data = current.data(Qt.ItemDataRole.UserRole)
        self.details_title.setText(data['name'])

        if data.get('entry') is not None:
            self.details_desc.setPlainText(data['exec'])
            lines = data['exec'].count('\n') + 1
            self.details_meta.setText(f"> {len(data['exec'])} chars, {lines} line(s)")
        else:
            self.details_desc.setPlainText(data.get('description', ''))
            self.details_meta.setText("")

    def center(self):
        qr = self.frameGeometry()
        cp = self.screen().availableGeometry().center()
        qr.moveCenter(cp)
        self.move(qr.topLeft())

    def eventFilter(self, obj, event):
        if obj == self.search_bar and event.type() == event.Type.KeyPress:
            key = event.key()
            if key == Qt.Key.Key_Down:
                self.navigate_list(1)
                return True
            elif key == Qt.Key.Key_Up:
                self.navigate_list(-1)
                return True
        return super().eventFilter(obj, event)

    def navigate_list(self, direction):
        current = self.results_list.currentRow()
        count = self.results_list.count()
        if count == 0:
            return

        next_row = current + direction
        if 0 <= next_row < count:
            self.results_list.setCurrentRow(next_row)

    def update_list(self, items):
        self.results_list.clear()
        for data in items:
            icon = QIcon.fromTheme(data.get('icon', 'edit-paste'))
            item = QListWidgetItem(icon, data['name'])
            item.setData(Qt.ItemDataRole.UserRole, data)
            item.setToolTip(data.get('description', ''))
            self.results_list.addItem(item)

        if self.results_list.count() > 0:
            self.results_list.setCurrentRow(0)

    def filter_items(self, text):
        self.update_list(self.plugin.query(text))

    def refresh(self):
        self.filter_items(self.search_bar.text())

    def current_data(self):
        current_item = self.results_list.currentItem()
        if current_item:
            return current_item.data(Qt.ItemDataRole.UserRole)
        return None

    def execute_selected(self):
        """Handle activation (double-click or Enter key)"""
        data = self.current_data()
        if data:
            self.logger.debug(f"Activating {data.get('type')}: {data['name'][:20]}")
        if data and self.plugin.activate(data):
            self.hide_and_quit()

    def run_context_action(self, action):
        data = self.current_data()
        if data and self.plugin.run_context_action(data, action):
            self.hide_and_quit()

    def show_context_menu(self, pos):
        item = self.results_list.itemAt(pos)
        if not item:
            return
        self.results_list.setCurrentItem(item)

        actions = self.plugin.context_menu(item.data(Qt.ItemDataRole.UserRole))
        if not actions:
            return

        menu = QMenu(self)
        for action in actions:
            menu_action = menu.addAction(QIcon.fromTheme(action['icon']), action['name'])
            menu_action.triggered.connect(lambda checked=False, a=action['type']: self.run_context_action(a))
        menu.exec(self.results_list.viewport().mapToGlobal(pos))

    def hide_and_quit(self):
        # Hide right away so focus returns to the target window before the paste
        self.hide()
        QTimer.singleShot(CLOSE_GRACE_MS, self.close_when_idle)

    def close_when_idle(self):
        # Stay alive while a paste or edit thread still needs our clipboard
        if self.plugin.busy():
            QTimer.singleShot(CLOSE_GRACE_MS, self.close_when_idle)
            return
        self.close()

    def closeEvent(self, event):
        self.plugin.stop()
        event.accept()
