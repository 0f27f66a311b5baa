"""MainWindow: project cache table, selection tools and notification panel.

The window only renders view-model state and forwards user intent; all
workflow rules live in `MainVM` and `DeleteVM`. Coroutines are scheduled on
the asyncio loop that drives the Qt event loop.
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any

from PySide6.QtCore import Qt
from PySide6.QtGui import QColor, QStandardItem
from PySide6.QtWidgets import (
    QAbstractItemView,
    QCheckBox,
    QDialog,
    QHeaderView,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QMessageBox,
    QTableView,
    QVBoxLayout,
    QWidget,
)
from loguru import logger

from app.viewmodels.delete_vm import DeleteState, DeleteVM
from app.viewmodels.main_vm import BUSY, DELETE_STATE, NOTIFICATIONS, RECORDS, MainVM
from app.views.components.menu_controller import MenuController
from app.views.constants import (
    COL_SEL,
    COLUMN_SORT_KEYS,
    DEFAULT_WINDOW_SIZE,
    NOTIFICATION_ID_ROLE,
    NOTIFICATION_PANEL_HEIGHT_PX,
    SEVERITY_COLORS,
    format_size,
)
from app.views.dialogs.delete_confirm_dialog import DeleteConfirmDialog
from app.views.dialogs.select_dialog import SelectByAgeDialog
from app.views.table_model_builder import build_model, record_id_at
from core.models import GroupScope, RecordScope, Severity
from core.services.interfaces import StagedDeletion
from core.services.selection_service import selection_summary
from infrastructure.logging import open_latest_log, open_log_directory


class MainWindow(QMainWindow):
    """Main application window."""

    def __init__(
        self,
        vm: MainVM,
        delete_vm: DeleteVM,
        settings: Any | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        """Initialize MainWindow with view-models.

        Args:
            vm: Main view-model owning records and notifications
            delete_vm: Deletion workflow view-model
            settings: Settings instance for configuration
            loop: Event loop used to schedule coroutines
        """
        super().__init__()
        self._vm = vm
        self._delete_vm = delete_vm
        self._settings = settings
        self._loop = loop or asyncio.get_running_loop()
        self._tasks: set[asyncio.Task] = set()
        self._confirm_dialog: DeleteConfirmDialog | None = None
        self._row_ids: list[str] = []
        self._model = None

        self._age_threshold = 30
        self._require_full_group_ack = True
        if settings is not None:
            self._age_threshold = settings.get_int("selection.default_age_threshold_days", 30)
            self._require_full_group_ack = bool(
                settings.get("delete.confirm_group_full_delete", True)
            )

        self._setup_ui()
        self._connect_signals()
        self._render_records()
        self._render_notifications()
        self._render_busy()

    def _setup_ui(self) -> None:
        self.setWindowTitle("Collaboration Cache Manager")
        self.resize(*DEFAULT_WINDOW_SIZE)

        central = QWidget(self)
        root = QVBoxLayout(central)

        self.select_all_box = QCheckBox("Select all")
        root.addWidget(self.select_all_box)

        self.table = QTableView()
        self.table.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.table.setSelectionMode(QAbstractItemView.SingleSelection)
        self.table.verticalHeader().setVisible(False)
        header = self.table.horizontalHeader()
        header.setSectionsClickable(True)
        header.setSortIndicatorShown(True)
        header.setStretchLastSection(True)
        header.setSectionResizeMode(QHeaderView.Interactive)
        root.addWidget(self.table, 1)

        self.notification_list = QListWidget()
        self.notification_list.setMaximumHeight(NOTIFICATION_PANEL_HEIGHT_PX)
        self.notification_list.setToolTip("Click a message to dismiss it")
        root.addWidget(self.notification_list)

        self.setCentralWidget(central)

        self.menu_controller = MenuController(self)
        self.menu_controller.setup_menus()

        self.busy_label = QLabel("")
        self.selection_label = QLabel("")
        self.statusBar().addWidget(self.selection_label, 1)
        self.statusBar().addPermanentWidget(self.busy_label)

    def _connect_signals(self) -> None:
        handlers = {
            "refresh": lambda *_: self._schedule(self._vm.refresh()),
            "delete": lambda *_: self._delete_vm.start_delete(),
            "open_project": lambda *_: self._open_highlighted(group=False),
            "open_version": lambda *_: self._open_highlighted(group=True),
            "select_all": lambda *_: self._vm.set_all(True),
            "select_none": lambda *_: self._vm.set_all(False),
            "select_by_age": lambda *_: self._show_select_dialog(),
            "open_latest_log": lambda *_: self._open_log(open_latest_log),
            "open_log_directory": lambda *_: self._open_log(open_log_directory),
            "exit": self.close,
        }
        self.menu_controller.connect_actions(handlers)

        self.select_all_box.clicked.connect(self._on_select_all_clicked)
        self.table.horizontalHeader().sectionClicked.connect(self._on_header_clicked)
        self.table.doubleClicked.connect(lambda *_: self._open_highlighted(group=False))
        self.notification_list.itemClicked.connect(self._on_notification_clicked)

        self._vm.add_listener(self._on_vm_changed)
        self._delete_vm.confirm_handler = self._show_confirm_dialog

    # View-model events

    def _on_vm_changed(self, topic: str) -> None:
        if topic == RECORDS:
            self._render_records()
        elif topic == NOTIFICATIONS:
            self._render_notifications()
        elif topic == BUSY:
            self._render_busy()
        elif topic == DELETE_STATE:
            self._on_delete_state_changed()

    def _render_records(self) -> None:
        records = self._vm.current_view()
        self._row_ids = [r.id for r in records]
        self._model = build_model(records)
        self._model.itemChanged.connect(self._on_item_changed)
        self.table.setModel(self._model)
        self.table.resizeColumnsToContents()

        state = self._vm.sort_state
        for col, key in COLUMN_SORT_KEYS.items():
            if key == state.key:
                order = Qt.AscendingOrder if state.ascending else Qt.DescendingOrder
                self.table.horizontalHeader().setSortIndicator(col, order)
                break

        self.select_all_box.setChecked(bool(records) and self._vm.select_all)
        count, size = selection_summary(self._vm.records)
        self.selection_label.setText(
            f"{len(records)} projects | {count} selected ({format_size(size)})"
        )

    def _render_notifications(self) -> None:
        self.notification_list.clear()
        for note in self._vm.notifications.newest_first():
            stamp = note.created_at.strftime("%H:%M:%S")
            item = QListWidgetItem(f"[{stamp}] {note.message}")
            item.setData(NOTIFICATION_ID_ROLE, note.id)
            item.setForeground(QColor(SEVERITY_COLORS[note.severity]))
            self.notification_list.addItem(item)

    def _render_busy(self) -> None:
        busy = self._vm.is_busy
        self.busy_label.setText("Working…" if busy else "Ready")
        self.menu_controller.enable_action("refresh", not busy)

    def _on_delete_state_changed(self) -> None:
        state = self._delete_vm.state
        self.menu_controller.enable_action("delete", state is DeleteState.IDLE)
        if self._confirm_dialog is not None and state is not DeleteState.CONFIRMING:
            dlg = self._confirm_dialog
            self._confirm_dialog = None
            dlg.done(QDialog.Accepted)

    # User intent

    def _on_select_all_clicked(self, checked: bool) -> None:
        self._vm.select_all = checked

    def _on_item_changed(self, item: QStandardItem) -> None:
        if item.column() != COL_SEL or item.row() >= len(self._row_ids):
            return
        record_id = self._row_ids[item.row()]
        wanted = item.checkState() == Qt.Checked
        current = next((r.selected for r in self._vm.records if r.id == record_id), wanted)
        if current != wanted:
            # The model is rebuilt on change; leave its signal handler first
            self._loop.call_soon(self._vm.toggle, record_id)

    def _on_header_clicked(self, logical_index: int) -> None:
        key = COLUMN_SORT_KEYS.get(logical_index)
        if key is None:
            return
        state = self._vm.sort_by(key)
        logger.debug("Sort state updated - Key: {}, Ascending: {}", state.key, state.ascending)

    def _on_notification_clicked(self, item: QListWidgetItem) -> None:
        note_id = item.data(NOTIFICATION_ID_ROLE)
        if note_id:
            self._vm.notifications.dismiss(str(note_id))

    def _show_select_dialog(self) -> None:
        dlg = SelectByAgeDialog(default_days=self._age_threshold, parent=self)
        dlg.selectRequested.connect(self._on_select_by_age)
        dlg.show()

    def _on_select_by_age(self, days: int) -> None:
        self._age_threshold = days
        count = self._vm.select_by_age_threshold(days)
        self._vm.notify(f"Selected {count} projects at least {days} days old")

    def _show_confirm_dialog(self, staged: StagedDeletion) -> None:
        dlg = DeleteConfirmDialog(staged, self._require_full_group_ack, parent=self)
        dlg.confirmRequested.connect(lambda: self._schedule(self._delete_vm.confirm()))
        dlg.rejected.connect(self._on_confirm_rejected)
        self._confirm_dialog = dlg
        dlg.open()

    def _on_confirm_rejected(self) -> None:
        self._confirm_dialog = None
        self._delete_vm.cancel()

    def _open_highlighted(self, group: bool) -> None:
        index = self.table.currentIndex()
        record_id = record_id_at(self._model, index.row()) if index.isValid() else None
        record = next((r for r in self._vm.records if r.id == record_id), None)
        if record is None:
            self._vm.notify("No project highlighted", Severity.WARN)
            return
        scope = GroupScope(record.group_key) if group else RecordScope(record.id)
        self._schedule(self._vm.open_location(scope))

    def _open_log(self, opener) -> None:
        if not opener():
            self._vm.notify("No log available", Severity.WARN)

    def _schedule(self, coro: Coroutine[Any, Any, Any]) -> None:
        task = self._loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def closeEvent(self, event) -> None:
        """Ask before quitting while a refresh or delete is still running."""
        if self._vm.is_busy:
            reply = QMessageBox.question(
                self,
                "Operation in progress",
                "A refresh or deletion is still running. Quit anyway?",
                QMessageBox.Yes | QMessageBox.No,
                QMessageBox.No,
            )
            if reply != QMessageBox.Yes:
                event.ignore()
                return
        self._vm.shutdown()
        event.accept()
