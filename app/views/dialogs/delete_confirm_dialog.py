from __future__ import annotations

from PySide6.QtCore import Signal
from PySide6.QtWidgets import (
    QCheckBox,
    QDialog,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QVBoxLayout,
)

from app.views.constants import format_size
from core.services.interfaces import StagedDeletion


class DeleteConfirmDialog(QDialog):
    """Asks the user to confirm a staged deletion.

    Pressing Delete only emits `confirmRequested`; the owner closes the dialog
    once the commit has actually started, so a rejected attempt leaves the
    prompt open.
    """

    confirmRequested = Signal()

    def __init__(
        self, staged: StagedDeletion, require_full_group_ack: bool = True, parent=None
    ) -> None:
        super().__init__(parent)
        self.setWindowTitle("Confirm Delete")

        root = QVBoxLayout(self)

        summaries = staged.group_summaries
        affected_groups = sum(1 for s in summaries if s.selected_count > 0)
        total_projects = sum(s.total_count for s in summaries)
        full_groups = [s for s in summaries if s.is_full_delete]
        needs_ack = require_full_group_ack and len(full_groups) > 0

        root.addWidget(QLabel("The selected project caches will be deleted."))
        root.addWidget(QLabel(f"Versions affected: {affected_groups} / {len(summaries)}"))
        root.addWidget(
            QLabel(
                f"Projects: {len(staged.records)} / {total_projects} "
                f"({format_size(staged.total_bytes)})"
            )
        )

        names = QListWidget()
        for rec in staged.records:
            names.addItem(QListWidgetItem(f"{rec.group_key}  {rec.name}"))
        root.addWidget(names)

        if needs_ack:
            warn = QLabel("Warning: every project of these versions will be deleted:")
            warn.setStyleSheet("color: #b00020; font-weight: bold;")
            root.addWidget(warn)
            lst = QListWidget()
            for s in full_groups:
                lst.addItem(QListWidgetItem(f"Revit {s.group_key} ({s.total_count} projects)"))
            root.addWidget(lst)

        self._confirm_box = QCheckBox("I understand these caches will be removed")
        if needs_ack:
            root.addWidget(self._confirm_box)
        else:
            self._confirm_box.setChecked(True)

        btns = QHBoxLayout()
        self.btn_ok = QPushButton("Delete")
        self.btn_cancel = QPushButton("Cancel")
        btns.addWidget(self.btn_ok)
        btns.addStretch(1)
        btns.addWidget(self.btn_cancel)
        root.addLayout(btns)

        self.btn_ok.clicked.connect(self._on_accept)
        self.btn_cancel.clicked.connect(self.reject)

    def _on_accept(self) -> None:
        if not self._confirm_box.isChecked():
            return
        self.confirmRequested.emit()
