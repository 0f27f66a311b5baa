from __future__ import annotations

from PySide6.QtCore import Signal
from PySide6.QtWidgets import (
    QDialog,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QSpinBox,
    QVBoxLayout,
)


class SelectByAgeDialog(QDialog):
    selectRequested = Signal(int)  # threshold days

    def __init__(self, default_days: int = 30, parent=None) -> None:
        super().__init__(parent)
        self.setWindowTitle("Select by Age")

        root = QVBoxLayout(self)

        row = QHBoxLayout()
        row.addWidget(QLabel("Older than (days)"))
        self.days = QSpinBox()
        self.days.setRange(0, 36500)
        self.days.setValue(max(0, int(default_days)))
        row.addWidget(self.days)
        root.addLayout(row)

        tips = QLabel(
            "Selects every project at least this many days old and clears the\n"
            "selection of all younger projects."
        )
        tips.setWordWrap(True)
        root.addWidget(tips)

        btns = QHBoxLayout()
        self.btn_select = QPushButton("Select")
        self.btn_close = QPushButton("Close")
        btns.addWidget(self.btn_select)
        btns.addStretch(1)
        btns.addWidget(self.btn_close)
        root.addLayout(btns)

        self.btn_select.clicked.connect(lambda: self.selectRequested.emit(self.days.value()))
        self.btn_close.clicked.connect(self.close)
