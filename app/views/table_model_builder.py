from __future__ import annotations

from collections.abc import Iterable

from PySide6.QtCore import Qt
from PySide6.QtGui import QStandardItem, QStandardItemModel

from app.views.constants import (
    COL_AGE,
    COL_GROUP,
    COL_NAME,
    COL_SEL,
    COL_SIZE,
    HEADERS,
    RECORD_ID_ROLE,
    format_size,
)
from core.models import CacheRecord


def build_model(records: Iterable[CacheRecord]) -> QStandardItemModel:
    """Builds a flat table model from records already in display order.

    Sorting happens in the view-model, so no proxy model is installed.
    """
    model = QStandardItemModel()
    model.setHorizontalHeaderLabels(HEADERS)

    for rec in records:
        check = QStandardItem("")
        check.setCheckable(True)
        check.setCheckState(Qt.Checked if rec.selected else Qt.Unchecked)

        name_item = QStandardItem(rec.name)
        name_item.setData(rec.id, RECORD_ID_ROLE)
        name_item.setToolTip(rec.id)

        row: list[QStandardItem] = [QStandardItem("") for _ in HEADERS]
        row[COL_SEL] = check
        row[COL_NAME] = name_item
        row[COL_GROUP] = QStandardItem(str(rec.group_key))
        row[COL_AGE] = QStandardItem(str(rec.age_days))
        row[COL_SIZE] = QStandardItem(format_size(rec.size_bytes))
        row[COL_AGE].setTextAlignment(Qt.AlignRight | Qt.AlignVCenter)
        row[COL_SIZE].setTextAlignment(Qt.AlignRight | Qt.AlignVCenter)
        for it in row:
            it.setEditable(False)
        model.appendRow(row)

    return model


def record_id_at(model: QStandardItemModel, row: int) -> str | None:
    """Return the record id stored on `row`, or None when out of range."""
    item = model.item(row, COL_NAME)
    if item is None:
        return None
    value = item.data(RECORD_ID_ROLE)
    return str(value) if value else None
