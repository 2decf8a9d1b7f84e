from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional, Sequence

from PySide6.QtCore import QAbstractTableModel, QModelIndex, Qt


ColumnAccessor = Callable[[Any], Any]


@dataclass(frozen=True)
class TableColumn:
    title: str
    display: ColumnAccessor
    sort_key: Optional[ColumnAccessor] = None
    numeric: bool = False


class ListTableModel(QAbstractTableModel):
    """Read-only table over a list of row objects.

    Cells show the column's formatted ``display`` value; sorting uses the raw
    ``sort_key`` so "$100.00" sorts after "$9.00".
    """

    def __init__(self, columns: Sequence[TableColumn], rows: Iterable[Any] | None = None) -> None:
        super().__init__()
        self._columns: List[TableColumn] = list(columns)
        self._rows: List[Any] = list(rows or [])
        self._sort_column: Optional[int] = None
        self._sort_order = Qt.SortOrder.AscendingOrder

    def rowCount(self, parent: QModelIndex | None = None) -> int:  # noqa: N802
        if parent and parent.isValid():
            return 0
        return len(self._rows)

    def columnCount(self, parent: QModelIndex | None = None) -> int:  # noqa: N802
        return len(self._columns)

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole) -> object | None:  # noqa: N802
        if not index.isValid() or not (0 <= index.row() < len(self._rows)):
            return None

        column = self._columns[index.column()]
        if role in (Qt.ItemDataRole.DisplayRole, Qt.ItemDataRole.EditRole):
            value = column.display(self._rows[index.row()])
            return "" if value is None else str(value)

        if role == Qt.ItemDataRole.TextAlignmentRole:
            horizontal = Qt.AlignmentFlag.AlignRight if column.numeric else Qt.AlignmentFlag.AlignLeft
            return int(horizontal | Qt.AlignmentFlag.AlignVCenter)

        return None

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.ItemDataRole.DisplayRole) -> object | None:  # noqa: N802
        if orientation == Qt.Orientation.Horizontal and role == Qt.ItemDataRole.DisplayRole:
            return self._columns[section].title
        return super().headerData(section, orientation, role)

    def sort(self, column: int, order: Qt.SortOrder = Qt.SortOrder.AscendingOrder) -> None:
        if not (0 <= column < len(self._columns)):
            return
        self._sort_column = column
        self._sort_order = order
        self.layoutAboutToBeChanged.emit()
        self._apply_sort()
        self.layoutChanged.emit()

    def row_at(self, row: int) -> Any:
        return self._rows[row]

    def rows(self) -> List[Any]:
        return list(self._rows)

    def update_rows(self, rows: Iterable[Any]) -> None:
        self.beginResetModel()
        self._rows = list(rows)
        self._apply_sort()
        self.endResetModel()

    def clear(self) -> None:
        self.update_rows([])

    def _apply_sort(self) -> None:
        if self._sort_column is None:
            return
        column = self._columns[self._sort_column]
        key = column.sort_key or column.display
        # None sorts first ascending, last descending.
        self._rows.sort(
            key=lambda row: _sortable(key(row)),
            reverse=self._sort_order == Qt.SortOrder.DescendingOrder,
        )


def _sortable(value: Any) -> tuple:
    if value is None:
        return (0, "")
    if isinstance(value, str):
        return (1, value.casefold())
    return (2, value)
