# Qt tree model for screens and their elements
#
# Two-level hierarchy: screens are root rows, elements are children.
# References project.screens directly; every edit goes through the
# SyncController so the code is regenerated.

from PySide6.QtCore import QAbstractItemModel, QModelIndex, Qt
from PySide6.QtGui import QColor, QFont

from ..ScreenScanner import GENERATED_PREFIX

BIND_FG = QColor("DarkCyan")

# Sentinel used as internalId for screen rows (no parent screen)
_SCREEN_ID = 0xFFFFFFFF


class ProjectTreeModel(QAbstractItemModel):
    """Two-level tree model over project.screens.

    Root rows  = screens.   internalId = _SCREEN_ID
    Child rows = elements.  internalId = parent screen row
    """

    def __init__(self, controller, parent=None):
        super().__init__(parent)
        self.controller = controller
        self._busy = False
        signals = controller.signals
        signals.model_changed.connect(self.refresh)
        signals.screens_changed.connect(self.refresh)

    @property
    def project(self):
        return self.controller.project

    # ---- structure --------------------------------------------------------

    def index(self, row, column, parent=QModelIndex()):
        if not self.hasIndex(row, column, parent):
            return QModelIndex()
        if not parent.isValid():
            return self.createIndex(row, column, _SCREEN_ID)
        return self.createIndex(row, column, parent.row())

    def parent(self, index):
        if not index.isValid():
            return QModelIndex()
        iid = index.internalId()
        if iid == _SCREEN_ID:
            return QModelIndex()
        return self.createIndex(iid, 0, _SCREEN_ID)

    def rowCount(self, parent=QModelIndex()):
        screens = self.project.screens
        if not parent.isValid():
            return len(screens)
        if parent.internalId() == _SCREEN_ID:
            row = parent.row()
            if 0 <= row < len(screens):
                return len(screens[row].elements)
        return 0

    def columnCount(self, parent=QModelIndex()):
        return 1

    def flags(self, index):
        if not index.isValid():
            return Qt.ItemFlag.NoItemFlags
        return (Qt.ItemFlag.ItemIsEnabled
                | Qt.ItemFlag.ItemIsSelectable
                | Qt.ItemFlag.ItemIsEditable)

    # ---- data -------------------------------------------------------------

    def _item(self, index):
        """Return (screen, element_or_None) for index, or (None, None)."""
        if not index.isValid():
            return None, None
        screens = self.project.screens
        iid = index.internalId()
        if iid == _SCREEN_ID:
            if index.row() < len(screens):
                return screens[index.row()], None
            return None, None
        if iid >= len(screens):
            return None, None
        screen = screens[iid]
        if index.row() >= len(screen.elements):
            return None, None
        return screen, screen.elements[index.row()]

    def data(self, index, role=Qt.ItemDataRole.DisplayRole):
        screen, el = self._item(index)
        if screen is None:
            return None
        if el is None:
            return self._screen_data(screen, role)
        return self._element_data(el, role)

    def _screen_data(self, screen, role):
        if role in (Qt.ItemDataRole.DisplayRole, Qt.ItemDataRole.EditRole):
            return screen.name
        if role == Qt.ItemDataRole.ToolTipRole:
            return f"{GENERATED_PREFIX}{screen.canonical_name}()"
        if role == Qt.ItemDataRole.FontRole:
            if screen.id == self.project.active_screen_id:
                font = QFont()
                font.setBold(True)
                return font
        return None

    def _element_data(self, el, role):
        if role == Qt.ItemDataRole.DisplayRole:
            return f"{el.name} ({el.type})"
        if role == Qt.ItemDataRole.EditRole:
            return el.name
        if role == Qt.ItemDataRole.DecorationRole:
            return QColor(el.color)
        if role == Qt.ItemDataRole.ForegroundRole:
            return BIND_FG if el.has_binds() else None
        if role == Qt.ItemDataRole.ToolTipRole:
            return f"{el.x}, {el.y}  {el.w} x {el.h}"
        return None

    # ---- editing ----------------------------------------------------------

    def setData(self, index, value, role=Qt.ItemDataRole.EditRole):
        if role != Qt.ItemDataRole.EditRole:
            return False
        screen, el = self._item(index)
        if screen is None or not value:
            return False
        self._busy = True
        try:
            if el is None:
                ok = self.controller.rename_screen(screen.id, value)
            else:
                ok = self.controller.set_element_property(el.id, "name",
                                                          value)
        finally:
            self._busy = False
        if ok:
            self.dataChanged.emit(index, index, [role])
        return bool(ok)

    def moveRows(self, sourceParent, sourceRow, count, destinationParent,
                 destinationChild):
        """Move one screen or one element within its screen."""
        if count != 1 or sourceParent != destinationParent:
            return False
        if destinationChild in (sourceRow, sourceRow + 1):
            return False
        # index of the row once it has been taken out of the list
        new_index = destinationChild if destinationChild < sourceRow \
            else destinationChild - 1

        # a pending code edit may restructure the project; apply it
        # before the moved row is looked up
        self.controller.scheduler.flush()

        if not sourceParent.isValid():
            screens = self.project.screens
            if not 0 <= sourceRow < len(screens):
                return False
            move = self.controller.move_screen
            item_id = screens[sourceRow].id
        else:
            screen, _el = self._item(sourceParent)
            if screen is None or not 0 <= sourceRow < len(screen.elements):
                return False
            move = self.controller.move_element
            item_id = screen.elements[sourceRow].id

        if not self.beginMoveRows(sourceParent, sourceRow, sourceRow,
                                  destinationParent, destinationChild):
            return False
        self._busy = True
        try:
            moved = move(item_id, new_index)
        finally:
            self._busy = False
            self.endMoveRows()
        return bool(moved)

    # ---- refresh ----------------------------------------------------------

    def refresh(self):
        """Full reset after any structural mutation."""
        if self._busy:
            return
        self.beginResetModel()
        self.endResetModel()

    # ---- helpers ----------------------------------------------------------

    def screen_index(self, screen_id):
        """Return QModelIndex for a screen row."""
        row = self.project.screen_index(screen_id)
        if row < 0:
            return QModelIndex()
        return self.createIndex(row, 0, _SCREEN_ID)

    def element_index(self, element_id):
        """Return QModelIndex for an element row."""
        screen, el = self.project.find_element(element_id)
        if el is None:
            return QModelIndex()
        row = self.project.screen_index(screen.id)
        return self.createIndex(screen.elements.index(el), 0, row)

    def item_id(self, index):
        """Return ("screen", id) or ("element", id) for a given index."""
        screen, el = self._item(index)
        if screen is None:
            return None
        if el is None:
            return ("screen", screen.id)
        return ("element", el.id)
