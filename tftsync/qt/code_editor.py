# Code editor surface - QPlainTextEdit adapter for the sync controller
#
# Separates the user's own keystrokes from text pushed in by the
# code generator: only the former are reported through user_edited,
# so a model-driven refresh never re-enters the sync pipeline.

from PySide6.QtCore import QObject, Signal
from PySide6.QtGui import QFontDatabase, QTextCursor
from PySide6.QtWidgets import QPlainTextEdit


class CodeEdit(QPlainTextEdit):
    """Plain text editor reporting when it loses keyboard focus."""

    focus_lost = Signal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setFont(
            QFontDatabase.systemFont(QFontDatabase.SystemFont.FixedFont))
        self.setLineWrapMode(QPlainTextEdit.LineWrapMode.NoWrap)

    def focusOutEvent(self, event):
        super().focusOutEvent(event)
        self.focus_lost.emit()


class CodeEditorSurface(QObject):
    """Get/set text, focus query and edit notification for one editor."""

    user_edited = Signal(str)      # full text after a user edit
    focus_lost = Signal()

    def __init__(self, editor=None, parent=None):
        """
        Args:
            editor: CodeEdit to wrap; one is created if None.
        """
        super().__init__(parent)
        self.editor = editor if editor is not None else CodeEdit()
        self._programmatic = False
        self.editor.textChanged.connect(self._on_text_changed)
        self.editor.focus_lost.connect(self.focus_lost)

    def text(self):
        return self.editor.toPlainText()

    def set_text(self, text):
        """Replace the buffer without reporting it as a user edit.

        The cursor position and scroll offset are kept where possible,
        and the replacement is one undo step.

        Returns:
            False if the buffer already held text.
        """
        if text == self.text():
            return False
        position = self.editor.textCursor().position()
        scroll = self.editor.verticalScrollBar().value()

        self._programmatic = True
        try:
            cursor = QTextCursor(self.editor.document())
            cursor.beginEditBlock()
            cursor.select(QTextCursor.SelectionType.Document)
            cursor.insertText(text)
            cursor.endEditBlock()
        finally:
            self._programmatic = False

        cursor = self.editor.textCursor()
        cursor.setPosition(
            min(position, self.editor.document().characterCount() - 1))
        self.editor.setTextCursor(cursor)
        self.editor.verticalScrollBar().setValue(scroll)
        return True

    def has_focus(self):
        return self.editor.hasFocus()

    def _on_text_changed(self):
        if self._programmatic:
            return
        self.user_edited.emit(self.text())
