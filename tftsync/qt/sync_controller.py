# Sync controller - wires CodeSync, the scheduler and the code editor
#
# UI actions go through here: each one mutates the project via
# CodeSync and re-emits the code.  User edits in the code editor go
# the other way, through the SyncScheduler debounce into
# CodeSync.apply_text().

import logging

from PySide6.QtCore import QObject

from ..CodeSync import CodeSync
from .code_editor import CodeEditorSurface
from .signals import AppSignals
from .sync_scheduler import IDLE, SyncScheduler


class SyncController(QObject):
    """Two-way sync between a Project and a code editor surface."""

    def __init__(self, sync=None, editor=None, signals=None, scheduler=None,
                 parent=None):
        """
        Args:
            sync: CodeSync owning the project (new one if None).
            editor: CodeEditorSurface showing the code.
            signals: AppSignals hub; core events are forwarded to it.
            scheduler: SyncScheduler; built around this controller's
                       reconciliation pass if None.
        """
        super().__init__(parent)
        self.sync = sync or CodeSync()
        self.editor = editor or CodeEditorSurface(parent=self)
        self.signals = signals or AppSignals(self)
        self.scheduler = scheduler or SyncScheduler(self._reconcile_pass,
                                                    parent=self)
        self._refresh_pending = False

        self.signals.attach(self.sync.bus)
        self.editor.user_edited.connect(self.scheduler.text_changed)
        self.editor.focus_lost.connect(self._on_focus_lost)
        self.scheduler.state_changed.connect(self.signals.sync_state_changed)
        self.scheduler.pass_finished.connect(self._on_pass_finished)

    @property
    def project(self):
        return self.sync.project

    def start(self):
        """Show the code for the current project."""
        if not self.project.screens:
            self.sync.add_screen("Main")
        self.refresh(force=True)

    def close(self):
        self.scheduler.stop()
        self.signals.detach(self.sync.bus)

    # ------------------------------------------------------------------
    # Model -> code
    # ------------------------------------------------------------------
    def refresh(self, force=False, previous_text=None):
        """Regenerate the code and push it to the editor.

        Skipped (and remembered) while the editor has input focus,
        so text the user is typing is never replaced.

        Args:
            force: Refresh even if the editor has focus.
            previous_text: Text whose preamble and user functions are
                           kept; the editor's current text if None.

        Returns:
            True if the editor text was replaced.
        """
        if not force and self.editor.has_focus():
            logging.debug("Editor has focus, code refresh deferred")
            self._refresh_pending = True
            return False
        self._refresh_pending = False
        if previous_text is None:
            previous_text = self.editor.text()
        text = self.sync.regenerate(previous_text)
        return self.editor.set_text(text)

    def _on_focus_lost(self):
        if self._refresh_pending and self.scheduler.state == IDLE:
            self.refresh()

    # ------------------------------------------------------------------
    # Code -> model
    # ------------------------------------------------------------------
    def _reconcile_pass(self, text):
        return self.sync.apply_text(text)

    def _on_pass_finished(self, changed):
        if changed:
            self._emit_active()
        if changed or self._refresh_pending:
            self.refresh()

    # ------------------------------------------------------------------
    # UI actions
    # ------------------------------------------------------------------
    def _ui_change(self, action, *args, reorder=False):
        """Run a model mutation originating from the UI.

        A pending code edit is applied first, so the mutation is not
        undone by a stale text snapshot afterwards.
        """
        self.scheduler.flush()
        self.sync.text = self.editor.text()
        result = action(*args)
        if result:
            if reorder:
                self.scheduler.suppress()
            # sync.text carries any rename patched into the code
            self.refresh(previous_text=self.sync.text)
            self._emit_active()
        return result

    def _emit_active(self):
        project = self.project
        if project.active_screen_id is not None:
            self.signals.active_screen_changed.emit(project.active_screen_id)
        element_id = project.active_element_id
        self.signals.active_element_changed.emit(
            -1 if element_id is None else element_id)

    # ---- screens ----------------------------------------------------------

    def add_screen(self, name=None, template=None):
        return self._ui_change(self.sync.add_screen, name, template)

    def delete_screen(self, screen_id):
        return self._ui_change(self.sync.delete_screen, screen_id)

    def rename_screen(self, screen_id, name):
        return self._ui_change(self.sync.rename_screen, screen_id, name)

    def move_screen(self, screen_id, new_index):
        return self._ui_change(self.sync.move_screen, screen_id, new_index,
                               reorder=True)

    def set_screen_property(self, screen_id, prop, value):
        return self._ui_change(self.sync.set_screen_property, screen_id,
                               prop, value)

    def select_screen(self, screen_id):
        if not self.sync.select_screen(screen_id):
            return False
        self._emit_active()
        return True

    # ---- elements ---------------------------------------------------------

    def add_element(self, type, asset=None):
        return self._ui_change(self.sync.add_element, type, asset)

    def delete_element(self, element_id):
        return self._ui_change(self.sync.delete_element, element_id)

    def move_element(self, element_id, new_index):
        return self._ui_change(self.sync.move_element, element_id,
                               new_index, reorder=True)

    def set_element_property(self, element_id, prop, value):
        return self._ui_change(self.sync.set_element_property, element_id,
                               prop, value)

    def select_element(self, element_id):
        if not self.sync.select_element(element_id):
            return False
        self._emit_active()
        return True

    # ---- assets -----------------------------------------------------------

    def add_asset(self, name, data=None):
        return self._ui_change(self.sync.add_asset, name, data)

    def delete_asset(self, name):
        return self._ui_change(self.sync.delete_asset, name)
