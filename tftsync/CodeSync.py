# CodeSync - Toolkit-independent model/code synchronisation
#
# Owns the Project, the last known source text, the generator and
# the reconciler.  UI actions mutate the project through here and
# code edits are applied through apply_text(); every effective
# change is announced on the EventBus so the persistence layer and
# the Qt signal hub can react without being coupled to the core.

import logging

from . import EventBus
from .CodeGenerator import CodeGenerator, rename_screen_function
from .EventBus import bus as event_bus
from .ProjectModel import Project
from .Reconciler import Reconciler
from .utils_core import _


class CodeSync:
    """Keeps a Project and its generated source text consistent.

    Events emitted:
        "model_changed"     (project)
        "screens_changed"   ()
        "text_generated"    (text)
        "status_message"    (message)
    """

    def __init__(self, project=None, generator=None, reconciler=None,
                 bus=None):
        """
        Args:
            project: Project to edit; a new empty one by default.
            generator: CodeGenerator (configured defaults if None).
            reconciler: Reconciler sharing the generator.
            bus: EventBus to notify; the application bus by default.
        """
        self.project = project if project is not None else Project()
        self.generator = generator or CodeGenerator()
        self.reconciler = reconciler or Reconciler(self.generator)
        self.bus = bus if bus is not None else event_bus
        self.text = ""

    # ------------------------------------------------------------------
    # Text <-> model
    # ------------------------------------------------------------------
    def regenerate(self, previous_text=None):
        """Render the project, keeping preamble and user functions.

        Args:
            previous_text: Buffer to preserve from; self.text if None.

        Returns:
            The new text, also stored in self.text.
        """
        if previous_text is None:
            previous_text = self.text
        self.text = self.generator.generate(self.project, previous_text)
        self.bus.emit(EventBus.TEXT_GENERATED, self.text)
        return self.text

    def apply_text(self, text):
        """Reconcile the project against edited source text.

        Returns:
            True if the project changed.
        """
        self.text = text or ""
        before = [s.id for s in self.project.screens]
        changed = self.reconciler.reconcile(self.project, self.text)
        skipped = self.reconciler.parser.skipped
        if skipped:
            logging.debug("%d line(s) not understood", len(skipped))
            self.bus.emit(
                EventBus.STATUS_MESSAGE,
                _("Ignored {} unrecognised line(s), first at line {}")
                .format(len(skipped), skipped[0][0]))
        if changed:
            if before != [s.id for s in self.project.screens]:
                self.bus.emit(EventBus.SCREENS_CHANGED)
            self._model_changed()
        return changed

    @property
    def skipped(self):
        """(line number, text) of lines dropped by the last apply_text()."""
        return list(self.reconciler.parser.skipped)

    def load(self, data, text=None):
        """Replace the project with one restored by the persistence layer."""
        self.project = Project.from_dict(data)
        self.text = text or ""
        self.bus.emit(EventBus.SCREENS_CHANGED)

    # ------------------------------------------------------------------
    # Screens
    # ------------------------------------------------------------------
    def add_screen(self, name=None, template=None):
        screen = self.project.add_screen(name, template)
        self.bus.emit(EventBus.SCREENS_CHANGED)
        self._model_changed()
        return screen

    def delete_screen(self, screen_id):
        """Delete a screen.  The last remaining screen is kept."""
        if len(self.project.screens) <= 1:
            self.bus.emit(EventBus.STATUS_MESSAGE,
                          _("A project needs at least one screen"))
            return False
        if not self.project.delete_screen(screen_id):
            return False
        self.bus.emit(EventBus.SCREENS_CHANGED)
        self._model_changed()
        return True

    def select_screen(self, screen_id):
        if self.project.screen(screen_id) is None or \
                self.project.active_screen_id == screen_id:
            return False
        self.project.active_screen_id = screen_id
        self.project.active_element_id = None
        return True

    def rename_screen(self, screen_id, name):
        """Rename a screen and repoint calls to its draw function."""
        screen = self.project.screen(screen_id)
        if screen is None or not name or screen.name == name:
            return False
        self.text = rename_screen_function(self.text, screen.name, name)
        screen.name = name
        self.bus.emit(EventBus.SCREENS_CHANGED)
        self._model_changed()
        return True

    def move_screen(self, screen_id, new_index):
        if not self.project.move_screen(screen_id, new_index):
            return False
        self.bus.emit(EventBus.SCREENS_CHANGED)
        self._model_changed()
        return True

    def set_screen_property(self, screen_id, prop, value):
        if prop == "name":
            return self.rename_screen(screen_id, value)
        if not self.project.set_screen_property(screen_id, prop, value):
            return False
        self._model_changed()
        return True

    # ------------------------------------------------------------------
    # Elements
    # ------------------------------------------------------------------
    def add_element(self, type, asset=None):
        el = self.project.add_element(type, asset)
        if el is not None:
            self._model_changed()
        return el

    def delete_element(self, element_id):
        if not self.project.delete_element(element_id):
            return False
        self._model_changed()
        return True

    def select_element(self, element_id):
        screen, el = self.project.find_element(element_id)
        if el is None:
            return False
        self.project.active_screen_id = screen.id
        self.project.active_element_id = element_id
        return True

    def move_element(self, element_id, new_index):
        if not self.project.move_element(element_id, new_index):
            return False
        self._model_changed()
        return True

    def set_element_property(self, element_id, prop, value):
        try:
            changed = self.project.set_element_property(element_id, prop,
                                                        value)
        except (TypeError, ValueError):
            self.bus.emit(EventBus.STATUS_MESSAGE,
                          _("Invalid value for {}: {}").format(prop, value))
            return False
        if changed:
            self._model_changed()
        return changed

    # ------------------------------------------------------------------
    # Assets
    # ------------------------------------------------------------------
    def add_asset(self, name, data=None):
        asset = self.project.add_asset(name, data)
        self._model_changed()
        return asset

    def delete_asset(self, name):
        if not self.project.delete_asset(name):
            return False
        self._model_changed()
        return True

    # ------------------------------------------------------------------
    def _model_changed(self):
        self.bus.emit(EventBus.MODEL_CHANGED, self.project)
