# Qt signal definitions for tftsync
#
# Centralized signal hub for the Qt layer.  Events published by the
# toolkit-independent core on the EventBus are re-emitted here as Qt
# signals once attach() has been called.

from PySide6.QtCore import QObject, Signal

from .. import EventBus


class AppSignals(QObject):
    """Central signal hub for the application."""

    # Model
    model_changed = Signal()               # any effective project change
    screens_changed = Signal()             # screen list / names / order
    active_screen_changed = Signal(int)    # screen id
    active_element_changed = Signal(int)   # element id, -1 for none

    # Code
    text_generated = Signal(str)           # regenerated source text

    # Sync state machine
    sync_state_changed = Signal(str)       # Idle, Debouncing, ...

    # Status bar
    status_message = Signal(str)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._forward = {
            EventBus.MODEL_CHANGED: self._on_model_changed,
            EventBus.SCREENS_CHANGED: self._on_screens_changed,
            EventBus.TEXT_GENERATED: self._on_text_generated,
            EventBus.STATUS_MESSAGE: self._on_status_message,
        }

    def attach(self, bus):
        """Start forwarding core events from bus."""
        for event_name, callback in self._forward.items():
            bus.on(event_name, callback)

    def detach(self, bus):
        for event_name, callback in self._forward.items():
            bus.off(event_name, callback)

    # ---- forwarding -------------------------------------------------------

    def _on_model_changed(self, project):
        self.model_changed.emit()

    def _on_screens_changed(self):
        self.screens_changed.emit()

    def _on_text_generated(self, text):
        self.text_generated.emit(text)

    def _on_status_message(self, message):
        self.status_message.emit(message)
