# Qt Sync Scheduler - debounce code edits before parsing them back
#
# Single-shot QTimers drive a four-state machine:
#
#   Idle --edit--> Debouncing --quiet period--> Reconciling --> Idle
#   any  --suppress()--> Suppressed --cool-down--> Idle
#
# Edits arriving while Reconciling or Suppressed are ignored, and a
# debounce expiry that finds the scheduler in either state is dropped
# rather than queued.

import logging

from PySide6.QtCore import QObject, QTimer, Signal

from .. import utils_core as Utils

IDLE = "Idle"
DEBOUNCING = "Debouncing"
RECONCILING = "Reconciling"
SUPPRESSED = "Suppressed"

DEBOUNCE_MS = 300
COOLDOWN_MS = 500


class SyncScheduler(QObject):
    """Debounces text-change events into reconciliation passes."""

    state_changed = Signal(str)
    pass_finished = Signal(bool)    # model changed

    def __init__(self, run_pass, debounce_ms=None, cooldown_ms=None,
                 parent=None):
        """
        Args:
            run_pass: Callable(text) -> bool running one reconciliation
                      with the given text snapshot; True if the model
                      changed.
            debounce_ms: Quiescence window ([Sync] debounce_ms).
            cooldown_ms: Suppression window ([Sync] cooldown_ms).
        """
        super().__init__(parent)
        self._run_pass = run_pass
        self._state = IDLE
        self._text = None

        if debounce_ms is None:
            debounce_ms = Utils.getInt("Sync", "debounce_ms", DEBOUNCE_MS)
        if cooldown_ms is None:
            cooldown_ms = Utils.getInt("Sync", "cooldown_ms", COOLDOWN_MS)

        self._debounce = QTimer(self)
        self._debounce.setSingleShot(True)
        self._debounce.setInterval(debounce_ms)
        self._debounce.timeout.connect(self._on_debounce_timeout)

        self._cooldown = QTimer(self)
        self._cooldown.setSingleShot(True)
        self._cooldown.setInterval(cooldown_ms)
        self._cooldown.timeout.connect(self._on_cooldown_timeout)

    @property
    def state(self):
        return self._state

    @property
    def pending_text(self):
        """Text snapshot waiting for the debounce to expire, or None."""
        return self._text

    def _set_state(self, state):
        if state == self._state:
            return
        logging.debug("Sync %s -> %s", self._state, state)
        self._state = state
        self.state_changed.emit(state)

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------
    def text_changed(self, text):
        """A user edit: remember text and restart the quiescence timer.

        Returns:
            False if the edit was ignored.
        """
        if self._state in (RECONCILING, SUPPRESSED):
            logging.debug("Edit ignored while %s", self._state)
            return False
        self._text = text
        self._debounce.start()
        self._set_state(DEBOUNCING)
        return True

    def suppress(self):
        """Enter the cool-down that follows a UI-driven reorder."""
        self._debounce.stop()
        self._text = None
        self._set_state(SUPPRESSED)
        self._cooldown.start()

    def flush(self):
        """Run a pending pass now instead of waiting for the timer.

        Returns:
            True if a pass was run.
        """
        if self._state != DEBOUNCING:
            return False
        self._debounce.stop()
        return self._on_debounce_timeout()

    def stop(self):
        self._debounce.stop()
        self._cooldown.stop()
        self._text = None
        self._set_state(IDLE)

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------
    def _on_debounce_timeout(self):
        if self._state in (RECONCILING, SUPPRESSED):
            logging.debug("Reconciliation dropped while %s", self._state)
            return False
        text, self._text = self._text, None
        if text is None:
            self._set_state(IDLE)
            return False

        self._set_state(RECONCILING)
        changed = False
        try:
            changed = bool(self._run_pass(text))
        except Exception:
            logging.exception("Reconciliation pass failed")
        finally:
            self._set_state(IDLE)
        self.pass_finished.emit(changed)
        return True

    def _on_cooldown_timeout(self):
        if self._state == SUPPRESSED:
            self._set_state(IDLE)
