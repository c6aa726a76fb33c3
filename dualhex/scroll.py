import logging

from PyQt6.QtCore import QObject, pyqtSignal

from .caret import View

log = logging.getLogger(__name__)


class ScrollSync(QObject):
    """Keeps the vertical row position of both views locked together.

    ``scrollChanged(view, row)`` asks ``view`` to scroll to ``row``. Scroll
    events a view reports while it is being moved are dropped, so propagation
    never bounces back to its source.
    """

    scrollChanged = pyqtSignal(object, int)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.positions = {View.HEX: 0, View.SYMBOL: 0}
        self.max_row = 0
        self.suppressed = 0
        self._propagating = False

    def rewind(self, rows):
        """A rebuilt window is rendered from its first row in both views"""
        self.max_row = max(0, rows - 1)
        self.positions = {View.HEX: 0, View.SYMBOL: 0}

    def position(self, view):
        return self.positions[view]

    def on_scroll(self, view, row):
        """Record a user scroll on ``view`` and move the other view to match"""
        if self._propagating:
            self.suppressed += 1
            return None
        row = min(max(row, 0), self.max_row)
        self.positions[view] = row
        self._propagate(view.other(), row)
        return row

    def follow(self, source):
        """Bring the other view to ``source``'s current row"""
        if self._propagating:
            self.suppressed += 1
            return None
        row = self.positions[source]
        self._propagate(source.other(), row)
        return row

    def reset(self):
        self.positions = {View.HEX: 0, View.SYMBOL: 0}
        for view in self.positions:
            self._propagate(view, 0)

    def _propagate(self, target, row):
        self._propagating = True
        try:
            self.positions[target] = row
            self.scrollChanged.emit(target, row)
        finally:
            self._propagating = False
        log.debug("Scrolled %s view to row %d", target.value, row)
