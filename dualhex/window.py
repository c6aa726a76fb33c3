import logging
from contextlib import contextmanager
from dataclasses import dataclass

from PyQt6.QtCore import QObject, pyqtSignal

from .caret import CaretMapper, HexLocation, Mark, View
from .config import EditorConfig
from .document import Document
from .edit import DeleteByte, EditEngine, OverwriteNibble
from .errors import MappingError
from .model import HEX_TOKEN_WIDTH, DualViewModelBuilder
from .scroll import ScrollSync

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CaretSync:
    """Where both views' carets and highlight marks belong after an event"""

    source: View
    caret: int          # caret offset in the source view
    hex: Mark
    symbol: Mark
    file_offset: int
    generation: int
    repositioned: bool = False


class WindowManager(QObject):
    """Owns the open document and the loaded window, and reacts to view events.

    The views render ``modelChanged`` and ``caretChanged`` payloads. Anything a
    view reports while one of those emissions is running is a side effect of a
    programmatic update and is dropped instead of being handled again.
    """

    modelChanged = pyqtSignal(object)
    caretChanged = pyqtSignal(object)
    documentChanged = pyqtSignal(object)

    def __init__(self, config=None, parent=None):
        super().__init__(parent)
        self.config = config or EditorConfig()
        self.builder = DualViewModelBuilder.from_config(self.config)
        self.scroll = ScrollSync(self)

        self.document = None
        self.engine = None
        self.window = None
        self.model = None
        self.mapper = None

        # Re-entrancy bookkeeping
        self.generation = 0
        self.suppressed_events = 0
        self._programmatic = 0

    @contextmanager
    def programmatic_update(self):
        self._programmatic += 1
        try:
            yield
        finally:
            self._programmatic -= 1

    @property
    def updating(self):
        return self._programmatic > 0

    def _suppress(self, what):
        self.suppressed_events += 1
        log.debug("Ignoring %s raised by a programmatic update", what)

    # Document lifecycle

    def open(self, path):
        document = Document.open(path, self.config.temp_suffix)
        self.close()
        self.document = document
        self.engine = EditEngine(document)
        self.load_window(0)
        with self.programmatic_update():
            self.scroll.reset()
            self.documentChanged.emit(document)
        return document

    def close(self):
        if self.document is None:
            return
        self.document.close()
        self.document = None
        self.engine = None
        self.window = None
        self.model = None
        self.mapper = None

    def save_as(self, path):
        self._require_document()
        self.document.save_as(path)

    def _require_document(self):
        if self.document is None:
            raise RuntimeError("no document is open")

    # Window placement

    def load_window(self, offset):
        self._require_document()
        window = self.document.read_window(offset, self.config.capacity)
        self._rebuild(window)
        return window

    def shift_window(self, delta_rows):
        self._require_document()
        bpr = self.config.bytes_per_row
        offset = self.window.offset + delta_rows * bpr
        last_row = max(0, (self.document.length - 1) // bpr * bpr)
        return self.load_window(min(max(offset, 0), last_row))

    def _rebuild(self, window):
        self.window = window
        self.model = self.builder.build(window)
        self.mapper = CaretMapper(self.model)
        self.generation += 1
        self.scroll.rewind(self.model.row_count)
        log.debug("Window %d..%d rebuilt (generation %d)", window.offset, window.end, self.generation)
        with self.programmatic_update():
            self.modelChanged.emit(self.model)

    # Navigation input

    def on_caret_moved(self, view, offset):
        if self.updating:
            self._suppress(f"{view.value} caret move")
            return None
        if self.model is None:
            return None

        if view is View.SYMBOL:
            with self.programmatic_update():
                self.scroll.follow(View.SYMBOL)
            return self._emit_caret(self._sync_from_symbol(offset))

        with self.programmatic_update():
            self.scroll.follow(View.HEX)
        sync = self._emit_caret(self._sync_from_hex(offset))

        rows = self.config.rows
        row_width = self.model.hex_row_width
        row = offset // row_width
        if row == rows - 1 and self.window.end < self.document.length:
            self.shift_window(rows - 2)
            return self._place_hex_caret(2 * row_width - 1)
        if row == 0 and self.window.offset > 0:
            self.shift_window(-(rows - 2))
            return self._place_hex_caret((rows - 2) * row_width)
        return sync

    def on_scroll(self, view, row):
        if self.updating:
            self._suppress(f"{view.value} scroll")
            return None
        return self.scroll.on_scroll(view, row)

    def _sync_from_hex(self, offset, repositioned=False):
        hex_mark = Mark(self.mapper.hex_token_start(offset), HEX_TOKEN_WIDTH)
        return CaretSync(
            source=View.HEX,
            caret=offset,
            hex=hex_mark,
            symbol=self.mapper.hex_to_symbol(offset),
            file_offset=self._file_offset(hex_mark.offset),
            generation=self.generation,
            repositioned=repositioned,
        )

    def _sync_from_symbol(self, offset):
        hex_mark = self.mapper.symbol_to_hex(offset)
        return CaretSync(
            source=View.SYMBOL,
            caret=offset,
            hex=hex_mark,
            symbol=self.mapper.hex_to_symbol(hex_mark.offset),
            file_offset=self._file_offset(hex_mark.offset),
            generation=self.generation,
        )

    def _file_offset(self, hex_offset):
        if not self.model.data:
            return self.window.offset
        return self.window.offset + self.mapper.byte_at_hex(hex_offset)

    def _emit_caret(self, sync):
        with self.programmatic_update():
            self.caretChanged.emit(sync)
        return sync

    def _place_hex_caret(self, offset):
        offset = min(max(offset, 0), len(self.model.hex_text))
        return self._emit_caret(self._sync_from_hex(offset, repositioned=True))

    # Edit input

    def on_nibble_key(self, view, offset, digit):
        if view is not View.HEX:
            log.debug("Nibble keys are only accepted in the hex view")
            return None
        if not 0 <= digit <= 0xF:
            raise ValueError(f"not a hex digit: {digit!r}")
        self._require_document()

        intent, caret = self._nibble_intent(offset, digit)
        self.engine.apply(intent)
        self.shift_window(0)
        with self.programmatic_update():
            self.documentChanged.emit(self.document)
        return self._place_hex_caret(caret)

    def _nibble_intent(self, offset, digit):
        mapper = self.mapper
        if not self.model.data:
            return OverwriteNibble(self.window.offset, 0, digit), 1
        try:
            loc = mapper.locate_hex(max(offset, 0))
        except MappingError:
            # past the last token: behave like the separator after the final byte
            last = mapper.locate_hex(mapper.clamp_hex(offset))
            loc = HexLocation(last.row, last.byte, 2)

        file_offset = self.window.offset + loc.row * self.config.bytes_per_row + loc.byte
        start = mapper.hex_offset_of(loc.row, loc.byte)
        if loc.column == 0:
            # high nibble opens a new byte before the current one
            return OverwriteNibble(file_offset, 0, digit), start + 1
        if loc.column == 1:
            return OverwriteNibble(file_offset, 1, digit), start + 3
        return OverwriteNibble(file_offset + 1, 0, digit), start + 4

    def on_delete_key(self, view, offset):
        if self.model is None or not self.model.data:
            return None
        self._require_document()

        text = self.model.hex_text if view is View.HEX else self.model.symbol_text
        if not 0 <= offset < len(text):
            log.debug("Nothing to delete at %s offset %d", view.value, offset)
            return None

        hex_offset = offset
        if view is View.SYMBOL:
            hex_offset = self.mapper.symbol_to_hex(offset).offset
        try:
            loc = self.mapper.locate_hex(hex_offset)
        except MappingError as exc:
            log.debug("Nothing to delete: %s", exc)
            return None

        index = loc.row * self.config.bytes_per_row + loc.byte
        self.engine.apply(DeleteByte(self.window.offset + index))
        self.shift_window(0)
        with self.programmatic_update():
            self.documentChanged.emit(self.document)
        return self._place_hex_caret(self.mapper.hex_offset_of(loc.row, loc.byte))
