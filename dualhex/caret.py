import enum
import logging
from bisect import bisect_right
from dataclasses import dataclass

from .errors import MappingError
from .model import HEX_TOKEN_WIDTH

log = logging.getLogger(__name__)


class View(enum.Enum):
    HEX = "hex"
    SYMBOL = "symbol"

    def other(self):
        return View.SYMBOL if self is View.HEX else View.HEX


@dataclass(frozen=True)
class Mark:
    """Start offset and width of a whole destination token"""

    offset: int
    width: int


@dataclass(frozen=True)
class HexLocation:
    row: int
    byte: int      # byte index within the row
    column: int    # 0 = high nibble, 1 = low nibble, 2 = separator


class CaretMapper:
    """Translates caret offsets between the hex and the symbol view of one model.

    Works purely on the immutable :class:`DualViewModel`; a new mapper is made
    for every rebuild.
    """

    def __init__(self, model):
        self.model = model

    def locate_hex(self, hex_offset):
        model = self.model
        row_width = model.hex_row_width
        if not model.data or hex_offset < 0:
            raise MappingError(View.HEX, hex_offset)
        row = hex_offset // row_width
        if row >= model.row_count:
            raise MappingError(View.HEX, hex_offset)
        byte, column = divmod(hex_offset - row * row_width, HEX_TOKEN_WIDTH)
        if byte >= len(model.row_bytes(row)):
            raise MappingError(View.HEX, hex_offset)
        return HexLocation(row, byte, column)

    def clamp_hex(self, hex_offset):
        """Nearest hex offset that falls inside a byte token"""
        if hex_offset <= 0 or not self.model.data:
            return 0
        try:
            self.locate_hex(hex_offset)
        except MappingError:
            last = len(self.model.data) - 1
            row, byte = divmod(last, self.model.bytes_per_row)
            return self.hex_offset_of(row, byte)
        return hex_offset

    def hex_offset_of(self, row, byte):
        return row * self.model.hex_row_width + byte * HEX_TOKEN_WIDTH

    def hex_token_start(self, hex_offset):
        if not self.model.data:
            return 0
        loc = self.locate_hex(self.clamp_hex(hex_offset))
        return self.hex_offset_of(loc.row, loc.byte)

    def byte_at_hex(self, hex_offset):
        """Window-relative index of the byte under ``hex_offset``, clamped"""
        loc = self.locate_hex(self.clamp_hex(hex_offset))
        return loc.row * self.model.bytes_per_row + loc.byte

    def hex_to_symbol(self, hex_offset):
        model = self.model
        if not model.data:
            return Mark(0, 0)
        try:
            loc = self.locate_hex(hex_offset)
        except MappingError as exc:
            log.debug("Clamping: %s", exc)
            loc = self.locate_hex(self.clamp_hex(hex_offset))
        widths = model.row_widths[loc.row]
        start = model.row_index[loc.row] + widths[loc.byte]
        return Mark(start, widths[loc.byte + 1] - widths[loc.byte])

    def symbol_to_hex(self, symbol_offset):
        model = self.model
        if not model.data:
            return Mark(0, HEX_TOKEN_WIDTH)
        symbol_offset = min(max(symbol_offset, 0), len(model.symbol_text))
        row = bisect_right(model.row_index, symbol_offset) - 1
        widths = model.row_widths[row]
        # the token whose span contains the offset; row breaks fall back to the last token
        byte = bisect_right(widths, symbol_offset - model.row_index[row]) - 1
        byte = min(byte, len(widths) - 2)
        return Mark(self.hex_offset_of(row, byte), HEX_TOKEN_WIDTH)
