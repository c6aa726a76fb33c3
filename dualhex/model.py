import enum
from bisect import bisect_right
from dataclasses import dataclass, field
from itertools import accumulate

from .config import DEFAULT_BYTES_PER_ROW, DEFAULT_PLACEHOLDER

ESCAPE_BELOW = 32
PLACEHOLDER_ABOVE = 126

HEX_TOKEN_WIDTH = 3
ROW_BREAK = "\n"


class StyleClass(enum.Enum):
    ESCAPE = "escape"
    PLACEHOLDER = "placeholder"
    LITERAL = "literal"


def style_class(value):
    if value < ESCAPE_BELOW:
        return StyleClass.ESCAPE
    if value > PLACEHOLDER_ABOVE:
        return StyleClass.PLACEHOLDER
    return StyleClass.LITERAL


def symbol_text(value, placeholder=DEFAULT_PLACEHOLDER):
    style = style_class(value)
    if style is StyleClass.ESCAPE:
        return f"\\{value}"
    if style is StyleClass.PLACEHOLDER:
        return placeholder
    return chr(value)


def symbol_width(value):
    """Number of symbol-view characters used by ``value``"""
    if value < ESCAPE_BELOW:
        return 1 + len(str(value))
    return 1


def decode_hex(text):
    """Turn a hex-view stream back into bytes"""
    return bytes.fromhex(text)


@dataclass(frozen=True)
class Token:
    text: str
    style: StyleClass
    value: int


@dataclass(frozen=True)
class DualViewModel:
    """Immutable render model of one window: both token streams plus the row index.

    Views only render this object. Positions reported back by the views are
    interpreted against it by :class:`dualhex.caret.CaretMapper`.
    """

    offset: int
    data: bytes
    bytes_per_row: int
    hex_tokens: tuple
    symbol_tokens: tuple
    row_index: tuple
    hex_text: str
    symbol_text: str
    # per-row cumulative symbol widths, row_widths[r][k] = start of byte k within row r
    row_widths: tuple = field(repr=False)
    _symbol_starts: tuple = field(repr=False)

    @property
    def row_count(self):
        return len(self.row_index)

    @property
    def hex_row_width(self):
        return self.bytes_per_row * HEX_TOKEN_WIDTH

    @property
    def end(self):
        return self.offset + len(self.data)

    def row_bytes(self, row):
        start = row * self.bytes_per_row
        return self.data[start:start + self.bytes_per_row]

    def row_span(self, row):
        """Symbol-view ``[start, end)`` of ``row``, excluding its row break"""
        start = self.row_index[row]
        widths = self.row_widths[row]
        return start, start + (widths[-1] if widths else 0)

    def style_of(self, symbol_offset):
        """Style of the token covering ``symbol_offset``; None on row breaks"""
        i = bisect_right(self._symbol_starts, symbol_offset) - 1
        if i < 0:
            return None
        token = self.symbol_tokens[i]
        if symbol_offset < self._symbol_starts[i] + len(token.text):
            return token.style
        return None


class DualViewModelBuilder:

    def __init__(self, bytes_per_row=DEFAULT_BYTES_PER_ROW, placeholder=DEFAULT_PLACEHOLDER):
        if len(placeholder) != 1:
            raise ValueError("placeholder must be a single character")
        self.bytes_per_row = bytes_per_row
        self.placeholder = placeholder

    @classmethod
    def from_config(cls, config):
        return cls(config.bytes_per_row, config.placeholder)

    def build(self, window):
        data = bytes(window.data)
        bpr = self.bytes_per_row

        hex_tokens = []
        symbol_tokens = []
        hex_rows = []
        symbol_rows = []
        row_index = []
        row_widths = []
        symbol_starts = []
        position = 0

        # An empty window still renders a single empty row
        for row_start in range(0, len(data), bpr) or [0]:
            row = data[row_start:row_start + bpr]
            last_in_row = len(row) - 1
            row_index.append(position)

            hex_parts = []
            symbol_parts = []
            for i, value in enumerate(row):
                style = style_class(value)
                hex_token = Token(f"{value:02x}" + ("" if i == last_in_row else " "), style, value)
                symbol_token = Token(symbol_text(value, self.placeholder), style, value)
                hex_tokens.append(hex_token)
                symbol_tokens.append(symbol_token)
                hex_parts.append(hex_token.text)
                symbol_parts.append(symbol_token.text)
                symbol_starts.append(position)
                position += symbol_width(value)

            hex_rows.append("".join(hex_parts))
            symbol_rows.append("".join(symbol_parts))
            row_widths.append(tuple(accumulate(map(symbol_width, row), initial=0)))
            position += len(ROW_BREAK)

        return DualViewModel(
            offset=window.offset,
            data=data,
            bytes_per_row=bpr,
            hex_tokens=tuple(hex_tokens),
            symbol_tokens=tuple(symbol_tokens),
            row_index=tuple(row_index),
            hex_text=ROW_BREAK.join(hex_rows),
            symbol_text=ROW_BREAK.join(symbol_rows),
            row_widths=tuple(row_widths),
            _symbol_starts=tuple(symbol_starts),
        )
