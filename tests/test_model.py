import pytest

from dualhex.config import DEFAULT_PLACEHOLDER
from dualhex.document import ByteWindow
from dualhex.model import DualViewModelBuilder, StyleClass, decode_hex, style_class, symbol_width


def build(data, bytes_per_row=16, offset=0):
    return DualViewModelBuilder(bytes_per_row).build(ByteWindow(offset, bytes(data)))


class TestStyleClass:

    def test_every_byte_value(self):
        for value in range(256):
            style = style_class(value)
            if value < 32:
                assert style is StyleClass.ESCAPE
            elif value > 126:
                assert style is StyleClass.PLACEHOLDER
            else:
                assert style is StyleClass.LITERAL

    def test_escape_widths(self):
        assert symbol_width(0) == 2
        assert symbol_width(9) == 2
        assert symbol_width(10) == 3
        assert symbol_width(31) == 3
        assert symbol_width(127) == 1
        assert symbol_width(65) == 1

    def test_built_widths_match_rendered_tokens(self):
        model = build(range(256), bytes_per_row=1)

        for row, token in enumerate(model.symbol_tokens):
            start, end = model.row_span(row)
            assert end - start == len(token.text) == symbol_width(token.value)
        assert model.row_span(255)[1] == len(model.symbol_text)

    def test_builder_rejects_wide_placeholder(self):
        with pytest.raises(ValueError):
            DualViewModelBuilder(16, "<?>")


class TestBuilder:

    def test_mixed_single_row(self):
        model = build([0x41, 0x0A, 0xFF])

        assert model.hex_text == "41 0a ff"
        assert [t.text for t in model.symbol_tokens] == ["A", "\\10", DEFAULT_PLACEHOLDER]
        assert [t.style for t in model.symbol_tokens] == [
            StyleClass.LITERAL, StyleClass.ESCAPE, StyleClass.PLACEHOLDER,
        ]
        assert model.row_index == (0,)

    def test_hex_tokens_drop_separator_at_row_end(self):
        model = build(b"ABCDEF", bytes_per_row=4)

        assert [t.text for t in model.hex_tokens] == ["41 ", "42 ", "43 ", "44", "45 ", "46"]
        assert model.hex_text == "41 42 43 44\n45 46"
        assert model.symbol_text == "ABCD\nEF"

    def test_row_width_is_constant_for_full_rows(self):
        model = build(bytes(range(64)), bytes_per_row=16)
        rows = model.hex_text.split("\n")

        assert len(rows) == 4
        # each full row plus its break occupies exactly three chars per byte
        assert all(len(row) + 1 == model.hex_row_width for row in rows)

    def test_row_index_accounts_for_escapes_and_breaks(self):
        model = build([0x01] * 4 + [0x41] * 4 + [0x0C, 0x41], bytes_per_row=4)

        assert model.symbol_text == "\\1\\1\\1\\1\nAAAA\n\\12A"
        assert model.row_index == (0, 9, 14)
        assert model.row_span(0) == (0, 8)
        assert model.row_span(2) == (14, 18)

    def test_row_index_rebuilt_per_window(self):
        builder = DualViewModelBuilder(2)
        first = builder.build(ByteWindow(0, b"\x00\x00AA"))
        second = builder.build(ByteWindow(0, b"AAAA"))

        assert first.row_index == (0, 5)
        assert second.row_index == (0, 3)

    def test_empty_window(self):
        model = build(b"", offset=300)

        assert model.hex_text == ""
        assert model.symbol_text == ""
        assert model.row_index == (0,)
        assert model.offset == 300

    def test_custom_placeholder(self):
        model = DualViewModelBuilder(16, ".").build(ByteWindow(0, b"\x80"))

        assert model.symbol_text == "."

    def test_style_of_symbol_offsets(self):
        model = build([0x41, 0x0A, 0xFF, 0x42], bytes_per_row=2)
        # "A\10\n" + "◻B"
        assert model.style_of(0) is StyleClass.LITERAL
        assert model.style_of(1) is StyleClass.ESCAPE
        assert model.style_of(3) is StyleClass.ESCAPE
        assert model.style_of(4) is None
        assert model.style_of(5) is StyleClass.PLACEHOLDER
        assert model.style_of(6) is StyleClass.LITERAL
        assert model.style_of(7) is None


class TestDecode:

    def test_hex_stream_decodes_to_window(self):
        for data in (b"", b"\x00", bytes(range(256)), bytes(range(37)), b"\n\r\t\xff" * 9):
            for bytes_per_row in (1, 3, 16):
                model = build(data, bytes_per_row)
                assert decode_hex(model.hex_text) == data
