import pytest

from dualhex.document import Document
from dualhex.edit import DeleteByte, EditEngine, OverwriteNibble
from dualhex.errors import EditError


@pytest.fixture
def document(make_file):
    with Document.open(make_file(b"ABCDEF")) as document:
        yield document


def content(document):
    return document.read(0, document.length)


class TestSplice:

    def test_insert_before_last_byte(self, document):
        EditEngine(document).insert_byte(5, 0x42)

        assert content(document) == b"ABCDEBF"
        assert document.length == 7

    def test_delete_byte(self, document):
        EditEngine(document).delete_byte(2)

        assert content(document) == b"ABDEF"
        assert document.length == 5

    def test_overwrite_byte(self, document):
        EditEngine(document).overwrite_byte(0, 0x61)

        assert content(document) == b"aBCDEF"

    def test_insert_at_start_and_end(self, document):
        engine = EditEngine(document)
        engine.insert_byte(0, 0x30)
        engine.insert_byte(document.length, 0x39)

        assert content(document) == b"0ABCDEF9"

    @pytest.mark.parametrize("offset", range(6))
    def test_delete_then_insert_restores(self, document, offset):
        engine = EditEngine(document)
        value = content(document)[offset]
        engine.delete_byte(offset)
        engine.insert_byte(offset, value)

        assert content(document) == b"ABCDEF"

    def test_each_edit_supersedes_the_backing_file(self, document):
        first = document.path
        EditEngine(document).delete_byte(0)

        assert document.path != first
        assert not first.exists()

    def test_offsets_out_of_range(self, document):
        engine = EditEngine(document)

        with pytest.raises(IndexError):
            engine.delete_byte(6)
        with pytest.raises(IndexError):
            engine.overwrite_byte(-1, 0)
        with pytest.raises(IndexError):
            engine.insert_byte(7, 0)


class TestNibbles:

    def test_high_nibble_inserts_new_byte(self, document):
        EditEngine(document).apply(OverwriteNibble(1, 0, 0x7))

        assert content(document) == b"A\x70BCDEF"

    def test_low_nibble_overwrites_in_place(self, document):
        EditEngine(document).apply(OverwriteNibble(1, 1, 0x9))

        assert content(document) == b"AICDEF"
        assert document.length == 6

    def test_two_keystrokes_make_one_byte(self, document):
        engine = EditEngine(document)
        engine.apply(OverwriteNibble(2, 0, 0x5))
        engine.apply(OverwriteNibble(2, 1, 0xA))

        assert content(document) == b"AB\x5aCDEF"

    def test_low_nibble_at_end_of_file_appends(self, document):
        EditEngine(document).overwrite_low_nibble(6, 0x3)

        assert content(document) == b"ABCDEF\x03"

    def test_delete_intent(self, document):
        EditEngine(document).apply(DeleteByte(0))

        assert content(document) == b"BCDEF"

    def test_invalid_intents(self):
        with pytest.raises(ValueError):
            OverwriteNibble(0, 2, 1)
        with pytest.raises(ValueError):
            OverwriteNibble(0, 0, 16)
        with pytest.raises(TypeError):
            EditEngine(None).apply("delete")


class TestFailure:

    def test_io_error_leaves_document_untouched(self, document, backing_dir, monkeypatch):
        before = document.path

        def broken_open(*args, **kwargs):
            raise OSError("disk full")

        monkeypatch.setattr("dualhex.edit.open", broken_open, raising=False)

        with pytest.raises(EditError) as info:
            EditEngine(document).insert_byte(3, 0x00)

        assert info.value.file_offset == 3
        assert document.path == before
        assert document.length == 6
        assert list(backing_dir.iterdir()) == [before]
        assert before.read_bytes() == b"ABCDEF"

    def test_truncated_backing_file_aborts_edit(self, document, backing_dir):
        before = document.path
        before.write_bytes(b"ABC")

        with pytest.raises(EditError):
            EditEngine(document).insert_byte(1, 0x00)

        assert document.path == before
        assert document.length == 6
        assert list(backing_dir.iterdir()) == [before]
