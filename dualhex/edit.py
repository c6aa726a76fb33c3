import logging
from dataclasses import dataclass

from .errors import EditError, FileError

log = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class OverwriteNibble:
    """One hex digit typed at ``column`` of the byte pair at ``file_offset``"""

    file_offset: int
    column: int
    value: int

    def __post_init__(self):
        if self.column not in (0, 1):
            raise ValueError(f"nibble column must be 0 or 1, got {self.column}")
        if not 0 <= self.value <= 0xF:
            raise ValueError(f"nibble out of range: {self.value}")


@dataclass(frozen=True)
class DeleteByte:
    file_offset: int


def _copy_range(src, dst, length):
    while length > 0:
        chunk = src.read(min(CHUNK_SIZE, length))
        if not chunk:
            raise OSError(f"backing file ended {length} byte(s) early")
        dst.write(chunk)
        length -= len(chunk)


class EditEngine:
    """Applies byte edits to a Document by writing a complete new revision.

    Every edit writes ``old[:offset] + patch + old[offset + skip:]`` into a fresh
    temp file and swaps the document onto it. The previous revision stays
    untouched until the swap, so a failed edit leaves the document as it was.
    """

    def __init__(self, document):
        self.document = document

    def apply(self, intent):
        if isinstance(intent, DeleteByte):
            return self.delete_byte(intent.file_offset)
        if isinstance(intent, OverwriteNibble):
            if intent.column == 0:
                return self.insert_byte(intent.file_offset, intent.value << 4)
            return self.overwrite_low_nibble(intent.file_offset, intent.value)
        raise TypeError(f"unsupported edit intent: {intent!r}")

    def insert_byte(self, file_offset, value):
        self._check_offset(file_offset, allow_end=True)
        self._splice(file_offset, bytes([value]), 0)

    def overwrite_byte(self, file_offset, value):
        self._check_offset(file_offset)
        self._splice(file_offset, bytes([value]), 1)

    def overwrite_low_nibble(self, file_offset, nibble):
        self._check_offset(file_offset, allow_end=True)
        if file_offset == self.document.length:
            # nothing to overwrite at end-of-file: the digit lands in a new byte
            self._splice(file_offset, bytes([nibble]), 0)
            return
        try:
            old = self.document.read(file_offset, 1)[0]
        except FileError as exc:
            raise EditError(file_offset, exc) from exc
        self._splice(file_offset, bytes([(old & 0xF0) | nibble]), 1)

    def delete_byte(self, file_offset):
        self._check_offset(file_offset)
        self._splice(file_offset, b"", 1)

    def _check_offset(self, file_offset, allow_end=False):
        limit = self.document.length + (1 if allow_end else 0)
        if not 0 <= file_offset < limit:
            raise IndexError(f"file offset {file_offset} out of range (length {self.document.length})")

    def _splice(self, file_offset, patch, skip):
        document = self.document
        try:
            target = document.new_backing_path()
        except OSError as exc:
            raise EditError(file_offset, exc) from exc

        try:
            with open(document.path, "rb") as src, open(target, "wb") as dst:
                _copy_range(src, dst, file_offset)
                dst.write(patch)
                src.seek(file_offset + skip)
                _copy_range(src, dst, document.length - file_offset - skip)
            document.replace(target)
        except OSError as exc:
            log.error("Edit at offset %d aborted: %s", file_offset, exc)
            document.discard(target)
            raise EditError(file_offset, exc) from exc

        log.debug("Spliced %d byte(s) at %d, skipped %d", len(patch), file_offset, skip)
