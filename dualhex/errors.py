import enum


class FileErrorKind(enum.Enum):
    NOT_FOUND = "not found"
    NOT_READABLE = "not readable"
    IO_FAILURE = "i/o failure"


class DualHexError(Exception):
    """Base class for every error raised by the editor core"""


class FileError(DualHexError):
    """Opening, reading or copying the backing file failed"""

    def __init__(self, kind, path, detail=None):
        self.kind = kind
        self.path = str(path)
        self.detail = detail
        message = f"{self.path}: {kind.value}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


class EditError(DualHexError):
    """A copy-on-write splice could not be completed; the document is unchanged"""

    def __init__(self, file_offset, detail=None):
        self.kind = FileErrorKind.IO_FAILURE
        self.file_offset = file_offset
        self.detail = detail
        message = f"edit at offset {file_offset} failed"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class MappingError(DualHexError):
    """A caret offset does not fall inside any row of the current window"""

    def __init__(self, view, offset):
        self.view = view
        self.offset = offset
        super().__init__(f"{view} offset {offset} is outside the loaded window")
