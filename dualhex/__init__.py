"""Windowed dual-view (hex + symbol) editing core with copy-on-write byte splicing."""

from .caret import CaretMapper, Mark, View
from .config import EditorConfig
from .document import ByteWindow, Document
from .edit import DeleteByte, EditEngine, OverwriteNibble
from .errors import DualHexError, EditError, FileError, FileErrorKind, MappingError
from .model import DualViewModel, DualViewModelBuilder, StyleClass, Token, decode_hex, style_class
from .scroll import ScrollSync
from .window import CaretSync, WindowManager

__version__ = "0.1.0"

__all__ = [
    "ByteWindow",
    "CaretMapper",
    "CaretSync",
    "DeleteByte",
    "Document",
    "DualHexError",
    "DualViewModel",
    "DualViewModelBuilder",
    "EditEngine",
    "EditError",
    "EditorConfig",
    "FileError",
    "FileErrorKind",
    "Mark",
    "MappingError",
    "OverwriteNibble",
    "ScrollSync",
    "StyleClass",
    "Token",
    "View",
    "WindowManager",
    "decode_hex",
    "style_class",
]
