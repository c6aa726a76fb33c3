import argparse
import logging
import string
import sys

from PyQt6.QtWidgets import (
    QApplication, QMainWindow, QFileDialog, QMessageBox, QPlainTextEdit,
    QSplitter, QStatusBar, QTextEdit
)
from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction, QColor, QFont, QKeySequence, QTextCharFormat, QTextCursor

from .caret import View
from .config import EditorConfig, open_settings
from .errors import DualHexError, FileError
from .model import StyleClass
from .window import WindowManager

log = logging.getLogger(__name__)

STYLE_COLORS = {
    StyleClass.ESCAPE: QColor(Qt.GlobalColor.blue),
    StyleClass.PLACEHOLDER: QColor(0, 100, 0),
    StyleClass.LITERAL: QColor(Qt.GlobalColor.black),
}
CARET_COLOR = QColor(Qt.GlobalColor.lightGray)


class BytePane(QPlainTextEdit):
    """One of the two projections; forwards caret, scroll and key events to the manager"""

    def __init__(self, view, manager, parent=None):
        super().__init__(parent)
        self.view = view
        self.manager = manager

        self.setReadOnly(True)
        self.setTextInteractionFlags(
            Qt.TextInteractionFlag.TextSelectableByKeyboard |
            Qt.TextInteractionFlag.TextSelectableByMouse
        )
        self.setLineWrapMode(QPlainTextEdit.LineWrapMode.NoWrap)

        # Set monospace font
        font = QFont("Courier New")
        font.setStyleHint(QFont.StyleHint.Monospace)
        font.setPointSize(10)
        self.setFont(font)

        self.cursorPositionChanged.connect(self.on_cursor_moved)
        self.verticalScrollBar().valueChanged.connect(self.on_scrolled)

    def on_cursor_moved(self):
        self.manager.on_caret_moved(self.view, self.textCursor().position())

    def on_scrolled(self, value):
        self.manager.on_scroll(self.view, value)

    def render(self, model):
        self.clear()
        if model is None:
            return
        if self.view is View.HEX:
            self.setPlainText(model.hex_text)
            return

        formats = {}
        for style, color in STYLE_COLORS.items():
            fmt = QTextCharFormat()
            fmt.setForeground(color)
            formats[style] = fmt

        cursor = QTextCursor(self.document())
        tokens = iter(model.symbol_tokens)
        for row in range(model.row_count):
            if row:
                cursor.insertText("\n")
            for _ in model.row_bytes(row):
                token = next(tokens)
                cursor.insertText(token.text, formats[token.style])
        # inserting at the caret drags it along; start over like setPlainText does
        self.moveCursor(QTextCursor.MoveOperation.Start)

    def set_caret(self, offset):
        cursor = self.textCursor()
        cursor.setPosition(min(offset, self.document().characterCount() - 1))
        self.setTextCursor(cursor)

    def highlight(self, mark):
        """Shade the whole token under the caret"""
        last = self.document().characterCount() - 1
        cursor = QTextCursor(self.document())
        cursor.setPosition(min(mark.offset, last))
        cursor.setPosition(min(mark.offset + mark.width, last), QTextCursor.MoveMode.KeepAnchor)

        selection = QTextEdit.ExtraSelection()
        selection.cursor = cursor
        selection.format.setBackground(CARET_COLOR)
        self.setExtraSelections([selection])

    def keyPressEvent(self, event):
        key = event.key()
        text = event.text()
        position = self.textCursor().position()

        try:
            if key == Qt.Key.Key_Delete:
                self.manager.on_delete_key(self.view, position)
                return
            if key == Qt.Key.Key_Backspace:
                if position > 0:
                    self.manager.on_delete_key(self.view, position - 1)
                return
            if self.view is View.HEX and len(text) == 1 and text in string.hexdigits:
                self.manager.on_nibble_key(self.view, position, int(text, 16))
                return
        except DualHexError as e:
            QMessageBox.critical(self, "Error", f"Edit failed: {e}")
            return

        super().keyPressEvent(event)


class DualHexEditor(QMainWindow):
    def __init__(self, config=None, settings=None):
        super().__init__()
        self.setWindowTitle("Dual Hex Editor")
        self.setGeometry(100, 100, 1000, 600)

        # Settings
        self.settings = settings if settings is not None else open_settings()
        self.config = config or EditorConfig.load(self.settings)

        self.manager = WindowManager(self.config, self)
        self.manager.modelChanged.connect(self.render_model)
        self.manager.caretChanged.connect(self.show_caret)
        self.manager.documentChanged.connect(self.update_status)
        self.manager.scroll.scrollChanged.connect(self.scroll_pane)

        self.init_actions()
        self.init_menu()
        self.init_ui()

        self.load_settings()

    def init_ui(self):
        self.hex_pane = BytePane(View.HEX, self.manager)
        self.symbol_pane = BytePane(View.SYMBOL, self.manager)

        splitter = QSplitter(Qt.Orientation.Horizontal)
        splitter.addWidget(self.hex_pane)
        splitter.addWidget(self.symbol_pane)
        splitter.setStretchFactor(0, 2)
        splitter.setStretchFactor(1, 1)
        self.setCentralWidget(splitter)

        # Status bar
        self.status_bar = QStatusBar()
        self.setStatusBar(self.status_bar)
        self.update_status()

    def init_actions(self):
        self.open_action = QAction("&Open", self)
        self.open_action.setShortcut(QKeySequence.StandardKey.Open)
        self.open_action.triggered.connect(self.open_file)

        self.save_as_action = QAction("Save &As...", self)
        self.save_as_action.setShortcut(QKeySequence.StandardKey.SaveAs)
        self.save_as_action.triggered.connect(self.save_file_as)

        self.quit_action = QAction("&Quit", self)
        self.quit_action.setShortcut(QKeySequence.StandardKey.Quit)
        self.quit_action.triggered.connect(self.close)

    def init_menu(self):
        file_menu = self.menuBar().addMenu("&File")
        file_menu.addAction(self.open_action)
        file_menu.addAction(self.save_as_action)
        file_menu.addSeparator()
        file_menu.addAction(self.quit_action)

    def pane(self, view):
        return self.hex_pane if view is View.HEX else self.symbol_pane

    def render_model(self, model):
        self.hex_pane.render(model)
        self.symbol_pane.render(model)

    def show_caret(self, sync):
        self.hex_pane.highlight(sync.hex)
        self.symbol_pane.highlight(sync.symbol)
        if sync.repositioned:
            self.hex_pane.set_caret(sync.caret)
        self.update_status(caret=sync)

    def scroll_pane(self, view, row):
        self.pane(view).verticalScrollBar().setValue(row)

    def open_path(self, path):
        try:
            self.manager.open(path)
        except FileError as e:
            log.error("Could not open %s: %s", path, e)
            QMessageBox.critical(self, "Error", f"Could not open file: {e}")
            return False
        self.setWindowTitle(f"Dual Hex Editor - {path}")
        return True

    def open_file(self):
        path, _ = QFileDialog.getOpenFileName(self, "Open File")
        if path:
            self.open_path(path)

    def save_file_as(self):
        if self.manager.document is None:
            return
        path, _ = QFileDialog.getSaveFileName(self, "Save File")
        if path:
            try:
                self.manager.save_as(path)
                self.status_bar.showMessage(f"Saved to {path}", 3000)
            except FileError as e:
                QMessageBox.critical(self, "Error", f"Failed to save file: {e}")

    def update_status(self, document=None, caret=None):
        document = self.manager.document
        status = []
        if document is not None:
            status.append(f"File: {document.source}")
            status.append(f"Size: {document.length:,} bytes")
            if caret is not None:
                line = caret.file_offset // self.config.bytes_per_row
                status.append(f"File line: {line}")
                status.append(f"Position: 0x{caret.file_offset:X} ({caret.file_offset})")
        else:
            status.append("No file open")
        self.status_bar.showMessage(" | ".join(status))

    def load_settings(self):
        geometry = self.settings.value("windowGeometry")
        if geometry is not None:
            self.restoreGeometry(geometry)

    def save_settings(self):
        self.settings.setValue("windowGeometry", self.saveGeometry())
        self.config.save(self.settings)

    def closeEvent(self, event):
        self.save_settings()
        self.manager.close()
        super().closeEvent(event)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="dualhex", description="Windowed dual-view hex editor")
    parser.add_argument("path", nargs="?", help="file to open")
    parser.add_argument("--rows", type=int, help="rows per loaded window")
    parser.add_argument("--bytes-per-row", type=int, help="bytes shown on each row")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args(argv)


def build_config(args, settings):
    config = EditorConfig.load(settings)
    return EditorConfig(
        rows=args.rows or config.rows,
        bytes_per_row=args.bytes_per_row or config.bytes_per_row,
        placeholder=config.placeholder,
        temp_suffix=config.temp_suffix,
    )


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = QApplication(sys.argv[:1])
    settings = open_settings()
    editor = DualHexEditor(build_config(args, settings), settings)
    editor.show()
    if args.path:
        editor.open_path(args.path)
    return app.exec()
