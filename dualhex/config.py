from dataclasses import dataclass

from PyQt6.QtCore import QSettings

SETTINGS_ORGANIZATION = "DualHex"
SETTINGS_APPLICATION = "DualHexEditor"

DEFAULT_ROWS = 25
DEFAULT_BYTES_PER_ROW = 16
DEFAULT_PLACEHOLDER = "◻"
DEFAULT_TEMP_SUFFIX = ".hexn.tmp"


def open_settings():
    return QSettings(SETTINGS_ORGANIZATION, SETTINGS_APPLICATION)


@dataclass(frozen=True)
class EditorConfig:
    """Window geometry and rendering options shared by the core and the views"""

    rows: int = DEFAULT_ROWS
    bytes_per_row: int = DEFAULT_BYTES_PER_ROW
    placeholder: str = DEFAULT_PLACEHOLDER
    temp_suffix: str = DEFAULT_TEMP_SUFFIX

    def __post_init__(self):
        # rows - 2 is the shift distance, so at least one row must move
        if self.rows < 3:
            raise ValueError(f"rows must be at least 3, got {self.rows}")
        if self.bytes_per_row < 1:
            raise ValueError(f"bytes_per_row must be positive, got {self.bytes_per_row}")
        if len(self.placeholder) != 1:
            raise ValueError("placeholder must be a single character")

    @property
    def capacity(self):
        return self.rows * self.bytes_per_row

    @property
    def hex_row_width(self):
        # 2 digits + separator per byte; the row-final byte trades its space for the row break
        return self.bytes_per_row * 3

    @classmethod
    def load(cls, settings=None):
        """Read the persisted configuration, falling back to defaults"""
        if settings is None:
            settings = open_settings()
        return cls(
            rows=settings.value("window/rows", DEFAULT_ROWS, type=int),
            bytes_per_row=settings.value("window/bytesPerRow", DEFAULT_BYTES_PER_ROW, type=int),
            placeholder=settings.value("render/placeholder", DEFAULT_PLACEHOLDER, type=str),
            temp_suffix=settings.value("files/tempSuffix", DEFAULT_TEMP_SUFFIX, type=str),
        )

    def save(self, settings=None):
        if settings is None:
            settings = open_settings()
        settings.setValue("window/rows", self.rows)
        settings.setValue("window/bytesPerRow", self.bytes_per_row)
        settings.setValue("render/placeholder", self.placeholder)
        settings.setValue("files/tempSuffix", self.temp_suffix)
        settings.sync()
