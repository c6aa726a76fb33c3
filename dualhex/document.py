import logging
import os
import shutil
import tempfile
import weakref
from dataclasses import dataclass
from pathlib import Path

from .config import DEFAULT_TEMP_SUFFIX
from .errors import FileError, FileErrorKind

log = logging.getLogger(__name__)

TEMP_PREFIX = "dualhex-"


def _discard_files(paths):
    # Runs from close(), garbage collection or interpreter exit, whichever comes first
    while paths:
        path = paths.pop()
        try:
            os.unlink(path)
        except FileNotFoundError:
            pass
        except OSError as exc:
            log.warning("Could not remove temp file %s: %s", path, exc)


def _new_temp_path(suffix):
    fd, name = tempfile.mkstemp(prefix=TEMP_PREFIX, suffix=suffix)
    os.close(fd)
    return Path(name)


@dataclass(frozen=True)
class ByteWindow:
    """A bounded slice of document bytes starting at ``offset``"""

    offset: int
    data: bytes

    def __len__(self):
        return len(self.data)

    @property
    def end(self):
        return self.offset + len(self.data)


class Document:
    """The editable byte sequence, backed by a private temp copy of the opened file.

    The temp copy is exclusively owned by this object. Every edit produces a new
    copy which is swapped in with ``replace``; the superseded copy is deleted
    afterwards. All owned files are removed on ``close`` or at interpreter exit.
    """

    def __init__(self, source, path, temp_suffix=DEFAULT_TEMP_SUFFIX):
        self.source = Path(source)
        self.path = Path(path)
        self.temp_suffix = temp_suffix
        self.length = os.path.getsize(self.path)
        self._owned = [self.path]
        self._finalizer = weakref.finalize(self, _discard_files, self._owned)

    @classmethod
    def open(cls, source, temp_suffix=DEFAULT_TEMP_SUFFIX):
        source = Path(source)
        if not source.exists():
            raise FileError(FileErrorKind.NOT_FOUND, source)
        if source.is_dir() or not os.access(source, os.R_OK):
            raise FileError(FileErrorKind.NOT_READABLE, source)

        try:
            path = _new_temp_path(temp_suffix)
        except OSError as exc:
            raise FileError(FileErrorKind.IO_FAILURE, source, exc) from exc
        try:
            shutil.copyfile(source, path)
        except PermissionError as exc:
            _discard_files([path])
            raise FileError(FileErrorKind.NOT_READABLE, source, exc) from exc
        except OSError as exc:
            _discard_files([path])
            raise FileError(FileErrorKind.IO_FAILURE, source, exc) from exc

        log.info("Opened %s as %s", source, path)
        return cls(source, path, temp_suffix)

    @property
    def closed(self):
        return not self._finalizer.alive

    def _check_open(self):
        if self.closed:
            raise ValueError("I/O operation on closed document")

    def read(self, offset, size):
        """Read up to ``size`` bytes at ``offset``; short or empty at end-of-file"""
        self._check_open()
        try:
            with open(self.path, "rb") as f:
                f.seek(offset)
                return f.read(size)
        except OSError as exc:
            raise FileError(FileErrorKind.IO_FAILURE, self.path, exc) from exc

    def read_window(self, offset, capacity):
        offset = max(0, offset)
        return ByteWindow(offset, self.read(offset, capacity))

    def new_backing_path(self):
        """Create an empty temp file owned by this document for the next revision"""
        self._check_open()
        path = _new_temp_path(self.temp_suffix)
        self._owned.append(path)
        return path

    def discard(self, path):
        if path == self.path:
            raise ValueError("refusing to discard the live backing file")
        if path in self._owned:
            self._owned.remove(path)
        _discard_files([path])

    def replace(self, path):
        """Swap the backing file to ``path`` and delete the superseded one"""
        self._check_open()
        path = Path(path)
        length = os.path.getsize(path)
        old = self.path
        if path not in self._owned:
            self._owned.append(path)
        self.path = path
        self.length = length

        try:
            os.unlink(old)
        except FileNotFoundError:
            self._owned.remove(old)
        except OSError as exc:
            # still listed as owned, so close() retries
            log.warning("Superseded temp file %s not removed yet: %s", old, exc)
        else:
            self._owned.remove(old)
        log.debug("Backing file is now %s (%d bytes)", path, length)

    def save_as(self, target):
        """Copy the current revision to ``target``"""
        self._check_open()
        try:
            shutil.copyfile(self.path, target)
        except OSError as exc:
            raise FileError(FileErrorKind.IO_FAILURE, target, exc) from exc
        log.info("Saved %d bytes to %s", self.length, target)

    def close(self):
        if not self.closed:
            log.debug("Closing document for %s", self.source)
        self._finalizer()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
