"""A text buffer that tells its observers about every change."""

from __future__ import annotations

import io
import os
from collections.abc import Iterable
from typing import IO

from edtext.buffer.diskdetails import DiskDetails, calc_hash, check_hash
from edtext.buffer.runearray import RuneArray
from edtext.buffer.undofile import BufferObserver, File

SLASH_GUIDE = "/guide"
PLUS_ERRORS = "+Errors"


class ObservableEditableBuffer:
    """An undoable text buffer, its disk details and the observers watching it."""

    def __init__(self, name: str = "", text: Iterable[str] | None = "") -> None:
        buffer = text if isinstance(text, RuneArray) else RuneArray(text)
        self._observers: dict[BufferObserver, None] = {}
        self.current_observer: BufferObserver | None = None
        self.file = File(self, buffer)
        self.details = DiskDetails(name=name)
        self.edit_clean = True
        self.is_scratch = False

    # -- disk details --------------------------------------------------

    @property
    def name(self) -> str:
        """Name of the backing file."""
        return self.details.name

    @property
    def info(self) -> os.stat_result | None:
        """Stat information of the backing file as last recorded."""
        return self.details.info

    @property
    def hash(self) -> bytes:
        """Hash of the backing file's contents as last recorded."""
        return self.details.hash

    @property
    def is_dir(self) -> bool:
        """True when the contents are a synthetic directory listing."""
        return self.details.is_dir

    @is_dir.setter
    def is_dir(self, flag: bool) -> None:
        self.details.is_dir = flag

    @property
    def seq(self) -> int:
        """Current undo sequence number."""
        return self.file.seq

    def set_hash(self, value: bytes) -> None:
        """Record the hash of the backing file."""
        self.details.hash = check_hash(value)

    def set_info(self, info: os.stat_result | None) -> None:
        """Record stat information of the backing file."""
        self.details.info = info

    def update_info(self, filename: str, info: os.stat_result | None) -> None:
        """Record info if the file on disk still has the recorded hash."""
        self.details.update_info(filename, info)

    def set_name(self, name: str) -> None:
        """Rename the backing, recording an undo entry when undo is active."""
        if self.name == name:
            return
        if self.file.seq > 0:
            self.file.unset_name(self.file.delta)
        self.set_name_and_scratch(name)

    def set_name_and_scratch(self, name: str) -> None:
        """Set the name and whether it marks a scratch buffer."""
        self.details.name = name
        self.is_scratch = name.endswith(SLASH_GUIDE) or name.endswith(PLUS_ERRORS)

    def is_dir_or_scratch(self) -> bool:
        """True when the buffer is not normally saved to disk."""
        return self.is_scratch or self.is_dir

    # -- observers -----------------------------------------------------

    def add_observer(self, observer: BufferObserver) -> None:
        """Register observer and make it the current one."""
        self._observers[observer] = None
        self.current_observer = observer

    def del_observer(self, observer: BufferObserver) -> None:
        """Unregister observer; raise KeyError if it was never registered."""
        if observer not in self._observers:
            raise KeyError("can't find observer in del_observer")
        del self._observers[observer]
        if observer is self.current_observer and self._observers:
            self.current_observer = next(iter(self._observers))

    def all_observers(self) -> list[BufferObserver]:
        """Every registered observer."""
        return list(self._observers)

    def observer_count(self) -> int:
        """Number of registered observers."""
        return len(self._observers)

    def has_multiple_observers(self) -> bool:
        """True when more than one observer is registered."""
        return len(self._observers) > 1

    def notify_inserted(self, q0: int, text: str) -> None:
        """Tell every observer that text was inserted at q0."""
        for observer in list(self._observers):
            observer.inserted(q0, text)

    def notify_deleted(self, q0: int, q1: int) -> None:
        """Tell every observer that [q0, q1) was deleted."""
        for observer in list(self._observers):
            observer.deleted(q0, q1)

    # -- editing and state ---------------------------------------------

    def clean(self) -> None:
        """Mark the contents as matching the backing file."""
        self.file.clean()

    def size(self) -> int:
        """Number of characters, committed and cached."""
        return self.file.size()

    def mark(self, seq: int) -> None:
        """Start an undo point with sequence seq."""
        self.file.mark(seq)

    def reset(self) -> None:
        """Drop every undo and redo record."""
        self.file.reset()

    def has_uncommitted_changes(self) -> bool:
        """True when cached insertions are not yet committed."""
        return self.file.has_uncommitted_changes()

    def has_redoable_changes(self) -> bool:
        """True when there is something to redo."""
        return self.file.has_redoable_changes()

    def has_undoable_changes(self) -> bool:
        """True when there is something to undo."""
        return self.file.has_undoable_changes()

    def read_c(self, q: int) -> str:
        """The character at offset q."""
        return self.file.read_c(q)

    def saveable_and_dirty(self) -> bool:
        """True when the buffer is named, writable and differs from its backing."""
        return self.name != "" and self.file.saveable_and_dirty()

    def load(self, q0: int, stream: IO[bytes], sethash: bool) -> tuple[int, bool]:
        """Insert the whole of stream at q0; return character count and whether NULs were seen."""
        try:
            data = stream.read()
        except OSError as err:
            raise OSError("read error in buffer load") from err
        if sethash:
            self.set_hash(calc_hash(data))
        return self.file.load(q0, data)

    def dirty(self) -> bool:
        """True when the state differs from the last clean one."""
        return self.file.dirty()

    def insert_at(self, p0: int, text: str) -> None:
        """Insert text at p0."""
        self.file.insert_at(p0, text)

    def undo(self, isundo: bool) -> tuple[int, int, bool]:
        """Undo or redo one sequence of edits; return the new selection and its validity."""
        return self.file.undo(isundo)

    def delete_at(self, q0: int, q1: int) -> None:
        """Remove [q0, q1)."""
        self.file.delete_at(q0, q1)

    def treat_as_clean(self) -> None:
        """Consider the buffer clean until its next change."""
        self.file.treat_as_clean()

    def modded(self) -> None:
        """Note that the backing differs from the contents."""
        self.file.modded()

    def redo_seq(self) -> int:
        """Sequence number of the last redo record, or 0."""
        return self.file.redo_seq()

    def commit(self) -> None:
        """Move cached insertions into the buffer."""
        self.file.commit()

    def insert_at_without_commit(self, p0: int, text: str) -> None:
        """Insert text into the insertion cache."""
        self.file.insert_at_without_commit(p0, text)

    def treat_as_dirty(self) -> bool:
        """True when deleting the buffer should warn about unsaved changes."""
        return self.file.treat_as_dirty()

    # -- committed contents --------------------------------------------

    def read(self, q0: int, n: int) -> str:
        """Up to n committed characters from q0."""
        return self.file.buffer.read(q0, n)

    def view(self, q0: int, q1: int) -> str:
        """Committed characters in [q0, q1)."""
        return self.file.buffer.view(q0, q1)

    def __str__(self) -> str:
        return str(self.file.buffer)

    def reset_buffer(self) -> None:
        """Remove every committed character."""
        self.file.buffer.reset()

    def reader(self, q0: int, q1: int) -> io.BytesIO:
        """Binary stream of the UTF-8 encoding of [q0, q1)."""
        return self.file.buffer.reader(q0, q1)

    def index_rune(self, r: str) -> int:
        """Offset of the first occurrence of r, or -1."""
        return self.file.buffer.index_rune(r)

    def nbyte(self) -> int:
        """Size of the committed contents in UTF-8 bytes."""
        return self.file.buffer.nbyte()


def make_tag_buffer(text: Iterable[str] | None = "") -> ObservableEditableBuffer:
    """A nameless buffer, as used for window tags."""
    return ObservableEditableBuffer("", text)