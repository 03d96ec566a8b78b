"""An editable text buffer with undo and redo, grouped by sequence number."""

from __future__ import annotations

import abc
import enum
from dataclasses import dataclass
from typing import Any

from edtext.buffer.runearray import RuneArray
from edtext.buffer.utf8bytes import decode_rune


def decode_runes(data: bytes) -> tuple[str, bool]:
    """Decode UTF-8 data into text.

    Invalid sequences become U+FFFD. NUL characters are dropped; the
    second element of the result tells whether any were seen.
    """
    out: list[str] = []
    has_nulls = False
    pos = 0
    while pos < len(data):
        r, width = decode_rune(data, pos)
        pos += width
        if r == "\0":
            has_nulls = True
            continue
        out.append(r)
    return "".join(out), has_nulls


class BufferObserver(abc.ABC):
    """Something that wants to hear about every change made to a buffer."""

    @abc.abstractmethod
    def inserted(self, q0: int, text: str) -> None:
        """text was inserted at offset q0."""

    @abc.abstractmethod
    def deleted(self, q0: int, q1: int) -> None:
        """The range [q0, q1) was deleted."""


class UndoKind(enum.Enum):
    """What an undo record does when it is replayed."""

    DELETE = enum.auto()
    INSERT = enum.auto()
    FILENAME = enum.auto()


@dataclass
class UndoRecord:
    """One replayable action in the undo or redo log."""

    kind: UndoKind
    mod: bool
    seq: int
    p0: int
    n: int
    buf: str = ""


class File:
    """A text buffer with undo, a small insertion cache and clean/dirty state.

    The owner is told about every change. It is expected to provide
    ``notify_inserted(q0, text)``, ``notify_deleted(q0, q1)``,
    ``is_dir_or_scratch()``, a ``name`` attribute and
    ``set_name_and_scratch(name)``. The owner may be None, in which case
    nobody is notified and the buffer is nameless.
    """

    def __init__(self, owner: Any = None, buffer: RuneArray | None = None) -> None:
        self.owner = owner
        self.buffer: RuneArray = buffer if buffer is not None else RuneArray()
        self.delta: list[UndoRecord] = []
        self.epsilon: list[UndoRecord] = []
        self.seq = 0
        self.putseq = 0
        self.mod = False
        self.treatasclean = False
        self.cache: list[str] = []
        self.cq0 = 0

    # -- owner helpers -------------------------------------------------

    def _name(self) -> str:
        return self.owner.name if self.owner is not None else ""

    def _notify_inserted(self, q0: int, text: str) -> None:
        if self.owner is not None:
            self.owner.notify_inserted(q0, text)

    def _notify_deleted(self, q0: int, q1: int) -> None:
        if self.owner is not None:
            self.owner.notify_deleted(q0, q1)

    # -- state queries -------------------------------------------------

    def has_uncommitted_changes(self) -> bool:
        """True when the insertion cache holds text not yet committed."""
        return bool(self.cache)

    def has_undoable_changes(self) -> bool:
        """True when there is something to undo."""
        return bool(self.delta) or bool(self.cache)

    def has_redoable_changes(self) -> bool:
        """True when there is something to redo."""
        return bool(self.epsilon)

    def size(self) -> int:
        """Number of characters, committed and cached."""
        return len(self.buffer) + len(self.cache)

    def read_c(self, q: int) -> str:
        """The character at offset q, looking in the cache first."""
        if self.cq0 <= q < self.cq0 + len(self.cache):
            return self.cache[q - self.cq0]
        return self.buffer.read_c(q)

    def read_at(self, off: int, n: int) -> str:
        """Up to n committed characters starting at off (the cache is not included)."""
        return self.buffer.read(off, n)

    def saveable_and_dirty(self) -> bool:
        """True when the contents differ from the backing file and it is writable."""
        changed = self.mod or self.dirty() or bool(self.cache)
        scratch = self.owner.is_dir_or_scratch() if self.owner is not None else False
        return changed and not scratch

    def dirty(self) -> bool:
        """True when the state differs from the one last snapshotted."""
        return self.seq != self.putseq

    def treat_as_dirty(self) -> bool:
        """True when the buffer should be considered modified on delete."""
        return not self.treatasclean and self.dirty()

    # -- mutation ------------------------------------------------------

    def commit(self) -> None:
        """Move cached insertions into the buffer, recording an undo entry."""
        self.treatasclean = False
        if not self.has_uncommitted_changes():
            return
        if self.cq0 > len(self.buffer):
            raise RuntimeError("internal error: File.commit")
        if self.seq > 0:
            self.uninsert(self.delta, self.cq0, len(self.cache))
        self.buffer.insert(self.cq0, self.cache)
        if self.cache:
            self.modded()
        self.cache = []

    def load(self, q0: int, data: bytes) -> tuple[int, bool]:
        """Insert decoded data at q0; return the character count and whether NULs were seen."""
        text, has_nulls = decode_runes(data)
        self.insert_at(q0, text)
        return len(text), has_nulls

    def snapshot_seq(self) -> None:
        """Remember the current sequence as the clean one."""
        self.putseq = self.seq

    def insert_at(self, p0: int, text: str) -> None:
        """Insert text at p0, recording an undo entry when undo is active."""
        self.treatasclean = False
        if p0 < 0 or p0 > len(self.buffer):
            raise IndexError("internal error: insert_at out of range")
        if self.seq > 0:
            self.uninsert(self.delta, p0, len(text))
        self.buffer.insert(p0, text)
        if text:
            self.modded()
        self._notify_inserted(p0, text)

    def insert_at_without_commit(self, p0: int, text: str) -> None:
        """Add text to the insertion cache; it must extend the cache contiguously."""
        self.treatasclean = False
        if p0 < 0 or p0 > len(self.buffer) + len(self.cache):
            raise IndexError("insert_at_without_commit: insertion off the end")
        if not self.cache:
            self.cq0 = p0
        elif p0 != self.cq0 + len(self.cache):
            raise RuntimeError(
                f"insert_at_without_commit: {p0} does not follow cache at "
                f"{self.cq0}+{len(self.cache)}"
            )
        self.cache.extend(text)
        self._notify_inserted(p0, text)

    def uninsert(self, delta: list[UndoRecord], q0: int, ns: int) -> None:
        """Append to delta a record that undoes an insertion by deleting."""
        delta.append(UndoRecord(UndoKind.DELETE, self.mod, self.seq, q0, ns))

    def delete_at(self, p0: int, p1: int) -> None:
        """Remove [p0, p1), recording an undo entry when undo is active."""
        self.treatasclean = False
        size = len(self.buffer)
        if not (0 <= p0 <= p1 and p0 <= size and p1 <= size):
            raise IndexError("internal error: delete_at out of range")
        if self.cache:
            raise RuntimeError("internal error: delete_at with uncommitted changes")
        if self.seq > 0:
            self.undelete(self.delta, p0, p1)
        self.buffer.delete(p0, p1)
        if p1 > p0:
            self.modded()
        self._notify_deleted(p0, p1)

    def undelete(self, delta: list[UndoRecord], p0: int, p1: int) -> None:
        """Append to delta a record that undoes a deletion by inserting."""
        n = p1 - p0
        delta.append(
            UndoRecord(UndoKind.INSERT, self.mod, self.seq, p0, n, self.buffer.read(p0, n))
        )

    def unset_name(self, delta: list[UndoRecord]) -> None:
        """Append to delta a record that restores the current name."""
        name = self._name()
        delta.append(UndoRecord(UndoKind.FILENAME, self.mod, self.seq, 0, len(name), name))

    # -- undo ----------------------------------------------------------

    def redo_seq(self) -> int:
        """Sequence number of the last redo record, or 0."""
        return self.epsilon[-1].seq if self.epsilon else 0

    def undo(self, isundo: bool) -> tuple[int, int, bool]:
        """Undo (isundo true) or redo one sequence of edits.

        Returns the new selection q0, q1 and whether it is meaningful.
        """
        if isundo:
            delta, epsilon, stop = self.delta, self.epsilon, self.seq
        else:
            delta, epsilon, stop = self.epsilon, self.delta, 0

        q0 = q1 = 0
        ok = False
        while delta:
            u = delta[-1]
            if isundo:
                if u.seq < stop:
                    self.seq = u.seq
                    return q0, q1, ok
            else:
                if stop == 0:
                    stop = u.seq
                if u.seq > stop:
                    return q0, q1, ok

            self.seq = u.seq
            if u.kind is UndoKind.DELETE:
                self.undelete(epsilon, u.p0, u.p0 + u.n)
                self.mod = u.mod
                self.treatasclean = False
                self.buffer.delete(u.p0, u.p0 + u.n)
                self._notify_deleted(u.p0, u.p0 + u.n)
                q0 = q1 = u.p0
                ok = True
            elif u.kind is UndoKind.INSERT:
                self.uninsert(epsilon, u.p0, u.n)
                self.mod = u.mod
                self.treatasclean = False
                self.buffer.insert(u.p0, u.buf)
                self._notify_inserted(u.p0, u.buf)
                q0 = u.p0
                q1 = u.p0 + u.n
                ok = True
            else:
                self.unset_name(epsilon)
                self.mod = u.mod
                self.treatasclean = False
                if self.owner is not None:
                    self.owner.set_name_and_scratch(u.buf)
            delta.pop()

        if isundo:
            self.seq = 0
        return q0, q1, ok

    def reset(self) -> None:
        """Drop every undo and redo record."""
        self.delta.clear()
        self.epsilon.clear()
        self.seq = 0

    def mark(self, seq: int) -> None:
        """Start a new undo point with sequence seq, discarding redo records."""
        self.epsilon.clear()
        self.seq = seq

    def treat_as_clean(self) -> None:
        """Consider the buffer clean until its next modification."""
        self.treatasclean = True

    def modded(self) -> None:
        """Note that the backing differs from the contents."""
        self.mod = True
        self.treatasclean = False

    def clean(self) -> None:
        """Note that the backing matches the contents."""
        self.mod = False
        self.treatasclean = False
        self.snapshot_seq()