"""A mutable sequence of characters addressed by character offset."""

from __future__ import annotations

import io
import re
from collections.abc import Iterable, Iterator

_SURROGATES = re.compile("[\ud800-\udfff]")


def _to_utf8(text: str) -> bytes:
    """Encode text as UTF-8, turning unencodable code points into U+FFFD."""
    return _SURROGATES.sub("\ufffd", text).encode("utf-8")


class RuneArray:
    """A growable array of characters supporting insertion and deletion."""

    __hash__ = None  # mutable

    def __init__(self, text: Iterable[str] | None = "") -> None:
        self._runes: list[str] = list(text) if text else []

    def insert(self, q0: int, text: Iterable[str]) -> None:
        """Insert text so that its first character lands at offset q0."""
        if q0 < 0 or q0 > len(self._runes):
            raise IndexError("buffer insert: out of range insertion")
        self._runes[q0:q0] = list(text)

    def delete(self, q0: int, q1: int) -> None:
        """Remove the characters in [q0, q1)."""
        size = len(self._runes)
        if q0 < 0 or q0 > size or q1 > size or q0 > q1:
            raise IndexError("buffer delete: out of range delete")
        del self._runes[q0:q1]

    def read(self, q0: int, n: int) -> str:
        """Return at most n characters starting at q0."""
        if q0 < 0 or q0 > len(self._runes):
            raise IndexError("buffer read: offset out of range")
        return "".join(self._runes[q0:q0 + max(n, 0)])

    def reader(self, q0: int, q1: int) -> io.BytesIO:
        """Return a binary stream of the UTF-8 encoding of [q0, q1)."""
        if q0 < 0 or q1 > len(self._runes) or q0 > q1:
            raise IndexError("buffer reader: range out of bounds")
        return io.BytesIO(_to_utf8("".join(self._runes[q0:q1])))

    def read_c(self, q: int) -> str:
        """Return the character at offset q."""
        if q < 0:
            raise IndexError("buffer read_c: negative offset")
        return self._runes[q]

    def reset(self) -> None:
        """Remove every character."""
        self._runes.clear()

    def nbyte(self) -> int:
        """Number of bytes needed to hold the contents as UTF-8."""
        return len(_to_utf8(str(self)))

    def view(self, q0: int, q1: int) -> str:
        """Return the characters in [q0, q1), with q1 clamped to the end."""
        q1 = min(q1, len(self._runes))
        if q0 < 0 or q0 > q1:
            raise IndexError("buffer view: range out of bounds")
        return "".join(self._runes[q0:q1])

    def index_rune(self, r: str) -> int:
        """Offset of the first occurrence of r, or -1."""
        try:
            return self._runes.index(r)
        except ValueError:
            return -1

    def __len__(self) -> int:
        return len(self._runes)

    def __iter__(self) -> Iterator[str]:
        return iter(self._runes)

    def __str__(self) -> str:
        return "".join(self._runes)

    def __repr__(self) -> str:
        return f"RuneArray({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, RuneArray):
            return self._runes == other._runes
        if isinstance(other, str):
            return str(self) == other
        return NotImplemented