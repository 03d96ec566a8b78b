"""Character-indexed access to UTF-8 encoded bytes."""

from __future__ import annotations

RUNE_ERROR = "\ufffd"
_RUNE_SELF = 0x80
_UTF_MAX = 4


def _lead(b0: int) -> tuple[int, int, int] | None:
    """Sequence length and permitted range of the second byte for a lead byte."""
    if 0xC2 <= b0 <= 0xDF:
        return 2, 0x80, 0xBF
    if b0 == 0xE0:
        return 3, 0xA0, 0xBF
    if 0xE1 <= b0 <= 0xEC or b0 in (0xEE, 0xEF):
        return 3, 0x80, 0xBF
    if b0 == 0xED:
        return 3, 0x80, 0x9F
    if b0 == 0xF0:
        return 4, 0x90, 0xBF
    if 0xF1 <= b0 <= 0xF3:
        return 4, 0x80, 0xBF
    if b0 == 0xF4:
        return 4, 0x80, 0x8F
    return None


def decode_rune(data: bytes, start: int = 0, end: int | None = None) -> tuple[str, int]:
    """Decode the character at data[start:end].

    Invalid or truncated sequences decode as U+FFFD with width 1;
    an empty range gives U+FFFD with width 0.
    """
    if end is None:
        end = len(data)
    available = end - start
    if available <= 0:
        return RUNE_ERROR, 0
    b0 = data[start]
    if b0 < _RUNE_SELF:
        return chr(b0), 1
    lead = _lead(b0)
    if lead is None:
        return RUNE_ERROR, 1
    size, lo, hi = lead
    if available < size or not lo <= data[start + 1] <= hi:
        return RUNE_ERROR, 1
    if any(not 0x80 <= data[start + k] <= 0xBF for k in range(2, size)):
        return RUNE_ERROR, 1
    return bytes(data[start:start + size]).decode("utf-8"), size


def decode_last_rune(data: bytes, end: int | None = None) -> tuple[str, int]:
    """Decode the character that ends at data[end]."""
    if end is None:
        end = len(data)
    if end <= 0:
        return RUNE_ERROR, 0
    start = end - 1
    if data[start] < _RUNE_SELF:
        return chr(data[start]), 1
    lim = max(end - _UTF_MAX, 0)
    start -= 1
    while start >= lim:
        if data[start] & 0xC0 != 0x80:
            break
        start -= 1
    start = max(start, 0)
    r, size = decode_rune(data, start, end)
    if start + size != end:
        return RUNE_ERROR, 1
    return r, size


class Utf8Bytes:
    """UTF-8 bytes indexed by character position.

    Stepping forwards or backwards one character at a time costs O(1);
    random access scans from the nearest known position. Pure ASCII
    contents are indexed directly.
    """

    def __init__(self, contents: bytes = b"") -> None:
        self._b = bytes(contents)
        self._byte_pos = 0
        self._rune_pos = 0
        first = next((k for k, c in enumerate(self._b) if c >= _RUNE_SELF), None)
        if first is None:
            self._num_runes = len(self._b)
            self._width = 0
            self._non_ascii = len(self._b)
        else:
            self._num_runes = self._count_runes()
            _, self._width = decode_rune(self._b)
            self._non_ascii = first

    def _count_runes(self) -> int:
        count = pos = 0
        while pos < len(self._b):
            _, width = decode_rune(self._b, pos)
            pos += width
            count += 1
        return count

    @property
    def data(self) -> bytes:
        """The underlying bytes."""
        return self._b

    def __bytes__(self) -> bytes:
        return self._b

    def __len__(self) -> int:
        return self._num_runes

    def rune_count(self) -> int:
        """Number of characters held."""
        return self._num_runes

    def is_ascii(self) -> bool:
        """True when every byte is ASCII."""
        return self._non_ascii == len(self._b)

    def slice(self, i: int, j: int) -> bytes:
        """Bytes of the characters at positions [i, j)."""
        if i < 0 or j > self._num_runes or i > j:
            raise IndexError("utf8 bytes: slice index out of range")
        if j < self._non_ascii:
            return self._b[i:j]
        if i == j:
            return b""
        if i < self._non_ascii:
            low = i
        elif i == self._num_runes:
            low = len(self._b)
        else:
            self.at(i)
            low = self._byte_pos
        if j == self._num_runes:
            high = len(self._b)
        else:
            self.at(j)
            high = self._byte_pos
        return self._b[low:high]

    def at(self, i: int) -> str:
        """The character at position i."""
        if i < 0 or i >= self._num_runes:
            raise IndexError("utf8 bytes: index out of range")
        b = self._b
        if i < self._non_ascii:
            return chr(b[i])

        if i == self._rune_pos - 1:
            r, self._width = decode_last_rune(b, self._byte_pos)
            self._rune_pos = i
            self._byte_pos -= self._width
            return r
        if i == self._rune_pos + 1:
            self._rune_pos = i
            self._byte_pos += self._width
            r, self._width = decode_rune(b, self._byte_pos)
            return r
        if i == self._rune_pos:
            r, self._width = decode_rune(b, self._byte_pos)
            return r
        if i == 0:
            r, self._width = decode_rune(b)
            self._rune_pos = 0
            self._byte_pos = 0
            return r
        if i == self._num_runes - 1:
            r, self._width = decode_last_rune(b)
            self._rune_pos = i
            self._byte_pos = len(b) - self._width
            return r

        forward = True
        if i < self._rune_pos:
            if i < (self._rune_pos - self._non_ascii) // 2:
                self._byte_pos = self._rune_pos = self._non_ascii
            else:
                forward = False
        elif i - self._rune_pos >= (self._num_runes - self._rune_pos) // 2:
            self._byte_pos, self._rune_pos = len(b), self._num_runes
            forward = False

        if forward:
            while True:
                r, self._width = decode_rune(b, self._byte_pos)
                if self._rune_pos == i:
                    return r
                self._rune_pos += 1
                self._byte_pos += self._width
        while True:
            r, self._width = decode_last_rune(b, self._byte_pos)
            self._rune_pos -= 1
            self._byte_pos -= self._width
            if self._rune_pos == i:
                return r

    def has_null(self) -> bool:
        """True when a NUL character is present."""
        return any(self.at(k) == "\0" for k in range(self._num_runes))

    def read(self, size: int = -1) -> bytes:
        """Return up to size bytes from the start of the contents."""
        if size < 0:
            return self._b
        return self._b[:size]