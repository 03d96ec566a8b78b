"""The box model that lays out a frame of text: boxes, geometry and hit testing."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import NamedTuple

from edtext.buffer.utf8bytes import Utf8Bytes, decode_rune

logger = logging.getLogger(__name__)

CHUNK = 16
TAB_BOX_WIDTH = 10000


def _gomod(a: int, b: int) -> int:
    """Remainder whose sign follows the dividend."""
    r = abs(a) % abs(b)
    return r if a >= 0 else -r


class Point(NamedTuple):
    """A position in pixels."""

    x: int = 0
    y: int = 0


class Rectangle(NamedTuple):
    """A rectangle holding the points min <= p < max."""

    min: Point = Point()
    max: Point = Point()

    @classmethod
    def of(cls, x0: int, y0: int, x1: int, y1: int) -> Rectangle:
        """A well-formed rectangle from two corners given in any order."""
        if x0 > x1:
            x0, x1 = x1, x0
        if y0 > y1:
            y0, y1 = y1, y0
        return cls(Point(x0, y0), Point(x1, y1))

    def dx(self) -> int:
        """Width."""
        return self.max.x - self.min.x

    def dy(self) -> int:
        """Height."""
        return self.max.y - self.min.y

    def contains(self, pt: Point) -> bool:
        """True when pt lies inside the rectangle."""
        return self.min.x <= pt.x < self.max.x and self.min.y <= pt.y < self.max.y

    def inset(self, n: int) -> Rectangle:
        """The rectangle shrunk by n on every side."""
        x0, y0, x1, y1 = self.min.x, self.min.y, self.max.x, self.max.y
        if self.dx() < 2 * n:
            x0 = x1 = (x0 + x1) // 2
        else:
            x0, x1 = x0 + n, x1 - n
        if self.dy() < 2 * n:
            y0 = y1 = (y0 + y1) // 2
        else:
            y0, y1 = y0 + n, y1 - n
        return Rectangle(Point(x0, y0), Point(x1, y1))


@dataclass(frozen=True)
class Font:
    """A fixed-width font: every character is char_width pixels wide."""

    char_width: int = 10
    height: int = 13

    def width(self, text: str | bytes) -> int:
        """Width in pixels of text, given as characters or UTF-8 bytes."""
        if isinstance(text, (bytes, bytearray)):
            return self.char_width * Utf8Bytes(bytes(text)).rune_count()
        return self.char_width * len(text)


@dataclass
class Box:
    """A run of text, or a special tab or newline box when nrune is negative."""

    wid: int = 0
    nrune: int = 0
    ptr: bytes = b""
    bc: str = ""
    minwid: int = 0

    def clone(self) -> Box:
        """An independent copy of the box."""
        return dataclasses.replace(self)

    def __str__(self) -> str:
        if self.nrune == -1 and self.bc == "\n":
            return "newline"
        if self.nrune == -1 and self.bc == "\t":
            return f"tab width={self.wid},{self.minwid}"
        text = self.ptr.decode("utf-8", errors="replace")
        return f"{text!r} width={self.wid} nrune={self.nrune}"


def runeindex(data: bytes, n: int) -> int:
    """Byte offset of the n'th character in UTF-8 data."""
    offs = 0
    for _ in range(n):
        if data[offs] < 0x80:
            offs += 1
        else:
            _, size = decode_rune(data, offs)
            offs += size
    return offs


def nrune(box: Box) -> int:
    """Number of character positions the box occupies."""
    return 1 if box.nrune < 0 else box.nrune


def nbyte(box: Box) -> int:
    """Number of bytes of text held by the box."""
    return len(box.ptr)


def roundup(n: int) -> int:
    """Round n up past the next multiple of the allocation chunk."""
    return (n + CHUNK) & ~(CHUNK - 1)


def rpt(pmin: Point, pmax: Point) -> Rectangle:
    """The rectangle with the given corners, taken as they are."""
    return Rectangle(pmin, pmax)


class BoxModel:
    """An ordered list of boxes laid out inside a rectangle."""

    def __init__(
        self,
        font: Font | None = None,
        rect: Rectangle | None = None,
        boxes: list[Box | None] | None = None,
        defaultfontheight: int | None = None,
        maxtab: int | None = None,
    ) -> None:
        self.font = font if font is not None else Font()
        self.rect = rect if rect is not None else Rectangle()
        self.box: list[Box | None] = list(boxes) if boxes is not None else []
        self.defaultfontheight = (
            defaultfontheight if defaultfontheight is not None else self.font.height
        )
        self.maxtab = maxtab if maxtab is not None else 8 * self.font.width("0")
        self.nchars = 0
        self.nlines = 0
        self.maxlines = 0
        self.lastlinefull = False
        self.validate = False

    # -- box list manipulation -----------------------------------------

    def addbox(self, bn: int, n: int) -> None:
        """Open n slots at bn; the boxes from bn onwards move up by n."""
        if bn > len(self.box):
            raise IndexError(f"addbox: bn={bn} len(box)={len(self.box)}")
        filler = self.box[bn:bn + n]
        filler += [None] * (n - len(filler))
        self.box[bn:bn] = filler

    def closebox(self, n0: int, n1: int) -> None:
        """Remove the boxes n0 through n1 inclusive."""
        if n0 >= len(self.box) or n1 >= len(self.box) or n1 < n0:
            raise IndexError(f"closebox bounds bad: n0={n0} n1={n1} len(box)={len(self.box)}")
        del self.box[n0:n1 + 1]

    def delbox(self, n0: int, n1: int) -> None:
        """Remove the boxes n0 through n1 inclusive."""
        self.closebox(n0, n1)

    def dupbox(self, i: int) -> None:
        """Insert a copy of box i in front of it."""
        if i >= len(self.box):
            self.log_boxes("-- dupbox sadness --")
            raise IndexError(f"dupbox: i={i} is out of bounds")
        if self.box[i].nrune < 0:
            raise ValueError("dupbox: invalid nrune")
        self.box.insert(i, self.box[i].clone())

    def truncatebox(self, box: Box, n: int) -> None:
        """Drop the last n characters of box."""
        if box.nrune < 0 or box.nrune < n:
            self.log_boxes("-- truncatebox failure --")
            raise ValueError(f"truncatebox: nrune={box.nrune} n={n}")
        box.nrune -= n
        box.ptr = box.ptr[:runeindex(box.ptr, box.nrune)]
        box.wid = self.font.width(box.ptr)

    def chopbox(self, box: Box, n: int) -> None:
        """Drop the first n characters of box."""
        if box.nrune < 0 or box.nrune < n:
            self.log_boxes("-- chopbox failure --")
            raise ValueError(f"chopbox: nrune={box.nrune} n={n}")
        box.ptr = box.ptr[runeindex(box.ptr, n):]
        box.nrune -= n
        box.wid = self.font.width(box.ptr)

    def splitbox(self, bn: int, n: int) -> None:
        """Split box bn after its n'th character."""
        if bn > len(self.box):
            raise IndexError(f"splitbox: bn={bn} n={n}")
        self.dupbox(bn)
        self.truncatebox(self.box[bn], self.box[bn].nrune - n)
        self.chopbox(self.box[bn + 1], n)

    def mergebox(self, bn: int) -> None:
        """Join boxes bn and bn+1."""
        first, second = self.box[bn], self.box[bn + 1]
        first.ptr = first.ptr + second.ptr
        first.nrune += second.nrune
        first.wid += second.wid
        self.delbox(bn + 1, bn + 1)

    def findbox(self, bn: int, p: int, q: int) -> int:
        """Index of the box starting at character q, splitting a box if needed.

        p must be the first character of box bn.
        """
        for b in self.box[bn:]:
            if p + nrune(b) > q:
                break
            p += nrune(b)
            bn += 1
        if p != q:
            self.splitbox(bn, q - p)
            bn += 1
        return bn

    def validate_box_model(self, message: str) -> None:
        """When validation is on, raise RuntimeError if the box model is inconsistent."""
        if not self.validate:
            return

        def fail(reason: str) -> None:
            logger.error("%s", message)
            self.log_boxes(reason)
            raise RuntimeError(reason)

        if any(b is None for b in self.box):
            fail("-- holes in nbox portion of box array --")
        total = sum(1 if b.nrune < 0 else b.nrune for b in self.box)
        if total != self.nchars:
            fail("-- runes in boxes != nchars --")
        for b in self.box:
            if b.nrune >= 0:
                if Utf8Bytes(b.ptr).rune_count() != b.nrune:
                    fail("-- box with contents has invalid rune count --")
                if b.wid != self.font.width(b.ptr):
                    fail("-- box with contents has invalid width --")

    # -- geometry ------------------------------------------------------

    def canfit(self, pt: Point, box: Box) -> tuple[int, bool]:
        """How many characters of box fit between pt and the right edge, and whether any do."""
        left = self.rect.max.x - pt.x
        if box.nrune < 0:
            if box.minwid <= left:
                return 1, True
            return 0, False
        if left >= box.wid:
            return box.nrune, box.nrune != 0
        o = 0
        for nr in range(box.nrune):
            _, w = decode_rune(box.ptr, o)
            left -= self.font.width(box.ptr[o:o + w])
            if left < 0:
                return nr, nr != 0
            o += w
        return 0, False

    def _wrap(self, p: Point) -> Point:
        return Point(self.rect.min.x, min(p.y + self.defaultfontheight, self.rect.max.y))

    def cklinewrap(self, p: Point, box: Box) -> Point:
        """Where box should be placed when the next free position is p."""
        ret = p
        need = box.minwid if box.nrune < 0 else box.wid
        if need > self.rect.max.x - p.x:
            ret = Point(self.rect.min.x, p.y + self.defaultfontheight)
        if ret.y > self.rect.max.y:
            ret = ret._replace(y=self.rect.max.y)
        return ret

    def cklinewrap0(self, p: Point, box: Box) -> Point:
        """Like cklinewrap, but wraps only when not even part of box fits."""
        _, ok = self.canfit(p, box)
        if not ok:
            return self._wrap(p)
        return p

    def advance(self, p: Point, box: Box) -> Point:
        """The position just after box placed at p."""
        if box.nrune < 0 and box.bc == "\n":
            return self._wrap(p)
        return p._replace(x=p.x + box.wid)

    def newwid(self, pt: Point, box: Box) -> int:
        """Width of box placed at pt; stores it in the box."""
        box.wid = self.newwid0(pt, box)
        return box.wid

    def newwid0(self, pt: Point, box: Box) -> int:
        """Width of box placed at pt, with tabs stretched to the next tab stop."""
        c = self.rect.max.x
        if box.nrune >= 0 or box.bc != "\t":
            return box.wid
        ptx = pt.x
        if ptx + box.minwid > c:
            ptx = self.rect.min.x
        x = ptx + self.maxtab
        x -= _gomod(x - self.rect.min.x, self.maxtab)
        if x - ptx < box.minwid or x > c:
            x = ptx + box.minwid
        return x - ptx

    def clean(self, pt: Point, n0: int, n1: int) -> None:
        """Merge adjacent text boxes in [n0, n1) that fit on one line."""
        c = self.rect.max.x
        nb = n0
        while nb < n1 - 1:
            pt = self.cklinewrap(pt, self.box[nb])
            while (
                self.box[nb].nrune >= 0
                and nb < n1 - 1
                and self.box[nb + 1].nrune >= 0
                and pt.x + self.box[nb].wid + self.box[nb + 1].wid < c
            ):
                self.mergebox(nb)
                n1 -= 1
            pt = self.advance(pt, self.box[nb])
            nb += 1
        for b in self.box[nb:]:
            pt = self.cklinewrap(pt, b)
            pt = self.advance(pt, b)
        self.lastlinefull = pt.y >= self.rect.max.y

    def strlen(self, nb: int) -> int:
        """Number of characters in the boxes from nb onwards."""
        return sum(nrune(b) for b in self.box[nb:])

    def insure(self, bn: int, n: int) -> None:
        """Make the text of box bn at least n bytes long unless it already has room."""
        b = self.box[bn]
        if b.nrune < 0:
            raise ValueError("insure: not a text box")
        if roundup(b.nrune) > n:
            return
        b.ptr = b.ptr[:n] + bytes(max(0, n - len(b.ptr)))

    # -- hit testing ---------------------------------------------------

    def ptofcharptb(self, p: int, pt: Point, bn: int) -> Point:
        """Position of character p counted from box bn placed at pt."""
        for b in self.box[bn:]:
            pt = self.cklinewrap(pt, b)
            length = nrune(b)
            if p < length:
                if b.nrune > 0:
                    s = 0
                    while s < len(b.ptr) and p > 0:
                        p -= 1
                        r, w = decode_rune(b.ptr, s)
                        pt = pt._replace(x=pt.x + self.font.width(b.ptr[s:s + w]))
                        if r == "\0" or pt.x > self.rect.max.x:
                            raise RuntimeError(
                                f"ptofchar: r={r!r} pt.x={pt.x} rect.max.x={self.rect.max.x}"
                            )
                        s += w
                break
            p -= length
            pt = self.advance(pt, b)
        return pt

    def ptofchar(self, p: int) -> Point:
        """Upper left corner of character p."""
        return self.ptofcharptb(p, self.rect.min, 0)

    def grid(self, p: Point) -> Point:
        """p snapped to the top of its text line and clamped to the right edge."""
        y = p.y - self.rect.min.y
        y -= _gomod(y, self.defaultfontheight)
        return Point(min(p.x, self.rect.max.x), y + self.rect.min.y)

    def charofpt(self, pt: Point) -> int:
        """Index of the character closest to pt, up and to the left."""
        pt = self.grid(pt)
        qt = self.rect.min
        p = 0
        bn = 0
        while bn < len(self.box) and qt.y < pt.y:
            b = self.box[bn]
            qt = self.cklinewrap(qt, b)
            if qt.y >= pt.y:
                break
            qt = self.advance(qt, b)
            p += nrune(b)
            bn += 1

        for b in self.box[bn:]:
            if qt.x > pt.x:
                break
            qt = self.cklinewrap(qt, b)
            if qt.y > pt.y:
                break
            if qt.x + b.wid > pt.x:
                if b.nrune < 0:
                    qt = self.advance(qt, b)
                else:
                    s = 0
                    while s < len(b.ptr):
                        r, w = decode_rune(b.ptr, s)
                        if r == "\0":
                            raise RuntimeError("end of string in charofpt")
                        qt = qt._replace(x=qt.x + self.font.width(b.ptr[s:s + w]))
                        if qt.x > pt.x:
                            break
                        p += 1
                        s += w
            else:
                p += nrune(b)
                qt = self.advance(qt, b)
        return p

    def log_boxes(self, message: str) -> None:
        """Write the box model to the log."""
        logger.info("%s", message)
        for i, b in enumerate(self.box):
            if b is None:
                logger.info("\tbox[%d] is WRONGLY None", i)
            else:
                logger.info("\tbox[%d] -> %s", i, b)
        logger.info("end: %s", message)