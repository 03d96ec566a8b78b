"""Editing a frame: inserting and deleting text, and mouse selection."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from edtext.frame.boxes import Box, Font, Point, Rectangle, nrune, rpt
from edtext.frame.frame import (
    Colour,
    Frame,
    Image,
    opt_background,
    opt_colors,
    opt_font,
    opt_max_tab,
)

logger = logging.getLogger(__name__)

TMPSIZE = 256
TAB_BOX_WIDTH = 10000


def _godiv(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def _encode(c: str) -> bytes:
    try:
        return c.encode("utf-8")
    except UnicodeEncodeError:
        return "\ufffd".encode("utf-8")


def region(a: int, b: int) -> int:
    """-1, 0 or 1 as a is less than, equal to or greater than b."""
    if a < b:
        return -1
    if a == b:
        return 0
    return 1


@dataclass(frozen=True)
class Mouse:
    """A mouse event: where the pointer is and which buttons are down."""

    point: Point
    buttons: int = 0


MoreLines = Callable[["TextFrame", int], None]


class TextFrame(Frame):
    """A frame whose text can be inserted, deleted and selected with the mouse."""

    # -- building boxes ------------------------------------------------

    def bxscan(self, text: str, ppt: Point) -> tuple[Point, Point, TextFrame]:
        """Lay text out into a new frame's boxes, to be placed at ppt.

        Returns where the insertion really starts (ppt after any wrap),
        where it ends, and the frame holding the new boxes.
        """
        if not text:
            raise ValueError("bxscan: no text")
        frame = TextFrame(
            font=self.font,
            rect=self.rect,
            defaultfontheight=self.defaultfontheight,
            maxtab=self.maxtab,
        )
        frame.display = self.display
        frame.background = self.background
        frame.cols = list(self.cols)

        nl = 0
        offs = 0
        while offs < len(text) and nl <= self.maxlines:
            c = text[offs]
            if c == "\t":
                frame.box.append(
                    Box(wid=TAB_BOX_WIDTH, nrune=-1, bc=c, minwid=frame.font.width(" "))
                )
                frame.nchars += 1
                offs += 1
            elif c == "\n":
                frame.box.append(Box(wid=TAB_BOX_WIDTH, nrune=-1, bc=c, minwid=0))
                frame.nchars += 1
                offs += 1
                nl += 1
            else:
                chunk = bytearray()
                nr = 0
                w = 0
                while offs < len(text):
                    ch = text[offs]
                    if ch in "\t\n":
                        break
                    encoded = _encode(ch)
                    if len(chunk) + len(encoded) >= TMPSIZE:
                        break
                    w += frame.font.width(ch)
                    chunk += encoded
                    offs += 1
                    nr += 1
                frame.box.append(Box(wid=w, nrune=nr, ptr=bytes(chunk)))
                frame.nchars += nr

        ppt = self.cklinewrap0(ppt, frame.box[0])
        return ppt, frame.layout(ppt), frame

    def chop(self, pt: Point, p: int, bn: int) -> None:
        """Drop the boxes from bn on that fall below the frame; p is the first character of box bn."""
        if bn >= len(self.box):
            self.log_boxes(f" -- chop, invalid bn={bn} --")
            raise IndexError("chop: bn too large")
        for i, bx in enumerate(self.box[bn:]):
            pt = self.cklinewrap(pt, bx)
            if pt.y >= self.rect.max.y:
                self.nchars = p
                self.nlines = self.maxlines
                del self.box[bn + i:]
                return
            p += nrune(bx)
            pt = self.advance(pt, bx)
        self.nchars = p
        self.nlines = self.maxlines

    def _validate_inputs(self, text: str) -> None:
        if not self.validate:
            return
        for i, r in enumerate(text):
            if r == "\0":
                logger.error("text[%d] is NUL", i)
                raise ValueError("-- invalid input to frame insert --")

    # -- insertion -----------------------------------------------------

    def insert(self, text: str, p0: int) -> bool:
        """Insert text at character p0; return whether the last line is full."""
        self.validate_box_model(f"frame insert start p0={p0} «{text}»")
        result = self._insert(text, p0)
        self.validate_box_model(f"frame insert end p0={p0} «{text}»")
        return result

    def _insert(self, text: str, p0: int) -> bool:
        self._validate_inputs(text)
        if p0 > self.nchars or not text or self.background is None:
            return self.lastlinefull

        bg = self.background
        h = self.defaultfontheight
        col = self.cols[Colour.BACK]
        tcol = self.cols[Colour.TEXT]
        pts: list[tuple[Point, Point]] = []

        n0 = self.findbox(0, 0, p0)
        if n0 > len(self.box):
            self.log_boxes("-- findbox failed to return a valid box index --")
            raise IndexError(f"findbox: n0={n0}")

        cn0 = p0
        nn0 = n0
        pt0 = self.ptofcharptb(p0, self.rect.min, 0)
        opt0 = pt0
        ppt0, pt1, nframe = self.bxscan(text, pt0)
        ppt1 = pt1

        if n0 < len(self.box):
            pt0 = self.cklinewrap(pt0, self.box[n0])
            ppt1 = self.cklinewrap0(ppt1, self.box[n0])
        self.modified = True

        # Remove the selection or tick.
        self.draw_sel(self.ptofcharptb(self.sp0, self.rect.min, 0), self.sp0, self.sp1, False)

        # Find where old and new x positions line up.
        npts = 0
        while pt1.x != pt0.x and pt1.y != self.rect.max.y and n0 < len(self.box):
            b = self.box[n0]
            pt0 = self.cklinewrap(pt0, b)
            pt1 = self.cklinewrap0(pt1, b)
            if pt1.y > self.rect.max.y:
                self.log_boxes("-- pt1 violated invariant at box --")
                raise RuntimeError(f"frame insert: pt1 too far pt1={pt1} box={b}")
            if b.nrune > 0:
                n, fits = self.canfit(pt1, b)
                if not fits:
                    self.log_boxes(f"-- canfit false box[{n0}]={b} {pt1}, {self.rect} --")
                    raise RuntimeError("frame insert: canfit false")
                if n != b.nrune:
                    self.splitbox(n0, n)
                    b = self.box[n0]
            pts.append((pt0, pt1))
            if pt1.y == self.rect.max.y:
                break
            pt0 = self.advance(pt0, b)
            pt1 = pt1._replace(x=pt1.x + self.newwid(pt1, b))
            cn0 += nrune(b)
            n0 += 1
            npts += 1

        if pt1.y > self.rect.max.y:
            raise RuntimeError("frame insert: pt1 too far")
        if pt1.y == self.rect.max.y and n0 < len(self.box):
            self.nchars -= self.strlen(n0)
            self.delbox(n0, len(self.box) - 1)

        if n0 == len(self.box):
            self.nlines = _godiv(pt1.y - self.rect.min.y, h)
            if pt1.x > self.rect.min.x:
                self.nlines += 1
        elif pt1.y != pt0.y:
            y = self.rect.max.y
            q0 = pt0.y + h
            q1 = pt1.y + h
            self.nlines += _godiv(q1 - q0, h)
            if self.nlines > self.maxlines:
                self.chop(ppt1, p0, nn0)
            if pt1.y < y:
                if q1 < y:
                    r = Rectangle(Point(self.rect.min.x, q1), Point(self.rect.max.x, y))
                    bg.draw(r, bg, None, Point(self.rect.min.x, q0))
                r = Rectangle(pt1, Point(pt1.x + (self.rect.max.x - pt0.x), q1))
                bg.draw(r, bg, None, pt0)

        # Move the old text between the insertion and the line-up point.
        y = pt1.y if pt1.y == self.rect.max.y else 0
        npts -= 1
        n0 -= 1
        while npts >= 0:
            b = self.box[n0]
            old, pt = pts[npts]
            if b.nrune > 0:
                bg.draw(Rectangle(pt, Point(pt.x + b.wid, pt.y + h)), bg, None, old)
                if npts == 0 and pt.y > pt0.y:
                    r = Rectangle(opt0, Point(self.rect.max.x, opt0.y + h))
                    bg.draw(r, col, None, r.min)
                elif pt.y < y:
                    r = Rectangle(Point(pt.x + b.wid, pt.y), Point(self.rect.max.x, pt.y + h))
                    bg.draw(r, col, None, r.min)
                y = pt.y
                cn0 -= b.nrune
            else:
                r = Rectangle(pt, Point(min(pt.x + b.wid, self.rect.max.x), pt.y + h))
                cn0 -= 1
                bg.draw(r, col, None, r.min)
                y = pt.y if pt.x == self.rect.min.x else 0
            npts -= 1
            n0 -= 1

        self.select_paint(ppt0, ppt1, col)
        nframe.drawtext(ppt0, tcol, col)

        count = len(nframe.box)
        self.addbox(nn0, count)
        self.box[nn0:nn0 + count] = nframe.box

        if (
            nn0 > 0
            and self.box[nn0 - 1].nrune >= 0
            and ppt0.x - self.box[nn0 - 1].wid >= self.rect.min.x
        ):
            nn0 -= 1
            ppt0 = ppt0._replace(x=ppt0.x - self.box[nn0].wid)

        n0 += count
        if n0 < len(self.box) - 1:
            n0 += 1
        self.clean(ppt0, nn0, n0 + 1)

        self.nchars += nframe.nchars
        if self.sp0 >= p0:
            self.sp0 += nframe.nchars
        if self.sp0 >= self.nchars:
            self.sp0 = self.nchars
        if self.sp1 >= p0:
            self.sp1 += nframe.nchars
        if self.sp1 >= self.nchars:
            self.sp1 += self.nchars
        return self.lastlinefull

    # -- deletion ------------------------------------------------------

    def delete(self, p0: int, p1: int) -> int:
        """Delete characters [p0, p1); return how many lines the text shrank by."""
        self.validate_box_model(f"frame delete start p0={p0} p1={p1}")
        result = self._delete(p0, p1)
        self.validate_box_model(f"frame delete end p0={p0} p1={p1}")
        return result

    def _delete(self, p0: int, p1: int) -> int:
        if p1 > self.nchars:
            p1 = self.nchars - 1
        if p0 >= self.nchars or p0 == p1 or self.background is None:
            return 0

        bg = self.background
        h = self.defaultfontheight
        back = self.cols[Colour.BACK]

        n0 = self.findbox(0, 0, p0)
        if n0 == len(self.box):
            raise IndexError("off end in frame delete")
        n1 = self.findbox(n0, p0, p1)
        pt0 = self.ptofcharptb(p0, self.rect.min, 0)
        pt1 = self.ptofcharptb(p1, self.rect.min, 0)

        self.draw_sel(self.ptofcharptb(self.sp0, self.rect.min, 0), self.sp0, self.sp1, False)

        nn0 = n0
        ppt0 = pt0
        self.modified = True

        while pt1.x != pt0.x and n1 < len(self.box):
            b = self.box[n1]
            pt0 = self.cklinewrap0(pt0, b)
            pt1 = self.cklinewrap(pt1, b)
            n, fits = self.canfit(pt0, b)
            if not fits:
                raise RuntimeError("frame delete: canfit fits is false")

            rmin = pt0
            if b.nrune > 0:
                w0 = b.wid
                if n != b.nrune:
                    self.splitbox(n1, n)
                    b = self.box[n1]
                rmax = Point(pt0.x + b.wid, pt0.y + h)
                bg.draw(Rectangle(rmin, rmax), bg, None, pt1)
                rmin = Point(rmax.x, rmin.y)
                rmax = Point(min(rmax.x + w0 - b.wid, self.rect.max.x), rmax.y)
                r = Rectangle(rmin, rmax)
                bg.draw(r, back, None, r.min)
            else:
                rmax = Point(min(pt0.x + self.newwid0(pt0, b), self.rect.max.x), pt0.y + h)
                bg.draw(Rectangle(rmin, rmax), back, None, pt0)

            pt1 = self.advance(pt1, b)
            pt0 = pt0._replace(x=pt0.x + self.newwid(pt0, b))
            self.box[n0] = self.box[n1]
            n0 += 1
            n1 += 1

        if n1 == len(self.box) and pt0.x != pt1.x:
            self.select_paint(pt0, pt1, back)
        if pt1.y != pt0.y:
            pt2 = self.ptofcharptb(32767, pt1, n1)
            if pt2.y > self.rect.max.y:
                raise RuntimeError("frame delete: ptofchar beyond frame")
            if n1 < len(self.box):
                q0 = pt0.y + h
                q1 = pt1.y + h
                q2 = min(pt2.y + h, self.rect.max.y)
                bg.draw(
                    Rectangle.of(pt0.x, pt0.y, pt0.x + (self.rect.max.x - pt1.x), q0),
                    bg, None, pt1,
                )
                bg.draw(
                    Rectangle.of(self.rect.min.x, q0, self.rect.max.x, q0 + (q2 - q1)),
                    bg, None, Point(self.rect.min.x, q1),
                )
                self.select_paint(Point(pt2.x, pt2.y - (pt1.y - pt0.y)), pt2, back)
            else:
                self.select_paint(pt0, pt2, back)

        self.closebox(n0, n1 - 1)
        if (
            nn0 > 0
            and self.box[nn0 - 1].nrune >= 0
            and ppt0.x - self.box[nn0 - 1].wid >= self.rect.min.x
        ):
            nn0 -= 1
            ppt0 = ppt0._replace(x=ppt0.x - self.box[nn0].wid)

        if n0 < len(self.box) - 1:
            self.clean(ppt0, nn0, n0 + 1)
        else:
            self.clean(ppt0, nn0, n0)

        if self.sp1 > p1:
            self.sp1 -= p1 - p0
        elif self.sp1 > p0:
            self.sp1 = p0
        if self.sp0 > p1:
            self.sp0 -= p1 - p0
        elif self.sp0 > p0:
            self.sp0 = p0

        self.nchars -= p1 - p0
        if self.sp0 == self.sp1:
            self.tick(self.ptofcharptb(self.sp0, self.rect.min, 0), True)
        end = self.ptofcharptb(self.nchars, self.rect.min, 0)
        before = self.nlines
        self.nlines = _godiv(end.y - self.rect.min.y, h)
        if end.x > self.rect.min.x:
            self.nlines += 1
        return before - self.nlines

    # -- selection -----------------------------------------------------

    def select_paint(self, p0: Point, p1: Point, col: Image | None) -> None:
        """Paint with col the region between positions p0 and p1."""
        h = self.defaultfontheight
        q0 = Point(p0.x, p0.y + h)
        q1 = Point(p1.x, p1.y + h)
        n = _godiv(p1.y - p0.y, h)
        if self.background is None:
            raise RuntimeError("select_paint: frame has no background")
        if p0.y == self.rect.max.y:
            return
        bg = self.background
        if n == 0:
            bg.draw(rpt(p0, q1), col, None, Point())
            return
        x0 = self.rect.max.x - 1 if p0.x >= self.rect.max.x else p0.x
        bg.draw(Rectangle.of(x0, p0.y, self.rect.max.x, q0.y), col, None, Point())
        if n > 1:
            bg.draw(
                Rectangle.of(self.rect.min.x, q0.y, self.rect.max.x, p1.y), col, None, Point()
            )
        bg.draw(Rectangle.of(self.rect.min.x, p1.y, q1.x, q1.y), col, None, Point())

    def select(
        self,
        events: Iterable[Mouse],
        downevent: Mouse,
        getmorelines: MoreLines | None,
    ) -> tuple[int, int]:
        """Track a selection while the buttons of downevent stay down.

        events supplies the following mouse events; getmorelines(frame, n)
        is asked to scroll n lines when the pointer leaves the frame.
        Returns the selection.
        """
        omp = downevent.point
        omb = downevent.buttons
        h = self.defaultfontheight
        self.modified = False

        p0 = self.charofpt(omp)
        p1 = p0
        self.draw_sel(self.ptofcharptb(p0, self.rect.min, 0), p0, p1, True)

        reg = 0
        pin = 0
        for me in events:
            mp = me.point
            mb = me.buttons

            scrled = False
            if mp.y < self.rect.min.y:
                if getmorelines is not None:
                    getmorelines(self, _godiv(-(self.rect.min.y - mp.y), h) - 1)
                p0, p1 = self.sp1, self.sp0
                scrled = True
            elif mp.y > self.rect.max.y:
                if getmorelines is not None:
                    getmorelines(self, _godiv(mp.y - self.rect.max.y, h) + 1)
                p0, p1 = self.sp1, self.sp0
                scrled = True
            if scrled:
                if reg != region(p1, p0):
                    p0, p1 = p1, p0
                reg = region(p1, p0)

            q = self.charofpt(mp)
            if p0 == p1 and q == p0:
                pin = 0
            elif pin == 0 and q > p0:
                pin = 1
                p1 = q
            elif pin == 0 and q < p0:
                pin = -1
                p0 = q
            elif pin == -1 and q < p1:
                p0 = q
            elif pin == -1 and q > p1:
                p0 = p1
                p1 = q
                pin = 1
            elif pin == -1 and q == p1:
                p0 = p1 = q
                pin = 0
            elif pin == 1 and q > p0:
                p1 = q
            elif pin == 1 and q == p0:
                pin = 0
                p0 = p1 = q
            elif pin == 1 and q < p0:
                pin = -1
                p1 = p0
                p0 = q

            self.draw_sel(self.ptofcharptb(p0, self.rect.min, 0), p0, p1, True)

            if scrled and getmorelines is not None:
                getmorelines(self, 0)
            if self.display is not None:
                self.display.flush()
            if omb != mb:
                break

        if self.sp1 > self.nchars:
            self.sp1 = self.nchars
        return self.sp0, self.sp1

    def select_opt(
        self,
        events: Iterable[Mouse],
        downevent: Mouse,
        getmorelines: MoreLines | None,
        fg: Image | None,
        bg: Image | None,
    ) -> tuple[int, int]:
        """Select as select does, temporarily highlighting with fg on bg."""
        oback = self.cols[Colour.HIGH]
        otext = self.cols[Colour.HTEXT]
        osp0, osp1 = self.sp0, self.sp1

        self.draw_sel(self.ptofcharptb(osp0, self.rect.min, 0), osp0, osp1, False)
        self.cols[Colour.HIGH] = bg
        self.cols[Colour.HTEXT] = fg
        try:
            return self.select(events, downevent, getmorelines)
        finally:
            self.cols[Colour.HIGH] = oback
            self.cols[Colour.HTEXT] = otext
            self.draw_sel(self.ptofcharptb(osp0, self.rect.min, 0), osp0, osp1, True)


def new_frame(
    r: Rectangle,
    font: Font,
    background: Image,
    cols: Sequence[Image | None],
) -> TextFrame:
    """A frame showing text in r with the given font, background and colours."""
    frame = TextFrame()
    frame.configure(
        r, opt_colors(cols), opt_font(font), opt_background(background), opt_max_tab(8)
    )
    return frame