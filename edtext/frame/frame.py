"""A frame of text drawn onto an image: options, selection, tick and layout."""

from __future__ import annotations

import enum
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from edtext.frame.boxes import Box, BoxModel, Font, Point, Rectangle, nrune, runeindex

FRTICKW = 3

_UNIT = Rectangle.of(0, 0, 1, 1)


class Colour(enum.IntEnum):
    """Indexes of the colours a frame uses."""

    BACK = 0
    HIGH = 1
    BORD = 2
    TEXT = 3
    HTEXT = 4


NUM_COLOURS = len(Colour)


class Image:
    """A drawing surface that records the operations applied to it."""

    def __init__(
        self,
        r: Rectangle,
        display: Display | None = None,
        fill: str | None = None,
        name: str = "",
    ) -> None:
        self.r = r
        self.display = display
        self.fill = fill
        self.name = name
        self.ops: list[tuple] = []
        self.freed = False

    def draw(self, r: Rectangle, src: Image | None, mask: Image | None, p: Point) -> None:
        """Draw src through mask into r, aligning p in src with r.min."""
        self.ops.append(("draw", r, src, mask, p))

    def text(self, pt: Point, src: Image | None, sp: Point, font: Font, data: bytes) -> Point:
        """Draw the UTF-8 text data at pt; return the point just after it."""
        data = bytes(data)
        self.ops.append(("text", pt, src, sp, data))
        return Point(pt.x + font.width(data), pt.y)

    def free(self) -> None:
        """Release the image."""
        self.freed = True

    def __repr__(self) -> str:
        return f"Image({self.name or self.fill!r}, {self.r})"


class Display:
    """The display that frames draw on, with its scale and a few stock images."""

    def __init__(self, scale: int = 1, screen_rect: Rectangle | None = None) -> None:
        self.scale = scale
        self.flushes = 0
        self.screen = Image(screen_rect or Rectangle.of(0, 0, 1024, 768), self, name="screen")
        self.black = Image(_UNIT, self, fill="black", name="black")
        self.white = Image(_UNIT, self, fill="white", name="white")
        self.transparent = Image(_UNIT, self, fill="transparent", name="transparent")
        self.opaque = Image(_UNIT, self, fill="opaque", name="opaque")

    def alloc_image(self, r: Rectangle, fill: str | None = None, name: str = "") -> Image:
        """A new image covering r, initially filled with fill."""
        return Image(r, self, fill, name)

    def flush(self) -> None:
        """Push pending drawing to the screen."""
        self.flushes += 1

    def scale_size(self, n: int) -> int:
        """n scaled for the display's pixel density."""
        return n * self.scale


@dataclass(frozen=True)
class FrameFillStatus:
    """A snapshot of how full a frame is."""

    nchars: int
    nlines: int
    maxlines: int
    max_pixel_height: int


@dataclass
class OptionContext:
    """What a set of options requires of one configure call."""

    updatetick: bool = False
    maxtabchars: int = -1

    def compute_maxtab(self, maxtab: int, ftw: int) -> int:
        """The tab width in pixels: unchanged unless a tab size in characters was given."""
        if self.maxtabchars < 0:
            return maxtab
        return self.maxtabchars * ftw


Option = Callable[["Frame", OptionContext], None]


def opt_colors(cols: Sequence[Image | None]) -> Option:
    """Option setting the frame's colours, one per Colour."""
    cols = list(cols)
    if len(cols) != NUM_COLOURS:
        raise ValueError(f"expected {NUM_COLOURS} colours, got {len(cols)}")

    def apply(frame: Frame, ctx: OptionContext) -> None:
        frame.cols = list(cols)
        ctx.updatetick = True

    return apply


def opt_background(background: Image | None) -> Option:
    """Option setting the image the frame is drawn on."""

    def apply(frame: Frame, ctx: OptionContext) -> None:
        frame.background = background
        ctx.updatetick = True

    return apply


def opt_font(font: Font) -> Option:
    """Option setting the frame's font."""

    def apply(frame: Frame, ctx: OptionContext) -> None:
        frame.font = font
        ctx.updatetick = frame.defaultfontheight != font.height

    return apply


def opt_max_tab(maxtabchars: int) -> Option:
    """Option setting the tab width as a number of '0' characters."""

    def apply(frame: Frame, ctx: OptionContext) -> None:
        ctx.maxtabchars = maxtabchars

    return apply


class Frame(BoxModel):
    """A box model drawn onto a background image, with a selection and a tick."""

    def __init__(
        self,
        font: Font | None = None,
        rect: Rectangle | None = None,
        boxes: list[Box | None] | None = None,
        defaultfontheight: int | None = None,
        maxtab: int | None = None,
    ) -> None:
        super().__init__(font, rect, boxes, defaultfontheight, maxtab)
        self.display: Display | None = None
        self.background: Image | None = None
        self.cols: list[Image | None] = [None] * NUM_COLOURS
        self.sp0 = 0
        self.sp1 = 0
        self.tickimage: Image | None = None
        self.tickback: Image | None = None
        self.ticked = False
        self.highlighton = False
        self.noredraw = False
        self.tickscale = 0
        self.modified = False

    # -- configuration -------------------------------------------------

    def configure(self, r: Rectangle, *args: Option) -> None:
        """Prepare the frame to show text in r, applying any options given."""
        self.nchars = 0
        self.nlines = 0
        self.sp0 = 0
        self.sp1 = 0
        self.box = []
        self.lastlinefull = False

        ctx = self.option(*args)

        self.defaultfontheight = self.font.height
        if self.background is not None:
            self.display = self.background.display
        self.maxtab = ctx.compute_maxtab(self.maxtab, self.font.width("0"))
        self.setrects(r)

        if ctx.updatetick or (self.tickimage is None and self.cols[Colour.BACK] is not None):
            self.init_tick()

    def option(self, *args: Option) -> OptionContext:
        """Apply options; return what they require of the caller."""
        ctx = OptionContext()
        for opt in args:
            opt(self, ctx)
        return ctx

    def setrects(self, r: Rectangle) -> None:
        """Set the geometry: r trimmed to a whole number of lines."""
        height = self.defaultfontheight
        dy = r.max.y - r.min.y
        self.rect = Rectangle(r.min, Point(r.max.x, r.max.y - dy % height))
        self.maxlines = dy // height

    def clear(self, freeall: bool) -> None:
        """Drop the boxes; with freeall also release the tick images."""
        self.box = []
        if freeall:
            for image in (self.tickimage, self.tickback):
                if image is not None:
                    image.free()
            self.tickimage = None
            self.tickback = None
        self.ticked = False

    # -- queries -------------------------------------------------------

    def fill_status(self) -> FrameFillStatus:
        """How much of the frame is occupied."""
        return FrameFillStatus(
            nchars=self.nchars,
            nlines=self.nlines,
            maxlines=self.maxlines,
            max_pixel_height=self.maxlines * self.defaultfontheight,
        )

    def text_occupied_height(self, r: Rectangle) -> int:
        """Height of whole text lines that fit in r, at most the lines in use."""
        h = self.defaultfontheight
        if r.dy() > self.nlines * h:
            return self.nlines * h
        return (r.dy() // h) * h

    def selection_extent(self) -> tuple[int, int]:
        """Character offsets of the selection."""
        return self.sp0, self.sp1

    # -- tick ----------------------------------------------------------

    def init_tick(self) -> None:
        """Create the tick image and the image saved from under it."""
        if self.cols[Colour.BACK] is None or self.display is None:
            return
        display = self.display
        self.tickscale = display.scale_size(1)
        if self.tickimage is not None:
            self.tickimage.free()
        height = self.font.height
        scale = self.tickscale

        self.tickimage = display.alloc_image(
            Rectangle.of(0, 0, scale * FRTICKW, height), "transparent", "tick"
        )
        self.tickback = display.alloc_image(self.tickimage.r, "white", "tickback")
        self.tickback.draw(self.tickback.r, self.cols[Colour.BACK], None, Point())

        origin = Point(0, 0)
        self.tickimage.draw(self.tickimage.r, display.transparent, None, origin)
        # vertical line
        self.tickimage.draw(
            Rectangle.of(scale * (FRTICKW // 2), 0, scale * (FRTICKW // 2 + 1), height),
            display.opaque, None, origin,
        )
        # box on each end
        self.tickimage.draw(
            Rectangle.of(0, 0, scale * FRTICKW, scale * FRTICKW), display.opaque, None, origin
        )
        self.tickimage.draw(
            Rectangle.of(0, height - scale * FRTICKW, scale * FRTICKW, height),
            display.opaque, None, origin,
        )

    def _tick(self, pt: Point, ticked: bool) -> None:
        if self.ticked == ticked or self.tickimage is None or not self.rect.contains(pt):
            return
        pt = pt._replace(x=pt.x - self.tickscale)
        r = Rectangle.of(
            pt.x, pt.y, pt.x + FRTICKW * self.tickscale, pt.y + self.defaultfontheight
        )
        if r.max.x > self.rect.max.x:
            r = Rectangle(r.min, r.max._replace(x=self.rect.max.x))
        if ticked:
            self.tickback.draw(self.tickback.r, self.background, None, pt)
            self.background.draw(r, self.display.black, self.tickimage, Point())
        else:
            self.background.draw(r, self.tickback, None, Point())
        self.ticked = ticked

    def tick(self, pt: Point, ticked: bool) -> None:
        """Draw (ticked true) or remove the tick at pt."""
        if self.display is not None and self.tickscale != self.display.scale_size(1):
            if self.ticked:
                self._tick(pt, False)
            self.init_tick()
        self._tick(pt, ticked)

    # -- drawing -------------------------------------------------------

    def drawtext(self, pt: Point, text: Image | None, back: Image | None) -> Point:
        """Draw the text of every box starting at pt; return the point after the last."""
        for b in self.box:
            pt = self.cklinewrap(pt, b)
            if not self.noredraw and b.nrune >= 0:
                self.background.text(pt, text, Point(), self.font, b.ptr)
            pt = pt._replace(x=pt.x + b.wid)
        return pt

    def draw_box(self, r: Rectangle, col: Image | None, back: Image | None, qt: Point) -> None:
        """Fill r with back, outlined in col."""
        self.background.draw(r, col, None, qt)
        self.background.draw(r.inset(1), back, None, qt)

    def draw_sel(self, pt: Point, p0: int, p1: int, highlighted: bool) -> None:
        """Show the selection [p0, p1), highlighted or plain, managing the tick."""
        if p0 > p1:
            raise ValueError("draw_sel: p0 and p1 must be ordered")

        if self.ticked:
            self.tick(self.ptofcharptb(self.sp0, self.rect.min, 0), False)

        if self.sp0 != self.sp1 and self.highlighton:
            self.drawsel0(
                self.ptofcharptb(self.sp0, self.rect.min, 0),
                self.sp0, self.sp1, self.cols[Colour.BACK], self.cols[Colour.TEXT],
            )
            self.highlighton = False

        if not highlighted:
            self.sp0, self.sp1 = p0, p1
            return

        if p0 == p1:
            self.tick(pt, highlighted)
            if self.display is not None:
                self.display.flush()
            self.sp0, self.sp1 = p0, p1
            return

        self.drawsel0(pt, p0, p1, self.cols[Colour.HIGH], self.cols[Colour.HTEXT])
        self.sp0, self.sp1 = p0, p1
        self.highlighton = True

    def drawsel0(
        self, pt: Point, p0: int, p1: int, back: Image | None, text: Image | None
    ) -> Point:
        """Paint characters [p0, p1) with background back and text colour text.

        pt must be the position of p0. Returns the position after p1.
        """
        if p0 > p1:
            raise ValueError("drawsel0: p0 and p1 must be ordered")
        p = 0
        trim = False
        nb = 0
        h = self.defaultfontheight
        maxx = self.rect.max.x
        while nb < len(self.box) and p < p1:
            b = self.box[nb]
            nr = nrune(b)
            if p + nr <= p0:
                p += nr
                nb += 1
                continue
            if p >= p0:
                qt = pt
                pt = self.cklinewrap(pt, b)
                if pt.y > qt.y:
                    qt = qt._replace(x=min(qt.x, maxx))
                    self.background.draw(Rectangle.of(qt.x, qt.y, maxx, pt.y), back, None, qt)
            ptr = b.ptr
            if p < p0:
                ptr = ptr[runeindex(ptr, p0 - p):]
                nr -= p0 - p
                p = p0
            trim = False
            if p + nr > p1:
                nr -= (p + nr) - p1
                trim = True

            if b.nrune < 0 or nr == b.nrune:
                w = b.wid
            else:
                w = self.font.width(ptr[:runeindex(ptr, nr)])
            x = min(pt.x + w, maxx)
            self.background.draw(Rectangle.of(pt.x, pt.y, x, pt.y + h), back, None, pt)
            if b.nrune >= 0:
                self.background.text(pt, text, Point(), self.font, ptr[:runeindex(ptr, nr)])
            pt = pt._replace(x=pt.x + w)
            p += nr
            nb += 1

        if (
            p1 > p0
            and 0 < nb < len(self.box)
            and self.box[nb - 1].nrune > 0
            and not trim
        ):
            qt = pt
            pt = self.cklinewrap(pt, self.box[nb])
            if pt.y > qt.y:
                self.draw_box(
                    Rectangle.of(qt.x, qt.y, maxx, pt.y), self.cols[Colour.HIGH], back, qt
                )
        return pt

    def redraw(self, enclosing: Rectangle) -> None:
        """Paint the background colour over enclosing."""
        self.background.draw(enclosing, self.cols[Colour.BACK], None, Point())

    def layout(self, pt: Point) -> Point:
        """Lay the boxes out from pt, splitting and dropping those that do not fit."""
        nb = 0
        while nb < len(self.box):
            b = self.box[nb]
            if b is None:
                self.log_boxes("-- frame layout has invalid box model --")
                raise RuntimeError("-- frame layout has invalid box model --")
            pt = self.cklinewrap0(pt, b)
            if pt.y == self.rect.max.y:
                self.nchars -= self.strlen(nb)
                self.delbox(nb, len(self.box) - 1)
                break
            if b.nrune > 0:
                n, fits = self.canfit(pt, b)
                if not fits:
                    break
                if n != b.nrune:
                    self.splitbox(nb, n)
                    b = self.box[nb]
                pt = pt._replace(x=pt.x + b.wid)
            elif b.bc == "\n":
                pt = Point(self.rect.min.x, pt.y + self.defaultfontheight)
            else:
                pt = pt._replace(x=pt.x + self.newwid(pt, b))
            nb += 1
        return pt