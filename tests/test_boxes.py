import logging

import pytest

from edtext.frame.boxes import (
    Box,
    BoxModel,
    Font,
    Point,
    Rectangle,
    nbyte,
    nrune,
    roundup,
    rpt,
    runeindex,
)

FIXED_WIDTH = 10


def make_box(s):
    if s == "\t":
        return Box(wid=5000, nrune=-1, ptr=b"\t", bc="\t", minwid=10)
    if s == "\n":
        return Box(wid=5000, nrune=-1, ptr=b"\n", bc="\n", minwid=0)
    return Box(wid=FIXED_WIDTH * len(s), nrune=len(s), ptr=s.encode("utf-8"))


def mock_font():
    return Font(FIXED_WIDTH, 13)


RECT = Rectangle.of(10, 15, 10 + 57, 15 + 57)


def model(*texts, **kwargs):
    return BoxModel(font=mock_font(), boxes=[make_box(t) for t in texts], **kwargs)


@pytest.mark.parametrize(
    "s, arg, want",
    [
        ("", 0, 0),
        ("a\x02b", 0, 0),
        ("a\x02b", 1, 1),
        ("a\x02b", 2, 2),
        ("a\x02日本b", 0, 0),
        ("a\x02日本b", 1, 1),
        ("a\x02日本b", 2, 2),
        ("a\x02日本b", 3, 5),
        ("a\x02日本b", 4, 8),
        ("Kröger", 3, 4),
        ("本a", 1, 3),
    ],
)
def test_runeindex(s, arg, want):
    assert runeindex(s.encode("utf-8"), arg) == want


@pytest.mark.parametrize(
    "before, after, at", [("ab", "a", 1), ("abc", "a", 2), ("a\x02日本b", "a", 4)]
)
def test_truncatebox(before, after, at):
    frame = BoxModel(font=mock_font())
    box = make_box(before)
    frame.truncatebox(box, at)
    assert box == make_box(after)


@pytest.mark.parametrize(
    "before, after, at", [("ab", "b", 1), ("abc", "c", 2), ("a\x02日本b", "本b", 3)]
)
def test_chopbox(before, after, at):
    frame = BoxModel(font=mock_font())
    box = make_box(before)
    frame.chopbox(box, at)
    assert box == make_box(after)


def test_truncatebox_too_many():
    frame = BoxModel(font=mock_font())
    with pytest.raises(ValueError):
        frame.truncatebox(make_box("ab"), 3)


def test_addbox_empty_frame():
    f = BoxModel()
    f.addbox(0, 1)
    assert f.box == [None]


@pytest.mark.parametrize(
    "start, bn, n, want",
    [
        (["hi"], 0, 1, ["hi", "hi"]),
        (["hi", "world"], 0, 1, ["hi", "hi", "world"]),
        (["hi", "world"], 1, 1, ["hi", "world", "world"]),
        (["hi", "world"], 2, 2, ["hi", "world", None, None]),
    ],
)
def test_addbox(start, bn, n, want):
    f = model(*start)
    f.addbox(bn, n)
    assert f.box == [None if w is None else make_box(w) for w in want]


def test_addbox_out_of_range():
    f = model("hi")
    with pytest.raises(IndexError):
        f.addbox(2, 1)


@pytest.mark.parametrize(
    "start, n, want",
    [
        (["hi"], 0, []),
        (["hi", "world"], 0, ["world"]),
        (["hi", "world"], 1, ["hi"]),
        (["hi", "world", "hi"], 1, ["hi", "hi"]),
    ],
)
def test_closebox(start, n, want):
    f = model(*start)
    f.closebox(n, n)
    assert f.box == [make_box(w) for w in want]


def test_closebox_bad_bounds():
    f = model("hi", "world")
    with pytest.raises(IndexError):
        f.closebox(1, 0)


def test_dupbox_makes_copy():
    f = model("hi")
    f.dupbox(0)
    assert f.box == [make_box("hi"), make_box("hi")]
    assert f.box[0] is not f.box[1]


def test_dupbox_out_of_range():
    f = model("hi")
    with pytest.raises(IndexError):
        f.dupbox(1)


@pytest.mark.parametrize(
    "start, bn, n, want",
    [
        (["hiworld"], 0, 2, ["hi", "world"]),
        (["world", "hiworld"], 1, 2, ["world", "hi", "world"]),
        (["hi"], 0, 0, ["", "hi"]),
        (["hi"], 0, 2, ["hi", ""]),
    ],
)
def test_splitbox(start, bn, n, want):
    f = model(*start)
    f.splitbox(bn, n)
    assert f.box == [make_box(w) for w in want]


@pytest.mark.parametrize(
    "start, ops, want",
    [
        (["hi", "world"], [0], ["hiworld"]),
        (["hi", ""], [0], ["hi"]),
        (["hi", "world", "hi"], [0], ["hiworld", "hi"]),
        (["hi", "world", "hi"], [1, 0], ["hiworldhi"]),
    ],
)
def test_mergebox(start, ops, want):
    f = model(*start)
    for bn in ops:
        f.mergebox(bn)
    assert f.box == [make_box(w) for w in want]


@pytest.mark.parametrize(
    "start, args, want, found",
    [
        (["hiworld"], (0, 0, 2), ["hi", "world"], 1),
        (["hiworld"], (0, 0, 0), ["hiworld"], 0),
        (["hi", "world"], (0, 0, 2), ["hi", "world"], 1),
        (["hi", "world"], (1, 0, 2), ["hi", "wo", "rld"], 2),
        ([], (0, 0, 0), [], 0),
        (["hi", "world"], (0, 0, 7), ["hi", "world"], 2),
        (["hi", "world"], (1, 2, 6), ["hi", "worl", "d"], 2),
    ],
)
def test_findbox(start, args, want, found):
    f = model(*start)
    assert f.findbox(*args) == found
    assert f.box == [make_box(w) for w in want]


@pytest.mark.parametrize(
    "text, pt, want",
    [
        ("0123456789", Point(10 + 14, 15), (4, True)),
        ("0123", Point(10 + 14, 15), (4, True)),
        ("\n", Point(10 + 57, 15), (1, True)),
        ("\t", Point(10 + 48, 15), (0, False)),
        ("本a", Point(10 + 57 - 11, 15), (1, True)),
    ],
)
def test_canfit(text, pt, want):
    f = model(text, rect=RECT)
    before = make_box(text)
    assert f.canfit(pt, f.box[0]) == want
    assert f.box == [before]


@pytest.mark.parametrize(
    "start, n0, n1, want",
    [
        ([], 0, 1, []),
        (["wo"], 0, 1, ["wo"]),
        (["wo"], 1, 1, ["wo"]),
        (["hi", "wo"], 0, 2, ["hiwo"]),
    ],
)
def test_clean(start, n0, n1, want):
    f = model(*start, rect=RECT)
    f.clean(Point(10, 15), n0, n1)
    assert f.box == [make_box(w) for w in want]
    assert f.lastlinefull is False


@pytest.mark.parametrize(
    "texts, pt, want",
    [
        ([], Point(10 + 56, 15 + 56), 0),
        (["本"], Point(10 + 56, 15 + 56), 1),
        (["\ufffd"], Point(10, 15), 0),
        (["12345", "本b"], Point(10, 15), 0),
        (["12345", "本b"], Point(19, 27), 0),
        (["12345", "本b"], Point(20, 27), 1),
        (["12345", "本bcd"], Point(19, 28), 5),
        (["12345", "本bcd"], Point(20, 28), 6),
        (["12345", "本bcd", "Göph"], Point(20, 28), 6),
        (["12345", "本bcd", "Göph"], Point(30, 1 + 15 + 2 * 13), 11),
    ],
)
def test_charofpt(texts, pt, want):
    f = model(*texts, rect=RECT, defaultfontheight=13)
    assert f.charofpt(pt) == want


@pytest.mark.parametrize(
    "p, want",
    [(0, Point(10, 15)), (2, Point(30, 15)), (5, Point(10, 28)), (7, Point(30, 28))],
)
def test_ptofchar(p, want):
    f = model("12345", "本bcd", rect=RECT, defaultfontheight=13)
    assert f.ptofchar(p) == want


def test_grid_snaps_and_clamps():
    f = model(rect=RECT, defaultfontheight=13)
    assert f.grid(Point(100, 42)) == Point(67, 41)
    assert f.grid(Point(20, 15)) == Point(20, 15)


def test_cklinewrap_and_advance():
    f = model("0123456789", rect=RECT, defaultfontheight=13)
    assert f.cklinewrap(Point(10, 15), f.box[0]) == Point(10, 28)
    assert f.cklinewrap(Point(10, 67), f.box[0]) == Point(10, 72)
    assert f.advance(Point(30, 15), make_box("\n")) == Point(10, 28)
    assert f.advance(Point(30, 15), make_box("ab")) == Point(50, 15)
    assert f.cklinewrap0(Point(60, 15), make_box("abc")) == Point(10, 28)


def test_newwid_tab_stops():
    f = model("\t", rect=RECT, maxtab=20)
    assert f.newwid0(Point(10, 15), f.box[0]) == 20
    assert f.newwid0(Point(15, 15), f.box[0]) == 15
    assert f.newwid(Point(15, 15), f.box[0]) == 15
    assert f.box[0].wid == 15
    assert f.newwid0(Point(10, 15), make_box("ab")) == 20


def test_strlen_counts_special_boxes_as_one():
    f = model("ab", "\n", "cde", "\t")
    assert f.strlen(0) == 7
    assert f.strlen(2) == 4
    assert nrune(f.box[1]) == 1
    assert nbyte(make_box("本")) == 3


def test_validate_box_model_detects_bad_count():
    f = model("ab", "cd")
    f.validate = True
    f.nchars = 3
    with pytest.raises(RuntimeError, match="nchars"):
        f.validate_box_model("check")


def test_validate_box_model_detects_bad_width():
    f = model("ab")
    f.validate = True
    f.nchars = 2
    f.box[0].wid = 7
    with pytest.raises(RuntimeError, match="width"):
        f.validate_box_model("check")


def test_roundup_and_insure():
    assert roundup(0) == 16
    assert roundup(15) == 16
    assert roundup(16) == 32
    f = model("ab")
    f.insure(0, 40)
    assert f.box[0].ptr == b"ab" + bytes(38)
    g = model("ab")
    g.insure(0, 4)
    assert g.box[0].ptr == b"ab"


def test_box_str():
    assert str(make_box("\n")) == "newline"
    assert str(make_box("\t")) == "tab width=5000,10"
    assert str(make_box("hi")) == "'hi' width=20 nrune=2"


def test_rectangle_helpers():
    r = Rectangle.of(67, 72, 10, 15)
    assert r == RECT
    assert r.dx() == 57 and r.dy() == 57
    assert r.contains(Point(10, 15))
    assert not r.contains(Point(67, 15))
    assert r.inset(1) == Rectangle.of(11, 16, 66, 71)
    assert rpt(Point(1, 2), Point(3, 4)) == Rectangle(Point(1, 2), Point(3, 4))


def test_font_width_bytes_and_text():
    font = mock_font()
    assert font.width("本a") == 20
    assert font.width("本a".encode("utf-8")) == 20


def test_log_boxes(caplog):
    f = model("hi", "\n")
    with caplog.at_level(logging.INFO, logger="edtext.frame.boxes"):
        f.log_boxes("dump")
    assert "newline" in caplog.text
    assert "end: dump" in caplog.text