import pytest

from edtext.buffer.runearray import RuneArray


@pytest.mark.parametrize(
    "q0,q1,text,expected",
    [
        (0, 5, "0123456789", "56789"),
        (0, 0, "0123456789", "0123456789"),
        (0, 10, "0123456789", ""),
        (1, 5, "0123456789", "056789"),
        (8, 10, "0123456789", "01234567"),
    ],
)
def test_delete(q0, q1, text, expected):
    tb = RuneArray(text)
    tb.delete(q0, q1)
    assert str(tb) == expected


@pytest.mark.parametrize(
    "q0,text,insert,expected",
    [
        (5, "01234", "56789", "0123456789"),
        (0, "56789", "01234", "0123456789"),
        (1, "06789", "12345", "0123456789"),
        (5, "01234", "56789", "0123456789"),
    ],
)
def test_insert(q0, text, insert, expected):
    tb = RuneArray(text)
    tb.insert(q0, insert)
    assert str(tb) == expected


@pytest.mark.parametrize(
    "text,r,n",
    [
        (None, "0", -1),
        ("01234", "0", 0),
        ("01234", "3", 3),
        ("αβγ", "α", 0),
        ("αβγ", "γ", 2),
    ],
)
def test_index_rune(text, r, n):
    assert RuneArray(text).index_rune(r) == n


@pytest.mark.parametrize(
    "a,b,ok",
    [
        (None, None, True),
        (None, "", True),
        ("", None, True),
        ("01234", "01234", True),
        ("01234", "01x34", False),
        ("αβγ", "αβγ", True),
        ("αβγ", "αλγ", False),
    ],
)
def test_equal(a, b, ok):
    assert (RuneArray(a) == RuneArray(b)) is ok


def test_insert_out_of_range():
    with pytest.raises(IndexError):
        RuneArray("abc").insert(4, "x")


def test_delete_out_of_range():
    with pytest.raises(IndexError):
        RuneArray("abc").delete(1, 5)


def test_view_clamps_end():
    b = RuneArray("0123456789")
    assert b.view(7, 100) == "789"
    assert b.view(2, 4) == "23"


def test_read_and_read_c():
    b = RuneArray("αβγδ")
    assert b.read(1, 2) == "βγ"
    assert b.read(2, 10) == "γδ"
    assert b.read(4, 3) == ""
    assert b.read_c(3) == "δ"


def test_reader_yields_utf8():
    text = "Hello, 世界\n"
    b = RuneArray(text)
    assert b.reader(0, len(b)).read() == text.encode("utf-8")
    assert b.reader(7, 9).read() == "世界".encode("utf-8")


def test_nbyte_matches_encoding():
    text = "hi 海老麺"
    assert RuneArray(text).nbyte() == len(text.encode("utf-8"))


def test_reset_and_len():
    b = RuneArray("abc")
    assert len(b) == 3
    b.reset()
    assert len(b) == 0
    assert str(b) == ""