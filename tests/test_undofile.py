import pytest

from edtext.buffer.runearray import RuneArray
from edtext.buffer.undofile import (
    BufferObserver,
    File,
    UndoKind,
    UndoRecord,
    decode_runes,
)

S1 = "hi 海老麺"
S2 = "bye"


class FakeOwner:
    def __init__(self, name="edwood"):
        self.events = []
        self.name = ""
        self.scratch = False
        self.set_name_and_scratch(name)

    def notify_inserted(self, q0, text):
        self.events.append(("ins", q0, text))

    def notify_deleted(self, q0, q1):
        self.events.append(("del", q0, q1))

    def is_dir_or_scratch(self):
        return self.scratch

    def set_name_and_scratch(self, name):
        self.name = name
        self.scratch = name.endswith("/guide") or name.endswith("+Errors")


def make_file():
    owner = FakeOwner()
    return File(owner, RuneArray()), owner


def contents(f):
    if f.has_uncommitted_changes():
        return "".join(f.read_c(i) for i in range(f.size()))
    return f.read_at(0, f.size())


def state(f):
    return (
        f.has_uncommitted_changes(),
        f.has_undoable_changes(),
        f.has_redoable_changes(),
        f.saveable_and_dirty(),
        contents(f),
    )


def test_decode_runes_plain():
    assert decode_runes(S1.encode("utf-8")) == (S1, False)


def test_decode_runes_drops_nulls():
    assert decode_runes(b"a\x00b") == ("ab", True)


def test_decode_runes_invalid_bytes():
    assert decode_runes(b"\x80\x80") == ("\ufffd\ufffd", False)


def test_buffer_observer_is_abstract():
    with pytest.raises(TypeError):
        BufferObserver()


def test_insert_without_commit():
    f, owner = make_file()
    f.insert_at_without_commit(0, S1)
    assert [f.read_c(i) for i in range(len(S1))] == list(S1)
    assert f.size() == 6
    assert state(f) == (True, True, False, True, S1)
    assert owner.events == [("ins", 0, S1)]


def test_insert_commit_then_insert():
    f, _ = make_file()
    f.seq = 1
    f.insert_at_without_commit(0, S1)
    assert state(f) == (True, True, False, True, S1)
    f.commit()
    assert state(f) == (False, True, False, True, S1)
    f.insert_at(f.size(), S2)
    f.commit()
    assert state(f) == (False, True, False, True, S1 + S2)


def test_commit_records_undo_entry():
    f, _ = make_file()
    f.seq = 1
    f.insert_at_without_commit(0, S2)
    f.commit()
    assert f.delta == [UndoRecord(UndoKind.DELETE, False, 1, 0, len(S2))]


def test_undo_redo_all():
    f, owner = make_file()
    assert state(f) == (False, False, False, False, "")
    f.mark(1)
    f.insert_at(0, S1)
    f.insert_at(f.size(), S2)
    assert state(f) == (False, True, False, True, S1 + S2)
    f.undo(True)
    assert state(f) == (False, False, True, False, "")
    f.undo(False)
    assert state(f) == (False, True, False, True, S1 + S2)
    assert owner.events[-1] == ("ins", len(S1), S2)


def test_undo_redo_with_mark():
    f, _ = make_file()
    f.mark(1)
    f.insert_at(0, S1)
    f.mark(2)
    f.insert_at(f.size(), S2)
    assert state(f) == (False, True, False, True, S1 + S2)
    q0, q1, ok = f.undo(True)
    assert (q0, q1, ok) == (len(S1), len(S1), True)
    assert state(f) == (False, True, True, True, S1)
    q0, q1, ok = f.undo(False)
    assert (q0, q1, ok) == (len(S1), len(S1) + len(S2), True)
    assert state(f) == (False, True, False, True, S1 + S2)


def test_load_no_undo():
    f, _ = make_file()
    f.insert_at(0, S1)
    n, has_nulls = f.load(2, (S2 + S2).encode("utf-8"))
    assert n == len(S2) + len(S2)
    assert has_nulls is False
    assert state(f) == (False, False, False, True, S1[0:2] + S2 + S2 + S1[2:])


def test_insert_delete_undo():
    f, _ = make_file()
    f.mark(1)
    f.clean()
    f.insert_at(0, S1)
    f.insert_at(0, S2)
    f.mark(2)
    f.delete_at(0, 1)
    f.delete_at(1, 3)
    f.mark(3)
    f.insert_at(f.size() - 1, S1)
    assert state(f) == (False, True, False, True, "yi 海老hi 海老麺麺")
    f.undo(True)
    assert state(f) == (False, True, True, True, "yi 海老麺")
    f.undo(True)
    assert state(f) == (False, True, True, True, "byehi 海老麺")
    f.undo(False)
    assert state(f) == (False, True, True, True, "yi 海老麺")


def test_redo_seq():
    f, _ = make_file()
    f.mark(1)
    f.insert_at(0, S1)
    assert state(f) == (False, True, False, True, S1)
    assert f.redo_seq() == 0
    f.undo(True)
    assert state(f) == (False, False, True, False, "")
    assert f.redo_seq() == 1


def test_filename_undo_restores_name_and_scratch():
    f, owner = make_file()
    f.mark(1)
    f.unset_name(f.delta)
    owner.set_name_and_scratch("/guide")
    f.mark(2)
    f.unset_name(f.delta)
    owner.set_name_and_scratch("/hello/+Errors")
    assert owner.name == "/hello/+Errors"
    assert owner.scratch is True
    f.undo(True)
    assert owner.name == "/guide"
    assert owner.scratch is True
    f.undo(True)
    assert owner.name == "edwood"
    assert owner.scratch is False


def test_scratch_owner_is_not_saveable():
    f, owner = make_file()
    owner.set_name_and_scratch("/x/+Errors")
    f.insert_at(0, S1)
    assert f.mod is True
    assert f.saveable_and_dirty() is False


def test_delete_notifies_and_records():
    f, owner = make_file()
    f.insert_at(0, S1)
    f.mark(1)
    f.delete_at(0, 2)
    assert owner.events[-1] == ("del", 0, 2)
    assert f.delta[-1].kind is UndoKind.INSERT
    assert f.delta[-1].buf == S1[0:2]
    assert contents(f) == S1[2:]


def test_clean_and_treat_as_clean():
    f, _ = make_file()
    f.mark(1)
    f.insert_at(0, S2)
    assert f.treat_as_dirty() is True
    f.treat_as_clean()
    assert f.treat_as_dirty() is False
    f.insert_at(0, S2)
    assert f.treat_as_dirty() is True
    f.clean()
    assert f.dirty() is False
    assert f.mod is False


def test_reset_drops_logs():
    f, _ = make_file()
    f.mark(1)
    f.insert_at(0, S1)
    f.undo(True)
    f.reset()
    assert (f.has_undoable_changes(), f.has_redoable_changes(), f.seq) == (False, False, 0)


def test_insert_at_out_of_range():
    f, _ = make_file()
    with pytest.raises(IndexError):
        f.insert_at(1, S2)


def test_delete_at_out_of_range():
    f, _ = make_file()
    f.insert_at(0, S2)
    with pytest.raises(IndexError):
        f.delete_at(0, len(S2) + 1)


def test_noncontiguous_cache_insert_raises():
    f, _ = make_file()
    f.insert_at(0, S1)
    f.insert_at_without_commit(0, S2)
    with pytest.raises(RuntimeError):
        f.insert_at_without_commit(1, S2)


def test_file_without_owner():
    f = File()
    f.insert_at(0, S1)
    f.mark(1)
    f.delete_at(0, len(S1))
    assert f.size() == 0
    f.undo(True)
    assert f.read_at(0, f.size()) == S1