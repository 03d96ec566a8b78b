# edtext

This package provides building blocks for a text editor. It has no
dependencies outside the standard library and is split into two
sub-packages.

## `edtext.buffer`: text buffers with undo

- `edtext.buffer.runearray.RuneArray` is a mutable sequence of characters.
  It supports `insert`, `delete`, `read`, `read_c`, `view`, `reader` (a
  `BytesIO` of the UTF-8 encoding), `index_rune`, `nbyte` and `reset`.
- `edtext.buffer.utf8bytes.Utf8Bytes` holds UTF-8 bytes and lets you index
  them by character. It offers `at`, `slice`, `rune_count`, `is_ascii`,
  `has_null` and `read`. Stepping one character forwards or backwards costs
  O(1).
- `edtext.buffer.diskdetails` records facts about the file on disk:
  - `DiskDetails` stores the name, the stat info, the SHA-1 hash and a
    directory flag.
  - `calc_hash` and `hash_for` compute SHA-1 digests.
  - `check_hash` checks that a value has the size of a hash.
  - `DiskDetails.update_info` raises `HashError` when the file cannot be
    hashed.
- `edtext.buffer.undofile.File` is an undoable buffer. Undo records are
  grouped by a sequence number that you set with `mark`. The class also has:
  - an insertion cache, used by `insert_at_without_commit` and `commit`;
  - dirty and clean tracking through `dirty`, `clean`, `modded`,
    `treat_as_clean`, `treat_as_dirty` and `saveable_and_dirty`;
  - `load`, which decodes UTF-8 bytes, drops NUL characters and reports
    whether it saw any.

  Observers subclass `BufferObserver`.
- `edtext.buffer.observable.ObservableEditableBuffer` wraps a `File` and adds:
  - a name, disk details and a hash;
  - a list of observers, which are told about every insertion and deletion.

  A name ending in `/guide` or `+Errors` marks the buffer as scratch, so it
  is not counted as saveable. Renames made with `set_name` while undo is
  active can be undone. `make_tag_buffer` creates a nameless buffer.

```python
import io
from edtext.buffer.observable import ObservableEditableBuffer

buf = ObservableEditableBuffer("notes.txt", "")
buf.mark(1)
buf.insert_at(0, "hello")
buf.insert_at(buf.size(), " world")
print(str(buf))        # hello world
buf.undo(True)
print(repr(str(buf)))  # ''
buf.undo(False)
print(str(buf))        # hello world

other = ObservableEditableBuffer("data.txt", "")
n, had_nulls = other.load(0, io.BytesIO(b"bye\n"), sethash=True)
other.clean()
print(n, had_nulls, other.hash.hex())
```

## `edtext.frame`: laying out a frame of text

A frame lays text out in a rectangle as a list of boxes. A box holds a run
of text, a tab or a newline. Long lines are folded, and tabs stretch to
fixed tab stops.

- `edtext.frame.boxes` provides:
  - `Point` and `Rectangle` for geometry;
  - `Font`, a fixed-width font;
  - `Box`;
  - `BoxModel`, which has the box operations (`splitbox`, `mergebox`,
    `findbox`, `clean` and so on), the line-wrap helpers, `ptofchar` and
    `charofpt`.
- `edtext.frame.frame.Frame` draws onto an `Image` from a `Display`.
  - These two classes record drawing operations in `Image.ops` and do not
    render pixels.
  - The frame handles options (`opt_colors`, `opt_background`, `opt_font`,
    `opt_max_tab`), the selection (`draw_sel`, `selection_extent`), the
    typing tick and `fill_status`.
- `edtext.frame.editing.TextFrame` adds `insert`, `delete` and mouse
  selection through `select` and `select_opt`.
  - Both selection methods take an iterable of `Mouse` events and an
    optional `getmorelines(frame, n)` scrolling callback.
  - `new_frame` builds a configured `TextFrame`.

```python
from edtext.frame.boxes import Font, Point, Rectangle
from edtext.frame.editing import new_frame
from edtext.frame.frame import Display

display = Display()
cols = [display.white, display.black, display.black, display.black, display.white]
frame = new_frame(Rectangle.of(0, 0, 200, 130), Font(10, 13), display.screen, cols)

frame.insert("hello\nworld", 0)
print(frame.ptofchar(6))               # Point(x=0, y=13)
print(frame.charofpt(Point(25, 13)))   # 8
print(frame.fill_status().nlines)      # 2
```

## What it does not do

- There is no command-line program, window system or screen. Drawing only
  records operations on `Image` objects.
- Nothing writes a buffer back to disk. The package can load from a stream
  and hash files, but saving is left to the caller.
- Nothing runs external commands.

## Tests

```
pip install -e .[test]
pytest
```