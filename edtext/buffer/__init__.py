"""Text buffers: rune arrays, UTF-8 indexing, disk hashing, undoable files and observable buffers."""