"""Details of the disk file that backs a buffer, and content hashing."""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass

HASH_SIZE = hashlib.sha1().digest_size
EMPTY_HASH = bytes(HASH_SIZE)

_CHUNK = 64 * 1024


class HashError(Exception):
    """Raised when the hash of a disk file cannot be computed."""


def calc_hash(data: bytes) -> bytes:
    """SHA-1 digest of data."""
    return hashlib.sha1(data).digest()


def hash_for(filename: str | os.PathLike) -> bytes:
    """SHA-1 digest of a file's contents; raises OSError if it cannot be read."""
    digest = hashlib.sha1()
    with open(filename, "rb") as fd:
        for chunk in iter(lambda: fd.read(_CHUNK), b""):
            digest.update(chunk)
    return digest.digest()


def check_hash(value: bytes) -> bytes:
    """Return value as bytes if it has the size of a hash; raise ValueError otherwise."""
    value = bytes(value)
    if len(value) != HASH_SIZE:
        raise ValueError("wrong hash size")
    return value


@dataclass
class DiskDetails:
    """Name, stat information and content hash of a backing file."""

    name: str = ""
    info: os.stat_result | None = None
    hash: bytes = EMPTY_HASH
    is_dir: bool = False

    def update_info(self, filename: str, info: os.stat_result | None) -> None:
        """Record info if the file's current hash matches the stored one."""
        try:
            current = hash_for(filename)
        except OSError as err:
            raise HashError(f"failed to compute hash for {filename}: {err}") from err
        if current == self.hash:
            self.info = info