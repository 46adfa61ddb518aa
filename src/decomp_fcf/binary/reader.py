"""Fixed-length record access over a binary stream.

Every file handled by this package is little-endian regardless of the host,
so layouts are expressed as ``struct.Struct("<...")`` objects.
"""

from __future__ import annotations

import io
import os
import struct
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator

from ..errors import TruncatedRecord

INT32 = struct.Struct("<i")


class RecordReader:
    """Random and sequential access to records of ``record_length`` bytes.

    Record indices are 1-based: record ``k`` starts at ``(k - 1) * record_length``.
    """

    def __init__(self, stream: BinaryIO, record_length: int, name: str | Path | None = None):
        if record_length <= 0:
            raise ValueError(f"record_length must be positive, got {record_length}")
        self._stream = stream
        self.record_length = int(record_length)
        self.name = str(name) if name is not None else getattr(stream, "name", None)
        self.size = self._stream.seek(0, io.SEEK_END)

    @property
    def record_count(self) -> int:
        """Number of complete records in the stream."""
        return self.size // self.record_length

    def offset_of(self, index: int) -> int:
        return (index - 1) * self.record_length

    def read(self, index: int) -> bytes:
        if index < 1:
            raise ValueError(f"record index is 1-based, got {index}")
        offset = self.offset_of(index)
        self._stream.seek(offset)
        buf = self._stream.read(self.record_length)
        if len(buf) != self.record_length:
            raise TruncatedRecord(
                f"record {index} needs {self.record_length} bytes, got {len(buf)}",
                self.name,
                offset,
            )
        return buf

    def __iter__(self) -> Iterator[bytes]:
        # Each record is read at its own offset, so random access in between is safe
        count = self.record_count
        for index in range(1, count + 1):
            yield self.read(index)
        tail = self.size - count * self.record_length
        if tail:
            raise TruncatedRecord(
                f"trailing record needs {self.record_length} bytes, got {tail}",
                self.name,
                count * self.record_length,
            )


@contextmanager
def open_records(path: str | Path, record_length: int) -> Iterator[RecordReader]:
    """Open ``path`` read-only and yield a :class:`RecordReader` over it."""
    p = Path(path)
    with p.open("rb") as fh:
        yield RecordReader(fh, record_length, name=os.fspath(p))


__all__ = ["INT32", "RecordReader", "open_records"]
