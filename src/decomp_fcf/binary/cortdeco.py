"""Decoder for cortdeco cut files.

Each record is::

    [i32 previous][i32 construction_it][i32 forward_idx][i32 deactivation_it]
    [f64 rhs][f64 coefficient] * C

so ``record_length = 16 + 8 * (1 + C)``. Cuts form a backward linked list:
reading starts at the "last cut" pointer of a scenario and follows
``previous`` until it reaches 0.
"""

from __future__ import annotations

import logging
import struct
from pathlib import Path
from typing import Iterator, List

from ..errors import CyclicOrUnboundedChain, InconsistentLayout
from ..fcf.types import RawCut
from .reader import RecordReader, open_records

log = logging.getLogger(__name__)

HEADER = struct.Struct("<4i")
# Hard bound on linked-list traversal; protects against corrupt pointer chains
MAX_CHAIN_LENGTH: int = 10000


def coefficient_count(
    record_length: int, path: str | Path | None = None, offset: int | None = None
) -> int:
    """Number of coefficients (excluding rhs) stored in a record.

    ``path`` and ``offset`` name the file that supplied ``record_length``.
    """
    payload = record_length - HEADER.size
    if record_length < HEADER.size + 8 or payload % 8 != 0:
        raise InconsistentLayout(
            f"invalid cut record length {record_length}: expected 16 + 8 * (1 + C) bytes",
            path,
            offset,
        )
    return payload // 8 - 1


class CutStore:
    """Linked-list view over an open cortdeco stream."""

    def __init__(self, records: RecordReader):
        self.coefficient_count = coefficient_count(records.record_length, records.name)
        self.records = records
        self._payload = struct.Struct(f"<{1 + self.coefficient_count}d")

    @property
    def record_length(self) -> int:
        return self.records.record_length

    def decode_record(self, buf: bytes, index: int) -> RawCut:
        previous, construction, forward, deactivation = HEADER.unpack_from(buf, 0)
        values = self._payload.unpack_from(buf, HEADER.size)
        return RawCut(
            index=index,
            previous_pointer=previous,
            construction_iteration=construction,
            forward_pass_index=forward,
            deactivation_iteration=deactivation,
            rhs=values[0],
            coefficients=tuple(values[1:]),
        )

    def iter_records(self) -> Iterator[RawCut]:
        """Every physical record in file order, ignoring the pointer chain."""
        for i, buf in enumerate(self.records, start=1):
            yield self.decode_record(buf, i)

    def read_chain(self, start_index: int, max_cuts: int = MAX_CHAIN_LENGTH) -> List[RawCut]:
        """Follow the chain from ``start_index`` and return cuts oldest first."""
        if max_cuts <= 0:
            raise ValueError(f"max_cuts must be positive, got {max_cuts}")
        n_records = self.records.record_count
        if n_records == 0:
            log.warning("[CORTDECO] empty cut file %s (%d bytes)", self.records.name, self.records.size)
            return []
        if start_index <= 0 or start_index > n_records:
            log.warning(
                "[CORTDECO] start index %d outside %d record(s) of %s; no cuts read",
                start_index, n_records, self.records.name,
            )
            return []

        cuts: List[RawCut] = []
        seen: set[int] = set()
        nxt = start_index
        while nxt != 0:
            offset = self.records.offset_of(nxt)
            if nxt < 0:
                raise InconsistentLayout(f"negative cut pointer {nxt}", self.records.name, offset)
            if nxt in seen:
                raise CyclicOrUnboundedChain(
                    f"cut chain revisits record {nxt} after {len(cuts)} cut(s)",
                    self.records.name,
                    offset,
                )
            if len(cuts) >= max_cuts:
                raise CyclicOrUnboundedChain(
                    f"cut chain longer than {max_cuts} record(s) without reaching pointer 0",
                    self.records.name,
                    offset,
                )
            seen.add(nxt)
            cut = self.decode_record(self.records.read(nxt), nxt)
            cuts.append(cut)
            nxt = cut.previous_pointer

        cuts.reverse()
        log.debug(
            "[CORTDECO] read %d cut(s) from %s starting at record %d (C=%d)",
            len(cuts), self.records.name, start_index, self.coefficient_count,
        )
        return cuts


def read_cuts(
    path: str | Path,
    record_length: int,
    start_index: int,
    max_cuts: int = MAX_CHAIN_LENGTH,
) -> List[RawCut]:
    """Open a cortdeco file and decode the chain ending at ``start_index``."""
    coefficient_count(record_length, path)
    with open_records(path, record_length) as reader:
        return CutStore(reader).read_chain(start_index, max_cuts)


__all__ = [
    "HEADER",
    "MAX_CHAIN_LENGTH",
    "coefficient_count",
    "CutStore",
    "read_cuts",
]
