from __future__ import annotations

from pathlib import Path


class FCFFormatError(ValueError):
    """Structural problem found while decoding a cut or mapping file.

    Carries the file identity and byte offset so the caller can locate the
    offending record.
    """

    def __init__(self, message: str, path: str | Path | None = None, offset: int | None = None):
        self.path = str(path) if path is not None else None
        self.offset = offset
        self.reason = message
        where = []
        if self.path is not None:
            where.append(f"file={self.path}")
        if offset is not None:
            where.append(f"offset={offset}")
        super().__init__(f"{message} ({', '.join(where)})" if where else message)


class TruncatedRecord(FCFFormatError):
    """Fewer bytes were available than the declared fixed record length."""


class InconsistentLayout(FCFFormatError):
    """Record length, coefficient count or register size disagree."""


class CyclicOrUnboundedChain(FCFFormatError):
    """Cut pointer chain revisits a record or exceeds the traversal bound."""


__all__ = [
    "FCFFormatError",
    "TruncatedRecord",
    "InconsistentLayout",
    "CyclicOrUnboundedChain",
]
