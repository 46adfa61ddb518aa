from .reader import RecordReader, open_records
from .cortdeco import MAX_CHAIN_LENGTH, CutStore, coefficient_count, read_cuts
from .mapcut import MapcutReader, RegisterKind, read_mapcut

__all__ = [
    "RecordReader",
    "open_records",
    "MAX_CHAIN_LENGTH",
    "CutStore",
    "coefficient_count",
    "read_cuts",
    "MapcutReader",
    "RegisterKind",
    "read_mapcut",
]
