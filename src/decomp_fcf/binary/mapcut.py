"""Decoder for mapcut header files.

The file is a sequence of fixed-size registers. Each logical record uses a
prefix of one register; the rest is padding and is never inspected. Files
shorter than a register (template cases) decode with zero/absent fields.
"""

from __future__ import annotations

import io
import logging
import struct
from enum import IntEnum
from pathlib import Path
from typing import BinaryIO, Callable, Dict, Tuple

from ..config import MAPCUT_REGISTER_SIZE, STAGE_REGISTER_INDEX
from ..errors import InconsistentLayout, TruncatedRecord
from ..fcf.types import (
    Mapcut,
    MapcutCaseData,
    MapcutGeneralData,
    MapcutStageData,
)
from .reader import INT32

log = logging.getLogger(__name__)


class RegisterKind(IntEnum):
    GENERAL = 0
    CASE = 1
    RESERVOIRS = 2
    STAGES = STAGE_REGISTER_INDEX


class MapcutReader:
    """Register-addressed view over an open mapcut stream."""

    def __init__(
        self,
        stream: BinaryIO,
        register_size: int = MAPCUT_REGISTER_SIZE,
        name: str | Path | None = None,
        stage_register_index: int = STAGE_REGISTER_INDEX,
    ):
        if register_size <= 0 or register_size % INT32.size != 0:
            raise InconsistentLayout(f"invalid register size {register_size}", name)
        self._stream = stream
        self.register_size = int(register_size)
        self.name = str(name) if name is not None else getattr(stream, "name", None)
        self.size = self._stream.seek(0, io.SEEK_END)
        self._register_index: Dict[RegisterKind, int] = {kind: int(kind) for kind in RegisterKind}
        self._register_index[RegisterKind.STAGES] = int(stage_register_index)
        self._decoders: Dict[RegisterKind, Callable[..., object]] = {
            RegisterKind.GENERAL: self._decode_general,
            RegisterKind.CASE: self._decode_case,
            RegisterKind.RESERVOIRS: self._decode_reservoirs,
            RegisterKind.STAGES: self._decode_stages,
        }

    def register_offset(self, kind: RegisterKind) -> int:
        return self._register_index[kind] * self.register_size

    def has_register(self, kind: RegisterKind) -> bool:
        return self.size > self.register_offset(kind)

    def _words(self, kind: RegisterKind, start: int, count: int) -> Tuple[int, ...]:
        """Read ``count`` i32 words at word ``start`` of a register.

        Words past end-of-file are absent (the tuple is shorter); a partially
        present word is a truncation error.
        """
        if count <= 0:
            return ()
        if (start + count) * INT32.size > self.register_size:
            raise InconsistentLayout(
                f"{kind.name.lower()} register needs {(start + count) * INT32.size} bytes, "
                f"register size is {self.register_size}",
                self.name,
                self.register_offset(kind),
            )
        offset = self.register_offset(kind) + start * INT32.size
        self._stream.seek(offset)
        buf = self._stream.read(count * INT32.size)
        if len(buf) % INT32.size:
            raise TruncatedRecord(
                f"partial 32-bit word in {kind.name.lower()} register",
                self.name,
                offset + len(buf) - len(buf) % INT32.size,
            )
        n = len(buf) // INT32.size
        return struct.unpack_from(f"<{n}i", buf, 0) if n else ()

    @staticmethod
    def _padded(values: Tuple[int, ...], count: int) -> Tuple[int, ...]:
        return values + (0,) * (count - len(values))

    def read_register(self, kind: RegisterKind, **context: int) -> object:
        return self._decoders[kind](**context)

    def _decode_general(self) -> MapcutGeneralData:
        iterations, total_cuts, submarkets, reservoirs, scenarios = self._padded(
            self._words(RegisterKind.GENERAL, 0, 5), 5
        )
        pointers = self._words(RegisterKind.GENERAL, 5, scenarios)
        return MapcutGeneralData(
            iterations=iterations,
            total_cuts=total_cuts,
            submarkets=submarkets,
            reservoir_count=reservoirs,
            scenario_count=scenarios,
            last_cut_pointers=pointers,
        )

    def _decode_case(self) -> MapcutCaseData:
        record_length, day, month, year = self._padded(self._words(RegisterKind.CASE, 0, 4), 4)
        return MapcutCaseData(
            record_length=record_length,
            start_day=day,
            start_month=month,
            start_year=year,
        )

    def _decode_reservoirs(self, reservoir_count: int = 0) -> Tuple[int, ...]:
        return self._words(RegisterKind.RESERVOIRS, 0, reservoir_count)

    def _decode_stages(self) -> MapcutStageData:
        if not self.has_register(RegisterKind.STAGES):
            return MapcutStageData()
        # First header word is reserved
        _, stages, weeks, tv_reservoirs, tv_lag = self._padded(self._words(RegisterKind.STAGES, 0, 5), 5)
        first_nodes = self._words(RegisterKind.STAGES, 5, stages)
        load_levels = self._words(RegisterKind.STAGES, 5 + max(stages, 0), stages)
        return MapcutStageData(
            stage_count=stages,
            week_count=weeks,
            travel_time_reservoir_count=tv_reservoirs,
            max_travel_time_lag=tv_lag,
            first_node_per_stage=first_nodes,
            load_levels_per_stage=load_levels,
        )

    def read(self) -> Mapcut:
        if self.size < self.register_size:
            log.warning(
                "[MAPCUT] %s is shorter than one register (%d < %d bytes); missing fields read as zero",
                self.name, self.size, self.register_size,
            )
        general = self.read_register(RegisterKind.GENERAL)
        if general.scenario_count < 0 or general.reservoir_count < 0:
            raise InconsistentLayout(
                f"negative counts in general register (scenarios={general.scenario_count}, "
                f"reservoirs={general.reservoir_count})",
                self.name,
                0,
            )
        case = self.read_register(RegisterKind.CASE)
        reservoir_ids = self.read_register(RegisterKind.RESERVOIRS, reservoir_count=general.reservoir_count)
        stages = self.read_register(RegisterKind.STAGES)
        log.debug(
            "[MAPCUT] %s: %d cut(s), %d reservoir(s), %d scenario(s), %d stage(s), record length %d",
            self.name, general.total_cuts, len(reservoir_ids), general.scenario_count,
            stages.stage_count, case.record_length,
        )
        return Mapcut(
            general=general,
            case=case,
            reservoir_ids=reservoir_ids,
            stages=stages,
            register_size=self.register_size,
        )


def read_mapcut(
    path: str | Path,
    register_size: int = MAPCUT_REGISTER_SIZE,
    stage_register_index: int = STAGE_REGISTER_INDEX,
) -> Mapcut:
    """Open a mapcut file and decode all of its registers."""
    p = Path(path)
    with p.open("rb") as fh:
        return MapcutReader(fh, register_size, name=p, stage_register_index=stage_register_index).read()


__all__ = ["RegisterKind", "MapcutReader", "read_mapcut"]
