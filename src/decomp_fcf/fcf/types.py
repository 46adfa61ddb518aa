from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple


class SourceModel(str, Enum):
    DECOMP = "decomp"
    NEWAVE = "newave"


State = Mapping[int, float]


@dataclass(frozen=True, slots=True)
class RawCut:
    """One decoded cortdeco record, before coefficients are tied to reservoirs.

    ``index`` is the 1-based record position in the file.
    """

    index: int
    previous_pointer: int
    construction_iteration: int
    forward_pass_index: int
    deactivation_iteration: int
    rhs: float
    coefficients: Tuple[float, ...] = ()


@dataclass(frozen=True, slots=True)
class BendersCut:
    """Affine piece of the future-cost function.

    Represents: alpha >= rhs + sum(coefficients[r] * v_r)

    ``coefficients`` is sparse: reservoirs whose coefficient is exactly zero
    are omitted, so ``references`` reports only non-zero terms.
    """

    id: int
    rhs: float
    coefficients: Mapping[int, float] = field(default_factory=lambda: MappingProxyType({}))
    stage: int = 0
    construction_iteration: int = 0
    forward_pass_index: int = 0
    deactivation_iteration: int = 0
    extra_coefficients: Tuple[float, ...] = ()

    @property
    def is_active(self) -> bool:
        return self.deactivation_iteration == 0

    def coefficient(self, reservoir_id: int) -> float:
        return float(self.coefficients.get(reservoir_id, 0.0))

    def references(self, reservoir_id: int) -> bool:
        return reservoir_id in self.coefficients

    def value_at(self, state: State) -> float:
        total = float(self.rhs)
        for rid, coeff in self.coefficients.items():
            total += coeff * float(state.get(rid, 0.0))
        return total


@dataclass(frozen=True, slots=True)
class FCFData:
    cuts: Tuple[BendersCut, ...] = ()
    reservoir_ids: Tuple[int, ...] = ()
    n_stages: int = 0
    n_cuts: int = 0
    record_length: int = 0
    source_model: SourceModel = SourceModel.DECOMP

    def __len__(self) -> int:
        return len(self.cuts)

    def cut(self, cut_id: int) -> Optional[BendersCut]:
        for c in self.cuts:
            if c.id == cut_id:
                return c
        return None


@dataclass(frozen=True, slots=True)
class MapcutGeneralData:
    iterations: int = 0
    total_cuts: int = 0
    submarkets: int = 0
    reservoir_count: int = 0
    scenario_count: int = 0
    # One backward-chain entry point per scenario
    last_cut_pointers: Tuple[int, ...] = ()


@dataclass(frozen=True, slots=True)
class MapcutCaseData:
    record_length: int = 0
    start_day: int = 0
    start_month: int = 0
    start_year: int = 0

    @property
    def start_date(self) -> Optional[date]:
        if not (self.start_day and self.start_month and self.start_year):
            return None
        return date(self.start_year, self.start_month, self.start_day)


@dataclass(frozen=True, slots=True)
class MapcutStageData:
    stage_count: int = 0
    week_count: int = 0
    travel_time_reservoir_count: int = 0
    max_travel_time_lag: int = 0
    first_node_per_stage: Tuple[int, ...] = ()
    load_levels_per_stage: Tuple[int, ...] = ()


@dataclass(frozen=True, slots=True)
class Mapcut:
    general: MapcutGeneralData = field(default_factory=MapcutGeneralData)
    case: MapcutCaseData = field(default_factory=MapcutCaseData)
    reservoir_ids: Tuple[int, ...] = ()
    stages: MapcutStageData = field(default_factory=MapcutStageData)
    register_size: int = 0


__all__ = [
    "SourceModel",
    "State",
    "RawCut",
    "BendersCut",
    "FCFData",
    "MapcutGeneralData",
    "MapcutCaseData",
    "MapcutStageData",
    "Mapcut",
]
