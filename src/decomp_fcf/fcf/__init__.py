from .types import (
    SourceModel,
    RawCut,
    BendersCut,
    FCFData,
    MapcutGeneralData,
    MapcutCaseData,
    MapcutStageData,
    Mapcut,
)
from .builder import build_fcf_from_cuts, load_fcf, load_scenario_fcfs
from .evaluate import (
    evaluate,
    water_value,
    water_values,
    active_cuts,
    only_active,
    average_water_value,
    CutStatistics,
    cut_statistics,
)

__all__ = [
    "SourceModel",
    "RawCut",
    "BendersCut",
    "FCFData",
    "MapcutGeneralData",
    "MapcutCaseData",
    "MapcutStageData",
    "Mapcut",
    "build_fcf_from_cuts",
    "load_fcf",
    "load_scenario_fcfs",
    "evaluate",
    "water_value",
    "water_values",
    "active_cuts",
    "only_active",
    "average_water_value",
    "CutStatistics",
    "cut_statistics",
]
