"""decomp_fcf

Reader and evaluator for DECOMP future-cost functions stored as Benders cuts
in binary ``mapcut`` / ``cortdeco`` file pairs. The package provides:

- Decoders for the padded-register mapcut header and the linked-list cut file
- An immutable, reservoir-keyed `FCFData` model built from both
- Evaluation of the FCF and of marginal water values at a storage state
- Export of the cuts as constraints of a Pyomo model (`decomp_fcf.fcf.pyomo_model`)
"""

from .errors import CyclicOrUnboundedChain, FCFFormatError, InconsistentLayout, TruncatedRecord
from .fcf import (
    BendersCut,
    FCFData,
    evaluate,
    load_fcf,
    load_scenario_fcfs,
    water_value,
    water_values,
)

__all__ = [
    "__version__",
    "BendersCut",
    "FCFData",
    "load_fcf",
    "load_scenario_fcfs",
    "evaluate",
    "water_value",
    "water_values",
    "FCFFormatError",
    "TruncatedRecord",
    "InconsistentLayout",
    "CyclicOrUnboundedChain",
]

__version__ = "0.1.0"
