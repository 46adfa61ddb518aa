"""Evaluation of the future-cost function.

The FCF is the upper envelope of its cuts::

    FCF(v) = max_k { rhs_k + sum_r pi_rk * v_r }

Reservoirs missing from the state, or from a cut's sparse map, contribute 0.
All functions here are pure.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple

from .types import BendersCut, FCFData, State


def evaluate(fcf: FCFData, state: State) -> Tuple[float, Optional[int]]:
    """Return ``(value, active_cut_id)`` at ``state``.

    Ties go to the earliest cut in chronological order. Cuts evaluating to
    NaN never win. With no cuts (or only NaN cuts) the result is
    ``(0.0, None)``.
    """
    best_value = -math.inf
    best_id: Optional[int] = None
    for cut in fcf.cuts:
        value = cut.value_at(state)
        # Strict comparison keeps the first cut on ties and rejects NaN
        if value > best_value:
            best_value = value
            best_id = cut.id
    if best_id is None:
        return 0.0, None
    return best_value, best_id


def _active_cut(fcf: FCFData, state: State) -> Optional[BendersCut]:
    _, cut_id = evaluate(fcf, state)
    if cut_id is None:
        return None
    return fcf.cut(cut_id)


def water_value(fcf: FCFData, state: State, reservoir_id: int) -> float:
    """Marginal value of storage in ``reservoir_id`` at ``state``.

    This is the active cut's coefficient; unknown reservoirs yield 0.0.
    """
    cut = _active_cut(fcf, state)
    return cut.coefficient(reservoir_id) if cut is not None else 0.0


def water_values(fcf: FCFData, state: State) -> Dict[int, float]:
    """Marginal values for every reservoir of the model, from one active cut."""
    cut = _active_cut(fcf, state)
    if cut is None:
        return {rid: 0.0 for rid in fcf.reservoir_ids}
    return {rid: cut.coefficient(rid) for rid in fcf.reservoir_ids}


def active_cuts(fcf: FCFData) -> List[BendersCut]:
    """Cuts that were never deactivated (``deactivation_iteration == 0``)."""
    return [c for c in fcf.cuts if c.is_active]


def only_active(fcf: FCFData) -> FCFData:
    """Copy of ``fcf`` restricted to active cuts; cut ids are preserved."""
    kept = tuple(active_cuts(fcf))
    return replace(fcf, cuts=kept, n_cuts=len(kept))


def average_water_value(fcf: FCFData, reservoir_id: int) -> float:
    """Mean coefficient of ``reservoir_id`` across all cuts (0.0 if none)."""
    if not fcf.cuts:
        return 0.0
    return sum(c.coefficient(reservoir_id) for c in fcf.cuts) / len(fcf.cuts)


@dataclass(frozen=True, slots=True)
class CutStatistics:
    total_cuts: int = 0
    active_cuts: int = 0
    inactive_cuts: int = 0
    avg_rhs: Optional[float] = None
    min_rhs: Optional[float] = None
    max_rhs: Optional[float] = None
    num_coefficients: int = 0


def cut_statistics(fcf: FCFData) -> CutStatistics:
    if not fcf.cuts:
        return CutStatistics()
    rhs = [c.rhs for c in fcf.cuts]
    n_active = len(active_cuts(fcf))
    first = fcf.cuts[0]
    return CutStatistics(
        total_cuts=len(fcf.cuts),
        active_cuts=n_active,
        inactive_cuts=len(fcf.cuts) - n_active,
        avg_rhs=sum(rhs) / len(rhs),
        min_rhs=min(rhs),
        max_rhs=max(rhs),
        num_coefficients=len(fcf.reservoir_ids) + len(first.extra_coefficients),
    )


__all__ = [
    "evaluate",
    "water_value",
    "water_values",
    "active_cuts",
    "only_active",
    "average_water_value",
    "CutStatistics",
    "cut_statistics",
]
