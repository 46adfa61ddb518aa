from __future__ import annotations

from typing import Any, Mapping, Optional

import pyomo.environ as pyo

from .types import FCFData, State


def add_fcf_cuts(
    m: pyo.ConcreteModel,
    fcf: FCFData,
    volumes: Mapping[int, Any],
    theta: Any | None = None,
    active_only: bool = False,
) -> pyo.ConstraintList:
    """
    theta >= rhs_k + sum_r pi_rk * v_r   for every cut k of ``fcf``

    ``volumes`` maps reservoir id to a Pyomo variable or expression; reservoirs
    absent from it contribute nothing. Creates ``m.fcf_theta`` when ``theta``
    is not given. Returns the ``m.fcf_cuts`` constraint list.
    """
    if theta is None:
        if not hasattr(m, "fcf_theta"):
            m.fcf_theta = pyo.Var(within=pyo.Reals)
        theta = m.fcf_theta
    if not hasattr(m, "fcf_cuts"):
        m.fcf_cuts = pyo.ConstraintList()
    for cut in fcf.cuts:
        if active_only and not cut.is_active:
            continue
        expr = float(cut.rhs) + sum(
            float(coeff) * volumes[rid] for rid, coeff in cut.coefficients.items() if rid in volumes
        )
        m.fcf_cuts.add(theta >= expr)
    return m.fcf_cuts


def build_fcf_model(fcf: FCFData, state: State, active_only: bool = False) -> pyo.ConcreteModel:
    """LP whose optimum is the FCF value at ``state``: min theta over the cuts.

    Volumes are variables fixed at the state (0.0 for reservoirs not in it).
    """
    m = pyo.ConcreteModel()
    m.R = pyo.Set(initialize=list(fcf.reservoir_ids), ordered=True)
    m.v = pyo.Var(m.R, within=pyo.Reals)
    for rid in fcf.reservoir_ids:
        m.v[rid].fix(float(state.get(rid, 0.0)))
    m.fcf_theta = pyo.Var(within=pyo.Reals)
    add_fcf_cuts(m, fcf, {rid: m.v[rid] for rid in fcf.reservoir_ids}, active_only=active_only)
    m.obj = pyo.Objective(expr=m.fcf_theta, sense=pyo.minimize)
    return m


def solve_fcf_model(
    m: pyo.ConcreteModel,
    solver_name: str = "glpk",
    tee: bool = False,
    executable: str | None = None,
    options: dict | None = None,
) -> Optional[float]:
    """Solve ``m`` and return the value of ``m.fcf_theta``."""
    solver = pyo.SolverFactory(solver_name)
    if executable:
        solver.executable = executable  # type: ignore[attr-defined]
    if options:
        for k, v in options.items():
            solver.options[k] = v
    solver.solve(m, tee=tee)
    return pyo.value(m.fcf_theta, exception=False)


__all__ = ["add_fcf_cuts", "build_fcf_model", "solve_fcf_model"]
