from __future__ import annotations

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, Optional, Sequence

from ..binary.cortdeco import MAX_CHAIN_LENGTH, CutStore, coefficient_count
from ..binary.mapcut import read_mapcut
from ..binary.reader import open_records
from ..config import FCFConfig
from ..errors import InconsistentLayout
from .types import BendersCut, FCFData, Mapcut, RawCut, SourceModel

log = logging.getLogger(__name__)


def build_fcf_from_cuts(
    raw_cuts: Iterable[RawCut],
    reservoir_ids: Sequence[int],
    *,
    record_length: int = 0,
    n_stages: int = 0,
    stage: int = 0,
    source_model: SourceModel | str = SourceModel.DECOMP,
) -> FCFData:
    """Tie flat coefficient arrays to reservoir ids.

    Slot ``i`` of each raw coefficient array belongs to ``reservoir_ids[i]``.
    Exact zeros are left out of the sparse map; slots past the reservoir list
    (inflow lags, GNL terms) are kept in order as ``extra_coefficients``.
    Cut ids are the 1-based chronological positions.
    """
    rids = tuple(int(r) for r in reservoir_ids)
    n_res = len(rids)
    cuts: list[BendersCut] = []
    for i, raw in enumerate(raw_cuts, start=1):
        if len(raw.coefficients) < n_res:
            raise InconsistentLayout(
                f"cut {i} has {len(raw.coefficients)} coefficient(s) for {n_res} reservoir(s)"
            )
        coeffs = {
            rid: float(value)
            for rid, value in zip(rids, raw.coefficients)
            if value != 0.0
        }
        cuts.append(
            BendersCut(
                id=i,
                rhs=float(raw.rhs),
                coefficients=MappingProxyType(coeffs),
                stage=int(stage),
                construction_iteration=raw.construction_iteration,
                forward_pass_index=raw.forward_pass_index,
                deactivation_iteration=raw.deactivation_iteration,
                extra_coefficients=tuple(raw.coefficients[n_res:]),
            )
        )
    return FCFData(
        cuts=tuple(cuts),
        reservoir_ids=rids,
        n_stages=int(n_stages),
        n_cuts=len(cuts),
        record_length=int(record_length),
        source_model=SourceModel(source_model),
    )


def _resolve_record_length(mapcut: Mapcut, record_length: Optional[int], cfg: FCFConfig, path: Path) -> int:
    from_map = int(mapcut.case.record_length)
    if record_length is not None and from_map > 0 and int(record_length) != from_map:
        raise InconsistentLayout(
            f"record length {record_length} disagrees with mapcut record length {from_map}",
            path,
            mapcut.register_size,
        )
    if from_map > 0:
        # Case register, first word
        coefficient_count(from_map, path, mapcut.register_size)
        return from_map
    if record_length is not None:
        return int(record_length)
    log.info(
        "[FCF] mapcut %s has no record length; using default %d",
        path, cfg.format.default_record_length,
    )
    return int(cfg.format.default_record_length)


def _resolve_start_index(mapcut: Mapcut, scenario: Optional[int], start_index: Optional[int]) -> int:
    if start_index is not None:
        return int(start_index)
    pointers = mapcut.general.last_cut_pointers
    if scenario is not None:
        if not 1 <= scenario <= len(pointers):
            raise ValueError(f"scenario {scenario} out of range 1..{len(pointers)}")
        return int(pointers[scenario - 1])
    return max(pointers) if pointers else 0


def _resolve_max_cuts(mapcut: Mapcut, max_cuts: Optional[int], cfg: FCFConfig) -> int:
    if max_cuts is not None:
        return int(max_cuts)
    if cfg.decode.max_cuts > 0:
        return int(cfg.decode.max_cuts)
    return max(MAX_CHAIN_LENGTH, int(mapcut.general.total_cuts))


def _check_reservoirs(mapcut: Mapcut, path: Path) -> None:
    if len(mapcut.reservoir_ids) != mapcut.general.reservoir_count:
        raise InconsistentLayout(
            f"mapcut declares {mapcut.general.reservoir_count} reservoir(s) but lists "
            f"{len(mapcut.reservoir_ids)}",
            path,
            2 * mapcut.register_size,
        )


def _load_mapcut(mapcut_path: str | Path, cfg: FCFConfig) -> Mapcut:
    return read_mapcut(
        mapcut_path,
        register_size=cfg.format.register_size,
        stage_register_index=cfg.format.stage_register_index,
    )


def _build_scenarios(
    mapcut: Mapcut,
    cortdeco_path: Path,
    starts: Dict[int, int],
    *,
    reservoir_ids: Optional[Sequence[int]],
    record_length: int,
    max_cuts: int,
    stage: int,
    cfg: FCFConfig,
) -> Dict[int, FCFData]:
    rids = tuple(reservoir_ids) if reservoir_ids is not None else mapcut.reservoir_ids
    n_coeffs = coefficient_count(record_length, cortdeco_path)
    if len(rids) > n_coeffs:
        raise InconsistentLayout(
            f"{len(rids)} reservoir(s) but cut records of {record_length} bytes hold {n_coeffs} coefficient(s)",
            cortdeco_path,
        )
    out: Dict[int, FCFData] = {}
    with open_records(cortdeco_path, record_length) as reader:
        if reader.size % record_length:
            raise InconsistentLayout(
                f"cut file size {reader.size} is not a multiple of record length {record_length}",
                cortdeco_path,
                reader.record_count * record_length,
            )
        store = CutStore(reader)
        for key, start in starts.items():
            raw = store.read_chain(start, max_cuts) if start != 0 else []
            out[key] = build_fcf_from_cuts(
                raw,
                rids,
                record_length=record_length,
                n_stages=mapcut.stages.stage_count,
                stage=stage,
                source_model=cfg.decode.source_model,
            )
    return out


def load_fcf(
    mapcut_path: str | Path,
    cortdeco_path: str | Path,
    *,
    scenario: Optional[int] = None,
    start_index: Optional[int] = None,
    reservoir_ids: Optional[Sequence[int]] = None,
    record_length: Optional[int] = None,
    max_cuts: Optional[int] = None,
    stage: int = 0,
    config: Optional[FCFConfig] = None,
) -> FCFData:
    """Decode a mapcut + cortdeco pair into an :class:`FCFData`.

    The chain starts at ``start_index`` if given, else at the last-cut pointer
    of ``scenario`` (1-based), else at the highest pointer of all scenarios.
    ``reservoir_ids`` and ``record_length`` override what the mapcut file
    declares; a record length that disagrees with a non-zero mapcut value is an
    error. Cuts carry ``stage`` since the records hold no stage marker.
    """
    cfg = config or FCFConfig()
    mpath, cpath = Path(mapcut_path), Path(cortdeco_path)
    mapcut = _load_mapcut(mpath, cfg)
    if reservoir_ids is None:
        _check_reservoirs(mapcut, mpath)
    rlen = _resolve_record_length(mapcut, record_length, cfg, mpath)
    start = _resolve_start_index(mapcut, scenario, start_index)
    fcf = _build_scenarios(
        mapcut,
        cpath,
        {0: start},
        reservoir_ids=reservoir_ids,
        record_length=rlen,
        max_cuts=_resolve_max_cuts(mapcut, max_cuts, cfg),
        stage=stage,
        cfg=cfg,
    )[0]
    log.info(
        "[FCF] loaded %d cut(s) over %d reservoir(s) from %s (start record %d)",
        fcf.n_cuts, len(fcf.reservoir_ids), cpath, start,
    )
    return fcf


def load_scenario_fcfs(
    mapcut_path: str | Path,
    cortdeco_path: str | Path,
    *,
    scenarios: Optional[Iterable[int]] = None,
    reservoir_ids: Optional[Sequence[int]] = None,
    record_length: Optional[int] = None,
    max_cuts: Optional[int] = None,
    stage: int = 0,
    config: Optional[FCFConfig] = None,
) -> Dict[int, FCFData]:
    """One :class:`FCFData` per scenario, each from its own chain traversal."""
    cfg = config or FCFConfig()
    mpath, cpath = Path(mapcut_path), Path(cortdeco_path)
    mapcut = _load_mapcut(mpath, cfg)
    if reservoir_ids is None:
        _check_reservoirs(mapcut, mpath)
    rlen = _resolve_record_length(mapcut, record_length, cfg, mpath)
    wanted = list(scenarios) if scenarios is not None else list(range(1, len(mapcut.general.last_cut_pointers) + 1))
    starts = {s: _resolve_start_index(mapcut, s, None) for s in wanted}
    return _build_scenarios(
        mapcut,
        cpath,
        starts,
        reservoir_ids=reservoir_ids,
        record_length=rlen,
        max_cuts=_resolve_max_cuts(mapcut, max_cuts, cfg),
        stage=stage,
        cfg=cfg,
    )


__all__ = ["build_fcf_from_cuts", "load_fcf", "load_scenario_fcfs"]
