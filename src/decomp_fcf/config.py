from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping
import ast
import operator as _op

import yaml

# Observed register size of DECOMP mapcut files
MAPCUT_REGISTER_SIZE: int = 48020
# General, case, reservoirs, topology, 14 tree registers, tree data -> stages
STAGE_REGISTER_INDEX: int = 19
# NEWAVE/DECOMP standard cut record length
DEFAULT_RECORD_LENGTH: int = 1664


@dataclass(slots=True)
class FormatConfig:
    register_size: int = MAPCUT_REGISTER_SIZE
    stage_register_index: int = STAGE_REGISTER_INDEX
    default_record_length: int = DEFAULT_RECORD_LENGTH


@dataclass(slots=True)
class DecodeConfig:
    # 0 = take the bound from the mapping file or MAX_CHAIN_LENGTH
    max_cuts: int = 0
    source_model: str = "decomp"


@dataclass(slots=True)
class FCFConfig:
    format: FormatConfig = field(default_factory=FormatConfig)
    decode: DecodeConfig = field(default_factory=DecodeConfig)
    log_level: str = "INFO"


def _as_dict(m: Mapping[str, Any] | None) -> dict[str, Any]:
    return dict(m) if m else {}


def _eval_expr(expr: str) -> int | float:
    """Safely evaluate a literal arithmetic expression such as ``"4 * 12005"``.

    Only numeric literals, ``+ - * / // % **``, unary signs and parentheses are
    accepted.
    """
    node = ast.parse(expr, mode="eval")

    bin_ops = {
        ast.Add: _op.add,
        ast.Sub: _op.sub,
        ast.Mult: _op.mul,
        ast.Div: _op.truediv,
        ast.FloorDiv: _op.floordiv,
        ast.Mod: _op.mod,
        ast.Pow: _op.pow,
    }
    unary_ops = {ast.UAdd: _op.pos, ast.USub: _op.neg}

    def _eval(n: ast.AST) -> int | float:
        if isinstance(n, ast.Expression):
            return _eval(n.body)
        if isinstance(n, ast.Constant):
            if isinstance(n.value, (int, float)) and not isinstance(n.value, bool):
                return n.value
            raise ValueError("non-numeric constant in expression")
        if isinstance(n, ast.BinOp):
            if type(n.op) not in bin_ops:
                raise ValueError("operator not allowed in expression")
            return bin_ops[type(n.op)](_eval(n.left), _eval(n.right))
        if isinstance(n, ast.UnaryOp):
            if type(n.op) not in unary_ops:
                raise ValueError("unary operator not allowed in expression")
            return unary_ops[type(n.op)](_eval(n.operand))
        raise ValueError("unsupported syntax in expression")

    return _eval(node)


def _as_int(value: Any, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, str):
        s = value.strip()
        if not s:
            return default
        if any(ch in s for ch in "+-*/()%"):
            return int(_eval_expr(s))
        return int(s)
    return int(value)


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError("Top-level YAML document must be a mapping")
        return data


def load_config(path: str | Path | None) -> FCFConfig:
    """Load reader configuration from a YAML file or return defaults.

    The schema is minimal and forgiving; unknown keys are ignored.
    """
    if path is None:
        return FCFConfig()
    p = Path(path)
    if not p.exists():
        return FCFConfig()

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError(f"Unsupported config format '{p.suffix}'. Please provide a YAML file.")
    raw = _load_yaml(p)
    fmt = _as_dict(raw.get("format"))
    dec = _as_dict(raw.get("decode"))

    fmt_cfg = FormatConfig(
        register_size=_as_int(fmt.get("register_size"), MAPCUT_REGISTER_SIZE),
        stage_register_index=_as_int(fmt.get("stage_register_index"), STAGE_REGISTER_INDEX),
        default_record_length=_as_int(fmt.get("default_record_length"), DEFAULT_RECORD_LENGTH),
    )
    if fmt_cfg.register_size <= 0:
        raise ValueError(f"register_size must be positive, got {fmt_cfg.register_size}")
    if fmt_cfg.stage_register_index < 3:
        raise ValueError("stage_register_index must come after the reservoir register")

    dec_cfg = DecodeConfig(
        max_cuts=_as_int(dec.get("max_cuts"), 0),
        source_model=str(dec.get("source_model", "decomp") or "decomp").lower(),
    )
    if dec_cfg.max_cuts < 0:
        raise ValueError(f"max_cuts must be >= 0, got {dec_cfg.max_cuts}")
    return FCFConfig(
        format=fmt_cfg,
        decode=dec_cfg,
        log_level=str(raw.get("log_level", "INFO")),
    )


__all__ = [
    "MAPCUT_REGISTER_SIZE",
    "STAGE_REGISTER_INDEX",
    "DEFAULT_RECORD_LENGTH",
    "FormatConfig",
    "DecodeConfig",
    "FCFConfig",
    "load_config",
]
