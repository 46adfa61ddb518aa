from __future__ import annotations

import struct
from pathlib import Path
from typing import Callable, Sequence

import pytest

REGISTER_SIZE = 48020


def cut_record(
    previous: int,
    rhs: float,
    coefficients: Sequence[float],
    construction: int = 1,
    forward: int = 1,
    deactivation: int = 0,
) -> bytes:
    return struct.pack(
        f"<4i{1 + len(coefficients)}d",
        previous, construction, forward, deactivation, rhs, *coefficients,
    )


def register(words: Sequence[int], size: int = REGISTER_SIZE) -> bytes:
    raw = struct.pack(f"<{len(words)}i", *words)
    return raw + b"\x00" * (size - len(raw))


@pytest.fixture
def write_cortdeco(tmp_path: Path) -> Callable[..., Path]:
    def _write(records: Sequence[bytes], name: str = "cortdeco.rv2") -> Path:
        p = tmp_path / name
        p.write_bytes(b"".join(records))
        return p

    return _write


@pytest.fixture
def write_mapcut(tmp_path: Path) -> Callable[..., Path]:
    def _write(
        general: Sequence[int],
        case: Sequence[int] = (),
        reservoirs: Sequence[int] = (),
        stages: Sequence[int] | None = None,
        stage_register_index: int = 19,
        register_size: int = REGISTER_SIZE,
        name: str = "mapcut.rv2",
    ) -> Path:
        blocks = [
            register(general, register_size),
            register(case, register_size),
            register(reservoirs, register_size),
        ]
        if stages is not None:
            filler = register((), register_size)
            blocks.extend(filler for _ in range(3, stage_register_index))
            blocks.append(register(stages, register_size))
        p = tmp_path / name
        p.write_bytes(b"".join(blocks))
        return p

    return _write


@pytest.fixture
def sample_pair(write_mapcut, write_cortdeco) -> tuple[Path, Path]:
    """Two chained cuts over reservoirs 1, 6 and 14 (C = 3, R = 48)."""
    mapcut = write_mapcut(
        general=(10, 2, 4, 3, 1, 2),
        case=(48, 1, 1, 2025),
        reservoirs=(1, 6, 14),
    )
    cortdeco = write_cortdeco(
        [
            cut_record(0, 5000.0, [-10.0, -20.0, -30.0], construction=1, forward=1),
            cut_record(1, 3000.0, [-5.0, -15.0, -25.0], construction=2, forward=2),
        ]
    )
    return mapcut, cortdeco
