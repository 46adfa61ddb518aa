from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)s | %(name)s | %(message)s"


def setup_logging(level: str = "INFO", log_dir: str | Path | None = None) -> Path | None:
    """Configure root logging for decode/evaluate runs.

    At DEBUG level, or whenever ``log_dir`` is given, a timestamped
    ``fcf_debug_<ts>.txt`` file receives the same records as the console.
    Returns the log file path when one was opened.
    """
    lvl = getattr(logging, str(level).upper(), logging.INFO)
    logging.basicConfig(level=lvl, format=LOG_FORMAT)

    if log_dir is None and str(level).upper() != "DEBUG":
        return None
    out_dir = Path(log_dir) if log_dir is not None else Path("Report")
    out_dir.mkdir(parents=True, exist_ok=True)
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_path = out_dir / f"fcf_debug_{ts}.txt"
    fh = logging.FileHandler(log_path, mode="w", encoding="utf-8")
    fh.setLevel(lvl)
    fh.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger()
    root.addHandler(fh)
    logging.getLogger(__name__).info("[LOG] Writing %s logs to %s", logging.getLevelName(lvl), log_path)
    return log_path


__all__ = ["LOG_FORMAT", "setup_logging"]
