# dispatchlanes/util/console.py
from __future__ import annotations
import logging
import sys
from typing import Any

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def eprint(*args: Any) -> None:
    print(*args, file=sys.stderr)


def die(msg: str, rc: int = 2, *, prog: str = "dispatchlanes") -> int:
    eprint(f"[{prog}] ERROR: {msg}")
    return rc


def setup_logging(level_name: str | None) -> int:
    """Configure root logging for command-line entry points; returns the level used."""
    level = getattr(logging, str(level_name or "WARNING").strip().upper(), None)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)
    return level
