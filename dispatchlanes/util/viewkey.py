# dispatchlanes/util/viewkey.py
from __future__ import annotations

import hashlib
from typing import Iterable


def make_layout_key(parts: Iterable[object]) -> str:
    """Return a stable key for a layout input, for memoization by consumers.

    Deterministic across processes (no `hash()`, which is salted per
    interpreter run). Every part goes into the digest, so any changed field
    gives a different key.
    """
    raw = "|".join(str(p) for p in parts)
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()
