# dispatchlanes/labels.py
from __future__ import annotations

from typing import Dict

# (minimum duration in minutes, character limit), longest first.
_LABEL_LIMITS = (
    (120, 30),
    (60, 20),
    (0, 12),
)

# Status wins over category when picking a style.
STATUS_STYLES: Dict[str, str] = {
    "completed": "status-completed",
    "dispatched": "status-dispatched",
    "scheduled": "status-scheduled",
    "rejected": "status-rejected",
    "incomplete": "status-incomplete",
}

# CRM status values as they arrive from the backend.
STATUS_ALIASES: Dict[str, str] = {
    "ολοκληρωση": "completed",
    "αποστολη": "dispatched",
    "προγραμματισμενο": "scheduled",
    "απορριψη": "rejected",
    "μη ολοκληρωση": "incomplete",
}

CATEGORY_STYLES: Dict[str, str] = {
    "autopsy": "category-autopsy",
    "construction": "category-construction",
    "splicing": "category-splicing",
    "earthwork": "category-earthwork",
}


def label_limit(duration_ms: int) -> int:
    minutes = max(0, int(duration_ms)) / 60000.0
    for min_minutes, limit in _LABEL_LIMITS:
        if minutes >= min_minutes:
            return limit
    return _LABEL_LIMITS[-1][1]


def truncate_label(name: str, duration_ms: int) -> str:
    """Short boxes get short labels; anything cut ends with '...'."""
    s = str(name or "")
    limit = label_limit(duration_ms)
    if len(s) <= limit:
        return s
    return s[: limit - 3] + "..."


def style_key(category: str, status: str = "") -> str:
    st = str(status or "").strip().lower()
    st = STATUS_ALIASES.get(st, st)
    if st in STATUS_STYLES:
        return STATUS_STYLES[st]
    cat = str(category or "").strip().lower()
    if cat in CATEGORY_STYLES:
        return CATEGORY_STYLES[cat]
    return "default"
