# dispatchlanes/settings.py
"""Key-value settings store backed by one JSON object file.

Reads are forgiving: a missing, unreadable or corrupt file behaves like an
empty store. Writes go through a temp file and `os.replace`.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .config import ViewState

logger = logging.getLogger(__name__)

VIEW_KEY_PREFIX = "timeline.view."


class SettingsStore:
    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def _read_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            obj = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("settings file %s unreadable (%s); treating as empty", self.path, e)
            return {}
        if not isinstance(obj, dict):
            logger.warning("settings file %s is not a JSON object; treating as empty", self.path)
            return {}
        return obj

    def _write_all(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=".settings-", suffix=".json", dir=str(self.path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
                json.dump(data, f, ensure_ascii=False, indent=2, sort_keys=True)
                f.write("\n")
            os.replace(tmp, self.path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        v = self._read_all().get(key)
        return v if isinstance(v, str) else default

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = str(value)
        self._write_all(data)

    def delete(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)

    def get_json(self, key: str, fallback: Any = None) -> Any:
        raw = self.get(key)
        if not raw:
            return fallback
        try:
            obj = json.loads(raw)
        except ValueError:
            logger.warning("settings key %r holds invalid JSON; using fallback", key)
            return fallback
        return fallback if obj is None else obj

    def set_json(self, key: str, obj: Any) -> None:
        self.set(key, json.dumps(obj, ensure_ascii=False, sort_keys=True))


def load_view_state(store: SettingsStore, key: str) -> ViewState:
    return ViewState.from_mapping(store.get_json(VIEW_KEY_PREFIX + key, None))


def save_view_state(store: SettingsStore, key: str, view: ViewState) -> None:
    store.set_json(VIEW_KEY_PREFIX + key, view.to_dict())
