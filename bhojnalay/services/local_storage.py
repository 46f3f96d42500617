"""
JSON-file key/value storage used when the remote datastore is missing or failing.

Mirrors browser local storage: each key holds one JSON document that is
read and replaced as a whole.
"""
import json
from pathlib import Path
from typing import Any

from bhojnalay.utils.logger import get_logger

logger = get_logger(__name__)

PLATE_ENTRIES_KEY = "bhojnalay_plate_entries"
RATES_KEY = "bhojnalay_rates"
SPECIAL_RATES_KEY = "bhojnalay_special_daily_rates"


class LocalStorage:
    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _read_all(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.error(f"Could not read local storage {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._read_all().get(key, default)

    def set(self, key: str, value: Any) -> bool:
        """Replace one key; False when the file could not be written"""
        data = self._read_all()
        data[key] = value
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            tmp_path.replace(self.path)
        except OSError as e:
            logger.error(f"Could not write local storage {self.path}: {e}")
            return False
        return True
