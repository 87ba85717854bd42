import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

Records = list[dict[str, Any]]


class MemoryStorage:
    """
    Dict-backed storage. Values are kept as JSON text so that what comes back
    from load() has been through the same serialization as the file storage.
    """

    def __init__(self, initial: Optional[dict[str, Records]] = None):
        self._data: dict[str, str] = {}
        for key, records in (initial or {}).items():
            self.save(key, records)

    def load(self, key: str) -> Records | None:
        raw = self._data.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def save(self, key: str, records: Records) -> bool:
        self._data[key] = json.dumps(records)
        return True


class JsonFileStorage:
    """
    One JSON array per key, stored as <data_dir>/<key>.json.
    Every save rewrites the whole file; the last writer wins.
    """

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)

    def _path_for(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def load(self, key: str) -> Records | None:
        path = self._path_for(key)
        try:
            with open(path, encoding="utf-8") as f:
                records = json.load(f)

        except FileNotFoundError:
            logger.info(f"No saved '{key}' found at {path}, starting fresh.")
            return None

        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error(f"❌ Could not parse {path.name}, ignoring it. Reason: {e}")
            return None

        except OSError as e:
            logger.error(f"❌ Could not read {path.name}. Reason: {e}")
            return None

        if not isinstance(records, list):
            logger.error(f"❌ {path.name} does not hold a list of records, ignoring it.")
            return None
        return records

    def save(self, key: str, records: Records) -> bool:
        path = self._path_for(key)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2, ensure_ascii=False)
            # Atomic on the same filesystem, so readers never see half a file.
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"❌ Failed to save '{key}' to {path}. Reason: {e}")
            if tmp_path.exists():
                tmp_path.unlink()
            return False
        return True
