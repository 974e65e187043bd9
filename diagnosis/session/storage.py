"""
Best-effort local persistence for session state.

State is kept as JSON in a single file, under a versioned key, so that a
session can be resumed. Nothing here is guaranteed: read, write and
decode failures are logged and treated as "no saved state".
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Any, Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_STORE_KEY = "diagnosis_state_v1"


class LocalStore:
    """
    JSON file key-value store.

    Attributes:
        path: JSON file holding every stored key
        key: Key this store reads and writes
    """

    def __init__(self, path: Union[str, Path], key: str = DEFAULT_STORE_KEY):
        self.path = Path(path)
        self.key = key

    def _read_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring {self.path}: expected a JSON object")
            return {}
        return data

    def _write_all(self, data: Dict[str, Any]) -> None:
        # Serialize fully before touching the file, then swap it in whole.
        text = json.dumps(data, indent=2, ensure_ascii=False)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=str(self.path.parent), prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp_path, self.path)
        except Exception:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def load(self) -> Optional[Dict[str, Any]]:
        """Stored value for this key, or None."""
        value = self._read_all().get(self.key)
        if value is not None and not isinstance(value, dict):
            logger.warning(f"Ignoring stored value for {self.key}: expected an object")
            return None
        return value

    def save(self, value: Dict[str, Any]) -> bool:
        """Store `value` under this key. Returns False if the write failed."""
        data = self._read_all()
        data[self.key] = value
        try:
            self._write_all(data)
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"Could not save state to {self.path}: {e}")
            return False
        logger.debug(f"Saved {self.key} to {self.path}")
        return True

    def clear(self) -> None:
        """Remove this key; other keys in the file are kept."""
        data = self._read_all()
        if self.key not in data:
            return
        del data[self.key]
        try:
            self._write_all(data)
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"Could not clear {self.key} in {self.path}: {e}")
