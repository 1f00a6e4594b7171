"""
JSON file persistence shared by the credential stores and the OTP ledger.

Records are kept in one JSON object per file, keyed by record id.
A lock serializes each read-modify-write cycle within the process.
"""

import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)


class DuplicateRecordError(ValueError):
    """A unique field (email, phone) is already taken."""


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class JSONStore:
    """
    Base class for JSON-file backed stores.

    Subclasses call _load_all/_save_all inside `with self._lock:` whenever
    they modify records.
    """

    def __init__(self, file_path: Path):
        """
        Initialize the store.

        Args:
            file_path: Path to the JSON file (created if missing)
        """
        self.file_path = Path(file_path)
        self._lock = threading.RLock()
        self._ensure_file()

    def _ensure_file(self):
        """Ensure the storage file and directory exist."""
        self.file_path.parent.mkdir(parents=True, exist_ok=True)
        if not self.file_path.exists():
            self._save_all({})

    def _load_all(self) -> dict[str, dict]:
        """Load all records from file."""
        try:
            with open(self.file_path, "r") as f:
                return json.load(f)
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError as e:
            logger.error(f"Corrupt store file {self.file_path}: {e}")
            raise

    def _save_all(self, records: dict[str, dict]):
        """Save all records to file, replacing it atomically."""
        tmp_path = self.file_path.with_suffix(self.file_path.suffix + ".tmp")
        with open(tmp_path, "w") as f:
            json.dump(records, f, indent=2, ensure_ascii=False)
        tmp_path.replace(self.file_path)
