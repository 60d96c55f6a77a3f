"""Shared JSON file access for the file-backed repositories."""

from __future__ import annotations

import json
import threading
from pathlib import Path


class JsonFile:
    """A JSON list persisted to a single file.

    ``lock`` serialises read-modify-write cycles on the file itself.  It
    is held only for the I/O, never across ledger work.
    """

    def __init__(self, file_path: Path) -> None:
        self.file_path = file_path
        self.lock = threading.RLock()
        self._ensure_file()

    def load(self) -> list[dict]:
        with self.lock:
            return json.loads(self.file_path.read_text(encoding="utf-8"))

    def persist(self, records: list[dict]) -> None:
        with self.lock:
            tmp = self.file_path.with_suffix(self.file_path.suffix + ".tmp")
            tmp.write_text(json.dumps(records, indent=2) + "\n", encoding="utf-8")
            tmp.replace(self.file_path)

    def _ensure_file(self) -> None:
        if not self.file_path.exists():
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            self.file_path.write_text("[]", encoding="utf-8")
