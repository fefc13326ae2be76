from __future__ import annotations

import os
from contextlib import suppress
from pathlib import Path

from donelist.core.errors import DoneListError, wrap_error
from donelist.core.logging import get_logger, log_event

logger = get_logger(__name__)


class JsonFileStorage:
    """Key-value slots stored as ``<directory>/<key>.json`` files."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory
        self.last_error: DoneListError | None = None

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> bytes | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_bytes()

    def set(self, key: str, data: bytes) -> bool:
        path = self.path_for(key)
        tmp_path = path.with_suffix(".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_bytes(data)
            os.replace(tmp_path, path)
        except OSError as exc:
            with suppress(OSError):
                tmp_path.unlink(missing_ok=True)
            self.last_error = wrap_error(
                exc,
                code="tasks_write_failed",
                message="Could not save tasks",
                severity="warning",
            )
            log_event(logger, "storage.write_failed", path=str(path), error=str(exc))
            return False
        self.last_error = None
        return True


class MemoryStorage:
    """Process-local slots; nothing survives a restart."""

    def __init__(self, initial: dict[str, bytes] | None = None) -> None:
        self.slots: dict[str, bytes] = dict(initial or {})

    def get(self, key: str) -> bytes | None:
        return self.slots.get(key)

    def set(self, key: str, data: bytes) -> bool:
        self.slots[key] = bytes(data)
        return True
