from typing import Protocol


class KeyValueStorage(Protocol):
    def get(self, key: str) -> bytes | None: ...
    def set(self, key: str, data: bytes) -> bool: ...
