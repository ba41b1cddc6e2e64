from typing import Protocol


class StorageRepository(Protocol):
    def save_bytes(self, subdir: str, filename: str, data: bytes, keep_name: bool = False) -> str:
        """Store ``data`` and return its public URL; a fresh name is generated unless ``keep_name``."""
        ...

    def delete(self, url: str) -> None:
        ...
