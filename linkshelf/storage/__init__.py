from linkshelf.storage.base import StorageBackend
from linkshelf.storage.memory import MemoryBackend
from linkshelf.storage.sql import SqlBackend

BACKENDS = {
    MemoryBackend.name: MemoryBackend,
    SqlBackend.name: SqlBackend,
}


def build_backend(name: str) -> StorageBackend:
    try:
        backend_cls = BACKENDS[(name or "").strip().lower()]
    except KeyError as exc:
        raise ValueError(f"unknown storage backend: {name!r}") from exc
    return backend_cls()


__all__ = ["BACKENDS", "MemoryBackend", "SqlBackend", "StorageBackend", "build_backend"]
