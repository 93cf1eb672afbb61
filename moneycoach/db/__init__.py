from .store import MemoryStore, SqliteStore, Store, StoredData

__all__ = ["MemoryStore", "SqliteStore", "Store", "StoredData"]
