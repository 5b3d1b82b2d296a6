from hut.datastore.store import JsonStore

__all__ = ["JsonStore"]
