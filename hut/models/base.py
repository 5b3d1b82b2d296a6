import copy
from uuid import uuid4

from hut.utils.dates import iso_now


def new_id():
    return str(uuid4())


def build_record(defaults, **fields):
    """Fresh record dict: id and created_at stamped, defaults filled, fields applied."""
    record = copy.deepcopy(defaults)
    record.update(fields)
    record.setdefault("id", new_id())
    record.setdefault("created_at", iso_now())
    return record


def backfill(record, defaults):
    """Add missing keys from ``defaults`` in place. Returns the names that were added."""
    added = []
    for key, value in defaults.items():
        if key not in record or (record[key] is None and value is not None):
            record[key] = copy.deepcopy(value)
            added.append(key)
    return added
