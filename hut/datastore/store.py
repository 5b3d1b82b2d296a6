"""Single-file JSON datastore with a serialized write queue.

All mutations run one at a time, in submission order, on a single writer
thread. Readers get a deep copy of the last committed document and never wait
for the writer.
"""

import copy
import json
import logging
import os
import tempfile
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from hut.models.document import empty_document, repair_document

logger = logging.getLogger(__name__)


class JsonStore:
    def __init__(self, path):
        self.path = Path(path)
        self._live = None
        self._committed = None
        self._load_lock = threading.Lock()
        # One worker thread: the executor's FIFO work queue is the write queue.
        self._writer = ThreadPoolExecutor(max_workers=1, thread_name_prefix="hut-store-writer")

    def _read_file(self):
        if not self.path.exists():
            logger.info("Datastore %s not found; starting with an empty document.", self.path)
            return empty_document()
        with self.path.open("r", encoding="utf-8") as handle:
            raw = handle.read()
        if not raw.strip():
            return empty_document()
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError(f"Datastore {self.path} does not contain a JSON object.")
        return data

    def _ensure_loaded(self):
        with self._load_lock:
            if self._live is None:
                data = repair_document(self._read_file())
                self._live = data
                self._committed = copy.deepcopy(data)
            return self._live

    def _persist(self, data):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=str(self.path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self.path)
            logger.debug("Persisted datastore to %s", self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def _commit(self, data):
        repair_document(data)
        try:
            self._persist(data)
        except Exception:
            logger.exception("Could not persist datastore to %s; discarding unsaved changes.", self.path)
            self._live = copy.deepcopy(self._committed)
            raise
        self._committed = copy.deepcopy(data)

    def _run_mutator(self, mutator):
        data = self._ensure_loaded()
        try:
            result = mutator(data)
        except Exception:
            logger.exception("Datastore mutator %s failed; persisting partial state.", _describe(mutator))
            self._commit(data)
            raise
        self._commit(data)
        return result

    def get_record(self, collection, record_id):
        """Deep copy of one committed record, or None."""
        if self._committed is None:
            self._ensure_loaded()
        record = next((item for item in self._committed.get(collection, []) if item.get("id") == record_id), None)
        return copy.deepcopy(record) if record is not None else None

    def snapshot(self):
        """Deep copy of the last committed document."""
        if self._committed is None:
            self._ensure_loaded()
        return copy.deepcopy(self._committed)

    def submit(self, mutator):
        """Queue ``mutator(live_document)`` and return a Future for its result."""
        return self._writer.submit(self._run_mutator, mutator)

    def write(self, mutator):
        """Run ``mutator`` under the write lock and return what it returns."""
        return self.submit(mutator).result()

    def close(self):
        self._writer.shutdown(wait=True)


def _describe(func):
    return getattr(func, "__qualname__", None) or repr(func)
