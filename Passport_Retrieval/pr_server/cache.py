import threading
from typing import Optional

from Passport_Retrieval.pr_shared.types import RetrievalResult


class RetrievalCache:
    """Process-lifetime memo of decrypted results, keyed by lookup key.

    Unbounded, never evicted, last write wins. Guarded by a lock so it can be
    shared between the event loop and worker threads.
    """

    def __init__(self):
        self._entries: dict[str, RetrievalResult] = {}
        self._lock = threading.Lock()

    def get(self, lookup_key: str) -> Optional[RetrievalResult]:
        with self._lock:
            return self._entries.get(lookup_key)

    def put(self, lookup_key: str, entry: RetrievalResult) -> None:
        with self._lock:
            self._entries[lookup_key] = entry

    def __contains__(self, lookup_key: str) -> bool:
        with self._lock:
            return lookup_key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
