"""
Lightweight in-process counters for the search engine.

Tracks search timing and index maintenance so ``engine.stats()`` can report
how the engine is being exercised.  No I/O.
"""

import threading
from datetime import datetime, timezone
from typing import Dict, Optional


class PerformanceMonitor:
    """Stats collector for search timing and index maintenance events.

    Readers run concurrently, so counter updates take a small private lock.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._search_count: int = 0
        self._total_search_ms: float = 0.0
        self._rebuild_count: int = 0
        self._incremental_count: int = 0
        self._last_rebuild: Optional[str] = None

    def record_search(self, elapsed_ms: float) -> None:
        with self._lock:
            self._search_count += 1
            self._total_search_ms += elapsed_ms

    def record_rebuild(self) -> None:
        with self._lock:
            self._rebuild_count += 1
            self._last_rebuild = datetime.now(timezone.utc).isoformat()

    def record_incremental(self) -> None:
        with self._lock:
            self._incremental_count += 1

    @property
    def search_count(self) -> int:
        return self._search_count

    @property
    def avg_search_time_ms(self) -> float:
        if self._search_count == 0:
            return 0.0
        return round(self._total_search_ms / self._search_count, 3)

    @property
    def rebuild_count(self) -> int:
        return self._rebuild_count

    @property
    def incremental_count(self) -> int:
        return self._incremental_count

    @property
    def last_rebuild(self) -> Optional[str]:
        return self._last_rebuild

    def to_dict(self) -> Dict:
        return {
            "search_count": self.search_count,
            "avg_search_time_ms": self.avg_search_time_ms,
            "full_rebuilds": self.rebuild_count,
            "incremental_updates": self.incremental_count,
            "last_rebuild": self.last_rebuild,
        }
