"""
Run-scoped mutable state: the seen-set of links and the statistics aggregator.

Both structures are guarded by one lock so that the de-duplication check and
the aggregate are always mutated under the same discipline. A fresh pair is
created for every run; nothing here is module-level.
"""

import threading
from types import MappingProxyType
from typing import Mapping, Optional, Set

from lingostat.models import LanguageStats, StatsTotals
from lingostat.utils.logging import get_logger
from lingostat.utils.urls import normalize_link

logger = get_logger(__name__)


class SeenSet:
    """Ledger of link identifiers already dispatched during a run."""

    def __init__(self, lock: Optional[threading.Lock] = None) -> None:
        self._lock = lock or threading.Lock()
        self._seen: Set[str] = set()

    def claim(self, url: str) -> bool:
        """
        Atomically test and insert a link.

        Returns:
            True if the caller is the first to see this link and must process it,
            False if it was already claimed.
        """
        key = normalize_link(url)
        with self._lock:
            if key in self._seen:
                return False
            self._seen.add(key)
            return True

    def __contains__(self, url: str) -> bool:
        key = normalize_link(url)
        with self._lock:
            return key in self._seen

    def __len__(self) -> int:
        with self._lock:
            return len(self._seen)

    def _clear_locked(self) -> None:
        self._seen.clear()


class StatsAggregator:
    """
    Mapping from language tag to accumulated counters and contributing items.

    `merge` is the single point of entry for every measurement and the single
    serialization point of the engine. Merges are pure summation, so the
    final totals do not depend on the order in which branches finish.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._buckets: dict[str, LanguageStats] = {}
        self.seen = SeenSet(self._lock)

    def merge(
        self,
        language: str,
        watch_seconds: float = 0.0,
        lines: int = 0,
        doc_count: int = 0,
        media_count: int = 0,
        item_id: str = "",
    ) -> bool:
        """
        Add one measurement to a language bucket.

        Measurements claiming a count without magnitude (media without
        duration, documents without lines) are dropped.

        Returns:
            True if the measurement was recorded, False if it was dropped.
        """
        if watch_seconds < 0 or lines < 0 or doc_count < 0 or media_count < 0:
            raise ValueError("Measurements must be non-negative")

        if (media_count > 0 and watch_seconds == 0) or (doc_count > 0 and lines == 0):
            logger.warning(
                f"Dropping zero-magnitude measurement for {item_id or 'unknown item'}",
                extra={"language": language, "media_count": media_count, "doc_count": doc_count},
            )
            return False

        with self._lock:
            bucket = self._buckets.get(language) or LanguageStats()
            self._buckets[language] = bucket.add(
                watch_seconds=watch_seconds,
                lines=lines,
                doc_count=doc_count,
                media_count=media_count,
                item_id=item_id,
            )
        return True

    def snapshot(self) -> Mapping[str, LanguageStats]:
        """Return a read-only copy of the current buckets."""
        with self._lock:
            return MappingProxyType(dict(self._buckets))

    def totals(self) -> StatsTotals:
        """Sum every bucket into a single record."""
        snapshot = self.snapshot()
        return StatsTotals(
            watch_seconds=sum(s.watch_seconds for s in snapshot.values()),
            lines=sum(s.lines for s in snapshot.values()),
            doc_count=sum(s.doc_count for s in snapshot.values()),
            media_count=sum(s.media_count for s in snapshot.values()),
        )

    def reset(self) -> None:
        """Clear the buckets and the paired seen-set together."""
        with self._lock:
            self._buckets.clear()
            self.seen._clear_locked()

    def __len__(self) -> int:
        with self._lock:
            return len(self._buckets)
