"""Epoch-scoped cache for the corpus and its index.

The corpus and index are always rebuilt and published together so index
references can never drift from the documents they point to. Rebuilds are
single-flight: the first request that notices staleness rebuilds, while
concurrent requests keep serving the previous epoch instead of waiting.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..config.logging import get_logger, log_performance
from ..corpus.loader import CorpusLoader
from ..corpus.models import Document
from ..exceptions import CorpusFetchError, IndexBuildError
from .index_manager import DocumentIndex, IndexBuilder

logger = get_logger(__name__)


@dataclass(frozen=True)
class CorpusEpoch:
    """One published corpus/index pair."""

    documents: Tuple[Document, ...]
    index: Optional[DocumentIndex]
    built_at: float
    generation: int
    by_id: Dict[str, Document] = field(default_factory=dict, compare=False)

    @classmethod
    def create(
        cls,
        documents: List[Document],
        index: Optional[DocumentIndex],
        built_at: float,
        generation: int,
    ) -> "CorpusEpoch":
        return cls(
            documents=tuple(documents),
            index=index,
            built_at=built_at,
            generation=generation,
            by_id={document.id: document for document in documents},
        )

    @property
    def index_available(self) -> bool:
        return self.index is not None


class CorpusCache:
    """Owns the current corpus epoch and rebuilds it after the TTL."""

    def __init__(
        self,
        loader: CorpusLoader,
        builder: Optional[IndexBuilder] = None,
        ttl: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize the cache.

        Args:
            loader: Fetches and parses the export
            builder: Builds the index for each epoch
            ttl: Epoch lifetime in seconds; defaults to the loader's config
            clock: Wall-clock source, injectable for tests
        """
        self.loader = loader
        self.builder = builder or IndexBuilder()
        self.ttl = ttl if ttl is not None else loader.config.cache_ttl
        self._clock = clock
        self._epoch: Optional[CorpusEpoch] = None
        self._generation = 0
        self._lock: Optional[asyncio.Lock] = None

    @property
    def epoch(self) -> Optional[CorpusEpoch]:
        """The currently published epoch, if any."""
        return self._epoch

    def _rebuild_lock(self) -> asyncio.Lock:
        # bound to the running loop on first use
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    def is_stale(self, epoch: Optional[CorpusEpoch], now: float) -> bool:
        return epoch is None or now - epoch.built_at >= self.ttl

    async def get_or_rebuild(self, now: Optional[float] = None) -> CorpusEpoch:
        """Return a fresh epoch, rebuilding at most once across concurrent callers."""
        now = self._clock() if now is None else now
        epoch = self._epoch
        if not self.is_stale(epoch, now):
            return epoch

        lock = self._rebuild_lock()
        if lock.locked() and epoch is not None:
            logger.debug("Rebuild in progress, serving stale epoch", generation=epoch.generation)
            return epoch

        async with lock:
            epoch = self._epoch
            if not self.is_stale(epoch, now):
                return epoch
            return await self._rebuild(now)

    async def load(self, now: Optional[float] = None) -> List[Document]:
        """Documents of the current epoch; no refetch within the TTL."""
        epoch = await self.get_or_rebuild(now)
        return list(epoch.documents)

    def invalidate(self) -> None:
        """Mark the current epoch stale so the next request rebuilds."""
        if self._epoch is not None:
            self._epoch = CorpusEpoch.create(
                list(self._epoch.documents),
                self._epoch.index,
                built_at=float("-inf"),
                generation=self._epoch.generation,
            )

    def stats(self) -> Dict[str, Any]:
        epoch = self._epoch
        if epoch is None:
            return {"generation": 0, "documents": 0, "index_available": False, "age_seconds": None}
        return {
            "generation": epoch.generation,
            "documents": len(epoch.documents),
            "index_available": epoch.index_available,
            "age_seconds": max(self._clock() - epoch.built_at, 0.0),
        }

    async def _rebuild(self, now: float) -> CorpusEpoch:
        start = time.perf_counter()
        previous = self._epoch
        try:
            documents = await self.loader.fetch_documents()
        except CorpusFetchError as e:
            if previous is not None:
                logger.error(
                    "Corpus fetch failed, serving previous epoch",
                    generation=previous.generation,
                    **e.to_dict(),
                )
                return previous
            logger.error("Corpus fetch failed, no epoch to serve", **e.to_dict())
            return CorpusEpoch.create([], None, built_at=now, generation=0)

        index: Optional[DocumentIndex]
        try:
            index = await asyncio.to_thread(self.builder.build, documents)
        except IndexBuildError as e:
            logger.error("Index build failed, falling back to unindexed scoring", **e.to_dict())
            index = None

        self._generation += 1
        epoch = CorpusEpoch.create(documents, index, built_at=now, generation=self._generation)
        self._epoch = epoch

        log_performance(
            logger,
            "corpus_rebuild",
            (time.perf_counter() - start) * 1000,
            generation=epoch.generation,
            documents=len(documents),
            index_available=epoch.index_available,
        )
        return epoch
