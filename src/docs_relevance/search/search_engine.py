"""High-level search interface used by the chat endpoint.

This module provides the SearchEngine class which ties the pipeline
together: query analysis, candidate retrieval through the tiered index
fallback, heuristic scoring and diversity curation.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ..config.logging import get_logger, log_performance
from ..config.settings import Settings, get_settings
from ..corpus.loader import CorpusLoader, Fetcher
from ..corpus.models import Document
from ..exceptions import QueryExecutionError
from .corpus_cache import CorpusCache, CorpusEpoch
from .index_manager import DocumentIndex, IndexBuilder
from .query_processor import (
    QueryAnalysis,
    QueryAnalyzer,
    build_advanced_query,
    build_simple_query,
    per_term_queries,
)
from .relevance import RelevanceScorer, ScoreBreakdown, ScoredCandidate
from .result_processor import ResultCurator

logger = get_logger(__name__)


@dataclass
class SearchResult:
    """One ranked documentation section."""

    id: str
    title: str
    url: str
    content: str
    headings: List[str] = field(default_factory=list)
    score: float = 0.0

    @classmethod
    def from_candidate(cls, candidate: ScoredCandidate) -> "SearchResult":
        doc = candidate.document
        return cls(
            id=doc.id,
            title=doc.title,
            url=doc.url,
            content=doc.content,
            headings=list(doc.headings),
            score=candidate.final_score,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "content": self.content,
            "headings": list(self.headings),
            "score": self.score,
        }


class SearchEngine:
    """Relevance-ranked retrieval over the cached documentation corpus."""

    def __init__(
        self,
        cache: CorpusCache,
        analyzer: Optional[QueryAnalyzer] = None,
        scorer: Optional[RelevanceScorer] = None,
        curator: Optional[ResultCurator] = None,
    ):
        """Initialize the search engine.

        Args:
            cache: Shared corpus/index cache
            analyzer: Query analyzer, defaults to the built-in vocabulary
            scorer: Relevance scorer, defaults to the standard weights
            curator: Result curator, defaults to the standard limits
        """
        self.cache = cache
        self.analyzer = analyzer or QueryAnalyzer()
        self.scorer = scorer or RelevanceScorer()
        self.curator = curator or ResultCurator()

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        fetcher: Optional[Fetcher] = None,
    ) -> "SearchEngine":
        """Build an engine and its cache from application settings."""
        settings = settings or get_settings()
        loader = CorpusLoader(settings.corpus, fetcher=fetcher)
        cache = CorpusCache(
            loader,
            IndexBuilder(settings.search.field_weights),
            ttl=settings.corpus.cache_ttl,
        )
        return cls(
            cache,
            scorer=RelevanceScorer(settings.search.scoring),
            curator=ResultCurator(settings.search.curation),
        )

    async def search_content(self, query: str) -> List[SearchResult]:
        """Return ranked sections for ``query``, best-first.

        Never raises: failures anywhere in the pipeline degrade to an empty
        list, which callers treat as "no relevant documentation".
        """
        start = time.perf_counter()
        try:
            analysis = self.analyzer.analyze(query)
            if analysis.is_empty:
                return []

            epoch = await self.cache.get_or_rebuild()
            curated = self._rank(analysis, epoch)
        except Exception as e:
            logger.error("Search failed", query=query, error=str(e), exc_info=True)
            return []

        results = [SearchResult.from_candidate(c) for c in curated]
        log_performance(
            logger,
            "search_content",
            (time.perf_counter() - start) * 1000,
            query=analysis.query,
            intent=analysis.intent_type.value,
            results=len(results),
        )
        return results

    async def explain(self, query: str, limit: Optional[int] = None) -> List[ScoreBreakdown]:
        """Score breakdowns for the curated results of ``query``."""
        analysis = self.analyzer.analyze(query)
        if analysis.is_empty:
            return []
        epoch = await self.cache.get_or_rebuild()
        curated = self._rank(analysis, epoch)
        if limit is not None:
            curated = curated[:limit]
        return [self.scorer.explain(candidate, analysis) for candidate in curated]

    def analyze(self, query: str) -> QueryAnalysis:
        return self.analyzer.analyze(query)

    def _rank(self, analysis: QueryAnalysis, epoch: CorpusEpoch) -> List[ScoredCandidate]:
        if not epoch.documents:
            return []
        candidates = self._candidates(analysis, epoch)
        if not candidates:
            return []
        self.scorer.score_all(candidates, analysis)
        return self.curator.curate(candidates)

    def _candidates(
        self, analysis: QueryAnalysis, epoch: CorpusEpoch
    ) -> List[ScoredCandidate]:
        if epoch.index is None:
            logger.warning(
                "Index unavailable, scoring full corpus",
                generation=epoch.generation,
                documents=len(epoch.documents),
            )
            return [ScoredCandidate(document) for document in epoch.documents]

        hits = self._retrieve(analysis, epoch.index)
        candidates: List[ScoredCandidate] = []
        for doc_id, index_score in hits:
            document: Optional[Document] = epoch.by_id.get(doc_id)
            if document is not None:
                candidates.append(ScoredCandidate(document, index_score=index_score))
        return candidates

    def _retrieve(
        self, analysis: QueryAnalysis, index: DocumentIndex
    ) -> List[Tuple[str, float]]:
        hits = self._try_advanced(analysis, index)
        if hits is None:
            hits = self._try_simple(analysis, index)
        if not hits:
            hits = self._try_per_term(analysis, index)
        return hits

    def _try_advanced(
        self, analysis: QueryAnalysis, index: DocumentIndex
    ) -> Optional[List[Tuple[str, float]]]:
        """Weighted multi-field query; ``None`` when the index rejects it."""
        try:
            query_string = build_advanced_query(analysis, index)
            return index.search(query_string, tier="advanced")
        except QueryExecutionError as e:
            logger.warning("Advanced query failed, trying simple query", **e.to_dict())
            return None

    def _try_simple(
        self, analysis: QueryAnalysis, index: DocumentIndex
    ) -> List[Tuple[str, float]]:
        query_string = build_simple_query(analysis)
        if not query_string:
            return []
        try:
            return index.search(query_string, tier="simple")
        except QueryExecutionError as e:
            logger.warning("Simple query failed, trying per-term queries", **e.to_dict())
            return []

    def _try_per_term(
        self, analysis: QueryAnalysis, index: DocumentIndex
    ) -> List[Tuple[str, float]]:
        """Union of single-term queries, first score seen per document wins."""
        seen: Dict[str, float] = {}
        for term in per_term_queries(analysis):
            try:
                hits = index.search(term, tier="term")
            except QueryExecutionError as e:
                logger.debug("Term query failed", **e.to_dict())
                continue
            for doc_id, score in hits:
                seen.setdefault(doc_id, score)
        return list(seen.items())


_default_engine: Optional[SearchEngine] = None


def get_search_engine() -> SearchEngine:
    """Process-wide engine built from the current settings."""
    global _default_engine
    if _default_engine is None:
        _default_engine = SearchEngine.from_settings()
    return _default_engine


def reset_search_engine() -> None:
    """Drop the process-wide engine so the next call rebuilds it."""
    global _default_engine
    _default_engine = None


async def search_content(query: str) -> List[SearchResult]:
    """Search the documentation corpus with the process-wide engine."""
    return await get_search_engine().search_content(query)
