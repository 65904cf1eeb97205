"""Relevance-ranked documentation retrieval for chat assistants.

Main components:
- CorpusLoader / CorpusCache: fetch, parse and cache the documentation export
- IndexBuilder: synonym-aware Whoosh index over title, headings, content, url
- QueryAnalyzer: term filtering and intent classification
- RelevanceScorer / ResultCurator: heuristic ranking and diversity curation
- SearchEngine: the ``search_content`` entry point used by the chat endpoint
"""

from .__version__ import __version__
from .corpus import CorpusLoader, Document, parse_export
from .exceptions import (
    ConfigurationError,
    CorpusFetchError,
    DocsSearchError,
    IndexBuildError,
    QueryExecutionError,
)
from .search import (
    CorpusCache,
    IndexBuilder,
    QueryAnalyzer,
    RelevanceScorer,
    ResultCurator,
    SearchEngine,
    SearchResult,
    build_prompt_context,
    search_content,
)

__all__ = [
    "__version__",
    "ConfigurationError",
    "CorpusCache",
    "CorpusFetchError",
    "CorpusLoader",
    "DocsSearchError",
    "Document",
    "IndexBuildError",
    "IndexBuilder",
    "QueryAnalyzer",
    "QueryExecutionError",
    "RelevanceScorer",
    "ResultCurator",
    "SearchEngine",
    "SearchResult",
    "build_prompt_context",
    "parse_export",
    "search_content",
]
