"""Search pipeline: index, analysis, scoring, curation and context."""

from .context import PromptContext, build_prompt_context
from .corpus_cache import CorpusCache, CorpusEpoch
from .index_manager import DocumentIndex, IndexBuilder
from .query_processor import IntentType, QueryAnalysis, QueryAnalyzer
from .relevance import RelevanceScorer, ScoreBreakdown, ScoredCandidate
from .result_processor import ResultCurator, url_section
from .search_engine import SearchEngine, SearchResult, search_content
from .synonyms import SYNONYMS, expand, expand_text

__all__ = [
    "CorpusCache",
    "CorpusEpoch",
    "DocumentIndex",
    "IndexBuilder",
    "IntentType",
    "PromptContext",
    "QueryAnalysis",
    "QueryAnalyzer",
    "RelevanceScorer",
    "ResultCurator",
    "SYNONYMS",
    "ScoreBreakdown",
    "ScoredCandidate",
    "SearchEngine",
    "SearchResult",
    "build_prompt_context",
    "expand",
    "expand_text",
    "search_content",
]
