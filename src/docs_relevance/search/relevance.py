"""Heuristic relevance scoring.

The index score only measures term overlap. The scorer layers domain
heuristics on top of it: where the terms matched (headings, url, title),
what kind of page it is (code-heavy, recently updated, in the section the
user named) and how long it is. Additive boosts are applied first; the
two length modifiers multiply the accumulated score last.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional

from ..config.settings import ScoringWeights
from ..corpus.models import Document
from .query_processor import IntentType, QueryAnalysis

_DEFINITION_PATTERN = re.compile(r"what\s+is\s+[a-z0-9]+", re.IGNORECASE)
_RECENCY_PATTERN = re.compile(
    r"\b(2024|2023|recent|latest|new|updated)\b", re.IGNORECASE
)
CODE_FENCE = "```"

# query keyword -> url prefix of the section it names
SECTION_KEYWORDS = (
    ("integration", "/integrations/"),
    ("academy", "/academy/"),
    ("guide", "/guides/"),
)


@dataclass
class ScoredCandidate:
    """A document under evaluation for one query."""

    document: Document
    index_score: float = 0.0
    final_score: float = 0.0

    @property
    def url(self) -> str:
        return self.document.url


@dataclass
class ScoreFactor:
    name: str
    kind: str  # "add" or "multiply"
    value: float


@dataclass
class ScoreBreakdown:
    """Final score with the factors that produced it, in application order."""

    document_id: str
    title: str
    url: str
    final_score: float
    factors: List[ScoreFactor] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "document_id": self.document_id,
            "title": self.title,
            "url": self.url,
            "final_score": self.final_score,
            "factors": [
                {"name": f.name, "kind": f.kind, "value": f.value} for f in self.factors
            ],
        }


class RelevanceScorer:
    """Combines index relevance with content heuristics."""

    def __init__(self, weights: Optional[ScoringWeights] = None):
        self.weights = weights or ScoringWeights()

    def score(self, candidate: ScoredCandidate, analysis: QueryAnalysis) -> float:
        """Compute the final score for one candidate."""
        return self._evaluate(candidate, analysis).final_score

    def explain(
        self, candidate: ScoredCandidate, analysis: QueryAnalysis
    ) -> ScoreBreakdown:
        """Compute the final score along with its factor breakdown."""
        return self._evaluate(candidate, analysis)

    def score_all(
        self, candidates: List[ScoredCandidate], analysis: QueryAnalysis
    ) -> List[ScoredCandidate]:
        """Set ``final_score`` on every candidate in place and return them."""
        for candidate in candidates:
            candidate.final_score = self.score(candidate, analysis)
        return candidates

    def _evaluate(
        self, candidate: ScoredCandidate, analysis: QueryAnalysis
    ) -> ScoreBreakdown:
        w = self.weights
        doc = candidate.document
        factors: List[ScoreFactor] = []

        def add(name: str, value: float) -> None:
            if value:
                factors.append(ScoreFactor(name, "add", value))

        score = candidate.index_score * w.index_multiplier
        add("index_relevance", score)

        title_lower = doc.title.lower()
        url_lower = doc.url.lower()
        headings_lower = " ".join(doc.headings).lower()
        terms = analysis.filtered_terms
        query = analysis.query

        heading_hits = sum(1 for term in terms if term in headings_lower)
        score += heading_hits * w.heading_term
        add("heading_terms", heading_hits * w.heading_term)

        url_hits = sum(1 for term in terms if term in url_lower)
        score += url_hits * w.url_term
        add("url_terms", url_hits * w.url_term)

        if title_lower == query:
            score += w.exact_title
            add("exact_title", w.exact_title)
        elif query in title_lower:
            score += w.partial_title
            add("partial_title", w.partial_title)

        if (
            analysis.intent_type is IntentType.DEFINITION
            and _DEFINITION_PATTERN.search(doc.content)
        ):
            score += w.definition
            add("definition", w.definition)

        code_blocks = doc.content.count(CODE_FENCE) // 2
        if code_blocks > 0:
            bonus = min(code_blocks * w.code_block, w.code_block_cap)
            score += bonus
            add("code_blocks", bonus)

        if _RECENCY_PATTERN.search(doc.content):
            score += w.recency
            add("recency", w.recency)

        for keyword, prefix in SECTION_KEYWORDS:
            if keyword in query and doc.url.startswith(prefix):
                score += w.section_match
                add(f"section_{keyword}", w.section_match)

        length = len(doc.content)
        if length < w.short_content_chars:
            score *= w.short_content_factor
            factors.append(ScoreFactor("short_content", "multiply", w.short_content_factor))
        if length > w.long_content_chars:
            score *= w.long_content_factor
            factors.append(ScoreFactor("long_content", "multiply", w.long_content_factor))

        return ScoreBreakdown(
            document_id=doc.id,
            title=doc.title,
            url=doc.url,
            final_score=score,
            factors=factors,
        )
