"""Query analysis for documentation search.

This module turns a raw chat question into:
- raw and stop-word-filtered terms
- a coarse intent (definition, tutorial, troubleshooting, ...)
- the main subject of the question, when one can be extracted
- importance keywords that bias the index query

It also renders the query strings used by the three retrieval tiers.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, List, Optional, Pattern, Protocol, Tuple

from .index_schema import SEARCH_FIELDS


class IntentType(str, Enum):
    """Coarse classification of what the user is asking for."""

    DEFINITION = "definition"
    TUTORIAL = "tutorial"
    TROUBLESHOOTING = "troubleshooting"
    FEATURE_CHECK = "feature-check"
    COMPARISON = "comparison"
    REQUIREMENTS = "requirements"
    FAUCET = "faucet"
    GENERAL = "general"


STOP_WORDS: FrozenSet[str] = frozenset(
    {
        "a", "an", "the", "is", "are", "was", "were", "be", "being", "been",
        "and", "or", "but", "if", "of", "at", "by", "for", "with", "about",
        "to", "in", "on", "what", "when", "where", "how", "which", "who",
        "whom", "why",
    }
)

IMPORTANT_KEYWORDS: FrozenSet[str] = frozenset(
    {
        "deploy", "create", "build", "install", "setup", "configure", "start",
        "avalanche", "subnet", "chain", "contract", "token", "wallet", "node",
        "error", "issue", "problem", "help", "how", "what", "why", "when",
        "tutorial", "guide", "example", "documentation",
        "l1", "validator", "stake", "delegate", "teleporter", "icm", "ictt",
        "evm", "rpc", "api", "endpoint", "network", "testnet", "mainnet",
        "bridge", "cross-chain", "interchain", "message", "transfer",
        "precompile", "native", "minter", "fee", "reward", "warp",
        "avacloud", "cloud", "service", "integration", "tool", "platform",
        "monitor", "analytics", "indexer", "oracle", "sdk", "framework",
        "infrastructure", "provider", "explorer", "audit", "security",
        "hardware", "requirements", "system", "cpu", "ram", "memory", "storage",
        "disk", "ssd", "specifications", "minimum", "recommended", "performance",
        "faucet", "avax", "fuji", "test", "tokens", "fund", "funding", "gas",
    }
)

# Importance keywords that bias the index query as mandatory-if-present
REQUIRED_KEYWORDS: FrozenSet[str] = frozenset(
    {"deploy", "create", "error", "tutorial", "guide", "l1", "validator", "icm", "ictt"}
)

_UNSAFE_CHARS = re.compile(r"[^\w-]")


def sanitize_term(term: str) -> str:
    """Strip query-syntax characters, keeping word characters and inner hyphens."""
    return _UNSAFE_CHARS.sub("", term).strip("-")


@dataclass(frozen=True)
class IntentRule:
    """One intent pattern.

    The subject comes from ``subject_group`` of ``pattern`` (or of
    ``subject_pattern`` when given), or is ``fixed_subject``. A rule that
    yields no subject leaves the previous one in place.
    """

    name: str
    pattern: Pattern[str]
    intent: IntentType
    subject_group: Optional[int] = None
    subject_pattern: Optional[Pattern[str]] = None
    fixed_subject: Optional[str] = None

    def subject_for(self, query: str, match: "re.Match[str]") -> Optional[str]:
        if self.fixed_subject is not None:
            return self.fixed_subject
        if self.subject_group is None:
            return None
        source = match
        if self.subject_pattern is not None:
            source = self.subject_pattern.search(query)
            if source is None:
                return None
        subject = source.group(self.subject_group)
        if subject is None or not subject.strip():
            return None
        return subject.strip()


# Evaluated in order; every matching rule overwrites the intent, so the
# last match wins.
INTENT_RULES: Tuple[IntentRule, ...] = (
    IntentRule(
        "what_is",
        re.compile(r"what\s+is\s+(.+)"),
        IntentType.DEFINITION,
        subject_group=1,
    ),
    IntentRule(
        "how_to",
        re.compile(r"how\s+(?:to|do\s+i)\s+(.+)"),
        IntentType.TUTORIAL,
        subject_group=1,
    ),
    IntentRule(
        "tutorial_suffix",
        re.compile(r"(.+?)\s+(?:tutorial|guide|example)"),
        IntentType.TUTORIAL,
        subject_group=1,
    ),
    IntentRule(
        "troubleshooting",
        re.compile(r"error|issue|problem|fix|troubleshoot"),
        IntentType.TROUBLESHOOTING,
    ),
    IntentRule(
        "feature_check",
        re.compile(
            r"(?:does|can|support|have|include)\s+(.+?)\s+"
            r"(?:support|have|include|work|compatible)"
        ),
        IntentType.FEATURE_CHECK,
        subject_group=1,
    ),
    IntentRule(
        "comparison",
        re.compile(r"difference|compare|versus|vs\.|between"),
        IntentType.COMPARISON,
    ),
    IntentRule(
        "requirements",
        re.compile(r"requirement|specification|minimum|hardware|system.*requirement"),
        IntentType.REQUIREMENTS,
        subject_group=1,
        subject_pattern=re.compile(
            r"(?:hardware|system|software|minimum|recommended)\s*"
            r"requirements?\s*(?:for\s+)?(.+)?"
        ),
    ),
    IntentRule(
        "faucet",
        re.compile(
            r"faucet|test.*(?:avax|tokens?)|get.*(?:avax|tokens?)|fund|funding"
            r"|gas.*money|fuji.*(?:avax|tokens?)"
        ),
        IntentType.FAUCET,
        fixed_subject="faucet",
    ),
)


@dataclass
class QueryAnalysis:
    """Analyzed form of one incoming query."""

    query: str
    raw_terms: List[str]
    filtered_terms: List[str]
    intent_type: IntentType = IntentType.GENERAL
    main_subject: Optional[str] = None
    important_terms: List[str] = field(default_factory=list)
    required_terms: List[str] = field(default_factory=list)
    matched_rules: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.filtered_terms

    def to_dict(self) -> dict:
        return {
            "query": self.query,
            "raw_terms": list(self.raw_terms),
            "filtered_terms": list(self.filtered_terms),
            "intent_type": self.intent_type.value,
            "main_subject": self.main_subject,
            "important_terms": list(self.important_terms),
            "required_terms": list(self.required_terms),
            "matched_rules": list(self.matched_rules),
        }


class TermLookup(Protocol):
    def contains_term(self, term: str) -> bool: ...

    def contains_together(self, terms: List[str]) -> bool: ...


class QueryAnalyzer:
    """Tokenizes and classifies raw queries."""

    def __init__(
        self,
        stop_words: FrozenSet[str] = STOP_WORDS,
        important_keywords: FrozenSet[str] = IMPORTANT_KEYWORDS,
        required_keywords: FrozenSet[str] = REQUIRED_KEYWORDS,
        intent_rules: Tuple[IntentRule, ...] = INTENT_RULES,
    ):
        self.stop_words = stop_words
        self.important_keywords = important_keywords
        self.required_keywords = required_keywords
        self.intent_rules = intent_rules

    def analyze(self, raw_query: str) -> QueryAnalysis:
        """Analyze a raw query.

        Filtering never leaves an empty term list when the user typed
        anything: if every word is a stop word, the raw words are kept.
        """
        query = (raw_query or "").strip().lower()
        raw_terms = query.split()
        filtered = [term for term in raw_terms if term not in self.stop_words]
        terms = filtered or list(raw_terms)

        analysis = QueryAnalysis(query=query, raw_terms=raw_terms, filtered_terms=terms)
        if not terms:
            return analysis

        self._classify(analysis)
        analysis.important_terms = self._matching(terms, self.important_keywords)
        analysis.required_terms = self._matching(terms, self.required_keywords)
        return analysis

    def _classify(self, analysis: QueryAnalysis) -> None:
        for rule in self.intent_rules:
            match = rule.pattern.search(analysis.query)
            if match is None:
                continue
            analysis.intent_type = rule.intent
            analysis.matched_rules.append(rule.name)
            subject = rule.subject_for(analysis.query, match)
            if subject is not None:
                analysis.main_subject = subject

    def _matching(self, terms: List[str], keywords: FrozenSet[str]) -> List[str]:
        matched: List[str] = []
        for term in terms:
            clean = sanitize_term(term)
            if clean in keywords and clean not in matched:
                matched.append(clean)
        return matched


def build_advanced_query(
    analysis: QueryAnalysis, index: Optional[TermLookup] = None
) -> str:
    """Weighted multi-field query for the first retrieval tier.

    Each term is searched per field plus as a prefix. Required keywords
    are marked ``+`` only when the index contains them, and only when at
    least one document contains all of them together; otherwise they stay
    optional so they cannot zero out an otherwise good result set.
    """
    clauses: List[str] = []
    for term in analysis.filtered_terms:
        clean = sanitize_term(term)
        if not clean:
            continue
        clauses.extend(f"{field_name}:{clean}" for field_name in SEARCH_FIELDS)
        if len(clean) > 2:
            clauses.append(f"{clean}*")

    required = [
        term
        for term in analysis.required_terms
        if index is None or index.contains_term(term)
    ]
    if len(required) > 1 and index is not None and not index.contains_together(required):
        required = []
    clauses.extend(f"+{term}" for term in required)

    return " ".join(clauses)


def build_simple_query(analysis: QueryAnalysis) -> str:
    """Plain space-separated terms for the second retrieval tier."""
    terms = (sanitize_term(term) for term in analysis.filtered_terms)
    return " ".join(term for term in terms if term)


def per_term_queries(analysis: QueryAnalysis) -> List[str]:
    """Individual terms for the last retrieval tier."""
    queries: List[str] = []
    for term in analysis.filtered_terms:
        clean = sanitize_term(term)
        if len(clean) > 1 and clean not in queries:
            queries.append(clean)
    return queries
