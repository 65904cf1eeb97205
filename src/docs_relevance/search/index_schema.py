"""Search index schema definitions.

Four weighted text fields are indexed per document; title and heading
matches dominate content and url matches.
"""

from typing import Any, Dict, Optional

from whoosh.analysis import StemmingAnalyzer
from whoosh.fields import ID, TEXT, Schema

from ..config.settings import IndexFieldWeights
from ..corpus.models import Document
from .synonyms import expand_text

# Stop words removed, Porter stemming applied
DOCUMENT_ANALYZER = StemmingAnalyzer(minsize=2)

SEARCH_FIELDS = ("title", "headings", "content", "url")


class IndexSchema:
    """Index schema configuration and field definitions."""

    FIELD_WEIGHTS = {
        "title": 15.0,
        "headings": 10.0,
        "content": 5.0,
        "url": 2.0,
    }

    @classmethod
    def get_schema(cls, weights: Optional[IndexFieldWeights] = None) -> Schema:
        """Create the document schema.

        Args:
            weights: Field boosts; defaults to ``FIELD_WEIGHTS``

        Returns:
            Schema: Whoosh schema for documentation sections
        """
        boosts = weights.model_dump() if weights is not None else cls.FIELD_WEIGHTS
        return Schema(
            id=ID(stored=True, unique=True),
            title=TEXT(analyzer=DOCUMENT_ANALYZER, field_boost=boosts["title"]),
            headings=TEXT(analyzer=DOCUMENT_ANALYZER, field_boost=boosts["headings"]),
            content=TEXT(analyzer=DOCUMENT_ANALYZER, field_boost=boosts["content"]),
            url=TEXT(analyzer=DOCUMENT_ANALYZER, field_boost=boosts["url"]),
        )


def create_search_schema(weights: Optional[IndexFieldWeights] = None) -> Schema:
    """Factory function for the document schema."""
    return IndexSchema.get_schema(weights)


def get_field_weights() -> Dict[str, float]:
    """Return a copy of the default field boosts."""
    return IndexSchema.FIELD_WEIGHTS.copy()


def convert_document_to_index_fields(document: Document) -> Dict[str, Any]:
    """Project a document onto the index fields.

    Title and content are synonym-expanded; the stored document itself is
    left untouched so scoring heuristics see the original text.
    """
    return {
        "id": document.id,
        "title": expand_text(document.title),
        "headings": " ".join(document.headings),
        "content": expand_text(document.content),
        "url": document.url,
    }
