"""In-memory inverted index over the documentation corpus.

This module provides:
- IndexBuilder: builds one Whoosh index per corpus epoch
- DocumentIndex: executes query strings against a built index

Indexes live in RAM only and are replaced wholesale on every rebuild.
"""

import time
from typing import List, Optional, Sequence, Tuple

from whoosh import scoring
from whoosh.filedb.filestore import RamStorage
from whoosh.index import Index
from whoosh.qparser import MultifieldParser, OrGroup, PlusMinusPlugin

from ..config.logging import get_logger, log_performance
from ..config.settings import IndexFieldWeights
from ..corpus.models import Document
from ..exceptions import IndexBuildError, QueryExecutionError
from .index_schema import (
    SEARCH_FIELDS,
    convert_document_to_index_fields,
    create_search_schema,
)

logger = get_logger(__name__)


class DocumentIndex:
    """A built index, queried with the multi-field query syntax.

    Supported syntax: ``field:term`` clauses, ``term*`` prefixes and
    ``+term`` for terms a match must contain. Unqualified terms are searched
    in every field and clauses are OR-ed together.
    """

    def __init__(self, index: Index, document_count: int):
        self._index = index
        self.document_count = document_count
        self._parser = MultifieldParser(
            list(SEARCH_FIELDS), index.schema, group=OrGroup
        )
        self._parser.add_plugin(PlusMinusPlugin())

    def search(self, query_string: str, tier: str = "advanced") -> List[Tuple[str, float]]:
        """Run a query and return ``(document_id, score)`` best-first.

        Args:
            query_string: Query in the multi-field syntax
            tier: Retrieval tier name, recorded on failure

        Raises:
            QueryExecutionError: If the query cannot be parsed or executed
        """
        try:
            parsed = self._parser.parse(query_string)
            with self._index.searcher(weighting=scoring.BM25F()) as searcher:
                results = searcher.search(parsed, limit=None)
                return [(hit["id"], float(hit.score)) for hit in results]
        except Exception as e:
            raise QueryExecutionError(str(e), tier=tier, query=query_string) from e

    def contains_term(self, term: str) -> bool:
        """Whether the analyzed form of ``term`` occurs in any field."""
        analyzer = self._index.schema["content"].analyzer
        tokens = [token.text for token in analyzer(term)]
        if not tokens:
            return False
        with self._index.searcher() as searcher:
            return any(
                searcher.doc_frequency(field_name, token) > 0
                for field_name in SEARCH_FIELDS
                for token in tokens
            )

    def contains_together(self, terms: List[str]) -> bool:
        """Whether at least one document contains every term in ``terms``."""
        query_string = " ".join(f"+{term}" for term in terms)
        try:
            parsed = self._parser.parse(query_string)
            with self._index.searcher() as searcher:
                return not searcher.search(parsed, limit=1).is_empty()
        except Exception as e:
            raise QueryExecutionError(str(e), tier="advanced", query=query_string) from e


class IndexBuilder:
    """Builds the synonym-enriched inverted index for one corpus epoch."""

    def __init__(self, weights: Optional[IndexFieldWeights] = None):
        self.weights = weights or IndexFieldWeights()

    def build(self, documents: Sequence[Document]) -> DocumentIndex:
        """Index every document.

        Raises:
            IndexBuildError: If any part of index construction fails
        """
        start = time.perf_counter()
        try:
            index = RamStorage().create_index(create_search_schema(self.weights))
            writer = index.writer()
            try:
                for document in documents:
                    writer.add_document(**convert_document_to_index_fields(document))
            except Exception:
                writer.cancel()
                raise
            writer.commit()
        except Exception as e:
            raise IndexBuildError(
                f"Failed to build search index: {e}", document_count=len(documents)
            ) from e

        log_performance(
            logger,
            "index_build",
            (time.perf_counter() - start) * 1000,
            documents=len(documents),
        )
        return DocumentIndex(index, len(documents))
