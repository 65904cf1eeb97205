"""Documentation corpus: models, export parsing and loading."""

from .loader import CorpusLoader, http_fetch
from .models import Document
from .parser import parse_block, parse_export

__all__ = [
    "CorpusLoader",
    "Document",
    "http_fetch",
    "parse_block",
    "parse_export",
]
