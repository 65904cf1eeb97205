"""Error taxonomy for the documentation search pipeline.

Every error here is recovered inside the pipeline: the stage that fails
raises, the stage that owns the fallback catches. Nothing propagates out of
``SearchEngine.search_content``.
"""

from typing import Any, Dict, Optional


class DocsSearchError(Exception):
    """Base error with a user-facing message and optional details."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """Initialize error with message and optional details."""
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return formatted error message with details if available."""
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to a loggable dictionary."""
        error_dict: Dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
        }
        if self.details:
            error_dict["details"] = self.details
        return error_dict


class ConfigurationError(DocsSearchError):
    """Configuration value is missing or inconsistent."""


class CorpusFetchError(DocsSearchError):
    """The corpus export could not be fetched or decoded."""

    def __init__(
        self,
        message: str,
        url: str,
        status: Optional[int] = None,
    ):
        """Initialize fetch error.

        Args:
            message: What went wrong
            url: Export URL that was requested
            status: HTTP status code, when a response was received
        """
        details: Dict[str, Any] = {"url": url, "recoverable": True}
        if status is not None:
            details["status"] = status
        super().__init__(message, details)
        self.url = url
        self.status = status


class IndexBuildError(DocsSearchError):
    """Constructing the inverted index failed."""

    def __init__(self, message: str, document_count: int = 0):
        super().__init__(message, {"document_count": document_count})
        self.document_count = document_count


class QueryExecutionError(DocsSearchError):
    """The index rejected or failed to execute a constructed query."""

    def __init__(self, message: str, tier: str, query: str):
        """Initialize query execution error.

        Args:
            message: Underlying parser or searcher failure
            tier: Retrieval tier that failed ("advanced", "simple", "term")
            query: Query string handed to the index
        """
        super().__init__(message, {"tier": tier, "query": query})
        self.tier = tier
        self.query = query
