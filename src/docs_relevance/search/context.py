"""Packing ranked results into assistant prompt context."""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .search_engine import SearchResult

DEFAULT_PRIMARY_LIMIT = 12

NO_MATCH_CONTEXT = (
    "\n\n=== DOCUMENTATION ===\n"
    "No specific documentation sections matched this query.\n"
    "Provide general guidance and suggest relevant documentation sections if applicable.\n"
    "=== END DOCUMENTATION ===\n"
)


@dataclass
class PromptContext:
    """Prompt text plus the results it was built from."""

    text: str
    primary: List[SearchResult] = field(default_factory=list)
    supplementary: List[SearchResult] = field(default_factory=list)

    @property
    def has_matches(self) -> bool:
        return bool(self.primary)


def absolute_url(url: str, site_url: Optional[str] = None) -> str:
    if not site_url or url.startswith(("http://", "https://")):
        return url
    return site_url.rstrip("/") + "/" + url.lstrip("/")


def format_section(result: SearchResult, site_url: Optional[str] = None) -> str:
    return f"# {result.title}\nURL: {absolute_url(result.url, site_url)}\n\n{result.content}"


def build_prompt_context(
    results: Sequence[SearchResult],
    primary_limit: int = DEFAULT_PRIMARY_LIMIT,
    site_url: Optional[str] = None,
) -> PromptContext:
    """Render ranked results as a documentation block for the prompt.

    The first ``primary_limit`` results are inlined in full; the rest are
    listed as links only.

    Args:
        results: Ranked results, best-first
        primary_limit: Number of results inlined as full sections
        site_url: Prefix that turns result paths into absolute links

    Returns:
        PromptContext with the rendered text and the primary/supplementary split
    """
    if not results:
        return PromptContext(text=NO_MATCH_CONTEXT)

    primary = list(results[:primary_limit])
    supplementary = list(results[primary_limit:])

    parts = [
        "\n\n=== RELEVANT DOCUMENTATION ===\n\n",
        "Here are the most relevant sections from the documentation:\n\n",
        "\n\n---\n\n".join(format_section(r, site_url) for r in primary),
    ]
    if supplementary:
        links = "\n".join(
            f"- {r.title}: {absolute_url(r.url, site_url)}" for r in supplementary
        )
        parts.append(f"\n\nSupplementary links:\n{links}")
    parts.append("\n\n=== END DOCUMENTATION ===\n")

    return PromptContext(
        text="".join(parts), primary=primary, supplementary=supplementary
    )
