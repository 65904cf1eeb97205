"""Result curation: thresholding and section diversity.

After scoring, candidates are sorted best-first and anything below a
dynamic floor (a share of the top score, never under a fixed minimum) is
dropped. The top slice is admitted as-is; beyond it, each url section may
contribute only a bounded number of results so one heavily documented
area cannot crowd out the rest.
"""

from collections import Counter
from typing import List, Optional

from ..config.settings import CurationConfig
from .relevance import ScoredCandidate


def url_section(url: str) -> str:
    """First path segment of a url path (``docs`` for ``/docs/x/y``)."""
    parts = url.split("/")
    return parts[1] if len(parts) > 1 else ""


class ResultCurator:
    """Filters, orders and diversifies scored candidates."""

    def __init__(self, config: Optional[CurationConfig] = None):
        self.config = config or CurationConfig()

    def threshold(self, top_score: float) -> float:
        return max(top_score * self.config.threshold_ratio, self.config.min_threshold)

    def curate(self, scored: List[ScoredCandidate]) -> List[ScoredCandidate]:
        """Return the final result list, best-first.

        The sort is stable, so equal scores keep their candidate order.
        """
        ordered = sorted(scored, key=lambda c: c.final_score, reverse=True)
        if not ordered:
            return []

        floor = self.threshold(ordered[0].final_score)
        eligible = [c for c in ordered if c.final_score >= floor]

        admitted: List[ScoredCandidate] = []
        per_section: Counter = Counter()
        for candidate in eligible:
            if len(admitted) >= self.config.max_results:
                break
            section = url_section(candidate.url)
            if (
                len(admitted) < self.config.guaranteed_slots
                or per_section[section] < self.config.max_per_section
            ):
                admitted.append(candidate)
                per_section[section] += 1

        return admitted
