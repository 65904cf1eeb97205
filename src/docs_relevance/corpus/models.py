"""Corpus data models."""

from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True)
class Document:
    """One documentation section parsed from the export.

    Ids are block ordinals and only stable within a single cache epoch;
    callers must not hold on to them across requests.
    """

    id: str
    title: str
    url: str
    content: str
    headings: Tuple[str, ...] = field(default_factory=tuple)
