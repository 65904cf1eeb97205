"""Parser for the flat documentation export.

The export is a sequence of blank-line-delimited blocks. Within a block,
lines are recognised by prefix and may appear in any order::

    # Deploy an L1
    URL: /docs/tooling/create-deploy-avalanche-l1
    ## Prerequisites
    ...body text...

Blocks without both a title and a url are navigation or boilerplate and
are dropped without error.
"""

import re
from typing import Iterator, List, Optional

from .models import Document

TITLE_PREFIX = "# "
URL_PREFIX = "URL: "
HEADING_PREFIX = "##"

_BLOCK_SEPARATOR = re.compile(r"\n\s*\n")
_HEADING_MARKER = re.compile(r"^##+\s*")


def iter_blocks(text: str) -> Iterator[str]:
    """Yield non-empty blocks of the export in order."""
    normalized = text.replace("\r\n", "\n")
    for block in _BLOCK_SEPARATOR.split(normalized):
        if block.strip():
            yield block


def parse_block(block: str, doc_id: str) -> Optional[Document]:
    """Parse a single block, returning None when title or url is missing."""
    title = ""
    url = ""
    headings: List[str] = []

    for line in block.split("\n"):
        if line.startswith(TITLE_PREFIX):
            if not title:
                title = line[len(TITLE_PREFIX):].strip()
        elif line.startswith(URL_PREFIX):
            if not url:
                url = line[len(URL_PREFIX):].strip()
        elif line.startswith(HEADING_PREFIX):
            heading = _HEADING_MARKER.sub("", line).strip()
            if heading:
                headings.append(heading)

    if not title or not url:
        return None

    return Document(
        id=doc_id,
        title=title,
        url=url,
        content=block,
        headings=tuple(headings),
    )


def parse_export(text: str) -> List[Document]:
    """Parse the full export into documents.

    Ids are the ordinal of each block among all non-empty blocks, so a
    dropped block leaves a gap rather than shifting later ids.
    """
    documents = []
    for ordinal, block in enumerate(iter_blocks(text)):
        document = parse_block(block, str(ordinal))
        if document is not None:
            documents.append(document)
    return documents
