"""Static domain vocabulary used to widen the match surface.

The table is applied at index-build time: any document whose title or
content mentions a key as a whole word gets the key's expansion terms
appended, so a query for "l1" still reaches a page that only says
"subnet". Changing the vocabulary requires a new deployment.
"""

import re
from types import MappingProxyType
from typing import Dict, Mapping, Pattern, Tuple

SYNONYMS: Mapping[str, Tuple[str, ...]] = MappingProxyType(
    {
        "l1": ("subnet", "layer1", "blockchain"),
        "subnet": ("l1", "layer1", "blockchain"),
        "icm": ("interchain messaging", "teleporter"),
        "ictt": ("interchain token transfer", "token bridge"),
        "avax": ("avalanche", "token"),
        "avalanche": ("avax",),
        "faucet": ("testnet tokens", "fuji avax"),
        "validator": ("node", "staking"),
        "node": ("validator", "server"),
        "deploy": ("create", "launch", "build"),
        "create": ("deploy", "make", "build"),
        "tutorial": ("guide", "howto", "example"),
        "guide": ("tutorial", "documentation"),
        "error": ("issue", "problem", "troubleshoot"),
        "bridge": ("transfer", "cross-chain", "ictt"),
    }
)

_KEY_PATTERNS: Dict[str, Pattern[str]] = {
    key: re.compile(rf"\b{re.escape(key)}\b", re.IGNORECASE) for key in SYNONYMS
}


def expand(term: str) -> Tuple[str, ...]:
    """Return the expansion terms for ``term`` (empty when unknown)."""
    return SYNONYMS.get(term.strip().lower(), ())


def matching_keys(text: str) -> Tuple[str, ...]:
    """Synonym keys that occur in ``text`` as whole words, in table order."""
    return tuple(key for key, pattern in _KEY_PATTERNS.items() if pattern.search(text))


def expand_text(text: str) -> str:
    """Append the expansions of every key mentioned in ``text``.

    Purely additive: the original text is returned unchanged at the front.
    """
    keys = matching_keys(text)
    if not keys:
        return text
    extra = " ".join(" ".join(SYNONYMS[key]) for key in keys)
    return f"{text} {extra}"
