"""Pytest configuration and shared fixtures."""

import asyncio
from typing import List, Optional

import pytest

from docs_relevance.config.settings import CorpusConfig
from docs_relevance.corpus.loader import CorpusLoader
from docs_relevance.corpus.parser import parse_export
from docs_relevance.exceptions import CorpusFetchError
from docs_relevance.search.corpus_cache import CorpusCache
from docs_relevance.search.index_manager import IndexBuilder
from docs_relevance.search.search_engine import SearchEngine

FILLER = (
    "Each step lists the commands to run, the expected output and the most "
    "common mistakes operators make along the way. "
)


def _body(text: str, repeat: int = 6) -> str:
    return text + "\n" + FILLER * repeat


SAMPLE_EXPORT = "\n\n".join(
    [
        "# Avalanche Builder Hub\nWelcome to the documentation index.",
        (
            "# ICM Overview\nURL: /docs/cross-chain/icm/overview\n"
            "## Interchain Messaging basics\n"
            + _body(
                "ICM is Interchain Messaging for Avalanche. What is ICM? It lets "
                "one chain send verified messages to another chain. ICM messages "
                "are signed by validators and relayed between chains."
            )
        ),
        (
            "# Validator Setup\nURL: /docs/nodes/validator-setup\n"
            "## Staking requirements\n"
            + _body(
                "Run a node, stake AVAX and register as a validator. Later you "
                "may also want to relay icm traffic."
            )
        ),
        (
            "# Launching a Subnet\nURL: /docs/subnets/launch\n"
            "## Prerequisites\n## Launch on Fuji\n"
            + _body(
                "This guide walks through how to create a subnet on the Fuji "
                "testnet using the CLI.\n```bash\navalanche blockchain create mychain\n```"
            )
        ),
        (
            "# Fuji Faucet\nURL: /docs/tooling/faucet\n"
            + _body("Request test AVAX from the faucet to pay for gas on Fuji.")
        ),
        (
            "# Academy: Interchain Token Transfer\nURL: /academy/ictt\n"
            + _body("Learn how ICTT moves tokens between chains with a bridge.")
        ),
        "URL: /docs/orphan\nThis block has a url but no title.",
    ]
)


class FakeFetcher:
    """Async fetcher double that counts calls and can block or fail."""

    def __init__(self, text: str = SAMPLE_EXPORT, error: Optional[Exception] = None):
        self.text = text
        self.error = error
        self.calls: List[str] = []
        self.gate: Optional[asyncio.Event] = None

    async def __call__(self, url: str, timeout: float) -> str:
        self.calls.append(url)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.text


class FakeClock:
    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def sample_export() -> str:
    return SAMPLE_EXPORT


@pytest.fixture
def sample_documents():
    return parse_export(SAMPLE_EXPORT)


@pytest.fixture
def corpus_config() -> CorpusConfig:
    return CorpusConfig(base_url="https://docs.example.test", cache_ttl=3600)


@pytest.fixture
def fake_fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def failing_fetcher() -> FakeFetcher:
    return FakeFetcher(
        error=CorpusFetchError("connection refused", url="https://docs.example.test/llms.txt")
    )


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_cache(corpus_config, fake_clock):
    """Build a CorpusCache around a given fetcher."""

    def factory(fetcher) -> CorpusCache:
        loader = CorpusLoader(corpus_config, fetcher=fetcher)
        return CorpusCache(loader, IndexBuilder(), ttl=corpus_config.cache_ttl, clock=fake_clock)

    return factory


@pytest.fixture
def search_engine(make_cache, fake_fetcher) -> SearchEngine:
    return SearchEngine(make_cache(fake_fetcher))


@pytest.fixture
def fetcher_factory():
    """The FakeFetcher class, for tests that need custom export text."""
    return FakeFetcher
