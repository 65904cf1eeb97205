"""Fetching the documentation export over HTTP."""

import asyncio
import time
from typing import Awaitable, Callable, List, Optional

import aiohttp

from ..config.logging import get_logger, log_performance
from ..config.settings import CorpusConfig
from ..exceptions import CorpusFetchError
from .models import Document
from .parser import parse_export

Fetcher = Callable[[str, float], Awaitable[str]]

logger = get_logger(__name__)


async def http_fetch(url: str, timeout: float) -> str:
    """GET ``url`` and return the body text.

    Raises:
        CorpusFetchError: On connection errors, timeouts or non-2xx status
    """
    try:
        async with aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=timeout)
        ) as session:
            async with session.get(url) as response:
                if response.status >= 400:
                    raise CorpusFetchError(
                        f"Export request failed: {response.status} {response.reason}",
                        url=url,
                        status=response.status,
                    )
                return await response.text()
    except asyncio.TimeoutError as e:
        raise CorpusFetchError(
            f"Export request timed out after {timeout}s", url=url
        ) from e
    except aiohttp.ClientError as e:
        raise CorpusFetchError(f"Export request failed: {e}", url=url) from e


class CorpusLoader:
    """Fetches and parses the documentation export."""

    def __init__(self, config: CorpusConfig, fetcher: Optional[Fetcher] = None):
        """Initialize the loader.

        Args:
            config: Corpus location and timeout settings
            fetcher: Async callable ``(url, timeout) -> text``; defaults to
                an aiohttp GET
        """
        self.config = config
        self._fetcher = fetcher or http_fetch

    @property
    def export_url(self) -> str:
        return self.config.get_export_url()

    async def fetch_export(self) -> str:
        """Fetch the raw export text.

        Raises:
            CorpusFetchError: If the export cannot be retrieved
        """
        url = self.export_url
        try:
            return await self._fetcher(url, self.config.fetch_timeout)
        except CorpusFetchError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError, UnicodeDecodeError) as e:
            raise CorpusFetchError(f"Export request failed: {e}", url=url) from e

    async def fetch_documents(self) -> List[Document]:
        """Fetch and parse the export.

        Raises:
            CorpusFetchError: If the export cannot be retrieved
        """
        start = time.perf_counter()
        text = await self.fetch_export()
        documents = parse_export(text)
        log_performance(
            logger,
            "corpus_fetch",
            (time.perf_counter() - start) * 1000,
            url=self.export_url,
            characters=len(text),
            documents=len(documents),
        )
        return documents

    async def load(self) -> List[Document]:
        """Fetch and parse the export, returning ``[]`` on failure."""
        try:
            return await self.fetch_documents()
        except CorpusFetchError as e:
            logger.error("Corpus fetch failed", **e.to_dict())
            return []
