"""Unit tests for the search engine pipeline and its fallbacks."""

import pytest

from docs_relevance.config.settings import CorpusConfig, CurationConfig, SearchConfig, Settings
from docs_relevance.exceptions import IndexBuildError, QueryExecutionError
from docs_relevance.search import search_engine as search_engine_module
from docs_relevance.search.index_manager import DocumentIndex
from docs_relevance.search.search_engine import SearchEngine, SearchResult


@pytest.fixture
def tier_log(mocker):
    """Record the tier of every index query while still executing it."""
    calls = []
    original = DocumentIndex.search

    def record(index, query_string, tier="advanced"):
        calls.append(tier)
        return original(index, query_string, tier=tier)

    mocker.patch.object(DocumentIndex, "search", autospec=True, side_effect=record)
    return calls


class TestSearchContent:
    """Test the main retrieval path."""

    @pytest.mark.asyncio
    async def test_ranked_results(self, search_engine):
        results = await search_engine.search_content("what is icm")

        assert results
        assert all(isinstance(r, SearchResult) for r in results)
        assert results[0].title == "ICM Overview"
        scores = [r.score for r in results]
        assert scores == sorted(scores, reverse=True)

    @pytest.mark.asyncio
    async def test_result_dict(self, search_engine):
        result = (await search_engine.search_content("faucet"))[0]

        assert set(result.to_dict()) == {"id", "title", "url", "content", "headings", "score"}
        assert result.url == "/docs/tooling/faucet"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", ["", "   "])
    async def test_empty_query(self, search_engine, fake_fetcher, query):
        assert await search_engine.search_content(query) == []
        assert fake_fetcher.calls == []

    @pytest.mark.asyncio
    async def test_no_matches(self, search_engine):
        assert await search_engine.search_content("kubernetes helm chart") == []

    @pytest.mark.asyncio
    async def test_fetch_failure_returns_empty(self, make_cache, failing_fetcher):
        engine = SearchEngine(make_cache(failing_fetcher))

        assert await engine.search_content("what is icm") == []

    @pytest.mark.asyncio
    async def test_unexpected_error_returns_empty(self, search_engine, mocker):
        mocker.patch.object(
            search_engine.cache, "get_or_rebuild", side_effect=RuntimeError("boom")
        )

        assert await search_engine.search_content("what is icm") == []


class TestRetrievalTiers:
    """Test the advanced, simple and per-term fallback chain."""

    @pytest.mark.asyncio
    async def test_disjoint_keywords_stay_in_advanced_tier(
        self, make_cache, fetcher_factory, tier_log
    ):
        filler = " Operators follow these steps on every network upgrade." * 12
        export = (
            "# Staking Rewards\nURL: /docs/validator/rewards\nValidator staking rewards." + filler
            + "\n\n# Contract Tooling\nURL: /docs/deploy/contracts\nDeploy contracts with the CLI." + filler
        )
        engine = SearchEngine(make_cache(fetcher_factory(text=export)))

        results = await engine.search_content("validator deploy")

        assert tier_log == ["advanced"]
        assert {r.title for r in results} == {"Staking Rewards", "Contract Tooling"}

    @pytest.mark.asyncio
    async def test_advanced_tier_only(self, search_engine, tier_log):
        await search_engine.search_content("what is icm")

        assert tier_log == ["advanced"]

    @pytest.mark.asyncio
    async def test_simple_tier_after_advanced_error(self, search_engine, mocker):
        original = DocumentIndex.search
        tiers = []

        def reject_advanced(index, query_string, tier="advanced"):
            tiers.append(tier)
            if tier == "advanced":
                raise QueryExecutionError("syntax", tier=tier, query=query_string)
            return original(index, query_string, tier=tier)

        mocker.patch.object(DocumentIndex, "search", autospec=True, side_effect=reject_advanced)
        results = await search_engine.search_content("faucet")

        assert tiers == ["advanced", "simple"]
        assert results[0].title == "Fuji Faucet"

    @pytest.mark.asyncio
    async def test_per_term_tier_when_empty(self, search_engine, mocker):
        original = DocumentIndex.search
        tiers = []

        def empty_until_terms(index, query_string, tier="advanced"):
            tiers.append(tier)
            if tier == "term":
                return original(index, query_string, tier=tier)
            return []

        mocker.patch.object(
            DocumentIndex, "search", autospec=True, side_effect=empty_until_terms
        )
        results = await search_engine.search_content("faucet validator")

        assert tiers == ["advanced", "term", "term"]
        ids = [r.id for r in results]
        assert len(ids) == len(set(ids))
        assert {"Fuji Faucet", "Validator Setup"} <= {r.title for r in results}

    @pytest.mark.asyncio
    async def test_all_tiers_failing(self, search_engine, mocker):
        def reject(index, query_string, tier="advanced"):
            raise QueryExecutionError("broken", tier=tier, query=query_string)

        mocker.patch.object(DocumentIndex, "search", autospec=True, side_effect=reject)

        assert await search_engine.search_content("faucet validator") == []

    @pytest.mark.asyncio
    async def test_index_unavailable_scores_full_corpus(self, search_engine, mocker):
        mocker.patch.object(
            search_engine.cache.builder, "build", side_effect=IndexBuildError("boom")
        )
        results = await search_engine.search_content("faucet")

        assert search_engine.cache.epoch.index is None
        assert results[0].title == "Fuji Faucet"


class TestExplain:
    @pytest.mark.asyncio
    async def test_breakdowns(self, search_engine):
        breakdowns = await search_engine.explain("what is icm", limit=1)

        assert len(breakdowns) == 1
        assert breakdowns[0].title == "ICM Overview"
        assert breakdowns[0].factors[0].name == "index_relevance"

    @pytest.mark.asyncio
    async def test_explain_matches_search(self, search_engine):
        results = await search_engine.search_content("l1 deploy tutorial")
        breakdowns = await search_engine.explain("l1 deploy tutorial")

        assert [b.document_id for b in breakdowns] == [r.id for r in results]
        assert [b.final_score for b in breakdowns] == [r.score for r in results]


class TestFactories:
    def test_from_settings(self, fake_fetcher):
        settings = Settings(
            corpus=CorpusConfig(base_url="https://docs.example.test", cache_ttl=60),
            search=SearchConfig(curation=CurationConfig(max_results=3)),
        )
        engine = SearchEngine.from_settings(settings, fetcher=fake_fetcher)

        assert engine.cache.ttl == 60
        assert engine.cache.loader.export_url == "https://docs.example.test/llms.txt"
        assert engine.curator.config.max_results == 3

    @pytest.mark.asyncio
    async def test_module_search_content(self, search_engine, monkeypatch):
        monkeypatch.setattr(search_engine_module, "_default_engine", search_engine)

        results = await search_engine_module.search_content("faucet")

        assert results[0].title == "Fuji Faucet"
        search_engine_module.reset_search_engine()
        assert search_engine_module._default_engine is None
