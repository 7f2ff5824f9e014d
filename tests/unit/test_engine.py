"""
# ==============================================================================
# Module: tests/unit/test_engine.py
# ==============================================================================
# Purpose: Unit tests for the graph provider and the gene-pair engine
#
# Tests:
#   - Single-flight graph loading and retry after failure
#   - Name validation before any work
#   - Threshold filtering, empty term sets, result order
# ==============================================================================
"""
import asyncio
from pathlib import Path

import pytest

from gosim.config import GoSimSettings
from gosim.core.errors import InputError, ResourceError
from gosim.core.protocols import OntologyGraphProtocol
from gosim.core.types import ScoredPair
from gosim.ontology import (
    OntologyGraph,
    OntologyGraphProvider,
    OntologyLoader,
    get_graph_provider,
    reset_graph_provider,
)
from gosim.similarity import (
    SimilarityEngine,
    compute_similarity,
    get_aggregator,
    get_method,
    score_pairs,
)


# ==============================================================================
# Fixtures
# ==============================================================================
FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"


class CountingLoader(OntologyLoader):
    """Loader that records calls and can fail a given number of times"""

    def __init__(self, path: Path, failures: int = 0, delay: float = 0.01):
        super().__init__(GoSimSettings(obo_path=str(path), auto_download=False))
        self.calls = 0
        self.failures = failures
        self.delay = delay

    async def load(self) -> OntologyGraph:
        self.calls += 1
        await asyncio.sleep(self.delay)
        if self.failures > 0:
            self.failures -= 1
            raise ResourceError("simulated download failure")
        return self.load_file(self.obo_path)


@pytest.fixture
def mini_loader() -> CountingLoader:
    return CountingLoader(FIXTURES_DIR / "mini_go.obo")


@pytest.fixture
def provider(mini_loader: CountingLoader) -> OntologyGraphProvider:
    return OntologyGraphProvider(mini_loader)


@pytest.fixture
def engine(provider: OntologyGraphProvider) -> SimilarityEngine:
    return SimilarityEngine(provider)


@pytest.fixture(autouse=True)
def _reset_default_provider():
    reset_graph_provider()
    yield
    reset_graph_provider()


HOST = {
    "AT1G01010": ["GO:0006915"],
    "AT1G01020": [],
    "AT1G01030": ["GO:0009626", "GO:0005634"],
}
PATHOGEN = {
    "PSPTO_0001": ["GO:0012501"],
    "PSPTO_0002": ["GO:0005575"],
    "PSPTO_0003": [],
}


# ==============================================================================
# Graph Provider
# ==============================================================================
class TestOntologyGraphProvider:
    """Single-flight lazy loading"""

    def test_concurrent_callers_share_one_load(self, provider, mini_loader):
        async def scenario():
            return await asyncio.gather(*(provider.get_graph() for _ in range(8)))

        graphs = asyncio.run(scenario())

        assert mini_loader.calls == 1
        assert provider.load_count == 1
        assert all(g is graphs[0] for g in graphs)
        assert provider.is_loaded

    def test_graph_cached_after_load(self, provider, mini_loader):
        async def scenario():
            first = await provider.get_graph()
            second = await provider.get_graph()
            return first, second

        first, second = asyncio.run(scenario())
        assert first is second
        assert mini_loader.calls == 1

    def test_failure_is_not_cached(self):
        loader = CountingLoader(FIXTURES_DIR / "mini_go.obo", failures=1)
        provider = OntologyGraphProvider(loader)

        async def scenario():
            results = await asyncio.gather(
                provider.get_graph(), provider.get_graph(), return_exceptions=True
            )
            assert all(isinstance(r, ResourceError) for r in results)
            assert not provider.is_loaded
            return await provider.get_graph()

        graph = asyncio.run(scenario())

        assert graph.total_nodes == 12
        assert loader.calls == 2

    def test_cancelled_load_is_retried(self):
        loader = CountingLoader(FIXTURES_DIR / "mini_go.obo", delay=0.2)
        provider = OntologyGraphProvider(loader)

        async def failing_lookup():
            await asyncio.sleep(0)
            raise ValueError("annotation lookup failed")

        async def scenario():
            await asyncio.gather(failing_lookup(), provider.get_graph())

        # asyncio.run cancels the in-flight load on the way out
        with pytest.raises(ValueError):
            asyncio.run(scenario())
        assert not provider.is_loaded

        graph = asyncio.run(provider.get_graph())

        assert graph.total_nodes == 12
        assert provider.is_loaded

    def test_cancelled_caller_keeps_shared_load(self, provider, mini_loader):
        async def scenario():
            first = asyncio.ensure_future(provider.get_graph())
            second = asyncio.ensure_future(provider.get_graph())
            await asyncio.sleep(0)
            first.cancel()
            return await second

        graph = asyncio.run(scenario())

        assert graph.total_nodes == 12
        assert mini_loader.calls == 1

    def test_reset_forces_reload(self, provider, mini_loader):
        asyncio.run(provider.get_graph())
        provider.reset()
        assert not provider.is_loaded

        asyncio.run(provider.get_graph())
        assert mini_loader.calls == 2

    def test_set_graph_skips_loader(self, provider, mini_loader):
        graph = mini_loader.load_file(FIXTURES_DIR / "three_node.obo")
        provider.set_graph(graph)

        assert asyncio.run(provider.get_graph()) is graph
        assert mini_loader.calls == 0

    def test_default_provider_singleton(self):
        assert get_graph_provider() is get_graph_provider()
        first = get_graph_provider()
        reset_graph_provider()
        assert get_graph_provider() is not first


# ==============================================================================
# Similarity Engine
# ==============================================================================
class TestSimilarityEngine:
    """compute_similarity"""

    def test_scores_cross_product(self, engine):
        pairs = asyncio.run(engine.compute_similarity(HOST, PATHOGEN, "resnik", "max", 0.0))

        assert [(p.host_gene, p.pathogen_gene) for p in pairs] == [
            ("AT1G01010", "PSPTO_0001"),
            ("AT1G01030", "PSPTO_0001"),
            ("AT1G01030", "PSPTO_0002"),
        ]
        assert pairs[0].score == 1.585
        assert pairs[2].score == 2.585

    def test_empty_term_sets_never_scored(self, engine):
        for threshold in (0.0, -1.0):
            pairs = asyncio.run(engine.compute_similarity(HOST, PATHOGEN, "wang", "bma", threshold))
            genes = {p.host_gene for p in pairs} | {p.pathogen_gene for p in pairs}
            assert "AT1G01020" not in genes
            assert "PSPTO_0003" not in genes

    def test_threshold_filters(self, engine):
        pairs = asyncio.run(engine.compute_similarity(HOST, PATHOGEN, "resnik", "max", 2.0))
        assert [(p.host_gene, p.pathogen_gene, p.score) for p in pairs] == [
            ("AT1G01030", "PSPTO_0002", 2.585),
        ]

    def test_threshold_is_inclusive(self, engine):
        pairs = asyncio.run(engine.compute_similarity(HOST, PATHOGEN, "resnik", "max", 1.585))
        assert ("AT1G01010", "PSPTO_0001") in [(p.host_gene, p.pathogen_gene) for p in pairs]

    def test_undefined_pairs_dropped(self, engine):
        # apoptosis vs cellular_component has no common ancestor
        pairs = asyncio.run(engine.compute_similarity(HOST, PATHOGEN, "lin", "avg", 0.0))
        assert ("AT1G01010", "PSPTO_0002") not in [(p.host_gene, p.pathogen_gene) for p in pairs]

    def test_scored_pair_contents(self, engine):
        pairs = asyncio.run(engine.compute_similarity(HOST, PATHOGEN, "resnik", "max", 2.0))
        pair = pairs[0]

        assert isinstance(pair, ScoredPair)
        assert pair.host_terms == ["GO:0009626", "GO:0005634"]
        assert pair.pathogen_terms == ["GO:0005575"]
        assert pair.to_record() == {
            "Host_Protein": "AT1G01030",
            "Pathogen_Protein": "PSPTO_0002",
            "Host_GO": "GO:0009626 | GO:0005634",
            "Pathogen_GO": "GO:0005575",
            "Score": 2.585,
            "score": 2.585,
        }

    def test_names_case_insensitive(self, engine):
        upper = asyncio.run(engine.compute_similarity(HOST, PATHOGEN, "WANG", "BMA", 0.0))
        lower = asyncio.run(engine.compute_similarity(HOST, PATHOGEN, "wang", "bma", 0.0))
        assert [(p.host_gene, p.pathogen_gene, p.score) for p in upper] == \
            [(p.host_gene, p.pathogen_gene, p.score) for p in lower]

    @pytest.mark.parametrize("method,aggregation", [
        ("jaccard", "max"),
        ("wang", "median"),
        ("", "bma"),
    ])
    def test_invalid_names_fail_before_loading(self, engine, mini_loader, method, aggregation):
        with pytest.raises(InputError):
            asyncio.run(engine.compute_similarity(HOST, PATHOGEN, method, aggregation, 0.0))
        assert mini_loader.calls == 0

    def test_missing_gene_maps(self, engine, mini_loader):
        with pytest.raises(InputError, match="Missing required gene term maps"):
            asyncio.run(engine.compute_similarity(None, PATHOGEN, "wang", "bma", 0.0))
        assert mini_loader.calls == 0

    def test_load_failure_propagates(self, tmp_path):
        loader = OntologyLoader(GoSimSettings(obo_path=str(tmp_path / "missing.obo"), auto_download=False))
        engine = SimilarityEngine(OntologyGraphProvider(loader))

        with pytest.raises(ResourceError, match="Missing GO OBO file"):
            asyncio.run(engine.compute_similarity(HOST, PATHOGEN, "wang", "bma", 0.0))

    def test_three_node_fixture(self, provider, mini_loader):
        provider.set_graph(mini_loader.load_file(FIXTURES_DIR / "three_node.obo"))
        engine = SimilarityEngine(provider)

        pairs = asyncio.run(engine.compute_similarity(
            {"H": ["GO:0000002"]}, {"P": ["GO:0000003"]}, "resnik", "max", 0.0
        ))

        assert len(pairs) == 1
        assert pairs[0].score == 0.0

    def test_module_level_entry_point(self, mini_loader):
        get_graph_provider().set_graph(mini_loader.load_file(FIXTURES_DIR / "mini_go.obo"))

        pairs = asyncio.run(compute_similarity(HOST, PATHOGEN, "pekar", "max", 0.5))
        assert [(p.host_gene, p.pathogen_gene) for p in pairs] == [
            ("AT1G01010", "PSPTO_0001"),
            ("AT1G01030", "PSPTO_0001"),
        ]


# ==============================================================================
# Synchronous Scoring
# ==============================================================================
class TestScorePairs:
    """score_pairs over an already loaded graph"""

    def test_matches_engine(self, engine, mini_loader):
        graph = mini_loader.load_file(FIXTURES_DIR / "mini_go.obo")

        direct = score_pairs(graph, HOST, PATHOGEN, get_method("resnik"), get_aggregator("max"), 0.0)
        via_engine = asyncio.run(engine.compute_similarity(HOST, PATHOGEN, "resnik", "max", 0.0))

        assert [p.to_record() for p in direct] == [p.to_record() for p in via_engine]

    def test_graph_satisfies_protocol(self, mini_loader):
        graph = mini_loader.load_file(FIXTURES_DIR / "three_node.obo")
        assert isinstance(graph, OntologyGraphProtocol)
        assert graph.has_term("GO:0000001")
