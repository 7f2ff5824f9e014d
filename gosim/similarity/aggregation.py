"""
GO Similarity Set Aggregation
=============================
Combine pairwise term similarities into one gene-level score.

- max: best value over the whole cross product
- avg: mean of all defined values
- bma: best-match average, symmetric over both term sets

Undefined pairwise values are skipped; a gene pair with no defined value
at all scores None.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Sequence

from gosim.core.errors import InputError
from gosim.core.protocols import OntologyGraphProtocol
from gosim.core.types import AggregationStrategy
from gosim.ontology.graph import round3
from gosim.similarity.metrics import SimilarityFunction

Aggregator = Callable[
    [Sequence[str], Sequence[str], SimilarityFunction, OntologyGraphProtocol],
    Optional[float],
]


def _defined(values) -> List[float]:
    return [value for value in values if value is not None]


def _pairwise(
    terms1: Sequence[str],
    terms2: Sequence[str],
    metric: SimilarityFunction,
    graph: OntologyGraphProtocol,
) -> List[float]:
    return _defined(metric(graph, t1, t2) for t1 in terms1 for t2 in terms2)


def max_similarity(
    terms1: Sequence[str],
    terms2: Sequence[str],
    metric: SimilarityFunction,
    graph: OntologyGraphProtocol,
) -> Optional[float]:
    sims = _pairwise(terms1, terms2, metric, graph)
    if not sims:
        return None
    return round3(max(sims))


def avg_similarity(
    terms1: Sequence[str],
    terms2: Sequence[str],
    metric: SimilarityFunction,
    graph: OntologyGraphProtocol,
) -> Optional[float]:
    sims = _pairwise(terms1, terms2, metric, graph)
    if not sims:
        return None
    return round3(sum(sims) / len(sims))


def bma_similarity(
    terms1: Sequence[str],
    terms2: Sequence[str],
    metric: SimilarityFunction,
    graph: OntologyGraphProtocol,
) -> Optional[float]:
    best_matches: List[float] = []

    for t1 in terms1:
        row = _defined(metric(graph, t1, t2) for t2 in terms2)
        if row:
            best_matches.append(max(row))

    for t2 in terms2:
        row = _defined(metric(graph, t1, t2) for t1 in terms1)
        if row:
            best_matches.append(max(row))

    if not best_matches:
        return None
    return round3(sum(best_matches) / len(best_matches))


AGGREGATORS: Dict[AggregationStrategy, Aggregator] = {
    AggregationStrategy.MAX: max_similarity,
    AggregationStrategy.AVG: avg_similarity,
    AggregationStrategy.BMA: bma_similarity,
}


def get_aggregator(name: Any) -> Aggregator:
    """Look up an aggregation strategy by name (case-insensitive)"""
    strategy = AggregationStrategy.parse(name)
    if strategy is None:
        raise InputError("Unsupported GO score strategy. Supported: max, avg, bma")
    return AGGREGATORS[strategy]
