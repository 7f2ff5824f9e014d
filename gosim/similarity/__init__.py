"""
GO Similarity Scoring Module
============================
Pairwise term metrics, set aggregation and the gene-pair engine.

Example:
    from gosim.similarity import get_method, get_aggregator

    wang = get_method("wang")
    bma = get_aggregator("bma")
    score = bma(["GO:0006915"], ["GO:0012501"], wang, graph)
"""

from gosim.similarity.metrics import (
    SimilarityFunction,
    SIMILARITY_METHODS,
    common_ancestor_candidates,
    lowest_common_ancestor,
    find_root,
    resnik,
    lin,
    wang,
    pekar,
    get_method,
)

from gosim.similarity.aggregation import (
    Aggregator,
    AGGREGATORS,
    max_similarity,
    avg_similarity,
    bma_similarity,
    get_aggregator,
)

from gosim.similarity.engine import (
    SimilarityEngine,
    score_pairs,
    compute_similarity,
)

__all__ = [
    # Metrics
    "SimilarityFunction",
    "SIMILARITY_METHODS",
    "common_ancestor_candidates",
    "lowest_common_ancestor",
    "find_root",
    "resnik",
    "lin",
    "wang",
    "pekar",
    "get_method",
    # Aggregation
    "Aggregator",
    "AGGREGATORS",
    "max_similarity",
    "avg_similarity",
    "bma_similarity",
    "get_aggregator",
    # Engine
    "SimilarityEngine",
    "score_pairs",
    "compute_similarity",
]
