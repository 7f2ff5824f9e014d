"""
GO Similarity
=============
Gene Ontology semantic similarity between host and pathogen genes.

Usage:
    from gosim import compute_similarity

    pairs = await compute_similarity(
        {"AT1G01010": ["GO:0006952"]},
        {"PSPTO_0001": ["GO:0009405"]},
        method="wang",
        aggregation="bma",
        threshold=0.3,
    )

Version: 1.0.0
"""

from gosim.core import (
    AggregationStrategy,
    InputError,
    ResourceError,
    ScoredPair,
    SimilarityMethod,
)
from gosim.ontology import OntologyGraph, OntologyGraphProvider, OntologyLoader
from gosim.similarity import SimilarityEngine, compute_similarity

__version__ = "1.0.0"

__all__ = [
    "AggregationStrategy",
    "InputError",
    "ResourceError",
    "ScoredPair",
    "SimilarityMethod",
    "OntologyGraph",
    "OntologyGraphProvider",
    "OntologyLoader",
    "SimilarityEngine",
    "compute_similarity",
]
