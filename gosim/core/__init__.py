"""
GO Similarity Core Module
=========================
Shared types, error taxonomy and collaborator protocols.
"""

from gosim.core.types import (
    SimilarityMethod,
    AggregationStrategy,
    Relationship,
    Term,
    ScoredPair,
    GeneTermRecord,
    NO_RESULTS_RECORD,
)

from gosim.core.errors import (
    GoSimError,
    InputError,
    ResourceError,
)

from gosim.core.protocols import (
    OntologyGraphProtocol,
    TermLookupProtocol,
    ResultSinkProtocol,
)

__all__ = [
    # Enums
    "SimilarityMethod",
    "AggregationStrategy",
    # Data classes
    "Relationship",
    "Term",
    "ScoredPair",
    "GeneTermRecord",
    "NO_RESULTS_RECORD",
    # Errors
    "GoSimError",
    "InputError",
    "ResourceError",
    # Protocols
    "OntologyGraphProtocol",
    "TermLookupProtocol",
    "ResultSinkProtocol",
]
