"""
GO Similarity Protocol Definitions
==================================
Interface contracts between the engine and its collaborators.

Design:
1. Storage lives outside the engine; it is reached only through these protocols
2. typing.Protocol gives structural subtyping, so any object with the right
   methods (a Mongo adapter, a test double) can be passed in

Version: 1.0.0
"""
from __future__ import annotations

from typing import (
    Any,
    Dict,
    FrozenSet,
    List,
    Optional,
    Protocol,
    Sequence,
    runtime_checkable,
)

from gosim.core.types import GeneTermRecord


# =============================================================================
# Ontology Protocols
# =============================================================================
@runtime_checkable
class OntologyGraphProtocol(Protocol):
    """
    Read-only GO graph used by the similarity metrics

    Implementation: gosim/ontology/graph.py
    """

    @property
    def total_nodes(self) -> int:
        ...

    def resolve(self, term: Any) -> Optional[str]:
        """Map an id or alt id to its canonical id"""
        ...

    def ancestors(self, term: Any) -> FrozenSet[str]:
        ...

    def descendants(self, term: Any) -> FrozenSet[str]:
        ...

    def lower_bound(self, term: Any) -> Optional[int]:
        ...

    def information_content(self, term: Any) -> Optional[float]:
        ...

    def shortest_path_length(self, source: Any, target: Any) -> Optional[int]:
        ...

    def s_values(self, term: Any) -> Optional[Dict[str, float]]:
        ...


# =============================================================================
# Storage Collaborator Protocols
# =============================================================================
@runtime_checkable
class TermLookupProtocol(Protocol):
    """
    Resolves genes to their GO annotations

    Implementations: gosim/services/go_sim_job.py (InMemoryTermLookup),
    or any storage adapter supplied by the caller.
    """

    async def fetch_gene_terms(
        self,
        species: str,
        role: str,
        genes: Sequence[str],
    ) -> Dict[str, GeneTermRecord]:
        """Return one record per annotated gene; unknown genes are absent"""
        ...


@runtime_checkable
class ResultSinkProtocol(Protocol):
    """
    Persists a finished result set

    Implementations: InMemoryResultSink, JsonResultSink
    """

    async def save(self, records: List[Dict[str, Any]]) -> str:
        """Store records and return an opaque handle for later retrieval"""
        ...
