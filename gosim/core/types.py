"""
GO Similarity Core Types
========================
Shared data types for the ontology similarity engine.

Version: 1.0.0
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


# =============================================================================
# Enums
# =============================================================================
class SimilarityMethod(str, Enum):
    """
    Pairwise term similarity metrics

    Inherits from str so values serialize cleanly to JSON.
    """
    RESNIK = "resnik"
    LIN = "lin"
    WANG = "wang"
    PEKAR = "pekar"

    @classmethod
    def parse(cls, value: Any) -> Optional["SimilarityMethod"]:
        normalized = str(value or "").strip().lower()
        if normalized == "lowest_common_ancestor":
            return cls.RESNIK
        try:
            return cls(normalized)
        except ValueError:
            return None


class AggregationStrategy(str, Enum):
    """Gene-level aggregation of pairwise term similarities"""
    MAX = "max"
    AVG = "avg"
    BMA = "bma"  # best-match average

    @classmethod
    def parse(cls, value: Any) -> Optional["AggregationStrategy"]:
        normalized = str(value or "").strip().lower()
        try:
            return cls(normalized)
        except ValueError:
            return None


# =============================================================================
# Ontology Terms
# =============================================================================
@dataclass(frozen=True)
class Relationship:
    """Outgoing edge toward a more general term"""
    type: str  # "is_a", "part_of", "regulates", ...
    id: str


@dataclass(frozen=True)
class Term:
    """
    GO term parsed from a [Term] stanza

    Only non-obsolete terms with id, name and namespace are ever built.
    """
    id: str
    name: str
    namespace: str
    obsolete: bool = False
    alt_ids: Tuple[str, ...] = ()
    relationships: Tuple[Relationship, ...] = ()


# =============================================================================
# Results
# =============================================================================
@dataclass
class ScoredPair:
    """Host/pathogen gene pair with its aggregated GO similarity"""
    host_gene: str
    pathogen_gene: str
    host_terms: List[str] = field(default_factory=list)
    pathogen_terms: List[str] = field(default_factory=list)
    score: float = 0.0

    def to_record(self) -> Dict[str, Any]:
        """Row layout used by the result store"""
        return {
            "Host_Protein": self.host_gene,
            "Pathogen_Protein": self.pathogen_gene,
            "Host_GO": " | ".join(self.host_terms),
            "Pathogen_GO": " | ".join(self.pathogen_terms),
            "Score": self.score,
            "score": self.score,
        }


@dataclass
class GeneTermRecord:
    """
    Raw annotation row for one gene

    `term` is the pipe-delimited string stored by older collections,
    `terms` the explicit list stored by newer ones.
    """
    gene: str
    term: str = ""
    terms: List[str] = field(default_factory=list)


NO_RESULTS_RECORD: Dict[str, str] = {"result": "no results"}
