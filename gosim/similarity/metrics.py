"""
GO Similarity Pairwise Metrics
==============================
Term-to-term semantic similarity over the GO graph.

Metrics:
- Resnik: IC of the most informative common ancestor
- Lin:    2 * IC(MICA) / (IC(t1) + IC(t2))
- Wang:   shared S-value mass over total semantic value
- Pekar:  root depth of the MICA relative to the path through it

Every function takes (graph, term1, term2) and returns a float rounded to
3 decimals, or None when the similarity is undefined for that pair.

Version: 1.0.0
"""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from gosim.core.errors import InputError
from gosim.core.protocols import OntologyGraphProtocol
from gosim.core.types import SimilarityMethod
from gosim.ontology.graph import round3


SimilarityFunction = Callable[[OntologyGraphProtocol, Any, Any], Optional[float]]


# =============================================================================
# Common Ancestors
# =============================================================================
def common_ancestor_candidates(graph: OntologyGraphProtocol, term1: Any, term2: Any) -> List[str]:
    """Terms that subsume both inputs, including the inputs themselves"""
    t1 = graph.resolve(term1)
    t2 = graph.resolve(term2)
    if t1 is None or t2 is None:
        return []

    a1 = graph.ancestors(t1)
    a2 = graph.ancestors(t2)
    candidates = set(a1 & a2)
    if t2 in a1:
        candidates.add(t2)
    if t1 in a2:
        candidates.add(t1)
    if t1 == t2:
        candidates.add(t1)
    return sorted(candidates)


def lowest_common_ancestor(graph: OntologyGraphProtocol, term1: Any, term2: Any) -> Optional[str]:
    """
    Most specific common ancestor (MICA)

    The candidate with the smallest lower bound wins; equal lower bounds
    fall back to the lexicographically smallest id.
    """
    candidates = common_ancestor_candidates(graph, term1, term2)
    if not candidates:
        return None
    return min(candidates, key=lambda term: (_lower_bound_or_max(graph, term), term))


def _lower_bound_or_max(graph: OntologyGraphProtocol, term: str) -> float:
    lb = graph.lower_bound(term)
    return lb if lb else float("inf")


# =============================================================================
# Information-Content Metrics
# =============================================================================
def resnik(graph: OntologyGraphProtocol, term1: Any, term2: Any) -> Optional[float]:
    mica = lowest_common_ancestor(graph, term1, term2)
    if mica is None:
        return None
    return graph.information_content(mica)


def lin(graph: OntologyGraphProtocol, term1: Any, term2: Any) -> Optional[float]:
    ic1 = graph.information_content(term1)
    ic2 = graph.information_content(term2)
    ic_mica = resnik(graph, term1, term2)
    if ic1 is None or ic2 is None or ic_mica is None:
        return None
    denominator = ic1 + ic2
    if denominator == 0:
        return None
    return round3((2 * ic_mica) / denominator)


# =============================================================================
# Graph-Structure Metrics
# =============================================================================
def wang(graph: OntologyGraphProtocol, term1: Any, term2: Any) -> Optional[float]:
    """
    Wang et al. (2007) similarity

    Shared ancestors contribute the S-values from both sides; the sum is
    normalized by the semantic values (S-value totals) of the two terms.
    """
    sa = graph.s_values(term1)
    sb = graph.s_values(term2)
    if sa is None or sb is None:
        return None

    total = sum(sa.values()) + sum(sb.values())
    if total <= 0:
        return None

    shared = sum(value + sb[key] for key, value in sa.items() if key in sb)
    return round3(shared / total)


def pekar(graph: OntologyGraphProtocol, term1: Any, term2: Any) -> Optional[float]:
    """
    Pekar & Staab (2002) similarity

    rootc / (ac + bc + rootc) where ac, bc are the path lengths from the MICA
    down to each term and rootc the path length from the ontology root down
    to the MICA. The root is the MICA's ancestor with the largest lower bound.
    """
    mica = lowest_common_ancestor(graph, term1, term2)
    if mica is None:
        return None

    ac = graph.shortest_path_length(mica, term1)
    bc = graph.shortest_path_length(mica, term2)
    if ac is None or bc is None:
        return None

    root = find_root(graph, mica)
    rootc = graph.shortest_path_length(root, mica)
    if rootc is None:
        return None

    denominator = ac + bc + rootc
    if denominator == 0:
        return None
    return round3(rootc / denominator)


def find_root(graph: OntologyGraphProtocol, term: str) -> str:
    """Ancestor (or the term itself) with the largest lower bound, ties by id"""
    candidates = set(graph.ancestors(term))
    candidates.add(term)
    return min(candidates, key=lambda t: (-(graph.lower_bound(t) or 0), t))


# =============================================================================
# Registry
# =============================================================================
SIMILARITY_METHODS: Dict[SimilarityMethod, SimilarityFunction] = {
    SimilarityMethod.RESNIK: resnik,
    SimilarityMethod.LIN: lin,
    SimilarityMethod.WANG: wang,
    SimilarityMethod.PEKAR: pekar,
}

SUPPORTED_METHODS = "wang, resnik, lin, pekar, lowest_common_ancestor"


def get_method(name: Any) -> SimilarityFunction:
    """Look up a metric by name (case-insensitive)"""
    method = SimilarityMethod.parse(name)
    if method is None:
        raise InputError(f"Unsupported GO method. Supported: {SUPPORTED_METHODS}")
    return SIMILARITY_METHODS[method]
