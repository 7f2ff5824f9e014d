"""
GO Similarity Ontology Graph
============================
In-memory GO DAG with memoized traversals.

All queries resolve their input first (alt ids map to the canonical id);
an id that does not resolve yields an empty set or None, never an error.

Version: 1.0.0
"""
from __future__ import annotations

import logging
import math
from collections import deque
from typing import Any, Deque, Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from gosim.core.types import Relationship, Term

logger = logging.getLogger(__name__)

# Wang edge weights; any other relation type does not propagate
WANG_EDGE_WEIGHTS: Dict[str, float] = {
    "is_a": 0.8,
    "part_of": 0.6,
}


def round3(value: float) -> float:
    return round(value, 3)


# =============================================================================
# Ontology Graph
# =============================================================================
class OntologyGraph:
    """
    GO term DAG

    Provides:
    - Id resolution (alt ids -> canonical ids)
    - Ancestor / descendant closures
    - Lower bound and Information Content estimates
    - Directed shortest path lengths
    - Wang S-value maps

    The structure is read-only once built; every derived value is cached
    for the lifetime of the instance.
    """

    def __init__(self) -> None:
        self.nodes: Set[str] = set()
        self.parents: Dict[str, List[Relationship]] = {}
        self.children: Dict[str, List[str]] = {}
        self.alt_ids: Dict[str, str] = {}

        # Memoization
        self._ancestor_cache: Dict[str, FrozenSet[str]] = {}
        self._descendant_cache: Dict[str, FrozenSet[str]] = {}
        self._lower_bound_cache: Dict[str, int] = {}
        self._s_value_cache: Dict[str, Dict[str, float]] = {}
        self._path_cache: Dict[Tuple[str, str], Optional[int]] = {}

    @classmethod
    def from_terms(cls, terms: Iterable[Term]) -> "OntologyGraph":
        graph = cls()
        for term in terms:
            graph._register_term(term)
        return graph

    def _ensure_node(self, term_id: str) -> None:
        self.nodes.add(term_id)
        self.parents.setdefault(term_id, [])
        self.children.setdefault(term_id, [])

    def _register_term(self, term: Term) -> None:
        self._ensure_node(term.id)

        for alt_id in term.alt_ids:
            self.alt_ids[alt_id] = term.id

        for rel in term.relationships:
            self._ensure_node(rel.id)
            parent_edges = self.parents[term.id]
            if rel not in parent_edges:
                parent_edges.append(rel)
            siblings = self.children[rel.id]
            if term.id not in siblings:
                siblings.append(term.id)

    # =========================================================================
    # Properties
    # =========================================================================
    @property
    def total_nodes(self) -> int:
        return len(self.nodes)

    @property
    def num_edges(self) -> int:
        return sum(len(edges) for edges in self.parents.values())

    @property
    def root_terms(self) -> Set[str]:
        """Terms without outgoing parent edges"""
        return {term_id for term_id, edges in self.parents.items() if not edges}

    def __len__(self) -> int:
        return self.total_nodes

    def __contains__(self, term: Any) -> bool:
        return self.resolve(term) is not None

    def has_term(self, term: Any) -> bool:
        return self.resolve(term) is not None

    # =========================================================================
    # Resolution
    # =========================================================================
    def resolve(self, term: Any) -> Optional[str]:
        """Canonical id for a term or alt id, None if unknown"""
        if term is None:
            return None
        value = str(term).strip()
        if not value:
            return None
        canonical = self.alt_ids.get(value, value)
        return canonical if canonical in self.nodes else None

    def parents_of(self, term: Any) -> List[Relationship]:
        canonical = self.resolve(term)
        if canonical is None:
            return []
        return list(self.parents[canonical])

    def children_of(self, term: Any) -> List[str]:
        canonical = self.resolve(term)
        if canonical is None:
            return []
        return list(self.children[canonical])

    # =========================================================================
    # Hierarchy Traversal
    # =========================================================================
    def ancestors(self, term: Any) -> FrozenSet[str]:
        """All terms reachable through parent edges (self excluded)"""
        canonical = self.resolve(term)
        if canonical is None:
            return frozenset()

        cached = self._ancestor_cache.get(canonical)
        if cached is not None:
            return cached

        visited: Set[str] = set()
        stack = [rel.id for rel in self.parents[canonical]]
        while stack:
            current = stack.pop()
            if current in visited:
                continue
            visited.add(current)
            stack.extend(rel.id for rel in self.parents.get(current, ()))

        result = frozenset(visited)
        self._ancestor_cache[canonical] = result
        return result

    def descendants(self, term: Any) -> FrozenSet[str]:
        """All terms reachable through child edges (self excluded)"""
        canonical = self.resolve(term)
        if canonical is None:
            return frozenset()

        cached = self._descendant_cache.get(canonical)
        if cached is not None:
            return cached

        visited: Set[str] = set()
        stack = list(self.children[canonical])
        while stack:
            current = stack.pop()
            if current in visited:
                continue
            visited.add(current)
            stack.extend(self.children.get(current, ()))

        result = frozenset(visited)
        self._descendant_cache[canonical] = result
        return result

    def shortest_path_length(self, source: Any, target: Any) -> Optional[int]:
        """
        Edge count of the shortest downward path from source to target

        Follows child edges only, so it is defined only when target is a
        descendant of source (or equal to it).
        """
        src = self.resolve(source)
        dst = self.resolve(target)
        if src is None or dst is None:
            return None
        if src == dst:
            return 0

        key = (src, dst)
        if key in self._path_cache:
            return self._path_cache[key]

        result: Optional[int] = None
        queue: Deque[Tuple[str, int]] = deque([(src, 0)])
        visited = {src}
        while queue and result is None:
            node, dist = queue.popleft()
            for child in self.children[node]:
                if child == dst:
                    result = dist + 1
                    break
                if child not in visited:
                    visited.add(child)
                    queue.append((child, dist + 1))

        self._path_cache[key] = result
        return result

    # =========================================================================
    # Information Content
    # =========================================================================
    def lower_bound(self, term: Any) -> Optional[int]:
        """Descendant count + 1, used as the annotation frequency estimate"""
        canonical = self.resolve(term)
        if canonical is None:
            return None

        cached = self._lower_bound_cache.get(canonical)
        if cached is not None:
            return cached

        value = len(self.descendants(canonical)) + 1
        self._lower_bound_cache[canonical] = value
        return value

    def information_content(self, term: Any) -> Optional[float]:
        """-log2(lower_bound / total_nodes), rounded to 3 decimals"""
        lb = self.lower_bound(term)
        if not lb or lb <= 0 or self.total_nodes <= 0:
            return None
        # round() can produce -0.0 for the root
        return round3(-math.log2(lb / self.total_nodes)) + 0.0

    # =========================================================================
    # Wang S-values
    # =========================================================================
    def s_values(self, term: Any) -> Optional[Dict[str, float]]:
        """
        Semantic contribution of the term and each of its ancestors

        Level-order propagation from the term (S = 1) toward its parents.
        A parent receives child_S * edge_weight and keeps the largest
        contribution seen; each node is expanded once.
        """
        canonical = self.resolve(term)
        if canonical is None:
            return None

        cached = self._s_value_cache.get(canonical)
        if cached is not None:
            return cached

        sv: Dict[str, float] = {canonical: 1.0}
        visited: Set[str] = set()
        level: List[str] = [canonical]

        while level:
            next_level: List[str] = []
            for node in level:
                for rel in self.parents.get(node, ()):
                    weight_factor = WANG_EDGE_WEIGHTS.get(rel.type, 0.0)
                    if weight_factor <= 0:
                        continue
                    weight = sv.get(node, 0.0) * weight_factor
                    if weight <= 0:
                        continue
                    previous = sv.get(rel.id)
                    if previous is None or weight > previous:
                        sv[rel.id] = weight
                    if rel.id not in visited and rel.id not in next_level:
                        next_level.append(rel.id)
            visited.update(level)
            level = next_level

        result = {key: round3(value) for key, value in sv.items()}
        self._s_value_cache[canonical] = result
        return result

    def semantic_value(self, term: Any) -> Optional[float]:
        sv = self.s_values(term)
        if sv is None:
            return None
        return sum(sv.values())

    # =========================================================================
    # Cache Management
    # =========================================================================
    def cache_info(self) -> Dict[str, int]:
        return {
            "ancestors": len(self._ancestor_cache),
            "descendants": len(self._descendant_cache),
            "lower_bounds": len(self._lower_bound_cache),
            "s_values": len(self._s_value_cache),
            "paths": len(self._path_cache),
        }

    def clear_caches(self) -> None:
        self._ancestor_cache.clear()
        self._descendant_cache.clear()
        self._lower_bound_cache.clear()
        self._s_value_cache.clear()
        self._path_cache.clear()
        logger.debug("Ontology graph caches cleared")

    # =========================================================================
    # Validation
    # =========================================================================
    def find_cycle(self) -> Optional[List[str]]:
        """
        Terms that cannot be topologically ordered, or None for a DAG

        Kahn's algorithm over child -> parent edges, starting from leaves.
        """
        pending_children = {term_id: len(kids) for term_id, kids in self.children.items()}
        queue: Deque[str] = deque(
            term_id for term_id, count in pending_children.items() if count == 0
        )
        ordered = 0

        while queue:
            term_id = queue.popleft()
            ordered += 1
            for parent in {rel.id for rel in self.parents[term_id]}:
                pending_children[parent] -= 1
                if pending_children[parent] == 0:
                    queue.append(parent)

        if ordered == len(pending_children):
            return None
        return sorted(term_id for term_id, count in pending_children.items() if count > 0)

    def __repr__(self) -> str:
        return f"OntologyGraph(nodes={self.total_nodes}, edges={self.num_edges}, alt_ids={len(self.alt_ids)})"
