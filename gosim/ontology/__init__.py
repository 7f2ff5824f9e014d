"""
GO Similarity Ontology Module
=============================
GO ontology loading and graph traversal.

Main features:
- Parse OBO [Term] stanzas (is_a / relationship edges, alt ids)
- Download the OBO source with bounded redirects and atomic replace
- Ancestor / descendant closures, lower bounds, Information Content
- Directed shortest paths and Wang S-values
- Single-flight, process-wide graph loading

Example:
    from gosim.ontology import OntologyLoader

    loader = OntologyLoader()
    graph = loader.load_file("data/go-basic.obo")
    graph.ancestors("GO:0006915")
    graph.information_content("GO:0006915")
"""

# Graph
from gosim.ontology.graph import (
    WANG_EDGE_WEIGHTS,
    OntologyGraph,
)

# Loader
from gosim.ontology.loader import (
    MIN_GRAPH_NODES,
    OBOParser,
    OntologyLoader,
    build_graph,
    download_file,
    create_ontology_loader,
)

# Provider
from gosim.ontology.provider import (
    OntologyGraphProvider,
    get_graph_provider,
    reset_graph_provider,
)

__all__ = [
    # Graph
    "WANG_EDGE_WEIGHTS",
    "OntologyGraph",
    # Parser / loader
    "MIN_GRAPH_NODES",
    "OBOParser",
    "OntologyLoader",
    "build_graph",
    "download_file",
    "create_ontology_loader",
    # Provider
    "OntologyGraphProvider",
    "get_graph_provider",
    "reset_graph_provider",
]
