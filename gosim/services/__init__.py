"""
GO Similarity Services
======================
Job-level wrapper around the similarity engine and its storage collaborators.
"""

from gosim.services.go_sim_job import (
    GoSimJobRequest,
    InMemoryTermLookup,
    InMemoryResultSink,
    JsonResultSink,
    run_go_sim_job,
    to_gene_list,
    to_terms_array,
    parse_number,
)

__all__ = [
    "GoSimJobRequest",
    "InMemoryTermLookup",
    "InMemoryResultSink",
    "JsonResultSink",
    "run_go_sim_job",
    "to_gene_list",
    "to_terms_array",
    "parse_number",
]
