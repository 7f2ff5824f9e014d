"""
# ==============================================================================
# Module: gosim/services/go_sim_job.py
# ==============================================================================
# Purpose: Run one host/pathogen GO similarity job end to end
#
# Dependencies:
#   - External: pydantic (request validation)
#   - Internal: gosim.similarity.engine, gosim.core.protocols
#
# Input:
#   - Job payload: hspecies, pspecies, host_genes, pathogen_genes,
#     method, score, threshold
#   - TermLookupProtocol: gene -> GO annotation source
#   - ResultSinkProtocol: where the scored rows are stored
#
# Output:
#   - Opaque result handle returned by the sink
#
# Design Notes:
#   - Names are validated before any lookup or ontology load
#   - Empty gene lists or empty lookups store the "no results" sentinel
#   - Storage backends stay outside the engine; in-memory and JSON-file
#     implementations are provided for tests and the CLI
# ==============================================================================
"""
from __future__ import annotations

import asyncio
import json
import logging
import math
import os
import re
import time
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from gosim.core.errors import InputError
from gosim.core.types import GeneTermRecord, NO_RESULTS_RECORD
from gosim.similarity.aggregation import get_aggregator
from gosim.similarity.engine import SimilarityEngine
from gosim.similarity.metrics import get_method

logger = logging.getLogger(__name__)

GENE_SEPARATOR_PATTERN = re.compile(r"[\n,\t]")


# ==============================================================================
# Input Helpers
# ==============================================================================
def to_gene_list(value: Any) -> List[str]:
    """Accept a list or a newline/comma/tab separated string of gene ids"""
    if isinstance(value, (list, tuple)):
        items = [str(item) for item in value]
    elif not value:
        return []
    else:
        items = GENE_SEPARATOR_PATTERN.split(str(value))
    return [item.strip() for item in items if item.strip()]


def to_terms_array(record: Union[GeneTermRecord, Mapping[str, Any]]) -> List[str]:
    """GO terms of one annotation row; explicit list first, else the pipe string"""
    if isinstance(record, GeneTermRecord):
        terms, term = record.terms, record.term
    else:
        terms, term = record.get("terms"), record.get("term")

    if isinstance(terms, (list, tuple)) and len(terms) > 0:
        return [str(t).strip() for t in terms if str(t).strip()]
    return [t.strip() for t in str(term or "").split("|") if t.strip()]


def parse_number(value: Any, fallback: float = 0.0) -> float:
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return fallback
    return parsed if math.isfinite(parsed) else fallback


# ==============================================================================
# Request Model
# ==============================================================================
class GoSimJobRequest(BaseModel):
    """GO similarity job request"""

    hspecies: str = Field("", description="Host species key")
    pspecies: str = Field("", description="Pathogen species key")
    host_genes: List[str] = Field(default_factory=list, description="Host gene ids")
    pathogen_genes: List[str] = Field(default_factory=list, description="Pathogen gene ids")
    method: str = Field("", description="resnik, lin, wang or pekar")
    score: str = Field("", description="Aggregation: max, avg or bma")
    threshold: float = Field(0.0, description="Minimum score kept")

    model_config = {"extra": "ignore", "json_schema_extra": {
        "example": {
            "hspecies": "arabidopsis",
            "pspecies": "pseudomonas",
            "host_genes": ["AT1G01010", "AT1G01020"],
            "pathogen_genes": "PSPTO_0001,PSPTO_0002",
            "method": "wang",
            "score": "bma",
            "threshold": 0.5,
        }
    }}

    @field_validator("hspecies", "pspecies", "method", "score", mode="before")
    @classmethod
    def _normalize_name(cls, value: Any) -> str:
        return str(value or "").strip().lower()

    @field_validator("host_genes", "pathogen_genes", mode="before")
    @classmethod
    def _parse_genes(cls, value: Any) -> List[str]:
        return to_gene_list(value)

    @field_validator("threshold", mode="before")
    @classmethod
    def _parse_threshold(cls, value: Any) -> float:
        return parse_number(value, 0.0)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "GoSimJobRequest":
        if payload is None:
            raise InputError("Missing job payload")
        try:
            request = cls.model_validate(dict(payload))
        except ValidationError as e:
            raise InputError("Invalid GO similarity request", details=e.errors()) from e
        if not request.hspecies or not request.pspecies:
            raise InputError("Missing required fields: hspecies, pspecies")
        return request


# ==============================================================================
# Storage Collaborators
# ==============================================================================
class InMemoryTermLookup:
    """
    Annotation rows held in memory

    Each row is a mapping with species, sptype ("host"/"pathogen"), gene and
    term and/or terms. When no row matches the requested role the lookup is
    retried without the role filter.
    """

    def __init__(self, rows: Iterable[Mapping[str, Any]]):
        self.rows = [dict(row) for row in rows]

    async def fetch_gene_terms(
        self,
        species: str,
        role: str,
        genes: Sequence[str],
    ) -> Dict[str, GeneTermRecord]:
        if not genes:
            return {}
        wanted = set(genes)
        species = str(species or "").strip().lower()

        matches = [
            row for row in self.rows
            if str(row.get("species", "")).strip().lower() == species
            and row.get("gene") in wanted
        ]
        with_role = [row for row in matches if row.get("sptype") == role]
        if with_role:
            matches = with_role

        records: Dict[str, GeneTermRecord] = {}
        for row in matches:
            gene = str(row.get("gene") or "").strip()
            if not gene:
                continue
            records[gene] = GeneTermRecord(
                gene=gene,
                term=str(row.get("term") or ""),
                terms=to_terms_array(row),
            )
        return records


def _result_handle() -> str:
    return f"hpinet{int(time.time() * 1000)}results"


class InMemoryResultSink:
    """Result sets kept in a dict, keyed by handle"""

    def __init__(self) -> None:
        self.results: Dict[str, List[Dict[str, Any]]] = {}

    async def save(self, records: List[Dict[str, Any]]) -> str:
        handle = _result_handle()
        while handle in self.results:
            handle = f"{handle}_{len(self.results)}"
        self.results[handle] = list(records) if records else [dict(NO_RESULTS_RECORD)]
        return handle


class JsonResultSink:
    """One JSON file per result set under a directory"""

    def __init__(self, output_dir: Union[str, Path]):
        self.output_dir = Path(output_dir)

    def path_for(self, handle: str) -> Path:
        return self.output_dir / f"{handle}.json"

    async def save(self, records: List[Dict[str, Any]]) -> str:
        rows = list(records) if records else [dict(NO_RESULTS_RECORD)]
        loop = asyncio.get_running_loop()
        handle = await loop.run_in_executor(None, self._write, rows)
        logger.info(f"Saved {len(rows)} result rows to {self.path_for(handle)}")
        return handle

    def _write(self, rows: List[Dict[str, Any]]) -> str:
        """Write rows to "<handle>.json.tmp", then rename into place"""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        handle = _result_handle()
        while self.path_for(handle).exists():
            handle = f"{handle}_1"

        target = self.path_for(handle)
        temp_file = target.with_name(target.name + ".tmp")
        try:
            with open(temp_file, "w") as f:
                json.dump(rows, f, indent=2)
            os.replace(temp_file, target)
        except BaseException:
            if temp_file.exists():
                temp_file.unlink()
            raise
        return handle

    def load(self, handle: str) -> List[Dict[str, Any]]:
        with open(self.path_for(handle)) as f:
            return json.load(f)


# ==============================================================================
# Job Runner
# ==============================================================================
async def run_go_sim_job(
    payload: Mapping[str, Any],
    term_lookup: Any,
    result_sink: Any,
    engine: Optional[SimilarityEngine] = None,
) -> str:
    """
    Validate, look up annotations, score and persist one job

    Returns:
        Handle of the stored result set
    """
    request = GoSimJobRequest.from_payload(payload)
    get_method(request.method)
    get_aggregator(request.score)

    if not request.host_genes or not request.pathogen_genes:
        logger.info("GO similarity job with an empty gene list, storing no results")
        return await result_sink.save([])

    engine = engine or SimilarityEngine()
    host_map, pathogen_map, _ = await asyncio.gather(
        term_lookup.fetch_gene_terms(request.hspecies, "host", request.host_genes),
        term_lookup.fetch_gene_terms(request.pspecies, "pathogen", request.pathogen_genes),
        engine.provider.get_graph(),
    )

    if not host_map or not pathogen_map:
        logger.info(
            f"No GO annotations found (host={len(host_map)}, pathogen={len(pathogen_map)}), "
            f"storing no results"
        )
        return await result_sink.save([])

    host_terms = {gene: to_terms_array(record) for gene, record in host_map.items()}
    pathogen_terms = {gene: to_terms_array(record) for gene, record in pathogen_map.items()}

    pairs = await engine.compute_similarity(
        host_terms,
        pathogen_terms,
        request.method,
        request.score,
        request.threshold,
    )
    logger.info(
        f"GO similarity job {request.hspecies}/{request.pspecies}: "
        f"{len(pairs)} pairs >= {request.threshold}"
    )
    return await result_sink.save([pair.to_record() for pair in pairs])
