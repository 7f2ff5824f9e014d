#!/usr/bin/env python3
"""
GO Similarity Command Line Runner
=================================
Score host x pathogen gene pairs by GO semantic similarity.

Script: scripts/run_go_similarity.py

Usage:
    python scripts/run_go_similarity.py --host-terms host.json --pathogen-terms pathogen.json
    python scripts/run_go_similarity.py --host-terms host.json --pathogen-terms pathogen.json \\
        --obo data/go-basic.obo --method lin --aggregation max --threshold 0.4 --output pairs.json
    python scripts/run_go_similarity.py --config configs/gosim.yaml ...

Input:
    - JSON files mapping gene id -> list of GO ids or a "GO:1|GO:2" string
    - Optional YAML configuration (see gosim.config.GoSimSettings)

Output:
    - Console: summary and the top pairs
    - JSON file: all kept pairs as result records

Version: 1.0.0
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from gosim.config import GoSimSettings
from gosim.core.errors import GoSimError
from gosim.ontology import OntologyGraphProvider, OntologyLoader
from gosim.services import to_terms_array
from gosim.similarity import SimilarityEngine

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def load_gene_terms(path: Path) -> Dict[str, List[str]]:
    """Read a gene -> terms JSON mapping"""
    with open(path) as f:
        data = json.load(f)

    gene_terms = {}
    for gene, value in data.items():
        if isinstance(value, str):
            gene_terms[gene] = to_terms_array({"term": value})
        else:
            gene_terms[gene] = to_terms_array({"terms": value})
    return gene_terms


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="GO semantic similarity between host and pathogen genes")
    parser.add_argument("--host-terms", type=Path, required=True, help="JSON gene -> GO terms (host)")
    parser.add_argument("--pathogen-terms", type=Path, required=True, help="JSON gene -> GO terms (pathogen)")
    parser.add_argument("--config", type=Path, default=None, help="YAML configuration file")
    parser.add_argument("--obo", type=Path, default=None, help="GO OBO file (overrides config)")
    parser.add_argument("--no-download", action="store_true", help="Fail instead of downloading a missing OBO")
    parser.add_argument("--method", default=None, help="resnik, lin, wang or pekar")
    parser.add_argument("--aggregation", default=None, help="max, avg or bma")
    parser.add_argument("--threshold", type=float, default=None, help="Minimum score kept")
    parser.add_argument("--output", type=Path, default=None, help="Write kept pairs as JSON")
    parser.add_argument("--top", type=int, default=10, help="Pairs printed to the console")
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> int:
    settings = GoSimSettings.from_env()
    if args.config:
        settings.load_from_yaml(args.config)
    if args.obo:
        settings.obo_path = str(args.obo)
    if args.no_download:
        settings.auto_download = False

    method = args.method or settings.default_method
    aggregation = args.aggregation or settings.default_aggregation
    threshold = settings.default_threshold if args.threshold is None else args.threshold

    host_terms = load_gene_terms(args.host_terms)
    pathogen_terms = load_gene_terms(args.pathogen_terms)
    logger.info(f"Loaded {len(host_terms)} host genes and {len(pathogen_terms)} pathogen genes")

    engine = SimilarityEngine(OntologyGraphProvider(OntologyLoader(settings)))
    pairs = await engine.compute_similarity(host_terms, pathogen_terms, method, aggregation, threshold)

    ranked = sorted(pairs, key=lambda p: p.score, reverse=True)
    print(f"\n{len(pairs)} pairs with {method}/{aggregation} >= {threshold}")
    for pair in ranked[:args.top]:
        print(f"  {pair.host_gene:<20} {pair.pathogen_gene:<20} {pair.score:.3f}")

    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        with open(args.output, "w") as f:
            json.dump([p.to_record() for p in pairs], f, indent=2)
        logger.info(f"Results saved to {args.output}")

    return 0


def main(argv=None) -> int:
    args = parse_args(argv)
    try:
        return asyncio.run(run(args))
    except GoSimError as e:
        logger.error(f"{e.message}" + (f" ({e.details})" if e.details else ""))
        return 1


if __name__ == "__main__":
    sys.exit(main())
