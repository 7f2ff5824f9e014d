"""
GO Similarity Ontology Loader
=============================
OBO parsing, graph construction and download of the GO source file.

Supported input:
- go-basic.obo / go.obo (plain text)
- .obo.gz (gzip compressed)

Only [Term] stanzas are used; obsolete terms and terms lacking id, name or
namespace are dropped.

Version: 1.0.0
"""
from __future__ import annotations

import asyncio
import gzip
import logging
import os
import re
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Union
from urllib.parse import urljoin

import aiohttp

from gosim.config import GoSimSettings, get_settings
from gosim.core.errors import ResourceError
from gosim.core.types import Relationship, Term
from gosim.ontology.graph import OntologyGraph

logger = logging.getLogger(__name__)

MIN_GRAPH_NODES = 2
DOWNLOAD_CHUNK_SIZE = 64 * 1024
REDIRECT_STATUSES = (301, 302, 303, 307, 308)


# =============================================================================
# OBO Parser
# =============================================================================
class OBOParser:
    """
    OBO format parser

    Handles OBO 1.2 and 1.4 [Term] stanzas.
    """

    STANZA_PATTERN = re.compile(r'^\[([A-Za-z_]+)\]$')

    def parse_file(self, file_path: Union[str, Path]) -> List[Term]:
        """
        Parse an OBO file

        Args:
            file_path: .obo or .obo.gz path

        Returns:
            Accepted terms in file order
        """
        file_path = Path(file_path)
        logger.info(f"Parsing OBO file: {file_path}")

        if str(file_path).endswith('.gz'):
            handle = gzip.open(file_path, 'rt', encoding='utf-8')
        else:
            handle = open(file_path, 'r', encoding='utf-8')

        with handle as f:
            terms = list(self.parse_lines(f))

        logger.info(f"Parsed {len(terms)} terms from {file_path.name}")
        return terms

    def parse_text(self, text: str) -> List[Term]:
        return list(self.parse_lines(text.splitlines()))

    def parse_lines(self, lines: Iterable[str]) -> Iterator[Term]:
        """Yield one Term per accepted [Term] stanza"""
        stanza: Optional[str] = None
        stanza_lines: List[str] = []

        for raw_line in lines:
            line = raw_line.rstrip()
            if not line:
                continue

            match = self.STANZA_PATTERN.match(line)
            if match:
                term = self._flush(stanza, stanza_lines)
                if term is not None:
                    yield term
                stanza = match.group(1)
                stanza_lines = []
                continue

            if stanza:
                stanza_lines.append(line)

        term = self._flush(stanza, stanza_lines)
        if term is not None:
            yield term

    def _flush(self, stanza: Optional[str], lines: List[str]) -> Optional[Term]:
        if stanza != 'Term':
            return None
        return self.parse_term(lines)

    @staticmethod
    def parse_term(lines: Iterable[str]) -> Optional[Term]:
        """Parse the tag-value lines of one [Term] stanza"""
        term_id = ""
        name = ""
        namespace = ""
        obsolete = False
        alt_ids: List[str] = []
        relationships: List[Relationship] = []

        for raw_line in lines:
            line = raw_line.strip()
            tag, sep, value = line.partition(': ')
            if not sep:
                continue

            if tag == 'id':
                term_id = value.strip()
            elif tag == 'name':
                name = value.strip()
            elif tag == 'namespace':
                namespace = value.strip()
            elif tag == 'is_obsolete':
                obsolete = value.strip() == 'true'
            elif tag == 'alt_id':
                alt_ids.append(value.strip())
            elif tag == 'is_a':
                # Format: GO:0008150 ! biological_process
                parent_id = value.split('!')[0].strip()
                if parent_id:
                    relationships.append(Relationship(type='is_a', id=parent_id))
            elif tag == 'relationship':
                # Format: part_of GO:0005634 ! nucleus
                parts = value.split('!')[0].split()
                if len(parts) >= 2:
                    relationships.append(Relationship(type=parts[0], id=parts[1]))

        if not term_id or not name or not namespace:
            return None
        if obsolete:
            return None

        return Term(
            id=term_id,
            name=name,
            namespace=namespace,
            obsolete=obsolete,
            alt_ids=tuple(alt_ids),
            relationships=tuple(relationships),
        )


# =============================================================================
# Graph Construction
# =============================================================================
def build_graph(terms: Iterable[Term], validate_acyclic: bool = True) -> OntologyGraph:
    """
    Build the GO DAG from parsed terms

    Raises:
        ResourceError: fewer than two nodes, or a cycle when validate_acyclic
    """
    graph = OntologyGraph.from_terms(terms)

    if graph.total_nodes < MIN_GRAPH_NODES:
        raise ResourceError("GO graph parsing failed: graph is too small")

    if validate_acyclic:
        cyclic = graph.find_cycle()
        if cyclic:
            raise ResourceError(
                "GO graph parsing failed: ontology contains a cycle",
                details={"terms": cyclic[:20], "count": len(cyclic)},
            )

    logger.info(
        f"Built GO graph: {graph.total_nodes} nodes, {graph.num_edges} edges, "
        f"{len(graph.alt_ids)} alt ids"
    )
    return graph


# =============================================================================
# Ontology Loader
# =============================================================================
class OntologyLoader:
    """
    GO ontology loader

    Reads the cached OBO file, downloading it first when it is missing and
    auto download is enabled.
    """

    def __init__(self, settings: Optional[GoSimSettings] = None):
        """
        Args:
            settings: source path/URL and download options; process settings if omitted
        """
        self.settings = settings or get_settings()
        self.parser = OBOParser()

    @property
    def obo_path(self) -> Path:
        return self.settings.obo_file

    async def load(self) -> OntologyGraph:
        """Ensure the OBO file is present, then parse it into a graph"""
        await self.ensure_obo_file()
        return self.load_file(self.obo_path)

    def load_file(self, path: Union[str, Path]) -> OntologyGraph:
        """Parse an existing OBO file into a graph"""
        path = Path(path)
        if not _is_readable_file(path):
            raise ResourceError(f"Missing GO OBO file at {path}")

        try:
            terms = self.parser.parse_file(path)
        except (OSError, UnicodeDecodeError) as e:
            raise ResourceError(f"Failed to read GO OBO file at {path}", details=str(e)) from e

        return build_graph(terms, validate_acyclic=self.settings.validate_acyclic)

    async def ensure_obo_file(self) -> Path:
        """Make sure a readable OBO file exists at the configured path"""
        path = self.obo_path
        if _is_readable_file(path):
            return path

        if not self.settings.auto_download:
            raise ResourceError(
                f"Missing GO OBO file at {path}. Set GO_OBO_PATH or enable GO_AUTO_DOWNLOAD_OBO."
            )

        url = self.settings.obo_url
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            await download_file(
                url,
                path,
                max_redirects=self.settings.max_redirects,
                timeout=self.settings.download_timeout,
            )
        except (aiohttp.ClientError, OSError, asyncio.TimeoutError, ResourceError) as e:
            raise ResourceError(
                f"Failed to auto-download GO OBO from {url}",
                details=str(e) or type(e).__name__,
            ) from e

        if not _is_readable_file(path):
            raise ResourceError(f"GO OBO download completed but file is unreadable: {path}")
        return path


def _is_readable_file(path: Path) -> bool:
    return path.is_file() and os.access(path, os.R_OK)


async def download_file(
    url: str,
    destination: Union[str, Path],
    max_redirects: int = 5,
    timeout: float = 600.0,
) -> Path:
    """
    Download url into destination

    At most max_redirects redirects are followed; 0 means the first response
    must be the file itself. The body is streamed into "<destination>.download"
    and renamed into place only after a complete 200 response, so a failed
    download never leaves a partial file at the destination.
    """
    destination = Path(destination)
    temp_file = destination.with_name(destination.name + ".download")
    remaining = max(int(max_redirects), 0)

    logger.info(f"Downloading GO ontology from {url}")
    client_timeout = aiohttp.ClientTimeout(total=timeout)
    try:
        async with aiohttp.ClientSession(timeout=client_timeout) as session:
            current = url
            while True:
                async with session.get(current, allow_redirects=False) as resp:
                    if resp.status in REDIRECT_STATUSES:
                        location = resp.headers.get("Location")
                        if not location:
                            raise ResourceError(f"Redirect without location from {current}")
                        if remaining <= 0:
                            raise ResourceError(f"Too many redirects while downloading {url}")
                        remaining -= 1
                        current = urljoin(str(resp.url), location)
                        logger.debug(f"Following redirect to {current}")
                        continue

                    if resp.status != 200:
                        raise ResourceError(f"Unexpected HTTP {resp.status} while downloading {current}")
                    with open(temp_file, 'wb') as out:
                        async for chunk in resp.content.iter_chunked(DOWNLOAD_CHUNK_SIZE):
                            out.write(chunk)
                    break
        os.replace(temp_file, destination)
    except BaseException:
        _remove_quietly(temp_file)
        raise

    logger.info(f"Downloaded GO ontology to {destination}")
    return destination


def _remove_quietly(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Could not remove partial download {path}: {e}")


# =============================================================================
# Factory Function
# =============================================================================
def create_ontology_loader(settings: Optional[GoSimSettings] = None) -> OntologyLoader:
    """
    Factory: create an ontology loader

    Args:
        settings: loader settings

    Returns:
        OntologyLoader instance
    """
    return OntologyLoader(settings)
