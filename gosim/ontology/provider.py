"""
GO Similarity Graph Provider
============================
Process-wide, lazily loaded ontology graph.

The first caller of get_graph() starts the load; callers arriving while it
is in flight await the same task instead of starting another download or
parse. A failed load is forgotten so the next call retries from scratch.

Usage:
    provider = get_graph_provider()
    graph = await provider.get_graph()

Version: 1.0.0
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

from gosim.ontology.graph import OntologyGraph
from gosim.ontology.loader import OntologyLoader

logger = logging.getLogger(__name__)


class OntologyGraphProvider:
    """Single-flight owner of one OntologyGraph"""

    def __init__(self, loader: Optional[OntologyLoader] = None):
        self._loader = loader
        self._graph: Optional[OntologyGraph] = None
        self._task: Optional[asyncio.Task] = None
        self.load_count = 0

    @property
    def loader(self) -> OntologyLoader:
        if self._loader is None:
            self._loader = OntologyLoader()
        return self._loader

    @property
    def is_loaded(self) -> bool:
        return self._graph is not None

    async def get_graph(self) -> OntologyGraph:
        """Return the graph, loading it on first use"""
        if self._graph is not None:
            return self._graph

        loop = asyncio.get_running_loop()
        task = self._task
        # a finished task, or one bound to a closed loop, never yields a graph
        if task is None or task.done() or task.get_loop() is not loop:
            task = self._task = loop.create_task(self._load())

        # shield: one cancelled caller must not cancel the shared load
        return await asyncio.shield(task)

    async def _load(self) -> OntologyGraph:
        self.load_count += 1
        logger.info("Loading GO ontology graph")
        try:
            graph = await self.loader.load()
        except asyncio.CancelledError:
            logger.warning("GO ontology graph load cancelled")
            raise
        finally:
            if self._task is asyncio.current_task():
                self._task = None
        self._graph = graph
        logger.info(f"GO ontology graph ready: {graph!r}")
        return graph

    def set_graph(self, graph: OntologyGraph) -> None:
        """Install a prebuilt graph, skipping the loader"""
        self._graph = graph
        self._task = None

    def reset(self) -> None:
        """Forget the graph so the next call reloads it"""
        self._graph = None
        self._task = None


# =============================================================================
# Singleton instance for global access
# =============================================================================
_default_provider: Optional[OntologyGraphProvider] = None


def get_graph_provider() -> OntologyGraphProvider:
    """Get the process-wide graph provider"""
    global _default_provider
    if _default_provider is None:
        _default_provider = OntologyGraphProvider()
    return _default_provider


def reset_graph_provider() -> None:
    """Drop the process-wide provider and its graph"""
    global _default_provider
    _default_provider = None
