"""
GO Similarity Errors
====================
Exception taxonomy for the similarity engine.

- InputError: bad caller input, raised before any computation
- ResourceError: the ontology could not be obtained or is unusable

A pair without a definable similarity is not an error; scoring functions
return None and the pair is dropped.
"""
from __future__ import annotations

from typing import Any, Optional


class GoSimError(Exception):
    """Base error carrying an HTTP-style status for service callers"""

    status: int = 500

    def __init__(self, message: str, details: Optional[Any] = None, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        if status is not None:
            self.status = status

    def to_dict(self) -> dict:
        payload = {"error": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class InputError(GoSimError):
    """Missing or unrecognized request input"""

    status = 400


class ResourceError(GoSimError):
    """Ontology source missing, unreadable, malformed or too small"""

    status = 500
