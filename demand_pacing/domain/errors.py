"""Exception taxonomy for whole-collection engine failures."""

from __future__ import annotations


class EngineError(Exception):
    """Base exception for demand and pacing engine failures."""


class InvalidInput(EngineError):
    """Raised when a request is malformed as a whole (not a single bad record)."""


class UpstreamDataUnavailable(EngineError):
    """Raised when the snapshot data source cannot be queried."""
