"""Errors raised by the research object client."""
from __future__ import annotations

from typing import Optional


class ROSRSError(Exception):
    """A remote service answered with an unexpected status code."""

    status: int
    """HTTP status code of the response."""

    reason: str
    """HTTP reason phrase (or response text, if there is no phrase)."""

    uri: Optional[str]
    """URI of the request that failed."""

    def __init__(self, message: str, status: int, reason: str = "", uri=None):
        super().__init__(f"{message} ({status} {reason})")
        self.status = status
        self.reason = reason
        self.uri = str(uri) if uri is not None else None


class ManifestError(ValueError):
    """The remote source data (manifest, resource map, body) is invalid."""

    uri: Optional[str]

    def __init__(self, message: str, uri=None):
        super().__init__(f"{message}: {uri}" if uri is not None else message)
        self.uri = str(uri) if uri is not None else None


class ObjectNotLoadedError(RuntimeError):
    """Data of an entity was accessed before the entity has been loaded."""

    def __init__(self, entity):
        super().__init__(f"{type(entity).__name__} is not loaded: {entity.uri}")
        self.entity = entity
