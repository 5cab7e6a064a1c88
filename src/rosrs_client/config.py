"""Client configuration."""
from __future__ import annotations

import os
from typing import Optional
from urllib.parse import urljoin

from pydantic import BaseModel, ConfigDict, field_validator


class ClientSettings(BaseModel):
    """Settings shared by the RO storage and RO evolution service clients."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    rosrs_uri: str
    """Base URI of the RO storage service (the collection of all ROs)."""

    token: Optional[str] = None
    """Access token, sent as bearer token with every request."""

    roevo_uri: Optional[str] = None
    """Base URI of the RO evolution service (default: parent of `rosrs_uri`)."""

    timeout: float = 30.0
    """Timeout for remote calls, in seconds."""

    rdf_format: str = "application/rdf+xml"
    """Media type requested for manifests, resource maps and annotation bodies."""

    @field_validator("rosrs_uri", "roevo_uri")
    @classmethod
    def _with_trailing_slash(cls, v):
        if v is not None and not v.endswith("/"):
            return f"{v}/"
        return v

    @property
    def evolution_uri(self) -> str:
        """Return the base URI of the evolution service."""
        return self.roevo_uri or urljoin(self.rosrs_uri, "..")

    @classmethod
    def from_env(cls, prefix: str = "ROSRS_") -> ClientSettings:
        """Create settings from environment variables (`ROSRS_URI`, `ROSRS_TOKEN`, ...)."""
        keys = {
            "rosrs_uri": "URI",
            "token": "TOKEN",
            "roevo_uri": "ROEVO_URI",
            "timeout": "TIMEOUT",
        }
        values = {
            field: os.environ[f"{prefix}{var}"]
            for field, var in keys.items()
            if f"{prefix}{var}" in os.environ
        }
        return cls.model_validate(values)
