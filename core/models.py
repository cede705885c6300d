# =============================================================================
# core/models.py  -  Data Models (the "nouns" of the system)
# =============================================================================
#
# These dataclasses define the *shape* of everything that flows between the
# layers: the upstream connection settings, the static tool catalog entries,
# and the resource descriptors built from dashboard listings.
#
# They carry almost no behavior.  Upstream payloads (dashboards, cubes,
# query results) are NOT modelled here: they are opaque JSON and pass
# through untouched.
# =============================================================================

from dataclasses import dataclass, field
from typing import Any, Optional


# Scheme used by every resource URI this server hands out:
#   sisense://dashboard/<oid>
RESOURCE_SCHEME = "sisense"
JSON_MIME_TYPE = "application/json"


# -----------------------------------------------------------------------------
# SisenseConfig - where the upstream lives and how to authenticate
# -----------------------------------------------------------------------------
# Frozen: built once at startup, read by every request, never mutated.
# Either field may be empty; the client then reports itself unconfigured
# and refuses to make network calls.
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class SisenseConfig:
    """Base URL and bearer credential for the Sisense REST API."""

    url: str = ""
    api_key: str = field(default="", repr=False)   # never shows up in repr/logs

    @property
    def is_complete(self) -> bool:
        return bool(self.url and self.api_key)


# -----------------------------------------------------------------------------
# ToolDescriptor - one entry of the static tool catalog
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class ToolDescriptor:
    """Name, description and JSON input schema of a callable tool."""

    name: str
    description: str
    input_schema: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


# -----------------------------------------------------------------------------
# ResourceDescriptor - a browsable item discovered from the upstream
# -----------------------------------------------------------------------------
# Produced on demand from a dashboard listing; never stored.
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class ResourceDescriptor:
    """A URI-addressed, read-only item (currently: one dashboard)."""

    uri: str
    name: str
    description: Optional[str] = None
    mime_type: str = JSON_MIME_TYPE

    def to_dict(self) -> dict[str, Any]:
        return {
            "uri": self.uri,
            "name": self.name,
            "description": self.description,
            "mimeType": self.mime_type,
        }


# -----------------------------------------------------------------------------
# ResourceRef - a resource URI split into its parts
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class ResourceRef:
    """`sisense://dashboard/123` -> scheme="sisense", kind="dashboard", id="123"."""

    scheme: str
    kind: str
    id: str
