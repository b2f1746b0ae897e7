"""Stable identity resolution backed by a JSON identity store."""

from .identity_engine import (
    DEFAULT_KNOWN_GEOMETRY_KINDS,
    IdentityEngine,
    IdentityRequest,
    IdentityResolution,
    assign_identity,
    strip_source_version,
)
from .identity_store import IdentityRecord, IdentityStore, make_index_key

__all__ = [
    "IdentityEngine",
    "IdentityRequest",
    "IdentityResolution",
    "IdentityRecord",
    "IdentityStore",
    "assign_identity",
    "make_index_key",
    "strip_source_version",
    "DEFAULT_KNOWN_GEOMETRY_KINDS",
]
