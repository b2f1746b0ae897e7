"""Resolution engines: tokenizer, composer, catalog, identity and disposition."""

from .catalog import CatalogReferenceEngine, CatalogResolution
from .composer import ComposerEngine, CompositionResult, CompositionStep
from .disposition import DispositionEngine, DispositionStageId, assign_bucket
from .identity import (
    IdentityEngine,
    IdentityRecord,
    IdentityRequest,
    IdentityResolution,
    IdentityStore,
    assign_identity,
)
from .tokenizer import TokenEngine, TokenizationStageId

__all__ = [
    "TokenEngine",
    "TokenizationStageId",
    "ComposerEngine",
    "CompositionResult",
    "CompositionStep",
    "CatalogReferenceEngine",
    "CatalogResolution",
    "IdentityEngine",
    "IdentityRecord",
    "IdentityRequest",
    "IdentityResolution",
    "IdentityStore",
    "assign_identity",
    "DispositionEngine",
    "DispositionStageId",
    "assign_bucket",
]
