"""
Plant tag resolution.

Turns raw engineering tags and take-over points into canonical tags with
stable identities and an import disposition.
"""

from .common.exceptions import (
    ConfigurationError,
    IdentityStoreError,
    MapLoadError,
    PlantTagResolutionError,
)
from .common.logger import PipelineLogger
from .config.configuration_manager import (
    ConfigurationManager,
    PipelineConfig,
    load_config_from_env,
)
from .engine import (
    CatalogReferenceEngine,
    ComposerEngine,
    DispositionEngine,
    IdentityEngine,
    IdentityStore,
    TokenEngine,
    assign_bucket,
    assign_identity,
)
from .ingest import TakeOverPointMapper
from .maps.map_registry import MapRegistry
from .pipeline import TagResolutionPipeline
from .utils.DataStructures import (
    InheritedContext,
    PipelineElement,
    QualityBucket,
    ResultKind,
    TakeOverPoint,
    Token,
    TokenizationResult,
)

__version__ = "1.0.0"

__all__ = [
    "CatalogReferenceEngine",
    "ComposerEngine",
    "ConfigurationError",
    "ConfigurationManager",
    "DispositionEngine",
    "IdentityEngine",
    "IdentityStore",
    "IdentityStoreError",
    "InheritedContext",
    "MapLoadError",
    "MapRegistry",
    "PipelineConfig",
    "PipelineElement",
    "PipelineLogger",
    "PlantTagResolutionError",
    "QualityBucket",
    "ResultKind",
    "TagResolutionPipeline",
    "TakeOverPoint",
    "TakeOverPointMapper",
    "Token",
    "TokenEngine",
    "TokenizationResult",
    "assign_bucket",
    "assign_identity",
    "load_config_from_env",
]
