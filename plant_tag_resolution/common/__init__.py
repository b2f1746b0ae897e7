"""
Common utilities shared across the tokenizer, composer, identity and
disposition engines.
"""

from .config_utils import read_structured_file
from .exceptions import (
    ConfigurationError,
    IdentityStoreError,
    MapLoadError,
    PlantTagResolutionError,
)
from .logger import PipelineLogger

__all__ = [
    "ConfigurationError",
    "IdentityStoreError",
    "MapLoadError",
    "PipelineLogger",
    "PlantTagResolutionError",
    "read_structured_file",
]
