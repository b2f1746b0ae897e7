"""Exceptions raised by the tag resolution package."""


class PlantTagResolutionError(Exception):
    """Base class for all package errors."""


class ConfigurationError(PlantTagResolutionError, ValueError):
    """Raised when pipeline settings fail validation."""


class MapLoadError(PlantTagResolutionError):
    """Raised when a code table cannot be read or does not validate."""


class IdentityStoreError(PlantTagResolutionError):
    """Raised when the identity snapshot cannot be read or written."""
