"""Code tables and their loader."""

from .map_models import (
    CatalogReferenceMap,
    CodificationEntry,
    CodificationMap,
    DisciplineHierarchyTokenMap,
    DisciplineMap,
    DisciplineSchema,
    EntityMap,
    HeaderMap,
    RoleDefinition,
    RoleMap,
    TokenGroup,
    TokenRegexDefinition,
    TokenRegexMap,
)
from .map_registry import DEFAULT_MAPS_DIR, MapRegistry

__all__ = [
    "CatalogReferenceMap",
    "CodificationEntry",
    "CodificationMap",
    "DEFAULT_MAPS_DIR",
    "DisciplineHierarchyTokenMap",
    "DisciplineMap",
    "DisciplineSchema",
    "EntityMap",
    "HeaderMap",
    "MapRegistry",
    "RoleDefinition",
    "RoleMap",
    "TokenGroup",
    "TokenRegexDefinition",
    "TokenRegexMap",
]
