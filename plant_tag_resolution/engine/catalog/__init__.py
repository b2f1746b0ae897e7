"""Catalog reference resolution for take-over points."""

from .catalog_reference_engine import CatalogReferenceEngine, CatalogResolution

__all__ = ["CatalogReferenceEngine", "CatalogResolution"]
