"""
Map Registry

Loads every code table the pipeline needs from one directory and exposes them
as validated pydantic models.

Features:
- YAML or JSON code tables, one file per table
- Validation through the pydantic models in ``map_models``
- Optional tables (catalog reference, header map) default to empty
- Packaged default tables via ``MapRegistry.default()``

Author: Plant Tag Resolution Team
Version: 1.0.0
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Type, Union

import yaml
from pydantic import BaseModel, ValidationError

from ..common.config_utils import read_structured_file
from ..common.exceptions import MapLoadError
from ..common.logger import PipelineLogger
from .map_models import (
    CatalogReferenceMap,
    CodificationMap,
    DisciplineHierarchyTokenMap,
    DisciplineMap,
    EntityMap,
    HeaderMap,
    RoleMap,
    TokenRegexMap,
)

DEFAULT_MAPS_DIR = Path(__file__).resolve().parent.parent / "config" / "maps"

# file stem -> (attribute, model, required)
MAP_FILES: Dict[str, tuple] = {
    "codification": ("codification", CodificationMap, True),
    "token_regex": ("token_regex", TokenRegexMap, True),
    "discipline": ("discipline", DisciplineMap, True),
    "entity": ("entity", EntityMap, True),
    "role": ("role", RoleMap, True),
    "discipline_hierarchy": ("discipline_hierarchy", DisciplineHierarchyTokenMap, True),
    "catalog_reference": ("catalog_reference", CatalogReferenceMap, False),
    "header_map": ("header_map", HeaderMap, False),
}

_EXTENSIONS = (".yaml", ".yml", ".json")


@dataclass
class MapRegistry:
    """All code tables used by one pipeline instance."""

    codification: CodificationMap = field(default_factory=CodificationMap)
    token_regex: TokenRegexMap = field(default_factory=TokenRegexMap)
    discipline: DisciplineMap = field(default_factory=DisciplineMap)
    entity: EntityMap = field(default_factory=EntityMap)
    role: RoleMap = field(default_factory=RoleMap)
    discipline_hierarchy: DisciplineHierarchyTokenMap = field(
        default_factory=DisciplineHierarchyTokenMap
    )
    catalog_reference: CatalogReferenceMap = field(default_factory=CatalogReferenceMap)
    header_map: HeaderMap = field(default_factory=HeaderMap)

    @classmethod
    def from_dicts(cls, tables: Dict[str, Dict[str, Any]]) -> "MapRegistry":
        """Build a registry from already-parsed tables keyed by file stem."""
        registry = cls()
        for stem, data in tables.items():
            if stem not in MAP_FILES:
                raise MapLoadError(f"Unknown code table '{stem}'")
            attribute, model, _ = MAP_FILES[stem]
            setattr(registry, attribute, _validate(model, data or {}, stem))
        return registry

    @classmethod
    def from_directory(
        cls,
        directory: Union[str, Path],
        logger: Optional[PipelineLogger] = None,
    ) -> "MapRegistry":
        """
        Load all code tables from ``directory``.

        Raises:
            MapLoadError: when the directory or a required table is missing,
                unreadable or invalid
        """
        logger = logger or PipelineLogger("INFO", False)
        root = Path(directory)
        if not root.is_dir():
            raise MapLoadError(f"Maps directory not found: {root}")

        tables: Dict[str, Dict[str, Any]] = {}
        for stem, (_, _, required) in MAP_FILES.items():
            path = _find_table(root, stem)
            if path is None:
                if required:
                    raise MapLoadError(f"Required code table '{stem}' not found in {root}")
                logger.verbose("WARNING", f"Optional code table '{stem}' not found in {root}")
                continue
            try:
                tables[stem] = read_structured_file(path)
            except (OSError, ValueError, yaml.YAMLError) as e:
                raise MapLoadError(f"Could not read code table {path}: {e}") from e
            logger.debug(f"Loaded code table '{stem}' from {path}")

        return cls.from_dicts(tables)

    @classmethod
    def default(cls, logger: Optional[PipelineLogger] = None) -> "MapRegistry":
        """Registry built from the tables shipped with the package."""
        return cls.from_directory(DEFAULT_MAPS_DIR, logger)


def _find_table(root: Path, stem: str) -> Optional[Path]:
    for extension in _EXTENSIONS:
        candidate = root / f"{stem}{extension}"
        if candidate.exists():
            return candidate
    return None


def _validate(model: Type[BaseModel], data: Dict[str, Any], stem: str) -> BaseModel:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise MapLoadError(f"Invalid code table '{stem}': {e}") from e
