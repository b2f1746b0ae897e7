"""
Catalog Reference Engine for take-over points

This module resolves the catalog reference of a nozzle, electrical
connection or datum. The first step that yields a value wins:

1. raw catalog reference supplied with the point
2. key built from DN/PN/norm/connection type (reported only)
3. description keyword match against the per-geometry map, longest first
4. cylinder bypass: outer diameter read from the description
5. per-geometry default

The cylinder bypass sets ``forced_geometry_kind`` on the catalog result;
the role result is left untouched.

Author: Plant Tag Resolution Team
Version: 1.0.0
"""

import re
from enum import Enum
from typing import Dict, Optional, Tuple

from ...common.logger import PipelineLogger
from ...maps.map_models import CatalogReferenceMap
from ...utils.DataStructures import CatalogReferenceResult, TakeOverPoint

DEFAULT_KEY = "DEFAULT"
CYLINDER_GEOMETRY = "CYLI"
CYLINDER_HEIGHT_MM = 200

_DESCRIPTION_SEPARATORS = re.compile(r"[.\-\s]")
_TRAILING_NUMBER = re.compile(r"[\d_]+$")


class CatalogResolution(str, Enum):
    """How a catalog reference was found."""

    RAW = "raw"
    CONSTRUCTED = "constructed"
    DESCRIPTION = "description"
    CYLINDER_BYPASS = "cylinder_bypass"
    DEFAULT = "default"
    UNRESOLVED = "unresolved"


class CatalogReferenceEngine:
    """Resolves catalog references for take-over points."""

    def __init__(
        self,
        catalog_map: Optional[CatalogReferenceMap] = None,
        logger: PipelineLogger = PipelineLogger("INFO", False),
    ):
        self.catalog_map = catalog_map or CatalogReferenceMap()
        self.logger = logger

    def resolve(self, point: TakeOverPoint, source_id: str = "") -> CatalogReferenceResult:
        """
        Resolve the catalog reference of ``point``.

        Args:
            point: Take-over point record
            source_id: Identifier carried on the result

        Returns:
            CatalogReferenceResult; invalid with a warning when nothing matched
        """
        result = CatalogReferenceResult(
            source_id=source_id, geometry_kind=(point.geometry_kind or "").strip().upper()
        )

        raw = (point.raw_catalog_reference or "").strip()
        if raw:
            return self._resolved(result, raw, CatalogResolution.RAW, "raw catalog reference used")

        constructed = self.construct_key(point, result)
        if constructed:
            return self._resolved(
                result, constructed, CatalogResolution.CONSTRUCTED, "constructed key used"
            )

        entries = self.catalog_map.entries_for(result.geometry_kind)
        matched = self.match_description(point.description, entries)
        if matched:
            key, reference = matched
            return self._resolved(
                result, reference, CatalogResolution.DESCRIPTION, f"description matched '{key}'"
            )

        cylinder = self.define_cylinder(point.description)
        if cylinder:
            result.forced_geometry_kind = CYLINDER_GEOMETRY
            return self._resolved(
                result,
                cylinder,
                CatalogResolution.CYLINDER_BYPASS,
                f"cylinder defined from description, geometry forced to {CYLINDER_GEOMETRY}",
            )

        default = self._default(entries)
        if default:
            return self._resolved(
                result, default, CatalogResolution.DEFAULT, f"default for {result.geometry_kind}"
            )

        result.resolution = CatalogResolution.UNRESOLVED.value
        result.is_valid = False
        result.add_warning(
            f"Catalog: no catalog reference for geometry '{result.geometry_kind}' "
            f"and description '{point.description}'."
        )
        self.logger.verbose("WARNING", f"Unresolved catalog reference for '{point.tag}'")
        return result

    @staticmethod
    def construct_key(point: TakeOverPoint, result: CatalogReferenceResult) -> str:
        """DN/PN/norm/connection type mapping is not implemented; report only."""
        if point.dn or point.pn or point.norm or point.connection_type:
            result.add_message(
                f"Catalog: DN={point.dn}, PN={point.pn}, Norm={point.norm}, "
                f"Conn={point.connection_type} present but key mapping is not implemented."
            )
        return ""

    @staticmethod
    def match_description(description: str, entries: Dict[str, str]) -> Optional[Tuple[str, str]]:
        """Return ``(key, reference)`` for the longest key contained in the description."""
        if not description or not entries:
            return None
        normalized = _DESCRIPTION_SEPARATORS.sub("_", description).upper()
        candidates = sorted(
            (k for k in entries if k and k.upper() != DEFAULT_KEY and k.upper() in normalized),
            key=len,
            reverse=True,
        )
        if not candidates:
            return None
        winner = candidates[0]
        return winner, entries[winner]

    @staticmethod
    def define_cylinder(description: str) -> str:
        """
        Read the outer diameter in front of the first ``X``.

        ``_`` inside the number is a decimal point: ``48_3X6_3`` -> 48.3.
        """
        if not description:
            return ""
        text = description.upper()
        index = text.find("X")
        if index <= 0:
            return ""
        match = _TRAILING_NUMBER.search(text[:index])
        if not match:
            return ""
        try:
            diameter = float(match.group(0).strip("_").replace("_", "."))
        except ValueError:
            return ""
        return f"Diameter {diameter:g}mm Height {CYLINDER_HEIGHT_MM}mm"

    @staticmethod
    def _default(entries: Dict[str, str]) -> str:
        for key, reference in entries.items():
            if key.upper() == DEFAULT_KEY:
                return reference
        return ""

    @staticmethod
    def _resolved(
        result: CatalogReferenceResult,
        reference: str,
        resolution: CatalogResolution,
        note: str,
    ) -> CatalogReferenceResult:
        result.catalog_reference = reference
        result.resolution = resolution.value
        result.is_valid = True
        result.add_message(f"Catalog: '{reference}' ({note}).")
        return result
