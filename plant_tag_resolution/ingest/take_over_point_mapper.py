"""
Take-over point mapper

Builds TakeOverPoint records from rows that were already split into
``{raw header: value}``. The header map names the raw header for each
logical field; a static table maps each logical field to its setter.

Author: Plant Tag Resolution Team
Version: 1.0.0
"""

import re
from pathlib import PurePath
from typing import Callable, Dict, Iterable, List, Optional

from ..common.logger import PipelineLogger
from ..maps.map_models import HeaderMap
from ..utils.DataStructures import TakeOverPoint

_FILE_VERSION = re.compile(r"\.asm-(\d+)\.txt$", re.IGNORECASE)


def _set_text(attribute: str) -> Callable[[TakeOverPoint, str], None]:
    def setter(point: TakeOverPoint, value: str) -> None:
        setattr(point, attribute, value.strip())

    return setter


def _set_component(attribute: str, index: int) -> Callable[[TakeOverPoint, str], None]:
    def setter(point: TakeOverPoint, value: str) -> None:
        getattr(point, attribute)[index] = parse_number(value)

    return setter


def parse_number(value: str) -> float:
    """Parse a coordinate; decimal commas are accepted. Raises ValueError."""
    text = (value or "").strip().replace(",", ".")
    if not text:
        return 0.0
    return float(text)


# Logical header key -> field setter.
HEADER_FIELD_SETTERS: Dict[str, Callable[[TakeOverPoint, str], None]] = {
    "tag": _set_text("tag"),
    "owner_model": _set_text("owner_model"),
    "description": _set_text("description"),
    "geometry_kind": _set_text("geometry_kind"),
    "raw_catalog_reference": _set_text("raw_catalog_reference"),
    "dn": _set_text("dn"),
    "pn": _set_text("pn"),
    "norm": _set_text("norm"),
    "connection_type": _set_text("connection_type"),
    "reference_number": _set_text("reference_number"),
    "position_x": _set_component("position", 0),
    "position_y": _set_component("position", 1),
    "position_z": _set_component("position", 2),
    "direction_x": _set_component("direction", 0),
    "direction_y": _set_component("direction", 1),
    "direction_z": _set_component("direction", 2),
}


def detect_version(file_name: str) -> str:
    """``pump.asm-3.txt`` -> ``3``; empty when the name carries no version."""
    match = _FILE_VERSION.search(PurePath(file_name or "").name)
    return match.group(1) if match else ""


class TakeOverPointMapper:
    """Maps split rows onto TakeOverPoint records through the header map."""

    def __init__(
        self,
        header_map: Optional[HeaderMap] = None,
        logger: PipelineLogger = PipelineLogger("INFO", False),
    ):
        self.header_map = header_map or HeaderMap()
        self.logger = logger

    def resolve_header(self, logical_key: str, row: Dict[str, str]) -> Optional[str]:
        """
        Find the raw header of ``logical_key`` in ``row``.

        Exact (case-insensitive) match first; exports that prefix headers,
        e.g. ``CSYS Position X``, fall back to an ends-with match.
        """
        raw_header = self.header_map.headings.get(logical_key)
        if not raw_header:
            return None
        wanted = raw_header.strip().lower()

        for header in row:
            if header.strip().lower() == wanted:
                return header
        for header in row:
            if header.strip().lower().endswith(wanted):
                return header
        return None

    def map_row(
        self,
        row: Dict[str, str],
        source_file: str = "",
        source_version: str = "",
    ) -> TakeOverPoint:
        """
        Build one TakeOverPoint from a split row.

        Args:
            row: Raw header to cell value
            source_file: Export file the row came from
            source_version: Export version; detected from the file name when empty

        Returns:
            TakeOverPoint; unparsable numbers are logged and left at 0.0
        """
        point = TakeOverPoint(
            source_file=source_file,
            source_version=source_version or detect_version(source_file),
        )
        for logical_key, setter in HEADER_FIELD_SETTERS.items():
            header = self.resolve_header(logical_key, row)
            if header is None:
                continue
            value = row.get(header)
            if value is None:
                continue
            try:
                setter(point, str(value))
            except ValueError:
                self.logger.warning(
                    f"Cannot parse '{value}' for '{logical_key}' of point '{point.tag}'"
                )
        return point

    def map_rows(
        self,
        rows: Iterable[Dict[str, str]],
        source_file: str = "",
        source_version: str = "",
    ) -> List[TakeOverPoint]:
        points = [self.map_row(row, source_file, source_version) for row in rows]
        self.logger.info(f"Mapped {len(points)} take-over points from '{source_file}'")
        return points
