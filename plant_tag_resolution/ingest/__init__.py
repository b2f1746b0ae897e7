"""Input mapping for take-over point exports."""

from .take_over_point_mapper import (
    HEADER_FIELD_SETTERS,
    TakeOverPointMapper,
    detect_version,
    parse_number,
)

__all__ = ["HEADER_FIELD_SETTERS", "TakeOverPointMapper", "detect_version", "parse_number"]
