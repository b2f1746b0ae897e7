"""
Tests for mapping take-over point export rows onto TakeOverPoint records.
"""

import pytest

from plant_tag_resolution.ingest import (
    HEADER_FIELD_SETTERS,
    TakeOverPointMapper,
    detect_version,
    parse_number,
)
from plant_tag_resolution.maps.map_registry import MapRegistry
from plant_tag_resolution.utils.DataStructures import TakeOverPoint


@pytest.fixture
def mapper(default_maps: MapRegistry, quiet_logger) -> TakeOverPointMapper:
    return TakeOverPointMapper(default_maps.header_map, quiet_logger)


class TestMapRow:
    """Test mapping a single split row."""

    def test_maps_text_and_coordinates(self, mapper: TakeOverPointMapper) -> None:
        # Arrange
        row = {
            "Tag": " PCM01_MHS01_MFS01_STR01 ",
            "Owner Model": "PUMP-01",
            "Description": "Flange DN50",
            "Type": "NOZZ",
            "Position X": "1,5",
            "Position Y": "2",
            "Position Z": "-3.25",
            "Direction Z": "1",
            "Reference Number": "R-7",
        }

        # Act
        point = mapper.map_row(row, source_file="/exports/pump.asm-3.txt")

        # Assert
        assert point.tag == "PCM01_MHS01_MFS01_STR01"
        assert point.owner_model == "PUMP-01"
        assert point.geometry_kind == "NOZZ"
        assert point.position == [1.5, 2.0, -3.25]
        assert point.direction == [0.0, 0.0, 1.0]
        assert point.reference_number == "R-7"
        assert point.source_file == "/exports/pump.asm-3.txt"
        assert point.source_version == "3"

    def test_prefixed_headers(self, mapper: TakeOverPointMapper) -> None:
        """Test headers carrying an export prefix fall back to an ends-with match."""
        # Arrange
        row = {"CSYS Position X": "10", "tag": "PCM01"}

        # Act
        point = mapper.map_row(row)

        # Assert
        assert point.position[0] == 10.0
        assert point.tag == "PCM01"

    def test_unparsable_number_left_at_zero(self, mapper: TakeOverPointMapper) -> None:
        # Act
        point = mapper.map_row({"Tag": "PCM01", "Position Y": "n/a"})

        # Assert
        assert point.position == [0.0, 0.0, 0.0]
        assert point.tag == "PCM01"

    def test_explicit_version_wins(self, mapper: TakeOverPointMapper) -> None:
        # Act
        point = mapper.map_row({}, source_file="pump.asm-3.txt", source_version="9")

        # Assert
        assert point.source_version == "9"
        assert point == TakeOverPoint(source_file="pump.asm-3.txt", source_version="9")

    def test_map_rows(self, mapper: TakeOverPointMapper) -> None:
        # Act
        points = mapper.map_rows([{"Tag": "A"}, {"Tag": "B"}], source_file="x.txt")

        # Assert
        assert [p.tag for p in points] == ["A", "B"]


class TestHelpers:
    """Test number parsing, version detection and the setter table."""

    def test_parse_number(self) -> None:
        # Act & Assert
        assert parse_number("1,25") == 1.25
        assert parse_number(" ") == 0.0
        with pytest.raises(ValueError):
            parse_number("abc")

    @pytest.mark.parametrize(
        "file_name, expected",
        [
            ("pump.asm-3.txt", "3"),
            ("/a/b/PUMP.ASM-12.TXT", "12"),
            ("pump.asm.txt", ""),
            ("", ""),
        ],
    )
    def test_detect_version(self, file_name: str, expected: str) -> None:
        # Act & Assert
        assert detect_version(file_name) == expected

    def test_every_header_key_has_a_setter(self, default_maps: MapRegistry) -> None:
        # Assert
        assert set(default_maps.header_map.headings) <= set(HEADER_FIELD_SETTERS)
