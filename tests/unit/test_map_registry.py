"""
Tests for code table models and the map registry.
"""

from pathlib import Path

import pytest
import yaml

from plant_tag_resolution.common.exceptions import MapLoadError
from plant_tag_resolution.maps.map_models import (
    CodificationMap,
    DisciplineMap,
    HeaderMap,
    TokenGroup,
    _CodeTable,
)
from plant_tag_resolution.maps.map_registry import MapRegistry


class TestMapRegistry:
    """Test loading code tables from a directory."""

    def test_from_directory(self, map_registry: MapRegistry) -> None:
        """Test every fixture table is loaded into its model."""
        # Assert
        assert map_registry.codification.get("PCM").type == "Plant"
        assert map_registry.token_regex.get("plant").position == 0
        assert map_registry.discipline.contains("st")
        assert map_registry.entity.resolve_code("ext") == "EXT"
        assert map_registry.role.get("equi").is_leaf
        assert map_registry.discipline_hierarchy.get("st").group_for("zone") is not None
        assert map_registry.catalog_reference.entries_for("NOZZ")["FLANGE"] == "/NOZZ-FLANGE"
        assert map_registry.header_map.headings["tag"] == "Tag"

    def test_optional_tables_may_be_missing(self, maps_dir: Path) -> None:
        # Arrange
        (maps_dir / "catalog_reference.yaml").unlink()
        (maps_dir / "header_map.yaml").unlink()

        # Act
        registry = MapRegistry.from_directory(maps_dir)

        # Assert
        assert registry.catalog_reference.geometries == {}
        assert registry.header_map.headings == {}

    def test_required_table_missing(self, maps_dir: Path) -> None:
        # Arrange
        (maps_dir / "role.yaml").unlink()

        # Act & Assert
        with pytest.raises(MapLoadError, match="role"):
            MapRegistry.from_directory(maps_dir)

    def test_invalid_regex_rejected(self, maps_dir: Path) -> None:
        # Arrange
        with open(maps_dir / "token_regex.yaml", "w", encoding="utf-8") as f:
            yaml.dump({"token_regex": {"Plant": {"pattern": "[A-Z", "type": "base"}}}, f)

        # Act & Assert
        with pytest.raises(MapLoadError, match="token_regex"):
            MapRegistry.from_directory(maps_dir)

    def test_unreadable_yaml(self, maps_dir: Path) -> None:
        # Arrange
        (maps_dir / "entity.yaml").write_text("entities: [unclosed", encoding="utf-8")

        # Act & Assert
        with pytest.raises(MapLoadError):
            MapRegistry.from_directory(maps_dir)

    def test_directory_missing(self, temp_dir: Path) -> None:
        # Act & Assert
        with pytest.raises(MapLoadError):
            MapRegistry.from_directory(temp_dir / "nope")

    def test_unknown_table_in_dicts(self) -> None:
        # Act & Assert
        with pytest.raises(MapLoadError):
            MapRegistry.from_dicts({"colours": {}})

    def test_packaged_defaults(self, default_maps: MapRegistry) -> None:
        # Assert
        assert default_maps.codification.get("MXS").parent_codes == ["MHS", "HPU"]
        assert default_maps.role.get("NOZZ").is_leaf
        assert "ME" in default_maps.discipline.codes()


class TestCodificationMap:
    """Test flattening of the nested code hierarchy."""

    def test_nested_hierarchy_flattened(self) -> None:
        # Act
        table = CodificationMap.model_validate(
            {"hierarchy": {"PCM": {"MHS": {"MFS": ["STR"]}, "MCS": {"MFS": ["PMP"]}}}}
        )

        # Assert
        assert table.get("MHS").parent_codes == ["PCM"]
        assert table.get("MFS").parent_codes == ["MHS", "MCS"]
        assert table.get("STR").type == "Equipment"

    def test_lookup_by_prefix(self) -> None:
        # Arrange
        table = CodificationMap.model_validate({"hierarchy": {"PCM": None}})

        # Act & Assert
        assert table.lookup("pcm01").code == "PCM"
        assert table.lookup("PC") is None
        assert table.lookup("") is None

    def test_unknown_type_rejected(self) -> None:
        # Act & Assert
        with pytest.raises(ValueError):
            CodificationMap.model_validate(
                {"entries": [{"code": "ABC", "type": "Galaxy"}]}
            )

    def test_code_table_resolves_keys_and_codes(self) -> None:
        # Arrange
        table = DisciplineMap.model_validate(
            {"disciplines": {"Mechanical": {"code": "me"}}}
        )

        # Act & Assert
        assert table.resolve_code("MECHANICAL") == "ME"
        assert table.resolve_code("me") == "ME"
        assert table.resolve_code("XX") == ""

    def test_code_table_base_is_abstract(self) -> None:
        # Act & Assert
        with pytest.raises(TypeError):
            _CodeTable()


class TestSchemaModels:
    """Test the shape of the token group and header map models."""

    def test_token_group_fields(self) -> None:
        # Act
        group = TokenGroup.model_validate({"base": ["Plant"], "suffix": ["Discipline"]})

        # Assert
        assert set(TokenGroup.model_fields) == {"base", "suffix"}
        assert group.base == ["Plant"]

    def test_header_map_fields(self, default_maps: MapRegistry) -> None:
        # Assert
        assert set(HeaderMap.model_fields) == {"headings"}
        assert default_maps.header_map.headings["reference_number"] == "Reference Number"
