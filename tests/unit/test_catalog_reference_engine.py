"""
Unit tests for the CatalogReferenceEngine.
"""

import unittest

from plant_tag_resolution.engine.catalog import CatalogReferenceEngine, CatalogResolution
from plant_tag_resolution.maps.map_registry import MapRegistry
from plant_tag_resolution.utils.DataStructures import TakeOverPoint


class TestCatalogResolutionOrder(unittest.TestCase):
    """Test the order in which catalog references are resolved."""

    def setUp(self):
        """Set up test fixtures."""
        self.engine = CatalogReferenceEngine(MapRegistry.default().catalog_reference)

    def test_raw_reference_wins(self):
        point = TakeOverPoint(
            tag="PCM01_MHS01", geometry_kind="NOZZ", raw_catalog_reference=" /CUSTOM ",
            description="Flange DN50",
        )

        result = self.engine.resolve(point, source_id="p1")

        self.assertEqual(result.catalog_reference, "/CUSTOM")
        self.assertEqual(result.resolution, CatalogResolution.RAW.value)
        self.assertEqual(result.source_id, "p1")
        self.assertTrue(result.is_valid)

    def test_longest_description_key(self):
        """Test the most specific keyword contained in the description wins."""
        point = TakeOverPoint(geometry_kind="nozz", description="Flange DN50 inlet")

        result = self.engine.resolve(point)

        self.assertEqual(result.catalog_reference, "/NOZZ-FLANGE-DN50")
        self.assertEqual(result.resolution, CatalogResolution.DESCRIPTION.value)
        self.assertEqual(result.geometry_kind, "NOZZ")

    def test_description_separators_normalized(self):
        point = TakeOverPoint(geometry_kind="ELCONN", description="terminal-box 3")

        result = self.engine.resolve(point)

        self.assertEqual(result.catalog_reference, "/ELCONN-TERMINAL-BOX")

    def test_cylinder_bypass_forces_geometry(self):
        """Test a pipe dimension in the description defines a cylinder."""
        point = TakeOverPoint(geometry_kind="NOZZ", description="Pipe 48_3X6_3")

        result = self.engine.resolve(point)

        self.assertEqual(result.catalog_reference, "Diameter 48.3mm Height 200mm")
        self.assertEqual(result.resolution, CatalogResolution.CYLINDER_BYPASS.value)
        self.assertEqual(result.forced_geometry_kind, "CYLI")
        self.assertEqual(result.geometry_kind, "NOZZ")
        self.assertEqual(result.effective_geometry_kind, "CYLI")

    def test_default_for_geometry(self):
        point = TakeOverPoint(geometry_kind="DATUM", description="reference point")

        result = self.engine.resolve(point)

        self.assertEqual(result.catalog_reference, "/DATUM-GENERIC")
        self.assertEqual(result.resolution, CatalogResolution.DEFAULT.value)

    def test_unresolved(self):
        point = TakeOverPoint(tag="T", geometry_kind="UNKNOWN", description="")

        result = self.engine.resolve(point)

        self.assertFalse(result.is_valid)
        self.assertEqual(result.catalog_reference, "")
        self.assertEqual(result.resolution, CatalogResolution.UNRESOLVED.value)
        self.assertTrue(result.warning)

    def test_dimension_fields_reported(self):
        """Test DN/PN data is reported but does not build a key."""
        point = TakeOverPoint(geometry_kind="NOZZ", dn="50", pn="16", description="weld end")

        result = self.engine.resolve(point)

        self.assertEqual(result.catalog_reference, "/NOZZ-WELD")
        self.assertTrue(any("DN=50" in m for m in result.message))


class TestCylinderDefinition:
    """Test outer diameter extraction."""

    def test_first_number_before_x(self) -> None:
        # Act & Assert
        assert CatalogReferenceEngine.define_cylinder("HY3-BA_10_0033-16X2-B") == (
            "Diameter 16mm Height 200mm"
        )

    def test_no_dimension(self) -> None:
        # Act & Assert
        assert CatalogReferenceEngine.define_cylinder("Flange") == ""
        assert CatalogReferenceEngine.define_cylinder("X12") == ""
        assert CatalogReferenceEngine.define_cylinder("") == ""

    def test_match_description_ignores_default(self) -> None:
        # Arrange
        entries = {"DEFAULT": "/GENERIC", "WELD": "/WELD"}

        # Act & Assert
        assert CatalogReferenceEngine.match_description("default weld", entries) == (
            "WELD",
            "/WELD",
        )
        assert CatalogReferenceEngine.match_description("default", entries) is None


if __name__ == "__main__":
    unittest.main()
