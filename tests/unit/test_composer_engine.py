"""
Unit tests for the ComposerEngine and its handlers.

Covers discipline/entity resolution order, role combinations, base naming,
discipline-aware suffixes and role-letter suffixes of take-over points.
"""

import pytest

from plant_tag_resolution.engine.composer import ComposerEngine
from plant_tag_resolution.engine.composer.handlers import ClassificationHandler, RoleHandler
from plant_tag_resolution.engine.tokenizer import TokenEngine
from plant_tag_resolution.utils.DataStructures import (
    InheritedContext,
    ResolutionOrigin,
    Token,
    TokenKind,
    TokenSource,
    TokenizationResult,
)


class TestWorkedExample:
    """End-to-end composition of a fully codified equipment tag."""

    def test_zone_with_default_classification(
        self, token_engine: TokenEngine, composer: ComposerEngine
    ) -> None:
        """Test the canonical tag of an equipment container."""
        # Arrange
        tokens = token_engine.tokenize("PCM01.MHS01.MFS01.STR01")

        # Act
        result = composer.compose(tokens)

        # Assert
        assert result.role.role == "ZONE"
        assert result.naming.base_name == "PCM01.MHS01.MFS01.STR01"
        assert result.naming.normalized_base_name == "PCM01_MHS01_MFS01_STR01"
        assert result.suffix.suffix == "-ME_SDE"
        assert result.full_tag == "PCM01.MHS01.MFS01.STR01-ME_SDE"
        assert result.tag.is_valid
        assert result.discipline.is_default
        assert result.entity.is_default

    def test_composition_results_in_order(
        self, token_engine: TokenEngine, composer: ComposerEngine
    ) -> None:
        # Act
        result = composer.compose(token_engine.tokenize("PCM01.MHS01"))

        # Assert
        kinds = [r.kind.value for r in result.as_list()]
        assert kinds == ["discipline", "entity", "role", "naming", "suffix", "tag", "hierarchy"]


class TestClassification:
    """Discipline and entity resolution order."""

    def test_explicit_tokens_win(self, token_engine: TokenEngine, composer: ComposerEngine) -> None:
        # Arrange
        tokens = token_engine.tokenize("PCM01_MHS01_MFS01_STR01_M001_PI_EXT")

        # Act
        result = composer.compose(tokens)

        # Assert
        assert result.discipline.code == "PI"
        assert result.discipline.is_local
        assert result.entity.code == "EXT"
        assert result.full_tag == "PCM01.MHS01.MFS01.STR01.M001-PI_EXT"

    def test_context_word_maps_to_discipline(
        self, token_engine: TokenEngine, composer: ComposerEngine
    ) -> None:
        """Test a domain context word resolves the discipline when no code is present."""
        # Arrange
        tokens = token_engine.tokenize("PCM01_MHS01_MFS01_CIVIL")

        # Act
        result = composer.compose(tokens)

        # Assert
        assert result.discipline.code == "CI"
        assert result.discipline.origin == ResolutionOrigin.LOCAL

    def test_inherited_codes(self, token_engine: TokenEngine, composer: ComposerEngine) -> None:
        # Arrange
        tokens = token_engine.tokenize("PCM01_MHS01")

        # Act
        result = composer.compose(
            tokens,
            inherited_discipline=InheritedContext(parent_id="parent-1", code="EA"),
            inherited_entity=InheritedContext(parent_id="parent-1", code="CUS"),
        )

        # Assert
        assert result.discipline.is_inherited
        assert result.discipline.inherited_from == "parent-1"
        assert result.full_tag == "PCM01.MHS01-EA_CUS"

    def test_local_code_differing_from_parent_is_foreign(
        self, token_engine: TokenEngine, composer: ComposerEngine
    ) -> None:
        # Arrange
        tokens = token_engine.tokenize("PCM01_MHS01_PI")

        # Act
        result = composer.compose(
            tokens, inherited_discipline=InheritedContext(parent_id="p", code="ME")
        )

        # Assert
        assert result.discipline.code == "PI"
        assert result.discipline.is_foreign
        assert result.discipline.warning

    def test_unknown_inherited_discipline_warns(
        self, token_engine: TokenEngine, composer: ComposerEngine
    ) -> None:
        # Act
        result = composer.compose(
            token_engine.tokenize("PCM01"),
            inherited_discipline=InheritedContext(parent_id="p", code="ZZ"),
        )

        # Assert
        assert result.discipline.code == "ZZ"
        assert result.discipline.is_valid
        assert any("not in the code table" in w for w in result.discipline.warning)

    def test_unknown_local_discipline_invalidates(self, map_registry) -> None:
        """Test an explicit code missing from the code table falls back and is invalid."""
        # Arrange
        engine = ComposerEngine(map_registry)
        tokens = TokenizationResult(source_id="x")
        tokens.tokens["Plant"] = Token(key="Plant", value="PCM01", source=TokenSource.CODIFICATION)
        tokens.tokens["Discipline"] = Token(
            key="Discipline", value="QQ", kind=TokenKind.SUFFIX, source=TokenSource.MAP
        )

        # Act
        result = engine.compose(tokens)

        # Assert
        assert result.discipline.code == "ME"
        assert not result.discipline.is_valid
        assert result.discipline.is_default


class TestRoleResolution:
    """Role decision from the present base tokens."""

    @pytest.mark.parametrize(
        "present, discipline, expected",
        [
            ({"Plant"}, "ME", "WORL"),
            ({"Plant", "PlantUnit"}, "ME", "SITE"),
            ({"Plant", "PlantUnit", "PlantSection"}, "ME", "SUB_SITE"),
            ({"Plant", "PlantUnit", "PlantSection"}, "ST", "ZONE"),
            ({"Plant", "PlantUnit", "PlantSection", "Equipment"}, "ME", "ZONE"),
            ({"Plant", "PlantUnit", "PlantSection", "Component"}, "ME", "EQUI"),
            ({"PlantUnit"}, "ME", "WORL"),
            ({"PlantUnit", "PlantSection", "Equipment"}, "CI", "ZONE"),
            ({"PlantUnit", "PlantSection", "Equipment"}, "ME", "SUB_SITE"),
        ],
    )
    def test_resolve_role(self, present, discipline, expected) -> None:
        # Act
        role, note = RoleHandler.resolve_role(present, discipline)

        # Assert
        assert role == expected
        assert note

    def test_leaf_role_enriched_from_role_map(
        self, token_engine: TokenEngine, composer: ComposerEngine
    ) -> None:
        # Act
        result = composer.compose(token_engine.tokenize("PCM01_MHS01_MFS01_STR01_M001"))

        # Assert
        assert result.role.role == "EQUI"
        assert result.role.is_leaf
        assert result.role.aveva_type == "EQUI"
        assert result.role.business_concept == "Component"

    def test_no_structural_tokens(self, token_engine: TokenEngine, composer: ComposerEngine) -> None:
        # Act
        result = composer.compose(token_engine.tokenize(""))

        # Assert
        assert not result.role.is_valid
        assert result.role.error
        assert not result.naming.is_valid
        assert not result.tag.is_valid
        assert result.tag.error


class TestNamingAndSuffix:
    """Base name placement and discipline-aware suffixes."""

    def test_replacement_placed_in_base_name(
        self, token_engine: TokenEngine, composer: ComposerEngine
    ) -> None:
        """Test a running number replacing the equipment appears once in the base name."""
        # Act
        result = composer.compose(token_engine.tokenize("PCM01_MHS01_MFS01_0033"))

        # Assert
        assert result.role.role == "EQUI"
        assert result.naming.base_name == "PCM01.MHS01.MFS01.0033"
        assert result.naming.tokens_used == ["Plant", "PlantUnit", "PlantSection", "Component"]
        assert result.full_tag == "PCM01.MHS01.MFS01.0033-ME_SDE"

    def test_structural_discipline_uses_section_schema(
        self, token_engine: TokenEngine, composer: ComposerEngine
    ) -> None:
        """Test structural elements with a running number select the ST schema."""
        # Act
        result = composer.compose(token_engine.tokenize("PCM01_MHS01_MFS01_0033_ST"))

        # Assert
        assert result.suffix.context_key == "ST"
        assert result.suffix.suffix == "-ST_SDE"
        assert result.full_tag == "PCM01.MHS01.MFS01.0033-ST_SDE"

    def test_incremental_suffix_when_base_name_did_not_consume_it(self, map_registry) -> None:
        """Test the running number moves into the suffix block when it is not a base value."""
        # Arrange
        engine = ComposerEngine(map_registry)
        tokens = TokenizationResult()
        tokens.tokens["Plant"] = Token(key="Plant", value="PCM01", position=0)
        tokens.tokens["PlantUnit"] = Token(key="PlantUnit", value="MHS01", position=1)
        tokens.tokens["PlantSection"] = Token(key="PlantSection", value="MFS01", position=2)
        tokens.tokens["TagIncremental"] = Token(
            key="TagIncremental", value="0033", kind=TokenKind.SUFFIX, source=TokenSource.SUFFIX
        )
        tokens.tokens["Discipline"] = Token(key="Discipline", value="ST", kind=TokenKind.SUFFIX)

        # Act
        result = engine.compose(tokens)

        # Assert
        assert result.role.role == "ZONE"
        assert result.suffix.context_key == "ST"
        assert result.suffix.suffix == ".0033-ST_SDE"
        assert result.suffix.has_any_tag
        assert result.full_tag == "PCM01.MHS01.MFS01.0033-ST_SDE"

    def test_context_key_defaults(self, token_engine: TokenEngine, composer: ComposerEngine) -> None:
        # Act
        result = composer.compose(token_engine.tokenize("PCM01_MHS01_MFS01_ST"))

        # Assert
        assert result.role.role == "ZONE"
        assert result.suffix.context_key == "DEFAULT"
        assert result.full_tag == "PCM01.MHS01.MFS01-ST_SDE"


class TestPointSuffix:
    """Role-letter suffixes of take-over points."""

    def test_increment_from_description(
        self, token_engine: TokenEngine, composer: ComposerEngine
    ) -> None:
        # Act
        result = composer.compose(
            token_engine.tokenize("PCM01_MHS01_MFS01_STR01"),
            geometry_kind="NOZZ",
            description="Nozzle N12",
        )

        # Assert
        assert result.role.role == "NOZZ"
        assert result.role.is_leaf
        assert result.suffix.context_key == "POINT"
        assert result.suffix.suffix_letter == "N"
        assert result.suffix.suffix_increment == "0012"
        assert result.full_tag == "PCM01.MHS01.MFS01.STR01-N0012"

    def test_increment_from_counter(self, token_engine: TokenEngine, default_maps) -> None:
        """Test points without an increment in the description use the counter per prefix."""
        # Arrange
        issued = {}
        requests = []

        def next_increment(prefix: str, point_key: str) -> int:
            requests.append((prefix, point_key))
            issued[prefix] = issued.get(prefix, 0) + 1
            return issued[prefix]

        engine = ComposerEngine(default_maps, increment_source=next_increment)
        tokens = token_engine.tokenize("PCM01_MHS01_MFS01_STR01")

        # Act
        first = engine.compose(
            tokens, geometry_kind="ELCONN", description="Terminal box", owner_model="Panel-1"
        )
        second = engine.compose(
            tokens, geometry_kind="ELCONN", description="Terminal box", reference_number="R7"
        )

        # Assert
        assert first.full_tag == "PCM01.MHS01.MFS01.STR01-E01"
        assert second.full_tag == "PCM01.MHS01.MFS01.STR01-E02"
        assert issued == {"PCM01.MHS01.MFS01.STR01-E": 2}
        assert requests == [
            ("PCM01.MHS01.MFS01.STR01-E", "ELCONN|PANEL-1|TERMINAL BOX"),
            ("PCM01.MHS01.MFS01.STR01-E", "ELCONN||R7"),
        ]

    def test_no_counter_falls_back(self, token_engine: TokenEngine, composer: ComposerEngine) -> None:
        # Act
        result = composer.compose(
            token_engine.tokenize("PCM01_MHS01_MFS01_STR01"), geometry_kind="DATUM"
        )

        # Assert
        assert result.suffix.suffix == "-D01"
        assert result.suffix.warning
        assert result.tag.is_valid

    def test_unknown_point_geometry(self, token_engine: TokenEngine, composer: ComposerEngine) -> None:
        # Act
        result = composer.compose(
            token_engine.tokenize("PCM01_MHS01_MFS01_STR01"),
            geometry_kind="UNKNOWN",
            description="0001",
        )

        # Assert
        assert result.suffix.suffix_letter == "X"
        assert result.role.warning


class TestInputValidation:
    """Programming errors raise instead of producing results."""

    def test_none_token_result(self, composer: ComposerEngine) -> None:
        # Act & Assert
        with pytest.raises(ValueError):
            composer.compose(None)

    def test_wrong_type(self, composer: ComposerEngine) -> None:
        # Act & Assert
        with pytest.raises(TypeError):
            composer.compose("PCM01")


class TestHierarchy:
    """Virtual parent chain of structural elements."""

    def test_default_schema_chain(
        self, token_engine: TokenEngine, composer: ComposerEngine
    ) -> None:
        """Test a discipline without its own schema walks the DEFAULT hierarchy."""
        # Arrange
        tokens = token_engine.tokenize("PCM01.MHS01.MFS01.STR01")

        # Act
        hierarchy = composer.compose(tokens).hierarchy

        # Assert
        assert hierarchy.is_valid
        assert hierarchy.schema_key == "DEFAULT"
        assert [n.role for n in hierarchy.nodes] == ["WORL", "SITE", "SUB_SITE", "ZONE", "EQUI"]
        assert [n.tag for n in hierarchy.nodes] == [
            "PCM01-ME_SDE",
            "PCM01.MHS01-ME_SDE",
            "PCM01.MHS01.MFS01-ME_SDE",
            "PCM01.MHS01.MFS01.STR01-ME_SDE",
            "PCM01.MHS01.MFS01.STR01.MISSING_COMPONENT-ME_SDE",
        ]
        assert [n.depth for n in hierarchy.nodes] == [0, 1, 2, 3, 4]
        assert [n.parent_tag for n in hierarchy.nodes[1:]] == [
            n.tag for n in hierarchy.nodes[:-1]
        ]
        assert hierarchy.nodes[0].parent_tag == ""
        assert [n.is_virtual for n in hierarchy.nodes] == [True, True, True, True, False]
        assert hierarchy.leaf_tag == hierarchy.nodes[-1].tag
        assert any("'Component' missing" in w for w in hierarchy.warning)

    def test_structural_schema_chain(
        self, token_engine: TokenEngine, composer: ComposerEngine
    ) -> None:
        """Test the ST hierarchy skips SUB_SITE and borrows DEFAULT groups it lacks."""
        # Arrange
        tokens = token_engine.tokenize("PCM01_MHS01_MFS01_ST")

        # Act
        hierarchy = composer.compose(tokens).hierarchy

        # Assert
        assert hierarchy.schema_key == "ST"
        assert [n.role for n in hierarchy.nodes] == ["WORL", "SITE", "ZONE", "EQUI"]
        assert [n.tag for n in hierarchy.nodes] == [
            "PCM01-ST_SDE",
            "PCM01.MHS01-ST_SDE",
            "PCM01.MHS01.MFS01-ST_SDE",
            "PCM01.MHS01.MFS01.MISSING_COMPONENT-ST_SDE",
        ]
        assert [n.is_virtual for n in hierarchy.nodes] == [True, True, True, False]

    def test_points_have_no_chain(
        self, token_engine: TokenEngine, composer: ComposerEngine
    ) -> None:
        # Act
        result = composer.compose(
            token_engine.tokenize("PCM01_MHS01_MFS01_STR01"),
            geometry_kind="NOZZ",
            description="Nozzle N12",
        )

        # Assert
        assert result.hierarchy is None
        assert [r.kind.value for r in result.as_list()][-1] == "tag"


class TestClassificationHandlerContract:
    """Subclasses must say where their inherited context comes from."""

    def test_missing_inherited_rejected(self, default_maps) -> None:
        # Arrange
        class NoParent(ClassificationHandler):
            token_key = "Discipline"

        # Act & Assert
        with pytest.raises(TypeError):
            NoParent(default_maps.discipline, "ME")
