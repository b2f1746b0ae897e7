"""
Unit tests for the TokenEngine.

Covers codification-first resolution, regex fallback, suffix replacements,
exception categories, code table validation, scoring and partial runs.
"""

import pytest

from plant_tag_resolution.engine.tokenizer import TokenEngine, TokenizationStageId
from plant_tag_resolution.utils.DataStructures import TokenKind, TokenSource


class TestCodificationFirst:
    """Code table hits take precedence over positional regex rules."""

    def test_fully_codified_tag(self, token_engine: TokenEngine) -> None:
        """Test every structural part resolved from the code table."""
        # Act
        result = token_engine.tokenize("PCM01.MHS01.MFS01.STR01")

        # Assert
        assert result.is_valid
        assert result.normalized_input_value == "PCM01_MHS01_MFS01_STR01"
        assert result.get_value("Plant") == "PCM01"
        assert result.get_value("PlantUnit") == "MHS01"
        assert result.get_value("PlantSection") == "MFS01"
        assert result.get_value("Equipment") == "STR01"
        assert all(
            t.source == TokenSource.CODIFICATION for t in result.tokens.values()
        )
        assert result.score == 100.0
        assert not result.error

    def test_regex_candidate_overruled_by_codification(self, token_engine: TokenEngine) -> None:
        """Test that an uncodified leading part is excluded rather than taking the Plant slot."""
        # Act
        result = token_engine.tokenize("XYZ01_PCM01_MHS01_MFS01")

        # Assert
        assert result.get_value("Plant") == "PCM01"
        assert result.get_token("Plant").position == 1
        assert "Plant@0" in result.excluded_tokens
        assert result.excluded_tokens["Plant@0"].value == "XYZ01"
        assert any("kept codification value 'PCM01'" in w for w in result.warning)

    def test_tokens_ordered_by_position(self, token_engine: TokenEngine) -> None:
        """Test positional tokens come first in ascending order, suffix codes last."""
        # Act
        result = token_engine.tokenize("PCM01_MHS01_MFS01_STR01_M001_ME_SDE")

        # Assert
        keys = list(result.tokens.keys())
        assert keys[:5] == ["Plant", "PlantUnit", "PlantSection", "Equipment", "Component"]
        assert set(keys[5:]) == {"Discipline", "Entity"}


class TestRegexFallbackAndSuffixes:
    """Regex fallback, replacements and exception categories."""

    def test_component_from_regex(self, token_engine: TokenEngine) -> None:
        """Test a component resolved by the positional regex rule."""
        # Act
        result = token_engine.tokenize("PCM01_MHS01_MFS01_STR01_M001_ME_SDE")

        # Assert
        component = result.get_token("Component")
        assert component.value == "M001"
        assert component.source == TokenSource.REGEX
        assert component.is_fallback

    def test_discipline_and_entity_detected_as_suffix(self, token_engine: TokenEngine) -> None:
        """Test trailing codes are detected as discipline and entity tokens."""
        # Act
        result = token_engine.tokenize("PCM01_MHS01_MFS01_STR01_M001_ME_SDE")

        # Assert
        assert result.get_value("Discipline") == "ME"
        assert result.get_value("Entity") == "SDE"
        assert result.get_token("Discipline").kind == TokenKind.SUFFIX
        assert result.get_token("Entity").position == -1

    def test_incremental_stored_on_component_slot(self, token_engine: TokenEngine) -> None:
        """Test a running number replaces the equipment and lands on the component slot."""
        # Act
        result = token_engine.tokenize("PCM01_MHS01_MFS01_0033")

        # Assert
        component = result.get_token("Component")
        assert component.value == "0033"
        assert component.is_replacement
        assert component.replaced_by == "Equipment"
        assert component.source_map_key == "TagIncremental"
        assert not result.has_base("Equipment")
        assert "Equipment" in result.excluded_tokens
        assert result.has_token("TagIncremental")
        assert result.score == 73.0

    def test_exception_category_fills_open_section(self, token_engine: TokenEngine) -> None:
        """Test a building code stands in for a plant section that has no base evidence."""
        # Act
        result = token_engine.tokenize("PCM01_MHS01_BLD01")

        # Assert
        section = result.get_token("PlantSection")
        assert section.value == "BLD01"
        assert section.source == TokenSource.EXCEPTION
        assert section.source_map_key == "PlantLayoutBuilding"
        assert result.score == 86.67

    def test_duplicate_replacement_excluded(self, token_engine: TokenEngine) -> None:
        """Test only the first replacement of a base slot is accepted."""
        # Act
        result = token_engine.tokenize("PCM01_MHS01_AR01_LIFTCAR1")

        # Assert
        section = result.get_token("PlantSection")
        assert section.value == "AR01"
        assert section.source_map_key == "Area"
        assert "LIFTCAR@PlantSection" in result.excluded_tokens
        assert any("duplicate replacement" in w for w in result.warning)


class TestCodificationValidation:
    """Parent/child relations checked against the code table."""

    def test_parent_mismatch_is_warning(self, token_engine: TokenEngine) -> None:
        """Test a section under an unexpected but existing parent."""
        # Act
        result = token_engine.tokenize("PCM01_MCS01_MXS01")

        # Assert
        assert any("expects parent" in w for w in result.warning)
        assert result.is_valid

    def test_unknown_parent_code_is_error(self, map_registry) -> None:
        """Test a child claiming a parent that is missing from the code table."""
        # Arrange
        engine = TokenEngine(map_registry)

        # Act
        result = engine.tokenize("PCM01_MHS01_ORF01")

        # Assert
        assert any("do not exist in the code table" in e for e in result.error)
        assert not result.is_valid


class TestEdgeCases:
    """Empty input, determinism and partial runs."""

    @pytest.mark.parametrize("raw", ["", "   ", None])
    def test_empty_tag(self, token_engine: TokenEngine, raw) -> None:
        """Test that empty tags produce an error instead of raising."""
        # Act
        result = token_engine.tokenize(raw)

        # Assert
        assert not result.is_valid
        assert result.error == ["Empty tag"]
        assert len(result.tokens) == 0

    def test_separator_only_tag(self, token_engine: TokenEngine) -> None:
        """Test a tag made of separators only."""
        # Act
        result = token_engine.tokenize("._-")

        # Assert
        assert not result.is_valid
        assert any("no usable parts" in e for e in result.error)

    def test_missing_plant_is_invalid(self, token_engine: TokenEngine) -> None:
        """Test that a tag without any plant evidence is not valid."""
        # Act
        result = token_engine.tokenize("1234")

        # Assert
        assert not result.is_valid
        assert any("no Plant token" in w for w in result.warning)

    def test_deterministic_output(self, token_engine: TokenEngine) -> None:
        """Test identical input yields identical tokens and diagnostics."""
        # Act
        first = token_engine.tokenize("PCM01_MHS01_AR01_LIFTCAR1")
        second = token_engine.tokenize("PCM01_MHS01_AR01_LIFTCAR1")

        # Assert
        assert [t.mapping_summary for t in first.tokens.values()] == [
            t.mapping_summary for t in second.tokens.values()
        ]
        assert first.warning == second.warning
        assert first.score == second.score

    def test_partial_run_stops_after_stage(self, token_engine: TokenEngine) -> None:
        """Test that a run limited to codification leaves later stages out."""
        # Act
        result = token_engine.tokenize(
            "PCM01_MHS01_MFS01_0033",
            last_stage=TokenizationStageId.STRUCTURAL_CODIFICATION,
        )

        # Assert
        assert result.has_base("Plant")
        assert "Component" not in result.tokens
        assert not result.is_consistency_checked
        assert result.score == 0.0

    def test_skip_stage(self, token_engine: TokenEngine) -> None:
        """Test skipping suffix recognition leaves discipline codes untouched."""
        # Act
        result = token_engine.tokenize(
            "PCM01_MHS01_MFS01_STR01_ME",
            skip_stages=[TokenizationStageId.SUFFIX_RECOGNITION],
        )

        # Assert
        assert "Discipline" not in result.tokens
        assert result.is_valid

    def test_source_id_carried(self, token_engine: TokenEngine) -> None:
        # Act
        result = token_engine.tokenize("PCM01", source_id="element-1")

        # Assert
        assert result.source_id == "element-1"


class TestSummarize:
    """Diagnostic summary of a tokenization result."""

    def test_summary_of_complete_tag(self, token_engine: TokenEngine) -> None:
        # Arrange
        result = token_engine.tokenize("PCM01_MHS01_MFS01_STR01_M001_ME_SDE")

        # Act
        summary = token_engine.summarize(result)

        # Assert
        assert summary["structure_level"] == 5
        assert summary["disposition_candidate"] == "FinalImport"
        assert summary["is_valid"] is True
        assert summary["errors"] == []

    def test_summary_of_empty_result(self, token_engine: TokenEngine) -> None:
        # Arrange
        result = token_engine.tokenize("")

        # Act
        summary = token_engine.summarize(result)

        # Assert
        assert summary["disposition_candidate"] == "Unknown"
        assert summary["structure_level"] == 0
