"""
Token Engine for plant hierarchy tags

This module turns a raw engineering tag into typed structural and suffix
tokens. Authoritative code tables are consulted first, positional regex
definitions second; every decision is recorded as a message, warning or
error on the returned result instead of being raised.

Features:
- Seven ordered stages (pre-processing through post-processing)
- Codification-first resolution with regex fallback and exclusion tracking
- Replacement exclusivity per base slot
- Partial runs up to a given stage, or with stages skipped, for diagnostics
- Deterministic output for identical input and code tables

Author: Plant Tag Resolution Team
Version: 1.0.0
"""

from typing import Any, Dict, Iterable, Optional

from ...common.logger import PipelineLogger
from ...maps.map_registry import MapRegistry
from ...utils.DataStructures import BASE_KEYS, TokenizationResult
from ...utils.scoring import DEFAULT_MISSING_PENALTY
from .stages import (
    CodificationValidationStage,
    PostProcessingStage,
    PreProcessingStage,
    RegexBaseFallbackStage,
    ScoringStage,
    StructuralCodificationStage,
    SuffixRecognitionStage,
    TokenizationStageHandler,
)
from .tokenization_context import TokenizationContext, TokenizationStageId


class TokenEngine:
    """Main engine for tokenizing raw tags."""

    def __init__(
        self,
        maps: MapRegistry,
        score_weights: Optional[Dict[str, float]] = None,
        missing_penalty: float = DEFAULT_MISSING_PENALTY,
        logger: PipelineLogger = PipelineLogger("INFO", False),
    ):
        """Initialize the token engine with code tables and scoring settings."""
        self.maps = maps
        self.score_weights = score_weights
        self.missing_penalty = missing_penalty
        self.logger = logger
        self.stages = self._initialize_stages()

    def _initialize_stages(
        self,
    ) -> Dict[TokenizationStageId, TokenizationStageHandler]:
        """Initialize stage handler instances in execution order."""
        stages = {
            TokenizationStageId.PRE_PROCESSING: PreProcessingStage(self.logger),
            TokenizationStageId.STRUCTURAL_CODIFICATION: StructuralCodificationStage(
                self.maps.codification, self.logger
            ),
            TokenizationStageId.REGEX_BASE_FALLBACK: RegexBaseFallbackStage(
                self.maps.token_regex, self.maps.discipline, self.maps.entity, self.logger
            ),
            TokenizationStageId.SUFFIX_RECOGNITION: SuffixRecognitionStage(
                self.maps.token_regex, self.maps.discipline, self.maps.entity, self.logger
            ),
            TokenizationStageId.CODIFICATION_VALIDATION: CodificationValidationStage(
                self.maps.codification, self.logger
            ),
            TokenizationStageId.SCORING: ScoringStage(
                self.score_weights, self.missing_penalty, self.logger
            ),
            TokenizationStageId.POST_PROCESSING: PostProcessingStage(self.logger),
        }
        return dict(sorted(stages.items(), key=lambda item: item[0].value))

    def tokenize(
        self,
        raw_tag: str,
        last_stage: Optional[TokenizationStageId] = None,
        skip_stages: Optional[Iterable[TokenizationStageId]] = None,
        source_id: str = "",
    ) -> TokenizationResult:
        """
        Tokenize a raw tag.

        Args:
            raw_tag: Tag string as exported by the source system
            last_stage: Stop after this stage (inclusive) for partial runs
            skip_stages: Stages to leave out entirely
            source_id: Identifier carried on the result

        Returns:
            TokenizationResult; never raises for data problems
        """
        result = TokenizationResult(source_id=source_id, raw_input_value=raw_tag or "")
        context = TokenizationContext(raw_input=raw_tag or "", result=result)
        skipped = set(skip_stages or ())

        for stage_id, stage in self.stages.items():
            if last_stage is not None and stage_id.value > last_stage.value:
                break
            if stage_id in skipped:
                self.logger.verbose("DEBUG", f"Skipping stage {stage_id.name}")
                continue
            stage.execute(context)

        if result.error:
            self.logger.verbose(
                "WARNING", f"Tag '{raw_tag}' tokenized with errors: {result.error}"
            )
        else:
            self.logger.debug(f"Tokenized '{raw_tag}' into {len(result.tokens)} tokens")
        return result

    def summarize(self, result: TokenizationResult) -> Dict[str, Any]:
        """Compact phase view of a tokenization result for diagnostics."""
        base_present = [k for k in BASE_KEYS if result.has_base(k)]
        if not result.tokens:
            candidate = "Unknown"
        elif len(base_present) == len(BASE_KEYS) or (
            len(base_present) == len(BASE_KEYS) - 1
            and "Equipment" not in base_present
            and result.find_replacement_for("Equipment") is not None
        ):
            candidate = "FinalImport"
        elif {"Plant", "PlantUnit", "Component"} <= set(base_present):
            candidate = "DbLimbo"
        else:
            candidate = "MdbLimbo"

        return {
            "raw_input": result.raw_input_value,
            "normalized_input": result.normalized_input_value,
            "structure_level": len(base_present),
            "base_tokens": base_present,
            "disposition_candidate": candidate,
            "score": result.score,
            "tokens": [t.mapping_summary for t in result.tokens.values()],
            "excluded": list(result.excluded_tokens.keys()),
            "is_valid": result.is_valid,
            "messages": len(result.message),
            "warnings": list(result.warning),
            "errors": list(result.error),
        }
