"""
Disposition Engine for resolved tags

This module decides where an element goes: straight into the production
hierarchy, into a database limbo area, or into the model limbo area. The
decision is based on the tokens present and on the effective discipline and
entity; writer details are never inspected.

Features:
- Six ordered stages (pre-processing through scoring)
- Total bucket assignment over quality flags
- Configurable routes per bucket
- Consistency check between bucket and eligibility

Author: Plant Tag Resolution Team
Version: 1.0.0
"""

from typing import Dict, Optional

from ...common.logger import PipelineLogger
from ...utils.DataStructures import (
    DisciplineResult,
    DispositionResult,
    EntityResult,
    QualityBucket,
    TokenizationResult,
)
from .disposition_context import DispositionContext, DispositionStageId
from .stages import (
    DispositionBucketAssignmentStage,
    DispositionPreProcessingStage,
    DispositionQualityAssessmentStage,
    DispositionRouteResolutionStage,
    DispositionScoringStage,
    DispositionStageHandler,
    DispositionTokenSnapshotStage,
)

DEFAULT_ROUTES: Dict[QualityBucket, str] = {
    QualityBucket.FINAL_IMPORT: "ProductionHierarchy",
    QualityBucket.DB_LIMBO: "DbLimboHierarchy",
    QualityBucket.MDB_LIMBO: "MdbLimboHierarchy",
}


def routes_from_config(routes: Optional[Dict[str, str]]) -> Dict[QualityBucket, str]:
    """Convert ``{"FinalImport": "..."}`` style settings into bucket keyed routes."""
    resolved = dict(DEFAULT_ROUTES)
    for name, route in (routes or {}).items():
        resolved[QualityBucket(name)] = route
    return resolved


class DispositionEngine:
    """Main engine for classifying element dispositions."""

    def __init__(
        self,
        routes: Optional[Dict[QualityBucket, str]] = None,
        logger: PipelineLogger = PipelineLogger("INFO", False),
    ):
        self.routes = dict(DEFAULT_ROUTES if routes is None else routes)
        self.logger = logger
        self.stages = self._initialize_stages()

    def _initialize_stages(self) -> Dict[DispositionStageId, DispositionStageHandler]:
        """Initialize stage handler instances in execution order."""
        stages = {
            DispositionStageId.PRE_PROCESSING: DispositionPreProcessingStage(self.logger),
            DispositionStageId.TOKEN_SNAPSHOT: DispositionTokenSnapshotStage(self.logger),
            DispositionStageId.QUALITY_ASSESSMENT: DispositionQualityAssessmentStage(self.logger),
            DispositionStageId.BUCKET_ASSIGNMENT: DispositionBucketAssignmentStage(self.logger),
            DispositionStageId.ROUTE_RESOLUTION: DispositionRouteResolutionStage(self.logger),
            DispositionStageId.SCORING: DispositionScoringStage(self.logger),
        }
        return dict(sorted(stages.items(), key=lambda item: item[0].value))

    def classify(
        self,
        token_result: TokenizationResult,
        discipline_result: Optional[DisciplineResult] = None,
        entity_result: Optional[EntityResult] = None,
    ) -> DispositionResult:
        """
        Classify one element.

        Args:
            token_result: Output of the token engine
            discipline_result: Resolved discipline, if the composer ran
            entity_result: Resolved entity, if the composer ran

        Returns:
            DispositionResult with bucket, route and target keys

        Raises:
            ValueError: If token_result is missing
        """
        if token_result is None:
            raise ValueError("classify() requires a TokenizationResult")

        result = DispositionResult(
            source_id=token_result.source_id,
            raw_input_value=token_result.raw_input_value or "",
        )
        context = DispositionContext(
            token_result=token_result,
            result=result,
            discipline_result=discipline_result,
            entity_result=entity_result,
            routes=self.routes,
        )

        for stage in self.stages.values():
            stage.execute(context)

        self.logger.verbose(
            "INFO",
            f"Disposition for '{result.raw_input_value}': "
            f"{result.quality_bucket.value} -> '{result.route}'",
        )
        return result
