"""Disposition stage handlers module."""

from .DispositionBucketAssignmentStage import DispositionBucketAssignmentStage, assign_bucket
from .DispositionPreProcessingStage import DispositionPreProcessingStage
from .DispositionQualityAssessmentStage import (
    DispositionQualityAssessmentStage,
    is_db_limbo_eligible,
    is_final_import_eligible,
)
from .DispositionRouteResolutionStage import DispositionRouteResolutionStage
from .DispositionScoringStage import DispositionScoringStage
from .DispositionStageHandler import DispositionStageHandler
from .DispositionTokenSnapshotStage import DispositionTokenSnapshotStage, is_effective

__all__ = [
    "DispositionStageHandler",
    "DispositionPreProcessingStage",
    "DispositionTokenSnapshotStage",
    "DispositionQualityAssessmentStage",
    "DispositionBucketAssignmentStage",
    "DispositionRouteResolutionStage",
    "DispositionScoringStage",
    "assign_bucket",
    "is_db_limbo_eligible",
    "is_effective",
    "is_final_import_eligible",
]
