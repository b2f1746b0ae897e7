"""Scoring stage: bucket consistency check and quality level."""

from typing import Dict

from ....utils.DataStructures import QualityBucket
from ..disposition_context import DispositionContext, DispositionStageId
from .DispositionStageHandler import DispositionStageHandler

QUALITY_LEVELS: Dict[QualityBucket, str] = {
    QualityBucket.FINAL_IMPORT: "High",
    QualityBucket.DB_LIMBO: "Medium",
    QualityBucket.MDB_LIMBO: "Low",
    QualityBucket.UNKNOWN: "Undefined",
}


class DispositionScoringStage(DispositionStageHandler):
    stage_id = DispositionStageId.SCORING

    def execute(self, context: DispositionContext) -> None:
        result = context.result
        flags = context.flags
        bucket = result.quality_bucket

        if bucket == QualityBucket.FINAL_IMPORT and not flags.is_final_import_eligible:
            context.add_error("Disposition: bucket FinalImport but element is not eligible.")
        elif bucket == QualityBucket.DB_LIMBO and not flags.is_db_limbo_eligible:
            context.add_error("Disposition: bucket DbLimbo but element is not eligible.")
        elif bucket == QualityBucket.MDB_LIMBO and (
            flags.is_final_import_eligible or flags.is_db_limbo_eligible
        ):
            context.add_error("Disposition: bucket MdbLimbo but a better bucket is eligible.")
        elif bucket == QualityBucket.UNKNOWN:
            context.add_error("Disposition: bucket is Unknown at the end of classification.")

        if result.error:
            result.is_valid = False

        result.quality_level = QUALITY_LEVELS.get(bucket, "Undefined")
        result.is_consistency_checked = True
        context.add_message(
            f"Disposition: quality {result.quality_level}, bucket {bucket.value}, "
            f"valid={result.is_valid}."
        )
