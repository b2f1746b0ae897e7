"""Bucket assignment stage."""

from ....utils.DataStructures import QualityBucket
from ..disposition_context import DispositionContext, DispositionFlags, DispositionStageId
from .DispositionStageHandler import DispositionStageHandler


def assign_bucket(flags: DispositionFlags) -> QualityBucket:
    """
    Map quality flags to exactly one bucket.

    No tokens -> Unknown, final eligible -> FinalImport, db-limbo eligible ->
    DbLimbo, anything else -> MdbLimbo.
    """
    if not flags.has_any_tokens:
        return QualityBucket.UNKNOWN
    if flags.is_final_import_eligible:
        return QualityBucket.FINAL_IMPORT
    if flags.is_db_limbo_eligible:
        return QualityBucket.DB_LIMBO
    return QualityBucket.MDB_LIMBO


class DispositionBucketAssignmentStage(DispositionStageHandler):
    stage_id = DispositionStageId.BUCKET_ASSIGNMENT

    def execute(self, context: DispositionContext) -> None:
        result = context.result
        result.quality_bucket = assign_bucket(context.flags)
        context.add_message(f"Disposition: bucket {result.quality_bucket.value}.")

        if result.error:
            result.is_valid = False
        else:
            result.is_valid = result.quality_bucket != QualityBucket.UNKNOWN
