"""Route resolution stage: hierarchy route and target keys."""

from ....utils.DataStructures import QualityBucket
from ..disposition_context import DispositionContext, DispositionStageId
from .DispositionStageHandler import DispositionStageHandler


class DispositionRouteResolutionStage(DispositionStageHandler):
    """
    Picks the configured route for the bucket. The target server key comes
    from the Entity token, the target MDB key from the Plant token.
    """

    stage_id = DispositionStageId.ROUTE_RESOLUTION

    def execute(self, context: DispositionContext) -> None:
        result = context.result
        tokens = context.token_result

        if result.quality_bucket == QualityBucket.UNKNOWN:
            result.route = ""
            context.add_warning("Disposition: bucket is Unknown, no route resolved.")
        else:
            result.route = context.routes.get(result.quality_bucket, "")
            if not result.route:
                context.add_warning(
                    f"Disposition: no route configured for {result.quality_bucket.value}."
                )

        result.target_server_key = tokens.get_value("Entity")
        result.target_mdb_key = tokens.get_value("Plant")
        context.add_message(
            f"Disposition: route '{result.route}', server '{result.target_server_key}', "
            f"mdb '{result.target_mdb_key}'."
        )
