"""Pre-processing stage: input values, empty tags and token presence."""

from ..disposition_context import DispositionContext, DispositionStageId
from .DispositionStageHandler import DispositionStageHandler

UNNAMED_PREFIX = "UNNAMED_"


class DispositionPreProcessingStage(DispositionStageHandler):
    """
    Syncs raw and normalized values from the token result, gives empty tags
    a fallback name and counts processable tokens. No bucket is decided here.
    """

    stage_id = DispositionStageId.PRE_PROCESSING

    def execute(self, context: DispositionContext) -> None:
        result = context.result
        tokens = context.token_result

        if not result.raw_input_value.strip():
            result.raw_input_value = tokens.raw_input_value or ""
        if tokens.normalized_input_value:
            result.normalized_input_value = tokens.normalized_input_value
        elif not result.normalized_input_value and result.raw_input_value.strip():
            result.normalized_input_value = result.raw_input_value.strip()

        context.flags.is_tag_empty = not result.raw_input_value.strip()
        if context.flags.is_tag_empty:
            fallback = f"{UNNAMED_PREFIX}{context.source_id}"
            context.add_warning(
                f"Disposition: tag is empty, fallback name '{fallback}' assigned."
            )
            result.raw_input_value = fallback
            if not result.normalized_input_value:
                result.normalized_input_value = fallback

        context.flags.token_count = len(tokens.processable_tokens)
        if not context.flags.has_any_tokens:
            context.add_warning("Disposition: tokenizer produced no processable tokens.")
