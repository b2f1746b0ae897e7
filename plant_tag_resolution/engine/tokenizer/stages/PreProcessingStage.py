"""Pre-processing stage: trim, unify separators, split into parts."""

from ....utils import separators
from ..tokenization_context import TokenizationContext, TokenizationStageId
from .TokenizationStageHandler import TokenizationStageHandler


class PreProcessingStage(TokenizationStageHandler):
    """Normalizes the raw tag and splits it into upper-case parts."""

    stage_id = TokenizationStageId.PRE_PROCESSING

    def execute(self, context: TokenizationContext) -> None:
        raw = context.raw_input or ""
        context.result.raw_input_value = raw

        if not raw.strip():
            context.add_error("Empty tag")
            return

        normalized = separators.normalize(raw)
        context.normalized_input = normalized
        context.result.normalized_input_value = normalized
        context.parts = separators.split_normalized(normalized)
        context.structural_count = len(context.parts)

        if not context.parts:
            context.add_error(f"Tag '{raw}' contains no usable parts")
            return

        context.add_message(
            f"PreProcessing: '{raw.strip()}' normalized to '{normalized}' "
            f"({len(context.parts)} parts)."
        )
