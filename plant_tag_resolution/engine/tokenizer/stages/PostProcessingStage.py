"""Post-processing stage: finalize tokens and validity."""

from ....utils.DataStructures import BASE_KEYS
from ..tokenization_context import TokenizationContext, TokenizationStageId
from .TokenizationStageHandler import TokenizationStageHandler


class PostProcessingStage(TokenizationStageHandler):
    """
    Moves placeholders to ``excluded_tokens``, orders the remaining tokens by
    position (non-positional last), flags out-of-order base tokens and sets
    the final validity.
    """

    stage_id = TokenizationStageId.POST_PROCESSING

    def execute(self, context: TokenizationContext) -> None:
        result = context.result

        for key, token in list(result.tokens.items()):
            if not token.is_processable:
                result.excluded_tokens[key] = token
                del result.tokens[key]

        ordered = sorted(
            result.tokens.items(),
            key=lambda item: (item[1].position < 0, item[1].position, item[0].lower()),
        )
        result.tokens.replace_all(ordered)

        present = [k for k in BASE_KEYS if k in result.tokens]
        for upper, lower in zip(present, present[1:]):
            if result.tokens[upper].position > result.tokens[lower].position:
                context.add_warning(
                    f"PostProcessing: {upper} (position {result.tokens[upper].position}) "
                    f"appears after {lower} (position {result.tokens[lower].position})."
                )

        has_plant = result.has_base("Plant")
        if context.parts and not has_plant:
            context.add_warning("PostProcessing: no Plant token resolved.")

        result.is_valid = not result.error and has_plant
        result.is_consistency_checked = True
