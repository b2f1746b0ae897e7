"""Naming handler: canonical base name from base-slot tokens."""

from typing import List, Optional, Sequence, Set

from ....common.logger import PipelineLogger
from ....utils import separators
from ....utils.DataStructures import BASE_KEYS, MISSING_PREFIX, NamingResult, TokenKind
from ..composition_context import CompositionContext
from .ComposerHandler import ComposerHandler


class NamingHandler(ComposerHandler):
    """
    Orders tokens into the base name.

    A token is placed only under the slot equal to its own key. Missing
    markers and suffix tokens that are not accepted replacements are skipped,
    and each replacement kind is used once.
    """

    def __init__(
        self,
        base_order: Sequence[str] = BASE_KEYS,
        logger: Optional[PipelineLogger] = None,
    ):
        super().__init__(logger)
        self.base_order = tuple(base_order)

    def compose(self, context: CompositionContext) -> NamingResult:
        result = NamingResult(source_id=context.source_id)
        tokens = context.token_result.tokens

        values: List[str] = []
        used_replacements: Set[str] = set()
        for slot in self.base_order:
            token = tokens.get(slot)
            if token is None or not token.is_processable:
                continue
            if token.key.lower() != slot.lower():
                result.add_warning(f"Naming: token '{token.key}' not placed under slot '{slot}'.")
                continue
            if token.kind == TokenKind.SUFFIX and not token.is_replacement:
                continue
            if token.is_replacement:
                replacement_kind = token.source_map_key.lower()
                if replacement_kind in used_replacements:
                    result.add_warning(
                        f"Naming: replacement '{token.source_map_key}' already placed, "
                        f"'{token.value}' skipped."
                    )
                    continue
                used_replacements.add(replacement_kind)

            values.append(token.value)
            result.tokens_used.append(slot)

        result.base_name = separators.join_base(values)
        result.normalized_base_name = separators.normalize_name(result.base_name)
        result.is_valid = bool(values) and not any(
            v.upper().startswith(MISSING_PREFIX) for v in values
        )
        if result.is_valid:
            result.add_message(f"Naming: base name '{result.base_name}' from {result.tokens_used}.")
        else:
            result.add_error("Naming: no base tokens available for the base name.")
        return result
