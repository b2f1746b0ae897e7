"""Codification validation stage: cross-check parent/child relations."""

from typing import Optional

from ....common.logger import PipelineLogger
from ....maps.map_models import CODIFICATION_TYPES, CodificationMap
from ....utils.DataStructures import TokenSource
from ..tokenization_context import TokenizationContext, TokenizationStageId
from .TokenizationStageHandler import TokenizationStageHandler


class CodificationValidationStage(TokenizationStageHandler):
    """
    Validates adjacent structural tokens against the code table.

    - child claims a parent code missing from the table: error
    - parent or child not codified: message (relation cannot be verified)
    - parent code not among the child's allowed parents: warning
    """

    stage_id = TokenizationStageId.CODIFICATION_VALIDATION

    def __init__(
        self, codification: CodificationMap, logger: Optional[PipelineLogger] = None
    ):
        super().__init__(logger)
        self.codification = codification

    def execute(self, context: TokenizationContext) -> None:
        result = context.result
        if not context.parts or not self.codification.entries:
            return

        chain = [key for key in CODIFICATION_TYPES if result.has_base(key)]
        for parent_key, child_key in zip(chain, chain[1:]):
            parent = result.tokens[parent_key]
            child = result.tokens[child_key]

            child_entry = self.codification.lookup(child.value)
            if child_entry is None or child_entry.type != child_key:
                context.add_message(
                    f"CodificationValidation: {child_key} '{child.value}' is not codified, "
                    f"relation to {parent_key} not verified."
                )
                continue
            if not child_entry.parent_codes:
                context.add_message(
                    f"CodificationValidation: {child_key} code '{child_entry.code}' declares no parents."
                )
                continue

            parent_entry = self.codification.lookup(parent.value)
            if parent_entry is None:
                context.add_message(
                    f"CodificationValidation: {parent_key} '{parent.value}' is not codified, "
                    f"relation to {child_key} '{child_entry.code}' not verified."
                )
                continue

            if parent_entry.code in child_entry.parent_codes:
                context.add_message(
                    f"CodificationValidation: {parent_key} '{parent_entry.code}' -> "
                    f"{child_key} '{child_entry.code}' confirmed."
                )
                continue

            unknown = [c for c in child_entry.parent_codes if self.codification.get(c) is None]
            if unknown:
                context.add_error(
                    f"CodificationValidation: {child_key} code '{child_entry.code}' claims "
                    f"parent(s) {unknown} which do not exist in the code table."
                )
            else:
                context.add_warning(
                    f"CodificationValidation: {child_key} code '{child_entry.code}' expects parent "
                    f"{child_entry.parent_codes}, found '{parent_entry.code}'."
                )

        equipment = result.tokens.get("Equipment")
        if (
            result.has_base("Component")
            and equipment is not None
            and equipment.source == TokenSource.CODIFICATION
        ):
            context.add_message(
                "CodificationValidation: component follows codified equipment "
                f"'{equipment.value}'."
            )
