"""Structural codification stage: resolve hierarchy parts from the code table."""

from typing import Optional

from ....common.logger import PipelineLogger
from ....maps.map_models import CodificationMap
from ....utils.DataStructures import Token, TokenKind, TokenSource
from ..tokenization_context import TokenizationContext, TokenizationStageId
from .TokenizationStageHandler import TokenizationStageHandler


class StructuralCodificationStage(TokenizationStageHandler):
    """
    Looks every part up in the authoritative code table.

    The first hit per hierarchy level wins. Matches are flagged as
    codification-sourced and take precedence over every later stage.
    """

    stage_id = TokenizationStageId.STRUCTURAL_CODIFICATION

    def __init__(
        self, codification: CodificationMap, logger: Optional[PipelineLogger] = None
    ):
        super().__init__(logger)
        self.codification = codification

    def execute(self, context: TokenizationContext) -> None:
        if not context.parts:
            return
        if not self.codification.entries:
            context.add_message("StructuralCodification: code table is empty, stage skipped.")
            return

        matched = 0
        for index, part in enumerate(context.parts):
            entry = self.codification.lookup(part)
            if entry is None:
                continue

            existing = context.result.tokens.get(entry.type)
            if existing is not None and existing.is_processable:
                context.add_message(
                    f"StructuralCodification: '{part}' also matches {entry.type} "
                    f"code '{entry.code}', keeping '{existing.value}'."
                )
                continue

            context.set_token(
                entry.type,
                Token(
                    key=entry.type,
                    value=part,
                    kind=TokenKind.BASE,
                    source=TokenSource.CODIFICATION,
                    position=index,
                    pattern=entry.code,
                    source_map_key=entry.code,
                    note=f"Codification: '{part}' matched code '{entry.code}'.",
                ),
            )
            matched += 1
            context.add_message(
                f"StructuralCodification: {entry.type} = '{part}' (code '{entry.code}', position {index})."
            )

        if matched == 0:
            context.add_message("StructuralCodification: no part matched the code table.")
            return

        result = context.result
        if (
            result.has_base("PlantSection")
            and not result.has_base("Equipment")
            and len(context.parts) > max(t.position for t in result.tokens.values()) + 1
        ):
            context.add_message(
                "StructuralCodification: section resolved without equipment, "
                "trailing parts are component or suffix candidates."
            )
