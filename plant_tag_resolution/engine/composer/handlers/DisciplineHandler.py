"""Discipline resolution handler."""

from typing import Dict, Optional

from ....common.logger import PipelineLogger
from ....maps.map_models import DisciplineMap
from ....utils.DataStructures import DisciplineResult, InheritedContext
from ..composition_context import CompositionContext
from .ClassificationHandler import ClassificationHandler

DEFAULT_DISCIPLINE = "ME"

DEFAULT_DISCIPLINE_CONTEXT_CODES: Dict[str, str] = {
    "Mechanical": "ME",
    "Civil": "CI",
    "Structural": "ST",
    "Electrical": "EA",
    "Piping": "PI",
}


class DisciplineHandler(ClassificationHandler):
    """Resolves the discipline code; unknown codes invalidate the result."""

    token_key = "Discipline"
    result_class = DisciplineResult
    unknown_is_invalid = True

    def __init__(
        self,
        discipline_map: DisciplineMap,
        default_code: str = DEFAULT_DISCIPLINE,
        context_codes: Optional[Dict[str, str]] = None,
        logger: Optional[PipelineLogger] = None,
    ):
        super().__init__(
            discipline_map,
            default_code,
            DEFAULT_DISCIPLINE_CONTEXT_CODES if context_codes is None else context_codes,
            logger,
        )

    def inherited(self, context: CompositionContext) -> Optional[InheritedContext]:
        return context.inherited_discipline
