"""Entity resolution handler."""

from typing import Dict, Optional

from ....common.logger import PipelineLogger
from ....maps.map_models import EntityMap
from ....utils.DataStructures import EntityResult, InheritedContext
from ..composition_context import CompositionContext
from .ClassificationHandler import ClassificationHandler

DEFAULT_ENTITY = "SDE"


class EntityHandler(ClassificationHandler):
    """Resolves the entity code; unknown codes fall back to the default."""

    token_key = "Entity"
    result_class = EntityResult

    def __init__(
        self,
        entity_map: EntityMap,
        default_code: str = DEFAULT_ENTITY,
        context_codes: Optional[Dict[str, str]] = None,
        logger: Optional[PipelineLogger] = None,
    ):
        super().__init__(entity_map, default_code, context_codes or {}, logger)

    def inherited(self, context: CompositionContext) -> Optional[InheritedContext]:
        return context.inherited_entity
