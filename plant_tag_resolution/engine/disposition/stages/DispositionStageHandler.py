"""Base handler class for disposition stages."""

from abc import ABC, abstractmethod
from typing import Optional

from ....common.logger import PipelineLogger
from ..disposition_context import DispositionContext, DispositionStageId


class DispositionStageHandler(ABC):
    """Abstract base class for disposition stage handlers."""

    stage_id: DispositionStageId

    def __init__(self, logger: Optional[PipelineLogger] = None):
        self.logger = logger or PipelineLogger("INFO", False)

    @abstractmethod
    def execute(self, context: DispositionContext) -> None:
        """Apply this stage to the shared disposition context."""
        pass
