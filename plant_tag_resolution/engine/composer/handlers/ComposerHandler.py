"""Base handler class for composer steps."""

from abc import ABC, abstractmethod
from typing import Optional

from ....common.logger import PipelineLogger
from ....utils.DataStructures import EngineResult
from ..composition_context import CompositionContext


class ComposerHandler(ABC):
    """Abstract base class for composer handlers."""

    def __init__(self, logger: Optional[PipelineLogger] = None):
        self.logger = logger or PipelineLogger("INFO", False)

    @abstractmethod
    def compose(self, context: CompositionContext) -> EngineResult:
        """Derive this step's result from the tokens and earlier results."""
        pass
