"""Base handler class for tokenizer stages."""

from abc import ABC, abstractmethod
from typing import Optional

from ....common.logger import PipelineLogger
from ..tokenization_context import TokenizationContext, TokenizationStageId


class TokenizationStageHandler(ABC):
    """Abstract base class for tokenizer stage handlers."""

    stage_id: TokenizationStageId

    def __init__(self, logger: Optional[PipelineLogger] = None):
        self.logger = logger or PipelineLogger("INFO", False)

    @abstractmethod
    def execute(self, context: TokenizationContext) -> None:
        """Apply this stage to the shared tokenization context."""
        pass
