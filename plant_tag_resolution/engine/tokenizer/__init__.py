"""Staged tag tokenizer."""

from .token_engine import TokenEngine
from .tokenization_context import TokenizationContext, TokenizationStageId

__all__ = ["TokenEngine", "TokenizationContext", "TokenizationStageId"]
