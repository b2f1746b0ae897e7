"""Tokenizer stage handlers module."""

from .CodificationValidationStage import CodificationValidationStage
from .PostProcessingStage import PostProcessingStage
from .PreProcessingStage import PreProcessingStage
from .RegexBaseFallbackStage import RegexBaseFallbackStage
from .ScoringStage import ScoringStage
from .StructuralCodificationStage import StructuralCodificationStage
from .SuffixRecognitionStage import SuffixRecognitionStage
from .TokenizationStageHandler import TokenizationStageHandler

__all__ = [
    "TokenizationStageHandler",
    "PreProcessingStage",
    "StructuralCodificationStage",
    "RegexBaseFallbackStage",
    "SuffixRecognitionStage",
    "CodificationValidationStage",
    "ScoringStage",
    "PostProcessingStage",
]
