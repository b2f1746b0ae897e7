"""Scoring stage: per-token confidence and aggregate score."""

from typing import Dict, Optional

from ....common.logger import PipelineLogger
from ....utils.DataStructures import BASE_KEYS
from ....utils.scoring import (
    DEFAULT_MISSING_PENALTY,
    DEFAULT_SOURCE_WEIGHTS,
    aggregate_score,
    compute_token_score,
)
from ..tokenization_context import TokenizationContext, TokenizationStageId
from .TokenizationStageHandler import TokenizationStageHandler

_BASE_KEYS_LOWER = {k.lower() for k in BASE_KEYS}


class ScoringStage(TokenizationStageHandler):
    stage_id = TokenizationStageId.SCORING

    def __init__(
        self,
        weights: Optional[Dict[str, float]] = None,
        missing_penalty: float = DEFAULT_MISSING_PENALTY,
        logger: Optional[PipelineLogger] = None,
    ):
        super().__init__(logger)
        self.weights = dict(weights or DEFAULT_SOURCE_WEIGHTS)
        self.missing_penalty = missing_penalty

    def execute(self, context: TokenizationContext) -> None:
        result = context.result
        result.token_scores = {}
        base_scores = []
        for key, token in result.tokens.items():
            score = compute_token_score(token, self.weights, self.missing_penalty)
            result.token_scores[key] = score
            if key.lower() in _BASE_KEYS_LOWER:
                base_scores.append(score)

        result.score = aggregate_score(base_scores)
        context.add_message(
            f"Scoring: {len(base_scores)} base slots scored, total {result.score}."
        )
