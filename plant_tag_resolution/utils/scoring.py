"""
Shared token scoring.

Per-token score is the weight of the evidence source minus a penalty when the
slot is only a missing marker:

- codification: 100
- regex (primary definition): 80
- regex alternative: 70
- suffix replacement: 65
- exception category: 60

The total is the mean over base-slot tokens, clamped to 0-100.
"""

from typing import Dict, Iterable, Optional

from .DataStructures import Token, TokenSource

DEFAULT_SOURCE_WEIGHTS: Dict[str, float] = {
    TokenSource.CODIFICATION.value: 100.0,
    TokenSource.REGEX.value: 80.0,
    TokenSource.REGEX_ALTERNATIVE.value: 70.0,
    TokenSource.SUFFIX.value: 65.0,
    TokenSource.EXCEPTION.value: 60.0,
    TokenSource.MAP.value: 60.0,
}

DEFAULT_MISSING_PENALTY = 100.0

# Must stay strictly descending.
REQUIRED_ORDER = (
    TokenSource.CODIFICATION.value,
    TokenSource.REGEX.value,
    TokenSource.EXCEPTION.value,
)


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def validate_weights(weights: Dict[str, float]) -> list:
    """Return a list of problems with ``weights``; empty when usable."""
    errors = []
    for source in REQUIRED_ORDER:
        if source not in weights:
            errors.append(f"Missing score weight for source '{source}'")
    if errors:
        return errors
    ordered = [weights[s] for s in REQUIRED_ORDER]
    if any(a <= b for a, b in zip(ordered, ordered[1:])):
        errors.append(
            "Score weights must satisfy codification > regex > exception, "
            f"got {dict(zip(REQUIRED_ORDER, ordered))}"
        )
    return errors


def compute_token_score(
    token: Token,
    weights: Optional[Dict[str, float]] = None,
    missing_penalty: float = DEFAULT_MISSING_PENALTY,
) -> float:
    weights = weights or DEFAULT_SOURCE_WEIGHTS
    score = weights.get(token.source.value, 0.0)
    if token.is_missing:
        score -= missing_penalty
    return clamp(score)


def aggregate_score(scores: Iterable[float]) -> float:
    values = list(scores)
    if not values:
        return 0.0
    return round(clamp(sum(values) / len(values)), 2)
