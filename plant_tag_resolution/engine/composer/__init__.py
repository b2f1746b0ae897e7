"""Tag composer: discipline, entity, role, naming, suffix and tag merge."""

from .composer_engine import ComposerEngine
from .composition_context import CompositionContext, CompositionResult, CompositionStep

__all__ = [
    "ComposerEngine",
    "CompositionContext",
    "CompositionResult",
    "CompositionStep",
]
