"""Disposition classification: bucket, route and target keys."""

from .disposition_context import DispositionContext, DispositionFlags, DispositionStageId
from .disposition_engine import DEFAULT_ROUTES, DispositionEngine, routes_from_config
from .stages import assign_bucket

__all__ = [
    "DispositionEngine",
    "DispositionContext",
    "DispositionFlags",
    "DispositionStageId",
    "DEFAULT_ROUTES",
    "assign_bucket",
    "routes_from_config",
]
