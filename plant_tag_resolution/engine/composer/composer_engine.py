"""
Composer Engine for plant hierarchy tags

This module turns a tokenization result into a canonical tag. Discipline and
entity are resolved first (explicit token, domain context, parent, default),
the role follows from the tokens present, and the base name and suffix are
assembled from the discipline hierarchy token schema before being merged.

Features:
- Ordered handler chain keyed by composition step
- Parent-context inheritance with foreign-code detection
- Discipline-aware suffix schemas with incremental extension
- Point suffixes (N/E/D/X) with description or counter increments,
  stable per point across runs
- Virtual parent chain per discipline hierarchy for structures
- One typed result per step, collected in a CompositionResult

Author: Plant Tag Resolution Team
Version: 1.0.0
"""

from typing import Callable, Dict, Optional

from ...common.logger import PipelineLogger
from ...maps.map_registry import MapRegistry
from ...utils.DataStructures import InheritedContext, TokenizationResult
from .composition_context import CompositionContext, CompositionResult, CompositionStep
from .handlers import (
    DEFAULT_DISCIPLINE,
    DEFAULT_ENTITY,
    ComposerHandler,
    DisciplineHandler,
    EntityHandler,
    HierarchyHandler,
    NamingHandler,
    PointSuffixHandler,
    RoleHandler,
    SuffixHandler,
    TagHandler,
)


class ComposerEngine:
    """Main engine for composing canonical tags from tokens."""

    def __init__(
        self,
        maps: MapRegistry,
        default_discipline: str = DEFAULT_DISCIPLINE,
        default_entity: str = DEFAULT_ENTITY,
        discipline_context_codes: Optional[Dict[str, str]] = None,
        entity_context_codes: Optional[Dict[str, str]] = None,
        increment_source: Optional[Callable[[str, str], int]] = None,
        logger: PipelineLogger = PipelineLogger("INFO", False),
    ):
        """
        Initialize the composer.

        Args:
            maps: Loaded code tables
            default_discipline: Discipline used when nothing else applies
            default_entity: Entity used when nothing else applies
            discipline_context_codes: Context token name to discipline code
            entity_context_codes: Context token name to entity code
            increment_source: Point increments, keyed by prefix and point key
            logger: Pipeline logger
        """
        self.maps = maps
        self.default_discipline = default_discipline
        self.default_entity = default_entity
        self.discipline_context_codes = discipline_context_codes
        self.entity_context_codes = entity_context_codes
        self.increment_source = increment_source
        self.logger = logger
        self.handlers = self._initialize_handlers()

    def _initialize_handlers(self) -> Dict[CompositionStep, ComposerHandler]:
        """Initialize handler instances in execution order."""
        return {
            CompositionStep.DISCIPLINE: DisciplineHandler(
                self.maps.discipline,
                self.default_discipline,
                self.discipline_context_codes,
                self.logger,
            ),
            CompositionStep.ENTITY: EntityHandler(
                self.maps.entity,
                self.default_entity,
                self.entity_context_codes,
                self.logger,
            ),
            CompositionStep.ROLE: RoleHandler(self.maps.role, logger=self.logger),
            CompositionStep.NAMING: NamingHandler(logger=self.logger),
            CompositionStep.SUFFIX: SuffixHandler(
                self.maps.discipline_hierarchy, self.logger
            ),
            CompositionStep.POINT_SUFFIX: PointSuffixHandler(
                self.increment_source, self.logger
            ),
            CompositionStep.TAG: TagHandler(self.logger),
            CompositionStep.HIERARCHY: HierarchyHandler(
                self.maps.discipline_hierarchy, self.logger
            ),
        }

    def compose(
        self,
        token_result: TokenizationResult,
        inherited_discipline: Optional[InheritedContext] = None,
        inherited_entity: Optional[InheritedContext] = None,
        geometry_kind: Optional[str] = None,
        description: str = "",
        owner_model: str = "",
        reference_number: str = "",
    ) -> CompositionResult:
        """
        Compose the canonical tag for one element.

        Args:
            token_result: Output of the token engine
            inherited_discipline: Discipline context of the parent element
            inherited_entity: Entity context of the parent element
            geometry_kind: Set for take-over points (NOZZ, ELCONN, DATUM)
            description: Point description used for increment extraction
            owner_model: Owner model of a point
            reference_number: Reference number of a point

        Returns:
            CompositionResult with one result per step

        Raises:
            ValueError: If token_result is missing
            TypeError: If token_result is not a TokenizationResult
        """
        if token_result is None:
            raise ValueError("compose() requires a TokenizationResult")
        if not isinstance(token_result, TokenizationResult):
            raise TypeError(
                f"compose() expects TokenizationResult, got {type(token_result).__name__}"
            )

        context = CompositionContext(
            token_result=token_result,
            inherited_discipline=inherited_discipline,
            inherited_entity=inherited_entity,
            geometry_kind=(geometry_kind or "").strip(),
            description=description or "",
            owner_model=owner_model or "",
            reference_number=reference_number or "",
        )

        for step, handler in self.handlers.items():
            if step == CompositionStep.SUFFIX and context.is_point:
                continue
            if step == CompositionStep.HIERARCHY and context.is_point:
                continue
            if step == CompositionStep.POINT_SUFFIX and not context.is_point:
                continue
            context.results[step] = handler.compose(context)

        composition = CompositionResult(
            discipline=context.discipline,
            entity=context.entity,
            role=context.role,
            naming=context.naming,
            suffix=context.suffix,
            tag=context.results[CompositionStep.TAG],
            hierarchy=context.results.get(CompositionStep.HIERARCHY),
        )
        if composition.tag.is_valid:
            self.logger.debug(f"Composed '{composition.full_tag}'")
        else:
            self.logger.verbose(
                "WARNING",
                f"Composition for '{token_result.raw_input_value}' is invalid: "
                f"{composition.tag.error or composition.tag.warning}",
            )
        return composition
