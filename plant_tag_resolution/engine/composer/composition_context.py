"""State shared by composer handlers for one element."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from ...utils.DataStructures import (
    DisciplineResult,
    EngineResult,
    EntityResult,
    HierarchyResult,
    InheritedContext,
    NamingResult,
    RoleResult,
    SuffixResult,
    TagResult,
    TokenizationResult,
)


class CompositionStep(Enum):
    """Composer handlers in execution order."""

    DISCIPLINE = 10
    ENTITY = 20
    ROLE = 30
    NAMING = 40
    SUFFIX = 50
    POINT_SUFFIX = 55
    TAG = 60
    HIERARCHY = 70


@dataclass
class CompositionContext:
    token_result: TokenizationResult
    inherited_discipline: Optional[InheritedContext] = None
    inherited_entity: Optional[InheritedContext] = None
    geometry_kind: str = ""
    description: str = ""
    owner_model: str = ""
    reference_number: str = ""
    results: Dict[CompositionStep, EngineResult] = field(default_factory=dict)

    @property
    def source_id(self) -> str:
        return self.token_result.source_id

    @property
    def is_point(self) -> bool:
        return bool(self.geometry_kind)

    @property
    def point_key(self) -> str:
        """Geometry, owner and reference (or description) of a point, case-insensitive."""
        reference = self.reference_number or self.description
        return "|".join(
            (part or "").strip().upper()
            for part in (self.geometry_kind, self.owner_model, reference)
        )

    @property
    def discipline(self) -> Optional[DisciplineResult]:
        return self.results.get(CompositionStep.DISCIPLINE)

    @property
    def entity(self) -> Optional[EntityResult]:
        return self.results.get(CompositionStep.ENTITY)

    @property
    def role(self) -> Optional[RoleResult]:
        return self.results.get(CompositionStep.ROLE)

    @property
    def naming(self) -> Optional[NamingResult]:
        return self.results.get(CompositionStep.NAMING)

    @property
    def suffix(self) -> Optional[SuffixResult]:
        return self.results.get(CompositionStep.SUFFIX) or self.results.get(
            CompositionStep.POINT_SUFFIX
        )

    @property
    def discipline_code(self) -> str:
        return self.discipline.code if self.discipline is not None else ""

    @property
    def entity_code(self) -> str:
        return self.entity.code if self.entity is not None else ""


@dataclass
class CompositionResult:
    """Everything the composer produced for one element."""

    discipline: DisciplineResult
    entity: EntityResult
    role: RoleResult
    naming: NamingResult
    suffix: SuffixResult
    tag: TagResult
    hierarchy: Optional[HierarchyResult] = None

    def as_list(self) -> List[EngineResult]:
        results: List[EngineResult] = [
            self.discipline,
            self.entity,
            self.role,
            self.naming,
            self.suffix,
            self.tag,
        ]
        if self.hierarchy is not None:
            results.append(self.hierarchy)
        return results

    @property
    def full_tag(self) -> str:
        return self.tag.full_tag
