"""Shared mutable state for one disposition run."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from ...utils.DataStructures import (
    DisciplineResult,
    DispositionResult,
    EntityResult,
    QualityBucket,
    TokenizationResult,
)


class DispositionStageId(Enum):
    """Disposition stages in execution order."""

    PRE_PROCESSING = 10
    TOKEN_SNAPSHOT = 20
    QUALITY_ASSESSMENT = 30
    BUCKET_ASSIGNMENT = 40
    ROUTE_RESOLUTION = 50
    SCORING = 60


@dataclass
class DispositionFlags:
    """Quality flags the bucket assignment is decided on."""

    token_count: int = 0
    is_tag_empty: bool = False
    has_plant: bool = False
    has_plant_unit: bool = False
    has_plant_section: bool = False
    has_equipment: bool = False
    has_component: bool = False
    equipment_replaced_by_component: bool = False
    has_effective_discipline: bool = False
    has_effective_entity: bool = False
    is_final_import_eligible: bool = False
    is_db_limbo_eligible: bool = False

    @property
    def has_any_tokens(self) -> bool:
        return self.token_count > 0

    def summary(self) -> str:
        def flag(value: bool) -> str:
            return "Y" if value else "N"

        return (
            f"Plant={flag(self.has_plant)}, Unit={flag(self.has_plant_unit)}, "
            f"Section={flag(self.has_plant_section)}, Equip={flag(self.has_equipment)}, "
            f"Comp={flag(self.has_component)}, "
            f"EquipByComp={flag(self.equipment_replaced_by_component)}, "
            f"EffDisc={flag(self.has_effective_discipline)}, "
            f"EffEnt={flag(self.has_effective_entity)}, "
            f"FinalEligible={flag(self.is_final_import_eligible)}, "
            f"DbLimboEligible={flag(self.is_db_limbo_eligible)}"
        )


@dataclass
class DispositionContext:
    token_result: TokenizationResult
    result: DispositionResult
    discipline_result: Optional[DisciplineResult] = None
    entity_result: Optional[EntityResult] = None
    routes: Dict[QualityBucket, str] = field(default_factory=dict)
    flags: DispositionFlags = field(default_factory=DispositionFlags)

    @property
    def source_id(self) -> str:
        return self.result.source_id

    def add_message(self, text: str) -> None:
        self.result.add_message(text)

    def add_warning(self, text: str) -> None:
        self.result.add_warning(text)

    def add_error(self, text: str) -> None:
        self.result.add_error(text)
