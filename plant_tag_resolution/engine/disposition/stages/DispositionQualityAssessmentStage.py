"""Quality assessment stage: final-import and db-limbo eligibility."""

from typing import List

from ..disposition_context import DispositionContext, DispositionFlags, DispositionStageId
from .DispositionStageHandler import DispositionStageHandler


def is_final_import_eligible(flags: DispositionFlags) -> bool:
    full_structure = (
        flags.has_plant
        and flags.has_plant_unit
        and flags.has_plant_section
        and flags.has_component
        and (flags.has_equipment or flags.equipment_replaced_by_component)
    )
    functional = flags.has_effective_discipline and flags.has_effective_entity
    return full_structure and functional and not flags.is_tag_empty and flags.has_any_tokens


def is_db_limbo_eligible(flags: DispositionFlags) -> bool:
    if flags.is_final_import_eligible:
        return False
    return (
        flags.has_plant
        and flags.has_plant_unit
        and flags.has_component
        and flags.has_effective_entity
    )


class DispositionQualityAssessmentStage(DispositionStageHandler):
    """Sets eligibility flags and explains what is missing; the bucket comes later."""

    stage_id = DispositionStageId.QUALITY_ASSESSMENT

    def execute(self, context: DispositionContext) -> None:
        flags = context.flags
        flags.is_final_import_eligible = is_final_import_eligible(flags)
        flags.is_db_limbo_eligible = is_db_limbo_eligible(flags)

        if not flags.is_final_import_eligible:
            missing = self._missing_for_final(flags)
            if missing:
                context.add_message(f"Disposition: final import missing {', '.join(missing)}.")

        if not context.result.error:
            context.result.is_valid = True

    @staticmethod
    def _missing_for_final(flags: DispositionFlags) -> List[str]:
        missing = []
        if not flags.has_plant:
            missing.append("Plant")
        if not flags.has_plant_unit:
            missing.append("PlantUnit")
        if not flags.has_plant_section:
            missing.append("PlantSection")
        if not flags.has_component:
            missing.append("Component")
        if not flags.has_equipment:
            missing.append("Equipment")
        if not flags.has_effective_discipline:
            missing.append("Discipline")
        if not flags.has_effective_entity:
            missing.append("Entity")
        if flags.is_tag_empty:
            missing.append("tag")
        return missing
