"""Token snapshot stage: structural and functional presence flags."""

from typing import Optional

from ....utils.DataStructures import ClassificationResult
from ..disposition_context import DispositionContext, DispositionStageId
from .DispositionStageHandler import DispositionStageHandler


def is_effective(token_present: bool, resolved: Optional[ClassificationResult]) -> bool:
    """A code is effective when tokenized, or resolved validly without the default."""
    if token_present:
        return True
    return resolved is not None and resolved.is_valid and not resolved.is_default


class DispositionTokenSnapshotStage(DispositionStageHandler):
    stage_id = DispositionStageId.TOKEN_SNAPSHOT

    def execute(self, context: DispositionContext) -> None:
        tokens = context.token_result
        flags = context.flags

        flags.has_plant = tokens.has_base("Plant")
        flags.has_plant_unit = tokens.has_base("PlantUnit")
        flags.has_plant_section = tokens.has_base("PlantSection")
        flags.has_equipment = tokens.has_base("Equipment")
        flags.has_component = tokens.has_base("Component")

        component = tokens.get_token("Component")
        flags.equipment_replaced_by_component = (
            not flags.has_equipment
            and flags.has_component
            and component.is_replacement
            and component.replaced_by.lower() == "equipment"
        )
        if flags.equipment_replaced_by_component:
            flags.has_equipment = True
            context.add_message(
                "Disposition: Component replaces Equipment, Equipment treated as present."
            )

        flags.has_effective_discipline = is_effective(
            tokens.has_token("Discipline"), context.discipline_result
        )
        flags.has_effective_entity = is_effective(
            tokens.has_token("Entity"), context.entity_result
        )

        context.add_message(f"Disposition snapshot: {flags.summary()}")
