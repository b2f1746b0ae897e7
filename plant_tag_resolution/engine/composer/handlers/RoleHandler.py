"""Role resolution handler."""

from typing import Optional, Sequence, Set, Tuple

from ....common.logger import PipelineLogger
from ....maps.map_models import RoleMap
from ....utils.DataStructures import BASE_KEYS, RoleResult
from ..composition_context import CompositionContext
from .ComposerHandler import ComposerHandler

SECTION_ZONE_DISCIPLINES = ("ST", "CI")
POINT_ROLES = ("NOZZ", "ELCONN", "DATUM")
LEAF_ROLE = "EQUI"


class RoleHandler(ComposerHandler):
    """
    Maps the combination of present base tokens to an element role.

    Plant only -> WORL, Plant+Unit -> SITE, any Component -> EQUI (leaf),
    Plant+Unit+Section+Equipment -> ZONE and Plant+Unit+Section -> ZONE for
    structural/civil disciplines, SUB_SITE otherwise. Other combinations use
    a token-count ladder with the same discipline branch for three tokens.
    Take-over points take their role from the geometry kind.
    """

    def __init__(
        self,
        role_map: RoleMap,
        point_roles: Sequence[str] = POINT_ROLES,
        logger: Optional[PipelineLogger] = None,
    ):
        super().__init__(logger)
        self.role_map = role_map
        self.point_roles = tuple(r.upper() for r in point_roles)

    def compose(self, context: CompositionContext) -> RoleResult:
        result = RoleResult(source_id=context.source_id)
        if context.is_point:
            self._resolve_point(context.geometry_kind, result)
        else:
            present = {k for k in BASE_KEYS if context.token_result.has_base(k)}
            if not present:
                result.add_error("Role: no structural tokens available.")
                return result
            role, note = self.resolve_role(present, context.discipline_code)
            result.role = role
            result.note = note
            result.is_leaf = role == LEAF_ROLE
            if not role:
                result.add_error(f"Role: no role for structure {sorted(present)}.")
                return result
            result.add_message(f"Role: {role} ({note}).")

        self._enrich(result)
        result.is_valid = bool(result.role) and not result.error
        return result

    @staticmethod
    def resolve_role(present: Set[str], discipline_code: str) -> Tuple[str, str]:
        """Return ``(role, decision note)`` for the present base keys."""
        plant = "Plant" in present
        unit = "PlantUnit" in present
        section = "PlantSection" in present
        equipment = "Equipment" in present
        component = "Component" in present
        section_zone = (discipline_code or "").upper() in SECTION_ZONE_DISCIPLINES

        if plant and not (unit or section or equipment or component):
            return "WORL", "plant only"
        if plant and unit and not (section or equipment or component):
            return "SITE", "plant and unit"
        if component:
            return LEAF_ROLE, "component present"
        if plant and unit and section and equipment:
            return "ZONE", "equipment without component"
        if plant and unit and section:
            if section_zone:
                return "ZONE", f"section without equipment, discipline {discipline_code}"
            return "SUB_SITE", "section without equipment"

        count = len(present)
        if count == 1:
            return "WORL", "count fallback (1)"
        if count == 2:
            return "SITE", "count fallback (2)"
        if count == 3:
            return ("ZONE" if section_zone else "SUB_SITE"), "count fallback (3)"
        if count == 4:
            return "ZONE", "count fallback (4)"
        if count == 5:
            return LEAF_ROLE, "count fallback (5)"
        return "", "no matching combination"

    def _resolve_point(self, geometry_kind: str, result: RoleResult) -> None:
        kind = (geometry_kind or "").strip().upper()
        result.role = kind
        if kind in self.point_roles:
            result.is_leaf = True
            result.note = "point geometry"
            result.add_message(f"Role: take-over point role {kind}.")
        else:
            result.is_leaf = False
            result.note = "unknown point geometry"
            result.add_warning(f"Role: geometry kind '{geometry_kind}' is not a known point role.")

    def _enrich(self, result: RoleResult) -> None:
        definition = self.role_map.get(result.role)
        if definition is None:
            if result.role:
                result.add_warning(f"Role: '{result.role}' is not defined in the role map.")
            return
        result.aveva_type = definition.aveva_type
        result.business_concept = definition.business_concept
        result.discipline_groups = list(definition.discipline_groups)
        if definition.is_leaf != result.is_leaf and result.role not in self.point_roles:
            result.add_message(
                f"Role: role map marks '{result.role}' is_leaf={definition.is_leaf}."
            )
        result.is_leaf = result.is_leaf or definition.is_leaf
