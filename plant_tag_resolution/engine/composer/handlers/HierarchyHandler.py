"""Hierarchy handler: virtual parent chain of a structural element."""

from typing import Dict, List, Optional, Tuple

from ....common.logger import PipelineLogger
from ....maps.map_models import DisciplineHierarchyTokenMap, DisciplineSchema, TokenGroup
from ....utils import separators
from ....utils.DataStructures import (
    BASE_KEYS,
    MISSING_PREFIX,
    HierarchyNode,
    HierarchyResult,
)
from ..composition_context import CompositionContext
from .ComposerHandler import ComposerHandler
from .SuffixHandler import DEFAULT_CONTEXT

# Base slots per role when neither the discipline nor DEFAULT declares one.
FALLBACK_BASES: Dict[str, Tuple[str, ...]] = {
    "WORL": BASE_KEYS[:1],
    "SITE": BASE_KEYS[:2],
    "SUB_SITE": BASE_KEYS[:3],
    "ZONE": BASE_KEYS[:4],
}
FALLBACK_SUFFIX: Tuple[str, ...] = ("Discipline", "Entity")


class HierarchyHandler(ComposerHandler):
    """
    Emits one node per role of the discipline hierarchy, root first.

    Each node tag is built from the role's token group: base slots joined
    with ``.`` (absent slots written as ``MISSING_<SLOT>``) followed by the
    suffix block. Every node except the last is virtual.
    """

    def __init__(
        self,
        hierarchy_map: DisciplineHierarchyTokenMap,
        logger: Optional[PipelineLogger] = None,
    ):
        super().__init__(logger)
        self.hierarchy_map = hierarchy_map

    def compose(self, context: CompositionContext) -> HierarchyResult:
        result = HierarchyResult(source_id=context.source_id)
        discipline = (context.discipline_code or "").upper()

        schema = self.hierarchy_map.get(discipline)
        result.schema_key = discipline
        if schema is None:
            schema = self.hierarchy_map.get(DEFAULT_CONTEXT)
            result.schema_key = DEFAULT_CONTEXT
            if schema is not None:
                result.add_message(
                    f"Hierarchy: no schema for discipline '{discipline}', using DEFAULT."
                )
        if schema is None or not schema.hierarchy:
            result.add_error(f"Hierarchy: no hierarchy for '{discipline}' or DEFAULT.")
            return result

        parent_tag = ""
        for depth, role in enumerate(schema.hierarchy):
            tag = self._node_tag(role, schema, context, result)
            result.nodes.append(
                HierarchyNode(role=role, tag=tag, parent_tag=parent_tag, depth=depth)
            )
            parent_tag = tag
        result.nodes[-1].is_virtual = False

        result.is_valid = True
        result.add_message(
            f"Hierarchy: {len(result.nodes)} levels from '{result.schema_key}', "
            f"leaf '{result.leaf_tag}'."
        )
        return result

    def _group(self, role: str, schema: DisciplineSchema) -> TokenGroup:
        group = schema.group_for(role)
        if group is not None:
            return group
        default = self.hierarchy_map.get(DEFAULT_CONTEXT)
        group = default.group_for(role) if default is not None else None
        if group is not None:
            return group
        base = FALLBACK_BASES.get(role.upper(), BASE_KEYS)
        return TokenGroup(base=list(base), suffix=list(FALLBACK_SUFFIX))

    def _node_tag(
        self,
        role: str,
        schema: DisciplineSchema,
        context: CompositionContext,
        result: HierarchyResult,
    ) -> str:
        group = self._group(role, schema)
        tokens = context.token_result

        base: List[str] = []
        for slot in group.base:
            value = tokens.get_value(slot)
            if not value or value.upper().startswith(MISSING_PREFIX):
                value = f"{MISSING_PREFIX}{slot.upper()}"
                result.add_warning(f"Hierarchy: '{slot}' missing for {role}.")
            base.append(value)

        suffix: List[str] = []
        for name in group.suffix:
            lowered = name.lower()
            if lowered == "discipline":
                value = context.discipline_code
            elif lowered == "entity":
                value = context.entity_code
            else:
                value = separators.with_custom_separator(name, tokens.get_value(name))
            if value:
                suffix.append(value)

        return f"{separators.join_base(base)}{separators.assemble_suffix(suffix)}"
