"""Suffix handler: discipline-aware suffix block for structural elements."""

from typing import List, Optional, Set

from ....common.logger import PipelineLogger
from ....maps.map_models import DisciplineHierarchyTokenMap, TokenGroup
from ....utils import separators
from ....utils.DataStructures import SuffixResult, Token
from ..composition_context import CompositionContext
from .ComposerHandler import ComposerHandler

DEFAULT_CONTEXT = "DEFAULT"
FALLBACK_ROLE = "EQUI"
SECTION_CONTEXT_DISCIPLINES = ("ST", "CI")
INCREMENTAL_KEY = "TagIncremental"


class SuffixHandler(ComposerHandler):
    """
    Builds the suffix from the discipline hierarchy token schema.

    The schema is looked up for the element role in the context discipline,
    then in DEFAULT, then DEFAULT EQUI. Discipline and Entity come from the
    resolver results; every other declared token is taken from the tag
    unless the base name already consumed it.
    """

    def __init__(
        self,
        hierarchy_map: DisciplineHierarchyTokenMap,
        logger: Optional[PipelineLogger] = None,
    ):
        super().__init__(logger)
        self.hierarchy_map = hierarchy_map

    def compose(self, context: CompositionContext) -> SuffixResult:
        result = SuffixResult(source_id=context.source_id)
        tokens = context.token_result
        role = context.role.role if context.role is not None else ""

        result.context_key = self.context_key(context)
        group = self._schema(result.context_key, role)
        if group is None:
            result.add_error(
                f"Suffix: no token schema for role '{role}' in '{result.context_key}' or DEFAULT."
            )
            return result

        suffix_names = list(group.suffix)
        if tokens.has_base("Equipment") and tokens.has_token(INCREMENTAL_KEY):
            suffix_names = self._with_incremental_schemas(result.context_key, suffix_names)

        consumed = set(context.naming.tokens_used) if context.naming is not None else set()
        values: List[str] = []
        for name in suffix_names:
            value = self._value_for(name, context, consumed, result)
            if value:
                values.append(value)
                result.tokens_used.append(name)

        result.suffix = separators.assemble_suffix(values)
        result.is_valid = bool(result.suffix)
        if result.is_valid:
            result.add_message(
                f"Suffix: '{result.suffix}' from {result.tokens_used} ({result.context_key})."
            )
        else:
            result.add_warning(f"Suffix: schema {suffix_names} produced no suffix.")
        return result

    @staticmethod
    def context_key(context: CompositionContext) -> str:
        """Pick the discipline schema that names this element."""
        tokens = context.token_result
        discipline = (context.discipline_code or "").upper()
        if (
            discipline in SECTION_CONTEXT_DISCIPLINES
            and tokens.has_base("PlantSection")
            and not tokens.has_base("Equipment")
            and tokens.has_token(INCREMENTAL_KEY)
        ):
            return discipline
        return DEFAULT_CONTEXT

    def _schema(self, context_key: str, role: str) -> Optional[TokenGroup]:
        for key, lookup_role in (
            (context_key, role),
            (DEFAULT_CONTEXT, role),
            (DEFAULT_CONTEXT, FALLBACK_ROLE),
        ):
            schema = self.hierarchy_map.get(key)
            if schema is None:
                continue
            group = schema.group_for(lookup_role)
            if group is not None:
                return group
        return None

    def _with_incremental_schemas(self, context_key: str, suffix_names: List[str]) -> List[str]:
        names = list(suffix_names)
        seen: Set[str] = {n.lower() for n in names}
        for key in (context_key, DEFAULT_CONTEXT):
            schema = self.hierarchy_map.get(key)
            if schema is None:
                continue
            for group in schema.tokens.values():
                if not any(n.lower() == INCREMENTAL_KEY.lower() for n in group.suffix):
                    continue
                for name in group.suffix:
                    if name.lower() not in seen:
                        seen.add(name.lower())
                        names.append(name)
        return names

    def _value_for(
        self,
        name: str,
        context: CompositionContext,
        consumed: Set[str],
        result: SuffixResult,
    ) -> str:
        lowered = name.lower()
        if lowered == "discipline":
            result.has_discipline = bool(context.discipline_code)
            return context.discipline_code
        if lowered == "entity":
            result.has_entity = bool(context.entity_code)
            return context.entity_code

        token = self._token_for(name, context)
        if token is None or not token.is_processable:
            return ""
        if token.key in consumed:
            return ""
        result.has_any_tag = True
        return separators.with_custom_separator(name, token.value)

    @staticmethod
    def _token_for(name: str, context: CompositionContext) -> Optional[Token]:
        tokens = context.token_result
        token = tokens.get_token(name)
        if token is not None:
            return token
        for candidate in tokens.tokens.values():
            if candidate.is_replacement and candidate.source_map_key.lower() == name.lower():
                return candidate
        return None
