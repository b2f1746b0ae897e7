"""Suffix recognition stage: discipline, entity, replacements and context words."""

from typing import Dict, Optional, Set

from ....common.logger import PipelineLogger
from ....maps.map_models import DisciplineMap, EntityMap, TokenRegexDefinition, TokenRegexMap
from ....utils.DataStructures import BASE_KEYS, Token, TokenKind, TokenSource
from ..tokenization_context import TokenizationContext, TokenizationStageId
from .TokenizationStageHandler import TokenizationStageHandler

EXCEPTION_PREFIX = "PlantLayout"
EXCEPTION_NAMES = ("MANDUMMY", "LIFTCAR")
INCREMENTAL_KEY = "TagIncremental"
CLASSIFICATION_KEYS = ("Discipline", "Entity")


def is_exception_suffix(name: str) -> bool:
    """Exception categories may stand in for a missing plant section."""
    if not name:
        return False
    if name.lower().startswith(EXCEPTION_PREFIX.lower()):
        return True
    return name.upper() in EXCEPTION_NAMES


class SuffixRecognitionStage(TokenizationStageHandler):
    """
    Detects suffix tokens.

    - Discipline and Entity: reverse scan of the parts against the code tables.
    - Positional suffix definitions: replacements for the nearest base slot at
      or before their position. ``TagIncremental`` is stored on the next base
      slot while replacing the one at its position. Exception categories only
      apply while the plant section has no base evidence.
    - Non-positional definitions (domain context words) are stored under their
      own key.

    Each definition matches at most once and never reuses a consumed value.
    """

    stage_id = TokenizationStageId.SUFFIX_RECOGNITION

    def __init__(
        self,
        token_regex: TokenRegexMap,
        discipline_map: DisciplineMap,
        entity_map: EntityMap,
        logger: Optional[PipelineLogger] = None,
    ):
        super().__init__(logger)
        self.suffix_definitions = token_regex.suffix_definitions()
        self.discipline_codes: Set[str] = discipline_map.codes()
        self.entity_codes: Set[str] = entity_map.codes()
        self.base_keys_by_position: Dict[int, str] = {}
        for position, candidates in token_regex.base_by_position().items():
            names = {d.name.lower() for d in candidates}
            for key in BASE_KEYS:
                if key.lower() in names:
                    self.base_keys_by_position[position] = key
                    break

    def execute(self, context: TokenizationContext) -> None:
        if not context.parts:
            return

        self._detect_code(context, "Discipline", self.discipline_codes)
        self._detect_code(context, "Entity", self.entity_codes)

        for definition in self.suffix_definitions:
            if definition.name in CLASSIFICATION_KEYS:
                continue
            if definition.position < 0:
                self._detect_context_word(context, definition)
            else:
                self._detect_replacement(context, definition)

    def find_base_to_replace(self, position: int) -> str:
        eligible = [p for p in self.base_keys_by_position if p <= position]
        if not eligible:
            return ""
        return self.base_keys_by_position[max(eligible)]

    def _base_position(self, key: str) -> int:
        for position, name in self.base_keys_by_position.items():
            if name == key:
                return position
        return -1

    def _detect_code(
        self, context: TokenizationContext, key: str, codes: Set[str]
    ) -> None:
        existing = context.result.tokens.get(key)
        if existing is not None and existing.is_processable:
            return
        for part in reversed(context.parts):
            if part.upper() not in codes or context.is_used(part):
                continue
            context.set_token(
                key,
                Token(
                    key=key,
                    value=part,
                    kind=TokenKind.SUFFIX,
                    source=TokenSource.MAP,
                    position=-1,
                    source_map_key=key,
                    note=f"SuffixRecognition: matched {key.lower()} code '{part}'.",
                ),
            )
            context.add_message(f"SuffixRecognition: detected {key.lower()} '{part}'.")
            return

    def _detect_context_word(
        self, context: TokenizationContext, definition: TokenRegexDefinition
    ) -> None:
        if definition.name in context.result.tokens:
            return
        for part in context.parts:
            if context.is_used(part) or not definition.full_match(part):
                continue
            context.set_token(
                definition.name,
                Token(
                    key=definition.name,
                    value=part,
                    kind=TokenKind.SUFFIX,
                    source=TokenSource.SUFFIX,
                    position=-1,
                    pattern=definition.pattern,
                    source_map_key=definition.name,
                    note=f"SuffixRecognition: context word '{definition.name}' = '{part}'.",
                ),
            )
            context.add_message(f"SuffixRecognition: context '{definition.name}' from '{part}'.")
            return

    def _detect_replacement(
        self, context: TokenizationContext, definition: TokenRegexDefinition
    ) -> None:
        replaces = self.find_base_to_replace(definition.position)
        if not replaces:
            return

        is_exception = is_exception_suffix(definition.name)
        if is_exception and not self._section_open(context):
            return

        target = replaces
        if definition.name.lower() == INCREMENTAL_KEY.lower():
            target = self.base_keys_by_position.get(definition.position + 1, replaces)

        for part in context.parts:
            if context.is_used(part) or not definition.full_match(part):
                continue
            token = Token(
                key=target,
                value=part,
                kind=TokenKind.SUFFIX,
                source=TokenSource.EXCEPTION if is_exception else TokenSource.SUFFIX,
                position=self._base_position(target),
                pattern=definition.pattern,
                is_replacement=True,
                replaced_by=replaces,
                source_map_key=definition.name,
                is_fallback=is_exception,
                note=(
                    f"SuffixRecognition: '{definition.name}' = '{part}' on {target}, "
                    f"replaces {replaces}."
                ),
            )
            if context.accept_replacement(target, token):
                context.add_message(
                    f"SuffixRecognition: '{definition.name}' value '{part}' attached to "
                    f"{target} (replaces {replaces})."
                )
            return

    @staticmethod
    def _section_open(context: TokenizationContext) -> bool:
        """True unless the plant section holds base (non-replacement) evidence."""
        section = context.result.tokens.get("PlantSection")
        return section is None or not section.is_processable or section.is_replacement
