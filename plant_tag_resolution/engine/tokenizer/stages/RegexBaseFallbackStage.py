"""Regex base fallback stage: fill structural slots codification left open."""

from typing import Dict, List, Optional, Set

from ....common.logger import PipelineLogger
from ....maps.map_models import DisciplineMap, EntityMap, TokenRegexDefinition, TokenRegexMap
from ....utils.DataStructures import (
    BASE_KEYS,
    MISSING_PREFIX,
    Token,
    TokenKind,
    TokenSource,
)
from ..tokenization_context import TokenizationContext, TokenizationStageId
from .TokenizationStageHandler import TokenizationStageHandler


class RegexBaseFallbackStage(TokenizationStageHandler):
    """
    Applies positional base definitions to structural parts.

    - Codification-first: a codified slot is never overwritten. If the primary
      definition would have produced a different value at that position, the
      regex value is recorded in ``excluded_tokens`` with a warning.
    - Alternative definitions at the same position become replacements of
      the expected base key.
    - A slot nothing matched becomes a ``MISSING_<KEY>`` marker.
    - Trailing discipline/entity codes form the suffix block and are not
      evaluated here.
    """

    stage_id = TokenizationStageId.REGEX_BASE_FALLBACK

    def __init__(
        self,
        token_regex: TokenRegexMap,
        discipline_map: DisciplineMap,
        entity_map: EntityMap,
        logger: Optional[PipelineLogger] = None,
    ):
        super().__init__(logger)
        self.base_by_position = token_regex.base_by_position()
        self.max_position = max(self.base_by_position) if self.base_by_position else -1
        self.suffix_codes: Set[str] = discipline_map.codes() | entity_map.codes()

    def execute(self, context: TokenizationContext) -> None:
        if not context.parts:
            return
        if self.max_position < 0:
            context.add_message("RegexBaseFallback: no base definitions configured, stage skipped.")
            return

        context.structural_count = self._structural_count(context.parts)
        if context.structural_count < len(context.parts):
            block = context.parts[context.structural_count :]
            context.add_message(f"RegexBaseFallback: suffix block {block} not evaluated as base.")

        for index, value in enumerate(context.structural_parts):
            if index > self.max_position:
                break
            candidates = self.base_by_position.get(index, [])
            expected = self.expected_key(index, candidates)
            if not expected:
                continue

            existing = context.result.tokens.get(expected)
            if existing is not None and existing.is_processable:
                self._check_codified_slot(context, expected, existing, index, value, candidates)
                continue

            if context.is_used(value):
                continue

            if not candidates:
                self._mark_missing(context, expected, index, f"no definitions at position {index}")
                continue

            primary = self._primary(expected, candidates)
            if primary is not None and primary.full_match(value):
                context.set_token(
                    expected,
                    Token(
                        key=expected,
                        value=value,
                        kind=TokenKind.BASE,
                        source=TokenSource.REGEX,
                        position=index,
                        pattern=primary.pattern,
                        source_map_key=primary.name,
                        is_fallback=True,
                        note=f"RegexBaseFallback: '{value}' matched '{primary.name}' at position {index}.",
                    ),
                )
                context.add_message(
                    f"RegexBaseFallback: resolved {expected} = '{value}' (position {index})."
                )
                continue

            alternative = next(
                (
                    d
                    for d in candidates
                    if d.name.lower() != expected.lower() and d.full_match(value)
                ),
                None,
            )
            if alternative is not None:
                token = Token(
                    key=expected,
                    value=value,
                    kind=TokenKind.BASE,
                    source=TokenSource.REGEX_ALTERNATIVE,
                    position=index,
                    pattern=alternative.pattern,
                    is_replacement=True,
                    replaced_by=expected,
                    source_map_key=alternative.name,
                    is_fallback=True,
                    note=(
                        f"RegexBaseFallback: alternative '{alternative.name}' matched "
                        f"'{value}' at position {index}, replacing {expected}."
                    ),
                )
                if context.accept_replacement(expected, token):
                    context.add_message(
                        f"RegexBaseFallback: '{alternative.name}' = '{value}' stands in for {expected}."
                    )
                continue

            self._mark_missing(context, expected, index, f"'{value}' matched no definition")

    def expected_key(self, index: int, candidates: List[TokenRegexDefinition]) -> str:
        """Canonical base key for ``index``, preferring hierarchy order."""
        names = {d.name.lower() for d in candidates}
        for key in BASE_KEYS:
            if key.lower() in names:
                return key
        if index < len(BASE_KEYS):
            return BASE_KEYS[index]
        return ""

    def _structural_count(self, parts: List[str]) -> int:
        end = len(parts)
        while end > 1 and parts[end - 1].upper() in self.suffix_codes:
            end -= 1
        return end

    @staticmethod
    def _primary(
        expected: str, candidates: List[TokenRegexDefinition]
    ) -> Optional[TokenRegexDefinition]:
        for definition in candidates:
            if definition.name.lower() == expected.lower():
                return definition
        return None

    def _check_codified_slot(
        self,
        context: TokenizationContext,
        expected: str,
        existing: Token,
        index: int,
        value: str,
        candidates: List[TokenRegexDefinition],
    ) -> None:
        if existing.source != TokenSource.CODIFICATION:
            return
        if value.upper() == existing.value.upper() or context.is_used(value):
            return
        primary = self._primary(expected, candidates)
        if primary is None or not primary.full_match(value):
            return
        context.exclude(
            f"{expected}@{index}",
            Token(
                key=expected,
                value=value,
                kind=TokenKind.BASE,
                source=TokenSource.REGEX,
                position=index,
                pattern=primary.pattern,
                source_map_key=primary.name,
                note=f"RegexBaseFallback: regex candidate overruled by codification '{existing.value}'.",
            ),
        )
        context.add_warning(
            f"RegexBaseFallback: {expected} kept codification value '{existing.value}'; "
            f"regex candidate '{value}' at position {index} excluded."
        )

    @staticmethod
    def _mark_missing(
        context: TokenizationContext, expected: str, index: int, reason: str
    ) -> None:
        if expected not in context.result.tokens:
            context.set_token(
                expected,
                Token(
                    key=expected,
                    value=f"{MISSING_PREFIX}{expected.upper()}",
                    kind=TokenKind.BASE,
                    source=TokenSource.REGEX,
                    position=index,
                    is_missing=True,
                    source_map_key=expected,
                    note=f"RegexBaseFallback: {reason}.",
                ),
            )
        context.add_warning(f"RegexBaseFallback: {expected} missing at position {index} ({reason}).")
