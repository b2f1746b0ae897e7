"""Shared mutable state for one tokenization run."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Set

from ...utils.DataStructures import Token, TokenizationResult


class TokenizationStageId(Enum):
    """Tokenizer stages in execution order."""

    PRE_PROCESSING = 10
    STRUCTURAL_CODIFICATION = 20
    REGEX_BASE_FALLBACK = 30
    SUFFIX_RECOGNITION = 40
    CODIFICATION_VALIDATION = 50
    SCORING = 60
    POST_PROCESSING = 70


@dataclass
class TokenizationContext:
    raw_input: str
    result: TokenizationResult
    normalized_input: str = ""
    parts: List[str] = field(default_factory=list)
    # Parts before the trailing discipline/entity block.
    structural_count: int = 0
    used_values: Set[str] = field(default_factory=set)
    # replaced base key (lower) -> definition name of the accepted replacement
    accepted_replacements: Dict[str, str] = field(default_factory=dict)

    def add_message(self, text: str) -> None:
        self.result.add_message(text)

    def add_warning(self, text: str) -> None:
        self.result.add_warning(text)

    def add_error(self, text: str) -> None:
        self.result.add_error(text)

    @property
    def structural_parts(self) -> List[str]:
        return self.parts[: self.structural_count]

    def is_used(self, value: str) -> bool:
        return (value or "").upper() in self.used_values

    def set_token(self, key: str, token: Token) -> None:
        self.result.tokens[key] = token
        if token.is_processable:
            self.used_values.add(token.value.upper())

    def exclude(self, key: str, token: Token) -> None:
        self.result.excluded_tokens[key] = token

    def accept_replacement(self, target_key: str, token: Token) -> bool:
        """
        Register ``token`` under ``target_key`` as a replacement for
        ``token.replaced_by``.

        At most one replacement is accepted per replaced base key and an
        already filled slot is never overwritten; a rejected candidate is
        moved to ``excluded_tokens`` with a warning.
        """
        replaced = token.replaced_by.lower()
        if replaced in self.accepted_replacements:
            kept = self.accepted_replacements[replaced]
            self.exclude(f"{token.source_map_key}@{token.replaced_by}", token)
            self.add_warning(
                f"SuffixRecognition: duplicate replacement of '{token.replaced_by}' by "
                f"'{token.source_map_key}' ('{token.value}') excluded; '{kept}' was detected first."
            )
            return False

        existing = self.result.tokens.get(target_key)
        if existing is not None and existing.is_processable:
            self.exclude(f"{token.source_map_key}@{target_key}", token)
            self.add_warning(
                f"SuffixRecognition: '{token.source_map_key}' ('{token.value}') not applied, "
                f"slot '{target_key}' already holds '{existing.value}'."
            )
            return False

        self.set_token(target_key, token)
        self.accepted_replacements[replaced] = token.source_map_key
        return True
