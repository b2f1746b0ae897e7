"""Shared decision order for discipline and entity resolution."""

from abc import abstractmethod
from typing import Dict, Optional, Tuple, Type, Union

from ....common.logger import PipelineLogger
from ....maps.map_models import DisciplineMap, EntityMap
from ....utils.DataStructures import (
    ClassificationResult,
    InheritedContext,
    ResolutionOrigin,
)
from ..composition_context import CompositionContext
from .ComposerHandler import ComposerHandler


class ClassificationHandler(ComposerHandler):
    """
    Resolves a classification code in a fixed order:

    1. explicit token in the tag
    2. domain-context tokens mapped to a code
    3. code inherited from the parent
    4. configured default

    A local code that differs from the inherited one is reported as foreign.
    """

    token_key: str = ""
    result_class: Type[ClassificationResult] = ClassificationResult
    # Unknown local codes invalidate the result when set.
    unknown_is_invalid: bool = False

    def __init__(
        self,
        code_map: Union[DisciplineMap, EntityMap],
        default_code: str,
        context_codes: Optional[Dict[str, str]] = None,
        logger: Optional[PipelineLogger] = None,
    ):
        super().__init__(logger)
        self.code_map = code_map
        self.default_code = default_code.upper()
        self.context_codes = dict(context_codes or {})

    @abstractmethod
    def inherited(self, context: CompositionContext) -> Optional[InheritedContext]:
        """Parent context for this classification, if any."""

    def compose(self, context: CompositionContext) -> ClassificationResult:
        result = self.result_class(source_id=context.source_id)
        label = self.token_key.lower()

        parent = self.inherited(context)
        inherited_code = (parent.code or "").strip().upper() if parent else ""

        local_code, how = self._local_code(context)

        if local_code:
            code = self.code_map.resolve_code(local_code)
            if not code:
                return self._fallback_unknown(result, local_code, how)

            result.code = code
            result.is_valid = True
            if inherited_code and inherited_code != code:
                result.origin = ResolutionOrigin.FOREIGN
                result.inherited_from = parent.parent_id
                result.add_warning(
                    f"{self.token_key}: local {label} '{code}' ({how}) differs from "
                    f"inherited '{inherited_code}' of parent '{parent.parent_id}'."
                )
            else:
                result.origin = ResolutionOrigin.LOCAL
                result.add_message(f"{self.token_key}: '{code}' from {how}.")
            return result

        if inherited_code:
            result.code = inherited_code
            result.origin = ResolutionOrigin.INHERITED
            result.inherited_from = parent.parent_id
            result.is_valid = True
            if not self.code_map.contains(inherited_code):
                result.add_warning(
                    f"{self.token_key}: inherited {label} '{inherited_code}' is not in the code table."
                )
            else:
                result.add_message(
                    f"{self.token_key}: '{inherited_code}' inherited from '{parent.parent_id}'."
                )
            return result

        result.code = self.default_code
        result.origin = ResolutionOrigin.DEFAULT
        result.is_valid = True
        result.add_message(
            f"{self.token_key}: no local or inherited {label}, default '{self.default_code}' used."
        )
        return result

    def _local_code(self, context: CompositionContext) -> Tuple[str, str]:
        tokens = context.token_result
        token = tokens.tokens.get(self.token_key)
        if token is not None and token.is_processable:
            return token.value.strip().upper(), "explicit token"

        for word, code in self.context_codes.items():
            if tokens.has_token(word):
                return code.upper(), f"context token '{word}'"
        return "", ""

    def _fallback_unknown(
        self, result: ClassificationResult, local_code: str, how: str
    ) -> ClassificationResult:
        result.code = self.default_code
        result.origin = ResolutionOrigin.DEFAULT
        text = (
            f"{self.token_key}: '{local_code}' ({how}) is not in the code table, "
            f"falling back to '{self.default_code}'."
        )
        if self.unknown_is_invalid:
            result.is_valid = False
            result.add_warning(text)
        else:
            result.is_valid = True
            result.add_message(text)
        return result
