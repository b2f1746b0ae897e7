"""Point suffix handler: role letter plus increment for take-over points."""

from typing import Callable, Dict, Optional

from ....common.logger import PipelineLogger
from ....utils import separators
from ....utils.DataStructures import SuffixResult
from ....utils.increments import extract_increment
from ..composition_context import CompositionContext
from .ComposerHandler import ComposerHandler

POINT_CONTEXT = "POINT"
DEFAULT_LETTER = "X"
DEFAULT_INCREMENT = "01"

ROLE_LETTERS: Dict[str, str] = {
    "NOZZ": "N",
    "ELCONN": "E",
    "DATUM": "D",
}


class PointSuffixHandler(ComposerHandler):
    """
    Builds ``-<letter><increment>`` for nozzles, electrical connections and datums.

    The increment comes from the point description when one can be read from
    it, otherwise from ``increment_source`` keyed by ``<base name>-<letter>``
    and the point key, so a point seen again gets back its first increment.
    """

    def __init__(
        self,
        increment_source: Optional[Callable[[str, str], int]] = None,
        logger: Optional[PipelineLogger] = None,
    ):
        super().__init__(logger)
        self.increment_source = increment_source

    def compose(self, context: CompositionContext) -> SuffixResult:
        result = SuffixResult(source_id=context.source_id, context_key=POINT_CONTEXT)
        role = context.role.role if context.role is not None else context.geometry_kind
        letter = ROLE_LETTERS.get((role or "").upper(), DEFAULT_LETTER)
        base_name = context.naming.base_name if context.naming is not None else ""

        increment = extract_increment(context.description)
        if increment:
            result.add_message(f"Suffix: increment '{increment}' read from description.")
        elif self.increment_source is not None:
            prefix = f"{base_name}{separators.SUFFIX}{letter}"
            increment = f"{self.increment_source(prefix, context.point_key):02d}"
            result.add_message(f"Suffix: increment '{increment}' allocated for '{prefix}'.")
        else:
            increment = DEFAULT_INCREMENT
            result.add_warning(
                f"Suffix: no increment in description and no counter, using '{increment}'."
            )

        result.suffix_letter = letter
        result.suffix_increment = increment
        result.suffix = f"{separators.SUFFIX}{letter}{increment}"
        result.tokens_used = ["Role"]
        result.is_valid = True
        return result
