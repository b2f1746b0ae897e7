"""Tag handler: merges base name and suffix into the full tag."""

from ....utils.DataStructures import TagResult
from ..composition_context import CompositionContext
from .ComposerHandler import ComposerHandler


class TagHandler(ComposerHandler):
    def compose(self, context: CompositionContext) -> TagResult:
        result = TagResult(source_id=context.source_id)
        naming = context.naming
        suffix = context.suffix

        result.role = context.role.role if context.role is not None else ""
        result.base_name = naming.base_name if naming is not None else ""
        result.suffix = suffix.suffix if suffix is not None else ""
        result.full_tag = f"{result.base_name}{result.suffix}"

        naming_ok = naming is not None and naming.is_valid
        suffix_ok = suffix is not None and suffix.is_valid
        result.is_valid = naming_ok and suffix_ok and bool(result.base_name)

        if result.is_valid:
            result.add_message(f"Tag: '{result.full_tag}'.")
        else:
            if not naming_ok:
                result.add_error("Tag: base name is missing or invalid.")
            if not suffix_ok:
                result.add_warning("Tag: suffix is missing or invalid.")
        return result
