"""Editor commands. Each takes an ``EditorState`` and returns a
``CommandResult``, or ``None`` when the command does not apply."""

from emmet_assist.commands.balance import balance_inward, balance_outward
from emmet_assist.commands.comment import toggle_comment
from emmet_assist.commands.edit_point import go_to_next_edit_point, go_to_previous_edit_point
from emmet_assist.commands.expand import expand_abbreviation
from emmet_assist.commands.evaluate import evaluate_math
from emmet_assist.commands.numbers import increment_number
from emmet_assist.commands.select_item import select_next_item, select_previous_item
from emmet_assist.commands.tags import go_to_tag_pair, remove_tag, split_join_tag
from emmet_assist.commands.wrap import wrap_with_abbreviation

__all__ = [
    "balance_inward",
    "balance_outward",
    "evaluate_math",
    "expand_abbreviation",
    "go_to_next_edit_point",
    "go_to_previous_edit_point",
    "go_to_tag_pair",
    "increment_number",
    "remove_tag",
    "select_next_item",
    "select_previous_item",
    "split_join_tag",
    "toggle_comment",
    "wrap_with_abbreviation",
]
