"""
Selection request models exchanged between the UI and the patch builder.

Both shapes are expressed purely in diff model terms (a hunk plus indices
into its lines), never in rendering coordinates.
"""
from typing import List

from pydantic import BaseModel

from gdiff.utils.diff_utils import Hunk, build_character_patch, build_line_patch


class LineSelection(BaseModel):
    """A set of lines of one hunk to stage or unstage."""
    model_config = {"frozen": True}

    hunk: Hunk
    selected_line_indices: List[int] = []

    def build_patch(self, path: str, reverse: bool = False) -> str:
        return build_line_patch(path, self.hunk, self.selected_line_indices, reverse=reverse)


class CharacterSelection(BaseModel):
    """A character range [char_start, char_end) within one changed line of a hunk."""
    model_config = {"frozen": True}

    hunk: Hunk
    line_index: int
    char_start: int
    char_end: int

    def build_patch(self, path: str) -> str:
        return build_character_patch(path, self.hunk, self.line_index, self.char_start, self.char_end)
