"""
Tests for the selection request models.
"""

import pytest
from pydantic import ValidationError

from gdiff.models import CharacterSelection, LineSelection
from gdiff.utils.diff_utils import build_character_patch, build_line_patch, parse


@pytest.fixture
def hunk(simple_diff):
    return parse(simple_diff)[0].hunks[0]


def test_line_selection_builds_line_patch(hunk):
    selection = LineSelection(hunk=hunk, selected_line_indices=[2, 3])
    assert selection.build_patch('main.go') == build_line_patch('main.go', hunk, [2, 3])
    assert selection.build_patch('main.go', reverse=True) == build_line_patch('main.go', hunk, [2, 3], reverse=True)


def test_empty_line_selection(hunk):
    assert LineSelection(hunk=hunk).build_patch('main.go') == ''


def test_character_selection_builds_character_patch(hunk):
    selection = CharacterSelection(hunk=hunk, line_index=3, char_start=0, char_end=6)
    patch = selection.build_patch('main.go')
    assert patch == build_character_patch('main.go', hunk, 3, 0, 6)
    assert '+import' in patch


def test_selections_are_frozen(hunk):
    selection = LineSelection(hunk=hunk, selected_line_indices=[2])
    with pytest.raises(ValidationError):
        selection.selected_line_indices = [3]


def test_character_selection_validates_types(hunk):
    with pytest.raises(ValidationError):
        CharacterSelection(hunk=hunk, line_index='not a number', char_start=0, char_end=1)
