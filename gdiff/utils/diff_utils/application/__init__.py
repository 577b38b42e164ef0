"""
Application utilities for the diff_utils package.

This module synthesizes the patches handed to git apply.
"""

from .patch_builder import (
    NO_NEWLINE_MARKER,
    build_character_patch,
    build_hunk_patch,
    build_line_patch,
    build_reverse_patch,
    patch_header,
    select_lines,
    split_line_at_char_boundary,
)
