"""
diff_utils package - The diff and patch engine.

This package parses unified diffs, computes intra-line highlights and
synthesizes patches for partial staging. Everything in it is a pure function
of its inputs; talking to git is left to gdiff.utils.git_utils.
"""

# Core data model
from .core import (
    CharChange, FileDiff, FileEntry, FileStatus, HighlightedLine, Hunk, Line, LineType,
    PatchApplicationError, RuneOffset,
)
from .core.diff_reverser import reverse_diff, reverse_hunk

# Parsing utilities
from .parsing import parse

# Highlighting utilities
from .highlighting import char_diff, correlate, similarity, compute_highlighted_diff, tokenize, Token

# Application utilities
from .application import (
    build_character_patch, build_hunk_patch, build_line_patch, build_reverse_patch,
    split_line_at_char_boundary,
)
