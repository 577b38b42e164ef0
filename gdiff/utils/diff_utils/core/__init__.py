"""
Core utilities for the diff engine.
"""

from .exceptions import PatchApplicationError
from .models import (
    CharChange,
    FileDiff,
    FileEntry,
    FileStatus,
    HighlightedLine,
    Hunk,
    Line,
    LineType,
    RuneOffset,
)
