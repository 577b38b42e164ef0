"""
Data model for parsed diffs.

Every entity here is immutable; the parser, correlator and character diff
engine build fresh values on each call and never patch them in place.
"""

import enum
from dataclasses import dataclass
from typing import NewType, Optional, Tuple

# Offset counted in Unicode code points of the owning string
RuneOffset = NewType("RuneOffset", int)


class FileStatus(enum.Enum):
    """Status of a file in the index or working tree, rendered as one character."""
    UNMODIFIED = " "
    MODIFIED = "M"
    ADDED = "A"
    DELETED = "D"
    RENAMED = "R"
    COPIED = "C"
    UNTRACKED = "?"
    IGNORED = "!"
    UNMERGED = "U"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_char(cls, char: str) -> "FileStatus":
        """Map a porcelain status character to a status; unknown characters are unmodified."""
        try:
            return cls(char)
        except ValueError:
            return cls.UNMODIFIED


class LineType(enum.Enum):
    """Kind of a line inside a hunk."""
    CONTEXT = "context"
    ADDED = "added"
    REMOVED = "removed"
    HUNK_HEADER = "hunk_header"


@dataclass(frozen=True)
class FileEntry:
    """A file reported by git status."""
    path: str
    status: FileStatus
    old_path: Optional[str] = None  # set for renames and copies
    staged: bool = False
    index_status: FileStatus = FileStatus.UNMODIFIED
    work_status: FileStatus = FileStatus.UNMODIFIED


@dataclass(frozen=True)
class Line:
    """A single diff line without its prefix character or trailing newline."""
    type: LineType
    content: str
    old_line_number: int = 0  # 0 when the line is absent from the old file
    new_line_number: int = 0  # 0 when the line is absent from the new file
    missing_newline: bool = False

    @property
    def is_change(self) -> bool:
        return self.type in (LineType.ADDED, LineType.REMOVED)


@dataclass(frozen=True)
class Hunk:
    """One @@ block of a unified diff. lines[0] is the header line itself."""
    old_start: int
    old_count: int
    new_start: int
    new_count: int
    header_text: str
    lines: Tuple[Line, ...] = ()

    @property
    def body(self) -> Tuple[Line, ...]:
        """The hunk lines without the header line."""
        return tuple(line for line in self.lines if line.type != LineType.HUNK_HEADER)


@dataclass(frozen=True)
class FileDiff:
    """The diff of one file. Binary diffs never carry hunks."""
    old_path: str
    new_path: str
    hunks: Tuple[Hunk, ...] = ()
    is_binary: bool = False


@dataclass(frozen=True)
class CharChange:
    """A changed code point range [start, end) within one side of a line pair."""
    start: RuneOffset
    end: RuneOffset
    is_addition: bool


@dataclass(frozen=True)
class HighlightedLine:
    """A line together with its character level changes, computed on demand."""
    line: Line
    changes: Tuple[CharChange, ...] = ()
