"""
Utilities for parsing unified diff output into FileDiff trees.
"""

import enum
import re
from dataclasses import replace
from typing import List, Optional, Tuple

from gdiff.utils.logging_utils import logger
from ..core.models import FileDiff, Hunk, Line, LineType

FILE_HEADER_PREFIX = 'diff --git '
BINARY_MARKER_PREFIX = 'Binary files'

# Only evaluated on lines that already start with '@@'
_HUNK_HEADER_RE = re.compile(r'^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@(.*)$')

# git quotes paths holding unusual bytes, sometimes only on one side: "a/\303\266.txt" "b/\303\266.txt"
_QUOTED_PATH = r'"((?:[^"\\]|\\.)*)"'
_QUOTED_HEADER_RE = re.compile(rf'^(?:{_QUOTED_PATH}|(a/\S*)) (?:{_QUOTED_PATH}|(b/.*))$')
_OCTAL_ESCAPE_RE = re.compile(r'[0-7]{1,3}')
_C_ESCAPES = {'a': 7, 'b': 8, 't': 9, 'n': 10, 'v': 11, 'f': 12, 'r': 13}


class ParserState(enum.Enum):
    """States of the unified diff parser."""
    SEEKING_FILE_HEADER = "seeking_file_header"
    SEEKING_HUNK_HEADER = "seeking_hunk_header"
    INSIDE_HUNK = "inside_hunk"


class _HunkDraft:
    """A hunk under construction, tracking line numbers and the remaining line budget."""

    def __init__(self, old_start: int, old_count: int, new_start: int, new_count: int, header: str):
        self.old_start = old_start
        self.old_count = old_count
        self.new_start = new_start
        self.new_count = new_count
        self.header = header
        self.lines = [Line(LineType.HUNK_HEADER, header)]
        self.old_line = old_start
        self.new_line = new_start
        self.old_remaining = old_count
        self.new_remaining = new_count

    @property
    def exhausted(self) -> bool:
        return self.old_remaining <= 0 and self.new_remaining <= 0

    def add(self, line_type: LineType, content: str) -> None:
        if line_type == LineType.ADDED:
            self.lines.append(Line(line_type, content, new_line_number=self.new_line))
            self.new_line += 1
            self.new_remaining -= 1
        elif line_type == LineType.REMOVED:
            self.lines.append(Line(line_type, content, old_line_number=self.old_line))
            self.old_line += 1
            self.old_remaining -= 1
        else:
            self.lines.append(Line(line_type, content, self.old_line, self.new_line))
            self.old_line += 1
            self.new_line += 1
            self.old_remaining -= 1
            self.new_remaining -= 1

    def mark_missing_newline(self) -> None:
        # The marker refers to the line right before it; a bare header has nothing to mark
        if len(self.lines) > 1:
            self.lines[-1] = replace(self.lines[-1], missing_newline=True)

    def build(self) -> Hunk:
        return Hunk(
            old_start=self.old_start,
            old_count=self.old_count,
            new_start=self.new_start,
            new_count=self.new_count,
            header_text=self.header,
            lines=tuple(self.lines),
        )


class _FileDraft:
    """A file diff under construction."""

    def __init__(self, old_path: str, new_path: str):
        self.old_path = old_path
        self.new_path = new_path
        self.hunks: List[Hunk] = []
        self.is_binary = False

    def build(self) -> FileDiff:
        return FileDiff(
            old_path=self.old_path,
            new_path=self.new_path,
            hunks=() if self.is_binary else tuple(self.hunks),
            is_binary=self.is_binary,
        )


class DiffBuilder:
    """
    Accumulates parsed files and hunks.

    Holds the finished files plus at most one open file and one open hunk,
    which are flushed whenever a new boundary starts and once more by build().
    """

    def __init__(self):
        self.files: List[FileDiff] = []
        self._file: Optional[_FileDraft] = None
        self._hunk: Optional[_HunkDraft] = None

    @property
    def hunk_exhausted(self) -> bool:
        return self._hunk is None or self._hunk.exhausted

    def start_file(self, old_path: str, new_path: str) -> None:
        self.finish_file()
        self._file = _FileDraft(old_path, new_path)

    def mark_binary(self) -> None:
        if self._file is not None:
            self._file.is_binary = True

    def start_hunk(self, old_start: int, old_count: int, new_start: int, new_count: int, header: str) -> None:
        self.finish_hunk()
        self._hunk = _HunkDraft(old_start, old_count, new_start, new_count, header)

    def add_line(self, line_type: LineType, content: str) -> None:
        if self._hunk is not None:
            self._hunk.add(line_type, content)

    def mark_missing_newline(self) -> None:
        if self._hunk is not None:
            self._hunk.mark_missing_newline()

    def finish_hunk(self) -> None:
        if self._hunk is not None and self._file is not None:
            self._file.hunks.append(self._hunk.build())
        self._hunk = None

    def finish_file(self) -> None:
        self.finish_hunk()
        if self._file is not None:
            self.files.append(self._file.build())
        self._file = None

    def build(self) -> List[FileDiff]:
        self.finish_file()
        return self.files


def _unquote_c_path(body: str) -> str:
    """Decode the inside of a path git quoted with C-style escapes (octal bytes for non-ASCII)."""
    out = bytearray()
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == '\\' and i + 1 < len(body):
            octal = _OCTAL_ESCAPE_RE.match(body, i + 1)
            if octal:
                out.append(int(octal.group(0), 8) & 0xFF)
                i = octal.end()
                continue
            out.append(_C_ESCAPES.get(body[i + 1], ord(body[i + 1])))
            i += 2
            continue
        out.extend(ch.encode('utf-8'))
        i += 1
    return out.decode('utf-8', 'surrogateescape')


def parse_file_header(line: str) -> Optional[Tuple[str, str]]:
    """
    Extract the old and new paths from a 'diff --git a/<old> b/<new>' line.

    Paths git had to quote, e.g. '"a/\\303\\266.txt" "b/\\303\\266.txt"', are decoded.
    Returns None when the line does not have that shape.
    """
    if not line.startswith(FILE_HEADER_PREFIX):
        return None
    rest = line[len(FILE_HEADER_PREFIX):]

    if rest.startswith('"') or rest.endswith('"'):
        match = _QUOTED_HEADER_RE.match(rest)
        if not match:
            return None
        quoted_old, plain_old, quoted_new, plain_new = match.groups()
        old_path = _unquote_c_path(quoted_old) if quoted_old is not None else plain_old
        new_path = _unquote_c_path(quoted_new) if quoted_new is not None else plain_new
        if not (old_path.startswith('a/') and new_path.startswith('b/')):
            return None
        return old_path[2:], new_path[2:]

    if not rest.startswith('a/'):
        return None
    old_path, sep, new_path = rest[2:].rpartition(' b/')
    if not sep:
        return None
    return old_path, new_path


def parse_hunk_header(line: str) -> Optional[Tuple[int, int, int, int]]:
    """
    Parse '@@ -<oldStart>[,<oldCount>] +<newStart>[,<newCount>] @@<trailing>'.

    Omitted counts default to 1, the unified diff convention for single line hunks.

    Returns:
        (old_start, old_count, new_start, new_count), or None if the line is not a hunk header
    """
    if not line.startswith('@@'):
        return None
    match = _HUNK_HEADER_RE.match(line)
    if not match:
        return None
    old_start = int(match.group(1))
    old_count = int(match.group(2)) if match.group(2) is not None else 1
    new_start = int(match.group(3))
    new_count = int(match.group(4)) if match.group(4) is not None else 1
    return old_start, old_count, new_start, new_count


def parse(diff_output: str) -> List[FileDiff]:
    """
    Parse unified diff text (as printed by git diff) into file diffs.

    Never raises: unrecognized lines are skipped and malformed input yields a
    partial or empty result.

    Args:
        diff_output: The diff text to parse

    Returns:
        The file diffs in the order they appear
    """
    if not diff_output:
        return []

    lines = diff_output.split('\n')
    if diff_output.endswith('\n'):
        lines.pop()

    builder = DiffBuilder()
    state = ParserState.SEEKING_FILE_HEADER

    for line_no, line in enumerate(lines, 1):
        if line.startswith(FILE_HEADER_PREFIX):
            paths = parse_file_header(line)
            if paths is None:
                # Whatever follows belongs to a file we cannot name, not to the previous one
                logger.debug(f"Ignoring malformed file header at line {line_no}: {line!r}")
                builder.finish_file()
                state = ParserState.SEEKING_FILE_HEADER
                continue
            builder.start_file(*paths)
            state = ParserState.SEEKING_HUNK_HEADER
            continue

        if state == ParserState.SEEKING_FILE_HEADER:
            continue

        if line.startswith(BINARY_MARKER_PREFIX):
            builder.mark_binary()
            continue

        if line.startswith('@@'):
            header = parse_hunk_header(line)
            if header is None:
                logger.debug(f"Ignoring malformed hunk header at line {line_no}: {line!r}")
                continue
            builder.start_hunk(*header, line)
            state = ParserState.SEEKING_HUNK_HEADER if builder.hunk_exhausted else ParserState.INSIDE_HUNK
            continue

        if state == ParserState.SEEKING_HUNK_HEADER:
            # A marker right after the last line of a hunk still belongs to it
            if line.startswith('\\'):
                builder.mark_missing_newline()
            continue

        if not line:
            builder.add_line(LineType.CONTEXT, '')
        else:
            prefix = line[0]
            if prefix == '+':
                builder.add_line(LineType.ADDED, line[1:])
            elif prefix == '-':
                builder.add_line(LineType.REMOVED, line[1:])
            elif prefix == ' ':
                builder.add_line(LineType.CONTEXT, line[1:])
            elif prefix == '\\':
                builder.mark_missing_newline()
                continue
            else:
                logger.debug(f"Skipping unrecognized hunk line {line_no}: {line!r}")
                continue

        if builder.hunk_exhausted:
            state = ParserState.SEEKING_HUNK_HEADER

    return builder.build()
