"""
Utilities for reversing diffs.

Reversal swaps the old and new ranges of every hunk header and the '+'/'-'
prefix of every body line. Both operations are involutions, so reversing a
reversed diff gives back the original text.
"""

import re
from dataclasses import replace

from .models import Hunk, LineType

_HUNK_HEADER_RE = re.compile(r'^@@ -(\d+)(,\d+)? \+(\d+)(,\d+)? @@(.*)$')

_SWAPPED_TYPES = {
    LineType.ADDED: LineType.REMOVED,
    LineType.REMOVED: LineType.ADDED,
}


def reverse_hunk_header(header: str) -> str:
    """
    Swap the old and new ranges of a hunk header.

    Omitted counts stay omitted on the side they move to. Headers that do not
    parse are returned unchanged.
    """
    match = _HUNK_HEADER_RE.match(header)
    if not match:
        return header
    old_start, old_count, new_start, new_count, section = match.groups()
    return f"@@ -{new_start}{new_count or ''} +{old_start}{old_count or ''} @@{section}"


def reverse_diff(diff_content: str) -> str:
    """
    Reverse a unified diff by swapping additions and deletions.

    File headers ('diff --git', '---', '+++') are kept as they are; only lines
    following a hunk header have their prefix swapped.

    Args:
        diff_content: The original diff content

    Returns:
        The reversed diff content, with the same line endings
    """
    if not diff_content:
        return diff_content

    reversed_lines = []
    in_hunk = False
    for line in diff_content.split('\n'):
        if line.startswith('diff --git '):
            in_hunk = False
            reversed_lines.append(line)
        elif line.startswith('@@'):
            in_hunk = True
            reversed_lines.append(reverse_hunk_header(line))
        elif in_hunk and line.startswith('+'):
            reversed_lines.append('-' + line[1:])
        elif in_hunk and line.startswith('-'):
            reversed_lines.append('+' + line[1:])
        else:
            reversed_lines.append(line)

    return '\n'.join(reversed_lines)


def reverse_hunk(hunk: Hunk) -> Hunk:
    """
    Reverse a parsed hunk.

    Args:
        hunk: The hunk to reverse

    Returns:
        A new hunk with ranges, line types and line numbers swapped
    """
    lines = []
    for line in hunk.lines:
        if line.type == LineType.HUNK_HEADER:
            lines.append(replace(line, content=reverse_hunk_header(line.content)))
        else:
            lines.append(replace(
                line,
                type=_SWAPPED_TYPES.get(line.type, line.type),
                old_line_number=line.new_line_number,
                new_line_number=line.old_line_number,
            ))

    return Hunk(
        old_start=hunk.new_start,
        old_count=hunk.new_count,
        new_start=hunk.old_start,
        new_count=hunk.old_count,
        header_text=reverse_hunk_header(hunk.header_text),
        lines=tuple(lines),
    )
