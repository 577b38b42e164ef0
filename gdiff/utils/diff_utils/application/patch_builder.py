"""
Synthesis of unified diff patches for staging, unstaging and reverting.

Every builder returns text ready for 'git apply [--cached] --unidiff-zero -'.
An empty string means there is nothing to apply; callers treat it as a no-op.
"""

from dataclasses import replace
from typing import Iterable, List, Optional, Tuple

from gdiff.utils.logging_utils import logger
from ..core.diff_reverser import reverse_diff, reverse_hunk
from ..core.models import Hunk, Line, LineType

NO_NEWLINE_MARKER = '\\ No newline at end of file'

_PREFIXES = {
    LineType.CONTEXT: ' ',
    LineType.ADDED: '+',
    LineType.REMOVED: '-',
}


def patch_header(path: str) -> str:
    """The three file header lines every synthesized patch starts with."""
    return (
        f"diff --git a/{path} b/{path}\n"
        f"--- a/{path}\n"
        f"+++ b/{path}\n"
    )


def format_hunk_header(old_start: int, old_count: int, new_start: int, new_count: int,
                       section: str = '') -> str:
    return f"@@ -{old_start},{old_count} +{new_start},{new_count} @@{section}"


def hunk_section(header: str) -> str:
    """Return whatever follows the closing '@@' of a hunk header (usually a function name)."""
    end = header.find('@@', 2)
    return header[end + 2:] if end != -1 else ''


def render_lines(lines: Iterable[Line]) -> str:
    """Render body lines with their prefixes, re-emitting missing newline markers."""
    out = []
    for line in lines:
        prefix = _PREFIXES.get(line.type)
        if prefix is None:
            continue
        out.append(prefix + line.content + '\n')
        if line.missing_newline:
            out.append(NO_NEWLINE_MARKER + '\n')
    return ''.join(out)


def count_lines(lines: Iterable[Line]) -> Tuple[int, int]:
    """Return (old_count, new_count) for a list of body lines."""
    old_count = new_count = 0
    for line in lines:
        if line.type in (LineType.CONTEXT, LineType.REMOVED):
            old_count += 1
        if line.type in (LineType.CONTEXT, LineType.ADDED):
            new_count += 1
    return old_count, new_count


def build_hunk_patch(path: str, hunk: Hunk) -> str:
    """
    Build a patch containing one whole hunk, header and lines verbatim.

    Used for staging and unstaging hunks.
    """
    return patch_header(path) + hunk.header_text + '\n' + render_lines(hunk.lines)


def build_reverse_patch(path: str, hunk: Hunk) -> str:
    """
    Build a patch that undoes a hunk, for reverting working tree changes.

    Old and new ranges are swapped in the header, as are the '+' and '-' lines.
    """
    reversed_hunk = reverse_hunk(hunk)
    header = format_hunk_header(reversed_hunk.old_start, reversed_hunk.old_count,
                                reversed_hunk.new_start, reversed_hunk.new_count)
    return patch_header(path) + header + '\n' + render_lines(reversed_hunk.lines)


def select_lines(hunk: Hunk, selected_indices: Iterable[int], reverse: bool = False) -> List[Line]:
    """
    Compute the body of a partial patch.

    Selected changes keep their prefix. An unselected change is rewritten as
    context when its line exists in the content the patch applies to, and
    dropped otherwise: for a forward patch that base is the old side, for a
    reverse (unstage) patch it is the new side.
    """
    selected = set(selected_indices)
    kept_as_context = LineType.ADDED if reverse else LineType.REMOVED

    result = []
    for index, line in enumerate(hunk.lines):
        if line.type == LineType.HUNK_HEADER:
            continue
        if line.type == LineType.CONTEXT or index in selected:
            result.append(line)
        elif line.type == kept_as_context:
            result.append(replace(line, type=LineType.CONTEXT))
    return result


def build_line_patch(path: str, hunk: Hunk, selected_indices: Iterable[int], reverse: bool = False) -> str:
    """
    Build a patch that stages (or, with reverse=True, unstages) selected lines of a hunk.

    Args:
        path: Repository relative path of the file
        hunk: The hunk the selection refers to
        selected_indices: Indices into hunk.lines; non-change lines and
            out of range indices are ignored
        reverse: Build the unstage variant for a hunk of the staged diff

    Returns:
        The patch text, or an empty string if the selection changes nothing
    """
    lines = select_lines(hunk, selected_indices, reverse)
    if not any(line.is_change for line in lines):
        logger.debug(f"Line selection on {path} contains no changes, nothing to build")
        return ''

    old_count, new_count = count_lines(lines)
    if (old_count, new_count) == (hunk.old_count, hunk.new_count):
        # Same ranges as the hunk, so its header (possibly with omitted counts) still holds
        header = hunk.header_text
    else:
        header = format_hunk_header(hunk.old_start, old_count, hunk.new_start, new_count,
                                    hunk_section(hunk.header_text))
    patch = patch_header(path) + header + '\n' + render_lines(lines)
    return reverse_diff(patch) if reverse else patch


def split_line_at_char_boundary(content: str, char_start: int, char_end: int) -> Tuple[str, str, str]:
    """
    Split a line at code point offsets.

    Offsets are clamped into the line; an inverted range collapses onto char_end.

    Returns:
        (left, middle, right) around [char_start, char_end)
    """
    char_end = max(0, min(char_end, len(content)))
    char_start = max(0, min(char_start, char_end))
    return content[:char_start], content[char_start:char_end], content[char_end:]


def _find_partner(lines: Tuple[Line, ...], index: int, step: int, wanted: LineType) -> Optional[int]:
    """Walk from index in one direction to the nearest line of the wanted type, stopping at context."""
    i = index + step
    while 0 <= i < len(lines):
        line_type = lines[i].type
        if line_type == wanted:
            return i
        if line_type in (LineType.CONTEXT, LineType.HUNK_HEADER):
            return None
        i += step
    return None


def _line_before(hunk: Hunk, index: int, side: LineType) -> int:
    """Number of the last line on one side that precedes hunk.lines[index]."""
    if side == LineType.REMOVED:
        start, present = hunk.old_start, (LineType.CONTEXT, LineType.REMOVED)
    else:
        start, present = hunk.new_start, (LineType.CONTEXT, LineType.ADDED)
    return start - 1 + sum(1 for line in hunk.lines[:index] if line.type in present)


def build_character_patch(path: str, hunk: Hunk, line_index: int, char_start: int, char_end: int) -> str:
    """
    Build a patch that stages part of a single changed line.

    For an added line, the new side is the line truncated at char_end, staged
    against the removed line it replaced (if any). For a removed line, the
    removal is staged together with the added line that follows it (if any).

    Args:
        path: Repository relative path of the file
        hunk: The hunk containing the line
        line_index: Index into hunk.lines of an added or removed line
        char_start: First selected code point
        char_end: Code point after the last selected one

    Returns:
        The patch text, or an empty string for an invalid request
    """
    if not 0 <= line_index < len(hunk.lines):
        return ''
    target = hunk.lines[line_index]
    if not target.is_change or char_start >= char_end:
        return ''

    _, selected, _ = split_line_at_char_boundary(target.content, char_start, char_end)
    if not selected:
        return ''
    char_end = min(char_end, len(target.content))

    if target.type == LineType.ADDED:
        partner = _find_partner(hunk.lines, line_index, -1, LineType.REMOVED)
        old_line = hunk.lines[partner] if partner is not None else None
        new_line = replace(target, content=target.content[:char_end])
        old_start = old_line.old_line_number if old_line else _line_before(hunk, line_index, LineType.REMOVED)
        new_start = target.new_line_number
    else:
        partner = _find_partner(hunk.lines, line_index, 1, LineType.ADDED)
        old_line = target
        new_line = hunk.lines[partner] if partner is not None else None
        old_start = target.old_line_number
        new_start = new_line.new_line_number if new_line else _line_before(hunk, line_index, LineType.ADDED)

    body = [line for line in (old_line, new_line) if line is not None]
    old_count, new_count = count_lines(body)
    header = format_hunk_header(old_start, old_count, new_start, new_count)
    return patch_header(path) + header + '\n' + render_lines(body)
