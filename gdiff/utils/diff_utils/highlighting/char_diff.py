"""
Character level diffs between a removed line and the added line it pairs with.

The diff runs in two passes: a token level Myers diff with semantic cleanup
decides which regions changed, then each changed region that has both an old
and a new side is re-diffed character by character for tight highlights.

All offsets handed out are code point offsets into the line they describe.
"""

from typing import List, Optional, Sequence, Tuple

from gdiff.utils.logging_utils import logger
from ..core.config import get_max_char_diff_bytes
from ..core.models import CharChange, RuneOffset
from ..core.myers import DIFF_DELETE, DIFF_EQUAL, DIFF_INSERT, cleanup_semantic, diff_sequences
from .tokenizer import tokenize

ChangeLists = Tuple[List[CharChange], List[CharChange]]


def _char_count(chunk: Sequence[str]) -> int:
    return sum(len(token) for token in chunk)


def _byte_length(text: str) -> int:
    return len(text.encode('utf-8', 'surrogatepass'))


def char_diff(old: str, new: str, max_bytes: Optional[int] = None) -> ChangeLists:
    """
    Compute the changed ranges of both sides of a line pair.

    Args:
        old: The removed line content
        new: The added line content
        max_bytes: Combined UTF-8 size above which no highlighting is computed;
            defaults to the configured limit

    Returns:
        (old_changes, new_changes), each sorted and non-overlapping, in code
        point offsets of its own string
    """
    if old == new:
        return [], []

    limit = get_max_char_diff_bytes() if max_bytes is None else max_bytes
    total = _byte_length(old) + _byte_length(new)
    if total > limit:
        logger.debug(f"Skipping character diff for {total} byte line pair (limit {limit})")
        return [], []

    if not old:
        return [], [CharChange(RuneOffset(0), RuneOffset(len(new)), True)]
    if not new:
        return [CharChange(RuneOffset(0), RuneOffset(len(old)), False)], []

    old_tokens = [token.text for token in tokenize(old)]
    new_tokens = [token.text for token in tokenize(new)]
    script = cleanup_semantic(diff_sequences(old_tokens, new_tokens), size=_char_count)

    old_changes: List[CharChange] = []
    new_changes: List[CharChange] = []
    old_pos = new_pos = 0
    i = 0
    while i < len(script):
        op, chunk = script[i]
        if op == DIFF_EQUAL:
            width = _char_count(chunk)
            old_pos += width
            new_pos += width
            i += 1
            continue

        # Gather the whole edit run sitting between two equalities
        deleted = inserted = 0
        while i < len(script) and script[i][0] != DIFF_EQUAL:
            op, chunk = script[i]
            if op == DIFF_DELETE:
                deleted += _char_count(chunk)
            else:
                inserted += _char_count(chunk)
            i += 1

        if deleted and inserted:
            _refine(old, new, old_pos, old_pos + deleted, new_pos, new_pos + inserted,
                    old_changes, new_changes)
        elif deleted:
            old_changes.append(CharChange(RuneOffset(old_pos), RuneOffset(old_pos + deleted), False))
        elif inserted:
            new_changes.append(CharChange(RuneOffset(new_pos), RuneOffset(new_pos + inserted), True))

        old_pos += deleted
        new_pos += inserted

    return _coalesce(old_changes), _coalesce(new_changes)


def _refine(old: str, new: str, old_start: int, old_end: int, new_start: int, new_end: int,
            old_changes: List[CharChange], new_changes: List[CharChange]) -> None:
    """Re-diff one replaced region character by character and record the ranges."""
    old_pos, new_pos = old_start, new_start
    for op, chunk in diff_sequences(old[old_start:old_end], new[new_start:new_end]):
        width = len(chunk)
        if op == DIFF_EQUAL:
            old_pos += width
            new_pos += width
        elif op == DIFF_DELETE:
            old_changes.append(CharChange(RuneOffset(old_pos), RuneOffset(old_pos + width), False))
            old_pos += width
        elif op == DIFF_INSERT:
            new_changes.append(CharChange(RuneOffset(new_pos), RuneOffset(new_pos + width), True))
            new_pos += width


def _coalesce(changes: List[CharChange]) -> List[CharChange]:
    """Join touching ranges; input is already sorted and non-overlapping."""
    result: List[CharChange] = []
    for change in changes:
        if result and result[-1].end == change.start:
            last = result[-1]
            result[-1] = CharChange(last.start, change.end, last.is_addition)
        else:
            result.append(change)
    return result
