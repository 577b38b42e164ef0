"""
Pairing of removed and added lines inside a hunk.

Only a run of removed lines immediately followed by a run of added lines is
considered; the pairs found here decide which lines get character level
highlighting against each other.
"""

from typing import List, Optional, Sequence, Tuple

import Levenshtein

from gdiff.utils.logging_utils import logger
from ..core.config import get_match_threshold, get_position_threshold
from ..core.models import HighlightedLine, Hunk, Line, LineType
from .char_diff import char_diff

LinePair = Tuple[int, int]


def similarity(a: str, b: str) -> float:
    """
    Normalized Levenshtein similarity over code points.

    Returns:
        1.0 for identical strings (including two empty ones), down to 0.0
    """
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - Levenshtein.distance(a, b) / longest


def _find_runs(lines: Sequence[Line]) -> List[Tuple[range, range]]:
    """Locate every removed run that is directly followed by an added run."""
    runs = []
    i = 0
    while i < len(lines):
        if lines[i].type != LineType.REMOVED:
            i += 1
            continue
        removed_start = i
        while i < len(lines) and lines[i].type == LineType.REMOVED:
            i += 1
        added_start = i
        while i < len(lines) and lines[i].type == LineType.ADDED:
            i += 1
        if i > added_start:
            runs.append((range(removed_start, added_start), range(added_start, i)))
    return runs


def _pair_run(lines: Sequence[Line], removed: range, added: range,
              position_threshold: float, match_threshold: float) -> List[LinePair]:
    if len(removed) == len(added):
        scores = [similarity(lines[r].content, lines[a].content) for r, a in zip(removed, added)]
        if sum(scores) / len(scores) > position_threshold:
            return list(zip(removed, added))

    pairs = []
    used = set()
    for r in removed:
        best_index, best_score = None, match_threshold
        for a in added:
            if a in used:
                continue
            score = similarity(lines[r].content, lines[a].content)
            if score > best_score:
                best_index, best_score = a, score
        if best_index is not None:
            used.add(best_index)
            pairs.append((r, best_index))
    return pairs


def correlate(lines: Sequence[Line], *,
              position_threshold: Optional[float] = None,
              match_threshold: Optional[float] = None) -> List[LinePair]:
    """
    Pair removed lines with the added lines that replaced them.

    Args:
        lines: The lines of one hunk
        position_threshold: Average similarity above which an equal-length run
            is paired position by position; defaults to the configured value
        match_threshold: Similarity a greedy pairing must exceed; defaults to
            the configured value

    Returns:
        (removed_index, added_index) pairs as absolute indices into lines,
        ordered by removed index. No line appears in more than one pair.
    """
    if position_threshold is None:
        position_threshold = get_position_threshold()
    if match_threshold is None:
        match_threshold = get_match_threshold()

    pairs: List[LinePair] = []
    for removed, added in _find_runs(lines):
        pairs.extend(_pair_run(lines, removed, added, position_threshold, match_threshold))
    return pairs


def compute_highlighted_diff(hunk: Hunk) -> List[HighlightedLine]:
    """
    Compute character level highlighting for every line of a hunk.

    Lines without a partner carry no changes.
    """
    changes = {}
    for removed_index, added_index in correlate(hunk.lines):
        old_changes, new_changes = char_diff(hunk.lines[removed_index].content,
                                             hunk.lines[added_index].content)
        changes[removed_index] = tuple(old_changes)
        changes[added_index] = tuple(new_changes)

    logger.debug(f"Highlighted {len(changes)} of {len(hunk.lines)} lines in hunk {hunk.header_text!r}")
    return [HighlightedLine(line, changes.get(i, ())) for i, line in enumerate(hunk.lines)]
