"""
Myers shortest edit script over arbitrary sequences.

Works on anything that supports len(), slicing, indexing and item equality,
so the same code diffs plain strings character by character and token lists
token by token. Uses the linear space middle-snake bisection, recursing on
both halves, after trimming the common prefix and suffix.
"""

from typing import Callable, List, Sequence, Tuple

DIFF_DELETE = -1
DIFF_INSERT = 1
DIFF_EQUAL = 0

# (operation, slice of the input it covers)
Diff = Tuple[int, Sequence]


def common_prefix_length(a: Sequence, b: Sequence) -> int:
    limit = min(len(a), len(b))
    i = 0
    while i < limit and a[i] == b[i]:
        i += 1
    return i


def common_suffix_length(a: Sequence, b: Sequence) -> int:
    limit = min(len(a), len(b))
    i = 0
    while i < limit and a[-1 - i] == b[-1 - i]:
        i += 1
    return i


def diff_sequences(a: Sequence, b: Sequence) -> List[Diff]:
    """
    Compute an edit script turning a into b.

    Args:
        a: The old sequence
        b: The new sequence

    Returns:
        A list of (operation, chunk) tuples; chunks are slices of a (equal and
        delete) or b (insert) and adjacent operations are merged
    """
    if a == b:
        return [(DIFF_EQUAL, a)] if len(a) else []

    prefix = common_prefix_length(a, b)
    head = a[:prefix]
    a, b = a[prefix:], b[prefix:]

    suffix = common_suffix_length(a, b)
    tail = a[len(a) - suffix:]
    a, b = a[:len(a) - suffix], b[:len(b) - suffix]

    diffs = _compute(a, b)
    if len(head):
        diffs.insert(0, (DIFF_EQUAL, head))
    if len(tail):
        diffs.append((DIFF_EQUAL, tail))
    return merge_diffs(diffs)


def _compute(a: Sequence, b: Sequence) -> List[Diff]:
    """Diff two sequences known to share no common prefix or suffix."""
    if not len(a):
        return [(DIFF_INSERT, b)]
    if not len(b):
        return [(DIFF_DELETE, a)]

    # A single item either sits somewhere in the other side or is a plain substitution
    if len(a) == 1:
        return _single_item(a, b, DIFF_INSERT)
    if len(b) == 1:
        return _single_item(b, a, DIFF_DELETE)

    return _bisect(a, b)


def _single_item(short: Sequence, long: Sequence, outer_op: int) -> List[Diff]:
    item = short[0]
    for i in range(len(long)):
        if long[i] == item:
            diffs = []
            if i:
                diffs.append((outer_op, long[:i]))
            diffs.append((DIFF_EQUAL, long[i:i + 1]))
            if i + 1 < len(long):
                diffs.append((outer_op, long[i + 1:]))
            return diffs
    if outer_op == DIFF_INSERT:
        return [(DIFF_DELETE, short), (DIFF_INSERT, long)]
    return [(DIFF_DELETE, long), (DIFF_INSERT, short)]


def _bisect(a: Sequence, b: Sequence) -> List[Diff]:
    """Find the middle snake of the edit graph and split the problem there."""
    n, m = len(a), len(b)
    max_d = (n + m + 1) // 2
    v_offset = max_d
    v_length = 2 * max_d
    v1 = [-1] * v_length
    v1[v_offset + 1] = 0
    v2 = [-1] * v_length
    v2[v_offset + 1] = 0
    delta = n - m
    # With an odd delta the forward path detects the overlap, otherwise the reverse one
    front = delta % 2 != 0
    k1start = k1end = k2start = k2end = 0

    for d in range(max_d):
        for k1 in range(-d + k1start, d + 1 - k1end, 2):
            k1_offset = v_offset + k1
            if k1 == -d or (k1 != d and v1[k1_offset - 1] < v1[k1_offset + 1]):
                x1 = v1[k1_offset + 1]
            else:
                x1 = v1[k1_offset - 1] + 1
            y1 = x1 - k1
            while x1 < n and y1 < m and a[x1] == b[y1]:
                x1 += 1
                y1 += 1
            v1[k1_offset] = x1
            if x1 > n:
                k1end += 2
            elif y1 > m:
                k1start += 2
            elif front:
                k2_offset = v_offset + delta - k1
                if 0 <= k2_offset < v_length and v2[k2_offset] != -1:
                    x2 = n - v2[k2_offset]
                    if x1 >= x2:
                        return _bisect_split(a, b, x1, y1)

        for k2 in range(-d + k2start, d + 1 - k2end, 2):
            k2_offset = v_offset + k2
            if k2 == -d or (k2 != d and v2[k2_offset - 1] < v2[k2_offset + 1]):
                x2 = v2[k2_offset + 1]
            else:
                x2 = v2[k2_offset - 1] + 1
            y2 = x2 - k2
            while x2 < n and y2 < m and a[n - x2 - 1] == b[m - y2 - 1]:
                x2 += 1
                y2 += 1
            v2[k2_offset] = x2
            if x2 > n:
                k2end += 2
            elif y2 > m:
                k2start += 2
            elif not front:
                k1_offset = v_offset + delta - k2
                if 0 <= k1_offset < v_length and v1[k1_offset] != -1:
                    x1 = v1[k1_offset]
                    y1 = v_offset + x1 - k1_offset
                    if x1 >= n - x2:
                        return _bisect_split(a, b, x1, y1)

    # No commonality at all
    return [(DIFF_DELETE, a), (DIFF_INSERT, b)]


def _bisect_split(a: Sequence, b: Sequence, x: int, y: int) -> List[Diff]:
    return diff_sequences(a[:x], b[:y]) + diff_sequences(a[x:], b[y:])


def merge_diffs(diffs: List[Diff]) -> List[Diff]:
    """
    Normalize an edit script.

    Drops empty chunks, joins neighbouring equalities and reorders every run of
    edits between two equalities into one deletion followed by one insertion.
    """
    merged: List[Diff] = []
    deleted: List[Sequence] = []
    inserted: List[Sequence] = []

    def flush_edits():
        if deleted:
            merged.append((DIFF_DELETE, _concat(deleted)))
            deleted.clear()
        if inserted:
            merged.append((DIFF_INSERT, _concat(inserted)))
            inserted.clear()

    for op, chunk in diffs:
        if not len(chunk):
            continue
        if op == DIFF_DELETE:
            deleted.append(chunk)
        elif op == DIFF_INSERT:
            inserted.append(chunk)
        else:
            flush_edits()
            if merged and merged[-1][0] == DIFF_EQUAL:
                merged[-1] = (DIFF_EQUAL, merged[-1][1] + chunk)
            else:
                merged.append((DIFF_EQUAL, chunk))
    flush_edits()
    return merged


def _concat(chunks: List[Sequence]) -> Sequence:
    result = chunks[0]
    for chunk in chunks[1:]:
        result = result + chunk
    return result


def cleanup_semantic(diffs: List[Diff], size: Callable[[Sequence], int] = len) -> List[Diff]:
    """
    Reduce the number of edits by eliminating semantically trivial equalities.

    An equality no longer than the edits on both of its sides is folded into
    them, which turns scattered micro-edits into one coherent change.

    Args:
        diffs: A merged edit script
        size: Measures a chunk; token scripts pass a character count

    Returns:
        The cleaned up, merged edit script
    """
    diffs = list(diffs)
    changes = False
    equalities: List[int] = []  # indices of candidate equalities
    last_equality = None
    pointer = 0
    # Edit sizes before and after the last equality
    insertions_before = deletions_before = 0
    insertions_after = deletions_after = 0

    while pointer < len(diffs):
        op, chunk = diffs[pointer]
        if op == DIFF_EQUAL:
            equalities.append(pointer)
            insertions_before, insertions_after = insertions_after, 0
            deletions_before, deletions_after = deletions_after, 0
            last_equality = chunk
        else:
            if op == DIFF_INSERT:
                insertions_after += size(chunk)
            else:
                deletions_after += size(chunk)
            if (last_equality is not None and
                    size(last_equality) <= max(insertions_before, deletions_before) and
                    size(last_equality) <= max(insertions_after, deletions_after)):
                index = equalities[-1]
                diffs[index] = (DIFF_DELETE, last_equality)
                diffs.insert(index + 1, (DIFF_INSERT, last_equality))
                # Throw away the equality just folded and the one before it, it may need re-evaluating
                equalities.pop()
                if equalities:
                    equalities.pop()
                pointer = equalities[-1] if equalities else -1
                insertions_before = deletions_before = 0
                insertions_after = deletions_after = 0
                last_equality = None
                changes = True
        pointer += 1

    if changes:
        return merge_diffs(diffs)
    return diffs
