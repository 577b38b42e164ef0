"""
Loading diffs from git.
"""

import threading
from typing import Dict, List, Optional, Tuple

from gdiff.utils.diff_utils import FileDiff, parse
from gdiff.utils.logging_utils import logger
from .commands import run_git_command

DIFF_ARGS = ('diff', '--histogram', '--no-color')


def _diff_args(staged: bool, context_lines: Optional[int] = None) -> List[str]:
    args = list(DIFF_ARGS)
    if staged:
        args.append('--cached')
    if context_lines is not None:
        args.append(f'--unified={context_lines}')
    return args


def get_file_diff(path: str, staged: bool = False, cwd: Optional[str] = None,
                  context_lines: Optional[int] = None) -> List[FileDiff]:
    """
    Return the parsed diff of one file, against the index or (staged) against HEAD.

    path is relative to cwd, like any git pathspec; the parsed FileDiff paths
    are relative to the repository root. context_lines defaults to git's own.
    """
    output = run_git_command(*_diff_args(staged, context_lines), '--', path, cwd=cwd)
    return parse(output)


def get_all_diffs(staged: bool = False, cwd: Optional[str] = None,
                  context_lines: Optional[int] = None) -> List[FileDiff]:
    """Return the parsed diffs of every changed file."""
    return parse(run_git_command(*_diff_args(staged, context_lines), cwd=cwd))


def parse_numstat(output: str) -> Dict[str, Tuple[int, int]]:
    """
    Parse 'git diff --numstat' output.

    Binary files report '-' for both counts and are recorded as (0, 0).

    Returns:
        A mapping of path to (added, removed) line counts
    """
    stats = {}
    for line in output.splitlines():
        fields = line.split('\t', 2)
        if len(fields) < 3 or not fields[2]:
            continue
        added = int(fields[0]) if fields[0].isdigit() else 0
        removed = int(fields[1]) if fields[1].isdigit() else 0
        stats[fields[2]] = (added, removed)
    return stats


def get_diff_stats(staged: bool = False, cwd: Optional[str] = None) -> Dict[str, Tuple[int, int]]:
    """Return added/removed line counts for every changed file."""
    args = ['diff', '--numstat']
    if staged:
        args.append('--cached')
    return parse_numstat(run_git_command(*args, cwd=cwd))


class DiffLoader:
    """
    Loads file diffs while making sure a stale load never wins.

    Each load for a path takes a new generation number; when a load finishes
    after a newer one has started for the same path, its result is dropped
    and None is returned instead.
    """

    def __init__(self, cwd: Optional[str] = None, context_lines: Optional[int] = None):
        self.cwd = cwd
        self.context_lines = context_lines
        self._lock = threading.Lock()
        self._generations: Dict[Tuple[str, bool], int] = {}

    def _begin(self, key: Tuple[str, bool]) -> int:
        with self._lock:
            generation = self._generations.get(key, 0) + 1
            self._generations[key] = generation
            return generation

    def is_current(self, key: Tuple[str, bool], generation: int) -> bool:
        with self._lock:
            return self._generations.get(key) == generation

    def load(self, path: str, staged: bool = False) -> Optional[List[FileDiff]]:
        key = (path, staged)
        generation = self._begin(key)
        diffs = get_file_diff(path, staged, cwd=self.cwd, context_lines=self.context_lines)
        if not self.is_current(key, generation):
            logger.debug(f"Discarding stale diff for {path} (generation {generation})")
            return None
        return diffs
