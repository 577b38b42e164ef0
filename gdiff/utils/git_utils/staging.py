"""
Staging, unstaging and reverting through synthesized patches.

Patches go to 'git apply --unidiff-zero -', run from the top of the
repository because patch paths are relative to it. Applications against the
same repository are serialized, since the index is one shared mutable resource.
"""

import os
import threading
from typing import Dict, Optional

from gdiff.models import CharacterSelection, LineSelection
from gdiff.utils.diff_utils import (
    Hunk,
    PatchApplicationError,
    build_hunk_patch,
    build_reverse_patch,
    reverse_diff,
)
from gdiff.utils.logging_utils import logger
from .commands import GitError, get_repo_root, run_git_command

_repo_locks: Dict[str, threading.Lock] = {}
_repo_locks_guard = threading.Lock()


def _repo_lock(root: str) -> threading.Lock:
    key = os.path.realpath(root)
    with _repo_locks_guard:
        return _repo_locks.setdefault(key, threading.Lock())


def apply_patch(patch: str, cached: bool, cwd: Optional[str] = None) -> None:
    """
    Apply patch text to the index (cached) or the working tree.

    Paths in the patch are taken relative to the repository containing cwd,
    whichever subdirectory cwd is.

    Raises:
        GitError: If cwd is not inside a repository
        PatchApplicationError: If git rejects the patch
    """
    args = ['apply']
    if cached:
        args.append('--cached')
    args.extend(['--unidiff-zero', '-'])

    root = get_repo_root(cwd)
    with _repo_lock(root):
        try:
            run_git_command(*args, cwd=root, input_text=patch)
        except GitError as e:
            logger.warning(f"git apply rejected patch: {e.stderr.strip()}")
            raise PatchApplicationError(
                "git apply rejected the patch",
                {'command': e.command, 'stderr': e.stderr, 'patch': patch},
            ) from e
    logger.debug(f"Applied patch in {root} ({'index' if cached else 'working tree'})")


def _apply_if_any(patch: str, cached: bool, cwd: Optional[str], what: str) -> bool:
    if not patch:
        logger.debug(f"Nothing to apply for {what}")
        return False
    apply_patch(patch, cached, cwd)
    return True


def stage_file(path: str, cwd: Optional[str] = None) -> None:
    run_git_command('add', '--', path, cwd=cwd)


def unstage_file(path: str, cwd: Optional[str] = None) -> None:
    run_git_command('reset', 'HEAD', '--', path, cwd=cwd)


def stage_all(cwd: Optional[str] = None) -> None:
    run_git_command('add', '-A', cwd=cwd)


def unstage_all(cwd: Optional[str] = None) -> None:
    run_git_command('reset', 'HEAD', cwd=cwd)


# Patch based operations take the repository relative path, as found in FileDiff.new_path

def stage_hunk(path: str, hunk: Hunk, cwd: Optional[str] = None) -> bool:
    """Stage a hunk of the unstaged diff."""
    return _apply_if_any(build_hunk_patch(path, hunk), True, cwd, f"hunk of {path}")


def unstage_hunk(path: str, hunk: Hunk, cwd: Optional[str] = None) -> bool:
    """Unstage a hunk of the staged diff."""
    return _apply_if_any(reverse_diff(build_hunk_patch(path, hunk)), True, cwd, f"hunk of {path}")


def revert_hunk(path: str, hunk: Hunk, cwd: Optional[str] = None) -> bool:
    """Discard a hunk of the unstaged diff from the working tree."""
    return _apply_if_any(build_reverse_patch(path, hunk), False, cwd, f"hunk of {path}")


def stage_lines(path: str, selection: LineSelection, cwd: Optional[str] = None) -> bool:
    """Stage selected lines of a hunk of the unstaged diff."""
    return _apply_if_any(selection.build_patch(path), True, cwd, f"lines of {path}")


def unstage_lines(path: str, selection: LineSelection, cwd: Optional[str] = None) -> bool:
    """Unstage selected lines of a hunk of the staged diff."""
    return _apply_if_any(selection.build_patch(path, reverse=True), True, cwd, f"lines of {path}")


def stage_characters(path: str, selection: CharacterSelection, cwd: Optional[str] = None) -> bool:
    """Stage a character range of one changed line."""
    return _apply_if_any(selection.build_patch(path), True, cwd, f"characters of {path}")
