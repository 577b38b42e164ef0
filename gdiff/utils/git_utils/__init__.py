"""
git_utils package - Running git and feeding it synthesized patches.
"""

from .commands import GitError, run_git_command, is_git_repo, get_repo_root, get_current_branch
from .diff import DiffLoader, get_file_diff, get_all_diffs, get_diff_stats, parse_numstat
from .status import get_status, parse_status_v2
from .staging import (
    apply_patch,
    stage_file, unstage_file, stage_all, unstage_all,
    stage_hunk, unstage_hunk, revert_hunk,
    stage_lines, unstage_lines, stage_characters,
)
