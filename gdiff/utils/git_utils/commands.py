"""
Thin wrapper around the git executable.
"""

import subprocess
from typing import Optional

from gdiff.utils.logging_utils import logger


class GitError(Exception):
    """Exception raised when a git command exits with a non-zero status."""
    def __init__(self, command: str, stderr: str = "", returncode: Optional[int] = None):
        self.command = command
        self.stderr = stderr
        self.returncode = returncode
        detail = stderr.strip() or f"exit status {returncode}"
        super().__init__(f"git {command}: {detail}")


def run_git_command(*args: str, cwd: Optional[str] = None, input_text: Optional[str] = None) -> str:
    """
    Run a git command and return its stdout.

    Args:
        *args: Arguments after 'git'
        cwd: Directory to run in, defaults to the current directory
        input_text: Text piped to the command's stdin

    Returns:
        The command's standard output

    Raises:
        GitError: If git exits with a non-zero status or cannot be started
    """
    command = ' '.join(args)
    logger.debug(f"Running git {command}")
    try:
        result = subprocess.run(
            ['git', *args],
            cwd=cwd,
            input=input_text,
            capture_output=True,
            text=True,
            encoding='utf-8',
            errors='surrogateescape',
        )
    except OSError as e:
        raise GitError(command, str(e)) from e

    if result.returncode != 0:
        logger.debug(f"git {command} failed ({result.returncode}): {result.stderr}")
        raise GitError(command, result.stderr, result.returncode)
    return result.stdout


def is_git_repo(cwd: Optional[str] = None) -> bool:
    """Check whether cwd is inside a git repository."""
    try:
        run_git_command('rev-parse', '--git-dir', cwd=cwd)
        return True
    except GitError:
        return False


def get_repo_root(cwd: Optional[str] = None) -> str:
    """Return the top level directory of the repository."""
    return run_git_command('rev-parse', '--show-toplevel', cwd=cwd).strip()


def get_current_branch(cwd: Optional[str] = None) -> str:
    return run_git_command('rev-parse', '--abbrev-ref', 'HEAD', cwd=cwd).strip()
