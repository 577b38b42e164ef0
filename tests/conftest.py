"""
Pytest configuration and shared fixtures.
"""

import shutil
import subprocess
import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "git: mark test as requiring a git executable"
    )


@pytest.fixture
def simple_diff():
    """One modified file with a single hunk replacing one line by three."""
    return (
        "diff --git a/main.go b/main.go\n"
        "index 83db48f..bf269f4 100644\n"
        "--- a/main.go\n"
        "+++ b/main.go\n"
        "@@ -1,5 +1,6 @@\n"
        " package main\n"
        "-import \"fmt\"\n"
        "+import (\n"
        "+\t\"fmt\"\n"
        "+)\n"
        " func main() {}\n"
    )


@pytest.fixture
def two_file_diff():
    """Two files, the second with two hunks and a section heading."""
    return (
        "diff --git a/a.txt b/a.txt\n"
        "--- a/a.txt\n"
        "+++ b/a.txt\n"
        "@@ -1,2 +1,2 @@\n"
        " first\n"
        "-second\n"
        "+2nd\n"
        "diff --git a/src/b.py b/src/b.py\n"
        "--- a/src/b.py\n"
        "+++ b/src/b.py\n"
        "@@ -3,3 +3,4 @@ def helper():\n"
        "     x = 1\n"
        "-    y = 2\n"
        "+    y = 3\n"
        "+    z = 4\n"
        "     return x\n"
        "@@ -20 +21 @@ class Thing:\n"
        "-    name = 'old'\n"
        "+    name = 'new'\n"
    )


@pytest.fixture
def binary_diff():
    return (
        "diff --git a/x b/x\n"
        "index 1234567..89abcde 100644\n"
        "Binary files a/x and b/x differ\n"
    )


@pytest.fixture
def git_repo(tmp_path):
    """A fresh repository with one committed file, skipped when git is unavailable."""
    if shutil.which('git') is None:
        pytest.skip("git executable not available")

    def git(*args):
        subprocess.run(['git', *args], cwd=tmp_path, check=True, capture_output=True)

    git('init', '-q')
    git('config', 'user.email', 'test@example.com')
    git('config', 'user.name', 'Test')
    git('config', 'core.autocrlf', 'false')
    (tmp_path / 'file.txt').write_text("one\ntwo\nthree\nfour\nfive\n")
    git('add', 'file.txt')
    git('commit', '-q', '-m', 'initial')
    return tmp_path
