"""
Parsing of 'git status --porcelain=v2 -z'.
"""

from typing import List, Optional

from gdiff.utils.diff_utils import FileEntry, FileStatus
from .commands import run_git_command


def get_status(cwd: Optional[str] = None) -> List[FileEntry]:
    """Return the changed, untracked and unmerged files of the repository."""
    return parse_status_v2(run_git_command('status', '--porcelain=v2', '-z', cwd=cwd))


def _ordinary_entry(record: str) -> Optional[FileEntry]:
    # 1 <XY> <sub> <mH> <mI> <mW> <hH> <hI> <path>
    fields = record.split(' ', 8)
    if len(fields) < 9:
        return None
    index_status = FileStatus.from_char(fields[1][0])
    work_status = FileStatus.from_char(fields[1][1])
    status = index_status if index_status != FileStatus.UNMODIFIED else work_status
    return FileEntry(
        path=fields[8],
        status=status,
        staged=index_status != FileStatus.UNMODIFIED,
        index_status=index_status,
        work_status=work_status,
    )


def _renamed_entry(record: str, orig_path: str) -> Optional[FileEntry]:
    # 2 <XY> <sub> <mH> <mI> <mW> <hH> <hI> <X><score> <path>, original path in the next record
    fields = record.split(' ', 9)
    if len(fields) < 10:
        return None
    index_status = FileStatus.from_char(fields[1][0])
    work_status = FileStatus.from_char(fields[1][1])
    status = FileStatus.COPIED if fields[8].startswith('C') else FileStatus.RENAMED
    return FileEntry(
        path=fields[9],
        status=status,
        old_path=orig_path,
        staged=index_status != FileStatus.UNMODIFIED,
        index_status=index_status,
        work_status=work_status,
    )


def _unmerged_entry(record: str) -> Optional[FileEntry]:
    # u <XY> <sub> <m1> <m2> <m3> <mW> <h1> <h2> <h3> <path>
    fields = record.split(' ', 10)
    if len(fields) < 11:
        return None
    return FileEntry(
        path=fields[10],
        status=FileStatus.UNMERGED,
        index_status=FileStatus.UNMERGED,
        work_status=FileStatus.UNMERGED,
    )


def parse_status_v2(output: str) -> List[FileEntry]:
    """
    Parse NUL separated porcelain v2 status records.

    Header lines ('# ...') and malformed records are skipped.
    """
    entries = []
    records = output.split('\0')
    i = 0
    while i < len(records):
        record = records[i]
        i += 1
        entry = None
        if record.startswith('1 '):
            entry = _ordinary_entry(record)
        elif record.startswith('2 '):
            if i < len(records):
                entry = _renamed_entry(record, records[i])
                i += 1
        elif record.startswith('u '):
            entry = _unmerged_entry(record)
        elif record.startswith('? '):
            entry = FileEntry(path=record[2:], status=FileStatus.UNTRACKED,
                              work_status=FileStatus.UNTRACKED)
        elif record.startswith('! '):
            entry = FileEntry(path=record[2:], status=FileStatus.IGNORED,
                              work_status=FileStatus.IGNORED)
        if entry is not None:
            entries.append(entry)
    return entries
