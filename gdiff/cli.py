"""
gdiff CLI - Terminal git diff viewer with partial staging.

Usage:
    gdiff show [--staged] [PATHS...]   Show diffs with intra-line highlights
    gdiff status                       List changed files
    gdiff stage [--staged] PATH        Interactively stage (or unstage) hunks, lines and characters
    gdiff stage [--staged] --all       Stage (or unstage) every change
    gdiff config [--write PATH]        Print the effective configuration, or save it

Examples:
    gdiff show                         Show every unstaged change
    gdiff show --staged src/main.py    Show what is staged for one file
    gdiff stage src/main.py            Walk the hunks of a file and stage them
    gdiff stage --staged src/main.py   Walk the staged hunks and unstage them
"""

import argparse
import sys
from typing import Dict, List, Optional, Set, Tuple

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.formatted_text import FormattedText
from rich.console import Console
from rich.text import Text

from gdiff.config import AppConfig, ConfigError, load_config, save_config
from gdiff.models import CharacterSelection, LineSelection
from gdiff.utils.diff_utils import FileDiff, Hunk, PatchApplicationError
from gdiff.utils.git_utils import (
    DiffLoader,
    GitError,
    get_all_diffs,
    get_current_branch,
    get_diff_stats,
    get_file_diff,
    get_status,
    is_git_repo,
    revert_hunk,
    stage_all,
    stage_characters,
    stage_file,
    stage_hunk,
    stage_lines,
    unstage_all,
    unstage_file,
    unstage_hunk,
    unstage_lines,
)
from gdiff.utils.logging_utils import logger, set_log_level
from gdiff.utils.terminal_diff import DiffRenderer

# Action name -> default key; AppConfig.keybindings overrides keys by action name
DEFAULT_KEYS = {
    'stage_hunk': 'y',
    'skip_hunk': 'n',
    'stage_lines': 'l',
    'stage_characters': 'c',
    'stage_file': 'f',
    'revert_hunk': 'r',
    'quit': 'q',
    'help': '?',
}

ACTION_HELP = {
    'stage_hunk': 'stage this hunk',
    'skip_hunk': 'skip this hunk',
    'stage_lines': 'pick lines of this hunk',
    'stage_characters': 'stage a character range of one line',
    'stage_file': 'stage the whole file and stop',
    'revert_hunk': 'revert this hunk in the working tree',
    'quit': 'quit',
    'help': 'help',
}

# Not offered when walking the staged diff
UNSTAGED_ONLY = ('stage_characters', 'revert_hunk')


def parse_index_spec(spec: str) -> Set[int]:
    """
    Parse a line selection such as '1,3-5'.

    Raises:
        ValueError: If a part is not a number or an ascending range
    """
    indices = set()
    for part in spec.replace(' ', '').split(','):
        if not part:
            continue
        if '-' in part:
            first, _, last = part.partition('-')
            start, end = int(first), int(last)
            if start > end:
                raise ValueError(f"Descending range: {part}")
            indices.update(range(start, end + 1))
        else:
            indices.add(int(part))
    return indices


def parse_char_spec(spec: str) -> Tuple[int, int, int]:
    """
    Parse '<line index> <start>-<end>', e.g. '3 4-9' for characters [4, 9) of line 3.

    Raises:
        ValueError: If the text does not have that shape
    """
    parts = spec.split()
    if len(parts) != 2:
        raise ValueError(f"Expected '<line> <start>-<end>', got {spec!r}")
    first, sep, last = parts[1].partition('-')
    if not sep:
        raise ValueError(f"Missing character range in {spec!r}")
    return int(parts[0]), int(first), int(last)


def resolve_keys(keybindings: Dict[str, str]) -> Dict[str, str]:
    """Map each key to its action, applying configured overrides."""
    by_action = dict(DEFAULT_KEYS)
    for action, key in keybindings.items():
        if action not in by_action:
            logger.warning(f"Ignoring keybinding for unknown action {action!r}")
            continue
        by_action[action] = key
    return {key: action for action, key in by_action.items()}


class StagingSession:
    """Interactive hunk by hunk staging of one file."""

    def __init__(self, path: str, staged: bool = False, config: Optional[AppConfig] = None,
                 console: Optional[Console] = None, session: Optional[PromptSession] = None):
        self.path = path
        self.staged = staged
        self.config = config or AppConfig()
        self.console = console or Console()
        self.renderer = DiffRenderer(self.console, self.config.theme, show_indices=True)
        self.loader = DiffLoader(context_lines=self.config.max_context_lines)
        self.keys = {key: action for key, action in resolve_keys(self.config.keybindings).items()
                     if not (staged and action in UNSTAGED_ONLY)}
        self.session = session or PromptSession(
            completer=WordCompleter(list(self.keys)),
        )
        # Patch paths are relative to the repository root, unlike self.path
        self.repo_path = path

    @property
    def actions(self) -> List[str]:
        return list(self.keys)

    def _load(self) -> Optional[FileDiff]:
        diffs = self.loader.load(self.path, self.staged)
        if not diffs:
            return None
        self.repo_path = diffs[0].new_path
        return diffs[0]

    def _prompt(self, message: str) -> str:
        styled = FormattedText([('ansiblue bold', message)])
        return self.session.prompt(styled).strip()

    def _print_help(self) -> None:
        verb = 'unstage' if self.staged else 'stage'
        for key, action in self.keys.items():
            self.console.print(f"  {key} - {ACTION_HELP[action].replace('stage', verb, 1)}", markup=False)

    def _pick_lines(self, hunk: Hunk) -> bool:
        answer = self._prompt("Line indices (e.g. 1,3-5): ")
        try:
            selection = LineSelection(hunk=hunk, selected_line_indices=sorted(parse_index_spec(answer)))
        except ValueError as e:
            self.console.print(f"Invalid selection: {e}", style='red', markup=False)
            return False
        if self.staged:
            return unstage_lines(self.repo_path, selection)
        return stage_lines(self.repo_path, selection)

    def _pick_characters(self, hunk: Hunk) -> bool:
        answer = self._prompt("Line index and character range (e.g. 3 4-9): ")
        try:
            line_index, char_start, char_end = parse_char_spec(answer)
            selection = CharacterSelection(hunk=hunk, line_index=line_index,
                                           char_start=char_start, char_end=char_end)
        except ValueError as e:  # pydantic's ValidationError included
            self.console.print(f"Invalid selection: {e}", style='red', markup=False)
            return False
        return stage_characters(self.repo_path, selection)

    def _stage_whole_file(self) -> None:
        # Plain pathspecs, so the path as typed (relative to the current directory)
        if self.staged:
            unstage_file(self.path)
        else:
            stage_file(self.path)

    def run(self) -> int:
        """Walk the hunks of the file. Returns a process exit code."""
        hunk_index = 0
        while True:
            file_diff = self._load()
            if file_diff is None or file_diff.is_binary or hunk_index >= len(file_diff.hunks):
                self.console.print("No more hunks.")
                return 0

            hunk = file_diff.hunks[hunk_index]
            self.renderer.print_hunk(hunk)
            verb = 'Unstage' if self.staged else 'Stage'
            answer = self._prompt(f"{verb} this hunk [{','.join(self.actions)}]? ")
            action = self.keys.get(answer)

            try:
                if action == 'quit':
                    return 0
                if action == 'skip_hunk':
                    hunk_index += 1
                elif action == 'stage_hunk':
                    if self.staged:
                        unstage_hunk(self.repo_path, hunk)
                    else:
                        stage_hunk(self.repo_path, hunk)
                elif action == 'stage_lines':
                    if not self._pick_lines(hunk):
                        self.console.print("Nothing applied.")
                elif action == 'stage_characters':
                    if not self._pick_characters(hunk):
                        self.console.print("Nothing applied.")
                elif action == 'stage_file':
                    self._stage_whole_file()
                    return 0
                elif action == 'revert_hunk':
                    revert_hunk(self.repo_path, hunk)
                else:
                    self._print_help()
            except PatchApplicationError as e:
                self.console.print(f"{e}: {e.details.get('stderr', '').strip()}", style='red', markup=False)


def cmd_show(args, config: AppConfig) -> int:
    renderer = DiffRenderer(theme=config.theme)
    context = config.max_context_lines
    if args.paths:
        diffs = [d for path in args.paths for d in get_file_diff(path, args.staged, context_lines=context)]
    else:
        diffs = get_all_diffs(args.staged, context_lines=context)
    if not diffs:
        renderer.console.print("No changes.")
        return 0

    total_lines = sum(len(hunk.lines) for file_diff in diffs for hunk in file_diff.hunks)
    if total_lines > config.large_diff_threshold:
        logger.warning(f"Large diff: {total_lines} lines over {len(diffs)} files")
        renderer.console.print(
            f"Warning: this diff has {total_lines} lines "
            f"(threshold {config.large_diff_threshold}); highlighting may be slow.",
            style='yellow',
        )

    for file_diff in diffs:
        renderer.print_file(file_diff)
    return 0


def cmd_status(args, config: AppConfig) -> int:
    console = Console()
    try:
        console.print(f"On branch {get_current_branch()}", highlight=False, markup=False)
    except GitError as e:
        # No commits yet
        logger.debug(f"No branch to show: {e}")

    stats = get_diff_stats()
    staged_stats = get_diff_stats(staged=True)
    for entry in get_status():
        name = f"{entry.old_path} -> {entry.path}" if entry.old_path else entry.path
        style = config.theme.added if entry.staged else config.theme.removed

        row = Text()
        row.append(f"{entry.index_status}{entry.work_status}", style=style)
        row.append(f" {name}")
        work_added, work_removed = stats.get(entry.path, (0, 0))
        index_added, index_removed = staged_stats.get(entry.path, (0, 0))
        added, removed = work_added + index_added, work_removed + index_removed
        if added or removed:
            row.append(f" +{added}", style=config.theme.added)
            row.append(f" -{removed}", style=config.theme.removed)
        console.print(row, highlight=False)
    return 0


def cmd_stage(args, config: AppConfig) -> int:
    if args.all:
        if args.staged:
            unstage_all()
        else:
            stage_all()
        print("Unstaged all changes." if args.staged else "Staged all changes.")
        return 0
    if not args.path:
        print("Error: stage needs a PATH or --all", file=sys.stderr)
        return 2
    return StagingSession(args.path, staged=args.staged, config=config).run()


def cmd_config(args, config: AppConfig) -> int:
    if args.write:
        save_config(config, args.write)
        print(f"Configuration written to {args.write}")
        return 0
    Console().print_json(config.model_dump_json())
    return 0


def create_parser():
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog='gdiff',
        description='Terminal git diff viewer with hunk, line and character staging',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  gdiff show                       Show unstaged changes
  gdiff show --staged              Show staged changes
  gdiff stage src/main.py          Interactively stage hunks of a file
  gdiff stage --all                Stage every change
"""
    )
    parser.add_argument('--config', help='Path of a JSON configuration file')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    show_parser = subparsers.add_parser('show', help='Show highlighted diffs')
    show_parser.add_argument('paths', nargs='*', help='Files to show (default: all)')
    show_parser.add_argument('--staged', '-s', action='store_true', help='Show staged changes')
    show_parser.set_defaults(func=cmd_show)

    status_parser = subparsers.add_parser('status', help='List changed files')
    status_parser.set_defaults(func=cmd_status)

    stage_parser = subparsers.add_parser('stage', help='Interactively stage hunks, lines and characters')
    stage_parser.add_argument('path', nargs='?', help='File to stage')
    stage_parser.add_argument('--staged', '-s', action='store_true',
                              help='Walk staged hunks and unstage them instead')
    stage_parser.add_argument('--all', '-a', action='store_true',
                              help='Stage (or with --staged, unstage) every change at once')
    stage_parser.set_defaults(func=cmd_stage)

    config_parser = subparsers.add_parser('config', help='Print the effective configuration')
    config_parser.add_argument('--write', metavar='PATH', help='Save the configuration to PATH instead')
    config_parser.set_defaults(func=cmd_config, needs_repo=False)

    return parser


def main(argv: Optional[List[str]] = None):
    """CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.verbose:
        set_log_level('DEBUG')

    try:
        config = load_config([args.config] if args.config else None)
        if getattr(args, 'needs_repo', True) and not is_git_repo():
            print("Error: not a git repository", file=sys.stderr)
            sys.exit(1)
        sys.exit(args.func(args, config))
    except KeyboardInterrupt:
        print()
        sys.exit(0)
    except (ConfigError, GitError) as e:
        logger.debug(f"Command failed: {e!r}")
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
