"""
Tests for the gdiff command line interface.
"""

import io
from unittest.mock import MagicMock, patch

import pytest
from rich.console import Console

from gdiff.cli import StagingSession, create_parser, main, parse_char_spec, parse_index_spec, resolve_keys
from gdiff.config import AppConfig
from gdiff.models import CharacterSelection, LineSelection
from gdiff.utils.diff_utils import FileEntry, FileStatus, PatchApplicationError, parse
from gdiff.utils.git_utils import GitError


@pytest.fixture(autouse=True)
def repo_queries():
    """Answer the repository checks main() and status make without running git."""
    with patch('gdiff.cli.is_git_repo', return_value=True), \
            patch('gdiff.cli.get_current_branch', return_value='main'), \
            patch('gdiff.cli.get_diff_stats', return_value={}) as mock_stats:
        yield mock_stats


def test_parse_index_spec():
    assert parse_index_spec("1,3-5") == {1, 3, 4, 5}
    assert parse_index_spec(" 2 , 4 ") == {2, 4}
    assert parse_index_spec("") == set()


@pytest.mark.parametrize("spec", ["x", "5-3", "1-", "1,a-2"])
def test_parse_index_spec_invalid(spec):
    with pytest.raises(ValueError):
        parse_index_spec(spec)


def test_parse_char_spec():
    assert parse_char_spec("3 4-9") == (3, 4, 9)
    assert parse_char_spec("  2   0-1 ") == (2, 0, 1)


@pytest.mark.parametrize("spec", ["3", "3 4", "3 a-9", "x 1-2", "1 2-3 4"])
def test_parse_char_spec_invalid(spec):
    with pytest.raises(ValueError):
        parse_char_spec(spec)


def test_resolve_keys_applies_overrides():
    keys = resolve_keys({'stage_hunk': 's', 'no_such_action': 'z'})
    assert keys['s'] == 'stage_hunk'
    assert 'y' not in keys
    assert 'z' not in keys
    assert keys['n'] == 'skip_hunk'


def test_parser():
    parser = create_parser()
    args = parser.parse_args(['show', '--staged', 'a.py', 'b.py'])
    assert args.command == 'show'
    assert args.staged
    assert args.paths == ['a.py', 'b.py']

    args = parser.parse_args(['--config', 'my.json', 'stage', 'f.py'])
    assert args.config == 'my.json'
    assert args.path == 'f.py'
    assert not args.staged
    assert not args.all

    args = parser.parse_args(['stage', '--all'])
    assert args.all
    assert args.path is None


def test_main_without_command_prints_help(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main([])
    assert excinfo.value.code == 0
    assert 'usage' in capsys.readouterr().out.lower()


@patch('gdiff.cli.load_config', return_value=AppConfig())
@patch('gdiff.cli.get_status')
def test_status_command(mock_status, _mock_config, repo_queries, capsys):
    mock_status.return_value = [FileEntry('a.py', FileStatus.MODIFIED, work_status=FileStatus.MODIFIED)]
    repo_queries.side_effect = [{'a.py': (3, 1)}, {'a.py': (1, 0)}]
    with pytest.raises(SystemExit) as excinfo:
        main(['status'])
    assert excinfo.value.code == 0
    mock_status.assert_called_once_with()

    out = capsys.readouterr().out
    assert 'On branch main' in out
    assert 'a.py +4 -1' in out


@patch('gdiff.cli.load_config', return_value=AppConfig())
@patch('gdiff.cli.get_status')
def test_status_prints_names_verbatim(mock_status, _mock_config, capsys):
    """File names that look like console markup are printed as they are."""
    mock_status.return_value = [
        FileEntry('weird[/]name.txt', FileStatus.MODIFIED, work_status=FileStatus.MODIFIED),
        FileEntry('[bold]x[/bold].txt', FileStatus.ADDED, index_status=FileStatus.ADDED),
    ]
    with pytest.raises(SystemExit) as excinfo:
        main(['status'])
    assert excinfo.value.code == 0
    out = capsys.readouterr().out
    assert 'weird[/]name.txt' in out
    assert '[bold]x[/bold].txt' in out


@patch('gdiff.cli.load_config', return_value=AppConfig())
@patch('gdiff.cli.get_status', return_value=[])
def test_status_without_commits(_mock_status, _mock_config, capsys):
    with patch('gdiff.cli.get_current_branch', side_effect=GitError('rev-parse', 'fatal: bad HEAD')):
        with pytest.raises(SystemExit) as excinfo:
            main(['status'])
    assert excinfo.value.code == 0
    assert 'On branch' not in capsys.readouterr().out


@patch('gdiff.cli.set_log_level')
@patch('gdiff.cli.load_config', return_value=AppConfig())
@patch('gdiff.cli.get_status', return_value=[])
def test_verbose_enables_debug_logging(_mock_status, _mock_config, mock_set_level):
    with pytest.raises(SystemExit):
        main(['--verbose', 'status'])
    mock_set_level.assert_called_once_with('DEBUG')


@patch('gdiff.cli.load_config', return_value=AppConfig())
@patch('gdiff.cli.get_status', side_effect=GitError('status', 'fatal: not a git repository'))
def test_git_errors_exit_with_status_one(_mock_status, _mock_config, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(['status'])
    assert excinfo.value.code == 1
    assert 'not a git repository' in capsys.readouterr().err


@patch('gdiff.cli.load_config', return_value=AppConfig())
@patch('gdiff.cli.get_status')
def test_outside_repository(mock_status, _mock_config, capsys):
    with patch('gdiff.cli.is_git_repo', return_value=False):
        with pytest.raises(SystemExit) as excinfo:
            main(['status'])
    assert excinfo.value.code == 1
    assert 'not a git repository' in capsys.readouterr().err
    mock_status.assert_not_called()


class TestShowCommand:

    DIFF = (
        "diff --git a/f.txt b/f.txt\n"
        "--- a/f.txt\n"
        "+++ b/f.txt\n"
        "@@ -1,2 +1,2 @@\n"
        " a\n"
        "-b\n"
        "+B\n"
    )

    @patch('gdiff.cli.get_all_diffs')
    def test_uses_configured_context(self, mock_diffs, capsys):
        mock_diffs.return_value = parse(self.DIFF)
        with patch('gdiff.cli.load_config', return_value=AppConfig(max_context_lines=7)):
            with pytest.raises(SystemExit) as excinfo:
                main(['show'])
        assert excinfo.value.code == 0
        mock_diffs.assert_called_once_with(False, context_lines=7)
        out = capsys.readouterr().out
        assert 'f.txt' in out
        assert 'Warning' not in out

    @patch('gdiff.cli.get_file_diff')
    def test_warns_about_large_diffs(self, mock_diff, capsys):
        mock_diff.return_value = parse(self.DIFF)
        with patch('gdiff.cli.load_config', return_value=AppConfig(large_diff_threshold=2)):
            with pytest.raises(SystemExit):
                main(['show', '--staged', 'f.txt'])
        mock_diff.assert_called_once_with('f.txt', True, context_lines=3)
        assert 'Warning: this diff has 4 lines' in capsys.readouterr().out


class TestStageCommand:

    @patch('gdiff.cli.load_config', return_value=AppConfig())
    @patch('gdiff.cli.stage_all')
    def test_stage_all(self, mock_stage_all, _mock_config):
        with pytest.raises(SystemExit) as excinfo:
            main(['stage', '--all'])
        assert excinfo.value.code == 0
        mock_stage_all.assert_called_once_with()

    @patch('gdiff.cli.load_config', return_value=AppConfig())
    @patch('gdiff.cli.unstage_all')
    def test_unstage_all(self, mock_unstage_all, _mock_config):
        with pytest.raises(SystemExit):
            main(['stage', '--staged', '--all'])
        mock_unstage_all.assert_called_once_with()

    @patch('gdiff.cli.load_config', return_value=AppConfig())
    def test_path_or_all_required(self, _mock_config, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main(['stage'])
        assert excinfo.value.code == 2
        assert '--all' in capsys.readouterr().err


@patch('gdiff.cli.load_config', return_value=AppConfig(max_context_lines=5))
def test_config_command_writes_file(_mock_config, tmp_path):
    target = tmp_path / 'out' / 'gdiff.json'
    with patch('gdiff.cli.is_git_repo', return_value=False):
        with pytest.raises(SystemExit) as excinfo:
            main(['config', '--write', str(target)])
    assert excinfo.value.code == 0
    assert '"max_context_lines": 5' in target.read_text()


@patch('gdiff.cli.load_config', return_value=AppConfig())
def test_config_command_prints_json(_mock_config, capsys):
    with pytest.raises(SystemExit):
        main(['config'])
    assert '"large_diff_threshold": 5000' in capsys.readouterr().out


class TestStagingSession:
    """Tests for the interactive staging loop with git and the prompt mocked out."""

    DIFF = (
        "diff --git a/f.txt b/f.txt\n"
        "--- a/f.txt\n"
        "+++ b/f.txt\n"
        "@@ -1,2 +1,2 @@\n"
        " a\n"
        "-b\n"
        "+B\n"
    )

    def _session(self, answers, staged=False, diff=None, config=None):
        prompt = MagicMock()
        prompt.prompt.side_effect = answers
        console = Console(file=io.StringIO(), color_system=None)
        with patch('gdiff.cli.DiffLoader') as loader_cls:
            loader_cls.return_value.load.return_value = parse(diff or self.DIFF)
            session = StagingSession('f.txt', staged=staged, config=config, console=console, session=prompt)
        return session

    @patch('gdiff.cli.stage_hunk')
    def test_stage_hunk_then_quit(self, mock_stage):
        session = self._session(['y', 'q'])
        assert session.run() == 0
        hunk = parse(self.DIFF)[0].hunks[0]
        mock_stage.assert_called_once_with('f.txt', hunk)

    def test_loader_uses_configured_context(self):
        with patch('gdiff.cli.DiffLoader') as loader_cls:
            StagingSession('f.txt', config=AppConfig(max_context_lines=0), session=MagicMock())
        loader_cls.assert_called_once_with(context_lines=0)

    @patch('gdiff.cli.stage_hunk')
    def test_patches_use_repository_relative_path(self, mock_stage):
        """A path typed inside a subdirectory is staged under the path git reports."""
        diff = self.DIFF.replace('f.txt', 'sub/f.txt')
        session = self._session(['y', 'q'], diff=diff)
        assert session.run() == 0
        assert mock_stage.call_args[0][0] == 'sub/f.txt'
        session.loader.load.assert_called_with('f.txt', False)

    @patch('gdiff.cli.unstage_hunk')
    def test_staged_mode_unstages(self, mock_unstage):
        session = self._session(['y', 'q'], staged=True)
        assert session.run() == 0
        mock_unstage.assert_called_once()
        assert 'r' not in session.actions
        assert 'c' not in session.actions

    @patch('gdiff.cli.stage_lines', return_value=True)
    def test_pick_lines(self, mock_stage_lines):
        session = self._session(['l', '2', 'q'])
        assert session.run() == 0
        path, selection = mock_stage_lines.call_args[0]
        assert path == 'f.txt'
        assert isinstance(selection, LineSelection)
        assert selection.selected_line_indices == [2]

    @patch('gdiff.cli.stage_characters', return_value=True)
    def test_pick_characters(self, mock_stage_characters):
        diff = self.DIFF.replace('+B\n', '+Bravo\n')
        session = self._session(['c', '3 1-3', 'q'], diff=diff)
        assert session.run() == 0
        path, selection = mock_stage_characters.call_args[0]
        assert path == 'f.txt'
        assert selection == CharacterSelection(hunk=parse(diff)[0].hunks[0], line_index=3,
                                               char_start=1, char_end=3)
        assert "+Bra\n" in selection.build_patch(path)

    @patch('gdiff.cli.stage_characters')
    def test_invalid_character_selection(self, mock_stage_characters):
        session = self._session(['c', '3', 'q'])
        assert session.run() == 0
        mock_stage_characters.assert_not_called()
        output = session.console.file.getvalue()
        assert 'Invalid selection' in output
        assert 'Nothing applied' in output

    @patch('gdiff.cli.stage_file')
    def test_stage_whole_file_ends_session(self, mock_stage_file):
        session = self._session(['f'])
        assert session.run() == 0
        mock_stage_file.assert_called_once_with('f.txt')

    @patch('gdiff.cli.unstage_file')
    def test_unstage_whole_file(self, mock_unstage_file):
        session = self._session(['f'], staged=True)
        assert session.run() == 0
        mock_unstage_file.assert_called_once_with('f.txt')

    @patch('gdiff.cli.stage_hunk')
    def test_configured_keybindings(self, mock_stage):
        config = AppConfig(keybindings={'stage_hunk': 's', 'quit': 'x'})
        session = self._session(['y', 's', 'x'], config=config)
        assert session.run() == 0
        mock_stage.assert_called_once()
        # 'y' is no longer bound, so it printed the help
        assert 's - stage this hunk' in session.console.file.getvalue()

    def test_skipping_past_last_hunk_ends_session(self):
        session = self._session(['n'])
        assert session.run() == 0
        assert 'No more hunks' in session.console.file.getvalue()

    @patch('gdiff.cli.stage_hunk', side_effect=PatchApplicationError('git apply rejected the patch',
                                                                       {'stderr': 'error: corrupt patch'}))
    def test_rejected_patch_is_reported(self, _mock_stage):
        session = self._session(['y', 'q'])
        assert session.run() == 0
        assert 'corrupt patch' in session.console.file.getvalue()
