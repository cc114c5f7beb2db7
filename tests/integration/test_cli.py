"""Integration tests for the litstage command line."""

import pytest
from click.testing import CliRunner
from litstage.cli.main import cli
from tests.conftest import make_commit, write_files

EDITED = b"ONE\ntwo\nthree\nfour\nfive\nsix\nseven\neight\nnine\nTEN\n"


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def cli_repo(repo_with_head, monkeypatch):
    monkeypatch.chdir(repo_with_head.work_tree)
    return repo_with_head


class TestInit:

    def test_init(self, runner, temp_dir, monkeypatch):
        monkeypatch.chdir(temp_dir)
        result = runner.invoke(cli, ['init'])
        assert result.exit_code == 0
        assert 'Initialized empty repository' in result.output
        assert (temp_dir / '.lit' / 'HEAD').exists()

    def test_init_twice_fails(self, runner, temp_dir, monkeypatch):
        monkeypatch.chdir(temp_dir)
        runner.invoke(cli, ['init'])
        result = runner.invoke(cli, ['init'])
        assert result.exit_code == 1

    def test_outside_repository(self, runner, temp_dir, monkeypatch):
        monkeypatch.chdir(temp_dir)
        result = runner.invoke(cli, ['status'])
        assert result.exit_code == 1
        assert 'Not a lit repository' in result.output


class TestStatus:

    def test_clean(self, runner, cli_repo):
        result = runner.invoke(cli, ['status'])
        assert result.exit_code == 0
        assert 'On branch main' in result.output
        assert 'working tree clean' in result.output

    def test_short(self, runner, cli_repo):
        write_files(cli_repo, {'README': b"changed\n", 'new.txt': b"x\n", 'a.txt': None})
        cli_repo.staging.stage_file('a.txt')

        result = runner.invoke(cli, ['status', '--short'])
        assert result.exit_code == 0
        assert result.output.splitlines() == [' M README', 'D  a.txt', '?? new.txt']

    def test_long(self, runner, cli_repo):
        write_files(cli_repo, {'README': b"changed\n", 'new.txt': b"x\n"})
        result = runner.invoke(cli, ['status'])
        assert 'Changes not staged for commit' in result.output
        assert 'Untracked files' in result.output
        assert 'new.txt' in result.output


class TestDiff:

    def test_no_changes(self, runner, cli_repo):
        result = runner.invoke(cli, ['diff'])
        assert result.exit_code == 0
        assert 'No changes' in result.output

    def test_unstaged(self, runner, cli_repo):
        write_files(cli_repo, {'README': b"hello\nworld\n"})
        result = runner.invoke(cli, ['diff', '--no-color'])
        assert result.exit_code == 0
        assert '@@ -1,1 +1,2 @@' in result.output
        assert '+world' in result.output

    def test_staged_single_path(self, runner, cli_repo):
        write_files(cli_repo, {'README': b"staged\n", 'a.txt': b"unrelated\n"})
        cli_repo.staging.stage_file('README')
        cli_repo.staging.stage_file('a.txt')

        result = runner.invoke(cli, ['diff', '--staged', '--no-color', 'README'])
        assert result.exit_code == 0
        assert '+staged' in result.output
        assert 'a.txt' not in result.output

    def test_commit(self, runner, cli_repo):
        make_commit(cli_repo, {'README': b"hello\nagain\n"})
        result = runner.invoke(cli, ['diff', '--commit', 'HEAD', '--no-color'])
        assert result.exit_code == 0
        assert '+again' in result.output

    def test_commit_binary_path(self, runner, cli_repo):
        make_commit(cli_repo, {'image.bin': b"\x00\x01 new"})
        result = runner.invoke(cli, ['diff', '--commit', 'HEAD', '--no-color', 'image.bin'])
        assert result.exit_code == 0
        assert 'Binary files differ' in result.output

    def test_bad_reference(self, runner, cli_repo):
        result = runner.invoke(cli, ['diff', '--commit', 'nope'])
        assert result.exit_code == 1
        assert 'Not a valid reference' in result.output


class TestStaging:

    def test_stage_and_unstage(self, runner, cli_repo):
        write_files(cli_repo, {'README': b"changed\n"})

        result = runner.invoke(cli, ['stage', 'README'])
        assert result.exit_code == 0
        assert cli_repo.contents_of_staged_file('README') == b"changed\n"

        result = runner.invoke(cli, ['unstage', 'README'])
        assert result.exit_code == 0
        assert cli_repo.contents_of_staged_file('README') == b"hello\n"

    def test_stage_all(self, runner, cli_repo):
        write_files(cli_repo, {'README': b"changed\n", 'new.txt': b"x\n"})
        result = runner.invoke(cli, ['stage', '--all'])
        assert result.exit_code == 0
        assert 'Staged README' in result.output
        assert 'Staged new.txt' in result.output

    def test_stage_nothing(self, runner, cli_repo):
        result = runner.invoke(cli, ['stage'])
        assert result.exit_code == 1


class TestHunk:

    def test_stage_one_hunk(self, runner, cli_repo):
        write_files(cli_repo, {'a.txt': EDITED})

        result = runner.invoke(cli, ['hunk', 'a.txt', '2'])
        assert result.exit_code == 0
        assert 'Staged hunk @@ -7,4 +7,4 @@' in result.output
        staged = cli_repo.contents_of_staged_file('a.txt')
        assert staged.startswith(b"one\n")
        assert staged.endswith(b"TEN\n")

    def test_unstage_hunk(self, runner, cli_repo):
        write_files(cli_repo, {'a.txt': EDITED})
        cli_repo.staging.stage_file('a.txt')

        result = runner.invoke(cli, ['hunk', 'a.txt', '1', '--unstage'])
        assert result.exit_code == 0
        assert cli_repo.contents_of_staged_file('a.txt').startswith(b"one\n")

    def test_hunk_out_of_range(self, runner, cli_repo):
        write_files(cli_repo, {'a.txt': EDITED})
        result = runner.invoke(cli, ['hunk', 'a.txt', '3'])
        assert result.exit_code == 1
        assert 'has 2 hunk(s)' in result.output

    def test_binary_file(self, runner, cli_repo):
        write_files(cli_repo, {'image.bin': b"\x00\x00"})
        result = runner.invoke(cli, ['hunk', 'image.bin', '1'])
        assert result.exit_code == 1
        assert 'binary' in result.output

    def test_non_utf8_text_file(self, runner, cli_repo):
        write_files(cli_repo, {'README': b"h\xe9llo\n"})
        result = runner.invoke(cli, ['hunk', 'README', '1'])
        assert result.exit_code == 1
        assert 'binary' in result.output
        assert cli_repo.contents_of_staged_file('README') == b"hello\n"


class TestBlame:

    def test_blame(self, runner, cli_repo):
        head = cli_repo.refs.resolve_head()
        make_commit(cli_repo, {'README': b"hello\nsecond line\n"})

        result = runner.invoke(cli, ['blame', 'README'])
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert len(lines) == 2
        assert lines[0].startswith(head[:8])
        assert 'Test User' in lines[0]
        assert lines[1].endswith('second line')

    def test_blame_workspace(self, runner, cli_repo):
        write_files(cli_repo, {'README': b"hello\nuncommitted\n"})
        result = runner.invoke(cli, ['blame', '--workspace', 'README'])
        assert result.exit_code == 0
        assert 'Not Committed Yet' in result.output.splitlines()[1]

    def test_blame_missing(self, runner, cli_repo):
        result = runner.invoke(cli, ['blame', 'missing.txt'])
        assert result.exit_code == 1


def test_help_shows_banner(runner):
    result = runner.invoke(cli, ['--help'])
    assert result.exit_code == 0
    assert 'l i t s t a g e' in result.output
    assert 'hunk' in result.output
