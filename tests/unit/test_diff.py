"""Unit tests for the diff engine."""

import pytest
from litstage.core.errors import ObjectNotFoundError
from litstage.operations.diff import (DiffEngine, DiffCache, Diff, DiffDelta, PatchResult,
                                      PatchSource, make_delta)
from litstage.operations.classify import FileContext
from litstage.operations.status import DeltaStatus
from tests.conftest import make_commit, write_files


def test_make_delta_new_file():
    delta = make_delta("test.txt", None, b"hello\n")
    assert delta.is_new is True
    assert delta.old_path is None
    assert delta.new_path == "test.txt"
    assert delta.hunks[0].lines == ["+hello"]


def test_make_delta_deleted_file():
    delta = make_delta("test.txt", b"hello\n", None)
    assert delta.is_deleted is True
    assert delta.new_path is None
    assert delta.path == "test.txt"


def test_make_delta_modified_file():
    delta = make_delta("test.txt", b"hello\n", b"hello world\n")
    assert delta.is_modified is True
    assert len(delta.hunks) == 1


def test_make_delta_unmodified():
    delta = make_delta("test.txt", b"same\n", b"same\n")
    assert delta.status is DeltaStatus.UNMODIFIED
    assert delta.hunks == ()


def test_make_delta_binary_has_no_hunks():
    delta = make_delta("img", b"\x00\x01", b"\x00\x02")
    assert delta.binary is True
    assert delta.hunks == ()


def test_make_delta_non_utf8_has_no_hunks():
    delta = make_delta("notes.txt", b"cafe\nline\n", b"caf\xe9\nline\n")
    assert delta.is_modified is True
    assert delta.binary is True
    assert delta.hunks == ()


def test_make_delta_sniff_size():
    old, new = b"x" * 64 + b"\x00one\n", b"x" * 64 + b"\x00two\n"
    assert make_delta("late_nul", old, new).binary is True

    delta = make_delta("late_nul", old, new, sniff_size=32)
    assert delta.binary is False
    assert len(delta.hunks) == 1


def test_patch_source_content():
    assert PatchSource.empty().content() is None
    assert PatchSource.from_data(b"x").content() == b"x"
    assert PatchSource.from_data(None).content() is None
    assert PatchSource.from_blob(None).content() is None


class TestDiffCache:

    def test_key_uses_empty_string_for_default_parent(self):
        assert DiffCache.key("abc") == ("abc", "")
        assert DiffCache.key("abc", None) == DiffCache.key("abc")
        assert DiffCache.key("abc", "def") == ("abc", "def")

    def test_insert_keeps_first_value(self):
        cache = DiffCache()
        first = Diff("c1", None, [])
        second = Diff("c1", None, [])
        key = cache.key("c1")
        assert cache.insert(key, first) is first
        assert cache.insert(key, second) is first
        assert len(cache) == 1

    def test_invalidate(self):
        cache = DiffCache()
        cache.insert(cache.key("c1"), Diff("c1", None, []))
        cache.invalidate()
        assert len(cache) == 0
        assert cache.get(cache.key("c1")) is None


class TestCommitDiff:

    def test_first_parent_diff(self, repo_with_commits):
        first, second, _ = repo_with_commits.history
        diff = repo_with_commits.diff.diff(second)

        assert diff.commit_sha == second
        assert diff.parent_sha == first
        assert diff.paths == ['file.txt', 'new.txt']
        assert diff.delta_for_new_path('file.txt').hunks[0].lines == [" a", "-b", "+B", " c"]
        assert diff.delta_for_new_path('new.txt').is_new

    def test_root_commit_is_all_added(self, repo_with_commits):
        first = repo_with_commits.history[0]
        diff = repo_with_commits.diff.diff(first)

        assert diff.parent_sha is None
        assert [d.status for d in diff] == [DeltaStatus.ADDED]

    def test_deleted_file_found_by_old_path(self, repo_with_commits):
        third = repo_with_commits.history[2]
        diff = repo_with_commits.diff.diff(third)

        assert diff.delta_for_new_path('new.txt') is None
        assert diff.delta_for_path('new.txt').is_deleted

    def test_explicit_parent(self, repo_with_commits):
        _, second, third = repo_with_commits.history
        diff = repo_with_commits.diff.diff(third, second)
        assert diff.parent_sha == second
        assert diff == repo_with_commits.diff.diff(third)

    def test_non_parent_diffs_against_nothing(self, repo_with_commits):
        first, _, third = repo_with_commits.history
        diff = repo_with_commits.diff.diff(third, first)

        assert diff.parent_sha is None
        assert [(d.path, d.status) for d in diff] == [('file.txt', DeltaStatus.ADDED)]

    def test_unknown_commit(self, repo_with_commits):
        assert repo_with_commits.diff.diff('0' * 40) is None

    def test_diffs_are_cached_per_requested_parent(self, repo_with_commits):
        _, second, third = repo_with_commits.history
        engine = repo_with_commits.diff

        engine.diff(third)
        engine.diff(third, second)
        assert len(repo_with_commits.diff_cache) == 2

    def test_cache_hit_skips_object_store(self, repo_with_commits, monkeypatch):
        second = repo_with_commits.history[1]
        diff = repo_with_commits.diff.diff(second)

        def fail(oid):
            raise AssertionError(f"object store read for {oid}")

        monkeypatch.setattr(repo_with_commits, 'read_object', fail)
        assert repo_with_commits.diff.diff(second) is diff

    def test_index_change_invalidates_cache(self, repo_with_commits):
        repo = repo_with_commits
        repo.diff.diff(repo.history[1])
        write_files(repo, {'file.txt': b"changed\n"})
        repo.staging.stage_file('file.txt')
        assert len(repo.diff_cache) == 0

    def test_diff_for_path(self, repo_with_commits):
        second = repo_with_commits.history[1]
        delta = repo_with_commits.diff.diff_for_path('new.txt', second)
        assert delta.is_new
        assert repo_with_commits.diff.diff_for_path('missing.txt', second) is None


class TestFileDiffs:

    def test_diff_maker(self, repo_with_commits):
        second = repo_with_commits.history[1]
        result = repo_with_commits.diff.diff_maker('file.txt', second)
        assert result.is_binary is False
        assert result.delta.hunks[0].lines == [" a", "-b", "+B", " c"]

    def test_diff_maker_binary(self, repo_with_head):
        repo = repo_with_head
        commit = make_commit(repo, {'image.bin': b"\x00\x01\x02 changed"})
        assert repo.diff.diff_maker('image.bin', commit) == PatchResult.binary()

    def test_diff_maker_unknown_commit(self, repo):
        assert repo.diff.diff_maker('a.txt', '0' * 40) is None

    def test_staged_diff(self, repo_with_head):
        repo = repo_with_head
        write_files(repo, {'a.txt': b"one\ntwo\nTHREE\nfour\nfive\nsix\nseven\neight\nnine\nten\n"})
        repo.staging.stage_file('a.txt')

        result = repo.diff.staged_diff('a.txt')
        assert result.is_binary is False
        hunk, = result.delta.hunks
        assert hunk.header == "@@ -1,6 +1,6 @@"
        assert "-three" in hunk.lines
        assert "+THREE" in hunk.lines

    def test_staged_diff_unchanged_file(self, repo_with_head):
        delta = repo_with_head.diff.staged_diff('README').delta
        assert delta.status is DeltaStatus.UNMODIFIED
        assert delta.hunks == ()

    def test_staged_diff_without_head(self, repo):
        write_files(repo, {'new.txt': b"fresh\n"})
        repo.staging.stage_file('new.txt')

        delta = repo.diff.staged_diff('new.txt').delta
        assert delta.is_new
        assert delta.hunks[0].header == "@@ -0,0 +1,1 @@"

    def test_unstaged_diff(self, repo_with_head):
        repo = repo_with_head
        write_files(repo, {'README': b"hello\nworld\n"})

        delta = repo.diff.unstaged_diff('README').delta
        assert delta.is_modified
        assert delta.hunks[0].lines == [" hello", "+world"]

    def test_unstaged_diff_deleted_file(self, repo_with_head):
        repo = repo_with_head
        write_files(repo, {'README': None})
        assert repo.diff.unstaged_diff('README').delta.is_deleted

    def test_unstaged_diff_unreadable_file(self, repo_with_head, monkeypatch):
        repo = repo_with_head
        write_files(repo, {'a.txt': b"edited\n"})

        def denied(path):
            raise PermissionError(13, "Permission denied", path)

        monkeypatch.setattr(repo, 'read_workspace_file', denied)
        assert repo.diff.unstaged_diff('a.txt') is None

    def test_unstaged_binary(self, repo_with_head):
        repo = repo_with_head
        write_files(repo, {'image.bin': b"\x00\xff\x00"})
        assert repo.diff.unstaged_diff('image.bin').is_binary

    def test_one_text_side_is_enough(self, repo):
        make_commit(repo, {'notes': b"plain words\n"})
        write_files(repo, {'notes': b"\x00\x00 now binary"})

        result = repo.diff.unstaged_diff('notes')
        assert result.is_binary is False
        assert result.delta.binary is True

    def test_context_lines_from_config(self, repo_with_head, monkeypatch):
        repo = repo_with_head
        monkeypatch.setenv('LITSTAGE_DIFF_CONTEXT', '0')
        write_files(repo, {'a.txt': b"one\ntwo\nthree\nfour\nFIVE\nsix\nseven\neight\nnine\nten\n"})

        hunk, = repo.diff.unstaged_diff('a.txt').delta.hunks
        assert hunk.lines == ["-five", "+FIVE"]

    def test_sniff_size_from_config(self, repo, monkeypatch):
        make_commit(repo, {'late_nul': b"x" * 64 + b"\x00one\n"})
        write_files(repo, {'late_nul': b"x" * 64 + b"\x00two\n"})
        monkeypatch.setenv('LITSTAGE_CORE_SNIFFSIZE', '32')

        assert repo.is_text_file('late_nul', FileContext.WORKSPACE) is True
        delta = repo.diff.unstaged_diff('late_nul').delta
        assert delta.binary is False
        assert len(delta.hunks) == 1
        assert repo.diff.diff_working_to_index()[0].hunks == delta.hunks


class TestTreeDiffs:

    def test_diff_index_to_head_clean(self, repo_with_head):
        assert repo_with_head.diff.diff_index_to_head() == []

    def test_diff_index_to_head(self, repo_with_head):
        repo = repo_with_head
        write_files(repo, {'README': b"changed\n", 'extra.txt': b"extra\n"})
        repo.staging.stage_file('README')
        repo.staging.stage_file('extra.txt')

        deltas = repo.diff.diff_index_to_head()
        assert [(d.path, d.status) for d in deltas] == [
            ('README', DeltaStatus.MODIFIED),
            ('extra.txt', DeltaStatus.ADDED),
        ]

    def test_diff_working_to_index_skips_untracked(self, repo_with_head):
        repo = repo_with_head
        write_files(repo, {'README': b"changed\n", 'untracked.txt': b"?\n", 'a.txt': None})

        deltas = repo.diff.diff_working_to_index()
        assert [(d.path, d.status) for d in deltas] == [
            ('README', DeltaStatus.MODIFIED),
            ('a.txt', DeltaStatus.DELETED),
        ]

    def test_diff_commits(self, repo_with_commits):
        first, _, third = repo_with_commits.history
        deltas = repo_with_commits.diff.diff_commits(first, third)
        assert [d.path for d in deltas] == ['file.txt']

    def test_format_diff(self, repo):
        engine = DiffEngine(repo)
        deltas = [engine.diff_blobs('f.txt', b"a\n", b"b\n"),
                  engine.diff_blobs('new.txt', None, b"x\n"),
                  engine.diff_blobs('img', b"\x00", b"\x01\x00")]

        output = engine.format_diff(deltas, color=False)
        assert "--- a/f.txt\n+++ b/f.txt\n@@ -1,1 +1,1 @@\n-a\n+b" in output
        assert "new file mode 100644\n--- /dev/null\n+++ b/new.txt" in output
        assert "Binary files differ" in output
