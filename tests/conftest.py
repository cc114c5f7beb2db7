"""Shared pytest fixtures for litstage tests."""

import logging
import pytest
import tempfile
import shutil
from pathlib import Path
from collections import defaultdict
from litstage.core.repository import Repository
from litstage.core.objects import Blob, Tree, Commit, EntryKind
from litstage.core.index import Index

AUTHOR = "Test User <test@example.com>"


def build_tree_from_index(repo, index):
    """
    Build tree object from index entries.
    Helper function for tests - creates tree structure from index.
    """
    trees = defaultdict(Tree)

    for path in sorted(index.entries.keys()):
        entry = index.entries[path]
        parts = Path(path).parts

        for i in range(len(parts)):
            dir_path = str(Path(*parts[:i])) if i > 0 else ''
            trees[dir_path]

        dir_path = str(Path(*parts[:-1])) if len(parts) > 1 else ''
        filename = parts[-1]

        mode = '100755' if entry.mode & 0o111 else '100644'
        trees[dir_path].add_entry(mode, EntryKind.BLOB, entry.sha1, filename)

    for dir_path in sorted(trees.keys(), key=lambda x: x.count('/'), reverse=True):
        if dir_path:
            tree = trees[dir_path]
            tree_hash = repo.write_object(tree)

            parent_parts = Path(dir_path).parts
            parent_path = str(Path(*parent_parts[:-1])) if len(parent_parts) > 1 else ''
            dir_name = parent_parts[-1]

            trees[parent_path].add_entry('040000', EntryKind.TREE, tree_hash, dir_name)

    root_tree = trees['']
    tree_hash = repo.write_object(root_tree)
    return tree_hash


def write_files(repo, files):
    """Write {path: bytes} into the working tree; None deletes the file."""
    for path, content in files.items():
        file_path = repo.work_tree / path
        if content is None:
            if file_path.exists():
                file_path.unlink()
            continue
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_bytes(content)


def make_commit(repo, files=None, message="Test commit", parents=None, timestamp=None):
    """
    Helper function to create a commit.

    Writes and stages ``files`` (None contents stage a deletion), builds a
    tree from the index and commits it on top of HEAD.

    Args:
        repo: Repository instance
        files: Optional dict of {path: bytes or None}
        message: Commit message
        parents: Parent hashes (defaults to HEAD, if any)
        timestamp: Commit time

    Returns:
        str: Commit hash
    """
    index = repo.load_index()
    for path, content in (files or {}).items():
        write_files(repo, {path: content})
        if content is None:
            index.remove_entry(path)
        else:
            index.add_file(repo, path)
    index.write(repo.index_file)

    tree_hash = build_tree_from_index(repo, index)

    if parents is None:
        head_hash = repo.refs.resolve_head()
        parents = [head_hash] if head_hash else []

    commit = Commit.create(
        tree_hash=tree_hash,
        parent_hashes=parents,
        author=AUTHOR,
        committer=AUTHOR,
        message=message,
        timestamp=timestamp,
    )

    commit_hash = repo.write_object(commit)
    repo.refs.update_head(commit_hash)
    repo.invalidate_diff_cache()
    return commit_hash


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers the CLI attaches so they don't outlive a test's streams."""
    yield
    logger = logging.getLogger('litstage')
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keep user-level config and environment out of the tests."""
    from litstage.core.config import Config
    monkeypatch.setattr(Config, 'GLOBAL_CONFIG_PATH', tmp_path / 'no-global-config')
    for key in ('LITSTAGE_DIFF_CONTEXT', 'LITSTAGE_CORE_SNIFFSIZE', 'LITSTAGE_CORE_LOGLEVEL'):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    tmpdir = tempfile.mkdtemp()
    yield Path(tmpdir)
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def repo(temp_dir):
    """Create an initialized repository."""
    repo = Repository(str(temp_dir))
    repo.init()
    return repo


@pytest.fixture
def sample_blob():
    """Create a sample blob object."""
    return Blob(b"Hello, World!\n")


@pytest.fixture
def repo_with_head(repo):
    """Repository whose HEAD commit holds a few text files and one binary."""
    make_commit(repo, {
        'README': b"hello\n",
        'a.txt': b"one\ntwo\nthree\nfour\nfive\nsix\nseven\neight\nnine\nten\n",
        'docs/guide.md': b"# Guide\n\nIntro\n",
        'image.bin': b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR",
    }, message="Initial commit", timestamp=1700000000)
    return repo


@pytest.fixture
def repo_with_commits(repo):
    """Repository with a linear history of three commits."""
    first = make_commit(repo, {'file.txt': b"a\nb\nc\n"}, message="First", timestamp=1700000000)
    second = make_commit(repo, {'file.txt': b"a\nB\nc\n", 'new.txt': b"new\n"},
                         message="Second", timestamp=1700000100)
    third = make_commit(repo, {'file.txt': b"a\nB\nc\nd\n", 'new.txt': None},
                        message="Third", timestamp=1700000200)
    repo.history = [first, second, third]
    return repo
