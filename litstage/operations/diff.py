"""Diff engine for comparing files, trees, the index and the workspace."""

import logging
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from litstage.core.objects import Blob, Commit
from litstage.operations.classify import FileContext
from litstage.operations.hunk import DiffHunk, make_hunks
from litstage.operations.status import DeltaStatus
from litstage.utils.content import DEFAULT_SNIFF_SIZE, looks_binary

logger = logging.getLogger(__name__)

DEFAULT_CONTEXT_LINES = 3


class DiffDelta:
    """One file's change: paths, status and hunks (none if binary or unmodified)."""

    def __init__(self, old_path: Optional[str], new_path: Optional[str], status: DeltaStatus,
                 hunks: Optional[List[DiffHunk]] = None, binary: bool = False):
        self.old_path = old_path
        self.new_path = new_path
        self.status = status
        self.hunks: Tuple[DiffHunk, ...] = tuple(hunks or ())
        self.binary = binary

    @property
    def path(self) -> Optional[str]:
        return self.new_path or self.old_path

    @property
    def is_new(self) -> bool:
        return self.status is DeltaStatus.ADDED

    @property
    def is_deleted(self) -> bool:
        return self.status is DeltaStatus.DELETED

    @property
    def is_modified(self) -> bool:
        return self.status is DeltaStatus.MODIFIED

    def __eq__(self, other) -> bool:
        if not isinstance(other, DiffDelta):
            return NotImplemented
        return (self.old_path, self.new_path, self.status, self.hunks, self.binary) == \
            (other.old_path, other.new_path, other.status, other.hunks, other.binary)

    def __hash__(self):
        return hash((self.old_path, self.new_path, self.status, self.hunks, self.binary))

    def __repr__(self) -> str:
        kind = 'binary' if self.binary else f'hunks={len(self.hunks)}'
        return f"DiffDelta({self.status.value} {self.path}, {kind})"


def make_delta(path: str, old_content: Optional[bytes], new_content: Optional[bytes],
               context: int = DEFAULT_CONTEXT_LINES,
               sniff_size: int = DEFAULT_SNIFF_SIZE) -> DiffDelta:
    """
    Build the delta between two versions of a file.

    Args:
        path: File path
        old_content: Old content (None if the file did not exist)
        new_content: New content (None if the file does not exist)
        context: Context lines around each hunk
        sniff_size: Leading bytes inspected when checking for binary content

    Returns:
        DiffDelta, flagged binary when either side is binary or not UTF-8
    """
    if old_content is None and new_content is None:
        status = DeltaStatus.UNMODIFIED
    elif old_content is None:
        status = DeltaStatus.ADDED
    elif new_content is None:
        status = DeltaStatus.DELETED
    elif old_content == new_content:
        status = DeltaStatus.UNMODIFIED
    else:
        status = DeltaStatus.MODIFIED

    old_path = path if old_content is not None else None
    new_path = path if new_content is not None else None
    if status is DeltaStatus.UNMODIFIED:
        return DiffDelta(path, path, status)

    old_content = old_content or b''
    new_content = new_content or b''
    if looks_binary(old_content, sniff_size) or looks_binary(new_content, sniff_size):
        return DiffDelta(old_path, new_path, status, binary=True)

    # Hunk text must encode back to the exact bytes it was built from
    try:
        old_text = old_content.decode('utf-8')
        new_text = new_content.decode('utf-8')
    except UnicodeDecodeError:
        logger.debug("%s is not UTF-8, diffing as binary", path)
        return DiffDelta(old_path, new_path, status, binary=True)

    hunks = make_hunks(old_text, new_text, context)
    return DiffDelta(old_path, new_path, status, hunks)


class Diff:
    """
    The completed comparison of a commit with one of its parents.

    Immutable once built; ``parent_sha`` is the parent actually compared
    against (None for an all-added diff).
    """

    def __init__(self, commit_sha: str, parent_sha: Optional[str], deltas: List[DiffDelta]):
        self.commit_sha = commit_sha
        self.parent_sha = parent_sha
        self.deltas: Tuple[DiffDelta, ...] = tuple(deltas)

    def delta_for_new_path(self, path: str) -> Optional[DiffDelta]:
        for delta in self.deltas:
            if delta.new_path == path:
                return delta
        return None

    def delta_for_path(self, path: str) -> Optional[DiffDelta]:
        """Delta whose new or, failing that, old path matches."""
        return self.delta_for_new_path(path) or next(
            (d for d in self.deltas if d.old_path == path), None)

    @property
    def paths(self) -> List[str]:
        return [delta.path for delta in self.deltas]

    def __iter__(self) -> Iterator[DiffDelta]:
        return iter(self.deltas)

    def __len__(self) -> int:
        return len(self.deltas)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Diff):
            return NotImplemented
        return (self.commit_sha, self.parent_sha, self.deltas) == \
            (other.commit_sha, other.parent_sha, other.deltas)

    def __repr__(self) -> str:
        parent = self.parent_sha[:7] if self.parent_sha else None
        return f"Diff({self.commit_sha[:7]} vs {parent}, deltas={len(self.deltas)})"


CacheKey = Tuple[str, str]


class DiffCache:
    """
    Commit diffs keyed by (commit sha, requested parent sha).

    Entries are never refreshed; callers invalidate the cache when history
    or the index changes.
    """

    def __init__(self):
        self._entries: Dict[CacheKey, Diff] = {}

    @staticmethod
    def key(commit_sha: str, parent_sha: Optional[str] = None) -> CacheKey:
        return (commit_sha, parent_sha or '')

    def get(self, key: CacheKey) -> Optional[Diff]:
        return self._entries.get(key)

    def insert(self, key: CacheKey, diff: Diff) -> Diff:
        """Store a diff unless one is already cached; returns the cached one."""
        return self._entries.setdefault(key, diff)

    def invalidate(self) -> None:
        if self._entries:
            logger.debug("Dropping %d cached diffs", len(self._entries))
        self._entries.clear()

    def __contains__(self, key: CacheKey) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class SourceKind(Enum):
    BLOB = 'blob'
    DATA = 'data'


class PatchSource:
    """One side of a file diff: a stored blob, or raw bytes."""

    def __init__(self, kind: SourceKind, blob: Optional[Blob] = None,
                 data: Optional[bytes] = None, exists: bool = True):
        self.kind = kind
        self.blob = blob
        self._data = data
        self.exists = exists

    @classmethod
    def from_blob(cls, blob: Optional[Blob]) -> 'PatchSource':
        """Source for a blob; a missing blob is empty, absent content."""
        if blob is None:
            return cls.empty()
        return cls(SourceKind.BLOB, blob=blob)

    @classmethod
    def from_data(cls, data: Optional[bytes]) -> 'PatchSource':
        if data is None:
            return cls.empty()
        return cls(SourceKind.DATA, data=data)

    @classmethod
    def empty(cls) -> 'PatchSource':
        return cls(SourceKind.DATA, data=b'', exists=False)

    def content(self) -> Optional[bytes]:
        """The bytes of this side, or None if the file is absent."""
        if not self.exists:
            return None
        if self.kind is SourceKind.BLOB:
            return self.blob.data
        return self._data


class PatchMaker:
    """Lazily computes the one-file delta between two sources."""

    def __init__(self, old: PatchSource, new: PatchSource, path: str,
                 context: int = DEFAULT_CONTEXT_LINES,
                 sniff_size: int = DEFAULT_SNIFF_SIZE):
        self.old = old
        self.new = new
        self.path = path
        self.context = context
        self.sniff_size = sniff_size
        self._delta: Optional[DiffDelta] = None

    def make_patch(self) -> DiffDelta:
        if self._delta is None:
            self._delta = make_delta(self.path, self.old.content(), self.new.content(),
                                     self.context, self.sniff_size)
        return self._delta

    @property
    def hunks(self) -> Tuple[DiffHunk, ...]:
        return self.make_patch().hunks

    def __repr__(self) -> str:
        return f"PatchMaker({self.path})"


class PatchKind(Enum):
    BINARY = 'binary'
    DIFF = 'diff'


class PatchResult:
    """Either ``binary`` (no hunk data) or ``diff`` carrying a PatchMaker."""

    def __init__(self, kind: PatchKind, maker: Optional[PatchMaker] = None):
        self.kind = kind
        self.maker = maker

    @classmethod
    def binary(cls) -> 'PatchResult':
        return cls(PatchKind.BINARY)

    @classmethod
    def diff(cls, maker: PatchMaker) -> 'PatchResult':
        return cls(PatchKind.DIFF, maker)

    @property
    def is_binary(self) -> bool:
        return self.kind is PatchKind.BINARY

    @property
    def delta(self) -> Optional[DiffDelta]:
        return self.maker.make_patch() if self.maker is not None else None

    def __eq__(self, other) -> bool:
        if not isinstance(other, PatchResult):
            return NotImplemented
        return self.kind is other.kind and self.delta == other.delta

    def __repr__(self) -> str:
        return 'PatchResult.binary()' if self.is_binary else f"PatchResult.diff({self.maker!r})"


class DiffEngine:
    """
    Engine for computing diffs between commits, the index and the workspace.

    Supports:
    - Commit-to-parent diffs, memoized in the repository's DiffCache
    - File-scoped diffs (commit, staged, unstaged) gated by text classification
    - Whole-tree comparisons and unified diff output for the command line
    """

    def __init__(self, repo):
        """
        Initialize diff engine.

        Args:
            repo: Repository instance
        """
        self.repo = repo

    @property
    def context_lines(self) -> int:
        return max(0, self.repo.config.get_int('diff', 'context', DEFAULT_CONTEXT_LINES))

    @property
    def sniff_size(self) -> int:
        return self.repo.classifier.sniff_size

    def _patch_maker(self, old: PatchSource, new: PatchSource, path: str) -> PatchMaker:
        return PatchMaker(old, new, path, self.context_lines, self.sniff_size)

    def _parent_commit(self, commit: Commit, parent_id: Optional[str]) -> Optional[Commit]:
        """First parent by default; an explicit id must be one of the parents."""
        if not parent_id:
            parent_sha = commit.first_parent
        elif parent_id in commit.parents:
            parent_sha = parent_id
        else:
            logger.debug("%s is not a parent of %s; diffing against nothing",
                         parent_id[:7], commit.hash[:7])
            parent_sha = None
        return self.repo.commit(parent_sha)

    def diff(self, commit_id: str, parent_id: Optional[str] = None) -> Optional[Diff]:
        """
        Diff a commit against its first parent or a specific parent.

        Args:
            commit_id: Commit hash
            parent_id: One of the commit's parents, or None for the first

        Returns:
            Diff, or None if the commit cannot be loaded
        """
        cache = self.repo.diff_cache
        key = cache.key(commit_id, parent_id)
        cached = cache.get(key)
        if cached is not None:
            logger.debug("Diff cache hit for %s", commit_id[:7])
            return cached

        commit = self.repo.commit(commit_id)
        if commit is None:
            return None

        parent = self._parent_commit(commit, parent_id)
        old_files = self._blob_hashes(self.repo.tree(parent))
        new_files = self._blob_hashes(self.repo.tree(commit))

        diff = Diff(commit_id, parent.hash if parent else None,
                    self.diff_trees(old_files, new_files))
        logger.debug("Computed diff for %s: %d deltas", commit_id[:7], len(diff))
        return cache.insert(key, diff)

    def diff_for_path(self, path: str, commit_id: str,
                      parent_id: Optional[str] = None) -> Optional[DiffDelta]:
        """The delta for one file from a commit's (cached) diff."""
        diff = self.diff(commit_id, parent_id)
        return diff.delta_for_new_path(path) if diff is not None else None

    def diff_maker(self, path: str, commit_id: str,
                   parent_id: Optional[str] = None) -> Optional[PatchResult]:
        """
        File diff between a commit and its parent.

        Returns:
            PatchResult, or None if the commit cannot be loaded
        """
        commit = self.repo.commit(commit_id)
        if commit is None:
            return None
        parent = self._parent_commit(commit, parent_id)

        classifier = self.repo.classifier
        if not (classifier.is_text(path, FileContext.at_commit(commit)) or
                (parent is not None and classifier.is_text(path, FileContext.at_commit(parent)))):
            return PatchResult.binary()

        old = PatchSource.from_blob(self.repo.blob_at(self.repo.tree(parent), path))
        new = PatchSource.from_blob(self.repo.blob_at(self.repo.tree(commit), path))
        return PatchResult.diff(self._patch_maker(old, new, path))

    def staged_diff(self, path: str) -> Optional[PatchResult]:
        """File diff between HEAD and the index."""
        head = self.repo.head_commit()
        classifier = self.repo.classifier
        if not (classifier.is_text(path, FileContext.INDEX) or
                (head is not None and classifier.is_text(path, FileContext.at_commit(head)))):
            return PatchResult.binary()

        old = PatchSource.from_blob(self.repo.blob_at(self.repo.tree(head), path))
        new = PatchSource.from_blob(self.repo.staged_blob(path))
        return PatchResult.diff(self._patch_maker(old, new, path))

    def unstaged_diff(self, path: str) -> Optional[PatchResult]:
        """
        File diff between the index and the workspace.

        Returns:
            PatchResult, or None if the workspace file exists but can't be read
        """
        classifier = self.repo.classifier
        if not (classifier.is_text(path, FileContext.WORKSPACE) or
                classifier.is_text(path, FileContext.INDEX)):
            return PatchResult.binary()

        data = None
        if self.repo.workspace_file_exists(path):
            try:
                data = self.repo.read_workspace_file(path)
            except OSError as e:
                logger.warning("Cannot read %s: %s", path, e)
                return None

        old = PatchSource.from_blob(self.repo.staged_blob(path))
        new = PatchSource.from_data(data)
        return PatchResult.diff(self._patch_maker(old, new, path))

    def diff_blobs(self, path: str, old_content: Optional[bytes],
                   new_content: Optional[bytes]) -> DiffDelta:
        """
        Compute diff between two blob contents.

        Args:
            path: File path
            old_content: Old file content (None for new files)
            new_content: New file content (None for deleted files)

        Returns:
            DiffDelta
        """
        return make_delta(path, old_content, new_content, self.context_lines,
                          self.sniff_size)

    def diff_trees(self, old_tree_files: Dict[str, str],
                   new_tree_files: Dict[str, str]) -> List[DiffDelta]:
        """
        Compute diff between two trees.

        Args:
            old_tree_files: Dict of {path: blob_hash} for old tree
            new_tree_files: Dict of {path: blob_hash} for new tree

        Returns:
            List of DiffDelta for changed paths, sorted by path
        """
        deltas = []

        for path in sorted(set(old_tree_files) | set(new_tree_files)):
            old_hash = old_tree_files.get(path)
            new_hash = new_tree_files.get(path)

            if old_hash == new_hash:
                continue

            deltas.append(self.diff_blobs(path, self._blob_data(old_hash),
                                          self._blob_data(new_hash)))

        return deltas

    def diff_commits(self, old_commit_hash: Optional[str], new_commit_hash: str) -> List[DiffDelta]:
        """
        Compute diff between two arbitrary commits.

        Args:
            old_commit_hash: Old commit hash (None for an empty tree)
            new_commit_hash: New commit hash

        Returns:
            List of DiffDelta
        """
        old_files = self._blob_hashes(self.repo.tree(self.repo.commit(old_commit_hash)))
        new_files = self._blob_hashes(self.repo.tree(self.repo.commit(new_commit_hash)))
        return self.diff_trees(old_files, new_files)

    def diff_index_to_head(self) -> List[DiffDelta]:
        """Staged changes for every path (HEAD vs index)."""
        head_files = self._blob_hashes(self.repo.tree(self.repo.head_commit()))
        index = self.repo.load_index()
        index_files = {entry.path: entry.sha1 for entry in index}
        return self.diff_trees(head_files, index_files)

    def diff_working_to_index(self) -> List[DiffDelta]:
        """Unstaged changes for every tracked path (index vs workspace)."""
        deltas = []
        for path, file_status in self.repo.status.changed_files().items():
            if file_status.workspace in (DeltaStatus.UNMODIFIED, DeltaStatus.UNTRACKED):
                continue

            index_blob = self.repo.staged_blob(path)
            new_content = None
            if self.repo.workspace_file_exists(path):
                try:
                    new_content = self.repo.read_workspace_file(path)
                except OSError as e:
                    logger.warning("Cannot read %s: %s", path, e)
                    continue

            deltas.append(self.diff_blobs(path, index_blob.data if index_blob else None,
                                          new_content))
        return deltas

    def _blob_hashes(self, tree) -> Dict[str, str]:
        return {path: sha for path, (sha, _) in self.repo.tree_files(tree).items()}

    def _blob_data(self, oid: Optional[str]) -> Optional[bytes]:
        if oid is None:
            return None
        obj = self.repo.read_object(oid)
        return obj.data if isinstance(obj, Blob) else None

    def format_diff(self, deltas: List[DiffDelta], color: bool = True) -> str:
        """
        Format deltas as unified diff output.

        Args:
            deltas: List of DiffDelta objects
            color: Whether to use color output

        Returns:
            Formatted diff string
        """
        from colorama import Fore, Style

        output = []

        for delta in deltas:
            path = delta.path
            output.append(f"diff --lit a/{path} b/{path}")
            if delta.is_new:
                output.append("new file mode 100644")
                output.append("--- /dev/null")
                output.append(f"+++ b/{path}")
            elif delta.is_deleted:
                output.append("deleted file mode 100644")
                output.append(f"--- a/{path}")
                output.append("+++ /dev/null")
            else:
                output.append(f"--- a/{path}")
                output.append(f"+++ b/{path}")

            if delta.binary:
                output.append("Binary files differ")
                continue

            for hunk in delta.hunks:
                if color:
                    output.append(f"{Fore.CYAN}{hunk}{Style.RESET_ALL}")
                else:
                    output.append(str(hunk))

                for line in hunk.lines:
                    if color and line.startswith('+'):
                        output.append(f"{Fore.GREEN}{line}{Style.RESET_ALL}")
                    elif color and line.startswith('-'):
                        output.append(f"{Fore.RED}{line}{Style.RESET_ALL}")
                    else:
                        output.append(line)

        return '\n'.join(output)
