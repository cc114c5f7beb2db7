"""File status resolution against HEAD, the index and the workspace."""

import logging
from enum import Enum
from typing import Dict, NamedTuple, Optional

from litstage.core.hash import hash_blob
from litstage.core.index import Index

logger = logging.getLogger(__name__)


class DeltaStatus(Enum):
    """How a file differs between two snapshots."""
    UNMODIFIED = 'unmodified'
    ADDED = 'added'
    DELETED = 'deleted'
    MODIFIED = 'modified'
    RENAMED = 'renamed'
    COPIED = 'copied'
    UNTRACKED = 'untracked'
    CONFLICTED = 'conflicted'
    MIXED = 'mixed'

    def for_display(self) -> 'DeltaStatus':
        """File lists show an unmodified side of a changed file as mixed."""
        return DeltaStatus.MIXED if self is DeltaStatus.UNMODIFIED else self

    @property
    def code(self) -> str:
        """Single-letter code used in short status output."""
        return _STATUS_CODES[self]


_STATUS_CODES = {
    DeltaStatus.UNMODIFIED: ' ',
    DeltaStatus.ADDED: 'A',
    DeltaStatus.DELETED: 'D',
    DeltaStatus.MODIFIED: 'M',
    DeltaStatus.RENAMED: 'R',
    DeltaStatus.COPIED: 'C',
    DeltaStatus.UNTRACKED: '?',
    DeltaStatus.CONFLICTED: 'U',
    DeltaStatus.MIXED: '~',
}


class FileStatus(NamedTuple):
    """Combined status of one path: HEAD vs index, and index vs workspace."""
    index: DeltaStatus
    workspace: DeltaStatus

    @property
    def is_clean(self) -> bool:
        return (self.index is DeltaStatus.UNMODIFIED and
                self.workspace is DeltaStatus.UNMODIFIED)


def compare(old_hash: Optional[str], new_hash: Optional[str]) -> DeltaStatus:
    """Classify a change from the object ids on each side (None = absent)."""
    if old_hash is None and new_hash is None:
        return DeltaStatus.UNMODIFIED
    if old_hash is None:
        return DeltaStatus.ADDED
    if new_hash is None:
        return DeltaStatus.DELETED
    if old_hash != new_hash:
        return DeltaStatus.MODIFIED
    return DeltaStatus.UNMODIFIED


class StatusResolver:
    """
    Computes file statuses from the current repository state.

    Results are never cached: the index and workspace change too often.
    """

    def __init__(self, repo):
        self.repo = repo

    def head_files(self) -> Dict[str, str]:
        """{path: blob_hash} for the HEAD tree (empty when HEAD is unborn)."""
        tree = self.repo.tree(self.repo.head_commit())
        return {path: sha for path, (sha, _) in self.repo.tree_files(tree).items()}

    def head_hash(self, path: str) -> Optional[str]:
        entry = self.repo.tree_entry(self.repo.tree(self.repo.head_commit()), path)
        return entry.hash if entry is not None and entry.is_blob else None

    def workspace_hash(self, path: str) -> Optional[str]:
        """Blob id of the workspace file, or None if it is missing or unreadable."""
        if not self.repo.workspace_file_exists(path):
            return None
        try:
            return hash_blob(self.repo.read_workspace_file(path))
        except OSError as e:
            logger.warning("Cannot read %s: %s", path, e)
            return None

    def status(self, path: str, index: Optional[Index] = None) -> FileStatus:
        """
        Return (index status, workspace status) for a path.

        Args:
            path: Repository-relative path
            index: Already loaded index, to avoid re-reading it

        Returns:
            FileStatus
        """
        if index is None:
            index = self.repo.load_index()
        entry = index.get_entry(path)
        index_hash = entry.sha1 if entry is not None else None

        index_status = compare(self.head_hash(path), index_hash)

        exists = self.repo.workspace_file_exists(path)
        if entry is None:
            workspace_status = DeltaStatus.UNTRACKED if exists else DeltaStatus.UNMODIFIED
        elif not exists:
            workspace_status = DeltaStatus.DELETED
        else:
            workspace_status = compare(index_hash, self.workspace_hash(path))
            if workspace_status is DeltaStatus.DELETED:
                # Exists but unreadable; report it as changed
                workspace_status = DeltaStatus.MODIFIED

        return FileStatus(index_status, workspace_status)

    def changed_files(self) -> Dict[str, FileStatus]:
        """
        Status of every path that differs somewhere.

        Returns:
            Dict of {path: FileStatus}, sorted by path
        """
        index = self.repo.load_index()
        paths = set(self.head_files()) | set(index.entries) | set(self.repo.workspace_files())

        result = {}
        for path in sorted(paths):
            file_status = self.status(path, index)
            if not file_status.is_clean:
                result[path] = file_status
        return result

