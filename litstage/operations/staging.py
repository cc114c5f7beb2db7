"""Whole-file stage and unstage operations."""

import logging
from typing import List

from litstage.core.index import Index, DEFAULT_MODE
from litstage.operations.status import DeltaStatus

logger = logging.getLogger(__name__)


class StagingManager:
    """
    Moves whole files between the workspace, the index and HEAD.

    Every public method runs in one index transaction: either all of its
    changes are saved, or none are.
    """

    def __init__(self, repo):
        self.repo = repo

    def stage_file(self, path: str) -> None:
        """
        Stage the workspace version of a file.

        A file missing from the workspace has its deletion staged.
        """
        with self.repo.index_transaction() as index:
            self._stage(index, path)

    def unstage_file(self, path: str) -> None:
        """
        Reset a file's index entry to HEAD.

        A file that is not in HEAD is removed from the index.
        """
        with self.repo.index_transaction() as index:
            self._unstage(index, path)

    def stage_all(self) -> List[str]:
        """
        Stage every workspace change, including untracked files.

        Returns:
            Paths that were staged
        """
        changed = [path for path, status in self.repo.status.changed_files().items()
                   if status.workspace is not DeltaStatus.UNMODIFIED]
        with self.repo.index_transaction() as index:
            for path in changed:
                self._stage(index, path)
        return changed

    def unstage_all(self) -> List[str]:
        """
        Reset every staged change back to HEAD.

        Returns:
            Paths that were unstaged
        """
        changed = [path for path, status in self.repo.status.changed_files().items()
                   if status.index is not DeltaStatus.UNMODIFIED]
        with self.repo.index_transaction() as index:
            for path in changed:
                self._unstage(index, path)
        return changed

    def _stage(self, index: Index, path: str) -> None:
        if self.repo.workspace_file_exists(path):
            index.add_file(self.repo, path)
            logger.debug("Staged %s", path)
        elif index.remove_entry(path):
            logger.debug("Staged deletion of %s", path)

    def _unstage(self, index: Index, path: str) -> None:
        head_tree = self.repo.tree(self.repo.head_commit())
        entry = self.repo.tree_entry(head_tree, path)

        if entry is not None and entry.is_blob:
            blob = self.repo.read_object(entry.hash)
            index.add_entry(path=path, sha1=entry.hash, mode=int(entry.mode, 8) or DEFAULT_MODE,
                            size=len(blob.data))
            logger.debug("Reset %s to HEAD", path)
        elif index.remove_entry(path):
            logger.debug("Removed %s from the index", path)
