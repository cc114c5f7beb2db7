"""Hunk-level staging and unstaging."""

import logging

from litstage.core.errors import ObjectNotFoundError, PatchMismatchError, UnexpectedError
from litstage.core.objects import Blob
from litstage.operations.hunk import DiffHunk
from litstage.operations.status import DeltaStatus

logger = logging.getLogger(__name__)


class HunkPatcher:
    """
    Applies a single hunk to the index, forwards to stage it or reversed to
    unstage it.

    A hunk that starts at line 1 of a file that is wholly added or deleted is
    treated as covering the whole file, and the file is staged or unstaged
    as a unit instead of being patched.
    """

    def __init__(self, repo):
        self.repo = repo

    def apply_hunk(self, path: str, hunk: DiffHunk, stage: bool) -> None:
        """
        Apply a hunk to a file in the index and save the index.

        Args:
            path: Repository-relative file path
            hunk: Hunk from an unstaged (when staging) or staged diff
            stage: True to stage the hunk, False to unstage it

        Raises:
            PatchMismatchError: If the hunk does not apply to the index content
            UnexpectedError: If the index or a blob it names can't be read
        """
        index = self.repo.load_index()
        entry = index.get_entry(path)

        if entry is None:
            self._apply_to_new_file(path, hunk, stage)
            return

        if hunk.touches_file_start and self._whole_file_shortcut(path, stage):
            return

        try:
            blob = self.repo.read_object(entry.sha1)
        except ObjectNotFoundError as e:
            raise UnexpectedError(f"Index entry {path} names missing blob {entry.sha1}") from e
        if not isinstance(blob, Blob):
            raise UnexpectedError(f"Index entry {path} does not name a blob")

        with blob.data_view() as data:
            try:
                text = str(data, 'utf-8')
            except UnicodeDecodeError as e:
                raise PatchMismatchError(path, "content is not UTF-8 text") from e

        patched = hunk.applied(text, reversed=not stage)
        if patched is None:
            logger.debug("Hunk %s does not apply to %s (stage=%s)", hunk, path, stage)
            raise PatchMismatchError(path)

        with self.repo.index_transaction() as index:
            index.add_data(self.repo, path, patched.encode('utf-8'), mode=entry.mode)
        logger.debug("%s hunk %s of %s", 'Staged' if stage else 'Unstaged', hunk, path)

    def _whole_file_shortcut(self, path: str, stage: bool) -> bool:
        status = self.repo.status.status(path)

        if stage:
            if status.workspace is DeltaStatus.DELETED:
                logger.debug("Staging deletion of %s", path)
                self.repo.staging.stage_file(path)
                return True
        elif status.index in (DeltaStatus.ADDED, DeltaStatus.DELETED):
            # A hunk starting at line 1 of an added/deleted file covers all of it
            logger.debug("Unstaging all of %s", path)
            self.repo.staging.unstage_file(path)
            return True

        return False

    def _apply_to_new_file(self, path: str, hunk: DiffHunk, stage: bool) -> None:
        status = self.repo.status.status(path)

        if stage and status.workspace is DeltaStatus.UNTRACKED and hunk.new_start == 1:
            self.repo.staging.stage_file(path)
            return
        if not stage and status.index is DeltaStatus.DELETED and hunk.old_start == 1:
            self.repo.staging.unstage_file(path)
            return

        raise PatchMismatchError(path, "no index entry to patch")
