"""Reference management for lit repositories."""

import logging
from typing import Optional
from litstage.core.errors import ObjectNotFoundError
from litstage.core.objects import Commit

logger = logging.getLogger(__name__)

HEX_DIGITS = frozenset('0123456789abcdef')


class RefManager:
    """
    Resolves references (HEAD, branches, tags, object ids) to commit hashes.

    Handles:
    - Symbolic references (HEAD pointing to branch)
    - Direct references (detached HEAD)
    - Branch references (refs/heads/*)
    - Tag references (refs/tags/*)
    - Full and abbreviated commit hashes
    """

    def __init__(self, repo):
        self.repo = repo
        self.lit_dir = repo.lit_dir
        self.refs_dir = self.lit_dir / 'refs'
        self.heads_dir = self.refs_dir / 'heads'
        self.tags_dir = self.refs_dir / 'tags'
        self.head_file = self.lit_dir / 'HEAD'

    def read_ref(self, ref_name: str) -> Optional[str]:
        """
        Read a reference and return its commit hash.

        Args:
            ref_name: Reference name (e.g., 'refs/heads/main', 'HEAD', 'main')

        Returns:
            Commit hash or None if reference doesn't exist
        """
        if ref_name == 'HEAD':
            return self.resolve_head()

        for ref_path in (self.lit_dir / ref_name,
                         self.heads_dir / ref_name,
                         self.tags_dir / ref_name):
            if ref_path.is_file():
                content = ref_path.read_text().strip()
                if content.startswith('ref: '):
                    return self.read_ref(content[5:])
                return content or None

        return None

    def write_ref(self, ref_name: str, commit_hash: str) -> None:
        """
        Point a reference at a commit.

        Raises:
            ValueError: If the hash does not name a commit
        """
        try:
            obj = self.repo.read_object(commit_hash)
        except ObjectNotFoundError:
            obj = None
        if not isinstance(obj, Commit):
            raise ValueError(f"Not a commit: {commit_hash}")

        ref_path = self.lit_dir / ref_name
        ref_path.parent.mkdir(parents=True, exist_ok=True)
        ref_path.write_text(commit_hash + '\n')

    def resolve_head(self) -> Optional[str]:
        """
        Resolve HEAD to a commit hash.

        Returns:
            Commit hash or None if HEAD is unborn or missing
        """
        if not self.head_file.exists():
            return None

        content = self.head_file.read_text().strip()

        if content.startswith('ref: '):
            return self.read_ref(content[5:])

        # Detached HEAD
        return content or None

    def get_current_branch(self) -> Optional[str]:
        """
        Get the current branch name.

        Returns:
            Branch name or None if in detached HEAD state
        """
        if not self.head_file.exists():
            return None

        content = self.head_file.read_text().strip()
        if content.startswith('ref: refs/heads/'):
            return content[16:]
        return None

    def update_head(self, commit_hash: str) -> None:
        """Move the current branch, or a detached HEAD, to a commit."""
        branch = self.get_current_branch()
        if branch:
            self.write_ref(f'refs/heads/{branch}', commit_hash)
        else:
            self.head_file.write_text(commit_hash + '\n')

    def find_by_prefix(self, prefix: str) -> Optional[str]:
        """Expand an abbreviated object id, if it is unambiguous."""
        prefix = prefix.lower()
        bucket = self.repo.objects_dir / prefix[:2]
        if len(prefix) < 4 or not bucket.is_dir():
            return None

        matches = [prefix[:2] + p.name for p in bucket.iterdir()
                   if p.name.startswith(prefix[2:])]
        if len(matches) != 1:
            if matches:
                logger.debug("Ambiguous object prefix %s (%d matches)", prefix, len(matches))
            return None
        return matches[0]

    def resolve_reference(self, ref: str) -> Optional[str]:
        """
        Resolve any reference (branch, tag, HEAD, hash) to a commit hash.

        Args:
            ref: Reference string (e.g., 'HEAD', 'main', 'v1.0', commit hash)

        Returns:
            Commit hash or None if reference can't be resolved
        """
        if len(ref) >= 4 and set(ref.lower()) <= HEX_DIGITS:
            full_hash = ref.lower() if len(ref) == 40 else self.find_by_prefix(ref)
            if full_hash and isinstance(self._try_read(full_hash), Commit):
                return full_hash

        return self.read_ref(ref)

    def _try_read(self, oid: str):
        try:
            return self.repo.read_object(oid)
        except ObjectNotFoundError:
            return None
