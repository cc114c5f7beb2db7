"""Line-by-line attribution of a file to the commits that introduced it."""

import logging
from difflib import SequenceMatcher
from typing import List, Optional

from litstage.core.objects import Commit
from litstage.utils.content import looks_binary, split_lines

logger = logging.getLogger(__name__)

NULL_OID = '0' * 40


class BlameHunk:
    """A run of consecutive lines last changed by the same commit."""

    def __init__(self, commit_sha: str, start_line: int, line_count: int,
                 author: str = '', timestamp: int = 0, original_start: int = 0):
        self.commit_sha = commit_sha
        self.start_line = start_line
        self.line_count = line_count
        self.author = author
        self.timestamp = timestamp
        self.original_start = original_start

    @property
    def is_uncommitted(self) -> bool:
        return self.commit_sha == NULL_OID

    def __eq__(self, other) -> bool:
        if not isinstance(other, BlameHunk):
            return NotImplemented
        return (self.commit_sha, self.start_line, self.line_count) == \
            (other.commit_sha, other.start_line, other.line_count)

    def __repr__(self) -> str:
        return f"BlameHunk({self.commit_sha[:7]} lines {self.start_line}+{self.line_count})"


class Blame:
    """Blame result: the blamed lines and their hunks."""

    def __init__(self, path: str, lines: List[str], hunks: List[BlameHunk]):
        self.path = path
        self.lines = lines
        self.hunks = hunks

    def hunk_for_line(self, line_number: int) -> Optional[BlameHunk]:
        """Hunk covering a 1-based line number."""
        for hunk in self.hunks:
            if hunk.start_line <= line_number < hunk.start_line + hunk.line_count:
                return hunk
        return None

    def __len__(self) -> int:
        return len(self.lines)


class _Origin:
    """Where one line of the blamed content is currently attributed."""
    __slots__ = ('commit', 'line')

    def __init__(self, commit: Optional[Commit], line: int):
        self.commit = commit
        self.line = line


class BlameEngine:
    """
    Attributes lines by walking first-parent history.

    Each line starts out attributed to the newest revision; whenever the
    line also exists (unchanged) in the parent, the attribution moves to
    the parent. The walk stops at ``to_revision`` or at the root commit.
    """

    def __init__(self, repo):
        self.repo = repo

    def blame(self, path: str, from_revision: Optional[str] = None,
              to_revision: Optional[str] = None) -> Optional[Blame]:
        """
        Blame a file as it is in ``from_revision`` (default HEAD).

        Args:
            path: Repository-relative file path
            from_revision: Newest revision to blame from
            to_revision: Oldest revision to consider; lines older than it
                are attributed to it

        Returns:
            Blame, or None if the revision or file can't be found
        """
        start = self.repo.commit(self.repo.refs.resolve_reference(from_revision or 'HEAD'))
        if start is None:
            return None
        data = self.repo.contents_of_file(path, start)
        if data is None:
            return None
        return self._blame(path, data, start, to_revision, attributed_to=start)

    def blame_data(self, path: str, data: Optional[bytes],
                   to_revision: Optional[str] = None) -> Optional[Blame]:
        """
        Blame arbitrary content, such as the workspace file, against HEAD.

        Lines not found in history are attributed to the null commit id.
        """
        head = self.repo.head_commit()
        return self._blame(path, data or b'', head, to_revision, attributed_to=None)

    def _blame(self, path: str, data: bytes, newest: Optional[Commit],
               to_revision: Optional[str], attributed_to: Optional[Commit]) -> Optional[Blame]:
        if looks_binary(data):
            logger.debug("Not blaming binary file %s", path)
            return None

        stop_sha = self.repo.refs.resolve_reference(to_revision) if to_revision else None
        lines = split_lines(data.decode('utf-8', errors='replace'))
        origins = [_Origin(attributed_to, i) for i in range(len(lines))]

        commit, commit_lines = attributed_to, lines
        if attributed_to is None and newest is not None:
            # Uncommitted content: lines that HEAD already has belong to HEAD
            head_lines = self._lines_at(newest, path)
            self._move_blame(origins, None, lines, newest, head_lines)
            commit, commit_lines = newest, head_lines

        while commit is not None and commit.hash != stop_sha:
            parent = self.repo.commit(commit.first_parent)
            if parent is None:
                break
            parent_lines = self._lines_at(parent, path)
            if not parent_lines:
                break
            self._move_blame(origins, commit, commit_lines, parent, parent_lines)
            commit, commit_lines = parent, parent_lines

        return Blame(path, lines, self._group(origins))

    def _lines_at(self, commit: Commit, path: str) -> List[str]:
        data = self.repo.contents_of_file(path, commit)
        if data is None:
            return []
        return split_lines(data.decode('utf-8', errors='replace'))

    def _move_blame(self, origins: List[_Origin], commit: Optional[Commit], commit_lines: List[str],
                    parent: Commit, parent_lines: List[str]) -> None:
        """Move lines attributed to ``commit`` that are unchanged in ``parent`` to it."""
        mapping = {}
        matcher = SequenceMatcher(None, commit_lines, parent_lines, autojunk=False)
        for i, j, size in matcher.get_matching_blocks():
            for k in range(size):
                mapping[i + k] = j + k

        for origin in origins:
            if origin.commit is commit and origin.line in mapping:
                origin.commit = parent
                origin.line = mapping[origin.line]

    def _group(self, origins: List[_Origin]) -> List[BlameHunk]:
        hunks: List[BlameHunk] = []
        for number, origin in enumerate(origins, start=1):
            sha = origin.commit.hash if origin.commit is not None else NULL_OID
            last = hunks[-1] if hunks else None
            if last is not None and last.commit_sha == sha and \
                    last.original_start + last.line_count == origin.line + 1:
                last.line_count += 1
                continue
            author = origin.commit.author if origin.commit is not None else ''
            timestamp = origin.commit.author_time if origin.commit is not None else 0
            hunks.append(BlameHunk(sha, number, 1, author, timestamp, origin.line + 1))
        return hunks
